"""VitalBridge: serial vitals telemetry exposed over HTTP."""

__version__ = "0.1.0"
