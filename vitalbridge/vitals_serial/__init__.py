"""vitals_serial: serial vitals reader and the snapshot API.

- xVitalsSerialService: serial link, line framing, snapshot updates
- get_router(svc): GET /api/data, GET /api/healthz
"""
from .errors import BridgeError, RecordParseError, SerialOpenError, SerialRuntimeError  # noqa: F401
from .xVitalsSerialService import SerialTransport, xVitalsSerialService  # noqa: F401
