from __future__ import annotations


class BridgeError(RuntimeError):
    """Base class for bridge failures."""


class SerialOpenError(BridgeError):
    """Serial port could not be opened at startup. Fatal."""


class SerialRuntimeError(BridgeError):
    """Serial link failed after it was opened. Logged, link considered down."""


class RecordParseError(BridgeError):
    """A record could not be turned into key/value pairs. The record is dropped."""
