from __future__ import annotations

import logging
import random
import threading
from typing import Any, Callable, Dict, Optional

import serial  # type: ignore

from .config_loader import load_config
from .errors import SerialOpenError, SerialRuntimeError
from .services.record_parser import (
    LineFramer,
    RecordAssembler,
    parse_record,
    random_humidity,
    random_temperature,
)
from .services.snapshot import SensorSnapshot

logger = logging.getLogger("vitals.serial")


class SerialTransport:
    """Thin wrapper around pyserial for dependency injection in tests."""

    def __init__(self, port: str, baudrate: int, timeout: float):
        self._ser = serial.Serial(port=port, baudrate=baudrate, timeout=timeout)

    @property
    def is_open(self) -> bool:
        return bool(self._ser.is_open)

    def read(self) -> bytes:
        # block up to `timeout` for one byte, then drain whatever else arrived
        return self._ser.read(self._ser.in_waiting or 1)

    def close(self) -> None:
        self._ser.close()


class xVitalsSerialService:
    """Line-oriented vitals reader.

    - The board prints ``key:value,key:value`` lines (``heart``, ``spo2``,
      ``temp``, ``humidity``, ``bodytemp``).
    - A background thread reads bytes, frames lines and merges them into a
      shared :class:`SensorSnapshot`.
    - Serial errors after startup are logged; the link is then reported as
      disconnected. There is no reconnect.
    """

    def __init__(
        self,
        config_overrides: Optional[Dict[str, Any]] = None,
        transport_factory: Optional[Callable[..., Any]] = None,
        snapshot: Optional[SensorSnapshot] = None,
        rng: Optional[random.Random] = None,
    ):
        self.cfg = load_config(base_dir=None, overrides=config_overrides)
        self.transport_factory = transport_factory or (
            lambda port, baudrate, timeout: SerialTransport(port, baudrate, timeout)
        )
        self.snapshot = snapshot or SensorSnapshot()
        max_chars = int(self.cfg.get("max_buffer_chars", 0) or 0)
        self.framer = LineFramer(
            delimiter=str(self.cfg.get("delimiter", "\r\n")),
            encoding=str(self.cfg.get("encoding", "utf-8")),
            max_pending_bytes=max_chars,
        )
        self.assembler = RecordAssembler(str(self.cfg.get("strategy", "accumulate")), max_chars)
        self._rng = rng or random.Random()
        self._ser: Optional[Any] = None
        self._rx_thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    # -------- lifecycle --------
    def start(self) -> None:
        if self._rx_thread and self._rx_thread.is_alive():
            return
        self._connect()
        self._stop.clear()
        self._rx_thread = threading.Thread(target=self._reader_loop, name="vitals-rx", daemon=True)
        self._rx_thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._rx_thread:
            self._rx_thread.join(timeout=1.0)
            self._rx_thread = None
        self._disconnect()

    # -------- public api --------
    def is_connected(self) -> bool:
        ser = self._ser
        return ser is not None and bool(ser.is_open)

    def status(self) -> str:
        return "connected" if self.is_connected() else "disconnected"

    def payload(self) -> Dict[str, Any]:
        return {**self.snapshot.as_dict(), "status": self.status()}

    def ingest_bytes(self, data: bytes) -> None:
        for line in self.framer.feed(data):
            self.ingest_line(line)

    def ingest_line(self, line: str) -> Optional[Dict[str, Any]]:
        """Run one line through assembler, parser and merge.

        Returns the updated snapshot, or None when nothing was merged.
        """
        logger.debug("Raw data: %r", line)
        record = self.assembler.push(line)
        if record is None:
            return None

        result = parse_record(record)
        if not result.ok:
            logger.error("Parsing error: %s", result.error)
            self.assembler.clear()
            return None

        fillers = None
        if self.assembler.accumulating:
            fillers = {
                "temp": lambda: random_temperature(self._rng),
                "humidity": lambda: random_humidity(self._rng),
            }
        dropped = self.snapshot.merge(result.pairs, nan_fillers=fillers)
        for key in dropped:
            logger.warning('Unknown key received: "%s"', key)
        if len(dropped) == len(result.pairs):
            return None

        current = self.snapshot.as_dict()
        logger.debug("Updated sensor data: %s", current)
        return current

    # -------- internals --------
    def _connect(self) -> None:
        port = self.cfg["port"]
        baud = int(self.cfg["baudrate"])
        try:
            self._ser = self.transport_factory(port, baud, float(self.cfg["timeout"]))
        except Exception as exc:
            raise SerialOpenError(f"Failed to open serial port {port} @ {baud}: {exc}") from exc
        logger.info("Serial port %s open @ %d baud (strategy=%s)", port, baud, self.assembler.strategy)

    def _disconnect(self) -> None:
        ser, self._ser = self._ser, None
        if ser is not None and ser.is_open:
            ser.close()
            logger.info("Serial port closed")

    def _reader_loop(self) -> None:
        while not self._stop.is_set():
            ser = self._ser
            if ser is None:
                break
            try:
                data = ser.read()
            except (serial.SerialException, OSError) as exc:
                self._on_runtime_error(SerialRuntimeError(f"serial read failed: {exc}"))
                break
            if not data:
                continue
            try:
                self.ingest_bytes(data)
            except Exception:
                logger.exception("Parsing error, record discarded")
                self.assembler.clear()

    def _on_runtime_error(self, err: SerialRuntimeError) -> None:
        logger.error("Serial port error: %s", err)
        ser, self._ser = self._ser, None
        if ser is None:
            return
        try:
            ser.close()
        except (serial.SerialException, OSError) as exc:
            logger.debug("close after error failed: %s", exc)
