from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..errors import RecordParseError

logger = logging.getLogger("vitals.parser")

STRATEGIES = ("accumulate", "line")

# Keys the board sends, in snapshot order
RECOGNIZED_FIELDS = ("temp", "humidity", "heart", "spo2", "bodytemp")
# A record is complete once all of these were seen (accumulate strategy)
REQUIRED_MARKERS = frozenset(("heart", "spo2", "temp", "humidity", "bodytemp"))

NAN = "nan"


@dataclass
class ParseResult:
    pairs: Dict[str, str] = field(default_factory=dict)
    error: Optional[RecordParseError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def split_pairs(text: str) -> Dict[str, str]:
    """Split ``k:v,k:v`` into a dict with trimmed, lowercased keys.

    Tokens without a key or a value are skipped. Later keys win.
    """
    pairs: Dict[str, str] = {}
    for token in text.strip().split(","):
        key, sep, value = token.partition(":")
        if not sep:
            continue
        key = key.strip().lower()
        value = value.strip()
        if key and value:
            pairs[key] = value
    return pairs


def parse_record(text: object) -> ParseResult:
    if not isinstance(text, str):
        return ParseResult(error=RecordParseError(f"record is not text: {type(text).__name__}"))
    pairs = split_pairs(text)
    if not pairs:
        return ParseResult(error=RecordParseError(f"no key:value pairs in {text!r}"))
    return ParseResult(pairs=pairs)


def random_temperature(rng: Optional[random.Random] = None) -> str:
    r = rng or random
    return f"{r.uniform(30.0, 33.0):.2f}"


def random_humidity(rng: Optional[random.Random] = None) -> str:
    r = rng or random
    return str(math.floor(round(r.uniform(40.0, 42.0), 2)))


class LineFramer:
    """Collects raw bytes and hands back complete lines.

    A trailing partial line is kept until its delimiter shows up. If it
    grows past ``max_pending_bytes`` (0 = unbounded) it is dropped; that is
    what a device with a different line ending looks like.
    """

    def __init__(self, delimiter: str = "\r\n", encoding: str = "utf-8", max_pending_bytes: int = 4096) -> None:
        if not delimiter:
            raise ValueError("delimiter must not be empty")
        self.delimiter = delimiter.encode(encoding)
        self.encoding = encoding
        self.max_pending_bytes = max(0, int(max_pending_bytes or 0))
        self._pending = b""

    @property
    def pending(self) -> bytes:
        return self._pending

    def feed(self, data: bytes) -> List[str]:
        if not data:
            return []
        # only the new bytes (plus a delimiter-sized overlap) can hold a delimiter
        overlap = len(self.delimiter) - 1
        tail_start = max(0, len(self._pending) - overlap)
        self._pending += data
        if self.delimiter not in self._pending[tail_start:]:
            self._check_overflow()
            return []
        *complete, self._pending = self._pending.split(self.delimiter)
        self._check_overflow()
        return [chunk.decode(self.encoding, errors="replace") for chunk in complete]

    def _check_overflow(self) -> None:
        if self.max_pending_bytes and len(self._pending) > self.max_pending_bytes:
            logger.warning(
                "Dropping %d bytes without a %r line ending (wrong delimiter?)",
                len(self._pending),
                self.delimiter,
            )
            self._pending = b""


class RecordAssembler:
    """Turns lines into records according to the configured strategy.

    - ``line``: every non-empty line is a record.
    - ``accumulate``: lines are buffered until every required marker was
      parsed out of the buffer, then the whole buffer is one record.
    """

    def __init__(self, strategy: str = "accumulate", max_buffer_chars: int = 4096) -> None:
        strategy = str(strategy).strip().lower()
        if strategy not in STRATEGIES:
            raise ValueError(f"strategy must be one of {STRATEGIES}, got {strategy!r}")
        self.strategy = strategy
        self.max_buffer_chars = max(0, int(max_buffer_chars or 0))
        self._buffer = ""

    @property
    def accumulating(self) -> bool:
        return self.strategy == "accumulate"

    @property
    def buffer(self) -> str:
        return self._buffer

    def push(self, line: str) -> Optional[str]:
        line = line.strip()
        if not line:
            return None
        if not self.accumulating:
            return line

        self._buffer = f"{self._buffer},{line}" if self._buffer else line
        if REQUIRED_MARKERS.issubset(split_pairs(self._buffer)):
            record, self._buffer = self._buffer, ""
            return record

        if self.max_buffer_chars and len(self._buffer) > self.max_buffer_chars:
            missing = sorted(REQUIRED_MARKERS - set(split_pairs(self._buffer)))
            logger.warning(
                "Dropping %d buffered chars, keys never completed (missing: %s)",
                len(self._buffer),
                ", ".join(missing),
            )
            self._buffer = ""
        return None

    def clear(self) -> None:
        self._buffer = ""
