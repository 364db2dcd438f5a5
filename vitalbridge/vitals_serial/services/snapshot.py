from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional

from .record_parser import NAN, RECOGNIZED_FIELDS

PLACEHOLDER = "--"


def utc_timestamp() -> str:
    """ISO-8601 UTC with milliseconds and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SensorSnapshot:
    """Latest merged vitals, shared between the serial reader and HTTP handlers."""

    def __init__(
        self,
        fields: Iterable[str] = RECOGNIZED_FIELDS,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self._lock = threading.Lock()
        self._clock = clock
        self._values: Dict[str, str] = {name: PLACEHOLDER for name in fields}
        self._lastupdated: Optional[str] = None

    @property
    def fields(self) -> List[str]:
        return list(self._values)

    @property
    def lastupdated(self) -> Optional[str]:
        with self._lock:
            return self._lastupdated

    def as_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {**self._values, "lastupdated": self._lastupdated}

    def merge(
        self,
        pairs: Dict[str, str],
        nan_fillers: Optional[Dict[str, Callable[[], str]]] = None,
    ) -> List[str]:
        """Overwrite recognized fields from ``pairs``; return the dropped keys.

        ``nan_fillers`` maps a field to a generator used when the merged
        value is the literal ``"nan"``. The timestamp moves only when at
        least one field was written.
        """
        dropped: List[str] = []
        with self._lock:
            written = 0
            for key, value in pairs.items():
                if key in self._values:
                    self._values[key] = value
                    written += 1
                else:
                    dropped.append(key)
            for name, filler in (nan_fillers or {}).items():
                if self._values.get(name) == NAN:
                    self._values[name] = filler()
            if written:
                stamp = self._clock()
                # never move backwards if the wall clock steps back
                if self._lastupdated is None or stamp >= self._lastupdated:
                    self._lastupdated = stamp
        return dropped
