from .record_parser import (  # noqa: F401
    RECOGNIZED_FIELDS,
    LineFramer,
    ParseResult,
    RecordAssembler,
    parse_record,
)
from .snapshot import PLACEHOLDER, SensorSnapshot  # noqa: F401
