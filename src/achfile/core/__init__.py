"""Core building blocks shared by the ACH parsers, reports and CLI."""

from achfile.core.exceptions import (
    ACHError,
    StructuralError,
    RecordLengthError,
    ShortRecordError,
    InvalidRecordTypeError,
    RecordOrderError,
    FieldParseError,
    InvariantViolationError,
)
from achfile.core.currency import parse_currency
from achfile.core.config import WriterConfig, ReportConfig, Settings, load_settings

__all__ = [
    "ACHError",
    "StructuralError",
    "RecordLengthError",
    "ShortRecordError",
    "InvalidRecordTypeError",
    "RecordOrderError",
    "FieldParseError",
    "InvariantViolationError",
    "parse_currency",
    "WriterConfig",
    "ReportConfig",
    "Settings",
    "load_settings",
]
