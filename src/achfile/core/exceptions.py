"""
Custom exceptions for achfile.

All achfile-specific exceptions inherit from ACHError for easy catching.

Exception hierarchy:
    ACHError (base)
    ├── StructuralError
    │   ├── RecordLengthError
    │   ├── ShortRecordError
    │   ├── InvalidRecordTypeError
    │   └── RecordOrderError
    ├── FieldParseError
    └── InvariantViolationError
"""

from typing import Optional


class ACHError(Exception):
    """Base exception for all achfile errors."""

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code


# ============================================================================
# Structural Errors (fatal, abort the load)
# ============================================================================

class StructuralError(ACHError):
    """
    The input is not a well-formed ACH file.

    Carries the 1-based position of the offending record and its raw bytes
    (when known) so callers can point at the bad line.
    """

    def __init__(
        self,
        message: str,
        record_number: Optional[int] = None,
        record: Optional[bytes] = None,
        code: str = "STRUCTURAL_ERROR"
    ):
        super().__init__(message, code)
        self.record_number = record_number
        self.record = bytes(record) if record is not None else None

    def __str__(self) -> str:
        if self.record_number is not None:
            return f"{self.message} (record {self.record_number})"
        return self.message


class RecordLengthError(StructuralError):
    """A new-line was found somewhere other than a record boundary."""

    def __init__(self, message: str, record_number: int = None, record: bytes = None):
        super().__init__(message, record_number, record, code="RECORD_LENGTH")


class ShortRecordError(StructuralError):
    """Unprocessed data shorter than one record remained at end-of-file."""

    def __init__(self, message: str, record_number: int = None, record: bytes = None):
        super().__init__(message, record_number, record, code="SHORT_RECORD")


class InvalidRecordTypeError(StructuralError):
    """The leading record type code is not one of 1, 5, 6, 7, 8, 9."""

    def __init__(self, message: str, record_number: int = None, record: bytes = None):
        super().__init__(message, record_number, record, code="INVALID_RECORD_TYPE")


class RecordOrderError(StructuralError):
    """Records are duplicated, orphaned or out of order."""

    def __init__(self, message: str, record_number: int = None, record: bytes = None):
        super().__init__(message, record_number, record, code="RECORD_ORDER")


# ============================================================================
# Field Errors
# ============================================================================

class FieldParseError(ACHError):
    """A numeric or date field could not be parsed. Recoverable by the caller."""

    def __init__(self, message: str, field: str = None, value: str = None, code: str = "FIELD_PARSE"):
        super().__init__(message, code)
        self.field = field
        self.value = value


class InvariantViolationError(ACHError):
    """
    Raised when data that must already be valid is not.

    A structurally loaded file should never carry a non-numeric entry hash,
    so hitting one points at a bug rather than at bad input.
    """

    def __init__(self, message: str, code: str = "INVARIANT_VIOLATION"):
        super().__init__(message, code)
