"""
NACHA record layout.

Every record is 94 ASCII bytes. Fields are addressed by 0-based, half-open
byte ranges; the ranges used by this package are collected here per record
kind so that no other module slices raw offsets by hand.
"""

from enum import Enum
from typing import Union

RECORD_LENGTH = 94
BLOCKING_FACTOR = 10

FILLER_CHAR = ord("9")
FILLER_RECORD = b"9" * RECORD_LENGTH

CRLF = b"\r\n"


class RecordType(Enum):
    """Record type code, the first byte of every record."""

    FILE_HEADER = "1"
    BATCH_HEADER = "5"
    ENTRY_DETAIL = "6"
    ADDENDA = "7"
    BATCH_CONTROL = "8"
    FILE_CONTROL = "9"


class SecCode(str, Enum):
    """Standard Entry Class codes. Batch headers are not checked against these."""

    ARC = "ARC"
    BOC = "BOC"
    CBR = "CBR"
    CCD = "CCD"
    CIE = "CIE"
    COR = "COR"
    CTX = "CTX"
    DNE = "DNE"
    IAT = "IAT"
    MTE = "MTE"
    PBR = "PBR"
    POP = "POP"
    POS = "POS"
    PPD = "PPD"
    RCK = "RCK"
    TEL = "TEL"
    WEB = "WEB"
    XCK = "XCK"

    @classmethod
    def is_known(cls, value: str) -> bool:
        return value in cls._value2member_map_


class FileHeaderFields:
    CREATION_DATE = slice(23, 29)  # YYMMDD
    CREATION_TIME = slice(29, 33)  # HHMM
    FILE_ID_MODIFIER = slice(33, 34)


class FileControlFields:
    BATCH_COUNT = slice(1, 7)
    BLOCK_COUNT = slice(7, 13)
    ENTRY_ADDENDA_COUNT = slice(13, 21)
    ENTRY_HASH = slice(21, 31)
    DEBIT_TOTAL = slice(31, 43)  # cents
    CREDIT_TOTAL = slice(43, 55)  # cents


class BatchHeaderFields:
    SEC_CODE = slice(50, 53)
    BATCH_NUMBER = slice(87, 94)


class BatchControlFields:
    ENTRY_ADDENDA_COUNT = slice(4, 10)
    ENTRY_HASH = slice(10, 20)
    DEBIT_TOTAL = slice(20, 32)  # cents
    CREDIT_TOTAL = slice(32, 44)  # cents
    BATCH_NUMBER = slice(87, 94)


class EntryDetailFields:
    TRANSACTION_CODE = slice(1, 3)
    HASH = slice(3, 11)  # receiving DFI identification
    AMOUNT = slice(29, 39)  # cents
    TERMINAL_ID = slice(39, 54)


class AddendaFields:
    SEQUENCE = slice(14, 25)


# Transaction codes that post as credits to the receiver
CREDIT_TRANSACTION_CODES = frozenset({
    "21", "22", "23", "24",
    "31", "32", "33", "34",
    "41", "42", "43", "44",
    "51", "52", "53", "54",
})


def record_type(record: Union[bytes, bytearray]) -> str:
    """Return the leading type code character."""
    return chr(record[0]) if record else ""


def is_filler(record: Union[bytes, bytearray]) -> bool:
    """True when every byte of the record is the digit 9."""
    return all(b == FILLER_CHAR for b in record)


def read_field(record: Union[bytes, bytearray], field: slice) -> str:
    """Decode a field as text."""
    return bytes(record[field]).decode("ascii", errors="replace")


def write_numeric(record: bytearray, field: slice, value: int) -> None:
    """
    Write a zero-padded number into a field in place.

    Values wider than the field keep their low-order digits, so the record
    length never changes.
    """
    width = field.stop - field.start
    digits = f"{value:0{width}d}"[-width:]
    record[field] = digits.encode("ascii")
