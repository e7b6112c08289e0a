"""
Entry detail records.

An Entry is one logical ACH transaction: its type 6 detail record followed by
any type 7 addenda records that belong to it.
"""

import re
from enum import Enum
from typing import List, Optional

from achfile.core.currency import parse_currency
from achfile.core.exceptions import InvariantViolationError
from achfile.parsers.nacha.records import (
    AddendaFields,
    CREDIT_TRANSACTION_CODES,
    EntryDetailFields,
    read_field,
)


_INTEGER = re.compile(r"[+-]?[0-9]+")


class EntryState(Enum):
    """Logical delete state. Removed entries keep their bytes."""

    ACTIVE = "ACTIVE"
    REMOVED = "REMOVED"


class Entry:
    """Represents one entry detail record plus its addenda."""

    def __init__(self, detail: bytes, addenda: Optional[List[bytes]] = None):
        """
        Initialize entry.

        Args:
            detail: Type 6 entry detail record (94 bytes)
            addenda: Type 7 addenda records, in file order
        """
        self.records: List[bytearray] = [bytearray(detail)]
        for record in addenda or []:
            self.records.append(bytearray(record))
        self.state = EntryState.ACTIVE

    def __repr__(self) -> str:
        return (
            f"Entry(transaction_code={self.transaction_code!r}, "
            f"term_id={self.term_id()!r}, addenda={self.addenda_count}, "
            f"state={self.state.value})"
        )

    @property
    def detail(self) -> bytearray:
        return self.records[0]

    @property
    def addenda(self) -> List[bytearray]:
        return self.records[1:]

    @property
    def addenda_count(self) -> int:
        return len(self.records) - 1

    @property
    def record_count(self) -> int:
        """Physical records: the detail plus every addenda."""
        return len(self.records)

    def add_addenda(self, record: bytes) -> None:
        self.records.append(bytearray(record))

    # ------------------------------------------------------------------
    # Logical delete
    # ------------------------------------------------------------------

    @property
    def removed(self) -> bool:
        return self.state is EntryState.REMOVED

    @removed.setter
    def removed(self, value: bool) -> None:
        self.state = EntryState.REMOVED if value else EntryState.ACTIVE

    def remove(self) -> None:
        """Exclude the entry from counts, totals and output."""
        self.state = EntryState.REMOVED

    def restore(self) -> None:
        self.state = EntryState.ACTIVE

    # ------------------------------------------------------------------
    # Derived fields
    # ------------------------------------------------------------------

    @property
    def transaction_code(self) -> str:
        return read_field(self.detail, EntryDetailFields.TRANSACTION_CODE)

    @property
    def is_credit(self) -> bool:
        return self.transaction_code in CREDIT_TRANSACTION_CODES

    def hash(self) -> int:
        """
        Numeric value of the 8-digit hash field, summed into entry hashes.

        Raises:
            InvariantViolationError: If the field is not numeric
        """
        value = read_field(self.detail, EntryDetailFields.HASH)
        if not _INTEGER.fullmatch(value):
            raise InvariantViolationError(f"Entry hash field is not numeric: {value!r}")
        return int(value)

    def term_id(self) -> str:
        """Terminal / identification number with trailing spaces removed."""
        return read_field(self.detail, EntryDetailFields.TERMINAL_ID).rstrip(" ")

    def seq(self) -> str:
        """Sequence number from the first addenda, or "" without addenda."""
        if self.addenda_count == 0:
            return ""
        return read_field(self.records[1], AddendaFields.SEQUENCE).strip("0 ")

    def post_amount(self) -> float:
        """
        Signed posting amount in dollars.

        Credit transaction codes are negative, everything else is a debit.

        Raises:
            FieldParseError: If the amount field is malformed
        """
        amount = parse_currency(self.detail[EntryDetailFields.AMOUNT], field="amount")
        if self.is_credit:
            amount *= -1
        return amount / 100
