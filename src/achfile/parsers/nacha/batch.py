"""
Batch records.

A Batch is a type 5 header, its entries, and the closing type 8 control
record. Control record totals are only trusted after set_control_totals().
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from achfile.core.exceptions import FieldParseError, InvariantViolationError
from achfile.parsers.nacha.entry import Entry
from achfile.parsers.nacha.records import (
    BatchControlFields,
    BatchHeaderFields,
    read_field,
    write_numeric,
)

# Entry hashes keep only their low-order 10 digits
HASH_MODULUS = 10 ** 10


@dataclass
class BatchControlTotals:
    """Values derived from a batch's active entries."""

    entry_count: int = 0
    entry_hash: int = 0
    debit_total: int = 0  # cents
    credit_total: int = 0  # cents


class Batch:
    """Represents one batch: header, entries and control record."""

    def __init__(
        self,
        header: bytes,
        entries: Optional[List[Entry]] = None,
        control: Optional[bytes] = None
    ):
        """
        Initialize batch.

        Args:
            header: Type 5 batch header record
            entries: Entries in file order
            control: Type 8 batch control record, None until the batch is closed
        """
        self.header = bytearray(header)
        self.entries: List[Entry] = list(entries or [])
        self.control: Optional[bytearray] = bytearray(control) if control is not None else None

    def __repr__(self) -> str:
        return (
            f"Batch(sec_code={self.sec_code()!r}, number={self.number()!r}, "
            f"entries={len(self.entries)})"
        )

    @property
    def is_closed(self) -> bool:
        return self.control is not None

    def active_entries(self) -> List[Entry]:
        return [entry for entry in self.entries if not entry.removed]

    def sec_code(self) -> str:
        """Standard Entry Class code from the header. Not validated."""
        return read_field(self.header, BatchHeaderFields.SEC_CODE)

    def number(self) -> str:
        return read_field(self.header, BatchHeaderFields.BATCH_NUMBER)

    def is_empty(self) -> bool:
        """True when every entry has been removed (or there are none)."""
        return all(entry.removed for entry in self.entries)

    def set_number(self, number: int) -> None:
        """Write a 7-digit batch number into both the header and the control."""
        self._require_control()
        write_numeric(self.header, BatchHeaderFields.BATCH_NUMBER, number)
        write_numeric(self.control, BatchControlFields.BATCH_NUMBER, number)

    def entry_count(self) -> int:
        """Physical records of active entries, addenda included."""
        return sum(entry.record_count for entry in self.entries if not entry.removed)

    def entry_hash(self) -> int:
        """Sum of active entry hashes, truncated to 10 digits."""
        total = sum(entry.hash() for entry in self.entries if not entry.removed)
        return total % HASH_MODULUS

    def debit_credit_totals(self) -> Tuple[int, int]:
        """
        Debit and credit totals in cents.

        Amounts are summed as floating dollars and converted per entry with a
        half-cent bias away from zero before truncation, the same conversion
        the files were produced with.

        Raises:
            InvariantViolationError: If an active entry has a malformed amount
        """
        debit_total = 0
        credit_total = 0
        for entry in self.entries:
            if entry.removed:
                continue
            try:
                amount = entry.post_amount()
            except FieldParseError as e:
                raise InvariantViolationError(
                    f"Cannot total batch {self.number()}: {e.message}"
                ) from e
            if amount < 0:
                # Credit, careful with the rounding when converting to int
                credit_total += int((amount - 0.005) * -100)
            else:
                debit_total += int((amount + 0.005) * 100)
        return debit_total, credit_total

    def control_totals(self) -> BatchControlTotals:
        """Compute control totals without touching the control record."""
        debit_total, credit_total = self.debit_credit_totals()
        return BatchControlTotals(
            entry_count=self.entry_count(),
            entry_hash=self.entry_hash(),
            debit_total=debit_total,
            credit_total=credit_total,
        )

    def set_control_totals(self) -> BatchControlTotals:
        """
        Rewrite count, hash and debit/credit totals in the control record.

        Returns:
            The totals that were written
        """
        self._require_control()
        totals = self.control_totals()

        write_numeric(self.control, BatchControlFields.ENTRY_ADDENDA_COUNT, totals.entry_count)
        write_numeric(self.control, BatchControlFields.ENTRY_HASH, totals.entry_hash)
        write_numeric(self.control, BatchControlFields.DEBIT_TOTAL, totals.debit_total)
        write_numeric(self.control, BatchControlFields.CREDIT_TOTAL, totals.credit_total)

        return totals

    def records(self) -> List[bytearray]:
        """Header, active entry records and control, in output order."""
        self._require_control()
        output = [self.header]
        for entry in self.entries:
            if not entry.removed:
                output.extend(entry.records)
        output.append(self.control)
        return output

    def _require_control(self) -> None:
        if self.control is None:
            raise InvariantViolationError(
                f"Batch {self.number()} has no batch control record"
            )
