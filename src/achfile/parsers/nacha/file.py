"""
NACHA file loading and writing.

Loading is a single pass over the records produced by the splitter; every
record is classified by its type code and attached to the current batch or
entry. Writing recomputes every control record from the active entries,
drops batches whose entries were all removed, and pads the output with
all-nines filler records to a 10-record block boundary.

Usage:
    ach_file = ACHFile.load_file("payroll.ach")
    for batch, entry in ach_file.entries():
        if entry.term_id() == "EMP0042":
            entry.remove()
    ach_file.write_file("payroll-fixed.ach")
"""

import io
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, List, Optional, Tuple, Union

from achfile.core.config import WriterConfig
from achfile.core.exceptions import (
    FieldParseError,
    InvalidRecordTypeError,
    InvariantViolationError,
    RecordOrderError,
)
from achfile.parsers.nacha.batch import HASH_MODULUS, Batch
from achfile.parsers.nacha.entry import Entry
from achfile.parsers.nacha.records import (
    BLOCKING_FACTOR,
    CRLF,
    FILLER_RECORD,
    FileControlFields,
    FileHeaderFields,
    RecordType,
    is_filler,
    read_field,
    record_type,
    write_numeric,
)
from achfile.parsers.nacha.splitter import split_records

logger = logging.getLogger(__name__)

CREATION_TIMESTAMP_FORMAT = "%y%m%d %H%M"


@dataclass
class FileControlTotals:
    """Values derived from the non-empty batches of a file."""

    batch_count: int = 0
    block_count: int = 0
    entry_count: int = 0
    entry_hash: int = 0
    debit_total: int = 0  # cents
    credit_total: int = 0  # cents


class _RecordWriter:
    """
    Buffers records and writes them to the stream in one go.

    The buffer is flushed when the context exits, including on errors, so
    everything buffered before a failure still reaches the stream.
    """

    def __init__(self, stream: BinaryIO, crlf: bool = False):
        self._stream = stream
        self._crlf = crlf
        self._buffer: List[bytes] = []
        self.records = 0

    def __enter__(self) -> "_RecordWriter":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if exc_type is None:
            self.flush()
            return
        # An error is already propagating; a failed flush must not replace it
        try:
            self.flush()
        except OSError as e:
            logger.warning(f"Flush failed while handling {exc_type.__name__}: {e}")

    def write(self, record: Union[bytes, bytearray], count: bool = True) -> None:
        self._buffer.append(bytes(record))
        if self._crlf:
            self._buffer.append(CRLF)
        if count:
            self.records += 1

    def flush(self) -> None:
        if self._buffer:
            data = b"".join(self._buffer)
            self._buffer.clear()
            self._stream.write(data)
        if hasattr(self._stream, "flush"):
            self._stream.flush()


class ACHFile:
    """
    An ACH file: header, batches and file control record(s).

    Control totals are never cached. Every accessor and every write derives
    them again from the active entries.
    """

    def __init__(
        self,
        name: str = "",
        header: Optional[bytes] = None,
        batches: Optional[List[Batch]] = None,
        control: Optional[List[bytes]] = None,
        crlf: bool = False,
        renumber: bool = True
    ):
        """
        Initialize file.

        Args:
            name: Path the file was loaded from
            header: Type 1 file header record
            batches: Batches in file order
            control: Type 9 file control record(s), filler excluded
            crlf: Terminate written records with \\r\\n
            renumber: Renumber batches 1..n on write
        """
        self._name = name
        self.header: Optional[bytearray] = bytearray(header) if header is not None else None
        self.batches: List[Batch] = list(batches or [])
        self.control: List[bytearray] = [bytearray(c) for c in control or []]
        self.crlf = crlf
        self.renumber = renumber

    def __repr__(self) -> str:
        return f"ACHFile(name={self._name!r}, batches={len(self.batches)})"

    @property
    def name(self) -> str:
        return self._name

    # ------------------------------------------------------------------
    # Switches
    # ------------------------------------------------------------------

    def enable_crlf(self) -> None:
        self.crlf = True

    def disable_crlf(self) -> None:
        self.crlf = False

    def enable_batch_renumber(self) -> None:
        self.renumber = True

    def disable_batch_renumber(self) -> None:
        self.renumber = False

    def apply_config(self, config: WriterConfig) -> None:
        """Apply writer switches from settings."""
        self.crlf = config.crlf
        self.renumber = config.renumber

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, stream: BinaryIO, name: str = "") -> "ACHFile":
        """
        Parse an ACH file from a binary stream.

        Args:
            stream: Binary stream positioned at the file header
            name: Name to report for the file

        Returns:
            ACHFile

        Raises:
            StructuralError: On any malformed, misplaced or unknown record
        """
        ach_file = cls(name=name)

        cur_batch: Optional[Batch] = None
        cur_entry: Optional[Entry] = None
        batch_start = 0
        filler_count = 0

        for record_number, record in enumerate(split_records(stream), start=1):
            type_code = record_type(record)

            if type_code == RecordType.FILE_HEADER.value:
                if ach_file.header is not None:
                    raise RecordOrderError(
                        "Multiple File Header Records found.", record_number, record
                    )
                ach_file.header = bytearray(record)

            elif type_code == RecordType.BATCH_HEADER.value:
                if cur_batch is not None and not cur_batch.is_closed:
                    raise RecordOrderError(
                        f"Found new batch before the close of batch {len(ach_file.batches)}.",
                        record_number,
                        record,
                    )
                cur_batch = Batch(header=record)
                batch_start = record_number
                cur_entry = None
                ach_file.batches.append(cur_batch)
                logger.debug(f"Opened batch {len(ach_file.batches)} at record {record_number}")

            elif type_code == RecordType.ENTRY_DETAIL.value:
                if cur_batch is None:
                    raise RecordOrderError(
                        "Found Entry Detail Record before Batch Header Record.",
                        record_number,
                        record,
                    )
                cur_entry = Entry(detail=record)
                cur_batch.entries.append(cur_entry)

            elif type_code == RecordType.ADDENDA.value:
                if cur_batch is None:
                    raise RecordOrderError(
                        "Found Entry Detail Addenda Record before Batch Header Record.",
                        record_number,
                        record,
                    )
                if cur_entry is None:
                    raise RecordOrderError(
                        "Found Entry Detail Addenda Record before Entry Detail Record.",
                        record_number,
                        record,
                    )
                cur_entry.add_addenda(record)

            elif type_code == RecordType.BATCH_CONTROL.value:
                if cur_batch is None:
                    raise RecordOrderError(
                        "Found Batch Control Record before Batch Header Record.",
                        record_number,
                        record,
                    )
                if cur_batch.is_closed:
                    raise RecordOrderError(
                        f"Multiple Batch Control Records found for batch {len(ach_file.batches)}",
                        record_number,
                        record,
                    )
                cur_batch.control = bytearray(record)
                logger.debug(f"Closed batch {len(ach_file.batches)} at record {record_number}")

            elif type_code == RecordType.FILE_CONTROL.value:
                if is_filler(record):
                    filler_count += 1
                else:
                    ach_file.control.append(bytearray(record))

            else:
                raise InvalidRecordTypeError(
                    f"Invalid Nacha Record Type Code. Record: {record!r}",
                    record_number,
                    record,
                )

        if cur_batch is not None and not cur_batch.is_closed:
            raise RecordOrderError(
                f"Batch {len(ach_file.batches)} was not closed before end-of-file.",
                batch_start,
                cur_batch.header,
            )

        logger.info(
            f"Loaded {name or 'ACH file'}: {len(ach_file.batches)} batches, "
            f"{sum(len(b.entries) for b in ach_file.batches)} entries, "
            f"{filler_count} filler records skipped"
        )
        return ach_file

    @classmethod
    def loads(cls, data: bytes, name: str = "") -> "ACHFile":
        """Parse an ACH file held in memory."""
        return cls.load(io.BytesIO(data), name=name)

    @classmethod
    def load_file(cls, path: Union[str, Path]) -> "ACHFile":
        """Parse an ACH file from disk."""
        path = Path(path)
        with open(path, "rb") as f:
            return cls.load(f, name=str(path))

    # ------------------------------------------------------------------
    # Traversal and mutation
    # ------------------------------------------------------------------

    def entries(self) -> Iterator[Tuple[Batch, Entry]]:
        """Iterate every (batch, entry) pair, removed entries included."""
        for batch in self.batches:
            for entry in batch.entries:
                yield batch, entry

    def remove_entries(self, predicate: Callable[[Entry], bool]) -> int:
        """
        Remove every active entry matching the predicate.

        Returns:
            Number of entries removed
        """
        removed = 0
        for _, entry in self.entries():
            if not entry.removed and predicate(entry):
                entry.remove()
                removed += 1
        return removed

    def non_empty_batches(self) -> List[Batch]:
        return [batch for batch in self.batches if not batch.is_empty()]

    # ------------------------------------------------------------------
    # Control totals
    # ------------------------------------------------------------------

    def control_totals(self) -> FileControlTotals:
        """Compute file control totals without touching the control record."""
        totals = FileControlTotals()
        entry_hash = 0

        for batch in self.batches:
            count = batch.entry_count()
            if count == 0:
                continue
            totals.batch_count += 1
            totals.entry_count += count
            debit_total, credit_total = batch.debit_credit_totals()
            totals.debit_total += debit_total
            totals.credit_total += credit_total
            entry_hash += sum(entry.hash() for entry in batch.active_entries())

        totals.entry_hash = entry_hash % HASH_MODULUS

        records = 1 + totals.batch_count * 2 + totals.entry_count + len(self.control)
        totals.block_count = (records + BLOCKING_FACTOR - 1) // BLOCKING_FACTOR

        return totals

    def set_control_totals(self) -> Optional[FileControlTotals]:
        """
        Rewrite the first file control record from the current entries.

        Returns:
            The totals that were written, None when there is no control record
        """
        if not self.control:
            logger.warning(f"{self._name or 'ACH file'} has no file control record")
            return None

        totals = self.control_totals()
        record = self.control[0]

        write_numeric(record, FileControlFields.BATCH_COUNT, totals.batch_count)
        write_numeric(record, FileControlFields.ENTRY_ADDENDA_COUNT, totals.entry_count)
        write_numeric(record, FileControlFields.DEBIT_TOTAL, totals.debit_total)
        write_numeric(record, FileControlFields.CREDIT_TOTAL, totals.credit_total)
        write_numeric(record, FileControlFields.BLOCK_COUNT, totals.block_count)
        write_numeric(record, FileControlFields.ENTRY_HASH, totals.entry_hash)

        return totals

    def _control_int(self, field: slice) -> int:
        self.set_control_totals()
        if not self.control:
            return 0
        return int(read_field(self.control[0], field))

    def batch_count(self) -> int:
        return self._control_int(FileControlFields.BATCH_COUNT)

    def entry_count(self) -> int:
        """Entry and addenda records across non-empty batches."""
        return self._control_int(FileControlFields.ENTRY_ADDENDA_COUNT)

    def block_count(self) -> int:
        return self._control_int(FileControlFields.BLOCK_COUNT)

    def debit_total(self) -> Decimal:
        """Total debits in dollars."""
        return Decimal(self._control_int(FileControlFields.DEBIT_TOTAL)).scaleb(-2)

    def credit_total(self) -> Decimal:
        """Total credits in dollars."""
        return Decimal(self._control_int(FileControlFields.CREDIT_TOTAL)).scaleb(-2)

    def entry_hash(self) -> str:
        """The 10-digit entry hash as written in the file control record."""
        self.set_control_totals()
        if not self.control:
            return ""
        return read_field(self.control[0], FileControlFields.ENTRY_HASH)

    # ------------------------------------------------------------------
    # File header
    # ------------------------------------------------------------------

    def _header_field(self, field: slice) -> str:
        if self.header is None:
            return ""
        return read_field(self.header, field)

    def file_id_modifier(self) -> str:
        return self._header_field(FileHeaderFields.FILE_ID_MODIFIER)

    def file_creation_date(self) -> str:
        """Creation date as YYMMDD."""
        return self._header_field(FileHeaderFields.CREATION_DATE)

    def file_creation_time(self) -> str:
        """Creation time as HHMM."""
        return self._header_field(FileHeaderFields.CREATION_TIME)

    def file_creation_timestamp(self) -> datetime:
        """
        Creation date and time combined.

        Raises:
            FieldParseError: If the header date/time is missing or invalid
        """
        value = f"{self.file_creation_date()} {self.file_creation_time()}"
        try:
            return datetime.strptime(value, CREATION_TIMESTAMP_FORMAT)
        except ValueError as e:
            raise FieldParseError(
                f"Invalid file creation timestamp: {value!r}",
                field="file_creation_timestamp",
                value=value,
            ) from e

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write(self, stream: BinaryIO) -> int:
        """
        Recompute control totals and write the file.

        Args:
            stream: Binary stream to write to

        Returns:
            Number of records written, filler included

        Raises:
            InvariantViolationError: If the file has no header record
            OSError: Propagated from the stream
        """
        if self.header is None:
            raise InvariantViolationError("Cannot write an ACH file without a file header record")

        batch_number = 0

        with _RecordWriter(stream, crlf=self.crlf) as writer:
            writer.write(self.header)

            for batch in self.batches:
                if batch.is_empty():
                    logger.debug(f"Dropping empty batch {batch.number()}")
                    continue
                if self.renumber:
                    batch_number += 1
                    batch.set_number(batch_number)
                batch.set_control_totals()

                for record in batch.records():
                    writer.write(record)

            self.set_control_totals()
            for record in self.control:
                writer.write(record)

            # A full block of filler is added even when already on a boundary
            filler = BLOCKING_FACTOR - writer.records % BLOCKING_FACTOR
            for _ in range(filler):
                writer.write(FILLER_RECORD, count=False)

            logger.info(f"Wrote {writer.records} records and {filler} filler records")
            return writer.records + filler

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.write(buffer)
        return buffer.getvalue()

    def write_file(self, path: Union[str, Path]) -> int:
        """Write the file to disk, replacing any existing file."""
        path = Path(path)
        with open(path, "wb") as f:
            return self.write(f)


def load_ach_file(path: Union[str, Path]) -> ACHFile:
    """Load an ACH file from disk."""
    return ACHFile.load_file(path)
