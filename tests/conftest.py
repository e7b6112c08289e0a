"""
Shared pytest fixtures for achfile tests.

Provides builders for 94-byte NACHA records and a small, internally
consistent sample file.
"""

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from achfile.parsers.nacha.file import ACHFile


class RecordBuilder:
    """Builds fixed-width NACHA records with the fields the tests care about."""

    @staticmethod
    def file_header(date: str = "240115", time: str = "1230", modifier: str = "A") -> bytes:
        record = (
            "101"
            + " 091000019"
            + " 123456789"
            + date
            + time
            + modifier
            + "094"
            + "10"
            + "1"
            + "DEST BANK".ljust(23)
            + "ORIGIN CO".ljust(23)
            + "REF00001"
        )
        return record.encode("ascii")

    @staticmethod
    def batch_header(sec_code: str = "PPD", number: int = 1) -> bytes:
        record = (
            "5"
            + "200"
            + "ACME CORP".ljust(16)
            + " " * 20
            + "1234567890"
            + sec_code
            + "PAYROLL".ljust(10)
            + " " * 6
            + "240116"
            + "   "
            + "1"
            + "09100001"
            + f"{number:07d}"
        )
        return record.encode("ascii")

    @staticmethod
    def entry_detail(
        transaction_code: str = "22",
        routing: str = "09100001",
        amount: str = "0000012345",
        term_id: str = "EMP0001",
        addenda: bool = False,
        trace: int = 1,
    ) -> bytes:
        record = (
            "6"
            + transaction_code
            + routing
            + "9"
            + "123456789".ljust(17)
            + amount
            + term_id.ljust(15)
            + "JOHN DOE".ljust(22)
            + "  "
            + ("1" if addenda else "0")
            + "09100001"
            + f"{trace:07d}"
        )
        return record.encode("ascii")

    @staticmethod
    def addenda(sequence: str = "12345") -> bytes:
        record = (
            "705"
            + "PAYMENTINFO"
            + sequence.rjust(11, "0")
            + " " * 58
            + "0001"
            + "0000001"
        )
        return record.encode("ascii")

    @staticmethod
    def batch_control(
        count: int = 0,
        entry_hash: int = 0,
        debit: int = 0,
        credit: int = 0,
        number: int = 1,
    ) -> bytes:
        record = (
            "8"
            + "200"
            + f"{count:06d}"
            + f"{entry_hash:010d}"
            + f"{debit:012d}"
            + f"{credit:012d}"
            + "1234567890"
            + " " * 19
            + " " * 6
            + "09100001"
            + f"{number:07d}"
        )
        return record.encode("ascii")

    @staticmethod
    def file_control(
        batches: int = 0,
        blocks: int = 0,
        entries: int = 0,
        entry_hash: int = 0,
        debit: int = 0,
        credit: int = 0,
    ) -> bytes:
        record = (
            "9"
            + f"{batches:06d}"
            + f"{blocks:06d}"
            + f"{entries:08d}"
            + f"{entry_hash:010d}"
            + f"{debit:012d}"
            + f"{credit:012d}"
            + " " * 39
        )
        return record.encode("ascii")

    @staticmethod
    def filler() -> bytes:
        return b"9" * 94

    @staticmethod
    def join(records, terminator: bytes = b"") -> bytes:
        return b"".join(record + terminator for record in records)


@pytest.fixture
def records():
    """Provide the record builder."""
    return RecordBuilder


@pytest.fixture
def sample_records(records):
    """
    Records of a consistent two-batch file.

    Batch 1 (PPD): $100.00 debit, $50.00 credit with one addenda.
    Batch 2 (CCD): $123.45 credit.
    Ten real records, so the file carries a full block of filler.
    """
    real = [
        records.file_header(),
        records.batch_header("PPD", 1),
        records.entry_detail("27", "09100001", "0000010000", "EMP0001", trace=1),
        records.entry_detail("22", "07640125", "0000005000", "EMP0002", addenda=True, trace=2),
        records.addenda("12345"),
        records.batch_control(count=3, entry_hash=16740126, debit=10000, credit=5000, number=1),
        records.batch_header("CCD", 2),
        records.entry_detail("22", "02100002", "0000012345", "VENDOR01", trace=3),
        records.batch_control(count=1, entry_hash=2100002, debit=0, credit=12345, number=2),
        records.file_control(batches=2, blocks=1, entries=4, entry_hash=18840128,
                             debit=10000, credit=17345),
    ]
    return real + [records.filler()] * 10


@pytest.fixture
def sample_bytes(records, sample_records):
    """The sample file as unterminated fixed-width bytes."""
    return records.join(sample_records)


@pytest.fixture
def sample_file(sample_bytes):
    """The sample file loaded into an ACHFile."""
    return ACHFile.loads(sample_bytes, name="sample.ach")


@pytest.fixture
def sample_path(tmp_path, sample_bytes):
    """The sample file written to disk."""
    path = tmp_path / "sample.ach"
    path.write_bytes(sample_bytes)
    return path
