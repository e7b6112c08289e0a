"""
NACHA (ACH) file parser.

Loads fixed-width 94-byte record files, supports logical removal of entries,
and writes them back with recomputed batch and file control totals.
"""

from achfile.parsers.nacha.records import (
    RECORD_LENGTH,
    BLOCKING_FACTOR,
    RecordType,
    SecCode,
    is_filler,
)
from achfile.parsers.nacha.splitter import split_records
from achfile.parsers.nacha.entry import Entry, EntryState
from achfile.parsers.nacha.batch import Batch, BatchControlTotals
from achfile.parsers.nacha.file import ACHFile, FileControlTotals, load_ach_file

__all__ = [
    "RECORD_LENGTH",
    "BLOCKING_FACTOR",
    "RecordType",
    "SecCode",
    "is_filler",
    "split_records",
    "Entry",
    "EntryState",
    "Batch",
    "BatchControlTotals",
    "ACHFile",
    "FileControlTotals",
    "load_ach_file",
]
