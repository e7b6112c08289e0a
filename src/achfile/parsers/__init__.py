"""
achfile Parsers - NACHA file parsing and validation.

Architecture:
- nacha.splitter: fixed-length record tokenizer
- nacha.records: record layouts and field helpers
- nacha.entry / nacha.batch / nacha.file: File -> Batch -> Entry tree
- validators: structural and control-total checks
"""

from .nacha import ACHFile, Batch, Entry, EntryState, load_ach_file
from .validators import (
    ParserValidator,
    ACHFileValidator,
    validate_control_totals,
    validate_sec_codes,
)

__all__ = [
    "ACHFile",
    "Batch",
    "Entry",
    "EntryState",
    "load_ach_file",
    "ParserValidator",
    "ACHFileValidator",
    "validate_control_totals",
    "validate_sec_codes",
]
