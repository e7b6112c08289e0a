"""
Parser Validators - Validate ACH files before they are rewritten.

Provides validation for:
- Structure (record lengths, record types, record order)
- Control totals stored in the file against totals derived from its entries
- Standard Entry Class codes

Usage:
    from achfile.parsers.validators import ACHFileValidator

    validator = ACHFileValidator()
    errors = validator.validate(Path("payroll.ach"))
    if errors:
        print(f"Validation failed: {errors}")
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional
import logging

from achfile.core.exceptions import ACHError, StructuralError
from achfile.parsers.nacha.file import ACHFile
from achfile.parsers.nacha.records import (
    BatchControlFields,
    FileControlFields,
    SecCode,
    read_field,
)

logger = logging.getLogger(__name__)


class ParserValidator(ABC):
    """Base validator for all parsers."""

    @abstractmethod
    def validate(self, file_path: Path) -> List[str]:
        """
        Validate a file before parsing.

        Args:
            file_path: Path to the file to validate

        Returns:
            List of validation errors (empty if valid)
        """
        pass

    def is_valid(self, file_path: Path) -> bool:
        """Check if file is valid (no errors)."""
        return len(self.validate(file_path)) == 0


def _compare(label: str, field: str, stored: str, expected: int) -> Optional[str]:
    """Return a mismatch message, or None when the stored field matches."""
    if not stored.isdigit():
        return f"{label} {field} is not numeric: {stored!r}"
    if int(stored) != expected:
        return f"{label} {field} mismatch: stored {int(stored)}, computed {expected}"
    return None


def validate_control_totals(ach_file: ACHFile) -> List[str]:
    """
    Compare stored control totals with totals derived from the entries.

    Nothing is written: the stored control records are left as loaded.

    Args:
        ach_file: Loaded ACH file

    Returns:
        List of mismatch messages (empty if consistent)
    """
    errors = []

    for index, batch in enumerate(ach_file.batches, start=1):
        label = f"Batch {index}"
        if batch.control is None:
            errors.append(f"{label} has no batch control record")
            continue
        if batch.is_empty():
            errors.append(f"{label} has no active entries and will be dropped on write")
            continue

        try:
            totals = batch.control_totals()
        except ACHError as e:
            errors.append(f"{label}: {e.message}")
            continue

        checks = [
            ("entry/addenda count", BatchControlFields.ENTRY_ADDENDA_COUNT, totals.entry_count),
            ("entry hash", BatchControlFields.ENTRY_HASH, totals.entry_hash),
            ("debit total", BatchControlFields.DEBIT_TOTAL, totals.debit_total),
            ("credit total", BatchControlFields.CREDIT_TOTAL, totals.credit_total),
        ]
        for field, span, expected in checks:
            message = _compare(label, field, read_field(batch.control, span), expected)
            if message:
                errors.append(message)

    if not ach_file.control:
        errors.append("File has no file control record")
        return errors

    try:
        totals = ach_file.control_totals()
    except ACHError as e:
        errors.append(f"File: {e.message}")
        return errors

    record = ach_file.control[0]
    checks = [
        ("batch count", FileControlFields.BATCH_COUNT, totals.batch_count),
        ("block count", FileControlFields.BLOCK_COUNT, totals.block_count),
        ("entry/addenda count", FileControlFields.ENTRY_ADDENDA_COUNT, totals.entry_count),
        ("entry hash", FileControlFields.ENTRY_HASH, totals.entry_hash),
        ("debit total", FileControlFields.DEBIT_TOTAL, totals.debit_total),
        ("credit total", FileControlFields.CREDIT_TOTAL, totals.credit_total),
    ]
    for field, span, expected in checks:
        message = _compare("File", field, read_field(record, span), expected)
        if message:
            errors.append(message)

    return errors


def validate_sec_codes(ach_file: ACHFile) -> List[str]:
    """List batches whose SEC code is not a known Standard Entry Class code."""
    warnings = []
    for index, batch in enumerate(ach_file.batches, start=1):
        code = batch.sec_code()
        if not SecCode.is_known(code):
            warnings.append(f"Batch {index}: unknown SEC code {code!r}")
    return warnings


class ACHFileValidator(ParserValidator):
    """
    Validator for NACHA files.

    Checks:
    - File exists and is readable
    - Records are well-formed and correctly nested
    - Stored control totals match the entries (optional)
    - SEC codes are known (optional)
    """

    def __init__(self, check_totals: bool = True, check_sec_codes: bool = True):
        """
        Initialize ACH validator.

        Args:
            check_totals: Report stale or inconsistent control totals
            check_sec_codes: Report unknown Standard Entry Class codes
        """
        self.check_totals = check_totals
        self.check_sec_codes = check_sec_codes

    def validate(self, file_path: Path) -> List[str]:
        """Validate ACH file."""
        file_path = Path(file_path)

        if not file_path.exists():
            return [f"File not found: {file_path}"]

        try:
            ach_file = ACHFile.load_file(file_path)
        except StructuralError as e:
            logger.debug(f"Structural error in {file_path}: {e}")
            return [f"Structural error: {e}"]
        except OSError as e:
            return [f"Cannot read file: {e}"]

        errors = []
        if ach_file.header is None:
            errors.append("File has no file header record")
        if self.check_totals:
            errors.extend(validate_control_totals(ach_file))
        if self.check_sec_codes:
            errors.extend(validate_sec_codes(ach_file))

        return errors
