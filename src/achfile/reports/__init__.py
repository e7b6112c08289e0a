"""Reports for ACH files."""

from achfile.reports.entry_report import (
    ENTRY_COLUMNS,
    EntryReport,
    EntryReportData,
    entries_dataframe,
)

__all__ = [
    "ENTRY_COLUMNS",
    "EntryReport",
    "EntryReportData",
    "entries_dataframe",
]
