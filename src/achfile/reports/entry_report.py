"""Entry Report Generator.

Tabulates the entries of an ACH file with their batch, amount and removal
state, and exports the table to Excel or CSV.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from achfile.core.config import ReportConfig
from achfile.core.exceptions import FieldParseError, InvariantViolationError
from achfile.parsers.nacha.file import ACHFile

logger = logging.getLogger(__name__)

ENTRY_COLUMNS = [
    "batch",
    "batch_number",
    "sec_code",
    "transaction_code",
    "term_id",
    "amount",
    "addenda_count",
    "removed",
]


def entries_dataframe(ach_file: ACHFile, include_removed: bool = True) -> pd.DataFrame:
    """
    Build one row per entry.

    Amounts are signed dollars (credits negative). An entry whose amount
    field is malformed gets a missing amount instead of failing the report.

    Args:
        ach_file: Loaded ACH file
        include_removed: Keep rows for removed entries

    Returns:
        DataFrame with ENTRY_COLUMNS
    """
    rows = []
    for index, batch in enumerate(ach_file.batches, start=1):
        for entry in batch.entries:
            if entry.removed and not include_removed:
                continue
            try:
                amount = round(entry.post_amount(), 2)
            except FieldParseError:
                amount = None
            rows.append({
                "batch": index,
                "batch_number": batch.number(),
                "sec_code": batch.sec_code(),
                "transaction_code": entry.transaction_code,
                "term_id": entry.term_id(),
                "amount": amount,
                "addenda_count": entry.addenda_count,
                "removed": entry.removed,
            })

    return pd.DataFrame(rows, columns=ENTRY_COLUMNS)


@dataclass
class EntryReportData:
    """Entry report data."""

    name: str
    entries: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=ENTRY_COLUMNS))
    # Totals are None when the file cannot be totalled
    batch_count: Optional[int] = 0
    entry_count: Optional[int] = 0
    debit_total: Optional[Decimal] = Decimal("0")
    credit_total: Optional[Decimal] = Decimal("0")
    entry_hash: str = ""


class EntryReport:
    """Generate an entry listing for an ACH file."""

    def __init__(self, config: Optional[ReportConfig] = None):
        """
        Initialize report generator.

        Args:
            config: Report settings (defaults apply when omitted)
        """
        self.config = config or ReportConfig()

    def generate(self, ach_file: ACHFile) -> EntryReportData:
        """
        Collect entries and file totals.

        Totals are the ones the file would be written with, so removed
        entries and empty batches are already excluded. A file with a
        malformed amount still gets its entry table, with empty totals.
        """
        report = EntryReportData(
            name=ach_file.name,
            entries=entries_dataframe(ach_file, include_removed=self.config.include_removed),
        )

        try:
            report.batch_count = ach_file.batch_count()
            report.entry_count = ach_file.entry_count()
            report.debit_total = ach_file.debit_total()
            report.credit_total = ach_file.credit_total()
            report.entry_hash = ach_file.entry_hash()
        except InvariantViolationError as e:
            logger.warning(f"Cannot compute totals for {ach_file.name or 'ACH file'}: {e.message}")
            report.batch_count = None
            report.entry_count = None
            report.debit_total = None
            report.credit_total = None
            report.entry_hash = ""

        return report

    def export(self, report: EntryReportData, output_path: Path) -> Path:
        """Export in the format implied by the output suffix."""
        if self.config.resolve_format(output_path) == "csv":
            return self.export_csv(report, output_path)
        return self.export_excel(report, output_path)

    def export_csv(self, report: EntryReportData, output_path: Path) -> Path:
        output_path = Path(output_path)
        report.entries.to_csv(output_path, index=False)
        return output_path

    def export_excel(self, report: EntryReportData, output_path: Path) -> Path:
        """
        Export entry report to Excel.

        Args:
            report: EntryReportData from generate()
            output_path: Output file path (.xlsx)

        Returns:
            Path to generated Excel file
        """
        wb = Workbook()
        ws = wb.active
        ws.title = self.config.sheet_title

        # Styles
        header_font = Font(bold=True, size=14)
        subheader_font = Font(bold=True, size=11)
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        header_font_white = Font(bold=True, color="FFFFFF")
        border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )
        money_format = self.config.money_format

        row = 1

        # Title
        ws.cell(row=row, column=1, value=f"ACH Entry Report - {report.name or 'ACH file'}")
        ws.cell(row=row, column=1).font = header_font
        ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=len(ENTRY_COLUMNS))
        row += 2

        # Summary
        ws.cell(row=row, column=1, value="File Totals")
        ws.cell(row=row, column=1).font = subheader_font
        row += 1

        summary = [
            ("Batches:", report.batch_count, None),
            ("Entry/Addenda Records:", report.entry_count, None),
            ("Total Debits:", report.debit_total, money_format),
            ("Total Credits:", report.credit_total, money_format),
            ("Entry Hash:", report.entry_hash, None),
        ]
        for label, value, number_format in summary:
            ws.cell(row=row, column=1, value=label)
            cell = ws.cell(row=row, column=2, value=value)
            if number_format:
                cell.number_format = number_format
            row += 1
        row += 1

        # Entries table
        if not report.entries.empty:
            headers = ["Batch", "Batch Number", "SEC", "Txn Code", "Terminal ID",
                       "Amount", "Addenda", "Removed"]
            for col, header in enumerate(headers, 1):
                cell = ws.cell(row=row, column=col, value=header)
                cell.font = header_font_white
                cell.fill = header_fill
                cell.border = border
                cell.alignment = Alignment(horizontal="center")
            row += 1

            amount_col = ENTRY_COLUMNS.index("amount") + 1
            for record in report.entries.itertuples(index=False):
                data = [
                    int(record.batch),
                    record.batch_number,
                    record.sec_code,
                    record.transaction_code,
                    record.term_id,
                    None if pd.isna(record.amount) else float(record.amount),
                    int(record.addenda_count),
                    "Yes" if record.removed else "",
                ]
                for col, value in enumerate(data, 1):
                    cell = ws.cell(row=row, column=col, value=value)
                    cell.border = border
                    if col == amount_col:
                        cell.number_format = money_format
                row += 1
        else:
            ws.cell(row=row, column=1, value="No entries found.")

        # Adjust column widths
        for letter, width in zip("ABCDEFGH", [8, 14, 8, 10, 18, 15, 10, 10]):
            ws.column_dimensions[letter].width = width

        # Save workbook
        output_path = Path(output_path)
        wb.save(output_path)
        return output_path
