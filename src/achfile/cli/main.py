#!/usr/bin/env python3
"""
achfile CLI - inspect, validate and rewrite ACH (NACHA) files.

Usage:
    achfile info payroll.ach
    achfile validate payroll.ach
    achfile rewrite payroll.ach fixed.ach --remove EMP0042 --crlf
    achfile report payroll.ach entries.xlsx
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from achfile.core.config import CONFIG_ENV_VAR, Settings, load_settings
from achfile.core.exceptions import ACHError, FieldParseError
from achfile.parsers.nacha.file import ACHFile
from achfile.parsers.validators import ACHFileValidator
from achfile.reports.entry_report import EntryReport

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, debug: bool = False):
    """Configure logging."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def get_settings(config_path: Optional[str]) -> Settings:
    """Load settings from --config, then $ACHFILE_CONFIG, then defaults."""
    path = config_path or os.environ.get(CONFIG_ENV_VAR)
    return load_settings(Path(path) if path else None)


# ============================================================================
# Command Handlers
# ============================================================================

def cmd_info(args, settings: Settings):
    """Handle info command - print header fields and control totals."""
    ach_file = ACHFile.load_file(args.file)

    try:
        created = ach_file.file_creation_timestamp().strftime("%Y-%m-%d %H:%M")
    except FieldParseError:
        created = f"{ach_file.file_creation_date()} {ach_file.file_creation_time()} (invalid)"

    print(f"\nFile: {ach_file.name}")
    print(f"  Created:          {created}")
    print(f"  File ID modifier: {ach_file.file_id_modifier()}")
    print(f"  Batches:          {ach_file.batch_count()}")
    print(f"  Entry/addenda:    {ach_file.entry_count()}")
    print(f"  Blocks:           {ach_file.block_count()}")
    print(f"  Total debits:     {ach_file.debit_total():,.2f}")
    print(f"  Total credits:    {ach_file.credit_total():,.2f}")
    print(f"  Entry hash:       {ach_file.entry_hash()}")

    if ach_file.batches:
        print("\nBatches:")
        for index, batch in enumerate(ach_file.batches, start=1):
            print(f"  [{index}] {batch.sec_code()} #{batch.number()} - {len(batch.entries)} entries")

    return 0


def cmd_validate(args, settings: Settings):
    """Handle validate command - structural and control-total checks."""
    validator = ACHFileValidator(check_sec_codes=not args.skip_sec_codes)
    errors = validator.validate(Path(args.file))

    if not errors:
        print(f"{args.file}: OK")
        return 0

    print(f"{args.file}: {len(errors)} problem(s)")
    for error in errors:
        print(f"  - {error}")
    return 1


def cmd_rewrite(args, settings: Settings):
    """Handle rewrite command - remove entries and write with fresh totals."""
    ach_file = ACHFile.load_file(args.file)
    ach_file.apply_config(settings.writer)
    if args.crlf:
        ach_file.enable_crlf()
    if args.no_renumber:
        ach_file.disable_batch_renumber()

    if args.remove:
        targets = set(args.remove)
        removed = ach_file.remove_entries(lambda entry: entry.term_id() in targets)
        print(f"Removed {removed} entries")

    records = ach_file.write_file(args.output)
    print(f"Wrote {records} records to {args.output}")
    return 0


def cmd_report(args, settings: Settings):
    """Handle report command - export the entry listing."""
    ach_file = ACHFile.load_file(args.file)
    report = EntryReport(settings.reports)
    output = report.export(report.generate(ach_file), Path(args.output))
    print(f"Report written to {output}")
    return 0


# ============================================================================
# Main
# ============================================================================

def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog='achfile',
        description='achfile - ACH (NACHA) file toolkit',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  achfile info payroll.ach
  achfile validate payroll.ach
  achfile rewrite payroll.ach fixed.ach --remove EMP0042
  achfile report payroll.ach entries.xlsx
        """
    )

    # Global arguments
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    parser.add_argument('--debug', action='store_true', help='Debug output')
    parser.add_argument('--config', '-c', help=f'Settings file (default: ${CONFIG_ENV_VAR})')

    # Subcommands
    subparsers = parser.add_subparsers(dest='command', help='Command')

    info_parser = subparsers.add_parser('info', help='Show header fields and control totals')
    info_parser.add_argument('file', help='ACH file')

    validate_parser = subparsers.add_parser('validate', help='Check structure and control totals')
    validate_parser.add_argument('file', help='ACH file')
    validate_parser.add_argument('--skip-sec-codes', action='store_true',
                                 help='Do not report unknown SEC codes')

    rewrite_parser = subparsers.add_parser('rewrite', help='Write the file back with fresh totals')
    rewrite_parser.add_argument('file', help='ACH file')
    rewrite_parser.add_argument('output', help='Output file')
    rewrite_parser.add_argument('--remove', '-r', action='append', metavar='ID',
                                help='Remove entries with this terminal/identification number')
    rewrite_parser.add_argument('--crlf', action='store_true',
                                help='Terminate records with CRLF')
    rewrite_parser.add_argument('--no-renumber', action='store_true',
                                help='Keep original batch numbers')

    report_parser = subparsers.add_parser('report', help='Export the entries (.xlsx or .csv)')
    report_parser.add_argument('file', help='ACH file')
    report_parser.add_argument('output', help='Output file')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Setup
    setup_logging(args.verbose, args.debug)
    settings = get_settings(args.config)

    handlers = {
        'info': cmd_info,
        'validate': cmd_validate,
        'rewrite': cmd_rewrite,
        'report': cmd_report,
    }

    # Route to command handler
    try:
        return handlers[args.command](args, settings)
    except ACHError as e:
        print(f"\nError: {e}")
        logger.debug("ACH error", exc_info=True)
        return 1
    except OSError as e:
        print(f"\nI/O error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled")
        return 130


if __name__ == "__main__":
    sys.exit(main())
