#!/usr/bin/env python3
"""
Invoice Architect - Import Command Line Entry Point.

Imports a single file (PDF, DOCX, XLSX, CSV or text) into an invoice
template and writes the merged template back out.

Usage:
    Command Line:
        python main.py --input invoice.pdf --output outputs/invoice.json
        python main.py --input items.xlsx --current saved.json --excel outputs/items.xlsx

    Python:
        from main import run_import
        outcome = run_import("invoice.pdf")

Exit codes:
    0   import applied
    1   error (unsupported file, missing file, bad template, export failure)
    2   nothing could be read or interpreted
    130 interrupted

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import project modules
from config import ConfigurationManager, get_config
from invoice_architect.importer import ImportOutcome, InvoiceImporter
from invoice_architect.models.invoice import Invoice
from invoice_architect.output_handler import ExcelExporter, TemplateHandler
from invoice_architect.utils.exceptions import InvoiceImportError
from invoice_architect.utils.helpers import ensure_directory
from invoice_architect.utils.logger import ROOT_LOGGER_NAME, get_logger, setup_logger_from_config

EXIT_APPLIED = 0
EXIT_ERROR = 1
EXIT_NOT_APPLIED = 2
EXIT_INTERRUPTED = 130


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice Architect - import an invoice from a file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Import into a blank invoice:
        python main.py --input invoice.pdf --output outputs/invoice.json

    Import into a saved template and export the line items:
        python main.py --input items.xlsx --current saved.json --excel outputs/items.xlsx
        """
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="File to import (.pdf, .docx, .xlsx, .xls, .csv or text)"
    )

    parser.add_argument(
        "--current",
        type=str,
        default=None,
        help="Template JSON holding the invoice to merge into (default: blank invoice)"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default="outputs/invoice.json",
        help="Where to write the merged template (default: outputs/invoice.json)"
    )

    parser.add_argument(
        "--excel",
        type=str,
        default=None,
        help="Also export the line items to this .xlsx file"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Load configuration and set up logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    config = ConfigurationManager(args.config)
    logger = setup_logger_from_config()

    if args.debug:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.DEBUG)
        for handler in logger.handlers:
            handler.setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.ERROR)

    logger.info("=" * 60)
    logger.info("INVOICE ARCHITECT - IMPORT")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output}")

    return config


def run_import(
    input_path: str,
    current_path: Optional[str] = None,
    output_path: Optional[str] = None,
    excel_path: Optional[str] = None
) -> ImportOutcome:
    """
    Run one import.

    Args:
        input_path: File to import.
        current_path: Optional template JSON with the invoice to merge into.
        output_path: Where to write the merged template (skipped if None).
        excel_path: Where to write the line-item workbook (skipped if None).

    Returns:
        The ImportOutcome.

    Raises:
        InvoiceImportError: On unsupported/missing input, bad template or
            failed export.
    """
    logger = get_logger(__name__)
    templates = TemplateHandler()

    current = Invoice(currency=get_config("merge.default_currency", "USD"))
    logo = None
    attachments = []
    if current_path:
        path = Path(current_path)
        document = templates.load(path.read_text(encoding="utf-8"), source=str(path))
        current = templates.apply(current, document)
        logo = document.logo
        attachments = document.attachments

    outcome = InvoiceImporter().import_path(input_path, current)

    for diagnostic in outcome.diagnostics:
        logger.warning(f"Diagnostic: {diagnostic}")

    if not outcome.applied:
        logger.warning(outcome.message)
        return outcome

    if output_path:
        out = Path(output_path)
        ensure_directory(out.parent)
        out.write_text(
            templates.export(outcome.invoice, logo, attachments + [outcome.attachment]),
            encoding="utf-8"
        )
        logger.info(f"Template written: {out}")

    if excel_path:
        ExcelExporter().export(outcome.invoice, excel_path)

    return outcome


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (see module docstring).
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        outcome = run_import(
            input_path=args.input,
            current_path=args.current,
            output_path=args.output,
            excel_path=args.excel
        )

        if not outcome.applied:
            print(outcome.message, file=sys.stderr)
            return EXIT_NOT_APPLIED

        logger.info("=" * 60)
        logger.info(
            f"Import complete: {len(outcome.imported.present_fields)} field(s), "
            f"grand total {outcome.invoice.grand_total:.2f} {outcome.invoice.currency}"
        )
        logger.info("=" * 60)
        return EXIT_APPLIED

    except InvoiceImportError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR

    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
