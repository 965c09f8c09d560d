"""
Excel Exporter Module.

This module writes the line items of a merged invoice to an Excel
workbook with openpyxl, so an import can be checked in a spreadsheet.

Features:
    - Formatted header row, frozen
    - Derived taxable value, tax and line total columns
    - Optional summary sheet (header fields, parties, totals)

Author: ML Engineering Team
"""

from pathlib import Path
from typing import Optional, Union

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config import get_config
from invoice_architect.models.invoice import Invoice
from invoice_architect.utils.exceptions import ExcelExportError
from invoice_architect.utils.helpers import ensure_directory, generate_timestamp
from invoice_architect.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class ExcelExporter:
    """
    Exports an invoice's line items to Excel format.

    Attributes:
        sheet_name: Title of the line-item sheet
        include_summary: Whether to add the summary sheet

    Example:
        >>> exporter = ExcelExporter()
        >>> filepath = exporter.export(invoice, "outputs/items.xlsx")
        >>> print(f"Saved to: {filepath}")
    """

    # Column definitions: (header, LineItem attribute or property)
    COLUMNS = [
        ('Description', 'description'),
        ('HSN/SAC', 'hsn_sac'),
        ('Quantity', 'quantity'),
        ('Rate', 'rate'),
        ('Tax %', 'tax_percent'),
        ('Taxable Value', 'taxable_value'),
        ('Tax', 'tax_amount'),
        ('Total', 'line_total'),
    ]

    NUMBER_FORMAT = '#,##0.00'

    def __init__(self) -> None:
        """Initialize the Excel exporter with configuration."""
        self.sheet_name = get_config("output.excel.sheet_name", "Line Items")
        self.include_summary = get_config("output.excel.include_summary", True)
        logger.debug(f"ExcelExporter initialized (sheet: {self.sheet_name})")

    def export(self, invoice: Invoice, filepath: Optional[Union[str, Path]] = None) -> str:
        """
        Export the invoice's line items to an Excel file.

        Args:
            invoice: Merged invoice to export.
            filepath: Output path. If None, a timestamped name under
                ``outputs/`` is used.

        Returns:
            Path to the created Excel file.

        Raises:
            ExcelExportError: If the workbook cannot be written.
        """
        path = Path(filepath) if filepath else Path("outputs") / self.get_default_filename()
        ensure_directory(path.parent)

        try:
            workbook = openpyxl.Workbook()
            self._create_items_sheet(workbook, invoice)
            if self.include_summary:
                self._create_summary_sheet(workbook, invoice)
            workbook.save(path)
        except (OSError, ValueError) as e:
            logger.error(f"Excel export failed: {e}")
            raise ExcelExportError(str(path), str(e)) from e

        logger.info(f"Excel file saved: {path} ({len(invoice.line_items)} line items)")
        return str(path)

    def _create_items_sheet(self, workbook, invoice: Invoice) -> None:
        sheet = workbook.active
        sheet.title = self.sheet_name

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        thin = Side(style='thin')
        border = Border(left=thin, right=thin, top=thin, bottom=thin)

        for col, (header_name, _) in enumerate(self.COLUMNS, 1):
            cell = sheet.cell(row=1, column=col, value=header_name)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border

        for row_num, item in enumerate(invoice.line_items, 2):
            for col, (_, attr) in enumerate(self.COLUMNS, 1):
                value = getattr(item, attr)
                cell = sheet.cell(row=row_num, column=col, value=value)
                cell.border = border
                if isinstance(value, float):
                    cell.number_format = self.NUMBER_FORMAT

        for col, (header_name, attr) in enumerate(self.COLUMNS, 1):
            widest = max(
                [len(header_name)] + [len(str(getattr(item, attr))) for item in invoice.line_items]
            )
            sheet.column_dimensions[get_column_letter(col)].width = min(widest + 2, 50)

        sheet.freeze_panes = 'A2'

    def _create_summary_sheet(self, workbook, invoice: Invoice) -> None:
        """
        Two-column summary: header fields, parties and totals.

        Args:
            workbook: openpyxl Workbook instance.
            invoice: Invoice being exported.
        """
        sheet = workbook.create_sheet(title="Summary")
        label_font = Font(bold=True)

        rows = [
            ('Title', invoice.title),
            ('Invoice Number', invoice.invoice_number),
            ('Issue Date', invoice.issue_date),
            ('Due Date', invoice.due_date),
            ('Currency', invoice.currency),
            ('Company', invoice.company.name),
            ('Client', invoice.client.name),
            ('Subtotal', invoice.subtotal),
            ('Tax', invoice.tax_total),
            ('Charges', invoice.charges_total),
            ('Grand Total', invoice.grand_total),
        ]
        if invoice.gst_treatment is not None:
            rows.insert(5, ('GST Treatment', invoice.gst_treatment.value))

        for row_num, (label, value) in enumerate(rows, 1):
            sheet.cell(row=row_num, column=1, value=label).font = label_font
            cell = sheet.cell(row=row_num, column=2, value=value)
            if isinstance(value, float):
                cell.number_format = self.NUMBER_FORMAT

        sheet.column_dimensions['A'].width = 18
        sheet.column_dimensions['B'].width = 40

    def get_default_filename(self) -> str:
        """Timestamped default filename."""
        return f"invoice_items_{generate_timestamp()}.xlsx"
