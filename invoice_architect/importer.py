"""
Import Pipeline Module.

Runs one import end to end:

    UploadedFile -> InputHandler (text) -> TextInterpreter (ImportedInvoice)
                 -> InvoiceMerger (merged Invoice) + Attachment

The pipeline holds no per-import state, so independent files can be
imported concurrently (see InvoiceImporter.import_file_async).

Usage:
    from invoice_architect.importer import InvoiceImporter

    importer = InvoiceImporter()
    outcome = importer.import_path("invoice.pdf", current_invoice)
    if outcome.applied:
        current_invoice = outcome.invoice
    else:
        print(outcome.message)
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from config import get_config
from invoice_architect.input_handler.handler import InputHandler, UploadedFile
from invoice_architect.interpreter.interpreter import TextInterpreter
from invoice_architect.merge.merger import InvoiceMerger
from invoice_architect.models.diagnostics import ExtractionDiagnostic
from invoice_architect.models.invoice import Attachment, ImportedInvoice, Invoice
from invoice_architect.utils.logger import get_logger

logger = get_logger(__name__)

EMPTY_MESSAGE = "We couldn't read any details from that file."
UNINTERPRETABLE_MESSAGE = "The file could not be interpreted automatically."


class ImportStatus(str, Enum):
    APPLIED = "applied"
    EMPTY = "empty"
    UNINTERPRETABLE = "uninterpretable"


@dataclass
class ImportOutcome:
    """
    Result of one import.

    Attributes:
        status: What happened to the file.
        invoice: Merged invoice when applied, else the untouched current one.
        imported: Fields the interpreter recognized (None if no text).
        attachment: The uploaded file as an attachment (applied only).
        diagnostics: Degradations reported by every stage.
        message: User-facing message for EMPTY / UNINTERPRETABLE.
    """
    status: ImportStatus
    invoice: Invoice
    imported: Optional[ImportedInvoice] = None
    attachment: Optional[Attachment] = None
    diagnostics: List[ExtractionDiagnostic] = field(default_factory=list)
    message: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.status is ImportStatus.APPLIED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'message': self.message,
            'importedFields': self.imported.present_fields if self.imported else [],
            'attachment': self.attachment.to_dict() if self.attachment else None,
            'diagnostics': [diagnostic.to_dict() for diagnostic in self.diagnostics],
        }


class InvoiceImporter:
    """
    Orchestrates extraction, interpretation and merge for one file.

    Example:
        >>> importer = InvoiceImporter()
        >>> outcome = importer.import_file(UploadedFile("items.csv", data, "text/csv"), Invoice())
        >>> outcome.status
        <ImportStatus.APPLIED: 'applied'>
    """

    def __init__(
        self,
        input_handler: Optional[InputHandler] = None,
        interpreter: Optional[TextInterpreter] = None,
        merger: Optional[InvoiceMerger] = None
    ) -> None:
        self.input_handler = input_handler or InputHandler()
        self.interpreter = interpreter or TextInterpreter()
        self.merger = merger or InvoiceMerger(self.interpreter.settings.registry)
        self.default_mime_type = get_config("input.default_mime_type", "application/octet-stream")

    def import_file(self, upload: UploadedFile, current: Invoice) -> ImportOutcome:
        """
        Import one uploaded file into the current invoice.

        Args:
            upload: The uploaded file.
            current: Invoice being edited (never mutated).

        Returns:
            ImportOutcome describing the result.

        Raises:
            UnsupportedFileTypeError: If no extractor accepts the file.
        """
        extraction = self.input_handler.extract_text_from_file(upload)
        diagnostics = list(extraction.diagnostics)

        if not extraction.value.strip():
            logger.warning(f"No text extracted from {upload.name}")
            return ImportOutcome(ImportStatus.EMPTY, current, diagnostics=diagnostics, message=EMPTY_MESSAGE)

        imported = self.interpreter.interpret(extraction.value)
        if imported.is_empty():
            logger.warning(f"Nothing recognized in {upload.name}")
            diagnostics.append(ExtractionDiagnostic("interpreter", "No invoice fields recognized"))
            return ImportOutcome(
                ImportStatus.UNINTERPRETABLE, current, imported,
                diagnostics=diagnostics, message=UNINTERPRETABLE_MESSAGE
            )

        merged = self.merger.merge(current, imported)
        attachment = Attachment.from_bytes(upload.name, upload.data, upload.mime_type or self.default_mime_type)
        logger.info(
            f"Imported {upload.name}: {len(imported.present_fields)} field(s), "
            f"{len(merged.line_items)} line item(s)"
        )
        return ImportOutcome(ImportStatus.APPLIED, merged, imported, attachment, diagnostics)

    def import_path(self, filepath: Union[str, Path], current: Invoice) -> ImportOutcome:
        """Read a file from disk and import it."""
        return self.import_file(UploadedFile.from_path(filepath), current)

    async def import_file_async(self, upload: UploadedFile, current: Invoice) -> ImportOutcome:
        """Run import_file in a worker thread."""
        return await asyncio.to_thread(self.import_file, upload, current)
