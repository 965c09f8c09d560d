"""
Main Input Handler Module.

This module provides the InputHandler class, the single entry point that
turns an uploaded file into plain text. It sniffs the file extension and
MIME type and delegates to the matching extractor.

Usage:
    from invoice_architect.input_handler import InputHandler, UploadedFile

    handler = InputHandler()
    outcome = handler.extract_text_from_file(UploadedFile.from_path("invoice.pdf"))
    print(outcome.value)

Classes:
    UploadedFile: The user-selected file (name, bytes, MIME type)
    InputHandler: Extension/MIME dispatch to the text extractors
"""

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from config import get_config
from invoice_architect.container.inflater import Decompressor
from invoice_architect.container.zip_reader import ContainerReader
from invoice_architect.models.diagnostics import ExtractionOutcome
from invoice_architect.utils.exceptions import InputError, InputFileNotFoundError, UnsupportedFileTypeError
from invoice_architect.utils.helpers import format_file_size, get_file_extension
from invoice_architect.utils.logger import get_logger

from .ooxml import DocxExtractor, SpreadsheetExtractor
from .pdf_scanner import PDFTextScanner

# Initialize module logger
logger = get_logger(__name__)

DEFAULT_EXTENSIONS = {
    '.pdf': 'pdf',
    '.docx': 'docx',
    '.xlsx': 'spreadsheet',
    '.xls': 'spreadsheet',
    '.csv': 'text',
}


@dataclass
class UploadedFile:
    """
    A single user-selected file.

    Attributes:
        name: Original filename (used for extension sniffing).
        data: Raw file bytes.
        mime_type: MIME type reported by the browser or guessed from the name.
    """
    name: str
    data: bytes
    mime_type: Optional[str] = None

    @property
    def extension(self) -> str:
        return get_file_extension(self.name)

    @classmethod
    def from_path(cls, filepath: Union[str, Path]) -> 'UploadedFile':
        """
        Read a file from disk.

        Raises:
            InputFileNotFoundError: If the path does not exist.
            InputError: If the path is not a regular file.
        """
        path = Path(filepath)
        if not path.exists():
            raise InputFileNotFoundError(str(filepath))
        if not path.is_file():
            raise InputError(f"Path is not a file: {filepath}")

        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(name=path.name, data=path.read_bytes(), mime_type=mime_type)

    def __repr__(self) -> str:
        return (
            f"UploadedFile(name='{self.name}', "
            f"size={format_file_size(len(self.data))}, "
            f"mime_type={self.mime_type!r})"
        )


class InputHandler:
    """
    Dispatches uploaded files to the matching text extractor.

    Attributes:
        extensions: Extension -> extractor kind ('pdf', 'docx', 'spreadsheet', 'text').
        text_mime_prefix: MIME prefix that selects plain-text passthrough.

    Example:
        >>> handler = InputHandler()
        >>> outcome = handler.extract_text_from_file(upload)
        >>> if outcome.degraded:
        ...     for diagnostic in outcome.diagnostics:
        ...         print(diagnostic)
    """

    def __init__(self, decompressor: Optional[Decompressor] = None) -> None:
        """
        Initialize the InputHandler.

        Args:
            decompressor: Optional shared Decompressor; built from
                configuration when omitted.
        """
        self.extensions: Dict[str, str] = {
            ext.lower(): kind
            for ext, kind in get_config("input.extensions", DEFAULT_EXTENSIONS).items()
        }
        self.text_mime_prefix = get_config("input.text_mime_prefix", "text/")

        decompressor = decompressor or Decompressor()
        reader = ContainerReader(decompressor)
        self.pdf_scanner = PDFTextScanner(decompressor)
        self.docx_extractor = DocxExtractor(reader)
        self.spreadsheet_extractor = SpreadsheetExtractor(reader)

        self._extractors: Dict[str, Callable[[bytes], ExtractionOutcome[str]]] = {
            'pdf': self.pdf_scanner.scan,
            'docx': self.docx_extractor.extract,
            'spreadsheet': self.spreadsheet_extractor.extract,
            'text': self.decode_text,
        }

        logger.info(f"InputHandler initialized with extensions: {sorted(self.extensions)}")

    def detect_kind(self, upload: UploadedFile) -> str:
        """
        Select the extractor for a file.

        The extension wins; otherwise a ``text/*`` MIME type selects
        plain-text passthrough.

        Raises:
            UnsupportedFileTypeError: If no extractor accepts the file.
        """
        kind = self.extensions.get(upload.extension)
        if kind is None and upload.mime_type and upload.mime_type.startswith(self.text_mime_prefix):
            kind = 'text'
        if kind not in self._extractors:
            raise UnsupportedFileTypeError(
                upload.name,
                upload.mime_type,
                sorted(self.extensions)
            )
        logger.debug(f"Detected {kind} file: {upload.name}")
        return kind

    def extract_text_from_file(self, upload: UploadedFile) -> ExtractionOutcome[str]:
        """
        Extract plain text from an uploaded file.

        Args:
            upload: The uploaded file.

        Returns:
            Outcome with the extracted text and any diagnostics.

        Raises:
            UnsupportedFileTypeError: For files no extractor handles.
        """
        kind = self.detect_kind(upload)
        logger.info(f"Extracting text from {upload.name} ({kind}, {format_file_size(len(upload.data))})")

        outcome = self._extractors[kind](upload.data)

        for diagnostic in outcome.diagnostics:
            logger.warning(f"{upload.name}: {diagnostic}")
        logger.info(f"Extracted {len(outcome.value)} chars from {upload.name}")
        return outcome

    @staticmethod
    def decode_text(data: bytes) -> ExtractionOutcome[str]:
        """Plain-text passthrough (UTF-8, BOM stripped, bad bytes replaced)."""
        return ExtractionOutcome(data.decode("utf-8-sig", errors="replace"))
