"""
Input Handler Module for the Invoice Import Subsystem.

This module turns an uploaded file into plain text:
    - Detecting the file type from its extension or MIME type
    - Scanning PDF content streams for text-show operators
    - Flattening DOCX paragraphs/tables and XLSX worksheets
    - Passing CSV and plain text through

Supported formats:
    - PDF (text-based; scanned images carry no text)
    - DOCX, XLSX (legacy binary XLS yields no text)
    - CSV and any text/* MIME type

Author: ML Engineering Team
"""

from .handler import InputHandler, UploadedFile
from .ooxml import DocxExtractor, SpreadsheetExtractor
from .pdf_scanner import PDFTextScanner

__all__ = [
    'DocxExtractor',
    'InputHandler',
    'PDFTextScanner',
    'SpreadsheetExtractor',
    'UploadedFile',
]
