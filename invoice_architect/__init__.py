"""
Invoice Architect - Invoice Import Subsystem.

This package turns an arbitrary uploaded file into invoice fields and
merges them into the invoice being edited. Each module has a single
responsibility.

Modules:
    - container: ZIP central-directory reader and DEFLATE decompressor
    - input_handler: PDF, DOCX, XLSX and text extraction
    - interpreter: Heuristic text -> invoice fields
    - merge: Presence-based merge into the current invoice
    - models: Invoice, line items, attachments, diagnostics, currencies
    - output_handler: JSON templates and line-item Excel export
    - importer: The end-to-end import pipeline

Architecture:
    Upload → Text Extraction → Interpretation → Merge → Template / Excel
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'container',
    'importer',
    'input_handler',
    'interpreter',
    'merge',
    'models',
    'output_handler',
    'utils'
]
