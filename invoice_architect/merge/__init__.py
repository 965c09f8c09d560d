"""
Invoice Merge Module for the Invoice Import Subsystem.

    - InvoiceMerger: presence-based merge of imported fields
"""

from .merger import InvoiceMerger, is_present

__all__ = ['InvoiceMerger', 'is_present']
