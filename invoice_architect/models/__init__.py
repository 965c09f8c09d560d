"""
Data Model for the Invoice Import Subsystem.

    - Invoice, AddressBlock, LineItem, Charges: the invoice being edited
    - ImportedInvoice, PartialAddressBlock, PartialCharges: import output
    - Attachment: the uploaded file kept beside the invoice
    - ExtractionDiagnostic, ExtractionOutcome: per-stage results
    - CurrencyRegistry: the supported ISO 4217 codes
"""

from .currencies import CurrencyRegistry, DEFAULT_REGISTRY
from .diagnostics import ExtractionDiagnostic, ExtractionOutcome
from .invoice import (
    AddressBlock,
    Attachment,
    Charges,
    GstTreatment,
    ImportedInvoice,
    Invoice,
    LineItem,
    PartialAddressBlock,
    PartialCharges,
)

__all__ = [
    'AddressBlock',
    'Attachment',
    'Charges',
    'CurrencyRegistry',
    'DEFAULT_REGISTRY',
    'ExtractionDiagnostic',
    'ExtractionOutcome',
    'GstTreatment',
    'ImportedInvoice',
    'Invoice',
    'LineItem',
    'PartialAddressBlock',
    'PartialCharges',
]
