"""
Invoice Merge Module.

Folds an ImportedInvoice into the invoice currently being edited. The
current invoice is never mutated; a merged copy is returned.

Rules:
    - A field replaces the current value only when it is present
      (not None and, for strings, not blank)
    - Currency is replaced only by a supported ISO 4217 code
    - Company/client/charges are merged key by key
    - A non-empty line-item list replaces the current list wholesale;
      items without an id get a fresh one

Author: ML Engineering Team
"""

from copy import deepcopy
from typing import Any, Optional

from invoice_architect.models.currencies import DEFAULT_REGISTRY, CurrencyRegistry
from invoice_architect.models.invoice import (
    ADDRESS_FIELDS,
    CHARGE_FIELDS,
    INVOICE_TEXT_FIELDS,
    AddressBlock,
    Charges,
    ImportedInvoice,
    Invoice,
    PartialAddressBlock,
    PartialCharges,
)
from invoice_architect.utils.helpers import new_identifier
from invoice_architect.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


def is_present(value: Any) -> bool:
    """None and blank strings count as absent."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


class InvoiceMerger:
    """
    Applies imported fields onto an Invoice.

    Example:
        >>> merger = InvoiceMerger()
        >>> merged = merger.merge(current, interpreter.interpret(text))
        >>> merged is current
        False
    """

    def __init__(self, registry: Optional[CurrencyRegistry] = None) -> None:
        self.registry = registry or DEFAULT_REGISTRY

    def merge(self, current: Invoice, imported: ImportedInvoice) -> Invoice:
        """
        Merge an import into the current invoice.

        Args:
            current: The invoice being edited (left untouched).
            imported: Fields recognized by the interpreter.

        Returns:
            A new Invoice.
        """
        merged = deepcopy(current)
        replaced = []

        for attr, _ in INVOICE_TEXT_FIELDS:
            value = getattr(imported, attr)
            if is_present(value):
                setattr(merged, attr, value)
                replaced.append(attr)

        currency = self.registry.normalize(imported.currency)
        if currency is not None:
            merged.currency = currency
            replaced.append('currency')
        elif is_present(imported.currency):
            logger.warning(f"Ignoring unsupported currency code: {imported.currency!r}")

        if imported.company is not None:
            merged.company = self._merge_address(merged.company, imported.company)
        if imported.client is not None:
            merged.client = self._merge_address(merged.client, imported.client)

        if imported.gst_treatment is not None:
            merged.gst_treatment = imported.gst_treatment
            replaced.append('gst_treatment')

        if imported.charges is not None:
            merged.charges = self._merge_charges(merged.charges, imported.charges)

        if imported.line_items:
            merged.line_items = [deepcopy(item) for item in imported.line_items]
            for item in merged.line_items:
                if not item.id:
                    item.id = new_identifier()
            replaced.append('line_items')

        logger.debug(f"Merged fields: {replaced}")
        return merged

    def restore(self, current: Invoice, stored: ImportedInvoice) -> Invoice:
        """
        Apply a re-hydrated template invoice.

        Same presence rules as merge(); stored line-item ids are kept.
        """
        return self.merge(current, stored)

    @staticmethod
    def _merge_address(current: AddressBlock, partial: PartialAddressBlock) -> AddressBlock:
        merged = deepcopy(current)
        for attr, _ in ADDRESS_FIELDS:
            value = getattr(partial, attr)
            if is_present(value):
                setattr(merged, attr, value)
        return merged

    @staticmethod
    def _merge_charges(current: Charges, partial: PartialCharges) -> Charges:
        merged = deepcopy(current)
        for name in CHARGE_FIELDS:
            value = getattr(partial, name)
            if value is not None and value >= 0:
                setattr(merged, name, value)
        return merged
