"""
Invoice Data Classes.

This module defines the invoice being edited (Invoice), its parties
(AddressBlock) and rows (LineItem), and the partial projection produced
by an import (ImportedInvoice). Dictionaries use the camelCase keys of
the exported template document.

Example:
    >>> item = LineItem(description="Widget A", quantity=3, rate=25.0, tax_percent=10)
    >>> item.line_total
    82.5
"""

import base64
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from invoice_architect.utils.helpers import new_identifier

# (attribute, template key) pairs shared by the full and partial models
ADDRESS_FIELDS: Tuple[Tuple[str, str], ...] = (
    ('name', 'name'),
    ('address', 'address'),
    ('email', 'email'),
    ('phone', 'phone'),
    ('alt_phone', 'altPhone'),
    ('website', 'website'),
    ('tax_id', 'taxId'),
    ('gstin', 'gstin'),
    ('pan', 'pan'),
    ('state', 'state'),
    ('state_code', 'stateCode'),
)

INVOICE_TEXT_FIELDS: Tuple[Tuple[str, str], ...] = (
    ('title', 'title'),
    ('invoice_number', 'invoiceNumber'),
    ('issue_date', 'issueDate'),
    ('due_date', 'dueDate'),
    ('notes', 'notes'),
    ('terms', 'terms'),
    ('place_of_supply', 'placeOfSupply'),
    ('eway_bill', 'ewayBill'),
    ('irn', 'irn'),
    ('payment_summary', 'paymentSummary'),
    ('amount_in_words', 'amountInWords'),
)

CHARGE_FIELDS: Tuple[str, ...] = ('shipping', 'wrapping', 'donation')


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


class GstTreatment(str, Enum):
    """GST supply treatment: CGST+SGST within a state, IGST across states."""
    INTRA_STATE = "intra-state"
    INTER_STATE = "inter-state"

    @classmethod
    def parse(cls, value: Any) -> Optional['GstTreatment']:
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class AddressBlock:
    """A party on the invoice (seller or buyer). Every field is optional."""
    name: str = ""
    address: str = ""
    email: str = ""
    phone: str = ""
    alt_phone: str = ""
    website: str = ""
    tax_id: str = ""
    gstin: str = ""
    pan: str = ""
    state: str = ""
    state_code: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {key: getattr(self, attr) for attr, key in ADDRESS_FIELDS}


@dataclass
class PartialAddressBlock:
    """An AddressBlock where None marks a field the import did not find."""
    name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    alt_phone: Optional[str] = None
    website: Optional[str] = None
    tax_id: Optional[str] = None
    gstin: Optional[str] = None
    pan: Optional[str] = None
    state: Optional[str] = None
    state_code: Optional[str] = None

    def is_empty(self) -> bool:
        return all(not (getattr(self, f.name) or "").strip() for f in fields(self))

    def to_dict(self) -> Dict[str, str]:
        return {
            key: getattr(self, attr)
            for attr, key in ADDRESS_FIELDS
            if getattr(self, attr) is not None
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional['PartialAddressBlock']:
        if not isinstance(data, dict):
            return None
        return cls(**{attr: _to_text(data.get(key)) for attr, key in ADDRESS_FIELDS})


@dataclass
class LineItem:
    """
    One invoice row.

    Attributes:
        id: Opaque unique token; empty until the generator assigns one.
        description: Free-text description.
        quantity: Non-negative quantity.
        rate: Non-negative unit price.
        tax_percent: Non-negative tax percentage.
        hsn_sac: Optional HSN/SAC classification code.
        serial_number: Optional serial number.
    """
    id: str = ""
    description: str = ""
    quantity: float = 0.0
    rate: float = 0.0
    tax_percent: float = 0.0
    hsn_sac: str = ""
    serial_number: str = ""

    @property
    def taxable_value(self) -> float:
        return self.quantity * self.rate

    @property
    def tax_amount(self) -> float:
        return self.taxable_value * self.tax_percent / 100

    @property
    def line_total(self) -> float:
        return self.taxable_value + self.tax_amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'description': self.description,
            'quantity': self.quantity,
            'rate': self.rate,
            'taxPercent': self.tax_percent,
            'hsnSac': self.hsn_sac,
            'serialNumber': self.serial_number,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineItem':
        """Build a line item from template data, keeping a stored id."""
        return cls(
            id=_to_text(data.get('id')) or "",
            description=_to_text(data.get('description')) or "",
            quantity=max(_to_float(data.get('quantity')) or 0.0, 0.0),
            rate=max(_to_float(data.get('rate')) or 0.0, 0.0),
            tax_percent=max(_to_float(data.get('taxPercent')) or 0.0, 0.0),
            hsn_sac=_to_text(data.get('hsnSac')) or "",
            serial_number=_to_text(data.get('serialNumber')) or "",
        )


@dataclass
class Charges:
    """Additive charges applied on top of the line items."""
    shipping: float = 0.0
    wrapping: float = 0.0
    donation: float = 0.0

    @property
    def total(self) -> float:
        return self.shipping + self.wrapping + self.donation

    def to_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in CHARGE_FIELDS}


@dataclass
class PartialCharges:
    shipping: Optional[float] = None
    wrapping: Optional[float] = None
    donation: Optional[float] = None

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in CHARGE_FIELDS)

    def to_dict(self) -> Dict[str, float]:
        return {
            name: getattr(self, name)
            for name in CHARGE_FIELDS
            if getattr(self, name) is not None
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional['PartialCharges']:
        if not isinstance(data, dict):
            return None
        return cls(**{name: _to_float(data.get(name)) for name in CHARGE_FIELDS})


@dataclass
class Invoice:
    """
    The invoice being edited.

    The UI layer owns the live instance and replaces it wholesale after
    each import or template restore.
    """
    title: str = "Invoice"
    invoice_number: str = ""
    issue_date: str = ""
    due_date: str = ""
    currency: str = "USD"
    company: AddressBlock = field(default_factory=AddressBlock)
    client: AddressBlock = field(default_factory=AddressBlock)
    notes: str = ""
    terms: str = ""
    line_items: List[LineItem] = field(default_factory=list)

    # Extended (GST) variant
    gst_treatment: Optional[GstTreatment] = None
    place_of_supply: str = ""
    eway_bill: str = ""
    irn: str = ""
    payment_summary: str = ""
    amount_in_words: str = ""
    charges: Charges = field(default_factory=Charges)

    @property
    def subtotal(self) -> float:
        return sum(item.taxable_value for item in self.line_items)

    @property
    def tax_total(self) -> float:
        return sum(item.tax_amount for item in self.line_items)

    @property
    def charges_total(self) -> float:
        return self.charges.total

    @property
    def grand_total(self) -> float:
        return self.subtotal + self.tax_total + self.charges_total

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {key: getattr(self, attr) for attr, key in INVOICE_TEXT_FIELDS}
        data.update({
            'currency': self.currency,
            'company': self.company.to_dict(),
            'client': self.client.to_dict(),
            'lineItems': [item.to_dict() for item in self.line_items],
            'gstTreatment': self.gst_treatment.value if self.gst_treatment else None,
            'charges': self.charges.to_dict(),
        })
        return data


@dataclass
class ImportedInvoice:
    """
    Best-effort, possibly incomplete projection of an Invoice.

    None means "not found"; Invoice Merge never lets an absent field
    overwrite existing data.
    """
    title: Optional[str] = None
    invoice_number: Optional[str] = None
    issue_date: Optional[str] = None
    due_date: Optional[str] = None
    currency: Optional[str] = None
    company: Optional[PartialAddressBlock] = None
    client: Optional[PartialAddressBlock] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    line_items: Optional[List[LineItem]] = None
    gst_treatment: Optional[GstTreatment] = None
    place_of_supply: Optional[str] = None
    eway_bill: Optional[str] = None
    irn: Optional[str] = None
    payment_summary: Optional[str] = None
    amount_in_words: Optional[str] = None
    charges: Optional[PartialCharges] = None

    @property
    def present_fields(self) -> List[str]:
        """Names of the fields that carry a usable value."""
        present = []
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if isinstance(value, (PartialAddressBlock, PartialCharges)) and value.is_empty():
                continue
            if isinstance(value, list) and not value:
                continue
            present.append(f.name)
        return present

    def is_empty(self) -> bool:
        return not self.present_fields

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            key: getattr(self, attr)
            for attr, key in INVOICE_TEXT_FIELDS
            if getattr(self, attr) is not None
        }
        if self.currency is not None:
            data['currency'] = self.currency
        if self.company is not None:
            data['company'] = self.company.to_dict()
        if self.client is not None:
            data['client'] = self.client.to_dict()
        if self.line_items is not None:
            data['lineItems'] = [item.to_dict() for item in self.line_items]
        if self.gst_treatment is not None:
            data['gstTreatment'] = self.gst_treatment.value
        if self.charges is not None:
            data['charges'] = self.charges.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ImportedInvoice':
        """
        Re-hydrate a stored invoice (e.g. from an exported template).

        Unknown or mistyped values are treated as absent; stored line-item
        ids are kept.
        """
        imported = cls(**{attr: _to_text(data.get(key)) for attr, key in INVOICE_TEXT_FIELDS})
        imported.currency = _to_text(data.get('currency'))
        imported.company = PartialAddressBlock.from_dict(data.get('company'))
        imported.client = PartialAddressBlock.from_dict(data.get('client'))
        imported.gst_treatment = GstTreatment.parse(data.get('gstTreatment'))
        imported.charges = PartialCharges.from_dict(data.get('charges'))

        items = data.get('lineItems')
        if isinstance(items, list):
            imported.line_items = [LineItem.from_dict(item) for item in items if isinstance(item, dict)]
        return imported


@dataclass
class Attachment:
    """The original uploaded file, kept beside the invoice as a data URL."""
    id: str
    name: str
    size: int
    data_url: str

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: str) -> 'Attachment':
        encoded = base64.b64encode(data).decode('ascii')
        return cls(
            id=new_identifier(),
            name=name,
            size=len(data),
            data_url=f"data:{mime_type};base64,{encoded}",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'size': self.size, 'dataUrl': self.data_url}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Attachment':
        return cls(
            id=_to_text(data.get('id')) or new_identifier(),
            name=_to_text(data.get('name')) or "attachment",
            size=int(_to_float(data.get('size')) or 0),
            data_url=_to_text(data.get('dataUrl')) or "",
        )
