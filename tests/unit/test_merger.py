"""Unit tests for presence-based invoice merge."""

import pytest

from invoice_architect.merge import InvoiceMerger, is_present
from invoice_architect.models.invoice import (
    AddressBlock,
    Charges,
    GstTreatment,
    ImportedInvoice,
    Invoice,
    LineItem,
    PartialAddressBlock,
    PartialCharges,
)


@pytest.fixture
def merger() -> InvoiceMerger:
    return InvoiceMerger()


@pytest.fixture
def current() -> Invoice:
    return Invoice(
        title="Invoice",
        invoice_number="OLD-1",
        notes="Existing notes",
        currency="USD",
        company=AddressBlock(name="Acme", email="old@acme.example", phone="123"),
        line_items=[LineItem(id="keep-me", description="Old item", quantity=1, rate=5)],
        charges=Charges(shipping=7.0),
    )


@pytest.mark.parametrize("value,expected", [(None, False), ("", False), ("  \n", False), ("x", True), (0, True)])
def test_is_present(value, expected: bool) -> None:
    """Test the presence rule."""
    assert is_present(value) is expected


def test_present_fields_replace(merger: InvoiceMerger, current: Invoice) -> None:
    """Test that recognized fields overwrite and absent ones are kept."""
    merged = merger.merge(current, ImportedInvoice(invoice_number="INV-9", issue_date="2024-03-15"))

    assert merged.invoice_number == "INV-9"
    assert merged.issue_date == "2024-03-15"
    assert merged.notes == "Existing notes"
    assert merged.title == "Invoice"


def test_blank_strings_never_overwrite(merger: InvoiceMerger, current: Invoice) -> None:
    """Test that an empty or whitespace value counts as absent."""
    merged = merger.merge(current, ImportedInvoice(notes="   ", invoice_number=""))

    assert merged.notes == "Existing notes"
    assert merged.invoice_number == "OLD-1"


def test_current_invoice_is_not_mutated(merger: InvoiceMerger, current: Invoice) -> None:
    """Test that merge returns a copy."""
    imported = ImportedInvoice(
        invoice_number="INV-9",
        company=PartialAddressBlock(name="New Co"),
        line_items=[LineItem(description="New", quantity=1, rate=1)],
    )

    merged = merger.merge(current, imported)

    assert merged is not current
    assert current.invoice_number == "OLD-1"
    assert current.company.name == "Acme"
    assert current.line_items[0].description == "Old item"


@pytest.mark.parametrize("code,expected", [("eur", "EUR"), ("GBP", "GBP"), ("XYZ", "USD"), ("", "USD"), (None, "USD")])
def test_currency_must_be_supported(merger: InvoiceMerger, current: Invoice, code, expected: str) -> None:
    """Test that only supported ISO codes replace the currency."""
    assert merger.merge(current, ImportedInvoice(currency=code)).currency == expected


def test_address_merged_key_by_key(merger: InvoiceMerger, current: Invoice) -> None:
    """Test that a partial party block keeps the other keys."""
    imported = ImportedInvoice(company=PartialAddressBlock(email="billing@acme.example", phone="  "))

    company = merger.merge(current, imported).company

    assert company.name == "Acme"
    assert company.email == "billing@acme.example"
    assert company.phone == "123"


def test_line_items_replace_wholesale_with_fresh_ids(merger: InvoiceMerger, current: Invoice) -> None:
    """Test that imported rows replace the list and get unique ids."""
    imported = ImportedInvoice(line_items=[
        LineItem(description="Widget A", quantity=3, rate=25),
        LineItem(description="Gadget B", quantity=2, rate=40),
    ])

    items = merger.merge(current, imported).line_items

    assert [item.description for item in items] == ["Widget A", "Gadget B"]
    assert all(item.id for item in items)
    assert items[0].id != items[1].id
    assert imported.line_items[0].id == ""


def test_empty_line_item_list_keeps_current(merger: InvoiceMerger, current: Invoice) -> None:
    """Test that an empty list is not a replacement."""
    merged = merger.merge(current, ImportedInvoice(line_items=[]))

    assert [item.id for item in merged.line_items] == ["keep-me"]


def test_restore_keeps_stored_ids(merger: InvoiceMerger) -> None:
    """Test that re-hydrated items keep their ids."""
    stored = ImportedInvoice(line_items=[LineItem(id="abc", description="Stored", quantity=1, rate=2)])

    restored = merger.restore(Invoice(), stored)

    assert restored.line_items[0].id == "abc"


def test_gst_treatment_and_charges(merger: InvoiceMerger, current: Invoice) -> None:
    """Test the extended fields."""
    imported = ImportedInvoice(
        gst_treatment=GstTreatment.INTER_STATE,
        charges=PartialCharges(donation=10.0),
    )

    merged = merger.merge(current, imported)

    assert merged.gst_treatment is GstTreatment.INTER_STATE
    assert merged.charges.shipping == 7.0
    assert merged.charges.donation == 10.0


def test_empty_import_changes_nothing(merger: InvoiceMerger, current: Invoice) -> None:
    """Test that an empty import yields an equal invoice."""
    assert merger.merge(current, ImportedInvoice()) == current
