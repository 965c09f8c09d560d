"""Unit tests for the end-to-end import pipeline."""

import asyncio
import base64
import io
from pathlib import Path

import openpyxl
import pytest

from invoice_architect.importer import (
    EMPTY_MESSAGE,
    UNINTERPRETABLE_MESSAGE,
    ImportStatus,
    InvoiceImporter,
)
from invoice_architect.input_handler import UploadedFile
from invoice_architect.models.invoice import Invoice, LineItem
from invoice_architect.utils.exceptions import UnsupportedFileTypeError


@pytest.fixture
def importer() -> InvoiceImporter:
    return InvoiceImporter()


@pytest.fixture
def current() -> Invoice:
    return Invoice(notes="Draft", line_items=[LineItem(id="old", description="Old", quantity=1, rate=1)])


def test_text_import_is_applied(importer: InvoiceImporter, current: Invoice, sample_text: str) -> None:
    """Test a CSV/text upload applied to the current invoice."""
    data = sample_text.encode("utf-8")

    outcome = importer.import_file(UploadedFile("invoice.csv", data, "text/csv"), current)

    assert outcome.status is ImportStatus.APPLIED
    assert outcome.applied
    assert outcome.message is None
    assert outcome.invoice.invoice_number == "INV-2024-001"
    assert outcome.invoice.currency == "INR"
    assert outcome.invoice.notes == "Thank you for your business."
    assert [item.description for item in outcome.invoice.line_items] == ["Widget A", "Gadget B"]
    assert outcome.invoice.subtotal == pytest.approx(155.0)

    attachment = outcome.attachment
    assert attachment.name == "invoice.csv"
    assert attachment.size == len(data)
    assert attachment.data_url == "data:text/csv;base64," + base64.b64encode(data).decode("ascii")


def test_current_invoice_untouched(importer: InvoiceImporter, current: Invoice, sample_text: str) -> None:
    """Test that importing never mutates the invoice being edited."""
    importer.import_file(UploadedFile("invoice.csv", sample_text.encode("utf-8")), current)

    assert current.notes == "Draft"
    assert [item.id for item in current.line_items] == ["old"]


def test_pdf_import(importer: InvoiceImporter, current: Invoice, sample_text: str, make_pdf) -> None:
    """Test the full path from a compressed PDF content stream."""
    shows = b" ".join(b"(" + line.encode("latin-1") + b") Tj 0 -14 Td" for line in sample_text.splitlines())
    data = make_pdf(b"BT /F1 10 Tf 72 760 Td " + shows + b" ET")

    outcome = importer.import_file(UploadedFile("invoice.pdf", data, "application/pdf"), current)

    assert outcome.applied
    assert outcome.invoice.client.name == "Globex Traders"
    assert outcome.invoice.issue_date == "2024-03-15"
    assert len(outcome.invoice.line_items) == 2
    assert outcome.diagnostics == []


def test_docx_import(importer: InvoiceImporter, current: Invoice, sample_text: str, make_docx) -> None:
    """Test the full path from a DOCX body."""
    body = "".join(f"<w:p><w:r><w:t>{line}</w:t></w:r></w:p>" for line in sample_text.splitlines())

    outcome = importer.import_file(UploadedFile("invoice.docx", make_docx(body)), current)

    assert outcome.applied
    assert outcome.invoice.company.gstin == "29ABCDE1234F1Z5"
    assert outcome.attachment.data_url.startswith("data:application/octet-stream;base64,")


def test_xlsx_import(importer: InvoiceImporter, current: Invoice) -> None:
    """Test line items read from a workbook."""
    workbook = openpyxl.Workbook()
    for row in (["Description", "Qty", "Rate"], ["Widget A", 3, 25], ["Gadget B", 2, 40]):
        workbook.active.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)

    outcome = importer.import_file(UploadedFile("items.xlsx", buffer.getvalue()), current)

    assert outcome.applied
    assert [(i.description, i.quantity, i.rate) for i in outcome.invoice.line_items] == [
        ("Widget A", 3.0, 25.0),
        ("Gadget B", 2.0, 40.0),
    ]
    assert outcome.invoice.notes == "Draft"


def test_empty_file(importer: InvoiceImporter, current: Invoice) -> None:
    """Test that a file without text is not applied."""
    outcome = importer.import_file(UploadedFile("empty.csv", b""), current)

    assert outcome.status is ImportStatus.EMPTY
    assert outcome.message == EMPTY_MESSAGE
    assert outcome.invoice is current
    assert outcome.attachment is None


def test_uninterpretable_file(importer: InvoiceImporter, current: Invoice) -> None:
    """Test that text without invoice cues is reported."""
    outcome = importer.import_file(UploadedFile("note.csv", b"hello world"), current)

    assert outcome.status is ImportStatus.UNINTERPRETABLE
    assert outcome.message == UNINTERPRETABLE_MESSAGE
    assert outcome.invoice is current
    assert outcome.diagnostics[-1].stage == "interpreter"
    assert outcome.to_dict()["status"] == "uninterpretable"


def test_corrupt_docx_is_empty_with_diagnostics(importer: InvoiceImporter, current: Invoice) -> None:
    """Test that a broken container degrades to EMPTY, not an exception."""
    outcome = importer.import_file(UploadedFile("broken.docx", b"PK\x03\x04 truncated"), current)

    assert outcome.status is ImportStatus.EMPTY
    assert outcome.diagnostics


def test_unsupported_file_raises(importer: InvoiceImporter, current: Invoice) -> None:
    """Test that unsupported files surface as an exception."""
    with pytest.raises(UnsupportedFileTypeError):
        importer.import_file(UploadedFile("photo.png", b"\x89PNG", "image/png"), current)


def test_import_path(importer: InvoiceImporter, current: Invoice, sample_text: str, tmp_path: Path) -> None:
    """Test importing straight from disk."""
    path = tmp_path / "invoice.csv"
    path.write_text(sample_text, encoding="utf-8")

    outcome = importer.import_path(path, current)

    assert outcome.applied
    assert outcome.attachment.data_url.startswith("data:text/csv;base64,")


def test_concurrent_async_imports(importer: InvoiceImporter, current: Invoice, sample_text: str) -> None:
    """Test that independent files can be imported concurrently."""
    uploads = [
        UploadedFile("a.csv", sample_text.encode("utf-8")),
        UploadedFile("b.csv", b"Invoice Number: B-2"),
    ]

    async def run_all():
        return await asyncio.gather(*(importer.import_file_async(u, current) for u in uploads))

    first, second = asyncio.run(run_all())

    assert first.invoice.invoice_number == "INV-2024-001"
    assert second.invoice.invoice_number == "B-2"
    assert second.invoice.line_items[0].id == "old"
