"""Unit tests for file-type dispatch in the InputHandler."""

from pathlib import Path

import pytest

from invoice_architect.input_handler import InputHandler, UploadedFile
from invoice_architect.utils.exceptions import (
    InputError,
    InputFileNotFoundError,
    UnsupportedFileTypeError,
)


@pytest.fixture
def handler() -> InputHandler:
    return InputHandler()


@pytest.mark.parametrize(
    "name,kind",
    [
        ("invoice.pdf", "pdf"),
        ("INVOICE.PDF", "pdf"),
        ("letter.docx", "docx"),
        ("items.xlsx", "spreadsheet"),
        ("legacy.xls", "spreadsheet"),
        ("items.csv", "text"),
    ],
)
def test_detect_kind_by_extension(handler: InputHandler, name: str, kind: str) -> None:
    """Test that the extension selects the extractor."""
    assert handler.detect_kind(UploadedFile(name, b"")) == kind


def test_text_mime_type_selects_passthrough(handler: InputHandler) -> None:
    """Test that any text/* file without a known extension is read as text."""
    upload = UploadedFile("notes", b"Invoice Number: A-1", "text/plain")

    assert handler.extract_text_from_file(upload).value == "Invoice Number: A-1"


def test_csv_byte_order_mark_is_stripped(handler: InputHandler) -> None:
    """Test CSV passthrough with a UTF-8 BOM."""
    upload = UploadedFile("items.csv", "\ufeffDescription,Qty\nWidget A,3\n".encode("utf-8"), "text/csv")

    assert handler.extract_text_from_file(upload).value == "Description,Qty\nWidget A,3\n"


def test_invalid_utf8_is_replaced(handler: InputHandler) -> None:
    """Test that undecodable bytes do not raise."""
    outcome = handler.extract_text_from_file(UploadedFile("a.csv", b"caf\xe9"))

    assert outcome.value == "caf\ufffd"


def test_unsupported_file_type(handler: InputHandler) -> None:
    """Test that an image is rejected with the user-facing message."""
    with pytest.raises(UnsupportedFileTypeError) as exc_info:
        handler.extract_text_from_file(UploadedFile("photo.png", b"\x89PNG", "image/png"))

    assert exc_info.value.message == "Unsupported file type."
    assert exc_info.value.details["filename"] == "photo.png"
    assert ".pdf" in exc_info.value.details["supported_types"]


def test_docx_dispatch(handler: InputHandler, make_docx) -> None:
    """Test that a .docx upload reaches the DOCX extractor."""
    data = make_docx("<w:p><w:r><w:t>Invoice Number: D-9</w:t></w:r></w:p>")

    assert handler.extract_text_from_file(UploadedFile("d.docx", data)).value == "Invoice Number: D-9"


def test_pdf_dispatch(handler: InputHandler, make_pdf) -> None:
    """Test that a .pdf upload reaches the PDF scanner."""
    data = make_pdf(b"BT (Invoice Number: P-1) Tj ET")

    assert handler.extract_text_from_file(UploadedFile("p.pdf", data)).value == "Invoice Number: P-1"


def test_extensions_from_config(use_config) -> None:
    """Test that the extension table comes from settings."""
    use_config("input:\n  extensions:\n    .txt: text\n")
    handler = InputHandler()

    assert handler.detect_kind(UploadedFile("readme.TXT", b"")) == "text"
    with pytest.raises(UnsupportedFileTypeError):
        handler.detect_kind(UploadedFile("invoice.pdf", b"", "application/pdf"))


def test_from_path_guesses_mime_type(tmp_path: Path) -> None:
    """Test reading an upload from disk."""
    path = tmp_path / "invoice.pdf"
    path.write_bytes(b"%PDF-1.4")

    upload = UploadedFile.from_path(path)

    assert upload.name == "invoice.pdf"
    assert upload.data == b"%PDF-1.4"
    assert upload.mime_type == "application/pdf"
    assert "invoice.pdf" in repr(upload)


def test_from_path_missing_file(tmp_path: Path) -> None:
    """Test that a missing path raises InputFileNotFoundError."""
    with pytest.raises(InputFileNotFoundError):
        UploadedFile.from_path(tmp_path / "missing.pdf")


def test_from_path_directory(tmp_path: Path) -> None:
    """Test that a directory is not accepted as an upload."""
    with pytest.raises(InputError):
        UploadedFile.from_path(tmp_path)
