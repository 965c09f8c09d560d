"""Unit tests for the command line entry point."""

import json
from pathlib import Path

import openpyxl
import pytest

from invoice_architect.importer import EMPTY_MESSAGE
from invoice_architect.models.invoice import Attachment, Invoice
from invoice_architect.output_handler import TemplateHandler
from main import EXIT_APPLIED, EXIT_ERROR, EXIT_NOT_APPLIED, main, parse_arguments


@pytest.fixture
def invoice_csv(tmp_path: Path, sample_text: str) -> Path:
    path = tmp_path / "invoice.csv"
    path.write_text(sample_text, encoding="utf-8")
    return path


def test_parse_arguments_defaults() -> None:
    """Test the default output path."""
    args = parse_arguments(["--input", "invoice.pdf"])

    assert args.input == "invoice.pdf"
    assert args.output == "outputs/invoice.json"
    assert args.current is None
    assert args.excel is None


def test_import_writes_template_and_workbook(tmp_path: Path, invoice_csv: Path) -> None:
    """Test a successful import."""
    output = tmp_path / "out" / "invoice.json"
    excel = tmp_path / "out" / "items.xlsx"

    code = main(["-i", str(invoice_csv), "-o", str(output), "--excel", str(excel), "--quiet"])

    assert code == EXIT_APPLIED
    document = json.loads(output.read_text(encoding="utf-8"))
    assert document["invoice"]["invoiceNumber"] == "INV-2024-001"
    assert len(document["invoice"]["lineItems"]) == 2
    assert [a["name"] for a in document["attachments"]] == ["invoice.csv"]
    assert openpyxl.load_workbook(excel)["Line Items"]["A2"].value == "Widget A"


def test_import_into_saved_template(tmp_path: Path, invoice_csv: Path) -> None:
    """Test merging into a saved template keeps its data and attachments."""
    saved = tmp_path / "saved.json"
    earlier = Attachment.from_bytes("earlier.pdf", b"%PDF", "application/pdf")
    saved.write_text(
        TemplateHandler().export(Invoice(terms="Net 15", invoice_number="OLD"), "data:image/png;base64,AA", [earlier]),
        encoding="utf-8",
    )
    output = tmp_path / "merged.json"

    code = main(["-i", str(invoice_csv), "--current", str(saved), "-o", str(output), "-q"])

    assert code == EXIT_APPLIED
    document = json.loads(output.read_text(encoding="utf-8"))
    assert document["invoice"]["invoiceNumber"] == "INV-2024-001"
    assert document["invoice"]["notes"] == "Thank you for your business."
    assert document["logo"] == "data:image/png;base64,AA"
    assert [a["name"] for a in document["attachments"]] == ["earlier.pdf", "invoice.csv"]


def test_empty_file_is_not_applied(tmp_path: Path, capsys) -> None:
    """Test the exit code and message for a file with no text."""
    empty = tmp_path / "empty.csv"
    empty.write_bytes(b"")
    output = tmp_path / "invoice.json"

    code = main(["-i", str(empty), "-o", str(output), "-q"])

    assert code == EXIT_NOT_APPLIED
    assert EMPTY_MESSAGE in capsys.readouterr().err
    assert not output.exists()


def test_unsupported_file(tmp_path: Path, capsys) -> None:
    """Test that an unsupported file is an error."""
    image = tmp_path / "photo.png"
    image.write_bytes(b"\x89PNG")

    assert main(["-i", str(image), "-q"]) == EXIT_ERROR
    assert "Unsupported file type." in capsys.readouterr().err


def test_missing_file(tmp_path: Path) -> None:
    """Test that a missing input is an error."""
    assert main(["-i", str(tmp_path / "missing.pdf"), "-q"]) == EXIT_ERROR


def test_bad_template(tmp_path: Path, invoice_csv: Path) -> None:
    """Test that an unreadable --current template is an error."""
    saved = tmp_path / "saved.json"
    saved.write_text("{broken", encoding="utf-8")

    assert main(["-i", str(invoice_csv), "--current", str(saved), "-q"]) == EXIT_ERROR
