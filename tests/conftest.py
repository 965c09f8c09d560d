"""Shared fixtures: configuration reset and in-memory document builders."""

import io
import zipfile
import zlib
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Dict, Optional

import pytest

from config import ConfigurationManager

WORD_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
SHEET_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"

SAMPLE_INVOICE_TEXT = """TAX INVOICE
Invoice Number: INV-2024-001
Issue Date: 15/03/2024
Due Date: 2024-04-14
Currency: INR
From:
Acme Supplies Pvt Ltd
Industrial Area Phase Two
Bengaluru
GSTIN: 29ABCDE1234F1Z5
PAN: ABCDE1234F
State: Karnataka, State Code: 29
Email: billing@acme.example
Bill To:
Globex Traders
Market Road
Chennai
GSTIN: 33PQRSX6789K1Z2
Description   Qty   Rate   Tax
Widget A   3   25.00   10%
Gadget B   2   40.00   18%
Subtotal 155.00
CGST 9.00
SGST 9.00
Total 190.00
Notes: Thank you for your business.
Terms: Payment within 30 days.
"""


@pytest.fixture(autouse=True)
def reset_config() -> Generator[None, None, None]:
    """Start every test from the bundled settings.yaml."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()


@pytest.fixture
def use_config(tmp_path: Path) -> Callable[[str], ConfigurationManager]:
    """Load a custom YAML configuration for the rest of the test."""

    def _use(yaml_text: str) -> ConfigurationManager:
        path = tmp_path / "settings.yaml"
        path.write_text(yaml_text, encoding="utf-8")
        ConfigurationManager.reset()
        return ConfigurationManager(str(path))

    return _use


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_INVOICE_TEXT


@pytest.fixture
def make_zip() -> Callable[..., bytes]:
    """Build a ZIP archive in memory from {name: bytes}."""

    def _make(
        files: Dict[str, bytes],
        compression: int = zipfile.ZIP_DEFLATED,
        comment: bytes = b""
    ) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=compression) as archive:
            for name, data in files.items():
                archive.writestr(name, data)
            archive.comment = comment
        return buffer.getvalue()

    return _make


@pytest.fixture
def make_docx(make_zip: Callable[..., bytes]) -> Callable[[str], bytes]:
    """Build a DOCX from the inner XML of <w:body>."""

    def _make(body_xml: str) -> bytes:
        document = (
            '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
            f'<w:document xmlns:w="{WORD_NS}"><w:body>{body_xml}</w:body></w:document>'
        )
        return make_zip({
            "[Content_Types].xml": b"<Types/>",
            "word/document.xml": document.encode("utf-8"),
        })

    return _make


@pytest.fixture
def make_xlsx(make_zip: Callable[..., bytes]) -> Callable[..., bytes]:
    """Build a minimal XLSX from raw <sheetData> XML and optional shared strings."""

    def _make(
        sheet_data: str,
        shared_strings: Optional[list] = None,
        sheet_name: str = "xl/worksheets/sheet1.xml"
    ) -> bytes:
        files = {
            sheet_name: (
                f'<worksheet xmlns="{SHEET_NS}"><sheetData>{sheet_data}</sheetData></worksheet>'
            ).encode("utf-8"),
        }
        if shared_strings is not None:
            items = "".join(f"<si><t>{text}</t></si>" for text in shared_strings)
            files["xl/sharedStrings.xml"] = f'<sst xmlns="{SHEET_NS}">{items}</sst>'.encode("utf-8")
        return make_zip(files)

    return _make


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Build a one-stream PDF around a content stream."""

    def _make(content: bytes, filters: Optional[str] = "/FlateDecode", extra: str = "") -> bytes:
        payload = zlib.compress(content) if filters and "FlateDecode" in filters else content
        dictionary = f"<< /Length {len(payload)}"
        if filters:
            dictionary += f" /Filter {filters}"
        dictionary += f"{extra} >>"
        return (
            b"%PDF-1.4\n"
            b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
            b"4 0 obj\n" + dictionary.encode("latin-1") + b"\nstream\n"
            + payload
            + b"\nendstream\nendobj\n"
            b"trailer\n<< /Root 1 0 R >>\n%%EOF\n"
        )

    return _make
