"""Unit tests for the ZIP container reader."""

import struct
import zipfile

import pytest

from invoice_architect.container.zip_reader import (
    DEFLATED,
    LOCAL_HEADER_SIGNATURE,
    STORED,
    ContainerReader,
)

FILES = {
    "word/document.xml": b"<doc>" + b"<p>Widget A 3 25.00</p>" * 50 + b"</doc>",
    "docProps/app.xml": b"<app/>",
    "xl/worksheets/sheet7.xml": b"<worksheet/>",
}


@pytest.fixture
def reader() -> ContainerReader:
    return ContainerReader()


def test_entry_count_matches_central_directory(reader: ContainerReader, make_zip) -> None:
    """Test that every declared entry is returned."""
    data = make_zip(FILES)
    declared = struct.unpack_from("<H", data, reader.find_end_of_central_directory(data) + 10)[0]

    entries = reader.read_entries(data).value

    assert len(entries) == declared == len(FILES)
    assert list(entries) == list(FILES)


def test_local_headers_and_payloads(reader: ContainerReader, make_zip) -> None:
    """Test that computed offsets point at local headers and payloads."""
    data = make_zip(FILES)
    entries = reader.read_entries(data).value

    for name, entry in entries.items():
        assert struct.unpack_from("<I", data, entry.local_header_offset)[0] == LOCAL_HEADER_SIGNATURE
        assert entry.compression == DEFLATED
        assert entry.uncompressed_size == len(FILES[name])
        assert reader.read_entry(data, entries, name).value == FILES[name]


def test_stored_entries(reader: ContainerReader, make_zip) -> None:
    """Test that stored entries are sliced as-is."""
    data = make_zip(FILES, compression=zipfile.ZIP_STORED)
    entries = reader.read_entries(data).value

    assert entries["docProps/app.xml"].compression == STORED
    assert reader.read_entry(data, entries, "docProps/app.xml").value == b"<app/>"


def test_trailing_comment_is_skipped(reader: ContainerReader, make_zip) -> None:
    """Test the backward EOCD scan over an archive comment."""
    data = make_zip(FILES, comment=b"c" * 4000)

    outcome = reader.read_entries(data)

    assert len(outcome.value) == len(FILES)
    assert not outcome.degraded


def test_utf8_entry_names(reader: ContainerReader, make_zip) -> None:
    """Test that names flagged as UTF-8 are decoded as UTF-8."""
    data = make_zip({"données/reçu.txt": b"merci"})
    entries = reader.read_entries(data).value

    assert "données/reçu.txt" in entries
    assert reader.read_entry(data, entries, "données/reçu.txt").value == b"merci"


def test_not_a_zip(reader: ContainerReader) -> None:
    """Test that a buffer without an EOCD record gives an empty mapping."""
    outcome = reader.read_entries(b"%PDF-1.4 definitely not a zip")

    assert outcome.value == {}
    assert outcome.diagnostics[0].stage == "container"


def test_empty_buffer(reader: ContainerReader) -> None:
    """Test that an empty buffer is handled."""
    assert reader.read_entries(b"").value == {}


def test_malformed_central_directory_keeps_parsed_entries(reader: ContainerReader, make_zip) -> None:
    """Test that a bad signature stops the walk with partial results."""
    data = bytearray(make_zip(FILES))
    first = data.find(b"PK\x01\x02")
    second = data.find(b"PK\x01\x02", first + 4)
    data[second:second + 4] = b"XXXX"

    outcome = reader.read_entries(bytes(data))

    assert list(outcome.value) == ["word/document.xml"]
    assert outcome.diagnostics[0].message == "Bad central directory signature"


def test_missing_entry(reader: ContainerReader, make_zip) -> None:
    """Test that a missing entry yields empty bytes and a diagnostic."""
    data = make_zip(FILES)
    entries = reader.read_entries(data).value

    outcome = reader.read_entry(data, entries, "word/missing.xml")

    assert outcome.value == b""
    assert outcome.diagnostics[0].detail == "word/missing.xml"


def test_unsupported_compression_method(reader: ContainerReader, make_zip) -> None:
    """Test that methods other than store/deflate are reported."""
    data = make_zip({"a.txt": b"hello" * 100}, compression=zipfile.ZIP_BZIP2)
    entries = reader.read_entries(data).value

    outcome = reader.read_entry(data, entries, "a.txt")

    assert outcome.value == b""
    assert outcome.diagnostics[0].message == "Unsupported compression method"


def test_find_entry(reader: ContainerReader, make_zip) -> None:
    """Test regex lookup in central-directory order."""
    entries = reader.read_entries(make_zip(FILES)).value

    assert reader.find_entry(entries, r"xl/worksheets/[^/]+\.xml") == "xl/worksheets/sheet7.xml"
    assert reader.find_entry(entries, r"ppt/.*") is None
