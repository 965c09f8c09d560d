"""
OOXML Text Extractors.

DOCX and XLSX files are ZIP containers of XML parts. These extractors
pull the relevant part out through the ContainerReader and flatten it
into lines of text for the Text Interpreter:

    - DocxExtractor: one line per paragraph, one tab-joined line per table row
    - SpreadsheetExtractor: one comma-joined line per worksheet row

Elements are matched by local name, so both transitional and strict
OOXML namespaces are accepted.

Author: ML Engineering Team
"""

import re
import xml.etree.ElementTree as ET
from typing import Dict, Iterator, List, Optional

from invoice_architect.container.zip_reader import ContainerReader, ZipEntryMetadata
from invoice_architect.models.diagnostics import ExtractionOutcome
from invoice_architect.utils.logger import get_logger

logger = get_logger(__name__)

DOCUMENT_PART = "word/document.xml"
SHARED_STRINGS_PART = "xl/sharedStrings.xml"
FIRST_SHEET_PART = "xl/worksheets/sheet1.xml"
SHEET_PATTERN = r"xl/worksheets/[^/]+\.xml"

_COLUMN_LETTERS = re.compile(r"^([A-Za-z]+)")


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix from an ElementTree tag."""
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in element:
        if local_name(child.tag) == name:
            yield child


def _descendants(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for node in element.iter():
        if local_name(node.tag) == name:
            yield node


def column_index(reference: str) -> Optional[int]:
    """
    Convert the column letters of a cell reference to a zero-based index.

    Example:
        >>> column_index("A1"), column_index("Z9"), column_index("AA10")
        (0, 25, 26)
    """
    match = _COLUMN_LETTERS.match(reference or "")
    if not match:
        return None
    index = 0
    for letter in match.group(1).upper():
        index = index * 26 + (ord(letter) - ord("A") + 1)
    return index - 1


class _PartReader:
    """Shared plumbing: open the container and parse one XML part."""

    stage = "ooxml"

    def __init__(self, reader: Optional[ContainerReader] = None) -> None:
        self.reader = reader or ContainerReader()

    def _parse(
        self,
        data: bytes,
        entries: Dict[str, ZipEntryMetadata],
        name: str,
        outcome: ExtractionOutcome,
    ) -> Optional[ET.Element]:
        xml = outcome.absorb(self.reader.read_entry(data, entries, name))
        if not xml:
            return None
        try:
            return ET.fromstring(xml)
        except ET.ParseError as e:
            logger.warning(f"Could not parse {name}: {e}")
            outcome.add(self.stage, "Malformed XML part", f"{name}: {e}")
            return None


# =============================================================================
# DOCX
# =============================================================================

class DocxExtractor(_PartReader):
    """
    Flattens ``word/document.xml`` into text lines in document order.

    Example:
        >>> outcome = DocxExtractor().extract(docx_bytes)
        >>> outcome.value.splitlines()[0]
        'INVOICE'
    """

    stage = "docx"

    def extract(self, data: bytes) -> ExtractionOutcome[str]:
        """
        Extract paragraph and table-row text from a DOCX buffer.

        Args:
            data: Raw DOCX bytes.

        Returns:
            Outcome with newline-joined text ("" when unreadable).
        """
        outcome: ExtractionOutcome[str] = ExtractionOutcome("")
        entries = outcome.absorb(self.reader.read_entries(data))
        root = self._parse(data, entries, DOCUMENT_PART, outcome)
        if root is None:
            return outcome

        body = next(_descendants(root, "body"), root)
        lines = [line for line in self._block_lines(body) if line.strip()]
        logger.debug(f"DOCX yielded {len(lines)} line(s)")
        outcome.value = "\n".join(lines)
        return outcome

    def _block_lines(self, element: ET.Element) -> Iterator[str]:
        for child in element:
            name = local_name(child.tag)
            if name == "p":
                yield self._paragraph_text(child)
            elif name == "tr":
                cells = [self._cell_text(cell) for cell in _children(child, "tc")]
                yield "\t".join(cells)
            else:
                # tables, content controls, smart tags...
                yield from self._block_lines(child)

    @staticmethod
    def _paragraph_text(paragraph: ET.Element) -> str:
        # only runs: w:pPr holds tab-stop definitions that are also named "tab"
        parts = []
        for run in _descendants(paragraph, "r"):
            for node in run:
                name = local_name(node.tag)
                if name == "t":
                    parts.append(node.text or "")
                elif name == "tab":
                    parts.append("\t")
        return "".join(parts)

    def _cell_text(self, cell: ET.Element) -> str:
        paragraphs = [text for text in (self._paragraph_text(p) for p in _descendants(cell, "p")) if text]
        return " ".join(paragraphs)


# =============================================================================
# XLSX / XLS
# =============================================================================

class SpreadsheetExtractor(_PartReader):
    """
    Rebuilds the first worksheet of an XLSX buffer as CSV-like lines.

    Sparse cell references keep their column: a row holding only A1 and
    C1 gives ``"a,,c"``.
    """

    stage = "xlsx"

    def extract(self, data: bytes) -> ExtractionOutcome[str]:
        """
        Extract the first worksheet as comma-joined rows.

        Args:
            data: Raw XLSX bytes (legacy binary XLS gives an empty result).

        Returns:
            Outcome with newline-joined rows.
        """
        outcome: ExtractionOutcome[str] = ExtractionOutcome("")
        entries = outcome.absorb(self.reader.read_entries(data))
        if not entries:
            outcome.add(self.stage, "Spreadsheet is not an OOXML workbook")
            return outcome

        shared = self._shared_strings(data, entries, outcome)

        sheet = FIRST_SHEET_PART if FIRST_SHEET_PART in entries else self.reader.find_entry(entries, SHEET_PATTERN)
        if sheet is None:
            outcome.add(self.stage, "Workbook has no worksheet")
            return outcome

        root = self._parse(data, entries, sheet, outcome)
        if root is None:
            return outcome

        lines = []
        for row in _descendants(root, "row"):
            line = self._row_line(row, shared)
            if line is not None:
                lines.append(line)

        logger.debug(f"Worksheet {sheet} yielded {len(lines)} row(s), {len(shared)} shared string(s)")
        outcome.value = "\n".join(lines)
        return outcome

    def _shared_strings(
        self,
        data: bytes,
        entries: Dict[str, ZipEntryMetadata],
        outcome: ExtractionOutcome,
    ) -> List[str]:
        if SHARED_STRINGS_PART not in entries:
            return []
        root = self._parse(data, entries, SHARED_STRINGS_PART, outcome)
        if root is None:
            return []
        return [
            "".join(t.text or "" for t in _descendants(item, "t"))
            for item in _children(root, "si")
        ]

    @staticmethod
    def _cell_value(cell: ET.Element, shared: List[str]) -> str:
        cell_type = cell.get("t")
        if cell_type == "inlineStr":
            return "".join(t.text or "" for t in _descendants(cell, "t"))

        value = next(_children(cell, "v"), None)
        raw = (value.text or "") if value is not None else ""
        if cell_type == "s":
            try:
                return shared[int(raw)]
            except (ValueError, IndexError):
                return ""
        if cell_type == "b":
            return "TRUE" if raw.strip() == "1" else "FALSE"
        return raw

    def _row_line(self, row: ET.Element, shared: List[str]) -> Optional[str]:
        values: Dict[int, str] = {}
        next_column = 0
        for cell in _children(row, "c"):
            index = column_index(cell.get("r", ""))
            if index is None:
                index = next_column
            values[index] = self._cell_value(cell, shared)
            next_column = index + 1

        if not values:
            return None
        return ",".join(values.get(i, "") for i in range(max(values) + 1))
