"""
PDF Text Scanner Module.

Produces a best-effort plain-text transcript of a PDF without a PDF
library: the raw bytes are scanned for content streams, FlateDecode
streams are inflated, and the string operands of text-show operators
are collected.

Pipeline:
    1. Decode the buffer as Latin-1 (one char per byte, offsets preserved)
    2. Find every stream ... endstream region and read its dictionary
    3. Skip images, font programs, xref/object streams and unsupported filters
    4. Inflate FlateDecode streams (raw segment if inflating yields nothing)
    5. Walk BT ... ET blocks collecting (literal) and <hex> strings
    6. Without any BT/ET text, walk the whole stream corpus instead
    7. Without any text at all, return the raw Latin-1 buffer

Limitations:
    - ASCII85Decode, LZWDecode and other non-Flate filters are skipped
    - Font encodings/ToUnicode maps are ignored (CID fonts give noise)

Author: ML Engineering Team
"""

import re
from typing import Iterator, List, Optional, Tuple

from config import get_config
from invoice_architect.container.inflater import ZLIB, Decompressor
from invoice_architect.models.diagnostics import ExtractionOutcome
from invoice_architect.utils.logger import get_logger

logger = get_logger(__name__)

_STREAM_KEYWORD = re.compile(r"(?<![A-Za-z])stream(?:\r\n|\r|\n)")
_END_STREAM = "endstream"
_FILTER = re.compile(r"/Filter\s*(\[[^\]]*\]|/[A-Za-z0-9]+)")
_NAME = re.compile(r"/([A-Za-z0-9]+)")
_DIRECT_LENGTH = re.compile(r"/Length\s+(\d+)\b(?!\s+\d+\s+R)")
_IMAGE = re.compile(r"/Subtype\s*/Image\b")
_NON_TEXT_TYPE = re.compile(r"/Type\s*/(?:XRef|ObjStm|Metadata)\b")
_FONT_PROGRAM = re.compile(r"/Length[123]\b|/Subtype\s*/(?:Type1C|CIDFontType0C|OpenType)\b")

_NUMBER = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)")
_OPERATOR = re.compile(r"[A-Za-z'\"*][A-Za-z0-9'\"*]*")
_HORIZONTAL_SPACE = re.compile(r"[ \t\f\v\xa0]+")
_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

FLATE_FILTERS = {"FlateDecode", "Fl"}

_ESCAPES = {
    'n': '\n', 'r': '\r', 't': '\t', 'b': '\b', 'f': '\f',
    '(': '(', ')': ')', '\\': '\\',
}
_PDF_WHITESPACE = " \t\r\n\f\x00"


def decode_literal_string(segment: str, start: int) -> Tuple[str, int]:
    """
    Read a parenthesized PDF string starting at ``segment[start] == '('``.

    Handles balanced nested parentheses, the standard escapes, octal
    escapes and backslash line continuations. Literals starting with the
    UTF-16BE byte-order mark are decoded as UTF-16.

    Returns:
        Tuple of (decoded text, index just past the closing parenthesis).
    """
    chars: List[str] = []
    depth = 0
    i = start + 1
    n = len(segment)
    while i < n:
        c = segment[i]
        if c == '\\':
            i += 1
            if i >= n:
                break
            escaped = segment[i]
            if escaped in _ESCAPES:
                chars.append(_ESCAPES[escaped])
                i += 1
            elif escaped in '01234567':
                digits = escaped
                i += 1
                while i < n and len(digits) < 3 and segment[i] in '01234567':
                    digits += segment[i]
                    i += 1
                chars.append(chr(int(digits, 8) & 0xFF))
            elif escaped == '\r':
                i += 1
                if i < n and segment[i] == '\n':
                    i += 1
            elif escaped == '\n':
                i += 1
            else:
                chars.append(escaped)
                i += 1
            continue

        if c == '(':
            depth += 1
        elif c == ')':
            if depth == 0:
                i += 1
                break
            depth -= 1
        chars.append(c)
        i += 1

    text = "".join(chars)
    if text.startswith("\xfe\xff"):
        text = text.encode("latin-1")[2:].decode("utf-16-be", errors="replace")
    return text, i


def decode_hex_string(segment: str, start: int) -> Tuple[str, int]:
    """
    Read a hex PDF string starting at ``segment[start] == '<'``.

    Odd-length strings are padded with 0. Bytes are decoded as UTF-16
    when a byte-order mark is present, else UTF-8, else Latin-1.

    Returns:
        Tuple of (decoded text, index just past the closing bracket).
    """
    end = segment.find('>', start + 1)
    if end < 0:
        end = len(segment)
    digits = re.sub(r"[^0-9A-Fa-f]", "", segment[start + 1:end])
    if len(digits) % 2:
        digits += "0"
    raw = bytes.fromhex(digits)

    if raw.startswith((b"\xfe\xff", b"\xff\xfe")):
        text = raw.decode("utf-16", errors="replace")
    else:
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            text = raw.decode("latin-1")
    return text, end + 1


class _TextWalker:
    """
    Walks content-stream operators and rebuilds text lines.

    Strings inside one TJ array are concatenated; separate show operators
    on the same baseline are joined with a space; a change of vertical
    position (Td/TD/Tm), T*, ' and " start a new line.
    """

    def __init__(self, word_gap: float, require_text_block: bool) -> None:
        self.word_gap = word_gap
        self.require_text_block = require_text_block
        self.lines: List[str] = []
        self.current: List[str] = []
        self.pending: List[str] = []
        self.operands: List[float] = []
        self.in_text = False
        self.in_array = False
        self.line_y = 0.0
        self.y: Optional[float] = None
        self.shown_y: Optional[float] = None

    def walk(self, segment: str) -> None:
        i = 0
        n = len(segment)
        while i < n:
            c = segment[i]
            if c == '(':
                text, i = decode_literal_string(segment, i)
                self.pending.append(text)
            elif c == '<':
                if segment.startswith('<<', i):
                    i += 2
                    continue
                text, i = decode_hex_string(segment, i)
                self.pending.append(text)
            elif c == '[':
                self.in_array = True
                i += 1
            elif c == ']':
                self.in_array = False
                i += 1
            elif c == '%':
                newline = segment.find('\n', i)
                i = n if newline < 0 else newline + 1
            elif c == '/':
                i += 1
                while i < n and segment[i] not in _PDF_WHITESPACE and segment[i] not in "/[]()<>{}%":
                    i += 1
            else:
                number = _NUMBER.match(segment, i)
                if number:
                    value = float(number.group())
                    if self.in_array and value < self.word_gap and self.pending:
                        self.pending.append(" ")
                    self.operands.append(value)
                    i = number.end()
                    continue
                operator = _OPERATOR.match(segment, i)
                if operator:
                    self._apply(operator.group())
                    i = operator.end()
                    continue
                i += 1

    def _apply(self, op: str) -> None:
        if op == "BT":
            self.in_text = True
            self.line_y = 0.0
            self.y = 0.0
        elif op == "ET":
            self.in_text = False
        elif op in ("Td", "TD") and len(self.operands) >= 2:
            self.line_y += self.operands[-1]
            self.y = self.line_y
        elif op == "Tm" and len(self.operands) >= 6:
            self.line_y = self.operands[-1]
            self.y = self.line_y
        elif op == "T*":
            self._break_line()
        elif op in ("Tj", "TJ"):
            self._show()
        elif op in ("'", '"'):
            self._break_line()
            self._show()
        self.operands = []
        if op not in ("Tj", "TJ", "'", '"'):
            self.pending = []

    def _break_line(self) -> None:
        self._end_line()
        # invalidate the shown position so the next show op starts fresh
        self.line_y -= 1.0
        self.y = self.line_y
        self.shown_y = self.y

    def _show(self) -> None:
        text = "".join(self.pending)
        self.pending = []
        if self.require_text_block and not self.in_text:
            return
        if self.shown_y is not None and self.y != self.shown_y:
            self._end_line()
        self.shown_y = self.y
        if text:
            self.current.append(text)

    def _end_line(self) -> None:
        if self.current:
            self.lines.append(" ".join(self.current))
        self.current = []

    def finish(self) -> List[str]:
        self._end_line()
        return self.lines


def normalize_transcript(lines: List[str]) -> str:
    """Collapse horizontal whitespace per line and drop empty lines."""
    cleaned = []
    for line in lines:
        for part in line.splitlines():
            part = _HORIZONTAL_SPACE.sub(" ", _CONTROL.sub("", part)).strip()
            if part:
                cleaned.append(part)
    return "\n".join(cleaned)


class PDFTextScanner:
    """
    Best-effort PDF text extraction from raw bytes.

    Example:
        >>> scanner = PDFTextScanner()
        >>> outcome = scanner.scan(Path("invoice.pdf").read_bytes())
        >>> print(outcome.value)
        >>> for diagnostic in outcome.diagnostics:
        ...     print(diagnostic)
    """

    def __init__(self, decompressor: Optional[Decompressor] = None) -> None:
        self.decompressor = decompressor or Decompressor()
        self.word_gap = float(get_config("pdf.word_gap_threshold", -200))
        self.skip_font_programs = get_config("pdf.skip_font_programs", True)
        logger.debug(f"PDFTextScanner initialized (word_gap={self.word_gap})")

    def scan(self, data: bytes) -> ExtractionOutcome[str]:
        """
        Extract a plain-text transcript of all text-show operations.

        Args:
            data: Raw PDF bytes.

        Returns:
            Outcome with the transcript (never raises).
        """
        outcome: ExtractionOutcome[str] = ExtractionOutcome("")
        raw = data.decode("latin-1")

        corpus: List[str] = []
        for dictionary, body in self.iter_streams(raw):
            decoded = outcome.absorb(self._decode_stream(dictionary, body))
            if decoded:
                corpus.append(decoded)

        text = self._transcribe(corpus, require_text_block=True)
        if not text and corpus:
            logger.debug("No BT/ET text found, scanning whole stream corpus")
            text = self._transcribe(corpus, require_text_block=False)

        if not text:
            outcome.add("pdf", "No text-show operators found", "returning raw buffer")
            logger.warning("PDF yielded no text operators; falling back to raw buffer")
            text = raw

        logger.info(f"PDF scan complete: {len(corpus)} content stream(s), {len(text)} chars")
        outcome.value = text
        return outcome

    @staticmethod
    def iter_streams(raw: str) -> Iterator[Tuple[str, str]]:
        """
        Yield (dictionary, body) for every stream in the document.

        The dictionary is the << ... >> text between the stream's ``obj``
        keyword (or the previous endstream) and the ``stream`` keyword.
        """
        position = 0
        previous_end = 0
        while True:
            match = _STREAM_KEYWORD.search(raw, position)
            if match is None:
                return

            header = raw[previous_end:match.start()]
            obj = header.rfind("obj")
            if obj >= 0:
                header = header[obj + 3:]
            open_index, close_index = header.find("<<"), header.rfind(">>")
            dictionary = header[open_index:close_index + 2] if 0 <= open_index < close_index else ""

            end = raw.find(_END_STREAM, match.end())
            if end < 0:
                end = len(raw)
            body = raw[match.end():end]

            length = _DIRECT_LENGTH.search(dictionary)
            if length and int(length.group(1)) <= len(body):
                body = body[:int(length.group(1))]
            elif body.endswith("\r\n"):
                body = body[:-2]
            elif body.endswith(("\n", "\r")):
                body = body[:-1]

            yield dictionary, body
            previous_end = position = end + len(_END_STREAM)

    def _decode_stream(self, dictionary: str, body: str) -> ExtractionOutcome[Optional[str]]:
        outcome: ExtractionOutcome[Optional[str]] = ExtractionOutcome(None)

        if _IMAGE.search(dictionary) or _NON_TEXT_TYPE.search(dictionary):
            return outcome
        if self.skip_font_programs and _FONT_PROGRAM.search(dictionary):
            return outcome

        filters: List[str] = []
        declared = _FILTER.search(dictionary)
        if declared:
            filters = _NAME.findall(declared.group(1))

        unsupported = [name for name in filters if name not in FLATE_FILTERS]
        if unsupported:
            logger.warning(f"Skipping stream with unsupported filter(s): {unsupported}")
            outcome.add("pdf", "PDF filter unsupported", ", ".join(unsupported))
            return outcome

        if not filters:
            outcome.value = body
            return outcome

        inflated = outcome.absorb(self.decompressor.inflate(body.encode("latin-1"), ZLIB))
        if inflated:
            outcome.value = inflated.decode("latin-1")
        else:
            outcome.add("pdf", "FlateDecode stream unreadable", "using raw segment")
            outcome.value = body
        return outcome

    def _transcribe(self, corpus: List[str], require_text_block: bool) -> str:
        lines: List[str] = []
        for segment in corpus:
            walker = _TextWalker(self.word_gap, require_text_block)
            walker.walk(segment)
            lines.extend(walker.finish())
        return normalize_transcript(lines)
