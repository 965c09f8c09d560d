"""
Decompressor Module.

Inflates DEFLATE data for the container reader (raw DEFLATE, as stored
in ZIP members) and the PDF scanner (zlib-wrapped FlateDecode streams).

The actual inflate primitive sits behind the small Inflater interface:
    - ZlibInflater: the runtime's native zlib
    - PureInflater: a self-contained RFC 1950/1951 inflater used when the
      native primitive reports it cannot inflate, or when configured
      explicitly (decompression.backend: pure)

Decompressor never raises: failures come back as an empty buffer plus
an ExtractionDiagnostic so callers can fall back to raw text.
"""

import zlib
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from config import get_config
from invoice_architect.models.diagnostics import ExtractionOutcome
from invoice_architect.utils.exceptions import ConfigurationError
from invoice_architect.utils.logger import get_logger

logger = get_logger(__name__)

RAW = "raw"
ZLIB = "zlib"


class InflateError(Exception):
    """Raised by an Inflater when a stream cannot be decoded."""
    pass


def has_zlib_header(data: bytes) -> bool:
    """Check for a valid two-byte zlib (RFC 1950) header using DEFLATE."""
    if len(data) < 2:
        return False
    cmf, flg = data[0], data[1]
    return (cmf & 0x0F) == 8 and (cmf >> 4) <= 7 and ((cmf << 8) | flg) % 31 == 0


class Inflater(ABC):
    """Platform capability: something that can inflate DEFLATE data."""

    name = "abstract"

    @abstractmethod
    def can_inflate(self) -> bool:
        """Report whether this inflater works in the current runtime."""

    @abstractmethod
    def inflate(self, data: bytes, wrapper: str = RAW) -> bytes:
        """
        Inflate ``data``.

        Args:
            data: Compressed bytes.
            wrapper: RAW for bare DEFLATE, ZLIB for zlib-wrapped data. ZLIB
                input without a valid header is treated as RAW.

        Raises:
            InflateError: If the stream is corrupt.
        """


class ZlibInflater(Inflater):
    """Inflater backed by the zlib module. Truncated input yields partial output."""

    name = "native"

    def can_inflate(self) -> bool:
        return hasattr(zlib, "decompressobj")

    def inflate(self, data: bytes, wrapper: str = RAW) -> bytes:
        wbits = zlib.MAX_WBITS if wrapper == ZLIB and has_zlib_header(data) else -zlib.MAX_WBITS
        try:
            decompressor = zlib.decompressobj(wbits)
            return decompressor.decompress(data) + decompressor.flush()
        except zlib.error as e:
            raise InflateError(str(e)) from e


# =============================================================================
# PURE INFLATER
# =============================================================================

MAX_BITS = 15

LENGTH_BASE = (3, 4, 5, 6, 7, 8, 9, 10, 11, 13, 15, 17, 19, 23, 27, 31,
               35, 43, 51, 59, 67, 83, 99, 115, 131, 163, 195, 227, 258)
LENGTH_EXTRA = (0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 2, 2, 2, 2,
                3, 3, 3, 3, 4, 4, 4, 4, 5, 5, 5, 5, 0)
DIST_BASE = (1, 2, 3, 4, 5, 7, 9, 13, 17, 25, 33, 49, 65, 97, 129, 193,
             257, 385, 513, 769, 1025, 1537, 2049, 3073, 4097, 6145,
             8193, 12289, 16385, 24577)
DIST_EXTRA = (0, 0, 0, 0, 1, 1, 2, 2, 3, 3, 4, 4, 5, 5, 6, 6,
              7, 7, 8, 8, 9, 9, 10, 10, 11, 11, 12, 12, 13, 13)
CODE_LENGTH_ORDER = (16, 17, 18, 0, 8, 7, 9, 6, 10, 5, 11, 4, 12, 3, 13, 2, 14, 1, 15)


class _BitReader:
    """LSB-first bit reader over a byte buffer."""

    def __init__(self, data: bytes, pos: int = 0) -> None:
        self.data = data
        self.pos = pos
        self.bit_buffer = 0
        self.bit_count = 0

    def bits(self, need: int) -> int:
        value = self.bit_buffer
        while self.bit_count < need:
            if self.pos >= len(self.data):
                raise InflateError("unexpected end of compressed data")
            value |= self.data[self.pos] << self.bit_count
            self.pos += 1
            self.bit_count += 8
        self.bit_buffer = value >> need
        self.bit_count -= need
        return value & ((1 << need) - 1)

    def align(self) -> None:
        # drop the remaining bits of the current byte
        self.bit_buffer = 0
        self.bit_count = 0


class _Huffman:
    """Canonical Huffman table: code counts per length and symbols in code order."""

    def __init__(self, lengths: List[int]) -> None:
        self.count = [0] * (MAX_BITS + 1)
        for length in lengths:
            self.count[length] += 1

        left = 1
        for length in range(1, MAX_BITS + 1):
            left = (left << 1) - self.count[length]
            if left < 0:
                raise InflateError("over-subscribed Huffman code")

        offsets = [0] * (MAX_BITS + 1)
        for length in range(1, MAX_BITS):
            offsets[length + 1] = offsets[length] + self.count[length]

        self.symbol = [0] * len(lengths)
        for symbol, length in enumerate(lengths):
            if length:
                self.symbol[offsets[length]] = symbol
                offsets[length] += 1

    def decode(self, reader: _BitReader) -> int:
        code = first = index = 0
        for length in range(1, MAX_BITS + 1):
            code |= reader.bits(1)
            count = self.count[length]
            if code - count < first:
                return self.symbol[index + (code - first)]
            index += count
            first = (first + count) << 1
            code <<= 1
        raise InflateError("invalid Huffman code")


def _fixed_tables() -> Tuple[_Huffman, _Huffman]:
    lengths = [8] * 144 + [9] * 112 + [7] * 24 + [8] * 8
    return _Huffman(lengths), _Huffman([5] * 30)


class PureInflater(Inflater):
    """
    Stand-alone DEFLATE decoder (stored, fixed and dynamic blocks).

    Example:
        >>> PureInflater().inflate(zlib.compress(b"hello"), ZLIB)
        b'hello'
    """

    name = "pure"

    def __init__(self) -> None:
        self._fixed: Optional[Tuple[_Huffman, _Huffman]] = None

    def can_inflate(self) -> bool:
        return True

    def inflate(self, data: bytes, wrapper: str = RAW) -> bytes:
        start = 0
        if wrapper == ZLIB and has_zlib_header(data):
            if data[1] & 0x20:
                raise InflateError("preset dictionaries are not supported")
            start = 2

        reader = _BitReader(data, start)
        out = bytearray()
        last = 0
        while not last:
            last = reader.bits(1)
            block_type = reader.bits(2)
            if block_type == 0:
                self._stored(reader, out)
            elif block_type == 1:
                if self._fixed is None:
                    self._fixed = _fixed_tables()
                self._codes(reader, out, *self._fixed)
            elif block_type == 2:
                self._codes(reader, out, *self._dynamic_tables(reader))
            else:
                raise InflateError("invalid block type")
        return bytes(out)

    @staticmethod
    def _stored(reader: _BitReader, out: bytearray) -> None:
        reader.align()
        data, pos = reader.data, reader.pos
        if pos + 4 > len(data):
            raise InflateError("truncated stored block header")
        length = data[pos] | (data[pos + 1] << 8)
        complement = data[pos + 2] | (data[pos + 3] << 8)
        if length != (~complement & 0xFFFF):
            raise InflateError("stored block length mismatch")
        pos += 4
        if pos + length > len(data):
            raise InflateError("truncated stored block")
        out.extend(data[pos:pos + length])
        reader.pos = pos + length

    @staticmethod
    def _dynamic_tables(reader: _BitReader) -> Tuple[_Huffman, _Huffman]:
        literal_count = reader.bits(5) + 257
        distance_count = reader.bits(5) + 1
        code_count = reader.bits(4) + 4
        if literal_count > 286 or distance_count > 30:
            raise InflateError("bad dynamic block counts")

        code_lengths = [0] * 19
        for index in range(code_count):
            code_lengths[CODE_LENGTH_ORDER[index]] = reader.bits(3)
        length_code = _Huffman(code_lengths)

        total = literal_count + distance_count
        lengths: List[int] = []
        while len(lengths) < total:
            symbol = length_code.decode(reader)
            if symbol < 16:
                lengths.append(symbol)
                continue
            if symbol == 16:
                if not lengths:
                    raise InflateError("repeat with no previous length")
                value, repeat = lengths[-1], 3 + reader.bits(2)
            elif symbol == 17:
                value, repeat = 0, 3 + reader.bits(3)
            else:
                value, repeat = 0, 11 + reader.bits(7)
            if len(lengths) + repeat > total:
                raise InflateError("too many code lengths")
            lengths.extend([value] * repeat)

        if lengths[256] == 0:
            raise InflateError("missing end-of-block code")
        return _Huffman(lengths[:literal_count]), _Huffman(lengths[literal_count:])

    @staticmethod
    def _codes(reader: _BitReader, out: bytearray, literal: _Huffman, distance: _Huffman) -> None:
        while True:
            symbol = literal.decode(reader)
            if symbol < 256:
                out.append(symbol)
            elif symbol == 256:
                return
            else:
                symbol -= 257
                if symbol >= 29:
                    raise InflateError("invalid length symbol")
                length = LENGTH_BASE[symbol] + reader.bits(LENGTH_EXTRA[symbol])
                dist_symbol = distance.decode(reader)
                if dist_symbol >= 30:
                    raise InflateError("invalid distance symbol")
                dist = DIST_BASE[dist_symbol] + reader.bits(DIST_EXTRA[dist_symbol])
                if dist > len(out):
                    raise InflateError("distance too far back")
                start = len(out) - dist
                # byte-by-byte so overlapping copies repeat the pattern
                for offset in range(length):
                    out.append(out[start + offset])


# =============================================================================
# DECOMPRESSOR
# =============================================================================

def create_inflater(backend: str) -> Inflater:
    """Build the inflater named by ``decompression.backend``."""
    if backend == ZlibInflater.name:
        return ZlibInflater()
    if backend == PureInflater.name:
        return PureInflater()
    raise ConfigurationError("decompression.backend", backend, "expected 'native' or 'pure'")


class Decompressor:
    """
    Non-throwing adapter over an Inflater.

    Example:
        >>> outcome = Decompressor().inflate(member_bytes, RAW)
        >>> text = outcome.value.decode("utf-8")
    """

    def __init__(self, inflater: Optional[Inflater] = None) -> None:
        if inflater is None:
            inflater = create_inflater(get_config("decompression.backend", ZlibInflater.name))

        if not inflater.can_inflate():
            logger.warning(f"Inflater '{inflater.name}' unavailable, using pure inflater")
            inflater = PureInflater()

        self.inflater = inflater
        logger.debug(f"Decompressor initialized (backend={self.inflater.name})")

    def inflate(self, data: bytes, wrapper: str = RAW) -> ExtractionOutcome[bytes]:
        """
        Inflate DEFLATE data.

        Args:
            data: Compressed bytes.
            wrapper: RAW for ZIP members, ZLIB for PDF FlateDecode streams.

        Returns:
            Outcome holding the inflated bytes, or b"" with a diagnostic.
        """
        outcome: ExtractionOutcome[bytes] = ExtractionOutcome(b"")
        if not data:
            outcome.add("decompression", "Nothing to inflate")
            return outcome

        try:
            outcome.value = self.inflater.inflate(data, wrapper)
        except InflateError as e:
            logger.warning(f"Inflate failed ({wrapper}, {len(data)} bytes): {e}")
            outcome.add("decompression", "Inflate failed", str(e))
        return outcome
