"""
Container Reader Module.

Walks the central directory of a ZIP buffer (DOCX and XLSX files are ZIP
containers) and hands out the raw or inflated bytes of named entries.

The reader is best-effort: a missing end-of-central-directory record
gives an empty mapping, and a malformed header stops the walk with
whatever entries were parsed so far. Nothing here raises.

Limitations:
    - ZIP64 archives and encrypted entries are not supported.
"""

import re
import struct
from dataclasses import dataclass
from typing import Dict, Optional

from invoice_architect.models.diagnostics import ExtractionOutcome
from invoice_architect.utils.logger import get_logger
from .inflater import RAW, Decompressor

logger = get_logger(__name__)

EOCD_SIGNATURE = 0x06054B50
CENTRAL_HEADER_SIGNATURE = 0x02014B50
LOCAL_HEADER_SIGNATURE = 0x04034B50

EOCD_SIZE = 22
CENTRAL_HEADER_SIZE = 46
LOCAL_HEADER_SIZE = 30
MAX_COMMENT_LENGTH = 0xFFFF

STORED = 0
DEFLATED = 8

FLAG_ENCRYPTED = 0x0001
FLAG_UTF8 = 0x0800


@dataclass(frozen=True)
class ZipEntryMetadata:
    """
    Location of one entry inside the container.

    Attributes:
        name: Entry path inside the archive.
        compression: 0 (stored) or 8 (deflate); other methods are unsupported.
        compressed_size: Payload size in the archive.
        uncompressed_size: Size after inflating.
        local_header_offset: Absolute offset of the entry's local header.
        data_offset: Absolute offset of the entry's payload.
        encrypted: Whether the entry is password protected.
    """
    name: str
    compression: int
    compressed_size: int
    uncompressed_size: int
    local_header_offset: int
    data_offset: int
    encrypted: bool = False


def _u16(data: bytes, offset: int) -> int:
    return struct.unpack_from("<H", data, offset)[0]


def _u32(data: bytes, offset: int) -> int:
    return struct.unpack_from("<I", data, offset)[0]


class ContainerReader:
    """
    Reads entries out of a ZIP-format byte buffer.

    Example:
        >>> reader = ContainerReader()
        >>> entries = reader.read_entries(docx_bytes).value
        >>> xml = reader.read_entry(docx_bytes, entries, "word/document.xml").value
    """

    def __init__(self, decompressor: Optional[Decompressor] = None) -> None:
        self.decompressor = decompressor or Decompressor()

    def find_end_of_central_directory(self, data: bytes) -> int:
        """
        Locate the end-of-central-directory record.

        Scans backward from ``len - 22`` over at most a maximal trailing
        comment. Returns the record offset, or -1 if none is found.
        """
        lowest = max(0, len(data) - MAX_COMMENT_LENGTH - EOCD_SIZE)
        for offset in range(len(data) - EOCD_SIZE, lowest - 1, -1):
            if _u32(data, offset) == EOCD_SIGNATURE:
                return offset
        return -1

    def read_entries(self, data: bytes) -> ExtractionOutcome[Dict[str, ZipEntryMetadata]]:
        """
        Map every entry path to its metadata.

        Args:
            data: Bytes believed to be a ZIP container.

        Returns:
            Outcome with the entries parsed (possibly empty) and diagnostics.
        """
        entries: Dict[str, ZipEntryMetadata] = {}
        outcome = ExtractionOutcome(entries)

        eocd = self.find_end_of_central_directory(data)
        if eocd < 0:
            logger.debug("No end-of-central-directory record found")
            outcome.add("container", "Not a ZIP container", "end-of-central-directory record missing")
            return outcome

        total_entries = _u16(data, eocd + 10)
        offset = _u32(data, eocd + 16)

        for index in range(total_entries):
            if offset + CENTRAL_HEADER_SIZE > len(data) or _u32(data, offset) != CENTRAL_HEADER_SIGNATURE:
                self._stop(outcome, "Bad central directory signature", index, total_entries)
                break

            flags = _u16(data, offset + 8)
            compression = _u16(data, offset + 10)
            compressed_size = _u32(data, offset + 20)
            uncompressed_size = _u32(data, offset + 24)
            name_length = _u16(data, offset + 28)
            extra_length = _u16(data, offset + 30)
            comment_length = _u16(data, offset + 32)
            local_offset = _u32(data, offset + 42)

            raw_name = data[offset + CENTRAL_HEADER_SIZE:offset + CENTRAL_HEADER_SIZE + name_length]
            name = raw_name.decode("utf-8" if flags & FLAG_UTF8 else "cp437", errors="replace")

            # the local header carries its own name/extra lengths
            if local_offset + LOCAL_HEADER_SIZE > len(data) or _u32(data, local_offset) != LOCAL_HEADER_SIGNATURE:
                self._stop(outcome, "Bad local header signature", index, total_entries, name)
                break
            local_name_length = _u16(data, local_offset + 26)
            local_extra_length = _u16(data, local_offset + 28)

            entries[name] = ZipEntryMetadata(
                name=name,
                compression=compression,
                compressed_size=compressed_size,
                uncompressed_size=uncompressed_size,
                local_header_offset=local_offset,
                data_offset=local_offset + LOCAL_HEADER_SIZE + local_name_length + local_extra_length,
                encrypted=bool(flags & FLAG_ENCRYPTED),
            )
            offset += CENTRAL_HEADER_SIZE + name_length + extra_length + comment_length

        logger.debug(f"Container has {len(entries)}/{total_entries} readable entries")
        return outcome

    def _stop(self, outcome: ExtractionOutcome, message: str, index: int, total: int,
              name: Optional[str] = None) -> None:
        logger.warning(f"{message} at entry {index + 1}/{total}; keeping {len(outcome.value)} entries")
        outcome.add("container", message, name or f"entry {index + 1} of {total}")

    def read_entry(
        self,
        data: bytes,
        entries: Dict[str, ZipEntryMetadata],
        name: str
    ) -> ExtractionOutcome[bytes]:
        """
        Return the uncompressed bytes of one entry.

        Missing, encrypted or unsupported entries yield b"" and a diagnostic.
        """
        outcome: ExtractionOutcome[bytes] = ExtractionOutcome(b"")
        entry = entries.get(name)
        if entry is None:
            outcome.add("container", "ZIP entry missing", name)
            return outcome

        if entry.encrypted:
            outcome.add("container", "ZIP entry is encrypted", name)
            return outcome

        payload = data[entry.data_offset:entry.data_offset + entry.compressed_size]
        if entry.compression == STORED:
            outcome.value = payload
        elif entry.compression == DEFLATED:
            outcome.value = outcome.absorb(self.decompressor.inflate(payload, RAW))
        else:
            logger.warning(f"Unsupported compression method {entry.compression} for {name}")
            outcome.add("container", "Unsupported compression method", f"{name}: {entry.compression}")
        return outcome

    @staticmethod
    def find_entry(entries: Dict[str, ZipEntryMetadata], pattern: str) -> Optional[str]:
        """First entry name (central-directory order) fully matching ``pattern``."""
        compiled = re.compile(pattern)
        for name in entries:
            if compiled.fullmatch(name):
                return name
        return None
