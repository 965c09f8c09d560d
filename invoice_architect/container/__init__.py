"""
Container Module for the Invoice Import Subsystem.

    - Decompressor / Inflater: raw and zlib-wrapped DEFLATE
    - ContainerReader: ZIP central-directory walking (DOCX, XLSX)
"""

from .inflater import RAW, ZLIB, Decompressor, Inflater, InflateError, PureInflater, ZlibInflater
from .zip_reader import ContainerReader, ZipEntryMetadata

__all__ = [
    'RAW',
    'ZLIB',
    'ContainerReader',
    'Decompressor',
    'InflateError',
    'Inflater',
    'PureInflater',
    'ZipEntryMetadata',
    'ZlibInflater',
]
