"""YPF archive reading and writing."""

from .checksum import ChecksumPurpose
from .header import (
    DEFAULT_CODEPAGE,
    DEFAULT_VERSION,
    YPF_MAGIC,
    FileType,
    FormatProfile,
    YPFArchiveInfo,
    YPFEntry,
    YPFHeader,
)
from .reader import YPFReader, extract_all, extract_one, iter_extract, parse
from .writer import pack, write_archive

__all__ = [
    "ChecksumPurpose",
    "DEFAULT_CODEPAGE",
    "DEFAULT_VERSION",
    "YPF_MAGIC",
    "FileType",
    "FormatProfile",
    "YPFArchiveInfo",
    "YPFEntry",
    "YPFHeader",
    "YPFReader",
    "extract_all",
    "extract_one",
    "iter_extract",
    "parse",
    "pack",
    "write_archive",
]
