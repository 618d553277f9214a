"""YPF header, directory entry and version profile structures."""

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import PurePosixPath
from typing import List, Optional, Tuple

from .checksum import ChecksumPurpose, checksum
from .obfuscation import cipher_key_for, swap_table_for

# YPF magic bytes
YPF_MAGIC = b"YPF\x00"

HEADER_SIZE = 32
RESERVED_SIZE = 16

# Versions from here on store 64-bit offsets
OFFSET64_MIN_VERSION = 479

MAX_FILE_SIZE = 0xFFFFFFFF
DEFAULT_VERSION = 500
DEFAULT_CODEPAGE = 932

# Archive filenames use Windows separators
ARCHIVE_SEPARATOR = "\\"

# checksum, length byte, type, compressed flag, raw size, compressed size, data checksum
_RECORD_FIXED_SIZE = 4 + 1 + 1 + 1 + 4 + 4 + 4


class FileType(IntEnum):
    """Coarse file kind stored per entry. Not validated when reading."""

    TEXT = 0
    BMP = 1
    PNG = 2
    JPG = 3
    GIF = 4
    WAV = 5
    OGG = 6
    PSD = 7
    YCG = 8  # masked as .png
    PSB = 9

    @classmethod
    def from_name(cls, filename: str) -> "FileType":
        """Map a filename's extension to a type tag, defaulting to TEXT."""
        suffix = PurePosixPath(filename.replace(ARCHIVE_SEPARATOR, "/")).suffix.lower().lstrip(".")
        try:
            return cls[suffix.upper()]
        except KeyError:
            return cls.TEXT


@dataclass(frozen=True)
class FormatProfile:
    """Version-dependent layout and encoding choices, resolved once per archive."""

    version: int
    offset_width: int
    swap_table: Tuple[int, ...]
    cipher_key: int

    @classmethod
    def for_version(cls, version: int) -> "FormatProfile":
        return cls(
            version=version,
            offset_width=4 if version < OFFSET64_MIN_VERSION else 8,
            swap_table=swap_table_for(version),
            cipher_key=cipher_key_for(version),
        )

    @property
    def max_offset(self) -> int:
        return (1 << (self.offset_width * 8)) - 1

    def name_checksum(self, stored_name: bytes) -> int:
        return checksum(stored_name, self.version, ChecksumPurpose.NAME)

    def data_checksum(self, stored_data: bytes) -> int:
        return checksum(stored_data, self.version, ChecksumPurpose.DATA)


@dataclass
class YPFHeader:
    """YPF archive header (32 bytes)."""

    magic: bytes  # 4 bytes: "YPF\0"
    version: int  # 4 bytes
    entry_count: int  # 4 bytes
    directory_size: int  # 4 bytes: header plus all entry records
    reserved: bytes = bytes(RESERVED_SIZE)  # 16 bytes, observed zero

    @property
    def is_valid(self) -> bool:
        return self.magic == YPF_MAGIC

    @property
    def profile(self) -> FormatProfile:
        return FormatProfile.for_version(self.version)


@dataclass
class YPFEntry:
    """YPF directory record (23 bytes plus name, 27 plus name for 64-bit offsets)."""

    name_checksum: int  # 4 bytes: over the stored (ciphered) name bytes
    filename: str  # length byte + ciphered name
    file_type: int  # 1 byte
    is_compressed: bool  # 1 byte
    raw_size: int  # 4 bytes
    compressed_size: int  # 4 bytes
    offset: int  # 4 or 8 bytes, from start of archive
    data_checksum: int  # 4 bytes: over the stored payload bytes

    # Ciphered name as it appears in the directory
    stored_name: bytes = b""

    def record_size(self, profile: FormatProfile) -> int:
        return _RECORD_FIXED_SIZE + profile.offset_width + len(self.stored_name)


@dataclass
class YPFArchiveInfo:
    """Parsed archive directory, entries in payload order."""

    header: YPFHeader
    entries: List[YPFEntry] = field(default_factory=list)

    @property
    def profile(self) -> FormatProfile:
        return self.header.profile

    def directory_order(self) -> List[YPFEntry]:
        return sorted(self.entries, key=lambda e: e.name_checksum)

    def payload_order(self) -> List[YPFEntry]:
        return sorted(self.entries, key=lambda e: e.offset)

    def find(self, filename: str) -> Optional[YPFEntry]:
        """Find an entry by filename, accepting either path separator."""
        wanted = filename.replace("/", ARCHIVE_SEPARATOR).lstrip(ARCHIVE_SEPARATOR)
        for entry in self.entries:
            if entry.filename == wanted:
                return entry
        return None
