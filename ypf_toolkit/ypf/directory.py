"""Reading and writing the YPF header and directory records.

Layout (all little-endian)::

    header:  magic[4] version:u32 entry_count:u32 directory_size:u32 reserved[16]
    entry:   name_checksum:u32 length_byte:u8 name[length] type:u8
             is_compressed:u8 raw_size:u32 compressed_size:u32
             offset:u32|u64 data_checksum:u32

The offset is 32-bit below version 479 and 64-bit from then on.
"""

from typing import Iterable, List

from ..errors import BadMagicError, DirectorySizeMismatchError, NameChecksumMismatchError, OutputSizeExceededError
from ..utils.binary import BinaryReader, BinaryWriter
from ..utils.text import Codepage
from .header import HEADER_SIZE, RESERVED_SIZE, YPF_MAGIC, FormatProfile, YPFArchiveInfo, YPFEntry, YPFHeader
from .obfuscation import decode_length, decode_name, encode_length


def read_header(reader: BinaryReader) -> YPFHeader:
    """Read the 32-byte YPF header."""
    magic = reader.read_bytes(4)
    if magic != YPF_MAGIC:
        raise BadMagicError(f"Invalid YPF magic: {magic!r}, expected {YPF_MAGIC!r}")

    version = reader.read_u32()
    entry_count = reader.read_u32()
    directory_size = reader.read_u32()
    reserved = reader.read_bytes(RESERVED_SIZE)

    return YPFHeader(
        magic=magic,
        version=version,
        entry_count=entry_count,
        directory_size=directory_size,
        reserved=reserved,
    )


def read_entry(reader: BinaryReader, profile: FormatProfile, codepage: Codepage) -> YPFEntry:
    """Read one directory record and verify its name checksum."""
    name_checksum = reader.read_u32()
    name_length = decode_length(reader.read_u8(), profile.swap_table)
    stored_name = reader.read_bytes(name_length)
    filename = decode_name(stored_name, profile, codepage)

    if profile.name_checksum(stored_name) != name_checksum:
        raise NameChecksumMismatchError("Name checksum mismatch", filename)

    file_type = reader.read_u8()
    is_compressed = reader.read_u8() != 0
    raw_size = reader.read_u32()
    compressed_size = reader.read_u32()
    offset = reader.read_uint(profile.offset_width)
    data_checksum = reader.read_u32()

    return YPFEntry(
        name_checksum=name_checksum,
        filename=filename,
        file_type=file_type,
        is_compressed=is_compressed,
        raw_size=raw_size,
        compressed_size=compressed_size,
        offset=offset,
        data_checksum=data_checksum,
        stored_name=stored_name,
    )


def read_directory(data: bytes, codepage: Codepage) -> YPFArchiveInfo:
    """Read the header and all records, keeping on-disk directory order."""
    reader = BinaryReader(data)
    header = read_header(reader)
    profile = header.profile

    entries = [read_entry(reader, profile, codepage) for _ in range(header.entry_count)]
    return YPFArchiveInfo(header=header, entries=entries)


def write_header(writer: BinaryWriter, header: YPFHeader) -> None:
    writer.write(header.magic)
    writer.write_u32(header.version)
    writer.write_u32(header.entry_count)
    writer.write_u32(header.directory_size)
    writer.write(header.reserved)


def write_entry(writer: BinaryWriter, entry: YPFEntry, profile: FormatProfile) -> None:
    if entry.offset > profile.max_offset:
        raise OutputSizeExceededError(f"Offset {entry.offset:#x} does not fit version {profile.version}", entry.filename)

    writer.write_u32(entry.name_checksum)
    writer.write_u8(encode_length(len(entry.stored_name), profile.swap_table))
    writer.write(entry.stored_name)
    writer.write_u8(entry.file_type)
    writer.write_u8(1 if entry.is_compressed else 0)
    writer.write_u32(entry.raw_size)
    writer.write_u32(entry.compressed_size)
    writer.write_uint(entry.offset, profile.offset_width)
    writer.write_u32(entry.data_checksum)


def directory_size_for(entries: Iterable[YPFEntry], profile: FormatProfile) -> int:
    """Size of the header plus every record, as stored in the header."""
    return HEADER_SIZE + sum(entry.record_size(profile) for entry in entries)


def serialize_directory(header: YPFHeader, entries: List[YPFEntry]) -> bytes:
    """Serialize the header and records in the given order."""
    profile = header.profile
    writer = BinaryWriter()
    write_header(writer, header)
    for entry in entries:
        write_entry(writer, entry, profile)

    if len(writer) != header.directory_size:
        raise DirectorySizeMismatchError(
            f"Serialized directory is {len(writer)} bytes, header declares {header.directory_size}"
        )
    return writer.getvalue()
