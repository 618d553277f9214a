"""Pack a directory tree into a YPF archive.

Entries are written in directory order (ascending name checksum). Payloads
follow the directory in the same order, with identical content stored once.
"""

import logging
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from ..errors import (
    DuplicateFilenameError,
    EmptyFileError,
    EmptyFilenameError,
    FileTooLargeError,
    OutputSizeExceededError,
    YPFError,
)
from ..utils.fileio import write_atomic
from ..utils.text import Codepage
from . import payload
from .directory import directory_size_for, serialize_directory
from .header import (
    ARCHIVE_SEPARATOR,
    DEFAULT_CODEPAGE,
    DEFAULT_VERSION,
    MAX_FILE_SIZE,
    YPF_MAGIC,
    FileType,
    FormatProfile,
    YPFArchiveInfo,
    YPFEntry,
    YPFHeader,
)
from .obfuscation import encode_name

log = logging.getLogger(__name__)

YCG_SUFFIX = ".ycg"

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class SourceFile:
    """A file under the source root and the name it gets in the archive."""

    archive_name: str
    path: Path
    file_type: int


def _iter_files(source_root: Path) -> Iterator[Path]:
    for path in sorted(source_root.rglob("*")):
        if path.is_file():
            yield path


def collect_files(source_root: Union[str, Path]) -> List[SourceFile]:
    """List regular files under source_root with their archive names.

    Names use backslash separators. A trailing ".ycg" is dropped from the name
    and recorded as the YCG type instead.
    """
    source = Path(source_root).resolve()
    if not source.is_dir():
        raise NotADirectoryError(f"Source is not a directory: {source}")

    files = []
    for path in _iter_files(source):
        name = ARCHIVE_SEPARATOR.join(path.relative_to(source).parts)
        if name.lower().endswith(YCG_SUFFIX):
            name = name[: -len(YCG_SUFFIX)]
            file_type = FileType.YCG
        else:
            file_type = FileType.from_name(name)
        files.append(SourceFile(archive_name=name, path=path, file_type=int(file_type)))
    return files


def _check_name(source: SourceFile) -> None:
    if not source.archive_name:
        raise EmptyFilenameError("Filename can't be empty", str(source.path))


def _check_size(source: SourceFile) -> int:
    size = source.path.stat().st_size
    if size == 0:
        raise EmptyFileError("File is empty", source.archive_name)
    if size > MAX_FILE_SIZE:
        raise FileTooLargeError(f"File is {size} bytes, limit is {MAX_FILE_SIZE}", source.archive_name)
    return size


def _prepare_entries(
    sources: List[SourceFile], profile: FormatProfile, codepage: Codepage
) -> Dict[bytes, Tuple[YPFEntry, SourceFile]]:
    """Validate every source file and build entries without payload fields.

    Names are compared after encoding, since characters the code page can't
    represent collapse to the same replacement byte.
    """
    prepared: Dict[bytes, Tuple[YPFEntry, SourceFile]] = {}
    for source in sources:
        _check_name(source)
        _, stored_name = encode_name(source.archive_name, profile, codepage)
        if stored_name in prepared:
            other = prepared[stored_name][1].path
            raise DuplicateFilenameError(
                f"Filename is used by both {other} and {source.path}", source.archive_name
            )
        raw_size = _check_size(source)

        entry = YPFEntry(
            name_checksum=profile.name_checksum(stored_name),
            filename=source.archive_name,
            file_type=source.file_type,
            is_compressed=False,
            raw_size=raw_size,
            compressed_size=0,
            offset=0,
            data_checksum=0,
            stored_name=stored_name,
        )
        prepared[stored_name] = (entry, source)
    return prepared


def _build(
    source_root: Union[str, Path],
    version: int,
    codepage: Codepage,
    level: int,
    progress_callback: Optional[ProgressCallback],
) -> Tuple[YPFArchiveInfo, bytes]:
    profile = FormatProfile.for_version(version)
    prepared = _prepare_entries(collect_files(source_root), profile, codepage)

    entries = [entry for entry, _ in prepared.values()]
    header = YPFHeader(
        magic=YPF_MAGIC,
        version=version,
        entry_count=len(entries),
        directory_size=directory_size_for(entries, profile),
    )
    info = YPFArchiveInfo(header=header, entries=entries)
    ordered = info.directory_order()
    limit = profile.max_offset

    blob = bytearray()
    stored_at: Dict[Tuple[int, int], int] = {}
    for i, entry in enumerate(ordered):
        log.debug("Adding %s", entry.filename)
        source = prepared[entry.stored_name][1]
        raw = source.path.read_bytes()
        if len(raw) != entry.raw_size:
            raise YPFError(f"File changed size while packing ({entry.raw_size} -> {len(raw)})", entry.filename)

        stored, entry.is_compressed = payload.store(raw, level)
        entry.compressed_size = len(stored)
        entry.data_checksum = profile.data_checksum(stored)

        key = (entry.data_checksum, entry.raw_size)
        if key in stored_at:
            entry.offset = stored_at[key]
            log.debug("%s shares payload at %#x", entry.filename, entry.offset)
        else:
            entry.offset = header.directory_size + len(blob)
            blob.extend(stored)
            stored_at[key] = entry.offset

        if header.directory_size + len(blob) > limit:
            raise OutputSizeExceededError(
                f"Archive exceeds {limit} bytes, the limit for version {version}", entry.filename
            )

        if progress_callback:
            progress_callback(i, len(ordered), entry.filename)

    info.entries = ordered
    return info, serialize_directory(header, ordered) + bytes(blob)


def pack(
    source_root: Union[str, Path],
    version: int = DEFAULT_VERSION,
    codepage: Codepage = DEFAULT_CODEPAGE,
    level: int = zlib.Z_DEFAULT_COMPRESSION,
    progress_callback: Optional[ProgressCallback] = None,
) -> bytes:
    """Build a YPF archive from every regular file under source_root.

    All names and sizes are validated before any payload is read. Returns the
    complete archive bytes.
    """
    _, data = _build(source_root, version, codepage, level, progress_callback)
    return data


def write_archive(
    source_root: Union[str, Path],
    output_path: Union[str, Path],
    version: int = DEFAULT_VERSION,
    codepage: Codepage = DEFAULT_CODEPAGE,
    level: int = zlib.Z_DEFAULT_COMPRESSION,
    progress_callback: Optional[ProgressCallback] = None,
) -> int:
    """Pack source_root into output_path.

    The archive is written to a temporary file beside output_path and moved
    into place only once complete. Returns the number of entries written.
    """
    output = Path(output_path).resolve()
    info, data = _build(source_root, version, codepage, level, progress_callback)

    write_atomic(output, data)

    log.info("Wrote %s (%d entries, %d bytes)", output, info.header.entry_count, len(data))
    return info.header.entry_count
