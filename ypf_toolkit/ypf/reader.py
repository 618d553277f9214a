"""YPF archive reader and extractor."""

import logging
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

from ..errors import DataChecksumMismatchError, TruncatedInputError, UnsafePathError
from ..utils.binary import BinaryReader
from ..utils.fileio import write_atomic
from ..utils.text import Codepage
from .directory import read_directory, read_header
from .header import DEFAULT_CODEPAGE, YPFArchiveInfo, YPFEntry, YPFHeader
from . import payload

log = logging.getLogger(__name__)

MismatchHandler = Callable[[DataChecksumMismatchError], None]
ProgressCallback = Callable[[int, int, str], None]


def parse(data: bytes, codepage: Codepage = DEFAULT_CODEPAGE) -> YPFArchiveInfo:
    """Parse an archive directory without reading any payload.

    Entries are returned in payload order (ascending offset).
    """
    info = read_directory(data, codepage)
    log.debug("YPF header: %s", info.header)
    info.entries = info.payload_order()
    return info


def _warn_mismatch(error: DataChecksumMismatchError) -> None:
    log.warning("%s", error)


def extract_one(
    data: bytes,
    entry: YPFEntry,
    verify: bool = True,
    on_mismatch: Optional[MismatchHandler] = None,
) -> bytes:
    """Extract and decompress a single member.

    A data checksum mismatch is handed to on_mismatch (logged as a warning by
    default) and extraction carries on with the stored bytes.
    """
    header = read_header(BinaryReader(data))

    end = entry.offset + entry.compressed_size
    if end > len(data):
        raise TruncatedInputError(
            f"Payload at {entry.offset:#x}+{entry.compressed_size} runs past end of archive ({len(data)} bytes)",
            entry.filename,
        )
    stored = bytes(data[entry.offset:end])

    if verify and header.profile.data_checksum(stored) != entry.data_checksum:
        (on_mismatch or _warn_mismatch)(DataChecksumMismatchError("Data checksum mismatch", entry.filename))

    return payload.load(stored, entry.is_compressed, entry.raw_size, entry.filename)


def output_path_for(dest_root: Path, filename: str) -> Path:
    """Map an archive filename to a path under dest_root."""
    parts = [p for p in filename.replace("\\", "/").split("/") if p and p != "."]
    if not parts or filename.startswith(("\\", "/")) or ":" in parts[0] or ".." in parts:
        raise UnsafePathError("Refusing to extract outside destination", filename)
    return Path(dest_root).joinpath(*parts)


def iter_extract(
    data: bytes,
    entries: Iterable[YPFEntry],
    dest_root: Union[str, Path],
    progress_callback: Optional[ProgressCallback] = None,
    on_mismatch: Optional[MismatchHandler] = None,
) -> Iterator[Tuple[str, Path]]:
    """Extract entries in payload order.

    Yields (filename, output_path) for each extracted file. The first hard
    failure propagates and stops extraction.
    """
    dest_root = Path(dest_root)
    dest_root.mkdir(parents=True, exist_ok=True)

    ordered = sorted(entries, key=lambda e: e.offset)
    for i, entry in enumerate(ordered):
        output_path = output_path_for(dest_root, entry.filename)
        file_data = extract_one(data, entry, on_mismatch=on_mismatch)
        write_atomic(output_path, file_data)
        log.debug("Extracted %s (%d bytes)", entry.filename, len(file_data))

        if progress_callback:
            progress_callback(i, len(ordered), entry.filename)

        yield entry.filename, output_path


def extract_all(
    data: bytes,
    entries: Iterable[YPFEntry],
    dest_root: Union[str, Path],
    on_mismatch: Optional[MismatchHandler] = None,
) -> List[Path]:
    """Extract every entry to dest_root, returning the written paths."""
    return [path for _, path in iter_extract(data, entries, dest_root, on_mismatch=on_mismatch)]


class YPFReader:
    """Reader for YPF archive files."""

    def __init__(self, path: Path, codepage: Codepage = DEFAULT_CODEPAGE):
        self.path = Path(path)
        self.codepage = codepage
        self._data: Optional[bytes] = None
        self._info: Optional[YPFArchiveInfo] = None
        self.checksum_failures: List[str] = []

    def __enter__(self) -> "YPFReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> None:
        """Load the archive and parse its directory."""
        self._data = self.path.read_bytes()
        self._info = parse(self._data, self.codepage)

    def close(self) -> None:
        self._data = None
        self._info = None

    @property
    def info(self) -> YPFArchiveInfo:
        if self._info is None:
            raise RuntimeError("Archive not opened")
        return self._info

    @property
    def header(self) -> YPFHeader:
        return self.info.header

    @property
    def entries(self) -> List[YPFEntry]:
        return self.info.entries

    def _record_mismatch(self, error: DataChecksumMismatchError) -> None:
        _warn_mismatch(error)
        self.checksum_failures.append(error.name)

    def extract_file(self, entry: YPFEntry) -> bytes:
        """Extract a single file from the archive."""
        if self._data is None:
            raise RuntimeError("Archive not opened")
        return extract_one(self._data, entry, on_mismatch=self._record_mismatch)

    def extract_all(
        self, output_dir: Path, progress_callback: Optional[ProgressCallback] = None
    ) -> Iterator[Tuple[str, Path]]:
        """Extract all files to the output directory.

        Yields (filename, output_path) for each extracted file.
        """
        return iter_extract(
            self._data,
            self.entries,
            output_dir,
            progress_callback=progress_callback,
            on_mismatch=self._record_mismatch,
        )

    def list_files(self) -> List[str]:
        """List all filenames in payload order."""
        return [e.filename for e in self.entries]

    def get_entry_by_name(self, filename: str) -> Optional[YPFEntry]:
        return self.info.find(filename)
