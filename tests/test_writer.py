"""Tests for packing directories into YPF archives."""

import os

import pytest

from ypf_toolkit.errors import (
    DuplicateFilenameError,
    EmptyFileError,
    EmptyFilenameError,
    FilenameTooLongError,
    OutputSizeExceededError,
)
from ypf_toolkit.ypf.directory import read_directory
from ypf_toolkit.ypf.header import FileType, FormatProfile
from ypf_toolkit.ypf.reader import extract_all, extract_one, parse
from ypf_toolkit.ypf.writer import collect_files, pack, write_archive


def make_tree(root, files):
    """Create files under root from a {relative_path: bytes} mapping."""
    for name, data in files.items():
        path = root.joinpath(*name.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    return root


SAMPLE_FILES = {
    "script.txt": b"compressible line\n" * 200,
    "bg/title.png": bytes(range(256)) + os.urandom(512),
    "se/voice/001.ogg": b"hi",
    "テスト.txt": "日本語".encode("cp932") * 40,
}


class TestCollectFiles:
    def test_names_use_backslashes(self, tmp_path):
        make_tree(tmp_path, {"a/b/c.txt": b"x", "d.png": b"y"})
        names = [f.archive_name for f in collect_files(tmp_path)]
        assert sorted(names) == ["a\\b\\c.txt", "d.png"]

    def test_type_from_extension(self, tmp_path):
        make_tree(tmp_path, {"d.png": b"y", "e.wav": b"z", "f.dat": b"w"})
        types = {f.archive_name: f.file_type for f in collect_files(tmp_path)}
        assert types == {"d.png": FileType.PNG, "e.wav": FileType.WAV, "f.dat": FileType.TEXT}

    def test_ycg_suffix_stripped(self, tmp_path):
        make_tree(tmp_path, {"cg/ev01.png.ycg": b"masked"})
        (source,) = collect_files(tmp_path)
        assert source.archive_name == "cg\\ev01.png"
        assert source.file_type == FileType.YCG

    def test_not_a_directory(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_bytes(b"x")
        with pytest.raises(NotADirectoryError):
            collect_files(path)


class TestPackRoundTrip:
    @pytest.mark.parametrize("version", [290, 479, 500, 501])
    def test_round_trip(self, tmp_path, version):
        source = make_tree(tmp_path / "src", SAMPLE_FILES)
        data = pack(source, version=version)

        info = parse(data)
        assert info.header.version == version
        assert info.header.entry_count == len(SAMPLE_FILES)

        out = tmp_path / "out"
        extract_all(data, info.entries, out)
        for name, content in SAMPLE_FILES.items():
            assert out.joinpath(*name.split("/")).read_bytes() == content

    def test_deterministic(self, tmp_path):
        source = make_tree(tmp_path / "src", SAMPLE_FILES)
        assert pack(source, version=500) == pack(source, version=500)

    def test_scenario_single_text_file(self, tmp_path):
        source = make_tree(tmp_path / "src", {"a.txt": b"hi"})
        data = pack(source, version=500)

        (entry,) = parse(data).entries
        assert not entry.is_compressed
        assert entry.compressed_size == entry.raw_size == 2

        extract_all(data, [entry], tmp_path / "out")
        assert (tmp_path / "out" / "a.txt").read_bytes() == b"hi"

    def test_utf8_codepage(self, tmp_path):
        source = make_tree(tmp_path / "src", {"日本.txt": b"hi"})
        data = pack(source, version=500, codepage=65001)
        assert parse(data, codepage=65001).entries[0].filename == "日本.txt"


class TestPackLayout:
    def test_directory_order_is_name_checksum(self, tmp_path):
        source = make_tree(tmp_path / "src", SAMPLE_FILES)
        data = pack(source, version=501)

        on_disk = read_directory(data, 932).entries
        checksums = [e.name_checksum for e in on_disk]
        assert checksums == sorted(checksums)

    def test_payload_follows_directory(self, tmp_path):
        source = make_tree(tmp_path / "src", SAMPLE_FILES)
        data = pack(source, version=290)
        info = parse(data)

        assert info.entries[0].offset == info.header.directory_size
        end = info.header.directory_size
        for entry in info.entries:
            assert entry.offset == end
            end += entry.compressed_size
        assert end == len(data)

    def test_compression_fallback(self, tmp_path):
        source = make_tree(tmp_path / "src", {"noise.bin": os.urandom(64), "text.txt": b"a" * 1000})
        entries = {e.filename: e for e in parse(pack(source)).entries}

        assert not entries["noise.bin"].is_compressed
        assert entries["noise.bin"].compressed_size == entries["noise.bin"].raw_size
        assert entries["text.txt"].is_compressed
        assert entries["text.txt"].compressed_size < entries["text.txt"].raw_size

    def test_type_tags_written(self, tmp_path):
        source = make_tree(tmp_path / "src", {"a.png": b"x", "b.ogg": b"y", "c.png.ycg": b"z"})
        types = {e.filename: e.file_type for e in parse(pack(source)).entries}
        assert types == {"a.png": FileType.PNG, "b.ogg": FileType.OGG, "c.png": FileType.YCG}


class TestDeduplication:
    @pytest.mark.parametrize("version", [290, 500])
    def test_identical_content_stored_once(self, tmp_path, version):
        content = b"shared content " * 50
        source = make_tree(tmp_path / "src", {"a.txt": content, "copy/b.txt": content, "c.txt": b"other"})
        data = pack(source, version=version)
        info = parse(data)

        entries = {e.filename: e for e in info.entries}
        a, b, c = entries["a.txt"], entries["copy\\b.txt"], entries["c.txt"]
        assert a.offset == b.offset
        assert a.offset != c.offset
        assert len(data) == info.header.directory_size + a.compressed_size + c.compressed_size

        assert extract_one(data, a) == extract_one(data, b) == content

    def test_same_size_different_content_not_shared(self, tmp_path):
        source = make_tree(tmp_path / "src", {"a.txt": b"abcd", "b.txt": b"dcba"})
        entries = parse(pack(source)).entries
        assert entries[0].offset != entries[1].offset


class TestPackErrors:
    def test_empty_file(self, tmp_path):
        source = make_tree(tmp_path / "src", {"a.txt": b"hi", "empty.txt": b""})
        with pytest.raises(EmptyFileError, match="empty.txt"):
            pack(source)

    def test_name_too_long(self, tmp_path):
        long_dir = "d" * 200
        source = make_tree(tmp_path / "src", {f"{long_dir}/{'e' * 60}.txt": b"hi"})
        with pytest.raises(FilenameTooLongError):
            pack(source)

    def test_duplicate_after_ycg_strip(self, tmp_path):
        source = make_tree(tmp_path / "src", {"ev.png": b"a", "ev.png.ycg": b"b"})
        with pytest.raises(DuplicateFilenameError, match="ev.png"):
            pack(source)

    def test_duplicate_after_codepage_replacement(self, tmp_path):
        # Both emoji become "?" in cp932
        source = make_tree(tmp_path / "src", {"a\U0001F600.txt": b"a", "a\U0001F603.txt": b"b"})
        with pytest.raises(DuplicateFilenameError, match="used by both"):
            pack(source, version=500, codepage=932)

    def test_empty_name(self, tmp_path):
        source = make_tree(tmp_path / "src", {".ycg": b"a"})
        with pytest.raises(EmptyFilenameError):
            pack(source)

    def test_archive_exceeds_offset_limit(self, tmp_path, monkeypatch):
        monkeypatch.setattr(FormatProfile, "max_offset", property(lambda self: 100))
        source = make_tree(tmp_path / "src", {"a.bin": os.urandom(200)})
        output_dir = tmp_path / "out"
        output_dir.mkdir()

        with pytest.raises(OutputSizeExceededError, match="a.bin"):
            pack(source)
        with pytest.raises(OutputSizeExceededError):
            write_archive(source, output_dir / "data.ypf")
        assert list(output_dir.iterdir()) == []


class TestWriteArchive:
    def test_writes_file(self, tmp_path):
        source = make_tree(tmp_path / "src", SAMPLE_FILES)
        output = tmp_path / "out" / "data.ypf"

        count = write_archive(source, output, version=479)
        assert count == len(SAMPLE_FILES)
        assert output.read_bytes() == pack(source, version=479)

    def test_failure_leaves_no_output(self, tmp_path):
        source = make_tree(tmp_path / "src", {"a.txt": b"hi", "empty.txt": b""})
        output_dir = tmp_path / "out"
        output_dir.mkdir()

        with pytest.raises(EmptyFileError):
            write_archive(source, output_dir / "data.ypf")
        assert list(output_dir.iterdir()) == []

    def test_replaces_existing(self, tmp_path):
        source = make_tree(tmp_path / "src", {"a.txt": b"hi"})
        output = tmp_path / "data.ypf"
        output.write_bytes(b"old")

        write_archive(source, output)
        assert parse(output.read_bytes()).entries[0].filename == "a.txt"
