"""Tests for payload compression."""

import zlib

import pytest

from ypf_toolkit.errors import DecompressionError
from ypf_toolkit.ypf import payload


class TestStore:
    def test_compressible_data(self):
        raw = b"abc" * 1000
        stored, is_compressed = payload.store(raw)
        assert is_compressed
        assert len(stored) < len(raw)
        assert zlib.decompress(stored) == raw

    def test_small_data_stored_raw(self):
        stored, is_compressed = payload.store(b"hi")
        assert not is_compressed
        assert stored == b"hi"

    def test_level_zero_never_shrinks(self):
        raw = b"abc" * 100
        stored, is_compressed = payload.store(raw, level=0)
        assert not is_compressed
        assert stored == raw


class TestLoad:
    def test_uncompressed_copied(self):
        assert payload.load(b"hello", False, 5) == b"hello"

    def test_compressed(self):
        raw = b"xyz" * 50
        assert payload.load(zlib.compress(raw), True, len(raw)) == raw

    def test_inflate_failure(self):
        with pytest.raises(DecompressionError, match="bad.bin"):
            payload.load(b"not zlib data", True, 13, "bad.bin")

    def test_size_mismatch(self):
        with pytest.raises(DecompressionError, match="expected 10"):
            payload.load(zlib.compress(b"abc"), True, 10)
