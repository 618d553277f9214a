"""Member payload compression."""

import zlib
from typing import Tuple

from ..errors import DecompressionError


def store(raw: bytes, level: int = zlib.Z_DEFAULT_COMPRESSION) -> Tuple[bytes, bool]:
    """Return the bytes to store for raw and whether they are compressed.

    The zlib stream is kept only when it is strictly smaller than the input.
    """
    compressed = zlib.compress(raw, level)
    if len(compressed) < len(raw):
        return compressed, True
    return bytes(raw), False


def load(stored: bytes, is_compressed: bool, raw_size: int, name: str = "") -> bytes:
    """Recover member bytes from their stored form."""
    if not is_compressed:
        return bytes(stored)

    try:
        data = zlib.decompress(stored)
    except zlib.error as e:
        raise DecompressionError(f"Inflate failed ({e})", name) from e

    if len(data) != raw_size:
        raise DecompressionError(f"Inflated {len(data)} bytes, expected {raw_size}", name)
    return data
