"""Codepage-aware string conversion for archive filenames.

YU-RIS tools identify encodings by Windows code page number (932 for
Shift-JIS, 936 for GBK, 65001 for UTF-8). Python codec names are accepted too.
"""

import codecs
from typing import Union

Codepage = Union[int, str]

# Code pages whose Python codec is not simply "cp<number>"
_CODEPAGE_NAMES = {
    65001: "utf-8",
    1200: "utf-16-le",
    1201: "utf-16-be",
    20127: "ascii",
    20932: "euc-jp",
    28591: "latin-1",
    51949: "euc-kr",
    54936: "gb18030",
}


def resolve_codepage(codepage: Codepage) -> str:
    """Return the Python codec name for a code page number or codec name."""
    if isinstance(codepage, str) and codepage.isdigit():
        codepage = int(codepage)
    if isinstance(codepage, int):
        name = _CODEPAGE_NAMES.get(codepage, f"cp{codepage}")
    else:
        name = codepage
    try:
        return codecs.lookup(name).name
    except LookupError:
        raise ValueError(f"Unknown codepage: {codepage}") from None


def decode_bytes(data: bytes, codepage: Codepage) -> str:
    """Decode bytes from a legacy codepage, replacing undecodable bytes."""
    return data.decode(resolve_codepage(codepage), errors="replace")


def encode_string(text: str, codepage: Codepage) -> bytes:
    """Encode text to a legacy codepage, replacing unencodable characters with '?'."""
    return text.encode(resolve_codepage(codepage), errors="replace")
