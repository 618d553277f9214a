"""Filename obfuscation used in YPF directories.

A stored filename is preceded by one length byte. The byte is complemented
and then looked up in a fixed permutation table to give the real length.
The name bytes themselves are complemented and XORed with a per-version key.
"""

from typing import Sequence, Tuple

from ..errors import FilenameTooLongError
from ..utils.text import Codepage, decode_bytes, encode_string

MAX_NAME_LENGTH = 255

SWAP_TABLE_V500 = (
    0, 1, 2, 10, 4, 5, 53, 7, 8, 11, 3, 9, 16, 19, 14, 15,
    12, 24, 18, 13, 46, 27, 22, 23, 17, 25, 26, 21, 30, 29, 28, 31,
    35, 33, 34, 32, 36, 37, 41, 39, 40, 38, 42, 43, 47, 45, 20, 44,
    48, 49, 50, 51, 52, 6, 54, 55, 56, 57, 58, 59, 60, 61, 62, 63,
    64, 65, 66, 67, 68, 69, 70, 71, 72, 73, 74, 75, 76, 77, 78, 79,
    80, 81, 82, 83, 84, 85, 86, 87, 88, 89, 90, 91, 92, 93, 94, 95,
    96, 97, 98, 99, 100, 101, 102, 103, 104, 105, 106, 107, 108, 109, 110, 111,
    112, 113, 114, 115, 116, 117, 118, 119, 120, 121, 122, 123, 124, 125, 126, 127,
    128, 129, 130, 131, 132, 133, 134, 135, 136, 137, 138, 139, 140, 141, 142, 143,
    144, 145, 146, 147, 148, 149, 150, 151, 152, 153, 154, 155, 156, 157, 158, 159,
    160, 161, 162, 163, 164, 165, 166, 167, 168, 169, 170, 171, 172, 173, 174, 175,
    176, 177, 178, 179, 180, 181, 182, 183, 184, 185, 186, 187, 188, 189, 190, 191,
    192, 193, 194, 195, 196, 197, 198, 199, 200, 201, 202, 203, 204, 205, 206, 207,
    208, 209, 210, 211, 212, 213, 214, 215, 216, 217, 218, 219, 220, 221, 222, 223,
    224, 225, 226, 227, 228, 229, 230, 231, 232, 233, 234, 235, 236, 237, 238, 239,
    240, 241, 242, 243, 244, 245, 246, 247, 248, 249, 250, 251, 252, 253, 254, 255,
)

SWAP_TABLE_LEGACY = (
    0, 1, 2, 72, 4, 5, 53, 7, 8, 11, 10, 9, 16, 19, 14, 15,
    12, 25, 18, 13, 20, 27, 22, 23, 24, 17, 26, 21, 30, 29, 28, 31,
    35, 33, 34, 32, 36, 37, 41, 39, 40, 38, 42, 43, 47, 45, 50, 44,
    48, 49, 46, 51, 52, 6, 54, 55, 56, 57, 58, 59, 60, 61, 62, 63,
    64, 65, 66, 67, 68, 69, 70, 71, 3, 73, 74, 75, 76, 77, 78, 79,
    80, 81, 82, 83, 84, 85, 86, 87, 88, 89, 90, 91, 92, 93, 94, 95,
    96, 97, 98, 99, 100, 101, 102, 103, 104, 105, 106, 107, 108, 109, 110, 111,
    112, 113, 114, 115, 116, 117, 118, 119, 120, 121, 122, 123, 124, 125, 126, 127,
    128, 129, 130, 131, 132, 133, 134, 135, 136, 137, 138, 139, 140, 141, 142, 143,
    144, 145, 146, 147, 148, 149, 150, 151, 152, 153, 154, 155, 156, 157, 158, 159,
    160, 161, 162, 163, 164, 165, 166, 167, 168, 169, 170, 171, 172, 173, 174, 175,
    176, 177, 178, 179, 180, 181, 182, 183, 184, 185, 186, 187, 188, 189, 190, 191,
    192, 193, 194, 195, 196, 197, 198, 199, 200, 201, 202, 203, 204, 205, 206, 207,
    208, 209, 210, 211, 212, 213, 214, 215, 216, 217, 218, 219, 220, 221, 222, 223,
    224, 225, 226, 227, 228, 229, 230, 231, 232, 233, 234, 235, 236, 237, 238, 239,
    240, 241, 242, 243, 244, 245, 246, 247, 248, 249, 250, 251, 252, 253, 254, 255,
)


def swap_table_for(version: int) -> Tuple[int, ...]:
    return SWAP_TABLE_V500 if version >= 500 else SWAP_TABLE_LEGACY


def cipher_key_for(version: int) -> int:
    """Return the XOR key applied to filename bytes for an archive version."""
    if version == 290:
        return 64
    if version > 500:
        return 54
    return 0


def decode_length(length_byte: int, table: Sequence[int]) -> int:
    """Turn a stored length byte into the filename's byte length."""
    return table[~length_byte & 0xFF]


def encode_length(length: int, table: Sequence[int]) -> int:
    """Turn a filename byte length into the length byte to store."""
    for index, value in enumerate(table):
        if value == length:
            return ~index & 0xFF
    raise FilenameTooLongError(f"No length encoding for {length} bytes")


def cipher_name(plain: bytes, key: int) -> bytes:
    return bytes(~(b ^ key) & 0xFF for b in plain)


def decipher_name(stored: bytes, key: int) -> bytes:
    return bytes((~b & 0xFF) ^ key for b in stored)


def encode_name(name: str, profile, codepage: Codepage) -> Tuple[int, bytes]:
    """Encode a filename for the directory.

    Returns the obfuscated length byte and the ciphered name bytes.
    """
    encoded = encode_string(name, codepage)
    if len(encoded) > MAX_NAME_LENGTH:
        raise FilenameTooLongError(f"Encoded filename is {len(encoded)} bytes, limit is {MAX_NAME_LENGTH}", name)
    try:
        length_byte = encode_length(len(encoded), profile.swap_table)
    except FilenameTooLongError:
        raise FilenameTooLongError(f"No length encoding for {len(encoded)} bytes", name) from None
    return length_byte, cipher_name(encoded, profile.cipher_key)


def decode_name(stored: bytes, profile, codepage: Codepage) -> str:
    """Recover the filename text from ciphered directory bytes."""
    return decode_bytes(decipher_name(stored, profile.cipher_key), codepage)
