"""Exceptions raised by the YPF archive engine."""

from typing import Optional


class YPFError(Exception):
    """Base class for all YPF archive errors."""

    def __init__(self, message: str, name: Optional[str] = None):
        if name is not None:
            message = f"{message}: {name}"
        super().__init__(message)
        self.name = name


class BadMagicError(YPFError):
    """The buffer does not start with the YPF magic."""


class TruncatedInputError(YPFError):
    """The archive ends before a header, record or payload is complete."""


class NameChecksumMismatchError(YPFError):
    """A directory filename does not match its stored checksum."""


class DataChecksumMismatchError(YPFError):
    """Stored payload bytes do not match the entry's data checksum.

    Extraction treats this as a warning; the exception type exists so callers
    can collect or raise it themselves.
    """


class DecompressionError(YPFError):
    """A compressed payload could not be inflated to its recorded size."""


class DuplicateFilenameError(YPFError):
    """Two source files map to the same archive filename."""


class EmptyFilenameError(YPFError):
    """A source file maps to an empty archive filename."""


class FilenameTooLongError(YPFError):
    """An encoded filename has no valid one-byte length encoding."""


class EmptyFileError(YPFError):
    """A source file has no content."""


class FileTooLargeError(YPFError):
    """A source file does not fit the 32-bit size fields."""


class OutputSizeExceededError(YPFError):
    """The assembled archive exceeds what the format version can address."""


class DirectorySizeMismatchError(YPFError):
    """A serialized directory does not have its declared size."""


class UnsafePathError(YPFError):
    """An archive filename would be written outside the destination."""
