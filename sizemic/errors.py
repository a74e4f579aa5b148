"""Error kinds raised by sizemic components."""

from __future__ import annotations


class SizemicError(Exception):
    """Base class for all sizemic errors."""


class InvalidInputError(SizemicError):
    """Bad arguments: source is not a directory, no sizing mode chosen, ..."""


class IOFailureError(SizemicError):
    """Reading, writing, creating or removing files or directories failed."""


class ExternalToolError(SizemicError):
    """The image library failed to identify or resize an image."""

    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message
