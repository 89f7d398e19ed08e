"""
Exceptions raised by the archiver backend.
"""

from __future__ import annotations

from pathlib import Path


class ArchiverError(Exception):
    """Base exception for all archiver errors."""


class MetadataError(ArchiverError):
    """Raised when an item's metadata document cannot be rewritten."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path


class MetadataReadError(MetadataError):
    """The metadata file (or the directory listing it) could not be read."""


class MetadataParseError(MetadataError):
    """The metadata file is not a valid JSON object."""


class MetadataWriteError(MetadataError):
    """The rewritten metadata could not be written back."""


class ItemNotFoundError(ArchiverError):
    """Raised when the requested item does not exist in the content tree."""


class BuildFailedError(ArchiverError):
    """Raised when an archive cannot be built or read back from the cache."""
