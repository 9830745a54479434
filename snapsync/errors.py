"""
Error types raised by the snapshot core and its collaborators.

A missing snapshot is never an error: the change detector reports it as
a change. Degraded (raw byte) comparisons are not errors either.
"""

from pathlib import Path
from typing import Optional, Union


class SnapshotError(Exception):
    """Base class for snapshot core failures."""
    pass


class StoreIOError(SnapshotError):
    """Raised when reading or writing a snapshot file fails."""

    def __init__(self, message: str, path: Union[str, Path]):
        super().__init__(f"{message}: {path}")
        self.path = Path(path)


class FormatError(SnapshotError, ValueError):
    """Raised when a payload that must be a JSON object is not one."""
    pass


class InvalidKeyError(SnapshotError, ValueError):
    """Raised when a resource key cannot be mapped safely under the store root."""
    pass


class FetchError(Exception):
    """Raised when a remote document cannot be fetched."""

    def __init__(self, message: str, url: str, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status
