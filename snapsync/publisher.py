"""
Publishing layer.

Publishers receive the exact bytes returned by ``SnapshotStore.save`` and
are only called for documents whose content changed.
"""

from pathlib import Path
from typing import Optional, Protocol, Union

from .errors import StoreIOError
from .keys import resolve_path
from .logger import StructuredLogger, get_logger


class Publisher(Protocol):
    def publish(self, key: str, content: bytes, summary: str) -> None: ...


class LogPublisher:
    """Publisher that only records what would have been published."""

    def __init__(self, logger: Optional[StructuredLogger] = None):
        self.logger = logger or get_logger()

    def publish(self, key: str, content: bytes, summary: str) -> None:
        self.logger.info("Publish", key=key, size=len(content), summary=summary)
        self.logger.record_publish()


class DirectoryPublisher:
    """Writes published documents under a separate directory tree."""

    def __init__(self, root: Union[str, Path], logger: Optional[StructuredLogger] = None):
        self.root = Path(root)
        self.logger = logger or get_logger()

    def publish(self, key: str, content: bytes, summary: str) -> None:
        path = resolve_path(self.root, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            self.logger.error("Failed to publish", key=key, path=str(path), error=str(e))
            raise StoreIOError("Failed to publish document", path) from e
        self.logger.info("Published", key=key, path=str(path), summary=summary)
        self.logger.record_publish()
