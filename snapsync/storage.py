"""
Snapshot persistence.

Every save stamps the payload with ``roLastUpdated`` and replaces the
snapshot file through a temp-file-then-rename sequence, so readers see
either the previous complete snapshot or the new one.
"""

import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .clock import Clock, SystemClock
from .codec import RESERVED_FIELD, Unparseable, format_timestamp, parse_object, pretty_bytes
from .errors import FormatError, StoreIOError
from .keys import resolve_path
from .logger import StructuredLogger, get_logger

TEMP_MARKER = ".tmp-"


@contextmanager
def _temp_file(directory: Path, name: str) -> Iterator[Path]:
    """Yield a fresh temp file path in ``directory``; remove it on exit unless it was renamed away."""
    fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f"{name}{TEMP_MARKER}")
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        yield tmp_path
    finally:
        tmp_path.unlink(missing_ok=True)


def _replace(src: Path, dest: Path) -> None:
    try:
        os.replace(src, dest)
    except OSError as first_error:
        # Some filesystems refuse to rename over an existing file
        try:
            dest.unlink(missing_ok=True)
        except OSError:
            raise first_error
        os.replace(src, dest)


class SnapshotStore:
    def __init__(
        self,
        store_root: Union[str, Path],
        clock: Optional[Clock] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.store_root = Path(store_root)
        self.clock = clock or SystemClock()
        self.logger = logger or get_logger()

    def path_for(self, key: str) -> Path:
        return resolve_path(self.store_root, key)

    def save(self, key: str, payload: bytes) -> bytes:
        """
        Stamp ``payload`` with the capture time and persist it atomically.

        Args:
            key: Resource key
            payload: JSON object bytes as fetched

        Returns:
            The exact bytes now stored for ``key``

        Raises:
            FormatError: If payload is not a JSON object
            StoreIOError: If any filesystem step fails
        """
        parsed = parse_object(payload)
        if isinstance(parsed, Unparseable):
            self.logger.error("Refusing to save non-object payload", key=key)
            raise FormatError(f"Payload for {key!r} is not a JSON object")

        document = dict(parsed.mapping)
        document[RESERVED_FIELD] = format_timestamp(self.clock.now())
        data = pretty_bytes(document)

        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self._fail(e, "Failed to create snapshot directory", path.parent)

        try:
            self._write_atomic(path, data)
        except OSError as e:
            self._fail(e, "Failed to write snapshot", path)

        self.logger.record_save()
        self.logger.debug("Saved snapshot", key=key, path=str(path), size=len(data))
        return data

    def _write_atomic(self, path: Path, data: bytes) -> None:
        with _temp_file(path.parent, path.name) as tmp_path:
            with open(tmp_path, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            _replace(tmp_path, path)

    def _fail(self, error: OSError, message: str, path: Path):
        self.logger.record_failure("save", type(error).__name__)
        self.logger.error(message, path=str(path), error=str(error))
        raise StoreIOError(message, path) from error

    def read(self, key: str) -> Optional[bytes]:
        """Raw stored bytes for ``key``, or None if nothing was saved yet."""
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreIOError("Failed to read snapshot", path) from e

    def list_keys(self) -> List[str]:
        if not self.store_root.exists():
            return []
        keys = []
        for p in self.store_root.rglob("*"):
            if p.is_file() and TEMP_MARKER not in p.name:
                keys.append(p.relative_to(self.store_root).as_posix())
        return sorted(keys)
