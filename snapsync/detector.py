"""
Change detection for persisted snapshots.

A new payload is "changed" when its content differs from the stored
snapshot once the ``roLastUpdated`` bookkeeping field is removed from
both sides. Documents that are not JSON objects are compared as raw
bytes instead of failing.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from .codec import Parsed, Unparseable, canonical_bytes, parse_object, strip_reserved
from .errors import StoreIOError
from .keys import resolve_path
from .logger import StructuredLogger, get_logger


class ChangeDetector:
    def __init__(self, store_root: Union[str, Path], logger: Optional[StructuredLogger] = None):
        self.store_root = Path(store_root)
        self.logger = logger or get_logger()

    def _read_stored(self, path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            self.logger.error("Failed to read snapshot", path=str(path), error=str(e))
            raise StoreIOError("Failed to read snapshot", path) from e

    def has_changed(self, key: str, new_payload: bytes) -> bool:
        """
        Return True if persisting ``new_payload`` under ``key`` would change
        the stored content.

        Raises:
            StoreIOError: If the stored snapshot exists but cannot be read
        """
        path = resolve_path(self.store_root, key)
        self.logger.debug("Checking snapshot", key=key, path=str(path))

        old_raw = self._read_stored(path)
        if old_raw is None:
            self.logger.debug("No snapshot on disk, treating as changed", path=str(path))
            self.logger.record_check(changed=True)
            return True

        old = parse_object(old_raw)
        if isinstance(old, Unparseable):
            return self._raw_compare(path, old_raw, new_payload, side="stored")
        old_canonical = canonical_bytes(strip_reserved(old.mapping))

        new = parse_object(new_payload)
        if isinstance(new, Unparseable):
            # Compare against the original stored bytes, not the stripped form
            return self._raw_compare(path, old_raw, new_payload, side="new")
        new_canonical = canonical_bytes(strip_reserved(new.mapping))

        changed = old_canonical != new_canonical
        self.logger.debug(
            "Content changed" if changed else "Content unchanged", path=str(path)
        )
        self.logger.record_check(changed=changed)
        return changed

    def _raw_compare(self, path: Path, old_raw: bytes, new_payload: bytes, side: str) -> bool:
        changed = old_raw != new_payload
        self.logger.debug(
            "Not a JSON object, falling back to raw compare",
            path=str(path),
            unparseable=side,
            changed=changed,
        )
        self.logger.record_check(changed=changed, degraded=True)
        return changed

    def changed_fields(self, key: str, new_payload: bytes) -> Dict[str, Dict[str, Any]]:
        """Top-level fields that differ from the stored snapshot, for log output."""
        old_raw = self._read_stored(resolve_path(self.store_root, key))
        if old_raw is None:
            return {}
        old = parse_object(old_raw)
        new = parse_object(new_payload)
        if not (isinstance(old, Parsed) and isinstance(new, Parsed)):
            return {}
        return diff_dict(strip_reserved(old.mapping), strip_reserved(new.mapping))


def diff_dict(old: Dict[str, Any], new: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    changed = {}
    keys = set(old.keys()) | set(new.keys())
    for k in sorted(keys):
        ov = old.get(k)
        nv = new.get(k)
        if ov != nv or (k in old) != (k in new):
            changed[k] = {"old": ov, "new": nv}
    return changed
