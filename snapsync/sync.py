"""
Sync pipeline: fetch -> detect change -> save -> publish.

Snapshots fetched from endpoints are always saved so their timestamp
stays fresh; only documents whose content changed are published.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional

from .config import Settings
from .detector import ChangeDetector
from .errors import StoreIOError
from .fetcher import fetch
from .keys import endpoint_key
from .logger import get_logger
from .publisher import Publisher
from .storage import SnapshotStore

FetchFn = Callable[..., bytes]


@dataclass
class SyncResult:
    key: str
    changed: bool
    published: bool
    content: Optional[bytes] = None


def sync_endpoint(
    settings: Settings,
    endpoint_type: str,
    resource_id: str,
    detector: ChangeDetector,
    store: SnapshotStore,
    publisher: Publisher,
    fetch_fn: FetchFn = fetch,
) -> SyncResult:
    """
    Fetch one endpoint document and sync it.

    Raises:
        ValueError: Unknown endpoint type or missing API key
        FetchError: Remote fetch failed
        StoreIOError / FormatError: Snapshot could not be checked or saved
    """
    logger = get_logger()
    url = settings.url_for(endpoint_type, resource_id)
    headers = settings.headers_for(endpoint_type)
    key = endpoint_key(endpoint_type, resource_id)

    payload = fetch_fn(url, headers=headers, timeout=settings.timeout)

    changed = detector.has_changed(key, payload)
    if changed:
        diff = detector.changed_fields(key, payload)
        if diff:
            logger.debug("Changed fields", key=key, fields=sorted(diff))

    logger.info(f"Updating data for {url}")
    content = store.save(key, payload)

    if not changed:
        logger.info(f"No meaningful changes for {url}, skipping publish")
        return SyncResult(key=key, changed=False, published=False, content=content)

    logger.info(f"Meaningful changes detected for {url}, publishing")
    publisher.publish(key, content, f"Automated update from {url}")
    return SyncResult(key=key, changed=True, published=True, content=content)


def sync_local_file(
    path: Path,
    key: str,
    detector: ChangeDetector,
    store: SnapshotStore,
    publisher: Publisher,
) -> SyncResult:
    """
    Sync a local JSON document (e.g. a static index file).

    Unlike endpoint syncs, an unchanged local file is neither re-saved
    nor published.
    """
    logger = get_logger()
    path = Path(path)
    try:
        payload = path.read_bytes()
    except OSError as e:
        raise StoreIOError("Failed to read input document", path) from e

    if not detector.has_changed(key, payload):
        logger.info(f"{key} unchanged, skipping")
        return SyncResult(key=key, changed=False, published=False)

    content = store.save(key, payload)
    publisher.publish(key, content, f"Automated sync of {key}")
    logger.info(f"Successfully synced {key}")
    return SyncResult(key=key, changed=True, published=True, content=content)


def sync_all(
    settings: Settings,
    targets: Dict[str, list],
    detector: ChangeDetector,
    store: SnapshotStore,
    publisher: Publisher,
    fetch_fn: FetchFn = fetch,
) -> Dict[str, int]:
    """Sync every ``{endpoint_type: [ids]}`` target; failures are logged and counted, not raised."""
    logger = get_logger()
    counts = {"changed": 0, "unchanged": 0, "failed": 0}
    for endpoint_type, ids in targets.items():
        for resource_id in ids:
            try:
                result = sync_endpoint(
                    settings, endpoint_type, str(resource_id), detector, store, publisher, fetch_fn
                )
            except Exception as e:
                counts["failed"] += 1
                logger.error(
                    "Sync failed",
                    endpoint_type=endpoint_type,
                    resource_id=resource_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue
            counts["changed" if result.changed else "unchanged"] += 1
    return counts
