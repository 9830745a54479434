"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any

from snapsync.clock import FixedClock
from snapsync.detector import ChangeDetector
from snapsync.logger import StructuredLogger, get_logger, reset_logger
from snapsync.storage import SnapshotStore


@pytest.fixture(autouse=True)
def quiet_logger():
    """Install a global logger with no console or file output for every test."""
    reset_logger()
    logger = get_logger(name="snapsync-test", enable_file=False, enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def store_root(tmp_path) -> Path:
    root = tmp_path / "data"
    root.mkdir()
    return root


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def detector(store_root, quiet_logger: StructuredLogger) -> ChangeDetector:
    return ChangeDetector(store_root, logger=quiet_logger)


@pytest.fixture
def store(store_root, clock, quiet_logger: StructuredLogger) -> SnapshotStore:
    return SnapshotStore(store_root, clock=clock, logger=quiet_logger)


@pytest.fixture
def user_document() -> Dict[str, Any]:
    """Document as returned by a users endpoint."""
    return {
        "id": "7",
        "name": "Alpha",
        "displayName": "Alpha Player",
        "created": "2019-05-04T10:00:00Z",
        "badges": [1, 2, 3],
    }


@pytest.fixture
def user_payload(user_document) -> bytes:
    return json.dumps(user_document).encode("utf-8")
