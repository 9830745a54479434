"""
JSON codec shared by the change detector and the snapshot store.

Parsing never raises: a document is either ``Parsed`` (a top-level JSON
object) or ``Unparseable`` (anything else, kept as raw bytes). Both
serializers sort keys so equal mappings always produce identical bytes.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Union

RESERVED_FIELD = "roLastUpdated"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


@dataclass(frozen=True)
class Parsed:
    mapping: Dict[str, Any]


@dataclass(frozen=True)
class Unparseable:
    raw: bytes


ParseResult = Union[Parsed, Unparseable]


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def parse_object(raw: bytes) -> ParseResult:
    """
    Classify ``raw`` as a JSON object or not.

    Documents the serializers cannot write back as UTF-8 JSON (lone
    surrogate escapes, NaN/Infinity, nesting past the recursion limit)
    are Unparseable too.
    """
    try:
        value = json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)
        if not isinstance(value, dict):
            return Unparseable(raw)
        canonical_bytes(value)
    except (UnicodeError, ValueError, RecursionError):
        return Unparseable(raw)
    return Parsed(value)


def strip_reserved(mapping: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in mapping.items() if k != RESERVED_FIELD}


def canonical_bytes(mapping: Dict[str, Any]) -> bytes:
    """Compact form used only for equality checks."""
    return json.dumps(
        mapping, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    ).encode("utf-8")


def pretty_bytes(mapping: Dict[str, Any]) -> bytes:
    """Indented form written to disk and handed to publishers."""
    return json.dumps(
        mapping, sort_keys=True, indent=2, ensure_ascii=False, allow_nan=False
    ).encode("utf-8")


def format_timestamp(instant: datetime) -> str:
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)
