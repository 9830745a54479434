from pathlib import Path

from .errors import InvalidKeyError


def normalize_key(key: str) -> str:
    if not isinstance(key, str):
        raise InvalidKeyError(f"Resource key must be a string, got {type(key).__name__}")
    cleaned = key.strip().replace("\\", "/").lstrip("/")
    parts = cleaned.split("/")
    for part in parts:
        if part in ("", ".", ".."):
            raise InvalidKeyError(f"Unsafe resource key: {key!r}")
    return "/".join(parts)


def resolve_path(root: Path, key: str) -> Path:
    return Path(root) / normalize_key(key)


def endpoint_key(endpoint_type: str, resource_id: str) -> str:
    """Key used for documents fetched from an endpoint, e.g. ``users-7.json``."""
    return normalize_key(f"{endpoint_type.strip()}-{str(resource_id).strip()}.json")
