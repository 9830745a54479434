"""
Runtime settings.

Values come from an optional JSON config file, then environment
variables (``SNAPSYNC_*``, optionally loaded from ``.env``) override them.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from .schema import validate_config

DEFAULT_CONFIG_PATH = Path("config/snapsync.json")

ENV_OVERRIDES = {
    "SNAPSYNC_STORE_ROOT": "store_root",
    "SNAPSYNC_LOG_LEVEL": "log_level",
    "SNAPSYNC_LOG_DIR": "log_dir",
    "SNAPSYNC_API_KEY": "api_key",
    "SNAPSYNC_PUBLISH_DIR": "publish_dir",
}


@dataclass
class Settings:
    store_root: Path = Path("data")
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    api_map: Dict[str, str] = field(default_factory=dict)
    auth_endpoints: List[str] = field(default_factory=list)
    targets: Dict[str, List[str]] = field(default_factory=dict)
    api_key: Optional[str] = None
    publish_dir: Optional[Path] = None
    timeout: float = 15.0

    def url_for(self, endpoint_type: str, resource_id: str) -> str:
        template = self.api_map.get(endpoint_type)
        if template is None:
            raise ValueError(f"Unknown endpoint type: {endpoint_type}")
        return template.replace("{id}", str(resource_id))

    def headers_for(self, endpoint_type: str) -> Optional[Dict[str, str]]:
        """Auth headers for endpoints that need the API key, else None."""
        if endpoint_type not in self.auth_endpoints:
            return None
        if not self.api_key:
            raise ValueError(f"API key required for {endpoint_type} (set SNAPSYNC_API_KEY)")
        return {"x-api-key": self.api_key, "Accept": "application/json"}


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from ``path`` (or config/snapsync.json if it exists) and the environment.

    Raises:
        ValueError: If the config file is not valid JSON or fails validation
        FileNotFoundError: If an explicit ``path`` does not exist
    """
    data: Dict = {}
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if path is not None or config_path.exists():
        with config_path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Config file {config_path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a JSON object")

    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            data[field_name] = value

    errors = validate_config(data)
    if errors:
        raise ValueError("Invalid config: " + "; ".join(errors))

    settings = Settings(
        api_map=dict(data.get("api_map", {})),
        auth_endpoints=list(data.get("auth_endpoints", [])),
        targets={t: [str(i) for i in ids] for t, ids in data.get("targets", {}).items()},
        api_key=data.get("api_key"),
    )
    if data.get("store_root"):
        settings.store_root = Path(data["store_root"])
    if data.get("log_level"):
        settings.log_level = data["log_level"].upper()
    if data.get("log_dir"):
        settings.log_dir = Path(data["log_dir"])
    if data.get("publish_dir"):
        settings.publish_dir = Path(data["publish_dir"])
    if data.get("timeout") is not None:
        settings.timeout = float(data["timeout"])
    return settings
