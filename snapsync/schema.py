from typing import Any, Dict, List

LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
PATH_FIELDS = ["store_root", "log_dir", "publish_dir"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_config(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    All fields are optional; only the ones present are checked.
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        return ["Config must be a JSON object"]

    for f in PATH_FIELDS:
        if f in data and data[f] is not None and not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string if provided")

    level = data.get("log_level")
    if level is not None and (not isinstance(level, str) or level.upper() not in LEVELS):
        errors.append(f"Field 'log_level' must be one of {sorted(LEVELS)}")

    timeout = data.get("timeout")
    if timeout is not None and (isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0):
        errors.append("Field 'timeout' must be a positive number")

    api_map = data.get("api_map", {})
    if not isinstance(api_map, dict):
        errors.append("Field 'api_map' must be an object of endpoint type -> URL template")
        api_map = {}
    for endpoint_type, template in api_map.items():
        if not _is_non_empty_str(endpoint_type) or "/" in endpoint_type:
            errors.append(f"Endpoint type {endpoint_type!r} must be a non-empty name without '/'")
        if not _is_non_empty_str(template):
            errors.append(f"URL template for '{endpoint_type}' must be a non-empty string")
        elif template.count("{id}") != 1:
            errors.append(f"URL template for '{endpoint_type}' must contain exactly one {{id}} placeholder")

    auth = data.get("auth_endpoints", [])
    if not isinstance(auth, list) or not all(isinstance(a, str) for a in auth):
        errors.append("Field 'auth_endpoints' must be a list of endpoint types")
    else:
        for a in auth:
            if a not in api_map:
                errors.append(f"Auth endpoint '{a}' is not defined in api_map")

    targets = data.get("targets", {})
    if not isinstance(targets, dict):
        errors.append("Field 'targets' must be an object of endpoint type -> list of ids")
    else:
        for endpoint_type, ids in targets.items():
            if endpoint_type not in api_map:
                errors.append(f"Target type '{endpoint_type}' is not defined in api_map")
            if not isinstance(ids, list) or not all(_is_non_empty_str(i) or (isinstance(i, int) and not isinstance(i, bool)) for i in ids):
                errors.append(f"Targets for '{endpoint_type}' must be a list of ids")

    return errors
