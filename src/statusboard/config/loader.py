"""YAML config loader with environment variable interpolation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from statusboard.config.models import StatusboardConfig

CONFIG_FILENAME = ".statusboard.yaml"
CONFIG_ENV_VAR = "STATUSBOARD_CONFIG"

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def _interpolate_env(value: str) -> str:
    """Replace ${VAR} and ${VAR:-default} patterns with environment values."""

    def _replace(match: re.Match[str]) -> str:
        expr = match.group(1)
        if ":-" in expr:
            var_name, default = expr.split(":-", 1)
            return os.environ.get(var_name.strip(), default)
        return os.environ.get(expr.strip(), match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _interpolate_recursive(data: Any) -> Any:
    if isinstance(data, str):
        return _interpolate_env(data)
    if isinstance(data, dict):
        return {k: _interpolate_recursive(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_interpolate_recursive(item) for item in data]
    return data


def _slugify(name: str) -> str:
    return _SLUG_PATTERN.sub("-", name.lower()).strip("-")


def _normalize_services(services: Any) -> Any:
    """Accept services as a list as well as a key → entry mapping.

    List entries use their ``key`` field, or a slug of their name, as the key.
    The list order is kept as the row order.
    """
    if not isinstance(services, list):
        return services
    out: dict[str, Any] = {}
    for item in services:
        if not isinstance(item, dict):
            raise ValueError(f"Service entries must be mappings, got {item!r}")
        entry = dict(item)
        key = entry.pop("key", None) or _slugify(str(entry.get("name", "")))
        if not key:
            raise ValueError(f"Service entry needs a key or a name: {item!r}")
        if key in out:
            raise ValueError(f"Duplicate service key: {key}")
        out[key] = entry
    return out


def find_config_file(start: Path | None = None) -> Path | None:
    """Locate the config file.

    $STATUSBOARD_CONFIG wins when set; otherwise walk up from *start*
    (default cwd) looking for .statusboard.yaml.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    current = (start or Path.cwd()).resolve()
    for ancestor in [current, *current.parents]:
        candidate = ancestor / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None


def load_config(path: Path | None = None) -> StatusboardConfig:
    """Load and validate .statusboard.yaml, applying env-var interpolation."""
    config_path = path or find_config_file()
    if not config_path or not config_path.exists():
        raise FileNotFoundError(
            f"Could not find {CONFIG_FILENAME}. Create one from .statusboard.yaml.example, "
            f"set ${CONFIG_ENV_VAR} or specify a path."
        )
    with config_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid configuration in {config_path}: top level must be a mapping")
    data = _interpolate_recursive(raw)
    if "services" in data:
        try:
            data["services"] = _normalize_services(data["services"])
        except ValueError as exc:
            raise ValueError(f"Invalid configuration in {config_path}: {exc}") from exc
    try:
        return StatusboardConfig(**data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration in {config_path}: {exc}") from exc
