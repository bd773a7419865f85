"""Configuration loading for apicheck (.apicheck.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import ConfigError

CONFIG_FILENAME = ".apicheck.yml"
DEFAULT_BASE = "HEAD"


@dataclass
class ApiCheckConfig:
    """Represents the settings defined in .apicheck.yml."""

    root: Path
    base: str = DEFAULT_BASE
    exit_code: int = 0
    jobs: int = 1
    exclude_paths: List[str] = field(default_factory=list)
    fail_on_removed_package: bool = False


def load_config(config_path: Path) -> ApiCheckConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ApiCheckConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = ApiCheckConfig(root=root)
    base = _as_str(data.get("base"))
    if base:
        config.base = base
    exit_code = _as_int(data.get("exit_code"))
    if exit_code is not None:
        if not 0 <= exit_code <= 255:
            raise ConfigError("exit_code must be between 0 and 255")
        config.exit_code = exit_code
    jobs = _as_int(data.get("jobs"))
    if jobs is not None:
        if jobs < 1:
            raise ConfigError("jobs must be at least 1")
        config.jobs = jobs
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    config.fail_on_removed_package = _as_bool(data.get("fail_on_removed_package")) or False
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["ApiCheckConfig", "CONFIG_FILENAME", "DEFAULT_BASE", "ConfigError", "load_config"]
