"""YAML-based configuration management.

The config lives at ~/.config/ark-manager/config.yaml (or under
$XDG_CONFIG_HOME). Values not present in the file fall back to
DEFAULT_CONFIG. The store path can be overridden with ARK_MANAGER_DB.
"""

from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DB_ENV_VAR = "ARK_MANAGER_DB"

# None means "derive from the config directory"
DEFAULT_CONFIG: dict[str, Any] = {
    "db_path": None,
    "tick_rate_ms": 200,
    "service_manager": "systemctl",
    "service_timeout": 15,
    "debug": False,
    "log_file": None,
    "theme": None,
}


def get_config_dir() -> Path:
    """Get the ark-manager config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(xdg_config) / "ark-manager"


def get_config_path() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.yaml"


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config() -> dict[str, Any]:
    """Load config.yaml merged over the defaults."""
    config_path = get_config_path()
    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            return copy.deepcopy(DEFAULT_CONFIG)
        return _deep_merge(copy.deepcopy(DEFAULT_CONFIG), data)
    except FileNotFoundError:
        return copy.deepcopy(DEFAULT_CONFIG)
    except (yaml.YAMLError, OSError) as e:
        logger.warning(f"Ignoring unreadable config {config_path}: {e}")
        return copy.deepcopy(DEFAULT_CONFIG)


def save_config(cfg: dict[str, Any]) -> None:
    """Save the config file."""
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        yaml.dump(cfg, f, default_flow_style=False, sort_keys=False)


def get_db_path(cfg: dict[str, Any] | None = None, override: str | None = None) -> Path:
    """Resolve the store path.

    Precedence: explicit override, then $ARK_MANAGER_DB, then config, then
    db.json inside the config directory.
    """
    if override:
        return Path(os.path.expanduser(override))
    env_path = (os.environ.get(DB_ENV_VAR) or "").strip()
    if env_path:
        return Path(os.path.expanduser(env_path))
    if cfg is None:
        cfg = load_config()
    raw = cfg.get("db_path")
    if raw:
        return Path(os.path.expanduser(str(raw)))
    return get_config_dir() / "db.json"


def get_log_path(cfg: dict[str, Any] | None = None) -> Path:
    """Resolve the log file path."""
    if cfg is None:
        cfg = load_config()
    raw = cfg.get("log_file")
    if raw:
        return Path(os.path.expanduser(str(raw)))
    return get_config_dir() / "ark-manager.log"


def _positive_number(cfg: dict[str, Any], key: str) -> float:
    raw = cfg.get(key, DEFAULT_CONFIG[key])
    try:
        value = float(raw)
    except (TypeError, ValueError):
        value = float(DEFAULT_CONFIG[key])
    if value <= 0:
        value = float(DEFAULT_CONFIG[key])
    return value


def get_tick_rate(cfg: dict[str, Any] | None = None) -> float:
    """Tick interval in seconds."""
    if cfg is None:
        cfg = load_config()
    return _positive_number(cfg, "tick_rate_ms") / 1000.0


def get_service_timeout(cfg: dict[str, Any] | None = None) -> float:
    """Timeout in seconds for one service manager invocation."""
    if cfg is None:
        cfg = load_config()
    return _positive_number(cfg, "service_timeout")


def get_service_manager(cfg: dict[str, Any] | None = None) -> str:
    """Executable used for service actions."""
    if cfg is None:
        cfg = load_config()
    raw = cfg.get("service_manager") or DEFAULT_CONFIG["service_manager"]
    return str(raw)
