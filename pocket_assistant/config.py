"""Configuration management."""

import os
import yaml
from pathlib import Path
from typing import Any, Dict

_config: Dict[str, Any] = {}
_base_path: Path = None

# Keys holding filesystem paths, resolved against the project root
_PATH_KEYS = [
    ("database", "path"),
    ("logging", "file"),
    ("export", "directory"),
]


def load_config(config_path: str = None) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    global _config, _base_path

    if config_path is None:
        # Try to find config in common locations
        possible_paths = [
            Path("config/config.yaml"),
            Path("config.yaml"),
            Path.home() / ".config" / "pocket_assistant" / "config.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break
        else:
            raise FileNotFoundError(
                "No config.yaml found. Copy config/config.example.yaml to config/config.yaml "
                "and fill in your values."
            )

    config_path = Path(config_path)
    _base_path = config_path.parent.parent  # Project root

    with open(config_path) as f:
        _config = yaml.safe_load(f) or {}

    # Resolve relative paths
    _resolve_paths()

    return _config


def set_config(config: Dict[str, Any], base_path: str = None) -> Dict[str, Any]:
    """Install an already-parsed configuration (used by tests and scripts)."""
    global _config, _base_path

    _config = dict(config)
    _base_path = Path(base_path) if base_path else Path.cwd()
    _resolve_paths()
    return _config


def _resolve_paths():
    """Resolve relative paths in config to absolute paths."""
    global _config

    for section, key in _PATH_KEYS:
        if isinstance(_config.get(section), dict) and _config[section].get(key):
            path = Path(_config[section][key])
            if not path.is_absolute():
                _config[section][key] = str(_base_path / path)


def get_config() -> Dict[str, Any]:
    """Get the loaded configuration."""
    if not _config:
        load_config()
    return _config


def get(key: str, default: Any = None) -> Any:
    """Get a config value by dot-notation key (e.g., 'telegram.bot_token')."""
    if not _config:
        load_config()

    keys = key.split(".")
    value = _config
    for k in keys:
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default
    return value


def get_bot_token() -> str:
    """Bot token from config, falling back to the TELEGRAM_BOT_TOKEN environment variable."""
    token = get("telegram.bot_token")
    if not token or token == "YOUR_BOT_TOKEN_FROM_BOTFATHER":
        token = os.environ.get("TELEGRAM_BOT_TOKEN")
    return token
