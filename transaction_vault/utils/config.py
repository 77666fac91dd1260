"""
Configuration Management Module

Handles loading and validating application configuration from config.json
Merges user settings over defaults so new keys always exist
"""

import json
from pathlib import Path
import logging

logger = logging.getLogger("transaction_vault")

DEFAULT_CONFIG = {
    "storage": {
        "lock_timeout_seconds": 10,
    },
    "transfer": {
        "default_filename": "Transactions",
        "content_type": "application/octet-stream",
        "reject_empty_passphrase": False,
    },
    "logging": {
        "level": "INFO",
    },
}


def _defaults():
    return json.loads(json.dumps(DEFAULT_CONFIG))


def load_config(config_file: Path = None):
    """
    Load configuration from config.json with sensible defaults

    Args:
        config_file: Optional explicit path. Defaults to CONFIG_FILE.

    Returns:
        dict: Configuration dictionary
    """
    if config_file is None:
        from .constants import CONFIG_FILE
        config_file = CONFIG_FILE

    defaults = _defaults()

    if not config_file.exists():
        _save_config(config_file, defaults)
        return defaults

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = json.load(f)

        if not isinstance(config, dict):
            logger.error(f"Config file {config_file} is not a JSON object. Using defaults.")
            return defaults

        # Merge with defaults to ensure all keys exist
        merged = _deep_merge(defaults, config)

        # Save merged config back if anything was added
        if merged != config:
            _save_config(config_file, merged)

        return merged
    except json.JSONDecodeError as e:
        logger.error(f"Config file corrupted: {e}. Using defaults.")
        return defaults
    except OSError as e:
        logger.error(f"Error loading config: {e}. Using defaults.")
        return defaults


def _deep_merge(defaults: dict, override: dict) -> dict:
    """Overlay user settings on the defaults, section by section, so storage,
    transfer and logging keys added later still get a value."""
    merged = dict(defaults)
    for section, value in override.items():
        base = defaults.get(section)
        if isinstance(base, dict) and isinstance(value, dict):
            merged[section] = _deep_merge(base, value)
        else:
            merged[section] = value
    return merged


def _save_config(config_file: Path, config: dict):
    # Write failures are logged, never raised
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=4)
    except OSError as e:
        logger.error(f"[CONFIG] Could not write {config_file}: {e}")
