"""
cdrquery/config.py
Configuration for the CDR query service. Reads cdrquery_config.json from
the project root, merged over defaults, then applies environment overrides.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "cdrquery_config.json"

DEFAULT_CONFIG = {
    "source_dir": None,
    "host": "127.0.0.1",
    "port": 8765,
    "log_level": "INFO",
}

# env var → config key
ENV_OVERRIDES = {
    "CDR_SOURCE_DIR": "source_dir",
    "CDR_API_HOST": "host",
    "CDR_API_PORT": "port",
    "CDR_LOG_LEVEL": "log_level",
}


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return Path(root) / CONFIG_FILENAME


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load config file plus environment overrides. Returns defaults if missing."""
    config = dict(DEFAULT_CONFIG)
    path = _config_path(project_root)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            config.update(data)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Config load failed: {e}")

    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value

    try:
        config["port"] = int(config["port"])
    except (TypeError, ValueError):
        logger.warning(f"Invalid port {config['port']!r}, using {DEFAULT_CONFIG['port']}")
        config["port"] = DEFAULT_CONFIG["port"]
    return config


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to cdrquery_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def resolve_source_dir(
    explicit: Optional[Path] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Path:
    """
    Directory holding the *.csv source files.
    An explicit path wins; otherwise config/env. ValueError if neither is set.
    """
    if explicit:
        return Path(explicit)
    config = config if config is not None else load_config()
    source_dir = config.get("source_dir")
    if not source_dir:
        raise ValueError(
            f"No CDR source directory configured. Pass --dir, set CDR_SOURCE_DIR, "
            f"or add source_dir to {CONFIG_FILENAME}"
        )
    return Path(source_dir)
