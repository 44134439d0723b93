"""
Simple config loader for backend components.
Reads directly from the centralized TOML config.

@.architecture
Incoming: config/server.toml, config/settings.py --- {TOML file, load_config calls}
Processing: load_config(), get_fallback_config(), get_section() --- {3 jobs: config_loading, fallback_generation, section_extraction}
Outgoing: config/settings.py --- {Dict[str, Any] config data}
"""

import logging
import toml
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).parent.parent / "config" / "server.toml"


def load_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from the centralized TOML file."""
    config_file = config_file or DEFAULT_CONFIG_FILE
    try:
        with open(config_file, 'r') as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Failed to load config file {config_file}: {e}")
        return get_fallback_config()


def get_fallback_config() -> Dict[str, Any]:
    """Fallback configuration if TOML file can't be loaded."""
    return {
        "SERVER": {
            "bind_host": "0.0.0.0",
            "bind_port": 3000,
        },
        "STORAGE": {
            "uploads_dir": "uploads",
            "images_dir": "public/images",
            "max_upload_size_mb": 100,
        },
    }


def get_section(name: str, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Get one top-level section of the config (empty dict if absent)."""
    config = config if config is not None else load_config()
    section = config.get(name, {})
    return section if isinstance(section, dict) else {}
