"""
Settings Management

Pydantic-based settings schema with environment variable support.
Integrates with the TOML config file and provides type-safe access.

@.architecture
Incoming: utils/config.py, Environment variables, config/server.toml, api/dependencies.py --- {Dict from load_toml_config, str from os.getenv, get_settings calls}
Processing: get_settings(), reload_settings(), Settings.__init__(), field_validator() --- {4 jobs: configuration_loading, environment_variable_merging, schema_validation, caching}
Outgoing: api/dependencies.py, app.py, main.py, api/endpoints/*.py --- {Settings Pydantic model with typed config sections}
"""

import os
from pathlib import Path
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator
from functools import lru_cache

from utils.config import get_section, load_config as load_toml_config


# =============================================================================
# Settings Schemas
# =============================================================================

class StorageSettings(BaseModel):
    """File storage settings."""
    uploads_dir: Path = Field(default_factory=lambda: Path("uploads"))
    images_dir: Path = Field(default_factory=lambda: Path("public/images"))
    image_content_prefix: str = "image/"
    image_url_prefix: str = "/public/images"
    max_upload_size_mb: int = Field(default=100, ge=1)

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @field_validator('image_url_prefix')
    @classmethod
    def validate_route(cls, v: str) -> str:
        """The static mount prefix is absolute and carries no trailing slash."""
        v = "/" + v.strip("/")
        if v == "/":
            raise ValueError("Route prefix cannot be the site root")
        return v


class SecuritySettings(BaseModel):
    """Bind address and CORS configuration."""
    bind_host: str = "0.0.0.0"
    bind_port: int = 3000
    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])


class MonitoringSettings(BaseModel):
    """Monitoring and logging configuration."""
    log_level: Optional[str] = None    # None keeps the environment preset
    log_format: Optional[str] = None   # json|text, None keeps the environment preset
    metrics_enabled: bool = True

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: Optional[str]) -> Optional[str]:
        allowed = ['json', 'text']
        if v is not None and v not in allowed:
            raise ValueError(f"Log format must be one of {allowed}")
        return v


class Settings(BaseModel):
    """
    Main application settings.

    Loads configuration from:
    1. TOML config file (config/server.toml)
    2. Environment variables
    3. Defaults defined in schemas

    Priority: Environment variables > TOML config > Defaults
    """

    app_name: str = "File Services API"
    app_version: str = "1.0.0"
    environment: str = "development"  # development|production|test

    storage: StorageSettings = Field(default_factory=StorageSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ['development', 'production', 'test']
        if v not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v


# =============================================================================
# Settings Loader
# =============================================================================

# Environment variable -> (section, field)
ENV_OVERRIDES = {
    "SECURITY_BIND_HOST": ("security", "bind_host"),
    "PORT": ("security", "bind_port"),
    "STORAGE_UPLOADS_DIR": ("storage", "uploads_dir"),
    "STORAGE_IMAGES_DIR": ("storage", "images_dir"),
    "STORAGE_MAX_UPLOAD_SIZE_MB": ("storage", "max_upload_size_mb"),
    "MONITORING_LOG_LEVEL": ("monitoring", "log_level"),
    "MONITORING_LOG_FORMAT": ("monitoring", "log_format"),
}


def _toml_sections(toml_config: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Map TOML tables onto settings sections."""
    server = get_section("SERVER", toml_config)
    storage = get_section("STORAGE", toml_config)
    monitoring = get_section("MONITORING", toml_config)

    sections: Dict[str, Dict[str, Any]] = {}

    security = {k: v for k, v in server.items() if k in SecuritySettings.model_fields}
    if security:
        sections["security"] = security

    storage = {k: v for k, v in storage.items() if k in StorageSettings.model_fields}
    if storage:
        sections["storage"] = storage

    monitoring = {k: v for k, v in monitoring.items() if k in MonitoringSettings.model_fields}
    if monitoring:
        sections["monitoring"] = monitoring

    return sections


@lru_cache()
def get_settings() -> Settings:
    """
    Load and return application settings (cached).

    Merges configuration from:
    1. TOML config file (via utils.config; FILESERVICE_CONFIG_FILE overrides the path)
    2. Environment variables
    3. Default values

    Returns:
        Settings: Complete application settings
    """
    config_file: Optional[Path] = None
    if config_path := os.getenv("FILESERVICE_CONFIG_FILE"):
        config_file = Path(config_path)

    settings_dict: Dict[str, Any] = _toml_sections(load_toml_config(config_file))
    settings_dict["environment"] = os.getenv("FILESERVICE_ENVIRONMENT", "development")

    # Override with environment variables if present
    for env_name, (section, field) in ENV_OVERRIDES.items():
        if (value := os.getenv(env_name)) is not None:
            settings_dict.setdefault(section, {})[field] = value

    return Settings(**settings_dict)


def reload_settings() -> Settings:
    """
    Reload settings (clears cache).

    Use this when settings need to be refreshed (e.g., after config file changes).

    Returns:
        Settings: Reloaded application settings
    """
    get_settings.cache_clear()
    return get_settings()

