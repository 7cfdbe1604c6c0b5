"""
Configuration Management
Loads SMS gateway settings from environment variables, .env and YAML files
"""
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SMSCENTRAL_BASE_URL = "https://my.smscentral.com.au/api/v3.2"
TELSTRA_BASE_URL = "https://api.telstra.com/v1"


class SMSSettings(BaseSettings):
    """SMS gateway settings loaded from AUSMS_* environment variables"""

    model_config = SettingsConfigDict(
        env_prefix="AUSMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider: str = "smscentral"

    # SMS Central
    smscentral_username: Optional[str] = None
    smscentral_password: Optional[str] = None
    smscentral_originator: Optional[str] = None
    smscentral_base_url: str = SMSCENTRAL_BASE_URL

    # Telstra
    telstra_client_id: Optional[str] = None
    telstra_client_secret: Optional[str] = None
    telstra_base_url: str = TELSTRA_BASE_URL

    # Applied only to HTTP clients created by this library
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("provider")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("smscentral_base_url", "telstra_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


def _substitute_env_vars(config: Dict[str, Any]) -> None:
    """Replace ${VAR_NAME} with environment variable values"""
    for key, value in config.items():
        if isinstance(value, dict):
            _substitute_env_vars(value)
        elif isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_var = value[2:-1]
            config[key] = os.getenv(env_var, value)


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load the `sms` section of a YAML file"""
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping")
    section = data.get("sms") or {}
    if not isinstance(section, dict):
        raise ValueError(f"'sms' section in {path} must be a mapping")
    _substitute_env_vars(section)
    return section


def load_settings(path: Optional[Union[str, Path]] = None, **overrides: Any) -> SMSSettings:
    """
    Build settings from environment, optional YAML file and explicit values.

    Precedence (highest first): overrides, YAML file, environment/.env, defaults.

    Args:
        path: Optional YAML file with an `sms:` mapping
        **overrides: Explicit field values

    Returns:
        SMSSettings instance
    """
    values: Dict[str, Any] = {}
    if path is not None:
        values.update(_load_yaml(Path(path)))
    values.update(overrides)
    return SMSSettings(**values)


@lru_cache
def get_settings() -> SMSSettings:
    """Return cached settings instance."""
    return SMSSettings()
