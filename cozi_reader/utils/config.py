"""
Configuration management
"""
import os
from pathlib import Path
from typing import Any, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel


# ============================================
# CONFIGURATION DEFAULTS
# ============================================

class ConfigDefaults:
    """Default configuration values as constants"""

    # Cozi REST API
    BASE_URL = "https://rest.cozi.com/api/ext/"
    LOGIN_API_VERSION = "2207"
    RESOURCE_API_VERSION = "2004"
    ITEM_API_VERSIONS = ("2004", "2207")  # tried in order for single item lookups
    USER_AGENT = "cozi-reader/0.6 (read-only)"

    # HTTP behaviour
    TIMEOUT_SECONDS = 30.0
    MAX_RETRIES = 3  # retries after the first attempt
    BACKOFF_BASE = 2.0  # wait before retry n is BACKOFF_BASE ** n seconds

    # Token handling
    TOKEN_EXPIRY_MARGIN_SECONDS = 60

    # Logging defaults
    LOGGING_LEVEL_INFO = "INFO"

    # Config file defaults
    CONFIG_PATH_DEFAULT = "config/config.yaml"

    # Environment variable names
    ENV_USERNAME = "COZI_USERNAME"
    ENV_PASSWORD = "COZI_PASSWORD"
    ENV_BASE_URL = "COZI_BASE_URL"
    ENV_LOG_LEVEL = "COZI_LOG_LEVEL"
    ENV_LOG_FILE = "COZI_LOG_FILE"


# ============================================
# CONFIGURATION MODELS
# ============================================

class CoziConfig(BaseModel):
    """Cozi account and transport configuration"""
    base_url: str = ConfigDefaults.BASE_URL
    username: Optional[str] = None
    password: Optional[str] = None
    timeout_seconds: float = ConfigDefaults.TIMEOUT_SECONDS
    max_retries: int = ConfigDefaults.MAX_RETRIES
    backoff_base: float = ConfigDefaults.BACKOFF_BASE
    user_agent: str = ConfigDefaults.USER_AGENT


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = ConfigDefaults.LOGGING_LEVEL_INFO
    file: Optional[str] = None


class Config(BaseModel):
    """Main configuration"""
    cozi: CoziConfig = CoziConfig()
    logging: LoggingConfig = LoggingConfig()


def load_config(config_path: str = ConfigDefaults.CONFIG_PATH_DEFAULT) -> Config:
    """
    Load configuration from an optional YAML file and environment variables.

    Values in the YAML file may use ``${VAR}`` placeholders. Settings that the
    file leaves unset are taken from the COZI_* environment variables.
    """
    load_dotenv()

    config_dict: dict = {}
    path = Path(config_path)
    if path.exists():
        with path.open('r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f) or {}

    config_dict = _replace_env_vars(config_dict)
    config_dict = _apply_env_overrides(config_dict)

    return Config(**config_dict)


def _replace_env_vars(obj: Any) -> Any:
    """
    Recursively replace ${VAR} placeholders with environment variables.

    Placeholders whose variable is unset become None so that pydantic
    defaults (or later env overrides) apply.
    """
    if isinstance(obj, dict):
        return {k: _replace_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_replace_env_vars(item) for item in obj]
    elif isinstance(obj, str) and obj.startswith("${") and obj.endswith("}"):
        return os.getenv(obj[2:-1])
    return obj


def _apply_env_overrides(config_dict: dict) -> dict:
    """Fill missing cozi/logging settings from COZI_* environment variables."""
    cozi = {k: v for k, v in (config_dict.get('cozi') or {}).items() if v is not None}
    logging_section = {k: v for k, v in (config_dict.get('logging') or {}).items() if v is not None}

    env_map = {
        'username': ConfigDefaults.ENV_USERNAME,
        'password': ConfigDefaults.ENV_PASSWORD,
        'base_url': ConfigDefaults.ENV_BASE_URL,
    }
    for key, var in env_map.items():
        if key not in cozi and os.getenv(var):
            cozi[key] = os.getenv(var)

    if 'level' not in logging_section and os.getenv(ConfigDefaults.ENV_LOG_LEVEL):
        logging_section['level'] = os.getenv(ConfigDefaults.ENV_LOG_LEVEL)
    if 'file' not in logging_section and os.getenv(ConfigDefaults.ENV_LOG_FILE):
        logging_section['file'] = os.getenv(ConfigDefaults.ENV_LOG_FILE)

    return {**config_dict, 'cozi': cozi, 'logging': logging_section}


def missing_credentials(config: Config) -> List[str]:
    """Return the environment variable names for credentials that are not set."""
    missing = []
    if not config.cozi.username:
        missing.append(ConfigDefaults.ENV_USERNAME)
    if not config.cozi.password:
        missing.append(ConfigDefaults.ENV_PASSWORD)
    return missing
