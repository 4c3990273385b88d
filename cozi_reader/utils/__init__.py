"""
Utility modules - Shared utilities for the application

This module should NEVER import from other cozi_reader modules (integrations)
to maintain the import hierarchy and prevent circular dependencies.
"""

# ============================================
# CONFIGURATION
# ============================================
from .config import Config, ConfigDefaults, CoziConfig, LoggingConfig, load_config, missing_credentials

# ============================================
# LOGGING
# ============================================
from .logger import configure_logging, setup_logger

__all__ = [
    "Config",
    "ConfigDefaults",
    "CoziConfig",
    "LoggingConfig",
    "load_config",
    "missing_credentials",
    "configure_logging",
    "setup_logger",
]
