"""
Configuration Module
====================
JSON configuration with environment overrides for the pkthdr tool.
"""

from .config_manager import ConfigManager, ConfigSchema, ConfigError, create_default_config

__all__ = ['ConfigManager', 'ConfigSchema', 'ConfigError', 'create_default_config']
