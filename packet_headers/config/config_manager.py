#!/usr/bin/env python3
"""
Configuration Manager for packet-headers

Features:
- JSON configuration file
- Environment variable overrides
- Schema validation with jsonschema
- Default values
"""

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema


logger = logging.getLogger(__name__)

_MISSING = object()


class ConfigError(Exception):
    """Raised when a configuration file cannot be loaded or validated."""
    pass


class ConfigSchema:
    """Configuration schema with validation"""

    SCHEMA = {
        "type": "object",
        "required": ["version", "general", "output"],
        "properties": {
            "version": {"type": "string", "pattern": r"^\d+\.\d+\.\d+$"},
            "general": {
                "type": "object",
                "required": ["max_packet_size"],
                "properties": {
                    "max_packet_size": {"type": "integer", "minimum": 20, "maximum": 65535},
                    "log_level": {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR"]},
                },
            },
            "output": {
                "type": "object",
                "required": ["format", "colors_enabled"],
                "properties": {
                    "format": {"type": "string", "enum": ["hex", "hexdump", "dissect"]},
                    "colors_enabled": {"type": "boolean"},
                    "pcap_directory": {"type": "string"},
                },
            },
        },
    }

    @staticmethod
    def get_defaults() -> Dict[str, Any]:
        """Return default configuration"""
        return {
            "version": "1.0.0",
            "general": {
                "max_packet_size": 65535,
                "log_level": "WARNING",
            },
            "output": {
                "format": "hex",
                "colors_enabled": True,
                "pcap_directory": os.path.join(tempfile.gettempdir(), "pcaps"),
            },
        }

    @classmethod
    def settings(cls) -> Dict[str, str]:
        """Dotted key to JSON type for every section setting"""
        result = {}
        for section, spec in cls.SCHEMA["properties"].items():
            for name, prop in spec.get("properties", {}).items():
                result[f"{section}.{name}"] = prop["type"]
        return result


class ConfigManager:
    """
    Configuration manager with file, env, and validation support

    Environment overrides (PKTHDR_<SECTION>_<KEY>) are read by load(),
    checked against the schema together with the file, and take
    precedence in get(). They are never written back by save().

    Usage:
        config = ConfigManager("pkthdr_config.json")
        config.load()
        max_size = config.get("general.max_packet_size")
        config.set("output.format", "hexdump")
        config.save()
    """

    ENV_PREFIX = "PKTHDR_"
    DEFAULT_FILE = "pkthdr_config.json"

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration manager

        Args:
            config_file: Path to JSON config file (default: pkthdr_config.json)
        """
        self.config_file = config_file or self.DEFAULT_FILE
        self.config = ConfigSchema.get_defaults()
        self.overrides: Dict[str, Any] = {}

    def load(self, config_file: Optional[str] = None, strict: bool = False) -> bool:
        """
        Load configuration from file and environment

        Args:
            config_file: Optional path override
            strict: Raise ConfigError on a bad file instead of falling
                    back to defaults

        Returns:
            True if the file was loaded, False if defaults are in use

        Raises:
            ConfigError: In strict mode, on a missing, unreadable or invalid
                         file; in any mode, on an invalid environment override
        """
        if config_file:
            self.config_file = config_file

        path = Path(self.config_file)
        loaded = False

        if not path.exists():
            if strict:
                raise ConfigError(f"Config file not found: {self.config_file}")
            logger.info("Config file not found: %s, using defaults", self.config_file)
            self.config = ConfigSchema.get_defaults()
        else:
            try:
                self.config = self._read(path)
                loaded = True
                logger.info("Config loaded: %s", self.config_file)
            except ConfigError as e:
                if strict:
                    raise
                logger.warning("%s, using defaults", e)
                self.config = ConfigSchema.get_defaults()

        self.overrides = self._env_overrides()
        if self.overrides:
            try:
                self._validate(self.effective())
            except ConfigError as e:
                raise ConfigError(f"Invalid environment override: {e}") from e

        return loaded

    def _read(self, path: Path) -> Dict[str, Any]:
        """Read, merge over defaults and validate one config file."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded_config = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigError(f"Config parse error: {e}") from e

        if not isinstance(loaded_config, dict):
            raise ConfigError(
                f"Config root must be an object, got {type(loaded_config).__name__}"
            )

        merged = ConfigSchema.get_defaults()
        self._merge_config(merged, loaded_config)
        self._validate(merged)
        return merged

    def _env_overrides(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        for key, json_type in ConfigSchema.settings().items():
            env_key = self.ENV_PREFIX + key.upper().replace(".", "_")
            env_value = os.environ.get(env_key)
            if env_value is None:
                continue
            section, name = key.split(".")
            overrides.setdefault(section, {})[name] = self._parse_value(env_value, json_type)
        return overrides

    def save(self, config_file: Optional[str] = None) -> None:
        """
        Save configuration to file

        Args:
            config_file: Optional path override
        """
        if config_file:
            self.config_file = config_file

        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self.config, f, indent=2)

        logger.info("Config saved: %s", self.config_file)

    def _merge_config(self, base: Dict, override: Dict) -> None:
        """Deep merge configuration"""
        for key, value in override.items():
            if (key in base and
                    isinstance(base[key], dict) and
                    isinstance(value, dict)):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    @staticmethod
    def _validate(config: Dict[str, Any]) -> None:
        try:
            jsonschema.validate(instance=config, schema=ConfigSchema.SCHEMA)
        except jsonschema.ValidationError as e:
            path = ".".join(str(p) for p in e.absolute_path) or "<root>"
            raise ConfigError(f"{path}: {e.message}") from e

    def effective(self) -> Dict[str, Any]:
        """File configuration with environment overrides applied"""
        result = copy.deepcopy(self.config)
        self._merge_config(result, self.overrides)
        return result

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation

        Args:
            key: Configuration key (e.g., "general.max_packet_size")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        for tree in (self.overrides, self.config):
            value = tree
            for k in key.split("."):
                if isinstance(value, dict) and k in value:
                    value = value[k]
                else:
                    value = _MISSING
                    break
            if value is not _MISSING:
                return value
        return default

    @staticmethod
    def _parse_value(value: str, json_type: str) -> Any:
        """Parse a textual setting for a key of the given JSON type"""
        if json_type == "string":
            return value

        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation

        Args:
            key: Configuration key, one of ConfigSchema.settings()
            value: Value to set; strings are parsed for the key's type

        Raises:
            ConfigError: On an unknown key or a value the schema rejects
        """
        settings = ConfigSchema.settings()
        if key not in settings:
            raise ConfigError(f"Unknown config key: {key}")
        if isinstance(value, str):
            value = self._parse_value(value, settings[key])

        section, name = key.split(".")
        candidate = copy.deepcopy(self.config)
        candidate.setdefault(section, {})[name] = value
        self._validate(candidate)
        self.config = candidate


def create_default_config(filename: str = ConfigManager.DEFAULT_FILE) -> None:
    """Create default configuration file"""
    config = ConfigManager(filename)
    config.config = ConfigSchema.get_defaults()
    config.save()
