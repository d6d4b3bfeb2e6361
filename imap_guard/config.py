"""
Configuration management for IMAP Guard.

Validates guard settings and loads them from configuration files with
support for local overrides and credentials from the environment.
"""

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union

from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigurationError

REQUIRED_SETTINGS = ("host", "port", "username", "password")
OPTIONAL_SETTINGS = ("read_only", "verbose")


@dataclass(frozen=True)
class GuardSettings:
    """Immutable connection and behaviour settings for a guard."""

    host: str
    port: int
    username: str
    password: str
    read_only: bool = False
    verbose: bool = False

    def __repr__(self) -> str:
        return (f"GuardSettings(host={self.host!r}, port={self.port!r}, "
                f"username={self.username!r}, password='***', "
                f"read_only={self.read_only!r}, verbose={self.verbose!r})")


def build_settings(settings: Union[GuardSettings, Mapping[str, Any]]) -> GuardSettings:
    """Validate a settings mapping and freeze it.

    Args:
        settings: Mapping of setting names to values, or ready-made settings

    Returns:
        Frozen GuardSettings

    Raises:
        ConfigurationError: If required keys are missing or unknown keys are present
    """
    if isinstance(settings, GuardSettings):
        return settings

    missing = [key for key in REQUIRED_SETTINGS if key not in settings]
    if missing:
        raise ConfigurationError(f"Missing settings: {missing}", missing)

    known = REQUIRED_SETTINGS + OPTIONAL_SETTINGS
    unknown = [key for key in settings if key not in known]
    if unknown:
        raise ConfigurationError(f"Unknown settings: {unknown}", unknown)

    return GuardSettings(**dict(settings))


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigManager:
    """Handles configuration loading and validation."""

    DEFAULT_CONFIG = {
        "mail_settings": {
            "host": "imap.gmail.com",
            "port": 993,
            "username": "",
            "password": "",
        },
        "guard_settings": {
            "read_only": True,
            "verbose": False,
        },
    }

    ENV_OVERRIDES = {
        "IMAP_HOST": ("mail_settings", "host", str),
        "IMAP_PORT": ("mail_settings", "port", int),
        "IMAP_USER": ("mail_settings", "username", str),
        "IMAP_PASS": ("mail_settings", "password", str),
        "IMAP_READ_ONLY": ("guard_settings", "read_only", _env_flag),
        "IMAP_VERBOSE": ("guard_settings", "verbose", _env_flag),
    }

    def __init__(self, config_file: str = "config.json", local_config_file: str = "config.local.json"):
        """Initialize configuration manager.

        Args:
            config_file: Main configuration file path
            local_config_file: Local overrides configuration file path
        """
        self.config_file = config_file
        self.local_config_file = local_config_file
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from files and environment with fallback to defaults."""
        config = json.loads(json.dumps(self.DEFAULT_CONFIG))

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                user_config = json.load(f)
            self._merge_config(config, user_config)
        except FileNotFoundError:
            print(f"[!] {self.config_file} not found, using default configuration")
        except json.JSONDecodeError as e:
            print(f"[!] Error parsing {self.config_file}: {e}, using default configuration")

        # Load local overrides
        try:
            with open(self.local_config_file, "r", encoding="utf-8") as f:
                local_config = json.load(f)
            self._merge_config(config, local_config)
            print(f"[i] Loaded local configuration overrides from {self.local_config_file}")
        except FileNotFoundError:
            pass
        except json.JSONDecodeError as e:
            print(f"[!] Error parsing {self.local_config_file}: {e}, ignoring local config")

        self._apply_environment(config)
        return config

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> None:
        """Recursively merge configuration dictionaries.

        Args:
            base: Base configuration dictionary to merge into
            override: Override configuration dictionary to merge from
        """
        for section, values in override.items():
            if section not in base:
                base[section] = values
            elif isinstance(values, dict) and isinstance(base[section], dict):
                self._merge_config(base[section], values)
            else:
                base[section] = values

    def _apply_environment(self, config: Dict[str, Any]) -> None:
        """Apply IMAP_* environment variables, reading a .env file first."""
        load_dotenv(find_dotenv(usecwd=True))
        for env_name, (section, key, convert) in self.ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is None or value == "":
                continue
            try:
                config.setdefault(section, {})[key] = convert(value)
            except ValueError:
                raise ConfigurationError(f"Invalid value for {env_name}: {value!r}", [key]) from None

    def get_mail_settings(self) -> Dict[str, Any]:
        """Get mail server settings."""
        return self.config["mail_settings"]

    def get_guard_settings(self) -> Dict[str, Any]:
        """Get dry-run and verbosity settings."""
        return self.config["guard_settings"]

    def get_settings(self, **overrides: Any) -> GuardSettings:
        """Build validated guard settings from the loaded configuration.

        Args:
            **overrides: Setting values taking precedence over the files

        Returns:
            Frozen GuardSettings

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        settings: Dict[str, Any] = {}
        settings.update(self.get_mail_settings())
        settings.update(self.get_guard_settings())
        settings.update({key: value for key, value in overrides.items() if value is not None})

        # Blank credentials count as missing
        for key in REQUIRED_SETTINGS:
            if settings.get(key) in (None, ""):
                settings.pop(key, None)
        return build_settings(settings)
