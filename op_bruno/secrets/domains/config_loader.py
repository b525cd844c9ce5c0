"""Configuration loader for op-bruno.

The config file is optional. When present it supplies defaults for the
``sync`` command:

    defaults:
      vault: Engineering
      title: API Secrets
      output: op-secrets.yml
      strict: false
"""
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .preferences import get_preference

logger = logging.getLogger(__name__)

VAULT_ENV_VAR = "OP_BRUNO_VAULT"
DEFAULT_VAULT = "Employee"
DEFAULT_OUTPUT = "op-secrets.json"


class ConfigError(Exception):
    """Configuration error exception."""
    pass


@dataclass
class SyncDefaults:
    """Defaults for ``op-bruno sync`` flags that were not given."""
    vault: str = DEFAULT_VAULT
    title: Optional[str] = None
    output: str = DEFAULT_OUTPUT
    strict: bool = True


def default_config_path() -> Path:
    return Path.home() / ".config" / "op-bruno" / "config.yml"


def _get_config_path() -> Optional[str]:
    """
    Get config file path using XDG Base Directory standard.

    Priority order:
    1. User preference (stored in ~/.config/op-bruno/preferences.json)
    2. Default location: ~/.config/op-bruno/config.yml

    Returns:
        Absolute path to the config file, or None when no config file exists
    """
    config_path_pref = get_preference("config_path")
    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            logger.info(f"Using config from preference: {config_path}")
            return str(config_path)
        else:
            logger.warning(f"Config path from preference doesn't exist: {config_path}")

    default_config = default_config_path()
    if default_config.exists():
        logger.info(f"Using default config location: {default_config}")
        return str(default_config)

    logger.debug("No config file found, using built-in defaults")
    return None


def load_config() -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Returns:
        Parsed configuration, or an empty dict when there is no config file

    Raises:
        ConfigError: If the file cannot be read or parsed, or is not a mapping
    """
    config_path = _get_config_path()
    if config_path is None:
        return {}

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML config at {config_path}: {e}")
    except OSError as e:
        raise ConfigError(f"Failed to read config file at {config_path}: {e}")

    if config is None:
        logger.warning(f"Config file at {config_path} is empty")
        return {}

    if not isinstance(config, dict):
        raise ConfigError(f"Config file at {config_path} must be a mapping, got {type(config).__name__}")

    return config


def load_sync_defaults() -> SyncDefaults:
    """
    Resolve defaults for the sync command.

    Precedence: OP_BRUNO_VAULT environment variable > config file > built-in.
    """
    config = load_config()
    section = config.get("defaults") or {}
    if not isinstance(section, dict):
        raise ConfigError("'defaults' in config must be a mapping")

    defaults = SyncDefaults()
    for key in ("vault", "title", "output"):
        value = section.get(key)
        if value is None:
            continue
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"'defaults.{key}' in config must be a non-empty string")
        setattr(defaults, key, value.strip())

    if "strict" in section:
        if not isinstance(section["strict"], bool):
            raise ConfigError("'defaults.strict' in config must be true or false")
        defaults.strict = section["strict"]

    vault_env = os.getenv(VAULT_ENV_VAR)
    if vault_env:
        logger.debug(f"Using {VAULT_ENV_VAR} from environment: {vault_env}")
        defaults.vault = vault_env

    return defaults
