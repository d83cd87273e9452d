"""
Configuration loading utilities for the schema builder.

This module loads application configuration from config.yaml, merges it over
built-in defaults and builds the configured schema store.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
import logging
from copy import deepcopy

from .schema_store import DEFAULT_COLLECTION_KEY, SchemaStore
from .storage import FileKeyValueStore, KeyValueStore, MemoryKeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

SUPPORTED_BACKENDS = ('file', 'memory')
SUPPORTED_PREVIEW_FORMATS = ('schema', 'json_schema')
SUPPORTED_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def deep_merge(base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with update_dict taking precedence.

    Args:
        base_dict: Base dictionary (defaults)
        update_dict: Dictionary to merge in (user config)

    Returns:
        Merged dictionary
    """
    result = deepcopy(base_dict)

    for key, value in update_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = deepcopy(value)

    return result


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration.

    Returns:
        Dictionary with default configuration
    """
    return {
        'app': {
            'name': 'JSON Schema Builder',
            'version': '1.0.0',
            'debug': False
        },
        'storage': {
            'backend': 'file',
            'directory': 'schema_store',
            'collection_key': DEFAULT_COLLECTION_KEY,
            'check_duplicates_on_update': False
        },
        'ui': {
            'page_title': 'JSON Schema Builder',
            'preview_format': 'schema'
        },
        'logging': {
            'level': 'INFO'
        }
    }


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load application configuration.

    Missing, empty or unreadable files fall back to the defaults.

    Args:
        config_path: Optional path to config file (defaults to config.yaml)

    Returns:
        Complete configuration dictionary
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    default_config = get_default_config()

    if not config_path.exists():
        logger.warning(f"Configuration file not found: {config_path}")
        logger.info("Using default configuration")
        return default_config

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            user_config = yaml.safe_load(f)

        if user_config is None:
            logger.warning(f"Configuration file is empty: {config_path}")
            return default_config

        if not isinstance(user_config, dict):
            logger.error(f"Configuration file is not a valid dictionary: {config_path}")
            logger.info("Using default configuration")
            return default_config

        config = deep_merge(default_config, user_config)

        logger.info(f"Successfully loaded configuration from {config_path}")
        return config

    except yaml.YAMLError as e:
        logger.error(f"YAML parsing error in {config_path}: {e}")
        logger.info("Using default configuration")
        return default_config

    except (IOError, OSError) as e:
        logger.error(f"Failed to read configuration file {config_path}: {e}")
        logger.info("Using default configuration")
        return default_config


def _is_valid_setting(section: str, key: str, value: Any) -> bool:
    if (section, key) == ('storage', 'backend'):
        return value in SUPPORTED_BACKENDS
    if (section, key) == ('storage', 'directory'):
        return isinstance(value, str)
    if (section, key) == ('storage', 'collection_key'):
        return isinstance(value, str) and bool(value.strip())
    if (section, key) == ('storage', 'check_duplicates_on_update'):
        return isinstance(value, bool)
    if (section, key) == ('ui', 'preview_format'):
        return value in SUPPORTED_PREVIEW_FORMATS
    if (section, key) == ('logging', 'level'):
        return isinstance(value, str) and value.upper() in SUPPORTED_LOG_LEVELS
    return True


def find_invalid_settings(config: Dict[str, Any]) -> List[str]:
    """
    List configuration settings that are missing or have unusable values.

    Args:
        config: Configuration dictionary to check

    Returns:
        Dotted setting names such as ``"storage.backend"``; whole sections
        that are missing or not mappings are reported by section name
    """
    invalid = []

    for section, defaults in get_default_config().items():
        values = config.get(section)
        if not isinstance(values, dict):
            invalid.append(section)
            continue

        for key in defaults:
            if not _is_valid_setting(section, key, values.get(key, defaults[key])):
                invalid.append(f"{section}.{key}")

    return invalid


def validate_config(config: Dict[str, Any]) -> bool:
    """
    Validate configuration structure and values.

    Args:
        config: Configuration dictionary to validate

    Returns:
        True if configuration is valid, False otherwise
    """
    invalid = find_invalid_settings(config)
    for name in invalid:
        logger.warning(f"Invalid configuration setting: {name}")
    return not invalid


def apply_config_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Replace invalid settings with their default values.

    Args:
        config: Configuration dictionary, left unchanged

    Returns:
        New configuration dictionary in which every setting is usable
    """
    defaults = get_default_config()
    result = deepcopy(config)

    for name in find_invalid_settings(config):
        section, _, key = name.partition('.')
        if not key:
            result[section] = deepcopy(defaults[section])
        else:
            logger.info(f"Using default for {name}: {defaults[section][key]!r}")
            result[section][key] = defaults[section][key]

    return result


def get_config_value(config: Dict[str, Any], section: str, key: str, default: Any = None) -> Any:
    """Read ``config[section][key]``, returning ``default`` when absent."""
    values = config.get(section)
    if not isinstance(values, dict):
        return default
    return values.get(key, default)


def create_backend_from_config(config: Dict[str, Any]) -> KeyValueStore:
    """
    Build the storage backend named in the configuration.

    Unknown backends fall back to the file backend.
    """
    backend = get_config_value(config, 'storage', 'backend', 'file')

    if backend == 'memory':
        logger.info("Using in-memory schema storage")
        return MemoryKeyValueStore()

    if backend != 'file':
        logger.warning(f"Unknown storage backend {backend!r}, using file storage")

    directory = get_config_value(config, 'storage', 'directory', 'schema_store')
    logger.info(f"Using file schema storage in {directory}")
    return FileKeyValueStore(directory)


def create_store_from_config(config: Dict[str, Any]) -> SchemaStore:
    """Build the schema store described by the configuration."""
    return SchemaStore(
        create_backend_from_config(config),
        collection_key=get_config_value(config, 'storage', 'collection_key', DEFAULT_COLLECTION_KEY),
        check_duplicates_on_update=get_config_value(config, 'storage', 'check_duplicates_on_update', False) is True
    )


def get_config_summary(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Get a summary of the current configuration.

    Args:
        config: Configuration dictionary

    Returns:
        Dictionary with configuration summary
    """
    return {
        'app_name': get_config_value(config, 'app', 'name', 'Unknown'),
        'app_version': get_config_value(config, 'app', 'version', 'Unknown'),
        'debug_mode': get_config_value(config, 'app', 'debug', False),
        'storage_backend': get_config_value(config, 'storage', 'backend', 'file'),
        'storage_directory': str(get_config_value(config, 'storage', 'directory', '')),
        'collection_key': get_config_value(config, 'storage', 'collection_key', DEFAULT_COLLECTION_KEY),
        'log_level': get_config_value(config, 'logging', 'level', 'INFO')
    }
