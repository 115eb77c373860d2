"""
Configuration Loader Module
===========================
Loads harness configuration from the environment and from JSON files.

Functions:
    - load_environment: Load a .env file into the process environment
    - must_env: Get a required environment variable
    - load_snowflake_settings: Assemble Snowflake connection settings
    - get_propagation_wait: Post-provisioning wait from the environment
    - load_config: Load configuration from JSON file
    - save_config: Save configuration to JSON file
    - get_config_value: Get nested configuration value
    - merge_configs: Merge two configurations
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from harness_scripts.duration_utils import parse_duration
from harness_scripts.error_handling import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_PROPAGATION_WAIT = '5s'


def load_environment(dotenv_path: Optional[str] = None) -> bool:
    """
    Load variables from a .env file without overriding the real environment.

    Args:
        dotenv_path: Explicit .env path; searched upwards from cwd when omitted

    Returns:
        bool: True if a file was found and loaded
    """
    loaded = load_dotenv(dotenv_path=dotenv_path, override=False)
    if loaded:
        logger.info("Environment variables loaded from .env")
    return loaded


def must_env(key: str) -> str:
    """
    Get a required, non-blank environment variable.

    Raises:
        ConfigurationError: If the variable is unset or blank

    Example:
        >>> user = must_env('SNOWFLAKE_USER')
    """
    value = os.environ.get(key, '').strip()
    if not value:
        raise ConfigurationError(f"Missing required environment variable {key}")
    return value


def get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get an optional environment variable; blank counts as unset."""
    value = os.environ.get(key, '').strip()
    return value or default


def load_snowflake_settings() -> Dict[str, Any]:
    """
    Assemble Snowflake connection settings from SNOWFLAKE_* variables.

    The account identifier is SNOWFLAKE_ACCOUNT when set, otherwise
    "<SNOWFLAKE_ORGANIZATION_NAME>-<SNOWFLAKE_ACCOUNT_NAME>".

    Returns:
        dict: Settings for harness_scripts.snowflake_operations

    Raises:
        ConfigurationError: If the account or user cannot be determined
    """
    organization_name = get_env('SNOWFLAKE_ORGANIZATION_NAME')
    account_name = get_env('SNOWFLAKE_ACCOUNT_NAME')

    account = get_env('SNOWFLAKE_ACCOUNT')
    if not account:
        account = f"{must_env('SNOWFLAKE_ORGANIZATION_NAME')}-{must_env('SNOWFLAKE_ACCOUNT_NAME')}"

    settings = {
        'account': account,
        'organization_name': organization_name,
        'account_name': account_name,
        'user': must_env('SNOWFLAKE_USER'),
        # PEM keeps its inner newlines, so it is read without stripping
        'private_key': os.environ.get('SNOWFLAKE_PRIVATE_KEY') or None,
        'private_key_passphrase': get_env('SNOWFLAKE_PRIVATE_KEY_PASSPHRASE'),
        'password': os.environ.get('SNOWFLAKE_PASSWORD') or None,
        'role': get_env('SNOWFLAKE_ROLE'),
        'warehouse': get_env('SNOWFLAKE_WAREHOUSE'),
        'database': get_env('SNOWFLAKE_DATABASE'),
        'schema': get_env('SNOWFLAKE_SCHEMA'),
    }

    if not settings['private_key'] and not settings['password']:
        raise ConfigurationError(
            "Missing required environment variable SNOWFLAKE_PRIVATE_KEY (or SNOWFLAKE_PASSWORD)"
        )

    logger.info(f"Snowflake settings loaded for account {account}")
    return settings


def get_propagation_wait() -> str:
    """
    Duration string to sleep after provisioning (HARNESS_PROPAGATION_WAIT).

    Raises:
        ConfigurationError: If the value is not a duration such as "5s" or "1m 30s"
    """
    wait = get_env('HARNESS_PROPAGATION_WAIT', DEFAULT_PROPAGATION_WAIT)

    try:
        parse_duration(wait)
    except ValueError as e:
        raise ConfigurationError(f"Invalid HARNESS_PROPAGATION_WAIT {wait!r}: {e}") from e

    return wait


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load a JSON configuration file (e.g. a warehouse_configs fixture).

    Raises:
        FileNotFoundError: If config file doesn't exist
        json.JSONDecodeError: If config file is invalid JSON
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from: {config_path}")

    try:
        with open(config_file, 'r') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in configuration file: {e}")
        raise


def save_config(config: Dict[str, Any], config_path: str) -> None:
    """Save configuration to JSON file, creating parent directories."""
    config_file = Path(config_path)
    config_file.parent.mkdir(parents=True, exist_ok=True)

    with open(config_file, 'w') as f:
        json.dump(config, f, indent=4)

    logger.info(f"Configuration saved to: {config_path}")


def get_config_value(
    config: Dict[str, Any],
    key_path: str,
    default: Any = None
) -> Any:
    """
    Get nested configuration value using dot notation.

    Example:
        >>> get_config_value(configs, 'transform_wh.warehouse_size', 'X-SMALL')
        'SMALL'
    """
    value = config

    for key in key_path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge two configurations (override takes precedence, dicts merge recursively).
    """
    result = base_config.copy()

    for key, value in override_config.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result
