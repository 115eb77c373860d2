"""
Configuration Validator Module
==============================
Validates warehouse configuration records before they reach terraform.

The rules mirror the validation blocks of the snowflake-warehouse module's
warehouse_configs variable, and the error messages match the module's.

Functions:
    - validate_warehouse_config: Validate one warehouse configuration
    - validate_warehouse_configs: Validate a warehouse_configs mapping
    - apply_defaults: Fill omitted optional properties with module defaults
    - build_warehouse_config: Build a full configuration from a name and overrides
    - create_config_template: Example warehouse_configs mapping
"""

import logging
from typing import Any, Dict, List, Tuple


logger = logging.getLogger(__name__)

VALID_WAREHOUSE_SIZES = ['X-SMALL', 'XSMALL', 'SMALL', 'MEDIUM', 'LARGE']
VALID_WAREHOUSE_TYPES = ['STANDARD']
VALID_SCALING_POLICIES = ['STANDARD', 'ECONOMY']

WAREHOUSE_DEFAULTS = {
    'warehouse_size': 'X-SMALL',
    'warehouse_type': 'STANDARD',
    'auto_resume': True,
    'auto_suspend': 60,
    'initially_suspended': True,
    'min_cluster_count': 1,
    'max_cluster_count': 1,
    'scaling_policy': 'STANDARD',
    'enable_query_acceleration': False,
    'comment': None,
}

# Properties the module passes straight through to snowflake_warehouse
CONFIG_PROPERTIES = ['name'] + list(WAREHOUSE_DEFAULTS)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _get_or_default(config: Dict[str, Any], field: str) -> Any:
    # null means "use the default", as with optional() in the module
    value = config.get(field)
    return WAREHOUSE_DEFAULTS[field] if value is None else value


def _check_enum(config: Dict[str, Any], field: str, valid: List[str]) -> List[str]:
    value = _get_or_default(config, field)
    if not isinstance(value, str) or value.upper() not in valid:
        return [f"{field} must be one of: {', '.join(valid)} (got {value!r})"]
    return []


def validate_warehouse_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate a single warehouse configuration record.

    Omitted or null optional properties are checked against their defaults.

    Args:
        config: Warehouse configuration record

    Returns:
        list: Error messages (empty when valid)

    Example:
        >>> validate_warehouse_config({'name': 'TT_WH', 'auto_suspend': -5})
        ['auto_suspend must be >= 0']
    """
    errors = []

    name = config.get('name')
    if not isinstance(name, str) or not name.strip():
        errors.append("name must be a non-empty string")

    errors.extend(_check_enum(config, 'warehouse_size', VALID_WAREHOUSE_SIZES))
    errors.extend(_check_enum(config, 'warehouse_type', VALID_WAREHOUSE_TYPES))
    errors.extend(_check_enum(config, 'scaling_policy', VALID_SCALING_POLICIES))

    auto_suspend = _get_or_default(config, 'auto_suspend')
    if not _is_number(auto_suspend):
        errors.append(f"auto_suspend must be a number (got {auto_suspend!r})")
    elif auto_suspend < 0:
        errors.append("auto_suspend must be >= 0")

    min_count = _get_or_default(config, 'min_cluster_count')
    max_count = _get_or_default(config, 'max_cluster_count')
    if not _is_number(min_count) or not _is_number(max_count):
        errors.append("min_cluster_count and max_cluster_count must be numbers")
    elif min_count > max_count:
        errors.append("min_cluster_count must not exceed max_cluster_count")

    for field in ('auto_resume', 'initially_suspended', 'enable_query_acceleration'):
        value = _get_or_default(config, field)
        if not isinstance(value, bool):
            errors.append(f"{field} must be a boolean (got {value!r})")

    comment = config.get('comment')
    if comment is not None and not isinstance(comment, str):
        errors.append(f"comment must be a string or null (got {comment!r})")

    grants = config.get('grants') or []
    if not isinstance(grants, list):
        errors.append(f"grants must be a list (got {grants!r})")
        grants = []

    for grant in grants:
        if not isinstance(grant, dict) or not grant.get('role_name') or not grant.get('privileges'):
            errors.append("grants entries require role_name and a non-empty privileges list")

    return errors


def validate_warehouse_configs(warehouse_configs: Dict[str, Dict[str, Any]]) -> Tuple[bool, List[str]]:
    """
    Validate a complete warehouse_configs mapping.

    Args:
        warehouse_configs: warehouse key -> configuration record

    Returns:
        tuple: (is_valid: bool, errors: list of "<key>: <message>" strings)

    Example:
        >>> is_valid, errors = validate_warehouse_configs(configs)
        >>> if not is_valid:
        >>>     for error in errors:
        >>>         print(f"ERROR: {error}")
    """
    logger.info("Validating warehouse configurations...")

    errors = []

    if not warehouse_configs:
        errors.append("warehouse_configs must define at least one warehouse")
    elif not isinstance(warehouse_configs, dict):
        errors.append(f"warehouse_configs must be an object (got {type(warehouse_configs).__name__})")
        warehouse_configs = {}

    for key, config in (warehouse_configs or {}).items():
        if not isinstance(config, dict):
            errors.append(f"{key}: configuration must be an object")
            continue
        errors.extend(f"{key}: {error}" for error in validate_warehouse_config(config))

    names = [config.get('name') for config in (warehouse_configs or {}).values() if isinstance(config, dict)]
    duplicates = sorted({name for name in names if name and names.count(name) > 1})
    for name in duplicates:
        errors.append(f"warehouse name {name} is used more than once")

    is_valid = len(errors) == 0

    if is_valid:
        logger.info(f"✓ {len(warehouse_configs)} warehouse configuration(s) valid")
    else:
        logger.error(f"✗ Warehouse configuration validation failed with {len(errors)} error(s)")
        for error in errors:
            logger.error(f"  - {error}")

    return is_valid, errors


def apply_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of the record with omitted or null optional properties defaulted."""
    result = dict(WAREHOUSE_DEFAULTS)
    result['grants'] = []
    result.update({key: value for key, value in config.items() if value is not None})
    return result


def build_warehouse_config(name: str, **overrides: Any) -> Dict[str, Any]:
    """
    Build a complete warehouse configuration record.

    Raises:
        ConfigValidationError: If the resulting record is invalid

    Example:
        >>> build_warehouse_config("TT_WH_AB12CD", comment="Terratest single warehouse test")
    """
    config = apply_defaults({'name': name, **overrides})

    errors = validate_warehouse_config(config)
    if errors:
        raise ConfigValidationError("; ".join(errors))

    return config


def create_config_template() -> Dict[str, Any]:
    """
    Create an example warehouse_configs mapping.

    Example:
        >>> template = create_config_template()
        >>> template['analytics_wh']['name'] = 'ANALYTICS_WH'
        >>> save_config(template, 'warehouse_configs.json')
    """
    return {
        'analytics_wh': {
            'name': 'REQUIRED: ANALYTICS_WH',
            'warehouse_size': 'X-SMALL',
            'warehouse_type': 'STANDARD',
            'auto_resume': True,
            'auto_suspend': 60,
            'initially_suspended': True,
            'min_cluster_count': 1,
            'max_cluster_count': 1,
            'scaling_policy': 'STANDARD',
            'enable_query_acceleration': False,
            'comment': 'Warehouse for ad-hoc analytics',
            'grants': [
                {'role_name': 'ANALYST', 'privileges': ['USAGE', 'OPERATE']}
            ]
        }
    }
