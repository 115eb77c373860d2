"""
Configuration Handler Scripts Package
=====================================
Configuration management for the warehouse test harness.

Modules:
    - config_loader: Load environment and JSON configuration
    - config_validator: Validate warehouse configuration records
    - module_inspector: Static contract checks of the terraform module
"""

from config_handler_scripts.config_loader import (
    load_environment,
    must_env,
    get_env,
    load_snowflake_settings,
    get_propagation_wait,
    load_config,
    save_config,
    get_config_value,
    merge_configs
)

from config_handler_scripts.config_validator import (
    ConfigValidationError,
    VALID_WAREHOUSE_SIZES,
    VALID_WAREHOUSE_TYPES,
    VALID_SCALING_POLICIES,
    WAREHOUSE_DEFAULTS,
    CONFIG_PROPERTIES,
    validate_warehouse_config,
    validate_warehouse_configs,
    apply_defaults,
    build_warehouse_config,
    create_config_template
)

from config_handler_scripts.module_inspector import (
    REQUIRED_OUTPUTS,
    find_missing_passthrough,
    find_missing_variables,
    find_missing_defaults,
    find_missing_outputs,
    check_module
)

__all__ = [
    # config_loader
    'load_environment',
    'must_env',
    'get_env',
    'load_snowflake_settings',
    'get_propagation_wait',
    'load_config',
    'save_config',
    'get_config_value',
    'merge_configs',

    # config_validator
    'ConfigValidationError',
    'VALID_WAREHOUSE_SIZES',
    'VALID_WAREHOUSE_TYPES',
    'VALID_SCALING_POLICIES',
    'WAREHOUSE_DEFAULTS',
    'CONFIG_PROPERTIES',
    'validate_warehouse_config',
    'validate_warehouse_configs',
    'apply_defaults',
    'build_warehouse_config',
    'create_config_template',

    # module_inspector
    'REQUIRED_OUTPUTS',
    'find_missing_passthrough',
    'find_missing_variables',
    'find_missing_defaults',
    'find_missing_outputs',
    'check_module',
]

__version__ = '1.0.0'
