"""
Harness Scripts Package
=======================
Core components of the Snowflake warehouse module test harness.

Modules:
    - duration_utils: Duration parsing and propagation waits
    - error_handling: Exception hierarchy and error formatting
    - snowflake_operations: Connector and warehouse inspector
    - terraform_operations: terraform CLI runner
    - scenario: Apply/destroy lifecycle for test scenarios
"""

from harness_scripts.duration_utils import (
    format_duration,
    parse_duration,
    get_duration_seconds,
    wait_for_propagation
)

from harness_scripts.error_handling import (
    HarnessError,
    ConfigurationError,
    AuthenticationError,
    ConnectivityError,
    NotFoundError,
    MissingColumnError,
    TerraformError,
    classify_error,
    create_error_message
)

from harness_scripts.snowflake_operations import (
    WarehouseProperties,
    SnowflakeConnection,
    load_private_key,
    build_connection_params,
    describe_connection,
    open_connection,
    build_show_warehouses_query,
    build_column_index,
    normalize_value,
    warehouse_exists,
    fetch_warehouse_details,
    fetch_warehouse_properties
)

from harness_scripts.terraform_operations import (
    TerraformOptions,
    run_terraform,
    init,
    apply,
    init_and_apply,
    destroy,
    validate,
    output,
    render_module_fixture
)

from harness_scripts.scenario import (
    WarehouseScenario,
    unique_id,
    unique_name
)

__all__ = [
    # duration_utils
    'format_duration',
    'parse_duration',
    'get_duration_seconds',
    'wait_for_propagation',

    # error_handling
    'HarnessError',
    'ConfigurationError',
    'AuthenticationError',
    'ConnectivityError',
    'NotFoundError',
    'MissingColumnError',
    'TerraformError',
    'classify_error',
    'create_error_message',

    # snowflake_operations
    'WarehouseProperties',
    'SnowflakeConnection',
    'load_private_key',
    'build_connection_params',
    'describe_connection',
    'open_connection',
    'build_show_warehouses_query',
    'build_column_index',
    'normalize_value',
    'warehouse_exists',
    'fetch_warehouse_details',
    'fetch_warehouse_properties',

    # terraform_operations
    'TerraformOptions',
    'run_terraform',
    'init',
    'apply',
    'init_and_apply',
    'destroy',
    'validate',
    'output',
    'render_module_fixture',

    # scenario
    'WarehouseScenario',
    'unique_id',
    'unique_name',
]

__version__ = '1.0.0'
