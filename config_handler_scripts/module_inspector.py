"""
Module Inspector Module
=======================
Static contract checks of the snowflake-warehouse terraform module.

These read the module's .tf sources as text; no terraform binary is needed.

Functions:
    - find_missing_passthrough: Properties not mapped onto the resource
    - find_missing_variables: Properties missing from the variable type
    - find_missing_defaults: Optional properties without the expected default
    - find_missing_outputs: Required outputs not declared
    - check_module: Run every check against a module directory
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from config_handler_scripts.config_validator import CONFIG_PROPERTIES, WAREHOUSE_DEFAULTS


logger = logging.getLogger(__name__)

REQUIRED_OUTPUTS = [
    'warehouse_names',
    'warehouse_fully_qualified_names',
    'warehouse_sizes',
    'warehouse_states',
]


def find_missing_passthrough(main_tf: str, properties: Iterable[str] = CONFIG_PROPERTIES) -> List[str]:
    """
    Properties that main.tf does not assign as "<prop> = each.value.<prop>".

    Example:
        >>> find_missing_passthrough('name = each.value.name', ['name', 'comment'])
        ['comment']
    """
    return [
        prop for prop in properties
        if not re.search(rf'\b{prop}\s*=\s*each\.value\.{prop}\b', main_tf, re.IGNORECASE)
    ]


def find_missing_variables(variables_tf: str, properties: Iterable[str] = CONFIG_PROPERTIES) -> List[str]:
    """Properties that the warehouse_configs object type does not declare."""
    return [
        prop for prop in properties
        if not re.search(rf'\b{prop}\s*=', variables_tf, re.IGNORECASE)
    ]


def _default_literal(value: Any) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value)


def find_missing_defaults(variables_tf: str, defaults: Dict[str, Any] = WAREHOUSE_DEFAULTS) -> List[str]:
    """
    Optional properties not declared as "<prop> = optional(<type>, <default>)".

    Example:
        >>> find_missing_defaults('auto_suspend = optional(number, 60)', {'auto_suspend': 60})
        []
    """
    missing = []
    for prop, default in defaults.items():
        pattern = rf'\b{prop}\s*=\s*optional\s*\(\s*[^,]+,\s*{re.escape(_default_literal(default))}\s*\)'
        if not re.search(pattern, variables_tf, re.IGNORECASE):
            missing.append(prop)
    return missing


def find_missing_outputs(outputs_tf: str, outputs: Iterable[str] = REQUIRED_OUTPUTS) -> List[str]:
    """Required outputs without an 'output "<name>"' block."""
    return [
        name for name in outputs
        if not re.search(rf'output\s+"{name}"', outputs_tf, re.IGNORECASE)
    ]


def check_module(module_dir: str) -> Tuple[bool, List[str]]:
    """
    Run every static contract check against a module directory.

    Args:
        module_dir: Directory holding main.tf, variables.tf and outputs.tf

    Returns:
        tuple: (is_valid: bool, errors: list of error messages)

    Example:
        >>> is_valid, errors = check_module('modules/snowflake-warehouse')
    """
    module_path = Path(module_dir)
    errors = []

    sources = {}
    for file_name in ('main.tf', 'variables.tf', 'outputs.tf'):
        file_path = module_path / file_name
        if not file_path.exists():
            errors.append(f"{file_name} not found in {module_dir}")
        else:
            sources[file_name] = file_path.read_text()

    if errors:
        return False, errors

    errors.extend(
        f"main.tf does not pass {prop} through to the warehouse resource"
        for prop in find_missing_passthrough(sources['main.tf'])
    )
    errors.extend(
        f"variables.tf does not declare {prop}"
        for prop in find_missing_variables(sources['variables.tf'])
    )
    errors.extend(
        f"variables.tf default for {prop} should be {_default_literal(WAREHOUSE_DEFAULTS[prop])}"
        for prop in find_missing_defaults(sources['variables.tf'])
    )
    errors.extend(
        f"outputs.tf does not define output {name}"
        for name in find_missing_outputs(sources['outputs.tf'])
    )

    is_valid = len(errors) == 0

    if is_valid:
        logger.info(f"✓ Module contract check passed for {module_dir}")
    else:
        logger.error(f"✗ Module contract check failed with {len(errors)} error(s)")
        for error in errors:
            logger.error(f"  - {error}")

    return is_valid, errors
