#!/usr/bin/env python3
"""
Configuration Validation Script
================================
Validates a warehouse_configs JSON file and the module contract before a
provisioning run.

Usage:
    python deployment/validate_config.py warehouse_configs.json
    python deployment/validate_config.py warehouse_configs.json --module-dir modules/snowflake-warehouse
    python deployment/validate_config.py --template > warehouse_configs.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config_handler_scripts import config_loader, config_validator, module_inspector

DEFAULT_MODULE_DIR = project_root / 'modules' / 'snowflake-warehouse'


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Validate warehouse configurations and the terraform module contract'
    )
    parser.add_argument(
        'config_path',
        nargs='?',
        help='Path to a warehouse_configs JSON file'
    )
    parser.add_argument(
        '--module-dir',
        default=str(DEFAULT_MODULE_DIR),
        help='Module directory to check (default: modules/snowflake-warehouse)'
    )
    parser.add_argument(
        '--template',
        action='store_true',
        help='Print an example warehouse_configs file and exit'
    )
    parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Verbose output'
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main validation function; returns the process exit code."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if args.template:
        print(json.dumps(config_validator.create_config_template(), indent=4))
        return 0

    print("=" * 80)
    print("Warehouse Configuration Validation")
    print("=" * 80)

    errors = []

    print(f"Module: {args.module_dir}")
    _, module_errors = module_inspector.check_module(args.module_dir)
    errors.extend(f"module: {error}" for error in module_errors)

    if args.config_path:
        print(f"Config file: {args.config_path}")

        if not Path(args.config_path).exists():
            print(f"ERROR: Configuration file not found: {args.config_path}")
            return 1

        try:
            config = config_loader.load_config(args.config_path)
        except json.JSONDecodeError as e:
            print(f"ERROR: Invalid JSON: {e}")
            return 1

        if isinstance(config, dict):
            warehouse_configs = config.get('warehouse_configs', config)
        else:
            warehouse_configs = config
        _, config_errors = config_validator.validate_warehouse_configs(warehouse_configs)
        errors.extend(config_errors)

        if args.verbose and not config_errors:
            print()
            print("Warehouses:")
            for key, warehouse in warehouse_configs.items():
                warehouse = config_validator.apply_defaults(warehouse)
                print(f"  {key}: {warehouse['name']} ({warehouse['warehouse_size']}, "
                      f"{warehouse['min_cluster_count']}-{warehouse['max_cluster_count']} clusters)")

    print()
    if not errors:
        print("✓ VALIDATION PASSED")
        return 0

    print("✗ VALIDATION FAILED")
    print()
    print(f"Found {len(errors)} error(s):")
    print()
    for i, error in enumerate(errors, 1):
        print(f"{i}. {error}")

    return 1


if __name__ == '__main__':
    sys.exit(main())
