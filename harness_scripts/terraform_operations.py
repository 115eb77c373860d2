"""
Terraform Operations Module
===========================
Runs the terraform CLI against example and fixture configurations.

Functions:
    - run_terraform: Run a terraform subcommand and capture its output
    - init: terraform init
    - apply: terraform apply -auto-approve
    - init_and_apply: init followed by apply
    - destroy: terraform destroy -auto-approve
    - validate: terraform validate
    - output: terraform output -json
    - render_module_fixture: Write a main.tf.json instantiating the module
"""

import json
import logging
import os
import shutil
import subprocess
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from harness_scripts.duration_utils import format_duration
from harness_scripts.error_handling import TerraformError


logger = logging.getLogger(__name__)

FIXTURE_FILE_NAME = 'main.tf.json'
REQUIRED_TERRAFORM_VERSION = '>= 1.3.0'


@dataclass
class TerraformOptions:
    """
    How to invoke terraform for one configuration directory.

    Attributes:
        terraform_dir: Directory holding the root module
        vars: Input variables, passed through a temporary .tfvars.json file
        no_color: Append -no-color to every command
        env: Extra environment variables for the terraform process
        binary: terraform executable name or path
    """

    terraform_dir: str
    vars: Dict[str, Any] = field(default_factory=dict)
    no_color: bool = True
    env: Dict[str, str] = field(default_factory=dict)
    binary: str = 'terraform'


def _write_var_file(variables: Dict[str, Any]) -> str:
    handle = tempfile.NamedTemporaryFile(
        mode='w',
        suffix='.tfvars.json',
        prefix='harness-',
        delete=False
    )
    with handle:
        json.dump(variables, handle, indent=2)
    return handle.name


def run_terraform(
    options: TerraformOptions,
    args: List[str],
    with_vars: bool = False
) -> subprocess.CompletedProcess:
    """
    Run a terraform subcommand in the options' directory.

    Args:
        options: Terraform invocation options
        args: Subcommand and its flags (e.g. ['apply', '-auto-approve'])
        with_vars: Pass options.vars through -var-file

    Returns:
        CompletedProcess: Finished process with captured stdout/stderr

    Raises:
        TerraformError: If the binary is missing or the command exits non-zero
    """
    if shutil.which(options.binary) is None:
        raise TerraformError(f"{options.binary} executable not found in PATH")

    cmd = [options.binary] + list(args)
    if options.no_color:
        cmd.append('-no-color')

    var_file = None
    if with_vars and options.vars:
        var_file = _write_var_file(options.vars)
        cmd.append(f'-var-file={var_file}')

    env = os.environ.copy()
    env['TF_IN_AUTOMATION'] = '1'
    env.update(options.env)

    logger.info(f"Running {' '.join(cmd[:2])} in {options.terraform_dir}")
    started = time.monotonic()

    try:
        result = subprocess.run(
            cmd,
            cwd=options.terraform_dir,
            env=env,
            capture_output=True,
            text=True,
            check=False
        )
    finally:
        if var_file:
            os.remove(var_file)

    elapsed = format_duration(time.monotonic() - started)

    if result.stdout:
        logger.debug(result.stdout)

    if result.returncode != 0:
        logger.error(f"terraform {args[0]} failed after {elapsed} (exit {result.returncode})")
        logger.error(result.stderr)
        raise TerraformError(
            f"terraform {args[0]} failed with exit code {result.returncode}: {result.stderr.strip()}",
            command=cmd,
            returncode=result.returncode,
            stderr=result.stderr
        )

    logger.info(f"terraform {args[0]} completed in {elapsed}")
    return result


def init(options: TerraformOptions, backend: bool = True) -> str:
    """Run terraform init; backend=False skips backend configuration."""
    args = ['init', '-input=false']
    if not backend:
        args.append('-backend=false')
    return run_terraform(options, args).stdout


def apply(options: TerraformOptions) -> str:
    """Run terraform apply with the options' variables."""
    return run_terraform(options, ['apply', '-auto-approve', '-input=false'], with_vars=True).stdout


def init_and_apply(options: TerraformOptions) -> str:
    """
    Run terraform init followed by apply.

    Example:
        >>> options = TerraformOptions(
        >>>     terraform_dir='examples/basic',
        >>>     vars={'warehouse_configs': {'test_wh': {'name': 'TT_WH_AB12CD'}}}
        >>> )
        >>> init_and_apply(options)
    """
    init(options)
    return apply(options)


def destroy(options: TerraformOptions) -> str:
    """Run terraform destroy with the options' variables."""
    return run_terraform(options, ['destroy', '-auto-approve', '-input=false'], with_vars=True).stdout


def validate(options: TerraformOptions) -> str:
    """Run terraform validate; raises TerraformError with the diagnostics on failure."""
    return run_terraform(options, ['validate']).stdout


def output(options: TerraformOptions, name: Optional[str] = None) -> Any:
    """
    Read root module outputs as decoded JSON.

    Args:
        options: Terraform invocation options
        name: Single output to read; all outputs when omitted

    Returns:
        Output value (single output) or {name: {"value": ..., ...}} mapping
    """
    args = ['output', '-json']
    if name:
        args.append(name)
    return json.loads(run_terraform(options, args).stdout)


def render_module_fixture(
    module_dir: str,
    warehouse_configs: Dict[str, Dict[str, Any]],
    dest_dir: str
) -> Path:
    """
    Write a root configuration that instantiates the warehouse module.

    Keys whose value is None are dropped so the module's optional() defaults
    apply.

    Args:
        module_dir: Path to modules/snowflake-warehouse
        warehouse_configs: warehouse key -> configuration record
        dest_dir: Directory to write main.tf.json into

    Returns:
        Path: Written file
    """
    source = os.path.relpath(os.path.abspath(module_dir), os.path.abspath(dest_dir))
    source = source.replace(os.sep, '/')
    if not source.startswith('.'):
        source = f'./{source}'

    configs = {
        key: {prop: value for prop, value in config.items() if value is not None}
        for key, config in warehouse_configs.items()
    }

    document = {
        'terraform': {'required_version': REQUIRED_TERRAFORM_VERSION},
        'module': {
            'warehouses': {
                'source': source,
                'warehouse_configs': configs
            }
        }
    }

    fixture_path = Path(dest_dir) / FIXTURE_FILE_NAME
    fixture_path.write_text(json.dumps(document, indent=2))

    logger.debug(f"Module fixture written to {fixture_path}")
    return fixture_path
