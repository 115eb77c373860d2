"""
Scenario Module
===============
Provisioning lifecycle for a single test scenario.

A scenario applies a terraform configuration on entry, waits for the
changes to propagate, and always destroys what it applied on exit.

Functions:
    - unique_id: Random base-62 identifier
    - unique_name: Prefix plus an upper-cased unique id
"""

import logging
import random
import string
from datetime import timedelta
from typing import Union

from harness_scripts.duration_utils import get_duration_seconds, wait_for_propagation
from harness_scripts.error_handling import TerraformError, create_error_message
from harness_scripts.terraform_operations import TerraformOptions, destroy, init_and_apply


logger = logging.getLogger(__name__)

UNIQUE_ID_ALPHABET = string.ascii_letters + string.digits
DEFAULT_PROPAGATION_WAIT = '5s'


def unique_id(length: int = 6) -> str:
    """
    Random base-62 identifier for naming throwaway resources.

    Example:
        >>> unique_id()
        'a8Xk2P'
    """
    return ''.join(random.choice(UNIQUE_ID_ALPHABET) for _ in range(length))


def unique_name(prefix: str) -> str:
    """
    Build a Snowflake-friendly unique resource name.

    Example:
        >>> unique_name("TT_WH")
        'TT_WH_A8XK2P'
    """
    return f"{prefix}_{unique_id().upper()}"


class WarehouseScenario:
    """
    Context manager owning one terraform apply/destroy cycle.

    Destroy runs even when apply or the scenario body fails. A destroy
    failure is raised only when nothing else failed first; otherwise it is
    logged and the original error propagates.

    Example:
        >>> options = TerraformOptions('examples/basic', vars={'warehouse_configs': configs})
        >>> with WarehouseScenario(options):
        >>>     with SnowflakeConnection(settings) as conn:
        >>>         assert warehouse_exists(conn, name)
    """

    def __init__(
        self,
        options: TerraformOptions,
        propagation_wait: Union[timedelta, str, float, int] = DEFAULT_PROPAGATION_WAIT
    ):
        # malformed durations fail here, before anything is provisioned
        get_duration_seconds(propagation_wait)

        self.options = options
        self.propagation_wait = propagation_wait
        self.applied = False

    def __enter__(self):
        """Apply the configuration and wait for propagation."""
        # __exit__ does not run when __enter__ raises, so clean up here
        try:
            init_and_apply(self.options)
            self.applied = True
            wait_for_propagation(self.propagation_wait)
        except BaseException as e:
            step = "propagation wait" if self.applied else "terraform apply"
            logger.error(create_error_message(e, step))
            self._destroy(prior_failure=True)
            raise

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Destroy the configuration."""
        self._destroy(prior_failure=exc_type is not None)
        return False

    def _destroy(self, prior_failure: bool) -> None:
        try:
            destroy(self.options)
        except TerraformError as e:
            if not prior_failure:
                raise
            logger.error(create_error_message(e, "terraform destroy"))
        finally:
            self.applied = False
