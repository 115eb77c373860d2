"""
Error Handling Module
=====================
Exception hierarchy and error formatting for the warehouse test harness.

Every failure in the harness is fatal to the running test: nothing here
retries or recovers, it only classifies and describes what went wrong.

Functions:
    - classify_error: Classify an error by harness failure category
    - create_error_message: Format error details for logs and assertions
"""

import logging
from typing import Dict, Type


logger = logging.getLogger(__name__)


class HarnessError(Exception):
    """Base exception for harness errors."""
    pass


class ConfigurationError(HarnessError):
    """Required configuration (usually an environment variable) is missing."""
    pass


class AuthenticationError(HarnessError):
    """Credentials are malformed or absent."""
    pass


class ConnectivityError(HarnessError):
    """Connection to Snowflake could not be opened or pinged."""
    pass


class NotFoundError(HarnessError):
    """Introspection query matched no rows."""
    pass


class MissingColumnError(HarnessError):
    """Introspection result lacks a column the harness needs."""
    pass


class TerraformError(HarnessError):
    """A terraform command failed or could not be started."""

    def __init__(self, message: str, command=None, returncode=None, stderr: str = ''):
        super().__init__(message)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


ERROR_CATEGORIES: Dict[Type[HarnessError], str] = {
    ConfigurationError: 'configuration',
    AuthenticationError: 'authentication',
    ConnectivityError: 'connectivity',
    NotFoundError: 'not_found',
    MissingColumnError: 'schema',
    TerraformError: 'provisioning',
}


def classify_error(error: Exception) -> str:
    """
    Classify error by harness failure category.

    Args:
        error: Exception to classify

    Returns:
        str: One of configuration, authentication, connectivity, not_found,
            schema, provisioning or unexpected

    Example:
        >>> classify_error(NotFoundError("no warehouse"))
        'not_found'
        >>> classify_error(ValueError("boom"))
        'unexpected'
    """
    for error_class, category in ERROR_CATEGORIES.items():
        if isinstance(error, error_class):
            return category

    return 'unexpected'


def create_error_message(error: Exception, step: str) -> str:
    """
    Format error details into a descriptive failure message.

    Args:
        error: Exception that occurred
        step: Harness step that failed (e.g. "terraform apply", "connect")

    Returns:
        str: Formatted error message

    Example:
        >>> create_error_message(ConnectivityError("ping failed"), "connect")
        '[CONNECTIVITY] connect failed: ConnectivityError: ping failed | Recommendation: Check network access and account identifier'
    """
    error_type = classify_error(error)
    message = f"[{error_type.upper()}] {step} failed: {error.__class__.__name__}: {error}"

    if error_type == 'configuration':
        message += " | Recommendation: Export the missing environment variables"
    elif error_type == 'authentication':
        message += " | Recommendation: Check the private key or password"
    elif error_type == 'connectivity':
        message += " | Recommendation: Check network access and account identifier"
    elif error_type == 'provisioning':
        message += " | Recommendation: Inspect the terraform output above"

    return message
