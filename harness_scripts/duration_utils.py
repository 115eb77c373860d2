"""
Duration Utilities Module
=========================
Duration parsing and formatting for terraform timings and propagation waits.

Functions:
    - format_duration: Convert seconds to human-readable string
    - parse_duration: Convert duration string to seconds
    - get_duration_seconds: Normalize timedelta/string/number to seconds
    - wait_for_propagation: Sleep for a fixed eventual-consistency window
"""

import logging
import re
import time
from datetime import timedelta
from typing import Union


logger = logging.getLogger(__name__)


def format_duration(duration: Union[timedelta, float, int]) -> str:
    """
    Convert duration to human-readable string.

    Args:
        duration: timedelta object, or seconds (float/int)

    Returns:
        str: Human-readable duration (e.g., "1m 5s", "45s", "0s")

    Example:
        >>> format_duration(65)
        '1m 5s'
    """
    if isinstance(duration, timedelta):
        total_seconds = int(duration.total_seconds())
    else:
        total_seconds = int(duration)

    if total_seconds < 0:
        raise ValueError("Duration cannot be negative")

    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if seconds > 0 or not parts:
        parts.append(f"{seconds}s")

    return " ".join(parts)


def parse_duration(duration_str: str) -> int:
    """
    Parse human-readable duration string to seconds.

    Unlike run-length durations, a zero wait ("0s") is valid here: it
    disables the propagation sleep.

    Args:
        duration_str: Duration string (e.g., "5s", "1m 30s", "0s")

    Returns:
        int: Total seconds

    Raises:
        ValueError: If duration string is empty or malformed

    Example:
        >>> parse_duration("1m 30s")
        90
    """
    if not duration_str or not duration_str.strip():
        raise ValueError("Duration string cannot be empty")

    pattern = r'(?:(\d+)h)?\s*(?:(\d+)m)?\s*(?:(\d+)s)?'
    match = re.fullmatch(pattern, duration_str.strip())

    if not match or not any(match.groups()):
        raise ValueError(f"Invalid duration format: {duration_str}")

    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    seconds = int(match.group(3) or 0)

    return hours * 3600 + minutes * 60 + seconds


def get_duration_seconds(duration: Union[timedelta, str, float, int]) -> float:
    """
    Get duration in seconds from various input types.

    Example:
        >>> get_duration_seconds("1m")
        60.0
    """
    if isinstance(duration, timedelta):
        return duration.total_seconds()
    elif isinstance(duration, str):
        return float(parse_duration(duration))
    else:
        return float(duration)


def wait_for_propagation(duration: Union[timedelta, str, float, int]) -> None:
    """
    Sleep for a fixed window so freshly provisioned objects become visible.

    Args:
        duration: How long to wait
    """
    seconds = get_duration_seconds(duration)
    if seconds <= 0:
        return

    logger.info(f"Waiting {format_duration(seconds)} for provisioning to propagate")
    time.sleep(seconds)
