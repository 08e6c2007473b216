"""
utils/validators.py
Input validation for scan arguments
"""

import ipaddress
from typing import Tuple


def validate_target(target: str) -> Tuple[bool, str]:
    """
    Validate that target is a single IPv4 or IPv6 address.

    Args:
        target: IP address (e.g. "192.168.1.1" or "::1")

    Returns:
        (is_valid, error_message) tuple
    """
    if not target or not isinstance(target, str):
        return (False, "Target must be a non-empty string")

    try:
        ipaddress.ip_address(target.strip())
        return (True, "")
    except ValueError:
        return (False, f"Invalid IP address: {target!r}")


def validate_worker_count(value) -> Tuple[bool, str]:
    """
    Validate a worker count: a positive integer.

    bool is rejected even though it subclasses int.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return (False, "Worker count must be an integer")

    if value < 1:
        return (False, f"Worker count must be positive, got {value}")

    return (True, "")


def validate_timeout_ms(value) -> Tuple[bool, str]:
    """Validate a probe timeout in milliseconds: finite and > 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return (False, "Timeout must be a number of milliseconds")

    if not value > 0 or value == float("inf"):
        return (False, f"Timeout must be a positive finite number, got {value}")

    return (True, "")


__all__ = ["validate_target", "validate_worker_count", "validate_timeout_ms"]
