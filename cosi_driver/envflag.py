"""
Environment variable helpers with forgiving defaults.

A missing or unparseable variable never raises; it falls back to the
default so a typo in a deployment manifest does not crash the driver.
"""

import os
from collections.abc import Mapping

_TRUE = {"1", "t", "true", "y", "yes", "on"}
_FALSE = {"0", "f", "false", "n", "no", "off"}


def string(
    key: str,
    default: str,
    *expected: str,
    environ: Mapping[str, str] | None = None,
) -> str:
    """
    Read a string variable.

    Args:
        key: Environment variable name
        default: Value used when the variable is unset
        *expected: Allowed values; anything else falls back to ``default``
        environ: Mapping to read from (defaults to ``os.environ``)
    """
    env = os.environ if environ is None else environ
    value = env.get(key, default)

    if not expected:
        return value

    if value in expected:
        return value

    return default


def boolean(key: str, default: bool, environ: Mapping[str, str] | None = None) -> bool:
    """Read a boolean variable (1/0, true/false, yes/no, on/off)."""
    env = os.environ if environ is None else environ
    if key not in env:
        return default

    value = env[key].strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    return default


def integer(key: str, default: int, environ: Mapping[str, str] | None = None) -> int:
    """Read an integer variable."""
    env = os.environ if environ is None else environ
    if key not in env:
        return default

    try:
        return int(env[key])
    except ValueError:
        return default
