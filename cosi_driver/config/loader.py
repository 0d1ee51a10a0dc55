"""
Load DriverConfig from a YAML file and the environment.

Environment variables win over the file, the file wins over defaults.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from cosi_driver import envflag
from cosi_driver.config.backend import DriverConfig

logger = logging.getLogger(__name__)

# Environment variable -> top-level DriverConfig field
DRIVER_ENV = {
    "DRIVERNAME": "driver_name",
    "COSI_ENDPOINT": "cosi_endpoint",
    "ENDPOINT": "endpoint",
    "REGION": "region",
}

# Environment variable -> backend field, per backend type
BACKEND_ENV = {
    "filer": {
        "STORE": "store",
        "BASE_PATH": "base_path",
        "BUCKETS_PATH": "buckets_path",
    },
    "s3": {
        "S3_ENDPOINT": "endpoint_url",
        "S3_REGION": "region",
        "ACCESSKEY": "access_key",
        "SECRETKEY": "secret_key",
        "CONFIG_BUCKET": "config_bucket",
    },
}


def read_config_file(path: str | Path) -> dict[str, Any]:
    """Parse a YAML config file into a plain dict."""
    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def apply_environment(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Overlay environment variables onto raw config data."""
    result = dict(data)

    for key, field in DRIVER_ENV.items():
        if key in environ:
            result[field] = envflag.string(key, "", environ=environ)

    result["max_attempts"] = envflag.integer(
        "MAX_ATTEMPTS", result.get("max_attempts", 5), environ=environ
    )

    current_scope = result.get("revoke_scope", "account")
    result["revoke_scope"] = envflag.string(
        "REVOKE_SCOPE", current_scope, "account", "bucket", environ=environ
    )

    backend = dict(result.get("backend") or {})
    current_type = backend.get("type", "filer")
    backend_type = envflag.string("BACKEND", current_type, "filer", "s3", environ=environ)
    if backend_type != current_type:
        # Settings of another backend type do not carry over.
        backend = {}
    if backend_type not in BACKEND_ENV:
        raise ValueError(
            f"Unknown backend type: {backend_type!r}. Expected one of: {list(BACKEND_ENV)}"
        )
    backend["type"] = backend_type

    for key, field in BACKEND_ENV[backend_type].items():
        if key in environ:
            backend[field] = envflag.string(key, "", environ=environ)

    if backend_type == "filer":
        backend["create_dirs"] = envflag.boolean(
            "CREATE_DIRS", backend.get("create_dirs", True), environ=environ
        )

    result["backend"] = backend
    return result


def load_config(
    path: str | Path | None = None, environ: Mapping[str, str] | None = None
) -> DriverConfig:
    """
    Build the driver configuration.

    Args:
        path: Optional YAML config file
        environ: Environment mapping (defaults to ``os.environ``)

    Raises:
        pydantic.ValidationError: If the merged configuration is invalid
        ValueError: If the config file is not a mapping or names an unknown backend type
    """
    data = read_config_file(path) if path else {}
    data = apply_environment(data, os.environ if environ is None else environ)

    config = DriverConfig.model_validate(data)
    logger.debug(
        "loaded driver config",
        extra={"driver_name": config.driver_name, "backend": config.backend.type},
    )
    return config
