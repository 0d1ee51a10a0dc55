"""
Configuration classes for the driver and its backends.
"""

from cosi_driver.config.backend import (
    DriverConfig,
    FilerBackendConfig,
    S3BackendConfig,
)
from cosi_driver.config.loader import load_config

__all__ = [
    "DriverConfig",
    "FilerBackendConfig",
    "S3BackendConfig",
    "load_config",
]
