"""
cosi-driver: provisioning control-plane for object-storage COSI drivers.

The driver turns the four COSI lifecycle calls into changes on a backend:
buckets are created and deleted on the backend, and account access is
recorded in a single identity document that is reconciled with a
read-modify-write cycle.

Core concepts:
- Driver: entry point, backend chosen by the injected config
- Provisioner: per-backend implementation of the lifecycle calls
- DirectoryStore: path-addressed store holding the identity document
- IdentityDocument: accounts, their credentials and their bucket grants

Example:
    from cosi_driver import Driver
    from cosi_driver.config import DriverConfig, FilerBackendConfig

    driver = Driver(DriverConfig(backend=FilerBackendConfig(store="memory")))
    driver.create_bucket("b1")
    grant = driver.grant_access("b1", "alice")
    driver.revoke_access("alice")
"""

from cosi_driver.driver import Driver
from cosi_driver.deadline import Deadline
from cosi_driver.exceptions import (
    ProvisionerError,
    InvalidArgumentError,
    AlreadyExistsError,
    NotFoundError,
    UnavailableError,
    DeadlineExceededError,
    InternalError,
    MalformedDocumentError,
    ConflictError,
)

__version__ = "0.1.0"
__all__ = [
    "Driver",
    "Deadline",
    "ProvisionerError",
    "InvalidArgumentError",
    "AlreadyExistsError",
    "NotFoundError",
    "UnavailableError",
    "DeadlineExceededError",
    "InternalError",
    "MalformedDocumentError",
    "ConflictError",
]
