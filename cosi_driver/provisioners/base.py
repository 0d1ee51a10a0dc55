"""
Lifecycle protocol shared by all backends.
"""

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Protocol

from pydantic import BaseModel, Field

from cosi_driver.deadline import Deadline
from cosi_driver.exceptions import (
    AlreadyExistsError,
    DeadlineExceededError,
    InternalError,
    InvalidArgumentError,
    ProvisionerError,
    UnavailableError,
)

if TYPE_CHECKING:
    from cosi_driver.provisioners.access import AccessManager

logger = logging.getLogger(__name__)

# Errors the protocol surfaces as-is; everything else becomes INTERNAL.
PASSTHROUGH_ERRORS = (
    InvalidArgumentError,
    AlreadyExistsError,
    UnavailableError,
    DeadlineExceededError,
    InternalError,
)


class BucketInfo(BaseModel):
    """Result of create_bucket."""

    bucket_id: str


class BucketCredentials(BaseModel):
    """Credentials and connection metadata handed to a bucket consumer."""

    access_key_id: str
    secret_access_key: str = Field(..., repr=False)
    endpoint: str = ""
    region: str = ""


class AccessGrant(BaseModel):
    """Result of grant_access."""

    account_id: str
    credentials: BucketCredentials

    def to_secrets(self) -> dict[str, str]:
        """Secret map in the layout COSI sidecars expect under the ``s3`` key."""
        return {
            "accessKeyID": self.credentials.access_key_id,
            "accessSecretKey": self.credentials.secret_access_key,
            "endpoint": self.credentials.endpoint,
            "region": self.credentials.region,
        }


class DriverInfo(BaseModel):
    """Result of get_info."""

    name: str


class BucketProvisioner(Protocol):
    """Capability set every backend implements."""

    access: "AccessManager"

    def prepare(self, deadline: Deadline | None = None) -> None:
        ...

    def create_bucket(self, name: str, deadline: Deadline | None = None) -> BucketInfo:
        ...

    def delete_bucket(self, bucket_id: str, deadline: Deadline | None = None) -> None:
        ...

    def grant_access(
        self, bucket_id: str, account_name: str, deadline: Deadline | None = None
    ) -> AccessGrant:
        ...

    def revoke_access(
        self,
        account_id: str,
        bucket_id: str | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        ...


def require(value: str | None, field: str) -> str:
    """Reject empty request fields with InvalidArgumentError."""
    if not value:
        raise InvalidArgumentError(f"{field} is required", details={"field": field})
    return value


@contextmanager
def protocol_errors(operation: str, **context):
    """
    Log failures and narrow them to the protocol's error set.

    Example:
        with protocol_errors("delete bucket", bucket_id=bucket_id):
            store.delete(buckets_path, bucket_id)
    """
    try:
        yield
    except PASSTHROUGH_ERRORS as e:
        logger.error(
            "failed to %s: %s", operation, e, extra={"code": e.code, **context}
        )
        raise
    except ProvisionerError as e:
        logger.error(
            "failed to %s: %s", operation, e, extra={"code": e.code, **context}
        )
        raise InternalError(
            f"failed to {operation}", details={**context, "cause": e.code}
        ) from e
