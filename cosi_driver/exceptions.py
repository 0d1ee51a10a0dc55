"""
Exceptions raised by the provisioning layer.

Every error carries a protocol ``code`` so the transport wrapper can map it
onto a status without inspecting the exception type.

Example:
    try:
        driver.grant_access("b1", "alice")
    except InvalidArgumentError as e:
        logger.error("rejected request", extra={"code": e.code, **e.details})
"""

from typing import Any


class ProvisionerError(Exception):
    """
    Base class for all provisioning errors.

    Attributes:
        message: Human-readable error message
        code: Protocol status code (INVALID_ARGUMENT, INTERNAL, ...)
        details: Additional context about the failing call
    """

    code = "INTERNAL"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class InvalidArgumentError(ProvisionerError):
    """A required request field is empty or malformed."""

    code = "INVALID_ARGUMENT"


class AlreadyExistsError(ProvisionerError):
    """The entry or bucket exists and is not ours to reuse."""

    code = "ALREADY_EXISTS"


class NotFoundError(ProvisionerError):
    """The entry or bucket does not exist."""

    code = "NOT_FOUND"


class UnavailableError(ProvisionerError):
    """The backend could not be reached."""

    code = "UNAVAILABLE"


class DeadlineExceededError(ProvisionerError):
    """The caller's deadline passed before the call completed."""

    code = "DEADLINE_EXCEEDED"


class VersionConflictError(ProvisionerError):
    """
    A conditional write lost against a concurrent writer.

    Raised by directory stores from ``update_if_unchanged``; the access
    layer catches it and restarts its read-modify-write loop.
    """

    code = "ABORTED"


class InternalError(ProvisionerError):
    """Unexpected backend failure."""

    code = "INTERNAL"


class MalformedDocumentError(InternalError):
    """The persisted identity document could not be decoded."""


class ConflictError(InternalError):
    """Every read-modify-write attempt lost against a concurrent writer."""
