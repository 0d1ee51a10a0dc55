"""
Directory store backed by objects in an S3 bucket.

Entries are objects keyed by their store path without the leading slash.
Directory entries are zero-byte marker objects whose key ends in ``/``.
Compare-and-swap uses S3 conditional writes (``If-Match`` / ``If-None-Match``)
with the object ETag as the entry version.
"""

import logging
from typing import Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from cosi_driver.deadline import Deadline
from cosi_driver.exceptions import (
    AlreadyExistsError,
    InternalError,
    NotFoundError,
    ProvisionerError,
    UnavailableError,
    VersionConflictError,
)
from cosi_driver.store.base import DirectoryStore, Entry, join_path

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
_PRECONDITION_CODES = {"412", "PreconditionFailed", "ConditionalRequestConflict"}
_UNAVAILABLE_CODES = {"500", "502", "503", "504", "ServiceUnavailable", "SlowDown", "InternalError"}


def make_s3_client(
    endpoint_url: str | None = None,
    region: str | None = None,
    access_key: str | None = None,
    secret_key: str | None = None,
    timeout: float | None = None,
):
    """Create a boto3 S3 client; empty credentials fall back to the default chain."""
    options: dict[str, Any] = {"signature_version": "s3v4"}
    if timeout is not None:
        options.update(connect_timeout=timeout, read_timeout=timeout)

    return boto3.client(
        "s3",
        endpoint_url=endpoint_url or None,
        region_name=region or None,
        aws_access_key_id=access_key or None,
        aws_secret_access_key=secret_key or None,
        config=BotoConfig(**options),
    )


def error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def translate_error(error: Exception, operation: str, **details: Any) -> ProvisionerError:
    """Map a boto error onto the provisioner exception taxonomy."""
    details = {"operation": operation, **details}

    if isinstance(error, BotoCoreError):
        return UnavailableError(f"S3 {operation} failed: {error}", details=details)

    code = error_code(error)
    details["s3_code"] = code
    if code in _NOT_FOUND_CODES:
        return NotFoundError(f"S3 {operation}: object not found", details=details)
    if code in _UNAVAILABLE_CODES:
        return UnavailableError(f"S3 {operation} failed: {code}", details=details)
    return InternalError(f"S3 {operation} failed: {code}", details=details)


class S3DirectoryStore(DirectoryStore):
    """
    Directory store on top of an S3 configuration bucket.

    The deadline is checked before every request. A request already in
    flight is bounded by the client's own timeouts and retry budget, not by
    the deadline; set ``S3BackendConfig.timeout`` to keep it short.

    Example:
        client = make_s3_client(endpoint_url="http://localhost:8333")
        store = S3DirectoryStore(client, bucket="cosi-driver-config")
    """

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    @staticmethod
    def _key(directory: str, name: str) -> str:
        return join_path(directory, name).lstrip("/")

    @staticmethod
    def _check(deadline: Deadline | None, operation: str) -> None:
        if deadline is not None:
            deadline.check(operation)

    def _get(self, key: str, name: str) -> Entry | None:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            error = translate_error(e, "get_object", key=key)
            if isinstance(error, NotFoundError):
                return None
            raise error from e

        content = response["Body"].read()
        return Entry(name=name, content=content, version=response["ETag"])

    def _head_directory(self, key: str, name: str) -> Entry | None:
        try:
            response = self.client.head_object(Bucket=self.bucket, Key=f"{key}/")
        except (BotoCoreError, ClientError) as e:
            error = translate_error(e, "head_object", key=key)
            if isinstance(error, NotFoundError):
                return None
            raise error from e

        return Entry(name=name, is_directory=True, version=response["ETag"])

    def _put(self, key: str, name: str, content: bytes, operation: str, **conditions) -> Entry:
        try:
            response = self.client.put_object(
                Bucket=self.bucket, Key=key, Body=content, **conditions
            )
        except ClientError as e:
            if error_code(e) in _PRECONDITION_CODES:
                if "IfNoneMatch" in conditions:
                    raise AlreadyExistsError(
                        f"Entry '{key}' already exists", details={"key": key}
                    ) from e
                raise VersionConflictError(
                    f"Entry '{key}' changed since it was read", details={"key": key}
                ) from e
            raise translate_error(e, operation, key=key) from e
        except BotoCoreError as e:
            raise translate_error(e, operation, key=key) from e

        return Entry(
            name=name,
            content=content,
            is_directory=key.endswith("/"),
            version=response["ETag"],
        )

    def lookup(self, directory, name, deadline=None):
        self._check(deadline, "lookup")
        key = self._key(directory, name)

        entry = self._get(key, name)
        if entry is not None:
            return entry

        self._check(deadline, "lookup")
        return self._head_directory(key, name)

    def create(self, directory, name, content=b"", is_directory=False, deadline=None):
        self._check(deadline, "create")
        key = self._key(directory, name)
        if is_directory:
            return self._put(f"{key}/", name, b"", "create", IfNoneMatch="*")
        return self._put(key, name, content, "create", IfNoneMatch="*")

    def update(self, directory, name, content, deadline=None):
        self._check(deadline, "update")
        key = self._key(directory, name)
        if self._get(key, name) is None:
            raise NotFoundError(f"Entry '{key}' not found", details={"key": key})

        self._check(deadline, "update")
        return self._put(key, name, content, "update")

    def update_if_unchanged(self, directory, name, expected_version, content, deadline=None):
        self._check(deadline, "update_if_unchanged")
        key = self._key(directory, name)
        return self._put(key, name, content, "update_if_unchanged", IfMatch=expected_version)

    def delete(self, directory, name, deadline=None):
        entry = self.lookup(directory, name, deadline=deadline)
        key = self._key(directory, name)
        if entry is None:
            raise NotFoundError(f"Entry '{key}' not found", details={"key": key})

        if entry.is_directory:
            key = f"{key}/"

        self._check(deadline, "delete")
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise translate_error(e, "delete_object", key=key) from e

    def __repr__(self) -> str:
        return f"S3DirectoryStore(bucket='{self.bucket}')"
