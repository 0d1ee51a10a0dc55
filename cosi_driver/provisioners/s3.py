"""
S3 backend: buckets are created through the S3 API.
"""

import logging

from botocore.exceptions import BotoCoreError, ClientError

from cosi_driver.deadline import Deadline
from cosi_driver.exceptions import AlreadyExistsError
from cosi_driver.provisioners.access import AccessManager
from cosi_driver.provisioners.base import (
    AccessGrant,
    BucketInfo,
    protocol_errors,
    require,
)
from cosi_driver.store.s3 import error_code, translate_error

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"


class S3Provisioner:
    """
    Provisioner for S3-compatible gateways (s3gw, Ceph RGW).

    Buckets are real S3 buckets; the identity document is kept by the
    AccessManager's store, usually an S3DirectoryStore on ``config_bucket``.

    Example:
        client = make_s3_client(endpoint_url="http://s3gw:7480")
        store = S3DirectoryStore(client, bucket="cosi-driver-config")
        provisioner = S3Provisioner(client, AccessManager(store))
    """

    def __init__(
        self,
        client,
        access: AccessManager,
        region: str = DEFAULT_REGION,
        config_bucket: str | None = None,
    ):
        self.client = client
        self.access = access
        self.region = region
        self.config_bucket = config_bucket

    def _check(self, deadline: Deadline | None, operation: str) -> None:
        if deadline is not None:
            deadline.check(operation)

    def prepare(self, deadline: Deadline | None = None) -> None:
        """Create the configuration bucket that holds the identity document."""
        if self.config_bucket:
            self.create_bucket(self.config_bucket, deadline=deadline)

    def create_bucket(self, name: str, deadline: Deadline | None = None) -> BucketInfo:
        """
        Create ``name``; a bucket we already own is success.

        Raises:
            AlreadyExistsError: If the name is taken by another owner
        """
        with protocol_errors("create bucket", bucket=name):
            require(name, "name")
            self._check(deadline, "create bucket")
            logger.info("creating bucket", extra={"bucket": name})

            params = {"Bucket": name}
            if self.region and self.region != DEFAULT_REGION:
                params["CreateBucketConfiguration"] = {"LocationConstraint": self.region}

            try:
                self.client.create_bucket(**params)
            except ClientError as e:
                code = error_code(e)
                if code == "BucketAlreadyOwnedByYou":
                    logger.info("bucket already exists", extra={"bucket": name})
                    return BucketInfo(bucket_id=name)
                if code == "BucketAlreadyExists":
                    raise AlreadyExistsError(
                        f"Bucket '{name}' is owned by another account",
                        details={"bucket": name},
                    ) from e
                raise translate_error(e, "create_bucket", bucket=name) from e
            except BotoCoreError as e:
                raise translate_error(e, "create_bucket", bucket=name) from e

            logger.info("successfully created bucket", extra={"bucket": name})
            return BucketInfo(bucket_id=name)

    def delete_bucket(self, bucket_id: str, deadline: Deadline | None = None) -> None:
        """Delete ``bucket_id``; a missing bucket is success."""
        with protocol_errors("delete bucket", bucket_id=bucket_id):
            require(bucket_id, "bucket_id")
            self._check(deadline, "delete bucket")
            logger.info("deleting bucket", extra={"bucket_id": bucket_id})

            try:
                self.client.delete_bucket(Bucket=bucket_id)
            except ClientError as e:
                if error_code(e) == "NoSuchBucket":
                    logger.info("bucket already absent", extra={"bucket_id": bucket_id})
                    return
                raise translate_error(e, "delete_bucket", bucket_id=bucket_id) from e
            except BotoCoreError as e:
                raise translate_error(e, "delete_bucket", bucket_id=bucket_id) from e

            logger.info("successfully deleted bucket", extra={"bucket_id": bucket_id})

    def grant_access(
        self, bucket_id: str, account_name: str, deadline: Deadline | None = None
    ) -> AccessGrant:
        return self.access.grant_access(bucket_id, account_name, deadline=deadline)

    def revoke_access(
        self,
        account_id: str,
        bucket_id: str | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        self.access.revoke_access(account_id, bucket_id=bucket_id, deadline=deadline)

    def __repr__(self) -> str:
        return f"S3Provisioner(region='{self.region}')"
