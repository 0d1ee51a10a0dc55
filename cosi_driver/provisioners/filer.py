"""
Filer backend: buckets are directory entries in the directory store.
"""

import logging

from cosi_driver.deadline import Deadline
from cosi_driver.exceptions import AlreadyExistsError, NotFoundError
from cosi_driver.provisioners.access import AccessManager
from cosi_driver.provisioners.base import (
    AccessGrant,
    BucketInfo,
    protocol_errors,
    require,
)
from cosi_driver.store import DirectoryStore

logger = logging.getLogger(__name__)


class FilerProvisioner:
    """
    Provisioner for filer-style backends (SeaweedFS filer).

    A bucket exists when a directory entry named after it exists under
    ``buckets_path``. Access is managed through the shared AccessManager.

    Example:
        store = MemoryDirectoryStore()
        provisioner = FilerProvisioner(store, access=AccessManager(store))
        provisioner.create_bucket("b1")
    """

    def __init__(
        self,
        store: DirectoryStore,
        access: AccessManager,
        buckets_path: str = "/buckets",
    ):
        self.store = store
        self.access = access
        self.buckets_path = buckets_path

    def prepare(self, deadline: Deadline | None = None) -> None:
        """Make sure the buckets directory exists."""
        parent, _, name = self.buckets_path.rstrip("/").rpartition("/")
        with protocol_errors("prepare filer backend", buckets_path=self.buckets_path):
            if self.store.lookup(parent or "/", name, deadline=deadline) is None:
                try:
                    self.store.create(parent or "/", name, is_directory=True, deadline=deadline)
                except AlreadyExistsError:
                    pass

    def create_bucket(self, name: str, deadline: Deadline | None = None) -> BucketInfo:
        """
        Create the bucket directory.

        An existing bucket directory counts as ours and is success; any
        other entry of that name is a conflict.
        """
        with protocol_errors("create bucket", bucket=name):
            require(name, "name")
            logger.info("creating bucket", extra={"bucket": name})

            entry = self.store.lookup(self.buckets_path, name, deadline=deadline)
            if entry is None:
                try:
                    self.store.create(
                        self.buckets_path, name, is_directory=True, deadline=deadline
                    )
                except AlreadyExistsError:
                    # Lost a race with another creator; re-check what won.
                    entry = self.store.lookup(self.buckets_path, name, deadline=deadline)
                    if entry is None:
                        raise

            if entry is not None:
                if not entry.is_directory:
                    raise AlreadyExistsError(
                        f"Bucket '{name}' conflicts with an existing entry",
                        details={"bucket": name},
                    )
                logger.info("bucket already exists", extra={"bucket": name})
            else:
                logger.info("successfully created bucket", extra={"bucket": name})

            return BucketInfo(bucket_id=name)

    def delete_bucket(self, bucket_id: str, deadline: Deadline | None = None) -> None:
        """Delete the bucket directory; a missing bucket is success."""
        with protocol_errors("delete bucket", bucket_id=bucket_id):
            require(bucket_id, "bucket_id")
            logger.info("deleting bucket", extra={"bucket_id": bucket_id})

            try:
                self.store.delete(self.buckets_path, bucket_id, deadline=deadline)
            except NotFoundError:
                logger.info("bucket already absent", extra={"bucket_id": bucket_id})
                return

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
        return f"FilerProvisioner(store={self.store!r}, buckets_path='{self.buckets_path}')"
