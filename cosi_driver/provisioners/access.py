"""
Account access management on top of the identity document.

The identity document is read, reconciled in memory and written back with
a compare-and-swap. When another writer wins in between, the whole
read-modify-write cycle runs again, up to ``max_attempts`` times.
"""

import logging
from collections.abc import Callable

from cosi_driver.deadline import Deadline
from cosi_driver.exceptions import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    VersionConflictError,
)
from cosi_driver.identity import (
    IdentityDocument,
    bucket_actions,
    decode,
    encode,
    generate_credential,
    grant,
    revoke,
    revoke_bucket,
)
from cosi_driver.provisioners.base import (
    AccessGrant,
    BucketCredentials,
    protocol_errors,
    require,
)
from cosi_driver.store import DirectoryStore

logger = logging.getLogger(__name__)

Mutation = Callable[[IdentityDocument], IdentityDocument]


class AccessManager:
    """
    Grants and revokes account access by editing the identity document.

    Args:
        store: Directory store holding the identity document
        identity_directory: Directory of the identity document
        identity_file: File name of the identity document
        endpoint: S3 endpoint returned with new credentials
        region: Region returned with new credentials
        max_attempts: Read-modify-write attempts before raising ConflictError
        revoke_scope: "account" removes the whole identity on revoke,
            "bucket" only removes the grants on the given bucket
    """

    def __init__(
        self,
        store: DirectoryStore,
        identity_directory: str = "/etc/iam",
        identity_file: str = "identity.json",
        endpoint: str = "",
        region: str = "",
        max_attempts: int = 5,
        revoke_scope: str = "account",
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if revoke_scope not in ("account", "bucket"):
            raise ValueError(f"Unsupported revoke scope: {revoke_scope}")

        self.store = store
        self.identity_directory = identity_directory
        self.identity_file = identity_file
        self.endpoint = endpoint
        self.region = region
        self.max_attempts = max_attempts
        self.revoke_scope = revoke_scope

    def read_document(self, deadline: Deadline | None = None) -> IdentityDocument:
        """Fetch and decode the current identity document."""
        entry = self.store.lookup(self.identity_directory, self.identity_file, deadline=deadline)
        return decode(entry.content if entry else b"")

    def reconcile(
        self,
        mutate: Mutation,
        operation: str,
        deadline: Deadline | None = None,
        missing_ok: bool = False,
    ) -> IdentityDocument:
        """
        Apply ``mutate`` to the stored document and persist the result.

        Args:
            mutate: Pure function producing the next document
            operation: Name used in logs and errors
            deadline: Optional caller deadline, checked before every attempt
            missing_ok: Treat a document deleted between read and write as
                success instead of an error

        Returns:
            The document as written (or as read, if nothing changed)

        Raises:
            ConflictError: If every attempt lost against a concurrent writer
            NotFoundError: If the document vanished and ``missing_ok`` is False
        """
        directory, name = self.identity_directory, self.identity_file

        for attempt in range(1, self.max_attempts + 1):
            if deadline is not None:
                deadline.check(operation)

            entry = self.store.lookup(directory, name, deadline=deadline)
            current = decode(entry.content if entry else b"")
            updated = mutate(current)

            if updated == current:
                logger.debug("identity document unchanged", extra={"operation": operation})
                return current

            payload = encode(updated)
            try:
                if entry is None:
                    self.store.create(directory, name, payload, deadline=deadline)
                else:
                    self.store.update_if_unchanged(
                        directory, name, entry.version, payload, deadline=deadline
                    )
                return updated
            except (VersionConflictError, AlreadyExistsError):
                logger.warning(
                    "identity document changed concurrently, retrying",
                    extra={"operation": operation, "attempt": attempt},
                )
            except NotFoundError:
                if missing_ok:
                    logger.info(
                        "identity document vanished during %s", operation,
                        extra={"operation": operation},
                    )
                    return IdentityDocument()
                raise

        raise ConflictError(
            f"{operation}: identity document kept changing",
            details={"attempts": self.max_attempts},
        )

    def grant_access(
        self, bucket_id: str, account_name: str, deadline: Deadline | None = None
    ) -> AccessGrant:
        """
        Issue a new credential for ``account_name`` with full access to ``bucket_id``.

        Repeated calls succeed and each appends another credential pair;
        grants are never duplicated.
        """
        with protocol_errors("grant bucket access", bucket_id=bucket_id, account=account_name):
            require(bucket_id, "bucket_id")
            require(account_name, "account_name")

            logger.info(
                "granting bucket access",
                extra={"bucket_id": bucket_id, "account": account_name},
            )
            credential = generate_credential()
            actions = bucket_actions(bucket_id)

            self.reconcile(
                lambda doc: grant(doc, account_name, credential, actions),
                "grant bucket access",
                deadline=deadline,
            )

            logger.info(
                "granted bucket access",
                extra={
                    "bucket_id": bucket_id,
                    "account": account_name,
                    "access_key_id": credential.access_key,
                },
            )
            return AccessGrant(
                account_id=account_name,
                credentials=BucketCredentials(
                    access_key_id=credential.access_key,
                    secret_access_key=credential.secret_key,
                    endpoint=self.endpoint,
                    region=self.region,
                ),
            )

    def revoke_access(
        self,
        account_id: str,
        bucket_id: str | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        """
        Revoke access for ``account_id``.

        With the "account" scope the identity is removed entirely. With the
        "bucket" scope and a ``bucket_id``, only that bucket's grants go.
        Revoking an unknown account, or with no document at all, succeeds.
        """
        with protocol_errors("revoke bucket access", account=account_id, bucket_id=bucket_id):
            require(account_id, "account_id")

            if self.revoke_scope == "bucket" and bucket_id:
                mutate = lambda doc: revoke_bucket(doc, account_id, bucket_id)  # noqa: E731
            else:
                mutate = lambda doc: revoke(doc, account_id)  # noqa: E731

            logger.info(
                "revoking bucket access",
                extra={"account": account_id, "bucket_id": bucket_id, "scope": self.revoke_scope},
            )
            self.reconcile(mutate, "revoke bucket access", deadline=deadline, missing_ok=True)
            logger.info("revoked bucket access", extra={"account": account_id})
