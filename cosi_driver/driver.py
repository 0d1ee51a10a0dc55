"""
Driver entry point - backend chosen by config injection.

The Driver holds exactly one provisioner, picked from the type of the
backend config it is given. There are no backend-specific Driver
subclasses; the config object decides.
"""

import logging
from typing import Any

from cosi_driver.config import DriverConfig, FilerBackendConfig, S3BackendConfig
from cosi_driver.deadline import Deadline
from cosi_driver.identity import IdentityDocument
from cosi_driver.provisioners import (
    AccessGrant,
    AccessManager,
    BucketInfo,
    BucketProvisioner,
    DriverInfo,
    FilerProvisioner,
    S3Provisioner,
)
from cosi_driver.store import (
    DirectoryStore,
    LocalDirectoryStore,
    MemoryDirectoryStore,
    S3DirectoryStore,
    make_s3_client,
)

logger = logging.getLogger(__name__)


class Driver:
    """
    COSI driver that adapts its backend to the injected configuration.

    Example:
        from cosi_driver import Driver
        from cosi_driver.config import DriverConfig, FilerBackendConfig, S3BackendConfig

        # Filer behavior via config injection
        driver = Driver(DriverConfig(backend=FilerBackendConfig(store="memory")))

        # S3 behavior via config injection
        driver = Driver(DriverConfig(backend=S3BackendConfig(endpoint_url="http://s3gw:7480")))

        # Same interface, different backend
        driver.create_bucket("b1")
        grant = driver.grant_access("b1", "alice")
    """

    def __init__(
        self,
        config: DriverConfig,
        store: DirectoryStore | None = None,
        s3_client: Any | None = None,
    ):
        """
        Initialize the driver.

        Args:
            config: Driver configuration
            store: Directory store to use instead of the one the config
                describes (tests, embedding)
            s3_client: boto3 S3 client to use for the S3 backend

        Raises:
            TypeError: If config is not a DriverConfig or the backend config
                type is unknown
            ValueError: If the driver name is empty
        """
        if not isinstance(config, DriverConfig):
            raise TypeError(
                f"Expected a DriverConfig, got {type(config)}. "
                "Example: Driver(DriverConfig(backend=FilerBackendConfig()))"
            )

        self.config = config
        self._backend_type = self._detect_backend_type()
        self._validate_config()
        self.provisioner = self._create_provisioner(store, s3_client)

    def _detect_backend_type(self) -> str:
        """Backend type ("filer" or "s3") from the backend config class."""
        config_class_name = self.config.backend.__class__.__name__

        type_map = {
            "FilerBackendConfig": "filer",
            "S3BackendConfig": "s3",
        }

        if config_class_name not in type_map:
            raise TypeError(
                f"Unknown backend config type: {config_class_name}. "
                f"Expected one of: {list(type_map.keys())}"
            )

        return type_map[config_class_name]

    def _validate_config(self) -> None:
        if not self.config.driver_name:
            raise ValueError("Driver name must not be empty")

    def _access_manager(self, store: DirectoryStore) -> AccessManager:
        return AccessManager(
            store,
            identity_directory=self.config.identity_directory,
            identity_file=self.config.identity_file,
            endpoint=self.config.endpoint,
            region=self.config.region,
            max_attempts=self.config.max_attempts,
            revoke_scope=self.config.revoke_scope,
        )

    def _create_provisioner(
        self, store: DirectoryStore | None, s3_client: Any | None
    ) -> BucketProvisioner:
        backend = self.config.backend

        if isinstance(backend, FilerBackendConfig):
            if store is None:
                if backend.store == "memory":
                    store = MemoryDirectoryStore()
                else:
                    store = LocalDirectoryStore(backend.base_path, create_dirs=backend.create_dirs)
            return FilerProvisioner(
                store, self._access_manager(store), buckets_path=backend.buckets_path
            )

        if not isinstance(backend, S3BackendConfig):
            raise TypeError(f"Unsupported backend config type: {type(backend).__name__}")

        if s3_client is None:
            s3_client = make_s3_client(
                endpoint_url=backend.endpoint_url,
                region=backend.region,
                access_key=backend.access_key,
                secret_key=backend.secret_key,
                timeout=backend.timeout,
            )
        if store is None:
            store = S3DirectoryStore(s3_client, bucket=backend.config_bucket)
        return S3Provisioner(
            s3_client,
            self._access_manager(store),
            region=backend.region,
            config_bucket=backend.config_bucket,
        )

    def get_backend_type(self) -> str:
        """Return the backend type ("filer" or "s3")."""
        return self._backend_type

    def get_info(self) -> DriverInfo:
        return DriverInfo(name=self.config.driver_name)

    def prepare(self, deadline: Deadline | None = None) -> None:
        """Create the backend's fixed resources (buckets directory, config bucket)."""
        self.provisioner.prepare(deadline=deadline)

    def create_bucket(self, name: str, deadline: Deadline | None = None) -> BucketInfo:
        return self.provisioner.create_bucket(name, deadline=deadline)

    def delete_bucket(self, bucket_id: str, deadline: Deadline | None = None) -> None:
        self.provisioner.delete_bucket(bucket_id, deadline=deadline)

    def grant_access(
        self, bucket_id: str, account_name: str, deadline: Deadline | None = None
    ) -> AccessGrant:
        return self.provisioner.grant_access(bucket_id, account_name, deadline=deadline)

    def revoke_access(
        self,
        account_id: str,
        bucket_id: str | None = None,
        deadline: Deadline | None = None,
    ) -> None:
        self.provisioner.revoke_access(account_id, bucket_id=bucket_id, deadline=deadline)

    def identities(self, deadline: Deadline | None = None) -> IdentityDocument:
        """Current identity document, read fresh from the store."""
        return self.provisioner.access.read_document(deadline=deadline)

    def __repr__(self) -> str:
        return f"Driver(name='{self.config.driver_name}', backend='{self._backend_type}')"
