"""
Tests for backend selection and the Driver facade.
"""

import pytest

from cosi_driver import Driver, InvalidArgumentError
from cosi_driver.config import DriverConfig, FilerBackendConfig, S3BackendConfig
from cosi_driver.provisioners import FilerProvisioner, S3Provisioner
from cosi_driver.store import LocalDirectoryStore, MemoryDirectoryStore, S3DirectoryStore


def memory_driver(**kwargs) -> Driver:
    return Driver(DriverConfig(backend=FilerBackendConfig(store="memory"), **kwargs))


class TestBackendSelection:
    """The injected config decides which provisioner serves the calls."""

    def test_filer_memory(self):
        driver = memory_driver()

        assert driver.get_backend_type() == "filer"
        assert isinstance(driver.provisioner, FilerProvisioner)
        assert isinstance(driver.provisioner.store, MemoryDirectoryStore)

    def test_filer_local(self, tmp_path):
        driver = Driver(
            DriverConfig(backend=FilerBackendConfig(store="local", base_path=str(tmp_path)))
        )

        assert isinstance(driver.provisioner.store, LocalDirectoryStore)

    def test_s3(self, s3_client):
        driver = Driver(
            DriverConfig(backend=S3BackendConfig(region="eu-west-1")), s3_client=s3_client
        )

        assert driver.get_backend_type() == "s3"
        assert isinstance(driver.provisioner, S3Provisioner)
        assert isinstance(driver.provisioner.access.store, S3DirectoryStore)
        assert driver.provisioner.region == "eu-west-1"

    def test_injected_store(self):
        store = MemoryDirectoryStore()
        driver = Driver(DriverConfig(), store=store)

        assert driver.provisioner.store is store
        assert driver.provisioner.access.store is store

    def test_config_required(self):
        with pytest.raises(TypeError):
            Driver({"backend": {"type": "filer"}})

    def test_unknown_backend_config(self):
        config = DriverConfig.model_construct(
            driver_name="x", backend=object()
        )

        with pytest.raises(TypeError):
            Driver(config)

    def test_lookalike_backend_config(self):
        """A config that only shares the class name is rejected with TypeError."""

        class FilerBackendConfig:
            store = "memory"

        config = DriverConfig.model_construct(driver_name="x", backend=FilerBackendConfig())

        with pytest.raises(TypeError, match="Unsupported backend config type"):
            Driver(config)

    def test_empty_driver_name(self):
        with pytest.raises(ValueError):
            memory_driver(driver_name="")

    def test_settings_reach_access_manager(self):
        driver = memory_driver(
            endpoint="http://s3:8333", region="r1", max_attempts=7, revoke_scope="bucket"
        )
        access = driver.provisioner.access

        assert access.endpoint == "http://s3:8333"
        assert access.region == "r1"
        assert access.max_attempts == 7
        assert access.revoke_scope == "bucket"


class TestDriverLifecycle:
    """End-to-end lifecycle on the in-memory filer backend."""

    def test_get_info(self):
        assert memory_driver(driver_name="seaweedfs.objectstorage.k8s.io").get_info().name == (
            "seaweedfs.objectstorage.k8s.io"
        )

    def test_full_lifecycle(self):
        driver = memory_driver()

        assert driver.create_bucket("b1").bucket_id == "b1"
        grant = driver.grant_access("b1", "alice")
        assert grant.account_id == "alice"
        assert driver.identities().get("alice").actions == [
            "Read:b1",
            "Write:b1",
            "List:b1",
            "Tagging:b1",
        ]

        driver.revoke_access("alice")
        driver.delete_bucket("b1")

        assert "alice" not in driver.identities()
        assert driver.provisioner.store.lookup("/buckets", "b1") is None

    def test_idempotent_calls(self):
        driver = memory_driver()

        driver.create_bucket("b1")
        driver.create_bucket("b1")
        driver.revoke_access("alice")
        driver.delete_bucket("b1")
        driver.delete_bucket("b1")

    def test_invalid_arguments(self):
        driver = memory_driver()

        with pytest.raises(InvalidArgumentError) as exc_info:
            driver.grant_access("", "alice")

        assert exc_info.value.code == "INVALID_ARGUMENT"

    def test_custom_identity_location(self):
        driver = memory_driver(identity_directory="/config", identity_file="iam.json")

        driver.grant_access("b1", "alice")

        assert driver.provisioner.store.lookup("/config", "iam.json") is not None
