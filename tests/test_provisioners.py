"""
Tests for the filer and S3 provisioners.
"""

import pytest
from botocore.stub import ANY

from cosi_driver.exceptions import (
    AlreadyExistsError,
    InternalError,
    InvalidArgumentError,
    UnavailableError,
)
from cosi_driver.provisioners import (
    AccessManager,
    BucketInfo,
    FilerProvisioner,
    S3Provisioner,
)
from cosi_driver.store import MemoryDirectoryStore, S3DirectoryStore

from conftest import streaming_body


@pytest.fixture
def filer(memory_store, access):
    return FilerProvisioner(memory_store, access)


class TestFilerProvisioner:
    """Tests for FilerProvisioner bucket lifecycle."""

    def test_create_bucket(self, filer, memory_store):
        result = filer.create_bucket("b1")

        assert result == BucketInfo(bucket_id="b1")
        assert memory_store.lookup("/buckets", "b1").is_directory is True

    def test_create_bucket_twice(self, filer):
        """Scenario: creating the same bucket twice succeeds both times."""
        assert filer.create_bucket("b1").bucket_id == "b1"
        assert filer.create_bucket("b1").bucket_id == "b1"

    def test_create_bucket_conflicting_entry(self, filer, memory_store):
        """A non-directory entry with the bucket's name is not ours."""
        memory_store.create("/buckets", "b1", b"not a bucket")

        with pytest.raises(AlreadyExistsError):
            filer.create_bucket("b1")

    def test_create_bucket_race(self, access):
        """Losing a create race to another creator of the same bucket is success."""

        class RacingStore(MemoryDirectoryStore):
            def create(self, directory, name, content=b"", is_directory=False, deadline=None):
                super().create(directory, name, content, is_directory, deadline)
                return super().create(directory, name, content, is_directory, deadline)

        store = RacingStore()
        provisioner = FilerProvisioner(store, access)

        assert provisioner.create_bucket("b1").bucket_id == "b1"

    def test_create_bucket_empty_name(self, filer):
        with pytest.raises(InvalidArgumentError):
            filer.create_bucket("")

    def test_delete_bucket(self, filer, memory_store):
        filer.create_bucket("b1")

        filer.delete_bucket("b1")

        assert memory_store.lookup("/buckets", "b1") is None

    def test_delete_missing_bucket(self, filer):
        """Deleting an absent bucket is success."""
        filer.delete_bucket("b1")

    def test_custom_buckets_path(self, memory_store, access):
        provisioner = FilerProvisioner(memory_store, access, buckets_path="/data/buckets")

        provisioner.create_bucket("b1")

        assert memory_store.lookup("/data/buckets", "b1") is not None

    def test_prepare_creates_buckets_directory(self, filer, memory_store):
        filer.prepare()
        filer.prepare()

        assert memory_store.lookup("/", "buckets").is_directory is True

    def test_grant_survives_bucket_delete(self, filer, memory_store):
        """Dangling grants for deleted buckets are tolerated."""
        filer.create_bucket("b1")
        filer.grant_access("b1", "alice")

        filer.delete_bucket("b1")

        assert filer.access.read_document().get("alice").buckets() == ["b1"]
        filer.revoke_access("alice")
        assert "alice" not in filer.access.read_document()

    def test_store_failure_is_surfaced(self, access):
        class DownStore(MemoryDirectoryStore):
            def lookup(self, directory, name, deadline=None):
                raise UnavailableError("filer unreachable")

        provisioner = FilerProvisioner(DownStore(), access)

        with pytest.raises(UnavailableError):
            provisioner.create_bucket("b1")


@pytest.fixture
def s3_provisioner(s3_client):
    store = S3DirectoryStore(s3_client, "cosi-driver-config")
    access = AccessManager(store, endpoint="http://s3gw:7480", region="us-east-1")
    return S3Provisioner(s3_client, access, config_bucket="cosi-driver-config")


class TestS3Provisioner:
    """Tests for S3Provisioner using botocore's Stubber."""

    def test_create_bucket(self, s3_provisioner, s3_stub):
        s3_stub.add_response("create_bucket", {"Location": "/b1"}, {"Bucket": "b1"})

        assert s3_provisioner.create_bucket("b1").bucket_id == "b1"

    def test_create_bucket_twice(self, s3_provisioner, s3_stub):
        """Scenario: a bucket we already own is success."""
        s3_stub.add_response("create_bucket", {"Location": "/b1"}, {"Bucket": "b1"})
        s3_stub.add_client_error(
            "create_bucket", service_error_code="BucketAlreadyOwnedByYou", http_status_code=409
        )

        assert s3_provisioner.create_bucket("b1").bucket_id == "b1"
        assert s3_provisioner.create_bucket("b1").bucket_id == "b1"

    def test_create_bucket_owned_by_other(self, s3_provisioner, s3_stub):
        s3_stub.add_client_error(
            "create_bucket", service_error_code="BucketAlreadyExists", http_status_code=409
        )

        with pytest.raises(AlreadyExistsError):
            s3_provisioner.create_bucket("b1")

    def test_create_bucket_with_region(self, s3_client, s3_stub):
        provisioner = S3Provisioner(
            s3_client, AccessManager(MemoryDirectoryStore()), region="eu-west-1"
        )
        s3_stub.add_response(
            "create_bucket",
            {},
            {"Bucket": "b1", "CreateBucketConfiguration": {"LocationConstraint": "eu-west-1"}},
        )

        provisioner.create_bucket("b1")

    def test_create_bucket_unexpected_error(self, s3_provisioner, s3_stub):
        s3_stub.add_client_error(
            "create_bucket", service_error_code="AccessDenied", http_status_code=403
        )

        with pytest.raises(InternalError):
            s3_provisioner.create_bucket("b1")

    def test_delete_bucket(self, s3_provisioner, s3_stub):
        s3_stub.add_response("delete_bucket", {}, {"Bucket": "b1"})

        s3_provisioner.delete_bucket("b1")

    def test_delete_missing_bucket(self, s3_provisioner, s3_stub):
        s3_stub.add_client_error(
            "delete_bucket", service_error_code="NoSuchBucket", http_status_code=404
        )

        s3_provisioner.delete_bucket("b1")

    def test_delete_non_empty_bucket(self, s3_provisioner, s3_stub):
        s3_stub.add_client_error(
            "delete_bucket", service_error_code="BucketNotEmpty", http_status_code=409
        )

        with pytest.raises(InternalError):
            s3_provisioner.delete_bucket("b1")

    def test_prepare_creates_config_bucket(self, s3_provisioner, s3_stub):
        s3_stub.add_client_error(
            "create_bucket", service_error_code="BucketAlreadyOwnedByYou", http_status_code=409
        )

        s3_provisioner.prepare()

    def test_grant_access_creates_document(self, s3_provisioner, s3_stub):
        s3_stub.add_client_error(
            "get_object", service_error_code="NoSuchKey", http_status_code=404
        )
        s3_stub.add_client_error("head_object", service_error_code="404", http_status_code=404)
        s3_stub.add_response(
            "put_object",
            {"ETag": '"v1"'},
            {
                "Bucket": "cosi-driver-config",
                "Key": "etc/iam/identity.json",
                "Body": ANY,
                "IfNoneMatch": "*",
            },
        )

        result = s3_provisioner.grant_access("b1", "alice")

        assert result.account_id == "alice"
        assert result.credentials.endpoint == "http://s3gw:7480"

    def test_revoke_access_rewrites_document(self, s3_provisioner, s3_stub):
        current = (
            b'{"identities": [{"name": "alice", "credentials": [], "actions": ["Read:b1"]},'
            b' {"name": "bob", "credentials": [], "actions": ["Read:b1"]}]}'
        )
        s3_stub.add_response(
            "get_object", {"Body": streaming_body(current), "ETag": '"v1"'}
        )
        s3_stub.add_response(
            "put_object",
            {"ETag": '"v2"'},
            {
                "Bucket": "cosi-driver-config",
                "Key": "etc/iam/identity.json",
                "Body": ANY,
                "IfMatch": '"v1"',
            },
        )

        s3_provisioner.revoke_access("alice")

    def test_revoke_access_conflict_is_retried(self, s3_provisioner, s3_stub):
        current = b'{"identities": [{"name": "alice"}]}'
        for etag in ('"v1"', '"v2"'):
            s3_stub.add_response(
                "get_object", {"Body": streaming_body(current), "ETag": etag}
            )
            if etag == '"v1"':
                s3_stub.add_client_error(
                    "put_object", service_error_code="PreconditionFailed", http_status_code=412
                )
        s3_stub.add_response("put_object", {"ETag": '"v3"'})

        s3_provisioner.revoke_access("alice")

    def test_revoke_access_absent_document(self, s3_provisioner, s3_stub):
        s3_stub.add_client_error(
            "get_object", service_error_code="NoSuchKey", http_status_code=404
        )
        s3_stub.add_client_error("head_object", service_error_code="404", http_status_code=404)

        s3_provisioner.revoke_access("alice")
