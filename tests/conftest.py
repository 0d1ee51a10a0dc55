"""
Shared fixtures for cosi-driver tests.
"""

import io

import boto3
import pytest
from botocore.response import StreamingBody
from botocore.stub import Stubber

from cosi_driver.provisioners import AccessManager
from cosi_driver.store import MemoryDirectoryStore


@pytest.fixture
def memory_store():
    return MemoryDirectoryStore()


@pytest.fixture
def access(memory_store):
    return AccessManager(
        memory_store,
        endpoint="http://seaweedfs-s3:8333",
        region="us-east-1",
    )


@pytest.fixture
def s3_client():
    """S3 client that never leaves the process (always used with a Stubber)."""
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def s3_stub(s3_client):
    with Stubber(s3_client) as stubber:
        yield stubber
        stubber.assert_no_pending_responses()


def streaming_body(data: bytes) -> StreamingBody:
    return StreamingBody(io.BytesIO(data), len(data))
