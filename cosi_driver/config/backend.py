"""
Backend and driver configuration classes.

The backend config object injected into the Driver decides which
provisioner serves the lifecycle calls.
"""

from typing import Literal

from pydantic import BaseModel, Field


class FilerBackendConfig(BaseModel):
    """
    Filer backend configuration.

    Buckets are directory entries in a directory store, which also holds the
    identity document.

    Example:
        filer_config = FilerBackendConfig(
            store="local",
            base_path="/var/lib/cosi-driver",
        )

        driver = Driver(DriverConfig(backend=filer_config))
    """

    type: Literal["filer"] = "filer"
    store: Literal["memory", "local"] = Field(
        default="local", description="Directory store implementation"
    )
    base_path: str = Field(
        default="./data", description="Root directory of the local store"
    )
    buckets_path: str = Field(
        default="/buckets", description="Directory holding one entry per bucket"
    )
    create_dirs: bool = Field(
        default=True, description="Auto-create the base path if it doesn't exist"
    )

    class Config:
        extra = "forbid"


class S3BackendConfig(BaseModel):
    """
    S3-compatible backend configuration (s3gw, RGW, SeaweedFS S3 gateway).

    Example:
        s3_config = S3BackendConfig(
            endpoint_url="http://s3gw.svc:7480",
            access_key="admin",
            secret_key="...",
        )
    """

    type: Literal["s3"] = "s3"
    endpoint_url: str | None = Field(default=None, description="S3 API endpoint")
    region: str = Field(default="us-east-1", description="Region for bucket creation")
    access_key: str | None = Field(default=None, description="Admin access key")
    secret_key: str | None = Field(
        default=None, repr=False, description="Admin secret key"
    )
    config_bucket: str = Field(
        default="cosi-driver-config",
        description="Bucket holding the identity document",
    )
    timeout: float | None = Field(
        default=None, description="Connect/read timeout in seconds"
    )

    class Config:
        extra = "forbid"


class DriverConfig(BaseModel):
    """
    Top-level driver configuration.

    ``endpoint`` and ``region`` are advertised to clients along with the
    generated credentials; they are not used to reach the backend.
    """

    driver_name: str = Field(
        default="seaweedfs.objectstorage.k8s.io", description="COSI driver name"
    )
    cosi_endpoint: str = Field(
        default="unix:///var/lib/cosi/cosi.sock",
        description="Socket the transport wrapper listens on",
    )
    endpoint: str = Field(default="", description="S3 endpoint handed to clients")
    region: str = Field(default="", description="Region handed to clients")
    identity_directory: str = Field(default="/etc/iam")
    identity_file: str = Field(default="identity.json")
    max_attempts: int = Field(
        default=5, ge=1, description="Read-modify-write attempts before giving up"
    )
    revoke_scope: Literal["account", "bucket"] = Field(
        default="account",
        description="Whether revoke removes the account or only one bucket's grants",
    )
    backend: FilerBackendConfig | S3BackendConfig = Field(
        default_factory=FilerBackendConfig, discriminator="type"
    )

    class Config:
        extra = "forbid"
