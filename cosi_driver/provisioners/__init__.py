"""
Bucket lifecycle provisioners, one per backend.
"""

from cosi_driver.provisioners.base import (
    AccessGrant,
    BucketCredentials,
    BucketInfo,
    BucketProvisioner,
    DriverInfo,
)
from cosi_driver.provisioners.access import AccessManager
from cosi_driver.provisioners.filer import FilerProvisioner
from cosi_driver.provisioners.s3 import S3Provisioner

__all__ = [
    "AccessGrant",
    "BucketCredentials",
    "BucketInfo",
    "BucketProvisioner",
    "DriverInfo",
    "AccessManager",
    "FilerProvisioner",
    "S3Provisioner",
]
