"""
Directory stores backing the identity document and filer buckets.
"""

from cosi_driver.store.base import DirectoryStore, Entry, join_path
from cosi_driver.store.memory import MemoryDirectoryStore
from cosi_driver.store.local import LocalDirectoryStore
from cosi_driver.store.s3 import S3DirectoryStore, make_s3_client

__all__ = [
    "DirectoryStore",
    "Entry",
    "join_path",
    "MemoryDirectoryStore",
    "LocalDirectoryStore",
    "S3DirectoryStore",
    "make_s3_client",
]
