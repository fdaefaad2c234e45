"""
Storage backends for BlobSync.

Public API:
    BlobStore          -- protocol the sync engine consumes
    InMemoryBlobStore  -- dict-backed container
    S3BlobStore        -- S3-compatible bucket via boto3
    create_store       -- build an S3BlobStore from ContainerConfig
"""

from storage.base import BlobStore
from storage.memory import InMemoryBlobStore
from storage.s3 import S3BlobStore, create_store

__all__ = [
    "BlobStore",
    "InMemoryBlobStore",
    "S3BlobStore",
    "create_store",
]
