"""
Validation module for BlobSync.

Provides configuration validation and the error hierarchy with
transient/permanent classification.
"""

from validation.errors import (
    BlobSyncError,
    InvalidInput,
    MalformedMetadata,
    NotComparable,
    StorageError,
    TransientError,
    PermanentError,
    classify_exception,
    classify_http_error,
)
from validation.config import BlobSyncConfig, ContainerConfig, load_config, validate_config

__all__ = [
    'BlobSyncError',
    'InvalidInput',
    'MalformedMetadata',
    'NotComparable',
    'StorageError',
    'TransientError',
    'PermanentError',
    'classify_exception',
    'classify_http_error',
    'BlobSyncConfig',
    'ContainerConfig',
    'load_config',
    'validate_config',
]
