"""
Shared pytest fixtures for BlobSync tests.

Provides reusable fixtures for:
- Configuration dictionaries and objects
- In-memory source/destination stores
- Mock boto3 S3 clients

S3 tests use unittest.mock so no network access or credentials are needed.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from storage.memory import InMemoryBlobStore


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def valid_config_dict():
    """
    Minimal valid configuration dictionary.

    Usage:
        def test_config_parsing(valid_config_dict):
            config = BlobSyncConfig(**valid_config_dict)
    """
    return {
        "source": {"bucket": "hub-assets"},
        "destination": {"bucket": "node-assets"},
    }


@pytest.fixture
def full_config_dict():
    """Configuration dictionary with every field set."""
    return {
        "source": {
            "bucket": "hub-assets",
            "endpoint_url": "http://minio.local:9000/",
            "access_key": "AKIAHUBEXAMPLE",
            "secret_key": "hub-secret-key-value",
            "region": "us-east-1",
        },
        "destination": {
            "bucket": "node-assets",
            "endpoint_url": "https://s3.amazonaws.com",
        },
        "enabled": True,
        "sync_interval": "daily",
        "public_access": True,
        "dry_run": False,
        "max_workers": 8,
        "poll_seconds": 30,
        "state_dir": "/tmp/blobsync",
        "debug_logging": False,
        "log_format": "json",
    }


@pytest.fixture(autouse=True)
def clear_blobsync_env(monkeypatch):
    """Keep BLOBSYNC_* variables from the developer's shell out of config tests."""
    import os
    for key in list(os.environ):
        if key.startswith("BLOBSYNC_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Store Fixtures
# =============================================================================

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
T1 = datetime(2024, 1, 2, tzinfo=timezone.utc)
T2 = datetime(2024, 1, 3, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    """Clock returning a constant instant for copied blobs."""
    return lambda: T2


@pytest.fixture
def source_store(fixed_clock):
    """Empty in-memory source container."""
    return InMemoryBlobStore("hub", clock=fixed_clock)


@pytest.fixture
def destination_store(fixed_clock):
    """Empty in-memory destination container."""
    return InMemoryBlobStore("node", clock=fixed_clock)


@pytest.fixture
def populated_stores(source_store, destination_store):
    """
    Source and destination stores covering every reconciliation branch.

    - shared.txt: source newer -> copy forward
    - same.txt: identical timestamps -> nothing
    - stale.txt: destination newer -> nothing
    - removed.txt: source only -> delete from source
    - new.txt: destination only -> copy back
    - folder/: directory marker on both sides, ignored
    - empty.txt: zero-length on destination only, ignored
    """
    source_store.put("shared.txt", b"v2", T1)
    source_store.put("same.txt", b"same", T0)
    source_store.put("stale.txt", b"old", T0)
    source_store.put("removed.txt", b"gone downstream", T0)
    source_store.add_directory("folder/")

    destination_store.put("shared.txt", b"v1", T0)
    destination_store.put("same.txt", b"same", T0)
    destination_store.put("stale.txt", b"newer", T1)
    destination_store.put("new.txt", b"created downstream", T1)
    destination_store.put("empty.txt", b"", T1)
    destination_store.add_directory("folder/")

    return source_store, destination_store


# =============================================================================
# S3 Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_s3_client():
    """
    Mock boto3 S3 client with an empty paginated listing.

    Usage:
        def test_list(mock_s3_client):
            mock_s3_client.get_paginator.return_value.paginate.return_value = [page]
    """
    client = MagicMock()
    paginator = MagicMock()
    paginator.paginate.return_value = [{"KeyCount": 0}]
    client.get_paginator.return_value = paginator
    return client
