"""
S3-compatible blob store (AWS S3, MinIO, ...).

Each S3BlobStore wraps one bucket. Between buckets on the same endpoint
with the same credentials, copies are server-side (managed multipart copy
for large objects). Otherwise the object is streamed: downloaded through
the source client and uploaded through the target client.
"""

import json
from contextlib import contextmanager
from typing import Iterator, Optional

import boto3
from boto3.exceptions import Boto3Error
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from blobs.records import ListingItem, ListingKind
from validation.config import ContainerConfig
from validation.errors import classify_exception

from shared.log import create_logger
_, log_debug, log_info, _, _ = create_logger("S3")

LIST_PAGE_SIZE = 1000


def _public_read_policy(bucket: str) -> str:
    """Bucket policy granting anonymous read of objects (not listing)."""
    return json.dumps({
        "Version": "2012-10-17",
        "Statement": [{
            "Sid": "BlobSyncPublicRead",
            "Effect": "Allow",
            "Principal": "*",
            "Action": ["s3:GetObject"],
            "Resource": [f"arn:aws:s3:::{bucket}/*"],
        }],
    })


class S3BlobStore:
    """BlobStore over one S3 bucket.

    Args:
        bucket: Bucket name
        client: boto3 S3 client (see create_store() to build one from config)
        endpoint_url: Endpoint the client talks to (None for AWS)
        access_key: Access key the client signs with (None for the default chain)
    """

    def __init__(self, bucket: str, client, endpoint_url: Optional[str] = None,
                 access_key: Optional[str] = None):
        self._bucket = bucket
        self._client = client
        self._account = (endpoint_url, access_key)

    @property
    def container(self) -> str:
        return self._bucket

    @contextmanager
    def _translate_errors(self, operation: str, name: Optional[str] = None) -> Iterator[None]:
        """Re-raise botocore failures as classified StorageErrors."""
        try:
            yield
        except (ClientError, BotoCoreError, Boto3Error) as e:
            error_cls = classify_exception(e)
            target = f"{self._bucket}/{name}" if name else self._bucket
            raise error_cls(f"{operation} failed for {target}: {e}",
                            container=self._bucket, blob_name=name) from e

    def list_items(self) -> list[ListingItem]:
        """List every object in the bucket; keys ending in '/' are directory markers."""
        items = []
        with self._translate_errors("list"):
            paginator = self._client.get_paginator('list_objects_v2')
            pages = paginator.paginate(
                Bucket=self._bucket,
                PaginationConfig={'PageSize': LIST_PAGE_SIZE}
            )
            for page in pages:
                for obj in page.get('Contents', []):
                    key = obj['Key']
                    kind = ListingKind.DIRECTORY if key.endswith('/') else ListingKind.BLOB
                    items.append(ListingItem(kind, key, obj.get('LastModified'), obj.get('Size')))
        log_debug(f"Listed {len(items)} entries in {self._bucket}")
        return items

    def shares_account_with(self, other: "S3BlobStore") -> bool:
        """True if both stores use the same endpoint and credentials."""
        return self._account == other._account

    def copy_from(self, source: "S3BlobStore", name: str) -> None:
        if self.shares_account_with(source):
            with self._translate_errors("copy", name):
                # Managed transfer: switches to multipart copy above 5 GiB
                self._client.copy(
                    CopySource={'Bucket': source.container, 'Key': name},
                    Bucket=self._bucket,
                    Key=name,
                )
            return

        log_debug(f"Streaming {source.container}/{name} -> {self._bucket}/{name}")
        with source._translate_errors("download", name):
            body = source._client.get_object(Bucket=source.container, Key=name)['Body']
        try:
            with self._translate_errors("upload", name):
                self._client.upload_fileobj(body, self._bucket, name)
        finally:
            body.close()

    def delete(self, name: str) -> None:
        with self._translate_errors("delete", name):
            self._client.delete_object(Bucket=self._bucket, Key=name)

    def set_public_access(self) -> None:
        with self._translate_errors("set public access"):
            self._client.put_bucket_policy(
                Bucket=self._bucket,
                Policy=_public_read_policy(self._bucket),
            )
        log_info(f"Public read access set on {self._bucket}")


def create_client(config: ContainerConfig):
    """Create a boto3 S3 client for a container config."""
    client_config = Config(
        signature_version='s3v4',
        connect_timeout=5,
        read_timeout=30,
        retries={'max_attempts': 3, 'mode': 'standard'},
    )
    return boto3.client(
        's3',
        endpoint_url=config.endpoint_url,
        aws_access_key_id=config.access_key,
        aws_secret_access_key=config.secret_key,
        region_name=config.region,
        config=client_config,
    )


def create_store(config: ContainerConfig) -> S3BlobStore:
    """Build an S3BlobStore from a container config."""
    log_debug(f"Creating S3 client for {config.describe()}")
    return S3BlobStore(config.bucket, create_client(config),
                       endpoint_url=config.endpoint_url, access_key=config.access_key)
