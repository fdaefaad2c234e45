"""
Error types and centralized error classification for BlobSync.

Core errors (InvalidInput, MalformedMetadata, NotComparable) abort a
reconciliation pass. Storage errors are raised while executing actions and
are classified as transient (worth retrying on the next pass) or permanent.
"""

import logging
from typing import Optional, Type


# Retried on the next pass: request timeout, throttling (429, S3 SlowDown
# is 503), gateway and server errors
TRANSIENT_CODES = frozenset({408, 429, 500, 502, 503, 504})

# Not retried: bad request, credentials or permissions, missing bucket or key,
# conflicts and failed preconditions
PERMANENT_CODES = frozenset({400, 401, 403, 404, 405, 409, 410, 412})

logger = logging.getLogger(__name__)


class BlobSyncError(Exception):
    """Base class for every error raised by BlobSync."""
    pass


class InvalidInput(BlobSyncError, ValueError):
    """Duplicate blob name within one snapshot, or an unsupported sort column."""
    pass


class MalformedMetadata(BlobSyncError, ValueError):
    """A timestamp or length that cannot be parsed."""
    pass


class NotComparable(BlobSyncError, TypeError):
    """Values whose types don't fit the chosen sort column."""
    pass


class StorageError(BlobSyncError):
    """A storage backend operation failed.

    Attributes:
        container: Container (bucket) the operation targeted
        blob_name: Blob the operation targeted, if any
    """

    def __init__(self, message: str, container: Optional[str] = None, blob_name: Optional[str] = None):
        super().__init__(message)
        self.container = container
        self.blob_name = blob_name


class TransientError(StorageError):
    """Retry-able errors (network, timeout, throttling, 5xx)"""
    pass


class PermanentError(StorageError):
    """Non-retry-able errors (4xx except 408/429, validation)"""
    pass


def classify_http_error(status_code: int) -> Type[StorageError]:
    """
    Map a storage service HTTP status to an error class.

    Listed codes use their table; any other 4xx is permanent, and anything
    else (other 5xx, unexpected codes) is transient.
    """
    if status_code in TRANSIENT_CODES:
        error_cls = TransientError
    elif status_code in PERMANENT_CODES or 400 <= status_code < 500:
        error_cls = PermanentError
    else:
        error_cls = TransientError
    logger.debug(f"HTTP {status_code} -> {error_cls.__name__}")
    return error_cls


def _status_code_from_response(response) -> Optional[int]:
    """Extract an HTTP status from a botocore error dict or an HTTP response object."""
    if isinstance(response, dict):
        status_code = response.get('ResponseMetadata', {}).get('HTTPStatusCode')
    else:
        status_code = getattr(response, 'status_code', None)
    if isinstance(status_code, int):
        return status_code
    return None


def classify_exception(exc: Exception) -> Type[StorageError]:
    """
    Decide whether a failed storage call is worth retrying on a later pass.

    Order of checks:
    - StorageError subclasses keep their own classification
    - Errors carrying a response (botocore ClientError) use its HTTP status
    - Connection, timeout and OS errors are transient
    - BlobSync core errors and programming errors are permanent
    - Anything unrecognised is transient, since the next pass retries it
    """
    for error_cls in (TransientError, PermanentError):
        if isinstance(exc, error_cls):
            return error_cls

    status_code = _status_code_from_response(getattr(exc, 'response', None))
    if status_code is not None:
        return classify_http_error(status_code)

    if isinstance(exc, (ConnectionError, TimeoutError, OSError)):
        error_cls = TransientError
    elif isinstance(exc, (BlobSyncError, ValueError, TypeError, KeyError, AttributeError)):
        error_cls = PermanentError
    else:
        error_cls = TransientError
    logger.debug(f"{type(exc).__name__} -> {error_cls.__name__}")
    return error_cls
