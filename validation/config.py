"""
Configuration validation for BlobSync.

Provides pydantic v2 models for validating sync configuration with
fail-fast behavior and sensible defaults. Values come from (highest
precedence first):
1. BLOBSYNC_-prefixed environment variables (nested with "__",
   e.g. BLOBSYNC_SOURCE__BUCKET)
2. A YAML config file passed to load_config()
3. Defaults defined below
"""

import logging
import os
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

log = logging.getLogger('BlobSync.config')

VALID_INTERVALS = ('never', 'hourly', 'daily', 'weekly')
VALID_LOG_FORMATS = ('text', 'json')


def _mask(secret: Optional[str]) -> str:
    if not secret:
        return '(none)'
    if len(secret) > 8:
        return secret[:4] + '****' + secret[-4:]
    return '****'


class ContainerConfig(BaseModel):
    """
    Connection details for one container (bucket).

    Required:
        bucket: Bucket name

    Optional:
        endpoint_url: S3-compatible endpoint (default: AWS)
        access_key / secret_key: Credentials (default: boto3 credential chain)
        region: Region name
    """

    bucket: str
    endpoint_url: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: Optional[str] = None

    @field_validator('bucket', mode='after')
    @classmethod
    def validate_bucket(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('bucket is required')
        return v

    @field_validator('endpoint_url', mode='after')
    @classmethod
    def validate_endpoint_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate endpoint_url is a valid HTTP/HTTPS URL."""
        if v is None:
            return v
        if not v.startswith(('http://', 'https://')):
            raise ValueError('endpoint_url must start with http:// or https://')
        return v.rstrip('/')

    def describe(self) -> str:
        endpoint = self.endpoint_url or 'default endpoint'
        return f"{self.bucket} @ {endpoint} (key={_mask(self.access_key)})"


class BlobSyncConfig(BaseSettings):
    """
    BlobSync configuration with validation.

    Required:
        source: Source container
        destination: Destination container

    Optional tunables:
        enabled: Master on/off switch (default: True)
        sync_interval: never, hourly, daily, weekly (default: hourly)
        public_access: Set public blob read access on both containers each pass (default: False)
        dry_run: Plan and log actions without executing them (default: False)
        max_workers: Concurrent action executions (default: 4, range: 1-64)
        poll_seconds: Daemon loop tick in seconds (default: 60, range: 1-3600)
        state_dir: Directory for persisted scheduler state (default: data)
        debug_logging: Verbose logging (default: False)
        log_format: text or json (default: text)
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOBSYNC_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    source: ContainerConfig
    destination: ContainerConfig

    enabled: bool = True
    sync_interval: str = Field(
        default="hourly",
        description="Reconciliation interval: never, hourly, daily, weekly"
    )
    public_access: bool = Field(
        default=False,
        description="Allow anonymous read of blobs in both containers"
    )
    dry_run: bool = Field(
        default=False,
        description="Compute and log actions without touching either container"
    )
    max_workers: int = Field(default=4, ge=1, le=64)
    poll_seconds: float = Field(default=60.0, ge=1.0, le=3600.0)
    state_dir: str = Field(
        default="data",
        description="Where sync_state.json is written"
    )
    debug_logging: bool = Field(
        default=False,
        description="Enable verbose debug logging (lists every planned action)"
    )
    log_format: str = Field(default="text", description="Log output format: text or json")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Return sources in priority order: env > init (file values and defaults)."""
        return (env_settings, init_settings)

    @field_validator('sync_interval', mode='before')
    @classmethod
    def validate_sync_interval(cls, v):
        """Validate sync_interval is one of: never, hourly, daily, weekly."""
        if isinstance(v, str) and v.lower() in VALID_INTERVALS:
            return v.lower()
        raise ValueError(f"sync_interval must be one of {VALID_INTERVALS}, got: {v}")

    @field_validator('log_format', mode='before')
    @classmethod
    def validate_log_format(cls, v):
        if isinstance(v, str) and v.lower() in VALID_LOG_FORMATS:
            return v.lower()
        raise ValueError(f"log_format must be one of {VALID_LOG_FORMATS}, got: {v}")

    @field_validator('enabled', 'public_access', 'dry_run', 'debug_logging', mode='before')
    @classmethod
    def validate_booleans(cls, v):
        """Ensure boolean fields are actual booleans, not truthy strings."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            lower = v.lower()
            if lower in ('true', '1', 'yes'):
                return True
            if lower in ('false', '0', 'no'):
                return False
            raise ValueError(f"Invalid boolean value: {v}")
        raise ValueError(f"Expected boolean, got {type(v).__name__}")

    def log_config(self) -> None:
        """Log configuration with masked credentials."""
        log.info(
            f"BlobSync config: source={self.source.describe()}, "
            f"destination={self.destination.describe()}, "
            f"interval={self.sync_interval}, enabled={self.enabled}, "
            f"public_access={self.public_access}, max_workers={self.max_workers}, "
            f"state_dir={self.state_dir}"
        )
        if self.dry_run:
            log.warning("DRY RUN: actions are planned and logged but never executed")
        if self.debug_logging:
            log.info("Debug logging enabled")


def validate_config(config_dict: dict) -> tuple[Optional[BlobSyncConfig], Optional[str]]:
    """
    Validate configuration dictionary and return BlobSyncConfig or error message.

    Args:
        config_dict: Dictionary containing configuration values

    Returns:
        Tuple of (BlobSyncConfig, None) on success,
        or (None, error_message) on validation failure
    """
    try:
        config = BlobSyncConfig(**config_dict)
        return (config, None)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            field = '.'.join(str(loc) for loc in error['loc'])
            msg = error['msg']
            errors.append(f"{field}: {msg}")
        error_message = '; '.join(errors)
        return (None, error_message)


def load_config(path: Optional[str] = None) -> tuple[Optional[BlobSyncConfig], Optional[str]]:
    """
    Load configuration from an optional YAML file plus environment variables.

    Args:
        path: YAML file path, or None for environment variables only

    Returns:
        Same contract as validate_config()
    """
    config_dict: dict = {}
    if path:
        if not os.path.exists(path):
            return (None, f"Config file not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            return (None, f"Could not read config file {path}: {e}")
        if not isinstance(config_dict, dict):
            return (None, f"Config file {path} must contain a mapping")
    return validate_config(config_dict)


__all__ = ['BlobSyncConfig', 'ContainerConfig', 'validate_config', 'load_config', 'ValidationError']
