from __future__ import annotations
"""Environment configuration for the bucket being managed."""
import logging
import os
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .credentials import KeychainStore

_ENV_PATH = os.getenv("S3_FILE_MANAGER_ENV", ".env")

DEFAULT_SIGNED_URL_EXPIRES = 900


class ConfigurationError(ValueError):
    """Raised when required settings are missing."""


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_file=_ENV_PATH,
        extra="ignore",
        populate_by_name=True,
    )

    access_key_id: str = ""
    secret_access_key: str = ""
    bucket_name: str = ""
    endpoint_url: Optional[str] = None
    region: str = "us-east-1"
    force_path_style: bool = True
    file_upload_limit: Optional[int] = None
    signed_url_expires: int = DEFAULT_SIGNED_URL_EXPIRES
    upload_timeout: Optional[float] = None
    signing_service_url: Optional[str] = Field(
        default=None, validation_alias="SIGNING_SERVICE_URL"
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @field_validator("endpoint_url", "signing_service_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("file_upload_limit", mode="before")
    @classmethod
    def _parse_upload_limit(cls, value):
        if value is None or value == "":
            return None
        try:
            limit = int(value)
        except (TypeError, ValueError):
            return None
        return limit if limit > 0 else None

    @field_validator("signed_url_expires", mode="before")
    @classmethod
    def _parse_expiry(cls, value):
        try:
            expires = int(value)
        except (TypeError, ValueError):
            return DEFAULT_SIGNED_URL_EXPIRES
        return expires if expires > 0 else DEFAULT_SIGNED_URL_EXPIRES

    def with_keychain_secret(self, keychain: KeychainStore | None = None) -> "StorageSettings":
        """Fill a missing secret key from the OS keychain."""

        if self.secret_access_key or not self.access_key_id:
            return self
        keychain = keychain or KeychainStore()
        secret = keychain.get_secret(self.access_key_id)
        if not secret:
            return self
        return self.model_copy(update={"secret_access_key": secret})

    def missing_values(self) -> list[str]:
        missing = []
        if not self.access_key_id:
            missing.append("Missing S3 Access Key ID")
        if not self.secret_access_key:
            missing.append("Missing S3 Secret Access Key")
        if not self.bucket_name:
            missing.append("Missing S3 Bucket Name")
        return missing

    def validate_required(self) -> None:
        missing = self.missing_values()
        if missing:
            raise ConfigurationError("\n".join(missing))


def load_settings(keychain: KeychainStore | None = None, **overrides) -> StorageSettings:
    settings = StorageSettings(**overrides).with_keychain_secret(keychain)
    settings.validate_required()
    return settings


def configure_logging(settings: StorageSettings) -> None:
    level = logging.getLevelName(settings.log_level.strip().upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
