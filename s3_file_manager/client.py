from __future__ import annotations
"""Construction of the boto3 S3 client for the configured bucket."""
from typing import Callable

import boto3
from botocore.client import Config

from .config import StorageSettings

ClientFactory = Callable[..., object]


def create_s3_client(settings: StorageSettings, client_factory: ClientFactory | None = None):
    """Build an S3 client honouring endpoint override and path-style addressing."""

    factory = client_factory or boto3.client
    config = Config(
        signature_version="s3v4",
        s3={"addressing_style": "path" if settings.force_path_style else "auto"},
    )
    kwargs = {
        "region_name": settings.region,
        "aws_access_key_id": settings.access_key_id,
        "aws_secret_access_key": settings.secret_access_key,
        "config": config,
    }
    if settings.endpoint_url:
        kwargs["endpoint_url"] = settings.endpoint_url
    return factory("s3", **kwargs)
