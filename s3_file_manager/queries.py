from __future__ import annotations
"""Read-only operations against the configured bucket."""
import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from .cache import SignedUrlCache
from .config import DEFAULT_SIGNED_URL_EXPIRES
from .formatting import join_signing_service_url
from .keys import normalize_directory_prefix, object_name, split_parent_segment
from .models import ObjectDetails, ObjectMetadata, ObjectType, StorageObject
from .results import OperationResult, StorageResponses

NOT_FOUND_CODES = frozenset({"404", "NotFound", "NoSuchKey"})
DEFAULT_UPLOAD_CONTENT_TYPE = "application/octet-stream"

LOGGER = logging.getLogger(__name__)


def is_not_found(exc: ClientError) -> bool:
    error = exc.response.get("Error", {})
    return str(error.get("Code", "")) in NOT_FOUND_CODES


def objects_from_listing(response: dict[str, Any], prefix: str = "") -> list[StorageObject]:
    """Convert a ``list_objects_v2`` page into listing entries.

    Keys without a ``.`` are reported as directories. This is a heuristic and
    misclassifies extensionless files.
    """

    objects: list[StorageObject] = []
    for common in response.get("CommonPrefixes") or []:
        key = common.get("Prefix") or ""
        objects.append(
            StorageObject(type=ObjectType.DIRECTORY, key=key, name=split_parent_segment(key))
        )

    queried_prefix = response.get("Prefix", prefix)
    for entry in response.get("Contents") or []:
        key = entry.get("Key") or ""
        if key == queried_prefix:
            continue
        if key.split(".")[0] == key or key.endswith("/"):
            objects.append(StorageObject(type=ObjectType.DIRECTORY, key=key, name=object_name(key)))
            continue
        objects.append(
            StorageObject(
                type=ObjectType.FILE,
                key=key,
                name=key.rsplit("/", 1)[-1],
                metadata=ObjectMetadata(
                    size=entry.get("Size"),
                    last_modified=entry.get("LastModified"),
                    etag=entry.get("ETag"),
                    storage_class=entry.get("StorageClass"),
                ),
            )
        )
    return objects


class StorageQueries:
    """Listing, existence checks and URL signing for one bucket."""

    def __init__(
        self,
        client,
        bucket_name: str,
        *,
        signed_url_expires: int = DEFAULT_SIGNED_URL_EXPIRES,
        signing_service_url: str | None = None,
        url_cache: SignedUrlCache | None = None,
    ):
        self._client = client
        self._bucket = bucket_name
        self._signed_url_expires = signed_url_expires
        self._signing_service_url = signing_service_url
        self._url_cache = url_cache if url_cache is not None else SignedUrlCache()

    @property
    def bucket_name(self) -> str:
        return self._bucket

    @property
    def signed_url_expires(self) -> int:
        return self._signed_url_expires

    def list_by_prefix(self, prefix: str = "", delimiter: str = "/") -> OperationResult[list[StorageObject]]:
        """Return one page of direct children of ``prefix``."""

        prefix = prefix or ""
        LOGGER.debug("Listing objects under '%s'", prefix)
        try:
            response = self._client.list_objects_v2(
                Bucket=self._bucket, Prefix=prefix, Delimiter=delimiter
            )
        except (ClientError, BotoCoreError) as exc:
            LOGGER.exception("Error fetching S3 objects under '%s'", prefix)
            return OperationResult.fail("Error fetching S3 objects", exc)
        if not response:
            return OperationResult.fail("Response is null or undefined when fetching S3 objects")
        return OperationResult.ok(objects_from_listing(response, prefix))

    def list_all_in_directory(self, root_key: str) -> OperationResult[list[str]]:
        """Return every key below ``root_key``, following continuation tokens."""

        prefix = normalize_directory_prefix(root_key)
        keys: list[str] = []
        token: str | None = None
        while True:
            params = {"Bucket": self._bucket, "Prefix": prefix}
            if token:
                params["ContinuationToken"] = token
            try:
                response = self._client.list_objects_v2(**params)
            except (ClientError, BotoCoreError) as exc:
                LOGGER.exception("Error listing descendants of '%s'", prefix)
                return OperationResult.fail("Error fetching S3 objects", exc)
            keys.extend(entry["Key"] for entry in response.get("Contents") or [] if entry.get("Key"))
            token = response.get("NextContinuationToken")
            if not token:
                break
        LOGGER.debug("Found %d object(s) under '%s'", len(keys), prefix)
        return OperationResult.ok(keys)

    def exists_by_key(self, key: str) -> OperationResult[bool]:
        """Probe ``key``; a missing object is a successful ``False``."""

        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as exc:
            if is_not_found(exc):
                return OperationResult.ok(False)
            LOGGER.exception("Error checking if '%s' exists", key)
            return OperationResult.fail("Error checking if S3 object exists", exc)
        except BotoCoreError as exc:
            LOGGER.exception("Error checking if '%s' exists", key)
            return OperationResult.fail("Error checking if S3 object exists", exc)
        return OperationResult.ok(True)

    def generate_upload_url(
        self,
        key: str | None = None,
        overwrite: bool = False,
        content_type: str = DEFAULT_UPLOAD_CONTENT_TYPE,
    ) -> OperationResult[str]:
        if not key or not key.strip():
            key = key or "/"

        exists = self.exists_by_key(key)
        if exists.success and exists.data and not overwrite:
            return StorageResponses.FILE_NAME_EXISTS

        try:
            url = self._client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self._bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=self._signed_url_expires,
            )
        except (ClientError, BotoCoreError) as exc:
            LOGGER.exception("Error generating upload URL for '%s'", key)
            return OperationResult.fail("Error generating presigned URL", exc)
        return OperationResult.ok(url)

    def generate_read_url(self, key: str, expires_in: int | None = None) -> OperationResult[str]:
        expires = expires_in if expires_in is not None else self._signed_url_expires
        if expires <= 0:
            return OperationResult.fail("Expiry must be greater than zero")

        cached = self._url_cache.get(key, expires)
        if cached is not None:
            return OperationResult.ok(cached)

        try:
            url = self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=expires,
            )
        except (ClientError, BotoCoreError) as exc:
            LOGGER.exception("Error generating signed URL for '%s'", key)
            return OperationResult.fail("Error generating signed URL", exc)
        self._url_cache.put(key, url, expires)
        return OperationResult.ok(url)

    def get_object_details(self, key: str) -> OperationResult[ObjectDetails]:
        try:
            response = self._client.head_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            LOGGER.exception("Error fetching details for '%s'", key)
            return OperationResult.fail("Error fetching S3 object details", exc)
        return OperationResult.ok(
            ObjectDetails(
                bucket=self._bucket,
                key=key,
                size=response.get("ContentLength"),
                last_modified=response.get("LastModified"),
                storage_class=response.get("StorageClass"),
                etag=response.get("ETag"),
                content_type=response.get("ContentType"),
                metadata=dict(response.get("Metadata") or {}),
            )
        )

    def signing_service_url(self, key: str) -> OperationResult[str]:
        if not self._signing_service_url:
            LOGGER.error("Could not get signing service url")
            return OperationResult.fail("Failed to get signing service URL")
        return OperationResult.ok(join_signing_service_url(self._signing_service_url, key))
