from __future__ import annotations
"""Mutating operations: copy, move, delete and directory markers.

Multi-step operations are not transactional. A move copies first and deletes
the source only once every copy succeeded; directory variants walk their
descendants one by one in listing order and stop at the first failure,
leaving whatever was already done in place.
"""
import logging

from botocore.exceptions import BotoCoreError, ClientError

from .keys import normalize_directory_prefix, rewrite_prefix, to_object_key
from .queries import StorageQueries
from .results import OperationResult, StorageResponses

LOGGER = logging.getLogger(__name__)


class StorageCommands:
    """Copy, move, rename and delete objects or whole prefixes."""

    def __init__(self, client, bucket_name: str, queries: StorageQueries):
        self._client = client
        self._bucket = bucket_name
        self._queries = queries

    def copy_object(self, source_key: str, destination_key: str) -> OperationResult[bool]:
        destination_key = to_object_key(destination_key)
        exists = self._queries.exists_by_key(destination_key)
        if exists.success and exists.data:
            LOGGER.debug("Refusing to overwrite '%s'", destination_key)
            return StorageResponses.DESTINATION_KEY_EXISTS

        try:
            self._client.copy_object(
                Bucket=self._bucket,
                CopySource={"Bucket": self._bucket, "Key": source_key},
                Key=destination_key,
            )
        except (ClientError, BotoCoreError) as exc:
            LOGGER.exception("Error copying '%s' to '%s'", source_key, destination_key)
            return OperationResult.fail("Error copying S3 object", exc)
        LOGGER.debug("Copied '%s' to '%s'", source_key, destination_key)
        return OperationResult.ok(True)

    def copy_directory(self, source_key: str, destination_key: str) -> OperationResult[bool]:
        listing = self._queries.list_all_in_directory(source_key)
        if not listing.success or listing.data is None:
            return listing.convert_failure()

        targets = [
            (key, rewrite_prefix(key, source_key, destination_key)) for key in listing.data
        ]
        for _, target in targets:
            exists = self._queries.exists_by_key(target)
            if exists.success and exists.data:
                LOGGER.debug("Destination '%s' already exists, aborting directory copy", target)
                return StorageResponses.DESTINATION_KEY_EXISTS

        for copied, (key, target) in enumerate(targets):
            result = self.copy_object(key, target)
            if not result.success:
                LOGGER.error(
                    "Directory copy of '%s' stopped after %d of %d object(s): %s",
                    source_key,
                    copied,
                    len(targets),
                    result.message,
                )
                return result
        return OperationResult.ok(True)

    def move_object(self, source_key: str, destination_key: str) -> OperationResult[bool]:
        copied = self.copy_object(source_key, destination_key)
        if not copied.success:
            return copied
        deleted = self.delete_object(source_key)
        if not deleted.success:
            LOGGER.error("'%s' was copied but could not be removed", source_key)
            return deleted
        return OperationResult.ok(True)

    def move_directory(self, source_key: str, destination_key: str) -> OperationResult[bool]:
        source_prefix = normalize_directory_prefix(source_key)
        destination_prefix = normalize_directory_prefix(destination_key)
        if (
            source_prefix
            and destination_prefix != source_prefix
            and destination_prefix.startswith(source_prefix)
        ):
            return OperationResult.fail(
                "Cannot move a directory into itself",
                ValueError(f"'{destination_key}' is inside '{source_key}'"),
            )

        copied = self.copy_directory(source_key, destination_key)
        if not copied.success:
            return copied
        deleted = self.delete_directory(source_key)
        if not deleted.success:
            LOGGER.error("'%s' was copied but could not be fully removed", source_key)
            return deleted
        return OperationResult.ok(True)

    def delete_object(self, key: str) -> OperationResult[bool]:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            LOGGER.exception("Error deleting '%s'", key)
            return OperationResult.fail("Error deleting S3 object", exc)
        LOGGER.debug("Deleted '%s'", key)
        return OperationResult.ok(True)

    def delete_directory(self, key: str) -> OperationResult[bool]:
        listing = self._queries.list_all_in_directory(key)
        if not listing.success or listing.data is None:
            return listing.convert_failure()

        for deleted, object_key in enumerate(listing.data):
            result = self.delete_object(object_key)
            if not result.success:
                LOGGER.error(
                    "Directory delete of '%s' stopped after %d of %d object(s)",
                    key,
                    deleted,
                    len(listing.data),
                )
                return result
        return OperationResult.ok(True)

    def create_directory_marker(self, key: str) -> OperationResult[bool]:
        key = to_object_key(key)
        if not key.endswith("/"):
            key = f"{key}/"
        if key == "/":
            return OperationResult.fail("Directory name cannot be empty", ValueError("Empty key"))

        try:
            self._client.put_object(Bucket=self._bucket, Key=key, ContentLength=0, Body=b"")
        except (ClientError, BotoCoreError) as exc:
            LOGGER.exception("Error creating directory marker '%s'", key)
            return OperationResult.fail("Error creating S3 object", exc)
        LOGGER.debug("Created directory marker '%s'", key)
        return OperationResult.ok(True)

    def rename_object(self, key: str, destination_key: str) -> OperationResult[bool]:
        return self.move_object(key, destination_key)

    def rename_directory(self, key: str, destination_key: str) -> OperationResult[bool]:
        return self.move_directory(key, destination_key)
