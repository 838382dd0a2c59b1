from __future__ import annotations
"""Synchronous facade wiring storage, navigation, operations and uploads."""
import logging

import httpx

from .cache import SignedUrlCache
from .client import ClientFactory, create_s3_client
from .commands import StorageCommands
from .config import StorageSettings, load_settings
from .formatting import clean_url, seconds_to_time
from .models import (
    BatchUploadSummary,
    ObjectDetails,
    OperationType,
    SortBy,
    SortDirection,
    StorageObject,
    UploadFile,
    UploadTask,
)
from .navigation import NavigationState
from .orchestrator import OperationOrchestrator
from .queries import StorageQueries
from .results import OperationResult
from .settings import MemorySettingsStorage, SettingsStorage
from .uploads import ProgressFn, UploadPipeline

LOGGER = logging.getLogger(__name__)


class NotConnectedError(RuntimeError):
    """Raised when a bucket operation is attempted before connecting."""


class S3FileManagerController:
    """Coordinates user actions across the storage components of one bucket."""

    def __init__(
        self,
        settings: StorageSettings | None = None,
        *,
        client_factory: ClientFactory | None = None,
        session_storage: SettingsStorage | MemorySettingsStorage | None = None,
        http_client: httpx.Client | None = None,
        url_cache: SignedUrlCache | None = None,
    ):
        self._settings = settings
        self._client_factory = client_factory
        self._session_storage = session_storage
        self._http_client = http_client
        self._url_cache = url_cache
        self._queries: StorageQueries | None = None
        self._navigation: NavigationState | None = None
        self._orchestrator: OperationOrchestrator | None = None
        self._uploads: UploadPipeline | None = None

    @property
    def is_connected(self) -> bool:
        return self._queries is not None

    @property
    def settings(self) -> StorageSettings | None:
        return self._settings

    @property
    def navigation(self) -> NavigationState:
        return self._require_connection()[1]

    @property
    def orchestrator(self) -> OperationOrchestrator:
        return self._require_connection()[2]

    @property
    def uploads(self) -> UploadPipeline:
        return self._require_connection()[3]

    @property
    def current_path(self) -> str:
        return self.navigation.current_path

    @property
    def objects(self) -> list[StorageObject]:
        return self.navigation.objects

    @property
    def operation_message(self) -> str | None:
        if self._orchestrator is None:
            return None
        return self._orchestrator.operation_message

    @property
    def read_url_lifetime(self) -> str | None:
        """Default signed read URL lifetime as ``HH:MM:SS``."""

        if self._settings is None:
            return None
        return seconds_to_time(self._settings.signed_url_expires)

    def connect(self, settings: StorageSettings | None = None) -> OperationResult[bool]:
        """Build the bucket components and load the listing of the last path.

        Raises :class:`~s3_file_manager.config.ConfigurationError` when
        required settings are missing.
        """

        if settings is not None:
            self._settings = settings
        if self._settings is None:
            self._settings = load_settings()
        else:
            self._settings.validate_required()
        settings = self._settings

        self.close()
        client = create_s3_client(settings, self._client_factory)
        queries = StorageQueries(
            client,
            settings.bucket_name,
            signed_url_expires=settings.signed_url_expires,
            signing_service_url=settings.signing_service_url,
            url_cache=self._url_cache,
        )
        navigation = NavigationState(queries, self._session_storage)
        commands = StorageCommands(client, settings.bucket_name, queries)
        self._queries = queries
        self._navigation = navigation
        self._orchestrator = OperationOrchestrator(commands, navigation)
        self._uploads = UploadPipeline(
            queries,
            navigation,
            upload_limit=settings.file_upload_limit,
            http_client=self._http_client,
            timeout=settings.upload_timeout,
        )
        LOGGER.debug("Connected to bucket '%s'", settings.bucket_name)
        return navigation.get_objects(navigation.current_path)

    def close(self) -> None:
        if self._uploads is not None:
            self._uploads.close()
        self._queries = None
        self._navigation = None
        self._orchestrator = None
        self._uploads = None

    def get_objects(self, key: str = "", refresh: bool = False) -> OperationResult[bool]:
        return self.navigation.get_objects(key, refresh)

    def refresh(self) -> OperationResult[bool]:
        return self.navigation.refresh_current_path()

    def to_parent_directory(self) -> OperationResult[bool]:
        return self.navigation.to_parent_directory()

    def sorted_objects(
        self,
        direction: SortDirection = SortDirection.ASC,
        sort_by: SortBy = SortBy.NAME,
        *,
        reset: bool = False,
    ) -> list[StorageObject]:
        return self.navigation.sorted_objects(direction, sort_by, reset=reset)

    def get_object_from_key(self, key: str) -> StorageObject | None:
        return self.navigation.get_object_from_key(key)

    def set_operation_context(self, key: str, operation_type: OperationType) -> OperationResult[bool]:
        return self.orchestrator.set_operation_context(key, operation_type)

    def begin_create(self) -> OperationResult[bool]:
        """Start creating a directory inside the current path."""

        return self.orchestrator.set_operation_context(self.current_path or "/", OperationType.CREATE)

    def create_directory(self, new_name: str) -> OperationResult[bool]:
        return self.orchestrator.create_directory(new_name)

    def copy_object(self) -> OperationResult[bool]:
        return self.orchestrator.copy_object()

    def move_object(self) -> OperationResult[bool]:
        return self.orchestrator.move_object()

    def rename_object(self, new_name: str) -> OperationResult[bool]:
        return self.orchestrator.rename_object(new_name)

    def delete_object(self) -> OperationResult[bool]:
        return self.orchestrator.delete_object()

    def reset_operation(self) -> None:
        if self._orchestrator is not None:
            self._orchestrator.reset()

    def select_files(self, files: list[UploadFile]) -> OperationResult[bool]:
        """Queue ``files`` for upload and check them against the size limit."""

        uploads = self.uploads
        uploads.set_files(files)
        return uploads.validate_files()

    def upload_statuses(self) -> list[UploadTask]:
        return self.uploads.file_statuses

    def upload_single(
        self, file: UploadFile, overwrite: bool = False, *, on_progress: ProgressFn | None = None
    ) -> OperationResult[bool]:
        uploads = self.uploads
        uploads.on_progress = on_progress
        try:
            return uploads.upload_single(file, overwrite)
        finally:
            uploads.on_progress = None

    def upload_batch(
        self, overwrite: bool = False, *, on_progress: ProgressFn | None = None
    ) -> BatchUploadSummary:
        uploads = self.uploads
        uploads.on_progress = on_progress
        try:
            return uploads.upload_batch(overwrite)
        finally:
            uploads.on_progress = None

    def cancel_upload(self) -> None:
        if self._uploads is not None:
            self._uploads.cancel_upload()

    def cancel_all_uploads(self) -> None:
        if self._uploads is not None:
            self._uploads.cancel_all_uploads()

    def reset_uploads(self) -> None:
        if self._uploads is not None:
            self._uploads.reset()

    def generate_read_url(self, key: str, expires_in: int | None = None) -> OperationResult[str]:
        return self._require_connection()[0].generate_read_url(key, expires_in)

    def public_url(self, key: str) -> OperationResult[str]:
        """Signed read URL with the signature stripped."""

        signed = self.generate_read_url(key)
        if not signed.success:
            return signed
        return OperationResult.ok(clean_url(signed.data))

    def get_object_details(self, key: str) -> OperationResult[ObjectDetails]:
        return self._require_connection()[0].get_object_details(key)

    def signing_service_url(self, key: str) -> OperationResult[str]:
        return self._require_connection()[0].signing_service_url(key)

    def _require_connection(
        self,
    ) -> tuple[StorageQueries, NavigationState, OperationOrchestrator, UploadPipeline]:
        if (
            self._queries is None
            or self._navigation is None
            or self._orchestrator is None
            or self._uploads is None
        ):
            raise NotConnectedError("Not connected to S3")
        return self._queries, self._navigation, self._orchestrator, self._uploads
