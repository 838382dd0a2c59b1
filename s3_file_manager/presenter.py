from __future__ import annotations
"""View-agnostic presenter that runs controller operations in the background."""
import logging
import threading
from typing import Callable, TypeVar

from botocore.exceptions import BotoCoreError, ClientError

from .config import ConfigurationError, StorageSettings
from .controller import S3FileManagerController
from .models import (
    BatchUploadSummary,
    ObjectDetails,
    OperationType,
    StorageObject,
    UploadFile,
    UploadTask,
)
from .results import OperationResult, StorageResponses

T = TypeVar("T")

DispatchFn = Callable[[Callable[[], None]], None]
ErrorFn = Callable[[str], None]
DoneFn = Callable[[], None]
ProgressFn = Callable[[int], None]

LOGGER = logging.getLogger(__name__)


def _format_error(exc: Exception) -> str:
    return str(exc)


class S3FileManagerPresenter:
    """Runs background operations and returns results via callbacks.

    Every callback is handed to ``dispatch`` so a UI can marshal it back onto
    its own thread. Failed :class:`OperationResult` values are reported
    through ``on_error`` with their message.
    """

    def __init__(
        self,
        *,
        controller: S3FileManagerController | None = None,
        dispatch: DispatchFn | None = None,
    ) -> None:
        self._controller = controller or S3FileManagerController()
        self._dispatch = dispatch or (lambda func: func())

    @property
    def is_connected(self) -> bool:
        return self._controller.is_connected

    @property
    def current_path(self) -> str:
        return self._controller.current_path

    @property
    def objects(self) -> list[StorageObject]:
        return self._controller.objects

    @property
    def operation_message(self) -> str | None:
        return self._controller.operation_message

    @property
    def upload_statuses(self) -> list[UploadTask]:
        return self._controller.upload_statuses()

    @property
    def read_url_lifetime(self) -> str | None:
        return self._controller.read_url_lifetime

    def connect(
        self,
        *,
        settings: StorageSettings | None = None,
        on_success: Callable[[list[StorageObject]], None],
        on_error: ErrorFn,
        on_done: DoneFn | None = None,
    ) -> None:
        LOGGER.debug("Connecting to bucket")
        def task() -> None:
            try:
                result = self._controller.connect(settings)
            except ConfigurationError as exc:
                LOGGER.error("Invalid configuration: %s", exc)
                message = _format_error(exc)
                self._dispatch(lambda: on_error(message))
            except (BotoCoreError, ClientError) as exc:
                LOGGER.exception("Connection error")
                message = _format_error(exc)
                self._dispatch(lambda: on_error(message))
            except Exception as exc:
                LOGGER.exception("Unexpected connection error")
                message = _format_error(exc)
                self._dispatch(lambda: on_error(message))
            else:
                self._deliver(result, lambda _: on_success(self._controller.objects), on_error)
            finally:
                if on_done:
                    self._dispatch(on_done)

        threading.Thread(target=task, daemon=True).start()

    def load_objects(
        self,
        *,
        key: str = "",
        refresh: bool = False,
        on_success: Callable[[list[StorageObject]], None],
        on_error: ErrorFn,
        on_done: DoneFn | None = None,
    ) -> None:
        LOGGER.debug("Loading objects under '%s'", key)
        self._submit(
            lambda: self._controller.get_objects(key, refresh),
            lambda _: on_success(self._controller.objects),
            on_error,
            on_done,
        )

    def to_parent_directory(
        self,
        *,
        on_success: Callable[[list[StorageObject]], None],
        on_error: ErrorFn,
        on_done: DoneFn | None = None,
    ) -> None:
        self._submit(
            self._controller.to_parent_directory,
            lambda _: on_success(self._controller.objects),
            on_error,
            on_done,
        )

    def set_operation_context(self, key: str, operation_type: OperationType) -> OperationResult[bool]:
        return self._controller.set_operation_context(key, operation_type)

    def begin_create(self) -> OperationResult[bool]:
        return self._controller.begin_create()

    def reset_operation(self) -> None:
        self._controller.reset_operation()

    def create_directory(
        self,
        *,
        new_name: str,
        on_success: DoneFn,
        on_error: ErrorFn,
        on_done: DoneFn | None = None,
    ) -> None:
        self._submit(
            lambda: self._controller.create_directory(new_name),
            lambda _: on_success(),
            on_error,
            on_done,
        )

    def copy_object(self, *, on_success: DoneFn, on_error: ErrorFn, on_done: DoneFn | None = None) -> None:
        self._submit(self._controller.copy_object, lambda _: on_success(), on_error, on_done)

    def move_object(self, *, on_success: DoneFn, on_error: ErrorFn, on_done: DoneFn | None = None) -> None:
        self._submit(self._controller.move_object, lambda _: on_success(), on_error, on_done)

    def rename_object(
        self,
        *,
        new_name: str,
        on_success: DoneFn,
        on_error: ErrorFn,
        on_done: DoneFn | None = None,
    ) -> None:
        self._submit(
            lambda: self._controller.rename_object(new_name),
            lambda _: on_success(),
            on_error,
            on_done,
        )

    def delete_object(self, *, on_success: DoneFn, on_error: ErrorFn, on_done: DoneFn | None = None) -> None:
        self._submit(self._controller.delete_object, lambda _: on_success(), on_error, on_done)

    def select_files(self, files: list[UploadFile]) -> OperationResult[bool]:
        return self._controller.select_files(files)

    def upload_file(
        self,
        *,
        file: UploadFile,
        overwrite: bool = False,
        on_progress: ProgressFn | None = None,
        on_success: DoneFn | None = None,
        on_error: ErrorFn | None = None,
        on_cancelled: ErrorFn | None = None,
        on_done: DoneFn | None = None,
    ) -> None:
        progress_callback = None
        if on_progress:
            progress_callback = lambda percent: self._dispatch(lambda: on_progress(percent))

        def task() -> None:
            try:
                result = self._controller.upload_single(file, overwrite, on_progress=progress_callback)
            except Exception as exc:
                LOGGER.exception("Unexpected upload error for '%s'", file.name)
                if on_error:
                    message = _format_error(exc)
                    self._dispatch(lambda: on_error(message))
            else:
                if result.success:
                    if on_success:
                        self._dispatch(on_success)
                elif result is StorageResponses.UPLOAD_CANCELLED:
                    if on_cancelled:
                        self._dispatch(lambda: on_cancelled(result.message or ""))
                elif on_error:
                    self._dispatch(lambda: on_error(result.message or "Upload failed"))
            finally:
                if on_done:
                    self._dispatch(on_done)

        threading.Thread(target=task, daemon=True).start()

    def upload_files(
        self,
        *,
        overwrite: bool = False,
        on_progress: ProgressFn | None = None,
        on_success: Callable[[BatchUploadSummary], None],
        on_error: ErrorFn,
        on_done: DoneFn | None = None,
    ) -> None:
        progress_callback = None
        if on_progress:
            progress_callback = lambda percent: self._dispatch(lambda: on_progress(percent))

        def task() -> None:
            try:
                summary = self._controller.upload_batch(overwrite, on_progress=progress_callback)
            except Exception as exc:
                LOGGER.exception("Unexpected batch upload error")
                message = _format_error(exc)
                self._dispatch(lambda: on_error(message))
            else:
                LOGGER.debug(
                    "Batch upload: %d succeeded, %d failed",
                    summary.success_count,
                    summary.error_count,
                )
                self._dispatch(lambda: on_success(summary))
            finally:
                if on_done:
                    self._dispatch(on_done)

        threading.Thread(target=task, daemon=True).start()

    def cancel_upload(self) -> None:
        self._controller.cancel_upload()

    def cancel_all_uploads(self) -> None:
        self._controller.cancel_all_uploads()

    def reset_uploads(self) -> None:
        self._controller.reset_uploads()

    def generate_read_url(
        self,
        *,
        key: str,
        expires_in: int | None = None,
        on_success: Callable[[str], None],
        on_error: ErrorFn,
    ) -> None:
        self._submit(lambda: self._controller.generate_read_url(key, expires_in), on_success, on_error)

    def get_object_details(
        self,
        *,
        key: str,
        on_success: Callable[[ObjectDetails], None],
        on_error: ErrorFn,
    ) -> None:
        self._submit(lambda: self._controller.get_object_details(key), on_success, on_error)

    def _submit(
        self,
        call: Callable[[], OperationResult[T]],
        on_success: Callable[[T], None],
        on_error: ErrorFn,
        on_done: DoneFn | None = None,
    ) -> None:
        def task() -> None:
            try:
                result = call()
            except Exception as exc:
                LOGGER.exception("Unexpected error in background operation")
                message = _format_error(exc)
                self._dispatch(lambda: on_error(message))
            else:
                self._deliver(result, on_success, on_error)
            finally:
                if on_done:
                    self._dispatch(on_done)

        threading.Thread(target=task, daemon=True).start()

    def _deliver(
        self,
        result: OperationResult[T],
        on_success: Callable[[T], None],
        on_error: ErrorFn,
    ) -> None:
        if result.success:
            self._dispatch(lambda: on_success(result.data))
        else:
            message = result.message or "Operation failed"
            self._dispatch(lambda: on_error(message))
