from __future__ import annotations
"""Single and batch uploads through presigned PUT URLs."""
from dataclasses import dataclass
import logging
import threading
from typing import Callable, Iterator

import httpx

from .formatting import readable_file_size
from .keys import compose_key
from .models import BatchUploadSummary, UploadFile, UploadStatus, UploadTask
from .navigation import NavigationState
from .queries import StorageQueries
from .results import OperationResult, StorageResponses

DEFAULT_CHUNK_SIZE = 64 * 1024

ProgressFn = Callable[[int], None]

LOGGER = logging.getLogger(__name__)


class TransferCancelledError(RuntimeError):
    """Raised when an upload is cancelled by the caller."""


class CancellationHandle:
    """Abort signal for one in-flight transfer."""

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise TransferCancelledError("Transfer cancelled by user")


@dataclass
class UploadDetails:
    location: str
    signed_url: str
    handle: CancellationHandle


class UploadPipeline:
    """Uploads files into the current navigation path, one transfer at a time."""

    def __init__(
        self,
        queries: StorageQueries,
        navigation: NavigationState,
        *,
        upload_limit: int | None = None,
        http_client: httpx.Client | None = None,
        timeout: float | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        on_progress: ProgressFn | None = None,
    ):
        self._queries = queries
        self._navigation = navigation
        self._upload_limit = upload_limit
        self._http_client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout
        self._chunk_size = max(int(chunk_size), 1024)
        self.on_progress = on_progress

        self._lock = threading.RLock()
        self._tasks: list[UploadTask] = []
        self._active_handle: CancellationHandle | None = None
        self.current_index = -1
        self.current_file: UploadFile | None = None
        self.is_submitting = False
        self.progress = 0
        self.file_name_exists = False

    @property
    def files(self) -> list[UploadFile]:
        return [task.file for task in self._tasks]

    @property
    def file_statuses(self) -> list[UploadTask]:
        return list(self._tasks)

    def set_files(self, files: list[UploadFile]) -> None:
        with self._lock:
            self._tasks = [UploadTask(file=file) for file in files]

    def reset(self) -> None:
        with self._lock:
            self._tasks = []
            self._active_handle = None
            self.current_index = -1
            self.current_file = None
            self.is_submitting = False
            self.progress = 0
            self.file_name_exists = False

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def validate_files(self) -> OperationResult[bool]:
        """Reject an empty selection or one containing oversized files."""

        if not self._tasks:
            return OperationResult.fail("Please select at least one file")
        if self._upload_limit:
            oversized = [task for task in self._tasks if task.file.size > self._upload_limit]
            if oversized:
                return OperationResult.fail(
                    f"{len(oversized)} file(s) exceed the maximum allowed size "
                    f"({readable_file_size(self._upload_limit)})"
                )
        return OperationResult.ok()

    def prepare_upload(
        self,
        file: UploadFile,
        overwrite: bool = False,
        handle: CancellationHandle | None = None,
    ) -> OperationResult[UploadDetails]:
        """Request a signed URL for ``file`` under the current path.

        ``handle`` becomes the active transfer as soon as preparation starts,
        so a cancel issued while the URL is being signed is not lost.
        """

        handle = handle or self._activate(CancellationHandle())
        if not file.name or not file.name.strip():
            self._release(handle)
            return StorageResponses.INVALID_KEY
        location = compose_key(self._navigation.current_path, file.name)

        response = self._queries.generate_upload_url(location, overwrite, file.content_type)
        if not response.success or not response.data:
            self._release(handle)
            self.file_name_exists = response is StorageResponses.FILE_NAME_EXISTS
            if self.file_name_exists:
                return response
            return response.convert_failure()

        return OperationResult.ok(UploadDetails(location=location, signed_url=response.data, handle=handle))

    def perform_upload(
        self, file: UploadFile, signed_url: str, handle: CancellationHandle
    ) -> OperationResult[bool]:
        """PUT the contents of ``file`` to ``signed_url`` reporting progress."""

        try:
            handle.raise_if_cancelled()
            response = self._client().put(
                signed_url,
                content=self._stream(file, handle),
                headers={
                    "Content-Type": file.content_type,
                    "Content-Length": str(file.size),
                },
            )
            response.raise_for_status()
        except TransferCancelledError:
            LOGGER.debug("Upload of '%s' cancelled", file.name)
            return StorageResponses.UPLOAD_CANCELLED
        except httpx.HTTPStatusError as exc:
            LOGGER.error("Upload of '%s' rejected: %s", file.name, exc)
            return OperationResult.fail(
                f"Upload error: server responded with {exc.response.status_code}", exc
            )
        except httpx.HTTPError as exc:
            LOGGER.error("Upload of '%s' failed: %s", file.name, exc)
            return OperationResult.fail(f"Upload error: {exc}", exc)
        except OSError:
            LOGGER.exception("Unable to read '%s'", file.name)
            return StorageResponses.UPLOAD_FAILED
        finally:
            self._release(handle)
            self.file_name_exists = False
        return OperationResult.ok(True)

    def upload_single(self, file: UploadFile, overwrite: bool = False) -> OperationResult[bool]:
        return self._upload(file, overwrite, refresh=True)

    def upload_batch(self, overwrite: bool = False) -> BatchUploadSummary:
        """Upload every pending file in order and report the totals.

        Tasks already in a final state are skipped, so a batch interrupted by
        :meth:`cancel_all_uploads` can be resumed with a fresh selection.
        """

        if not self._tasks:
            return BatchUploadSummary()

        self.is_submitting = True
        success_count = 0
        error_count = 0
        try:
            for index, task in enumerate(list(self._tasks)):
                with self._lock:
                    if task.status is not UploadStatus.PENDING:
                        continue
                    task.transition(UploadStatus.UPLOADING)
                    task.progress = 0
                    self.current_index = index
                    handle = self._activate(CancellationHandle())

                result = self._upload(task.file, overwrite, refresh=False, handle=handle)

                with self._lock:
                    if task.status is not UploadStatus.UPLOADING:
                        continue
                    if result.success:
                        task.transition(UploadStatus.COMPLETED)
                        success_count += 1
                    elif result is StorageResponses.UPLOAD_CANCELLED:
                        task.transition(UploadStatus.CANCELLED)
                    else:
                        task.transition(UploadStatus.ERROR, error=result.message)
                        error_count += 1
        finally:
            self.current_index = -1
            self.is_submitting = False
            self._refresh_listing()

        LOGGER.info("Batch upload finished: %d succeeded, %d failed", success_count, error_count)
        return BatchUploadSummary(success_count=success_count, error_count=error_count)

    def cancel_upload(self) -> None:
        with self._lock:
            handle = self._active_handle
        if handle is not None:
            handle.cancel()
            self.progress = 0

    def cancel_all_uploads(self) -> None:
        self.cancel_upload()
        with self._lock:
            for task in self._tasks:
                if task.status in (UploadStatus.PENDING, UploadStatus.UPLOADING):
                    task.transition(UploadStatus.CANCELLED)
            self.current_index = -1

    def _activate(self, handle: CancellationHandle) -> CancellationHandle:
        with self._lock:
            self._active_handle = handle
        return handle

    def _release(self, handle: CancellationHandle) -> None:
        with self._lock:
            if self._active_handle is handle:
                self._active_handle = None

    def _upload(
        self,
        file: UploadFile,
        overwrite: bool,
        *,
        refresh: bool,
        handle: CancellationHandle | None = None,
    ) -> OperationResult[bool]:
        self.current_file = file
        prepared = self.prepare_upload(file, overwrite, handle)
        if not prepared.success or prepared.data is None:
            return prepared
        if prepared.data.handle.cancelled:
            self._release(prepared.data.handle)
            LOGGER.debug("Upload of '%s' cancelled before transfer", file.name)
            return StorageResponses.UPLOAD_CANCELLED
        uploaded = self.perform_upload(file, prepared.data.signed_url, prepared.data.handle)
        if not uploaded.success:
            return uploaded

        self.progress = 0
        if refresh:
            self._refresh_listing()
        self.current_file = None
        return OperationResult.ok(True)

    def _refresh_listing(self) -> None:
        refreshed = self._navigation.update_objects(self._navigation.current_path)
        if not refreshed.success:
            LOGGER.warning("Listing refresh failed: %s", refreshed.message)

    def _client(self) -> httpx.Client:
        if self._http_client is None:
            if self._timeout is not None:
                self._http_client = httpx.Client(timeout=self._timeout)
            else:
                self._http_client = httpx.Client()
        return self._http_client

    def _stream(self, file: UploadFile, handle: CancellationHandle) -> Iterator[bytes]:
        total = file.size
        loaded = 0
        with file.opener() as source:
            while True:
                handle.raise_if_cancelled()
                chunk = source.read(self._chunk_size)
                if not chunk:
                    break
                loaded += len(chunk)
                self._report_progress(round(loaded / total * 100) if total else 100)
                yield chunk
        if not total:
            self._report_progress(100)
        handle.raise_if_cancelled()

    def _report_progress(self, percent: int) -> None:
        percent = max(0, min(int(percent), 100))
        self.progress = percent
        with self._lock:
            if 0 <= self.current_index < len(self._tasks):
                self._tasks[self.current_index].progress = percent
        if self.on_progress:
            self.on_progress(percent)
