from __future__ import annotations
"""Data models for bucket listings, pending operations and uploads."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import mimetypes
import os
from typing import BinaryIO, Callable, Optional

from .formatting import format_last_modified, readable_file_size, time_from_now


class ObjectType(str, Enum):
    FILE = "file"
    DIRECTORY = "folder"


class OperationType(str, Enum):
    CREATE = "create"
    COPY = "copy"
    MOVE = "move"
    RENAME = "rename"
    DELETE = "delete"


class SortBy(str, Enum):
    NAME = "name"
    SIZE = "size"
    DATE = "date"
    TYPE = "type"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass
class ObjectMetadata:
    size: Optional[int] = None
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    storage_class: Optional[str] = None


@dataclass
class StorageObject:
    """A file or synthetic directory entry in a listing."""

    type: ObjectType
    key: str
    name: str
    metadata: Optional[ObjectMetadata] = None

    @property
    def is_directory(self) -> bool:
        return self.type is ObjectType.DIRECTORY


@dataclass
class ObjectDetails:
    """Metadata about a single S3 object."""

    bucket: str
    key: str
    size: Optional[int] = None
    last_modified: Optional[datetime] = None
    storage_class: Optional[str] = None
    etag: Optional[str] = None
    content_type: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def readable_size(self) -> str:
        return readable_file_size(self.size or 0)

    @property
    def last_modified_text(self) -> str:
        return format_last_modified(self.last_modified)

    def updated_ago(self, now: datetime | None = None) -> str:
        return time_from_now(self.last_modified, now)


@dataclass
class OperationContext:
    """The operation the user started but has not completed yet."""

    source_key: Optional[str] = None
    operation_type: Optional[OperationType] = None
    operation_message: Optional[str] = None

    def reset(self) -> None:
        self.source_key = None
        self.operation_type = None
        self.operation_message = None


class UploadStatus(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    COMPLETED = "completed"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadStatus.COMPLETED, UploadStatus.ERROR, UploadStatus.CANCELLED)


_ALLOWED_TRANSITIONS: dict[UploadStatus, frozenset[UploadStatus]] = {
    UploadStatus.PENDING: frozenset({UploadStatus.UPLOADING, UploadStatus.CANCELLED}),
    UploadStatus.UPLOADING: frozenset(
        {UploadStatus.COMPLETED, UploadStatus.ERROR, UploadStatus.CANCELLED}
    ),
    UploadStatus.COMPLETED: frozenset(),
    UploadStatus.ERROR: frozenset(),
    UploadStatus.CANCELLED: frozenset(),
}


class InvalidTransitionError(RuntimeError):
    """Raised when an upload task is moved out of a terminal state."""


@dataclass
class UploadFile:
    """A local file selected for upload."""

    name: str
    size: int
    opener: Callable[[], BinaryIO]
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str, *, content_type: str | None = None) -> "UploadFile":
        guessed, _ = mimetypes.guess_type(path)
        return cls(
            name=os.path.basename(path),
            size=os.path.getsize(path),
            opener=lambda: open(path, "rb"),
            content_type=content_type or guessed or "application/octet-stream",
        )


@dataclass
class UploadTask:
    file: UploadFile
    progress: int = 0
    status: UploadStatus = UploadStatus.PENDING
    error: Optional[str] = None

    def transition(self, status: UploadStatus, *, error: str | None = None) -> None:
        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Cannot move upload '{self.file.name}' from {self.status.value} to {status.value}"
            )
        self.status = status
        if status is UploadStatus.ERROR:
            self.error = error
        if status is UploadStatus.COMPLETED:
            self.progress = 100


@dataclass(frozen=True)
class BatchUploadSummary:
    success_count: int = 0
    error_count: int = 0
