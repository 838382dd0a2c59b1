from __future__ import annotations
"""Uniform success/failure envelope returned by every storage operation."""
from dataclasses import dataclass
import logging
from typing import Generic, Optional, TypeVar

T = TypeVar("T")
U = TypeVar("U")

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of an operation.

    A success never carries ``error``; a failure always carries ``message``.
    """

    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[object] = None

    def __post_init__(self) -> None:
        if self.success and self.error is not None:
            raise ValueError("A successful result cannot carry an error")
        if not self.success and not self.message:
            raise ValueError("A failed result requires a message")

    @classmethod
    def ok(cls, data: Optional[T] = None, message: str | None = None) -> "OperationResult[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message: str, error: object | None = None) -> "OperationResult[T]":
        return cls(success=False, message=message, error=error)

    def convert_failure(self) -> "OperationResult[U]":
        """Re-wrap this failure for a caller expecting a different data type."""

        if self.success:
            LOGGER.error(self.message or "Cannot convert a success result with convert_failure")
            return OperationResult(
                success=False,
                message=self.message or "Cannot convert a success result with convert_failure",
            )
        return OperationResult(success=False, message=self.message, error=self.error)


class StorageResponses:
    """Sentinel failures callers can compare by identity."""

    FILE_NAME_EXISTS: OperationResult[str] = OperationResult.fail(
        "Object already exists. Please choose a different name.",
        FileExistsError("Object already exists. Please choose a different name."),
    )
    DESTINATION_KEY_EXISTS: OperationResult[bool] = OperationResult.fail(
        "Destination key already exists, copy operation aborted",
        FileExistsError("Destination key already exists, copy operation aborted"),
    )
    INVALID_KEY: OperationResult[str] = OperationResult.fail(
        "Invalid S3 object key provided",
        ValueError("Invalid or empty S3 key"),
    )
    UPLOAD_FAILED: OperationResult[bool] = OperationResult.fail(
        "Failed to upload file to S3",
        RuntimeError("S3 upload operation failed"),
    )
    UPLOAD_CANCELLED: OperationResult[bool] = OperationResult.fail("Upload cancelled")

    @classmethod
    def is_collision(cls, result: OperationResult) -> bool:
        return result is cls.FILE_NAME_EXISTS or result is cls.DESTINATION_KEY_EXISTS
