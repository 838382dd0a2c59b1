from __future__ import annotations
"""Maps user file operations onto storage commands."""
from itertools import product
import logging
from typing import Callable

from .commands import StorageCommands
from .keys import destination_from_source, rename_trailing_segment
from .models import ObjectType, OperationContext, OperationType
from .navigation import NavigationState
from .results import OperationResult

Handler = Callable[[str, str], OperationResult[bool]]

LOGGER = logging.getLogger(__name__)

OPERATION_MESSAGES = {
    OperationType.MOVE: "Moving S3 object...",
    OperationType.COPY: "Copying S3 object...",
    OperationType.DELETE: "Deleting S3 object...",
    OperationType.RENAME: "Renaming S3 object...",
    OperationType.CREATE: "Creating S3 directory...",
}
DEFAULT_OPERATION_MESSAGE = "Processing S3 operation..."


class IncompleteDispatchTableError(RuntimeError):
    """Raised when an operation/object type combination has no handler."""


def build_dispatch_table(commands: StorageCommands) -> dict[tuple[OperationType, ObjectType], Handler]:
    table: dict[tuple[OperationType, ObjectType], Handler] = {
        (OperationType.CREATE, ObjectType.DIRECTORY): lambda _, dest: commands.create_directory_marker(dest),
        (OperationType.CREATE, ObjectType.FILE): lambda _, dest: commands.create_directory_marker(dest),
        (OperationType.MOVE, ObjectType.FILE): commands.move_object,
        (OperationType.MOVE, ObjectType.DIRECTORY): commands.move_directory,
        (OperationType.COPY, ObjectType.FILE): commands.copy_object,
        (OperationType.COPY, ObjectType.DIRECTORY): commands.copy_directory,
        (OperationType.RENAME, ObjectType.FILE): commands.rename_object,
        (OperationType.RENAME, ObjectType.DIRECTORY): commands.rename_directory,
        (OperationType.DELETE, ObjectType.FILE): lambda source, _: commands.delete_object(source),
        (OperationType.DELETE, ObjectType.DIRECTORY): lambda source, _: commands.delete_directory(source),
    }
    ensure_complete(table)
    return table


def ensure_complete(table: dict[tuple[OperationType, ObjectType], Handler]) -> None:
    missing = [combo for combo in product(OperationType, ObjectType) if combo not in table]
    if missing:
        names = ", ".join(f"{op.value}/{kind.value}" for op, kind in missing)
        raise IncompleteDispatchTableError(f"No handler for: {names}")


class OperationOrchestrator:
    """Runs the pending operation held in an :class:`OperationContext`.

    Callers first record what the user picked with
    :meth:`set_operation_context`, then complete it with the matching
    operation. Success refreshes the listing and clears the context; failure
    keeps the context so the caller can report it and retry.
    """

    def __init__(
        self,
        commands: StorageCommands,
        navigation: NavigationState,
        *,
        context: OperationContext | None = None,
        dispatch_table: dict[tuple[OperationType, ObjectType], Handler] | None = None,
    ):
        self._navigation = navigation
        self._context = context or OperationContext()
        if dispatch_table is None:
            dispatch_table = build_dispatch_table(commands)
        else:
            ensure_complete(dispatch_table)
        self._dispatch_table = dict(dispatch_table)

    @property
    def context(self) -> OperationContext:
        return self._context

    @property
    def source_key(self) -> str | None:
        return self._context.source_key

    @property
    def operation_type(self) -> OperationType | None:
        return self._context.operation_type

    @property
    def operation_message(self) -> str | None:
        return self._context.operation_message

    def set_operation_context(self, key: str, operation_type: OperationType) -> OperationResult[bool]:
        if not key:
            return OperationResult.fail("Key cannot be empty")
        self._context.source_key = key
        self._context.operation_type = operation_type
        return OperationResult.ok(True)

    def reset(self) -> None:
        self._context.reset()

    def create_directory(self, new_name: str) -> OperationResult[bool]:
        failure = self._expect(OperationType.CREATE)
        if failure is not None:
            return failure
        if not new_name or not new_name.strip():
            return OperationResult.fail("New name cannot be empty")
        return self._run(OperationType.CREATE, new_name.strip())

    def copy_object(self) -> OperationResult[bool]:
        failure = self._expect(OperationType.COPY)
        if failure is not None:
            return failure
        return self._run(OperationType.COPY)

    def move_object(self) -> OperationResult[bool]:
        failure = self._expect(OperationType.MOVE)
        if failure is not None:
            return failure
        return self._run(OperationType.MOVE)

    def delete_object(self) -> OperationResult[bool]:
        failure = self._expect(OperationType.DELETE)
        if failure is not None:
            return failure
        return self._run(OperationType.DELETE)

    def rename_object(self, new_name: str) -> OperationResult[bool]:
        failure = self._expect(OperationType.RENAME)
        if failure is not None:
            return failure
        if not new_name or not new_name.strip():
            return OperationResult.fail("New name cannot be empty")
        return self._run(OperationType.RENAME, new_name.strip())

    def resolve_destination(self, source_key: str, operation_type: OperationType, new_name: str | None = None) -> tuple[ObjectType, str]:
        """Return the object type and destination key for an operation."""

        object_type = ObjectType.DIRECTORY if source_key.endswith("/") else ObjectType.FILE
        if operation_type is OperationType.DELETE:
            return object_type, ""

        destination_prefix = self._navigation.current_path or "/"
        destination = destination_from_source(source_key, destination_prefix)
        if new_name:
            destination = rename_trailing_segment(destination, new_name)

        if operation_type is OperationType.CREATE:
            object_type = ObjectType.DIRECTORY
            if not destination.endswith("/"):
                destination = f"{destination}/"
        return object_type, destination

    def _expect(self, expected: OperationType) -> OperationResult[bool] | None:
        if self._context.operation_type is not expected:
            return OperationResult.fail(
                f"Operation type is not set to {expected.name}",
                ValueError(f"Expected {expected.name} operation type"),
            )
        return None

    def _run(self, operation_type: OperationType, new_name: str | None = None) -> OperationResult[bool]:
        source_key = self._context.source_key
        if not source_key:
            message = (
                f"Missing required parameters for {operation_type.value} operation, "
                "source key, operation type"
            )
            return OperationResult.fail(message, ValueError(message))

        self._context.operation_message = OPERATION_MESSAGES.get(
            operation_type, DEFAULT_OPERATION_MESSAGE
        )
        try:
            object_type, destination = self.resolve_destination(source_key, operation_type, new_name)
            handler = self._dispatch_table[(operation_type, object_type)]
            LOGGER.debug(
                "Dispatching %s of %s '%s' to '%s'",
                operation_type.value,
                object_type.value,
                source_key,
                destination,
            )
            response = handler(source_key, destination)
        finally:
            self._context.operation_message = None

        if response.success:
            self._refresh_listing()
            self._context.reset()
        else:
            LOGGER.debug("%s of '%s' failed: %s", operation_type.value, source_key, response.message)
        return response

    def _refresh_listing(self) -> None:
        self._navigation.invalidate()
        refreshed = self._navigation.refresh_current_path()
        if not refreshed.success:
            LOGGER.warning("Listing refresh failed: %s", refreshed.message)
