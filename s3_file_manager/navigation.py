from __future__ import annotations
"""Current location in the bucket and the listing shown for it."""
import logging

from .keys import normalize_path, parent_path
from .models import ObjectType, SortBy, SortDirection, StorageObject
from .queries import StorageQueries
from .results import OperationResult
from .settings import MemorySettingsStorage, SessionState, SettingsStorage

LOGGER = logging.getLogger(__name__)


def sort_objects(
    objects: list[StorageObject],
    direction: SortDirection = SortDirection.ASC,
    sort_by: SortBy = SortBy.NAME,
    *,
    reset: bool = False,
) -> list[StorageObject]:
    """Return a sorted copy of ``objects``.

    With ``reset`` directories come first and both groups are sorted by name.
    """

    if reset:
        directories = sorted((o for o in objects if o.is_directory), key=lambda o: o.name)
        files = sorted((o for o in objects if not o.is_directory), key=lambda o: o.name)
        return directories + files

    def sort_key(obj: StorageObject):
        metadata = obj.metadata
        if sort_by is SortBy.DATE:
            stamp = metadata.last_modified if metadata else None
            return (stamp is None, stamp.timestamp() if stamp else 0, obj.name)
        if sort_by is SortBy.SIZE:
            size = metadata.size if metadata else None
            return (size is None, size or 0, obj.name)
        if sort_by is SortBy.TYPE:
            return (0 if obj.type is ObjectType.DIRECTORY else 1, obj.name)
        return (obj.name,)

    ordered = sorted(objects, key=sort_key)
    if direction is SortDirection.DESC:
        ordered.reverse()
    return ordered


class NavigationState:
    """Owns the current path and its object listing."""

    def __init__(
        self,
        queries: StorageQueries,
        storage: SettingsStorage | MemorySettingsStorage | None = None,
    ):
        self._queries = queries
        self._storage = storage or MemorySettingsStorage()
        self._path = self._storage.load().last_path
        self._objects: list[StorageObject] = []
        self._listing_cache: dict[str, list[StorageObject]] = {}

    @property
    def current_path(self) -> str:
        return self._path

    @property
    def objects(self) -> list[StorageObject]:
        return list(self._objects)

    @property
    def is_root(self) -> bool:
        return self._path in ("", "/")

    def set_path(self, path: str) -> None:
        self._path = normalize_path(path or "")
        self._storage.save(SessionState(last_path=self._path))

    def get_objects(self, key: str = "", refresh: bool = False) -> OperationResult[bool]:
        """Load the listing for ``key`` and make it the current location."""

        path = normalize_path(key or "")
        cached = None if refresh else self._listing_cache.get(path)
        if cached is None:
            response = self._queries.list_by_prefix(path)
            if not response.success or response.data is None:
                return response.convert_failure()
            cached = response.data
            self._listing_cache[path] = cached
        else:
            LOGGER.debug("Serving listing for '%s' from cache", path)

        self._objects = list(cached)
        self.set_path(path)
        return OperationResult.ok(True)

    def update_objects(self, key: str = "") -> OperationResult[bool]:
        return self.get_objects(key, refresh=True)

    def refresh_current_path(self) -> OperationResult[bool]:
        return self.update_objects(self._path)

    def to_parent_directory(self) -> OperationResult[bool]:
        if self.is_root:
            return OperationResult.ok(True)
        return self.get_objects(parent_path(self._path))

    def invalidate(self) -> None:
        self._listing_cache.clear()

    def get_object_from_key(self, key: str) -> StorageObject | None:
        for obj in self._objects:
            if obj.key == key:
                return obj
        return None

    def sorted_objects(
        self,
        direction: SortDirection = SortDirection.ASC,
        sort_by: SortBy = SortBy.NAME,
        *,
        reset: bool = False,
    ) -> list[StorageObject]:
        return sort_objects(self._objects, direction, sort_by, reset=reset)
