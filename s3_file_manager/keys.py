from __future__ import annotations
"""Pure helpers for transforming '/'-delimited object keys."""


def object_name(key: str) -> str:
    """Return the last non-empty segment of ``key``."""

    cleaned = key.rstrip("/")
    if not cleaned:
        return ""
    return cleaned.rsplit("/", 1)[-1]


def is_directory_key(key: str) -> bool:
    return key.endswith("/")


def split_parent_segment(prefix: str) -> str:
    """Return the second-to-last segment, the display name of a common prefix."""

    parts = prefix.split("/")
    if len(parts) >= 2:
        return parts[-2]
    return parts[0]


def destination_from_source(source_key: str, destination_prefix: str) -> str:
    """Compute where ``source_key`` lands when pasted into ``destination_prefix``.

    A destination without a trailing slash is already the full target key.
    """

    source_parts = source_key.split("/")
    if source_key.endswith("/"):
        source_name = (source_parts[-2] if len(source_parts) >= 2 else "") + "/"
    else:
        source_name = source_parts[-1]

    if destination_prefix.endswith("/"):
        return destination_prefix + source_name
    return destination_prefix


def rename_trailing_segment(key: str, new_name: str) -> str:
    """Replace the last path segment of ``key`` with ``new_name``.

    Directory keys come back wrapped in slashes: ``a/b/`` -> ``/a/new/``.
    """

    if key.endswith("/"):
        parts = [part for part in key.split("/") if part]
        if parts:
            parts[-1] = new_name
        else:
            parts = [new_name]
        result = "/" + "/".join(parts)
        return result if result.endswith("/") else result + "/"

    parts = key.split("/")
    parts[-1] = new_name
    return "/".join(parts)


def normalize_directory_prefix(prefix: str) -> str:
    """Return ``prefix`` in listing form: no leading slash, one trailing slash."""

    if prefix in ("", "/"):
        return ""
    cleaned = prefix.lstrip("/")
    if cleaned and not cleaned.endswith("/"):
        cleaned += "/"
    return cleaned


def to_object_key(key: str) -> str:
    """Strip leading slashes so the key addresses the bucket root."""

    return key.lstrip("/")


def rewrite_prefix(child_key: str, old_prefix: str, new_prefix: str) -> str:
    """Move ``child_key`` from under ``old_prefix`` to under ``new_prefix``.

    Keys outside ``old_prefix`` get their first segment replaced instead.
    """

    target = normalize_directory_prefix(new_prefix)
    source = normalize_directory_prefix(old_prefix)
    child = to_object_key(child_key)

    if source and child.startswith(source):
        return target + child[len(source):]

    first_segment = child.split("/", 1)[0] + "/"
    if child.startswith(first_segment):
        return target + child[len(first_segment):]
    return target + child


def normalize_path(path: str) -> str:
    """Navigation path form: ``""`` for the root, otherwise ``a/b/``."""

    if path in ("", "/"):
        return ""
    cleaned = path.lstrip("/")
    return cleaned if cleaned.endswith("/") else f"{cleaned}/"


def parent_path(path: str) -> str:
    if path in ("", "/"):
        return ""
    trimmed = path[:-1] if path.endswith("/") else path
    last_slash = trimmed.rfind("/")
    if last_slash <= 0:
        return ""
    return trimmed[:last_slash] + "/"


def compose_key(prefix: str, name: str) -> str:
    key_name = name.strip()
    if not key_name:
        raise ValueError("Object name cannot be empty")
    cleaned_prefix = prefix.strip().lstrip("/")
    if cleaned_prefix and not cleaned_prefix.endswith("/"):
        cleaned_prefix += "/"
    return f"{cleaned_prefix}{key_name}" if cleaned_prefix else key_name
