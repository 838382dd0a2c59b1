from __future__ import annotations
"""UI-agnostic helpers for sizes, times and URLs."""
from datetime import datetime, timezone

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def readable_file_size(size: int) -> str:
    """Format ``size`` bytes with up to two decimals, e.g. ``1.23 MB``."""

    if size <= 0:
        return "0 B"
    value = float(size)
    index = 0
    while value >= 1024 and index < len(SIZE_UNITS) - 1:
        value /= 1024
        index += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[index]}"


def clean_url(signed_url: str | None) -> str | None:
    """Drop the query string (signature) from a signed URL."""

    if not signed_url:
        return None
    return signed_url.split("?", 1)[0]


def join_signing_service_url(base_url: str, key: str) -> str:
    base = base_url[:-1] if base_url.endswith("/") else base_url
    safe_key = key.strip()
    key_path = safe_key if safe_key.startswith("/") else f"/{safe_key}"
    return f"{base}{key_path}"


def format_last_modified(last_modified: datetime | None) -> str:
    if not last_modified:
        return "-"
    return last_modified.strftime("%Y-%m-%d %H:%M:%S %Z").strip() or last_modified.isoformat()


def seconds_to_time(seconds: int) -> str:
    """Format a duration as ``HH:MM:SS``."""

    seconds = max(int(seconds), 0)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def time_from_now(moment: datetime | None, now: datetime | None = None) -> str:
    """Describe how long ago ``moment`` was, e.g. ``3 hours ago``."""

    if not moment:
        return "No time available"
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    delta = int((now - moment).total_seconds())
    future = delta < 0
    delta = abs(delta)

    for unit, size in (("year", 31536000), ("month", 2592000), ("day", 86400), ("hour", 3600), ("minute", 60)):
        if delta >= size:
            count = delta // size
            text = f"{count} {unit}{'' if count == 1 else 's'}"
            break
    else:
        text = "a few seconds"
    return f"in {text}" if future else f"{text} ago"
