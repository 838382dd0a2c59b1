from __future__ import annotations
"""Session state persistence helpers."""

from dataclasses import asdict, dataclass
import json
from pathlib import Path

from .keys import normalize_path


@dataclass
class SessionState:
    """State kept between sessions."""

    last_path: str = ""


class SettingsStorage:
    """JSON-backed persistence for :class:`SessionState`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".s3_file_manager_session.json"
        self._path = Path(storage_path)

    def load(self) -> SessionState:
        if not self._path.exists():
            return SessionState()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return SessionState()
        if not isinstance(data, dict):
            return SessionState()
        last_path = data.get("last_path", "")
        if not isinstance(last_path, str):
            last_path = ""
        return SessionState(last_path=normalize_path(last_path))

    def save(self, state: SessionState) -> None:
        payload = asdict(state)
        payload["last_path"] = normalize_path(state.last_path or "")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            # Persist best-effort; ignore filesystem issues.
            return


class MemorySettingsStorage:
    """Non-persistent stand-in used when no session file is wanted."""

    def __init__(self, state: SessionState | None = None):
        self._state = state or SessionState()

    def load(self) -> SessionState:
        return SessionState(last_path=self._state.last_path)

    def save(self, state: SessionState) -> None:
        self._state = SessionState(last_path=state.last_path)
