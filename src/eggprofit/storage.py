"""
Persistence for launch state, session cookies and the install id.

Every mutation of the launch state goes through ``LaunchStateStore.update``,
which serializes writers and writes the whole state back immediately.
"""

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from eggprofit.errors import StateInvariantError
from eggprofit.models.launch import PersistedLaunchState
from eggprofit.models.surface import CookieSnapshot

logger = logging.getLogger(__name__)

LAUNCH_STATE_FILE = "launch_state.json"
COOKIES_FILE = "cookies.json"
INSTALL_ID_FILE = "install_id"


class Backend(Protocol):
    def read(self) -> dict[str, Any]: ...

    def write(self, data: dict[str, Any]) -> None: ...


class JsonFileBackend:
    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text())
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding unreadable {self.path.name}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2))


class MemoryBackend:
    def __init__(self, data: Optional[dict[str, Any]] = None):
        self.data: dict[str, Any] = dict(data or {})
        self.writes = 0

    def read(self) -> dict[str, Any]:
        return json.loads(json.dumps(self.data))

    def write(self, data: dict[str, Any]) -> None:
        self.data = json.loads(json.dumps(data))
        self.writes += 1


class LaunchStateStore:
    """Single serialized accessor for ``PersistedLaunchState``."""

    def __init__(self, backend: Backend):
        self._backend = backend
        self._lock = asyncio.Lock()
        self._state = self._read()

    @classmethod
    def in_dir(cls, state_dir: Path) -> "LaunchStateStore":
        return cls(JsonFileBackend(Path(state_dir) / LAUNCH_STATE_FILE))

    def _read(self) -> PersistedLaunchState:
        raw = self._backend.read()
        try:
            return PersistedLaunchState.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Persisted launch state is invalid, starting fresh: {e}")
            return PersistedLaunchState()

    @property
    def state(self) -> PersistedLaunchState:
        return self._state.model_copy()

    def reload(self) -> PersistedLaunchState:
        self._state = self._read()
        return self.state

    async def update(self, **changes: Any) -> PersistedLaunchState:
        """Apply ``changes``, validate, and write the full state back."""
        async with self._lock:
            return self._apply(changes)

    async def consume_deep_link(self) -> Optional[str]:
        """Return the pending deep link and clear it in one step."""
        async with self._lock:
            link = self._state.pending_deep_link
            if link:
                self._apply({"pending_deep_link": None})
            return link or None

    async def reset(self) -> PersistedLaunchState:
        async with self._lock:
            self._state = PersistedLaunchState()
            self._backend.write(self._state.model_dump(mode="json"))
            return self.state

    def _apply(self, changes: dict[str, Any]) -> PersistedLaunchState:
        merged = {**self._state.model_dump(), **changes}
        try:
            new_state = PersistedLaunchState.model_validate(merged)
        except ValidationError as e:
            raise StateInvariantError(str(e)) from e
        self._backend.write(new_state.model_dump(mode="json"))
        self._state = new_state
        return self.state


class CookieStore:
    """Whole-snapshot cookie persistence, last writer wins."""

    def __init__(self, backend: Backend):
        self._backend = backend

    @classmethod
    def in_dir(cls, state_dir: Path) -> "CookieStore":
        return cls(JsonFileBackend(Path(state_dir) / COOKIES_FILE))

    def load(self) -> CookieSnapshot:
        return self._backend.read()

    def save(self, snapshot: CookieSnapshot) -> None:
        self._backend.write(snapshot)


def get_or_create_install_id(state_dir: Path, provided: Optional[str] = None) -> str:
    if provided:
        return provided
    path = Path(state_dir) / INSTALL_ID_FILE
    try:
        return path.read_text().strip()
    except FileNotFoundError:
        install_id = str(uuid.uuid4())
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(install_id)
        except OSError as e:
            logger.warning(f"Could not persist install id: {e}")
        return install_id
