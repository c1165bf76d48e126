"""Persistence surfaces for per-session rule usage."""

from __future__ import annotations

import contextlib
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import ContextManager, Iterator

from skill_guard.errors import PersistenceError
from skill_guard.utils import read_json_safe, write_json_atomic

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]")


class ISessionStore(ABC):
    @abstractmethod
    def load_used(self, session_id: str) -> set[str]:
        raise NotImplementedError

    @abstractmethod
    def save_used(self, session_id: str, names: set[str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self, session_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_sessions(self) -> list[str]:
        raise NotImplementedError

    def lock(self, session_id: str) -> ContextManager[None]:
        return contextlib.nullcontext()


class InMemorySessionStore(ISessionStore):
    def __init__(self) -> None:
        self._sessions: dict[str, set[str]] = {}

    def load_used(self, session_id: str) -> set[str]:
        return set(self._sessions.get(session_id, set()))

    def save_used(self, session_id: str, names: set[str]) -> None:
        self._sessions[session_id] = set(names)

    def clear(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def list_sessions(self) -> list[str]:
        return sorted(self._sessions)


class FileSessionStore(ISessionStore):
    """One JSON document per session, guarded by an advisory lock file."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def path_for(self, session_id: str) -> Path:
        return self._root / f"{safe_session_name(session_id)}.json"

    def load_used(self, session_id: str) -> set[str]:
        path = self.path_for(session_id)
        payload, error = read_json_safe(path)
        if error is not None:
            raise PersistenceError(path, error)
        if payload is None:
            return set()
        if not isinstance(payload, dict) or not isinstance(payload.get("usedRules", []), list):
            raise PersistenceError(path, "expected object with list 'usedRules'")
        return {item for item in payload.get("usedRules", []) if isinstance(item, str)}

    def save_used(self, session_id: str, names: set[str]) -> None:
        path = self.path_for(session_id)
        try:
            write_json_atomic(path, {"sessionId": session_id, "usedRules": sorted(names)})
        except OSError as exc:
            raise PersistenceError(path, str(exc)) from exc

    def clear(self, session_id: str) -> None:
        path = self.path_for(session_id)
        try:
            path.unlink(missing_ok=True)
            path.with_suffix(".lock").unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(path, str(exc)) from exc

    def list_sessions(self) -> list[str]:
        if not self._root.exists():
            return []
        sessions: list[str] = []
        for child in sorted(self._root.glob("*.json")):
            payload, error = read_json_safe(child)
            if error is None and isinstance(payload, dict) and isinstance(payload.get("sessionId"), str):
                sessions.append(payload["sessionId"])
            else:
                sessions.append(child.stem)
        return sessions

    @contextlib.contextmanager
    def lock(self, session_id: str) -> Iterator[None]:
        import fcntl

        lock_path = self.path_for(session_id).with_suffix(".lock")
        try:
            lock_path.parent.mkdir(parents=True, exist_ok=True)
            handle = lock_path.open("a+")
        except OSError as exc:
            raise PersistenceError(lock_path, str(exc)) from exc
        with handle:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def safe_session_name(session_id: str) -> str:
    cleaned = _UNSAFE_CHARS_RE.sub("_", session_id.strip())
    return cleaned.lstrip(".") or "default"
