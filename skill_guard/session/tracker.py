from __future__ import annotations

import contextlib
import logging
import threading
from typing import Iterator

from skill_guard.errors import PersistenceError
from skill_guard.session.store import ISessionStore, InMemorySessionStore

logger = logging.getLogger(__name__)


class _SessionLock:
    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = 0


class SessionStateTracker:
    """Record which guardrail rules a session has already been held to.

    Store failures never propagate: reads degrade to "nothing used yet" and
    writes are logged and dropped. ``locked`` serialises check-and-mark for
    one session across threads and, when the store supports it, processes.
    """

    def __init__(self, store: ISessionStore | None = None) -> None:
        self._store = store or InMemorySessionStore()
        self._locks: dict[str, _SessionLock] = {}
        self._guard = threading.Lock()

    @contextlib.contextmanager
    def _lock_for(self, session_id: str) -> Iterator[None]:
        # Entries live only while a thread holds or waits on them.
        with self._guard:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = self._locks[session_id] = _SessionLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[session_id]

    @contextlib.contextmanager
    def locked(self, session_id: str) -> Iterator[None]:
        with self._lock_for(session_id), contextlib.ExitStack() as stack:
            try:
                stack.enter_context(self._store.lock(session_id))
            except PersistenceError as exc:
                logger.warning("Continuing without session lock: %s", exc)
            yield

    def used_rules(self, session_id: str) -> set[str]:
        try:
            return self._store.load_used(session_id)
        except PersistenceError as exc:
            logger.warning("Treating session %s as fresh: %s", session_id, exc)
            return set()

    def was_used(self, session_id: str, rule_name: str) -> bool:
        return rule_name in self.used_rules(session_id)

    def mark_used(self, session_id: str, rule_name: str) -> None:
        with self._lock_for(session_id):
            used = self.used_rules(session_id)
            if rule_name in used:
                return
            used.add(rule_name)
            try:
                self._store.save_used(session_id, used)
            except PersistenceError as exc:
                logger.warning("Could not record %s for session %s: %s", rule_name, session_id, exc)
                return
        logger.debug("Marked %s used in session %s", rule_name, session_id)

    def reset(self, session_id: str) -> None:
        with self._lock_for(session_id):
            try:
                self._store.clear(session_id)
            except PersistenceError as exc:
                logger.warning("Could not reset session %s: %s", session_id, exc)
