"""Registry routing battle threads to their active sessions."""

from __future__ import annotations

import asyncio
from typing import Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")


class BattleRegistry(Generic[T]):
    """Track active battle sessions keyed by thread identifier.

    One registry is created when the bot starts and handed to every cog that
    needs it. Access to the mapping is serialised with an
    :class:`asyncio.Lock` so command handlers and event listeners never see a
    half-updated registry.
    """

    __slots__ = ("_sessions", "_lock")

    def __init__(self) -> None:
        self._sessions: Dict[int, T] = {}
        self._lock = asyncio.Lock()

    async def get(self, thread_id: Optional[int]) -> Optional[T]:
        """Return the session running in ``thread_id`` if there is one."""

        if thread_id is None:
            return None
        async with self._lock:
            return self._sessions.get(thread_id)

    async def register(self, thread_id: int, session: T) -> T:
        """Store ``session`` for ``thread_id``, replacing any previous one."""

        async with self._lock:
            self._sessions[thread_id] = session
            return session

    async def pop(self, thread_id: int) -> Optional[T]:
        """Remove and return the session for ``thread_id`` if it exists."""

        async with self._lock:
            return self._sessions.pop(thread_id, None)

    async def values(self) -> Tuple[T, ...]:
        """Return a snapshot of the registered sessions."""

        async with self._lock:
            return tuple(self._sessions.values())
