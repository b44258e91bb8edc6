"""
In-memory session store.

Sessions live only for the process lifetime. Locks are kept separately from
sessions and only weakly: a lock lives while some coroutine holds or awaits
it, so discarding a session never drops a lock in use and idle users leave
nothing behind.
"""

import asyncio
import logging
import weakref
from typing import Dict, MutableMapping, Optional

from .models import Flow, Session


logger = logging.getLogger(__name__)


class SessionStore:
    """Maps user id to that user's single live Session."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._locks: MutableMapping[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def get(self, user_id: str) -> Optional[Session]:
        return self._sessions.get(str(user_id))

    def start(self, user_id: str, flow: Flow) -> Session:
        """Begin ``flow`` for the user, replacing any session in progress."""
        user_id = str(user_id)
        previous = self._sessions.get(user_id)
        if previous is not None:
            logger.debug("Replacing %s session for user %s", previous.flow.value, user_id)
        session = Session.begin(user_id, flow)
        self._sessions[user_id] = session
        return session

    def discard(self, user_id: str) -> Optional[Session]:
        return self._sessions.pop(str(user_id), None)

    def exists(self, user_id: str) -> bool:
        return str(user_id) in self._sessions

    def lock_for(self, user_id: str) -> asyncio.Lock:
        """Per-user lock serializing that user's inbound events."""
        user_id = str(user_id)
        lock = self._locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[user_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: str) -> bool:
        return self.exists(user_id)
