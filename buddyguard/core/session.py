"""
Sessions: the role a visitor picked at the portal, plus that visitor's incident cache.

There is no authentication. Opening a session is just choosing a role; the
registry is owned by the app and closing a session discards its state.
Visitors who never log out are evicted least-recently-used once the registry
holds MAX_SESSIONS.
"""

from __future__ import annotations

import logging
import os
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable

from buddyguard.core.errors import SessionNotFound
from buddyguard.core.incident_workflow import IncidentWorkflow
from buddyguard.schemas.incident import Role

logger = logging.getLogger(__name__)

MAX_SESSIONS: int = int(os.getenv("MAX_SESSIONS", "500"))


@dataclass(frozen=True)
class Session:
    id: str
    role: Role
    workflow: IncidentWorkflow = field(compare=False, repr=False)


class SessionRegistry:

    def __init__(self, workflow_factory: Callable[[], IncidentWorkflow], max_sessions: int = MAX_SESSIONS):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._workflow_factory = workflow_factory
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, Session] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, role: Role) -> Session:
        while len(self._sessions) >= self._max_sessions:
            evicted_id, evicted = self._sessions.popitem(last=False)
            logger.info("Session %s (%s) evicted, registry full", evicted_id[:8], evicted.role.value)
        session = Session(id=uuid.uuid4().hex, role=role, workflow=self._workflow_factory())
        self._sessions[session.id] = session
        logger.info("Session %s opened as %s", session.id[:8], role.value)
        return session

    def get(self, session_id: str) -> Session:
        try:
            session = self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None
        self._sessions.move_to_end(session_id)
        return session

    def close(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFound(session_id)
        logger.info("Session %s closed", session_id[:8])

    def close_all(self) -> None:
        self._sessions.clear()
