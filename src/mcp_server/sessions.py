"""
MCP Session Registry

Tracks sessions opened through the HTTP /mcp endpoint. Each session carries
the credentials supplied when it was initialized, so concurrent clients never
share keys through process-wide state.

Copyright (c) 2025 Steve Angelovich
Licensed under the MIT License - see LICENSE file for details.
"""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from exchange.transport import Credentials


logger = logging.getLogger(__name__)


@dataclass
class Session:
    """One MCP client session"""

    session_id: str
    credentials: Credentials = field(default_factory=Credentials)
    created_at: datetime = field(default_factory=datetime.now)


class SessionRegistry:
    """Thread-safe map of session ID -> Session."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self, credentials: Credentials | None = None) -> Session:
        session = Session(session_id=str(uuid.uuid4()), credentials=credentials or Credentials())
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info(f"Session opened: {session.session_id}")
        return session

    def get(self, session_id: str | None) -> Session | None:
        if not session_id:
            return None
        with self._lock:
            return self._sessions.get(session_id)

    def close(self, session_id: str | None) -> Session | None:
        """Remove a session; returns it, or None if the ID is unknown."""
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.info(f"Session closed: {session_id}")
        return session

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)
