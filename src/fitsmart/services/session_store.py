"""In-memory store of audit sessions for the HTTP API."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from ..exceptions import SessionNotFoundError
from .flow_controller import FlowController


logger = logging.getLogger(__name__)


class SessionStore:
    """
    Simple in-memory session registry.

    Sessions are process-local. When full, the oldest session is evicted.
    """

    def __init__(self, factory: Callable[[], FlowController], max_size: int = 500):
        self._factory = factory
        self._sessions: Dict[str, FlowController] = {}
        self._created_at: Dict[str, datetime] = {}
        self._max_size = max_size

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> tuple[str, FlowController]:
        """Create a new session and return its id and controller."""
        if len(self._sessions) >= self._max_size:
            oldest_id = next(iter(self._sessions))
            self.delete(oldest_id)
            logger.info(f"Session store full, evicted {oldest_id}")

        session_id = uuid.uuid4().hex
        self._sessions[session_id] = self._factory()
        self._created_at[session_id] = datetime.now(timezone.utc)
        return session_id, self._sessions[session_id]

    def get(self, session_id: str) -> FlowController:
        """
        Get a session's controller.

        Raises:
            SessionNotFoundError: If the id is unknown.
        """
        controller = self._sessions.get(session_id)
        if controller is None:
            raise SessionNotFoundError(session_id)
        return controller

    def created_at(self, session_id: str) -> Optional[datetime]:
        return self._created_at.get(session_id)

    def delete(self, session_id: str) -> None:
        """Remove a session. A pending stage call is superseded, not cancelled."""
        controller = self._sessions.pop(session_id, None)
        if controller is None:
            raise SessionNotFoundError(session_id)
        self._created_at.pop(session_id, None)
        controller.reset()

    def clear(self) -> None:
        """Remove every session."""
        for controller in self._sessions.values():
            controller.reset()
        self._sessions.clear()
        self._created_at.clear()
