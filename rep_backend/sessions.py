# rep_backend/sessions.py
# In-memory store of live tracking sessions; nothing is persisted.

import logging
import uuid
from threading import Lock
from typing import Dict, Optional, List

from rep_client.session import ExerciseSession

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self):
        self._sessions: Dict[str, ExerciseSession] = {}
        self._lock = Lock()

    def create(self, exercise: str, variation: str) -> str:
        """Creates and starts a session. Raises KeyError for an unknown variation."""
        session = ExerciseSession(exercise, variation)
        session.start()
        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = session
        logger.info("created session %s", session_id)
        return session_id

    def get(self, session_id: str) -> Optional[ExerciseSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: str) -> bool:
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.stop()
        return True

    def active(self) -> List[str]:
        with self._lock:
            return list(self._sessions)
