"""
Purpose: The authoritative list of chat sessions for the signed-in user,
mirrored to durable key/value storage under "chatSessions_<uid>".
Why: Reopen sessions after a reload; one place that mutates session data.

What is inside:
SessionStore with create / select / two-phase delete / append_message /
replace_history, plus load_for_user (seed once) and a best-effort save
after every mutation.

The mirror is passive: it seeds the store once per user and afterwards
only receives writes. Write failures become warnings (drain_warnings) and
never undo the in-memory change.

Testing:
InMemoryKeyValueStorage for round-trips; a failing storage fake for the
warning path.
"""

from __future__ import annotations
import json
import time
from typing import Callable, Optional, Sequence

from core.errors import PersistenceFailure, StaleSessionReference
from core.interfaces import KeyValueStorage
from core.logging_utils import get_logger
from core.models import ChatSession, Message
from core.services.security import DefaultSecurity

logger = get_logger(__name__)

STORAGE_KEY_PREFIX = "chatSessions_"


def storage_key(uid: str) -> str:
    return f"{STORAGE_KEY_PREFIX}{uid}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class SessionStore:
    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        security: Optional[DefaultSecurity] = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.storage = storage
        self.security = security or DefaultSecurity()
        self.clock = clock
        self.user_id: Optional[str] = None
        self.pending_delete_id: Optional[str] = None
        self._sessions: list[ChatSession] = []
        self._active_id: Optional[str] = None
        self._warnings: list[str] = []

    # ---------------------------
    # Reads
    # ---------------------------
    @property
    def sessions(self) -> tuple[ChatSession, ...]:
        return tuple(self._sessions)

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    @property
    def active_session_id(self) -> Optional[str]:
        return self._active_id

    def get_session(self, session_id: Optional[str]) -> Optional[ChatSession]:
        if session_id is None:
            return None
        return next((s for s in self._sessions if s.id == session_id), None)

    def require_session(self, session_id: str) -> ChatSession:
        session = self.get_session(session_id)
        if session is None:
            raise StaleSessionReference(session_id)
        return session

    def active_session(self) -> Optional[ChatSession]:
        return self.get_session(self._active_id)

    def drain_warnings(self) -> list[str]:
        out, self._warnings = self._warnings, []
        return out

    # ---------------------------
    # Mutations
    # ---------------------------
    def _new_id(self) -> str:
        candidate = int(self.clock())
        taken = {s.id for s in self._sessions}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def create_session(
        self,
        file_name: str,
        data_uri: str,
        media_type: str,
        *,
        source_file=None,
    ) -> str:
        """Raises InvalidAttachmentType (state untouched) for non-PDF input."""
        self.security.validate_attachment(data_uri, media_type)

        session = ChatSession(
            id=self._new_id(),
            source_file_name=file_name,
            source_data_uri=data_uri,
            source_file=source_file,
        )
        self._sessions.append(session)
        self._active_id = session.id
        logger.info("Created session %s for %r", session.id, file_name)
        self._persist()
        return session.id

    def select_session(self, session_id: str) -> None:
        if self.get_session(session_id) is not None:
            self._active_id = session_id

    def request_delete(self, session_id: str) -> None:
        if self.get_session(session_id) is not None:
            self.pending_delete_id = session_id

    def cancel_delete(self) -> None:
        self.pending_delete_id = None

    def confirm_delete(self) -> Optional[ChatSession]:
        """Remove the session awaiting confirmation. Returns it, or None."""
        target_id, self.pending_delete_id = self.pending_delete_id, None
        session = self.get_session(target_id)
        if session is None:
            return None

        self._sessions = [s for s in self._sessions if s.id != target_id]
        if self._active_id == target_id:
            self._active_id = self._sessions[0].id if self._sessions else None
        logger.info("Deleted session %s", target_id)
        self._persist()
        return session

    def append_message(self, session_id: str, message: Message) -> bool:
        session = self.get_session(session_id)
        if session is None:
            logger.debug("append_message: session %s is gone", session_id)
            return False
        session.messages.append(message)
        self._persist()
        return True

    def replace_history(self, session_id: str, messages: Sequence[Message]) -> bool:
        session = self.get_session(session_id)
        if session is None:
            logger.debug("replace_history: session %s is gone", session_id)
            return False
        session.messages = list(messages)
        self._persist()
        return True

    # ---------------------------
    # Persistence
    # ---------------------------
    def load_for_user(self, uid: str) -> None:
        """Seed the store from the user's mirror. Only once per user."""
        if uid == self.user_id:
            return

        self.user_id = uid
        self._sessions = []
        self._active_id = None
        self.pending_delete_id = None

        try:
            raw = self.storage.get_item(storage_key(uid))
            if raw:
                data = json.loads(raw)
                if not isinstance(data, list):
                    raise ValueError("expected a list of sessions")
                self._sessions = [ChatSession.from_dict(d) for d in data]
        except (PersistenceFailure, ValueError, KeyError, TypeError) as e:
            self._sessions = []
            self._warn(f"Could not load saved chats: {e}")

        if self._sessions:
            self._active_id = self._sessions[-1].id
        logger.info("Loaded %d session(s) for user %s", len(self._sessions), uid)

    def clear(self) -> None:
        """Forget in-memory state (e.g. on sign-out). The mirror is untouched."""
        self.user_id = None
        self._sessions = []
        self._active_id = None
        self.pending_delete_id = None

    def _persist(self) -> None:
        if self.user_id is None:
            return
        try:
            payload = json.dumps([s.to_dict() for s in self._sessions])
            self.storage.set_item(storage_key(self.user_id), payload)
        except (PersistenceFailure, TypeError, ValueError) as e:
            self._warn(f"Could not save chats; they will be lost on reload. ({e})")

    def _warn(self, text: str) -> None:
        logger.warning(text)
        self._warnings.append(text)
