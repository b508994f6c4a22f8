"""
Purpose: The single orchestration point for the chat. Drives one
question/answer exchange against the active session and forwards session
management to the store. Prevents UI from knowing how prompts/LLM/storage work.

Exchange protocol:
- Idle: guard rejects empty input, a second pending exchange on the same
  session, or no active session.
- Optimistic append: user message goes into the store, the draft is cleared,
  the session is marked pending.
- Pending: transcript (full history incl. the new user turn) + document +
  question go to the tutor call.
- Resolved: success appends the model message and starts its reveal;
  failure restores the pre-exchange history and the draft text.

Completions are applied by session id. Each exchange carries its own id and
settles at most once: a replayed completion, or one for a session deleted
in the meantime, does nothing.

Testing: Pure unit tests with fakes: a stub tutor call returning
TutorSuccess / TutorFailure, in-memory storage.
"""

from __future__ import annotations
import itertools
from typing import Optional

from .errors import StaleSessionReference
from .interfaces import TutorCall
from .logging_utils import get_logger
from .models import (
    ExchangeOutcome,
    ExchangePhase,
    ExchangeStatus,
    Message,
    MessageRole,
    PendingExchange,
    TutorFailure,
    TutorRequest,
    TutorResult,
    TutorSuccess,
)
from .persistence.session_store import SessionStore
from .prompts import DefaultPromptFactory
from .reveal import RevealAnimator
from .services.pricing import estimate_cost
from .services.security import DefaultSecurity

logger = get_logger(__name__)

FAILURE_NOTICE = "Failed to get a response from the AI. Please try again."


class TutorChatController:
    def __init__(
        self,
        store: SessionStore,
        tutor_call: Optional[TutorCall],
        *,
        reveal: Optional[RevealAnimator] = None,
        security: Optional[DefaultSecurity] = None,
    ):
        self.store = store
        self.tutor_call = tutor_call
        self.reveal = reveal or RevealAnimator()
        self.security = security or store.security
        self.prompts = DefaultPromptFactory()

        self.input_text: str = ""
        self.simple_mode: bool = False
        # session id -> id of its outstanding exchange
        self._pending: dict[str, int] = {}
        self._exchange_ids = itertools.count(1)
        self._notifications: list[str] = []

        self.tokens_in: int = 0
        self.tokens_out: int = 0
        self.model_used: Optional[str] = None

    def is_ready(self) -> bool:
        """True if the controller can run exchanges (has a tutor call)."""
        return self.tutor_call is not None

    def reset(self) -> None:
        """Forget in-memory sessions, pending marks, draft and token counters."""
        self.reveal.cancel()
        self.store.clear()
        self._pending.clear()
        self._notifications = []
        self.input_text = ""
        self.tokens_in = self.tokens_out = 0
        self.model_used = None

    def is_pending(self, session_id: Optional[str]) -> bool:
        return session_id in self._pending

    def phase(self, session_id: Optional[str]) -> ExchangePhase:
        return ExchangePhase.PENDING if self.is_pending(session_id) else ExchangePhase.IDLE

    def notify(self, text: str) -> None:
        self._notifications.append(text)

    def drain_notifications(self) -> list[str]:
        """Controller errors first, then store warnings."""
        out, self._notifications = self._notifications, []
        return out + self.store.drain_warnings()

    def estimated_cost(self) -> float:
        return estimate_cost(self.model_used or "", self.tokens_in, self.tokens_out)

    # ---------------------------
    # Session management
    # ---------------------------
    def new_session(self, file_name: str, data_uri: str, media_type: str, *, source_file=None) -> str:
        """Raises InvalidAttachmentType; the caller shows it to the user."""
        session_id = self.store.create_session(
            file_name, data_uri, media_type, source_file=source_file
        )
        self.reveal.cancel()
        return session_id

    def select_session(self, session_id: str) -> None:
        self.reveal.cancel()
        self.store.select_session(session_id)

    def request_delete(self, session_id: str) -> None:
        self.store.request_delete(session_id)

    def cancel_delete(self) -> None:
        self.store.cancel_delete()

    def confirm_delete(self):
        self.reveal.cancel()
        removed = self.store.confirm_delete()
        if removed is not None:
            self._pending.pop(removed.id, None)
        return removed

    # ---------------------------
    # Exchange
    # ---------------------------
    def begin_exchange(self, text: str) -> Optional[PendingExchange]:
        """Guard + optimistic append. Returns None when the guard rejects."""
        session = self.store.active_session()
        if not (text or "").strip() or session is None or self.is_pending(session.id):
            self.input_text = ""
            return None
        try:
            self.security.validate_user_input(text)
        except ValueError as e:
            self._notifications.append(str(e))
            self.input_text = text
            return None

        self.reveal.cancel()
        snapshot = tuple(session.messages)
        self.store.append_message(session.id, Message(MessageRole.USER, text))
        self.input_text = ""
        exchange_id = next(self._exchange_ids)
        self._pending[session.id] = exchange_id
        return PendingExchange(
            session_id=session.id, question=text, snapshot=snapshot, exchange_id=exchange_id
        )

    def build_request(self, pending: PendingExchange) -> Optional[TutorRequest]:
        session = self.store.get_session(pending.session_id)
        if session is None:
            return None
        return TutorRequest(
            document_data_uri=session.source_data_uri,
            document_name=session.source_file_name,
            question=self.security.sanitize_for_prompt(pending.question),
            transcript=self.security.sanitize_for_prompt(
                self.prompts.render_transcript(session.messages)
            ),
            simple_mode=self.simple_mode,
        )

    def is_outstanding(self, pending: PendingExchange) -> bool:
        """True until this exact exchange has been completed or discarded."""
        return self._pending.get(pending.session_id) == pending.exchange_id

    def complete_exchange(
        self, pending: PendingExchange, result: TutorResult
    ) -> ExchangeOutcome:
        if not self.is_outstanding(pending):
            logger.info("Ignoring completion for settled exchange %s", pending.exchange_id)
            return ExchangeOutcome(ExchangeStatus.STALE, session_id=pending.session_id)
        del self._pending[pending.session_id]
        try:
            session = self.store.require_session(pending.session_id)
        except StaleSessionReference as e:
            logger.info("Dropping completion: %s", e)
            return ExchangeOutcome(ExchangeStatus.STALE, session_id=pending.session_id)

        if isinstance(result, TutorSuccess):
            self.store.append_message(session.id, Message(MessageRole.MODEL, result.answer))
            self.reveal.start(session.id, len(session.messages) - 1, result.answer)
            self.tokens_in += int(result.meta.get("tokens_in", 0))
            self.tokens_out += int(result.meta.get("tokens_out", 0))
            self.model_used = result.meta.get("model") or self.model_used
            return ExchangeOutcome(
                ExchangeStatus.ANSWERED, session_id=session.id, answer=result.answer
            )

        reason = result.reason if isinstance(result, TutorFailure) else repr(result)
        self.store.replace_history(session.id, pending.snapshot)
        self.input_text = pending.question
        self._notifications.append(FAILURE_NOTICE)
        return ExchangeOutcome(
            ExchangeStatus.FAILED,
            session_id=session.id,
            error=reason,
            restored_input=pending.question,
        )

    def resolve(self, pending: PendingExchange) -> ExchangeOutcome:
        """Pending -> Resolved: call the tutor and reconcile by session id."""
        if not self.is_outstanding(pending):
            return ExchangeOutcome(ExchangeStatus.STALE, session_id=pending.session_id)
        request = self.build_request(pending)
        if request is None:
            return self.complete_exchange(pending, TutorFailure("Session disappeared."))
        if not self.is_ready():
            return self.complete_exchange(pending, TutorFailure("No LLM client configured."))

        try:
            result = self.tutor_call(request)
        except Exception as e:
            logger.exception("Tutor call raised instead of returning a failure")
            result = TutorFailure(reason=str(e), error=e)
        return self.complete_exchange(pending, result)

    def submit(self, text: str) -> ExchangeOutcome:
        """One full exchange: begin, call the tutor, reconcile."""
        if not self.is_ready():
            return ExchangeOutcome(ExchangeStatus.REJECTED, error="No LLM client configured.")

        pending = self.begin_exchange(text)
        if pending is None:
            return ExchangeOutcome(ExchangeStatus.REJECTED)
        return self.resolve(pending)
