"""
Pytest configuration and shared fixtures.

Provides:
- In-memory storage and a deterministic clock for the session store
- A PDF data URI fixture
- A scripted tutor call that records every request it receives
"""

import itertools

import pytest

from core.controller import TutorChatController
from core.models import TutorFailure
from core.persistence.session_store import SessionStore
from core.persistence.storage import InMemoryKeyValueStorage
from core.reveal import RevealAnimator
from core.utils.data_uri import encode_data_uri

USER_ID = "user-123"


class ScriptedTutorCall:
    """Returns queued results in order and remembers the requests."""

    def __init__(self, *results):
        self.results = list(results)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if not self.results:
            return TutorFailure("no scripted result left")
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def pdf_data_uri() -> str:
    return encode_data_uri(b"%PDF-1.4 fake pdf body", "application/pdf")


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def clock():
    """Millisecond clock that always returns the same instant."""
    return lambda: 1_700_000_000_000


@pytest.fixture
def store(storage, clock) -> SessionStore:
    s = SessionStore(storage, clock=clock)
    s.load_for_user(USER_ID)
    return s


@pytest.fixture
def tutor_call() -> ScriptedTutorCall:
    return ScriptedTutorCall()


@pytest.fixture
def controller(store, tutor_call) -> TutorChatController:
    return TutorChatController(
        store, tutor_call, reveal=RevealAnimator(step_chars=4, interval_s=0)
    )


@pytest.fixture
def counter_clock():
    ticks = itertools.count(1000)
    return lambda: next(ticks)
