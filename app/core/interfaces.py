"""
Abstractions for pluggable services. Inversion of control: core depends
on interfaces, not concrete services. Enables fakes/mocks and future swaps.
Protocols define what services or components can do,
without saying how they do it.

Common protocols:
- LLMClient.chat(messages, settings) -> (reply, meta)
- PromptFactory.build_system(...) -> str & assemble(...) -> list[dict]
- KeyValueStorage.get_item / set_item / remove_item (browser-storage shaped)
- IdentityProvider.status / current_user / sign_in / sign_out

Testing: Use simple fake implementations to test the controller without network calls.
"""

from __future__ import annotations
from typing import Optional, Protocol, Callable
from .models import (
    AuthStatus,
    LLMSettings,
    Message,
    TutorRequest,
    TutorResult,
    UserProfile,
)


class LLMClient(Protocol):
    def chat(
        self,
        messages: list[dict],
        settings: LLMSettings,
        system: Optional[str] = None,
    ) -> tuple[str, dict]: ...


class PromptFactory(Protocol):
    def build_system(self, *, simple_mode: bool = False) -> str: ...

    def render_transcript(self, history: list[Message]) -> str: ...

    def tutor_instruction(self, *, question: str, transcript: str) -> str: ...

    def assemble(self, *, system: str, request: TutorRequest) -> list[dict]: ...


# The remote tutoring call as seen by the controller.
TutorCall = Callable[[TutorRequest], TutorResult]


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class IdentityProvider(Protocol):
    def status(self) -> AuthStatus: ...

    def current_user(self) -> Optional[UserProfile]: ...

    def sign_in(self) -> bool: ...

    def sign_out(self) -> None: ...
