"""
Typing-style reveal of a model answer that is already fully received.

Only one message can be revealing at a time. Starting a new reveal replaces
the old one. cancel() makes every message render in full at once. The
animator never touches stored messages. It only decides how much of a
message's text the view shows.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional


@dataclass(frozen=True)
class RevealTarget:
    session_id: str
    message_index: int
    text: str


class RevealAnimator:
    def __init__(self, *, step_chars: int = 3, interval_s: float = 0.02) -> None:
        if step_chars < 1:
            raise ValueError("step_chars must be >= 1")
        self.step_chars = step_chars
        self.interval_s = interval_s
        self.target: Optional[RevealTarget] = None
        self.shown: int = 0

    def start(self, session_id: str, message_index: int, text: str) -> None:
        self.target = RevealTarget(session_id, message_index, text)
        self.shown = 0

    def cancel(self) -> None:
        self.target = None
        self.shown = 0

    def settle(self) -> None:
        self.cancel()

    def is_revealing(self, session_id: str, message_index: int) -> bool:
        t = self.target
        return (
            t is not None
            and t.session_id == session_id
            and t.message_index == message_index
        )

    def drop_if_stale(self, live_session_ids) -> None:
        """Forget a reveal whose session has been deleted."""
        if self.target is not None and self.target.session_id not in set(live_session_ids):
            self.cancel()

    def advance(self) -> str:
        """Grow the visible prefix by one step and return it."""
        if self.target is None:
            return ""
        self.shown = min(self.shown + self.step_chars, len(self.target.text))
        return self.target.text[: self.shown]

    @property
    def done(self) -> bool:
        return self.target is None or self.shown >= len(self.target.text)

    def frames(self) -> Iterator[str]:
        """
        Yield strictly growing prefixes ending with the full text, then
        settle. The caller owns the cadence (sleep interval_s per frame).
        Stops early if the reveal is cancelled between frames.
        """
        target = self.target
        if target is None:
            return
        while self.target is target and not self.done:
            yield self.advance()
        if self.target is target:
            self.settle()

    def visible_text(self, session_id: str, message_index: int, full_text: str) -> str:
        if self.is_revealing(session_id, message_index):
            return full_text[: self.shown]
        return full_text
