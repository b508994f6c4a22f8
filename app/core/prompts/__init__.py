"""Facade over the tutor prompt modules (DefaultPromptFactory API)."""

from __future__ import annotations
from typing import Iterable

from core.models import Message, TutorRequest
from . import tutor as _tutor
from .common import assemble as _assemble
from .common import render_transcript as _render_transcript


class DefaultPromptFactory:
    # TUTOR
    def build_system(self, *, simple_mode: bool = False) -> str:
        return _tutor.build_tutor_system(simple_mode=simple_mode)

    def tutor_instruction(self, *, question: str, transcript: str) -> str:
        return _tutor.tutor_instruction(question=question, transcript=transcript)

    # HISTORY
    def render_transcript(self, history: Iterable[Message]) -> str:
        return _render_transcript(history)

    def assemble(self, *, system: str, request: TutorRequest) -> list[dict]:
        instruction = self.tutor_instruction(
            question=request.question, transcript=request.transcript
        )
        return _assemble(system=system, request=request, instruction=instruction)
