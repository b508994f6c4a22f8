"""Shared prompt helpers used across prompt modules."""

from __future__ import annotations
from typing import Iterable

from ..models import Message, TutorRequest


def render_transcript(history: Iterable[Message]) -> str:
    """Flat transcript, one "<role>: <content>" line per turn."""
    return "\n".join(f"{m.role.value}: {m.content}" for m in history)


def document_part(*, file_name: str, data_uri: str) -> dict:
    """OpenAI chat content part carrying the PDF inline as a data URI."""
    return {
        "type": "file",
        "file": {"filename": file_name or "document.pdf", "file_data": data_uri},
    }


def assemble(*, system: str, request: TutorRequest, instruction: str) -> list[dict]:
    return [
        {"role": "system", "content": system},
        {
            "role": "user",
            "content": [
                document_part(
                    file_name=request.document_name,
                    data_uri=request.document_data_uri,
                ),
                {"type": "text", "text": instruction},
            ],
        },
    ]
