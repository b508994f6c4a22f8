"""
Purpose: The remote tutoring call. Given the document, the question and a
flat transcript, ask the LLM for an answer.

The call is stateless: all context is resupplied on every request. Errors
never escape; they come back as TutorFailure so the controller can branch
on the result type.
"""

from __future__ import annotations
from functools import partial

from ..errors import RemoteCallFailure
from ..interfaces import LLMClient, PromptFactory, TutorCall
from ..logging_utils import get_logger
from ..models import LLMSettings, TutorFailure, TutorRequest, TutorResult, TutorSuccess

logger = get_logger(__name__)


def ask_tutor(
    request: TutorRequest,
    *,
    llm: LLMClient,
    prompts: PromptFactory,
    settings: LLMSettings,
) -> TutorResult:
    system = prompts.build_system(simple_mode=request.simple_mode)
    messages = prompts.assemble(system=system, request=request)

    try:
        answer, meta = llm.chat(messages, settings)
        if not (answer or "").strip():
            raise RemoteCallFailure("The model returned an empty answer.")
    except Exception as e:
        logger.error("Tutor call failed for %r: %s", request.document_name, e)
        return TutorFailure(reason=str(e) or type(e).__name__, error=e)

    logger.info(
        "Tutor answered (%s chars, model=%s)", len(answer), meta.get("model")
    )
    return TutorSuccess(answer=answer, meta=dict(meta))


def make_tutor_call(
    *, llm: LLMClient, prompts: PromptFactory, settings: LLMSettings
) -> TutorCall:
    """Bind the collaborators so the controller only passes a request."""
    return partial(ask_tutor, llm=llm, prompts=prompts, settings=settings)
