"""
Purpose: Thin client wrapper around OpenAI.
One place for auth, retries, model options, response/usage normalization.

Extensibility:
- Add other providers without touching the controller; anything with a
  matching chat(messages, settings) satisfies interfaces.LLMClient.

Testing: Mock SDK calls; assert it maps usage and errors correctly.
"""

from __future__ import annotations
import time
from typing import Optional

from openai import OpenAI
from openai import APIError, RateLimitError, APITimeoutError

from ..logging_utils import get_logger
from ..models import LLMSettings

logger = get_logger(__name__)

RETRY_DELAYS = (0.5, 1.0, 2.0, 4.0)


class OpenAILLMClient:
    def __init__(self, api_key: str, *, retry_delays=RETRY_DELAYS):
        self.api_key = api_key
        if not self.api_key:
            raise RuntimeError("Missing OPENAI_API_KEY")
        self.retry_delays = tuple(retry_delays)
        try:
            self.client = OpenAI(api_key=self.api_key)
        except Exception as e:
            raise RuntimeError(f"Failed to initialize OpenAI client: {e}") from e

    def _with_retries(self, fn, *args, **kwargs):
        for delay in self.retry_delays:
            try:
                return fn(*args, **kwargs)
            except (RateLimitError, APITimeoutError, APIError) as e:
                logger.warning("OpenAI call failed (%s); retrying in %.1fs", e, delay)
                time.sleep(delay)
        return fn(*args, **kwargs)

    def chat(
        self,
        messages: list[dict],
        settings: LLMSettings,
        system: Optional[str] = None,
    ) -> tuple[str, dict]:
        payload = []
        if system:
            payload.append({"role": "system", "content": system})
        payload.extend(messages)

        def call_cc():
            return self.client.chat.completions.create(
                model=settings.model,
                messages=payload,
                temperature=settings.temperature,
                top_p=settings.top_p,
                max_tokens=settings.max_tokens,
                frequency_penalty=settings.frequency_penalty,
                presence_penalty=settings.presence_penalty,
            )

        cc = self._with_retries(call_cc)
        text = cc.choices[0].message.content or ""
        usage = getattr(cc, "usage", None)
        tokens_in = getattr(usage, "prompt_tokens", 0) if usage else 0
        tokens_out = getattr(usage, "completion_tokens", 0) if usage else 0
        return text, {
            "model": cc.model,
            "tokens_in": tokens_in,
            "tokens_out": tokens_out,
            "raw": cc,
        }
