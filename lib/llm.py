# =============================================================================
# lib/llm.py - Text Completion Capability
# =============================================================================
# The agents only need one thing from a language model: given a system
# instruction and a user message, return text. This module defines that
# contract and an OpenAI-compatible implementation (works with any endpoint
# that speaks the chat completions API, e.g. a LiteLLM proxy).
#
# Provider failures are logged and reported as an empty string; the Agent
# layer turns an empty completion into EmptyCompletionError.
#
# Usage:
#   from lib.llm import OpenAICompletion
#   llm = OpenAICompletion()
#   text = llm.complete("You are a SQL generator.", "count orders", temperature=0.2)
# =============================================================================

from __future__ import annotations

import logging
from typing import Protocol

from openai import OpenAI

from app.config import settings

logger = logging.getLogger(__name__)


class TextCompletion(Protocol):
    """Anything that can turn (system prompt, user message) into text."""

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        ...


class OpenAICompletion:
    """
    Chat-completions backed TextCompletion.

    Attributes:
        model: Model ID sent with every request
        temperature: Default temperature when the caller passes None
        max_tokens: Default completion length when the caller passes None
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        client: OpenAI | None = None,
    ):
        self.client = client or OpenAI(
            api_key=api_key or settings.OPENAI_API_KEY,
            base_url=base_url or settings.OPENAI_BASE_URL,
        )
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.LLM_TEMPERATURE
        self.max_tokens = max_tokens or settings.LLM_MAX_TOKENS

        logger.info(f"OpenAICompletion initialized with model={self.model}")

    def complete(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                temperature=temperature if temperature is not None else self.temperature,
                max_tokens=max_tokens or self.max_tokens,
            )
        except Exception as e:
            logger.error(f"OpenAI API call failed: {e}")
            return ""

        if not response.choices:
            logger.warning("OpenAI response had no choices")
            return ""

        content = response.choices[0].message.content or ""
        logger.debug(f"OpenAI response: {content[:200]}...")
        return content
