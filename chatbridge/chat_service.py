"""
Chat Service for the chat bridge

This module turns a user message into a single provider call:
- Context annotation of the outgoing prompt
- Event decoration for the two event lanes
- One failure boundary that converts every provider error into a fallback reply
- Result metadata (timestamp, model, provider, event type)
"""

from __future__ import annotations

import json
import logging
import random
from typing import Any

import httpx

from chatbridge.config import Configuration
from chatbridge.llm import FailureKind, LLMClient, classify_error
from chatbridge.responses import clean_response, get_fallback_response
from chatbridge.schemas import (
    EVENT_ONE,
    EVENT_TWO,
    EventDecoration,
    GenerationResult,
)

logger = logging.getLogger(__name__)


def compose_prompt(prompt: str, context: Any = None) -> str:
    """Prefix `prompt` with a serialized context annotation when one is given.

    `None` and falsy scalars (`""`, `0`, `False`) add no annotation; empty
    containers still do.
    """
    if context is None:
        return prompt
    if not isinstance(context, dict | list | tuple) and not context:
        return prompt
    serialized = json.dumps(
        context, ensure_ascii=False, separators=(",", ":"), default=str
    )
    return f"Contexto: {serialized}\n\nUsuario: {prompt}"


class ChatService:
    """
    Request adapter around the LLM client.
    1. Annotates the message with its context
    2. Asks the provider for a completion
    3. Cleans the reply, or substitutes a fallback if anything went wrong
    4. Wraps the text with result metadata
    """

    def __init__(
        self, llm_client: LLMClient, rng: random.Random | None = None
    ) -> None:
        self.llm_client = llm_client
        self.rng = rng

    @classmethod
    def from_configuration(
        cls,
        config: Configuration,
        transport: httpx.AsyncBaseTransport | None = None,
        rng: random.Random | None = None,
    ) -> ChatService:
        """Build the service and its HTTP client from a loaded configuration."""
        client = LLMClient(config.gemini, config.http, transport=transport)
        return cls(client, rng=rng)

    async def __aenter__(self) -> ChatService:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.cleanup()

    @property
    def model(self) -> str:
        return self.llm_client.model

    async def call_provider(self, prompt: str, context: Any = None) -> str:
        """Return cleaned provider text, or a fallback reply. Never raises."""
        try:
            full_prompt = compose_prompt(prompt, context)
            text = clean_response(await self.llm_client.generate(full_prompt))
        except Exception as e:
            self._log_failure(e)
            return get_fallback_response(self.rng)

        if not text:
            logger.warning("Gemini reply was empty after cleaning; using fallback")
            return get_fallback_response(self.rng)
        return text

    async def process(
        self,
        message: str,
        context: Any = None,
        decoration: EventDecoration | None = None,
    ) -> GenerationResult:
        """Run one message through the provider, optionally in an event lane."""
        prompt = message
        event_type: str | None = None
        if decoration is not None:
            prompt = decoration.decorate_prompt(message)
            context = decoration.decorate_context(context)
            event_type = decoration.event_type

        text = await self.call_provider(prompt, context)
        return GenerationResult(
            text=text,
            model_used=self.model,
            provider=self.llm_client.provider,
            event_type=event_type,
        )

    async def process_message(
        self, message: str, context: Any = None
    ) -> GenerationResult:
        logger.debug("Processing message: %r (context=%r)", message, context)
        return await self.process(message, context)

    async def handle_event_one(
        self, message: str, context: Any = None
    ) -> GenerationResult:
        logger.debug("Handling event one: %r (context=%r)", message, context)
        return await self.process(message, context, EVENT_ONE)

    async def handle_event_two(
        self, message: str, context: Any = None
    ) -> GenerationResult:
        logger.debug("Handling event two: %r (context=%r)", message, context)
        return await self.process(message, context, EVENT_TWO)

    async def cleanup(self) -> None:
        """Close the underlying HTTP client."""
        await self.llm_client.close()

    # ---------- helpers ----------
    @staticmethod
    def _log_failure(error: Exception) -> None:
        kind, status = classify_error(error)
        if kind is FailureKind.MISSING_CREDENTIALS:
            logger.warning("Gemini API key missing; using simulated response")
            return

        # HTTPStatusError's str() embeds the request URL, which carries the key
        if isinstance(error, httpx.HTTPStatusError):
            detail = error.response.reason_phrase
        else:
            detail = str(error) or type(error).__name__
        logger.error(
            "Error calling Gemini (%s): %s %s",
            kind.value,
            status if status is not None else "",
            detail,
        )
        if kind is FailureKind.AUTH:
            logger.warning(
                "Gemini: invalid API key or API not enabled. Using simulated response."
            )
        elif kind is FailureKind.NOT_FOUND:
            logger.warning(
                "Gemini: model/endpoint not found. Check LLM_BASE_URL and LLM_MODEL."
            )
