# chatbridge/llm/client.py
from __future__ import annotations

import asyncio
import enum
import json
import logging

import httpx

from ..config import GeminiSettings, HttpConfig
from .base import (
    MalformedResponseError,
    MissingCredentialsError,
    ProviderAdapter,
)
from .providers import GeminiAdapter

logger = logging.getLogger(__name__)


class FailureKind(enum.Enum):
    """Why a provider call could not produce usable text."""

    MISSING_CREDENTIALS = "missing_credentials"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    TRANSPORT = "transport"
    MALFORMED = "malformed"


def classify_error(error: Exception) -> tuple[FailureKind, int | None]:
    """Map an exception raised by `LLMClient.generate` to a failure kind.

    Returns:
        The failure kind and the HTTP status code when one is available.
    """
    if isinstance(error, MissingCredentialsError):
        return FailureKind.MISSING_CREDENTIALS, None
    if isinstance(error, MalformedResponseError | json.JSONDecodeError):
        return FailureKind.MALFORMED, None
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status in (401, 403):
            return FailureKind.AUTH, status
        if status == 404:
            return FailureKind.NOT_FOUND, status
        return FailureKind.TRANSPORT, status
    return FailureKind.TRANSPORT, None


class LLMClient:
    """
    Thin façade: choose adapter, send one request, return the raw text.
    """

    def __init__(
        self,
        settings: GeminiSettings,
        http_config: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.http_config = http_config or HttpConfig()
        self.adapter: ProviderAdapter = self._make_adapter()
        self.http = httpx.AsyncClient(
            base_url=settings.base_url,
            timeout=httpx.Timeout(self.http_config.timeout),
            limits=httpx.Limits(
                max_keepalive_connections=self.http_config.max_keepalive_connections,
                max_connections=self.http_config.max_connections,
                keepalive_expiry=self.http_config.keepalive_expiry,
            ),
            transport=transport,
        )

    async def __aenter__(self) -> LLMClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    # ---------- public ----------
    @property
    def model(self) -> str:
        """Get the model name from the current configuration."""
        return self.settings.model

    @property
    def provider(self) -> str:
        return self.settings.provider

    async def generate(self, prompt: str) -> str:
        """Send `prompt` to the provider and return the first candidate text.

        Raises:
            MissingCredentialsError: No API key; no request is made.
            MalformedResponseError: 2xx response without candidate text.
            httpx.HTTPStatusError: Non-2xx response.
            httpx.HTTPError: Transport-level failure.
            TimeoutError: The overall deadline elapsed.
        """
        if self.settings.is_degraded:
            raise MissingCredentialsError("GEMINI_API_KEY is not configured")

        path, params, hdrs, payload = self.adapter.build_request(prompt)
        logger.debug(
            "Gemini request -> base=%s model=%s path=%s",
            self.settings.base_url,
            self.model,
            path,
        )

        async with asyncio.timeout(self.http_config.timeout):
            r = await self.http.post(path, params=params, headers=hdrs, json=payload)
        r.raise_for_status()

        text = self.adapter.parse_response(r.json())
        if text is None:
            raise MalformedResponseError("Response has no candidate text")
        return text

    async def close(self) -> None:
        await self.http.aclose()

    # ---------- helpers ----------
    def _make_adapter(self) -> ProviderAdapter:
        name = self.settings.provider.lower()
        if name == "gemini":
            return GeminiAdapter(self.settings)
        raise ValueError(f"Unknown LLM provider: {name}")
