# chatbridge/llm/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..config import GeminiSettings

JSON = dict[str, Any]


class ProviderError(Exception):
    """Base class for failures raised by the LLM layer itself."""


class MissingCredentialsError(ProviderError):
    """Raised instead of calling the provider when no API key is configured."""


class MalformedResponseError(ProviderError):
    """Raised when a 2xx response carries no usable candidate text."""


class ProviderAdapter(ABC):
    """
    Strategy interface for each provider.
    Concrete adapters produce a request and extract the response text.
    """

    def __init__(self, cfg: GeminiSettings):
        self.cfg = cfg

    # ---------- helpers ----------
    def _model(self)        -> str  : return self.cfg.model
    def _temperature(self)  -> float: return self.cfg.temperature
    def _max_tokens(self)   -> int  : return self.cfg.max_output_tokens
    def _top_p(self)        -> float: return self.cfg.top_p
    def _top_k(self)        -> int  : return self.cfg.top_k

    # ---------- interface ----------
    @abstractmethod
    def build_request(
        self, prompt: str
    ) -> tuple[str, dict[str, str], dict[str, str], JSON]:
        """
        → (path, query_params, headers, json_payload)
        """
        ...

    @abstractmethod
    def parse_response(self, data: Any) -> str | None:
        """
        Return the generated text, or None when the payload has none.
        """
        ...
