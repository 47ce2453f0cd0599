# chatbridge/llm/providers/gemini.py
from __future__ import annotations

from typing import Any

from ..base import JSON, ProviderAdapter


def _first(items: Any) -> Any:
    if isinstance(items, list) and items:
        return items[0]
    return None


class GeminiAdapter(ProviderAdapter):
    """
    Gemini `generateContent` on the v1 REST API.
    The API key travels as the `key` query parameter.
    """

    def build_request(
        self, prompt: str
    ) -> tuple[str, dict[str, str], dict[str, str], JSON]:
        payload: JSON = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._temperature(),
                "maxOutputTokens": self._max_tokens(),
                "topP": self._top_p(),
                "topK": self._top_k(),
            },
        }

        params = {"key": self.cfg.api_key}
        headers = {"Content-Type": "application/json"}
        return (f"/models/{self._model()}:generateContent", params, headers, payload)

    def parse_response(self, data: Any) -> str | None:
        if not isinstance(data, dict):
            return None
        candidate = _first(data.get("candidates"))
        if not isinstance(candidate, dict):
            return None
        content = candidate.get("content")
        if not isinstance(content, dict):
            return None
        part = _first(content.get("parts"))
        if not isinstance(part, dict):
            return None
        text = part.get("text")
        if not isinstance(text, str) or not text:
            return None
        return text
