"""
Result and decoration models for the chat bridge (Pydantic v2).
"""
from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PROVIDER_NAME = "gemini"


class EventDecoration(BaseModel):
    """Prompt prefix and context tags that distinguish an event lane."""

    model_config = ConfigDict(frozen=True)

    marker: str
    event_type: str
    processing_mode: str

    def decorate_prompt(self, message: str) -> str:
        return f"{self.marker} {message}"

    def decorate_context(self, context: Any) -> dict[str, Any]:
        """Merge the event tags into `context`; tags win on key clashes."""
        if context is None:
            merged: dict[str, Any] = {}
        elif isinstance(context, dict):
            merged = dict(context)
        else:
            # Non-mapping context is kept alongside the tags
            merged = {"context": context}
        merged["event_type"] = self.event_type
        merged["processing_mode"] = self.processing_mode
        return merged


EVENT_ONE = EventDecoration(
    marker="[EVENTO_UNO]", event_type="evento_uno", processing_mode="primary_block"
)
EVENT_TWO = EventDecoration(
    marker="[EVENTO_DOS]", event_type="evento_dos", processing_mode="secondary_block"
)


class GenerationResult(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    text: str
    processed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    model_used: str
    provider: str = PROVIDER_NAME
    event_type: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON-ready dict handed to callers."""
        return self.model_dump(mode="json", exclude_none=True)
