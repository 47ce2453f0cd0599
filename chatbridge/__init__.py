"""
Chat bridge: forwards user messages to Gemini and falls back to canned
replies when the provider cannot answer.
"""

from __future__ import annotations

from .chat_service import ChatService
from .config import Configuration, GeminiSettings, configure_logging
from .schemas import EVENT_ONE, EVENT_TWO, EventDecoration, GenerationResult

__all__ = [
    "EVENT_ONE",
    "EVENT_TWO",
    "ChatService",
    "Configuration",
    "EventDecoration",
    "GeminiSettings",
    "GenerationResult",
    "configure_logging",
]
