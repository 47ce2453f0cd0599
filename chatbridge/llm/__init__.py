"""
LLM provider layer: adapters that shape provider requests and a client that
sends them.
"""

from __future__ import annotations

from .base import MalformedResponseError, MissingCredentialsError, ProviderError
from .client import FailureKind, LLMClient, classify_error

__all__ = [
    "FailureKind",
    "LLMClient",
    "MalformedResponseError",
    "MissingCredentialsError",
    "ProviderError",
    "classify_error",
]
