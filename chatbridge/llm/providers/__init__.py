from .gemini import GeminiAdapter

__all__ = [
    "GeminiAdapter",
]
