"""
Response cleaning and canned fallback replies.
"""

from __future__ import annotations

import random
import re

# A leading line that echoes one of the prompt annotations, plus its line
# break and an optional blank line after it.
_USER_ECHO = re.compile(r"^.*Usuario:.*?\n\n?", re.IGNORECASE)
_CONTEXT_ECHO = re.compile(r"^.*Contexto:.*?\n\n?", re.IGNORECASE)

FALLBACK_RESPONSES: tuple[str, ...] = (
    "Entiendo tu consulta. ¿En qué más puedo ayudarte?",
    "Gracias por tu mensaje. Si me das un poco más de detalle, puedo ayudarte mejor.",
    "He procesado tu solicitud. ¿Necesitas información adicional?",
    "Comprendo lo que necesitas. Permíteme ayudarte con eso.",
    "Recibido tu mensaje. Estoy preparando una respuesta para ti.",
)


def clean_response(text: str) -> str:
    """Strip prompt-template echoes from the start of `text` and trim it.

    Each marker line is removed at most once, in template order.
    """
    cleaned = _CONTEXT_ECHO.sub("", str(text), count=1)
    cleaned = _USER_ECHO.sub("", cleaned, count=1)
    return cleaned.strip()


def get_fallback_response(rng: random.Random | None = None) -> str:
    """Pick one fallback reply uniformly at random."""
    return (rng or random).choice(FALLBACK_RESPONSES)
