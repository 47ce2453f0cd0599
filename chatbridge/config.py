"""Configuration management for the chat bridge."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-flash-latest"
MODEL_FAMILY_PREFIX = "gemini"

# env var -> (key in the `llm` YAML section, converter)
_ENV_OVERRIDES: dict[str, tuple[str, type]] = {
    "LLM_BASE_URL": ("base_url", str),
    "GEMINI_API_KEY": ("api_key", str),
    "LLM_MODEL": ("model", str),
    "LLM_TEMPERATURE": ("temperature", float),
    "LLM_MAX_TOKENS": ("max_tokens", int),
    "LLM_TOP_P": ("top_p", float),
    "LLM_TOP_K": ("top_k", int),
}


class GeminiSettings(BaseModel):
    """Immutable connection and generation parameters for the provider."""

    model_config = ConfigDict(frozen=True)

    provider: str = "gemini"
    base_url: str = "https://generativelanguage.googleapis.com/v1"
    api_key: str = ""
    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_output_tokens: int = 300
    top_p: float = 0.9
    top_k: int = 40

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("model")
    @classmethod
    def _normalize_model(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(MODEL_FAMILY_PREFIX):
            # Legacy or foreign model names are replaced silently
            return DEFAULT_MODEL
        return value

    @property
    def is_degraded(self) -> bool:
        """True when no API key is configured and every call falls back."""
        return not self.api_key


class HttpConfig(BaseModel):
    """Configuration for the provider HTTP connection pool."""

    timeout: float = 30.0
    max_keepalive_connections: int = 20
    max_connections: int = 100
    keepalive_expiry: float = 30.0


def create_http_config_from_dict(config_dict: dict[str, Any]) -> HttpConfig:
    """
    Create HttpConfig from a dictionary (e.g., from YAML config).

    Args:
        config_dict: Dictionary containing an optional `http` section

    Returns:
        HttpConfig instance with validated settings
    """
    http_config = config_dict.get("http") or {}

    return HttpConfig(
        timeout=http_config.get("timeout", 30.0),
        max_keepalive_connections=http_config.get("max_keepalive_connections", 20),
        max_connections=http_config.get("max_connections", 100),
        keepalive_expiry=http_config.get("keepalive_expiry", 30.0),
    )


class Configuration:
    """Resolves provider settings from YAML defaults and environment variables.

    Constructed once at process start and passed explicitly to the services
    that need it.
    """

    def __init__(
        self,
        config_path: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize configuration from YAML and environment variables.

        Args:
            config_path: YAML file to load; defaults to the packaged config.yaml.
            environ: Mapping to read overrides from; defaults to os.environ
                after loading a .env file.
        """
        if environ is None:
            self.load_env()
            environ = os.environ
        self._config = self._load_yaml_config(config_path)
        self._gemini = self._build_gemini_settings(environ)
        self._http = create_http_config_from_dict(self._config)
        self._log_startup_notice()

    @staticmethod
    def load_env() -> None:
        """Load environment variables from .env file."""
        load_dotenv()

    @staticmethod
    def _load_yaml_config(config_path: str | None) -> dict[str, Any]:
        """Load configuration from YAML file."""
        if config_path is None:
            config_path = os.path.join(os.path.dirname(__file__), "config.yaml")
        with open(config_path, encoding="utf-8") as file:
            return yaml.safe_load(file) or {}

    def _build_gemini_settings(self, environ: Mapping[str, str]) -> GeminiSettings:
        values: dict[str, Any] = dict(self._config.get("llm") or {})

        for env_key, (field, convert) in _ENV_OVERRIDES.items():
            raw = environ.get(env_key)
            if raw is None or raw == "":
                continue
            try:
                values[field] = convert(raw.strip())
            except ValueError as e:
                raise ValueError(
                    f"Invalid value for {env_key}: {raw!r} (expected {convert.__name__})"
                ) from e

        # YAML uses the short `max_tokens` spelling
        if "max_tokens" in values:
            values["max_output_tokens"] = values.pop("max_tokens")

        return GeminiSettings(**values)

    def _log_startup_notice(self) -> None:
        if self._gemini.is_degraded:
            logger.warning(
                "GEMINI_API_KEY is not configured; using simulated fallback responses"
            )
        else:
            logger.info("Gemini provider active with model: %s", self._gemini.model)

    @property
    def gemini(self) -> GeminiSettings:
        """Get the resolved provider settings."""
        return self._gemini

    @property
    def http(self) -> HttpConfig:
        """Get HTTP connection settings."""
        return self._http

    @property
    def is_degraded(self) -> bool:
        """True when running without an API key."""
        return self._gemini.is_degraded

    def get_config_dict(self) -> dict[str, Any]:
        """Get the full configuration dictionary loaded from YAML.

        Returns:
            The complete configuration dictionary.
        """
        return self._config

    def get_logging_config(self) -> dict[str, Any]:
        """Get logging configuration from YAML.

        Returns:
            Logging configuration dictionary.
        """
        return self._config.get("logging") or {}


def configure_logging(config: Configuration) -> None:
    """Apply the YAML logging section to the root logger."""
    logging_cfg = config.get_logging_config()
    level_name = str(logging_cfg.get("level", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=logging_cfg.get(
            "format", "%(asctime)s - %(levelname)s - %(message)s"
        ),
    )
