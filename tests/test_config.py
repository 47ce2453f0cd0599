import logging

import pytest
from pydantic import ValidationError

from chatbridge.config import (
    DEFAULT_MODEL,
    Configuration,
    GeminiSettings,
    HttpConfig,
    configure_logging,
    create_http_config_from_dict,
)


def test_packaged_defaults_without_env():
    config = Configuration(environ={})
    gemini = config.gemini

    assert gemini.base_url == "https://generativelanguage.googleapis.com/v1"
    assert gemini.model == DEFAULT_MODEL
    assert gemini.temperature == 0.7
    assert gemini.max_output_tokens == 300
    assert gemini.top_p == 0.9
    assert gemini.top_k == 40
    assert gemini.api_key == ""
    assert config.is_degraded is True
    assert config.http.timeout == 30.0


def test_env_overrides_and_normalization():
    env = {
        "LLM_BASE_URL": "https://example.test/v1beta//",
        "GEMINI_API_KEY": "secret",
        "LLM_MODEL": "  gemini-1.5-pro  ",
        "LLM_TEMPERATURE": "0.2",
        "LLM_MAX_TOKENS": "512",
        "LLM_TOP_P": "0.5",
        "LLM_TOP_K": "8",
    }
    gemini = Configuration(environ=env).gemini

    assert gemini.base_url == "https://example.test/v1beta"
    assert gemini.model == "gemini-1.5-pro"
    assert gemini.temperature == 0.2
    assert gemini.max_output_tokens == 512
    assert gemini.top_p == 0.5
    assert gemini.top_k == 8
    assert gemini.is_degraded is False


@pytest.mark.parametrize("legacy", ["text-bison-001", "gpt-4o", "models/gemini-pro"])
def test_legacy_model_replaced_with_default(legacy):
    gemini = Configuration(environ={"LLM_MODEL": legacy}).gemini
    assert gemini.model == DEFAULT_MODEL


def test_settings_are_immutable():
    settings = GeminiSettings(api_key="k")
    with pytest.raises(ValidationError):
        settings.model = "gemini-other"  # type: ignore[misc]


def test_invalid_number_fails_at_startup():
    with pytest.raises(ValueError, match="LLM_MAX_TOKENS"):
        Configuration(environ={"LLM_MAX_TOKENS": "lots"})


def test_startup_notice_degraded(caplog):
    with caplog.at_level(logging.INFO, logger="chatbridge.config"):
        Configuration(environ={})

    records = [r for r in caplog.records if r.name == "chatbridge.config"]
    assert len(records) == 1
    assert records[0].levelno == logging.WARNING
    assert "GEMINI_API_KEY" in records[0].getMessage()


def test_startup_notice_active(caplog):
    with caplog.at_level(logging.INFO, logger="chatbridge.config"):
        Configuration(environ={"GEMINI_API_KEY": "secret"})

    records = [r for r in caplog.records if r.name == "chatbridge.config"]
    assert len(records) == 1
    assert records[0].levelno == logging.INFO
    assert DEFAULT_MODEL in records[0].getMessage()
    assert "secret" not in records[0].getMessage()


def test_custom_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "llm:\n"
        "  base_url: http://localhost:9000/v1/\n"
        "  model: gemini-2.0-flash\n"
        "  max_tokens: 64\n"
        "http:\n"
        "  timeout: 5\n"
        "logging:\n"
        "  level: DEBUG\n",
        encoding="utf-8",
    )
    config = Configuration(config_path=str(path), environ={"LLM_TOP_K": "3"})

    assert config.gemini.base_url == "http://localhost:9000/v1"
    assert config.gemini.model == "gemini-2.0-flash"
    assert config.gemini.max_output_tokens == 64
    assert config.gemini.top_k == 3
    assert config.http.timeout == 5.0
    assert config.get_logging_config() == {"level": "DEBUG"}
    assert config.get_config_dict()["llm"]["model"] == "gemini-2.0-flash"


def test_http_config_from_dict_defaults():
    assert create_http_config_from_dict({}) == HttpConfig()
    cfg = create_http_config_from_dict({"http": {"timeout": 12.5, "max_connections": 4}})
    assert cfg.timeout == 12.5
    assert cfg.max_connections == 4
    assert cfg.max_keepalive_connections == 20


def test_configure_logging_uses_yaml_section(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))

    configure_logging(Configuration(environ={}))

    assert calls == [
        {
            "level": logging.INFO,
            "format": "%(asctime)s - %(levelname)s - %(message)s",
        }
    ]
