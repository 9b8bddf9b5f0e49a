import pytest

from app.core.config import DEFAULT_LLM_BASE_URL, Settings
from app.core.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("GEMINI_API_KEY", "INTERNAL_API_KEY", "CORS_ORIGIN", "PORT", "MODEL_ID"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_config_defaults(clean_env):
    settings = Settings(_env_file=None)
    assert settings.port == 3001
    assert settings.cors_origin == "*"
    assert settings.cors_allowed_origins == ["*"]
    assert settings.model_id == "gemini-2.5-flash-lite"
    assert settings.llm_base_url == DEFAULT_LLM_BASE_URL
    assert settings.max_body_bytes == 1024 * 1024
    assert settings.generation_timeout == 120.0


def test_config_reads_environment(clean_env):
    clean_env.setenv("GEMINI_API_KEY", "g-key")
    clean_env.setenv("INTERNAL_API_KEY", "shh")
    clean_env.setenv("CORS_ORIGIN", "https://app.example.com, https://admin.example.com")
    clean_env.setenv("PORT", "8080")

    settings = Settings(_env_file=None)

    assert settings.gemini_api_key == "g-key"
    assert settings.internal_api_key == "shh"
    assert settings.port == 8080
    assert settings.cors_allowed_origins == ["https://app.example.com", "https://admin.example.com"]
    settings.require_secrets()


def test_empty_cors_origin_allows_all(clean_env):
    clean_env.setenv("CORS_ORIGIN", "  ")
    assert Settings(_env_file=None).cors_allowed_origins == ["*"]


def test_missing_provider_key_is_reported_first(clean_env):
    settings = Settings(internal_api_key="shh", _env_file=None)
    with pytest.raises(ConfigurationError) as exc:
        settings.require_secrets()
    assert "GEMINI_API_KEY" in str(exc.value)


def test_missing_shared_secret(clean_env):
    settings = Settings(gemini_api_key="g-key", _env_file=None)
    with pytest.raises(ConfigurationError) as exc:
        settings.require_secrets()
    assert "INTERNAL_API_KEY" in str(exc.value)


def test_settings_are_immutable(settings):
    with pytest.raises(Exception):
        settings.internal_api_key = "changed"
