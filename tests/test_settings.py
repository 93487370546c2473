import pytest

from topic_digest.errors import ConfigurationError
from topic_digest.settings import DigestSettings


def test_defaults(monkeypatch):
    for var in ("CACHE_TTL_SECONDS", "OPENAI_MODEL", "X_API_BASE_URL", "SUMMARIZER_BACKEND"):
        monkeypatch.delenv(var, raising=False)
    s = DigestSettings()
    assert s.cache_ttl_seconds == 600
    assert s.openai_model == "gpt-4o-mini"
    assert s.x_api_base_url == "https://api.x.com/2"
    assert s.model_label == "extractive"


def test_non_numeric_ttl_falls_back_to_default(monkeypatch):
    monkeypatch.setenv("CACHE_TTL_SECONDS", "ten minutes")
    assert DigestSettings().cache_ttl_seconds == 600


def test_numeric_ttl_from_env(monkeypatch):
    monkeypatch.setenv("CACHE_TTL_SECONDS", "30")
    assert DigestSettings().cache_ttl_seconds == 30


def test_llm_backend_reports_model_name():
    s = DigestSettings(summarizer_backend="llm", openai_model="gpt-test")
    assert s.model_label == "gpt-test"


def test_require_credentials_names_missing_variable():
    with pytest.raises(ConfigurationError, match="X_BEARER_TOKEN"):
        DigestSettings(x_bearer_token=None, openai_api_key="k").require_credentials()
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        DigestSettings(x_bearer_token="t", openai_api_key="  ").require_credentials()
    DigestSettings(x_bearer_token="t", openai_api_key="k").require_credentials()
