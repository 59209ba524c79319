"""Tests for environment-driven configuration."""

from factcheck_proxy.infrastructure.config import (
    DEFAULT_API_BASE,
    AgentSettings,
    AppSettings,
    ClientSettings,
)


def test_agent_settings_defaults(monkeypatch):
    """Without environment, agents use their built-in ids and nothing is configured."""
    for name in ("FLUO_API_KEY", "FLUO_PROJECT_ID", "FLUO_API_BASE", "FLUO_AGENT_ID_VERIFIER"):
        monkeypatch.delenv(name, raising=False)

    settings = AgentSettings.from_env()

    assert not settings.is_configured
    assert settings.api_base == DEFAULT_API_BASE
    assert settings.verifier_agent_id == "agent-2i2O86cbJPBmSygMQ9"
    assert settings.verify_timeout == 25.0
    assert settings.source_cred_timeout == 20.0
    assert settings.assess_timeout == 25.0
    assert settings.extract_timeout is None


def test_agent_settings_from_env(monkeypatch):
    """Secrets, base URL and agent ids come from the environment."""
    monkeypatch.setenv("FLUO_API_KEY", "key")
    monkeypatch.setenv("FLUO_PROJECT_ID", "project")
    monkeypatch.setenv("FLUO_API_BASE", "https://example.test/v1/")
    monkeypatch.setenv("FLUO_AGENT_ID_ASSESS", "agent-custom")
    monkeypatch.setenv("FLUO_HTTP_TIMEOUT", "12.5")

    settings = AgentSettings.from_env()

    assert settings.is_configured
    assert settings.assess_agent_id == "agent-custom"
    assert settings.http_timeout == 12.5
    assert settings.run_url("agent-x") == "https://example.test/v1/agents/agent-x/run"


def test_either_secret_missing_means_not_configured():
    """Both secrets are required."""
    assert not AgentSettings(api_key="key").is_configured
    assert not AgentSettings(project_id="project").is_configured
    assert AgentSettings(api_key="key", project_id="project").is_configured


def test_app_and_client_settings(monkeypatch):
    """CORS origins are split on commas and the client URL is overridable."""
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("FACTCHECK_API_URL", "http://gateway.test")
    monkeypatch.setenv("FACTCHECK_API_TIMEOUT", "not a number")

    app_settings = AppSettings.from_env()
    client_settings = ClientSettings.from_env()

    assert app_settings.cors_origins == ["http://a.test", "http://b.test"]
    assert app_settings.log_level == "DEBUG"
    assert client_settings.base_url == "http://gateway.test"
    assert client_settings.timeout == 30.0
