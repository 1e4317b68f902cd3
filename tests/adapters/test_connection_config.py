import pytest

from rowguard.adapters import AdapterConfigurationError, ConnectionConfig


def test_from_url_parses_options():
    config = ConnectionConfig.from_url(
        "sqlite:///app.db?autocommit=true&timeout=2.5&isolation_level=immediate"
    )
    assert config.url == "sqlite:///app.db"
    assert config.autocommit is True
    assert config.timeout == 2.5
    assert config.isolation_level == "immediate"


def test_from_url_keeps_memory_urls_intact():
    config = ConnectionConfig.from_url("sqlite:///:memory:")
    assert config.url == "sqlite:///:memory:"
    assert config.autocommit is False


def test_keyword_overrides_win_over_query():
    config = ConnectionConfig.from_url("sqlite:///app.db?autocommit=true", autocommit=False)
    assert config.autocommit is False


def test_invalid_values_raise():
    with pytest.raises(AdapterConfigurationError):
        ConnectionConfig.from_url("sqlite:///app.db?autocommit=maybe")
    with pytest.raises(AdapterConfigurationError):
        ConnectionConfig.from_url("sqlite:///app.db?timeout=soon")
    with pytest.raises(AdapterConfigurationError):
        ConnectionConfig.from_url("sqlite:///app.db?journal=wal")
    with pytest.raises(AdapterConfigurationError):
        ConnectionConfig.from_url("app.db")


def test_from_env(monkeypatch):
    monkeypatch.setenv("ROWGUARD_DATABASE_URL", "sqlite:///env.db?timeout=1")
    config = ConnectionConfig.from_env("ROWGUARD_DATABASE_URL")
    assert config.url == "sqlite:///env.db"
    assert config.timeout == 1.0
    assert config.source == "ROWGUARD_DATABASE_URL"


def test_from_env_requires_variable(monkeypatch):
    monkeypatch.delenv("ROWGUARD_DATABASE_URL", raising=False)
    with pytest.raises(AdapterConfigurationError):
        ConnectionConfig.from_env("ROWGUARD_DATABASE_URL")
