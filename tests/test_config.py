"""Tests for config module."""

import pytest

from docsearch_mcp.config import DEFAULT_COMMON_URLS, DEFAULT_INDEX_URL, Config

ENV_VARS = (
    "DOCS_INDEX_URL",
    "DOCS_COMMON_URLS",
    "DOCS_PROJECT_ID",
    "DOCS_TRANSPORT",
    "DOCS_PORT",
    "DOCS_FETCH_TIMEOUT",
    "DOCS_FETCH_WORKERS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without DOCS_* variables."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_config_defaults():
    """Test config loads with defaults when no env vars set."""
    config = Config.from_env()
    assert config.index_url == DEFAULT_INDEX_URL
    assert config.common_urls == DEFAULT_COMMON_URLS
    assert config.project_id is None
    assert config.transport == "stdio"
    assert config.port == 8080
    assert config.fetch_timeout == 10.0
    assert config.fetch_workers == 8


def test_config_from_env(monkeypatch):
    """Test config loads from environment variables."""
    monkeypatch.setenv("DOCS_INDEX_URL", "https://docs.example.com/llms.txt")
    monkeypatch.setenv("DOCS_COMMON_URLS", "https://a.example.com/x.md, ,https://a.example.com/y.md")
    monkeypatch.setenv("DOCS_PROJECT_ID", "proj-123")
    monkeypatch.setenv("DOCS_TRANSPORT", "SSE")
    monkeypatch.setenv("DOCS_PORT", "9000")
    monkeypatch.setenv("DOCS_FETCH_TIMEOUT", "2.5")
    monkeypatch.setenv("DOCS_FETCH_WORKERS", "3")

    config = Config.from_env()
    assert config.index_url == "https://docs.example.com/llms.txt"
    assert config.common_urls == ("https://a.example.com/x.md", "https://a.example.com/y.md")
    assert config.project_id == "proj-123"
    assert config.transport == "sse"
    assert config.port == 9000
    assert config.fetch_timeout == 2.5
    assert config.fetch_workers == 3


def test_config_empty_common_urls(monkeypatch):
    """Test an empty DOCS_COMMON_URLS disables common documents."""
    monkeypatch.setenv("DOCS_COMMON_URLS", "")
    assert Config.from_env().common_urls == ()


def test_config_overrides_take_precedence(monkeypatch):
    """Test CLI overrides win over environment variables."""
    monkeypatch.setenv("DOCS_PROJECT_ID", "from-env")
    monkeypatch.setenv("DOCS_TRANSPORT", "sse")

    config = Config.from_env(
        project_id_override="from-cli",
        index_url_override="https://cli.example.com/llms.txt",
        transport_override="stdio",
    )
    assert config.project_id == "from-cli"
    assert config.index_url == "https://cli.example.com/llms.txt"
    assert config.transport == "stdio"


def test_config_empty_project_id_is_none(monkeypatch):
    """Test an empty DOCS_PROJECT_ID counts as unset."""
    monkeypatch.setenv("DOCS_PROJECT_ID", "")
    assert Config.from_env().project_id is None


def test_config_from_env_creates_new_instances():
    """Test Config.from_env() creates new instances each time."""
    config1 = Config.from_env()
    config2 = Config.from_env()
    assert config1 is not config2


def test_config_invalid_index_url(monkeypatch):
    """Test config rejects a non-http index URL."""
    monkeypatch.setenv("DOCS_INDEX_URL", "ftp://docs.example.com/llms.txt")
    with pytest.raises(ValueError, match="Invalid DOCS_INDEX_URL"):
        Config.from_env()


def test_config_invalid_transport(monkeypatch):
    """Test config rejects unknown transports."""
    monkeypatch.setenv("DOCS_TRANSPORT", "websocket")
    with pytest.raises(ValueError, match="Invalid DOCS_TRANSPORT"):
        Config.from_env()


def test_config_invalid_port_non_numeric(monkeypatch):
    """Test config raises error for non-numeric port."""
    monkeypatch.setenv("DOCS_PORT", "not_a_number")
    with pytest.raises(ValueError, match="Invalid DOCS_PORT"):
        Config.from_env()


def test_config_invalid_port_out_of_range(monkeypatch):
    """Test config raises error for port out of valid range."""
    monkeypatch.setenv("DOCS_PORT", "70000")
    with pytest.raises(ValueError, match="Port must be between 1 and 65535"):
        Config.from_env()


@pytest.mark.parametrize("value", ["0", "-1", "soon"])
def test_config_invalid_fetch_timeout(monkeypatch, value):
    """Test config rejects non-positive or non-numeric timeouts."""
    monkeypatch.setenv("DOCS_FETCH_TIMEOUT", value)
    with pytest.raises(ValueError, match="Invalid DOCS_FETCH_TIMEOUT"):
        Config.from_env()


@pytest.mark.parametrize("value", ["0", "many"])
def test_config_invalid_fetch_workers(monkeypatch, value):
    """Test config rejects worker counts below one."""
    monkeypatch.setenv("DOCS_FETCH_WORKERS", value)
    with pytest.raises(ValueError, match="Invalid DOCS_FETCH_WORKERS"):
        Config.from_env()
