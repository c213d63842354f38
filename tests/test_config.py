"""Tests for configuration module."""

import json

from mcp_switchboard.config import ClientConfig, Settings
from mcp_switchboard.mcp_client.dispatcher import MCPDispatcher


def test_config_from_env(monkeypatch):
    """Test loading configuration from environment variables."""
    monkeypatch.setenv("MCP_SWITCHBOARD_LOGGING__LEVEL", "DEBUG")
    monkeypatch.setenv("MCP_SWITCHBOARD_CLIENT__MAX_CONCURRENCY", "8")
    monkeypatch.setenv("MCP_SWITCHBOARD_CLIENT__CACHE_TTL_SECONDS", "120")
    monkeypatch.setenv("MCP_SWITCHBOARD_CLIENT__SSL_VERIFY", "false")
    monkeypatch.setenv("MCP_SWITCHBOARD_SERVERS", json.dumps({"search": {"url": "http://search.local/mcp"}}))

    config = Settings()

    assert config.logging.level == "DEBUG"
    assert config.client.max_concurrency == 8
    assert config.client.cache_ttl_seconds == 120
    assert config.client.ssl_verify is False
    assert config.servers == {"search": {"url": "http://search.local/mcp"}}

def test_config_defaults():
    """Test default configuration values."""
    config = Settings()

    assert config.logging.level == "INFO"
    assert config.logging.format == "json"

    assert config.client.cache_ttl_seconds == 86400
    assert config.client.max_concurrency == 4
    assert config.client.health_failure_threshold == 3
    assert config.client.default_timeout_seconds == 30.0
    assert config.client.protocol_version == "2024-11-05"
    assert config.client.ssl_verify is True
    assert config.servers == {}


def test_config_from_file(tmp_path):
    """Test loading configuration from a JSON file."""
    config_content = {
        "logging": {"level": "WARNING", "format": "console"},
        "client": {"max_concurrency": 2, "default_timeout_seconds": 12},
        "servers": {
            "weather": {
                "name": "Weather",
                "url": "http://weather.example.com/api/mcp",
                "auth_token": "secret",
                "available_actions": ["get_weather"],
                "health_check_interval": 300,
            },
            "mail": {"url": "http://mail.example.com/mcp", "enabled": False, "timeout": 60},
        },
    }
    config_file = tmp_path / "test_config.json"
    config_file.write_text(json.dumps(config_content))

    config = Settings.from_file(config_file)

    assert config.logging.level == "WARNING"
    assert config.logging.format == "console"
    assert config.client.max_concurrency == 2
    assert config.client.cache_ttl_seconds == 86400 # Default

    dispatcher = MCPDispatcher.from_settings(config)
    weather = dispatcher.get_server("weather")
    assert weather.name == "Weather"
    assert weather.timeout == 12 # Falls back to the client default
    assert weather.available_actions == ["get_weather"]
    assert dispatcher.get_server("mail").timeout == 60
    assert dispatcher.has_server("weather")
    assert not dispatcher.has_server("mail")


def test_client_config_bounds():
    config = ClientConfig(max_concurrency=1, health_failure_threshold=1)
    assert config.max_concurrency == 1
    assert config.health_failure_threshold == 1
