from unittest.mock import patch, MagicMock
import pytest

from avantebot import config


@pytest.fixture(autouse=True)
def clean_config_cache():
    config.reset_cache()
    yield
    config.reset_cache()


def test_load_bot_config_caches_and_parses(monkeypatch):
    monkeypatch.setenv("TELEGRAM_TOKEN", "token")
    monkeypatch.setenv("WEBHOOK_URL", "https://bot.example.com/bot")
    monkeypatch.setenv("GOOGLE_API_KEY", "gkey")
    monkeypatch.setenv("GOOGLE_CX", "gcx")
    monkeypatch.delenv("SERPAPI_KEY", raising=False)
    monkeypatch.setenv("TELEGRAM_USERNAME", "AvanteBot")
    monkeypatch.delenv("WIKI_LANG", raising=False)

    loaded = config.load_bot_config()
    assert loaded["telegram_token"] == "token"
    assert loaded["webhook_url"] == "https://bot.example.com/bot"
    assert loaded["google_api_key"] == "gkey"
    assert loaded["google_cx"] == "gcx"
    assert loaded["serpapi_key"] is None
    assert loaded["bot_username"] == "@AvanteBot"
    assert loaded["wiki_lang"] == "pt"

    monkeypatch.setenv("TELEGRAM_TOKEN", "other")
    assert config.load_bot_config() is loaded


@pytest.mark.parametrize("missing", ["TELEGRAM_TOKEN", "WEBHOOK_URL"])
def test_load_bot_config_missing_env(monkeypatch, missing):
    monkeypatch.setenv("TELEGRAM_TOKEN", "token")
    monkeypatch.setenv("WEBHOOK_URL", "https://bot.example.com/bot")
    monkeypatch.setenv(missing, "   ")

    with pytest.raises(config.ConfigError, match=missing):
        config.load_bot_config()


def test_config_redis_with_env_vars(monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "redis.local")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.delenv("REDIS_PASSWORD", raising=False)

    with patch("redis.Redis") as mock_redis:
        client = MagicMock()
        mock_redis.return_value = client
        assert config.config_redis() is client
        assert mock_redis.call_args.kwargs["host"] == "redis.local"
        assert mock_redis.call_args.kwargs["port"] == 6380
        client.ping.assert_called_once()


def test_config_redis_connection_error_is_reported():
    previous = config._admin_reporter
    reporter = MagicMock()
    config.configure(admin_reporter=reporter)
    try:
        with patch("redis.Redis") as mock_redis:
            mock_redis.return_value.ping.side_effect = Exception("down")
            with pytest.raises(Exception, match="down"):
                config.config_redis()
        reporter.assert_called_once()
        assert "Redis connection error" in reporter.call_args.args[0]
    finally:
        config.configure(admin_reporter=previous)
