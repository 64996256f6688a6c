import importlib
import logging
import sys

import pytest


def reload_config_module():
    config_module = sys.modules.get("app.config")
    if config_module:
        config_module.get_settings.cache_clear()
        sys.modules.pop("app.config", None)
    return importlib.import_module("app.config")


def test_missing_secret_key_fails_closed(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "")

    config_module = reload_config_module()
    config_module.get_settings.cache_clear()

    with pytest.raises(Exception, match="secret_key|SECRET_KEY"):
        config_module.get_settings()


def test_weak_secret_key_fails_closed(monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "changeme-in-production")

    config_module = reload_config_module()
    config_module.get_settings.cache_clear()

    with pytest.raises(Exception, match="secret_key|SECRET_KEY"):
        config_module.get_settings()


def test_strong_secret_key_passes(monkeypatch):
    monkeypatch.setenv(
        "SECRET_KEY",
        "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef",
    )

    config_module = reload_config_module()
    config_module.get_settings.cache_clear()
    settings = config_module.get_settings()

    assert settings.secret_key
    assert settings.refresh_cookie_name == "mnemos_refresh"


@pytest.mark.parametrize(
    "env_name, value",
    [
        ("REFRESH_TOKEN_TTL_DAYS", "0"),
        ("REFRESH_TOKEN_TTL_DAYS", "-1"),
        ("REFRESH_ABSOLUTE_MAX_DAYS", "0"),
    ],
)
def test_non_positive_refresh_lifetimes_fail_at_startup(monkeypatch, env_name, value):
    monkeypatch.setenv(env_name, value)

    config_module = reload_config_module()
    config_module.get_settings.cache_clear()

    with pytest.raises(Exception, match="refresh_"):
        config_module.get_settings()


def test_sliding_window_longer_than_cap_only_warns(monkeypatch, caplog):
    monkeypatch.setenv("REFRESH_TOKEN_TTL_DAYS", "60")
    monkeypatch.setenv("REFRESH_ABSOLUTE_MAX_DAYS", "30")
    caplog.set_level(logging.WARNING)

    config_module = reload_config_module()
    config_module.get_settings.cache_clear()
    settings = config_module.get_settings()

    assert settings.refresh_token_ttl_days == 60
    assert "absolute cap" in caplog.text
