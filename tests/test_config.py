"""Tests for app.config.get_settings."""

import pytest

from app.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch):
    for name in (
        "SEO_SITE_DOMAIN",
        "SEO_DEV_SERVER_URL",
        "SEO_CONTENT_PATH",
        "SEO_URL_PATTERN",
        "SEO_HTML_TIMEOUT_MS",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.site_domain == "example.com"
    assert settings.dev_server_url == "http://localhost:3000"
    assert settings.content_path == "content"
    assert settings.url_pattern == "/blog/{slug}"
    assert settings.html_timeout_ms == 5000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SEO_SITE_DOMAIN", "myblog.dev")
    monkeypatch.setenv("SEO_URL_PATTERN", "/posts/{slug}")
    monkeypatch.setenv("SEO_HTML_TIMEOUT_MS", "2500")

    settings = get_settings()

    assert settings.site_domain == "myblog.dev"
    assert settings.url_pattern == "/posts/{slug}"
    assert settings.html_timeout_ms == 2500


def test_empty_variable_keeps_default(monkeypatch):
    monkeypatch.setenv("SEO_CONTENT_PATH", "")
    assert get_settings().content_path == "content"
