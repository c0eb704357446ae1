import pytest

from retranslate.config import load_config


def _base_env(monkeypatch):
    monkeypatch.setenv("WP_API_URL", "https://example.org/wp-json/")
    monkeypatch.setenv("WP_USERNAME", "editor")
    monkeypatch.setenv("WP_APP_PASSWORD", "abcd efgh ijkl")
    for name in (
        "DATABASE_URL",
        "PLL_DEFAULT_LANGUAGE",
        "RETRANSLATE_POST_TYPE",
        "RETRANSLATE_PACING_MS",
        "RETRANSLATE_TIMEOUT",
        "RETRANSLATE_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)


def test_load_config_requires_env(monkeypatch):
    monkeypatch.delenv("WP_API_URL", raising=False)
    monkeypatch.delenv("WP_USERNAME", raising=False)
    monkeypatch.delenv("WP_APP_PASSWORD", raising=False)

    with pytest.raises(RuntimeError):
        load_config()


def test_load_config_defaults(monkeypatch):
    _base_env(monkeypatch)

    cfg = load_config()
    assert cfg.wp_api_url == "https://example.org/wp-json"
    assert cfg.pg_dsn is None
    assert cfg.default_language is None
    assert cfg.post_type == "posts"
    assert cfg.pacing_ms == 2000
    assert cfg.debug is False


def test_load_config_reads_values(monkeypatch):
    _base_env(monkeypatch)
    monkeypatch.setenv("PLL_DEFAULT_LANGUAGE", "fi")
    monkeypatch.setenv("RETRANSLATE_POST_TYPE", "/pages/")
    monkeypatch.setenv("RETRANSLATE_PACING_MS", "500")
    monkeypatch.setenv("RETRANSLATE_DEBUG", "1")

    cfg = load_config()
    assert cfg.default_language == "fi"
    assert cfg.post_type == "pages"
    assert cfg.pacing_ms == 500
    assert cfg.debug is True


def test_load_config_rejects_bad_pacing(monkeypatch):
    _base_env(monkeypatch)
    monkeypatch.setenv("RETRANSLATE_PACING_MS", "soon")

    with pytest.raises(RuntimeError):
        load_config()
