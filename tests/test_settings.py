"""Config loading: defaults, TOML files, profile overlay."""

from marketinsights.config import Settings, get_settings, load_config


def test_defaults_without_config():
    s = Settings.from_dict({})
    assert s.api_base == "https://gamma-api.polymarket.com"
    assert s.market_limit == 100
    assert s.order == "volume"
    assert s.tag_slugs == ["politics", "finance", "economics", "crypto"]
    assert s.refresh_interval_ms == 120_000
    assert s.default_threshold == 70
    assert s.logging_level == "INFO"
    assert s.logging_file is None


def test_missing_config_dir_gives_defaults(tmp_path):
    assert load_config(config_dir=tmp_path) == {}
    assert get_settings(config_dir=tmp_path).market_limit == 100


def test_profile_overlay_deep_merges(tmp_path):
    (tmp_path / "default.toml").write_text(
        '[api]\nbase = "https://corsproxy.io/?https://gamma-api.polymarket.com/"\nmarket_limit = 50\n'
        "[dashboard]\ndefault_threshold = 80\n"
    )
    (tmp_path / "fast.toml").write_text("[api]\nmarket_limit = 10\n[dashboard]\nrefresh_interval_ms = 5000\n")

    base = get_settings(config_dir=tmp_path)
    assert base.market_limit == 50
    assert base.api_base == "https://corsproxy.io/?https://gamma-api.polymarket.com"

    fast = get_settings("fast", config_dir=tmp_path)
    assert fast.market_limit == 10
    assert fast.refresh_interval_ms == 5000
    assert fast.default_threshold == 80
    assert fast.api_base == base.api_base


def test_unknown_profile_ignored(tmp_path):
    (tmp_path / "default.toml").write_text("[api]\nmarket_limit = 25\n")
    assert get_settings("nope", config_dir=tmp_path).market_limit == 25


def test_log_file_opened_and_closed(tmp_path):
    import structlog

    from marketinsights.config import settings as settings_mod

    log_path = tmp_path / "insights.log"
    settings_mod.configure_logging(Settings.from_dict({"logging": {"file": str(log_path)}}))
    try:
        handle = settings_mod._log_file
        assert handle is not None and not handle.closed
        structlog.get_logger("test").info("hello_file")
        settings_mod.close_log_file()
        assert handle.closed
        assert settings_mod._log_file is None
        assert "hello_file" in log_path.read_text()
    finally:
        settings_mod.close_log_file()
        structlog.reset_defaults()
