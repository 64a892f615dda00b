import pytest

from maps_scraper.core import config
from maps_scraper.core.retry import RetryPolicy

ENV_VARS = (
    "SCRAPER_HEADLESS",
    "SCRAPER_NAVIGATION_TIMEOUT_MS",
    "SCRAPER_NETWORK_IDLE_TIMEOUT_MS",
    "SCRAPER_RETRY_LIMIT",
    "SCRAPER_RETRY_MIN_BACKOFF_MS",
    "SCRAPER_RETRY_MAX_BACKOFF_MS",
    "SCRAPER_SCREENSHOT_DIR",
    "SCRAPER_OUTPUT_DIR",
    "SCRAPER_LOG_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr(config, "load_dotenv", lambda: None)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


def test_get_settings_defaults():
    settings = config.get_settings()

    assert settings.headless is True
    assert settings.navigation_timeout_ms == 30000
    assert settings.network_idle_timeout_ms == 60000
    assert settings.retry_limit == 3
    assert settings.retry_min_backoff_ms == 30000
    assert settings.retry_max_backoff_ms == 60000
    assert settings.screenshot_dir == "debug_screenshots"
    assert settings.output_dir == "scraper-output"
    assert settings.log_file == "scraper.log"
    assert settings.extraction.listing_selectors.title[-1] == "h1"


def test_get_settings_reads_env(monkeypatch):
    monkeypatch.setenv("SCRAPER_HEADLESS", "false")
    monkeypatch.setenv("SCRAPER_NAVIGATION_TIMEOUT_MS", "5000")
    monkeypatch.setenv("SCRAPER_NETWORK_IDLE_TIMEOUT_MS", "9000")
    monkeypatch.setenv("SCRAPER_RETRY_LIMIT", "1")
    monkeypatch.setenv("SCRAPER_OUTPUT_DIR", "/tmp/results")
    monkeypatch.setenv("SCRAPER_LOG_FILE", "")

    settings = config.get_settings()

    assert settings.headless is False
    assert settings.navigation_timeout_ms == 5000
    assert settings.network_idle_timeout_ms == 9000
    assert settings.retry_limit == 1
    # backoff follows the timeouts unless set explicitly
    assert settings.retry_min_backoff_ms == 5000
    assert settings.retry_max_backoff_ms == 9000
    assert settings.output_dir == "/tmp/results"
    assert settings.log_file is None


def test_get_settings_rejects_bad_numbers(monkeypatch):
    monkeypatch.setenv("SCRAPER_RETRY_LIMIT", "three")
    with pytest.raises(config.ConfigError):
        config.get_settings()

    config.get_settings.cache_clear()
    monkeypatch.setenv("SCRAPER_RETRY_LIMIT", "-1")
    with pytest.raises(config.ConfigError):
        config.get_settings()


def test_get_settings_warns_when_backoff_range_inverted(monkeypatch, caplog):
    monkeypatch.setenv("SCRAPER_RETRY_MIN_BACKOFF_MS", "4000")
    monkeypatch.setenv("SCRAPER_RETRY_MAX_BACKOFF_MS", "1000")

    with caplog.at_level("WARNING"):
        settings = config.get_settings()

    assert "below the minimum backoff" in " ".join(caplog.messages)
    assert settings.retry_max_backoff_ms == 4000


def test_settings_are_immutable():
    settings = config.Settings()
    with pytest.raises(AttributeError):
        settings.retry_limit = 10


def test_backoff_defaults_follow_timeouts():
    settings = config.Settings(navigation_timeout_ms=5000, network_idle_timeout_ms=9000)
    assert settings.retry_min_backoff_ms == 5000
    assert settings.retry_max_backoff_ms == 9000

    explicit = config.Settings(navigation_timeout_ms=5000, retry_min_backoff_ms=100, retry_max_backoff_ms=200)
    assert explicit.retry_min_backoff_ms == 100
    assert explicit.retry_max_backoff_ms == 200


def test_retry_policy_uses_derived_backoff():
    policy = RetryPolicy.from_settings(config.Settings(navigation_timeout_ms=5000, network_idle_timeout_ms=9000))
    assert policy.min_backoff_s == 5.0
    assert policy.max_backoff_s == 9.0
