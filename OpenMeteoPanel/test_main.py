"""Tests for configuration loading and wiring in main."""
import pytest

from cache_store import FileKeyValueStore
from main import build_updater, load_config, parse_args
from panel_config import DEFAULT_LAT, DEFAULT_LON, PanelConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep real environment variables and .env files out of these tests."""
    for name in ("WEATHER_LAT", "WEATHER_LON", "WEATHER_LOCALE", "WEATHER_CACHE_DIR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults():
    config = load_config(parse_args([]))

    assert config.lat == DEFAULT_LAT
    assert config.lon == DEFAULT_LON
    assert config.locale == "ar"
    assert config.cache_ttl_seconds == 600
    assert config.refresh_seconds == 600.0


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("WEATHER_LAT", "48.85")
    monkeypatch.setenv("WEATHER_LON", "2.35")
    monkeypatch.setenv("WEATHER_LOCALE", "en")

    config = load_config(parse_args(["--cache-ttl", "120", "--refresh", "30"]))

    assert config.lat == 48.85
    assert config.lon == 2.35
    assert config.locale == "en"
    assert config.cache_ttl_seconds == 120
    assert config.refresh_seconds == 30.0
    assert "latitude=48.85" in config.weather_url


def test_cli_locale_wins_over_environment(monkeypatch):
    monkeypatch.setenv("WEATHER_LOCALE", "ar")
    config = load_config(parse_args(["--locale", "en"]))
    assert config.locale == "en"


def test_invalid_coordinates(monkeypatch):
    monkeypatch.setenv("WEATHER_LAT", "north")
    with pytest.raises(SystemExit):
        load_config(parse_args([]))


def test_invalid_locale_from_environment(monkeypatch):
    monkeypatch.setenv("WEATHER_LOCALE", "fr")
    with pytest.raises(SystemExit):
        load_config(parse_args([]))


def test_build_updater_wiring(tmp_path):
    config = PanelConfig(cache_ttl_seconds=300)

    updater = build_updater(config, str(tmp_path), timeout=3)

    assert updater.fetcher.cache_ttl_seconds == 300
    assert updater.fetcher.transport.timeout == 3
    assert isinstance(updater.store.backend, FileKeyValueStore)
    assert updater.store.backend.directory == str(tmp_path)


def test_urls_carry_coordinates():
    config = PanelConfig(lat=36.7538, lon=3.0588)

    assert config.weather_url == (
        "https://api.open-meteo.com/v1/forecast"
        "?latitude=36.7538&longitude=3.0588&current_weather=true&timezone=auto"
    )
    assert config.air_quality_url == (
        "https://air-quality-api.open-meteo.com/v1/air-quality"
        "?latitude=36.7538&longitude=3.0588&current=pm10,pm2_5,us_aqi,european_aqi&timezone=auto"
    )


@pytest.mark.parametrize("refresh", ["0", "-5"])
def test_non_positive_refresh_rejected(refresh):
    with pytest.raises(SystemExit):
        load_config(parse_args(["--refresh", refresh]))
