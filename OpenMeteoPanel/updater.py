"""One refresh cycle: fetch weather and air quality, render, fall back on failure."""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from cache_store import CacheEnvelope
from display_mappers import (
    ERROR_ICON,
    PM25_FALLBACK_COLOR,
    aqi_label,
    format_aqi_line,
    format_pm25_label,
    format_weather_line,
    icon_for,
    message,
    round_half_up,
    with_cached_marker,
)
from fetch_cache import CachedFetcher
from json_transport import ParseError, ProviderError
from page import Page
from panel_config import PanelConfig
from readings import AirQualityReading, WeatherReading


class Source(Enum):
    """Where a section's rendered content came from."""
    FRESH = "fresh"  # fetched (or served from a fresh cache entry) this run
    CACHED = "cached"  # stale fallback after a failure
    UNAVAILABLE = "unavailable"  # error message rendered
    SKIPPED = "skipped"  # response had nothing to render, display left as is


@dataclass
class UpdateResult:
    """Outcome of one refresh cycle."""
    forced: bool = False
    weather_source: Source = Source.SKIPPED
    aqi_source: Source = Source.SKIPPED
    error: Optional[Exception] = None
    weather_text: Optional[str] = None
    aqi_text: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class WeatherUpdater:
    """
    Coordinates a refresh of the weather and air-quality lines.

    A run never raises: network and parse failures are turned into a render
    from whatever cached data exists, or a localized error message.
    Overlapping runs are not serialized; the last one to render wins.
    """

    def __init__(self, fetcher: CachedFetcher, page: Page, config: PanelConfig):
        self.fetcher = fetcher
        self.page = page
        self.config = config

    @property
    def store(self):
        return self.fetcher.store

    async def run(self, force_ignore_cache: bool = False) -> UpdateResult:
        """
        Run one refresh cycle.

        Args:
            force_ignore_cache: Bypass the freshness check (manual refresh)

        Returns:
            UpdateResult describing what was rendered and any error handled
        """
        result = UpdateResult(forced=force_ignore_cache)
        try:
            weather_data, aqi_data = await self._fetch_both(force_ignore_cache)
            self._render_weather(weather_data, result)
            self._render_air_quality(aqi_data, result)
        except ProviderError as e:
            logging.error(f"Failed to update weather/aqi: {e}")
            result.error = e
            await self._render_fallback(result)
        except Exception as e:
            logging.exception(f"Unexpected error during update: {e}")
            result.error = e
            await self._render_fallback(result)

        await self._save_page()
        logging.info(
            f"Update finished: weather={result.weather_source.value} aqi={result.aqi_source.value}"
            f" forced={result.forced}"
        )
        return result

    async def _fetch_both(self, force: bool):
        results = await asyncio.gather(
            self.fetcher.get(self.config.weather_url, self.config.weather_cache_key, force=force),
            self.fetcher.get(self.config.air_quality_url, self.config.air_quality_cache_key, force=force),
            return_exceptions=True,
        )
        for item in results:
            if isinstance(item, BaseException):
                raise item
        return results

    def _render_weather(self, data: Any, result: UpdateResult) -> None:
        reading = WeatherReading.from_payload(data)
        if reading is None:
            logging.warning("Weather response has no current_weather block")
            return
        text = format_weather_line(reading.temperature_c, self.config.locale)
        self.page.set_weather(icon_for(reading.weather_code), text)
        result.weather_source = Source.FRESH
        result.weather_text = text
        logging.info(f"Weather: temp={reading.temperature_c} code={reading.weather_code}")

    def _render_air_quality(self, data: Any, result: UpdateResult) -> None:
        reading = AirQualityReading.from_payload(data)
        if reading is None:
            logging.warning("Air quality response has no current block")
            return
        text = self._render_aqi_reading(reading, cached=False)
        if text is not None:
            result.aqi_source = Source.FRESH
            result.aqi_text = text
        else:
            logging.warning("Air quality response has neither us_aqi nor pm2_5")

    def _render_aqi_reading(self, reading: AirQualityReading, cached: bool) -> Optional[str]:
        """Render the AQI line from a reading and return it, or None if nothing to show."""
        locale = self.config.locale
        if reading.us_aqi is not None:
            band = aqi_label(reading.us_aqi, locale)
            label = with_cached_marker(band.label, locale) if cached else band.label
            self.page.set_aqi(reading.us_aqi, label, band.color)
            logging.info(f"AQI: us_aqi={reading.us_aqi} color={band.color}")
            return format_aqi_line(reading.us_aqi, label)
        if reading.pm25 is not None:
            label = format_pm25_label(reading.pm25)
            if cached:
                label = with_cached_marker(label, locale)
            rounded = round_half_up(reading.pm25)
            self.page.set_aqi(rounded, label, PM25_FALLBACK_COLOR)
            logging.info(f"AQI: no us_aqi, showing pm2_5={reading.pm25}")
            return format_aqi_line(rounded, label)
        return None

    async def _render_fallback(self, result: UpdateResult) -> None:
        locale = self.config.locale

        weather = self._cached_reading(
            WeatherReading, await asyncio.to_thread(self.store.read, self.config.weather_cache_key)
        )
        if weather is not None:
            text = format_weather_line(weather.temperature_c, locale, cached=True)
            self.page.set_weather(icon_for(weather.weather_code), text)
            result.weather_source = Source.CACHED
            result.weather_text = text
            logging.warning("Showing cached weather data")
        else:
            text = message("weather_error", locale)
            self.page.set_weather(ERROR_ICON, text)
            result.weather_source = Source.UNAVAILABLE
            result.weather_text = text

        air_quality = self._cached_reading(
            AirQualityReading, await asyncio.to_thread(self.store.read, self.config.air_quality_cache_key)
        )
        text = self._render_aqi_reading(air_quality, cached=True) if air_quality is not None else None
        if text is not None:
            result.aqi_source = Source.CACHED
            logging.warning("Showing cached air quality data")
        else:
            text = message("aqi_error", locale)
            self.page.set_aqi_message(text)
            result.aqi_source = Source.UNAVAILABLE
        result.aqi_text = text

    @staticmethod
    def _cached_reading(reading_cls, envelope: Optional[CacheEnvelope]):
        if envelope is None:
            return None
        try:
            return reading_cls.from_payload(envelope.data)
        except ParseError as e:
            logging.warning(f"Cached {reading_cls.__name__} is unusable: {e}")
            return None

    async def _save_page(self) -> None:
        path = self.config.output_path
        if not path:
            return
        try:
            await asyncio.to_thread(self.page.save, path)
        except OSError as e:
            logging.error(f"Could not write page to {path}: {e}")
