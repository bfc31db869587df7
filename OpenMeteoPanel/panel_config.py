"""Panel configuration - everything the components need, passed in explicitly."""
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from display_mappers import DEFAULT_LOCALE

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
AIR_QUALITY_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"

DEFAULT_LAT = 36.7538
DEFAULT_LON = 3.0588

WEATHER_CACHE_KEY = "weather-cache"
AIR_QUALITY_CACHE_KEY = "air-quality-cache"


def weather_url(lat: float, lon: float) -> str:
    params = {
        "latitude": lat,
        "longitude": lon,
        "current_weather": "true",
        "timezone": "auto",
    }
    return f"{FORECAST_URL}?{urlencode(params)}"


def air_quality_url(lat: float, lon: float) -> str:
    params = {
        "latitude": lat,
        "longitude": lon,
        "current": "pm10,pm2_5,us_aqi,european_aqi",
        "timezone": "auto",
    }
    return f"{AIR_QUALITY_URL}?{urlencode(params, safe=',')}"


@dataclass
class PanelConfig:
    lat: float = DEFAULT_LAT
    lon: float = DEFAULT_LON
    locale: str = DEFAULT_LOCALE
    weather_cache_key: str = WEATHER_CACHE_KEY
    air_quality_cache_key: str = AIR_QUALITY_CACHE_KEY
    cache_ttl_seconds: int = 600
    refresh_seconds: float = 600.0
    output_path: Optional[str] = None  # HTML fragment written after each run

    @property
    def weather_url(self) -> str:
        return weather_url(self.lat, self.lon)

    @property
    def air_quality_url(self) -> str:
        return air_quality_url(self.lat, self.lon)
