"""Display mapping and formatting - pure functions for testability."""
import math
from dataclasses import dataclass
from typing import Dict, Optional, Union

Number = Union[int, float]

DEFAULT_LOCALE = "ar"

CLEAR = "☀️"
MOSTLY_CLEAR = "🌤️"
PARTLY_CLOUDY = "⛅"
OVERCAST = "☁️"
FOG = "🌫️"
DRIZZLE = "🌦️"
RAIN = "🌧️"
SNOW = "❄️"
THUNDERSTORM = "⛈️"
ERROR_ICON = "❗"

# Unknown codes get the same glyph as "mostly clear"
DEFAULT_ICON = MOSTLY_CLEAR

WEATHER_ICONS: Dict[int, str] = {
    0: CLEAR,
    1: MOSTLY_CLEAR,
    2: PARTLY_CLOUDY,
    3: OVERCAST,
    45: FOG, 48: FOG,
    51: DRIZZLE, 53: DRIZZLE, 55: DRIZZLE,
    61: RAIN, 63: RAIN, 65: RAIN,
    71: SNOW, 73: SNOW, 75: SNOW,
    95: THUNDERSTORM, 96: THUNDERSTORM,
}

# Fixed indicator color for the PM2.5-only fallback; no band is computed
PM25_FALLBACK_COLOR = "bg-amber-400"

# (upper bound inclusive, label key, Tailwind color class), lowest bound wins
AQI_BANDS = [
    (50, "good", "bg-emerald-400"),
    (100, "moderate", "bg-amber-400"),
    (150, "unhealthy_sensitive", "bg-rose-400"),
    (200, "unhealthy", "bg-red-500"),
    (300, "very_unhealthy", "bg-violet-600"),
    (None, "hazardous", "bg-black"),
]

MESSAGES: Dict[str, Dict[str, str]] = {
    "ar": {
        "good": "جيد",
        "moderate": "متوسط",
        "unhealthy_sensitive": "غير صحي للحساسين",
        "unhealthy": "غير صحي",
        "very_unhealthy": "سيء جداً",
        "hazardous": "خطر",
        "current_conditions": "حالة الطقس حالياً",
        "cached": "(مخزنة محلياً)",
        "weather_error": "تعذر جلب بيانات الطقس",
        "aqi_error": "تعذر جلب بيانات جودة الهواء",
    },
    "en": {
        "good": "Good",
        "moderate": "Moderate",
        "unhealthy_sensitive": "Unhealthy for sensitive groups",
        "unhealthy": "Unhealthy",
        "very_unhealthy": "Very unhealthy",
        "hazardous": "Hazardous",
        "current_conditions": "current conditions",
        "cached": "(cached)",
        "weather_error": "Could not fetch weather data",
        "aqi_error": "Could not fetch air quality data",
    },
}


@dataclass(frozen=True)
class AqiBand:
    label: str
    color: str


def message(key: str, locale: str = DEFAULT_LOCALE) -> str:
    """Look up a localized string, falling back to the default locale."""
    table = MESSAGES.get(locale, MESSAGES[DEFAULT_LOCALE])
    return table[key]


def icon_for(weather_code: Optional[int]) -> str:
    """
    Get the icon glyph for a WMO weather code.

    Args:
        weather_code: Numeric code from the forecast API (None if missing)

    Returns:
        Glyph from the table, or the default glyph for unknown codes
    """
    if weather_code is None:
        return DEFAULT_ICON
    return WEATHER_ICONS.get(weather_code, DEFAULT_ICON)


def aqi_label(us_aqi: Number, locale: str = DEFAULT_LOCALE) -> AqiBand:
    """
    Map a US AQI value to its localized label and severity color.

    Bands are inclusive on their upper bound:
    0-50 good, 51-100 moderate, 101-150 unhealthy for sensitive groups,
    151-200 unhealthy, 201-300 very unhealthy, 301+ hazardous.
    """
    for upper, key, color in AQI_BANDS:
        if upper is None or us_aqi <= upper:
            return AqiBand(label=message(key, locale), color=color)
    raise AssertionError("AQI_BANDS must end with an open band")


def indicator_class(color: str) -> str:
    """Class attribute for the round severity indicator."""
    return f"inline-flex h-2 w-2 rounded-full {color} shadow {color}/60"


def format_number(value: Number) -> str:
    """Render a number the way the API sent it (21.0 -> "21", 21.3 -> "21.3")."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def round_half_up(value: Number) -> int:
    """Round to the nearest integer with halves rounded up (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def format_weather_line(temperature_c: Number, locale: str = DEFAULT_LOCALE, cached: bool = False) -> str:
    suffix = message("cached" if cached else "current_conditions", locale)
    return f"{format_number(temperature_c)}°C · {suffix}"


def format_aqi_line(aqi_value: Number, label: str) -> str:
    return f"AQI {format_number(aqi_value)} · {label}"


def format_pm25_label(pm25: Number) -> str:
    return f"PM2.5 {format_number(pm25)} µg/m³"


def with_cached_marker(label: str, locale: str = DEFAULT_LOCALE) -> str:
    return f"{label} {message('cached', locale)}"
