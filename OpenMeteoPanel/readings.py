"""Readings extracted from Open-Meteo payloads - pure data structures."""
from dataclasses import dataclass
from typing import Any, Optional

from json_transport import ParseError


def _number(block: dict, field: str) -> Optional[float]:
    value = block.get(field)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ParseError(f"Field '{field}' is not a number: {value!r}")
    return value


@dataclass
class WeatherReading:
    """Current conditions from the forecast endpoint's current_weather block."""
    temperature_c: float
    weather_code: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["WeatherReading"]:
        """
        Extract the reading from a forecast response.

        Returns None when the payload carries no current_weather block.

        Raises:
            ParseError: If the block is present but malformed
        """
        if not isinstance(payload, dict) or not payload.get("current_weather"):
            return None
        block = payload["current_weather"]
        if not isinstance(block, dict):
            raise ParseError("current_weather is not an object")
        temperature = _number(block, "temperature")
        if temperature is None:
            raise ParseError("current_weather is missing 'temperature'")
        code = _number(block, "weathercode")
        return cls(
            temperature_c=temperature,
            weather_code=int(code) if code is not None else None,
        )


@dataclass
class AirQualityReading:
    """Current pollutant levels from the air-quality endpoint's current block."""
    us_aqi: Optional[float] = None
    pm25: Optional[float] = None
    pm10: Optional[float] = None
    european_aqi: Optional[float] = None

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["AirQualityReading"]:
        """
        Extract the reading from an air-quality response.

        Returns None when the payload carries no current block.

        Raises:
            ParseError: If the block is present but malformed
        """
        if not isinstance(payload, dict) or not payload.get("current"):
            return None
        block = payload["current"]
        if not isinstance(block, dict):
            raise ParseError("current is not an object")
        return cls(
            us_aqi=_number(block, "us_aqi"),
            pm25=_number(block, "pm2_5"),
            pm10=_number(block, "pm10"),
            european_aqi=_number(block, "european_aqi"),
        )
