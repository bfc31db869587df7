"""Tests for the requests-based transport."""
import asyncio
from unittest.mock import Mock, patch

import pytest
import requests

from http_transport import RequestsTransport
from json_transport import NetworkError, ParseError

URL = "https://air-quality-api.open-meteo.com/v1/air-quality?latitude=36.7538&longitude=3.0588"


@pytest.fixture
def sample_air_quality_response():
    """Sample Open-Meteo air quality response."""
    return {
        "latitude": 36.75,
        "longitude": 3.05,
        "current_units": {"pm10": "μg/m³", "pm2_5": "μg/m³", "us_aqi": "USAQI"},
        "current": {
            "time": "2024-05-24T12:00",
            "interval": 3600,
            "pm10": 31.2,
            "pm2_5": 12.4,
            "us_aqi": 52,
            "european_aqi": 28,
        },
    }


@pytest.fixture
def transport():
    return RequestsTransport(timeout=5)


def test_transport_success(transport, sample_air_quality_response):
    """Test successful request and decoding."""
    with patch('http_transport.requests.get') as mock_get:
        mock_response = Mock()
        mock_response.ok = True
        mock_response.status_code = 200
        mock_response.json.return_value = sample_air_quality_response
        mock_get.return_value = mock_response

        data = asyncio.run(transport.get_json(URL))

        assert data["current"]["us_aqi"] == 52
        assert data["current"]["pm2_5"] == 12.4


def test_transport_disables_caching(transport):
    """Test that every request asks intermediaries not to serve a cached copy."""
    with patch('http_transport.requests.get') as mock_get:
        mock_response = Mock()
        mock_response.ok = True
        mock_response.status_code = 200
        mock_response.json.return_value = {}
        mock_get.return_value = mock_response

        asyncio.run(transport.get_json(URL))

        args, kwargs = mock_get.call_args
        assert args[0] == URL
        assert kwargs["headers"]["Cache-Control"] == "no-cache"
        assert kwargs["headers"]["Pragma"] == "no-cache"
        assert kwargs["timeout"] == 5


def test_transport_http_error(transport):
    """Test that a non-success status becomes a NetworkError with the status code."""
    with patch('http_transport.requests.get') as mock_get:
        mock_response = Mock()
        mock_response.ok = False
        mock_response.status_code = 429
        mock_response.text = "Too many requests"
        mock_get.return_value = mock_response

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(transport.get_json(URL))

        assert exc_info.value.status_code == 429
        assert "429" in str(exc_info.value)


def test_transport_network_error(transport):
    """Test handling of connection failures."""
    with patch('http_transport.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("Connection timeout")

        with pytest.raises(NetworkError) as exc_info:
            asyncio.run(transport.get_json(URL))

        assert exc_info.value.status_code is None
        assert "Network error" in str(exc_info.value)


def test_transport_invalid_json(transport):
    """Test that an undecodable body becomes a ParseError."""
    with patch('http_transport.requests.get') as mock_get:
        mock_response = Mock()
        mock_response.ok = True
        mock_response.status_code = 200
        mock_response.json.side_effect = ValueError("Expecting value: line 1 column 1")
        mock_get.return_value = mock_response

        with pytest.raises(ParseError) as exc_info:
            asyncio.run(transport.get_json(URL))

        assert "Failed to parse response" in str(exc_info.value)
