"""
Tests for the weather service.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from stylist_service.config.settings import Settings
from stylist_service.services import weather


SAMPLE_RESPONSE = {
    "weather": [{"main": "Rain", "description": "light rain"}],
    "main": {"temp": 12.4, "feels_like": 10.9, "humidity": 81},
    "wind": {"speed": 4.6},
}


def mock_http(status_code=200, payload=None, error=None):
    """Patch httpx.AsyncClient so get() returns a canned response."""
    response = MagicMock(status_code=status_code)
    response.json.return_value = payload or SAMPLE_RESPONSE

    client = MagicMock()
    client.get = AsyncMock(side_effect=error) if error else AsyncMock(return_value=response)

    client_cls = MagicMock()
    client_cls.return_value.__aenter__.return_value = client
    return patch.object(weather.httpx, "AsyncClient", client_cls), client


def with_key(key="test-key"):
    return patch.object(weather, "get_settings", return_value=Settings(openweather_api_key=key))


class TestParsing:
    """Tests for payload parsing and condition mapping."""

    def test_parse_response(self):
        data = weather.parse_weather_response(SAMPLE_RESPONSE)

        assert data.temperature == 12.4
        assert data.condition == "rain"
        assert data.is_rainy is True
        assert data.is_snowy is False
        assert data.season_suggestion == "spring"

    def test_parse_sparse_payload(self):
        data = weather.parse_weather_response({})
        assert data.temperature == 20
        assert data.condition == "clouds"

    def test_map_condition(self):
        assert weather.map_condition("Clear") == "clear"
        assert weather.map_condition("Haze") == "mist"
        assert weather.map_condition("Squall") == "clouds"

    def test_season_suggestion(self):
        assert weather.season_suggestion(0, "snow") == "winter"
        assert weather.season_suggestion(25, "snow") == "winter"
        assert weather.season_suggestion(8, "rain") == "fall"
        assert weather.season_suggestion(3, "clear") == "winter"
        assert weather.season_suggestion(12, "clear") == "fall"
        assert weather.season_suggestion(18, "clouds") == "spring"
        assert weather.season_suggestion(28, "clear") == "summer"


class TestFetch:
    """Tests for the HTTP path."""

    def test_success(self):
        http, client = mock_http()
        with with_key(), http:
            data = asyncio.run(weather.get_weather_by_coords(41.88, -87.63))

        assert data.condition == "rain"
        params = client.get.await_args.kwargs["params"]
        assert params["lat"] == 41.88
        assert params["units"] == "metric"
        assert params["appid"] == "test-key"

    def test_http_error(self):
        http, _ = mock_http(status_code=500)
        with with_key(), http:
            assert asyncio.run(weather.get_weather_by_city("Chicago")) is None

    def test_timeout(self):
        http, _ = mock_http(error=httpx.ReadTimeout("slow"))
        with with_key(), http:
            assert asyncio.run(weather.get_weather_by_coords(0, 0)) is None

    def test_no_api_key(self):
        http, client = mock_http()
        with with_key(None), http:
            assert asyncio.run(weather.get_weather_by_coords(0, 0)) is None
        client.get.assert_not_awaited()


class TestResolveWeather:
    """Tests for the always-succeeds resolver."""

    def test_no_coordinates(self):
        data = asyncio.run(weather.resolve_weather(None, None))
        assert data == weather.default_weather()

    def test_failed_lookup_uses_default(self):
        with patch.object(weather, "get_weather_by_coords", AsyncMock(return_value=None)):
            data = asyncio.run(weather.resolve_weather(10.0, 20.0))
        assert data.temperature == 20
        assert data.season_suggestion == "all"
