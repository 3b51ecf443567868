"""
Weather Service (v1.0.0)
OpenWeatherMap integration for weather-aware outfit generation.

Weather is an enrichment signal: every failure path returns None and callers
substitute default_weather().
"""
import logging
from typing import Optional, Dict, Any
from dataclasses import dataclass, asdict
import httpx

from stylist_service.config import get_settings

logger = logging.getLogger(__name__)

# Configuration
OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5/weather"
DEFAULT_UNITS = "metric"  # Celsius
REQUEST_TIMEOUT_S = 10.0

CONDITIONS = ("clear", "clouds", "rain", "drizzle", "thunderstorm", "snow", "mist", "fog")
SEASONS = ("summer", "fall", "winter", "spring", "all")


@dataclass
class WeatherData:
    """Current conditions used to drive outfit generation."""
    temperature: float  # Celsius
    feels_like: float
    humidity: int
    condition: str  # one of CONDITIONS
    description: str
    wind_speed: float  # m/s
    is_rainy: bool
    is_snowy: bool
    season_suggestion: str  # one of SEASONS
    
    def to_dict(self) -> dict:
        return asdict(self)
    
    def to_prompt_context(self) -> str:
        """Generate context string for LLM prompt."""
        return (
            f"{self.description}, {self.temperature:.0f}°C "
            f"(feels like {self.feels_like:.0f}°C), humidity {self.humidity}%, "
            f"wind {self.wind_speed:.0f} m/s"
        )


def default_weather() -> WeatherData:
    """Neutral conditions used whenever real weather is unavailable."""
    return WeatherData(
        temperature=20,
        feels_like=20,
        humidity=50,
        condition="clear",
        description="clear sky",
        wind_speed=3,
        is_rainy=False,
        is_snowy=False,
        season_suggestion="all",
    )


def map_condition(owm_main: str) -> str:
    """Map an OpenWeatherMap 'main' field to our condition enum."""
    main = (owm_main or "").lower()
    if main in ("clear", "clouds", "rain", "drizzle", "thunderstorm", "snow", "fog"):
        return main
    if main in ("mist", "haze", "smoke"):
        return "mist"
    return "clouds"


def season_suggestion(temp_c: float, condition: str) -> str:
    """Map temperature and condition to the clothing season that fits today."""
    if condition == "snow":
        return "winter"
    if condition in ("rain", "drizzle"):
        if temp_c < 10:
            return "fall"
        if temp_c < 20:
            return "spring"
    
    if temp_c < 5:
        return "winter"
    if temp_c < 15:
        return "fall"
    if temp_c < 22:
        return "spring"
    return "summer"


def parse_weather_response(data: Dict[str, Any]) -> WeatherData:
    """Build WeatherData from an OpenWeatherMap current-weather payload."""
    main = data.get("main") or {}
    weather = (data.get("weather") or [{}])[0]
    wind = data.get("wind") or {}
    
    condition = map_condition(weather.get("main", "clouds"))
    temperature = main.get("temp", 20)
    
    return WeatherData(
        temperature=temperature,
        feels_like=main.get("feels_like", temperature),
        humidity=main.get("humidity", 50),
        condition=condition,
        description=weather.get("description", "unknown"),
        wind_speed=wind.get("speed", 0),
        is_rainy=condition in ("rain", "drizzle", "thunderstorm"),
        is_snowy=condition == "snow",
        season_suggestion=season_suggestion(temperature, condition),
    )


def is_configured() -> bool:
    """Check if weather service is configured."""
    return get_settings().has_weather()


async def _fetch(params: Dict[str, Any], label: str) -> Optional[WeatherData]:
    api_key = get_settings().openweather_api_key
    if not api_key:
        logger.warning("OPENWEATHER_API_KEY not set - weather disabled")
        return None
    
    try:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT_S) as client:
            response = await client.get(
                OPENWEATHER_BASE_URL,
                params={**params, "appid": api_key, "units": DEFAULT_UNITS}
            )
            
            if response.status_code != 200:
                logger.error(f"Weather API error for {label}: HTTP {response.status_code}")
                return None
            
            weather = parse_weather_response(response.json())
            logger.info(f"Weather: {label} - {weather.temperature}°C, {weather.condition}, season={weather.season_suggestion}")
            return weather
    
    except httpx.TimeoutException:
        logger.warning(f"Weather API timeout for {label}")
        return None
    except Exception as e:
        logger.error(f"Weather API error for {label}: {e}")
        return None


async def get_weather_by_coords(lat: float, lon: float) -> Optional[WeatherData]:
    """
    Fetch current weather for a coordinate.
    
    Returns:
        WeatherData or None if unconfigured or failed
    """
    return await _fetch({"lat": lat, "lon": lon}, f"({lat:.2f}, {lon:.2f})")


async def get_weather_by_city(city: str) -> Optional[WeatherData]:
    """Fetch current weather for a city name (e.g. "Chicago")."""
    return await _fetch({"q": city}, city)


async def resolve_weather(lat: Optional[float] = None, lon: Optional[float] = None) -> WeatherData:
    """Weather for the coordinate, or default_weather() on any gap."""
    if lat is None or lon is None:
        return default_weather()
    
    return await get_weather_by_coords(lat, lon) or default_weather()
