"""
Seasonal Filter (v1.0.0)
Scores wardrobe items against current weather.
"""
import dataclasses
from typing import Dict, List, Optional, Sequence

from stylist_service.core.models import WardrobeItem
from stylist_service.services.weather import WeatherData

# Current weather season -> item season -> weight
SEASON_WEIGHTS: Dict[str, Dict[str, float]] = {
    "summer": {"summer": 1.0, "spring": 0.7, "fall": 0.3, "winter": 0.1, "all": 0.9},
    "spring": {"spring": 1.0, "summer": 0.6, "fall": 0.6, "winter": 0.3, "all": 0.9},
    "fall": {"fall": 1.0, "spring": 0.6, "winter": 0.7, "summer": 0.3, "all": 0.9},
    "winter": {"winter": 1.0, "fall": 0.7, "spring": 0.4, "summer": 0.1, "all": 0.8},
    "all": {"summer": 0.9, "spring": 0.9, "fall": 0.9, "winter": 0.9, "all": 1.0},
}

# Temperature band -> acceptable formality range
TEMP_FORMALITY_RANGES = {
    "hot": (1, 5),
    "warm": (1, 7),
    "mild": (1, 10),
    "cool": (2, 10),
    "cold": (3, 10),
}

NO_SEASON_SCORE = 0.8
UNKNOWN_SEASON_WEIGHT = 0.5
APPROPRIATE_THRESHOLD = 0.5
WET_WEATHER_PENALTY = 0.3
WET_SENSITIVE_MATERIALS = ("suede", "linen", "silk")


def temperature_band(temp_c: float) -> str:
    if temp_c >= 28:
        return "hot"
    if temp_c >= 22:
        return "warm"
    if temp_c >= 15:
        return "mild"
    if temp_c >= 5:
        return "cool"
    return "cold"


def seasonal_score(seasons: Sequence[str], weather_season: str) -> float:
    """Best season weight among the item's season tags."""
    if not seasons:
        return NO_SEASON_SCORE
    
    weights = SEASON_WEIGHTS.get(weather_season, SEASON_WEIGHTS["all"])
    return max(weights.get(s.lower(), UNKNOWN_SEASON_WEIGHT) for s in seasons)


def formality_fits_temperature(formality: Optional[float], temp_c: float) -> bool:
    if formality is None:
        return True
    low, high = TEMP_FORMALITY_RANGES[temperature_band(temp_c)]
    return low <= formality <= high


def seasons_for_weather(weather: WeatherData) -> Optional[List[str]]:
    """Season tags acceptable for a DB-level filter, None for no filter."""
    if weather.season_suggestion == "all":
        return None
    return [weather.season_suggestion, "all"]


def score_item(item: WardrobeItem, weather: WeatherData) -> WardrobeItem:
    """Copy of `item` with seasonal_score and weather_appropriate set."""
    score = seasonal_score(item.seasons, weather.season_suggestion)
    formality_ok = formality_fits_temperature(item.formality_score, weather.temperature)
    
    penalty = 0.0
    if weather.is_rainy or weather.is_snowy:
        category = (item.category or "").lower()
        if any(material in category for material in WET_SENSITIVE_MATERIALS):
            penalty = WET_WEATHER_PENALTY
    
    return dataclasses.replace(
        item,
        seasonal_score=max(0.0, score - penalty),
        weather_appropriate=formality_ok and score >= APPROPRIATE_THRESHOLD,
    )


def filter_by_weather(items: Sequence[WardrobeItem], weather: WeatherData) -> List[WardrobeItem]:
    return [score_item(item, weather) for item in items]


def sort_by_seasonal_fit(items: Sequence[WardrobeItem]) -> List[WardrobeItem]:
    """Weather-appropriate items first, then by seasonal score descending."""
    return sorted(items, key=lambda i: (not i.weather_appropriate, -i.seasonal_score))
