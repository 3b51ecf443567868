"""
Candidate Retrieval (v1.0.0)
Vector-ranked or plain wardrobe fetch, scored against the weather.
"""
import logging
from typing import List, Optional, Sequence

from stylist_service.core.models import WardrobeItem
from stylist_service.core.seasonal_filter import filter_by_weather, sort_by_seasonal_fit, seasons_for_weather
from stylist_service.services.weather import WeatherData

logger = logging.getLogger(__name__)

DEPARTMENT_GENDERS = {
    "menswear": "male",
    "womenswear": "female",
}
ALL_GENDERS = ["male", "female", "unisex"]

MIN_VECTOR_RESULTS = 3


def gender_filter(departments: Optional[Sequence[str]]) -> List[str]:
    """Allow-list from department preferences; unisex is always allowed."""
    genders = [DEPARTMENT_GENDERS[d] for d in (departments or []) if d in DEPARTMENT_GENDERS]
    if not genders:
        return list(ALL_GENDERS)
    return list(dict.fromkeys(genders + ["unisex"]))


def retrieve_candidates(
    store,
    user_id: str,
    weather: WeatherData,
    taste_vector=None,
    genders: Optional[Sequence[str]] = None,
    exclude_ids: Sequence[str] = (),
    per_slot_limit: int = 15,
) -> List[WardrobeItem]:
    """
    Fetch candidates and score them against current conditions.

    With a taste vector the store's similarity search runs first; an error or
    fewer than MIN_VECTOR_RESULTS results falls back to the plain fetch.
    The plain fetch is not guarded: WardrobeUnavailableError propagates.

    Args:
        store: Wardrobe store (see db/wardrobe.py)
        exclude_ids: Cooldown ids excluded on the vector path

    Returns:
        Items sorted weather-appropriate first, then by seasonal score
    """
    genders = list(genders or ALL_GENDERS)
    items: List[WardrobeItem] = []

    if taste_vector is not None:
        try:
            items = store.fetch_candidates_by_vector(
                user_id,
                taste_vector,
                genders=genders,
                per_slot_limit=per_slot_limit,
                seasons=seasons_for_weather(weather),
                exclude_ids=list(exclude_ids),
            )
            logger.info(f"Vector path returned {len(items)} candidates for {user_id}")
        except Exception as e:
            logger.warning(f"Vector search failed for {user_id}, using plain fetch: {e}")
            items = []

        if len(items) < MIN_VECTOR_RESULTS:
            logger.info(f"Too few vector results ({len(items)}) - falling back to plain fetch")
            items = []

    if not items:
        items = store.fetch_eligible_items(user_id, genders)

    return sort_by_seasonal_fit(filter_by_weather(items, weather))
