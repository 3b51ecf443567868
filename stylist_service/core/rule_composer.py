"""
Rule-Based Outfit Composer (v1.0.0)
Deterministic filters plus weighted random selection. Always available;
backfills whatever the LLM composer does not produce.
"""
import logging
import random
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Set, Tuple

from stylist_service.core import presentation
from stylist_service.core.color_harmony import filter_by_color_compatibility, outfit_harmony
from stylist_service.core.constraints import matches_occasion
from stylist_service.core.models import GeneratedOutfit, UserContext, WardrobeItem, utcnow
from stylist_service.core.personalization import (
    undertone_boost,
    item_height_boost,
    outfit_undertone_boost,
    outfit_height_boost,
)
from stylist_service.core.slots import (
    REQUIRED_SLOTS,
    FOOTWEAR,
    OUTERWEAR,
    OUTERWEAR_TEMP_THRESHOLD_C,
    OUTERWEAR_OCCASIONS,
)
from stylist_service.core.taste_vector import taste_alignment
from stylist_service.services.weather import WeatherData

logger = logging.getLogger(__name__)

# Candidate score weights
TASTE_WEIGHT = 0.45
SEASON_WEIGHT = 0.30
UNDERTONE_WEIGHT = 0.13
HEIGHT_WEIGHT = 0.12
BOOST_OFFSET = 0.15

COOLDOWN_DAYS = 3
COOLDOWN_MULTIPLIER = 0.3

TOP_N = 5
OUTERWEAR_TOP_N = 3

DEFAULT_ITEM_WEATHER_SCORE = 0.7


# ==================== SELECTION ====================

def weighted_random_pick(
    scored: Sequence[Tuple[float, WardrobeItem]],
    top_n: int = TOP_N,
    rng: Optional[random.Random] = None,
) -> WardrobeItem:
    """
    Pick from the top_n (score, item) pairs, probability rising with score.

    Scores are shifted so the lowest in the window weighs 0.1.
    `scored` must be sorted descending.
    """
    if not scored:
        raise ValueError("No candidates to pick from")
    if len(scored) == 1:
        return scored[0][1]

    rng = rng or random
    window = list(scored[:top_n])
    floor = min(score for score, _ in window)
    weights = [score - floor + 0.1 for score, _ in window]

    remaining = rng.random() * sum(weights)
    for weight, (_, item) in zip(weights, window):
        remaining -= weight
        if remaining <= 0:
            return item

    return window[0][1]


def is_recently_worn(
    item: WardrobeItem,
    cooldown_ids: Set[str],
    now: datetime,
    cooldown_days: int = COOLDOWN_DAYS,
) -> bool:
    if item.id in cooldown_ids:
        return True
    days = item.days_since_worn(now)
    return days is not None and days < cooldown_days


def score_candidate(
    item: WardrobeItem,
    taste_vector,
    user_context: UserContext,
    recently_worn: bool = False,
) -> float:
    """Taste 45%, season 30%, undertone 13%, height 12%; x0.3 if recently worn."""
    taste = taste_alignment(item.embedding, taste_vector)
    undertone = undertone_boost(item.primary_color, user_context.skin_undertone)
    height = item_height_boost(user_context.height_category, item)

    score = (
        taste * TASTE_WEIGHT
        + item.seasonal_score * SEASON_WEIGHT
        + (undertone + BOOST_OFFSET) * UNDERTONE_WEIGHT
        + (height + BOOST_OFFSET) * HEIGHT_WEIGHT
    )

    if recently_worn:
        score *= COOLDOWN_MULTIPLIER
    return score


def _rank(
    candidates: Sequence[WardrobeItem],
    taste_vector,
    user_context: UserContext,
    cooldown_ids: Set[str],
    now: datetime,
) -> List[Tuple[float, WardrobeItem]]:
    """
    Score and sort candidates.

    Recently worn items are dropped while fresh alternatives exist;
    otherwise they stay in with the cooldown penalty.
    """
    worn = {item.id for item in candidates if is_recently_worn(item, cooldown_ids, now)}
    fresh = [item for item in candidates if item.id not in worn]
    pool = fresh or list(candidates)

    scored = [
        (score_candidate(item, taste_vector, user_context, item.id in worn), item)
        for item in pool
    ]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return scored


# ==================== OUTFIT SCORING ====================

def score_outfit(
    items: Sequence[WardrobeItem],
    taste_vector,
    occasion: Optional[str],
    user_context: UserContext,
) -> Dict[str, float]:
    """
    Outfit-level scores shared by both composers.

    style = taste*0.35 + harmony*0.25 + weather*0.2 + (occasion ? 0.1 : 0)
            + undertone boost + height boost
    """
    taste = sum(taste_alignment(i.embedding, taste_vector) for i in items) / len(items)
    harmony = outfit_harmony([i.colors for i in items])
    weather = sum(i.seasonal_score if i.seasonal_score is not None else DEFAULT_ITEM_WEATHER_SCORE for i in items) / len(items)
    occasion_match = all(matches_occasion(i, occasion) for i in items)

    undertone = outfit_undertone_boost([i.primary_color for i in items], user_context.skin_undertone)
    height = outfit_height_boost(user_context.height_category, items)

    style = taste * 0.35 + harmony * 0.25 + weather * 0.2 + (0.1 if occasion_match else 0) + undertone + height

    return {
        "style_score": round(style, 2),
        "color_harmony_score": round(harmony, 2),
        "taste_alignment_score": round(taste, 2),
        "weather_score": round(weather, 2),
        "occasion_match": occasion_match,
    }


def build_rule_outfit(
    items: List[WardrobeItem],
    taste_vector,
    weather: WeatherData,
    occasion: Optional[str],
    user_context: UserContext,
) -> GeneratedOutfit:
    scores = score_outfit(items, taste_vector, occasion, user_context)
    vibe = presentation.generate_vibe(items, scores["style_score"])

    return GeneratedOutfit(
        items=items,
        confidence_score=scores["style_score"],
        name=presentation.generate_name(items, occasion, vibe),
        vibe=vibe,
        reasoning=presentation.generate_reasoning(
            items, scores["color_harmony_score"], scores["taste_alignment_score"], occasion
        ),
        styling_tip=presentation.generate_styling_tip(items, occasion, weather.temperature),
        color_harmony_description=presentation.describe_color_harmony(items),
        composer="rule",
        **scores,
    )


# ==================== COMPOSITION ====================

def wants_outerwear(weather: WeatherData, occasion: Optional[str]) -> bool:
    return weather.temperature < OUTERWEAR_TEMP_THRESHOLD_C or (occasion or "").lower() in OUTERWEAR_OCCASIONS


def compose_outfit(
    groups: Dict[str, List[WardrobeItem]],
    weather: WeatherData,
    taste_vector=None,
    occasion: Optional[str] = None,
    exclude_ids: Optional[Set[str]] = None,
    user_context: Optional[UserContext] = None,
    cooldown_ids: Optional[Set[str]] = None,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> Optional[GeneratedOutfit]:
    """
    Compose one outfit from slot-grouped candidates.

    Returns:
        GeneratedOutfit, or None if any required slot cannot be filled
    """
    exclude = set(exclude_ids or ())
    user_context = user_context or UserContext()
    cooldown_ids = set(cooldown_ids or ())
    now = now or utcnow()

    selected: List[WardrobeItem] = []

    for slot in REQUIRED_SLOTS:
        candidates = groups.get(slot, [])
        available = [i for i in candidates if i.id not in exclude and matches_occasion(i, occasion)]
        filtered = [i for i in available if i.weather_appropriate]

        # Off-season shoes beat no outfit at all
        if not filtered and slot == FOOTWEAR and available:
            logger.info(f"No weather-appropriate footwear - relaxing to {len(available)} available")
            filtered = available

        filtered = filter_by_color_compatibility(filtered, [i.primary_color for i in selected])

        logger.debug(f"Slot {slot}: {len(candidates)} candidates, {len(filtered)} after filters")
        if not filtered:
            logger.info(f"No suitable item for slot: {slot}")
            return None

        pick = weighted_random_pick(_rank(filtered, taste_vector, user_context, cooldown_ids, now), TOP_N, rng)
        selected.append(pick)
        exclude.add(pick.id)

    if wants_outerwear(weather, occasion):
        candidates = [
            i for i in groups.get(OUTERWEAR, [])
            if i.id not in exclude and i.weather_appropriate and matches_occasion(i, occasion)
        ]
        candidates = filter_by_color_compatibility(candidates, [i.primary_color for i in selected])
        if candidates:
            pick = weighted_random_pick(
                _rank(candidates, taste_vector, user_context, cooldown_ids, now), OUTERWEAR_TOP_N, rng
            )
            selected.append(pick)
            exclude.add(pick.id)

    return build_rule_outfit(selected, taste_vector, weather, occasion, user_context)


def compose_outfits(
    groups: Dict[str, List[WardrobeItem]],
    count: int,
    weather: WeatherData,
    taste_vector=None,
    occasion: Optional[str] = None,
    exclude_ids: Optional[Set[str]] = None,
    user_context: Optional[UserContext] = None,
    cooldown_ids: Optional[Set[str]] = None,
    rng: Optional[random.Random] = None,
) -> List[GeneratedOutfit]:
    """
    Compose up to `count` outfits; items used by one outfit are excluded
    from the next.
    """
    global_exclude = set(exclude_ids or ())
    outfits = []

    for _ in range(count):
        outfit = compose_outfit(
            groups,
            weather,
            taste_vector=taste_vector,
            occasion=occasion,
            exclude_ids=global_exclude,
            user_context=user_context,
            cooldown_ids=cooldown_ids,
            rng=rng,
        )
        if outfit is None:
            continue
        outfits.append(outfit)
        global_exclude.update(outfit.item_ids)

    logger.info(f"Rule composer produced {len(outfits)}/{count} outfits")
    return outfits
