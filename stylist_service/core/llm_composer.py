"""
LLM Outfit Composer (v1.0.0)
Prompts the LLM to pick outfits from the candidate pool, then validates the
picks and rescores them from the resolved items.

Never raises for LLM problems: failed calls are counted and yield zero
outfits, invalid picks yield fewer, and the orchestrator backfills with the
rule-based composer.
"""
import logging
from collections import Counter
from typing import Any, Dict, List, Optional, Sequence

from stylist_service.core import presentation
from stylist_service.core.models import GeneratedOutfit, GenerationConstraints, UserContext, WardrobeItem
from stylist_service.core.rule_composer import score_outfit
from stylist_service.core.slots import REQUIRED_SLOTS, OUTERWEAR, ACCESSORY, MAX_ACCESSORIES, ALL_SLOTS
from stylist_service.core.taste_vector import taste_alignment
from stylist_service.core.constraints import vibes_for_mood
from stylist_service.llm import LLMUnavailableError, LLMResponseError, parse_json_response
from stylist_service.observability import record_llm_failure, record_llm_shortfall
from stylist_service.services.weather import WeatherData

logger = logging.getLogger(__name__)

MAX_CANDIDATES_PER_SLOT = 10
MODEL_CONFIDENCE_WEIGHT = 0.25
DEFAULT_MODEL_CONFIDENCE = 0.5

SYSTEM_PROMPT = """You are a personal stylist. Build outfits ONLY from the wardrobe items listed, referencing them by id.

Every outfit needs exactly one top, one bottom and one footwear item. Outerwear and accessories are optional.
An item may appear in at most one outfit: outfits must not share any items.
Respect the occasion, the weather and any constraints. Prefer items with a high taste score.

Return ONLY valid JSON in this format:
{
    "outfits": [
        {
            "top": "<item id>",
            "bottom": "<item id>",
            "footwear": "<item id>",
            "outerwear": "<item id or null>",
            "accessory": ["<item id>", "..."],
            "name": "short outfit name",
            "vibe": "one word",
            "reasoning": "1-2 sentences on why it works",
            "styling_tip": "one practical tip",
            "color_harmony": "one sentence on the colors",
            "confidence": 0.0
        }
    ]
}"""


# ==================== PROMPT ====================

def style_profile(items: Sequence[WardrobeItem], limit: int = 3) -> Dict[str, List[str]]:
    """Dominant style vibes and preferred colors by frequency."""
    vibes = Counter(v.lower() for item in items for v in item.style_vibes)
    colors = Counter(item.primary_color.lower() for item in items if item.primary_color)
    return {
        "vibes": [v for v, _ in vibes.most_common(limit)],
        "colors": [c for c, _ in colors.most_common(limit)],
    }


def _describe_item(item: WardrobeItem, taste_vector) -> str:
    parts = [f"id={item.id}", item.subcategory or item.category or "item"]
    if item.primary_color:
        colors = [item.primary_color] + list(item.colors.secondary)
        parts.append("colors=" + "/".join(colors))
    if item.pattern:
        parts.append(f"pattern={item.pattern}")
    if item.style_vibes:
        parts.append("vibes=" + ",".join(item.style_vibes))
    if item.formality_score is not None:
        parts.append(f"formality={item.formality_score:g}")
    parts.append(f"taste={taste_alignment(item.embedding, taste_vector):.2f}")
    return "- " + " | ".join(parts)


def build_messages(
    groups: Dict[str, List[WardrobeItem]],
    count: int,
    weather: WeatherData,
    taste_vector=None,
    occasion: Optional[str] = None,
    mood: Optional[str] = None,
    constraints: Optional[GenerationConstraints] = None,
) -> List[Dict[str, str]]:
    """System + user messages for one composition request."""
    prompt_parts = [f"Create {count} outfits with no item repeated across them.", ""]

    prompt_parts.append("WARDROBE CANDIDATES:")
    for slot in ALL_SLOTS:
        candidates = groups.get(slot, [])[:MAX_CANDIDATES_PER_SLOT]
        if not candidates:
            continue
        prompt_parts.append(f"{slot.upper()}:")
        prompt_parts.extend(_describe_item(item, taste_vector) for item in candidates)
    prompt_parts.append("")

    prompt_parts.append(f"WEATHER: {weather.to_prompt_context()} (season: {weather.season_suggestion})")
    if occasion:
        prompt_parts.append(f"OCCASION: {occasion}")
    if mood:
        mood_vibes = vibes_for_mood(mood)
        suffix = f" (lean {', '.join(mood_vibes)})" if mood_vibes else ""
        prompt_parts.append(f"MOOD: {mood}{suffix}")

    profile = style_profile([item for items in groups.values() for item in items])
    if profile["vibes"]:
        prompt_parts.append(f"USER'S DOMINANT VIBES: {', '.join(profile['vibes'])}")
    if profile["colors"]:
        prompt_parts.append(f"USER'S PREFERRED COLORS: {', '.join(profile['colors'])}")

    if constraints is not None and not constraints.is_empty():
        prompt_parts.append("")
        prompt_parts.append("CONSTRAINTS:")
        if constraints.prefer_vibes:
            prompt_parts.append(f"- Prefer vibes: {', '.join(constraints.prefer_vibes)}")
        if constraints.min_formality is not None:
            prompt_parts.append(f"- Formality at least {constraints.min_formality:g}")
        if constraints.max_formality is not None:
            prompt_parts.append(f"- Formality at most {constraints.max_formality:g}")
        if constraints.avoid_colors:
            prompt_parts.append("- Use different colors from the previous suggestions")
        if constraints.must_swap_slots:
            prompt_parts.append(f"- Use a different item for: {', '.join(constraints.must_swap_slots)}")
        if constraints.exclude_item_ids:
            prompt_parts.append(f"- Do not use items: {', '.join(constraints.exclude_item_ids)}")

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "\n".join(prompt_parts)},
    ]


# ==================== VALIDATION ====================

def _as_id_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    return [str(value)] if value else []


def resolve_outfit(raw: Dict[str, Any], groups: Dict[str, List[WardrobeItem]]) -> Optional[List[WardrobeItem]]:
    """
    Map one model outfit to wardrobe items.

    Returns None when a required slot is missing, an id is unknown or sits
    in the wrong slot, or an item repeats.
    """
    by_slot = {slot: {item.id: item for item in groups.get(slot, [])} for slot in ALL_SLOTS}
    items: List[WardrobeItem] = []

    for slot in REQUIRED_SLOTS:
        ids = _as_id_list(raw.get(slot))
        if len(ids) != 1 or ids[0] not in by_slot[slot]:
            logger.info(f"Discarding LLM outfit: bad {slot} selection {ids}")
            return None
        items.append(by_slot[slot][ids[0]])

    for slot, limit in ((OUTERWEAR, 1), (ACCESSORY, MAX_ACCESSORIES)):
        ids = _as_id_list(raw.get(slot))
        if len(ids) > limit or any(i not in by_slot[slot] for i in ids):
            logger.info(f"Discarding LLM outfit: bad {slot} selection {ids}")
            return None
        items.extend(by_slot[slot][i] for i in ids)

    if len({item.id for item in items}) != len(items):
        logger.info("Discarding LLM outfit: duplicate items")
        return None

    return items


def _model_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return DEFAULT_MODEL_CONFIDENCE
    return max(0.0, min(1.0, confidence))


def build_llm_outfit(
    raw: Dict[str, Any],
    items: List[WardrobeItem],
    taste_vector,
    weather: WeatherData,
    occasion: Optional[str],
    user_context: UserContext,
) -> GeneratedOutfit:
    """Computed scores from the items; the model's confidence is one blended term."""
    scores = score_outfit(items, taste_vector, occasion, user_context)
    confidence = (
        (1 - MODEL_CONFIDENCE_WEIGHT) * scores["style_score"]
        + MODEL_CONFIDENCE_WEIGHT * _model_confidence(raw.get("confidence"))
    )
    vibe = str(raw.get("vibe") or "").strip() or presentation.generate_vibe(items, scores["style_score"])

    return GeneratedOutfit(
        items=items,
        confidence_score=round(confidence, 2),
        name=str(raw.get("name") or "").strip() or presentation.generate_name(items, occasion, vibe),
        vibe=vibe,
        reasoning=str(raw.get("reasoning") or "").strip() or presentation.generate_reasoning(
            items, scores["color_harmony_score"], scores["taste_alignment_score"], occasion
        ),
        styling_tip=str(raw.get("styling_tip") or "").strip() or presentation.generate_styling_tip(
            items, occasion, weather.temperature
        ),
        color_harmony_description=str(raw.get("color_harmony") or "").strip()
        or presentation.describe_color_harmony(items),
        composer="llm",
        **scores,
    )


# ==================== COMPOSITION ====================

async def compose_outfits(
    client,
    groups: Dict[str, List[WardrobeItem]],
    count: int,
    weather: WeatherData,
    taste_vector=None,
    occasion: Optional[str] = None,
    mood: Optional[str] = None,
    constraints: Optional[GenerationConstraints] = None,
    user_context: Optional[UserContext] = None,
) -> List[GeneratedOutfit]:
    """
    Ask the LLM for `count` outfits.

    Returns:
        Valid outfits (possibly fewer than requested, possibly none)
    """
    user_context = user_context or UserContext()

    if client is None or not client.is_available():
        logger.info("LLM composer unavailable - skipping")
        return []

    messages = build_messages(groups, count, weather, taste_vector, occasion, mood, constraints)

    try:
        content = await client.complete(messages)
        payload = parse_json_response(content)
    except (LLMUnavailableError, LLMResponseError) as e:
        logger.warning(f"LLM composition failed: {e}")
        record_llm_failure()
        return []

    raw_outfits = payload.get("outfits") if isinstance(payload, dict) else payload
    if not isinstance(raw_outfits, list):
        logger.warning("LLM response has no outfit list")
        record_llm_failure()
        return []

    outfits: List[GeneratedOutfit] = []
    used_ids = set()
    for raw in raw_outfits:
        if not isinstance(raw, dict):
            continue
        items = resolve_outfit(raw, groups)
        if items is None:
            continue
        ids = {item.id for item in items}
        if ids & used_ids:
            logger.info(f"Discarding LLM outfit: reuses items {sorted(ids & used_ids)} from this batch")
            continue
        used_ids |= ids
        outfits.append(build_llm_outfit(raw, items, taste_vector, weather, occasion, user_context))
        if len(outfits) == count:
            break

    logger.info(f"LLM composer produced {len(outfits)}/{count} valid outfits")
    if len(outfits) < count:
        record_llm_shortfall()
    return outfits
