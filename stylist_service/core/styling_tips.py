"""
Personalized Styling Tips (v1.0.0)
One LLM-written tip per rule-composed outfit for users with a height or
skin undertone on their profile. The rule-based tip stays when the LLM is
unavailable or fails.
"""
import logging
from typing import Dict, List, Optional, Sequence

from stylist_service.core.models import UserContext, WardrobeItem
from stylist_service.llm import LLMUnavailableError
from stylist_service.services.weather import WeatherData

logger = logging.getLogger(__name__)

TIP_MAX_TOKENS = 150
TIP_TEMPERATURE = 0.7

HEIGHT_GUIDELINES = {
    "short": "For shorter frames: elongating silhouettes, vertical lines, monochromatic looks, "
             "properly proportioned layers and well-fitted pieces work well.",
    "tall": "For taller frames: can carry oversized pieces, statement layering and bold proportions confidently.",
}

UNDERTONE_GUIDELINES = {
    "warm": "Warm undertones: earth tones, warm whites and creams, gold accessories and warm-based colors complement well.",
    "cool": "Cool undertones: jewel tones, crisp whites, silver accessories and blue-based colors complement well.",
    "neutral": "Neutral undertones: versatile with both warm and cool palettes.",
}


def _describe_user(user_context: UserContext) -> str:
    parts = []
    if user_context.height_category:
        fit = "menswear" if "menswear" in user_context.departments else "womenswear"
        parts.append(f"Height: {user_context.height_category} ({fit} fit)")
    if user_context.skin_undertone:
        parts.append(f"Skin Undertone: {user_context.skin_undertone}")
    return "User: " + ", ".join(parts)


def _describe_outfit(items: Sequence[WardrobeItem]) -> str:
    names = []
    for item in items:
        name = item.item_name or item.subcategory or item.category or "item"
        names.append(f"{item.primary_color} {name}" if item.primary_color else name)
    return ", ".join(names)


def build_tip_messages(
    items: Sequence[WardrobeItem],
    user_context: UserContext,
    weather: WeatherData,
    occasion: Optional[str] = None,
) -> List[Dict[str, str]]:
    prompt_parts = [
        "You are a personal stylist. Generate ONE concise styling tip (max 2 sentences) for this outfit.",
        "",
        _describe_user(user_context),
        f"Outfit: {_describe_outfit(items)}",
        f"Weather: {round(weather.temperature)}°C, {weather.condition}",
    ]
    if occasion:
        prompt_parts.append(f"Occasion: {occasion}")

    guidelines = [
        HEIGHT_GUIDELINES.get(user_context.height_category or ""),
        UNDERTONE_GUIDELINES.get(user_context.skin_undertone or ""),
    ]
    guidelines = [g for g in guidelines if g]
    if guidelines:
        prompt_parts.append("")
        prompt_parts.append("Consider these guidelines based on the user's attributes:")
        prompt_parts.extend(f"- {g}" for g in guidelines)

    prompt_parts.append("")
    prompt_parts.append(
        "Make the tip specific and actionable. Reference their proportions or coloring naturally, not robotically."
    )
    prompt_parts.append("Return ONLY the styling tip, no preamble or explanation.")

    return [{"role": "user", "content": "\n".join(prompt_parts)}]


def clean_tip(text: str) -> str:
    """Strip whitespace and one pair of wrapping quotes."""
    tip = text.strip()
    if len(tip) >= 2 and tip[0] == tip[-1] and tip[0] in ("'", '"'):
        tip = tip[1:-1].strip()
    return tip


async def personalize_styling_tip(
    client,
    items: Sequence[WardrobeItem],
    user_context: UserContext,
    weather: WeatherData,
    occasion: Optional[str] = None,
) -> Optional[str]:
    """
    Ask the LLM for a tip tailored to the user's height and undertone.

    Returns:
        The tip, or None when the user has no profile attributes, the LLM is
        unavailable or the call fails (callers keep their rule-based tip)
    """
    if not user_context.is_personalized():
        return None
    if client is None or not client.is_available():
        return None

    messages = build_tip_messages(items, user_context, weather, occasion)
    try:
        text = await client.complete(messages, max_tokens=TIP_MAX_TOKENS, temperature=TIP_TEMPERATURE)
    except LLMUnavailableError as e:
        logger.warning(f"Personalized styling tip failed, keeping rule-based tip: {e}")
        return None

    tip = clean_tip(text or "")
    if not tip:
        return None

    logger.info(
        f"Personalized tip for height={user_context.height_category or 'unset'}, "
        f"undertone={user_context.skin_undertone or 'unset'}"
    )
    return tip
