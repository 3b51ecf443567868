"""
Outfit Presentation (v1.0.0)
Display text for rule-composed outfits: vibe, name, reasoning, tip and
a color-harmony sentence.
"""
from collections import Counter
from typing import Optional, Sequence

from stylist_service.core.models import WardrobeItem
from stylist_service.core.slots import TOP, BOTTOM, OUTERWEAR
from stylist_service.core.constraints import item_formality

NEUTRAL_WORDS = ("black", "white", "gray", "grey", "beige", "cream", "tan", "khaki", "brown", "navy")
WARM_WORDS = ("red", "orange", "yellow", "coral", "burgundy", "rust", "terracotta")
COOL_WORDS = ("blue", "green", "teal", "mint", "purple", "lavender")
EARTH_WORDS = ("brown", "tan", "olive", "khaki", "rust", "beige", "cream")


def _has_slot(items: Sequence[WardrobeItem], slot: str) -> bool:
    return any(item.slot == slot for item in items)


def _contains_any(color: str, words) -> bool:
    return any(word in color for word in words)


def generate_vibe(items: Sequence[WardrobeItem], style_score: float) -> str:
    """Most frequent style vibe, else a label from the score."""
    counts = Counter(vibe for item in items for vibe in item.style_vibes)
    if counts:
        return counts.most_common(1)[0][0].capitalize()

    if style_score > 0.8:
        return "Stylish"
    if style_score > 0.6:
        return "Casual"
    return "Everyday"


def generate_name(items: Sequence[WardrobeItem], occasion: Optional[str], vibe: str) -> str:
    if occasion:
        return f"{vibe} {occasion.capitalize()} Look"

    top = next((item for item in items if item.slot == TOP), None)
    top_type = (top.subcategory or top.category) if top else None
    top_type = top_type or "Top"
    return f"{vibe} {top_type[0].upper() + top_type[1:]} Outfit"


def generate_reasoning(
    items: Sequence[WardrobeItem],
    color_harmony: float,
    taste_score: float,
    occasion: Optional[str],
) -> str:
    reasons = []

    if color_harmony > 0.7:
        reasons.append("Colors complement each other nicely")
    if taste_score > 0.7:
        reasons.append("Matches your personal style")
    if occasion:
        reasons.append(f"Great for {occasion} occasions")
    if _has_slot(items, OUTERWEAR):
        reasons.append("Layered for versatility")

    if not reasons:
        reasons.append("A well-balanced combination for everyday wear")

    return ". ".join(reasons) + "."


def generate_styling_tip(items: Sequence[WardrobeItem], occasion: Optional[str], temperature: float) -> str:
    """First applicable rule-based tip."""
    tips = []

    has_top = _has_slot(items, TOP)
    has_bottom = _has_slot(items, BOTTOM)
    avg_formality = sum(item_formality(i) for i in items) / len(items) if items else 5

    if has_top and has_bottom and avg_formality >= 5:
        tips.append("Tuck in the top for a more polished silhouette")
    if has_top and avg_formality < 5:
        tips.append("Roll up the sleeves for an effortless casual look")
    if _has_slot(items, OUTERWEAR) and temperature > 18:
        tips.append("Carry the jacket, it is perfect for when it cools down")

    if occasion == "date":
        tips.append("Add a subtle accessory to elevate the look")
    elif occasion in ("work", "business"):
        tips.append("Keep accessories minimal and professional")

    return tips[0] if tips else "A versatile combination that works as-is"


def describe_color_harmony(items: Sequence[WardrobeItem]) -> str:
    colors = [item.primary_color.lower() for item in items if item.primary_color]

    if len(colors) < 2:
        return "A cohesive monochromatic palette"

    has_neutrals = any(_contains_any(c, NEUTRAL_WORDS) for c in colors)
    has_warms = any(_contains_any(c, WARM_WORDS) for c in colors)
    has_cools = any(_contains_any(c, COOL_WORDS) for c in colors)

    if all(_contains_any(c, NEUTRAL_WORDS) for c in colors):
        if any("navy" in c for c in colors) and any("khaki" in c or "tan" in c for c in colors):
            return "Navy and khaki create a timeless nautical palette"
        if any("black" in c for c in colors) and any("white" in c for c in colors):
            return "Classic black and white for sharp contrast"
        return "Neutrals blend seamlessly for an understated elegance"

    if has_warms and has_neutrals and not has_cools:
        return "Warm tones grounded by neutrals for a balanced look"
    if has_cools and has_neutrals and not has_warms:
        return "Cool tones paired with neutrals keep it fresh and refined"
    if has_warms and has_cools:
        return "Complementary warm and cool tones add visual interest"
    if all(_contains_any(c, EARTH_WORDS) for c in colors):
        return "Earth tones create a naturally harmonious palette"

    return "Colors work together for a cohesive outfit"
