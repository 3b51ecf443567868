"""
Color Harmony Scorer (v1.0.0)
Scores garment color combinations from approximate HSL values.

Pair scores are symmetric, 1.0 for identical names, 0.95 when either color
is neutral, and otherwise classified by hue distance into a harmony archetype.
"""
import logging
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from stylist_service.core.models import ColorInfo

logger = logging.getLogger(__name__)

HSL = Tuple[float, float, float]

COMPATIBILITY_THRESHOLD = 0.6
NEUTRAL_PAIR_SCORE = 0.95
UNKNOWN_PAIR_SCORE = 0.7
CLASH_THRESHOLD = 0.5
SECONDARY_CLASH_PENALTY = 0.1

# Color name -> (hue 0-360, saturation 0-100, lightness 0-100)
COLOR_HSL: Dict[str, HSL] = {
    # Neutrals
    "black": (0, 0, 5),
    "white": (0, 0, 100),
    "gray": (0, 0, 50),
    "grey": (0, 0, 50),
    "charcoal": (0, 0, 25),
    "ivory": (60, 10, 95),
    "cream": (45, 20, 90),
    "beige": (40, 25, 75),
    "tan": (35, 35, 65),
    "taupe": (30, 15, 55),
    "brown": (30, 50, 35),
    "dark brown": (25, 60, 20),
    "camel": (35, 45, 55),
    "khaki": (45, 30, 60),
    "navy": (220, 70, 20),
    "navy blue": (220, 70, 20),
    
    # Primary
    "red": (0, 85, 50),
    "blue": (220, 80, 50),
    "yellow": (55, 90, 55),
    
    # Secondary
    "green": (120, 60, 40),
    "orange": (30, 90, 55),
    "purple": (280, 60, 45),
    "violet": (280, 60, 45),
    
    # Fashion colors
    "pink": (340, 70, 70),
    "hot pink": (330, 85, 55),
    "coral": (15, 75, 60),
    "salmon": (10, 60, 70),
    "maroon": (0, 60, 25),
    "burgundy": (345, 70, 25),
    "wine": (345, 60, 30),
    "teal": (180, 70, 35),
    "turquoise": (175, 70, 50),
    "aqua": (180, 70, 60),
    "cyan": (180, 80, 50),
    "sky blue": (200, 70, 65),
    "light blue": (200, 60, 75),
    "royal blue": (225, 80, 45),
    "cobalt": (220, 80, 45),
    "indigo": (260, 70, 35),
    "lavender": (270, 50, 75),
    "lilac": (280, 45, 75),
    "magenta": (300, 80, 50),
    "forest green": (130, 60, 25),
    "olive green": (80, 50, 35),
    "olive": (80, 50, 35),
    "sage": (100, 30, 55),
    "mint": (150, 50, 70),
    "lime green": (90, 70, 50),
    "mustard": (45, 85, 45),
    "gold": (45, 80, 50),
    "rust": (20, 70, 40),
    "terracotta": (15, 55, 50),
    "copper": (25, 75, 45),
    "peach": (25, 75, 75),
    "blush": (350, 35, 80),
    "mauve": (320, 25, 60),
    "plum": (300, 45, 35),
    "denim": (210, 50, 45),
    
    # Patterns behave as neutrals
    "multicolor": (0, 0, 50),
    "pattern": (0, 0, 50),
}

NEUTRALS = {
    "black", "white", "gray", "grey", "charcoal", "navy", "navy blue",
    "cream", "ivory", "beige", "tan", "taupe", "brown", "dark brown",
    "camel", "khaki", "denim",
}


def normalize_color(color: Optional[str]) -> str:
    return (color or "").lower().strip()


def get_color_hsl(color: Optional[str]) -> Optional[HSL]:
    """HSL for a color name: exact match, then substring match either way."""
    normalized = normalize_color(color)
    if not normalized:
        return None
    
    if normalized in COLOR_HSL:
        return COLOR_HSL[normalized]
    
    for name, hsl in COLOR_HSL.items():
        if name in normalized or normalized in name:
            return hsl
    
    return None


def is_neutral(color: Optional[str]) -> bool:
    normalized = normalize_color(color)
    if normalized in NEUTRALS:
        return True
    
    hsl = get_color_hsl(normalized)
    return hsl is not None and hsl[1] < 15


def hue_difference(h1: float, h2: float) -> float:
    """Circular hue distance in [0, 180]."""
    diff = abs(h1 - h2) % 360
    return min(diff, 360 - diff)


def classify_harmony(hue_diff: float) -> Optional[str]:
    """Harmony archetype for a hue distance, None when no archetype applies."""
    if hue_diff < 15:
        return "monochromatic"
    if 160 <= hue_diff <= 200:
        return "complementary"
    if 130 <= hue_diff < 160:
        return "split-complementary"
    if 110 <= hue_diff <= 130:
        return "triadic"
    if 25 <= hue_diff <= 65:
        return "analogous"
    if 80 <= hue_diff < 110:
        return "tetradic"
    return None


_ARCHETYPE_SCORES = {
    "complementary": 0.85,
    "split-complementary": 0.8,
    "triadic": 0.75,
    "analogous": 0.85,
    "tetradic": 0.7,
}


def score_pair(color_a: Optional[str], color_b: Optional[str]) -> float:
    """Harmony of two color names in [0, 1]. Symmetric in its arguments."""
    a, b = normalize_color(color_a), normalize_color(color_b)
    
    if a == b:
        return 1.0
    
    if is_neutral(a) or is_neutral(b):
        return NEUTRAL_PAIR_SCORE
    
    hsl_a, hsl_b = get_color_hsl(a), get_color_hsl(b)
    if hsl_a is None or hsl_b is None:
        return UNKNOWN_PAIR_SCORE
    
    hue_diff = hue_difference(hsl_a[0], hsl_b[0])
    sat_diff = abs(hsl_a[1] - hsl_b[1])
    light_diff = abs(hsl_a[2] - hsl_b[2])
    
    archetype = classify_harmony(hue_diff)
    if archetype == "monochromatic":
        score = 0.9 - light_diff * 0.002
    else:
        score = _ARCHETYPE_SCORES.get(archetype, 0.5)
    
    # Similar saturation levels sit better together
    if sat_diff < 20:
        score += 0.05
    elif sat_diff > 50:
        score -= 0.1
    
    return max(0.0, min(1.0, score))


def colors_are_compatible(color_a: Optional[str], color_b: Optional[str]) -> bool:
    return score_pair(color_a, color_b) >= COMPATIBILITY_THRESHOLD


def outfit_harmony(colors: Sequence[ColorInfo]) -> float:
    """
    Aggregate harmony for an outfit's colors.
    
    Mean pairwise score over primary colors, minus SECONDARY_CLASH_PENALTY
    for each secondary color that clashes with a primary. 1.0 for a single
    item, 0.9 when fewer than two primaries are known.
    """
    if len(colors) < 2:
        return 1.0
    
    primaries = [c.primary for c in colors if c.primary]
    if len(primaries) < 2:
        return 0.9
    
    pair_scores = [score_pair(a, b) for a, b in combinations(primaries, 2)]
    harmony = sum(pair_scores) / len(pair_scores)
    
    secondaries = [s for c in colors for s in (c.secondary or [])]
    clashes = sum(
        1 for secondary in secondaries for primary in primaries
        if score_pair(secondary, primary) < CLASH_THRESHOLD
    )
    if clashes:
        logger.debug(f"{clashes} secondary color clash(es) in outfit")
        harmony -= SECONDARY_CLASH_PENALTY * clashes
    
    return max(0.0, min(1.0, harmony))


def filter_by_color_compatibility(candidates: Iterable, used_colors: Iterable[Optional[str]]) -> List:
    """
    Keep candidates whose primary color is compatible with every used color.
    
    Candidates without a primary color pass through.
    """
    used = [c for c in used_colors if c]
    if not used:
        return list(candidates)
    
    return [
        item for item in candidates
        if not item.primary_color
        or all(colors_are_compatible(item.primary_color, existing) for existing in used)
    ]


def get_complementary_colors(color: Optional[str], limit: int = 5) -> List[str]:
    """Named colors near the complement of `color`, padded with safe neutrals."""
    hsl = get_color_hsl(color)
    if hsl is None:
        return ["black", "white", "gray"]
    
    complement_hue = (hsl[0] + 180) % 360
    suggestions = [
        name for name, (h, _, _) in COLOR_HSL.items()
        if hue_difference(complement_hue, h) < 30 and name not in NEUTRALS
    ]
    suggestions.extend(["black", "white", "navy"])
    
    return list(dict.fromkeys(suggestions))[:limit]
