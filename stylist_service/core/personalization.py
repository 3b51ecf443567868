"""
Personalization Boosts (v1.0.0)
Skin-undertone color boosts and height-based silhouette boosts.

Each item boost lies in [-0.15, +0.15]; outfit boosts are the mean over items.
"""
from typing import Iterable, Optional, Sequence

MAX_BOOST = 0.15

# ==================== UNDERTONE ====================

WARM_UNDERTONE_COLORS = {
    "brown", "dark brown", "camel", "tan", "beige", "cream", "ivory", "khaki",
    "rust", "terracotta", "copper", "coral", "peach", "salmon", "orange",
    "mustard", "gold", "olive", "olive green", "warm white", "red", "burgundy",
}

COOL_UNDERTONE_COLORS = {
    "navy", "navy blue", "royal blue", "cobalt", "blue", "sky blue", "light blue",
    "teal", "turquoise", "aqua", "cyan", "purple", "violet", "lavender", "lilac",
    "plum", "magenta", "pink", "hot pink", "white", "gray", "grey", "charcoal",
    "burgundy", "wine", "forest green", "emerald", "mint",
}

NEUTRAL_UNDERTONE_COLORS = {
    "black", "white", "gray", "grey", "charcoal", "navy", "navy blue",
    "denim", "taupe", "jade", "soft pink", "dusty rose", "mauve",
}

UNDERTONE_MATCH = 0.12
UNDERTONE_OPPOSE = -0.08
UNDERTONE_NEUTRAL = 0.05


def _clamp(value: float) -> float:
    return max(-MAX_BOOST, min(MAX_BOOST, value))


def undertone_boost(color: Optional[str], undertone: Optional[str]) -> float:
    """Boost for one color given the user's skin undertone."""
    if not undertone or not color:
        return 0.0
    
    normalized = color.lower().strip()
    
    if undertone == "neutral":
        return UNDERTONE_NEUTRAL if normalized in NEUTRAL_UNDERTONE_COLORS else 0.0
    
    if undertone == "warm":
        matching, opposing = WARM_UNDERTONE_COLORS, COOL_UNDERTONE_COLORS
    elif undertone == "cool":
        matching, opposing = COOL_UNDERTONE_COLORS, WARM_UNDERTONE_COLORS
    else:
        return 0.0
    
    # burgundy sits in both sets and counts as a match
    if normalized in matching:
        return _clamp(UNDERTONE_MATCH)
    if normalized in opposing:
        return _clamp(UNDERTONE_OPPOSE)
    return 0.0


def outfit_undertone_boost(colors: Iterable[Optional[str]], undertone: Optional[str]) -> float:
    """Mean undertone boost over the outfit's known primary colors."""
    if not undertone:
        return 0.0
    
    known = [c for c in colors if c]
    if not known:
        return 0.0
    
    return sum(undertone_boost(c, undertone) for c in known) / len(known)


# ==================== HEIGHT / SILHOUETTE ====================

FITS = ("oversized", "relaxed", "regular", "fitted", "slim")
LENGTHS = ("cropped", "regular", "longline")

CATEGORY_INFERRED_FIT = {
    "hoodie": "relaxed", "hoodies": "relaxed",
    "sweater": "relaxed", "sweaters": "relaxed",
    "cardigan": "relaxed", "cardigans": "relaxed",
    "parka": "oversized", "parkas": "oversized",
    "t-shirt": "regular", "t-shirts": "regular",
    "shirt": "regular", "shirts": "regular",
    "blouse": "fitted", "blouses": "fitted",
    "polo": "fitted", "polos": "fitted",
    "blazer": "fitted", "blazers": "fitted",
    "jeans": "regular", "pants": "regular",
    "trousers": "fitted", "chinos": "fitted",
    "joggers": "relaxed", "leggings": "slim",
    "shorts": "regular",
    "skirt": "fitted", "skirts": "fitted",
}

CATEGORY_INFERRED_LENGTH = {
    "crop top": "cropped", "cropped jacket": "cropped", "shorts": "cropped",
    "coat": "longline", "coats": "longline",
    "maxi skirt": "longline", "maxi dress": "longline",
    "parka": "longline", "parkas": "longline",
    "t-shirt": "regular", "shirt": "regular",
    "jeans": "regular", "pants": "regular",
}

_SHORT_FIT = {"fitted": 0.10, "slim": 0.10, "regular": 0.02, "relaxed": -0.05, "oversized": -0.12}
_SHORT_LENGTH = {"cropped": 0.08, "regular": 0.02, "longline": -0.10}
_TALL_FIT = {"oversized": 0.08, "relaxed": 0.05, "regular": 0.02, "fitted": 0.0, "slim": 0.0}
_TALL_LENGTH = {"longline": 0.08, "regular": 0.02, "cropped": 0.0}


def _category_key(category: Optional[str], subcategory: Optional[str]) -> str:
    return (subcategory or category or "").lower().strip()


def infer_fit(fit: Optional[str], category: Optional[str] = None, subcategory: Optional[str] = None) -> str:
    if fit in FITS:
        return fit
    return CATEGORY_INFERRED_FIT.get(_category_key(category, subcategory), "regular")


def infer_length(length: Optional[str], category: Optional[str] = None, subcategory: Optional[str] = None) -> str:
    if length in LENGTHS:
        return length
    return CATEGORY_INFERRED_LENGTH.get(_category_key(category, subcategory), "regular")


def height_boost(
    height_category: Optional[str],
    fit: Optional[str] = None,
    length: Optional[str] = None,
    category: Optional[str] = None,
    subcategory: Optional[str] = None,
) -> float:
    """
    Silhouette boost for one item.
    
    Short frames favor fitted/slim and cropped pieces; tall frames carry
    oversized and longline pieces; average height is neutral.
    """
    if height_category == "short":
        fit_table, length_table = _SHORT_FIT, _SHORT_LENGTH
    elif height_category == "tall":
        fit_table, length_table = _TALL_FIT, _TALL_LENGTH
    else:
        return 0.0
    
    resolved_fit = infer_fit(fit, category, subcategory)
    resolved_length = infer_length(length, category, subcategory)
    
    return _clamp(fit_table[resolved_fit] + length_table[resolved_length])


def item_height_boost(height_category: Optional[str], item) -> float:
    return height_boost(height_category, item.fit, item.length, item.category, item.subcategory)


def outfit_height_boost(height_category: Optional[str], items: Sequence) -> float:
    """Mean silhouette boost over the outfit's items."""
    if not height_category or not items:
        return 0.0
    
    return sum(item_height_boost(height_category, item) for item in items) / len(items)
