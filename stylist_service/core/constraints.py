"""
Generation Constraints (v1.0.0)
Occasion formality bands, moods, and regeneration feedback.

Constraints narrow or reorder the candidate pool for a single call; they are
never persisted.
"""
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from stylist_service.core.models import GenerationConstraints, WardrobeItem
from stylist_service.core.slots import TOP, BOTTOM, FOOTWEAR

logger = logging.getLogger(__name__)

# ==================== OCCASIONS ====================

OCCASION_FORMALITY: Dict[str, Tuple[float, float]] = {
    "casual": (1, 5),
    "smart casual": (4, 6),
    "business": (6, 8),
    "formal": (8, 10),
    "workout": (1, 2),
    "date": (4, 7),
    "party": (4, 8),
    "outdoor": (1, 5),
    "travel": (2, 5),
}

DEFAULT_FORMALITY = 5


def item_formality(item: WardrobeItem) -> float:
    return item.formality_score if item.formality_score is not None else DEFAULT_FORMALITY


def matches_occasion(item: WardrobeItem, occasion: Optional[str]) -> bool:
    """Formality inside the occasion band; unknown occasions are unrestricted."""
    if not occasion:
        return True

    band = OCCASION_FORMALITY.get(occasion.lower().strip())
    if band is None:
        return True

    low, high = band
    return low <= item_formality(item) <= high


# ==================== MOODS ====================

AVAILABLE_MOODS = [
    {"id": "confident", "name": "Confident", "icon": "💪"},
    {"id": "relaxed", "name": "Relaxed", "icon": "😌"},
    {"id": "creative", "name": "Creative", "icon": "🎨"},
    {"id": "professional", "name": "Professional", "icon": "💼"},
    {"id": "adventurous", "name": "Adventurous", "icon": "🌟"},
    {"id": "romantic", "name": "Romantic", "icon": "💕"},
    {"id": "edgy", "name": "Edgy", "icon": "⚡"},
    {"id": "minimalist", "name": "Minimalist", "icon": "◻️"},
]

MOOD_VIBES: Dict[str, List[str]] = {
    "confident": ["bold", "polished", "classic"],
    "relaxed": ["casual", "relaxed", "cozy"],
    "creative": ["eclectic", "bohemian", "colorful"],
    "professional": ["classic", "polished", "minimalist"],
    "adventurous": ["streetwear", "sporty", "colorful"],
    "romantic": ["romantic", "feminine", "soft"],
    "edgy": ["edgy", "grunge", "streetwear"],
    "minimalist": ["minimalist", "clean", "classic"],
}


def vibes_for_mood(mood: Optional[str]) -> List[str]:
    if not mood:
        return []
    return list(MOOD_VIBES.get(mood.lower().strip(), []))


# ==================== REGENERATION FEEDBACK ====================

FEEDBACK_TYPES = (
    "more_bold",
    "more_casual",
    "more_formal",
    "different_colors",
    "swap_top",
    "swap_bottom",
    "swap_shoes",
    "completely_different",
)

SWAP_SLOTS = {
    "swap_top": TOP,
    "swap_bottom": BOTTOM,
    "swap_shoes": FOOTWEAR,
}


def constraints_from_feedback(
    feedback: Optional[str],
    previous_item_ids: Sequence[str] = (),
) -> GenerationConstraints:
    """
    Translate regeneration feedback into constraints.

    Args:
        feedback: One of FEEDBACK_TYPES (unknown values add no constraint)
        previous_item_ids: Items of the outfits being regenerated
    """
    constraints = GenerationConstraints(previous_item_ids=list(previous_item_ids))

    if feedback == "more_bold":
        constraints.prefer_vibes = ["edgy", "bold", "streetwear", "colorful"]
    elif feedback == "more_casual":
        constraints.max_formality = 4
        constraints.prefer_vibes = ["casual", "relaxed", "bohemian"]
    elif feedback == "more_formal":
        constraints.min_formality = 6
        constraints.prefer_vibes = ["classic", "polished", "minimalist"]
    elif feedback == "different_colors":
        constraints.avoid_colors = True
    elif feedback in SWAP_SLOTS:
        constraints.must_swap_slots = [SWAP_SLOTS[feedback]]
    elif feedback == "completely_different":
        constraints.exclude_all_previous_items = True
    elif feedback:
        logger.warning(f"Unknown regeneration feedback '{feedback}' - no constraint applied")

    return constraints


# ==================== APPLICATION ====================

def reorder_by_vibes(items: Sequence[WardrobeItem], vibes: Sequence[str]) -> List[WardrobeItem]:
    """Stable reorder putting items that share a preferred vibe first."""
    if not vibes:
        return list(items)

    wanted = {v.lower() for v in vibes}
    return sorted(items, key=lambda i: not any(v.lower() in wanted for v in i.style_vibes))


def apply_constraints(
    items: Sequence[WardrobeItem],
    constraints: Optional[GenerationConstraints],
    mood: Optional[str] = None,
) -> List[WardrobeItem]:
    """
    Filter and reorder the candidate pool.

    Exclusions, formality bounds and previous-outfit rules remove items;
    preferred vibes (from constraints, then the mood) only reorder.
    """
    vibes = vibes_for_mood(mood)
    if constraints is None or constraints.is_empty():
        return reorder_by_vibes(items, vibes)

    previous = set(constraints.previous_item_ids)
    excluded = set(constraints.exclude_item_ids)
    swap_slots = set(constraints.must_swap_slots)

    avoided_colors = set()
    if constraints.avoid_colors:
        avoided_colors = {
            item.primary_color.lower() for item in items
            if item.id in previous and item.primary_color
        }

    kept = []
    for item in items:
        if item.id in excluded:
            continue
        if constraints.exclude_all_previous_items and item.id in previous:
            continue
        if item.id in previous and item.slot in swap_slots:
            continue
        if constraints.min_formality is not None and item_formality(item) < constraints.min_formality:
            continue
        if constraints.max_formality is not None and item_formality(item) > constraints.max_formality:
            continue
        if item.primary_color and item.primary_color.lower() in avoided_colors:
            continue
        kept.append(item)

    logger.info(f"Constraints kept {len(kept)}/{len(items)} candidates")
    return reorder_by_vibes(kept, list(constraints.prefer_vibes) + vibes)
