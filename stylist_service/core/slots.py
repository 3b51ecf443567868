"""
Slot Classifier (v1.0.0)
Maps free-text garment categories to outfit slots.
"""
import logging
from typing import Dict, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

TOP = "top"
BOTTOM = "bottom"
FOOTWEAR = "footwear"
OUTERWEAR = "outerwear"
ACCESSORY = "accessory"
UNKNOWN = "unknown"

REQUIRED_SLOTS = (TOP, BOTTOM, FOOTWEAR)
OPTIONAL_SLOTS = (OUTERWEAR, ACCESSORY)
ALL_SLOTS = REQUIRED_SLOTS + OPTIONAL_SLOTS

# Outerwear is added below this temperature or for these occasions
OUTERWEAR_TEMP_THRESHOLD_C = 15
OUTERWEAR_OCCASIONS = {"formal", "business"}

MAX_ACCESSORIES = 2

CATEGORY_TO_SLOT: Dict[str, str] = {
    # Tops
    "t-shirt": TOP, "t-shirts": TOP, "tee": TOP,
    "shirt": TOP, "shirts": TOP,
    "blouse": TOP, "blouses": TOP,
    "top": TOP, "tops": TOP,
    "sweater": TOP, "sweaters": TOP,
    "hoodie": TOP, "hoodies": TOP,
    "sweatshirt": TOP, "sweatshirts": TOP,
    "tank": TOP, "tank top": TOP, "crop top": TOP,
    "polo": TOP, "polos": TOP,
    "cardigan": TOP, "cardigans": TOP,
    
    # Bottoms
    "pants": BOTTOM, "jeans": BOTTOM, "trousers": BOTTOM,
    "shorts": BOTTOM, "skirt": BOTTOM, "skirts": BOTTOM,
    "bottom": BOTTOM, "bottoms": BOTTOM,
    "leggings": BOTTOM, "chinos": BOTTOM, "joggers": BOTTOM,
    "maxi skirt": BOTTOM,
    
    # Footwear
    "shoes": FOOTWEAR, "sneakers": FOOTWEAR, "boots": FOOTWEAR,
    "sandals": FOOTWEAR, "loafers": FOOTWEAR, "heels": FOOTWEAR,
    "flats": FOOTWEAR, "footwear": FOOTWEAR, "oxfords": FOOTWEAR,
    "dress shoes": FOOTWEAR,
    
    # Outerwear
    "jacket": OUTERWEAR, "jackets": OUTERWEAR,
    "coat": OUTERWEAR, "coats": OUTERWEAR,
    "blazer": OUTERWEAR, "blazers": OUTERWEAR,
    "outerwear": OUTERWEAR,
    "vest": OUTERWEAR, "vests": OUTERWEAR,
    "parka": OUTERWEAR, "parkas": OUTERWEAR,
    "cropped jacket": OUTERWEAR,
    
    # Accessories
    "hat": ACCESSORY, "hats": ACCESSORY,
    "scarf": ACCESSORY, "scarves": ACCESSORY,
    "belt": ACCESSORY, "belts": ACCESSORY,
    "bag": ACCESSORY, "bags": ACCESSORY,
    "jewelry": ACCESSORY,
    "watch": ACCESSORY, "watches": ACCESSORY,
    "sunglasses": ACCESSORY,
    "accessory": ACCESSORY, "accessories": ACCESSORY,
}


def _lookup(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return CATEGORY_TO_SLOT.get(value.lower().strip())


def classify_slot(category: Optional[str], subcategory: Optional[str] = None) -> str:
    """Slot for a garment: category first, then subcategory, else UNKNOWN."""
    return _lookup(category) or _lookup(subcategory) or UNKNOWN


def has_required_slots(categories: Iterable[str]) -> bool:
    """True when the categories cover top, bottom and footwear."""
    slots = {classify_slot(c) for c in categories}
    return all(slot in slots for slot in REQUIRED_SLOTS)


T = TypeVar("T")


def group_by_slot(items: Iterable[T]) -> Dict[str, List[T]]:
    """
    Group items by slot, preserving input order within each slot.
    
    Items must expose .category and .subcategory.
    """
    groups: Dict[str, List[T]] = {slot: [] for slot in ALL_SLOTS + (UNKNOWN,)}
    
    for item in items:
        groups[classify_slot(item.category, item.subcategory)].append(item)
    
    if groups[UNKNOWN]:
        unknown = ", ".join(str(i.category) for i in groups[UNKNOWN])
        logger.info(f"Unrecognized categories excluded from composition: {unknown}")
    
    return groups


def missing_required_slots(groups: Dict[str, list]) -> List[str]:
    return [slot for slot in REQUIRED_SLOTS if not groups.get(slot)]
