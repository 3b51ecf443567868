"""
Outfit Persistence Module (v1.0.0)
Generated outfit storage, user profiles and active-user queries.
"""
import logging
import secrets
from datetime import timedelta, date
from typing import Optional, List, Dict, Any

from stylist_service.db import mongo
from stylist_service.core.models import GeneratedOutfit, UserContext, utcnow

logger = logging.getLogger(__name__)

SOURCES = ("on_demand", "pre_generated", "first_outfit_auto", "regenerated")


def save_generated_outfit(
    user_id: str,
    outfit: GeneratedOutfit,
    occasion: Optional[str] = None,
    weather=None,
    source: str = "on_demand",
    target_date: Optional[date] = None,
) -> Optional[str]:
    """
    Persist a generated outfit.
    
    Returns:
        Generated outfit id, or None on failure
    """
    try:
        collection = mongo.get_collection(mongo.GENERATED_OUTFITS)
        if collection is None:
            return None
        
        outfit_id = secrets.token_hex(8)

        document = {
            "outfit_id": outfit_id,
            "user_id": user_id,
            "items": outfit.item_ids,
            "occasion": occasion,
            "style_score": outfit.style_score,
            "color_harmony_score": outfit.color_harmony_score,
            "taste_alignment_score": outfit.taste_alignment_score,
            "weather_score": outfit.weather_score,
            "occasion_match": outfit.occasion_match,
            "confidence_score": outfit.confidence_score,
            "outfit_name": outfit.name,
            "vibe": outfit.vibe,
            "reasoning": outfit.reasoning,
            "styling_tip": outfit.styling_tip,
            "color_harmony_description": outfit.color_harmony_description,
            "composer": outfit.composer,
            "weather_temp": round(weather.temperature) if weather is not None else None,
            "weather_condition": weather.condition if weather is not None else None,
            "is_saved": False,
            "is_worn": False,
            "is_pre_generated": source == "pre_generated",
            "source": source if source in SOURCES else "on_demand",
            "target_date": target_date.isoformat() if target_date else None,
            "created_at": outfit.generated_at,
            "expires_at": outfit.expires_at,
        }
        
        collection.insert_one(document)
        logger.info(f"Saved outfit {outfit_id} for {user_id} (source={document['source']}, items={outfit.item_ids})")
        return outfit_id
        
    except Exception as e:
        logger.error(f"Failed to save outfit for {user_id}: {e}")
        return None


def get_outfit_item_ids(user_id: str, outfit_id: str) -> List[str]:
    """Item ids of one of the user's generated outfits."""
    try:
        collection = mongo.get_collection(mongo.GENERATED_OUTFITS)
        if collection is None:
            return []
        
        outfit = collection.find_one({"outfit_id": outfit_id, "user_id": user_id}, {"_id": 0, "items": 1})
        return list(outfit.get("items") or []) if outfit else []
        
    except Exception as e:
        logger.error(f"Failed to load outfit {outfit_id}: {e}")
        return []


def get_previous_item_ids(user_id: str, outfit_ids: List[str]) -> List[str]:
    """Flattened item ids across several of the user's outfits."""
    item_ids: List[str] = []
    for outfit_id in outfit_ids:
        item_ids.extend(get_outfit_item_ids(user_id, outfit_id))
    return list(dict.fromkeys(item_ids))


def count_user_outfits(user_id: str) -> Optional[int]:
    """Number of generated outfits; None when the store is unreachable."""
    try:
        collection = mongo.get_collection(mongo.GENERATED_OUTFITS)
        if collection is None:
            return None
        return collection.count_documents({"user_id": user_id})
    except Exception as e:
        logger.error(f"Failed to count outfits for {user_id}: {e}")
        return None


def clear_pre_generated(user_id: str, before: Optional[date] = None, on: Optional[date] = None) -> int:
    """Delete pre-generated outfits with target_date before/on a date."""
    query: Dict[str, Any] = {"user_id": user_id, "is_pre_generated": True}
    if before is not None:
        query["target_date"] = {"$lt": before.isoformat()}
    elif on is not None:
        query["target_date"] = on.isoformat()
    
    try:
        collection = mongo.get_collection(mongo.GENERATED_OUTFITS)
        if collection is None:
            return 0
        return collection.delete_many(query).deleted_count
    except Exception as e:
        logger.warning(f"Failed to clear pre-generated outfits for {user_id}: {e}")
        return 0


# ==================== USER PROFILES ====================

def get_user_context(user_id: str) -> UserContext:
    """Personalization attributes; empty context on any failure."""
    try:
        collection = mongo.get_collection(mongo.USER_PROFILES)
        if collection is None:
            return UserContext()
        
        profile = collection.find_one(
            {"user_id": user_id},
            {"_id": 0, "height_category": 1, "skin_undertone": 1, "departments": 1}
        )
        if not profile:
            return UserContext()
        
        return UserContext(
            height_category=profile.get("height_category"),
            skin_undertone=profile.get("skin_undertone"),
            departments=list(profile.get("departments") or []),
        )
        
    except Exception as e:
        logger.warning(f"Failed to load profile for {user_id}: {e}")
        return UserContext()


def get_active_users(active_days: int = 7) -> List[Dict[str, Any]]:
    """
    Users active within `active_days`, with their stored location.
    
    Raises on store errors; batch jobs cannot run without the user list.
    """
    collection = mongo.get_collection(mongo.USER_PROFILES)
    if collection is None:
        raise ConnectionError("User profile store is unreachable")
    
    cutoff = utcnow() - timedelta(days=active_days)
    cursor = collection.find(
        {"last_active_at": {"$gte": cutoff}},
        {"_id": 0, "user_id": 1, "location_lat": 1, "location_lng": 1, "location_city": 1}
    )
    return list(cursor)


# ==================== INTERACTIONS ====================

def record_wear(user_id: str, outfit_id: str, item_ids: List[str]) -> bool:
    """Mark an outfit worn and append an outfit-history record for the cooldown."""
    try:
        outfits = mongo.get_collection(mongo.GENERATED_OUTFITS)
        history = mongo.get_collection(mongo.OUTFIT_HISTORY)
        if outfits is None or history is None:
            return False
        
        now = utcnow()
        outfits.update_one({"outfit_id": outfit_id, "user_id": user_id}, {"$set": {"is_worn": True}})
        history.insert_one({"user_id": user_id, "outfit_id": outfit_id, "item_ids": item_ids, "worn_at": now})
        
        wardrobe = mongo.get_collection(mongo.WARDROBE_ITEMS)
        if wardrobe is not None:
            wardrobe.update_many(
                {"user_id": user_id, "item_id": {"$in": item_ids}},
                {"$set": {"last_worn_at": now}, "$inc": {"times_worn": 1}}
            )
        return True
        
    except Exception as e:
        logger.error(f"Failed to record wear of {outfit_id}: {e}")
        return False


def mark_saved(user_id: str, outfit_id: str) -> bool:
    try:
        collection = mongo.get_collection(mongo.GENERATED_OUTFITS)
        if collection is None:
            return False
        result = collection.update_one({"outfit_id": outfit_id, "user_id": user_id}, {"$set": {"is_saved": True}})
        return result.matched_count > 0
    except Exception as e:
        logger.error(f"Failed to save {outfit_id}: {e}")
        return False


def get_user_location(user_id: str) -> Dict[str, Any]:
    """Stored coordinates/city for a user; empty dict when unknown."""
    try:
        collection = mongo.get_collection(mongo.USER_PROFILES)
        if collection is None:
            return {}
        profile = collection.find_one(
            {"user_id": user_id},
            {"_id": 0, "location_lat": 1, "location_lng": 1, "location_city": 1}
        )
        return profile or {}
    except Exception as e:
        logger.warning(f"Failed to load location for {user_id}: {e}")
        return {}
