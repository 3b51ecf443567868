"""
Taste Vector Persistence (v1.0.0)
Storage for per-user taste vectors and onboarding reference embeddings.
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any

from stylist_service.db import mongo

logger = logging.getLogger(__name__)


def get_taste_record(user_id: str) -> Optional[Dict[str, Any]]:
    """
    Stored taste record for a user.
    
    Raises on store errors so the caller can treat the read as failed.
    """
    collection = mongo.get_collection(mongo.TASTE_VECTORS)
    if collection is None:
        raise ConnectionError("Taste vector store is unreachable")
    
    return collection.find_one({"user_id": user_id}, {"_id": 0})


def save_taste_record(
    user_id: str,
    taste_vector: List[float],
    interaction_count: int,
    initialized_at: datetime,
    last_updated: datetime,
) -> bool:
    """Upsert the user's taste vector."""
    collection = mongo.get_collection(mongo.TASTE_VECTORS)
    if collection is None:
        raise ConnectionError("Taste vector store is unreachable")
    
    collection.update_one(
        {"user_id": user_id},
        {"$set": {
            "taste_vector": taste_vector,
            "interaction_count": interaction_count,
            "initialized_at": initialized_at,
            "last_updated": last_updated,
        }},
        upsert=True,
    )
    return True


def get_reference_embeddings(image_ids: List[str]) -> List[List[float]]:
    """Embeddings of onboarding style-reference images."""
    if not image_ids:
        return []
    
    collection = mongo.get_collection(mongo.STYLE_REFERENCES)
    if collection is None:
        raise ConnectionError("Style reference store is unreachable")
    
    cursor = collection.find({"image_id": {"$in": image_ids}}, {"_id": 0, "embedding": 1})
    return [doc["embedding"] for doc in cursor if doc.get("embedding")]
