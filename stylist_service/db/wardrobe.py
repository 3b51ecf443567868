"""
Wardrobe Store (v1.0.0)
Eligible-item queries, recent-wear lookups and taste-ranked candidate search.

Unlike the enrichment lookups, a failed eligible-items fetch raises
WardrobeUnavailableError: without wardrobe data no outfit can be composed.
"""
import logging
from collections import defaultdict
from datetime import timedelta
from typing import Optional, List, Dict, Any, Sequence

import numpy as np

from stylist_service.db import mongo
from stylist_service.core.models import WardrobeItem, utcnow

logger = logging.getLogger(__name__)

ALL_GENDERS = ["male", "female", "unisex"]
DEFAULT_LIMIT_PER_SLOT = 15


class WardrobeUnavailableError(Exception):
    """The wardrobe store could not be read."""


def _collection(name: str):
    collection = mongo.get_collection(name)
    if collection is None:
        raise WardrobeUnavailableError("Wardrobe store is unreachable")
    return collection


def _eligible_query(user_id: str, genders: Optional[Sequence[str]]) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "is_archived": False,
        "processing_status": "completed",
        "gender": {"$in": list(genders or ALL_GENDERS)},
    }


def fetch_eligible_items(user_id: str, genders: Optional[Sequence[str]] = None) -> List[WardrobeItem]:
    """
    Completed, non-archived items for the user within the gender allow-list.
    
    Raises:
        WardrobeUnavailableError: Store unreachable or query failed
    """
    try:
        cursor = _collection(mongo.WARDROBE_ITEMS).find(_eligible_query(user_id, genders), {"_id": 0})
        items = [WardrobeItem.from_document(doc) for doc in cursor]
    except WardrobeUnavailableError:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch wardrobe for {user_id}: {e}")
        raise WardrobeUnavailableError(str(e)) from e
    
    logger.info(f"Eligible wardrobe items for {user_id}: {len(items)}")
    return items


def fetch_recently_worn(user_id: str, days: int = 3) -> List[str]:
    """Item ids from outfit-history records younger than `days` days."""
    cutoff = utcnow() - timedelta(days=days)
    
    try:
        collection = mongo.get_collection(mongo.OUTFIT_HISTORY)
        if collection is None:
            return []
        
        cursor = collection.find(
            {"user_id": user_id, "worn_at": {"$gte": cutoff}},
            {"_id": 0, "item_ids": 1}
        )
        worn = {item_id for record in cursor for item_id in record.get("item_ids", [])}
        return sorted(worn)
        
    except Exception as e:
        logger.warning(f"Failed to fetch recently worn items for {user_id}: {e}")
        return []


def fetch_candidates_by_vector(
    user_id: str,
    taste_vector,
    genders: Optional[Sequence[str]] = None,
    per_slot_limit: int = DEFAULT_LIMIT_PER_SLOT,
    seasons: Optional[Sequence[str]] = None,
    exclude_ids: Optional[Sequence[str]] = None,
) -> List[WardrobeItem]:
    """
    Nearest-neighbour candidates ranked by cosine similarity to the taste vector.
    
    Keeps the top `per_slot_limit` items per lowercased category. Items with
    no season tags pass the season filter. Errors propagate so the caller
    can fall back to the plain path.
    """
    query = _eligible_query(user_id, genders)
    query["embedding"] = {"$ne": None}
    
    if seasons:
        query["$or"] = [
            {"seasons": {"$in": list(seasons)}},
            {"seasons": {"$exists": False}},
            {"seasons": None},
            {"seasons": {"$size": 0}},
        ]
    if exclude_ids:
        query["item_id"] = {"$nin": list(exclude_ids)}
    
    docs = list(_collection(mongo.WARDROBE_ITEMS).find(query, {"_id": 0}))
    docs = [d for d in docs if d.get("embedding")]
    if not docs:
        return []
    
    taste = np.asarray(taste_vector, dtype=np.float64)
    dim = taste.shape[0]
    docs = [d for d in docs if len(d["embedding"]) == dim]
    if not docs:
        return []
    
    matrix = np.asarray([d["embedding"] for d in docs], dtype=np.float64)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(taste)
    norms[norms == 0] = 1.0
    similarities = matrix @ taste / norms
    
    by_category: Dict[str, List[WardrobeItem]] = defaultdict(list)
    for index in np.argsort(-similarities):
        doc = docs[index]
        category = (doc.get("category") or "").lower()
        if len(by_category[category]) < per_slot_limit:
            doc["similarity"] = float(similarities[index])
            by_category[category].append(WardrobeItem.from_document(doc))
    
    results = [item for items in by_category.values() for item in items]
    logger.info(f"Vector search for {user_id}: {len(results)} candidates across {len(by_category)} categories")
    return results


def get_item_embeddings(item_ids: Sequence[str]) -> List[Optional[List[float]]]:
    """Embeddings for the given items (missing embeddings are skipped)."""
    try:
        collection = mongo.get_collection(mongo.WARDROBE_ITEMS)
        if collection is None:
            return []
        
        cursor = collection.find({"item_id": {"$in": list(item_ids)}}, {"_id": 0, "embedding": 1})
        return [doc.get("embedding") for doc in cursor if doc.get("embedding")]
        
    except Exception as e:
        logger.error(f"Failed to fetch item embeddings: {e}")
        return []


def get_wardrobe_categories(user_id: str) -> List[str]:
    """Categories of the user's eligible items (used by eligibility checks)."""
    try:
        collection = mongo.get_collection(mongo.WARDROBE_ITEMS)
        if collection is None:
            return []
        
        cursor = collection.find(
            {"user_id": user_id, "is_archived": False, "processing_status": "completed"},
            {"_id": 0, "category": 1}
        )
        return [doc.get("category") or "" for doc in cursor]
        
    except Exception as e:
        logger.error(f"Failed to fetch wardrobe categories for {user_id}: {e}")
        return []
