"""
Taste Vector Store (v1.0.0)
One unit-normalized aesthetic embedding per user, learned from interactions.

Reads never raise: a failed read is "no taste signal" and scoring falls back
to a neutral 0.5 alignment.
"""
import logging
from datetime import datetime
from typing import Optional, Sequence, List

import numpy as np

from stylist_service.core.models import EMBEDDING_DIM, utcnow, parse_timestamp

logger = logging.getLogger(__name__)

INTERACTION_WEIGHTS = {
    "wear": 1.0,    # confirmed wearing the outfit
    "save": 0.7,
    "like": 0.5,
    "edit": 0.3,    # modified a suggested outfit
    "skip": -0.2,
    "reject": -0.5,
}

ALPHA = 0.95  # recency decay per day since last update
BASE_LEARNING_RATE = 0.1
DISLIKE_WEIGHT = 0.3
NEUTRAL_ALIGNMENT = 0.5


# ==================== VECTOR MATH ====================

def normalize(vector) -> np.ndarray:
    """Unit-normalize; raises ValueError for a zero vector."""
    arr = np.asarray(vector, dtype=np.float64)
    norm = np.linalg.norm(arr)
    if norm == 0 or not np.isfinite(norm):
        raise ValueError("Cannot normalize a zero or non-finite vector")
    return arr / norm


def cosine_similarity(a, b) -> float:
    """Cosine similarity in [-1, 1]; 0.0 for mismatched or zero vectors."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape or va.size == 0:
        return 0.0
    
    magnitude = np.linalg.norm(va) * np.linalg.norm(vb)
    if magnitude == 0:
        return 0.0
    
    return float(np.clip(np.dot(va, vb) / magnitude, -1.0, 1.0))


def taste_alignment(item_embedding, taste_vector) -> float:
    """Cosine similarity remapped to [0, 1]; neutral 0.5 without a signal."""
    if item_embedding is None or taste_vector is None or len(item_embedding) == 0:
        return NEUTRAL_ALIGNMENT
    return (cosine_similarity(item_embedding, taste_vector) + 1) / 2


def mean_embedding(embeddings: Sequence[Sequence[float]]) -> Optional[np.ndarray]:
    """Unweighted mean of the non-empty, equal-length embeddings."""
    valid = [np.asarray(e, dtype=np.float64) for e in embeddings if e is not None and len(e) > 0]
    if not valid:
        return None
    
    dim = valid[0].shape[0]
    valid = [e for e in valid if e.shape[0] == dim]
    return np.mean(valid, axis=0)


def seed_vector(dim: int = EMBEDDING_DIM) -> np.ndarray:
    """Non-zero uniform initializer used when there is no usable signal."""
    return np.full(dim, 1.0 / np.sqrt(dim))


def blend(current, item_embedding, weight: float, days_since_update: int) -> np.ndarray:
    """
    One recency-weighted step toward (weight > 0) or away from the item.
    
    new = normalize(current + lr * weight * (item - current)),
    lr = BASE_LEARNING_RATE * ALPHA ** days_since_update
    """
    current = np.asarray(current, dtype=np.float64)
    item = np.asarray(item_embedding, dtype=np.float64)
    
    learning_rate = BASE_LEARNING_RATE * (ALPHA ** max(0, days_since_update))
    updated = current + learning_rate * weight * (item - current)
    
    try:
        return normalize(updated)
    except ValueError:
        logger.warning("Taste update produced a zero vector - keeping current vector")
        return normalize(current)


# ==================== STORE ====================

class TasteVectorStore:
    """
    Taste vector lifecycle on top of a persistence repository.
    
    The repository exposes get_taste_record(user_id), save_taste_record(...)
    and get_reference_embeddings(image_ids); see db/taste_vectors.py.
    """
    
    def __init__(self, repository=None):
        if repository is None:
            from stylist_service.db import taste_vectors as repository
        self.repository = repository
    
    def get(self, user_id: str) -> Optional[np.ndarray]:
        """Current vector or None; read failures are logged and yield None."""
        try:
            record = self.repository.get_taste_record(user_id)
        except Exception as e:
            logger.error(f"Taste vector read failed for {user_id}: {e}")
            return None
        
        if not record or not record.get("taste_vector"):
            return None
        return np.asarray(record["taste_vector"], dtype=np.float64)
    
    def has_taste_vector(self, user_id: str) -> bool:
        return self.get(user_id) is not None
    
    def initialize(
        self,
        user_id: str,
        liked_image_ids: Sequence[str],
        disliked_image_ids: Sequence[str],
    ) -> Optional[np.ndarray]:
        """
        Build the vector from onboarding swipes: mean(liked) - 0.3 * mean(disliked).
        
        Returns:
            The stored unit vector, or None if persistence failed
        """
        logger.info(
            f"Initializing taste vector for {user_id} "
            f"({len(liked_image_ids)} likes, {len(disliked_image_ids)} dislikes)"
        )
        
        try:
            liked = self.repository.get_reference_embeddings(list(liked_image_ids))
            disliked = self.repository.get_reference_embeddings(list(disliked_image_ids))
        except Exception as e:
            logger.error(f"Failed to load reference embeddings for {user_id}: {e}")
            liked, disliked = [], []
        
        positive = mean_embedding(liked)
        negative = mean_embedding(disliked)
        dim = len(positive) if positive is not None else (len(negative) if negative is not None else EMBEDDING_DIM)
        
        raw = np.zeros(dim)
        if positive is not None:
            raw = raw + positive
        if negative is not None and negative.shape[0] == dim:
            raw = raw - DISLIKE_WEIGHT * negative
        
        try:
            vector = normalize(raw)
        except ValueError:
            logger.warning(f"No usable onboarding signal for {user_id} - seeding neutral taste vector")
            vector = seed_vector(dim)
        
        now = utcnow()
        saved = self._save(
            user_id,
            vector,
            interaction_count=len(liked_image_ids) + len(disliked_image_ids),
            initialized_at=now,
            last_updated=now,
        )
        return vector if saved else None
    
    def update(
        self,
        user_id: str,
        item_embedding: Sequence[float],
        interaction_type: str,
        now: Optional[datetime] = None,
    ) -> Optional[np.ndarray]:
        """
        Blend an interacted embedding into the user's vector.
        
        Creates the vector lazily on first interaction. Failures are logged
        and leave the stored vector unchanged.
        """
        weight = INTERACTION_WEIGHTS.get(interaction_type)
        if weight is None:
            logger.warning(f"Unknown interaction type '{interaction_type}' - ignored")
            return None
        
        now = now or utcnow()
        
        try:
            record = self.repository.get_taste_record(user_id)
        except Exception as e:
            logger.error(f"Taste vector read failed for {user_id}: {e}")
            return None
        
        if not record or not record.get("taste_vector"):
            return self._create_from_interaction(user_id, item_embedding, weight, now)
        
        current = np.asarray(record["taste_vector"], dtype=np.float64)
        if len(item_embedding) != current.shape[0]:
            logger.warning(
                f"Embedding dimension {len(item_embedding)} != taste dimension {current.shape[0]} - ignored"
            )
            return None
        
        last_updated = parse_timestamp(record.get("last_updated")) or now
        days = int((now - last_updated).total_seconds() // 86400)
        
        vector = blend(current, item_embedding, weight, days)
        saved = self._save(
            user_id,
            vector,
            interaction_count=(record.get("interaction_count") or 0) + 1,
            initialized_at=parse_timestamp(record.get("initialized_at")) or now,
            last_updated=now,
        )
        
        if saved:
            logger.info(f"Updated taste vector for {user_id} ({interaction_type}, weight={weight}, decay_days={days})")
            return vector
        return None
    
    def _create_from_interaction(self, user_id, item_embedding, weight, now) -> Optional[np.ndarray]:
        direction = 1.0 if weight >= 0 else -1.0
        try:
            vector = normalize(direction * np.asarray(item_embedding, dtype=np.float64))
        except ValueError:
            vector = seed_vector(len(item_embedding) or EMBEDDING_DIM)
        
        logger.info(f"Created taste vector lazily for {user_id} from first interaction")
        saved = self._save(user_id, vector, interaction_count=1, initialized_at=now, last_updated=now)
        return vector if saved else None
    
    def _save(self, user_id, vector, interaction_count, initialized_at, last_updated) -> bool:
        try:
            return bool(self.repository.save_taste_record(
                user_id=user_id,
                taste_vector=[float(v) for v in vector],
                interaction_count=interaction_count,
                initialized_at=initialized_at,
                last_updated=last_updated,
            ))
        except Exception as e:
            logger.error(f"Taste vector write failed for {user_id}: {e}")
            return False

