"""
Interaction Feedback (v1.0.0)
Feeds outfit interactions back into the user's taste vector.
"""
import logging
from typing import Optional

from stylist_service.core.taste_vector import INTERACTION_WEIGHTS, TasteVectorStore, mean_embedding
from stylist_service.observability import record_interaction as count_interaction

logger = logging.getLogger(__name__)

INTERACTION_TYPES = ("wear", "save", "like", "skip", "reject")


def record_interaction(
    user_id: str,
    outfit_id: str,
    interaction_type: str,
    outfit_store=None,
    wardrobe=None,
    taste_store: Optional[TasteVectorStore] = None,
) -> bool:
    """
    Update the taste vector from one interaction with a generated outfit.
    
    The mean embedding of the outfit's items (items without an embedding are
    skipped) is blended in with the interaction's weight. Wear and save
    interactions are also recorded on the outfit.
    
    Returns:
        True if the taste vector was updated, False for a no-op
    """
    if interaction_type not in INTERACTION_WEIGHTS:
        raise ValueError(f"Unknown interaction type: {interaction_type}")
    
    if outfit_store is None:
        from stylist_service.db import outfits as outfit_store
    if wardrobe is None:
        from stylist_service.db import wardrobe
    taste_store = taste_store or TasteVectorStore()
    
    item_ids = outfit_store.get_outfit_item_ids(user_id, outfit_id)
    if not item_ids:
        logger.info(f"Outfit {outfit_id} not found for {user_id} - interaction ignored")
        return False

    count_interaction(interaction_type)

    if interaction_type == "wear":
        outfit_store.record_wear(user_id, outfit_id, item_ids)
    elif interaction_type == "save":
        outfit_store.mark_saved(user_id, outfit_id)
    
    embedding = mean_embedding(wardrobe.get_item_embeddings(item_ids))
    if embedding is None:
        logger.info(f"No item embeddings for outfit {outfit_id} - taste unchanged")
        return False
    
    return taste_store.update(user_id, embedding.tolist(), interaction_type) is not None
