"""
First Outfit Auto-Generation (v1.0.0)
Creates a user's first outfit as soon as the wardrobe covers top, bottom
and footwear.
"""
import asyncio
import logging

from stylist_service.core.slots import classify_slot, REQUIRED_SLOTS

logger = logging.getLogger(__name__)

FIRST_OUTFIT_SOURCE = "first_outfit_auto"


async def check_and_generate_first_outfit(
    user_id: str,
    generator=None,
    outfit_store=None,
    wardrobe=None,
) -> bool:
    """
    Generate and save one outfit for a user who has none yet.
    
    Called after an item finishes processing. Never raises.
    
    Returns:
        True if the first outfit was generated and saved
    """
    if outfit_store is None:
        from stylist_service.db import outfits as outfit_store
    if wardrobe is None:
        from stylist_service.db import wardrobe
    
    try:
        existing = await asyncio.to_thread(outfit_store.count_user_outfits, user_id)
        if existing is None:
            return False
        if existing > 0:
            logger.info(f"User {user_id} already has {existing} outfits, skipping")
            return False

        categories = await asyncio.to_thread(wardrobe.get_wardrobe_categories, user_id)
        slots = {classify_slot(c) for c in categories}
        missing = [slot for slot in REQUIRED_SLOTS if slot not in slots]
        if missing:
            logger.info(f"User {user_id} missing: {', '.join(missing)}")
            return False
        
        if generator is None:
            from stylist_service.core.orchestrator import get_generator
            generator = get_generator()
        
        location = await asyncio.to_thread(outfit_store.get_user_location, user_id)
        result = await generator.generate(
            user_id,
            lat=location.get("location_lat"),
            lon=location.get("location_lng"),
            count=1,
            source=FIRST_OUTFIT_SOURCE,
        )
        if not result.outfits:
            logger.info(f"Generation returned no outfits for {user_id}")
            return False
        
        outfit_id = await asyncio.to_thread(
            outfit_store.save_generated_outfit,
            user_id, result.outfits[0], weather=result.weather, source=FIRST_OUTFIT_SOURCE,
        )
        if not outfit_id:
            logger.error(f"Failed to save first outfit for {user_id}")
            return False
        
        logger.info(f"✓ First outfit saved for {user_id} (id={outfit_id})")
        return True
    
    except Exception as e:
        logger.error(f"First outfit generation failed for {user_id}: {e}")
        return False
