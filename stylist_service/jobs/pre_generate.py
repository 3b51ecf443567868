"""
Pre-Generation Job (v1.0.0)
Generates tomorrow's outfits in advance for recently active users.

Users are processed in fixed-size concurrent batches; a failing user is
tallied and never aborts the run.
"""
import sys
import time
import asyncio
import logging
from dataclasses import dataclass, field, asdict
from datetime import timedelta, date
from typing import Any, Dict, List, Optional

from stylist_service.core.models import utcnow
from stylist_service.core.slots import has_required_slots

logger = logging.getLogger(__name__)

BATCH_SIZE = 10
BATCH_DELAY_S = 2.0
OUTFITS_PER_USER = 4
ACTIVE_DAYS = 7


@dataclass
class PreGenerateResult:
    success: bool = True
    users_processed: int = 0
    outfits_generated: int = 0
    errors: int = 0
    skipped: int = 0
    error_details: List[str] = field(default_factory=list)
    failed_user_ids: List[str] = field(default_factory=list)
    duration_ms: int = 0
    
    def to_dict(self) -> dict:
        return asdict(self)


def tomorrow() -> date:
    return (utcnow() + timedelta(days=1)).date()


def _batches(users: List[Dict[str, Any]], size: int) -> List[List[Dict[str, Any]]]:
    return [users[i:i + size] for i in range(0, len(users), size)]


class PreGenerator:
    """
    Batch runner with injectable collaborators.
    
    Args:
        generator: OutfitGenerator (defaults to the shared one)
        outfit_store: db/outfits.py-like module
        wardrobe: db/wardrobe.py-like module
    """
    
    def __init__(
        self,
        generator=None,
        outfit_store=None,
        wardrobe=None,
        batch_size: int = BATCH_SIZE,
        batch_delay_s: float = BATCH_DELAY_S,
        outfits_per_user: int = OUTFITS_PER_USER,
    ):
        if generator is None:
            from stylist_service.core.orchestrator import get_generator
            generator = get_generator()
        if outfit_store is None:
            from stylist_service.db import outfits as outfit_store
        if wardrobe is None:
            from stylist_service.db import wardrobe
        
        self.generator = generator
        self.outfit_store = outfit_store
        self.wardrobe = wardrobe
        self.batch_size = batch_size
        self.batch_delay_s = batch_delay_s
        self.outfits_per_user = outfits_per_user
    
    async def run(self) -> PreGenerateResult:
        start = time.time()
        result = PreGenerateResult()
        
        logger.info("Starting outfit pre-generation")
        
        try:
            users = await asyncio.to_thread(self.outfit_store.get_active_users, ACTIVE_DAYS)
            if not users:
                logger.info("No active users to process")
                result.duration_ms = int((time.time() - start) * 1000)
                return result

            checks = await asyncio.gather(
                *(asyncio.to_thread(self._is_eligible, u["user_id"]) for u in users)
            )
            eligible = [u for u, ok in zip(users, checks) if ok]
            result.skipped = len(users) - len(eligible)
            logger.info(f"{len(eligible)}/{len(users)} active users eligible")
            
            batches = _batches(eligible, self.batch_size)
            for index, batch in enumerate(batches):
                logger.info(f"Processing batch {index + 1}/{len(batches)} ({len(batch)} users)")
                
                outcomes = await asyncio.gather(
                    *(self.process_user(user) for user in batch),
                    return_exceptions=True,
                )
                
                for user, outcome in zip(batch, outcomes):
                    if isinstance(outcome, BaseException):
                        result.errors += 1
                        result.failed_user_ids.append(user["user_id"])
                        result.error_details.append(f"User {user['user_id']}: {outcome}")
                    elif outcome > 0:
                        result.users_processed += 1
                        result.outfits_generated += outcome
                    else:
                        result.errors += 1
                        result.failed_user_ids.append(user["user_id"])
                        result.error_details.append(f"User {user['user_id']}: no outfits generated")
                
                if index < len(batches) - 1:
                    await asyncio.sleep(self.batch_delay_s)
        
        except Exception as e:
            result.success = False
            result.error_details.append(f"Fatal: {e}")
            logger.error(f"Pre-generation failed: {e}")
        
        result.duration_ms = int((time.time() - start) * 1000)
        logger.info(
            f"✓ Pre-generation complete: {result.users_processed} users, "
            f"{result.outfits_generated} outfits, {result.errors} errors, {result.skipped} skipped"
        )
        return result
    
    def _is_eligible(self, user_id: str) -> bool:
        categories = self.wardrobe.get_wardrobe_categories(user_id)
        if has_required_slots(categories):
            return True
        logger.info(f"Skipping {user_id} - wardrobe lacks top, bottom or footwear")
        return False
    
    async def process_user(self, user: Dict[str, Any]) -> int:
        """
        Generate and save tomorrow's outfits for one user.
        
        Returns:
            Number of outfits saved
        """
        user_id = user["user_id"]
        target = tomorrow()
        
        await asyncio.to_thread(self.outfit_store.clear_pre_generated, user_id, before=utcnow().date())
        await asyncio.to_thread(self.outfit_store.clear_pre_generated, user_id, on=target)

        result = await self.generator.generate(
            user_id,
            lat=user.get("location_lat"),
            lon=user.get("location_lng"),
            count=self.outfits_per_user,
            source="pre_generated",
        )
        
        saved = 0
        for outfit in result.outfits:
            outfit_id = await asyncio.to_thread(
                self.outfit_store.save_generated_outfit,
                user_id, outfit, weather=result.weather, source="pre_generated", target_date=target,
            )
            if outfit_id:
                saved += 1

        logger.info(f"User {user_id}: {saved} outfits pre-generated for {target.isoformat()}")
        return saved


async def pre_generate_outfits(generator=None) -> PreGenerateResult:
    """Run pre-generation for all active users."""
    return await PreGenerator(generator=generator).run()


def main() -> int:
    """Scheduler entry point: one pre-generation run, non-zero exit on a fatal error."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    from stylist_service.db import mongo

    mongo.connect()
    try:
        result = asyncio.run(pre_generate_outfits())
    finally:
        mongo.close()

    logger.info(f"Pre-generation result: {result.to_dict()}")
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
