"""
Generation Orchestrator (v1.0.0)
weather -> taste -> candidates -> constraints -> LLM composition -> rule backfill.

Pure with respect to persistence: callers save the returned outfits. Store
reads run in worker threads so concurrent generations do not block the loop.
"""
import time
import random
import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from stylist_service.config import get_settings
from stylist_service.core import llm_composer, rule_composer
from stylist_service.core.candidates import gender_filter, retrieve_candidates
from stylist_service.core.constraints import apply_constraints
from stylist_service.core.models import (
    GeneratedOutfit,
    GenerationConstraints,
    GenerationResult,
    UserContext,
    WardrobeItem,
    collect_item_ids,
    utcnow,
)
from stylist_service.core.slots import group_by_slot, missing_required_slots
from stylist_service.core.styling_tips import personalize_styling_tip
from stylist_service.core.taste_vector import TasteVectorStore
from stylist_service.observability import log_generation, record_generation
from stylist_service.services import weather as weather_service

logger = logging.getLogger(__name__)

MIN_INVENTORY = 3
DEFAULT_COUNT = 3


class OutfitGenerator:
    """
    Generation pipeline with injectable collaborators.

    Args:
        wardrobe: Wardrobe store (fetch_eligible_items, fetch_recently_worn,
            fetch_candidates_by_vector); defaults to db/wardrobe.py
        taste_store: TasteVectorStore
        profiles: Object with get_user_context(user_id); defaults to db/outfits.py
        resolve_weather: async (lat, lon) -> WeatherData
        llm_client: LLMClient or None to disable the LLM composer
        rng: random.Random used for weighted selection
    """

    def __init__(
        self,
        wardrobe=None,
        taste_store: Optional[TasteVectorStore] = None,
        profiles=None,
        resolve_weather=None,
        llm_client=None,
        rng: Optional[random.Random] = None,
    ):
        if wardrobe is None:
            from stylist_service.db import wardrobe
        if profiles is None:
            from stylist_service.db import outfits as profiles

        self.wardrobe = wardrobe
        self.taste_store = taste_store or TasteVectorStore()
        self.profiles = profiles
        self.resolve_weather = resolve_weather or weather_service.resolve_weather
        self.llm_client = llm_client
        self.rng = rng or random.Random()

    async def generate(
        self,
        user_id: str,
        occasion: Optional[str] = None,
        mood: Optional[str] = None,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        exclude_item_ids: Optional[Sequence[str]] = None,
        count: int = DEFAULT_COUNT,
        constraints: Optional[GenerationConstraints] = None,
        source: str = "on_demand",
    ) -> GenerationResult:
        """
        Generate up to `count` outfits for a user.

        Returns:
            GenerationResult; outfits is empty when the inventory is too small
            or a required slot has no candidates

        Raises:
            WardrobeUnavailableError: The wardrobe itself cannot be read
        """
        start = time.time()
        logger.info(f"Generating {count} outfits for {user_id} (occasion={occasion}, mood={mood})")

        try:
            result = await self._generate(
                user_id, occasion, mood, lat, lon, exclude_item_ids or [], count, constraints
            )
        except Exception as e:
            latency_ms = int((time.time() - start) * 1000)
            record_generation(0, 0, error=True)
            log_generation(user_id, source, 0, 0, 0, latency_ms, "fail", error=str(e), occasion=occasion)
            raise

        llm_count = sum(1 for o in result.outfits if o.composer == "llm")
        rule_count = len(result.outfits) - llm_count
        latency_ms = int((time.time() - start) * 1000)

        record_generation(llm_count, rule_count)
        log_generation(
            user_id,
            source,
            len(result.outfits),
            llm_count,
            rule_count,
            latency_ms,
            "success" if result.outfits else "empty",
            occasion=occasion,
        )
        logger.info(f"Generated {len(result.outfits)} outfits for {user_id} ({llm_count} llm, {rule_count} rule) in {latency_ms}ms")
        return result

    async def _generate(
        self,
        user_id: str,
        occasion: Optional[str],
        mood: Optional[str],
        lat: Optional[float],
        lon: Optional[float],
        exclude_item_ids: Sequence[str],
        count: int,
        constraints: Optional[GenerationConstraints],
    ) -> GenerationResult:
        settings = get_settings()

        # Step 1: Weather (always resolves)
        weather = await self.resolve_weather(lat, lon)

        # Steps 2-4 (parallel): taste vector (None on any failure), user context, cooldown set
        taste_vector, user_context, recently_worn = await asyncio.gather(
            asyncio.to_thread(self.taste_store.get, user_id),
            asyncio.to_thread(self._user_context, user_id),
            asyncio.to_thread(self.wardrobe.fetch_recently_worn, user_id, settings.cooldown_days),
        )
        genders = gender_filter(user_context.departments)
        cooldown_ids = set(recently_worn)

        # Step 5: Candidates
        items = await asyncio.to_thread(
            retrieve_candidates,
            self.wardrobe,
            user_id,
            weather,
            taste_vector=taste_vector,
            genders=genders,
            exclude_ids=sorted(cooldown_ids),
            per_slot_limit=settings.candidates_per_slot,
        )
        if len(items) < MIN_INVENTORY:
            logger.info(f"Not enough items for {user_id}: {len(items)} < {MIN_INVENTORY}")
            return GenerationResult(outfits=[], weather=weather)

        # Step 6: Constraints and explicit exclusions
        excluded = set(exclude_item_ids)
        items = apply_constraints([i for i in items if i.id not in excluded], constraints, mood)

        # Step 7: Slots
        groups = group_by_slot(items)
        missing = missing_required_slots(groups)
        if missing:
            logger.info(f"Missing items in required slots for {user_id}: {', '.join(missing)}")
            return GenerationResult(outfits=[], weather=weather)

        # Step 8: LLM composition
        outfits: List[GeneratedOutfit] = []
        if self.llm_client is not None and self.llm_client.is_available():
            outfits = await llm_composer.compose_outfits(
                self.llm_client,
                self._without_recent(groups, cooldown_ids),
                count,
                weather,
                taste_vector=taste_vector,
                occasion=occasion,
                mood=mood,
                constraints=constraints,
                user_context=user_context,
            )

        # Step 9: Rule-based backfill, excluding items already used in this batch
        shortfall = count - len(outfits)
        if shortfall > 0:
            rule_outfits = rule_composer.compose_outfits(
                groups,
                shortfall,
                weather,
                taste_vector=taste_vector,
                occasion=occasion,
                exclude_ids=collect_item_ids(outfits),
                user_context=user_context,
                cooldown_ids=cooldown_ids,
                rng=self.rng,
            )
            # Step 10: Personalized tips for rule outfits (best effort)
            await self._personalize_tips(rule_outfits, user_context, weather, occasion)
            outfits.extend(rule_outfits)

        outfits.sort(key=lambda o: o.style_score, reverse=True)
        return GenerationResult(outfits=outfits[:count], weather=weather)

    async def _personalize_tips(
        self,
        outfits: List[GeneratedOutfit],
        user_context: UserContext,
        weather,
        occasion: Optional[str],
    ):
        """Replace rule-based tips with LLM tips; failures keep the rule tip."""
        if not outfits or not user_context.is_personalized():
            return
        if self.llm_client is None or not self.llm_client.is_available():
            return

        tips = await asyncio.gather(
            *(personalize_styling_tip(self.llm_client, o.items, user_context, weather, occasion) for o in outfits),
            return_exceptions=True,
        )
        for outfit, tip in zip(outfits, tips):
            if isinstance(tip, BaseException):
                logger.warning(f"Styling tip failed, keeping rule-based tip: {tip}")
            elif tip:
                outfit.styling_tip = tip

    def _user_context(self, user_id: str) -> UserContext:
        try:
            context = self.profiles.get_user_context(user_id)
        except Exception as e:
            logger.warning(f"User context unavailable for {user_id}: {e}")
            return UserContext()

        if context.is_personalized():
            logger.info(
                f"User context: height={context.height_category or 'unset'}, "
                f"undertone={context.skin_undertone or 'unset'}"
            )
        return context

    @staticmethod
    def _without_recent(groups: Dict[str, List[WardrobeItem]], cooldown_ids) -> Dict[str, List[WardrobeItem]]:
        """Drop recently worn items from each slot that has fresh alternatives."""
        now = utcnow()
        trimmed = {}
        for slot, items in groups.items():
            fresh = [i for i in items if not rule_composer.is_recently_worn(i, cooldown_ids, now)]
            trimmed[slot] = fresh or items
        return trimmed


# ==================== MODULE API ====================

_generator: Optional[OutfitGenerator] = None


def get_generator() -> OutfitGenerator:
    """Shared generator wired to the database, weather and LLM client."""
    global _generator
    if _generator is None:
        from stylist_service.llm import get_llm_client
        _generator = OutfitGenerator(llm_client=get_llm_client())
    return _generator


def reset_generator():
    global _generator
    _generator = None


async def generate_outfits(user_id: str, **kwargs) -> GenerationResult:
    """Generate outfits with the shared generator (see OutfitGenerator.generate)."""
    return await get_generator().generate(user_id, **kwargs)
