"""
API Routes (v1.0.0)
Thin HTTP surface over the generation core.

Authentication is handled upstream; the caller's id arrives in X-User-Id.
"""
import asyncio
import logging
from typing import Optional, List

from fastapi import APIRouter, BackgroundTasks, HTTPException, Header, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from stylist_service import __version__
from stylist_service.config import get_provider_status
from stylist_service.core.constraints import AVAILABLE_MOODS, FEEDBACK_TYPES, constraints_from_feedback
from stylist_service.core.feedback import INTERACTION_TYPES, record_interaction
from stylist_service.core.orchestrator import get_generator
from stylist_service.core.taste_vector import TasteVectorStore
from stylist_service.db import mongo
from stylist_service.db import outfits as outfit_store
from stylist_service.db.wardrobe import WardrobeUnavailableError
from stylist_service.jobs.first_outfit import check_and_generate_first_outfit
from stylist_service.observability import get_metrics, is_logging_enabled
from stylist_service.services.weather import is_configured as weather_configured

logger = logging.getLogger(__name__)

router = APIRouter()

EMPTY_MESSAGE = "Add more items to your wardrobe: outfits need at least a top, a bottom and shoes."


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


# ==================== REQUEST MODELS ====================

class GenerateRequest(BaseModel):
    occasion: Optional[str] = None
    mood: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    count: int = Field(3, ge=1, le=5)
    exclude_item_ids: List[str] = Field(default_factory=list)


class RegenerateRequest(BaseModel):
    feedback: str
    occasion: Optional[str] = None
    mood: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    count: int = Field(3, ge=1, le=5)
    previous_outfit_ids: List[str] = Field(default_factory=list)


class InteractionRequest(BaseModel):
    type: str


class TasteInitRequest(BaseModel):
    liked_image_ids: List[str] = Field(default_factory=list)
    disliked_image_ids: List[str] = Field(default_factory=list)


def _persist(user_id: str, result, occasion: Optional[str], source: str) -> List[dict]:
    """Save each outfit and return client payloads with their ids."""
    payload = []
    for outfit in result.outfits:
        outfit_id = outfit_store.save_generated_outfit(
            user_id, outfit, occasion=occasion, weather=result.weather, source=source
        )
        payload.append({"id": outfit_id, **outfit.to_dict()})
    return payload


# ==================== PUBLIC ENDPOINTS ====================

@router.get("/health")
async def health_check():
    """Health check with dependency status."""
    return {
        "status": "ok",
        "version": __version__,
        "llm": get_provider_status(),
        "mongo": mongo.health_check(),
        "weather": {"enabled": weather_configured()},
        "observability": {"logging_enabled": is_logging_enabled()},
    }


@router.get("/metrics")
async def get_metrics_endpoint():
    """Generation and interaction counters."""
    return JSONResponse(content=get_metrics())


@router.get("/outfits/moods")
async def list_moods():
    return {"moods": AVAILABLE_MOODS}


# ==================== GENERATION ====================

@router.post("/outfits/generate")
async def generate(request: GenerateRequest, user_id: str = Depends(get_user_id)):
    """
    Generate and persist outfits.
    
    Returns 200 with an empty list when the wardrobe is too small, and 503
    when the wardrobe cannot be read.
    """
    try:
        result = await get_generator().generate(
            user_id,
            occasion=request.occasion,
            mood=request.mood,
            lat=request.lat,
            lon=request.lon,
            exclude_item_ids=request.exclude_item_ids,
            count=request.count,
            source="on_demand",
        )
    except WardrobeUnavailableError as e:
        logger.error(f"Wardrobe unavailable for {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Wardrobe is temporarily unavailable")
    
    outfits = await asyncio.to_thread(_persist, user_id, result, request.occasion, "on_demand")
    response = {
        "outfits": outfits,
        "count": len(outfits),
        "weather": result.weather.to_dict(),
    }
    if not outfits:
        response["message"] = EMPTY_MESSAGE
    return response


@router.post("/outfits/regenerate")
async def regenerate(request: RegenerateRequest, user_id: str = Depends(get_user_id)):
    """Regenerate outfits steered by feedback on previous suggestions."""
    if request.feedback not in FEEDBACK_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown feedback '{request.feedback}'. Expected one of: {', '.join(FEEDBACK_TYPES)}"
        )
    
    previous_items = await asyncio.to_thread(outfit_store.get_previous_item_ids, user_id, request.previous_outfit_ids)
    constraints = constraints_from_feedback(request.feedback, previous_items)
    
    try:
        result = await get_generator().generate(
            user_id,
            occasion=request.occasion,
            mood=request.mood,
            lat=request.lat,
            lon=request.lon,
            count=request.count,
            constraints=constraints,
            source="regenerated",
        )
    except WardrobeUnavailableError as e:
        logger.error(f"Wardrobe unavailable for {user_id}: {e}")
        raise HTTPException(status_code=503, detail="Wardrobe is temporarily unavailable")
    
    if not result.outfits:
        raise HTTPException(
            status_code=400,
            detail="Could not generate outfits. Try different feedback or add more items to your wardrobe."
        )
    
    outfits = await asyncio.to_thread(_persist, user_id, result, request.occasion, "regenerated")
    return {
        "outfits": outfits,
        "count": len(outfits),
        "weather": result.weather.to_dict(),
        "feedback_applied": request.feedback,
    }


# ==================== FEEDBACK ====================

@router.post("/outfits/{outfit_id}/interactions")
async def add_interaction(outfit_id: str, request: InteractionRequest, user_id: str = Depends(get_user_id)):
    """Record wear/save/like/skip/reject and update the taste vector."""
    if request.type not in INTERACTION_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid interaction type. Expected one of: {', '.join(INTERACTION_TYPES)}"
        )
    
    updated = await asyncio.to_thread(record_interaction, user_id, outfit_id, request.type)
    return {"outfit_id": outfit_id, "type": request.type, "taste_updated": updated}


@router.post("/wardrobe/items/{item_id}/processed")
async def item_processed(item_id: str, background_tasks: BackgroundTasks, user_id: str = Depends(get_user_id)):
    """
    Item processing finished upstream.

    Schedules the first-outfit check, which creates the user's first outfit
    once the wardrobe covers top, bottom and footwear.
    """
    background_tasks.add_task(check_and_generate_first_outfit, user_id)
    return {"item_id": item_id, "first_outfit_check": "scheduled"}


@router.post("/taste/initialize")
async def initialize_taste(request: TasteInitRequest, user_id: str = Depends(get_user_id)):
    """Seed the taste vector from onboarding swipes."""
    if not request.liked_image_ids and not request.disliked_image_ids:
        raise HTTPException(status_code=400, detail="Provide at least one liked or disliked image")
    
    vector = await asyncio.to_thread(
        TasteVectorStore().initialize, user_id, request.liked_image_ids, request.disliked_image_ids
    )
    if vector is None:
        raise HTTPException(status_code=500, detail="Failed to store taste vector")
    
    return {
        "initialized": True,
        "interaction_count": len(request.liked_image_ids) + len(request.disliked_image_ids),
    }
