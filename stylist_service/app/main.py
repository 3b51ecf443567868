"""
Stylist Service v1.0.0
Weather-aware, taste-personalized outfit generation.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stylist_service import __version__
from stylist_service.app.routes import router
from stylist_service.config import get_provider_status, validate_provider_config
from stylist_service.db import mongo
from stylist_service.observability import is_logging_enabled
from stylist_service.services.weather import is_configured as weather_configured

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("=" * 50)
    logger.info(f"Stylist Service v{__version__} Starting...")
    logger.info("=" * 50)
    
    mongo_connected = mongo.connect()
    logger.info(f"MongoDB: {'connected' if mongo_connected else 'disconnected'}")
    
    provider_status = get_provider_status()
    composer = provider_status["provider"] if provider_status["available"] else "disabled (rule-based only)"
    logger.info(f"LLM composer: {composer}")
    for warning in validate_provider_config():
        logger.warning(warning)
    
    logger.info(f"Weather: {'enabled' if weather_configured() else 'default conditions'}")
    logger.info(f"Logging: {'enabled' if is_logging_enabled() else 'disabled'}")
    logger.info("✓ Service ready! Metrics available at /metrics")
    logger.info("=" * 50)
    
    yield
    
    mongo.close()
    logger.info("Service shutting down...")


app = FastAPI(
    title="Stylist Service",
    description="Outfit generation from a user's own wardrobe",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("stylist_service.app.main:app", host="0.0.0.0", port=8000, reload=False)
