"""
MongoDB Connection Module (v1.0.0)
One shared client for the wardrobe, outfit, profile and taste collections.

Collections are looked up lazily; callers get None while the server is
unreachable and decide for themselves whether that is fatal.
"""
import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

from stylist_service.config import get_settings

logger = logging.getLogger(__name__)

SERVER_SELECTION_TIMEOUT_MS = 5000

# Collections
WARDROBE_ITEMS = "wardrobe_items"
GENERATED_OUTFITS = "generated_outfits"
OUTFIT_HISTORY = "outfit_history"
TASTE_VECTORS = "user_taste_vectors"
STYLE_REFERENCES = "style_reference_images"
USER_PROFILES = "user_profiles"

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def connect() -> bool:
    """
    Open the shared client and ping the server.

    Returns:
        True if the database is reachable
    """
    global _client, _db

    settings = get_settings()
    logger.info(f"Connecting to MongoDB database '{settings.mongo_db_name}'")

    try:
        client = MongoClient(settings.mongo_uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS)
        client.admin.command("ping")
    except Exception as e:
        logger.warning(f"MongoDB unreachable: {e}")
        _client, _db = None, None
        return False

    _client, _db = client, client[settings.mongo_db_name]
    logger.info(f"✓ MongoDB ready: {settings.mongo_db_name}")
    return True


def get_collection(name: str):
    """Collection handle, connecting on first use. None when unreachable."""
    if _db is None and not connect():
        return None
    return _db[name]


def health_check() -> dict:
    """Ping result for the health endpoint."""
    if _client is None and not connect():
        return {"status": "disconnected", "reason": "server unreachable"}

    try:
        _client.admin.command("ping")
    except Exception as e:
        return {"status": "disconnected", "reason": str(e)}

    return {"status": "connected", "database": get_settings().mongo_db_name}


def close():
    """Close the shared client (application shutdown)."""
    global _client, _db
    if _client is not None:
        _client.close()
        logger.info("MongoDB connection closed")
    _client, _db = None, None
