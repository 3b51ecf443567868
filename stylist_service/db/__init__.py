# Database module
from stylist_service.db.mongo import connect, get_collection, health_check
from stylist_service.db.wardrobe import WardrobeUnavailableError
