"""
Domain Models (v1.0.0)
Wardrobe items, generated outfits and per-call generation inputs.
"""
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Dict, Any, Set

from stylist_service.config import get_settings
from stylist_service.core.slots import classify_slot

EMBEDDING_DIM = 768


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accept datetimes or ISO strings from the store; naive values are UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class ColorInfo:
    primary: Optional[str] = None
    secondary: List[str] = field(default_factory=list)
    accent: Optional[str] = None
    
    @classmethod
    def from_value(cls, value: Any) -> "ColorInfo":
        if isinstance(value, ColorInfo):
            return value
        if not value:
            return cls()
        return cls(
            primary=value.get("primary"),
            secondary=list(value.get("secondary") or []),
            accent=value.get("accent"),
        )


@dataclass
class WardrobeItem:
    """One physical garment owned by a user."""
    id: str
    user_id: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    item_name: Optional[str] = None
    colors: ColorInfo = field(default_factory=ColorInfo)
    pattern: Optional[str] = None
    embedding: Optional[List[float]] = None
    formality_score: Optional[float] = None
    seasons: List[str] = field(default_factory=list)
    occasions: List[str] = field(default_factory=list)
    style_vibes: List[str] = field(default_factory=list)
    fit: Optional[str] = None
    length: Optional[str] = None
    gender: str = "unisex"
    times_worn: int = 0
    last_worn_at: Optional[datetime] = None
    is_archived: bool = False
    processing_status: str = "completed"
    processed_image_url: Optional[str] = None
    
    # Set during retrieval / seasonal scoring
    similarity: Optional[float] = None
    seasonal_score: float = 0.8
    weather_appropriate: bool = True
    
    @property
    def slot(self) -> str:
        return classify_slot(self.category, self.subcategory)
    
    @property
    def primary_color(self) -> Optional[str]:
        return self.colors.primary
    
    def has_embedding(self) -> bool:
        return self.embedding is not None and len(self.embedding) > 0
    
    def days_since_worn(self, now: Optional[datetime] = None) -> Optional[float]:
        if self.last_worn_at is None:
            return None
        return ((now or utcnow()) - self.last_worn_at).total_seconds() / 86400
    
    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "WardrobeItem":
        """Build from a store document (`item_id`, `id` or Mongo `_id`)."""
        embedding = doc.get("embedding")
        return cls(
            id=str(doc.get("item_id") or doc.get("id") or doc.get("_id")),
            user_id=doc.get("user_id"),
            category=doc.get("category"),
            subcategory=doc.get("subcategory"),
            item_name=doc.get("item_name"),
            colors=ColorInfo.from_value(doc.get("colors")),
            pattern=doc.get("pattern"),
            embedding=list(embedding) if embedding is not None else None,
            formality_score=doc.get("formality_score"),
            seasons=list(doc.get("seasons") or []),
            occasions=list(doc.get("occasions") or []),
            style_vibes=list(doc.get("style_vibes") or []),
            fit=doc.get("fit"),
            length=doc.get("length"),
            gender=doc.get("gender") or "unisex",
            times_worn=doc.get("times_worn") or 0,
            last_worn_at=parse_timestamp(doc.get("last_worn_at")),
            is_archived=bool(doc.get("is_archived", False)),
            processing_status=doc.get("processing_status") or "completed",
            processed_image_url=doc.get("processed_image_url"),
            similarity=doc.get("similarity"),
        )
    
    def summary(self) -> Dict[str, Any]:
        """Client-facing view without the embedding."""
        return {
            "id": self.id,
            "slot": self.slot,
            "category": self.category,
            "subcategory": self.subcategory,
            "item_name": self.item_name,
            "colors": asdict(self.colors),
            "pattern": self.pattern,
            "formality_score": self.formality_score,
            "style_vibes": self.style_vibes,
            "processed_image_url": self.processed_image_url,
        }


@dataclass
class UserContext:
    """Profile attributes that personalize scoring."""
    height_category: Optional[str] = None  # short | average | tall
    skin_undertone: Optional[str] = None   # warm | cool | neutral
    departments: List[str] = field(default_factory=list)
    
    def is_personalized(self) -> bool:
        return bool(self.height_category or self.skin_undertone)


@dataclass
class GenerationConstraints:
    """Per-call biasing and filtering; never persisted."""
    exclude_item_ids: List[str] = field(default_factory=list)
    prefer_vibes: List[str] = field(default_factory=list)
    min_formality: Optional[float] = None
    max_formality: Optional[float] = None
    avoid_colors: bool = False
    must_swap_slots: List[str] = field(default_factory=list)
    exclude_all_previous_items: bool = False
    # Items of the outfits being regenerated
    previous_item_ids: List[str] = field(default_factory=list)
    
    def is_empty(self) -> bool:
        return not (
            self.exclude_item_ids or self.prefer_vibes
            or self.min_formality is not None or self.max_formality is not None
            or self.avoid_colors or self.must_swap_slots
            or self.exclude_all_previous_items
        )


@dataclass
class GeneratedOutfit:
    """One proposed combination, point-in-time."""
    items: List[WardrobeItem]
    style_score: float
    color_harmony_score: float
    taste_alignment_score: float
    weather_score: float
    occasion_match: bool
    confidence_score: float
    name: str = ""
    vibe: str = ""
    reasoning: str = ""
    styling_tip: Optional[str] = None
    color_harmony_description: Optional[str] = None
    composer: str = "rule"  # rule | llm
    generated_at: datetime = field(default_factory=utcnow)
    expires_at: Optional[datetime] = None
    is_saved: bool = False
    is_worn: bool = False
    
    def __post_init__(self):
        if self.expires_at is None:
            self.expires_at = self.generated_at + timedelta(hours=get_settings().outfit_ttl_hours)
    
    @property
    def item_ids(self) -> List[str]:
        return [item.id for item in self.items]
    
    def items_in_slot(self, slot: str) -> List[WardrobeItem]:
        return [item for item in self.items if item.slot == slot]
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_ids": self.item_ids,
            "items": [item.summary() for item in self.items],
            "style_score": self.style_score,
            "color_harmony_score": self.color_harmony_score,
            "taste_alignment_score": self.taste_alignment_score,
            "weather_score": self.weather_score,
            "occasion_match": self.occasion_match,
            "confidence_score": self.confidence_score,
            "name": self.name,
            "vibe": self.vibe,
            "reasoning": self.reasoning,
            "styling_tip": self.styling_tip,
            "color_harmony_description": self.color_harmony_description,
            "composer": self.composer,
            "generated_at": self.generated_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "is_saved": self.is_saved,
            "is_worn": self.is_worn,
        }


@dataclass
class GenerationResult:
    outfits: List[GeneratedOutfit]
    weather: Any  # WeatherData
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "outfits": [o.to_dict() for o in self.outfits],
            "weather": self.weather.to_dict(),
        }


def collect_item_ids(outfits: List[GeneratedOutfit]) -> Set[str]:
    return {item_id for outfit in outfits for item_id in outfit.item_ids}
