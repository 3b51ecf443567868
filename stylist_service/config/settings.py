"""
Settings Module (v1.0.0)
Service configuration read once from the environment.
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


@dataclass
class Settings:
    """Credentials, LLM switches, storage and generation tuning."""

    # Credentials
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    openweather_api_key: Optional[str] = None

    # LLM composer
    llm_enabled: bool = True
    llm_provider: str = "openai"
    llm_base_url: Optional[str] = None

    # Backing store
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db_name: str = "stylist"

    # Generation tuning
    cooldown_days: int = 3
    candidates_per_slot: int = 15
    outfit_ttl_hours: int = 24

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            openweather_api_key=os.getenv("OPENWEATHER_API_KEY"),

            llm_enabled=_env_flag("STYLIST_LLM_ENABLED"),
            llm_provider=os.getenv("STYLIST_LLM_PROVIDER", "openai").lower(),
            llm_base_url=os.getenv("STYLIST_LLM_BASE_URL") or None,

            mongo_uri=os.getenv("MONGO_URI", cls.mongo_uri),
            mongo_db_name=os.getenv("MONGO_DB_NAME", cls.mongo_db_name),

            cooldown_days=_env_int("STYLIST_COOLDOWN_DAYS", cls.cooldown_days),
            candidates_per_slot=_env_int("STYLIST_CANDIDATES_PER_SLOT", cls.candidates_per_slot),
            outfit_ttl_hours=_env_int("STYLIST_OUTFIT_TTL_HOURS", cls.outfit_ttl_hours),
        )

    def has_openai(self) -> bool:
        """OpenAI-compatible key present (OpenAI itself or a gateway)."""
        return bool(self.openai_api_key)

    def has_gemini(self) -> bool:
        return bool(self.gemini_api_key)

    def has_weather(self) -> bool:
        return bool(self.openweather_api_key)

    def to_dict(self) -> dict:
        """Loggable view; API keys are reported only as configured or not."""
        return {
            "llm_enabled": self.llm_enabled,
            "llm_provider": self.llm_provider,
            "llm_base_url": self.llm_base_url,
            "openai_key_set": self.has_openai(),
            "gemini_key_set": self.has_gemini(),
            "weather_key_set": self.has_weather(),
            "mongo_db_name": self.mongo_db_name,
            "cooldown_days": self.cooldown_days,
            "candidates_per_slot": self.candidates_per_slot,
            "outfit_ttl_hours": self.outfit_ttl_hours,
        }


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info(f"Settings: {_settings.to_dict()}")
    return _settings


def reload_settings() -> Settings:
    """Re-read the environment (tests and config changes)."""
    global _settings
    _settings = None
    return get_settings()
