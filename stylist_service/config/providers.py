"""
Providers Module (v1.0.0)
Which LLM provider the composer can use right now.
"""
import logging
from typing import Dict, Any, List

from stylist_service.config.settings import get_settings

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("openai", "gemini")


def get_provider_availability() -> Dict[str, bool]:
    """Credential presence per supported provider."""
    settings = get_settings()
    return {"openai": settings.has_openai(), "gemini": settings.has_gemini()}


def is_llm_available() -> bool:
    """True when the LLM composer is enabled and its provider has credentials."""
    settings = get_settings()
    return settings.llm_enabled and get_provider_availability().get(settings.llm_provider, False)


def get_provider_status() -> Dict[str, Any]:
    settings = get_settings()
    return {
        "enabled": settings.llm_enabled,
        "provider": settings.llm_provider,
        "availability": get_provider_availability(),
        "available": is_llm_available(),
    }


def validate_provider_config() -> List[str]:
    """Startup warnings for configuration that degrades generation."""
    settings = get_settings()
    problems = []

    if not settings.llm_enabled:
        problems.append("LLM is disabled - outfits will use rule-based composition only")
    elif settings.llm_provider not in SUPPORTED_PROVIDERS:
        problems.append(f"Unknown LLM provider: {settings.llm_provider}")
    elif not get_provider_availability().get(settings.llm_provider):
        problems.append(f"LLM provider '{settings.llm_provider}' has no API key configured")

    if not settings.has_weather():
        problems.append("OPENWEATHER_API_KEY not set - default weather will be used")

    return problems
