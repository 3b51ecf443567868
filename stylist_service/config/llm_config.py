"""
LLM Configuration Layer (v1.0.0)
Model chain configuration for the outfit composer.

Environment Variables:
    - STYLIST_LLM_PROVIDER: "openai" | "gemini" (default: openai)
    - STYLIST_LLM_MODEL: Override primary model (optional)
    - STYLIST_LLM_FALLBACK_MODELS: Comma-separated fallback chain (optional)
    - STYLIST_LLM_TIMEOUT_S: Per-call timeout in seconds (default: 30)
    - STYLIST_LLM_MAX_RETRIES: Attempts per model (default: 3)
"""
import os
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, Tuple

from stylist_service.config.settings import get_settings

logger = logging.getLogger(__name__)


# ==================== ENUMS ====================

class LLMProvider(Enum):
    """Supported LLM providers."""
    OPENAI = "openai"    # Any OpenAI-compatible endpoint (OpenAI, OpenRouter)
    GEMINI = "gemini"


# ==================== PROVIDER DEFAULTS ====================

@dataclass
class OpenAIConfig:
    """OpenAI-compatible model defaults."""
    default_model: str = "gpt-4o-mini"
    fallback_models: Tuple[str, ...] = field(default_factory=lambda: (
        "gpt-4o", "gpt-4-turbo",
    ))
    temperature: float = 0.7
    max_tokens: int = 2500


@dataclass
class GeminiConfig:
    """Gemini model defaults."""
    default_model: str = "gemini-2.5-flash-lite"
    fallback_models: Tuple[str, ...] = field(default_factory=lambda: (
        "gemini-2.0-flash", "gemini-1.5-flash",
    ))
    temperature: float = 0.7
    max_tokens: int = 2500


# ==================== ACTIVE CONFIG ====================

@dataclass
class ActiveLLMConfig:
    """Resolved LLM configuration for the composer."""
    provider: LLMProvider
    model: str
    fallback_models: Tuple[str, ...]
    temperature: float
    max_tokens: int
    timeout_s: float = 30.0
    max_retries: int = 3
    base_url: Optional[str] = None
    
    @classmethod
    def from_env(cls) -> "ActiveLLMConfig":
        """Resolve configuration from environment variables."""
        settings = get_settings()
        
        if settings.llm_provider == "gemini":
            provider = LLMProvider.GEMINI
            defaults = GeminiConfig()
        else:
            provider = LLMProvider.OPENAI
            defaults = OpenAIConfig()
        
        fallback_env = os.getenv("STYLIST_LLM_FALLBACK_MODELS")
        if fallback_env:
            fallback_models = tuple(m.strip() for m in fallback_env.split(",") if m.strip())
        else:
            fallback_models = defaults.fallback_models
        
        config = cls(
            provider=provider,
            model=os.getenv("STYLIST_LLM_MODEL", defaults.default_model),
            fallback_models=fallback_models,
            temperature=float(os.getenv("STYLIST_LLM_TEMPERATURE", str(defaults.temperature))),
            max_tokens=int(os.getenv("STYLIST_LLM_MAX_TOKENS", str(defaults.max_tokens))),
            timeout_s=float(os.getenv("STYLIST_LLM_TIMEOUT_S", "30")),
            max_retries=int(os.getenv("STYLIST_LLM_MAX_RETRIES", "3")),
            base_url=settings.llm_base_url,
        )
        
        logger.info(f"LLM Config: provider={provider.value}, model={config.model}, fallbacks={list(fallback_models)}")
        return config
    
    def model_chain(self) -> Tuple[str, ...]:
        """Ordered models to try, primary first, without duplicates."""
        chain = []
        for model in (self.model, *self.fallback_models):
            if model and model not in chain:
                chain.append(model)
        return tuple(chain)
    
    def is_openai(self) -> bool:
        return self.provider == LLMProvider.OPENAI
    
    def is_gemini(self) -> bool:
        return self.provider == LLMProvider.GEMINI
    
    def to_dict(self) -> dict:
        return {
            "provider": self.provider.value,
            "model": self.model,
            "fallback_models": list(self.fallback_models),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "timeout_s": self.timeout_s,
            "max_retries": self.max_retries,
            "base_url": self.base_url,
        }


def get_llm_config() -> ActiveLLMConfig:
    """Get the active LLM configuration."""
    return ActiveLLMConfig.from_env()
