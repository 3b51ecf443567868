# Config module (v1.0.0)
from stylist_service.config.settings import get_settings, reload_settings, Settings
from stylist_service.config.providers import (
    get_provider_status,
    get_provider_availability,
    is_llm_available,
    validate_provider_config,
)
from stylist_service.config.llm_config import (
    LLMProvider,
    ActiveLLMConfig,
    get_llm_config,
)
