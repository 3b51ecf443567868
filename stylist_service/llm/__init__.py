# LLM module (v1.0.0)
from stylist_service.llm.llm_adapter import (
    LLMClient,
    LLMUnavailableError,
    LLMResponseError,
    get_llm_client,
    reset_llm_client,
    parse_json_response,
)
