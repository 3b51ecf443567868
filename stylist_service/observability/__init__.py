# Observability module
from stylist_service.observability.logger import log_generation, is_logging_enabled
from stylist_service.observability.metrics import (
    record_generation,
    record_llm_failure,
    record_llm_shortfall,
    record_interaction,
    get_metrics,
    reset_metrics,
)
