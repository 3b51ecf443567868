"""
Generation Logger (v1.0.0)
Structured JSON-line logging for outfit generation calls.
"""
import os
import json
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Optional

LOGS_DIR = Path(os.getenv("STYLIST_LOG_DIR", Path(__file__).parent.parent.parent / "logs"))

GENERATION_LOG_FILE = LOGS_DIR / "generations.log"

generation_logger = logging.getLogger("stylist.generations")
generation_logger.setLevel(logging.INFO)

# Prevent propagation to root logger
generation_logger.propagate = False


def _ensure_file_handler():
    """Attach the file handler on first use so importing never touches disk."""
    if generation_logger.handlers:
        return
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(GENERATION_LOG_FILE, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter("%(message)s"))
    generation_logger.addHandler(file_handler)


def log_generation(
    user_id: str,
    source: str,
    outfit_count: int,
    llm_outfits: int,
    rule_outfits: int,
    latency_ms: int,
    status: str,
    error: Optional[str] = None,
    occasion: Optional[str] = None,
):
    """
    Log a structured generation entry.
    
    Args:
        user_id: Requesting user
        source: Caller tag (on_demand, pre_generated, regenerated, ...)
        outfit_count: Outfits returned
        llm_outfits: Outfits composed by the LLM
        rule_outfits: Outfits composed by the rule-based fallback
        latency_ms: Wall time in milliseconds
        status: success, empty or fail
        error: Error message if failed
        occasion: Requested occasion
    """
    if not is_logging_enabled():
        return
    
    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "user_id": user_id,
        "source": source,
        "occasion": occasion,
        "outfit_count": outfit_count,
        "llm_outfits": llm_outfits,
        "rule_outfits": rule_outfits,
        "latency_ms": latency_ms,
        "status": status,
    }
    
    if error:
        entry["error"] = error
    
    _ensure_file_handler()
    generation_logger.info(json.dumps(entry))


def is_logging_enabled() -> bool:
    """Check if generation logging is enabled."""
    return os.getenv("STYLIST_LOGGING_ENABLED", "true").lower() == "true"
