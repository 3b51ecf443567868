"""
Metrics Module (v1.0.0)
Track generation counts, composer mix and feedback interactions.
"""
import threading
from typing import Dict, Any


def _empty_metrics() -> Dict[str, Any]:
    return {
        "total_generations": 0,
        "empty_generations": 0,
        "llm_outfits": 0,
        "rule_outfits": 0,
        "llm_failures": 0,
        "llm_shortfalls": 0,
        "interactions_by_type": {},
        "errors": 0,
    }


# Thread-safe metrics storage
_lock = threading.Lock()
_metrics = _empty_metrics()


def record_generation(llm_outfits: int, rule_outfits: int, error: bool = False):
    """
    Record one generate_outfits call.
    
    Args:
        llm_outfits: Outfits produced by the LLM composer
        rule_outfits: Outfits produced by the rule-based composer
        error: Whether the call raised
    """
    with _lock:
        _metrics["total_generations"] += 1
        _metrics["llm_outfits"] += llm_outfits
        _metrics["rule_outfits"] += rule_outfits
        
        if llm_outfits + rule_outfits == 0 and not error:
            _metrics["empty_generations"] += 1
        
        if error:
            _metrics["errors"] += 1


def record_llm_failure():
    """LLM call failed or returned no usable outfit list."""
    with _lock:
        _metrics["llm_failures"] += 1


def record_llm_shortfall():
    """LLM answered but fewer outfits than requested survived validation."""
    with _lock:
        _metrics["llm_shortfalls"] += 1


def record_interaction(interaction_type: str):
    with _lock:
        by_type = _metrics["interactions_by_type"]
        by_type[interaction_type] = by_type.get(interaction_type, 0) + 1


def get_metrics() -> Dict[str, Any]:
    """Get current metrics snapshot."""
    with _lock:
        composed = _metrics["llm_outfits"] + _metrics["rule_outfits"]
        
        return {
            "total_generations": _metrics["total_generations"],
            "empty_generations": _metrics["empty_generations"],
            "llm_outfits": _metrics["llm_outfits"],
            "rule_outfits": _metrics["rule_outfits"],
            "llm_share": round(_metrics["llm_outfits"] / composed, 3) if composed > 0 else 0.0,
            "llm_failures": _metrics["llm_failures"],
            "llm_shortfalls": _metrics["llm_shortfalls"],
            "interactions_by_type": dict(_metrics["interactions_by_type"]),
            "errors": _metrics["errors"],
        }


def reset_metrics():
    """Reset all metrics (for testing)."""
    global _metrics
    with _lock:
        _metrics = _empty_metrics()
