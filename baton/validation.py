"""
Input validation for Baton.

Validates outcomes before they reach the outcome log.
"""

import math
from typing import Optional


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


MAX_LATENCY_MS = 3_600_000  # 1 hour
MAX_COST_USD = 100.0  # Sanity check: $100 per request


def validate_backend_id(backend_id: str) -> None:
    if not isinstance(backend_id, str) or not backend_id.strip():
        raise ValidationError("backend_id must be a non-empty string")


def validate_latency(latency_ms: float) -> None:
    """
    Validate measured latency.

    Raises:
        ValidationError: If latency is invalid
    """
    if isinstance(latency_ms, bool) or not isinstance(latency_ms, (int, float)):
        raise ValidationError(
            f"latency_ms must be a number, got {type(latency_ms).__name__}"
        )
    if not math.isfinite(latency_ms):
        raise ValidationError(f"latency_ms must be finite, got {latency_ms}")
    if latency_ms < 0:
        raise ValidationError(f"latency_ms cannot be negative, got {latency_ms}")
    if latency_ms > MAX_LATENCY_MS:
        raise ValidationError(
            f"latency_ms too large: {latency_ms:,}ms (max: {MAX_LATENCY_MS:,}ms)"
        )


def validate_label(name: str, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} must be a non-empty string")


def validate_units(name: str, units: int) -> None:
    if isinstance(units, bool) or not isinstance(units, int):
        raise ValidationError(f"{name} must be an integer, got {type(units).__name__}")
    if units < 0:
        raise ValidationError(f"{name} cannot be negative, got {units}")


def validate_cost(cost: float) -> None:
    if isinstance(cost, bool) or not isinstance(cost, (int, float)):
        raise ValidationError(f"cost must be a number, got {type(cost).__name__}")
    if not math.isfinite(cost):
        raise ValidationError(f"cost must be finite, got {cost}")
    if cost < 0:
        raise ValidationError(f"cost cannot be negative, got {cost}")
    if cost > MAX_COST_USD:
        raise ValidationError(f"cost too large: ${cost:.2f} (max: ${MAX_COST_USD:.2f})")


def validate_quality(quality_score: Optional[float]) -> None:
    """
    Validate an optional quality score (0.0 to 1.0).

    Raises:
        ValidationError: If quality is invalid
    """
    if quality_score is None:
        return
    if isinstance(quality_score, bool) or not isinstance(quality_score, (int, float)):
        raise ValidationError(
            f"quality_score must be a number, got {type(quality_score).__name__}"
        )
    if not 0.0 <= quality_score <= 1.0:
        raise ValidationError(
            f"quality_score must be between 0.0 and 1.0, got {quality_score}"
        )


def validate_outcome(
    backend_id: str,
    task_type: str,
    domain: str,
    latency_ms: float,
    prompt_units: int,
    completion_units: int,
    cost: float,
    success: bool,
    quality_score: Optional[float] = None,
) -> None:
    """
    Validate all outcome fields at once.

    Raises:
        ValidationError: If any field is invalid
    """
    validate_backend_id(backend_id)
    validate_label("task_type", task_type)
    validate_label("domain", domain)
    validate_latency(latency_ms)
    validate_units("prompt_units", prompt_units)
    validate_units("completion_units", completion_units)
    validate_cost(cost)
    if not isinstance(success, bool):
        raise ValidationError(f"success must be a boolean, got {type(success).__name__}")
    validate_quality(quality_score)
