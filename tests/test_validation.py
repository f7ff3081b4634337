"""Tests for outcome validation."""

import pytest
from baton.schemas import TaskType
from baton.validation import (
    ValidationError,
    validate_cost,
    validate_latency,
    validate_outcome,
)


def valid_fields(**changes):
    fields = dict(
        backend_id="gpt-4o",
        task_type="code",
        domain="general",
        latency_ms=1500,
        prompt_units=100,
        completion_units=400,
        cost=0.01,
        success=True,
        quality_score=0.9,
    )
    fields.update(changes)
    return fields


def test_valid_outcome_passes():
    validate_outcome(**valid_fields())
    validate_outcome(**valid_fields(task_type=TaskType.CODE, quality_score=None))


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_latency_rejected(value):
    with pytest.raises(ValidationError):
        validate_latency(value)


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_non_finite_cost_rejected(value):
    with pytest.raises(ValidationError):
        validate_cost(value)


@pytest.mark.parametrize("changes", [
    {"domain": None},
    {"domain": "  "},
    {"task_type": ""},
    {"task_type": 3},
    {"success": 1},
    {"quality_score": float("nan")},
    {"completion_units": 1.5},
])
def test_invalid_fields_rejected(changes):
    with pytest.raises(ValidationError):
        validate_outcome(**valid_fields(**changes))
