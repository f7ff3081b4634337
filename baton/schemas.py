"""
Data schemas for Baton.

Backend profiles, task profiles, outcome records and routing decisions.
"""

from dataclasses import dataclass, field
from datetime import datetime, UTC
from enum import Enum
from typing import Optional


class TaskType(str, Enum):
    """Kinds of work a request can be classified as."""
    DEEP_REASONING = "deep_reasoning"
    CODE = "code"
    QUICK_INFERENCE = "quick_inference"


class LatencyTarget(str, Enum):
    """How long the caller is willing to wait."""
    FAST = "fast"
    BALANCED = "balanced"
    THOROUGH = "thorough"


class CostSensitivity(str, Enum):
    """How much the caller cares about cost."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class BackendOrigin(str, Enum):
    """Where a backend profile came from."""
    BUILTIN = "builtin"
    DISCOVERED = "discovered"


# Target latency per bucket, in milliseconds
TARGET_LATENCY_MS: dict[LatencyTarget, int] = {
    LatencyTarget.FAST: 1000,
    LatencyTarget.BALANCED: 2500,
    LatencyTarget.THOROUGH: 5000,
}


@dataclass(frozen=True)
class UnitCost:
    """Cost per 1000 size-units (USD)."""
    input: float
    output: float


@dataclass(frozen=True)
class BackendProfile:
    """
    A candidate backend model.

    Profiles are immutable. The registry swaps whole snapshots when
    discovery adds entries.
    """
    id: str
    max_context_units: int
    unit_cost: UnitCost
    expected_latency_ms: int
    capability_tags: frozenset[str]
    release_timestamp: datetime
    performance_score: float  # 0-100
    origin: BackendOrigin = BackendOrigin.BUILTIN

    # Conservative defaults applied to discovered backends
    DISCOVERED_MAX_CONTEXT_UNITS = 128000
    DISCOVERED_UNIT_COST = UnitCost(input=0.01, output=0.03)
    DISCOVERED_LATENCY_MS = 2000
    DISCOVERED_TAGS = frozenset({"general"})
    DISCOVERED_PERFORMANCE_SCORE = 75.0

    def __post_init__(self):
        if not self.id:
            raise ValueError("backend id cannot be empty")
        if not 0.0 <= self.performance_score <= 100.0:
            raise ValueError(
                f"performance_score for {self.id} must be in [0, 100], "
                f"got {self.performance_score}"
            )
        if not isinstance(self.capability_tags, frozenset):
            object.__setattr__(self, "capability_tags", frozenset(self.capability_tags))

    @classmethod
    def discovered(cls, backend_id: str, released: Optional[datetime] = None) -> "BackendProfile":
        """Build a profile for a newly discovered backend."""
        return cls(
            id=backend_id,
            max_context_units=cls.DISCOVERED_MAX_CONTEXT_UNITS,
            unit_cost=cls.DISCOVERED_UNIT_COST,
            expected_latency_ms=cls.DISCOVERED_LATENCY_MS,
            capability_tags=cls.DISCOVERED_TAGS,
            release_timestamp=released or datetime.now(UTC),
            performance_score=cls.DISCOVERED_PERFORMANCE_SCORE,
            origin=BackendOrigin.DISCOVERED,
        )

    def cost_for(self, prompt_units: int, completion_units: int) -> float:
        """Cost in USD of a completed request on this backend."""
        return (
            prompt_units / 1000 * self.unit_cost.input
            + completion_units / 1000 * self.unit_cost.output
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "max_context_units": self.max_context_units,
            "unit_cost": {"input": self.unit_cost.input, "output": self.unit_cost.output},
            "expected_latency_ms": self.expected_latency_ms,
            "capability_tags": sorted(self.capability_tags),
            "release_timestamp": self.release_timestamp.isoformat(),
            "performance_score": self.performance_score,
            "origin": self.origin.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BackendProfile":
        released = data.get("release_timestamp")
        return cls(
            id=data["id"],
            max_context_units=int(data["max_context_units"]),
            unit_cost=UnitCost(**data["unit_cost"]),
            expected_latency_ms=int(data["expected_latency_ms"]),
            capability_tags=frozenset(data.get("capability_tags", [])),
            release_timestamp=(
                datetime.fromisoformat(released) if released else datetime.now(UTC)
            ),
            performance_score=float(data["performance_score"]),
            origin=BackendOrigin(data.get("origin", "builtin")),
        )


@dataclass(frozen=True)
class Turn:
    """One prior turn of the conversation."""
    role: str
    content: str


@dataclass(frozen=True)
class TaskProfile:
    """
    Structured view of a request.

    Computed by the TaskAnalyzer from the raw message, history and
    caller preferences.
    """
    task_type: TaskType
    context_units: int
    complexity: float  # 0-100
    latency_target: LatencyTarget
    cost_sensitivity: CostSensitivity
    domain: str
    needs_structured_output: bool

    def to_dict(self) -> dict:
        return {
            "task_type": self.task_type.value,
            "context_units": self.context_units,
            "complexity": self.complexity,
            "latency_target": self.latency_target.value,
            "cost_sensitivity": self.cost_sensitivity.value,
            "domain": self.domain,
            "needs_structured_output": self.needs_structured_output,
        }


@dataclass(frozen=True)
class OutcomeRecord:
    """
    Measured result of one completed request.

    Created by the caller after invoking the chosen backend. Never mutated.
    """
    backend_id: str
    task_type: str
    domain: str
    latency_ms: float
    prompt_units: int
    completion_units: int
    cost: float
    success: bool
    quality_score: Optional[float] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def total_units(self) -> int:
        return self.prompt_units + self.completion_units

    def to_dict(self) -> dict:
        return {
            "backend_id": self.backend_id,
            "task_type": self.task_type,
            "domain": self.domain,
            "latency_ms": self.latency_ms,
            "prompt_units": self.prompt_units,
            "completion_units": self.completion_units,
            "cost": self.cost,
            "success": self.success,
            "quality_score": self.quality_score,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OutcomeRecord":
        timestamp = datetime.fromisoformat(data["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        quality = data.get("quality_score")
        return cls(
            backend_id=data["backend_id"],
            task_type=data.get("task_type", ""),
            domain=data.get("domain", ""),
            latency_ms=float(data["latency_ms"]),
            prompt_units=int(data.get("prompt_units", 0)),
            completion_units=int(data.get("completion_units", 0)),
            cost=float(data.get("cost", 0.0)),
            success=bool(data["success"]),
            quality_score=float(quality) if quality is not None else None,
            timestamp=timestamp,
        )


@dataclass(frozen=True)
class RoutingDecision:
    """
    The routing decision made by Baton.

    Includes the chosen backend, the task profile it was chosen for,
    every backend's score and an explanation.
    """
    backend_id: str
    profile: TaskProfile
    scores: dict[str, float]
    why: str
    weights_version: str = "default"
    timestamp_utc: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict:
        return {
            "backend_id": self.backend_id,
            "profile": self.profile.to_dict(),
            "scores": dict(self.scores),
            "why": self.why,
            "weights_version": self.weights_version,
            "timestamp_utc": self.timestamp_utc.isoformat(),
        }
