"""
Scorer for Baton.

Computes a composite suitability score for every registered backend.
Uses deterministic formulas with tunable routing weights.
"""

from dataclasses import dataclass
from typing import Iterable

from baton.schemas import (
    BackendProfile,
    TaskProfile,
    TaskType,
    CostSensitivity,
    TARGET_LATENCY_MS,
)
from baton.weights import RoutingWeights, DEFAULT_WEIGHTS


@dataclass(frozen=True)
class ScoreBreakdown:
    """The five contributions that make up a backend's score."""
    backend_id: str
    capability: float  # 0-40
    complexity_fit: float  # 0-30
    cost: float  # 0-50 * cost_weight
    latency: float  # 0-50 * latency_weight
    history: float  # 0-10

    @property
    def total(self) -> float:
        return self.capability + self.complexity_fit + self.cost + self.latency + self.history


class Scorer:
    """
    Scores backends for a task profile.

    The scorer only reads backend profiles and weights; it never changes
    a backend's performance score. Totals are not normalized across
    backends, only their ordering matters.
    """

    def score(
        self,
        profile: TaskProfile,
        backends: Iterable[BackendProfile],
        weights: RoutingWeights = None,
    ) -> dict[str, float]:
        """
        Score every backend.

        Returns:
            Mapping of backend id to total score, in the order given.
        """
        return {
            b.backend_id: b.total
            for b in self.breakdown(profile, backends, weights)
        }

    def breakdown(
        self,
        profile: TaskProfile,
        backends: Iterable[BackendProfile],
        weights: RoutingWeights = None,
    ) -> list[ScoreBreakdown]:
        """Score every backend, keeping each contribution separate."""
        weights = weights or DEFAULT_WEIGHTS
        return [self._score_backend(profile, backend, weights) for backend in backends]

    def _score_backend(
        self,
        profile: TaskProfile,
        backend: BackendProfile,
        weights: RoutingWeights,
    ) -> ScoreBreakdown:
        cost_score = self._cost_score(backend, profile.context_units, profile.cost_sensitivity)
        latency_score = self._latency_score(backend.expected_latency_ms, profile)

        return ScoreBreakdown(
            backend_id=backend.id,
            capability=self._capability_score(backend, profile.task_type),
            complexity_fit=self._complexity_fit(profile.complexity, backend.performance_score) * 30,
            cost=cost_score * weights.cost_weight * 50,
            latency=latency_score * weights.latency_weight * 50,
            history=backend.performance_score / 100 * 10,
        )

    def _capability_score(self, backend: BackendProfile, task_type: TaskType) -> float:
        tags = backend.capability_tags
        if task_type.value in tags:
            return 40.0
        if task_type == TaskType.DEEP_REASONING and "reasoning" in tags:
            return 30.0
        if task_type == TaskType.CODE and "analysis" in tags:
            return 25.0
        return 0.0

    def _complexity_fit(self, complexity: float, performance_score: float) -> float:
        """
        How well the backend's performance matches the task (0 to 1).

        The best fit is a backend scoring slightly above the task complexity.
        """
        ideal = complexity + 10
        return max(0.0, 1 - abs(performance_score - ideal) / 100)

    def _cost_score(
        self,
        backend: BackendProfile,
        context_units: int,
        sensitivity: CostSensitivity,
    ) -> float:
        """
        Cost efficiency (0 to 1, cheaper is higher).

        Estimated cost is normalized against $1 per request.
        """
        estimated = (backend.unit_cost.input + backend.unit_cost.output) * (context_units / 1000)
        score = 1 - min(1.0, estimated)

        if sensitivity == CostSensitivity.HIGH:
            score = score ** 0.5
        elif sensitivity == CostSensitivity.LOW:
            score = score ** 2

        return score

    def _latency_score(self, expected_latency_ms: int, profile: TaskProfile) -> float:
        """1.0 within the target bucket, falling linearly to 0 at twice the target."""
        target = TARGET_LATENCY_MS[profile.latency_target]
        if expected_latency_ms <= target:
            return 1.0
        return max(0.0, 1 - (expected_latency_ms - target) / target)
