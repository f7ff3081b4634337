"""Tests for the Scorer component."""

from datetime import datetime, UTC

import pytest
from baton.scorer import Scorer
from baton.schemas import (
    BackendProfile,
    UnitCost,
    TaskProfile,
    TaskType,
    LatencyTarget,
    CostSensitivity,
)
from baton.weights import RoutingWeights


def make_backend(
    backend_id="test-model",
    tags=("code",),
    performance=80.0,
    latency_ms=1000,
    cost_in=0.0,
    cost_out=0.0,
):
    return BackendProfile(
        id=backend_id,
        max_context_units=128000,
        unit_cost=UnitCost(input=cost_in, output=cost_out),
        expected_latency_ms=latency_ms,
        capability_tags=frozenset(tags),
        release_timestamp=datetime(2024, 1, 1, tzinfo=UTC),
        performance_score=performance,
    )


def make_profile(
    task_type=TaskType.CODE,
    complexity=0.0,
    context_units=0,
    latency_target=LatencyTarget.BALANCED,
    cost_sensitivity=CostSensitivity.MEDIUM,
):
    return TaskProfile(
        task_type=task_type,
        context_units=context_units,
        complexity=complexity,
        latency_target=latency_target,
        cost_sensitivity=cost_sensitivity,
        domain="general",
        needs_structured_output=False,
    )


class TestScorer:
    """Test suite for Scorer."""

    def setup_method(self):
        """Set up test fixtures."""
        self.scorer = Scorer()
        self.weights = RoutingWeights()

    def _breakdown(self, profile, backend, weights=None):
        return self.scorer.breakdown(profile, [backend], weights or self.weights)[0]

    def test_capability_exact_tag(self):
        result = self._breakdown(make_profile(TaskType.CODE), make_backend(tags=("code",)))
        assert result.capability == 40

    def test_capability_partial_matches(self):
        reasoning = self._breakdown(
            make_profile(TaskType.DEEP_REASONING), make_backend(tags=("reasoning",))
        )
        analysis = self._breakdown(make_profile(TaskType.CODE), make_backend(tags=("analysis",)))
        none = self._breakdown(
            make_profile(TaskType.QUICK_INFERENCE), make_backend(tags=("analysis", "reasoning"))
        )

        assert reasoning.capability == 30
        assert analysis.capability == 25
        assert none.capability == 0

    def test_complexity_fit(self):
        """Best fit is a backend ten points above the task complexity."""
        perfect = self._breakdown(make_profile(complexity=70), make_backend(performance=80))
        distant = self._breakdown(make_profile(complexity=0), make_backend(performance=95))
        hopeless = self._breakdown(make_profile(complexity=100), make_backend(performance=0))

        assert perfect.complexity_fit == pytest.approx(30.0)
        assert distant.complexity_fit == pytest.approx(4.5)
        assert hopeless.complexity_fit == 0.0

    def test_cost_free_with_no_context(self):
        result = self._breakdown(
            make_profile(context_units=0), make_backend(cost_in=0.03, cost_out=0.06)
        )
        assert result.cost == pytest.approx(1.0 * 0.3 * 50)

    def test_cost_sensitivity_shapes_score(self):
        backend = make_backend(cost_in=0.03, cost_out=0.06)

        medium = self._breakdown(make_profile(context_units=1000), backend)
        high = self._breakdown(
            make_profile(context_units=1000, cost_sensitivity=CostSensitivity.HIGH), backend
        )
        low = self._breakdown(
            make_profile(context_units=1000, cost_sensitivity=CostSensitivity.LOW), backend
        )

        assert medium.cost == pytest.approx(0.91 * 15)
        assert high.cost == pytest.approx(0.91 ** 0.5 * 15)
        assert low.cost == pytest.approx(0.91 ** 2 * 15)

    def test_cost_clamped_for_expensive_requests(self):
        backend = make_backend(cost_in=0.5, cost_out=0.5)
        result = self._breakdown(
            make_profile(context_units=5000, cost_sensitivity=CostSensitivity.HIGH), backend
        )
        assert result.cost == 0.0

    def test_latency_within_target(self):
        result = self._breakdown(
            make_profile(latency_target=LatencyTarget.FAST), make_backend(latency_ms=800)
        )
        assert result.latency == pytest.approx(15.0)

    def test_latency_degrades_linearly(self):
        slower = self._breakdown(make_profile(), make_backend(latency_ms=3000))
        twice = self._breakdown(make_profile(), make_backend(latency_ms=5000))
        beyond = self._breakdown(make_profile(), make_backend(latency_ms=9000))

        assert slower.latency == pytest.approx(0.8 * 15)
        assert twice.latency == 0.0
        assert beyond.latency == 0.0

    def test_history_tracks_performance(self):
        result = self._breakdown(make_profile(), make_backend(performance=95))
        assert result.history == pytest.approx(9.5)

    def test_weights_scale_cost_and_latency(self):
        backend = make_backend()
        profile = make_profile()
        heavy = RoutingWeights(cost_weight=0.6, latency_weight=0.0)

        result = self._breakdown(profile, backend, heavy)

        assert result.cost == pytest.approx(30.0)
        assert result.latency == 0.0

    def test_score_sums_contributions(self):
        backend = make_backend()
        profile = make_profile(complexity=20)

        total = self.scorer.score(profile, [backend], self.weights)["test-model"]
        parts = self._breakdown(profile, backend)

        assert total == pytest.approx(
            parts.capability + parts.complexity_fit + parts.cost + parts.latency + parts.history
        )

    def test_scores_every_backend_in_order(self):
        backends = [make_backend("b"), make_backend("a"), make_backend("c")]

        scores = self.scorer.score(make_profile(), backends)

        assert list(scores) == ["b", "a", "c"]

    def test_scoring_leaves_backends_untouched(self):
        backend = make_backend(performance=80)

        self.scorer.score(make_profile(complexity=90), [backend])

        assert backend.performance_score == 80
