"""
Router for Baton.

Makes the final routing decision: scores every registered backend and
selects the highest scoring one.
"""

from collections.abc import Mapping
from typing import Iterable, Optional

from baton.schemas import TaskProfile, RoutingDecision
from baton.scorer import Scorer, ScoreBreakdown
from baton.state import RoutingState


class NoCandidatesError(RuntimeError):
    """Raised when there is no backend to choose from."""
    pass


def select(scores: Mapping[str, float], order: Optional[Iterable[str]] = None) -> str:
    """
    Pick the backend with the highest score.

    Ties go to the backend registered first. ``order`` gives the
    registration order; when omitted the mapping's own order is used.

    Raises:
        NoCandidatesError: If there are no scores.
    """
    candidates = list(order) if order is not None else list(scores)
    best_id = None
    best_score = 0.0

    for backend_id in candidates:
        if backend_id not in scores:
            continue
        score = scores[backend_id]
        if best_id is None or score > best_score:
            best_id = backend_id
            best_score = score

    if best_id is None:
        raise NoCandidatesError("No backends registered; cannot route request")
    return best_id


class Router:
    """
    Routes a task profile to a backend.

    The routing algorithm:
    1. Score every registered backend against the current weights
    2. Select the arg-max, first registered on ties
    3. Explain the choice
    """

    def __init__(self, state: RoutingState, scorer: Optional[Scorer] = None):
        self.state = state
        self.scorer = scorer or Scorer()

    def route(self, profile: TaskProfile) -> RoutingDecision:
        """
        Route a task profile.

        Args:
            profile: Analyzed request.

        Returns:
            RoutingDecision with chosen backend and explanation.

        Raises:
            NoCandidatesError: If the registry is empty.
        """
        # Read each snapshot once so the decision is internally consistent
        backends = self.state.registry.snapshot
        weights = self.state.weights

        breakdowns = self.scorer.breakdown(profile, backends, weights)
        scores = {b.backend_id: b.total for b in breakdowns}
        chosen = select(scores, order=[b.id for b in backends])

        return RoutingDecision(
            backend_id=chosen,
            profile=profile,
            scores=scores,
            why=self._explain(profile, next(b for b in breakdowns if b.backend_id == chosen), scores),
            weights_version=weights.version,
        )

    def _explain(
        self,
        profile: TaskProfile,
        chosen: ScoreBreakdown,
        scores: dict[str, float],
    ) -> str:
        """Generate a human-readable explanation for the selection."""
        parts = [
            f"Task: {profile.task_type.value} ({profile.domain}), "
            f"complexity {profile.complexity:.0f}/100, {profile.context_units} units",
            f"Selected: {chosen.backend_id} scoring {chosen.total:.1f} "
            f"(capability {chosen.capability:.0f}, fit {chosen.complexity_fit:.1f}, "
            f"cost {chosen.cost:.1f}, latency {chosen.latency:.1f}, "
            f"history {chosen.history:.1f})",
        ]

        runner_up = sorted(
            ((s, b) for b, s in scores.items() if b != chosen.backend_id),
            reverse=True,
        )
        if runner_up:
            score, backend_id = runner_up[0]
            parts.append(f"Next best: {backend_id} at {score:.1f}")

        return " | ".join(parts)
