"""
Weight tuner for Baton.

Recomputes routing weights from recorded outcomes, and schedules those
recomputations off the request path.
"""

from collections import defaultdict
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, UTC
from pathlib import Path
from threading import Lock
from typing import Callable, Optional, Sequence
import logging
import statistics

from baton.schemas import OutcomeRecord
from baton.weights import RoutingWeights

logger = logging.getLogger("baton.tuner")


@dataclass
class BackendPerformance:
    """Aggregated outcomes for one backend."""
    backend_id: str
    count: int
    avg_latency_ms: float
    avg_cost: float
    success_rate: float
    avg_quality: float  # 0 when no outcome carried a quality score
    task_types: dict[str, int] = field(default_factory=dict)


class WeightTuner:
    """
    Retunes routing weights from logged outcomes.

    The tuning rules:
    1. Group outcomes by backend and average latency, cost, success, quality
    2. If the high-tier backend's quality beats the mid-tier's by more than
       20%, lower the high complexity threshold to 70, otherwise raise it to 80
    3. Cost weight 0.2 when mean quality exceeds 0.8, otherwise 0.3
    4. Latency weight 0.3 when mean latency is under 2000ms, otherwise 0.4
    5. Mid threshold, size multiplier and quality weight are fixed
    """

    def __init__(
        self,
        high_tier_backend: str = "gpt-5",
        mid_tier_backend: str = "gpt-4-turbo",
        min_outcomes: int = 50,
    ):
        """
        Args:
            high_tier_backend: Highest-capability backend id.
            mid_tier_backend: Mid-tier backend id it is compared against.
            min_outcomes: Outcomes required before weights change.
        """
        self.high_tier_backend = high_tier_backend
        self.mid_tier_backend = mid_tier_backend
        self.min_outcomes = min_outcomes

    def retune(
        self,
        outcomes: Sequence[OutcomeRecord],
        current: RoutingWeights,
    ) -> RoutingWeights:
        """
        Compute new weights from outcomes.

        Args:
            outcomes: Every recorded outcome.
            current: Weights in use now.

        Returns:
            New weights, or ``current`` itself when there are too few outcomes.
        """
        if len(outcomes) < self.min_outcomes:
            logger.debug(
                "Only %d outcomes (need %d); keeping current weights",
                len(outcomes), self.min_outcomes,
            )
            return current

        performance = self.summarize(outcomes)

        high = performance.get(self.high_tier_backend)
        mid = performance.get(self.mid_tier_backend)
        high_quality = high.avg_quality if high else 0.0
        mid_quality = mid.avg_quality if mid else 0.0
        ratio = high_quality / (mid_quality or 1)

        mean_quality = statistics.mean(p.avg_quality for p in performance.values())
        mean_latency = statistics.mean(p.avg_latency_ms for p in performance.values())

        now = datetime.now(UTC)
        return RoutingWeights(
            high_complexity_threshold=70.0 if ratio > 1.2 else 80.0,
            mid_complexity_threshold=45.0,
            size_multiplier=1.2,
            cost_weight=0.2 if mean_quality > 0.8 else 0.3,
            latency_weight=0.3 if mean_latency < 2000 else 0.4,
            quality_weight=0.4,
            version=now.isoformat(),
            updated_at=now,
        )

    def summarize(self, outcomes: Sequence[OutcomeRecord]) -> dict[str, BackendPerformance]:
        """Group outcomes by backend and compute per-backend averages."""
        by_backend: dict[str, list[OutcomeRecord]] = defaultdict(list)
        for outcome in outcomes:
            by_backend[outcome.backend_id].append(outcome)

        summary = {}
        for backend_id, records in by_backend.items():
            qualities = [r.quality_score for r in records if r.quality_score is not None]
            task_types: dict[str, int] = defaultdict(int)
            for r in records:
                task_types[r.task_type] += 1

            summary[backend_id] = BackendPerformance(
                backend_id=backend_id,
                count=len(records),
                avg_latency_ms=statistics.mean(r.latency_ms for r in records),
                avg_cost=statistics.mean(r.cost for r in records),
                success_rate=sum(1 for r in records if r.success) / len(records),
                avg_quality=statistics.mean(qualities) if qualities else 0.0,
                task_types=dict(task_types),
            )
        return summary


class RetuneScheduler:
    """
    Runs retunes in the background, at most one at a time.

    A trigger that arrives while a run is in progress is dropped, and a
    synchronous run waits for it. Each run
    reads all outcomes, retunes, persists the weights document and then
    installs the new weights. Failures are logged and leave the current
    weights in place.
    """

    def __init__(
        self,
        tuner: WeightTuner,
        load_outcomes: Callable[[], Sequence[OutcomeRecord]],
        get_weights: Callable[[], RoutingWeights],
        install_weights: Callable[[RoutingWeights], object],
        weights_path: Optional[Path] = None,
    ):
        self.tuner = tuner
        self.load_outcomes = load_outcomes
        self.get_weights = get_weights
        self.install_weights = install_weights
        self.weights_path = Path(weights_path) if weights_path else None

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="baton-retune")
        self._lock = Lock()
        self._running = False
        # Held for a whole read, retune, persist and install cycle
        self._run_lock = Lock()

    @property
    def running(self) -> bool:
        return self._running

    def trigger(self) -> Optional[Future]:
        """
        Schedule a retune.

        Returns:
            Future resolving to the weights in effect after the run, or
            None if a run is already in progress.
        """
        with self._lock:
            if self._running:
                logger.debug("Retune already in progress; trigger suppressed")
                return None
            self._running = True

        try:
            return self._executor.submit(self._run)
        except RuntimeError:
            # Executor shut down
            with self._lock:
                self._running = False
            logger.warning("Retune scheduler is shut down; trigger ignored")
            return None

    def run_now(self) -> RoutingWeights:
        """
        Retune synchronously on the calling thread.

        Waits for a background run in progress to finish first.
        """
        return self._retune()

    def _run(self) -> RoutingWeights:
        try:
            return self._retune()
        except Exception:
            logger.exception("Background retune failed; keeping current weights")
            return self.get_weights()
        finally:
            with self._lock:
                self._running = False

    def _retune(self) -> RoutingWeights:
        with self._run_lock:
            return self._retune_locked()

    def _retune_locked(self) -> RoutingWeights:
        current = self.get_weights()
        outcomes = self.load_outcomes()
        new_weights = self.tuner.retune(outcomes, current)
        if new_weights is current:
            return current

        if self.weights_path is not None:
            try:
                new_weights.save(self.weights_path)
            except OSError as e:
                logger.error("Could not persist routing weights to %s: %s", self.weights_path, e)
                return current

        self.install_weights(new_weights)
        logger.info(
            "Updated routing weights from %d outcomes: %s",
            len(outcomes), new_weights.to_dict(include_meta=False),
        )
        return new_weights

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
