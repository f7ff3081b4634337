"""
Metrics recording for Baton.

Appends one outcome per completed request to durable storage, counts
them, and hands every full batch to the retune scheduler.
"""

import logging
import sqlite3
import statistics
from collections import defaultdict
from threading import Lock
from concurrent.futures import Future
from typing import Optional, Protocol

from baton.schemas import OutcomeRecord
from baton.storage import OutcomeStore
from baton.weights import RoutingWeights

# Store failures the recorder absorbs; ValueError covers undecodable log bytes
STORE_ERRORS = (OSError, sqlite3.Error, ValueError)


class RetuneTrigger(Protocol):
    def trigger(self) -> Optional[Future]:
        ...


class MetricsRecorder:
    """
    Records outcomes and aggregates them into routing stats.

    Recording is best-effort telemetry: store failures are logged and
    never reach the caller.
    """

    def __init__(
        self,
        store: OutcomeStore,
        scheduler: Optional[RetuneTrigger] = None,
        batch_size: int = 100,
        enable_logging: bool = False,
    ):
        """
        Initialize metrics recorder.

        Args:
            store: Where outcomes are appended.
            scheduler: Retune scheduler triggered on every full batch.
            batch_size: Outcomes per retune trigger.
            enable_logging: Whether to attach a stream handler to the logger.
        """
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.store = store
        self.scheduler = scheduler
        self.batch_size = batch_size
        self.last_retune: Optional[Future] = None

        self.logger = logging.getLogger("baton.metrics")
        if enable_logging and not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
                )
            )
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

        self._lock = Lock()
        # Resume counting from what is already on disk
        try:
            self._count = store.count()
        except STORE_ERRORS as e:
            self.logger.warning("Could not count stored outcomes (%s); starting at 0", e)
            self._count = 0

    @property
    def count(self) -> int:
        """Outcomes recorded so far, including those loaded at startup."""
        return self._count

    def record(self, outcome: OutcomeRecord) -> None:
        """
        Append an outcome.

        Every ``batch_size``-th successful append triggers a background
        retune.
        """
        try:
            self.store.append(outcome)
        except STORE_ERRORS as e:
            self.logger.error(
                "Error recording outcome for %s: %s", outcome.backend_id, e
            )
            return

        with self._lock:
            self._count += 1
            batch_boundary = self._count % self.batch_size == 0
            count = self._count

        self.logger.debug(
            "OUTCOME: backend=%s, latency_ms=%s, cost=%s, success=%s",
            outcome.backend_id, outcome.latency_ms, outcome.cost, outcome.success,
        )

        if batch_boundary and self.scheduler is not None:
            self.logger.info("Recorded %d outcomes; scheduling retune", count)
            try:
                future = self.scheduler.trigger()
            except Exception:
                self.logger.exception("Could not schedule retune")
                return
            if future is not None:
                self.last_retune = future

    def load_outcomes(self) -> list[OutcomeRecord]:
        """All stored outcomes, or none if the store cannot be read."""
        try:
            return self.store.read_all()
        except STORE_ERRORS as e:
            self.logger.error("Error reading outcomes: %s", e)
            return []

    def get_stats(self, current_weights: RoutingWeights) -> dict:
        """
        Get aggregated routing statistics.

        Returns:
            Dictionary with request totals, per-backend usage, averages,
            success rate and the weights in use.
        """
        outcomes = self.load_outcomes()

        usage: dict[str, int] = defaultdict(int)
        for outcome in outcomes:
            usage[outcome.backend_id] += 1

        return {
            "total_requests": len(outcomes),
            "usage_by_backend": dict(usage),
            "average_cost": statistics.mean(o.cost for o in outcomes) if outcomes else 0.0,
            "average_latency_ms": (
                statistics.mean(o.latency_ms for o in outcomes) if outcomes else 0.0
            ),
            "success_rate": (
                sum(1 for o in outcomes if o.success) / len(outcomes) if outcomes else 0.0
            ),
            "current_weights": current_weights.to_dict(),
        }
