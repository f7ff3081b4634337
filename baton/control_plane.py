"""
Baton: the adaptive request router.

This is the primary entry point for using Baton.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Iterable, Optional, Callable
import logging

from baton.analyzer import TaskAnalyzer
from baton.config import Settings, get_settings
from baton.discovery import BackendDiscovery, CatalogEntry
from baton.metrics import MetricsRecorder
from baton.registry import CapabilityRegistry
from baton.router import Router
from baton.schemas import (
    BackendProfile,
    OutcomeRecord,
    RoutingDecision,
    TaskProfile,
    TaskType,
)
from baton.state import RoutingState
from baton.storage import OutcomeStore, InMemoryOutcomeStore, open_store
from baton.tuner import RetuneScheduler, WeightTuner
from baton.validation import validate_outcome
from baton.weights import RoutingWeights, load_weights

logger = logging.getLogger("baton.router")


class AdaptiveRouter:
    """
    Adaptive request router.

    Picks a backend for every request, records what happened, and retunes
    its routing weights from those records every batch of outcomes.

    Example:
        ```python
        from baton import AdaptiveRouter

        router = AdaptiveRouter.from_settings()

        backend = router.select_backend("Create a text-to-image workflow")
        # ... call the backend ...
        router.record_outcome(
            backend_id=backend,
            task_type="code",
            domain="workflow_design",
            latency_ms=1840,
            prompt_units=120,
            completion_units=900,
            cost=0.012,
            success=True,
        )
        print(router.get_stats())
        ```
    """

    def __init__(
        self,
        registry: Optional[CapabilityRegistry] = None,
        weights: Optional[RoutingWeights] = None,
        store: Optional[OutcomeStore] = None,
        weights_path: Optional[Path] = None,
        catalog: Optional[Callable[[], Iterable[CatalogEntry]]] = None,
        batch_size: int = 100,
        min_outcomes: int = 50,
        high_tier_backend: str = "gpt-5",
        mid_tier_backend: str = "gpt-4-turbo",
        discovery_prefix: str = "gpt-",
    ):
        """
        Initialize the router.

        Args:
            registry: Candidate backends. Uses the built-in catalog if not provided.
            weights: Starting weights. Loaded from weights_path, else defaults.
            store: Outcome log. Uses in-memory if not provided.
            weights_path: Where retuned weights are persisted.
            catalog: Provider catalog for discovery. Uses OpenAI if not provided.
            batch_size: Outcomes between background retunes.
            min_outcomes: Outcomes required before a retune changes weights.
            high_tier_backend: Highest-capability backend compared by the tuner.
            mid_tier_backend: Mid-tier backend compared by the tuner.
            discovery_prefix: Naming convention for discovered backends.
        """
        if weights is None:
            weights = load_weights(weights_path)

        self.state = RoutingState(registry=registry, weights=weights)
        self.analyzer = TaskAnalyzer()
        self.router = Router(self.state)
        self.discovery = BackendDiscovery(self.state.registry, catalog=catalog, prefix=discovery_prefix)

        self.store = store if store is not None else InMemoryOutcomeStore()
        self.tuner = WeightTuner(
            high_tier_backend=high_tier_backend,
            mid_tier_backend=mid_tier_backend,
            min_outcomes=min_outcomes,
        )
        self.recorder = MetricsRecorder(self.store, batch_size=batch_size)
        self.scheduler = RetuneScheduler(
            tuner=self.tuner,
            load_outcomes=self.recorder.load_outcomes,
            get_weights=lambda: self.state.weights,
            install_weights=self.state.install_weights,
            weights_path=weights_path,
        )
        self.recorder.scheduler = self.scheduler

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        catalog: Optional[Callable[[], Iterable[CatalogEntry]]] = None,
    ) -> "AdaptiveRouter":
        """Build a router from environment configuration."""
        settings = settings or get_settings()
        store = open_store(settings.store, settings.store_path)
        return cls(
            registry=_registry_from_settings(settings),
            store=store,
            weights_path=settings.weights_path,
            catalog=catalog,
            batch_size=settings.retune_batch_size,
            min_outcomes=settings.min_outcomes,
            high_tier_backend=settings.high_tier_backend,
            mid_tier_backend=settings.mid_tier_backend,
            discovery_prefix=settings.discovery_prefix,
        )

    @property
    def weights(self) -> RoutingWeights:
        return self.state.weights

    @property
    def registry(self) -> CapabilityRegistry:
        return self.state.registry

    def analyze(
        self,
        message: str,
        history: Optional[Iterable[Any]] = None,
        preferences: Optional[Mapping] = None,
    ) -> TaskProfile:
        """Analyze a request without routing it."""
        return self.analyzer.analyze(message, history, preferences, weights=self.state.weights)

    def route(
        self,
        message: str,
        history: Optional[Iterable[Any]] = None,
        preferences: Optional[Mapping] = None,
    ) -> RoutingDecision:
        """
        Analyze a request and decide which backend serves it.

        Args:
            message: The user message.
            history: Prior turns ({role, content} mappings or Turn objects).
            preferences: Optional latency_target / cost_sensitivity overrides.

        Returns:
            RoutingDecision with the chosen backend and explanation.

        Raises:
            NoCandidatesError: If no backend is registered.
        """
        profile = self.analyze(message, history, preferences)
        decision = self.router.route(profile)

        logger.info(
            "Routing decision: backend=%s type=%s complexity=%.0f units=%d",
            decision.backend_id,
            profile.task_type.value,
            profile.complexity,
            profile.context_units,
        )
        return decision

    def select_backend(
        self,
        message: str,
        history: Optional[Iterable[Any]] = None,
        preferences: Optional[Mapping] = None,
    ) -> str:
        """Return the id of the backend that should serve this request."""
        return self.route(message, history, preferences).backend_id

    def record_outcome(
        self,
        backend_id: str,
        task_type: TaskType | str,
        domain: str,
        latency_ms: float,
        prompt_units: int,
        completion_units: int,
        cost: float,
        success: bool,
        quality_score: Optional[float] = None,
    ) -> OutcomeRecord:
        """
        Record the outcome of a completed request.

        Storage failures are logged, never raised.

        Raises:
            ValidationError: If the outcome fields are invalid.
        """
        validate_outcome(
            backend_id=backend_id,
            task_type=task_type,
            domain=domain,
            latency_ms=latency_ms,
            prompt_units=prompt_units,
            completion_units=completion_units,
            cost=cost,
            success=success,
            quality_score=quality_score,
        )

        outcome = OutcomeRecord(
            backend_id=backend_id,
            task_type=task_type.value if isinstance(task_type, TaskType) else str(task_type),
            domain=domain,
            latency_ms=latency_ms,
            prompt_units=prompt_units,
            completion_units=completion_units,
            cost=cost,
            success=success,
            quality_score=quality_score,
        )
        self.recorder.record(outcome)
        return outcome

    def get_stats(self) -> dict:
        """Routing statistics for dashboards."""
        return self.recorder.get_stats(self.state.weights)

    def discover_backends(self) -> list[str]:
        """Add unseen backends from the provider catalog."""
        return self.discovery.discover()

    def retune_now(self) -> RoutingWeights:
        """Retune immediately on the calling thread."""
        return self.scheduler.run_now()

    def close(self) -> None:
        self.scheduler.shutdown(wait=True)
        self.store.close()

    def __enter__(self) -> "AdaptiveRouter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _registry_from_settings(settings: Settings) -> Optional[CapabilityRegistry]:
    """Registry from BATON_BACKENDS_JSON, or None for the built-in catalog."""
    if not settings.backends:
        return None
    try:
        backends = [
            BackendProfile.from_dict({**fields, "id": backend_id})
            for backend_id, fields in settings.backends.items()
        ]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Invalid BATON_BACKENDS_JSON (%s); using built-in backends", e)
        return None
    return CapabilityRegistry(backends)
