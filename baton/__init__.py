"""
Baton - Send every request to the right model, and learn from the results.

Routing:
    from baton import AdaptiveRouter

    router = AdaptiveRouter.from_settings()
    backend = router.select_backend("Create a text-to-image workflow using SDXL")
    print(backend)  # "gpt-4o"

Explained decisions:
    decision = router.route("Explain how KSampler nodes work")
    print(decision.profile.task_type)  # TaskType.QUICK_INFERENCE
    print(decision.why)

Feedback (retunes weights every 100 outcomes):
    router.record_outcome(
        backend_id=backend,
        task_type="code",
        domain="workflow_design",
        latency_ms=1840,
        prompt_units=120,
        completion_units=900,
        cost=0.012,
        success=True,
        quality_score=0.9,
    )
    print(router.get_stats())

Discovery:
    router.discover_backends()  # ["gpt-4.1", ...]
"""

from baton.control_plane import AdaptiveRouter
from baton.analyzer import TaskAnalyzer
from baton.scorer import Scorer, ScoreBreakdown
from baton.router import Router, NoCandidatesError, select
from baton.registry import CapabilityRegistry, BUILTIN_BACKENDS
from baton.discovery import BackendDiscovery, CatalogEntry, OpenAICatalog
from baton.metrics import MetricsRecorder
from baton.tuner import WeightTuner, RetuneScheduler, BackendPerformance
from baton.weights import RoutingWeights, load_weights, DEFAULT_WEIGHTS
from baton.state import RoutingState
from baton.storage import InMemoryOutcomeStore, JSONLOutcomeStore, SQLiteOutcomeStore
from baton.validation import ValidationError
from baton.schemas import (
    BackendOrigin,
    BackendProfile,
    CostSensitivity,
    LatencyTarget,
    OutcomeRecord,
    RoutingDecision,
    TaskProfile,
    TaskType,
    Turn,
    UnitCost,
)


__version__ = "1.0.0"
__all__ = [
    # Entry point
    "AdaptiveRouter",
    # Components
    "TaskAnalyzer",
    "Scorer",
    "ScoreBreakdown",
    "Router",
    "NoCandidatesError",
    "select",
    "CapabilityRegistry",
    "BUILTIN_BACKENDS",
    "BackendDiscovery",
    "CatalogEntry",
    "OpenAICatalog",
    "MetricsRecorder",
    "WeightTuner",
    "RetuneScheduler",
    "BackendPerformance",
    "RoutingState",
    # Weights
    "RoutingWeights",
    "load_weights",
    "DEFAULT_WEIGHTS",
    # Storage
    "InMemoryOutcomeStore",
    "JSONLOutcomeStore",
    "SQLiteOutcomeStore",
    # Schemas
    "BackendOrigin",
    "BackendProfile",
    "CostSensitivity",
    "LatencyTarget",
    "OutcomeRecord",
    "RoutingDecision",
    "TaskProfile",
    "TaskType",
    "Turn",
    "UnitCost",
    "ValidationError",
]
