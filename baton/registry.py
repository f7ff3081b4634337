"""
Capability registry for Baton.

Holds the candidate backends in registration order. Updates replace the
whole snapshot so concurrent readers never see a partial change.
"""

from datetime import datetime, UTC
from threading import Lock
from typing import Iterable, Iterator, Optional

from baton.schemas import BackendProfile, UnitCost


# =============================================================================
# BUILT-IN BACKENDS
# =============================================================================

BUILTIN_BACKENDS: tuple[BackendProfile, ...] = (
    BackendProfile(
        id="gpt-5",
        max_context_units=128000,
        unit_cost=UnitCost(input=0.03, output=0.06),
        expected_latency_ms=3000,
        capability_tags=frozenset({"deep_reasoning", "code", "analysis"}),
        release_timestamp=datetime(2025, 1, 1, tzinfo=UTC),
        performance_score=95,
    ),
    BackendProfile(
        id="gpt-4-turbo",
        max_context_units=128000,
        unit_cost=UnitCost(input=0.01, output=0.03),
        expected_latency_ms=2000,
        capability_tags=frozenset({"code", "analysis", "reasoning"}),
        release_timestamp=datetime(2024, 4, 1, tzinfo=UTC),
        performance_score=85,
    ),
    BackendProfile(
        id="gpt-4o",
        max_context_units=128000,
        unit_cost=UnitCost(input=0.005, output=0.015),
        expected_latency_ms=1500,
        capability_tags=frozenset({"code", "quick_inference", "multimodal"}),
        release_timestamp=datetime(2024, 5, 1, tzinfo=UTC),
        performance_score=80,
    ),
    BackendProfile(
        id="gpt-4o-mini",
        max_context_units=128000,
        unit_cost=UnitCost(input=0.00015, output=0.0006),
        expected_latency_ms=800,
        capability_tags=frozenset({"quick_inference", "summarization"}),
        release_timestamp=datetime(2024, 7, 1, tzinfo=UTC),
        performance_score=70,
    ),
)


class CapabilityRegistry:
    """
    Registry of candidate backends.

    Reads take the current snapshot without locking. Writers build a new
    tuple and assign it under a lock; assignment of the reference is atomic.
    Entries are never removed or edited, only added.
    """

    def __init__(self, backends: Optional[Iterable[BackendProfile]] = None):
        self._lock = Lock()
        self._snapshot: tuple[BackendProfile, ...] = ()
        initial = BUILTIN_BACKENDS if backends is None else backends
        self.extend(initial)

    @property
    def snapshot(self) -> tuple[BackendProfile, ...]:
        """Current backends, in registration order."""
        return self._snapshot

    def ids(self) -> list[str]:
        return [b.id for b in self._snapshot]

    def get(self, backend_id: str) -> Optional[BackendProfile]:
        for backend in self._snapshot:
            if backend.id == backend_id:
                return backend
        return None

    def __contains__(self, backend_id: str) -> bool:
        return self.get(backend_id) is not None

    def __iter__(self) -> Iterator[BackendProfile]:
        return iter(self._snapshot)

    def __len__(self) -> int:
        return len(self._snapshot)

    def add(self, backend: BackendProfile) -> bool:
        """
        Register a backend if its id is not taken.

        Returns:
            True if the backend was added.
        """
        return bool(self.extend([backend]))

    def extend(self, backends: Iterable[BackendProfile]) -> list[str]:
        """
        Register several backends in one snapshot swap.

        Backends whose id is already registered (or repeated in the input)
        are skipped; existing entries keep their values.

        Returns:
            Ids that were added.
        """
        with self._lock:
            current = self._snapshot
            taken = {b.id for b in current}
            added: list[BackendProfile] = []
            for backend in backends:
                if backend.id in taken:
                    continue
                taken.add(backend.id)
                added.append(backend)
            if added:
                self._snapshot = current + tuple(added)
        return [b.id for b in added]
