"""Shared routing state: the backend registry plus the current weights."""

from threading import Lock
from typing import Optional

from baton.registry import CapabilityRegistry
from baton.weights import RoutingWeights


class RoutingState:
    """
    Owner of the state every routing decision reads.

    Passed explicitly to the analyzer, scorer and tuner instead of living
    in module globals. The weights are an immutable snapshot; installing
    new weights swaps the reference, so a scoring call that already read
    ``weights`` keeps a consistent set.
    """

    def __init__(
        self,
        registry: Optional[CapabilityRegistry] = None,
        weights: Optional[RoutingWeights] = None,
    ):
        self.registry = registry if registry is not None else CapabilityRegistry()
        self._weights = weights or RoutingWeights()
        self._lock = Lock()

    @property
    def weights(self) -> RoutingWeights:
        return self._weights

    def install_weights(self, weights: RoutingWeights) -> RoutingWeights:
        """Replace the current weights. Returns the previous snapshot."""
        with self._lock:
            previous = self._weights
            self._weights = weights
        return previous
