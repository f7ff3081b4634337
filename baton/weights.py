"""
Routing weights for Baton.

These are the tunable parameters that control how the scorer balances
capability, cost, latency and quality. They are retuned from recorded
outcomes and persisted as a single JSON document.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, UTC
from pathlib import Path
from typing import Optional
import json
import logging
import os
import tempfile

logger = logging.getLogger("baton.weights")


@dataclass(frozen=True)
class RoutingWeights:
    """
    All routing weights.

    Instances are immutable; a retune produces a new instance which the
    routing state swaps in as a whole.
    """

    # Complexity above which the highest-capability backend is favored
    high_complexity_threshold: float = 75.0
    mid_complexity_threshold: float = 50.0

    # Weighting applied to context-size pressure
    size_multiplier: float = 1.2

    cost_weight: float = 0.3
    latency_weight: float = 0.3
    quality_weight: float = 0.4

    # Version tracking
    version: str = "default"
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self):
        if not self.mid_complexity_threshold < self.high_complexity_threshold:
            raise ValueError(
                "mid_complexity_threshold must be below high_complexity_threshold "
                f"({self.mid_complexity_threshold} >= {self.high_complexity_threshold})"
            )
        for name in ("size_multiplier", "cost_weight", "latency_weight", "quality_weight"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

    def evolve(self, **changes) -> "RoutingWeights":
        """Return a copy with some weights changed."""
        return replace(self, **changes)

    def same_values(self, other: "RoutingWeights") -> bool:
        """Compare the tunable values, ignoring version metadata."""
        return self.to_dict(include_meta=False) == other.to_dict(include_meta=False)

    def to_dict(self, include_meta: bool = True) -> dict:
        """Convert to dictionary for serialization."""
        data = {
            "high_complexity_threshold": self.high_complexity_threshold,
            "mid_complexity_threshold": self.mid_complexity_threshold,
            "size_multiplier": self.size_multiplier,
            "cost_weight": self.cost_weight,
            "latency_weight": self.latency_weight,
            "quality_weight": self.quality_weight,
        }
        if include_meta:
            data["version"] = self.version
            data["updated_at"] = self.updated_at.isoformat()
        return data

    def save(self, path: Path) -> None:
        """
        Save weights to a JSON file.

        The document is written to a temporary file and renamed over the
        target so readers never see a half-written file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(self.to_dict(), f, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    @classmethod
    def from_dict(cls, data: dict) -> "RoutingWeights":
        """Create from dictionary. Missing keys take their defaults."""
        kwargs = {}
        for key in ["high_complexity_threshold", "mid_complexity_threshold",
                    "size_multiplier", "cost_weight", "latency_weight",
                    "quality_weight"]:
            if key in data:
                kwargs[key] = float(data[key])

        if "version" in data:
            kwargs["version"] = str(data["version"])
        if "updated_at" in data:
            kwargs["updated_at"] = datetime.fromisoformat(data["updated_at"])

        return cls(**kwargs)


def load_weights(path: Optional[Path] = None) -> RoutingWeights:
    """
    Load weights from file or return defaults.

    A missing, unreadable or invalid document never fails startup: the
    problem is logged and the built-in defaults are used.

    Args:
        path: Path to JSON weights file. If None, uses defaults.

    Returns:
        RoutingWeights instance.
    """
    if path is None:
        return RoutingWeights()

    path = Path(path)
    if not path.exists():
        logger.info("No routing weights at %s; using defaults", path)
        return RoutingWeights()

    try:
        with open(path, "r") as f:
            data = json.load(f)
        weights = RoutingWeights.from_dict(data)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.warning("Could not load routing weights from %s (%s); using defaults", path, e)
        return RoutingWeights()

    logger.info("Loaded learned routing weights (version %s)", weights.version)
    return weights


# Default weights instance
DEFAULT_WEIGHTS = RoutingWeights()
