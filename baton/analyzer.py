"""
Task Analyzer for Baton.

Turns a raw message, its conversation history and caller preferences into
the TaskProfile used for routing decisions.
"""

import math
from collections.abc import Iterable as IterableABC, Mapping
from typing import Any, Iterable, Optional

from baton.schemas import (
    TaskProfile,
    TaskType,
    LatencyTarget,
    CostSensitivity,
)
from baton.weights import RoutingWeights, DEFAULT_WEIGHTS


# Characters per context unit
CHARS_PER_UNIT = 4

COMPLEXITY_KEYWORDS = (
    "optimize", "debug", "analyze", "design", "architect",
    "complex", "advanced", "sophisticated", "intricate",
    "multi-step", "workflow", "pipeline", "system",
)

TECHNICAL_TERMS = (
    "node", "graph", "json", "api", "parameter",
    "configuration", "integration", "implementation",
)

# Image-generation workflow vocabulary
DOMAIN_TERMS = (
    "workflow", "checkpoint", "lora", "controlnet",
    "sampler", "scheduler", "vae", "clip",
)

# Ordered: the first rule with a matching keyword wins
DOMAIN_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("workflow_design", ("workflow", "graph")),
    ("code_generation", ("json", "code")),
    ("explanation", ("explain", "what is")),
    ("optimization", ("optimize", "improve")),
    ("debugging", ("debug", "fix")),
)
DEFAULT_DOMAIN = "general"

REASONING_KEYWORDS = ("design", "architect", "strategy", "optimize complex")
GENERATION_KEYWORDS = ("json", "workflow", "generate")
FAST_KEYWORDS = ("quick", "fast")
THOROUGH_KEYWORDS = ("thorough", "detailed")
STRUCTURED_OUTPUT_KEYWORDS = ("json", "workflow", "format")


class TaskAnalyzer:
    """
    Extracts a TaskProfile from a request.

    The analysis is a pure function of its inputs apart from the high
    complexity threshold, read from the routing weights to decide when a
    request counts as deep reasoning. It never raises: malformed history
    turns count as empty and malformed preferences are ignored field by
    field.
    """

    def analyze(
        self,
        message: str,
        history: Optional[Iterable[Any]] = None,
        preferences: Optional[Mapping] = None,
        weights: Optional[RoutingWeights] = None,
    ) -> TaskProfile:
        """
        Analyze a request.

        Args:
            message: The incoming user message.
            history: Prior turns, each a Turn or a mapping with "content".
            preferences: Partial task profile fields set by the caller.
            weights: Current routing weights. Uses defaults if not provided.

        Returns:
            TaskProfile for the request.
        """
        weights = weights or DEFAULT_WEIGHTS
        text = message if isinstance(message, str) else ""
        lowered = text.lower()
        prefs = preferences if isinstance(preferences, Mapping) else {}

        complexity = self.detect_complexity(text)

        return TaskProfile(
            task_type=self.determine_task_type(
                lowered, complexity, weights.high_complexity_threshold
            ),
            context_units=self.estimate_units(text, history),
            complexity=complexity,
            latency_target=(
                _coerce(LatencyTarget, prefs.get("latency_target"))
                or self.infer_latency_target(lowered)
            ),
            cost_sensitivity=(
                _coerce(CostSensitivity, prefs.get("cost_sensitivity"))
                or CostSensitivity.MEDIUM
            ),
            domain=self.classify_domain(lowered),
            needs_structured_output=any(k in lowered for k in STRUCTURED_OUTPUT_KEYWORDS),
        )

    def estimate_units(self, message: str, history: Optional[Iterable[Any]] = None) -> int:
        """
        Estimate context size of the message plus history.

        Uses ~4 characters per unit, rounded up per piece of text.
        """
        units = math.ceil(len(message) / CHARS_PER_UNIT)
        if isinstance(history, (str, bytes)) or not isinstance(history, IterableABC):
            return units
        for turn in history:
            units += math.ceil(len(_turn_content(turn)) / CHARS_PER_UNIT)
        return units

    def detect_complexity(self, message: str) -> float:
        """
        Compute complexity score (0 to 100).

        Factors:
        - Length (+20 above 1000 chars, +10 above 500)
        - Complexity keywords (+5 each)
        - More than two questions (+10)
        - Technical terms (+3 each)
        - Workflow vocabulary (+4 each)
        """
        score = 0.0
        lowered = message.lower()

        if len(message) > 1000:
            score += 20
        elif len(message) > 500:
            score += 10

        score += 5 * sum(1 for k in COMPLEXITY_KEYWORDS if k in lowered)

        if message.count("?") > 2:
            score += 10

        score += 3 * sum(1 for t in TECHNICAL_TERMS if t in lowered)
        score += 4 * sum(1 for t in DOMAIN_TERMS if t in lowered)

        return max(0.0, min(100.0, score))

    def classify_domain(self, lowered: str) -> str:
        for domain, keywords in DOMAIN_RULES:
            if any(k in lowered for k in keywords):
                return domain
        return DEFAULT_DOMAIN

    def determine_task_type(
        self,
        lowered: str,
        complexity: float,
        high_threshold: float,
    ) -> TaskType:
        if complexity > high_threshold:
            return TaskType.DEEP_REASONING

        if any(k in lowered for k in REASONING_KEYWORDS):
            return TaskType.DEEP_REASONING

        if any(k in lowered for k in GENERATION_KEYWORDS) or (
            "create" in lowered and complexity > 30
        ):
            return TaskType.CODE

        return TaskType.QUICK_INFERENCE

    def infer_latency_target(self, lowered: str) -> LatencyTarget:
        if any(k in lowered for k in FAST_KEYWORDS):
            return LatencyTarget.FAST
        if any(k in lowered for k in THOROUGH_KEYWORDS):
            return LatencyTarget.THOROUGH
        return LatencyTarget.BALANCED


def _turn_content(turn: Any) -> str:
    """Content of a history turn, or "" when it has none."""
    if isinstance(turn, Mapping):
        content = turn.get("content")
    else:
        content = getattr(turn, "content", None)
    return content if isinstance(content, str) else ""


def _coerce(enum_cls, value):
    """Return the enum member for value, or None if it is not one."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None
