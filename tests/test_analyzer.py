"""Tests for the TaskAnalyzer component."""

import pytest
from baton.analyzer import (
    TaskAnalyzer,
    COMPLEXITY_KEYWORDS,
    TECHNICAL_TERMS,
    DOMAIN_TERMS,
)
from baton.schemas import TaskType, LatencyTarget, CostSensitivity, Turn
from baton.weights import RoutingWeights


class TestTaskAnalyzer:
    """Test suite for TaskAnalyzer."""

    def setup_method(self):
        """Set up test fixtures."""
        self.analyzer = TaskAnalyzer()

    def test_empty_input(self):
        """Empty input yields the most basic profile."""
        profile = self.analyzer.analyze("")

        assert profile.complexity == 0
        assert profile.task_type == TaskType.QUICK_INFERENCE
        assert profile.domain == "general"
        assert profile.context_units == 0
        assert profile.latency_target == LatencyTarget.BALANCED
        assert profile.cost_sensitivity == CostSensitivity.MEDIUM
        assert profile.needs_structured_output is False

    def test_non_string_input_never_fails(self):
        """Garbage input is treated as empty."""
        profile = self.analyzer.analyze(None, history=42, preferences="fast")

        assert profile.complexity == 0
        assert profile.context_units == 0
        assert profile.latency_target == LatencyTarget.BALANCED

    def test_context_units_include_history(self):
        """Units round up per message and per turn."""
        history = [
            {"role": "user", "content": "abcde"},
            Turn(role="assistant", content="abcdefghi"),
        ]

        profile = self.analyzer.analyze("abcd", history)

        # 1 + ceil(5/4) + ceil(9/4)
        assert profile.context_units == 1 + 2 + 3

    def test_malformed_history_turns_count_as_empty(self):
        history = [None, {"role": "user"}, {"content": 17}, 42, {"content": "abcd"}]

        assert self.analyzer.estimate_units("", history) == 1

    def test_units_grow_with_length(self):
        short = self.analyzer.analyze("Hello")
        long = self.analyzer.analyze("This is a much longer message " * 100)

        assert long.context_units > short.context_units

    def test_length_breakpoints(self):
        """Longer inputs never score lower."""
        assert self.analyzer.detect_complexity("a" * 400) == 0
        assert self.analyzer.detect_complexity("a" * 501) == 10
        assert self.analyzer.detect_complexity("a" * 1001) == 20

    def test_complexity_monotonic_in_length(self):
        base = "Please analyze this pipeline. "
        previous = -1.0
        for padding in (0, 400, 480, 600, 990, 1200, 5000):
            score = self.analyzer.detect_complexity(base + "z" * padding)
            assert score >= previous
            previous = score

    def test_keyword_increments(self):
        assert self.analyzer.detect_complexity("please optimize this") == 5
        # complexity keyword + technical term
        assert self.analyzer.detect_complexity("analyze the api") == 8
        # technical term + workflow vocabulary
        assert self.analyzer.detect_complexity("which lora node") == 7

    def test_question_marks(self):
        assert self.analyzer.detect_complexity("why? how?") == 0
        assert self.analyzer.detect_complexity("why? how? what?") == 10

    def test_complexity_clamped(self):
        text = " ".join(COMPLEXITY_KEYWORDS + TECHNICAL_TERMS + DOMAIN_TERMS)

        assert self.analyzer.detect_complexity(text * 3) == 100

    def test_domain_rule_order(self):
        """The first matching rule wins."""
        cases = {
            "Fix the JSON in my workflow": "workflow_design",
            "Explain this code": "code_generation",
            "What is a latent image": "explanation",
            "Improve it and debug it": "optimization",
            "Fix it": "debugging",
            "Hello there": "general",
        }
        for message, domain in cases.items():
            assert self.analyzer.analyze(message).domain == domain, message

    def test_reasoning_keywords(self):
        profile = self.analyzer.analyze("Design a caching layer")

        assert profile.task_type == TaskType.DEEP_REASONING

    def test_generation_keywords(self):
        assert self.analyzer.analyze("generate a list").task_type == TaskType.CODE
        assert self.analyzer.analyze("return json").task_type == TaskType.CODE

    def test_create_needs_complexity(self):
        """'create' only implies code above complexity 30."""
        simple = self.analyzer.analyze("create a poem")
        assert simple.task_type == TaskType.QUICK_INFERENCE

        text = "create an advanced sophisticated intricate complex pipeline and debug and analyze it"
        involved = self.analyzer.analyze(text)
        assert involved.complexity == 35
        assert involved.task_type == TaskType.CODE

        without_create = self.analyzer.analyze(text.replace("create ", ""))
        assert without_create.task_type == TaskType.QUICK_INFERENCE

    def test_threshold_boundary_is_strict(self):
        """Complexity equal to the threshold is not deep reasoning."""
        message = "Explain how KSampler nodes work"
        assert self.analyzer.detect_complexity(message) == 7

        at_threshold = RoutingWeights(high_complexity_threshold=7, mid_complexity_threshold=1)
        below_threshold = RoutingWeights(high_complexity_threshold=6.5, mid_complexity_threshold=1)

        assert self.analyzer.analyze(message, weights=at_threshold).task_type == TaskType.QUICK_INFERENCE
        assert self.analyzer.analyze(message, weights=below_threshold).task_type == TaskType.DEEP_REASONING

    def test_latency_inference(self):
        assert self.analyzer.analyze("quick question").latency_target == LatencyTarget.FAST
        assert self.analyzer.analyze("give a detailed answer").latency_target == LatencyTarget.THOROUGH
        assert self.analyzer.analyze("hello").latency_target == LatencyTarget.BALANCED

    def test_preferences_override(self):
        profile = self.analyzer.analyze(
            "quick question",
            preferences={"latency_target": "thorough", "cost_sensitivity": CostSensitivity.HIGH},
        )

        assert profile.latency_target == LatencyTarget.THOROUGH
        assert profile.cost_sensitivity == CostSensitivity.HIGH

    def test_malformed_preferences_ignored_per_field(self):
        profile = self.analyzer.analyze(
            "quick question",
            preferences={"latency_target": "warp", "cost_sensitivity": "low"},
        )

        assert profile.latency_target == LatencyTarget.FAST
        assert profile.cost_sensitivity == CostSensitivity.LOW

        profile = self.analyzer.analyze("hello", preferences={"cost_sensitivity": [1, 2]})
        assert profile.cost_sensitivity == CostSensitivity.MEDIUM

    def test_structured_output_detection(self):
        assert self.analyzer.analyze("return json").needs_structured_output is True
        assert self.analyzer.analyze("format this table").needs_structured_output is True
        assert self.analyzer.analyze("tell me a joke").needs_structured_output is False


class TestScenarios:
    """End-to-end analysis of representative messages."""

    def setup_method(self):
        self.analyzer = TaskAnalyzer()

    def test_workflow_request(self):
        profile = self.analyzer.analyze("Create a text-to-image workflow using SDXL", [])

        assert profile.domain == "workflow_design"
        assert profile.task_type == TaskType.CODE
        assert profile.needs_structured_output is True
        # "workflow" is both a complexity keyword and workflow vocabulary
        assert profile.complexity == 9
        assert profile.context_units == 11

    def test_explanation_request(self):
        profile = self.analyzer.analyze("Explain how KSampler nodes work")

        assert profile.domain == "explanation"
        assert profile.task_type == TaskType.QUICK_INFERENCE
        assert profile.needs_structured_output is False

    def test_long_optimization_request(self):
        head = "Can you optimize this complex thing? Why? How? "
        message = head + "z" * (1200 - len(head))
        assert len(message) == 1200

        profile = self.analyzer.analyze(message)

        assert profile.complexity == 40
        assert profile.domain == "optimization"
        assert profile.task_type == TaskType.QUICK_INFERENCE

        low_threshold = RoutingWeights(high_complexity_threshold=39, mid_complexity_threshold=10)
        assert self.analyzer.analyze(message, weights=low_threshold).task_type == TaskType.DEEP_REASONING

    @pytest.mark.parametrize("message", [
        "Create a text-to-image workflow using SDXL",
        "Explain how KSampler nodes work",
        "",
    ])
    def test_analysis_is_deterministic(self, message):
        assert self.analyzer.analyze(message) == self.analyzer.analyze(message)
