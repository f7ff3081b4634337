"""
Basic usage examples for Baton.

Demonstrates routing, feedback and retuning without calling any backend.
"""

import random

from baton import AdaptiveRouter, TaskType, ValidationError


def example_basic():
    """Basic request routing."""
    print("=" * 60)
    print("Example 1: Basic Routing")
    print("=" * 60)

    router = AdaptiveRouter()

    for message in [
        "Create a text-to-image workflow using SDXL",
        "Explain how KSampler nodes work",
        "Design a multi-step pipeline architecture for batch upscaling",
    ]:
        decision = router.route(message)
        print(f"Message: {message}")
        print(f"  Backend: {decision.backend_id}")
        print(f"  Task type: {decision.profile.task_type.value}")
        print(f"  Why: {decision.why}")

    router.close()
    print()


def example_with_preferences():
    """Caller preferences override inferred latency and cost."""
    print("=" * 60)
    print("Example 2: Preferences")
    print("=" * 60)

    router = AdaptiveRouter()
    message = "Write a detailed JSON configuration for a LoRA training run"

    inferred = router.route(message)
    cheap = router.route(message, preferences={"latency_target": "fast", "cost_sensitivity": "high"})

    print(f"Inferred:   {inferred.backend_id} ({inferred.profile.latency_target.value})")
    print(f"Fast/cheap: {cheap.backend_id} ({cheap.profile.latency_target.value})")

    router.close()
    print()


def example_error_handling():
    """Handling validation errors."""
    print("=" * 60)
    print("Example 3: Error Handling")
    print("=" * 60)

    router = AdaptiveRouter()

    try:
        router.record_outcome(
            backend_id="gpt-4o",
            task_type=TaskType.CODE,
            domain="general",
            latency_ms=-10,  # Invalid: negative
            prompt_units=10,
            completion_units=10,
            cost=0.001,
            success=True,
        )
    except ValidationError as e:
        print(f"Validation error caught: {e}")

    try:
        router.record_outcome(
            backend_id="gpt-4o",
            task_type=TaskType.CODE,
            domain="general",
            latency_ms=900,
            prompt_units=10,
            completion_units=10,
            cost=0.001,
            success=True,
            quality_score=1.5,  # Invalid: >1.0
        )
    except ValidationError as e:
        print(f"Validation error caught: {e}")

    router.close()
    print()


def example_feedback_loop():
    """Recording outcomes and retuning weights."""
    print("=" * 60)
    print("Example 4: Feedback Loop")
    print("=" * 60)

    rng = random.Random(7)
    router = AdaptiveRouter(batch_size=100)
    print(f"Weights before: {router.weights.to_dict(include_meta=False)}")

    # Simulated traffic: the high tier clearly outperforms the mid tier
    for i in range(100):
        router.select_backend(f"Request {i}: optimize this sampler graph")
        quality = 0.95 if i % 2 == 0 else 0.7
        router.record_outcome(
            backend_id="gpt-5" if i % 2 == 0 else "gpt-4-turbo",
            task_type=TaskType.CODE,
            domain="optimization",
            latency_ms=rng.uniform(800, 3500),
            prompt_units=200,
            completion_units=600,
            cost=0.01,
            success=True,
            quality_score=quality,
        )

    router.recorder.last_retune.result(timeout=10)
    print(f"Weights after:  {router.weights.to_dict(include_meta=False)}")

    stats = router.get_stats()
    print(f"Total requests: {stats['total_requests']}")
    print(f"Usage: {stats['usage_by_backend']}")

    router.close()
    print()


if __name__ == "__main__":
    example_basic()
    example_with_preferences()
    example_error_handling()
    example_feedback_loop()

    print("All examples completed!")
