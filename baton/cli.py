"""
Command-line interface for Baton.

Provides commands for:
- Routing a message
- Recording outcomes
- Inspecting stats and backends
- Retuning weights
- Discovering backends
"""

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path

from baton.config import get_settings
from baton.control_plane import AdaptiveRouter
from baton.router import NoCandidatesError
from baton.validation import ValidationError


def _build_router(args) -> AdaptiveRouter:
    settings = get_settings()
    if args.data_dir:
        data_dir = Path(args.data_dir)
        settings = replace(
            settings,
            metrics_path=data_dir / "metrics.jsonl",
            weights_path=data_dir / "routing_weights.json",
            db_path=data_dir / "metrics.db" if settings.store == "sqlite" else settings.db_path,
        )
    return AdaptiveRouter.from_settings(settings)


def cmd_route(args):
    """Route a single message."""
    preferences = {}
    if args.latency:
        preferences["latency_target"] = args.latency
    if args.cost:
        preferences["cost_sensitivity"] = args.cost

    history = []
    if args.history:
        with open(args.history) as f:
            history = json.load(f)

    with _build_router(args) as router:
        try:
            decision = router.route(args.message, history, preferences)
        except NoCandidatesError as e:
            print(f"Error: {e}")
            sys.exit(1)

    if args.json:
        print(json.dumps(decision.to_dict(), indent=2))
        return

    profile = decision.profile
    print("\n" + "=" * 60)
    print("BATON ROUTING DECISION")
    print("=" * 60)
    print(f"\nMessage: {args.message[:100]}")
    print()
    print("-" * 60)
    print("TASK PROFILE")
    print("-" * 60)
    print(f"Task Type: {profile.task_type.value}")
    print(f"Domain: {profile.domain}")
    print(f"Complexity: {profile.complexity:.0f}/100")
    print(f"Context Units: {profile.context_units}")
    print(f"Latency Target: {profile.latency_target.value}")
    print(f"Cost Sensitivity: {profile.cost_sensitivity.value}")
    print(f"Structured Output: {profile.needs_structured_output}")
    print()
    print("-" * 60)
    print("SCORES")
    print("-" * 60)
    for backend_id, score in sorted(decision.scores.items(), key=lambda kv: -kv[1]):
        marker = "*" if backend_id == decision.backend_id else " "
        print(f" {marker} {backend_id:<24} {score:7.2f}")
    print()
    print(f"WHY: {decision.why}")
    print("=" * 60)


def cmd_record(args):
    """Record the outcome of a completed request."""
    with _build_router(args) as router:
        try:
            outcome = router.record_outcome(
                backend_id=args.backend,
                task_type=args.task_type,
                domain=args.domain,
                latency_ms=args.latency_ms,
                prompt_units=args.prompt_units,
                completion_units=args.completion_units,
                cost=args.cost,
                success=not args.failed,
                quality_score=args.quality,
            )
        except ValidationError as e:
            print(f"Error: {e}")
            sys.exit(1)
    print(f"Recorded outcome for {outcome.backend_id} ({router.recorder.count} total)")


def cmd_stats(args):
    """Print routing statistics."""
    with _build_router(args) as router:
        stats = router.get_stats()

    if args.json:
        print(json.dumps(stats, indent=2))
        return

    print("\n" + "=" * 60)
    print("BATON ROUTING STATS")
    print("=" * 60)
    print(f"Total Requests: {stats['total_requests']}")
    print(f"Avg Cost: ${stats['average_cost']:.6f}")
    print(f"Avg Latency: {stats['average_latency_ms']:.0f}ms")
    print(f"Success Rate: {stats['success_rate']:.1%}")
    print()
    print("-" * 60)
    print("USAGE BY BACKEND")
    print("-" * 60)
    for backend_id, count in sorted(stats["usage_by_backend"].items(), key=lambda kv: -kv[1]):
        print(f"  {backend_id:<24} {count}")
    print()
    print("-" * 60)
    print("CURRENT WEIGHTS")
    print("-" * 60)
    for key, value in stats["current_weights"].items():
        print(f"  {key}: {value}")
    print("=" * 60)


def cmd_retune(args):
    """Retune weights from the outcome log now."""
    with _build_router(args) as router:
        before = router.weights
        after = router.retune_now()

    if after is before:
        print(
            f"Weights unchanged ({router.recorder.count} outcomes; "
            f"{router.tuner.min_outcomes} required)"
        )
        return

    print("Updated routing weights:")
    for key, value in after.to_dict(include_meta=False).items():
        print(f"  {key}: {value}")


def cmd_discover(args):
    """Discover new backends from the provider catalog."""
    with _build_router(args) as router:
        added = router.discover_backends()
        total = len(router.registry)

    if added:
        print(f"Discovered {len(added)} new backend(s):")
        for backend_id in added:
            print(f"  {backend_id}")
    else:
        print("No new backends discovered")
    print(f"Registry now holds {total} backend(s)")


def cmd_backends(args):
    """List registered backends."""
    with _build_router(args) as router:
        backends = list(router.registry)

    if args.json:
        print(json.dumps([b.to_dict() for b in backends], indent=2))
        return

    for b in backends:
        tags = ", ".join(sorted(b.capability_tags))
        print(
            f"{b.id:<24} perf={b.performance_score:5.1f} "
            f"latency={b.expected_latency_ms}ms "
            f"cost=${b.unit_cost.input}/{b.unit_cost.output} per 1K  [{tags}]"
        )


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Baton: adaptive request router CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # See which backend a message would go to
  baton route "Create a text-to-image workflow using SDXL"

  # Record an outcome
  baton record --backend gpt-4o --task-type code --latency-ms 1500 --cost 0.004

  # Show stats and current weights
  baton stats

  # Retune weights from the outcome log
  baton retune

  # Pull new backends from the provider catalog
  baton discover
""",
    )
    parser.add_argument("--data-dir", "-d",
                        help="Directory holding metrics.jsonl and routing_weights.json")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Route command
    route_parser = subparsers.add_parser("route", help="Route a message")
    route_parser.add_argument("message", help="The message to route")
    route_parser.add_argument("--history", help="JSON file with prior {role, content} turns")
    route_parser.add_argument("--latency", choices=["fast", "balanced", "thorough"],
                              help="Latency target override")
    route_parser.add_argument("--cost", choices=["low", "medium", "high"],
                              help="Cost sensitivity override")
    route_parser.add_argument("--json", action="store_true", help="Print JSON")

    # Record command
    rec_parser = subparsers.add_parser("record", help="Record an outcome")
    rec_parser.add_argument("--backend", "-b", required=True, help="Backend that served it")
    rec_parser.add_argument("--task-type", "-t", default="quick_inference",
                            help="Task type of the request")
    rec_parser.add_argument("--domain", default="general", help="Domain of the request")
    rec_parser.add_argument("--latency-ms", type=float, required=True,
                            help="Measured latency in ms")
    rec_parser.add_argument("--prompt-units", type=int, default=0)
    rec_parser.add_argument("--completion-units", type=int, default=0)
    rec_parser.add_argument("--cost", type=float, default=0.0, help="Cost in USD")
    rec_parser.add_argument("--quality", type=float, help="Quality score (0-1)")
    rec_parser.add_argument("--failed", action="store_true", help="Request failed")

    # Stats command
    stats_parser = subparsers.add_parser("stats", help="Show routing stats")
    stats_parser.add_argument("--json", action="store_true", help="Print JSON")

    # Retune command
    subparsers.add_parser("retune", help="Retune weights from outcomes")

    # Discover command
    subparsers.add_parser("discover", help="Discover new backends")

    # Backends command
    be_parser = subparsers.add_parser("backends", help="List registered backends")
    be_parser.add_argument("--json", action="store_true", help="Print JSON")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    # Dispatch to command handler
    commands = {
        "route": cmd_route,
        "record": cmd_record,
        "stats": cmd_stats,
        "retune": cmd_retune,
        "discover": cmd_discover,
        "backends": cmd_backends,
    }

    handler = commands.get(args.command)
    if handler:
        handler(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
