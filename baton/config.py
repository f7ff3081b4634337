"""Global configuration for Baton."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger("baton.config")


DEFAULT_DATA_DIR = "data"
DEFAULT_RETUNE_BATCH_SIZE = 100
DEFAULT_MIN_OUTCOMES = 50
DEFAULT_HIGH_TIER_BACKEND = "gpt-5"
DEFAULT_MID_TIER_BACKEND = "gpt-4-turbo"
DEFAULT_DISCOVERY_PREFIX = "gpt-"


@dataclass(frozen=True)
class Settings:
    """Resolved configuration."""
    metrics_path: Path
    weights_path: Path
    store: str = "jsonl"
    db_path: Optional[Path] = None
    retune_batch_size: int = DEFAULT_RETUNE_BATCH_SIZE
    min_outcomes: int = DEFAULT_MIN_OUTCOMES
    high_tier_backend: str = DEFAULT_HIGH_TIER_BACKEND
    mid_tier_backend: str = DEFAULT_MID_TIER_BACKEND
    discovery_prefix: str = DEFAULT_DISCOVERY_PREFIX
    backends: Optional[Dict[str, Any]] = None

    @property
    def store_path(self) -> Path:
        """Path of the outcome log for the configured store kind."""
        if self.store == "sqlite":
            return self.db_path or self.metrics_path.with_suffix(".db")
        return self.metrics_path


def _parse_json_env(var_name: str) -> Dict[str, Any] | None:
    value = os.getenv(var_name)
    if not value:
        return None
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        logger.warning("Ignoring %s: not valid JSON", var_name)
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def _int_env(var_name: str, default: int) -> int:
    value = os.getenv(var_name)
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", var_name, value)
        return default
    return parsed if parsed > 0 else default


def get_settings() -> Settings:
    """Build settings from the environment, falling back to defaults."""
    data_dir = Path(os.getenv("BATON_DATA_DIR") or DEFAULT_DATA_DIR)
    store = (os.getenv("BATON_STORE") or "jsonl").lower()
    if store not in ("jsonl", "sqlite", "memory"):
        logger.warning("Unknown BATON_STORE=%r; using jsonl", store)
        store = "jsonl"
    db_path = os.getenv("BATON_DB_PATH")

    return Settings(
        metrics_path=Path(os.getenv("BATON_METRICS_PATH") or data_dir / "metrics.jsonl"),
        weights_path=Path(os.getenv("BATON_WEIGHTS_PATH") or data_dir / "routing_weights.json"),
        store=store,
        db_path=Path(db_path) if db_path else None,
        retune_batch_size=_int_env("BATON_RETUNE_BATCH_SIZE", DEFAULT_RETUNE_BATCH_SIZE),
        min_outcomes=_int_env("BATON_MIN_OUTCOMES", DEFAULT_MIN_OUTCOMES),
        high_tier_backend=os.getenv("BATON_HIGH_TIER_BACKEND") or DEFAULT_HIGH_TIER_BACKEND,
        mid_tier_backend=os.getenv("BATON_MID_TIER_BACKEND") or DEFAULT_MID_TIER_BACKEND,
        discovery_prefix=os.getenv("BATON_DISCOVERY_PREFIX") or DEFAULT_DISCOVERY_PREFIX,
        backends=_parse_json_env("BATON_BACKENDS_JSON"),
    )
