"""
Backend discovery for Baton.

Queries the provider's model catalog and registers backends the registry
does not know yet. Discovery is purely additive.
"""

from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Callable, Iterable, Optional
import logging
import os

from baton.registry import CapabilityRegistry
from baton.schemas import BackendProfile

logger = logging.getLogger("baton.discovery")


@dataclass(frozen=True)
class CatalogEntry:
    """One model listed by the provider."""
    id: str
    created: Optional[int] = None  # epoch seconds


class OpenAICatalog:
    """
    OpenAI model catalog.

    Requires OPENAI_API_KEY environment variable.
    """

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._client = None

    @property
    def client(self):
        if self._client is None:
            try:
                from openai import OpenAI
                self._client = OpenAI(api_key=self.api_key)
            except ImportError:
                raise ImportError("openai package required. Install with: pip install openai")
        return self._client

    def __call__(self) -> list[CatalogEntry]:
        models = self.client.models.list()
        return [
            CatalogEntry(id=model.id, created=getattr(model, "created", None))
            for model in models.data
        ]


class BackendDiscovery:
    """
    Adds unseen catalog entries to the registry.

    Entries must start with the configured prefix and must not be
    instruct variants. New backends get conservative defaults; existing
    entries are never edited or removed.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        catalog: Optional[Callable[[], Iterable[CatalogEntry]]] = None,
        prefix: str = "gpt-",
    ):
        self.registry = registry
        self.catalog = catalog or OpenAICatalog()
        self.prefix = prefix

    def matches(self, backend_id: str) -> bool:
        """Whether a catalog id follows the naming convention."""
        return backend_id.startswith(self.prefix) and "instruct" not in backend_id

    def discover(self) -> list[str]:
        """
        Refresh the registry from the catalog.

        Provider failures are logged and leave the registry unchanged.

        Returns:
            Ids of newly registered backends.
        """
        try:
            entries = list(self.catalog())
        except Exception as e:
            logger.warning("Backend discovery failed (%s); registry unchanged", e)
            return []

        candidates = []
        for entry in entries:
            if not entry.id or not self.matches(entry.id) or entry.id in self.registry:
                continue
            released = (
                datetime.fromtimestamp(entry.created, UTC) if entry.created else None
            )
            candidates.append(BackendProfile.discovered(entry.id, released))

        added = self.registry.extend(candidates)
        for backend_id in added:
            logger.info("Discovered new backend: %s", backend_id)
        if added:
            logger.info("Registered %d new backend(s): %s", len(added), added)
        return added
