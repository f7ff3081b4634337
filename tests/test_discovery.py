"""Tests for backend discovery."""

from datetime import datetime, UTC
from types import SimpleNamespace
from unittest.mock import MagicMock

from baton.discovery import BackendDiscovery, CatalogEntry, OpenAICatalog
from baton.registry import CapabilityRegistry, BUILTIN_BACKENDS
from baton.schemas import BackendOrigin, BackendProfile


class FakeCatalog:
    def __init__(self, entries):
        self.entries = entries
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return list(self.entries)


class FailingCatalog:
    def __call__(self):
        raise ConnectionError("provider unreachable")


class TestBackendDiscovery:
    """Test suite for BackendDiscovery."""

    def setup_method(self):
        """Set up test fixtures."""
        self.registry = CapabilityRegistry()
        self.catalog = FakeCatalog([
            CatalogEntry(id="gpt-4o"),
            CatalogEntry(id="gpt-4.1", created=1700000000),
            CatalogEntry(id="gpt-3.5-turbo-instruct"),
            CatalogEntry(id="dall-e-3"),
            CatalogEntry(id="text-embedding-3-small"),
        ])
        self.discovery = BackendDiscovery(self.registry, catalog=self.catalog)

    def test_adds_unseen_matching_backends(self):
        added = self.discovery.discover()

        assert added == ["gpt-4.1"]
        assert len(self.registry) == len(BUILTIN_BACKENDS) + 1
        assert self.registry.ids()[-1] == "gpt-4.1"

    def test_discovered_defaults(self):
        self.discovery.discover()
        backend = self.registry.get("gpt-4.1")

        assert backend.origin == BackendOrigin.DISCOVERED
        assert backend.max_context_units == 128000
        assert backend.unit_cost.input == 0.01
        assert backend.unit_cost.output == 0.03
        assert backend.expected_latency_ms == 2000
        assert backend.capability_tags == frozenset({"general"})
        assert backend.performance_score == 75
        assert backend.release_timestamp == datetime.fromtimestamp(1700000000, UTC)

    def test_existing_entries_untouched(self):
        before = self.registry.get("gpt-4o")

        self.discovery.discover()

        assert self.registry.get("gpt-4o") is before

    def test_discovery_is_idempotent(self):
        self.discovery.discover()
        snapshot = self.registry.snapshot

        assert self.discovery.discover() == []
        assert self.registry.snapshot is snapshot

    def test_provider_failure_leaves_registry_unchanged(self):
        discovery = BackendDiscovery(self.registry, catalog=FailingCatalog())
        snapshot = self.registry.snapshot

        assert discovery.discover() == []
        assert self.registry.snapshot is snapshot

    def test_naming_convention(self):
        assert self.discovery.matches("gpt-4.1")
        assert not self.discovery.matches("gpt-3.5-turbo-instruct")
        assert not self.discovery.matches("dall-e-3")

        claude = BackendDiscovery(self.registry, catalog=self.catalog, prefix="claude-")
        assert claude.matches("claude-sonnet")
        assert not claude.matches("gpt-4.1")

    def test_duplicate_catalog_entries(self):
        catalog = FakeCatalog([CatalogEntry(id="gpt-new"), CatalogEntry(id="gpt-new")])
        discovery = BackendDiscovery(self.registry, catalog=catalog)

        assert discovery.discover() == ["gpt-new"]
        assert self.registry.ids().count("gpt-new") == 1


class TestCapabilityRegistry:
    """Test suite for CapabilityRegistry."""

    def test_builtin_catalog(self):
        registry = CapabilityRegistry()

        assert registry.ids() == ["gpt-5", "gpt-4-turbo", "gpt-4o", "gpt-4o-mini"]
        assert registry.get("gpt-5").performance_score == 95
        assert "gpt-4o" in registry
        assert "missing" not in registry

    def test_add_rejects_duplicate_ids(self):
        registry = CapabilityRegistry()
        original = registry.get("gpt-4o")

        assert registry.add(BackendProfile.discovered("gpt-4o")) is False
        assert registry.get("gpt-4o") is original

    def test_snapshot_is_stable_for_readers(self):
        registry = CapabilityRegistry([])
        snapshot = registry.snapshot

        registry.add(BackendProfile.discovered("gpt-new"))

        assert snapshot == ()
        assert registry.ids() == ["gpt-new"]


class TestOpenAICatalog:
    """Test suite for the OpenAI catalog adapter."""

    def test_lists_models(self):
        catalog = OpenAICatalog(api_key="test-key")
        client = MagicMock()
        client.models.list.return_value = SimpleNamespace(data=[
            SimpleNamespace(id="gpt-4.1", created=1700000000),
            SimpleNamespace(id="whisper-1", created=1600000000),
        ])
        catalog._client = client

        entries = catalog()

        assert entries == [
            CatalogEntry(id="gpt-4.1", created=1700000000),
            CatalogEntry(id="whisper-1", created=1600000000),
        ]
