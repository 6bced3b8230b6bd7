"""Tests for the package catalog and root selection."""

import pytest

from common.errors import RegistryConnectionError
from fakes import FakeRegistry, catalog_for, dep, manifest
from validation.catalog import PackageCatalog


class TestBuildCatalog:
    """Test catalog construction from a manifest and a registry."""

    def test_keeps_not_found_entries(self):
        """Packages the registry lacks stay in the catalog without metadata."""
        registry = FakeRegistry().add("A", "1.0")
        catalog = catalog_for(registry, [("A", "1.0"), ("Ghost", "3.0")])

        assert len(catalog) == 2
        assert catalog.get("A").found
        assert not catalog.get("Ghost").found
        assert [str(e) for e in catalog.not_found()] == ["Ghost[3.0]"]

    def test_resolves_sequentially_in_manifest_order(self):
        """One registry call per distinct package, in manifest order."""
        registry = FakeRegistry().add("A", "1.0").add("B", "2.0")
        catalog_for(registry, [("B", "2.0"), ("A", "1.0")])

        assert registry.calls == [("B", "2.0"), ("A", "1.0")]

    def test_lookup_is_case_insensitive(self):
        """NuGet ids match regardless of case."""
        registry = FakeRegistry().add("Newtonsoft.Json", "13.0.1")
        catalog = catalog_for(registry, [("Newtonsoft.Json", "13.0.1")])

        assert "newtonsoft.json" in catalog
        assert catalog.get("NEWTONSOFT.JSON").id == "Newtonsoft.Json"

    def test_duplicate_ids_keep_first(self, caplog):
        """A repeated id keeps the first occurrence and is not resolved again."""
        registry = FakeRegistry().add("A", "1.0").add("A", "2.0")
        catalog = catalog_for(registry, [("A", "1.0"), ("a", "2.0")])

        assert len(catalog) == 1
        assert str(catalog.get("A").version) == "1.0"
        assert registry.calls == [("A", "1.0")]
        assert "Duplicate manifest entry" in caplog.text

    def test_registry_errors_propagate(self):
        """Transport failures are not turned into not-found entries."""

        class BrokenRegistry:
            def resolve(self, package_id, version):
                raise RegistryConnectionError("unreachable")

        with pytest.raises(RegistryConnectionError):
            PackageCatalog.build(manifest(("A", "1.0")), BrokenRegistry())


class TestSelectRoots:
    """Test root package detection."""

    def test_packages_without_incoming_edges_are_roots(self):
        """Only packages nobody depends on are roots by default."""
        registry = (
            FakeRegistry()
            .add("App", "1.0", dep("Lib", "1.0"))
            .add("Lib", "1.0", dep("Core", "1.0"))
            .add("Core", "1.0")
        )
        catalog = catalog_for(registry, [("Core", "1.0"), ("Lib", "1.0"), ("App", "1.0")])

        assert [e.id for e in catalog.select_roots()] == ["App"]

    def test_explicit_roots_are_added(self):
        """Explicitly named packages are roots even when depended upon."""
        registry = FakeRegistry().add("App", "1.0", dep("Lib")).add("Lib", "1.0")
        catalog = catalog_for(registry, [("App", "1.0"), ("Lib", "1.0")])

        assert [e.id for e in catalog.select_roots(["lib"])] == ["App", "Lib"]

    def test_not_found_packages_contribute_no_edges(self):
        """An entry without metadata cannot make another entry a non-root."""
        registry = FakeRegistry().add("Lib", "1.0")
        catalog = catalog_for(registry, [("Ghost", "1.0"), ("Lib", "1.0")])

        assert [e.id for e in catalog.select_roots()] == ["Ghost", "Lib"]

    def test_mutual_cycle_has_no_implicit_roots(self):
        """In a closed cycle every package has an incoming edge."""
        registry = (
            FakeRegistry()
            .add("A", "1.0", dep("B"))
            .add("B", "1.0", dep("C"))
            .add("C", "1.0", dep("A"))
        )
        catalog = catalog_for(registry, [("A", "1.0"), ("B", "1.0"), ("C", "1.0")])

        assert catalog.select_roots() == []
        assert [e.id for e in catalog.select_roots(["A"])] == ["A"]
