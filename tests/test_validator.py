"""Tests for tree validation and the findings it produces."""

from fakes import FakeRegistry, catalog_for, dep
from validation.errors import ErrorCollector, ErrorKind
from validation.tree import TreeBuilder
from validation.validator import TreeValidator, validate_catalog


def findings(registry, pairs, roots=()):
    result = validate_catalog(catalog_for(registry, pairs), roots)
    return result.errors.grouped()


def messages(grouped, kind):
    return dict(grouped)[kind]


class TestValidateCatalog:
    """End-to-end classification over in-memory registries."""

    def test_incompatible_direct_dependency(self):
        """A root pinned against a version outside the declared range is reported once."""
        registry = FakeRegistry().add("A", "1.0", dep("B", "[1.0,2.0)")).add("B", "2.5")
        grouped = findings(registry, [("A", "1.0"), ("B", "2.5")])

        assert messages(grouped, ErrorKind.INCOMPATIBLE) == [
            "A[1.0] has an incompatible dependency: B[2.5], expected version: [1.0, 2.0)"
        ]
        assert messages(grouped, ErrorKind.MISSING_DEPENDENCY) == []
        assert messages(grouped, ErrorKind.REDUNDANT) == []

    def test_compatible_direct_dependency_is_clean(self):
        """A satisfied range yields no findings."""
        registry = FakeRegistry().add("A", "1.0", dep("B", "[1.0,2.0)")).add("B", "1.5")
        grouped = findings(registry, [("A", "1.0"), ("B", "1.5")])

        assert all(msgs == [] for _, msgs in grouped)

    def test_missing_direct_dependency(self):
        """A dependency absent from the manifest is reported once, naming parent and child."""
        registry = FakeRegistry().add("A", "1.0", dep("X", "1.2"))
        grouped = findings(registry, [("A", "1.0")])

        assert messages(grouped, ErrorKind.MISSING_DEPENDENCY) == [
            "A[1.0] is missing dependency: X 1.2"
        ]

    def test_missing_dependency_without_range(self):
        """No declared range leaves no trailing text."""
        registry = FakeRegistry().add("A", "1.0", dep("X"))
        grouped = findings(registry, [("A", "1.0")])

        assert messages(grouped, ErrorKind.MISSING_DEPENDENCY) == ["A[1.0] is missing dependency: X"]

    def test_transitive_only_package_is_redundant(self):
        """C reachable only through B is redundant, and only redundant."""
        registry = (
            FakeRegistry()
            .add("A", "1.0", dep("B", "1.0"))
            .add("B", "1.0", dep("C", "[5.0]"))
            .add("C", "9.0")
        )
        grouped = findings(registry, [("A", "1.0"), ("B", "1.0"), ("C", "9.0")])

        assert messages(grouped, ErrorKind.REDUNDANT) == [
            "C[9.0] is not a direct dependency of any root package, possibly redundant"
        ]
        assert messages(grouped, ErrorKind.INCOMPATIBLE) == []
        assert messages(grouped, ErrorKind.MISSING_DEPENDENCY) == []

    def test_deep_missing_dependency_is_not_reported(self):
        """Unresolved packages below depth 2 are neither missing nor redundant."""
        registry = (
            FakeRegistry()
            .add("A", "1.0", dep("B"))
            .add("B", "1.0", dep("C"), dep("Gone"))
            .add("C", "1.0")
        )
        grouped = findings(registry, [("A", "1.0"), ("B", "1.0"), ("C", "1.0")])

        assert messages(grouped, ErrorKind.MISSING_DEPENDENCY) == []
        assert messages(grouped, ErrorKind.REDUNDANT) == [
            "C[1.0] is not a direct dependency of any root package, possibly redundant"
        ]

    def test_not_found_reported_once(self):
        """A missing package is reported once however many packages depend on it."""
        registry = (
            FakeRegistry()
            .add("A", "1.0", dep("Ghost", "1.0"))
            .add("B", "1.0", dep("Ghost", "1.0"))
        )
        grouped = findings(registry, [("A", "1.0"), ("B", "1.0"), ("Ghost", "1.0")], roots=["A", "B"])

        assert messages(grouped, ErrorKind.PACKAGE_NOT_FOUND) == [
            "Ghost[1.0] not found in the package source"
        ]

    def test_mutual_cycle_produces_no_findings(self):
        """A cycle by itself is not an error."""
        registry = (
            FakeRegistry()
            .add("A", "1.0", dep("B", "1.0"))
            .add("B", "1.0", dep("C", "1.0"))
            .add("C", "1.0", dep("A", "1.0"))
        )
        grouped = findings(registry, [("A", "1.0"), ("B", "1.0"), ("C", "1.0")], roots=["A"])

        assert messages(grouped, ErrorKind.INCOMPATIBLE) == []
        assert messages(grouped, ErrorKind.MISSING_DEPENDENCY) == []
        # C only hangs below B
        assert messages(grouped, ErrorKind.REDUNDANT) == [
            "C[1.0] is not a direct dependency of any root package, possibly redundant"
        ]

    def test_diamond_checks_each_parent_range(self):
        """A shared dependency is checked against each root's range separately."""
        registry = (
            FakeRegistry()
            .add("A", "1.0", dep("C", "[1.0,2.0)"))
            .add("B", "1.0", dep("C", "[2.0,3.0)"))
            .add("C", "2.1")
        )
        grouped = findings(registry, [("A", "1.0"), ("B", "1.0"), ("C", "2.1")])

        assert messages(grouped, ErrorKind.INCOMPATIBLE) == [
            "A[1.0] has an incompatible dependency: C[2.1], expected version: [1.0, 2.0)"
        ]

    def test_report_order_and_sorting(self):
        """Groups come in fixed order with messages sorted ascending."""
        registry = FakeRegistry().add("Z", "1.0", dep("Y"), dep("M"))
        grouped = findings(registry, [("Z", "1.0"), ("Ghost", "1.0")])

        assert [kind for kind, _ in grouped] == [
            ErrorKind.PACKAGE_NOT_FOUND,
            ErrorKind.MISSING_DEPENDENCY,
            ErrorKind.INCOMPATIBLE,
            ErrorKind.REDUNDANT,
        ]
        assert messages(grouped, ErrorKind.MISSING_DEPENDENCY) == [
            "Z[1.0] is missing dependency: M",
            "Z[1.0] is missing dependency: Y",
        ]


class TestTreeValidator:
    """Test the validator over an already built tree."""

    def test_validation_is_idempotent(self):
        """Validating the same tree twice yields the same finding set."""
        registry = (
            FakeRegistry()
            .add("A", "1.0", dep("B", "[2.0]"), dep("X"))
            .add("B", "1.0", dep("C"))
            .add("C", "1.0")
        )
        tree = TreeBuilder(catalog_for(registry, [("A", "1.0"), ("B", "1.0"), ("C", "1.0")])).build()

        first = ErrorCollector()
        TreeValidator(first).validate(tree)
        once = first.grouped()
        TreeValidator(first).validate(tree)
        second = ErrorCollector()
        TreeValidator(second).validate(tree)

        assert first.grouped() == once == second.grouped()
        assert len(first) == 3


class TestErrorCollector:
    """Test finding deduplication."""

    def test_add_is_noop_for_duplicates(self):
        """Identical (kind, message) pairs are stored once."""
        collector = ErrorCollector()
        collector.add(ErrorKind.REDUNDANT, "x")
        collector.add(ErrorKind.REDUNDANT, "x")
        collector.add(ErrorKind.INCOMPATIBLE, "x")

        assert len(collector) == 2
        assert collector.has(ErrorKind.INCOMPATIBLE)
        assert not collector.has(ErrorKind.PACKAGE_NOT_FOUND)
