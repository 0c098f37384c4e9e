"""Tests for the dependency diff engine."""

import pytest

from core.diff import compare_dependency, diff_dependency_tables, diff_manifests
from core.manifest import parse_manifest
from core.models import DiffOutcome, OutcomeStatus


def outcome_of(prev, curr) -> DiffOutcome:
    return compare_dependency("foo", prev, curr)


class TestCompareDependency:
    """Test single dependency comparison."""

    def test_requirement_still_accepting_new_minimum(self):
        """^1.2 accepts 1.2.5, so nothing was raised."""
        assert outcome_of("1.2", "1.2.5").status is OutcomeStatus.UNCHANGED

    def test_caret_compatible_bump_is_unchanged(self):
        """^1.2 still accepts 1.3.0."""
        assert outcome_of("1.2", "1.3").status is OutcomeStatus.UNCHANGED

    @pytest.mark.parametrize(
        "prev,curr,version",
        [
            ("1.2", "2.0", "2.0"),
            ("0.2", "0.3", "0.3"),
            ("=1.2.0", "1.3", "1.3"),
            ("1.0", "=2.0.1", "2.0.1"),
            ("~1.2", "1.3", "1.3"),
            ("1.0", "1.1.0-rc.1", "1.1.0-rc.1"),
        ],
    )
    def test_raised_requirement(self, prev, curr, version):
        """Should report the current requirement from its first digit on."""
        outcome = outcome_of(prev, curr)
        assert outcome == DiffOutcome("foo", OutcomeStatus.UPGRADED, version=version)

    def test_detailed_declarations(self):
        outcome = outcome_of({"version": "0.4", "features": ["a"]}, {"version": "0.5"})
        assert outcome.status is OutcomeStatus.UPGRADED
        assert outcome.version == "0.5"

    def test_plain_to_detailed(self):
        assert outcome_of("1.0", {"version": "1.0.3"}).status is OutcomeStatus.UNCHANGED

    @pytest.mark.parametrize(
        "prev,curr",
        [
            ({"git": "https://github.com/user/baz"}, "2.0"),
            ("1.0", {"git": "https://github.com/user/baz", "version": "9.0"}),
            ({"path": "../baz"}, "2.0"),
            ("1.0", {"workspace": True}),
            ({"workspace": True}, {"features": []}),
        ],
    )
    def test_skipped_side_is_unchanged(self, prev, curr):
        """Git, path and workspace declarations on either side are not compared."""
        assert outcome_of(prev, curr).status is OutcomeStatus.UNCHANGED

    def test_malformed_previous(self):
        outcome = outcome_of({"features": ["x"]}, "1.0")
        assert outcome.status is OutcomeStatus.ERROR
        assert outcome.error == "failed to get previous version requirement"

    def test_malformed_current(self):
        outcome = outcome_of("1.0", {"optional": True})
        assert outcome.status is OutcomeStatus.ERROR
        assert outcome.error == "failed to get current version requirement"

    @pytest.mark.parametrize(
        "prev,curr,error",
        [
            ("1.0", ">=1.0, <2.0", "unexpected number of comparators: 2"),
            ("1.0", "~1.1", "unexpected operator: Tilde"),
            ("1.0", "*", "unexpected number of comparators: 0"),
            ("1.0", "", "unexpected end of input while parsing major version number"),
            ("abc", "1.0", "unexpected character 'a' while parsing major version number"),
        ],
    )
    def test_unresolvable_requirements(self, prev, curr, error):
        """Should turn parse and resolution failures into error outcomes."""
        assert outcome_of(prev, curr) == DiffOutcome("foo", OutcomeStatus.ERROR, error=error)

    def test_previous_operator_is_only_matched(self):
        """An unsupported operator on the previous side is used as a matcher."""
        assert outcome_of(">=1.0, <2.0", "1.5").status is OutcomeStatus.UNCHANGED
        assert outcome_of(">=1.0, <2.0", "2.1").status is OutcomeStatus.UPGRADED


class TestDiffDependencyTables:
    """Test whole-table diffs."""

    def test_removed_dependency(self):
        outcomes = diff_dependency_tables({"bar": "1.0"}, {})
        assert outcomes == [DiffOutcome("bar", OutcomeStatus.REMOVED)]

    def test_removed_git_dependency(self):
        """Removal is reported before classification."""
        outcomes = diff_dependency_tables({"baz": {"git": "https://example.com/baz"}}, {})
        assert outcomes == [DiffOutcome("baz", OutcomeStatus.REMOVED)]

    def test_additions_are_not_reported(self):
        assert diff_dependency_tables({}, {"new": "1.0"}) == []

    def test_previous_order_is_preserved(self):
        """Outcome order follows the previous table, whatever the current order."""
        prev = {"c": "1", "a": "1", "b": "1"}
        curr = {"a": "2", "b": "1", "c": "1"}
        outcomes = diff_dependency_tables(prev, curr)
        assert [outcome.name for outcome in outcomes] == ["c", "a", "b"]
        assert [outcome.status for outcome in outcomes] == [
            OutcomeStatus.UNCHANGED,
            OutcomeStatus.UPGRADED,
            OutcomeStatus.UNCHANGED,
        ]

    def test_error_does_not_stop_remaining_entries(self):
        prev = {"qux": "1.0", "bar": "1.0", "foo": "1.2"}
        curr = {"qux": ">=1.0, <2.0", "foo": "2.0"}
        outcomes = diff_dependency_tables(prev, curr)
        assert [outcome.status for outcome in outcomes] == [
            OutcomeStatus.ERROR,
            OutcomeStatus.REMOVED,
            OutcomeStatus.UPGRADED,
        ]


class TestDiffManifests:
    """Test diffs of parsed manifests."""

    def test_sample_manifests(self, previous_manifest, current_manifest):
        manifest_prev = parse_manifest(previous_manifest.encode())
        manifest_curr = parse_manifest(current_manifest.encode())

        diff = diff_manifests("Cargo.toml", manifest_prev, manifest_curr)

        assert diff.path == "Cargo.toml"
        assert [outcome.name for outcome in diff.outcomes] == [
            "anyhow", "bar", "foo", "qux", "serde", "local",
        ]
        assert diff.reportable == [
            DiffOutcome("bar", OutcomeStatus.REMOVED),
            DiffOutcome("foo", OutcomeStatus.UPGRADED, version="2.0"),
            DiffOutcome(
                "qux", OutcomeStatus.ERROR, error="unexpected number of comparators: 2"
            ),
        ]

    def test_idempotent(self, previous_manifest, current_manifest):
        """Diffing the same documents twice gives identical outcomes."""
        manifest_prev = parse_manifest(previous_manifest.encode())
        manifest_curr = parse_manifest(current_manifest.encode())

        first = diff_manifests("Cargo.toml", manifest_prev, manifest_curr)
        second = diff_manifests("Cargo.toml", manifest_prev, manifest_curr)
        assert first == second

    def test_workspace_manifests(self):
        manifest_prev = parse_manifest(b'[workspace.dependencies]\nserde = "1.0"\ntoml = "0.7"\n')
        manifest_curr = parse_manifest(b'[workspace.dependencies]\nserde = "1.0.100"\ntoml = "0.8"\n')

        diff = diff_manifests("Cargo.toml", manifest_prev, manifest_curr)
        assert diff.reportable == [DiffOutcome("toml", OutcomeStatus.UPGRADED, version="0.8")]

    def test_manifests_without_dependencies(self):
        diff = diff_manifests("Cargo.toml", {"package": {"name": "x"}}, {})
        assert diff.outcomes == []
