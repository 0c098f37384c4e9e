"""Core data models for DepDiff."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Parsed TOML document; treated as read-only by the core.
ConfigDocument = Mapping[str, Any]

# Dependency name -> raw declaration (string or table), in declaration order.
DependencyTable = Mapping[str, Any]


class SpecKind(Enum):
    """How a single dependency declaration was written."""

    PLAIN = "plain"  # foo = "1.2"
    DETAILED = "detailed"  # foo = { version = "1.2", ... }
    GIT = "git"
    PATH = "path"
    WORKSPACE = "workspace"  # foo.workspace = true
    MALFORMED = "malformed"


SKIPPED_KINDS = frozenset({SpecKind.GIT, SpecKind.PATH, SpecKind.WORKSPACE})


@dataclass(frozen=True)
class DependencySpec:
    """A classified dependency declaration."""

    kind: SpecKind
    requirement: str | None = None

    @property
    def is_skipped(self) -> bool:
        """Git, path and workspace-inherited dependencies are never compared."""
        return self.kind in SKIPPED_KINDS


class OutcomeStatus(Enum):
    """Result of comparing one dependency across two revisions."""

    UNCHANGED = "unchanged"
    REMOVED = "removed"
    UPGRADED = "upgraded"
    ERROR = "error"


@dataclass(frozen=True)
class DiffOutcome:
    """Comparison result for a single dependency name."""

    name: str
    status: OutcomeStatus
    version: str | None = None  # display text, set for UPGRADED
    error: str | None = None  # cause, set for ERROR


@dataclass
class ManifestDiff:
    """Ordered outcomes for one manifest path."""

    path: str
    outcomes: list[DiffOutcome] = field(default_factory=list)

    @property
    def reportable(self) -> list[DiffOutcome]:
        """Outcomes that produce output: everything except UNCHANGED."""
        return [
            outcome for outcome in self.outcomes
            if outcome.status is not OutcomeStatus.UNCHANGED
        ]
