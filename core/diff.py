"""Dependency diff engine: which version floors were raised."""

from typing import Any

from loguru import logger

from .classify import classify_dependency
from .exceptions import ClassificationError, ResolveError, SemverError
from .manifest import get_dependency_table
from .models import (
    ConfigDocument,
    DependencySpec,
    DependencyTable,
    DiffOutcome,
    ManifestDiff,
    OutcomeStatus,
    SpecKind,
)
from .resolve import minimum_version_for_req
from .semver import VersionReq


def compare_dependency(name: str, value_prev: Any, value_curr: Any) -> DiffOutcome:
    """Compare one dependency's previous and current declarations.

    Only the current requirement is resolved to a minimum version; the
    previous requirement is used purely as a matcher, so its operator is
    never validated.
    """
    spec_prev = classify_dependency(value_prev)
    spec_curr = classify_dependency(value_curr)

    if spec_prev.is_skipped or spec_curr.is_skipped:
        return DiffOutcome(name, OutcomeStatus.UNCHANGED)

    try:
        _check_classified(spec_prev, "previous")
        _check_classified(spec_curr, "current")
        req_prev = VersionReq.parse(spec_prev.requirement)
        req_curr = VersionReq.parse(spec_curr.requirement)
        minimum_version = minimum_version_for_req(req_curr)
    except (ClassificationError, SemverError, ResolveError) as e:
        return DiffOutcome(name, OutcomeStatus.ERROR, error=str(e))

    if req_prev.matches(minimum_version):
        return DiffOutcome(name, OutcomeStatus.UNCHANGED)

    return DiffOutcome(name, OutcomeStatus.UPGRADED, version=_display_version(req_curr))


def diff_dependency_tables(
    deps_prev: DependencyTable, deps_curr: DependencyTable
) -> list[DiffOutcome]:
    """Compare two dependency tables, in the previous table's order.

    Dependencies only present in the current table are not reported.
    """
    outcomes = []
    for name, value_prev in deps_prev.items():
        if name not in deps_curr:
            outcomes.append(DiffOutcome(name, OutcomeStatus.REMOVED))
            continue
        outcomes.append(compare_dependency(name, value_prev, deps_curr[name]))
    return outcomes


def diff_manifests(
    path: str, manifest_prev: ConfigDocument, manifest_curr: ConfigDocument
) -> ManifestDiff:
    """Diff the dependency tables of two parsed manifests."""
    deps_prev = get_dependency_table(manifest_prev)
    deps_curr = get_dependency_table(manifest_curr)
    logger.debug(
        "Comparing {} dependencies of {} against {} current ones",
        len(deps_prev),
        path,
        len(deps_curr),
    )
    return ManifestDiff(path=path, outcomes=diff_dependency_tables(deps_prev, deps_curr))


def _check_classified(spec: DependencySpec, side: str) -> None:
    if spec.kind is SpecKind.MALFORMED:
        raise ClassificationError(f"failed to get {side} version requirement")


def _display_version(req: VersionReq) -> str:
    """Canonical requirement text from its first digit on: ``^1.3`` -> ``1.3``."""
    text = str(req)
    for index, char in enumerate(text):
        if char.isascii() and char.isdigit():
            return text[index:]
    return text
