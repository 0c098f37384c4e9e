"""Rendering of diff outcomes as report text or JSON."""

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .models import DiffOutcome, ManifestDiff, OutcomeStatus

INDENT = "    "


@dataclass(frozen=True)
class ReportLine:
    """One line of output; error lines belong on stderr."""

    text: str
    is_error: bool = False


def format_outcome(outcome: DiffOutcome) -> str:
    """Format a single non-unchanged outcome."""
    if outcome.status is OutcomeStatus.REMOVED:
        return f"`{outcome.name}` removed"
    if outcome.status is OutcomeStatus.UPGRADED:
        return f"`{outcome.name}` upgraded to version {outcome.version}"
    if outcome.status is OutcomeStatus.ERROR:
        return f"failed to compare `{outcome.name}`: {outcome.error}"
    raise ValueError(f"Nothing to report for unchanged dependency {outcome.name}")


class ReportFormatter:
    """Renders manifest diffs in the line-oriented text format.

    The manifest path is printed once, before the first removed, upgraded or
    failed dependency of that manifest. Removals and upgrades are indented
    report lines; failures are diagnostics for stderr.
    """

    def render(self, diff: ManifestDiff) -> Iterator[ReportLine]:
        path_printed = False
        for outcome in diff.reportable:
            if not path_printed:
                yield ReportLine(diff.path)
                path_printed = True

            if outcome.status is OutcomeStatus.ERROR:
                yield ReportLine(format_outcome(outcome), is_error=True)
            else:
                yield ReportLine(INDENT + format_outcome(outcome))


def format_json_report(diffs: Iterable[ManifestDiff]) -> str:
    """Format JSON output with every reportable outcome, grouped by manifest."""
    manifests = []
    for diff in diffs:
        changes = [
            {
                "name": outcome.name,
                "status": outcome.status.value,
                "version": outcome.version,
                "error": outcome.error,
            }
            for outcome in diff.reportable
        ]
        if changes:
            manifests.append({"path": diff.path, "changes": changes})

    return json.dumps({"manifests": manifests}, indent=2)
