"""CLI application for DepDiff."""

from enum import Enum

import typer
from rich.console import Console

from core.diff import diff_manifests
from core.exceptions import DepdiffError
from core.logger import setup_logger
from core.manifest import parse_manifest
from core.models import ManifestDiff
from core.report import ReportFormatter, format_json_report
from core.sources import (
    DEFAULT_MANIFEST_NAME,
    CheckoutSource,
    GitShowSource,
    RevisionSource,
    fetch_current,
    locate_tracked_manifests,
)

# Output must be byte-exact: no markup, highlighting, emoji codes or wrapping.
console = Console(highlight=False, markup=False, emoji=False, soft_wrap=True)
error_console = Console(stderr=True, highlight=False, markup=False, emoji=False, soft_wrap=True)


class Strategy(str, Enum):
    """How manifests are fetched at the previous revision."""

    show = "show"
    checkout = "checkout"


class OutputFormat(str, Enum):
    """How the report is printed."""

    text = "text"
    json = "json"


def open_source(strategy: Strategy, previous_revision: str) -> RevisionSource:
    """Create the revision source for ``strategy``; enter it before fetching."""
    if strategy is Strategy.checkout:
        return CheckoutSource(previous_revision)
    return GitShowSource(previous_revision)


def compare_repo_to_current(
    previous_revision: str,
    strategy: Strategy = Strategy.show,
    manifest_name: str = DEFAULT_MANIFEST_NAME,
    print_report: bool = True,
) -> list[ManifestDiff]:
    """Diff every tracked manifest against its contents at ``previous_revision``.

    Manifests missing at the previous revision are reported on stderr and
    skipped. With ``print_report`` each manifest's report is printed as soon
    as it is computed.
    """
    formatter = ReportFormatter()
    diffs = []

    paths = locate_tracked_manifests(manifest_name)
    with open_source(strategy, previous_revision) as source:
        for path in paths:
            contents_prev = source.fetch_previous(path)
            if contents_prev is None:
                error_console.print(f"`{path}` does not exist in previous revision")
                continue

            manifest_prev = parse_manifest(contents_prev)
            manifest_curr = parse_manifest(fetch_current(path))
            diff = diff_manifests(path, manifest_prev, manifest_curr)
            diffs.append(diff)

            if print_report:
                for line in formatter.render(diff):
                    (error_console if line.is_error else console).print(line.text)

    return diffs


app = typer.Typer(
    name="depdiff",
    help="DepDiff - Report Cargo dependencies whose minimum version was raised since a revision",
    add_completion=False,
)


@app.command()
def report(
    previous_revision: str = typer.Argument(help="Git revision to compare the working tree against"),
    strategy: Strategy = typer.Option(
        Strategy.show,
        "--strategy",
        envvar="DEPDIFF_STRATEGY",
        help="Fetch previous manifests with `git show` or from a temporary checkout",
    ),
    manifest_name: str = typer.Option(
        DEFAULT_MANIFEST_NAME,
        "--manifest-name",
        envvar="DEPDIFF_MANIFEST_NAME",
        help="File name of the manifests to compare",
    ),
    format_type: OutputFormat = typer.Option(OutputFormat.text, "--format", help="Output format"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log git commands and progress"),
) -> None:
    """Report removed dependencies and raised version requirements in Cargo.toml files."""
    setup_logger(verbose)

    try:
        diffs = compare_repo_to_current(
            previous_revision,
            strategy=strategy,
            manifest_name=manifest_name,
            print_report=format_type is OutputFormat.text,
        )
    except DepdiffError as e:
        error_console.print(f"Error: {e}", style="red")
        raise typer.Exit(1)

    if format_type is OutputFormat.json:
        console.print(format_json_report(diffs))


if __name__ == "__main__":
    app()
