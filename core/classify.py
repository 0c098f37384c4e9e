"""Classification of raw dependency declarations."""

from collections.abc import Mapping
from typing import Any

from .models import DependencySpec, SpecKind


def classify_dependency(value: Any) -> DependencySpec:
    """Classify one raw declaration from a dependency table.

    The git, path and workspace markers are checked before ``version``, so a
    git dependency that also carries a ``version`` key is still skipped.

    Args:
        value: The declaration as parsed from TOML (string, table, or other)

    Returns:
        The classified dependency spec
    """
    table = value if isinstance(value, Mapping) else None

    if table is not None and "git" in table:
        return DependencySpec(SpecKind.GIT)
    if table is not None and "path" in table:
        return DependencySpec(SpecKind.PATH)
    # `workspace = 1` is not a boolean and does not count
    if table is not None and table.get("workspace") is True:
        return DependencySpec(SpecKind.WORKSPACE)

    if isinstance(value, str):
        return DependencySpec(SpecKind.PLAIN, value)

    if table is not None and isinstance(table.get("version"), str):
        return DependencySpec(SpecKind.DETAILED, table["version"])

    return DependencySpec(SpecKind.MALFORMED)
