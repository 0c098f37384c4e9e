"""Cargo manifest parsing and dependency table lookup."""

import tomllib
from collections.abc import Mapping

from .exceptions import ManifestError
from .models import ConfigDocument, DependencyTable


def parse_manifest(data: bytes) -> ConfigDocument:
    """Parse raw manifest bytes into a TOML document.

    Args:
        data: The manifest file content

    Returns:
        Parsed document, keys in declaration order

    Raises:
        ManifestError: If the content is not UTF-8 or not valid TOML
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ManifestError(f"manifest is not valid UTF-8: {e}") from e

    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"invalid TOML: {e}") from e


def get_dependency_table(document: ConfigDocument) -> DependencyTable:
    """Return the dependency table to compare.

    Looks at ``[dependencies]`` first, then ``[workspace.dependencies]``. A
    manifest with neither contributes an empty table.
    """
    dependencies = document.get("dependencies")
    if isinstance(dependencies, Mapping):
        return dependencies

    workspace = document.get("workspace")
    if isinstance(workspace, Mapping):
        dependencies = workspace.get("dependencies")
        if isinstance(dependencies, Mapping):
            return dependencies

    return {}
