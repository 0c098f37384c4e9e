"""Manifest contents at a previous revision and in the working tree.

Two strategies fetch the previous revision's manifests: ``git show`` on
demand, or a throwaway clone checked out at the revision.
"""

import subprocess
import tempfile
from pathlib import Path, PurePosixPath
from typing import Protocol

from loguru import logger

from .exceptions import GitError

DEFAULT_MANIFEST_NAME = "Cargo.toml"


class RevisionSource(Protocol):
    """Provides manifest bytes as of the previous revision.

    Sources are context managers; entering one checks the revision exists.
    """

    revision: str

    def __enter__(self) -> "RevisionSource":
        ...

    def __exit__(self, *exc_info) -> None:
        ...

    def fetch_previous(self, path: str) -> bytes | None:
        """Return the file's bytes at the revision, or None if it did not exist."""
        ...


def run_git(args: list[str], cwd: Path | str | None = None) -> subprocess.CompletedProcess:
    """Run a git command, capturing its output as bytes.

    Raises:
        GitError: If git cannot be executed at all
    """
    command = ["git", *args]
    logger.debug("Running {} in {}", " ".join(command), cwd or ".")
    try:
        return subprocess.run(command, cwd=cwd, capture_output=True, check=False)
    except OSError as e:
        raise GitError(f"failed to run {' '.join(command)}: {e}") from e


def _checked_git(args: list[str], cwd: Path | str | None = None) -> bytes:
    result = run_git(args, cwd=cwd)
    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise GitError(f"command failed: git {' '.join(args)}: {stderr}")
    return result.stdout


def verify_revision(revision: str, cwd: Path | str | None = None) -> None:
    """Check that ``revision`` names a commit.

    Raises:
        GitError: If the revision is unknown; a bad revision must not be
            mistaken for manifests missing at that revision
    """
    result = run_git(["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"], cwd=cwd)
    if result.returncode != 0:
        raise GitError(f"unknown revision: {revision}")


def locate_tracked_manifests(
    manifest_name: str = DEFAULT_MANIFEST_NAME, cwd: Path | str | None = None
) -> list[str]:
    """List tracked files named ``manifest_name``, relative to ``cwd``.

    Raises:
        GitError: If ``git ls-files`` fails, e.g. outside a repository
    """
    output = _checked_git(["ls-files", "-z"], cwd=cwd)
    paths = []
    for raw_path in output.split(b"\0"):
        if not raw_path:
            continue
        try:
            path = raw_path.decode("utf-8")
        except UnicodeDecodeError as e:
            raise GitError(f"tracked path is not valid UTF-8: {raw_path!r}") from e
        if PurePosixPath(path).name == manifest_name:
            paths.append(path)
    return paths


def fetch_current(path: str, cwd: Path | str | None = None) -> bytes:
    """Read a manifest from the working tree."""
    full_path = Path(cwd or ".") / path
    try:
        return full_path.read_bytes()
    except OSError as e:
        raise GitError(f"failed to read {path}: {e}") from e


class GitShowSource:
    """Fetches previous contents on demand with ``git show <rev>:<path>``."""

    def __init__(self, revision: str, cwd: Path | str | None = None):
        self.revision = revision
        self.cwd = cwd

    def fetch_previous(self, path: str) -> bytes | None:
        # `./` makes the path relative to cwd rather than the repository root
        result = run_git(["show", f"{self.revision}:./{path}"], cwd=self.cwd)
        if result.returncode != 0:
            logger.debug("{} not found at {}", path, self.revision)
            return None
        return result.stdout

    def __enter__(self) -> "GitShowSource":
        verify_revision(self.revision, cwd=self.cwd)
        return self

    def __exit__(self, *exc_info) -> None:
        return None


class CheckoutSource:
    """Reads previous contents from a temporary clone checked out at the revision.

    Use as a context manager; the clone is removed on exit.
    """

    def __init__(self, revision: str, cwd: Path | str | None = None):
        self.revision = revision
        self.cwd = cwd
        self._tempdir: tempfile.TemporaryDirectory | None = None
        self._checkout_dir: Path | None = None

    def __enter__(self) -> "CheckoutSource":
        verify_revision(self.revision, cwd=self.cwd)
        toplevel = _checked_git(["rev-parse", "--show-toplevel"], cwd=self.cwd)
        prefix = _checked_git(["rev-parse", "--show-prefix"], cwd=self.cwd)

        self._tempdir = tempfile.TemporaryDirectory(prefix="depdiff-")
        clone_dir = Path(self._tempdir.name) / "checkout"
        try:
            _checked_git(
                ["clone", "--quiet", "--no-checkout", toplevel.decode().strip(), str(clone_dir)]
            )
            _checked_git(["checkout", "--quiet", self.revision], cwd=clone_dir)
        except GitError:
            self._tempdir.cleanup()
            self._tempdir = None
            raise

        self._checkout_dir = clone_dir / prefix.decode().strip()
        logger.debug("Checked out {} into {}", self.revision, clone_dir)
        return self

    def __exit__(self, *exc_info) -> None:
        if self._tempdir is not None:
            self._tempdir.cleanup()
            self._tempdir = None
        self._checkout_dir = None

    def fetch_previous(self, path: str) -> bytes | None:
        if self._checkout_dir is None:
            raise RuntimeError("CheckoutSource must be entered before use")
        previous_path = self._checkout_dir / path
        if not previous_path.is_file():
            return None
        return previous_path.read_bytes()
