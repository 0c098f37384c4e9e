"""Pytest configuration and fixtures."""

import shutil
import subprocess
from pathlib import Path

import pytest
from loguru import logger


class GitRepo:
    """A throwaway git repository for end-to-end tests."""

    def __init__(self, root: Path):
        self.root = root
        self.git("init", "--quiet")

    def git(self, *args: str) -> str:
        result = subprocess.run(
            [
                "git",
                "-c", "user.name=Test",
                "-c", "user.email=test@test.com",
                "-c", "commit.gpgsign=false",
                *args,
            ],
            cwd=self.root,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def write(self, path: str, content: str) -> None:
        full_path = self.root / path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(content)

    def commit(self, message: str = "commit") -> str:
        """Commit everything and return the new commit's hash."""
        self.git("add", "-A")
        self.git("commit", "--quiet", "-m", message)
        return self.git("rev-parse", "HEAD").strip()


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """An empty git repository that is also the current directory."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    root = tmp_path / "repo"
    root.mkdir()
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    monkeypatch.chdir(root)
    return GitRepo(root)


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop loguru sinks a test installed, e.g. on a captured stderr."""
    yield
    logger.remove()


@pytest.fixture
def previous_manifest():
    """Sample Cargo.toml at the previous revision."""
    return """
[package]
name = "sample"
version = "0.1.0"

[dependencies]
anyhow = "1.0"
bar = "1.0"
foo = "1.2"
qux = "1.0"
serde = { version = "1.0", features = ["derive"] }
local = { path = "../local" }
"""


@pytest.fixture
def current_manifest():
    """Sample Cargo.toml in the working tree."""
    return """
[package]
name = "sample"
version = "0.2.0"

[dependencies]
serde = { version = "1.0.190", features = ["derive"] }
qux = ">=1.0, <2.0"
foo = "2.0"
anyhow = "1.0.75"
local = { path = "../local" }
tokio = "1"
"""
