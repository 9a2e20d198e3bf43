"""Pytest configuration and fixtures for diffty tests."""

import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from diffty.api.services import ReviewService
from diffty.config import ReviewConfig
from diffty.store import JSONLedgerStore


class GitRepoHelper:
    """Helper class for git repository operations in tests."""

    def __init__(self, repo_path: Path):
        self.repo_path = repo_path
        self.env = os.environ.copy()
        self.env.update({
            "GIT_AUTHOR_NAME": "Test User",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test User",
            "GIT_COMMITTER_EMAIL": "test@example.com",
        })

    def run_git(self, args: list[str]) -> subprocess.CompletedProcess:
        """Run git command in the repository."""
        return subprocess.run(
            ["git"] + args,
            cwd=self.repo_path,
            env=self.env,
            check=True,
            capture_output=True,
            text=True,
        )

    def create_file(self, path: str, content: str) -> None:
        """Create a file with content."""
        file_path = self.repo_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)

    def add_and_commit(self, message: str) -> str:
        """Stage everything, commit, and return the commit SHA."""
        self.run_git(["add", "-A"])
        self.run_git(["commit", "-m", message])
        return self.get_current_sha()

    def get_current_sha(self) -> str:
        """Get current commit SHA."""
        result = self.run_git(["rev-parse", "HEAD"])
        return result.stdout.strip()

    def checkout(self, branch: str, create: bool = False) -> None:
        self.run_git(["checkout", "-b", branch] if create else ["checkout", branch])


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp(prefix="diffty_test_"))
    try:
        yield temp_path
    finally:
        if temp_path.exists():
            shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def git_helper(temp_dir: Path) -> GitRepoHelper:
    """Repository with ``main`` and a ``feature`` branch that changes three files.

    main:    README.md, app.py
    feature: app.py modified, docs/guide.md and notes.txt added
    """
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()
    helper = GitRepoHelper(repo_path)

    helper.run_git(["init"])
    helper.run_git(["config", "user.name", "Test User"])
    helper.run_git(["config", "user.email", "test@example.com"])
    helper.run_git(["config", "commit.gpgsign", "false"])

    helper.create_file("README.md", "# Test Repository\n")
    helper.create_file("app.py", "print('hello')\n")
    helper.add_and_commit("Initial commit")
    helper.run_git(["branch", "-M", "main"])

    helper.checkout("feature", create=True)
    helper.create_file("app.py", "print('hello')\nprint('world')\n")
    helper.create_file("docs/guide.md", "# Guide\n")
    helper.create_file("notes.txt", "todo\n")
    helper.add_and_commit("Feature work")
    helper.checkout("main")

    return helper


@pytest.fixture
def git_repo(git_helper: GitRepoHelper) -> Path:
    """Path of the prepared test repository."""
    return git_helper.repo_path


@pytest.fixture
def review_config(temp_dir: Path) -> ReviewConfig:
    """Configuration storing ledgers inside the test's temporary directory."""
    return ReviewConfig(storage_root=temp_dir / "store")


@pytest.fixture
def review_service(review_config: ReviewConfig, git_repo: Path) -> ReviewService:
    """Review service with the test repository already registered."""
    service = ReviewService(JSONLedgerStore(review_config.storage_root), review_config)
    service.add_repository(str(git_repo))
    return service
