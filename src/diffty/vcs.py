"""Version control system operations for diffty."""

import logging
import subprocess
from pathlib import Path
from typing import List

from .config import ReviewConfig
from .errors import BranchNotFoundError, GitCommandError, GitTimeoutError

logger = logging.getLogger(__name__)


def is_valid_repo(path: str) -> bool:
    """Check if the given path is a git working tree."""
    return (Path(path) / ".git").exists()


class GitRepository:
    """Read-only git operations on a local working tree.

    ``source`` is the branch being merged from, ``target`` the branch being
    merged into. Diffs are always taken as ``target..source``.
    """

    def __init__(self, path: str, config: ReviewConfig):
        """Initialize with repository path and configuration."""
        self.path = path
        self.config = config

    @property
    def name(self) -> str:
        return Path(self.path).name

    def _run_git(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run git command with proper environment and error handling."""
        # Enforce deterministic git behavior across platforms
        cmd = [
            "git",
            "-C",
            self.path,
            "-c",
            "core.autocrlf=false",
            "-c",
            "color.ui=false",
        ] + args
        logger.debug("Running git", extra={"repository": self.path, "git_args": args})
        try:
            return subprocess.run(
                cmd,
                env=self.config.git_env,
                timeout=self.config.git_timeout,
                check=check,
                capture_output=True,
                text=True,
            )
        except subprocess.TimeoutExpired as e:
            raise GitTimeoutError(args[0], self.config.git_timeout) from e
        except subprocess.CalledProcessError as e:
            raise GitCommandError(args[0], e.returncode, (e.stderr or "").strip()) from e

    def list_branches(self) -> List[str]:
        """Return local branch names in git's order."""
        result = self._run_git(["branch", "--format=%(refname:short)"])
        return [line for line in result.stdout.strip().split("\n") if line]

    def resolve_commit(self, branch: str) -> str:
        """Return the commit hash a branch points at."""
        result = self._run_git(
            ["rev-parse", "--verify", "--quiet", f"{branch}^{{commit}}"], check=False
        )
        if result.returncode != 0 or not result.stdout.strip():
            raise BranchNotFoundError(branch, self.path)
        return result.stdout.strip()

    def diff(self, source: str, target: str) -> str:
        """Unified diff of everything ``source`` changes relative to ``target``."""
        result = self._run_git(["diff", "--no-color", target, source])
        return result.stdout

    def file_diff(self, source: str, target: str, file_path: str) -> str:
        """Unified diff scoped to one path; empty when the path is unchanged."""
        result = self._run_git(["diff", "--no-color", target, source, "--", file_path])
        return result.stdout

    def changed_files(self, source: str, target: str) -> List[str]:
        """Paths changed between the two refs, as reported by ``--name-only``."""
        result = self._run_git(["diff", "--name-only", target, source])
        return [line for line in result.stdout.strip().split("\n") if line]
