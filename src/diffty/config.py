"""Configuration management for diffty."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from . import settings


@dataclass(frozen=True)
class ReviewConfig:
    """Configuration for the review server and its collaborators."""

    # Where ledgers and the repository registry live
    storage_root: Path

    # Server options
    host: str = "127.0.0.1"
    port: int = 10101

    # Seconds before a single git invocation is abandoned
    git_timeout: int = settings.DEFAULT_GIT_TIMEOUT

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not str(self.storage_root):
            raise ValueError("storage_root cannot be empty")
        if not (0 < self.port < 65536):
            raise ValueError("port must be between 1 and 65535")
        if self.git_timeout <= 0:
            raise ValueError("git_timeout must be positive")

    @classmethod
    def from_env(
        cls,
        storage_root: Optional[Path] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ) -> "ReviewConfig":
        """Build a configuration from explicit values, falling back to the environment."""
        return cls(
            storage_root=Path(storage_root) if storage_root else settings.get_storage_root(),
            host=host or "127.0.0.1",
            port=port or 10101,
            git_timeout=settings.get_git_timeout(),
        )

    @property
    def git_env(self) -> Dict[str, str]:
        """Get Git environment variables for deterministic output."""
        env = os.environ.copy()
        env.update(
            {
                "LC_ALL": "C",
                "GIT_TERMINAL_PROMPT": "0",
                "GIT_ASKPASS": "echo",
                "SSH_ASKPASS": "echo",
                "GCM_INTERACTIVE": "never",
                "GIT_PAGER": "cat",
            }
        )
        return env

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to a plain dictionary for display."""
        return {
            "storage_root": str(self.storage_root),
            "host": self.host,
            "port": self.port,
            "git_timeout": self.git_timeout,
        }
