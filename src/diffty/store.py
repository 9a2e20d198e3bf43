"""Ledger persistence for diffty.

Ledgers are keyed by repository and commit pair, never by branch name, so a
rebased or force-pushed branch starts from an empty ledger. Backends only
move documents around; identity, validation and decoding live in
``BaseLedgerStore`` so every backend behaves the same.
"""

import logging
import os
import re
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .errors import StorageFaultError, ValidationError
from .models import ReviewLedger
from .serialize import LedgerSerializer

logger = logging.getLogger(__name__)

LEDGER_FILENAME = "review-state.json"
REPOSITORIES_FILENAME = "repositories.json"

_UNSAFE_CHARACTERS = ("/", "\\", ":")

# Abbreviated or full SHA-1/SHA-256 object names
_COMMIT_PATTERN = re.compile(r"[0-9a-fA-F]{4,64}")
LEDGER_FILE_MODE = 0o644


def check_commits(source_commit: str, target_commit: str) -> None:
    """Reject commit identifiers that are not hex object names.

    Commits become directory names under the storage root, so anything else
    (``..``, separators) must never reach a backend.
    """
    for name, value in (("source_commit", source_commit), ("target_commit", target_commit)):
        if not _COMMIT_PATTERN.fullmatch(value):
            raise ValidationError(f"{name} is not a commit hash", **{name: value})


@dataclass
class _KeyLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


@dataclass(frozen=True)
class LedgerKey:
    """Storage identity of a ledger."""

    repository: str
    source_commit: str
    target_commit: str

    @property
    def safe_repository(self) -> str:
        """Repository identifier with path separators and colons replaced by ``_``."""
        safe = self.repository
        for character in _UNSAFE_CHARACTERS:
            safe = safe.replace(character, "_")
        return safe

    @property
    def relative_path(self) -> str:
        return "/".join(
            [self.safe_repository, self.source_commit, self.target_commit, LEDGER_FILENAME]
        )

    @classmethod
    def for_ledger(cls, ledger: ReviewLedger) -> "LedgerKey":
        return cls(ledger.repository, ledger.source_commit, ledger.target_commit)


class BaseLedgerStore(ABC):
    """Pluggable persistence for review ledgers and the repository registry."""

    def __init__(self):
        self.serializer = LedgerSerializer()
        self._locks: Dict[LedgerKey, _KeyLock] = {}
        self._locks_guard = threading.Lock()

    @abstractmethod
    def _read(self, location: str) -> Optional[str]:
        """Return the stored text at ``location`` or ``None`` if nothing is stored."""

    @abstractmethod
    def _write(self, location: str, text: str) -> None:
        """Replace the text stored at ``location``."""

    @contextmanager
    def lock(self, key: LedgerKey) -> Iterator[None]:
        """Serialize load-modify-save cycles on one ledger within this process.

        The entry for ``key`` is dropped once its last holder or waiter leaves.
        """
        with self._locks_guard:
            entry = self._locks.setdefault(key, _KeyLock())
            entry.holders += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.holders -= 1
                if not entry.holders:
                    del self._locks[key]

    def load_ledger(
        self,
        repository: str,
        source_branch: str,
        target_branch: str,
        source_commit: str,
        target_commit: str,
    ) -> ReviewLedger:
        """Load the ledger for a commit pair, or an empty one if none is stored.

        Absence is never an error. Without both commits nothing is read.
        """
        empty = ReviewLedger(
            repository=repository,
            source_branch=source_branch,
            target_branch=target_branch,
            source_commit=source_commit,
            target_commit=target_commit,
        )
        if not empty.is_pinned:
            logger.debug("Unpinned ledger requested", extra={"repository": repository})
            return empty

        check_commits(source_commit, target_commit)
        key = LedgerKey(repository, source_commit, target_commit)
        text = self._read(key.relative_path)
        if text is None:
            logger.debug("No stored ledger", extra={"location": key.relative_path})
            return empty

        document = self.serializer.from_json_string(text, key.relative_path)
        ledger = self.serializer.from_document(document, repository, key.relative_path)
        logger.info(
            "Ledger loaded",
            extra={"location": key.relative_path, "reviews": len(ledger.file_reviews)},
        )
        return ledger

    def save_ledger(self, ledger: ReviewLedger) -> None:
        """Persist the full ledger at its commit-pair key."""
        if not ledger.is_pinned:
            raise ValidationError(
                "source and target commit hashes are required",
                source_commit=ledger.source_commit,
                target_commit=ledger.target_commit,
            )
        check_commits(ledger.source_commit, ledger.target_commit)

        key = LedgerKey.for_ledger(ledger)
        text = self.serializer.to_json_string(self.serializer.to_document(ledger))
        self._write(key.relative_path, text)
        logger.info(
            "Ledger saved",
            extra={"location": key.relative_path, "reviews": len(ledger.file_reviews)},
        )

    def load_repositories(self) -> List[str]:
        """Return registered repository identifiers; empty when none are stored."""
        text = self._read(REPOSITORIES_FILENAME)
        if text is None:
            return []

        repositories = self.serializer.from_json_string(text, REPOSITORIES_FILENAME)
        if not isinstance(repositories, list) or not all(
            isinstance(repo, str) for repo in repositories
        ):
            raise StorageFaultError(REPOSITORIES_FILENAME, "expected a list of strings")
        return repositories

    def save_repositories(self, repositories: List[str]) -> None:
        self._write(REPOSITORIES_FILENAME, self.serializer.to_json_string(list(repositories)))

    def add_repository(self, repository: str) -> bool:
        """Register a repository. Returns False when it was already known."""
        repositories = self.load_repositories()
        if repository in repositories:
            return False

        repositories.append(repository)
        self.save_repositories(repositories)
        logger.info("Repository registered", extra={"repository": repository})
        return True

    def is_writable(self) -> bool:
        return True

    def close(self) -> None:
        """Release any resources held by the store."""


class JSONLedgerStore(BaseLedgerStore):
    """Stores ledgers as JSON files below an explicit root directory."""

    def __init__(self, root: Path):
        super().__init__()
        self.root = Path(root)

    def is_writable(self) -> bool:
        """Whether ledgers can be written below the root."""
        # The root is created on first write; check its nearest existing ancestor
        candidate = self.root
        while not candidate.exists() and candidate != candidate.parent:
            candidate = candidate.parent
        return candidate.is_dir() and os.access(candidate, os.W_OK)

    def _resolve(self, location: str) -> Path:
        return self.root.joinpath(*location.split("/"))

    def _read(self, location: str) -> Optional[str]:
        path = self._resolve(location)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageFaultError(str(path), str(exc)) from exc

    def _write(self, location: str, text: str) -> None:
        path = self._resolve(location)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write beside the target and swap it in so readers never see a partial file
            fd, tmp_name = tempfile.mkstemp(
                prefix=".diffty_", suffix=".tmp", dir=str(path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(text)
                # mkstemp creates 0600 files
                os.chmod(tmp_name, LEDGER_FILE_MODE)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise StorageFaultError(str(path), str(exc)) from exc


class MemoryLedgerStore(BaseLedgerStore):
    """Keeps serialized documents in a dictionary. Useful for tests."""

    def __init__(self):
        super().__init__()
        self.documents: Dict[str, str] = {}

    def _read(self, location: str) -> Optional[str]:
        return self.documents.get(location)

    def _write(self, location: str, text: str) -> None:
        self.documents[location] = text
