"""Service layer for diffty review flows."""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from ...aggregate import aggregate, file_status
from ...changeset import ChangeSetParser, DiffHunk
from ...config import ReviewConfig
from ...errors import InvalidRepositoryError, RepositoryNotFoundError, ValidationError
from ...ledger import parse_decision, record_decision
from ...models import ChangedFile, Decision, FileStatus, ReviewLedger
from ...navigation import NavigationIndex
from ...store import BaseLedgerStore, LedgerKey, check_commits
from ...vcs import GitRepository, is_valid_repo

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[str], GitRepository]


@dataclass
class CompareView:
    """Branches available for comparison and the pre-selected pair."""

    repository: str
    name: str
    branches: List[str]
    source: Optional[str]
    target: Optional[str]


@dataclass
class ReviewView:
    """Everything a caller needs to render one review page."""

    repository: str
    name: str
    ledger: ReviewLedger
    files: List[ChangedFile] = field(default_factory=list)
    no_diff: bool = False
    selected_file: Optional[str] = None
    file_status: Optional[FileStatus] = None
    hunks: List[DiffHunk] = field(default_factory=list)
    previous_file: Optional[str] = None
    next_file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "repository": self.repository,
            "name": self.name,
            "source_branch": self.ledger.source_branch,
            "target_branch": self.ledger.target_branch,
            "source_commit": self.ledger.source_commit,
            "target_commit": self.ledger.target_commit,
            "no_diff": self.no_diff,
            "files": [changed.to_dict() for changed in self.files],
        }
        if self.selected_file is not None:
            data["selected_file"] = {
                "path": self.selected_file,
                "status": self.file_status.value if self.file_status else None,
                "previous": self.previous_file,
                "next": self.next_file,
                "hunks": [_hunk_to_dict(hunk) for hunk in self.hunks],
            }
        return data


def _hunk_to_dict(hunk: DiffHunk) -> Dict[str, Any]:
    return {
        "header": hunk.header,
        "old_start": hunk.old_start,
        "old_lines": hunk.old_lines,
        "new_start": hunk.new_start,
        "new_lines": hunk.new_lines,
        "context": hunk.context,
        "added": hunk.added,
        "deleted": hunk.deleted,
        "lines": [
            {
                "kind": line.kind,
                "text": line.text,
                "old": line.old_number,
                "new": line.new_number,
            }
            for line in hunk.lines
        ],
    }


class ReviewService:
    """Request-scoped orchestration of compare, review and record flows.

    Every call re-reads the diff and the ledger; nothing is cached between calls.
    """

    def __init__(
        self,
        store: BaseLedgerStore,
        config: ReviewConfig,
        repository_factory: Optional[RepositoryFactory] = None,
    ):
        self.store = store
        self.config = config
        self.repository_factory = repository_factory or (
            lambda path: GitRepository(path, config)
        )
        self.parser = ChangeSetParser()

    def add_repository(self, path: str) -> str:
        """Register a git working tree by absolute path and return that path."""
        abs_path = os.path.abspath(path)
        if not is_valid_repo(abs_path):
            raise InvalidRepositoryError(abs_path)
        self.store.add_repository(abs_path)
        return abs_path

    def list_repositories(self) -> List[str]:
        return self.store.load_repositories()

    def get_repository(self, path: str) -> GitRepository:
        """Return the git provider for a registered repository."""
        if path not in self.store.load_repositories():
            raise RepositoryNotFoundError(path)
        return self.repository_factory(path)

    def compare(
        self, path: str, source: Optional[str] = None, target: Optional[str] = None
    ) -> CompareView:
        """List branches and pick defaults for any branch not given.

        The first branch is the default target and the second (or the only
        one) the default source.
        """
        repo = self.get_repository(path)
        branches = repo.list_branches()

        if not source and branches:
            source = branches[1] if len(branches) > 1 else branches[0]
        if not target and branches:
            target = branches[0]

        return CompareView(
            repository=path,
            name=repo.name,
            branches=branches,
            source=source or None,
            target=target or None,
        )

    def resolve(self, path: str, source: str, target: str) -> Tuple[str, str]:
        """Pin both branches to their current commits."""
        if not source or not target:
            raise ValidationError("source and target branches are required")
        repo = self.get_repository(path)
        return repo.resolve_commit(source), repo.resolve_commit(target)

    def review(
        self, path: str, source: str, target: str, file_path: Optional[str] = None
    ) -> ReviewView:
        """Build the ordered, annotated file list and the selected file's diff."""
        if not source or not target:
            raise ValidationError("source and target branches are required")

        repo = self.get_repository(path)
        source_commit = repo.resolve_commit(source)
        target_commit = repo.resolve_commit(target)
        ledger = self.store.load_ledger(path, source, target, source_commit, target_commit)

        view = ReviewView(repository=path, name=repo.name, ledger=ledger)

        diff_text = repo.diff(source_commit, target_commit)
        if not diff_text:
            view.no_diff = True
        else:
            view.files = aggregate(self.parser.parse(diff_text), ledger)

        logger.info(
            "Review view built",
            extra={
                "repository": path,
                "source_commit": source_commit,
                "target_commit": target_commit,
                "files": len(view.files),
            },
        )

        if not file_path:
            return view

        view.selected_file = file_path
        file_diff = repo.file_diff(source_commit, target_commit, file_path)
        view.hunks = self.parser.split_hunks(file_diff)
        view.file_status = file_status(ledger.find(path, file_path))
        view.previous_file, view.next_file = NavigationIndex(view.files).neighbours(file_path)
        return view

    def record(
        self,
        path: str,
        source: str,
        target: str,
        source_commit: str,
        target_commit: str,
        file_path: str,
        decision: Union[Decision, str],
        next_file: Optional[str] = None,
    ) -> Tuple[FileStatus, str]:
        """Record a whole-file decision and return the new status and the file to show next."""
        decision = parse_decision(decision)
        if not file_path:
            raise ValidationError("file path is required")
        if not source_commit or not target_commit:
            raise ValidationError(
                "source and target commit hashes are required",
                source_commit=source_commit,
                target_commit=target_commit,
            )
        check_commits(source_commit, target_commit)
        self.get_repository(path)

        key = LedgerKey(path, source_commit, target_commit)
        with self.store.lock(key):
            ledger = self.store.load_ledger(
                path, source, target, source_commit, target_commit
            )
            record_decision(ledger, path, file_path, decision)
            self.store.save_ledger(ledger)

        logger.info(
            "Decision recorded",
            extra={"repository": path, "path": file_path, "decision": decision.value},
        )
        status = file_status(ledger.find(path, file_path))
        return status, next_file or file_path
