"""Tests for the review service flows."""

import shutil

import pytest

from diffty.api.services import ReviewService
from diffty.errors import (
    BranchNotFoundError,
    InvalidRepositoryError,
    RepositoryNotFoundError,
    ValidationError,
)
from diffty.models import FileStatus
from diffty.store import JSONLedgerStore, MemoryLedgerStore
from diffty.vcs import GitRepository

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("git") is None, reason="git command not available"),
]


def _pinned(service, repo):
    return service.resolve(repo, "feature", "main")


class RecordingRepository(GitRepository):
    """Git provider that remembers the refs each diff was taken between."""

    def __init__(self, path, config, calls):
        super().__init__(path, config)
        self.calls = calls

    def diff(self, source, target):
        self.calls.append(("diff", source, target))
        return super().diff(source, target)

    def file_diff(self, source, target, file_path):
        self.calls.append(("file_diff", source, target, file_path))
        return super().file_diff(source, target, file_path)


class TestRepositories:
    """Test registration through the service."""

    def test_add_is_idempotent(self, review_service, git_repo):
        review_service.add_repository(str(git_repo))
        assert review_service.list_repositories() == [str(git_repo)]

    def test_add_invalid(self, review_service, temp_dir):
        with pytest.raises(InvalidRepositoryError):
            review_service.add_repository(str(temp_dir))

    def test_unregistered(self, review_config, git_repo):
        service = ReviewService(MemoryLedgerStore(), review_config)
        with pytest.raises(RepositoryNotFoundError):
            service.compare(str(git_repo))


class TestCompare:
    """Test branch listing and default selection."""

    def test_defaults(self, review_service, git_repo):
        view = review_service.compare(str(git_repo))

        assert sorted(view.branches) == ["feature", "main"]
        assert view.target == view.branches[0]
        assert view.source == view.branches[1]
        assert view.name == "test_repo"

    def test_explicit_selection_kept(self, review_service, git_repo):
        view = review_service.compare(str(git_repo), source="main", target="feature")
        assert (view.source, view.target) == ("main", "feature")

    def test_resolve(self, review_service, git_repo, git_helper):
        source_commit, target_commit = _pinned(review_service, str(git_repo))
        assert target_commit == git_helper.get_current_sha()
        assert source_commit != target_commit

    def test_resolve_unknown_branch(self, review_service, git_repo):
        with pytest.raises(BranchNotFoundError):
            review_service.resolve(str(git_repo), "nope", "main")


class TestReview:
    """Test review view construction and decision recording."""

    def test_all_unreviewed(self, review_service, git_repo):
        view = review_service.review(str(git_repo), "feature", "main")

        assert view.no_diff is False
        assert [f.path for f in view.files] == ["app.py", "docs/guide.md", "notes.txt"]
        assert all(f.status is FileStatus.UNREVIEWED for f in view.files)
        assert view.selected_file is None

    def test_no_diff(self, review_service, git_repo):
        view = review_service.review(str(git_repo), "main", "main")

        assert view.no_diff is True
        assert view.files == []

    def test_record_reorders(self, review_service, git_repo):
        repo = str(git_repo)
        source_commit, target_commit = _pinned(review_service, repo)

        status, show = review_service.record(
            repo, "feature", "main", source_commit, target_commit,
            "app.py", "approved", next_file="docs/guide.md",
        )
        assert status is FileStatus.APPROVED
        assert show == "docs/guide.md"

        view = review_service.review(repo, "feature", "main")
        assert [(f.path, f.status) for f in view.files] == [
            ("docs/guide.md", FileStatus.UNREVIEWED),
            ("notes.txt", FileStatus.UNREVIEWED),
            ("app.py", FileStatus.APPROVED),
        ]

    def test_record_without_next_stays(self, review_service, git_repo):
        repo = str(git_repo)
        source_commit, target_commit = _pinned(review_service, repo)

        _, show = review_service.record(
            repo, "feature", "main", source_commit, target_commit, "notes.txt", "skipped"
        )
        assert show == "notes.txt"

    def test_overwrite(self, review_service, git_repo):
        repo = str(git_repo)
        pinned = _pinned(review_service, repo)

        review_service.record(repo, "feature", "main", *pinned, "app.py", "approved")
        status, _ = review_service.record(repo, "feature", "main", *pinned, "app.py", "rejected")

        assert status is FileStatus.REJECTED
        view = review_service.review(repo, "feature", "main", "app.py")
        assert view.file_status is FileStatus.REJECTED

    def test_selected_file(self, review_service, git_repo):
        view = review_service.review(str(git_repo), "feature", "main", "docs/guide.md")

        assert view.selected_file == "docs/guide.md"
        assert view.file_status is FileStatus.UNREVIEWED
        assert view.previous_file == "app.py"
        assert view.next_file == "notes.txt"
        assert len(view.hunks) == 1
        assert view.hunks[0].added == 1

    def test_moved_branch_starts_fresh(self, review_service, git_repo, git_helper):
        """A new commit on the source branch gives an empty ledger."""
        repo = str(git_repo)
        review_service.record(
            repo, "feature", "main", *_pinned(review_service, repo), "app.py", "approved"
        )

        git_helper.checkout("feature")
        git_helper.create_file("notes.txt", "done\n")
        git_helper.add_and_commit("Amend notes")
        git_helper.checkout("main")

        view = review_service.review(repo, "feature", "main")
        assert all(f.status is FileStatus.UNREVIEWED for f in view.files)

    def test_record_requires_commits(self, review_service, git_repo):
        with pytest.raises(ValidationError):
            review_service.record(str(git_repo), "feature", "main", "", "", "app.py", "approved")

    def test_record_rejects_unknown_decision(self, review_service, git_repo):
        pinned = _pinned(review_service, str(git_repo))
        with pytest.raises(ValidationError):
            review_service.record(str(git_repo), "feature", "main", *pinned, "app.py", "maybe")

    def test_to_dict(self, review_service, git_repo):
        data = review_service.review(str(git_repo), "feature", "main", "app.py").to_dict()

        assert data["files"][0] == {"path": "app.py", "status": "unreviewed"}
        assert data["selected_file"]["path"] == "app.py"
        assert data["selected_file"]["previous"] is None
        assert data["selected_file"]["next"] == "docs/guide.md"
        lines = data["selected_file"]["hunks"][0]["lines"]
        assert {"kind": "+", "text": "print('world')", "old": None, "new": 2} in lines

    def test_ledger_written_to_configured_root(self, review_service, review_config, git_repo):
        repo = str(git_repo)
        review_service.record(
            repo, "feature", "main", *_pinned(review_service, repo), "app.py", "approved"
        )
        assert list(review_config.storage_root.rglob("review-state.json"))
        assert isinstance(review_service.store, JSONLedgerStore)

    def test_diffs_use_pinned_commits(self, review_config, git_repo):
        """The file list and hunks come from the same commits the ledger is keyed on."""
        repo = str(git_repo)
        calls = []
        store = MemoryLedgerStore()
        store.add_repository(repo)
        service = ReviewService(
            store, review_config, lambda path: RecordingRepository(path, review_config, calls)
        )
        source_commit, target_commit = _pinned(service, repo)

        view = service.review(repo, "feature", "main", "app.py")

        assert calls == [
            ("diff", source_commit, target_commit),
            ("file_diff", source_commit, target_commit, "app.py"),
        ]
        assert [f.path for f in view.files] == ["app.py", "docs/guide.md", "notes.txt"]
        assert view.hunks[0].added == 1

    @pytest.mark.parametrize("bad_commit", ["../../../{name}-escaped", "..", "main"])
    def test_record_rejects_non_hash_commit(self, review_service, git_repo, temp_dir, bad_commit):
        """Commit ids from the client never become directories outside the store."""
        repo = str(git_repo)
        _, target_commit = _pinned(review_service, repo)
        bad_commit = bad_commit.format(name=temp_dir.name)

        with pytest.raises(ValidationError):
            review_service.record(
                repo, "feature", "main", bad_commit, target_commit, "app.py", "approved"
            )

        assert not (temp_dir.parent / f"{temp_dir.name}-escaped").exists()
        assert list(temp_dir.rglob("review-state.json")) == []
        assert review_service.store._locks == {}
