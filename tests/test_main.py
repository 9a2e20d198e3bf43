"""Tests for main CLI module."""

import json
import shutil

import pytest

from diffty.main import create_config, create_parser, main


class TestCLI:
    """Test CLI functionality."""

    def test_create_parser(self):
        """Test argument parser creation."""
        parser = create_parser()

        with pytest.raises(SystemExit):
            parser.parse_args([])

        args = parser.parse_args([
            "status",
            "--repo", "/path/to/repo",
            "--source", "feature",
            "--target", "main",
        ])

        assert args.command == "status"
        assert args.repo == "/path/to/repo"
        assert args.source == "feature"
        assert args.target == "main"
        assert args.file is None

    def test_record_requires_known_status(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args([
                "record",
                "--repo", "/r", "--source", "a", "--target", "b",
                "--file", "x", "--status", "lgtm",
            ])

    def test_serve_defaults(self):
        args = create_parser().parse_args(["serve"])
        assert args.host == "127.0.0.1"
        assert args.port == 10101

    def test_create_config(self, temp_dir):
        args = create_parser().parse_args(["--home", str(temp_dir), "serve", "--port", "9999"])
        config = create_config(args)

        assert config.storage_root == temp_dir
        assert config.port == 9999

    def test_repos_empty(self, temp_dir, capsys):
        assert main(["--home", str(temp_dir), "repos"]) == 0
        assert json.loads(capsys.readouterr().out) == {"repositories": []}

    def test_add_invalid_repository(self, temp_dir, capsys):
        exit_code = main(["--home", str(temp_dir / "store"), "add", str(temp_dir)])

        assert exit_code == 1
        result = json.loads(capsys.readouterr().out)
        assert result["ok"] is False
        assert result["error"]["code"] == "INVALID_REPOSITORY"


@pytest.mark.integration
@pytest.mark.skipif(shutil.which("git") is None, reason="git command not available")
class TestCLIWorkflow:
    """Drive the CLI against a real repository."""

    def test_add_record_status(self, temp_dir, git_repo, capsys):
        home = str(temp_dir / "store")
        repo = str(git_repo)
        comparison = ["--repo", repo, "--source", "feature", "--target", "main"]

        assert main(["--home", home, "add", repo]) == 0
        capsys.readouterr()

        assert main(["--home", home, "record", *comparison, "--file", "notes.txt",
                     "--status", "skipped"]) == 0
        assert json.loads(capsys.readouterr().out) == {"file": "notes.txt", "status": "skipped"}

        assert main(["--home", home, "status", *comparison]) == 0
        files = json.loads(capsys.readouterr().out)["files"]
        assert files == [
            {"path": "app.py", "status": "unreviewed"},
            {"path": "docs/guide.md", "status": "unreviewed"},
            {"path": "notes.txt", "status": "skipped"},
        ]

    def test_status_unregistered(self, temp_dir, git_repo, capsys):
        exit_code = main([
            "--home", str(temp_dir / "store"), "status",
            "--repo", str(git_repo), "--source", "feature", "--target", "main",
        ])

        assert exit_code == 1
        assert json.loads(capsys.readouterr().out)["error"]["code"] == "REPOSITORY_NOT_FOUND"
