"""Main CLI entry point for diffty."""

import argparse
import json
import os
import sys
from typing import Any, Optional

from . import settings
from .api.services import ReviewService
from .config import ReviewConfig
from .errors import DifftyError
from .logging_utils import configure_logging
from .models import Decision
from .store import JSONLedgerStore


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser."""
    parser = argparse.ArgumentParser(
        prog="diffty",
        description="Track review decisions on the files of a branch comparison",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  diffty serve --port 10101
  diffty add /path/to/repo
  diffty status --repo /path/to/repo --source feature --target main
  diffty record --repo /path/to/repo --source feature --target main \\
         --file src/app.py --status approved
        """,
    )
    parser.add_argument(
        "--home",
        help="Storage directory for ledgers (default: $DIFFTY_HOME or ~/.diffty)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        help="Log level (default: $LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=10101, help="Port to bind to (default: 10101)")

    add = subparsers.add_parser("add", help="Register a repository")
    add.add_argument("path", help="Path of a git working tree")

    subparsers.add_parser("repos", help="List registered repositories")

    status = subparsers.add_parser("status", help="Show files ordered by review status")
    _add_comparison_arguments(status)
    status.add_argument("--file", help="Also show this file's diff and neighbours")

    record = subparsers.add_parser("record", help="Record a whole-file decision")
    _add_comparison_arguments(record)
    record.add_argument("--file", required=True, help="Path of the reviewed file")
    record.add_argument(
        "--status",
        required=True,
        choices=[decision.value for decision in Decision],
        help="Decision to record",
    )

    return parser


def _add_comparison_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--repo", required=True, help="Registered repository path")
    parser.add_argument("--source", required=True, help="Branch being merged from")
    parser.add_argument("--target", required=True, help="Branch being merged into")


def create_config(args: argparse.Namespace) -> ReviewConfig:
    """Create configuration from command line arguments."""
    return ReviewConfig.from_env(
        storage_root=args.home,
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
    )


def create_service(config: ReviewConfig) -> ReviewService:
    return ReviewService(JSONLedgerStore(config.storage_root), config)


def run_command(args: argparse.Namespace, service: ReviewService) -> Any:
    """Execute a non-serving command and return its JSON-ready result."""
    if args.command == "add":
        return {"repository": service.add_repository(args.path)}

    if args.command == "repos":
        return {"repositories": service.list_repositories()}

    if args.command == "status":
        return service.review(args.repo, args.source, args.target, args.file).to_dict()

    if args.command == "record":
        source_commit, target_commit = service.resolve(args.repo, args.source, args.target)
        status, _ = service.record(
            args.repo,
            args.source,
            args.target,
            source_commit,
            target_commit,
            args.file,
            args.status,
        )
        return {"file": args.file, "status": status.value}

    raise ValueError(f"Unknown command: {args.command}")


def serve(config: ReviewConfig, log_level: Optional[str]) -> None:
    """Run the API with uvicorn."""
    import uvicorn

    # The app resolves its store from the environment
    os.environ["DIFFTY_HOME"] = str(config.storage_root)
    settings.get_storage_root.cache_clear()
    uvicorn.run(
        "diffty.api.app:app",
        host=config.host,
        port=config.port,
        log_level=(log_level or "info").lower(),
    )


def output_result(result: Any) -> None:
    print(json.dumps(result, indent=2, ensure_ascii=False))


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        config = create_config(args)

        if args.command == "serve":
            serve(config, args.log_level)
            return 0

        output_result(run_command(args, create_service(config)))
        return 0

    except DifftyError as e:
        output_result({"ok": False, "error": e.to_dict()})
        return 1

    except ValueError as e:
        output_result({"ok": False, "error": {"code": "INVALID_ARGUMENTS", "message": str(e)}})
        return 1


if __name__ == "__main__":
    sys.exit(main())
