"""Error definitions and handling for diffty."""

from typing import Any, Dict, Optional


class DifftyError(Exception):
    """Base exception for diffty errors."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with code, message, and optional details."""
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        result = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(DifftyError):
    """A precondition on caller-supplied data was violated."""

    def __init__(self, reason: str, **details: Any):
        super().__init__(
            code="VALIDATION_FAILED",
            message=f"Validation failed: {reason}",
            details={"reason": reason, **details},
        )


class StorageFaultError(DifftyError):
    """Reading or writing a persisted document failed."""

    def __init__(self, location: str, reason: str):
        super().__init__(
            code="STORAGE_FAULT",
            message=f"Storage failure at {location}: {reason}",
            details={"location": location, "reason": reason},
        )


class IntegrityFaultError(DifftyError):
    """A persisted ledger holds a value outside its closed set."""

    def __init__(self, location: str, field: str, value: Any):
        super().__init__(
            code="INTEGRITY_FAULT",
            message=f"Invalid {field} {value!r} in {location}",
            details={"location": location, "field": field, "value": value},
        )


class BranchNotFoundError(DifftyError):
    """Branch does not resolve to a commit."""

    def __init__(self, branch: str, repository: str):
        super().__init__(
            code="BRANCH_NOT_FOUND",
            message=f"Branch not found: {branch}",
            details={"branch": branch, "repository": repository},
        )


class RepositoryNotFoundError(DifftyError):
    """Repository is not registered."""

    def __init__(self, repository: str):
        super().__init__(
            code="REPOSITORY_NOT_FOUND",
            message=f"Repository not registered: {repository}",
            details={"repository": repository},
        )


class InvalidRepositoryError(DifftyError):
    """Path is not a git working tree."""

    def __init__(self, path: str):
        super().__init__(
            code="INVALID_REPOSITORY",
            message=f"Not a valid git repository: {path}",
            details={"path": path},
        )


class GitCommandError(DifftyError):
    """A git invocation exited with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str):
        super().__init__(
            code="GIT_COMMAND_FAILED",
            message=f"git {command} failed with exit code {returncode}",
            details={"command": command, "returncode": returncode, "stderr": stderr},
        )


class GitTimeoutError(DifftyError):
    """A git invocation did not finish in time."""

    def __init__(self, command: str, timeout_seconds: int):
        super().__init__(
            code="GIT_TIMEOUT",
            message=f"git {command} timed out after {timeout_seconds}s",
            details={"command": command, "timeout_seconds": timeout_seconds},
        )
