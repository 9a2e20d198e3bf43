"""Unified diff parsing for diffty."""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)

FILE_HEADER_PREFIX = "diff --git "
DESTINATION_MARKER = "b/"


@dataclass
class DiffLine:
    """A single body line of a hunk with its position on each side."""

    kind: str  # "+", "-", " " or "\\"
    text: str
    old_number: Optional[int]
    new_number: Optional[int]


@dataclass
class DiffHunk:
    """Represents a single diff hunk."""

    header: str
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    context: str
    added: int = 0
    deleted: int = 0
    lines: List[DiffLine] = field(default_factory=list)


class ChangeSetParser:
    """Extracts changed files and hunks from unified diff text."""

    def __init__(self):
        """Initialize parser."""
        self.hunk_header_pattern = re.compile(
            r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@ ?(.*)$"
        )

    def parse(self, diff_text: str) -> List[str]:
        """Return changed file paths in the order their headers appear.

        A header counts only when it has at least four space-separated tokens
        and the fourth starts with ``b/``. Anything else is skipped.
        """
        paths = []
        for line in diff_text.split("\n"):
            if not line.startswith(FILE_HEADER_PREFIX):
                continue

            parts = line.split(" ")
            if len(parts) < 4 or not parts[3].startswith(DESTINATION_MARKER):
                logger.debug("Skipping malformed diff header", extra={"header": line})
                continue

            paths.append(parts[3][len(DESTINATION_MARKER):])

        logger.debug("Parsed changed files from diff", extra={"files": len(paths)})
        return paths

    def split_hunks(self, file_diff: str) -> List[DiffHunk]:
        """Split a single file's unified diff into numbered hunks."""
        hunks: List[DiffHunk] = []
        current: Optional[DiffHunk] = None
        old_number = new_number = 0

        for line in file_diff.split("\n"):
            header_match = self.hunk_header_pattern.match(line)
            if header_match:
                current = self._create_hunk(line, header_match)
                hunks.append(current)
                old_number = current.old_start
                new_number = current.new_start
                continue

            if current is None or not line:
                continue

            kind, text = line[0], line[1:]
            if kind == "+":
                current.added += 1
                current.lines.append(DiffLine(kind, text, None, new_number))
                new_number += 1
            elif kind == "-":
                current.deleted += 1
                current.lines.append(DiffLine(kind, text, old_number, None))
                old_number += 1
            elif kind == " ":
                current.lines.append(DiffLine(kind, text, old_number, new_number))
                old_number += 1
                new_number += 1
            elif kind == "\\":
                # "\ No newline at end of file"
                current.lines.append(DiffLine(kind, text, None, None))
            else:
                # Next file's headers in a multi-file diff
                current = None

        logger.debug("Split unified diff into %s hunks", len(hunks))
        return hunks

    def _create_hunk(self, header: str, header_match: re.Match) -> DiffHunk:
        return DiffHunk(
            header=header,
            old_start=int(header_match.group(1)),
            old_lines=int(header_match.group(2) or "1"),
            new_start=int(header_match.group(3)),
            new_lines=int(header_match.group(4) or "1"),
            context=header_match.group(5).strip(),
        )
