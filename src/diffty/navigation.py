"""Sequential navigation over the ordered file list."""

from typing import Dict, List, Optional, Sequence, Tuple, Union

from .models import ChangedFile, FileStatus


class NavigationIndex:
    """Previous/next lookup for keyboard-driven review."""

    def __init__(self, files: Sequence[Union[ChangedFile, str]]):
        self._files: List[ChangedFile] = [
            f if isinstance(f, ChangedFile) else ChangedFile(f, FileStatus.UNREVIEWED)
            for f in files
        ]
        self._positions: Dict[str, int] = {}
        for index, changed in enumerate(self._files):
            self._positions.setdefault(changed.path, index)

    def __len__(self) -> int:
        return len(self._files)

    def neighbours(self, current: str) -> Tuple[Optional[str], Optional[str]]:
        """Return the paths before and after ``current``; ``None`` at either end."""
        index = self._positions.get(current)
        if index is None:
            return None, None

        previous = self._files[index - 1].path if index > 0 else None
        following = self._files[index + 1].path if index < len(self._files) - 1 else None
        return previous, following

    def next_path(self, current: str) -> Optional[str]:
        return self.neighbours(current)[1]

    def previous_path(self, current: str) -> Optional[str]:
        return self.neighbours(current)[0]

    def first_unreviewed(self) -> Optional[str]:
        for changed in self._files:
            if changed.status is FileStatus.UNREVIEWED:
                return changed.path
        return None
