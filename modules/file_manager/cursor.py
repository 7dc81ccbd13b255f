"""Selection cursor over the current snapshot's entries."""

from typing import Optional

from .lister import DirectorySnapshot


class SelectionCursor:
    """
    Highlighted index into a listing of ``length`` entries.

    Movement wraps at both ends. An unset cursor jumps to the first entry on
    any movement. Nothing here touches the filesystem.
    """

    def __init__(self, length: int = 0, index: Optional[int] = None):
        self.length = length
        self.index = index if index is not None and 0 <= index < length else None

    def next(self) -> Optional[int]:
        if self.length == 0:
            self.index = None
        elif self.index is None or self.index >= self.length - 1:
            self.index = 0
        else:
            self.index += 1
        return self.index

    def previous(self) -> Optional[int]:
        if self.length == 0:
            self.index = None
        elif self.index is None:
            self.index = 0
        elif self.index == 0:
            self.index = self.length - 1
        else:
            self.index -= 1
        return self.index

    def unselect(self) -> None:
        self.index = None

    def reset_after_refresh(self, snapshot: DirectorySnapshot) -> Optional[int]:
        """Point at the first entry of a fresh snapshot, or nothing if it is empty."""
        self.length = len(snapshot)
        self.index = 0 if self.length else None
        return self.index
