"""
Directory listing for FIFM.

Reads a directory once and produces a snapshot carrying both the bare names
and the ``ls -l`` style detail rows, so the two views always line up.
"""

import os
import stat
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from core.config import PARENT_ENTRY
from core.errors import ListingError

try:
    import grp
    import pwd
except ImportError:  # no user database on Windows
    grp = None
    pwd = None


class EntryKind(Enum):
    """What an entry is, with symlinks followed."""
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True)
class DirectoryEntry:
    """One row of a directory listing."""
    name: str
    kind: EntryKind
    detail_row: str
    size: int = 0
    mode: int = 0
    mtime: float = 0.0

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE


@dataclass(frozen=True)
class DirectorySnapshot:
    """Point-in-time listing of one directory."""
    path: str
    entries: Tuple[DirectoryEntry, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def names(self) -> List[str]:
        return [e.name for e in self.entries]

    @property
    def detail_rows(self) -> List[str]:
        return [e.detail_row for e in self.entries]

    def entry_at(self, index: Optional[int]) -> Optional[DirectoryEntry]:
        if index is None or not 0 <= index < len(self.entries):
            return None
        return self.entries[index]

    def index_of(self, name: str) -> Optional[int]:
        for i, entry in enumerate(self.entries):
            if entry.name == name:
                return i
        return None


def _owner_name(uid: int) -> str:
    if pwd is None:
        return str(uid)
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


def _group_name(gid: int) -> str:
    if grp is None:
        return str(gid)
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)


def _format_mtime(mtime: float) -> str:
    stamp = datetime.fromtimestamp(mtime)
    # ls shows the year instead of the time for entries older than ~6 months
    if abs((datetime.now() - stamp).days) > 182:
        return stamp.strftime("%b %d  %Y")
    return stamp.strftime("%b %d %H:%M")


def format_detail_row(name: str, st: os.stat_result, link_target: Optional[str] = None) -> str:
    """Render one ``ls -l`` style row for an entry."""
    row = "{mode} {nlink:>3} {owner:<8} {group:<8} {size:>10} {mtime} {name}".format(
        mode=stat.filemode(st.st_mode),
        nlink=st.st_nlink,
        owner=_owner_name(st.st_uid),
        group=_group_name(st.st_gid),
        size=st.st_size,
        mtime=_format_mtime(st.st_mtime),
        name=name,
    )
    if link_target is not None:
        row += f" -> {link_target}"
    return row


def _kind_of(path: str) -> EntryKind:
    if os.path.isdir(path):
        return EntryKind.DIRECTORY
    if os.path.isfile(path):
        return EntryKind.FILE
    return EntryKind.OTHER


def build_entry(directory: str, name: str) -> DirectoryEntry:
    """
    Stat one entry and build its DirectoryEntry.

    Entries that vanish or cannot be stat'ed still produce a row, as OTHER
    with a placeholder detail row, so no enumerated name is dropped.
    """
    path = os.path.join(directory, name)
    try:
        st = os.lstat(path)
    except OSError:
        return DirectoryEntry(name=name, kind=EntryKind.OTHER, detail_row=f"?????????? {name}")

    link_target = None
    if stat.S_ISLNK(st.st_mode):
        try:
            link_target = os.readlink(path)
        except OSError:
            link_target = "?"

    return DirectoryEntry(
        name=name,
        kind=_kind_of(path),
        detail_row=format_detail_row(name, st, link_target),
        size=st.st_size,
        mode=st.st_mode,
        mtime=st.st_mtime,
    )


def _sort_key(entry: DirectoryEntry):
    return (entry.name != PARENT_ENTRY, entry.name.lower(), entry.name)


def list_directory(path: str, include_parent_entry: bool = True) -> DirectorySnapshot:
    """
    List a directory into a snapshot.

    Args:
        path: Directory to list
        include_parent_entry: Whether to include the '..' entry

    Returns:
        DirectorySnapshot with entries sorted '..' first, then by name

    Raises:
        ListingError: If the directory cannot be enumerated
    """
    directory = os.path.abspath(path)
    entries: List[DirectoryEntry] = []

    try:
        with os.scandir(directory) as it:
            for child in it:
                # scandir never yields '.' or '..'
                entries.append(build_entry(directory, child.name))
    except OSError as e:
        raise ListingError(directory, e.strerror or str(e)) from e

    if include_parent_entry:
        entries.append(build_entry(directory, PARENT_ENTRY))

    entries.sort(key=_sort_key)
    return DirectorySnapshot(path=directory, entries=tuple(entries))


def count_name_matches(path: str, needle: str) -> int:
    """
    Count entries of ``path`` whose name contains ``needle``.

    Raises:
        ListingError: If the directory cannot be enumerated
    """
    try:
        with os.scandir(path) as it:
            return sum(1 for child in it if needle in child.name)
    except OSError as e:
        raise ListingError(path, e.strerror or str(e)) from e
