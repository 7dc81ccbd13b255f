"""
File manager module for FIFM.

Directory listing, cursor, pending copy/cut, filesystem executor, navigation
and the session that ties them together.
"""

from .lister import DirectoryEntry, DirectorySnapshot, EntryKind, list_directory
from .cursor import SelectionCursor
from .pending import OperationKind, PendingOperation
from .executor import FileSystemExecutor
from .navigator import Navigator, WorkingDirectory
from .session import Session

__all__ = [
    'DirectoryEntry',
    'DirectorySnapshot',
    'EntryKind',
    'list_directory',
    'SelectionCursor',
    'OperationKind',
    'PendingOperation',
    'FileSystemExecutor',
    'Navigator',
    'WorkingDirectory',
    'Session',
]
