"""
Filesystem executor for FIFM.

Performs the copy, move and trash-delete behind paste and delete, with
destination collision handling and the protected-entry guard.
"""

import os
import shutil
from typing import Callable, Optional

from send2trash import send2trash

from core.errors import CopyError, MetadataError, MoveError, TrashError
from core.guard import OperationGuard
from core.logger import AuditLogger, ActionType, ActionStatus
from .lister import count_name_matches
from .pending import OperationKind, PendingOperation


COPIED_FILE = "Copied file successfully"
COPIED_DIRECTORY = "Copied directory successfully"
MOVED_FILE = "Moved file successfully"
MOVED_DIRECTORY = "Moved directory successfully"


def _is_within(path: str, parent: str) -> bool:
    path = os.path.realpath(path)
    parent = os.path.realpath(parent)
    try:
        return os.path.commonpath([path, parent]) == parent
    except ValueError:
        # different drives
        return False


class FileSystemExecutor:
    """Copy, move and trash operations with guard and audit logging."""

    def __init__(
        self,
        guard: OperationGuard,
        logger: AuditLogger,
        collision_naming: str = "count",
        trash_func: Optional[Callable[[str], None]] = None
    ):
        """
        Initialize the executor.

        Args:
            guard: Guard consulted before every operation
            logger: Audit logger instance
            collision_naming: "count" (match-count heuristic) or "probe" (first unused name)
            trash_func: Recoverable delete, defaults to send2trash
        """
        self.guard = guard
        self.logger = logger
        self.collision_naming = collision_naming
        self.trash_func = trash_func or send2trash

    def alternate_name(self, cwd: str, name: str) -> str:
        """
        Build a "stem (n).ext" name for pasting ``name`` next to itself.

        With the "count" strategy, n is the number of entries in ``cwd`` whose
        name contains the stem. This reproduces the classic "Copy (n)" naming
        but does not guarantee the result is unused: an existing entry with
        the synthesized name is overwritten. "probe" picks the first unused n.
        """
        stem, ext = os.path.splitext(name)
        if self.collision_naming == "probe":
            n = 1
            while os.path.lexists(os.path.join(cwd, f"{stem} ({n}){ext}")):
                n += 1
        else:
            n = count_name_matches(cwd, stem)
        return f"{stem} ({n}){ext}"

    def resolve_destination(self, pending: PendingOperation, cwd: str, source_is_dir: bool) -> str:
        """
        Work out where a paste writes to.

        Directories go to ``cwd`` under their own name. Files go to
        ``cwd/source_name``, renamed when that is the source itself.
        """
        candidate = os.path.join(cwd, pending.source_name)
        if source_is_dir:
            return candidate
        if os.path.normpath(candidate) == os.path.normpath(pending.source_path):
            candidate = os.path.join(cwd, self.alternate_name(cwd, pending.source_name))
        return candidate

    def paste(self, pending: PendingOperation, selected_name: Optional[str], cwd: str) -> str:
        """
        Execute a pending copy or cut into ``cwd``.

        Args:
            pending: The pending operation (must not be idle)
            selected_name: Currently selected entry, or None
            cwd: Directory to paste into

        Returns:
            Confirmation message for the status line

        Raises:
            ForbiddenError: If the selected entry is protected
            MetadataError: If the source is neither a file nor a directory
            CopyError, MoveError: If the filesystem operation fails
        """
        if pending.is_idle:
            raise ValueError("Nothing to paste")

        self.guard.check("paste", selected_name, cwd)

        if pending.kind is OperationKind.COPY:
            action_type = ActionType.COPY
            error_cls = CopyError
        else:
            action_type = ActionType.MOVE
            error_cls = MoveError

        source = pending.source_path
        if os.path.isdir(source):
            source_is_dir = True
        elif os.path.isfile(source):
            source_is_dir = False
        else:
            error = MetadataError(source)
            self.logger.log_action(
                action_type=action_type,
                description=f"Failed to {action_type.value} {source}: not a file or directory",
                status=ActionStatus.FAILED,
                result=f"Error: {error}",
                metadata={"source": source, "destination": cwd}
            )
            raise error

        destination = self.resolve_destination(pending, cwd, source_is_dir)

        try:
            if pending.kind is OperationKind.COPY:
                message = self._copy(source, destination, source_is_dir)
            else:
                message = self._move(source, destination, source_is_dir)
        except (OSError, error_cls) as e:
            self.logger.log_action(
                action_type=action_type,
                description=f"Failed to {action_type.value} {source} to {destination}",
                status=ActionStatus.FAILED,
                result=f"Error: {e}",
                metadata={"source": source, "destination": destination}
            )
            if isinstance(e, error_cls):
                raise
            raise error_cls(f"Error {'copying' if action_type is ActionType.COPY else 'moving'}: {e}") from e

        self.logger.log_action(
            action_type=action_type,
            description=f"{message}: {source} -> {destination}",
            status=ActionStatus.EXECUTED,
            result=message,
            metadata={"source": source, "destination": destination, "is_dir": source_is_dir}
        )
        return message

    def _copy(self, source: str, destination: str, source_is_dir: bool) -> str:
        if source_is_dir:
            if os.path.realpath(source) == os.path.realpath(destination):
                raise CopyError(f"Cannot copy {source} onto itself")
            if _is_within(destination, source):
                raise CopyError(f"Cannot copy {source} into itself")
            shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
            return COPIED_DIRECTORY

        if os.path.isdir(destination):
            raise CopyError(f"Destination is a directory: {destination}")
        shutil.copy2(source, destination)
        return COPIED_FILE

    def _move(self, source: str, destination: str, source_is_dir: bool) -> str:
        if source_is_dir:
            if os.path.realpath(source) == os.path.realpath(destination):
                raise MoveError(f"Cannot move {source} onto itself")
            if _is_within(destination, source):
                raise MoveError(f"Cannot move {source} into itself")
            if os.path.isdir(destination):
                # merge into the existing directory, overwriting files
                shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
                shutil.rmtree(source)
            elif os.path.lexists(destination):
                raise MoveError(f"Destination exists and is not a directory: {destination}")
            else:
                shutil.move(source, destination)
            return MOVED_DIRECTORY

        if os.path.isdir(destination):
            raise MoveError(f"Destination is a directory: {destination}")
        shutil.move(source, destination)
        return MOVED_FILE

    def trash(self, selected_name: Optional[str], cwd: str) -> str:
        """
        Move the selected entry to the OS trash.

        Returns:
            Confirmation message for the status line

        Raises:
            ForbiddenError: If the selected entry is protected
            TrashError: If the entry cannot be trashed
        """
        self.guard.check("delete", selected_name, cwd)
        if selected_name is None:
            raise TrashError("Nothing selected")

        path = os.path.join(cwd, selected_name)
        try:
            if not os.path.lexists(path):
                raise FileNotFoundError(f"No such file or directory: {path}")
            self.trash_func(path)
        except OSError as e:
            self.logger.log_action(
                action_type=ActionType.TRASH,
                description=f"Failed to trash {path}",
                status=ActionStatus.FAILED,
                result=f"Error: {e}",
                metadata={"path": path}
            )
            raise TrashError(f"Error moving to trash: {e}") from e

        message = f"Moved {selected_name} successfully to Trash"
        self.logger.log_action(
            action_type=ActionType.TRASH,
            description=f"Trashed {path}",
            status=ActionStatus.EXECUTED,
            result=message,
            metadata={"path": path}
        )
        return message
