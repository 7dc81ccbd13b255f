"""
Browser session for FIFM.

The session owns the current snapshot, the cursor, the pending copy/cut and
the status line. Front ends read those and call the action methods; every
action runs to completion before returning.
"""

from typing import Callable, Optional

from core.config import Config
from core.errors import FifmError, ForbiddenError, ListingError
from core.guard import OperationGuard
from core.logger import AuditLogger
from .cursor import SelectionCursor
from .executor import FileSystemExecutor
from .lister import DirectorySnapshot, list_directory
from .navigator import Navigator, WorkingDirectory
from .pending import OperationKind, PendingOperation


NOTHING_SELECTED = "Nothing selected"
NOTHING_TO_PASTE = "Nothing to paste"


class Session:
    """
    State of one browser session.

    Mutations always follow the same order: capture the selection, change the
    filesystem, re-list the directory, reset the cursor. A failed mutation
    leaves snapshot, cursor and pending operation as they were and only
    updates the status line.
    """

    def __init__(
        self,
        start_path: Optional[str] = None,
        config: Optional[Config] = None,
        logger: Optional[AuditLogger] = None,
        trash_func: Optional[Callable[[str], None]] = None,
        lister: Callable[..., DirectorySnapshot] = list_directory
    ):
        """
        Initialize a session and list the start directory.

        Args:
            start_path: Directory to open (default: process working directory)
            config: Settings, defaults when omitted
            logger: Audit logger, built from config when omitted
            trash_func: Recoverable delete used by delete_selected
            lister: Directory listing function

        Raises:
            ListingError: If the start directory cannot be listed
        """
        self.config = config or Config()
        self.logger = logger or AuditLogger(
            log_path=self.config.audit_log_path,
            enabled=self.config.audit_enabled
        )
        self.guard = OperationGuard(self.config.protected_names, self.logger)
        self.executor = FileSystemExecutor(
            guard=self.guard,
            logger=self.logger,
            collision_naming=self.config.collision_naming,
            trash_func=trash_func
        )
        self.working_directory = WorkingDirectory(start_path)
        self.navigator = Navigator(self.working_directory, self.logger)
        self._lister = lister

        self.pending = PendingOperation.idle()
        self.last_error: Optional[FifmError] = None
        self.cursor = SelectionCursor()
        self.snapshot = DirectorySnapshot(path=self.cwd)
        self.refresh()
        self.status_message = self.cwd

    # -- read side -----------------------------------------------------

    @property
    def cwd(self) -> str:
        return self.working_directory.path

    @property
    def selection(self) -> Optional[int]:
        return self.cursor.index

    @property
    def selected_name(self) -> Optional[str]:
        entry = self.snapshot.entry_at(self.cursor.index)
        return entry.name if entry else None

    # -- internals -----------------------------------------------------

    def refresh(self) -> DirectorySnapshot:
        """
        Re-list the working directory and reset the cursor.

        Raises:
            ListingError: If the directory cannot be listed
        """
        self.snapshot = self._lister(self.cwd, include_parent_entry=self.config.show_parent_entry)
        self.cursor.reset_after_refresh(self.snapshot)
        return self.snapshot

    def _fail(self, error: FifmError) -> bool:
        self.last_error = error
        self.status_message = str(error)
        return False

    def _capture(self, kind: OperationKind) -> bool:
        self.last_error = None
        name = self.selected_name
        if name is None:
            self.status_message = NOTHING_SELECTED
            return False
        try:
            self.guard.check(kind.value, name, self.cwd)
        except ForbiddenError as e:
            return self._fail(e)

        self.pending = PendingOperation.capture(kind, self.cwd, name)
        verb = "Copied" if kind is OperationKind.COPY else "Cut"
        self.status_message = f"{verb} {self.pending.source_path}"
        return True

    # -- actions -------------------------------------------------------

    def move_cursor_next(self) -> Optional[int]:
        return self.cursor.next()

    def move_cursor_previous(self) -> Optional[int]:
        return self.cursor.previous()

    def clear_selection(self) -> None:
        self.cursor.unselect()
        self.status_message = self.cwd

    def begin_copy(self) -> bool:
        """Remember the selected entry as the source of a copy."""
        return self._capture(OperationKind.COPY)

    def begin_cut(self) -> bool:
        """Remember the selected entry as the source of a move."""
        return self._capture(OperationKind.CUT)

    def paste_if_pending(self) -> bool:
        """
        Run the pending copy or cut into the working directory.

        The pending operation stays in place afterwards so the same source
        can be pasted again.

        Returns:
            True if the filesystem was changed
        """
        self.last_error = None
        if self.pending.is_idle:
            self.status_message = NOTHING_TO_PASTE
            return False

        try:
            message = self.executor.paste(self.pending, self.selected_name, self.cwd)
        except FifmError as e:
            return self._fail(e)

        self.refresh()
        self.status_message = message
        return True

    def delete_selected(self) -> bool:
        """
        Move the selected entry to the trash right away.

        A successful delete also drops any pending copy/cut.

        Returns:
            True if the entry was trashed
        """
        self.last_error = None
        name = self.selected_name
        if name is None:
            self.status_message = NOTHING_SELECTED
            return False

        try:
            message = self.executor.trash(name, self.cwd)
        except FifmError as e:
            return self._fail(e)

        self.pending = PendingOperation.idle()
        self.refresh()
        self.status_message = message
        return True

    def activate_selected(self) -> bool:
        """
        Enter the selected entry if it is a directory.

        When it cannot be entered nothing changes, unless the config asks
        for navigation errors to be reported in the status line.

        Returns:
            True if the working directory changed

        Raises:
            ListingError: If the new directory cannot be listed; the working
                directory is restored first
        """
        self.last_error = None
        previous = self.cwd
        name = self.selected_name
        activation = self.navigator.activate(name)
        if not activation.entered:
            if self.config.report_navigation_errors and name is not None:
                self.status_message = f"Cannot enter {name}: {activation.error}"
            return False

        try:
            self.refresh()
        except ListingError:
            self.navigator.restore(previous)
            raise

        self.status_message = self.cwd
        return True
