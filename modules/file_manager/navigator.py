"""
Working directory handling for FIFM.

The browser's current directory is an explicit value, never the process
working directory, so sessions can be driven in tests without chdir.
"""

import os
from dataclasses import dataclass
from typing import Optional

from core.logger import AuditLogger, ActionType, ActionStatus


class WorkingDirectory:
    """The directory a session is browsing."""

    def __init__(self, path: Optional[str] = None):
        self.path = os.path.realpath(path or os.getcwd())

    def __str__(self) -> str:
        return self.path

    def join(self, name: str) -> str:
        return os.path.join(self.path, name)

    def change(self, path: str) -> str:
        """
        Switch to ``path``.

        Raises:
            FileNotFoundError: If the path does not exist
            NotADirectoryError: If the path is not a directory
            PermissionError: If the directory cannot be entered
        """
        if not os.path.exists(path):
            raise FileNotFoundError("No such file or directory")
        if not os.path.isdir(path):
            raise NotADirectoryError("Not a directory")
        if not os.access(path, os.R_OK | os.X_OK):
            raise PermissionError("Permission denied")
        self.path = os.path.realpath(path)
        return self.path


@dataclass
class Activation:
    """Outcome of activating an entry."""
    entered: bool
    path: str
    error: Optional[str] = None


class Navigator:
    """Enters directories on activation."""

    def __init__(self, working_directory: WorkingDirectory, logger: AuditLogger):
        self.working_directory = working_directory
        self.logger = logger

    def activate(self, selected_name: Optional[str]) -> Activation:
        """
        Enter ``selected_name`` if it is a directory.

        Returns:
            Activation with ``entered`` False and the reason in ``error`` when
            the entry cannot be entered; the working directory is unchanged.
        """
        if selected_name is None:
            return Activation(entered=False, path=self.working_directory.path, error="Nothing selected")

        previous = self.working_directory.path
        target = self.working_directory.join(selected_name)
        try:
            new_path = self.working_directory.change(target)
        except OSError as e:
            return Activation(entered=False, path=previous, error=str(e))

        self.logger.log_action(
            action_type=ActionType.NAVIGATE,
            description=f"Entered {new_path}",
            status=ActionStatus.EXECUTED,
            metadata={"from": previous, "to": new_path}
        )
        return Activation(entered=True, path=new_path)

    def restore(self, path: str) -> None:
        """Put the working directory back after a failed re-list."""
        self.working_directory.path = path
