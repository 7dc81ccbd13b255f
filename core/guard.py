"""
Operation guard for FIFM.

Every copy, cut, paste and delete goes through this check before anything
touches the filesystem. The parent-reference entry '..' is always protected.
"""

from typing import Iterable, List, Optional

from .config import PARENT_ENTRY
from .errors import ForbiddenError
from .logger import AuditLogger, ActionType, ActionStatus


class OperationGuard:
    """Rejects operations whose selected entry is protected."""

    def __init__(
        self,
        protected_names: Optional[Iterable[str]] = None,
        logger: Optional[AuditLogger] = None
    ):
        """
        Initialize the guard.

        Args:
            protected_names: Entry names that may never be operated on
            logger: AuditLogger that records denials
        """
        self.protected_names: List[str] = [PARENT_ENTRY]
        for name in protected_names or ():
            if name not in self.protected_names:
                self.protected_names.append(name)
        self.logger = logger

    def is_protected(self, name: Optional[str]) -> bool:
        return name is not None and name in self.protected_names

    def check(self, operation: str, name: Optional[str], cwd: str) -> None:
        """
        Raise ForbiddenError if ``name`` is protected.

        Args:
            operation: Operation being attempted ("copy", "cut", "paste", "delete")
            name: Selected entry name, or None when nothing is selected
            cwd: Working directory the name belongs to

        Raises:
            ForbiddenError: If the entry is protected
        """
        if not self.is_protected(name):
            return

        if self.logger is not None:
            self.logger.log_action(
                action_type=ActionType.GUARD,
                description=f"BLOCKED: {operation} on '{name}'",
                status=ActionStatus.DENIED,
                result="Protected entry",
                metadata={"operation": operation, "name": name, "cwd": cwd}
            )
        raise ForbiddenError(name)

    def protect(self, name: str) -> None:
        """Add a name to the protected list."""
        if name not in self.protected_names:
            self.protected_names.append(name)
