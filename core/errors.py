"""
Error types for FIFM.

Listing failures propagate to the caller. Everything under OperationError is
recovered at the session boundary and shown in the status line.
"""


class FifmError(Exception):
    """Base class for all FIFM errors."""


class ConfigError(FifmError):
    """Configuration file holds an invalid value."""


class ListingError(FifmError):
    """A directory could not be enumerated."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot list {path}: {reason}")


class MetadataError(FifmError):
    """The pending source is neither a file nor a directory."""

    def __init__(self, path: str):
        self.path = path
        super().__init__("Error metadata")


class ForbiddenError(FifmError):
    """Operation attempted on a protected entry such as '..'."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Forbidden: cannot operate on '{name}'")


class OperationError(FifmError):
    """A copy, move or trash call failed in the filesystem."""


class CopyError(OperationError):
    pass


class MoveError(OperationError):
    pass


class TrashError(OperationError):
    pass
