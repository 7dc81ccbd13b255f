# FIFM - Core Module
"""
Core infrastructure for FIFM, the Friendly Interactive File Manager.
Configuration, error types, the audit logger and the operation guard.
"""

from .config import Config, load_config
from .errors import (
    FifmError,
    ConfigError,
    ListingError,
    MetadataError,
    ForbiddenError,
    OperationError,
    CopyError,
    MoveError,
    TrashError,
)
from .guard import OperationGuard
from .logger import AuditLogger, AuditEntry, ActionType, ActionStatus

__all__ = [
    "Config",
    "load_config",
    "FifmError",
    "ConfigError",
    "ListingError",
    "MetadataError",
    "ForbiddenError",
    "OperationError",
    "CopyError",
    "MoveError",
    "TrashError",
    "OperationGuard",
    "AuditLogger",
    "AuditEntry",
    "ActionType",
    "ActionStatus",
]

__version__ = "0.2.0"
