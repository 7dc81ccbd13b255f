"""
Audit Logger for FIFM.

Append-only record of every file operation, guard denial and directory change,
with timestamps and outcomes, for reviewing what the browser did to the disk.
"""

import json
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Dict, Any
from enum import Enum


class ActionType(Enum):
    """Types of actions that can be logged."""
    NAVIGATE = "navigate"
    COPY = "copy"
    MOVE = "move"
    TRASH = "trash"
    GUARD = "guard"


class ActionStatus(Enum):
    """Status of an action execution."""
    PENDING = "pending"
    EXECUTED = "executed"
    FAILED = "failed"
    DENIED = "denied"


@dataclass
class AuditEntry:
    """Represents a single audit log entry."""
    timestamp: str
    action_type: str
    action_description: str
    status: str
    result: Optional[str]
    metadata: Dict[str, Any]

    @classmethod
    def create(
        cls,
        action_type: ActionType,
        action_description: str,
        status: ActionStatus = ActionStatus.PENDING,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> "AuditEntry":
        """Factory method to create an audit entry with current timestamp."""
        return cls(
            timestamp=datetime.now().isoformat(),
            action_type=action_type.value,
            action_description=action_description,
            status=status.value,
            result=result,
            metadata=metadata or {}
        )

    def to_json(self) -> str:
        """Convert entry to JSON string."""
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> "AuditEntry":
        """Create entry from JSON string."""
        data = json.loads(json_str)
        return cls(**data)


class AuditLogger:
    """
    Append-only audit logger for FIFM.

    Entries go to a JSONL file. A disabled logger still builds and returns
    entries but never touches the disk.
    """

    def __init__(self, log_path: str = "~/.fifm/audit_log.jsonl", enabled: bool = True):
        """
        Initialize the audit logger.

        Args:
            log_path: Path to the JSONL log file
            enabled: When False, entries are not written
        """
        self.log_path = Path(log_path).expanduser()
        self.enabled = enabled
        self.last_write_error: Optional[OSError] = None
        if self.enabled:
            try:
                self._ensure_log_directory()
            except OSError as e:
                self.last_write_error = e

    def _ensure_log_directory(self) -> None:
        """Create the log directory and file if they don't exist."""
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.log_path.exists():
            self.log_path.touch()

    def log(self, entry: AuditEntry) -> None:
        """
        Append an audit entry to the log.

        A failed write is kept in ``last_write_error`` instead of being raised.

        Args:
            entry: The AuditEntry to log
        """
        if not self.enabled:
            return
        try:
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json() + "\n")
        except OSError as e:
            self.last_write_error = e
            return
        self.last_write_error = None

    def log_action(
        self,
        action_type: ActionType,
        description: str,
        status: ActionStatus = ActionStatus.PENDING,
        result: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> AuditEntry:
        """
        Convenience method to create and log an entry in one call.

        Returns the created AuditEntry.
        """
        entry = AuditEntry.create(
            action_type=action_type,
            action_description=description,
            status=status,
            result=result,
            metadata=metadata
        )
        self.log(entry)
        return entry

    def _read_entries(self) -> List[AuditEntry]:
        if not self.enabled or not self.log_path.is_file():
            return []

        entries = []
        with open(self.log_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(AuditEntry.from_json(line))
                except (json.JSONDecodeError, TypeError):
                    # Skip lines written by an incompatible version
                    continue
        return entries

    def get_recent(self, limit: int = 100) -> List[AuditEntry]:
        """
        Get the most recent audit entries.

        Args:
            limit: Maximum number of entries to return

        Returns:
            List of AuditEntry objects, most recent first
        """
        entries = self._read_entries()
        return list(reversed(entries[-limit:])) if limit > 0 else []

    def get_by_date(self, date: datetime) -> List[AuditEntry]:
        """Get all audit entries for a specific date."""
        date_str = date.strftime("%Y-%m-%d")
        return [e for e in self._read_entries() if e.timestamp.startswith(date_str)]

    def get_by_action_type(self, action_type: ActionType, limit: int = 100) -> List[AuditEntry]:
        """
        Get audit entries filtered by action type.

        Args:
            action_type: The ActionType to filter by
            limit: Maximum number of entries to return

        Returns:
            List of matching AuditEntry objects, oldest first
        """
        matches = [e for e in self._read_entries() if e.action_type == action_type.value]
        return matches[:limit]

    def get_failed_actions(self, limit: int = 50) -> List[AuditEntry]:
        """
        Get actions that failed or were denied by the guard.

        Useful for finding out why a paste or delete did nothing.
        """
        wanted = (ActionStatus.FAILED.value, ActionStatus.DENIED.value)
        matches = [e for e in self._read_entries() if e.status in wanted]
        return matches[:limit]

    def export(self, format: str = "json") -> str:
        """
        Export the entire audit log.

        Args:
            format: Export format ("json" or "csv")

        Returns:
            String containing the exported data
        """
        entries = self.get_recent(limit=10000)

        if format == "json":
            return json.dumps([asdict(e) for e in entries], indent=2)
        elif format == "csv":
            lines = ["timestamp,action_type,action_description,status,result"]
            for e in entries:
                lines.append(f'"{e.timestamp}","{e.action_type}","{e.action_description}","{e.status}","{e.result or ""}"')
            return "\n".join(lines)
        else:
            raise ValueError(f"Unsupported export format: {format}")
