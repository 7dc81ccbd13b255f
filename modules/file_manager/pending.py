"""Pending copy/cut intent, waiting for a paste."""

import os
from dataclasses import dataclass
from enum import Enum


class OperationKind(Enum):
    IDLE = "idle"
    COPY = "copy"
    CUT = "cut"


@dataclass(frozen=True)
class PendingOperation:
    """
    What the next paste will do.

    A paste does not clear it: the same source can be pasted again until a
    new copy/cut or a successful delete replaces it.
    """
    kind: OperationKind = OperationKind.IDLE
    source_path: str = ""
    source_name: str = ""

    @classmethod
    def idle(cls) -> "PendingOperation":
        return cls()

    @classmethod
    def capture(cls, kind: OperationKind, cwd: str, name: str) -> "PendingOperation":
        """Record ``name`` in ``cwd`` as the source of a copy or cut."""
        if kind is OperationKind.IDLE:
            raise ValueError("Cannot capture a source for an idle operation")
        return cls(kind=kind, source_path=os.path.join(cwd, name), source_name=name)

    @property
    def is_idle(self) -> bool:
        return self.kind is OperationKind.IDLE
