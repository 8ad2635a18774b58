"""Rejection notifications.

Nothing in the engine raises for bad coordinates, refused writes or odd
paste text. The operation is dropped and a Rejection describes why.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RejectionKind(Enum):
    """Error taxonomy for dropped operations."""

    BOUNDS = "bounds"  # stale or out-of-range row/column
    VALIDATION = "validation"  # refused by the row adapter
    MALFORMED = "malformed"  # external input with an irregular shape


@dataclass(frozen=True)
class Rejection:
    """One dropped operation.

    Attributes:
        kind: Category of the failure.
        operation: Name of the operation that was dropped.
        detail: Human-readable explanation.
    """

    kind: RejectionKind
    operation: str
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.operation}: {self.kind.value} ({self.detail})"
        return f"{self.operation}: {self.kind.value}"
