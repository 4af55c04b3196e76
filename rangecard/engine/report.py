"""Batch-level accounting of computed, skipped and degraded shells."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class IssueKind(str, Enum):
    INVALID = "invalid"  # record skipped
    ERROR = "error"  # unexpected failure, record skipped
    DUPLICATE = "duplicate"  # definition shadowed or rejected by the duplicate policy
    TRUNCATED = "truncated"  # divergent trajectory, partial table written
    DEGRADED = "degraded"  # sabot round without armor-power series, DeMarre fallback
    NOTE = "note"  # informational, table unaffected


# Issue kinds that mean no table was produced for the shell
SKIPPING_KINDS = frozenset({IssueKind.INVALID, IssueKind.ERROR, IssueKind.DUPLICATE})


@dataclass(frozen=True)
class Condition:
    """Something that happened while computing one table, independent of vehicle."""

    kind: IssueKind
    message: str


@dataclass(frozen=True)
class ShellIssue:
    vehicle_id: str
    shell: str
    kind: IssueKind
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "vehicle": self.vehicle_id,
            "shell": self.shell,
            "kind": self.kind.value,
            "message": self.message,
        }


@dataclass
class BatchReport:
    vehicles: int = 0
    computed: int = 0
    skipped: int = 0
    degraded: int = 0
    truncated: int = 0
    distinct_tables: int = 0
    cache_hits: int = 0
    issues: list[ShellIssue] = field(default_factory=list)

    def add(self, issue: ShellIssue) -> None:
        self.issues.append(issue)
        if issue.kind in SKIPPING_KINDS:
            self.skipped += 1
        elif issue.kind is IssueKind.DEGRADED:
            self.degraded += 1
        elif issue.kind is IssueKind.TRUNCATED:
            self.truncated += 1

    def issues_of(self, kind: IssueKind) -> list[ShellIssue]:
        return [i for i in self.issues if i.kind is kind]

    def sort(self) -> None:
        self.issues.sort(key=lambda i: (i.vehicle_id, i.shell, i.kind.value, i.message))

    def summary(self) -> str:
        return (
            f"{self.vehicles} vehicles, {self.computed} tables computed "
            f"({self.distinct_tables} distinct, {self.cache_hits} cache hits), "
            f"{self.skipped} skipped, {self.degraded} degraded, {self.truncated} truncated"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "vehicles": self.vehicles,
            "computed": self.computed,
            "skipped": self.skipped,
            "degraded": self.degraded,
            "truncated": self.truncated,
            "distinct_tables": self.distinct_tables,
            "cache_hits": self.cache_hits,
            "issues": [i.to_dict() for i in self.issues],
        }
