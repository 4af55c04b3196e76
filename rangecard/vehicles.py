"""Per-vehicle shell groups and the duplicate-definition policy."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass

from .engine.report import IssueKind, ShellIssue
from .shells import ProjectileRecord

logger = logging.getLogger("rangecard")


@dataclass(frozen=True)
class VehicleGroup:
    vehicle_id: str
    projectiles: tuple[ProjectileRecord, ...]


def _differing_fields(a: ProjectileRecord, b: ProjectileRecord) -> list[str]:
    return [f.name for f in dataclasses.fields(a) if f.name != "name" and getattr(a, f.name) != getattr(b, f.name)]


def select_shells(group: VehicleGroup, policy: str = "last") -> tuple[list[ProjectileRecord], list[ShellIssue]]:
    """Pick one definition per output name.

    Policies:
        ``last``: the last definition wins (historical behaviour).
        ``first``: the first definition wins.
        ``error``: conflicting definitions are all rejected; identical repeats
            collapse to one.

    Every definition that is not selected produces a ``duplicate`` issue.
    """
    by_name: dict[str, list[ProjectileRecord]] = {}
    for record in group.projectiles:
        by_name.setdefault(record.output_name, []).append(record)

    selected: list[ProjectileRecord] = []
    issues: list[ShellIssue] = []
    for shell, records in by_name.items():
        if len(records) == 1:
            selected.append(records[0])
            continue

        conflicts = sorted({f for r in records[1:] for f in _differing_fields(records[0], r)})
        if conflicts:
            logger.warning(
                f"{group.vehicle_id}/{shell}: {len(records)} definitions differ in {', '.join(conflicts)} "
                f"(policy={policy})"
            )

        if policy == "error" and conflicts:
            for _ in records:
                issues.append(
                    ShellIssue(group.vehicle_id, shell, IssueKind.DUPLICATE, f"conflicting definitions: {', '.join(conflicts)}")
                )
            continue

        keep_idx = 0 if policy in ("first", "error") else len(records) - 1
        selected.append(records[keep_idx])
        detail = f"differs in {', '.join(conflicts)}" if conflicts else "identical"
        for idx in range(len(records)):
            if idx != keep_idx:
                issues.append(ShellIssue(group.vehicle_id, shell, IssueKind.DUPLICATE, f"shadowed by another definition ({detail})"))

    return selected, issues
