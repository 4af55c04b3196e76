"""One shell from record to ballistic table: quantize, integrate, penetrate."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..ballistics.penetration import he_equivalent, penetrate
from ..ballistics.quantizer import max_range_for, sample_distances
from ..ballistics.trajectory import integrate
from ..config import EngineConfig
from ..errors import DivergentTrajectory
from ..shells import KineticShell, ProjectileRecord, ShellClass, resolve_variant
from .fingerprint import fingerprint
from .report import Condition, IssueKind

logger = logging.getLogger("rangecard.engine")


@dataclass(frozen=True)
class BallisticRow:
    distance_m: float
    time_s: float
    penetration_mm: float


@dataclass(frozen=True)
class ComputedTable:
    """A finished table. Never mutated once it is in the cache."""

    fingerprint: str
    shell_class: ShellClass
    rows: tuple[BallisticRow, ...]
    he_equivalent_mm: float | None = None
    conditions: tuple[Condition, ...] = ()

    @property
    def truncated(self) -> bool:
        return any(c.kind is IssueKind.TRUNCATED for c in self.conditions)

    @property
    def degraded(self) -> bool:
        return any(c.kind is IssueKind.DEGRADED for c in self.conditions)


def compute_table(record: ProjectileRecord, config: EngineConfig, key: str | None = None) -> ComputedTable:
    """Compute the ballistic table of one shell.

    Raises:
        InvalidRecord: the record cannot be flown.
    """
    resolved = resolve_variant(record)
    variant = resolved.variant
    key = key or fingerprint(record, config.sensitivity, config)
    conditions = [Condition(IssueKind.NOTE, note) for note in resolved.notes]
    for note in resolved.notes:
        logger.info(f"{record.name}: {note}")

    if isinstance(variant, KineticShell) and variant.degraded:
        logger.warning(f"{record.name}: no armor-power series, falling back to DeMarre")
        conditions.append(Condition(IssueKind.DEGRADED, "missing armor-power series, DeMarre fallback"))

    max_range = max_range_for(resolved.shell_class, config.max_range_m)
    distances = sample_distances(max_range, config.sensitivity)
    try:
        samples = integrate(
            variant,
            distances,
            dt_s=config.dt_s,
            max_flight_s=config.max_flight_s,
            altitude_m=config.altitude_m,
        )
    except DivergentTrajectory as exc:
        logger.warning(f"{record.name}: {exc}, table truncated to {len(exc.samples)} rows")
        samples = exc.samples
        conditions.append(Condition(IssueKind.TRUNCATED, str(exc)))

    rows = tuple(
        BallisticRow(s.distance_m, s.time_s, penetrate(variant, s.distance_m, s.velocity_mps)) for s in samples
    )
    return ComputedTable(
        fingerprint=key,
        shell_class=resolved.shell_class,
        rows=rows,
        he_equivalent_mm=he_equivalent(variant),
        conditions=tuple(conditions),
    )
