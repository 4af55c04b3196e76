"""Armor penetration by shell variant.

Values stay floating point here; rounding to whole millimeters happens only
when a table is written.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from ..constants import (
    DEMARRE_REF_V,
    PEN_BY_EXPLOSIVE_RATIO,
    PEN_BY_SUBCALIBER_RATIO,
    PEN_BY_TNT_MASS,
    TNT_EQUIVALENT,
)
from ..shells import (
    DemarreParams,
    ExplosiveShell,
    GuidedShell,
    IndexedSubcaliberShell,
    KineticShell,
    ProjectileRecord,
    ShellVariant,
    resolve_demarre,
    resolve_variant,
)

logger = logging.getLogger("rangecard.ballistics")


def interpolate_table(table: Sequence[tuple[float, float]], x: float) -> float:
    """Piecewise-linear lookup, clamped to the first/last value."""
    xs = np.fromiter((p[0] for p in table), dtype=np.float64)
    ys = np.fromiter((p[1] for p in table), dtype=np.float64)
    return float(np.interp(x, xs, ys))


def demarre_penetration(velocity: float, mass: float, caliber: float, params: DemarreParams | None = None) -> float:
    """DeMarre penetration in mm.

    ``K * (v / 1900)^speed_pow * m^mass_pow / (10 * d)^caliber_pow * 100`` with
    ``v`` in m/s, ``m`` in kg and ``d`` in m. Missing coefficients take the
    engine defaults.
    """
    p = resolve_demarre(params)
    return p.k * (velocity / DEMARRE_REF_V) ** p.speed_pow * mass**p.mass_pow / (caliber * 10.0) ** p.caliber_pow * 100.0


def explosive_filler_penalty(filler_ratio: float) -> float:
    return interpolate_table(PEN_BY_EXPLOSIVE_RATIO, filler_ratio)


def kinetic_penetration(shell: KineticShell, velocity: float) -> float:
    flight = shell.flight
    if shell.core is not None:
        share = interpolate_table(PEN_BY_SUBCALIBER_RATIO, shell.core.mass / flight.mass)
        effective_mass = (flight.mass - shell.core.mass) * share + shell.core.mass
        return demarre_penetration(velocity, effective_mass, shell.core.caliber, shell.demarre)

    pen = demarre_penetration(velocity, flight.mass, flight.caliber, shell.demarre)
    if shell.filler_ratio is not None:
        pen *= explosive_filler_penalty(shell.filler_ratio)
    return pen


def series_penetration(series: Sequence[tuple[float, float]], distance_m: float) -> float:
    """Armor-power series lookup, clamped at the first and last breakpoint."""
    return interpolate_table(series, distance_m)


def tnt_equivalent_mass(explosive_mass: float, explosive_type: str | None) -> float:
    if explosive_type is None:
        return explosive_mass
    key = explosive_type.strip().lower()
    factor = TNT_EQUIVALENT.get(key)
    if factor is None:
        logger.debug(f"No TNT equivalence for explosive {explosive_type!r}, using 1.0")
        factor = 1.0
    return explosive_mass * factor


def he_equivalent_penetration(explosive_mass: float, explosive_type: str | None = None) -> float:
    """Approximate penetration of an explosive filler, mm."""
    return interpolate_table(PEN_BY_TNT_MASS, tnt_equivalent_mass(explosive_mass, explosive_type))


def he_equivalent(shell: ShellVariant) -> float | None:
    """HE-equivalent penetration for shells without a usable penetration stat."""
    if isinstance(shell, GuidedShell) and shell.armor_power > 0.0:
        return None
    if isinstance(shell, (ExplosiveShell, GuidedShell)) and shell.explosive_mass > 0.0:
        return he_equivalent_penetration(shell.explosive_mass, shell.explosive_type)
    return None


def penetrate(shell: ProjectileRecord | ShellVariant, distance_m: float, velocity_mps: float) -> float:
    """Penetration in mm at ``distance_m`` for a shell still travelling at ``velocity_mps``."""
    if isinstance(shell, ProjectileRecord):
        shell = resolve_variant(shell).variant

    if isinstance(shell, KineticShell):
        return kinetic_penetration(shell, velocity_mps)
    if isinstance(shell, IndexedSubcaliberShell):
        return series_penetration(shell.series, distance_m)
    if isinstance(shell, ExplosiveShell):
        return 0.0
    if isinstance(shell, GuidedShell):
        return shell.armor_power
    raise TypeError(f"Unknown shell variant: {type(shell).__name__}")
