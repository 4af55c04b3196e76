"""Flat-fire trajectory integration.

Speed decays along the flight path under quadratic drag; gravity only feeds the
``drop_m`` bookkeeping. Samples are emitted at caller-chosen distances by
linear interpolation between integration steps.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass

from ..constants import GRAVITY_M_S2
from ..errors import DivergentTrajectory
from ..shells import Flight, GuidedShell, ProjectileRecord, ShellVariant, resolve_variant
from .density import STANDARD_ATMOSPHERE, DensityTable


@dataclass(frozen=True)
class TrajectorySample:
    distance_m: float
    time_s: float
    velocity_mps: float
    drop_m: float = 0.0


def drag_factor(flight: Flight, density: float) -> float:
    """Deceleration divided by v^2 (1/m): rho * Cx * area / (2 * mass)."""
    area = math.pi * flight.caliber**2 / 4.0
    return density * flight.cx * area / (2.0 * flight.mass)


def _check_distances(distances: list[float]) -> None:
    prev = 0.0
    for d in distances:
        if d < 0.0 or not math.isfinite(d):
            raise ValueError(f"sample distance must be finite and non-negative, got {d}")
        if d < prev:
            raise ValueError(f"sample distances must be non-decreasing ({d} after {prev})")
        prev = d


def integrate(
    shell: ProjectileRecord | ShellVariant,
    sample_distances: Iterable[float],
    *,
    dt_s: float = 0.01,
    max_flight_s: float = 60.0,
    altitude_m: float = 0.0,
    atmosphere: DensityTable = STANDARD_ATMOSPHERE,
) -> list[TrajectorySample]:
    """Time of flight and remaining velocity at each requested distance.

    Raises:
        DivergentTrajectory: speed reached zero or the flight ran past
            ``max_flight_s`` before the last requested distance. The exception
            carries the samples computed up to that point.
    """
    if isinstance(shell, ProjectileRecord):
        shell = resolve_variant(shell).variant
    distances = [float(d) for d in sample_distances]
    _check_distances(distances)

    if isinstance(shell, GuidedShell):
        return constant_speed(shell.speed, distances)
    return _integrate_drag(
        shell.flight,
        distances,
        dt_s=dt_s,
        max_flight_s=max_flight_s,
        density=atmosphere.density_at(altitude_m),
    )


def constant_speed(speed: float, distances: list[float]) -> list[TrajectorySample]:
    """Straight-line flight at a fixed speed (rockets and guided missiles)."""
    return [TrajectorySample(d, d / speed, speed) for d in distances]


def _integrate_drag(
    flight: Flight,
    distances: list[float],
    *,
    dt_s: float,
    max_flight_s: float,
    density: float,
) -> list[TrajectorySample]:
    k = drag_factor(flight, density)
    max_steps = math.ceil(max_flight_s / dt_s)

    samples: list[TrajectorySample] = []
    n = len(distances)
    idx = 0
    while idx < n and distances[idx] == 0.0:
        samples.append(TrajectorySample(0.0, 0.0, flight.speed))
        idx += 1

    x = 0.0
    v = flight.speed
    vy = 0.0
    drop = 0.0
    step = 0
    while idx < n:
        if step >= max_steps:
            raise DivergentTrajectory(x, distances[idx], samples)

        # Explicit Euler: velocity first, position advances with the new velocity
        v_next = v - k * v * v * dt_s
        if v_next <= 0.0:
            raise DivergentTrajectory(x, distances[idx], samples)
        x_next = x + v_next * dt_s
        vy += GRAVITY_M_S2 * dt_s
        drop_next = drop + vy * dt_s
        t0 = step * dt_s

        while idx < n and distances[idx] <= x_next:
            f = (distances[idx] - x) / (x_next - x)
            samples.append(
                TrajectorySample(
                    distance_m=distances[idx],
                    time_s=t0 + f * dt_s,
                    velocity_mps=v + f * (v_next - v),
                    drop_m=drop + f * (drop_next - drop),
                )
            )
            idx += 1

        x, v, drop = x_next, v_next, drop_next
        step += 1

    return samples
