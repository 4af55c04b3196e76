"""Sample distances for the rangefinder scale.

One tick corresponds to one scroll-wheel notch. The elevation change per notch
is ``2.8 * s^2`` mrad for a sensitivity fraction ``s``, and each milliradian
of scroll maps to a fixed ground distance, so ticks spread out quadratically as
sensitivity rises (70 m at 50%, 280 m at 100%).
"""

from __future__ import annotations

import math

from ..constants import (
    MAX_SWEEP_DEG,
    METERS_PER_SCROLL_MRAD,
    SCROLL_STEP_MRAD_AT_FULL,
    SUBCALIBER_MAX_RANGE_M,
)
from ..shells import ShellClass

# Per-class range caps; classes not listed use the configured maximum
MAX_RANGE_BY_CLASS: dict[ShellClass, float] = {
    ShellClass.KINETIC_SUBCALIBER: SUBCALIBER_MAX_RANGE_M,
}


def _check_sensitivity(sensitivity: float) -> None:
    if not 0.0 < sensitivity <= 1.0:
        raise ValueError(f"sensitivity must be a fraction in (0, 1], got {sensitivity}")


def scroll_step_mrad(sensitivity: float) -> float:
    _check_sensitivity(sensitivity)
    return SCROLL_STEP_MRAD_AT_FULL * sensitivity * sensitivity


def tick_spacing_m(sensitivity: float) -> float:
    """Ground distance between two consecutive ticks."""
    return scroll_step_mrad(sensitivity) * METERS_PER_SCROLL_MRAD


def max_ticks(sensitivity: float) -> int:
    return math.floor(math.radians(MAX_SWEEP_DEG) * 1000.0 / scroll_step_mrad(sensitivity))


def max_range_for(shell_class: ShellClass, default_m: float) -> float:
    return min(default_m, MAX_RANGE_BY_CLASS.get(shell_class, default_m))


def sample_distances(max_range_m: float, sensitivity: float) -> list[float]:
    """Distances ``0, step, 2*step, ...`` up to and including ``max_range_m``.

    Each distance is computed as ``i * step`` rather than accumulated, so equal
    inputs always give bit-identical output.
    """
    if max_range_m < 0.0:
        raise ValueError(f"max_range_m must be non-negative, got {max_range_m}")
    step = tick_spacing_m(sensitivity)
    count = min(max_ticks(sensitivity), math.floor(max_range_m / step) + 1)
    return [d for d in (i * step for i in range(count)) if d <= max_range_m]
