"""Error taxonomy for ballistic table generation.

Per-shell conditions (``InvalidRecord``, ``DivergentTrajectory``) are caught by
the scheduler and turned into report entries. The rest abort a run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ballistics.trajectory import TrajectorySample


class RangecardError(Exception):
    """Base class for all rangecard errors."""


class ConfigError(RangecardError):
    """Engine configuration or process settings are unusable."""


class CorpusError(RangecardError):
    """Input corpus could not be read or validated."""


class EmptyCorpusError(RangecardError):
    """A batch was started with no shells to compute."""


class InvalidRecord(RangecardError):
    """A projectile record carries non-physical or unsupported values."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"{name}: {reason}")
        self.name = name
        self.reason = reason


class DivergentTrajectory(RangecardError):
    """Velocity decayed before reaching a requested sample distance.

    ``samples`` holds every sample computed before the divergence so callers can
    truncate instead of failing.
    """

    def __init__(self, reached_m: float, target_m: float, samples: list[TrajectorySample]) -> None:
        super().__init__(f"trajectory diverged at {reached_m:.1f} m before reaching {target_m:.1f} m")
        self.reached_m = reached_m
        self.target_m = target_m
        self.samples = samples


class CacheConflictError(RangecardError):
    """Two different tables were committed under one fingerprint."""
