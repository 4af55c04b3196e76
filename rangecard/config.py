from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigError

DUPLICATE_POLICIES = ("last", "first", "error")


@dataclass(frozen=True)
class EngineConfig:
    sensitivity_pct: float = 50.0  # mouse-wheel multiplier, percent
    workers: int | None = None  # None -> os.cpu_count()
    dt_s: float = 0.01  # integrator step
    max_flight_s: float = 60.0  # flights longer than this count as divergent
    max_range_m: float = 4000.0
    altitude_m: float = 0.0  # firing altitude for the density lookup
    # Same shell name defined twice on one vehicle: "last" | "first" | "error"
    duplicate_policy: str = "last"

    @property
    def sensitivity(self) -> float:
        """Sensitivity as a fraction in (0, 1]."""
        return self.sensitivity_pct / 100.0

    def validate(self) -> EngineConfig:
        if not 0.0 < self.sensitivity_pct <= 100.0:
            raise ConfigError(f"sensitivity must be in (0, 100], got {self.sensitivity_pct}")
        if self.workers is not None and self.workers < 1:
            raise ConfigError(f"workers must be >= 1, got {self.workers}")
        if self.dt_s <= 0.0:
            raise ConfigError(f"dt_s must be positive, got {self.dt_s}")
        if self.max_flight_s <= 0.0:
            raise ConfigError(f"max_flight_s must be positive, got {self.max_flight_s}")
        if self.max_range_m <= 0.0:
            raise ConfigError(f"max_range_m must be positive, got {self.max_range_m}")
        if self.duplicate_policy not in DUPLICATE_POLICIES:
            raise ConfigError(f"Unknown duplicate policy: {self.duplicate_policy!r}")
        return self
