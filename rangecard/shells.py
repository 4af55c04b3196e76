"""Projectile records and the closed set of formula variants built from them.

A ``ProjectileRecord`` is what the upstream extraction stage hands over: raw,
possibly incomplete, read-only. ``resolve_variant`` is the one place where the
defaulting chains run and where a record is turned into exactly one of the
variants below, each carrying only the fields its formulas need.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .constants import (
    DEFAULT_CX,
    DEMARRE_CALIBER_POW,
    DEMARRE_K,
    DEMARRE_MASS_POW,
    DEMARRE_SPEED_POW,
)
from .errors import InvalidRecord


class ShellClass(str, Enum):
    KINETIC = "kinetic"
    KINETIC_EXPLOSIVE = "kinetic_explosive"
    KINETIC_SUBCALIBER = "kinetic_subcaliber"
    SABOT_SUBCALIBER = "sabot_subcaliber"
    EXPLOSIVE = "explosive"
    GUIDED = "guided"


# First "_"-delimited segment of the raw bullet type -> class
_TYPE_PREFIXES: dict[str, ShellClass] = {
    **{p: ShellClass.KINETIC for p in ("i", "t", "ap", "apc", "apbc", "apcbc")},
    **{p: ShellClass.KINETIC_EXPLOSIVE for p in ("ac", "aphe", "aphebc", "sap", "sapi", "sapcbc")},
    **{p: ShellClass.KINETIC_SUBCALIBER for p in ("apcr", "apds")},
    **{p: ShellClass.EXPLOSIVE for p in ("he", "hei", "heat", "hesh", "frag", "shrapnel", "mhe")},
    **{p: ShellClass.GUIDED for p in ("atgm", "rocket")},
}

# Never given a ballistic table
_NON_BALLISTIC_PREFIXES = frozenset({"smoke", "practice", "flare", "sam", "aam", "napalm"})


def classify_type(bullet_type: str) -> ShellClass:
    """Map a raw bullet type such as ``apds_fs_long_tank`` to its shell class."""
    raw = bullet_type.strip().lower()
    # apds_fs must win over the plain apds prefix
    if "apds_fs" in raw:
        return ShellClass.SABOT_SUBCALIBER
    prefix = raw.split("_", 1)[0]
    if prefix in _NON_BALLISTIC_PREFIXES:
        raise InvalidRecord(bullet_type, f"type {prefix!r} has no ballistic table")
    try:
        return _TYPE_PREFIXES[prefix]
    except KeyError:
        raise InvalidRecord(bullet_type, f"unknown shell type {bullet_type!r}") from None


def clean_shell_name(name: str) -> str:
    """Output identifier for a shell: ``105mm_m735/extra`` -> ``m735``."""
    name = name.split("/", 1)[0]
    pos = name.find("mm_")
    if pos >= 0:
        return name[pos + 3 :]
    return name


def is_safe_path_component(name: str) -> bool:
    """True when ``name`` can be used as one file or directory name under the output root."""
    return bool(name) and not name.startswith(".") and not any(c in name for c in "/\\\0")


@dataclass(frozen=True)
class DemarreParams:
    k: float | None = None
    speed_pow: float | None = None
    mass_pow: float | None = None
    caliber_pow: float | None = None


@dataclass(frozen=True)
class ProjectileRecord:
    """One shell definition as supplied by the extraction stage.

    Units are SI: kg, m, m/s. Optional fields are ``None`` when the source data
    does not carry them; defaults are applied by ``resolve_variant``, never here.
    """

    name: str
    bullet_type: str
    mass: float
    ballistic_caliber: float
    speed: float
    cx: float | None = None
    end_speed: float | None = None
    explosive_mass: float = 0.0
    explosive_type: str | None = None
    damage_mass: float = 0.0
    damage_caliber: float = 0.0
    demarre: DemarreParams | None = None
    armor_power: float | None = None
    # (distance_m, penetration_mm) breakpoints, ascending by distance
    armor_power_series: tuple[tuple[float, float], ...] = ()
    shell_class: ShellClass | None = None

    @property
    def output_name(self) -> str:
        return clean_shell_name(self.name)


# ------------------------------------------------------------------------------
# Formula variants
# ------------------------------------------------------------------------------


@dataclass(frozen=True)
class Flight:
    """Inputs of the drag integration."""

    mass: float
    caliber: float
    speed: float
    cx: float


@dataclass(frozen=True)
class Core:
    """Sub-caliber penetrator inside a lighter carrier."""

    mass: float
    caliber: float


@dataclass(frozen=True)
class KineticShell:
    flight: Flight
    demarre: DemarreParams
    core: Core | None = None
    filler_ratio: float | None = None  # explosive mass / shell mass, APHE-type only
    degraded: bool = False  # sabot round that lost its armor-power series


@dataclass(frozen=True)
class IndexedSubcaliberShell:
    flight: Flight
    series: tuple[tuple[float, float], ...]


@dataclass(frozen=True)
class ExplosiveShell:
    flight: Flight
    explosive_mass: float
    explosive_type: str | None


@dataclass(frozen=True)
class GuidedShell:
    speed: float
    armor_power: float = 0.0
    explosive_mass: float = 0.0
    explosive_type: str | None = None


ShellVariant = Union[KineticShell, IndexedSubcaliberShell, ExplosiveShell, GuidedShell]


@dataclass(frozen=True)
class ResolvedShell:
    shell_class: ShellClass
    variant: ShellVariant
    notes: tuple[str, ...] = field(default=())


# ------------------------------------------------------------------------------
# Default resolution
# ------------------------------------------------------------------------------


def _non_zero_or(value: float | None, default: float) -> float:
    if value is None or value == 0.0:
        return default
    return float(value)


def resolve_demarre(params: DemarreParams | None) -> DemarreParams:
    """Fill every missing or zero DeMarre coefficient with the engine default."""
    params = params or DemarreParams()
    return DemarreParams(
        k=_non_zero_or(params.k, DEMARRE_K),
        speed_pow=_non_zero_or(params.speed_pow, DEMARRE_SPEED_POW),
        mass_pow=_non_zero_or(params.mass_pow, DEMARRE_MASS_POW),
        caliber_pow=_non_zero_or(params.caliber_pow, DEMARRE_CALIBER_POW),
    )


def resolve_drag_coefficient(cx: float | None) -> float:
    return DEFAULT_CX if cx is None else float(cx)


def resolve_guided_speed(record: ProjectileRecord) -> float:
    """Cruise speed of a guided round: ``end_speed`` when given, else ``speed``."""
    if record.end_speed is not None and record.end_speed > 0.0:
        return float(record.end_speed)
    return float(record.speed)


def _check_physical(record: ProjectileRecord) -> None:
    numeric = {
        "mass": record.mass,
        "ballistic_caliber": record.ballistic_caliber,
        "speed": record.speed,
        "explosive_mass": record.explosive_mass,
        "damage_mass": record.damage_mass,
        "damage_caliber": record.damage_caliber,
    }
    if record.cx is not None:
        numeric["cx"] = record.cx
    if record.end_speed is not None:
        numeric["end_speed"] = record.end_speed
    for key, value in numeric.items():
        if not math.isfinite(value):
            raise InvalidRecord(record.name, f"{key} is not finite ({value})")
        if value < 0.0:
            raise InvalidRecord(record.name, f"{key} is negative ({value})")
    for distance, _pen in record.armor_power_series:
        if distance < 0.0:
            raise InvalidRecord(record.name, f"armor power breakpoint at negative distance {distance}")


def resolve_variant(record: ProjectileRecord) -> ResolvedShell:
    """Validate a record and build the formula variant it dispatches to.

    Raises:
        InvalidRecord: non-physical values, a type with no ballistic table, or
            a name that cannot be written as a table file.
    """
    if not is_safe_path_component(record.output_name):
        raise InvalidRecord(record.name, f"unusable output name {record.output_name!r}")
    _check_physical(record)
    shell_class = record.shell_class or classify_type(record.bullet_type)

    if shell_class is ShellClass.GUIDED or record.mass == 0.0 or record.speed == 0.0:
        speed = resolve_guided_speed(record)
        if speed <= 0.0:
            raise InvalidRecord(record.name, "no usable speed for a constant-speed trajectory")
        notes: tuple[str, ...] = ()
        if shell_class is not ShellClass.GUIDED:
            notes = (f"{shell_class.value} with zero mass or speed flown as constant-speed",)
        # Explosive rounds never carry a kinetic penetration stat
        armor_power = 0.0 if shell_class is ShellClass.EXPLOSIVE else float(record.armor_power or 0.0)
        variant = GuidedShell(
            speed=speed,
            armor_power=armor_power,
            explosive_mass=record.explosive_mass,
            explosive_type=record.explosive_type,
        )
        return ResolvedShell(shell_class, variant, notes)

    if record.ballistic_caliber == 0.0:
        raise InvalidRecord(record.name, "ballistic caliber is zero")

    flight = Flight(
        mass=float(record.mass),
        caliber=float(record.ballistic_caliber),
        speed=float(record.speed),
        cx=resolve_drag_coefficient(record.cx),
    )
    demarre = resolve_demarre(record.demarre)

    if shell_class is ShellClass.EXPLOSIVE:
        return ResolvedShell(shell_class, ExplosiveShell(flight, record.explosive_mass, record.explosive_type))

    if shell_class is ShellClass.SABOT_SUBCALIBER:
        if record.armor_power_series:
            series = tuple(sorted((float(d), float(p)) for d, p in record.armor_power_series))
            return ResolvedShell(shell_class, IndexedSubcaliberShell(flight, series))
        return ResolvedShell(shell_class, KineticShell(flight, demarre, degraded=True))

    if shell_class is ShellClass.KINETIC_SUBCALIBER:
        if record.damage_mass > 0.0 and record.damage_caliber > 0.0:
            core = Core(mass=record.damage_mass, caliber=record.damage_caliber)
            return ResolvedShell(shell_class, KineticShell(flight, demarre, core=core))
        note = "sub-caliber round without core data, full-caliber DeMarre"
        return ResolvedShell(shell_class, KineticShell(flight, demarre), (note,))

    if shell_class is ShellClass.KINETIC_EXPLOSIVE:
        ratio = record.explosive_mass / record.mass
        return ResolvedShell(shell_class, KineticShell(flight, demarre, filler_ratio=ratio))

    return ResolvedShell(shell_class, KineticShell(flight, demarre))
