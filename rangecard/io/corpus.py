"""Load normalized projectile records produced by the extraction stage.

Accepted layouts:
    * one JSON file ``{"vehicles": [{"id": ..., "projectiles": [...]}, ...]}``
      (a bare list of vehicles is accepted too);
    * a directory of ``<vehicle>.json`` files, each a single vehicle object.
      The ``id`` field defaults to the file stem.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import CorpusError
from ..shells import DemarreParams, ProjectileRecord, ShellClass
from ..vehicles import VehicleGroup


class DemarreModel(BaseModel):
    k: float | None = None
    speed_pow: float | None = None
    mass_pow: float | None = None
    caliber_pow: float | None = None


class ProjectileModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

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
    demarre: DemarreModel | None = None
    armor_power: float | None = None
    armor_power_series: list[tuple[float, float]] = Field(default_factory=list)
    shell_class: ShellClass | None = None

    def to_record(self) -> ProjectileRecord:
        demarre = None
        if self.demarre is not None:
            demarre = DemarreParams(**self.demarre.model_dump())
        return ProjectileRecord(
            name=self.name,
            bullet_type=self.bullet_type,
            mass=self.mass,
            ballistic_caliber=self.ballistic_caliber,
            speed=self.speed,
            cx=self.cx,
            end_speed=self.end_speed,
            explosive_mass=self.explosive_mass,
            explosive_type=self.explosive_type,
            damage_mass=self.damage_mass,
            damage_caliber=self.damage_caliber,
            demarre=demarre,
            armor_power=self.armor_power,
            armor_power_series=tuple(sorted(self.armor_power_series)),
            shell_class=self.shell_class,
        )


class VehicleModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # One directory name under the output root
    id: str = Field(min_length=1, pattern=r"^[^./\\][^/\\]*$")
    projectiles: list[ProjectileModel] = Field(default_factory=list)

    def to_group(self) -> VehicleGroup:
        return VehicleGroup(self.id, tuple(p.to_record() for p in self.projectiles))


class CorpusModel(BaseModel):
    vehicles: list[VehicleModel]


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CorpusError(f"cannot read {path}: {exc}") from exc


def _parse_vehicles(data: Any, source: Path) -> list[VehicleModel]:
    try:
        if isinstance(data, list):
            return CorpusModel(vehicles=data).vehicles
        return CorpusModel.model_validate(data).vehicles
    except ValidationError as exc:
        raise CorpusError(f"invalid corpus {source}: {exc}") from exc


def load_corpus(path: Path, vehicle_ids: list[str] | None = None) -> list[VehicleGroup]:
    """Read vehicle groups from ``path``, sorted by vehicle id.

    Raises:
        CorpusError: the input is missing, unreadable or fails validation, or
            two groups share a vehicle id.
    """
    path = Path(path)
    if not path.exists():
        raise CorpusError(f"input not found: {path}")

    if path.is_dir():
        models = []
        for file in sorted(path.glob("*.json")):
            data = _read_json(file)
            if isinstance(data, dict):
                data = {"id": file.stem, **data}
            try:
                models.append(VehicleModel.model_validate(data))
            except ValidationError as exc:
                raise CorpusError(f"invalid vehicle file {file}: {exc}") from exc
    else:
        models = _parse_vehicles(_read_json(path), path)

    seen: set[str] = set()
    for model in models:
        if model.id in seen:
            raise CorpusError(f"vehicle {model.id!r} defined more than once")
        seen.add(model.id)

    if vehicle_ids is not None:
        wanted = set(vehicle_ids)
        models = [m for m in models if m.id in wanted]

    return [m.to_group() for m in sorted(models, key=lambda m: m.id)]
