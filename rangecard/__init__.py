from .config import EngineConfig
from .shells import DemarreParams, ProjectileRecord, ShellClass
from .vehicles import VehicleGroup

__all__ = ["DemarreParams", "EngineConfig", "ProjectileRecord", "ShellClass", "VehicleGroup"]
