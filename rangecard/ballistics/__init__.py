from .density import DensityTable, density_at
from .penetration import demarre_penetration, he_equivalent_penetration, penetrate
from .quantizer import sample_distances, tick_spacing_m
from .trajectory import TrajectorySample, integrate

__all__ = [
    "DensityTable",
    "TrajectorySample",
    "demarre_penetration",
    "density_at",
    "he_equivalent_penetration",
    "integrate",
    "penetrate",
    "sample_distances",
    "tick_spacing_m",
]
