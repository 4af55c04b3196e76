"""Altitude-indexed air density lookup."""

from __future__ import annotations

import numpy as np

from ..constants import (
    DENSITY_TABLE_STEP_M,
    GRAVITY_M_S2,
    LAPSE_RATE_K_M,
    M_AIR_KG_MOL,
    P_ATM_PA,
    R_GAS,
    T_GROUND_C,
    T_STD_K,
    TROPOPAUSE_M,
)

# Barometric exponent of the density profile (constant for a given atmosphere)
_BARO_EXP = GRAVITY_M_S2 * M_AIR_KG_MOL / R_GAS / LAPSE_RATE_K_M - 1.0


def isa_density(altitude_m: float) -> float:
    """Troposphere density from the standard-atmosphere formula, kg/m^3."""
    ground = P_ATM_PA * M_AIR_KG_MOL / R_GAS / (T_GROUND_C + 273.15)
    return ground * (1.0 - LAPSE_RATE_K_M * altitude_m / T_STD_K) ** _BARO_EXP


class DensityTable:
    """Piecewise-linear density lookup, clamped at the table bounds."""

    def __init__(self, altitudes_m: np.ndarray, densities: np.ndarray) -> None:
        altitudes_m = np.asarray(altitudes_m, dtype=np.float64)
        densities = np.asarray(densities, dtype=np.float64)
        if altitudes_m.shape != densities.shape or altitudes_m.ndim != 1 or altitudes_m.size == 0:
            raise ValueError(f"altitudes {altitudes_m.shape} and densities {densities.shape} must be matching 1-D arrays")
        if np.any(np.diff(altitudes_m) <= 0.0):
            raise ValueError("altitudes must be strictly increasing")
        self.altitudes_m = altitudes_m
        self.densities = densities

    @classmethod
    def standard(cls, step_m: float = DENSITY_TABLE_STEP_M, top_m: float = TROPOPAUSE_M) -> DensityTable:
        altitudes = np.arange(0.0, top_m + step_m / 2, step_m)
        return cls(altitudes, np.array([isa_density(a) for a in altitudes]))

    def density_at(self, altitude_m: float) -> float:
        # np.interp clamps to the first/last value outside the table
        return float(np.interp(altitude_m, self.altitudes_m, self.densities))


STANDARD_ATMOSPHERE = DensityTable.standard()


def density_at(altitude_m: float) -> float:
    """Air density at ``altitude_m`` in the standard atmosphere, kg/m^3."""
    return STANDARD_ATMOSPHERE.density_at(altitude_m)
