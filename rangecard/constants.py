from __future__ import annotations

# ==============================================================================
# Physics Constants
# ==============================================================================

# Standard gravity in meters per second squared
GRAVITY_M_S2 = 9.80665

# International Standard Atmosphere (troposphere) at ground level
P_ATM_PA = 101_325.0
T_GROUND_C = 15.0
T_STD_K = 288.15
LAPSE_RATE_K_M = 0.0065
M_AIR_KG_MOL = 0.028_965_2
R_GAS = 8.314_46

# Top of the troposphere; the density table is not defined above this
TROPOPAUSE_M = 11_000.0
DENSITY_TABLE_STEP_M = 500.0

# ==============================================================================
# Penetration Model
# ==============================================================================

# DeMarre defaults, applied per field when a shell leaves one missing or zero
DEMARRE_K = 0.9
DEMARRE_SPEED_POW = 1.43
DEMARRE_MASS_POW = 0.71
DEMARRE_CALIBER_POW = 1.07

# Reference impact velocity the speed term is normalised against
DEMARRE_REF_V = 1900.0

# Drag coefficient used when a shell carries none
DEFAULT_CX = 0.38

# APHE filler penalty: (explosive mass / shell mass) -> multiplier
PEN_BY_EXPLOSIVE_RATIO = (
    (0.0065, 1.0),
    (0.016, 0.93),
    (0.02, 0.9),
    (0.03, 0.85),
    (0.04, 0.75),
)

# APCR/APDS carrier mass contribution: (core mass / shell mass) -> share of carrier mass
PEN_BY_SUBCALIBER_RATIO = (
    (0.0, 0.25),
    (0.15, 0.4),
    (0.3, 0.5),
    (0.4, 0.75),
)

# Explosive filler -> TNT equivalence multiplier
TNT_EQUIVALENT = {
    "tnt": 1.0,
    "amatol": 0.99,
    "tga": 1.35,
    "a_ix_1": 1.54,
    "a_ix_2": 1.54,
    "comp_a": 1.35,
    "comp_b": 1.35,
    "ocfol": 1.7,
    "h10": 1.2,
    "hexal": 1.6,
    "fp02": 1.0,
    "tetryl": 1.15,
    "rdx": 1.6,
    "petn": 1.66,
    "octol": 1.7,
    "lx14": 1.8,
}

# HE penetration: TNT equivalent mass (kg) -> penetration (mm)
PEN_BY_TNT_MASS = (
    (0.0, 0.0),
    (0.01, 2.0),
    (0.05, 5.0),
    (0.1, 8.0),
    (0.2, 11.0),
    (0.5, 17.0),
    (1.0, 22.0),
    (2.0, 29.0),
    (5.0, 41.0),
    (10.0, 53.0),
    (25.0, 70.0),
    (50.0, 86.0),
)

# ==============================================================================
# Distance Quantizer
# ==============================================================================

# Elevation change per scroll notch at 100% sensitivity, milliradians.
# Scales with the square of the sensitivity fraction.
SCROLL_STEP_MRAD_AT_FULL = 2.8

# Fixed range-scale mapping: ground distance per milliradian of scroll, independent of the shell
METERS_PER_SCROLL_MRAD = 100.0

# The sight scale never sweeps more than this much elevation
MAX_SWEEP_DEG = 60.0

# Light-core rounds lose speed fast enough that their tables stop here
SUBCALIBER_MAX_RANGE_M = 3000.0
