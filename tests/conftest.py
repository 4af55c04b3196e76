import pytest

from rangecard.config import EngineConfig
from rangecard.shells import DemarreParams, ProjectileRecord
from rangecard.vehicles import VehicleGroup


@pytest.fixture
def make_record():
    def _make(name: str = "30mm_UBR6", bullet_type: str = "ap_t", **overrides) -> ProjectileRecord:
        fields = dict(
            name=name,
            bullet_type=bullet_type,
            mass=0.389,
            ballistic_caliber=0.03,
            speed=960.0,
            cx=0.298,
        )
        fields.update(overrides)
        return ProjectileRecord(**fields)

    return _make


@pytest.fixture
def ap_record(make_record) -> ProjectileRecord:
    """30 mm full-caliber AP round with default DeMarre coefficients."""
    return make_record()


@pytest.fixture
def m735_series() -> tuple[tuple[float, float], ...]:
    return (
        (0.0, 292.4),
        (100.0, 290.6),
        (500.0, 284.0),
        (1000.0, 275.0),
        (1500.0, 265.9),
        (2000.0, 256.5),
        (2500.0, 246.7),
        (3000.0, 236.7),
        (4000.0, 215.5),
        (10000.0, 50.0),
    )


@pytest.fixture
def small_corpus(make_record, m735_series) -> list[VehicleGroup]:
    """Two vehicles sharing an autocannon round plus a few class-specific shells."""
    ubr6 = make_record("30mm_UBR6")
    return [
        VehicleGroup(
            "ussr_bmp_2m",
            (
                ubr6,
                make_record("30mm_OFZ", "he_frag_i", mass=0.39, cx=0.3, explosive_mass=0.049, explosive_type="a_ix_2"),
            ),
        ),
        VehicleGroup(
            "ussr_btr_82a",
            (
                make_record("30mm_UBR6", cx=0.298),
                make_record(
                    "105mm_m735",
                    "apds_fs_tungsten_l10_l15_tank",
                    mass=3.719457,
                    ballistic_caliber=0.035,
                    speed=1501.14,
                    cx=0.2925,
                    armor_power_series=m735_series,
                ),
                make_record(
                    "75mm_pzgr_39",
                    "apcbc_tank",
                    mass=6.8,
                    ballistic_caliber=0.075,
                    speed=740.0,
                    cx=0.4,
                    explosive_mass=0.017,
                    explosive_type="h10",
                    demarre=DemarreParams(k=1.0, speed_pow=1.43, mass_pow=0.71, caliber_pow=1.07),
                ),
            ),
        ),
    ]


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(workers=4)
