import dataclasses

import pytest

from rangecard.ballistics.penetration import demarre_penetration
from rangecard.ballistics.quantizer import tick_spacing_m
from rangecard.ballistics.trajectory import integrate
from rangecard.config import EngineConfig
from rangecard.engine.compute import compute_table
from rangecard.engine.fingerprint import fingerprint
from rangecard.engine.report import IssueKind
from rangecard.errors import InvalidRecord
from rangecard.io.writer import format_table
from rangecard.shells import DemarreParams, ShellClass


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


def test_first_row_is_muzzle(ap_record, config):
    table = compute_table(ap_record, config)
    first = table.rows[0]
    assert (first.distance_m, first.time_s) == (0.0, 0.0)
    assert first.penetration_mm == demarre_penetration(960.0, 0.389, 0.03)


def test_demarre_unit_check(make_record, config):
    record = make_record(mass=0.4, ballistic_caliber=0.03, speed=960.0)
    expected = 0.9 * (960.0 / 1900.0) ** 1.43 * 0.4**0.71 / (0.03 * 10.0) ** 1.07 * 100.0
    assert compute_table(record, config).rows[0].penetration_mm == pytest.approx(expected, rel=1e-12)


def test_end_to_end_kinetic_round(make_record, config):
    """30 mm AP at 50%: rows on the 70 m tick grid, penetration decaying with range."""
    record = make_record(bullet_type="ap_t", mass=0.389, ballistic_caliber=0.03, speed=960.0, cx=0.298)
    table = compute_table(record, config)

    step = tick_spacing_m(0.5)
    assert [r.distance_m for r in table.rows[:3]] == [0.0, step, 2 * step]
    pens = [r.penetration_mm for r in table.rows]
    assert all(b < a for a, b in zip(pens, pens[1:]))
    assert table.conditions == ()
    assert table.fingerprint == fingerprint(record, 0.5, config)


def test_rows_non_decreasing_in_distance(small_corpus, config):
    for group in small_corpus:
        for record in group.projectiles:
            rows = compute_table(record, config).rows
            distances = [r.distance_m for r in rows]
            assert distances[0] == 0.0
            assert distances == sorted(distances)


def test_explosive_rows_are_zero_with_full_trajectory(make_record, config):
    kinetic = make_record(bullet_type="ap_t")
    explosive = make_record(bullet_type="he_frag_i", explosive_mass=0.049, explosive_type="a_ix_2")

    he_table = compute_table(explosive, config)
    ap_table = compute_table(kinetic, config)

    assert all(r.penetration_mm == 0 for r in he_table.rows)
    assert len(he_table.rows) == len(ap_table.rows)
    assert [r.time_s for r in he_table.rows] == [r.time_s for r in ap_table.rows]
    assert he_table.he_equivalent_mm is not None and he_table.he_equivalent_mm > 0.0
    assert ap_table.he_equivalent_mm is None


def test_zero_mass_explosive_keeps_zero_penetration(make_record, config):
    record = make_record("30mm_OFZ", "he_frag_i", mass=0.0, armor_power=120.0, explosive_mass=0.049)
    table = compute_table(record, config)

    assert table.shell_class is ShellClass.EXPLOSIVE
    assert all(r.penetration_mm == 0.0 for r in table.rows)
    assert [c.kind for c in table.conditions] == [IssueKind.NOTE]
    assert table.he_equivalent_mm is not None and table.he_equivalent_mm > 0.0


def test_subcaliber_without_core_is_reported(make_record, config):
    table = compute_table(make_record(bullet_type="apcr_tank"), config)
    assert [c.kind for c in table.conditions] == [IssueKind.NOTE]
    assert "without core data" in table.conditions[0].message


def test_degraded_sabot_matches_kinetic_formula(make_record, config):
    demarre = DemarreParams(k=1.1, speed_pow=1.5)
    sabot = make_record("105mm_m735", "apds_fs_long_tank", mass=3.7, ballistic_caliber=0.035, speed=1500.0, demarre=demarre)

    table = compute_table(sabot, config)

    assert table.degraded
    assert [c.kind for c in table.conditions] == [IssueKind.DEGRADED]
    samples = integrate(sabot, [r.distance_m for r in table.rows])
    for row, sample in zip(table.rows, samples):
        assert row.penetration_mm == pytest.approx(demarre_penetration(sample.velocity_mps, 3.7, 0.035, demarre))


def test_degraded_sabot_without_coefficients_uses_defaults(make_record, config):
    sabot = make_record(bullet_type="apds_fs_long_tank")
    plain = make_record(bullet_type="ap_t")
    assert [r.penetration_mm for r in compute_table(sabot, config).rows] == [
        r.penetration_mm for r in compute_table(plain, config).rows
    ]


def test_indexed_series_used_when_present(make_record, m735_series, config):
    sabot = make_record(
        "105mm_m735",
        "apds_fs_long_tank",
        mass=3.719457,
        ballistic_caliber=0.035,
        speed=1501.14,
        cx=0.2925,
        armor_power_series=m735_series,
    )
    table = compute_table(sabot, config)
    assert table.shell_class is ShellClass.SABOT_SUBCALIBER
    assert not table.degraded
    assert table.rows[0].penetration_mm == 292.4


def test_subcaliber_table_is_range_capped(make_record, config):
    apcr = make_record(bullet_type="apcr_tank", damage_mass=0.1, damage_caliber=0.016)
    assert compute_table(apcr, config).rows[-1].distance_m <= 3000.0
    assert compute_table(make_record(), config).rows[-1].distance_m > 3000.0


def test_divergent_trajectory_truncates(make_record, config):
    record = make_record(mass=1e-6, ballistic_caliber=0.1, cx=1.0)
    table = compute_table(record, config)
    assert table.truncated
    assert len(table.rows) == 1
    assert table.rows[0].distance_m == 0.0


def test_guided_round(make_record, config):
    record = make_record(
        "atgm_9m113", "atgm_tank", mass=14.6, speed=80.0, end_speed=208.0, armor_power=600.0, explosive_mass=2.5
    )
    table = compute_table(record, config)
    assert table.shell_class is ShellClass.GUIDED
    assert all(r.penetration_mm == 600.0 for r in table.rows)
    assert table.rows[1].time_s == pytest.approx(table.rows[1].distance_m / 208.0)
    assert table.he_equivalent_mm is None


def test_invalid_record_raises(make_record, config):
    with pytest.raises(InvalidRecord):
        compute_table(make_record(mass=-1.0), config)


def test_idempotent_cold_computation(ap_record, config):
    assert format_table(compute_table(ap_record, config)) == format_table(compute_table(ap_record, config))


def test_sensitivity_changes_grid(ap_record):
    coarse = compute_table(ap_record, EngineConfig(sensitivity_pct=100.0))
    fine = compute_table(ap_record, EngineConfig(sensitivity_pct=50.0))
    assert coarse.rows[1].distance_m == pytest.approx(280.0)
    assert fine.rows[1].distance_m == pytest.approx(70.0)
    assert coarse.fingerprint != fine.fingerprint


def test_renamed_record_gives_identical_table(ap_record, config):
    renamed = dataclasses.replace(ap_record, name="30mm_other")
    assert compute_table(renamed, config) == compute_table(ap_record, config)
