import json

import pytest

from rangecard.engine.compute import BallisticRow, ComputedTable
from rangecard.engine.scheduler import run_batch
from rangecard.io.writer import (
    TableWriter,
    format_penetration,
    format_table,
    format_time,
    round_half_away,
)
from rangecard.shells import ShellClass


def _table(*rows: tuple[float, float, float]) -> ComputedTable:
    return ComputedTable(
        fingerprint="0" * 64,
        shell_class=ShellClass.KINETIC,
        rows=tuple(BallisticRow(*r) for r in rows),
    )


@pytest.mark.parametrize(
    "value, ndigits, expected",
    [
        (2.5, 0, 3.0),
        (-2.5, 0, -3.0),
        (0.25, 1, 0.3),
        (1.04, 1, 1.0),
        (0.0, 0, 0.0),
    ],
)
def test_round_half_away(value, ndigits, expected):
    assert round_half_away(value, ndigits) == pytest.approx(expected)


@pytest.mark.parametrize(
    "time_s, expected",
    [
        (0.0, "0"),
        (0.04, "0"),
        (0.06, "0.1"),
        (0.25, "0.3"),
        (1.0, "1"),
        (1.96, "2"),
        (3.14, "3.1"),
    ],
)
def test_format_time(time_s, expected):
    assert format_time(time_s) == expected


def test_format_penetration():
    assert format_penetration(149.5) == "150"
    assert format_penetration(149.49) == "149"
    assert format_penetration(0.0) == "0"
    assert format_penetration(float("inf")) == "∞"
    assert format_penetration(float("nan")) == "∞"


def test_format_table_layout():
    text = format_table(_table((0.0, 0.0, 61.2), (70.0, 0.0731, 60.5), (140.0, 0.1472, 59.8)))
    assert text == "0.000\t0\t61\n70.000\t0.1\t61\n140.000\t0.1\t60\n"


def test_format_table_stops_at_decreasing_distance():
    text = format_table(_table((0.0, 0.0, 10.0), (70.0, 0.1, 9.0), (35.0, 0.2, 8.0)))
    assert text.splitlines() == ["0.000\t0\t10", "70.000\t0.1\t9"]


def test_format_empty_table():
    assert format_table(_table()) == ""


def test_write_batch(tmp_path, small_corpus, engine_config):
    result = run_batch(small_corpus, engine_config)
    writer = TableWriter(tmp_path / "Ballistic")

    paths = writer.write_batch(result)

    assert [p.relative_to(tmp_path / "Ballistic").as_posix() for p in paths] == [
        "ussr_bmp_2m/OFZ.txt",
        "ussr_bmp_2m/UBR6.txt",
        "ussr_btr_82a/UBR6.txt",
        "ussr_btr_82a/m735.txt",
        "ussr_btr_82a/pzgr_39.txt",
    ]
    first_line = (tmp_path / "Ballistic" / "ussr_bmp_2m" / "UBR6.txt").read_text(encoding="utf-8").splitlines()[0]
    assert first_line.startswith("0.000\t0\t")

    manifest = json.loads((tmp_path / "Ballistic" / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["sensitivity_pct"] == 50.0
    assert len(manifest["tables"]) == 5
    assert manifest["report"]["computed"] == 5
    ofz = manifest["tables"][0]
    assert ofz["class"] == "explosive"
    assert ofz["he_equivalent_mm"] > 0


def test_rewrite_is_byte_identical(tmp_path, small_corpus, engine_config):
    result = run_batch(small_corpus, engine_config)
    writer = TableWriter(tmp_path)
    path = writer.write_batch(result)[0]
    before = path.read_bytes()
    writer.write_batch(run_batch(small_corpus, engine_config))
    assert path.read_bytes() == before


@pytest.mark.parametrize("vehicle_id, shell", [("../x", "UBR6"), ("v", ""), ("v", ".."), ("v/w", "UBR6")])
def test_path_for_rejects_unsafe_components(tmp_path, vehicle_id, shell):
    with pytest.raises(ValueError):
        TableWriter(tmp_path).path_for(vehicle_id, shell)
