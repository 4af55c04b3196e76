"""Tab-separated ballistic tables and the run manifest.

Row layout: ``distance<TAB>time<TAB>penetration``. Distance keeps three
decimals, time is rounded to a tenth of a second (whole seconds without a
decimal point) and penetration to whole millimeters. Both roundings go half
away from zero.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..shells import is_safe_path_component

if TYPE_CHECKING:
    from ..engine.compute import ComputedTable
    from ..engine.scheduler import BatchResult

INFINITY_MARK = "∞"
MANIFEST_NAME = "manifest.json"


def round_half_away(value: float, ndigits: int = 0) -> float:
    scale = 10.0**ndigits
    return math.copysign(math.floor(abs(value) * scale + 0.5), value) / scale


def format_distance(distance_m: float) -> str:
    return f"{distance_m:.3f}"


def format_time(time_s: float) -> str:
    t = round_half_away(time_s, 1)
    if abs(t - round(t)) < 1e-9:
        return str(int(round(t)))
    return f"{t:.1f}"


def format_penetration(penetration_mm: float) -> str:
    if not math.isfinite(penetration_mm):
        return INFINITY_MARK
    return str(int(round_half_away(penetration_mm)))


def format_table(table: ComputedTable) -> str:
    lines = []
    prev = -math.inf
    for row in table.rows:
        # Rows ascend by distance; anything after a decrease is not emitted
        if row.distance_m < prev:
            break
        prev = row.distance_m
        lines.append(
            f"{format_distance(row.distance_m)}\t{format_time(row.time_s)}\t{format_penetration(row.penetration_mm)}"
        )
    return "".join(line + "\n" for line in lines)


class TableWriter:
    """Writes ``<root>/<vehicle>/<shell>.txt`` files and a run manifest."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, vehicle_id: str, shell: str) -> Path:
        for part in (vehicle_id, shell):
            if not is_safe_path_component(part):
                raise ValueError(f"unsafe path component {part!r}")
        return self.root / vehicle_id / f"{shell}.txt"

    def write_table(self, vehicle_id: str, shell: str, table: ComputedTable) -> Path:
        path = self.path_for(vehicle_id, shell)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="\n") as f:
            f.write(format_table(table))
        return path

    def write_batch(self, result: BatchResult) -> list[Path]:
        """Write every table of ``result`` in vehicle, then shell order."""
        paths = []
        for vehicle in sorted(result.vehicles, key=lambda v: v.vehicle_id):
            for shell in sorted(vehicle.shells, key=lambda s: s.shell):
                paths.append(self.write_table(vehicle.vehicle_id, shell.shell, shell.table))
        self.write_manifest(result)
        return paths

    def write_manifest(self, result: BatchResult) -> Path:
        path = self.root / MANIFEST_NAME
        with open(path, "w", encoding="utf-8") as f:
            json.dump(manifest(result), f, indent=2)
            f.write("\n")
        return path


def manifest(result: BatchResult) -> dict[str, Any]:
    tables = []
    for vehicle in sorted(result.vehicles, key=lambda v: v.vehicle_id):
        for shell in sorted(vehicle.shells, key=lambda s: s.shell):
            table = shell.table
            tables.append(
                {
                    "vehicle": vehicle.vehicle_id,
                    "shell": shell.shell,
                    "fingerprint": table.fingerprint,
                    "class": table.shell_class.value,
                    "rows": len(table.rows),
                    "he_equivalent_mm": table.he_equivalent_mm,
                    "truncated": table.truncated,
                    "degraded": table.degraded,
                }
            )
    return {
        "sensitivity_pct": result.sensitivity_pct,
        "tables": tables,
        "report": result.report.to_dict(),
    }
