# rangecard/engine/scheduler.py
"""Fan per-(vehicle, shell) work out over a thread pool.

Workers share nothing but the table cache. Results are collected as they
complete and re-sorted by vehicle id, then shell id, so the output of a batch
does not depend on completion order.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from functools import partial

from ..config import EngineConfig
from ..errors import EmptyCorpusError, InvalidRecord
from ..shells import ProjectileRecord
from ..vehicles import VehicleGroup, select_shells
from .cache import TableCache
from .compute import ComputedTable, compute_table
from .fingerprint import fingerprint
from .report import BatchReport, IssueKind, ShellIssue

logger = logging.getLogger("rangecard.engine")


@dataclass(frozen=True)
class ShellResult:
    shell: str
    record: ProjectileRecord
    table: ComputedTable


@dataclass(frozen=True)
class VehicleResult:
    vehicle_id: str
    shells: tuple[ShellResult, ...]


@dataclass
class BatchResult:
    vehicles: list[VehicleResult]
    report: BatchReport
    sensitivity_pct: float

    def table(self, vehicle_id: str, shell: str) -> ComputedTable | None:
        for vehicle in self.vehicles:
            if vehicle.vehicle_id == vehicle_id:
                for result in vehicle.shells:
                    if result.shell == shell:
                        return result.table
        return None


def resolve_workers(workers: int | None) -> int:
    return workers or os.cpu_count() or 1


def _compute_cached(record: ProjectileRecord, config: EngineConfig, cache: TableCache[ComputedTable]) -> ComputedTable:
    key = fingerprint(record, config.sensitivity, config)
    return cache.get_or_compute(key, partial(compute_table, record, config, key))


def run_batch(
    vehicles: Iterable[VehicleGroup],
    config: EngineConfig | None = None,
    cache: TableCache[ComputedTable] | None = None,
) -> BatchResult:
    """Compute every eligible shell of every vehicle.

    Per-shell failures are recorded in the report and never abort the batch.

    Raises:
        ConfigError: ``config`` does not validate.
        EmptyCorpusError: there is nothing to compute.
    """
    config = (config or EngineConfig()).validate()
    cache = cache if cache is not None else TableCache()
    groups = list(vehicles)
    report = BatchReport(vehicles=len(groups))

    jobs: list[tuple[str, str, ProjectileRecord]] = []
    for group in groups:
        selected, issues = select_shells(group, config.duplicate_policy)
        for issue in issues:
            report.add(issue)
        jobs.extend((group.vehicle_id, record.output_name, record) for record in selected)

    if not jobs:
        raise EmptyCorpusError("no shells to compute")

    before = cache.stats()
    workers = resolve_workers(config.workers)
    logger.info(f"Computing {len(jobs)} shells for {len(groups)} vehicles on {workers} workers")

    done: dict[tuple[str, str], ShellResult] = {}
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rangecard") as pool:
        futures = {pool.submit(_compute_cached, record, config, cache): (vid, shell, record) for vid, shell, record in jobs}
        for future in as_completed(futures):
            vid, shell, record = futures[future]
            try:
                table = future.result()
            except InvalidRecord as exc:
                logger.warning(f"Skipping {vid}/{shell}: {exc.reason}")
                report.add(ShellIssue(vid, shell, IssueKind.INVALID, exc.reason))
            except Exception as exc:
                logger.error(f"Failed to compute {vid}/{shell}: {exc}")
                report.add(ShellIssue(vid, shell, IssueKind.ERROR, f"{type(exc).__name__}: {exc}"))
            else:
                done[(vid, shell)] = ShellResult(shell, record, table)
                for condition in table.conditions:
                    report.add(ShellIssue(vid, shell, condition.kind, condition.message))

    by_vehicle: dict[str, list[ShellResult]] = {}
    for (vid, _shell), result in sorted(done.items()):
        by_vehicle.setdefault(vid, []).append(result)
    results = [VehicleResult(vid, tuple(shells)) for vid, shells in sorted(by_vehicle.items())]

    after = cache.stats()
    report.computed = len(done)
    report.distinct_tables = len({r.table.fingerprint for r in done.values()})
    report.cache_hits = after.hits - before.hits
    report.sort()
    logger.info(f"Done: {report.summary()}")
    return BatchResult(vehicles=results, report=report, sensitivity_pct=config.sensitivity_pct)
