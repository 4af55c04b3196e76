"""Entry point: python -m rangecard"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path

from .config import DUPLICATE_POLICIES
from .errors import RangecardError
from .settings import Settings, load_settings

logger = logging.getLogger("rangecard")


def _engine_config(args: argparse.Namespace, settings: Settings):
    config = settings.engine_config()
    overrides = {}
    if args.sensitivity is not None:
        overrides["sensitivity_pct"] = args.sensitivity
    if args.workers is not None:
        overrides["workers"] = args.workers
    if args.duplicates is not None:
        overrides["duplicate_policy"] = args.duplicates
    return dataclasses.replace(config, **overrides).validate()


def cmd_compute(args: argparse.Namespace, settings: Settings) -> None:
    from .engine.scheduler import run_batch
    from .io.corpus import load_corpus
    from .io.writer import TableWriter

    config = _engine_config(args, settings)
    vehicles = load_corpus(Path(args.input), vehicle_ids=args.vehicle)
    output = Path(args.output) if args.output is not None else settings.OUTPUT_DIR

    logger.info(f"Computing ballistic tables for {len(vehicles)} vehicles (sensitivity={config.sensitivity_pct}%)")
    logger.info(f"Input:  {args.input}")
    logger.info(f"Output: {output}")

    result = run_batch(vehicles, config)
    paths = TableWriter(output).write_batch(result)
    print(f"ok: wrote {len(paths)} tables to {output}; {result.report.summary()}")


def cmd_fingerprint(args: argparse.Namespace, settings: Settings) -> None:
    from .engine.fingerprint import fingerprint
    from .io.corpus import load_corpus

    config = _engine_config(args, settings)
    vehicles = load_corpus(Path(args.input), vehicle_ids=args.vehicle)
    out = []
    for group in vehicles:
        for record in group.projectiles:
            out.append(
                {
                    "vehicle": group.vehicle_id,
                    "shell": record.output_name,
                    "fingerprint": fingerprint(record, config.sensitivity, config),
                }
            )
    distinct = len({row["fingerprint"] for row in out})
    print(json.dumps({"shells": len(out), "distinct": distinct, "keys": out}, indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rangecard", description="Ballistic tables for rangefinder sights")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--input", required=True, help="Corpus JSON file or directory of <vehicle>.json files")
        p.add_argument("--sensitivity", type=float, default=None, help="Mouse-wheel sensitivity in percent")
        p.add_argument("--workers", type=int, default=None, help="Worker threads (default: CPU count)")
        p.add_argument("--vehicle", action="append", default=None, help="Only process this vehicle id (repeatable)")
        p.add_argument("--duplicates", choices=DUPLICATE_POLICIES, default=None, help="Duplicate shell name policy")

    p_compute = sub.add_parser("compute", help="Compute and write ballistic tables")
    add_common(p_compute)
    p_compute.add_argument("--output", default=None, help="Output directory (default: RANGECARD_OUTPUT_DIR)")
    p_compute.set_defaults(func=cmd_compute)

    p_fp = sub.add_parser("fingerprint", help="List shell fingerprints and how many tables are distinct")
    add_common(p_fp)
    p_fp.set_defaults(func=cmd_fingerprint)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings()
    except RangecardError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    try:
        args.func(args, settings)
    except RangecardError as exc:
        logger.error(str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
