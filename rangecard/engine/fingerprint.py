"""Cache keys for computed ballistic tables."""

from __future__ import annotations

import dataclasses
import hashlib
import json
from enum import Enum
from typing import Any

from ..config import EngineConfig
from ..shells import ProjectileRecord

# Bump when a formula change makes previously computed tables stale
ENGINE_SCHEMA_VERSION = 1

# Record fields that never reach the output table
_IDENTITY_FIELDS = frozenset({"name"})


def canonical_json_bytes(obj: Any) -> bytes:
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def record_payload(record: ProjectileRecord) -> dict[str, Any]:
    """Every output-affecting field of ``record``.

    Built from ``dataclasses.fields`` so a field added to the record takes part
    in the key without touching this module.
    """
    payload = dataclasses.asdict(record)
    for name in _IDENTITY_FIELDS:
        payload.pop(name, None)
    return _plain(payload)


def engine_payload(config: EngineConfig) -> dict[str, Any]:
    return {
        "dt_s": float(config.dt_s),
        "max_flight_s": float(config.max_flight_s),
        "max_range_m": float(config.max_range_m),
        "altitude_m": float(config.altitude_m),
    }


def fingerprint(record: ProjectileRecord, sensitivity: float, config: EngineConfig | None = None) -> str:
    """Stable key over a shell's physics, the sensitivity and the engine settings.

    ``sensitivity`` is the fraction in (0, 1]; ``config.sensitivity_pct`` is not
    consulted so callers can key any sensitivity against one config.
    """
    payload = {
        "schema": ENGINE_SCHEMA_VERSION,
        "record": record_payload(record),
        "sensitivity": float(sensitivity),
        "engine": engine_payload(config or EngineConfig()),
    }
    return sha256_hex(canonical_json_bytes(payload))
