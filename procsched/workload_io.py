from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import List, Mapping

from .errors import InvalidWorkloadError
from .models import Process

logger = logging.getLogger(__name__)


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        processes = _load_json(path)
    elif suffix == ".csv":
        processes = _load_csv(path)
    else:
        raise InvalidWorkloadError(f"Unsupported workload format: {suffix} (use .json or .csv)")

    logger.info("Loaded %d processes from %s", len(processes), path)
    return processes


def demo_workload() -> List[Process]:
    """Five-process workload used when no file is given."""
    return [
        Process("P1", arrival_time=0, burst_time=10, priority=3),
        Process("P2", arrival_time=1, burst_time=5, priority=1),
        Process("P3", arrival_time=3, burst_time=8, priority=2),
        Process("P4", arrival_time=5, burst_time=2, priority=4),
        Process("P5", arrival_time=6, burst_time=4, priority=5),
    ]


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise InvalidWorkloadError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8", newline="") as f:
        return [_process_from_mapping(row) for row in csv.DictReader(f)]


def _int_field(mapping: Mapping, key: str):
    value = mapping[key]
    if isinstance(value, str):
        # CSV cells are always strings; "2.5" fails int() and is rejected.
        return int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidWorkloadError(
            f"Field {key!r} must be an integer, got {value!r}",
            pid=str(mapping.get("pid")),
            field=key,
        )
    return value


def _process_from_mapping(mapping: Mapping) -> Process:
    try:
        pid = str(mapping["pid"])
        arrival_time = _int_field(mapping, "arrival_time")
        burst_time = _int_field(mapping, "burst_time")
        has_priority = mapping.get("priority") not in (None, "")
        priority = _int_field(mapping, "priority") if has_priority else None
    except InvalidWorkloadError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise InvalidWorkloadError(f"Invalid process entry: {mapping!r}") from exc

    logger.debug("Parsed process %s", pid)
    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
    )
