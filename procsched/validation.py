from __future__ import annotations

from typing import Iterable, Optional

from .errors import InvalidQuantumError, InvalidWorkloadError
from .models import Process


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_processes(processes: Iterable[Process]) -> None:
    """
    Reject a workload before it is simulated.

    Raises InvalidWorkloadError naming the first offending process and field.
    """
    seen: set[str] = set()
    for p in processes:
        if p.pid in seen:
            raise InvalidWorkloadError(f"Duplicate process id {p.pid!r}", pid=p.pid, field="pid")
        seen.add(p.pid)

        if not _is_int(p.arrival_time) or p.arrival_time < 0:
            raise InvalidWorkloadError(
                f"Process {p.pid!r}: arrival_time must be a non-negative integer, got {p.arrival_time!r}",
                pid=p.pid,
                field="arrival_time",
            )
        if not _is_int(p.burst_time) or p.burst_time <= 0:
            raise InvalidWorkloadError(
                f"Process {p.pid!r}: burst_time must be a positive integer, got {p.burst_time!r}",
                pid=p.pid,
                field="burst_time",
            )
        if p.priority is not None and not _is_int(p.priority):
            raise InvalidWorkloadError(
                f"Process {p.pid!r}: priority must be an integer, got {p.priority!r}",
                pid=p.pid,
                field="priority",
            )


def validate_quantum(quantum: Optional[int]) -> int:
    if quantum is None or not _is_int(quantum) or quantum <= 0:
        raise InvalidQuantumError(quantum)
    return quantum
