from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List, Optional


@dataclass
class Process:
    """
    One process of a workload: static inputs plus the timing facts a single
    simulation run fills in.

    Output fields stay ``None`` until the run that owns this record sets them.
    """

    pid: str
    arrival_time: int
    burst_time: int
    priority: Optional[int] = None

    remaining_time: int = field(init=False)
    start_time: Optional[int] = field(default=None, init=False)
    response_time: Optional[int] = field(default=None, init=False)
    completion_time: Optional[int] = field(default=None, init=False)
    turnaround_time: Optional[int] = field(default=None, init=False)
    waiting_time: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.remaining_time = self.burst_time

    @property
    def is_complete(self) -> bool:
        return self.remaining_time == 0

    def fresh_copy(self) -> "Process":
        """Independent record with the same inputs and no run state."""
        return replace(self)


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: str
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass
class AggregateMetrics:
    avg_waiting: float
    avg_turnaround: float
    avg_response: float
    throughput: float
    makespan: int = 0
    cpu_busy_time: int = 0
    cpu_utilization: float = 0.0


@dataclass
class ScheduleResult:
    policy: str
    quantum: Optional[int]
    processes: List[Process] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)
    metrics: Optional[AggregateMetrics] = None

    def process(self, pid: str) -> Process:
        for p in self.processes:
            if p.pid == pid:
                return p
        raise KeyError(pid)
