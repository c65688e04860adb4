from __future__ import annotations

import heapq
import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import SchedulerInvariantError
from .metrics import compute_aggregate_metrics
from .models import Process, ScheduleResult, ScheduledSlice
from .validation import validate_processes, validate_quantum

logger = logging.getLogger(__name__)


class Policy(str, Enum):
    FCFS = "fcfs"
    SJF = "sjf"
    SRTF = "srtf"
    ROUND_ROBIN = "rr"
    PRIORITY = "priority"
    PREEMPTIVE_PRIORITY = "ppriority"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Policy.FCFS: "FCFS",
    Policy.SJF: "SJF (non-preemptive)",
    Policy.SRTF: "SRTF",
    Policy.ROUND_ROBIN: "Round Robin",
    Policy.PRIORITY: "Priority (non-preemptive)",
    Policy.PREEMPTIVE_PRIORITY: "Priority (preemptive)",
}


@dataclass(frozen=True)
class SchedulerConfig:
    # Only Round Robin reads the quantum; other policies ignore it.
    quantum: Optional[int] = None


class _Run:
    """
    Per-run simulation state shared by every policy: the clock, the arrival
    cursor over the arrival-sorted processes, and the recorded timeline.
    """

    def __init__(self, processes: Sequence[Process]) -> None:
        # sorted() is stable, so equal arrivals keep their input order.
        self.ordered: List[Process] = sorted(processes, key=lambda p: p.arrival_time)
        self.order: Dict[str, int] = {p.pid: idx for idx, p in enumerate(self.ordered)}
        self.clock = 0
        self.cursor = 0
        self.finished: List[Process] = []
        self.timeline: List[ScheduledSlice] = []

    @property
    def done(self) -> bool:
        return len(self.finished) == len(self.ordered)

    def admit(self) -> List[Process]:
        """Return every not-yet-admitted process with arrival_time <= clock."""
        start = self.cursor
        while self.cursor < len(self.ordered) and self.ordered[self.cursor].arrival_time <= self.clock:
            self.cursor += 1
        return self.ordered[start:self.cursor]

    def next_arrival(self) -> Optional[int]:
        if self.cursor < len(self.ordered):
            return self.ordered[self.cursor].arrival_time
        return None

    def skip_idle(self) -> None:
        """Jump the clock to the next arrival when nothing is ready to run."""
        nxt = self.next_arrival()
        if nxt is None:
            raise SchedulerInvariantError(
                f"Ready set empty at t={self.clock} with {len(self.ordered) - len(self.finished)} "
                "unfinished processes and no pending arrivals"
            )
        logger.debug("t=%d: CPU idle until t=%d", self.clock, nxt)
        self.clock = nxt

    def execute(self, p: Process, run_time: int) -> None:
        """Run p for run_time units starting at the current clock."""
        if p.response_time is None:
            p.start_time = self.clock
            p.response_time = self.clock - p.arrival_time
            logger.debug("t=%d: first dispatch of %s (response %d)", self.clock, p.pid, p.response_time)

        end = self.clock + run_time
        last = self.timeline[-1] if self.timeline else None
        if last is not None and last.pid == p.pid and last.end_time == self.clock:
            last.end_time = end
        else:
            self.timeline.append(ScheduledSlice(pid=p.pid, start_time=self.clock, end_time=end))

        p.remaining_time -= run_time
        self.clock = end

        if p.remaining_time == 0:
            p.completion_time = self.clock
            p.turnaround_time = p.completion_time - p.arrival_time
            p.waiting_time = p.turnaround_time - p.burst_time
            self.finished.append(p)
            logger.debug("t=%d: %s completed", self.clock, p.pid)

    def slice_until_next_arrival(self, p: Process) -> int:
        """Remaining time of p, cut short at the next unadmitted arrival."""
        nxt = self.next_arrival()
        if nxt is None:
            return p.remaining_time
        return min(p.remaining_time, nxt - self.clock)


class _KeyedReadySet:
    """
    Min-heap of ready processes ordered by a policy key, ties broken by
    arrival order.
    """

    def __init__(self, run: _Run, key: Callable[[Process], object]) -> None:
        self._run = run
        self._key = key
        self._heap: List[Tuple[object, int, Process]] = []

    def __bool__(self) -> bool:
        return bool(self._heap)

    def push(self, p: Process) -> None:
        heapq.heappush(self._heap, (self._key(p), self._run.order[p.pid], p))

    def extend(self, processes: Iterable[Process]) -> None:
        for p in processes:
            self.push(p)

    def pop(self) -> Process:
        return heapq.heappop(self._heap)[2]


def _priority_rank(p: Process) -> float:
    # A process without a priority ranks below every explicit one.
    return p.priority if p.priority is not None else float("inf")


def _run_non_preemptive(run: _Run, key: Callable[[Process], object]) -> None:
    ready = _KeyedReadySet(run, key)
    while not run.done:
        ready.extend(run.admit())
        if not ready:
            run.skip_idle()
            continue
        p = ready.pop()
        run.execute(p, p.remaining_time)


def _run_preemptive(run: _Run, key: Callable[[Process], object]) -> None:
    ready = _KeyedReadySet(run, key)
    current: Optional[Process] = None
    while not run.done:
        ready.extend(run.admit())
        if not ready:
            run.skip_idle()
            continue

        p = ready.pop()
        if current is not None and current is not p and not current.is_complete:
            logger.debug("t=%d: %s preempts %s", run.clock, p.pid, current.pid)
        current = p

        run.execute(p, run.slice_until_next_arrival(p))
        if not p.is_complete:
            ready.push(p)


def schedule_fcfs(run: _Run, config: SchedulerConfig) -> None:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    for p in run.ordered:
        if run.clock < p.arrival_time:
            run.clock = p.arrival_time
        run.execute(p, p.burst_time)


def schedule_sjf(run: _Run, config: SchedulerConfig) -> None:
    """
    Shortest Job First (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest burst time.
    """
    _run_non_preemptive(run, key=lambda p: p.burst_time)


def schedule_srtf(run: _Run, config: SchedulerConfig) -> None:
    """
    Shortest Remaining Time First (preemptive SJF).

    The running process is re-evaluated only at arrivals, so each slice ends
    at completion or at the next arrival, whichever comes first.
    """
    _run_preemptive(run, key=lambda p: p.remaining_time)


def schedule_rr(run: _Run, config: SchedulerConfig) -> None:
    """
    Round Robin scheduling with a fixed time quantum.
    """
    quantum = validate_quantum(config.quantum)
    ready: Deque[Process] = deque()

    while not run.done:
        ready.extend(run.admit())
        if not ready:
            run.skip_idle()
            continue

        p = ready.popleft()
        run.execute(p, min(quantum, p.remaining_time))

        # Arrivals during the slice queue up ahead of the preempted process.
        ready.extend(run.admit())
        if not p.is_complete:
            ready.append(p)


def schedule_priority(run: _Run, config: SchedulerConfig) -> None:
    """
    Static Priority scheduling (non-preemptive).

    Lower numeric priority value means higher priority; ties go to the
    earlier arrival.
    """
    _run_non_preemptive(run, key=_priority_rank)


def schedule_preemptive_priority(run: _Run, config: SchedulerConfig) -> None:
    """
    Preemptive Priority scheduling.

    Same ordering as schedule_priority (lower value wins), re-evaluated at
    every arrival like SRTF.
    """
    _run_preemptive(run, key=_priority_rank)


ALGORITHMS: Dict[Policy, Callable[[_Run, SchedulerConfig], None]] = {
    Policy.FCFS: schedule_fcfs,
    Policy.SJF: schedule_sjf,
    Policy.SRTF: schedule_srtf,
    Policy.ROUND_ROBIN: schedule_rr,
    Policy.PRIORITY: schedule_priority,
    Policy.PREEMPTIVE_PRIORITY: schedule_preemptive_priority,
}


def simulate(
    policy: Policy,
    processes: Iterable[Process],
    config: Optional[SchedulerConfig] = None,
) -> ScheduleResult:
    """
    Simulate one policy over a workload.

    The caller's Process records are never touched: the run works on fresh
    copies, which are returned in the caller's input order inside the result.
    Execution order is available from the timeline.
    """
    policy = Policy(policy)
    config = config or SchedulerConfig()
    processes = list(processes)
    validate_processes(processes)

    quantum = None
    if policy is Policy.ROUND_ROBIN:
        quantum = validate_quantum(config.quantum)

    copies = [p.fresh_copy() for p in processes]
    run = _Run(copies)
    logger.info("Simulating %s over %d processes", policy.label, len(processes))
    ALGORITHMS[policy](run, config)

    if not run.done:
        raise SchedulerInvariantError(f"{policy.label} stopped with unfinished processes")

    result = ScheduleResult(
        policy=policy.label,
        quantum=quantum,
        processes=copies,
        timeline=run.timeline,
    )
    result.metrics = compute_aggregate_metrics(result.processes, result.timeline)
    return result


def run_algorithm(name: str, processes: List[Process], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm by name (fcfs, sjf, srtf, rr,
    priority, ppriority).
    """
    try:
        policy = Policy(name.lower())
    except ValueError:
        raise ValueError(f"Unknown algorithm '{name}'") from None

    return simulate(policy, processes, SchedulerConfig(quantum=quantum))


def compare_policies(
    processes: Iterable[Process],
    quantum: Optional[int] = 2,
    policies: Optional[Iterable[Policy]] = None,
) -> Dict[Policy, ScheduleResult]:
    """
    Run several policies over the same workload, each on its own copies.
    """
    processes = list(processes)
    selected = list(policies) if policies is not None else list(Policy)
    config = SchedulerConfig(quantum=quantum)
    return {Policy(policy): simulate(policy, processes, config) for policy in selected}
