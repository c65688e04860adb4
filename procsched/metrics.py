from __future__ import annotations

import logging
from typing import Iterable, List, Sequence

from .errors import IncompleteSimulationError
from .models import AggregateMetrics, Process, ScheduledSlice

logger = logging.getLogger(__name__)


def compute_aggregate_metrics(
    processes: Sequence[Process],
    timeline: Iterable[ScheduledSlice] = (),
) -> AggregateMetrics:
    """
    Reduce one finished run to averages, throughput and CPU utilization.

    Throughput is processes per unit of makespan, where makespan is the latest
    completion time. CPU busy time comes from the timeline when one is given,
    otherwise from the burst times. An empty workload yields all-zero metrics.
    """
    if not processes:
        return AggregateMetrics(avg_waiting=0.0, avg_turnaround=0.0, avg_response=0.0, throughput=0.0)

    unfinished = [p.pid for p in processes if not p.is_complete or p.completion_time is None]
    if unfinished:
        raise IncompleteSimulationError(f"Processes still running: {', '.join(unfinished)}")

    n = len(processes)
    makespan = max(p.completion_time for p in processes)

    slices: List[ScheduledSlice] = list(timeline)
    if slices:
        cpu_busy_time = sum(s.duration for s in slices)
    else:
        cpu_busy_time = sum(p.burst_time for p in processes)

    # makespan > 0 whenever every burst is positive
    metrics = AggregateMetrics(
        avg_waiting=sum(p.waiting_time for p in processes) / n,
        avg_turnaround=sum(p.turnaround_time for p in processes) / n,
        avg_response=sum(p.response_time for p in processes) / n,
        throughput=n / makespan,
        makespan=makespan,
        cpu_busy_time=cpu_busy_time,
        cpu_utilization=cpu_busy_time / makespan,
    )
    logger.debug("Aggregated %d processes: %s", n, metrics)
    return metrics
