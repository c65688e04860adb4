"""
procsched package.

Simulates classical CPU scheduling policies (FCFS, SJF, SRTF, Round Robin,
Priority, Preemptive Priority) over a fixed workload and reports per-process
and aggregate timing metrics.
"""

from .algorithms import Policy, SchedulerConfig, compare_policies, run_algorithm, simulate
from .models import AggregateMetrics, Process, ScheduledSlice, ScheduleResult

__all__ = [
    "AggregateMetrics",
    "Policy",
    "Process",
    "ScheduleResult",
    "ScheduledSlice",
    "SchedulerConfig",
    "compare_policies",
    "run_algorithm",
    "simulate",
]
