"""
Exceptions raised by the scheduling engine.

Workload problems subclass ``ValueError`` so callers that only know about the
built-in exceptions still catch them.
"""

from __future__ import annotations


class SchedulingError(Exception):
    """Base class for every error raised by procsched."""


class InvalidWorkloadError(SchedulingError, ValueError):
    """A process specification violates an input constraint."""

    def __init__(self, message: str, pid: str | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.pid = pid
        self.field = field


class InvalidQuantumError(InvalidWorkloadError):
    """Round Robin was configured without a positive time quantum."""

    def __init__(self, quantum) -> None:
        super().__init__(
            f"Round Robin requires a positive integer quantum, got {quantum!r}",
            field="quantum",
        )
        self.quantum = quantum


class IncompleteSimulationError(SchedulingError, ValueError):
    """Metrics were requested for processes that have not finished running."""


class SchedulerInvariantError(SchedulingError, RuntimeError):
    """The simulation reached a state a validated workload cannot produce."""
