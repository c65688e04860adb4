from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ScheduledSlice

_COLORS = ["red", "green", "yellow", "blue", "magenta", "cyan"]

# (pid, start, end); pid is None while the CPU is idle
Segment = Tuple[Optional[str], int, int]


def _segments(slices: Sequence[ScheduledSlice]) -> Iterator[Segment]:
    """Walk the timeline from t=0, filling idle stretches with pid-less segments."""
    clock = 0
    for sl in sorted(slices, key=lambda s: (s.start_time, s.end_time)):
        if sl.start_time > clock:
            yield None, clock, sl.start_time
        yield sl.pid, sl.start_time, sl.end_time
        clock = sl.end_time


def _time_marks(segments: Sequence[Segment]) -> str:
    return "0" + "".join(f"{end:>3}" for _, _, end in segments)


def build_gantt(slices: Sequence[ScheduledSlice]) -> Tuple[Panel, str]:
    """
    Render the timeline as a Rich panel with one colored bar per slice and a
    pid label underneath, plus a line of time marks at every boundary.
    """
    if not slices:
        return Panel("No execution", title="Gantt Chart"), ""

    segments: List[Segment] = list(_segments(slices))
    palette: Dict[str, str] = {}
    bars = Text()
    labels = Text()

    for pid, start, end in segments:
        width = max(1, end - start)
        if pid is None:
            bars.append(" " * width)
            labels.append(" " * width)
            continue
        color = palette.setdefault(pid, _COLORS[len(palette) % len(_COLORS)])
        bars.append(" " * width, style=f"on {color}")
        labels.append(pid[:width].ljust(width), style="bold")

    grid = Table.grid(padding=(0, 0))
    grid.add_row(bars)
    grid.add_row(labels)

    return Panel.fit(grid, title="Gantt Chart"), _time_marks(segments)
