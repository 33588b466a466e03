"""
Wall-clock timing for compiler stages.

Author: xwest
"""

import time
from typing import Any, Callable, List, Tuple, TypeVar

R = TypeVar("R")

# Nanoseconds per unit, largest first. A year is 365.25 days, a month a twelfth of that.
TIME_UNITS: List[Tuple[str, int]] = [
    ("year", 31_557_600_000_000_000),
    ("month", 2_629_800_000_000_000),
    ("day", 86_400_000_000_000),
    ("hour", 3_600_000_000_000),
    ("minute", 60_000_000_000),
    ("second", 1_000_000_000),
    ("millisecond", 1_000_000),
    ("microsecond", 1_000),
    ("nanosecond", 1),
]


def format_time(nanos: int) -> str:
    """
    Format a duration in nanoseconds as human-readable text.

    >>> format_time(1_250_000_000)
    '1 second, 250 milliseconds'

    Units with a zero count are left out, so zero formats as ''.
    """
    parts = []
    remaining = int(nanos)

    for name, size in TIME_UNITS:
        count, remaining = divmod(remaining, size)
        if count > 0:
            parts.append(f"{count} {name}{'s' if count > 1 else ''}")

    return ", ".join(parts)


class Timer:
    """Times calls and keeps a running total of the time measured."""

    def __init__(self):
        self.timings: List[Tuple[str, int]] = []

    def time(self, function: Callable[..., R], *args: Any, label: str = "", **kwargs: Any) -> Tuple[int, R]:
        """
        Call ``function`` and measure how long it takes.

        Returns:
            (elapsed nanoseconds, the function's return value)
        """
        start = time.perf_counter_ns()
        result = function(*args, **kwargs)
        elapsed = time.perf_counter_ns() - start

        self.timings.append((label or getattr(function, "__name__", "call"), elapsed))
        return elapsed, result

    def total_time(self) -> int:
        return sum(elapsed for _, elapsed in self.timings)

    def reset(self):
        self.timings = []
