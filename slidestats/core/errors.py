from __future__ import annotations

from typing import Any


class StatisticsError(ValueError):
    """Base class for errors raised by the statistics core."""


class UnknownStatistic(StatisticsError):
    def __init__(self, name: Any) -> None:
        super().__init__(f"Unknown statistic received: {name!r}")
        self.name = name


class InvalidPercentile(StatisticsError):
    def __init__(self, percent: float) -> None:
        super().__init__(f"Percentile must be within [0, 100], got {percent}")
        self.percent = percent


class EmptyWindow(StatisticsError):
    def __init__(self) -> None:
        super().__init__("Sliding window holds no samples")


class NonNumericSample(StatisticsError):
    def __init__(self, value: Any) -> None:
        try:
            shown = repr(value)
        except ValueError:
            # ints beyond the interpreter's digit limit cannot be rendered
            shown = "..."
        super().__init__(f"Unknown data received: type {type(value).__name__} ({shown})")
        self.value = value
