"""Streaming descriptive statistics over bounded per-metric windows.

Samples are routed by metric namespace into fixed-capacity sliding windows;
on evaluation, requested statistics are computed over each window with
shared prerequisites (sum, mean, quartiles, ...) evaluated once.
"""

__version__ = "0.1.0"

__all__ = [
    "config",
    "core",
    "data",
    "utils",
]
