from __future__ import annotations

import math
from collections import Counter
from typing import Iterable, Iterator, List, Sequence

from .errors import InvalidPercentile


NAN = float("nan")


def _sum(terms: Iterable[float]) -> float:
    # fsum raises on intermediate overflow and on inf + -inf; plain summation
    # yields inf or nan instead.
    terms = list(terms)
    try:
        return math.fsum(terms)
    except (OverflowError, ValueError):
        return sum(terms)


def count(values: Sequence[float]) -> int:
    return len(values)


def total(values: Sequence[float]) -> float:
    return _sum(values)


def mean(sum_: float, count_: int) -> float:
    if count_ == 0:
        return NAN
    return sum_ / count_


def minimum(values: Sequence[float]) -> float:
    return values[0] if values else NAN


def maximum(values: Sequence[float]) -> float:
    return values[-1] if values else NAN


def value_range(min_: float, max_: float) -> float:
    return max_ - min_


def _squared_deviations(values: Sequence[float], mean_: float) -> Iterator[float]:
    # Multiplication overflows to inf where float ** raises OverflowError.
    for v in values:
        d = v - mean_
        yield d * d


def variance(values: Sequence[float], mean_: float) -> float:
    """Population variance: squared deviations divided by n, 0 for n <= 1."""
    n = len(values)
    if n <= 1:
        return 0.0
    return _sum(_squared_deviations(values, mean_)) / n


def standard_deviation(variance_: float) -> float:
    return math.sqrt(variance_)


def median(values: Sequence[float]) -> float:
    n = len(values)
    if n == 0:
        return NAN
    mid = n // 2
    if n % 2 == 0:
        return (values[mid - 1] + values[mid]) / 2
    return values[mid]


def percentile_nearest_rank(values: Sequence[float], percent: float) -> float:
    """Nearest-rank percentile: the element at rank ceil(n * p / 100)."""
    if not 0 <= percent <= 100:
        raise InvalidPercentile(percent)
    if not values:
        return NAN
    rank = math.ceil(len(values) * percent / 100.0)
    if rank == 0:
        return values[0]
    return values[rank - 1]


def mode(values: Sequence[float]) -> List[float]:
    """Most frequent values, ascending.

    Empty when every value is unique or every value occurs equally often.
    """
    frequencies = Counter(values)
    if not frequencies:
        return []
    highest = max(frequencies.values())
    modes = sorted(v for v, freq in frequencies.items() if freq == highest)
    if highest == 1 or len(modes) * highest == len(values):
        return []
    return modes


def _lower_half(values: Sequence[float]) -> Sequence[float]:
    n = len(values)
    return values[: n // 2] if n > 1 else values


def _upper_half(values: Sequence[float]) -> Sequence[float]:
    n = len(values)
    return values[(n + 1) // 2 :] if n > 1 else values


# Halves exclude the median element for odd n; a single sample is its own half.
def first_quartile(values: Sequence[float]) -> float:
    return median(_lower_half(values))


def third_quartile(values: Sequence[float]) -> float:
    return median(_upper_half(values))


def quartile_range(first: float, third: float) -> float:
    return third - first


def trimean(first: float, median_: float, third: float) -> float:
    return (first + 2 * median_ + third) / 4


def _moment_terms(values: Sequence[float], mean_: float, stdev: float, order: int) -> Iterator[float]:
    for v in values:
        z = (v - mean_) / stdev
        term = 1.0
        for _ in range(order):
            term *= z
        yield term


def _standardized_moment(values: Sequence[float], mean_: float, stdev: float, order: int) -> float:
    n = len(values)
    if n <= 2 or stdev == 0 or math.isnan(stdev):
        return NAN
    return _sum(_moment_terms(values, mean_, stdev, order)) / n


def skewness(values: Sequence[float], mean_: float, stdev: float) -> float:
    """Population skewness, NaN for fewer than three samples or zero spread."""
    return _standardized_moment(values, mean_, stdev, 3)


def kurtosis(values: Sequence[float], mean_: float, stdev: float) -> float:
    """Population (non-excess) kurtosis, NaN under the same conditions as skewness."""
    return _standardized_moment(values, mean_, stdev, 4)
