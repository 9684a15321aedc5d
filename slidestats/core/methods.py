from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from . import statistics as stats
from .errors import InvalidPercentile, UnknownStatistic


class Statistic(str, Enum):
    COUNT = "count"
    SUM = "sum"
    MEAN = "mean"
    MEDIAN = "median"
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    RANGE = "range"
    VARIANCE = "variance"
    STANDARD_DEVIATION = "standard_deviation"
    MODE = "mode"
    KURTOSIS = "kurtosis"
    SKEWNESS = "skewness"
    TRIMEAN = "trimean"
    FIRST_QUARTILE = "first_quartile"
    THIRD_QUARTILE = "third_quartile"
    QUARTILE_RANGE = "quartile_range"


PERCENTILE_SUFFIX = "%_ile"
DEFAULT_PERCENTILES: Tuple[float, ...] = (2, 9, 25, 75, 91, 95, 98, 99)


@dataclass(frozen=True)
class Percentile:
    percent: float

    @property
    def label(self) -> str:
        # Shortest round-tripping form, so distinct percents keep distinct names.
        text = repr(float(self.percent) + 0.0)
        if text.endswith(".0"):
            text = text[:-2]
        return f"{text}{PERCENTILE_SUFFIX}"


StatKey = Union[Statistic, Percentile]
Scratchpad = Mapping[StatKey, Any]
MethodFunc = Callable[[Sequence[float], Scratchpad], Any]


@dataclass
class MethodSpec:
    key: StatKey
    compute: MethodFunc
    prerequisites: Tuple[StatKey, ...] = ()


def statistic_name(key: StatKey) -> str:
    if isinstance(key, Percentile):
        return key.label
    return key.value


def build_registry() -> Dict[Statistic, MethodSpec]:
    S = Statistic

    def spec(key: Statistic, compute: MethodFunc, *prerequisites: StatKey) -> MethodSpec:
        return MethodSpec(key=key, compute=compute, prerequisites=tuple(prerequisites))

    return {
        S.COUNT: spec(S.COUNT, lambda v, r: stats.count(v)),
        S.SUM: spec(S.SUM, lambda v, r: stats.total(v)),
        S.MEAN: spec(S.MEAN, lambda v, r: stats.mean(r[S.SUM], r[S.COUNT]), S.SUM, S.COUNT),
        S.MEDIAN: spec(S.MEDIAN, lambda v, r: stats.median(v)),
        S.MINIMUM: spec(S.MINIMUM, lambda v, r: stats.minimum(v)),
        S.MAXIMUM: spec(S.MAXIMUM, lambda v, r: stats.maximum(v)),
        S.RANGE: spec(
            S.RANGE, lambda v, r: stats.value_range(r[S.MINIMUM], r[S.MAXIMUM]), S.MINIMUM, S.MAXIMUM
        ),
        S.VARIANCE: spec(S.VARIANCE, lambda v, r: stats.variance(v, r[S.MEAN]), S.MEAN),
        S.STANDARD_DEVIATION: spec(
            S.STANDARD_DEVIATION, lambda v, r: stats.standard_deviation(r[S.VARIANCE]), S.VARIANCE
        ),
        S.MODE: spec(S.MODE, lambda v, r: stats.mode(v)),
        S.SKEWNESS: spec(
            S.SKEWNESS,
            lambda v, r: stats.skewness(v, r[S.MEAN], r[S.STANDARD_DEVIATION]),
            S.MEAN,
            S.STANDARD_DEVIATION,
        ),
        S.KURTOSIS: spec(
            S.KURTOSIS,
            lambda v, r: stats.kurtosis(v, r[S.MEAN], r[S.STANDARD_DEVIATION]),
            S.MEAN,
            S.STANDARD_DEVIATION,
        ),
        S.FIRST_QUARTILE: spec(S.FIRST_QUARTILE, lambda v, r: stats.first_quartile(v)),
        S.THIRD_QUARTILE: spec(S.THIRD_QUARTILE, lambda v, r: stats.third_quartile(v)),
        S.QUARTILE_RANGE: spec(
            S.QUARTILE_RANGE,
            lambda v, r: stats.quartile_range(r[S.FIRST_QUARTILE], r[S.THIRD_QUARTILE]),
            S.FIRST_QUARTILE,
            S.THIRD_QUARTILE,
        ),
        S.TRIMEAN: spec(
            S.TRIMEAN,
            lambda v, r: stats.trimean(r[S.FIRST_QUARTILE], r[S.MEDIAN], r[S.THIRD_QUARTILE]),
            S.FIRST_QUARTILE,
            S.MEDIAN,
            S.THIRD_QUARTILE,
        ),
    }


REGISTRY: Dict[Statistic, MethodSpec] = build_registry()

_missing = set(Statistic) - set(REGISTRY)
if _missing:
    raise RuntimeError(f"No compute method registered for {sorted(s.value for s in _missing)}")


def method_for(key: StatKey) -> MethodSpec:
    if isinstance(key, Percentile):
        percent = key.percent
        return MethodSpec(
            key=key,
            compute=lambda v, r: stats.percentile_nearest_rank(v, percent),
        )
    return REGISTRY[key]


def parse_statistic(name: Union[str, StatKey]) -> StatKey:
    """Map a statistic name onto its key.

    Percentiles are written ``<p>%_ile`` (``95%_ile``, ``99.9%_ile``).
    """
    if isinstance(name, (Statistic, Percentile)):
        if isinstance(name, Percentile) and not 0 <= name.percent <= 100:
            raise InvalidPercentile(name.percent)
        return name
    if not isinstance(name, str):
        raise UnknownStatistic(name)
    try:
        return Statistic(name)
    except ValueError:
        pass
    if name.endswith(PERCENTILE_SUFFIX):
        raw = name[: -len(PERCENTILE_SUFFIX)]
        try:
            percent = float(raw)
        except ValueError:
            raise UnknownStatistic(name) from None
        if math.isnan(percent):
            raise UnknownStatistic(name)
        if not 0 <= percent <= 100:
            raise InvalidPercentile(percent)
        return Percentile(percent)
    raise UnknownStatistic(name)


def parse_request(names: Iterable[Union[str, StatKey]]) -> List[StatKey]:
    """Parse requested names in order, dropping duplicates."""
    keys: List[StatKey] = []
    for name in names:
        key = parse_statistic(name)
        if key not in keys:
            keys.append(key)
    return keys


def default_statistics() -> List[str]:
    names = [s.value for s in Statistic]
    names.extend(Percentile(float(p)).label for p in DEFAULT_PERCENTILES)
    return names
