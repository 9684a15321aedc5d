from __future__ import annotations

import math
from typing import List

import pytest

from slidestats.core import statistics as st
from slidestats.core.buffers import SlidingWindow
from slidestats.core.errors import EmptyWindow, InvalidPercentile, UnknownStatistic
from slidestats.core.methods import Statistic, default_statistics, parse_request
from slidestats.core.resolver import DependencyResolver, resolve


def make_window(values: List[float], capacity: int = 5) -> SlidingWindow:
    win = SlidingWindow(capacity=capacity)
    for i, v in enumerate(values):
        win.insert(v, timestamp=float(i))
    return win


def test_scenario_capacity_five() -> None:
    win = SlidingWindow(capacity=5)
    inserts = [1.0, 5.0, 7.0, 9.0, 12.0, 16.0, 18.0, 24.0, 33.0, 53.0]
    requested = ["count", "mean", "sum", "median", "minimum", "maximum", "range", "skewness", "kurtosis"]
    results = []
    for i, v in enumerate(inserts):
        win.insert(v, timestamp=float(i))
        results.append(resolve(win, requested))

    first = results[0]
    assert first["count"] == 1 and first["mean"] == 1.0 and first["sum"] == 1.0
    assert math.isnan(first["skewness"]) and math.isnan(first["kurtosis"])
    assert math.isnan(results[1]["skewness"]) and math.isnan(results[1]["kurtosis"])

    fifth = results[4]
    assert fifth["count"] == 5
    assert abs(fifth["mean"] - 6.8) < 1e-9
    assert fifth["sum"] == 34.0
    assert fifth["median"] == 7.0
    assert (fifth["minimum"], fifth["maximum"], fifth["range"]) == (1.0, 12.0, 11.0)

    last = results[9]
    assert last["count"] == 5
    assert abs(last["mean"] - 28.8) < 1e-9
    assert last["sum"] == 144.0
    assert last["median"] == 24.0
    assert (last["minimum"], last["maximum"], last["range"]) == (16.0, 53.0, 37.0)
    assert abs(last["skewness"] - 0.883) < 0.01
    assert abs(last["kurtosis"] - 2.337) < 0.01


def test_reference_series() -> None:
    # Window of 5 fed in timestamp order.
    inserts = [33.0, 53.0, 24.0, 16.0, 18.0, 1.0, 7.0, 9.0, 5.0, 12.0]
    expected = {
        "count": [1, 2, 3, 4, 5, 5, 5, 5, 5, 5],
        "mean": [33, 43, 36.66666667, 31.5, 28.8, 22.4, 13.2, 10.2, 8, 6.8],
        "median": [33, 43, 33, 28.5, 24, 18, 16, 9, 7, 7],
        "sum": [33, 86, 110, 126, 144, 112, 66, 51, 40, 34],
        "standard_deviation": [0, 10, 12.120, 13.793, 13.467, 17.072, 8.183, 6.177, 5.657, 3.709],
        "variance": [0, 100, 146.889, 190.25, 181.36, 291.44, 66.96, 38.16, 32, 13.76],
        "maximum": [33, 53, 53, 53, 53, 53, 24, 18, 18, 12],
        "minimum": [33, 33, 24, 16, 16, 1, 1, 1, 1, 1],
        "99%_ile": [33, 53, 53, 53, 53, 53, 24, 18, 18, 12],
        "95%_ile": [33, 53, 53, 53, 53, 53, 24, 18, 18, 12],
        "range": [0, 20, 29, 37, 37, 52, 23, 17, 17, 11],
    }
    skewness = [None, None, 0.426, 0.552, 0.883, 0.744, -0.242, -0.122, 0.696, -0.195]
    kurtosis = [None, None, None, 1.8964, 2.337, 2.563, 1.6874, 1.6624, 2.4383, 2.0035]
    trimean = [None, None, 35.75, 30, 27, 20.75, 14.25, 9.75, 7.625, 6.875]

    win = SlidingWindow(capacity=5)
    resolver = DependencyResolver()
    for i, v in enumerate(inserts):
        win.insert(v, timestamp=float(i))
        out = resolver.resolve(win, default_statistics()).results
        for name, series in expected.items():
            assert abs(out[name] - series[i]) < 0.01, (name, i)
        for name, series in (("skewness", skewness), ("kurtosis", kurtosis), ("trimean", trimean)):
            if series[i] is not None:
                assert abs(out[name] - series[i]) < 0.01, (name, i)
        assert out["mode"] == []


def test_mean_computed_once(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    original = st.mean

    def counting_mean(sum_: float, count_: int) -> float:
        calls.append((sum_, count_))
        return original(sum_, count_)

    monkeypatch.setattr(st, "mean", counting_mean)
    win = make_window([2.0, 4.0, 4.0, 5.0, 9.0])
    for request in (["mean", "variance", "skewness"], ["skewness", "variance", "mean"]):
        calls.clear()
        evaluation = DependencyResolver().resolve(win, request + ["kurtosis", "standard_deviation"])
        assert len(calls) == 1
        assert evaluation.order.count(Statistic.MEAN) == 1
        assert evaluation.order.count(Statistic.STANDARD_DEVIATION) == 1


def test_evaluation_order_follows_dependencies() -> None:
    win = make_window([1.0, 2.0, 3.0, 4.0])
    order = DependencyResolver().resolve(win, ["skewness"]).order
    S = Statistic
    assert order == [S.SUM, S.COUNT, S.MEAN, S.VARIANCE, S.STANDARD_DEVIATION, S.SKEWNESS]

    order = DependencyResolver().resolve(win, ["trimean", "quartile_range"]).order
    assert order.count(S.FIRST_QUARTILE) == 1
    assert order.count(S.THIRD_QUARTILE) == 1
    assert order.index(S.MEDIAN) < order.index(S.TRIMEAN)


def test_results_contain_only_requested() -> None:
    win = make_window([1.0, 2.0, 3.0])
    evaluation = DependencyResolver().resolve(win, ["variance", "variance"])
    assert list(evaluation.results) == ["variance"]
    assert Statistic.MEAN in evaluation.scratchpad


def test_resolve_is_idempotent_and_read_only() -> None:
    win = make_window([3.0, 1.0, 4.0, 1.0, 5.0])
    before = win.snapshot()
    names = [n for n in default_statistics()]
    first = resolve(win, names)
    second = resolve(win, names)
    assert first == second
    assert win.snapshot() == before
    assert first["mode"] == [1.0]


def test_percentile_names() -> None:
    win = make_window([16.0, 18.0, 24.0, 33.0, 53.0])
    out = resolve(win, ["0%_ile", "100%_ile", "25%_ile", "99.5%_ile"])
    assert out == {"0%_ile": 16.0, "100%_ile": 53.0, "25%_ile": 18.0, "99.5%_ile": 53.0}


def test_unknown_statistic_rejects_request(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args: object) -> float:
        raise AssertionError("nothing should be computed")

    monkeypatch.setattr(st, "total", fail)
    win = make_window([1.0, 2.0])
    with pytest.raises(UnknownStatistic):
        resolve(win, ["sum", "mean", "geometric_mean"])


def test_invalid_percentile_is_request_error() -> None:
    win = make_window([1.0, 2.0])
    with pytest.raises(InvalidPercentile):
        resolve(win, ["mean", "150%_ile"])


def test_empty_window() -> None:
    with pytest.raises(EmptyWindow):
        resolve(SlidingWindow(capacity=3), ["count"])


def test_close_percentiles_keep_separate_results() -> None:
    win = make_window([16.0, 18.0, 24.0, 33.0, 53.0])
    names = ["100%_ile", "99.9999999%_ile", "99.99999999999%_ile"]
    out = resolve(win, names)
    assert len(out) == len(parse_request(names)) == 3
    assert set(out) == set(names)
