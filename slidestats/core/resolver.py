from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Union

from .buffers import SlidingWindow
from .errors import EmptyWindow
from .methods import StatKey, method_for, parse_request, statistic_name


logger = logging.getLogger(__name__)


@dataclass
class Evaluation:
    """Outcome of one resolve call.

    ``results`` maps each requested statistic name to its value; mode values
    are lists. ``scratchpad`` holds every value computed along the way,
    prerequisites included, and ``order`` records the computation sequence.
    """

    results: Dict[str, Any]
    scratchpad: Dict[StatKey, Any] = field(default_factory=dict)
    order: List[StatKey] = field(default_factory=list)


class DependencyResolver:
    """Evaluate requested statistics over a window, computing shared
    prerequisites once per call."""

    def resolve(
        self,
        window: SlidingWindow,
        requested: Iterable[Union[str, StatKey]],
    ) -> Evaluation:
        keys = parse_request(requested)
        values = window.values()
        if not values:
            raise EmptyWindow()

        scratchpad: Dict[StatKey, Any] = {}
        order: List[StatKey] = []
        for key in keys:
            self._evaluate(key, values, scratchpad, order)

        results = {statistic_name(key): scratchpad[key] for key in keys}
        logger.debug(
            "Resolved statistics",
            extra={"requested": [statistic_name(k) for k in keys], "computed": len(order)},
        )
        return Evaluation(results=results, scratchpad=scratchpad, order=order)

    def _evaluate(
        self,
        key: StatKey,
        values: Sequence[float],
        scratchpad: Dict[StatKey, Any],
        order: List[StatKey],
    ) -> None:
        # Prerequisite graph is a fixed DAG, so depth-first recursion terminates.
        if key in scratchpad:
            return
        method = method_for(key)
        for prerequisite in method.prerequisites:
            self._evaluate(prerequisite, values, scratchpad, order)
        scratchpad[key] = method.compute(values, scratchpad)
        order.append(key)


def resolve(window: SlidingWindow, requested: Iterable[Union[str, StatKey]]) -> Dict[str, Any]:
    return DependencyResolver().resolve(window, requested).results
