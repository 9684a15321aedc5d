from __future__ import annotations

import logging
import math
import threading
import weakref
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..config import RuntimeConfig
from .buffers import SlidingWindow
from .errors import NonNumericSample
from .methods import parse_request
from .numeric import to_float
from .resolver import DependencyResolver
from .router import StreamRouter


logger = logging.getLogger(__name__)

MODE_SUFFIX = "highestfreq"


@dataclass
class MetricRecord:
    namespace: Tuple[str, ...]
    value: Any
    timestamp: float


@dataclass
class StatRecord:
    namespace: Tuple[str, ...]
    value: Union[int, float]
    timestamp: float
    tags: Dict[str, str] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "namespace": "/".join(self.namespace),
            "value": self.value,
            "timestamp": self.timestamp,
            "tags": dict(self.tags),
        }


def format_timestamp(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


class StatisticsProcessor:
    """Route samples to per-stream windows and emit statistics.

    Every ``sliding_factor`` inserts into a stream, the configured statistics
    are evaluated over that stream's window and returned as StatRecords tagged
    with the window's start and stop times.
    """

    def __init__(
        self,
        config: RuntimeConfig,
        router: Optional[StreamRouter] = None,
        resolver: Optional[DependencyResolver] = None,
    ) -> None:
        self.config = config
        self.router = router or StreamRouter(config.sliding_window_length, config.max_streams)
        self.resolver = resolver or DependencyResolver()
        self._statistics = parse_request(config.statistics)
        self._prefix: Tuple[str, ...] = tuple(config.namespace_prefix)
        self._lock = threading.RLock()
        self._inserts_since_emit: "weakref.WeakKeyDictionary[SlidingWindow, int]" = (
            weakref.WeakKeyDictionary()
        )

    def process(self, records: Iterable[MetricRecord]) -> List[StatRecord]:
        results: List[StatRecord] = []
        for record in records:
            results.extend(self.ingest(record))
        return results

    def ingest(self, record: MetricRecord) -> List[StatRecord]:
        namespace = tuple(record.namespace)
        try:
            value = to_float(record.value)
        except NonNumericSample as exc:
            logger.warning(
                "Rejected sample", extra={"namespace": "/".join(namespace), "error": str(exc)}
            )
            return []

        window = self.router.window_for(namespace)
        with window.lock:
            window.insert(value, record.timestamp)
            if not self._due(window):
                return []
            evaluation = self.resolver.resolve(window, self._statistics)
            start_ts, stop_ts = window.time_span()

        tags = {"startTime": format_timestamp(start_ts), "stopTime": format_timestamp(stop_ts)}
        return self._to_records(namespace, evaluation.results, stop_ts, tags)

    def _due(self, window: SlidingWindow) -> bool:
        with self._lock:
            pending = self._inserts_since_emit.get(window, 0) + 1
            if pending >= self.config.sliding_factor:
                self._inserts_since_emit[window] = 0
                return True
            self._inserts_since_emit[window] = pending
            return False

    def _to_records(
        self,
        namespace: Sequence[str],
        results: Dict[str, Any],
        timestamp: float,
        tags: Dict[str, str],
    ) -> List[StatRecord]:
        base = self._prefix + tuple(namespace)
        out: List[StatRecord] = []
        for name, value in results.items():
            if isinstance(value, list):
                for v in value:
                    out.append(StatRecord(base + (name, MODE_SUFFIX), v, timestamp, dict(tags)))
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            out.append(StatRecord(base + (name,), value, timestamp, dict(tags)))
        return out
