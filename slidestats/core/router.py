from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import List, Optional, Sequence, Tuple

from .buffers import SlidingWindow


logger = logging.getLogger(__name__)

Namespace = Tuple[str, ...]


class StreamRouter:
    """Map metric namespaces to their sliding windows.

    Windows are created the first time a namespace is seen. With
    ``max_streams`` unset the map grows with the number of distinct
    namespaces; with a bound, the least recently used stream is dropped.
    """

    def __init__(self, capacity: int, max_streams: Optional[int] = None) -> None:
        if max_streams is not None and max_streams < 1:
            raise ValueError(f"max_streams must be >= 1, got {max_streams}")
        self._capacity = capacity
        self._max_streams = max_streams
        self._lock = threading.RLock()
        self._windows: "OrderedDict[Namespace, SlidingWindow]" = OrderedDict()

    def window_for(self, namespace: Sequence[str]) -> SlidingWindow:
        key = tuple(namespace)
        with self._lock:
            window = self._windows.get(key)
            if window is not None:
                self._windows.move_to_end(key)
                return window
            window = SlidingWindow(self._capacity)
            self._windows[key] = window
            if self._max_streams is not None and len(self._windows) > self._max_streams:
                evicted, _ = self._windows.popitem(last=False)
                logger.info("Evicted idle stream", extra={"namespace": "/".join(evicted)})
            return window

    def discard(self, namespace: Sequence[str]) -> bool:
        with self._lock:
            return self._windows.pop(tuple(namespace), None) is not None

    def streams(self) -> List[Namespace]:
        with self._lock:
            return list(self._windows)

    def __contains__(self, namespace: object) -> bool:
        if not isinstance(namespace, (tuple, list)):
            return False
        with self._lock:
            return tuple(namespace) in self._windows

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)
