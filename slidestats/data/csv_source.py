from __future__ import annotations

import csv
import logging
from io import StringIO
from pathlib import Path
from typing import Iterator, List, Optional, Union

from ..core.processor import MetricRecord


logger = logging.getLogger(__name__)


def parse_csv(text: str) -> Iterator[MetricRecord]:
    """Parse ``namespace,timestamp,value`` rows into metric records.

    Namespaces are dotted (``host1.cpu.load``). Values that do not parse as
    floats are passed through untouched so the processor can reject them.
    """
    reader = csv.reader(StringIO(text))
    for lineno, row in enumerate(reader, start=1):
        if not row or row[0].lstrip().startswith("#"):
            continue
        record = _parse_row(row, lineno)
        if record is not None:
            yield record


def _parse_row(row: List[str], lineno: int) -> Optional[MetricRecord]:
    # Format: namespace,unix_ts,value
    if len(row) < 3:
        logger.debug("Skipping short row", extra={"line": lineno})
        return None
    namespace = tuple(part for part in row[0].strip().split(".") if part)
    if not namespace:
        logger.debug("Skipping row without namespace", extra={"line": lineno})
        return None
    try:
        ts = float(row[1])
    except ValueError:
        logger.debug("Skipping row with bad timestamp", extra={"line": lineno})
        return None
    raw = row[2].strip()
    try:
        value: object = float(raw)
    except ValueError:
        value = raw
    return MetricRecord(namespace=namespace, value=value, timestamp=ts)


def read_csv(path: Union[str, Path]) -> Iterator[MetricRecord]:
    with open(path, "r", encoding="utf-8", newline="") as fh:
        text = fh.read()
    return parse_csv(text)
