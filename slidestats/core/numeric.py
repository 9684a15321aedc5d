from __future__ import annotations

import math

import numpy as np

from .errors import NonNumericSample


def to_float(value: object) -> float:
    """Convert a sample value to the canonical float representation.

    Python ints and floats plus numpy integer and floating scalars are
    accepted. Booleans, strings, None and NaN are rejected with
    NonNumericSample, as are ints too large for a float. Infinities pass
    through.
    """
    if isinstance(value, (bool, np.bool_)):
        raise NonNumericSample(value)
    if isinstance(value, (int, np.integer)):
        try:
            return float(value)
        except OverflowError:
            raise NonNumericSample(value) from None
    if isinstance(value, (float, np.floating)):
        result = float(value)
        if math.isnan(result):
            raise NonNumericSample(value)
        return result
    raise NonNumericSample(value)
