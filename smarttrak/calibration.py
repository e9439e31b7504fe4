"""
Temperature calibration for decoded profiles.

The profile only records temperature steps, never an absolute starting
temperature. The summary record's min/max temperatures are the only
calibrated values, so raw accumulator values are mapped linearly onto them.
"""

from dataclasses import replace
from typing import List, Sequence

import numpy as np

from .dive import DataPoint


def rescale_temperatures(
    points: Sequence[DataPoint],
    acc_min: int,
    acc_max: int,
    min_temperature: float,
    max_temperature: float,
) -> List[DataPoint]:
    """
    Map raw accumulator temperatures onto [min_temperature, max_temperature].

    Args:
        points: Samples whose temperature holds the raw accumulator value
        acc_min: Lowest accumulator value seen while decoding
        acc_max: Highest accumulator value seen while decoding
        min_temperature: Calibrated minimum from the summary record
        max_temperature: Calibrated maximum from the summary record

    Returns:
        New samples with rescaled temperatures. When acc_min == acc_max the
        raw values are returned unchanged.
    """
    if acc_min == acc_max or not points:
        return list(points)

    raw = np.array([p.temperature for p in points], dtype=float)
    fact = (max_temperature - min_temperature) / float(acc_max - acc_min)
    scaled = min_temperature + fact * (raw - acc_min)

    return [replace(p, temperature=float(t)) for p, t in zip(points, scaled)]
