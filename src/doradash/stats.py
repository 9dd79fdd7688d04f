"""Numeric helpers shared by the metric formulas and the report.

This module provides utilities for:
- Averaging and ratio computations that degrade to a fixed default instead of
  producing ``NaN`` or ``Infinity``.
- Measuring elapsed time between two timestamps in hours.
- Formatting metric values with their display units.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, Optional

SECONDS_PER_HOUR = 3600.0


def safe_mean(values: Iterable[float], default: float = 0.0) -> float:
    """Return the arithmetic mean of finite ``values``.

    Non-finite samples are ignored. When nothing remains, ``default`` is
    returned.

    Args:
        values: Numeric samples.
        default: Value returned for an empty sample set.

    Returns:
        The mean as ``float``.
    """
    clean = [float(value) for value in values if value is not None and math.isfinite(value)]
    if not clean:
        return default
    return sum(clean) / len(clean)


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide ``numerator`` by ``denominator``, returning ``default`` for a zero denominator."""
    if denominator == 0:
        return default
    result = numerator / denominator
    return result if math.isfinite(result) else default


def hours_between(start: Optional[datetime], end: Optional[datetime]) -> Optional[float]:
    """Return elapsed hours from ``start`` to ``end``.

    Returns ``None`` when either timestamp is missing or they cannot be
    compared (naive vs aware).
    """
    if start is None or end is None:
        return None
    try:
        return (end - start).total_seconds() / SECONDS_PER_HOUR
    except TypeError:
        return None


def format_per_week(value: float) -> str:
    return f"{value:.2f}/week"


def format_hours(value: float) -> str:
    return f"{value:.2f} hours"


def format_percent(value: float) -> str:
    return f"{value:.2f}%"


def format_score(value: float) -> str:
    return f"{value:.2f}/100"


def format_count(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"
