"""Helpers for Hive asset strings and ratios."""

from __future__ import annotations

import math
import re
from typing import Any

_NUMBER_RE = re.compile(r"[\d.]+")


def extract_number(value: Any) -> float:
    """Return the leading magnitude of an asset string like '123.456 HIVE'.

    Only the first run of digits and dots is considered; anything after it
    (the asset symbol) is ignored. Input without a usable number gives 0.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)

    match = _NUMBER_RE.search(str(value))
    if not match:
        return 0.0

    run = match.group(0)
    # "1.2.3" parses as far as the first valid float prefix, "." alone is 0.
    head, dot, tail = run.partition(".")
    candidate = head + dot + tail.split(".", 1)[0]
    try:
        return float(candidate)
    except ValueError:
        return 0.0


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide like IEEE floats do: zero denominators give inf or nan."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def is_finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)
