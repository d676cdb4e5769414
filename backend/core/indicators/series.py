"""Operations on ordered numeric sequences (price and volume histories).

Every function returns a new list and leaves its input untouched.
"""

import math
from decimal import Decimal
from numbers import Real
from typing import Any, Iterable, Sequence

import numpy as np


class InvalidSeriesError(ValueError):
    """Raised when a caller passes something that is not a series at all.

    Thin or dirty market data is never an error; this is reserved for
    programmer mistakes such as passing ``None`` instead of a list.
    """


def clean_series(values: Iterable[Any] | None) -> list[float]:
    """
    Drop entries that cannot take part in a calculation.

    Keeps finite real numbers and Decimals (as floats) in their original
    order and discards ``None``, NaN, infinities, booleans and non-numeric
    values.

    Args:
        values: Sequence of raw provider values

    Returns:
        List of finite floats

    Raises:
        InvalidSeriesError: If ``values`` is None, a string, or not iterable
    """
    if values is None:
        raise InvalidSeriesError("series must be a sequence, got None")
    if isinstance(values, (str, bytes)):
        raise InvalidSeriesError(f"series must be a sequence, got {type(values).__name__}")
    try:
        iterator = iter(values)
    except TypeError:
        raise InvalidSeriesError(
            f"series must be a sequence, got {type(values).__name__}"
        ) from None

    result = []
    for value in iterator:
        if isinstance(value, bool) or not isinstance(value, (Real, Decimal)):
            continue
        number = float(value)
        if math.isfinite(number):
            result.append(number)
    return result


def differences(series: Sequence[float]) -> list[float]:
    """First-order deltas; empty for fewer than two points."""
    if len(series) < 2:
        return []
    return np.diff(np.asarray(series, dtype=np.float64)).tolist()


def mean(series: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty series."""
    if len(series) == 0:
        return 0.0
    return float(np.mean(np.asarray(series, dtype=np.float64)))


def ema(series: Sequence[float], period: int) -> list[float]:
    """
    Calculate Exponential Moving Average seeded with the first value.

    out[0] = series[0]
    out[i] = series[i] * k + out[i - 1] * (1 - k),  k = 2 / (period + 1)

    A period longer than the series is allowed; the result is simply
    less smoothed.

    Args:
        series: Sequence of price values
        period: EMA period (>= 1)

    Returns:
        List of EMA values, same length as input
    """
    if period < 1:
        raise ValueError(f"EMA period must be >= 1, got {period}")
    if len(series) == 0:
        return []

    arr = np.asarray(series, dtype=np.float64)
    multiplier = 2.0 / (period + 1)

    result = np.empty_like(arr)
    result[0] = arr[0]
    for i in range(1, len(arr)):
        result[i] = arr[i] * multiplier + result[i - 1] * (1 - multiplier)

    return result.tolist()
