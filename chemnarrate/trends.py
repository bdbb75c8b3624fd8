from __future__ import annotations

"""
Short-term trend detection over a cell's history samples.

Constraints:
- Pure functions over an ordered, ascending sequence of HistorySample.
- Only the most recent samples matter (a window of 3).
- Too little data never raises; it reads as "flat" or as no label.
"""

from typing import Optional, Sequence

from .types import HistorySample

# Slope thresholds, per second
TEMPERATURE_EPS = 0.05
PRESSURE_EPS = 0.02
GAS_EPS = 0.01

# pH uses a net drift over the window rather than a slope
PH_DELTA_MIN = 0.02
PH_NEUTRAL_LOW = 6.8
PH_NEUTRAL_HIGH = 7.2

TREND_WINDOW = 3


def last_n(history: Optional[Sequence[HistorySample]], n: int = TREND_WINDOW) -> Optional[Sequence[HistorySample]]:
    """Return the last min(n, len) samples, or None with fewer than two."""
    if not history or len(history) < 2:
        return None
    k = min(n, len(history))
    return history[len(history) - k:]


def trend(history: Optional[Sequence[HistorySample]], field: str = "temperature", epsilon: float = 0.02) -> str:
    """Classify the recent slope of `field` as "up", "down" or "flat".

    Slope is (last - first) over elapsed seconds across the window; missing
    values count as 0.
    """
    window = last_n(history, TREND_WINDOW)
    if not window or len(window) < 2:
        return "flat"
    first, last = window[0], window[-1]
    elapsed = (float(last.time) - float(first.time)) / 1000.0
    if elapsed <= 0:
        return "flat"
    delta = (last.value(field) or 0.0) - (first.value(field) or 0.0)
    slope = delta / elapsed
    if slope > epsilon:
        return "up"
    if slope < -epsilon:
        return "down"
    return "flat"


def temperature_trend_suffix(history: Optional[Sequence[HistorySample]]) -> str:
    direction = trend(history, "temperature", TEMPERATURE_EPS)
    if direction == "up":
        return " (heating up)"
    if direction == "down":
        return " (cooling)"
    return ""


def pressure_trend_label(history: Optional[Sequence[HistorySample]]) -> Optional[str]:
    direction = trend(history, "pressure", PRESSURE_EPS)
    if direction == "up":
        return "pressure building"
    if direction == "down":
        return "venting"
    return None


def ph_trend_label(history: Optional[Sequence[HistorySample]]) -> Optional[str]:
    """Net pH drift over the window.

    A missing pH at either end of the window suppresses the label, as does a
    drift under PH_DELTA_MIN. Ending inside the neutral band reads as
    "neutralizing" whichever way it moved.
    """
    window = last_n(history, TREND_WINDOW)
    if not window:
        return None
    first, last = window[0].ph, window[-1].ph
    if first is None or last is None:
        return None
    delta = last - first
    if abs(delta) < PH_DELTA_MIN:
        return None
    if PH_NEUTRAL_LOW < last < PH_NEUTRAL_HIGH:
        return "neutralizing"
    return "becoming more basic" if delta > 0 else "becoming more acidic"


def gas_trend_label(history: Optional[Sequence[HistorySample]]) -> Optional[str]:
    direction = trend(history, "gas_sum", GAS_EPS)
    if direction == "up":
        return "gas building"
    if direction == "down":
        return "gas dissipating"
    return None
