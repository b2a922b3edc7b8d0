"""Shared helpers for window resolution, filtering and rounding."""
from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, Sequence, TypeVar

import pandas as pd

from .models import GlucoseReading, TimeWindow

DEFAULT_SUMMARY_DAYS = 30
DEFAULT_CORRELATION_DAYS = 14
DEFAULT_FLAG_DAYS = 14

_FRAME_COLUMNS = ["taken_at", "value"]

T = TypeVar("T")


def resolve_now(now: datetime | None, end: datetime | None = None) -> datetime:
    """Return the injected instant, or the wall clock at the outermost call site.

    The wall clock takes its timezone from ``end`` when that bound is aware.
    """

    if now is not None:
        return now
    tz = end.tzinfo if end is not None else None
    return datetime.now(tz)


def resolve_window(
    start: datetime | None,
    end: datetime | None,
    now: datetime,
    default_days: int,
) -> TimeWindow:
    """Use [start, end] when both bounds are given, else ``default_days`` ending at ``now``."""

    if start is None or end is None:
        return TimeWindow.ending_at(now, default_days)
    return TimeWindow(start=start, end=end)


def within_window(records: Iterable[T], window: TimeWindow, key: Callable[[T], datetime]) -> list[T]:
    return [record for record in records if window.contains(key(record))]


def round_half_up(value: float | Decimal, places: int = 2) -> Decimal:
    """Round to ``places`` decimals, ties away from zero."""

    quantum = Decimal(1).scaleb(-places)
    if not isinstance(value, Decimal):
        value = Decimal(repr(float(value)))
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def percentage(count: int, total: int) -> float:
    """``count / total * 100`` rounded to two decimals; 0.0 when ``total`` is zero."""

    if total <= 0:
        return 0.0
    return float(round_half_up(count / total * 100.0))


def readings_frame(readings: Sequence[GlucoseReading]) -> pd.DataFrame:
    """Return readings as a time-sorted frame with float ``value`` column."""

    if not readings:
        return pd.DataFrame(columns=_FRAME_COLUMNS)
    frame = pd.DataFrame(
        {
            "taken_at": [reading.taken_at for reading in readings],
            "value": [float(reading.value) for reading in readings],
        }
    )
    return frame.sort_values("taken_at", kind="mergesort").reset_index(drop=True)


def slice_window(frame: pd.DataFrame, window: TimeWindow) -> pd.DataFrame:
    """Rows whose ``taken_at`` lies inside the closed window."""

    if frame.empty:
        return frame
    taken_at = frame["taken_at"]
    mask = (taken_at >= pd.Timestamp(window.start)) & (taken_at <= pd.Timestamp(window.end))
    return frame.loc[mask]
