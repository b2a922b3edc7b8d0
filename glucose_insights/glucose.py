"""Windowed glucose statistics and week-over-week trend."""
from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Final, Sequence

import numpy as np
import pandas as pd

from .models import (
    CRITICALLY_HIGH_THRESHOLD,
    CRITICALLY_LOW_THRESHOLD,
    NORMAL_RANGE_HIGH,
    NORMAL_RANGE_LOW,
    GlucoseReading,
    GlucoseSummary,
    GlucoseTrend,
    TimeWindow,
)
from .utils import (
    DEFAULT_SUMMARY_DAYS,
    percentage,
    readings_frame,
    resolve_now,
    resolve_window,
    round_half_up,
    slice_window,
)

TREND_WINDOW: Final[timedelta] = timedelta(days=7)
TREND_CHANGE_THRESHOLD: Final[Decimal] = Decimal(10)


def compute_glucose_summary(
    readings: Sequence[GlucoseReading],
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
) -> GlucoseSummary:
    """Aggregate the readings that fall inside [start, end].

    When either bound is missing the window defaults to the 30 days ending at
    ``now``. The trend is always computed relative to ``now`` and ignores the
    requested window.
    """

    now = resolve_now(now, end)
    window = resolve_window(start, end, now, DEFAULT_SUMMARY_DAYS)
    frame = readings_frame(readings)
    in_window = slice_window(frame, window)
    if in_window.empty:
        return GlucoseSummary(window=window)

    values = in_window["value"].astype(float).to_numpy()
    total = len(values)

    in_range_mask = (values >= float(NORMAL_RANGE_LOW)) & (values <= float(NORMAL_RANGE_HIGH))
    high_mask = values > float(NORMAL_RANGE_HIGH)
    low_mask = values < float(NORMAL_RANGE_LOW)

    in_range = int(in_range_mask.sum())
    high = int(high_mask.sum())
    low = int(low_mask.sum())

    trend, trend_change = compute_trend(frame, now)

    return GlucoseSummary(
        window=window,
        total_readings=total,
        average_reading=round_half_up(float(np.mean(values))),
        min_reading=round_half_up(float(np.min(values))),
        max_reading=round_half_up(float(np.max(values))),
        readings_in_range=in_range,
        readings_high=high,
        readings_low=low,
        time_in_range_percentage=percentage(in_range, total),
        time_high_percentage=percentage(high, total),
        time_low_percentage=percentage(low, total),
        critically_high_readings=int((values > float(CRITICALLY_HIGH_THRESHOLD)).sum()),
        critically_low_readings=int((values < float(CRITICALLY_LOW_THRESHOLD)).sum()),
        trend=trend,
        trend_change=trend_change,
    )


def compute_trend(frame: pd.DataFrame, now: datetime) -> tuple[GlucoseTrend, Decimal]:
    """Compare the last 7 days' average against the 7 days before that."""

    recent_window = TimeWindow(start=now - TREND_WINDOW, end=now)
    previous_window = TimeWindow(start=now - 2 * TREND_WINDOW, end=now - TREND_WINDOW)

    recent_avg = _window_average(frame, recent_window)
    previous_avg = _window_average(frame, previous_window)
    if recent_avg is None or previous_avg is None:
        return GlucoseTrend.STABLE, Decimal("0.00")

    change = round_half_up(recent_avg - previous_avg)
    if change > TREND_CHANGE_THRESHOLD:
        return GlucoseTrend.WORSENING, change
    if change < -TREND_CHANGE_THRESHOLD:
        return GlucoseTrend.IMPROVING, change
    return GlucoseTrend.STABLE, change


def _window_average(frame: pd.DataFrame, window: TimeWindow) -> float | None:
    subset = slice_window(frame, window)
    if subset.empty:
        return None
    return float(subset["value"].astype(float).mean())
