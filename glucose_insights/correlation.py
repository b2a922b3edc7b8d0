"""Meal-to-glucose matching using the nearest readings around each meal.

For every meal in the window the matcher looks for the latest reading taken
strictly before the meal (at most 120 minutes earlier) and the earliest reading
taken strictly after it (at most 180 minutes later). Readings are sorted once
and located with binary search, so several readings sharing the winning
timestamp always resolve to the same one regardless of input order.
"""
from __future__ import annotations

from bisect import bisect_left, bisect_right
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Final, Sequence

from .models import GlucoseReading, Meal, MealGlucoseCorrelation, MealImpact
from .utils import DEFAULT_CORRELATION_DAYS, resolve_now, resolve_window, round_half_up, within_window

PRE_MEAL_LOOKBACK: Final[timedelta] = timedelta(minutes=120)
POST_MEAL_LOOKAHEAD: Final[timedelta] = timedelta(minutes=180)

HIGH_IMPACT_RISE: Final[Decimal] = Decimal(50)
MODERATE_IMPACT_RISE: Final[Decimal] = Decimal(20)


def correlate_meals_with_glucose(
    meals: Sequence[Meal],
    readings: Sequence[GlucoseReading],
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
) -> list[MealGlucoseCorrelation]:
    """Return one correlation per meal with nearby readings, newest meal first."""

    window = resolve_window(start, end, resolve_now(now, end), DEFAULT_CORRELATION_DAYS)
    ordered_readings = sorted(
        within_window(readings, window, key=lambda reading: reading.taken_at),
        key=_reading_sort_key,
    )
    timestamps = [reading.taken_at for reading in ordered_readings]
    ordered_meals = sorted(
        within_window(meals, window, key=lambda meal: meal.consumed_at),
        key=_meal_sort_key,
    )

    correlations: list[MealGlucoseCorrelation] = []
    for meal in ordered_meals:
        pre = nearest_before(meal.consumed_at, ordered_readings, timestamps)
        post = nearest_after(meal.consumed_at, ordered_readings, timestamps)
        correlation = analyze_meal_impact(meal, pre, post)
        if correlation is not None:
            correlations.append(correlation)

    return sorted(correlations, key=lambda correlation: correlation.meal_time, reverse=True)


def nearest_before(
    moment: datetime,
    readings: Sequence[GlucoseReading],
    timestamps: Sequence[datetime],
    max_gap: timedelta = PRE_MEAL_LOOKBACK,
) -> GlucoseReading | None:
    """Latest reading strictly before ``moment`` and no more than ``max_gap`` earlier."""

    idx = bisect_left(timestamps, moment)
    if idx == 0:
        return None
    candidate_time = timestamps[idx - 1]
    if moment - candidate_time > max_gap:
        return None
    return readings[bisect_left(timestamps, candidate_time)]


def nearest_after(
    moment: datetime,
    readings: Sequence[GlucoseReading],
    timestamps: Sequence[datetime],
    max_gap: timedelta = POST_MEAL_LOOKAHEAD,
) -> GlucoseReading | None:
    """Earliest reading strictly after ``moment`` and no more than ``max_gap`` later."""

    idx = bisect_right(timestamps, moment)
    if idx >= len(timestamps):
        return None
    if timestamps[idx] - moment > max_gap:
        return None
    return readings[idx]


def analyze_meal_impact(
    meal: Meal,
    pre: GlucoseReading | None,
    post: GlucoseReading | None,
) -> MealGlucoseCorrelation | None:
    if pre is None and post is None:
        return None

    base = {
        "meal_id": meal.record_id,
        "meal_description": meal.description,
        "carbs_grams": meal.carbs_grams,
        "meal_time": meal.consumed_at,
        "pre_glucose_value": pre.value if pre is not None else None,
        "pre_glucose_time": pre.taken_at if pre is not None else None,
        "post_glucose_value": post.value if post is not None else None,
        "post_glucose_time": post.taken_at if post is not None else None,
    }
    if pre is None or post is None:
        return MealGlucoseCorrelation(**base, impact=MealImpact.INSUFFICIENT_DATA)

    rise = post.value - pre.value
    ratio = None
    if meal.carbs_grams is not None and meal.carbs_grams > 0:
        ratio = float(round_half_up(rise / Decimal(meal.carbs_grams)))
    minutes_to_peak = int((post.taken_at - meal.consumed_at).total_seconds() // 60)

    return MealGlucoseCorrelation(
        **base,
        glucose_rise=rise,
        carb_to_glucose_ratio=ratio,
        minutes_to_peak=minutes_to_peak,
        impact=classify_impact(rise),
    )


def classify_impact(glucose_rise: Decimal) -> MealImpact:
    if glucose_rise > HIGH_IMPACT_RISE:
        return MealImpact.HIGH_IMPACT
    if glucose_rise > MODERATE_IMPACT_RISE:
        return MealImpact.MODERATE_IMPACT
    if glucose_rise >= 0:
        return MealImpact.LOW_IMPACT
    return MealImpact.NEGATIVE_IMPACT


def _reading_sort_key(reading: GlucoseReading) -> tuple:
    return (reading.taken_at, reading.record_id or "", reading.value)


def _meal_sort_key(meal: Meal) -> tuple:
    return (meal.consumed_at, meal.record_id or "", meal.description)
