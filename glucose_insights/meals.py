"""Windowed meal statistics and nutrition-balance classification."""
from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Final, Sequence

from .models import Meal, MealSummary, MealType, NutritionBalance
from .utils import DEFAULT_SUMMARY_DAYS, percentage, resolve_now, resolve_window, round_half_up, within_window

MIN_MEALS_FOR_BALANCE: Final[int] = 5
HIGH_CARB_RATIO: Final[float] = 0.6
LOW_CARB_RATIO: Final[float] = 0.3
HIGH_CARB_SHARE: Final[float] = 0.5
LOW_CARB_SHARE: Final[float] = 0.2


def compute_meal_summary(
    meals: Sequence[Meal],
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
) -> MealSummary:
    """Aggregate meals consumed inside [start, end] (default: last 30 days)."""

    window = resolve_window(start, end, resolve_now(now, end), DEFAULT_SUMMARY_DAYS)
    in_window = within_window(meals, window, key=lambda meal: meal.consumed_at)
    if not in_window:
        return MealSummary(window=window)

    total = len(in_window)
    carbs = [meal.carbs_grams for meal in in_window if meal.carbs_grams is not None]
    calories = [meal.calories for meal in in_window if meal.calories is not None]

    high_carb = sum(1 for meal in in_window if meal.is_high_carb)
    low_carb = sum(1 for meal in in_window if meal.is_low_carb)
    type_counts = Counter(meal.meal_type for meal in in_window)

    ratios = [meal.carb_ratio for meal in in_window if meal.carb_ratio > 0]
    avg_carb_ratio = sum(ratios) / len(ratios) if ratios else 0.0

    return MealSummary(
        window=window,
        total_meals=total,
        average_carbs_per_meal=int(sum(carbs) / len(carbs)) if carbs else None,
        average_calories_per_meal=int(sum(calories) / len(calories)) if calories else None,
        total_carbs=sum(carbs),
        total_calories=sum(calories),
        high_carb_meals=high_carb,
        low_carb_meals=low_carb,
        high_carb_percentage=percentage(high_carb, total),
        low_carb_percentage=percentage(low_carb, total),
        breakfast_count=type_counts[MealType.BREAKFAST],
        lunch_count=type_counts[MealType.LUNCH],
        dinner_count=type_counts[MealType.DINNER],
        snack_count=type_counts[MealType.SNACK],
        nutrition_balance=classify_nutrition_balance(avg_carb_ratio, high_carb, total),
        avg_carb_ratio=float(round_half_up(avg_carb_ratio)),
    )


def classify_nutrition_balance(avg_carb_ratio: float, high_carb_meals: int, total_meals: int) -> NutritionBalance:
    if total_meals < MIN_MEALS_FOR_BALANCE:
        return NutritionBalance.INSUFFICIENT_DATA

    high_carb_share = high_carb_meals / total_meals
    if avg_carb_ratio > HIGH_CARB_RATIO or high_carb_share > HIGH_CARB_SHARE:
        return NutritionBalance.HIGH_CARB
    if avg_carb_ratio < LOW_CARB_RATIO or high_carb_share < LOW_CARB_SHARE:
        return NutritionBalance.LOW_CARB
    return NutritionBalance.BALANCED
