from datetime import datetime, timedelta
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from glucose_insights.meals import classify_nutrition_balance, compute_meal_summary
from glucose_insights.models import Meal, MealType, NutritionBalance

NOW = datetime(2024, 3, 31, 12, 0)


def _meal(description, carbs=None, calories=None, meal_type=MealType.OTHER, days_ago=1.0) -> Meal:
    return Meal(
        description=description,
        consumed_at=NOW - timedelta(days=days_ago),
        meal_type=meal_type,
        carbs_grams=carbs,
        calories=calories,
    )


def test_empty_window_is_insufficient():
    summary = compute_meal_summary([], now=NOW)

    assert summary.total_meals == 0
    assert summary.average_carbs_per_meal is None
    assert summary.nutrition_balance is NutritionBalance.INSUFFICIENT_DATA


def test_mixed_meals_summary():
    meals = [
        _meal("Pancakes", 60, 400, MealType.BREAKFAST, days_ago=1),
        _meal("Sandwich", 50, 500, MealType.LUNCH, days_ago=2),
        _meal("Steak", 10, 200, MealType.DINNER, days_ago=3),
        _meal("Apple", 30, 300, MealType.SNACK, days_ago=4),
        _meal("Coffee", days_ago=5),
    ]

    summary = compute_meal_summary(meals, now=NOW)

    assert summary.total_meals == 5
    assert summary.average_carbs_per_meal == 37
    assert summary.average_calories_per_meal == 350
    assert summary.total_carbs == 150
    assert summary.total_calories == 1400
    assert summary.high_carb_meals == 2
    assert summary.low_carb_meals == 1
    assert summary.high_carb_percentage == 40.0
    assert summary.low_carb_percentage == 20.0
    assert (summary.breakfast_count, summary.lunch_count, summary.dinner_count, summary.snack_count) == (1, 1, 1, 1)
    assert summary.avg_carb_ratio == pytest.approx(0.4)
    assert summary.nutrition_balance is NutritionBalance.BALANCED


def test_fewer_than_five_meals_is_insufficient():
    meals = [_meal(f"meal {i}", 60, 400, days_ago=i + 1) for i in range(4)]

    assert compute_meal_summary(meals, now=NOW).nutrition_balance is NutritionBalance.INSUFFICIENT_DATA


def test_all_high_carb_meals():
    meals = [_meal(f"meal {i}", 60, 400, days_ago=i + 1) for i in range(5)]

    summary = compute_meal_summary(meals, now=NOW)

    assert summary.nutrition_balance is NutritionBalance.HIGH_CARB
    assert summary.high_carb_percentage == 100.0


def test_meals_outside_window_are_ignored():
    meals = [_meal("old", 60, 400, days_ago=31), _meal("new", 20, 200, days_ago=1)]

    summary = compute_meal_summary(meals, now=NOW)

    assert summary.total_meals == 1
    assert summary.average_carbs_per_meal == 20


@pytest.mark.parametrize(
    "ratio, high, total, expected",
    [
        (0.2, 1, 5, NutritionBalance.LOW_CARB),
        (0.4, 0, 5, NutritionBalance.LOW_CARB),
        (0.7, 0, 5, NutritionBalance.HIGH_CARB),
        (0.4, 3, 5, NutritionBalance.HIGH_CARB),
        (0.4, 2, 5, NutritionBalance.BALANCED),
        (0.9, 5, 4, NutritionBalance.INSUFFICIENT_DATA),
    ],
)
def test_classify_nutrition_balance(ratio, high, total, expected):
    assert classify_nutrition_balance(ratio, high, total) is expected
