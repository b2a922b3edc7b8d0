"""Insights and recommendations derived from the meal summary."""
from __future__ import annotations

from ..models import InsightContext, InsightInputBundle, MessageKind, NutritionBalance
from ..registry import register_rule
from ..rule_base import InsightRule

# Meal logging frequency is judged against a fixed 30-day month.
MEAL_LOGGING_DAYS = 30

_BALANCE_MESSAGES = {
    NutritionBalance.HIGH_CARB: "Your recent meals tend to be high in carbohydrates.",
    NutritionBalance.LOW_CARB: "You're following a low-carb eating pattern.",
    NutritionBalance.BALANCED: "Your meals show a balanced carb distribution. 👍",
}


@register_rule
class MealPatternInsight(InsightRule):
    id = "MEAL_PATTERN"
    kind = MessageKind.INSIGHT
    description = "Meal count and average carbs per meal"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        meals = bundle.meals
        if meals.total_meals <= 0:
            return None
        if meals.average_carbs_per_meal is None:
            return f"You logged {meals.total_meals} meals."
        return (
            f"You logged {meals.total_meals} meals with an average of "
            f"{meals.average_carbs_per_meal} carbs per meal."
        )


@register_rule
class NutritionBalanceInsight(InsightRule):
    id = "NUTRITION_BALANCE"
    kind = MessageKind.INSIGHT
    description = "Describe the classified nutrition balance"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        if bundle.meals.total_meals <= 0:
            return None
        return _BALANCE_MESSAGES.get(bundle.meals.nutrition_balance)


@register_rule
class IncreaseMealLoggingRecommendation(InsightRule):
    id = "INCREASE_MEAL_LOGGING"
    kind = MessageKind.RECOMMENDATION
    description = "Fewer than two logged meals per day over a 30-day month"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        total = bundle.meals.total_meals
        if total <= 0:
            return None
        minimum_per_day = float(self.resolved_threshold(context, "minimum_meals_per_day", 2.0))
        if total / MEAL_LOGGING_DAYS >= minimum_per_day:
            return None
        return "Try to log more meals for better glucose pattern analysis."


@register_rule
class ReduceHighCarbMealsRecommendation(InsightRule):
    id = "REDUCE_HIGH_CARB_MEALS"
    kind = MessageKind.RECOMMENDATION
    description = "More than 60% of meals are high carb"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        meals = bundle.meals
        if meals.total_meals <= 0:
            return None
        limit = float(self.resolved_threshold(context, "high_carb_percentage_limit", 60.0))
        if meals.high_carb_percentage <= limit:
            return None
        return "Consider reducing high-carb meals to improve glucose control."
