"""Composite 0-100 health score and its descriptive bands."""
from __future__ import annotations

import math
from typing import Final

from .models import (
    AdherenceEstimate,
    GlucoseSummary,
    GlucoseTrend,
    HealthScoreBand,
    MealSummary,
    MedicationSummary,
    NutritionBalance,
)

BASE_SCORE: Final[int] = 50
MEAL_FREQUENCY_DAYS: Final[int] = 30

_BALANCE_POINTS = {
    NutritionBalance.BALANCED: 15,
    NutritionBalance.LOW_CARB: 10,
    NutritionBalance.HIGH_CARB: 5,
}

_ADHERENCE_POINTS = {
    AdherenceEstimate.EXCELLENT: 15,
    AdherenceEstimate.GOOD: 10,
    AdherenceEstimate.POOR: 5,
}

_TREND_POINTS = {
    GlucoseTrend.IMPROVING: 10,
    GlucoseTrend.STABLE: 5,
}

# Inclusive lower bounds, highest first.
_BANDS: tuple[tuple[int, HealthScoreBand], ...] = (
    (90, HealthScoreBand.EXCELLENT),
    (80, HealthScoreBand.VERY_GOOD),
    (70, HealthScoreBand.GOOD),
    (60, HealthScoreBand.FAIR),
    (50, HealthScoreBand.NEEDS_ATTENTION),
)

_BAND_DESCRIPTIONS = {
    HealthScoreBand.EXCELLENT: "Excellent diabetes management! Keep up the great work! 🌟",
    HealthScoreBand.VERY_GOOD: "Very good diabetes management. Minor improvements could help. 👍",
    HealthScoreBand.GOOD: "Good diabetes management. Some areas for improvement. 📈",
    HealthScoreBand.FAIR: "Fair diabetes management. Focus on consistency. ⚖️",
    HealthScoreBand.NEEDS_ATTENTION: (
        "Diabetes management needs attention. Consider healthcare provider consultation. ⚠️"
    ),
    HealthScoreBand.REQUIRES_IMMEDIATE_ATTENTION: (
        "Diabetes management requires immediate attention. Please consult your healthcare provider. 🚨"
    ),
}


def calculate_health_score(
    glucose: GlucoseSummary,
    meals: MealSummary,
    medications: MedicationSummary,
) -> int:
    """Combine the three summaries into a score clamped to [0, 100].

    Each component only contributes when its summary holds at least one
    record, so a user with no data scores exactly ``BASE_SCORE``.
    """

    score = BASE_SCORE + glucose_points(glucose) + meal_points(meals) + medication_points(medications)
    return min(100, max(0, score))


def glucose_points(glucose: GlucoseSummary) -> int:
    if glucose.total_readings <= 0:
        return 0
    points = math.floor(glucose.time_in_range_percentage / 100.0 * 20)
    critical = glucose.critical_readings
    if critical == 0:
        points += 10
    elif critical <= 2:
        points += 5
    points += _TREND_POINTS.get(glucose.trend, 0)
    return points


def meal_points(meals: MealSummary) -> int:
    if meals.total_meals <= 0:
        return 0
    points = _BALANCE_POINTS.get(meals.nutrition_balance, 0)
    per_day = meals.total_meals / MEAL_FREQUENCY_DAYS
    if per_day >= 3.0:
        points += 15
    elif per_day >= 2.0:
        points += 10
    elif per_day >= 1.0:
        points += 5
    return points


def medication_points(medications: MedicationSummary) -> int:
    if medications.total_medications <= 0:
        return 0
    points = _ADHERENCE_POINTS.get(medications.adherence_estimate, 0)
    if medications.average_effectiveness_rating is not None:
        points += math.floor(medications.average_effectiveness_rating / 5.0 * 15)
    return points


def describe_health_score(score: int) -> HealthScoreBand:
    for lower_bound, band in _BANDS:
        if score >= lower_bound:
            return band
    return HealthScoreBand.REQUIRES_IMMEDIATE_ATTENTION


def band_description(band: HealthScoreBand) -> str:
    return _BAND_DESCRIPTIONS[band]
