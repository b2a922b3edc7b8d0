"""Glucose, meal and medication analytics library."""

from .correlation import correlate_meals_with_glucose
from .engine import DashboardEngine, compose_dashboard, compute_progress_metrics
from .flags import compute_glucose_flags
from .glucose import compute_glucose_summary
from .meals import compute_meal_summary
from .medications import compute_medication_summary
from .models import (
    ComprehensiveDashboard,
    GlucoseFlags,
    GlucoseReading,
    GlucoseSummary,
    InsightContext,
    InsightInputBundle,
    Meal,
    MealGlucoseCorrelation,
    MealSummary,
    MedicationDose,
    MedicationSummary,
    MessageKind,
    ProgressMetrics,
    TimeWindow,
)
from .registry import flag_registry, register_flag_rule, register_rule, registry
from .rule_base import InsightRule
from .scoring import calculate_health_score, describe_health_score

__all__ = [
    "ComprehensiveDashboard",
    "DashboardEngine",
    "GlucoseFlags",
    "GlucoseReading",
    "GlucoseSummary",
    "InsightContext",
    "InsightInputBundle",
    "InsightRule",
    "Meal",
    "MealGlucoseCorrelation",
    "MealSummary",
    "MedicationDose",
    "MedicationSummary",
    "MessageKind",
    "ProgressMetrics",
    "TimeWindow",
    "calculate_health_score",
    "compose_dashboard",
    "compute_glucose_flags",
    "compute_glucose_summary",
    "compute_meal_summary",
    "compute_medication_summary",
    "compute_progress_metrics",
    "correlate_meals_with_glucose",
    "describe_health_score",
    "flag_registry",
    "register_flag_rule",
    "register_rule",
    "registry",
]
