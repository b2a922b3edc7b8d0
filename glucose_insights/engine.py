"""Dashboard orchestration: aggregate, correlate, score and explain."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Sequence

from . import rules  # noqa: F401  Ensure rules are imported and registered
from .correlation import correlate_meals_with_glucose
from .glucose import compute_glucose_summary
from .meals import compute_meal_summary
from .medications import compute_medication_summary
from .models import (
    ComprehensiveDashboard,
    GlucoseReading,
    GlucoseSummary,
    InsightContext,
    InsightInputBundle,
    Meal,
    MedicationDose,
    MessageKind,
    ProgressMetrics,
    ProgressTrend,
    TimeWindow,
)
from .registry import RuleRegistry, registry as default_registry
from .rule_base import InsightRule
from .scoring import calculate_health_score, describe_health_score
from .utils import DEFAULT_SUMMARY_DAYS, resolve_now, resolve_window, round_half_up

PROGRESS_CHANGE_THRESHOLD = 5.0


class DashboardEngine:
    """Builds comprehensive dashboards from raw user records."""

    def __init__(
        self,
        registry: RuleRegistry | None = None,
        *,
        default_thresholds: dict[str, float] | None = None,
        default_rule_settings: dict[str, dict[str, float]] | None = None,
        context_builder: Callable[[str, TimeWindow], InsightContext] | None = None,
        workers: int = 1,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self._registry = registry if registry is not None else default_registry
        self._default_thresholds = default_thresholds or {}
        self._default_rule_settings = default_rule_settings or {}
        self._context_builder = context_builder
        self._workers = workers

    def compose(
        self,
        user_id: str,
        readings: Sequence[GlucoseReading],
        meals: Sequence[Meal],
        doses: Sequence[MedicationDose],
        start: datetime | None = None,
        end: datetime | None = None,
        now: datetime | None = None,
        *,
        rule_filter: Callable[[InsightRule], bool] | None = None,
    ) -> ComprehensiveDashboard:
        now = resolve_now(now, end)
        window = resolve_window(start, end, now, DEFAULT_SUMMARY_DAYS)
        logging.info(
            f"Composing dashboard for user {user_id} from {window.start.isoformat()} to {window.end.isoformat()}"
        )

        tasks: dict[str, Callable[[], Any]] = {
            "glucose": lambda: compute_glucose_summary(readings, window.start, window.end, now=now),
            "meals": lambda: compute_meal_summary(meals, window.start, window.end, now=now),
            "medications": lambda: compute_medication_summary(doses, window.start, window.end, now=now),
            "correlations": lambda: correlate_meals_with_glucose(meals, readings, window.start, window.end, now=now),
        }
        results = self._run_tasks(tasks)

        glucose_summary = results["glucose"]
        meal_summary = results["meals"]
        medication_summary = results["medications"]
        correlations = results["correlations"]

        bundle = InsightInputBundle(
            glucose=glucose_summary,
            meals=meal_summary,
            medications=medication_summary,
            correlations=tuple(correlations),
        )
        context = self._build_context(user_id, window)
        insights = self._registry.generate(bundle, context, MessageKind.INSIGHT, predicate=rule_filter)
        recommendations = self._registry.generate(
            bundle, context, MessageKind.RECOMMENDATION, predicate=rule_filter
        )

        health_score = calculate_health_score(glucose_summary, meal_summary, medication_summary)
        progress = compute_progress_metrics(readings, window, glucose_summary, now=now)
        logging.debug(
            f"User {user_id}: score={health_score}, insights={len(insights)}, recommendations={len(recommendations)}"
        )

        return ComprehensiveDashboard(
            user_id=user_id,
            generated_at=now,
            window=window,
            glucose_summary=glucose_summary,
            meal_summary=meal_summary,
            medication_summary=medication_summary,
            meal_glucose_correlations=tuple(correlations),
            insights=insights,
            recommendations=recommendations,
            health_score=health_score,
            health_score_band=describe_health_score(health_score),
            progress_metrics=progress,
        )

    def _run_tasks(self, tasks: dict[str, Callable[[], Any]]) -> dict[str, Any]:
        if self._workers == 1:
            return {name: task() for name, task in tasks.items()}
        with ThreadPoolExecutor(max_workers=self._workers) as executor:
            futures = {name: executor.submit(task) for name, task in tasks.items()}
            return {name: future.result() for name, future in futures.items()}

    def _build_context(self, user_id: str, window: TimeWindow) -> InsightContext:
        if self._context_builder is not None:
            return self._context_builder(user_id, window)
        return InsightContext(
            user_id=user_id,
            window=window,
            thresholds=self._default_thresholds,
            rule_settings=self._default_rule_settings,
        )


def compute_progress_metrics(
    readings: Sequence[GlucoseReading],
    window: TimeWindow,
    current: GlucoseSummary,
    now: datetime | None = None,
) -> ProgressMetrics:
    """Compare time in range against the window of equal length just before ``window``.

    The previous window is half-open: a reading taken exactly at
    ``window.start`` counts towards the current window only.
    """

    now = resolve_now(now, window.end)
    span = window.duration
    previous_start = window.start - span
    earlier = [reading for reading in readings if reading.taken_at < window.start]
    previous = compute_glucose_summary(earlier, previous_start, window.start, now=now)

    base = {
        "current_period_days": window.whole_days,
        "current_readings_count": current.total_readings,
        "current_time_in_range": current.time_in_range_percentage,
    }
    if previous.total_readings <= 0:
        return ProgressMetrics(**base, time_in_range_trend=ProgressTrend.INSUFFICIENT_DATA)

    change = current.time_in_range_percentage - previous.time_in_range_percentage
    if change > PROGRESS_CHANGE_THRESHOLD:
        trend = ProgressTrend.IMPROVING
    elif change < -PROGRESS_CHANGE_THRESHOLD:
        trend = ProgressTrend.DECLINING
    else:
        trend = ProgressTrend.STABLE

    return ProgressMetrics(
        **base,
        time_in_range_trend=trend,
        previous_readings_count=previous.total_readings,
        previous_time_in_range=previous.time_in_range_percentage,
        time_in_range_change=float(round_half_up(change)),
    )


def compose_dashboard(
    user_id: str,
    readings: Sequence[GlucoseReading],
    meals: Sequence[Meal],
    doses: Sequence[MedicationDose],
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
) -> ComprehensiveDashboard:
    """Compose a dashboard with the default rule registry."""

    return DashboardEngine().compose(user_id, readings, meals, doses, start, end, now)
