"""Recent-days glucose alerts built on the flag rule registry."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Sequence

from . import rules  # noqa: F401  Ensure rules are imported and registered
from .glucose import compute_glucose_summary
from .models import GlucoseFlagBundle, GlucoseFlags, GlucoseReading, InsightContext, MessageKind, TimeWindow
from .registry import RuleRegistry, flag_registry
from .utils import DEFAULT_FLAG_DAYS, resolve_now


def compute_glucose_flags(
    readings: Sequence[GlucoseReading],
    days: int = DEFAULT_FLAG_DAYS,
    now: datetime | None = None,
    *,
    user_id: str = "",
    registry: RuleRegistry | None = None,
    thresholds: Mapping[str, Any] | None = None,
    rule_settings: Mapping[str, Mapping[str, Any]] | None = None,
) -> GlucoseFlags:
    """Evaluate alert and recommendation rules over the last ``days`` days."""

    if days <= 0:
        raise ValueError(f"days must be positive, got {days}")

    now = resolve_now(now)
    window = TimeWindow.ending_at(now, days)
    summary = compute_glucose_summary(readings, window.start, window.end, now=now)
    readings_per_day = summary.total_readings / days

    bundle = GlucoseFlagBundle(summary=summary, days=days, readings_per_day=readings_per_day)
    context = InsightContext(
        user_id=user_id,
        window=window,
        thresholds=thresholds or {},
        rule_settings=rule_settings or {},
    )
    active_registry = registry if registry is not None else flag_registry
    alerts = active_registry.generate(bundle, context, MessageKind.ALERT)
    recommendations = active_registry.generate(bundle, context, MessageKind.RECOMMENDATION)

    if alerts:
        logging.info(f"Glucose flags for user {user_id or '<anonymous>'}: {sorted(alerts)}")

    return GlucoseFlags(
        window=window,
        days=days,
        summary=summary,
        readings_per_day=readings_per_day,
        alerts=alerts,
        recommendations=recommendations,
    )
