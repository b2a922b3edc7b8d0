"""Insights and recommendations derived from the glucose summary."""
from __future__ import annotations

from ..models import GlucoseTrend, InsightContext, InsightInputBundle, MessageKind
from ..registry import register_rule
from ..rule_base import InsightRule
from .utils import one_decimal, threshold_text


@register_rule
class GlucosePatternInsight(InsightRule):
    id = "GLUCOSE_PATTERN"
    kind = MessageKind.INSIGHT
    description = "Report time in range whenever readings exist"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        target = float(self.resolved_threshold(context, "time_in_range_target", 70.0))
        glucose = bundle.glucose
        if glucose.total_readings <= 0:
            return None
        return (
            f"Your time in range is {one_decimal(glucose.time_in_range_percentage)}%. "
            f"Target is >{threshold_text(target)}%."
        )


@register_rule
class GlucoseTrendInsight(InsightRule):
    id = "GLUCOSE_TREND"
    kind = MessageKind.INSIGHT
    description = "Comment on an improving or worsening seven-day trend"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        glucose = bundle.glucose
        if glucose.total_readings <= 0:
            return None
        if glucose.trend is GlucoseTrend.IMPROVING:
            return "Your glucose control has improved over the last week! ✨"
        if glucose.trend is GlucoseTrend.WORSENING:
            return "Your glucose readings have been trending higher recently."
        return None


@register_rule
class ImproveTimeInRangeRecommendation(InsightRule):
    id = "IMPROVE_TIME_IN_RANGE"
    kind = MessageKind.RECOMMENDATION
    description = "Time in range below target (fires on an empty window as well)"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        target = float(self.resolved_threshold(context, "time_in_range_target", 70.0))
        if bundle.glucose.time_in_range_percentage >= target:
            return None
        return "Consider reviewing meal timing and carb counting with your healthcare provider."


@register_rule
class CriticalReadingsRecommendation(InsightRule):
    id = "CRITICAL_READINGS"
    kind = MessageKind.RECOMMENDATION
    description = "At least one critically high or critically low reading"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        if bundle.glucose.critical_readings <= 0:
            return None
        return "You have critical readings. Please discuss with your healthcare provider immediately."


@register_rule
class IncreaseMonitoringRecommendation(InsightRule):
    id = "INCREASE_MONITORING"
    kind = MessageKind.RECOMMENDATION
    description = "Fewer than 30 readings in the window"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        minimum = int(self.resolved_threshold(context, "minimum_readings", 30))
        if bundle.glucose.total_readings >= minimum:
            return None
        return "More frequent glucose monitoring helps identify patterns and improve control."
