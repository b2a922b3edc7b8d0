"""Short-horizon glucose alerts and monitoring advice."""
from __future__ import annotations

from ..models import (
    CRITICALLY_HIGH_THRESHOLD,
    CRITICALLY_LOW_THRESHOLD,
    GlucoseFlagBundle,
    GlucoseTrend,
    InsightContext,
    MessageKind,
)
from ..registry import register_flag_rule
from ..rule_base import InsightRule
from .utils import one_decimal, threshold_text


@register_flag_rule
class CriticalHighAlert(InsightRule):
    id = "CRITICAL_HIGH"
    kind = MessageKind.ALERT
    description = "Any critically high reading"

    def evaluate(self, bundle: GlucoseFlagBundle, context: InsightContext) -> str | None:
        count = bundle.summary.critically_high_readings
        if count <= 0:
            return None
        return (
            f"Found {count} critically high readings (>{CRITICALLY_HIGH_THRESHOLD} mg/dL) "
            f"in the last {bundle.days} days"
        )


@register_flag_rule
class CriticalLowAlert(InsightRule):
    id = "CRITICAL_LOW"
    kind = MessageKind.ALERT
    description = "Any critically low reading"

    def evaluate(self, bundle: GlucoseFlagBundle, context: InsightContext) -> str | None:
        count = bundle.summary.critically_low_readings
        if count <= 0:
            return None
        return (
            f"Found {count} critically low readings (<{CRITICALLY_LOW_THRESHOLD} mg/dL) "
            f"in the last {bundle.days} days"
        )


@register_flag_rule
class LowTimeInRangeAlert(InsightRule):
    id = "LOW_TIME_IN_RANGE"
    kind = MessageKind.ALERT
    description = "Time in range below 70%"

    def evaluate(self, bundle: GlucoseFlagBundle, context: InsightContext) -> str | None:
        target = float(self.resolved_threshold(context, "time_in_range_target", 70.0))
        tir = bundle.summary.time_in_range_percentage
        if tir >= target:
            return None
        return f"Time in range is {one_decimal(tir)}% (target: >{threshold_text(target)}%)"


@register_flag_rule
class FrequentHighsAlert(InsightRule):
    id = "FREQUENT_HIGHS"
    kind = MessageKind.ALERT
    description = "High readings more than 25% of the time"

    def evaluate(self, bundle: GlucoseFlagBundle, context: InsightContext) -> str | None:
        limit = float(self.resolved_threshold(context, "time_high_limit", 25.0))
        high = bundle.summary.time_high_percentage
        if high <= limit:
            return None
        return f"High readings {one_decimal(high)}% of the time (target: <{threshold_text(limit)}%)"


@register_flag_rule
class FrequentLowsAlert(InsightRule):
    id = "FREQUENT_LOWS"
    kind = MessageKind.ALERT
    description = "Low readings more than 4% of the time"

    def evaluate(self, bundle: GlucoseFlagBundle, context: InsightContext) -> str | None:
        limit = float(self.resolved_threshold(context, "time_low_limit", 4.0))
        low = bundle.summary.time_low_percentage
        if low <= limit:
            return None
        return f"Low readings {one_decimal(low)}% of the time (target: <{threshold_text(limit)}%)"


@register_flag_rule
class WorseningTrendAlert(InsightRule):
    id = "WORSENING_TREND"
    kind = MessageKind.ALERT
    description = "Recent week average rose by more than 10 mg/dL"

    def evaluate(self, bundle: GlucoseFlagBundle, context: InsightContext) -> str | None:
        summary = bundle.summary
        if summary.trend is not GlucoseTrend.WORSENING:
            return None
        return f"Average glucose increased by {one_decimal(summary.trend_change)} mg/dL over the last week"


@register_flag_rule
class LowMonitoringFrequencyAlert(InsightRule):
    id = "LOW_MONITORING_FREQUENCY"
    kind = MessageKind.ALERT
    description = "Fewer than one reading per day"

    def evaluate(self, bundle: GlucoseFlagBundle, context: InsightContext) -> str | None:
        minimum = float(self.resolved_threshold(context, "minimum_readings_per_day", 1.0))
        if bundle.readings_per_day >= minimum:
            return None
        return (
            f"Only {one_decimal(bundle.readings_per_day)} readings per day on average "
            "(recommended: 4+ per day)"
        )


@register_flag_rule
class TimeInRangeFlagRecommendation(InsightRule):
    id = "TIME_IN_RANGE"
    kind = MessageKind.RECOMMENDATION
    description = "Time in range below 70%"

    def evaluate(self, bundle: GlucoseFlagBundle, context: InsightContext) -> str | None:
        target = float(self.resolved_threshold(context, "time_in_range_target", 70.0))
        if bundle.summary.time_in_range_percentage >= target:
            return None
        return "Consider reviewing diet and medication timing with your healthcare provider"


@register_flag_rule
class MonitoringFlagRecommendation(InsightRule):
    id = "MONITORING"
    kind = MessageKind.RECOMMENDATION
    description = "Fewer than two readings per day"

    def evaluate(self, bundle: GlucoseFlagBundle, context: InsightContext) -> str | None:
        minimum = float(self.resolved_threshold(context, "suggested_readings_per_day", 2.0))
        if bundle.readings_per_day >= minimum:
            return None
        return "Increase monitoring frequency to better track patterns"


@register_flag_rule
class MedicalAttentionFlagRecommendation(InsightRule):
    id = "MEDICAL_ATTENTION"
    kind = MessageKind.RECOMMENDATION
    description = "Any critical reading"

    def evaluate(self, bundle: GlucoseFlagBundle, context: InsightContext) -> str | None:
        if bundle.summary.critical_readings <= 0:
            return None
        return "Contact your healthcare provider about critical readings"
