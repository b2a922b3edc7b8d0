"""Messages about meals that drove large glucose rises."""
from __future__ import annotations

from ..models import InsightContext, InsightInputBundle, MessageKind
from ..registry import register_rule
from ..rule_base import InsightRule


@register_rule
class MealImpactInsight(InsightRule):
    id = "MEAL_IMPACT"
    kind = MessageKind.INSIGHT
    description = "Count meals classified as high impact"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        count = len(bundle.high_impact_correlations())
        if count <= 0:
            return None
        return f"Found {count} meals with high glucose impact. Consider reviewing carb content."


@register_rule
class HighImpactMealsRecommendation(InsightRule):
    id = "HIGH_IMPACT_MEALS"
    kind = MessageKind.RECOMMENDATION
    description = "Name up to three high-impact meals, newest first"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        limit = int(self.resolved_threshold(context, "high_impact_meal_names", 3))
        high_impact = bundle.high_impact_correlations()[:limit]
        if not high_impact:
            return None
        names = ", ".join(correlation.meal_description for correlation in high_impact)
        return f"Consider moderating portions or timing for: {names}"
