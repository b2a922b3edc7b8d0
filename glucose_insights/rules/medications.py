"""Insights and recommendations derived from the medication summary."""
from __future__ import annotations

from ..models import AdherenceEstimate, InsightContext, InsightInputBundle, MessageKind
from ..registry import register_rule
from ..rule_base import InsightRule

_ADHERENCE_MESSAGES = {
    AdherenceEstimate.EXCELLENT: "Excellent medication tracking! You're very consistent. 🎯",
    AdherenceEstimate.GOOD: "Good medication tracking. Keep it up!",
}


@register_rule
class MedicationAdherenceInsight(InsightRule):
    id = "MEDICATION_ADHERENCE"
    kind = MessageKind.INSIGHT
    description = "Praise excellent or good dose logging"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        medications = bundle.medications
        if medications.total_medications <= 0:
            return None
        return _ADHERENCE_MESSAGES.get(medications.adherence_estimate)


@register_rule
class MedicationEffectivenessInsight(InsightRule):
    id = "MEDICATION_EFFECTIVENESS"
    kind = MessageKind.INSIGHT
    description = "Average effectiveness rating of at least 4"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        medications = bundle.medications
        if medications.total_medications <= 0 or medications.average_effectiveness_rating is None:
            return None
        minimum = float(self.resolved_threshold(context, "effective_rating", 4.0))
        if medications.average_effectiveness_rating < minimum:
            return None
        return "Your medications are working well based on your ratings."


@register_rule
class ImproveMedicationTrackingRecommendation(InsightRule):
    id = "IMPROVE_MEDICATION_TRACKING"
    kind = MessageKind.RECOMMENDATION
    description = "Poor adherence estimate"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        medications = bundle.medications
        if medications.total_medications <= 0:
            return None
        if medications.adherence_estimate is not AdherenceEstimate.POOR:
            return None
        return "Regular medication logging helps identify patterns and improve management."


@register_rule
class ReviewSideEffectsRecommendation(InsightRule):
    id = "REVIEW_SIDE_EFFECTS"
    kind = MessageKind.RECOMMENDATION
    description = "More than 20% of doses reported side effects"

    def evaluate(self, bundle: InsightInputBundle, context: InsightContext) -> str | None:
        medications = bundle.medications
        if medications.total_medications <= 0:
            return None
        limit = float(self.resolved_threshold(context, "side_effects_percentage_limit", 20.0))
        if medications.side_effects_percentage <= limit:
            return None
        return "Consider discussing medication side effects with your healthcare provider."
