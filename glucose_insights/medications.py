"""Windowed medication statistics and adherence estimate."""
from __future__ import annotations

from collections import Counter
from datetime import datetime
from typing import Final, Sequence

from .models import AdherenceEstimate, MedicationDose, MedicationSummary, MedicationType
from .utils import DEFAULT_SUMMARY_DAYS, percentage, resolve_now, resolve_window, round_half_up, within_window

MIN_DOSES_FOR_ADHERENCE: Final[int] = 7
EXCELLENT_DOSES_PER_DAY: Final[float] = 2.0
GOOD_DOSES_PER_DAY: Final[float] = 1.0

_TYPE_ORDER = {member: index for index, member in enumerate(MedicationType)}


def compute_medication_summary(
    doses: Sequence[MedicationDose],
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
) -> MedicationSummary:
    """Aggregate doses taken inside [start, end] (default: last 30 days)."""

    window = resolve_window(start, end, resolve_now(now, end), DEFAULT_SUMMARY_DAYS)
    in_window = within_window(doses, window, key=lambda dose: dose.taken_at)
    if not in_window:
        return MedicationSummary(window=window)

    total = len(in_window)
    ratings = [dose.effectiveness_rating for dose in in_window if dose.effectiveness_rating is not None]
    with_side_effects = sum(1 for dose in in_window if dose.has_side_effects)

    days = window.whole_days
    per_day = total / days if days > 0 else 0.0
    names = sorted({dose.name for dose in in_window})

    return MedicationSummary(
        window=window,
        total_medications=total,
        insulin_doses=sum(1 for dose in in_window if dose.is_insulin),
        oral_medications=sum(1 for dose in in_window if dose.is_oral_medication),
        injectable_medications=sum(1 for dose in in_window if dose.is_injectable),
        average_effectiveness_rating=float(round_half_up(sum(ratings) / len(ratings))) if ratings else None,
        medications_with_side_effects=with_side_effects,
        side_effects_percentage=percentage(with_side_effects, total),
        adherence_estimate=estimate_adherence(per_day, total),
        medications_per_day=float(round_half_up(per_day)),
        unique_medication_names=tuple(names),
        unique_medication_count=len(names),
        most_common_medication_type=most_common_type(in_window),
    )


def estimate_adherence(doses_per_day: float, total_doses: int) -> AdherenceEstimate:
    if total_doses < MIN_DOSES_FOR_ADHERENCE:
        return AdherenceEstimate.INSUFFICIENT_DATA
    if doses_per_day >= EXCELLENT_DOSES_PER_DAY:
        return AdherenceEstimate.EXCELLENT
    if doses_per_day >= GOOD_DOSES_PER_DAY:
        return AdherenceEstimate.GOOD
    return AdherenceEstimate.POOR


def most_common_type(doses: Sequence[MedicationDose]) -> MedicationType | None:
    """Most frequent type; ties go to the type logged first (then declaration order)."""

    if not doses:
        return None
    ordered = sorted(doses, key=lambda dose: (dose.taken_at, _TYPE_ORDER[dose.medication_type]))
    counts = Counter(dose.medication_type for dose in ordered)
    return counts.most_common(1)[0][0]
