from datetime import datetime, timedelta
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from glucose_insights.medications import compute_medication_summary, estimate_adherence, most_common_type
from glucose_insights.models import AdherenceEstimate, MedicationDose, MedicationType

NOW = datetime(2024, 3, 31, 12, 0)


def _dose(name="Metformin", medication_type=MedicationType.METFORMIN, hours_ago=0.0, **kwargs) -> MedicationDose:
    return MedicationDose(
        name=name,
        taken_at=NOW - timedelta(hours=hours_ago),
        medication_type=medication_type,
        **kwargs,
    )


def test_twice_daily_metformin_is_excellent():
    doses = [_dose(hours_ago=12 * i) for i in range(10)]

    summary = compute_medication_summary(doses, NOW - timedelta(days=5), NOW)

    assert summary.total_medications == 10
    assert summary.medications_per_day == 2.0
    assert summary.adherence_estimate is AdherenceEstimate.EXCELLENT
    assert summary.most_common_medication_type is MedicationType.METFORMIN
    assert summary.unique_medication_count == 1
    assert summary.unique_medication_names == ("Metformin",)


def test_empty_window_is_insufficient():
    summary = compute_medication_summary([], now=NOW)

    assert summary.total_medications == 0
    assert summary.adherence_estimate is AdherenceEstimate.INSUFFICIENT_DATA
    assert summary.most_common_medication_type is None
    assert summary.average_effectiveness_rating is None


def test_sparse_logging_is_poor():
    doses = [_dose(hours_ago=24 * 4 * i) for i in range(7)]

    summary = compute_medication_summary(doses, now=NOW)

    assert summary.adherence_estimate is AdherenceEstimate.POOR
    assert summary.medications_per_day == 0.23


def test_ratings_side_effects_and_type_counts():
    doses = [
        _dose("Lispro", MedicationType.INSULIN_RAPID, hours_ago=1, effectiveness_rating=5),
        _dose("Metformin", MedicationType.METFORMIN, hours_ago=2, effectiveness_rating=4, side_effects="nausea"),
        _dose("Semaglutide", MedicationType.GLP1_AGONIST, hours_ago=3, effectiveness_rating=3),
    ]

    summary = compute_medication_summary(doses, now=NOW)

    assert summary.insulin_doses == 1
    assert summary.oral_medications == 1
    assert summary.injectable_medications == 2
    assert summary.average_effectiveness_rating == 4.0
    assert summary.medications_with_side_effects == 1
    assert summary.side_effects_percentage == 33.33
    assert summary.adherence_estimate is AdherenceEstimate.INSUFFICIENT_DATA
    assert summary.unique_medication_names == ("Lispro", "Metformin", "Semaglutide")


def test_most_common_type_tie_goes_to_first_logged():
    earlier = _dose("Glargine", MedicationType.INSULIN_LONG, hours_ago=5)
    later = _dose("Metformin", MedicationType.METFORMIN, hours_ago=1)

    assert most_common_type([earlier, later]) is MedicationType.INSULIN_LONG
    assert most_common_type([later, earlier]) is MedicationType.INSULIN_LONG


def test_window_shorter_than_a_day_reports_zero_rate():
    doses = [_dose(hours_ago=i) for i in range(8)]

    summary = compute_medication_summary(doses, NOW - timedelta(hours=10), NOW)

    assert summary.medications_per_day == 0.0
    assert summary.adherence_estimate is AdherenceEstimate.POOR


def test_estimate_adherence_thresholds():
    assert estimate_adherence(5.0, 6) is AdherenceEstimate.INSUFFICIENT_DATA
    assert estimate_adherence(2.0, 7) is AdherenceEstimate.EXCELLENT
    assert estimate_adherence(1.0, 7) is AdherenceEstimate.GOOD
    assert estimate_adherence(0.99, 7) is AdherenceEstimate.POOR
