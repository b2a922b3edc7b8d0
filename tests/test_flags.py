from datetime import datetime, timedelta
from decimal import Decimal
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from glucose_insights.flags import compute_glucose_flags
from glucose_insights.models import GlucoseReading, MessageKind
from glucose_insights.registry import RuleRegistry, flag_registry

NOW = datetime(2024, 3, 31, 12, 0)


def _reading(value, hours_ago: float) -> GlucoseReading:
    return GlucoseReading(value=Decimal(value), taken_at=NOW - timedelta(hours=hours_ago))


def test_no_readings_flags_monitoring():
    flags = compute_glucose_flags([], now=NOW)

    assert flags.days == 14
    assert flags.readings_per_day == 0.0
    assert flags.alerts == {
        "LOW_TIME_IN_RANGE": "Time in range is 0.0% (target: >70%)",
        "LOW_MONITORING_FREQUENCY": "Only 0.0 readings per day on average (recommended: 4+ per day)",
    }
    assert set(flags.recommendations) == {"TIME_IN_RANGE", "MONITORING"}
    assert flags.alert_count == 2


def test_critical_readings():
    flags = compute_glucose_flags([_reading(300, 24), _reading(40, 48)], now=NOW)

    assert flags.alerts["CRITICAL_HIGH"] == "Found 1 critically high readings (>250 mg/dL) in the last 14 days"
    assert flags.alerts["CRITICAL_LOW"] == "Found 1 critically low readings (<54 mg/dL) in the last 14 days"
    assert flags.alerts["FREQUENT_HIGHS"] == "High readings 50.0% of the time (target: <25%)"
    assert flags.alerts["FREQUENT_LOWS"] == "Low readings 50.0% of the time (target: <4%)"
    assert flags.recommendations["MEDICAL_ATTENTION"] == "Contact your healthcare provider about critical readings"


def test_well_controlled_readings_raise_nothing():
    readings = [_reading(120, 12 * k) for k in range(28)]

    flags = compute_glucose_flags(readings, now=NOW)

    assert flags.readings_per_day == 2.0
    assert flags.alerts == {}
    assert flags.recommendations == {}


def test_worsening_trend_alert():
    readings = [_reading(160, 6 * k) for k in range(20)] + [_reading(140, 24 * 8 + 6 * k) for k in range(20)]

    flags = compute_glucose_flags(readings, now=NOW)

    assert flags.alerts["WORSENING_TREND"] == "Average glucose increased by 20.0 mg/dL over the last week"


def test_custom_period_changes_rate():
    readings = [_reading(120, 12 * k) for k in range(6)]

    flags = compute_glucose_flags(readings, days=3, now=NOW)

    assert flags.readings_per_day == 2.0
    assert flags.window.start == NOW - timedelta(days=3)
    assert "LOW_MONITORING_FREQUENCY" not in flags.alerts


@pytest.mark.parametrize("days", [0, -3])
def test_days_must_be_positive(days):
    with pytest.raises(ValueError):
        compute_glucose_flags([], days=days, now=NOW)


def test_rule_settings_override():
    flags = compute_glucose_flags(
        [],
        now=NOW,
        rule_settings={"LOW_MONITORING_FREQUENCY": {"minimum_readings_per_day": 0.0}},
    )

    assert "LOW_MONITORING_FREQUENCY" not in flags.alerts
    assert "MONITORING" in flags.recommendations


def test_flag_rules_live_in_their_own_registry():
    kinds = {rule.kind for rule in flag_registry.rules()}

    assert kinds == {MessageKind.ALERT, MessageKind.RECOMMENDATION}
    flags = compute_glucose_flags([], now=NOW, registry=RuleRegistry())
    assert flags.alerts == {}
    assert flags.recommendations == {}


def test_alert_texts_follow_threshold_overrides():
    flags = compute_glucose_flags(
        [_reading(300, 24), _reading(40, 48), _reading(120, 72)],
        now=NOW,
        rule_settings={
            "LOW_TIME_IN_RANGE": {"time_in_range_target": 72.5},
            "FREQUENT_HIGHS": {"time_high_limit": 30},
            "FREQUENT_LOWS": {"time_low_limit": 5.0},
        },
    )

    assert flags.alerts["LOW_TIME_IN_RANGE"] == "Time in range is 33.3% (target: >72.5%)"
    assert flags.alerts["FREQUENT_HIGHS"] == "High readings 33.3% of the time (target: <30%)"
    assert flags.alerts["FREQUENT_LOWS"] == "Low readings 33.3% of the time (target: <5%)"


def test_flag_messages_are_read_only():
    flags = compute_glucose_flags([_reading(300, 24)], now=NOW)

    with pytest.raises(TypeError):
        flags.alerts["EXTRA"] = "x"
    with pytest.raises(TypeError):
        flags.recommendations["EXTRA"] = "x"
    assert "EXTRA" not in flags.alerts
