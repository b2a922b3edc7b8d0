from datetime import datetime
import argparse
import json
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from glucose_insights.run_batch import (
    CallableSource,
    JsonDirectorySource,
    _load_user_ids,
    dashboard_to_dict,
    _parse_datetime,
    parse_args,
    run,
)
from glucose_insights.engine import compose_dashboard

NOW = datetime(2024, 3, 31, 20, 0)

PAYLOAD = {
    "userId": "user-1",
    "glucoseReadings": [
        {"id": 1, "readingValue": 100, "takenAt": "2024-03-31T11:00:00"},
        {"id": 2, "readingValue": 170, "takenAt": "2024-03-31T13:30:00"},
        {"id": 3, "readingValue": 300, "takenAt": "2024-03-30T13:30:00"},
    ],
    "meals": [
        {"id": 10, "description": "Pizza", "carbsGrams": 50, "calories": 600, "consumedAt": "2024-03-31T12:00:00"}
    ],
    "medications": [
        {"name": "Metformin", "medicationType": "METFORMIN", "takenAt": "2024-03-31T08:00:00", "effectivenessRating": 5}
    ],
}


def test_json_directory_source_loads_records(tmp_path: Path):
    (tmp_path / "user-1.json").write_text(json.dumps(PAYLOAD))

    readings, meals, doses = JsonDirectorySource(tmp_path).load("user-1")

    assert len(readings) == 3
    assert meals[0].record_id == "10"
    assert doses[0].effectiveness_rating == 5


def test_json_directory_source_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        JsonDirectorySource(tmp_path).load("ghost")


def test_json_directory_source_requires_directory(tmp_path: Path):
    with pytest.raises(ValueError):
        JsonDirectorySource(tmp_path / "missing")


def test_callable_source_validates_payload():
    source = CallableSource(lambda user_id: PAYLOAD)

    readings, _, _ = source.load("user-1")
    assert len(readings) == 3

    with pytest.raises(ValueError):
        source.load("user-2")
    with pytest.raises(TypeError):
        CallableSource(lambda user_id: [PAYLOAD]).load("user-1")


def test_dashboard_to_dict_is_json_serializable():
    readings, meals, doses = CallableSource(lambda user_id: PAYLOAD).load("user-1")
    dashboard = compose_dashboard("user-1", readings, meals, doses, now=NOW)

    payload = dashboard_to_dict(dashboard)
    json.dumps(payload)

    assert payload["generated_at"] == NOW.isoformat()
    assert payload["health_score"] == dashboard.health_score
    assert payload["health_score_band"] == dashboard.health_score_band.value
    assert payload["health_score_description"] == dashboard.health_score_description
    assert payload["glucose_summary"]["critically_high_readings"] == 1
    correlation = payload["meal_glucose_correlations"][0]
    assert correlation["impact"] == "HIGH_IMPACT"
    assert correlation["glucose_rise"] == 70.0


def test_run_includes_flags_when_requested(tmp_path: Path):
    (tmp_path / "user-1.json").write_text(json.dumps(PAYLOAD))

    results = run(["user-1"], JsonDirectorySource(tmp_path), now=NOW, flag_days=14)

    flags = results["user-1"]["glucose_flags"]
    assert "CRITICAL_HIGH" in flags["alerts"]
    assert flags["alert_count"] == len(flags["alerts"])
    assert "glucose_flags" not in run(["user-1"], JsonDirectorySource(tmp_path), now=NOW)["user-1"]


def test_load_user_ids_from_csv(tmp_path: Path):
    csv_file = tmp_path / "users.csv"
    csv_file.write_text("user_id\nuser-1\n\nuser-2\n")

    args = parse_args(["--user", "user-0", "--user-file", str(csv_file)])

    assert _load_user_ids(args) == ["user-0", "user-1", "user-2"]


def test_load_user_ids_requires_input():
    with pytest.raises(SystemExit):
        _load_user_ids(parse_args([]))


def test_parse_args_datetimes_and_log_level(monkeypatch):
    monkeypatch.setenv("GLUCOSE_INSIGHTS_LOG_LEVEL", "DEBUG")

    args = parse_args(["--now", "2024-03-31T20:00:00", "--flag-days", "7"])

    assert args.now == NOW
    assert args.flag_days == 7
    assert args.log_level == "DEBUG"


@pytest.mark.parametrize("value", ["", "NaT"])
def test_blank_datetime_arguments_are_rejected(value):
    with pytest.raises(argparse.ArgumentTypeError):
        _parse_datetime(value)
    with pytest.raises(SystemExit):
        parse_args(["--now", value])
