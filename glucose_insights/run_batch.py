"""Command-line utility for composing health dashboards across users.

The tool expects per-user JSON files containing the records a user logged.
Each file should be named ``<user_id>.json`` inside a data directory::

    {
        "userId": "user-1",
        "glucoseReadings": [
            {"id": 1, "readingValue": 112, "takenAt": "2025-01-01T07:30:00", "readingType": "FASTING"},
            ...
        ],
        "meals": [
            {"id": 7, "description": "Oatmeal", "carbsGrams": 45, "calories": 300,
             "mealType": "BREAKFAST", "consumedAt": "2025-01-01T08:00:00"},
            ...
        ],
        "medications": [
            {"name": "Metformin", "medicationType": "METFORMIN", "takenAt": "2025-01-01T08:05:00"},
            ...
        ]
    }

Use ``--user`` repeatedly or provide a newline-delimited ``--user-file``
listing the user IDs to process. Results are written as JSON to stdout or to
``--output`` if provided.
"""
from __future__ import annotations

import argparse
import csv
import json
import logging
import os
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from importlib import import_module
from pathlib import Path
from typing import Any, Callable, Mapping

import pandas as pd

from glucose_insights.engine import DashboardEngine
from glucose_insights.flags import compute_glucose_flags
from glucose_insights.models import ComprehensiveDashboard, GlucoseFlags, GlucoseReading, Meal, MedicationDose
from glucose_insights.payloads import UserRecordsPayload

UserRecords = tuple[list[GlucoseReading], list[Meal], list[MedicationDose]]


def _load_user_ids(args: argparse.Namespace) -> list[str]:
    user_ids: list[str] = []
    if args.user:
        user_ids.extend(args.user)
    if args.user_file:
        for path in args.user_file:
            file_path = Path(path)
            if file_path.suffix.lower() == ".csv":
                with file_path.open(newline="") as handle:
                    reader = csv.reader(handle)
                    for idx, row in enumerate(reader):
                        if not row:
                            continue
                        value = row[0].strip()
                        if not value:
                            continue
                        if idx == 0 and value.lower() in {"user_id", "id"}:
                            continue
                        user_ids.append(value)
            else:
                with file_path.open() as handle:
                    for line in handle:
                        line = line.strip()
                        if line:
                            user_ids.append(line)
    if not user_ids:
        raise SystemExit("No user IDs provided. Use --user or --user-file.")
    return user_ids


class JsonDirectorySource:
    """Record source that reads one ``<user_id>.json`` file per user."""

    def __init__(self, root: Path) -> None:
        if not root.is_dir():
            raise ValueError(f"Record directory not found: {root}")
        self._root = root

    def load(self, user_id: str) -> UserRecords:
        file_path = self._root / f"{user_id}.json"
        if not file_path.exists():
            raise FileNotFoundError(f"Missing record file for user {user_id}: {file_path}")

        with file_path.open() as handle:
            payload = json.load(handle)

        return _payload_to_records(user_id, payload)


class CallableSource:
    """Wraps a Python callable that fetches a user's records on demand."""

    def __init__(self, fetcher: Callable[[str], Any]) -> None:
        self._fetcher = fetcher

    def load(self, user_id: str) -> UserRecords:
        return _payload_to_records(user_id, self._fetcher(user_id))


def _payload_to_records(user_id: str, payload: Any) -> UserRecords:
    """Validate a raw payload and convert it into record models."""

    if isinstance(payload, UserRecordsPayload):
        records = payload
    elif isinstance(payload, Mapping):
        if payload.get("userId") not in (None, user_id):
            raise ValueError("Payload userId does not match requested user")
        records = UserRecordsPayload.model_validate(dict(payload))
    else:
        raise TypeError("Unsupported payload type returned by record source")

    readings, meals, doses = records.to_records()
    logging.debug(
        f"Loaded {len(readings)} readings, {len(meals)} meals and {len(doses)} doses for user {user_id}"
    )
    return readings, meals, doses


def _json_safe(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _json_safe(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value


def dashboard_to_dict(dashboard: ComprehensiveDashboard) -> dict:
    payload = _json_safe(dashboard)
    payload["health_score_description"] = dashboard.health_score_description
    return payload


def flags_to_dict(flags: GlucoseFlags) -> dict:
    payload = _json_safe(flags)
    payload["alert_count"] = flags.alert_count
    return payload


def run(
    user_ids: list[str],
    source,  # JsonDirectorySource-like object
    *,
    start: datetime | None = None,
    end: datetime | None = None,
    now: datetime | None = None,
    workers: int = 1,
    flag_days: int | None = None,
) -> dict[str, dict]:
    engine = DashboardEngine(workers=workers)
    now = now or datetime.now()

    results: dict[str, dict] = {}
    for user_id in user_ids:
        readings, meals, doses = source.load(user_id)
        dashboard = engine.compose(user_id, readings, meals, doses, start, end, now)
        serialized = dashboard_to_dict(dashboard)
        if flag_days is not None:
            flags = compute_glucose_flags(readings, flag_days, now, user_id=user_id)
            serialized["glucose_flags"] = flags_to_dict(flags)
        results[user_id] = serialized
        logging.info(f"User {user_id}: health score {dashboard.health_score} ({dashboard.health_score_band.value})")
    return results


def _parse_datetime(value: str) -> datetime:
    try:
        parsed = pd.to_datetime(value)
    except (TypeError, ValueError) as exc:
        raise argparse.ArgumentTypeError(f"Invalid datetime: {value!r}") from exc
    if pd.isna(parsed):
        raise argparse.ArgumentTypeError(f"Invalid datetime: {value!r}")
    return parsed.to_pydatetime()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compose glucose insight dashboards in batch")
    parser.add_argument("--data-dir", type=Path, help="Directory containing <user_id>.json files")
    parser.add_argument("--user", action="append", help="User ID to process (may be repeated)")
    parser.add_argument(
        "--user-file",
        action="append",
        help="Path to file with newline-delimited user IDs"
    )
    parser.add_argument(
        "--fetcher",
        help="Python callable (module:function) that returns a record payload per user",
    )
    parser.add_argument("--start", type=_parse_datetime, help="Window start (defaults to 30 days before --now)")
    parser.add_argument("--end", type=_parse_datetime, help="Window end (defaults to --now)")
    parser.add_argument("--now", type=_parse_datetime, help="Reference instant (defaults to the current time)")
    parser.add_argument(
        "--flag-days",
        type=int,
        default=None,
        help="Also report glucose flags over this many recent days",
    )
    parser.add_argument("--workers", type=int, default=1, help="Threads used per dashboard")
    parser.add_argument("--output", type=Path, help="Optional output JSON file")
    parser.add_argument("--indent", type=int, default=None, help="Pretty-print JSON with the given indent")
    parser.add_argument(
        "--log-level",
        default=os.getenv("GLUCOSE_INSIGHTS_LOG_LEVEL", "WARNING"),
        help="Logging level (default: $GLUCOSE_INSIGHTS_LOG_LEVEL or WARNING)",
    )
    return parser.parse_args(argv)


def _resolve_callable(path: str) -> Callable[[str], Any]:
    try:
        module_name, func_name = path.rsplit(":", 1)
    except ValueError as exc:  # pragma: no cover - defensive branch
        raise ValueError("Fetcher must be in 'module:function' format") from exc
    module = import_module(module_name)
    func = getattr(module, func_name, None)
    if not callable(func):  # pragma: no cover - defensive branch
        raise TypeError(f"{path!r} is not callable")
    return func


def _build_source(args: argparse.Namespace):
    if args.fetcher:
        fetcher = _resolve_callable(args.fetcher)
        return CallableSource(fetcher)
    if not args.data_dir:
        raise SystemExit("Either --data-dir or --fetcher must be provided")
    return JsonDirectorySource(args.data_dir)


def main(argv: list[str] | None = None) -> int:  # pragma: no cover - CLI entry point
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(message)s")
    user_ids = _load_user_ids(args)
    source = _build_source(args)
    results = run(
        user_ids,
        source,
        start=args.start,
        end=args.end,
        now=args.now,
        workers=args.workers,
        flag_days=args.flag_days,
    )

    output_text = json.dumps(results, indent=args.indent)
    if args.output:
        args.output.write_text(output_text)
    else:
        print(output_text)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
