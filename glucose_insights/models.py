"""Core data models for glucose, meal and medication analytics."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

NORMAL_RANGE_LOW = Decimal(70)
NORMAL_RANGE_HIGH = Decimal(180)
CRITICALLY_HIGH_THRESHOLD = Decimal(250)
CRITICALLY_LOW_THRESHOLD = Decimal(54)

HIGH_CARB_GRAMS = 45
LOW_CARB_GRAMS = 15
KCAL_PER_GRAM_CARB = 4.0


class ReadingType(str, Enum):
    FASTING = "FASTING"
    BEFORE_MEAL = "BEFORE_MEAL"
    AFTER_MEAL = "AFTER_MEAL"
    BEDTIME = "BEDTIME"
    RANDOM = "RANDOM"
    OTHER = "OTHER"


class GlucoseStatus(str, Enum):
    """Per-reading classification, most severe first."""

    CRITICALLY_HIGH = "CRITICALLY_HIGH"
    CRITICALLY_LOW = "CRITICALLY_LOW"
    HIGH = "HIGH"
    LOW = "LOW"
    NORMAL = "NORMAL"


class MealType(str, Enum):
    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    DINNER = "DINNER"
    SNACK = "SNACK"
    OTHER = "OTHER"


class MedicationType(str, Enum):
    INSULIN_RAPID = "INSULIN_RAPID"
    INSULIN_SHORT = "INSULIN_SHORT"
    INSULIN_INTERMEDIATE = "INSULIN_INTERMEDIATE"
    INSULIN_LONG = "INSULIN_LONG"
    METFORMIN = "METFORMIN"
    SULFONYLUREA = "SULFONYLUREA"
    DPP4_INHIBITOR = "DPP4_INHIBITOR"
    GLP1_AGONIST = "GLP1_AGONIST"
    SGLT2_INHIBITOR = "SGLT2_INHIBITOR"
    BLOOD_PRESSURE = "BLOOD_PRESSURE"
    CHOLESTEROL = "CHOLESTEROL"
    SUPPLEMENT = "SUPPLEMENT"
    OTHER = "OTHER"


INSULIN_TYPES = frozenset(
    {
        MedicationType.INSULIN_RAPID,
        MedicationType.INSULIN_SHORT,
        MedicationType.INSULIN_INTERMEDIATE,
        MedicationType.INSULIN_LONG,
    }
)
ORAL_TYPES = frozenset(
    {
        MedicationType.METFORMIN,
        MedicationType.SULFONYLUREA,
        MedicationType.DPP4_INHIBITOR,
        MedicationType.SGLT2_INHIBITOR,
    }
)


class GlucoseTrend(str, Enum):
    """Week-over-week direction of average glucose."""

    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    WORSENING = "WORSENING"


class NutritionBalance(str, Enum):
    BALANCED = "BALANCED"
    HIGH_CARB = "HIGH_CARB"
    LOW_CARB = "LOW_CARB"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


class AdherenceEstimate(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    POOR = "POOR"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


class MealImpact(str, Enum):
    """Glucose response attributed to a single meal."""

    HIGH_IMPACT = "HIGH_IMPACT"
    MODERATE_IMPACT = "MODERATE_IMPACT"
    LOW_IMPACT = "LOW_IMPACT"
    NEGATIVE_IMPACT = "NEGATIVE_IMPACT"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


class ProgressTrend(str, Enum):
    IMPROVING = "IMPROVING"
    DECLINING = "DECLINING"
    STABLE = "STABLE"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


class HealthScoreBand(str, Enum):
    EXCELLENT = "EXCELLENT"
    VERY_GOOD = "VERY_GOOD"
    GOOD = "GOOD"
    FAIR = "FAIR"
    NEEDS_ATTENTION = "NEEDS_ATTENTION"
    REQUIRES_IMMEDIATE_ATTENTION = "REQUIRES_IMMEDIATE_ATTENTION"


class MessageKind(str, Enum):
    """Output mapping a rule contributes to."""

    INSIGHT = "insight"
    RECOMMENDATION = "recommendation"
    ALERT = "alert"


@dataclass(frozen=True)
class TimeWindow:
    """Closed interval [start, end]."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start is None or self.end is None:
            raise ValueError("TimeWindow requires both start and end")
        if self.start > self.end:
            raise ValueError(f"Window start {self.start.isoformat()} is after end {self.end.isoformat()}")

    @classmethod
    def ending_at(cls, end: datetime, days: float) -> "TimeWindow":
        return cls(start=end - timedelta(days=days), end=end)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def whole_days(self) -> int:
        """Number of complete days covered by the window."""

        return self.duration.days

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class GlucoseReading:
    """Single blood-glucose measurement in mg/dL."""

    value: Decimal
    taken_at: datetime
    reading_type: ReadingType = ReadingType.OTHER
    note: Optional[str] = None
    record_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.taken_at is None:
            raise ValueError("Glucose reading is missing taken_at")
        if self.value is None:
            raise ValueError("Glucose reading is missing a value")
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))

    @property
    def in_normal_range(self) -> bool:
        return NORMAL_RANGE_LOW <= self.value <= NORMAL_RANGE_HIGH

    @property
    def is_high(self) -> bool:
        return self.value > NORMAL_RANGE_HIGH

    @property
    def is_low(self) -> bool:
        return self.value < NORMAL_RANGE_LOW

    @property
    def is_critically_high(self) -> bool:
        return self.value > CRITICALLY_HIGH_THRESHOLD

    @property
    def is_critically_low(self) -> bool:
        return self.value < CRITICALLY_LOW_THRESHOLD

    @property
    def status(self) -> GlucoseStatus:
        if self.is_critically_high:
            return GlucoseStatus.CRITICALLY_HIGH
        if self.is_critically_low:
            return GlucoseStatus.CRITICALLY_LOW
        if self.is_high:
            return GlucoseStatus.HIGH
        if self.is_low:
            return GlucoseStatus.LOW
        return GlucoseStatus.NORMAL


@dataclass(frozen=True)
class Meal:
    """Logged meal with optional macronutrient breakdown."""

    description: str
    consumed_at: datetime
    meal_type: MealType = MealType.OTHER
    carbs_grams: Optional[int] = None
    calories: Optional[int] = None
    protein_grams: Optional[int] = None
    fat_grams: Optional[int] = None
    notes: Optional[str] = None
    record_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.consumed_at is None:
            raise ValueError("Meal is missing consumed_at")

    @property
    def is_high_carb(self) -> bool:
        return self.carbs_grams is not None and self.carbs_grams > HIGH_CARB_GRAMS

    @property
    def is_low_carb(self) -> bool:
        return self.carbs_grams is not None and self.carbs_grams < LOW_CARB_GRAMS

    @property
    def carb_ratio(self) -> float:
        """Fraction of calories that come from carbohydrate."""

        if not self.calories or self.carbs_grams is None:
            return 0.0
        return self.carbs_grams * KCAL_PER_GRAM_CARB / self.calories


@dataclass(frozen=True)
class MedicationDose:
    """A single logged medication dose."""

    name: str
    taken_at: datetime
    medication_type: MedicationType = MedicationType.OTHER
    dosage: Optional[str] = None
    effectiveness_rating: Optional[int] = None
    side_effects: Optional[str] = None
    notes: Optional[str] = None
    record_id: Optional[str] = None

    def __post_init__(self) -> None:
        if self.taken_at is None:
            raise ValueError("Medication dose is missing taken_at")

    @property
    def is_insulin(self) -> bool:
        return self.medication_type in INSULIN_TYPES

    @property
    def is_oral_medication(self) -> bool:
        return self.medication_type in ORAL_TYPES

    @property
    def is_injectable(self) -> bool:
        return self.is_insulin or self.medication_type is MedicationType.GLP1_AGONIST

    @property
    def has_side_effects(self) -> bool:
        return bool(self.side_effects and self.side_effects.strip())


@dataclass(frozen=True)
class GlucoseSummary:
    """Descriptive statistics for the readings inside one window."""

    window: TimeWindow
    total_readings: int = 0
    average_reading: Optional[Decimal] = None
    min_reading: Optional[Decimal] = None
    max_reading: Optional[Decimal] = None
    readings_in_range: int = 0
    readings_high: int = 0
    readings_low: int = 0
    time_in_range_percentage: float = 0.0
    time_high_percentage: float = 0.0
    time_low_percentage: float = 0.0
    critically_high_readings: int = 0
    critically_low_readings: int = 0
    trend: GlucoseTrend = GlucoseTrend.STABLE
    trend_change: Decimal = Decimal("0.00")

    @property
    def critical_readings(self) -> int:
        return self.critically_high_readings + self.critically_low_readings


@dataclass(frozen=True)
class MealSummary:
    window: TimeWindow
    total_meals: int = 0
    average_carbs_per_meal: Optional[int] = None
    average_calories_per_meal: Optional[int] = None
    total_carbs: int = 0
    total_calories: int = 0
    high_carb_meals: int = 0
    low_carb_meals: int = 0
    high_carb_percentage: float = 0.0
    low_carb_percentage: float = 0.0
    breakfast_count: int = 0
    lunch_count: int = 0
    dinner_count: int = 0
    snack_count: int = 0
    nutrition_balance: NutritionBalance = NutritionBalance.INSUFFICIENT_DATA
    avg_carb_ratio: float = 0.0


@dataclass(frozen=True)
class MedicationSummary:
    window: TimeWindow
    total_medications: int = 0
    insulin_doses: int = 0
    oral_medications: int = 0
    injectable_medications: int = 0
    average_effectiveness_rating: Optional[float] = None
    medications_with_side_effects: int = 0
    side_effects_percentage: float = 0.0
    adherence_estimate: AdherenceEstimate = AdherenceEstimate.INSUFFICIENT_DATA
    medications_per_day: float = 0.0
    unique_medication_names: Sequence[str] = field(default_factory=tuple)
    unique_medication_count: int = 0
    most_common_medication_type: Optional[MedicationType] = None


@dataclass(frozen=True)
class MealGlucoseCorrelation:
    """Pre/post glucose readings matched to a meal."""

    meal_id: Optional[str]
    meal_description: str
    carbs_grams: Optional[int]
    meal_time: datetime
    pre_glucose_value: Optional[Decimal] = None
    pre_glucose_time: Optional[datetime] = None
    post_glucose_value: Optional[Decimal] = None
    post_glucose_time: Optional[datetime] = None
    glucose_rise: Optional[Decimal] = None
    carb_to_glucose_ratio: Optional[float] = None
    minutes_to_peak: Optional[int] = None
    impact: MealImpact = MealImpact.INSUFFICIENT_DATA


@dataclass(frozen=True)
class ProgressMetrics:
    """Time-in-range comparison against the preceding window of equal length."""

    current_period_days: int
    current_readings_count: int
    current_time_in_range: float
    time_in_range_trend: ProgressTrend
    previous_readings_count: Optional[int] = None
    previous_time_in_range: Optional[float] = None
    time_in_range_change: Optional[float] = None


@dataclass(frozen=True)
class InsightInputBundle:
    """Everything the dashboard rules may look at."""

    glucose: GlucoseSummary
    meals: MealSummary
    medications: MedicationSummary
    correlations: Sequence[MealGlucoseCorrelation] = field(default_factory=tuple)

    def high_impact_correlations(self) -> list[MealGlucoseCorrelation]:
        return [c for c in self.correlations if c.impact is MealImpact.HIGH_IMPACT]


@dataclass(frozen=True)
class GlucoseFlagBundle:
    """Inputs for the short-horizon glucose alert rules."""

    summary: GlucoseSummary
    days: int
    readings_per_day: float


@dataclass(frozen=True)
class InsightContext:
    """Auxiliary context passed to each rule."""

    user_id: str
    window: TimeWindow
    thresholds: Mapping[str, Any] = field(default_factory=dict)
    rule_settings: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)

    def rule_threshold(self, rule_id: str, key: str, default: Any) -> Any:
        """Return rule-specific override, falling back to global thresholds"""

        rule_specific = self.rule_settings.get(rule_id, {})
        if key in rule_specific:
            return rule_specific[key]
        return self.thresholds.get(key, default)


@dataclass(frozen=True)
class RuleDescriptor:
    """Static metadata describing a rule."""

    rule_id: str
    kind: MessageKind
    description: str
    version: str = "1.0.0"


@dataclass(frozen=True)
class GlucoseFlags:
    """Alerts and monitoring advice for the most recent days of readings."""

    window: TimeWindow
    days: int
    summary: GlucoseSummary
    readings_per_day: float
    alerts: Mapping[str, str] = field(default_factory=dict)
    recommendations: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "alerts", MappingProxyType(dict(self.alerts)))
        object.__setattr__(self, "recommendations", MappingProxyType(dict(self.recommendations)))

    @property
    def alert_count(self) -> int:
        return len(self.alerts)


@dataclass(frozen=True)
class ComprehensiveDashboard:
    """All analytics for one user and window."""

    user_id: str
    generated_at: datetime
    window: TimeWindow
    glucose_summary: GlucoseSummary
    meal_summary: MealSummary
    medication_summary: MedicationSummary
    meal_glucose_correlations: Sequence[MealGlucoseCorrelation]
    insights: Mapping[str, str]
    recommendations: Mapping[str, str]
    health_score: int
    health_score_band: HealthScoreBand
    progress_metrics: ProgressMetrics

    def __post_init__(self) -> None:
        object.__setattr__(self, "meal_glucose_correlations", tuple(self.meal_glucose_correlations))
        object.__setattr__(self, "insights", MappingProxyType(dict(self.insights)))
        object.__setattr__(self, "recommendations", MappingProxyType(dict(self.recommendations)))

    @property
    def health_score_description(self) -> str:
        from .scoring import band_description  # Local import to avoid circular dependency

        return band_description(self.health_score_band)
