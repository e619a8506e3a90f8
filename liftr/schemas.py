"""
Pydantic models for the values the training load engine consumes and returns.

This module defines:
- Adjustment policy: performance thresholds, reduction/deload percentages, mode
- Program requests: methodology, duration and starting lifts for generation,
  and single-lift progressions toward a target max
- Inventory snapshots: plates, bar and collars available to the lifter
- Load configurations: plate optimizer results
"""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator


# ============================================================================
# Enumerations
# ============================================================================

class AdjustmentMode(str, Enum):
    """How the engine handles a non-continue performance tier."""
    PROMPT = "prompt"
    AUTO_ADJUST = "auto_adjust"
    NEVER = "never"

    @property
    def display_name(self) -> str:
        return {
            AdjustmentMode.PROMPT: "Always prompt me",
            AdjustmentMode.AUTO_ADJUST: "Auto-adjust",
            AdjustmentMode.NEVER: "Never adjust",
        }[self]


class UnitSystem(str, Enum):
    """Measurement system used for rounding defaults and display."""
    IMPERIAL = "imperial"
    METRIC = "metric"


class PolicyPreset(str, Enum):
    """Named adjustment policy profiles."""
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"

    @property
    def description(self) -> str:
        return {
            PolicyPreset.CONSERVATIVE: "Higher thresholds, smaller jumps. Good for beginners and injury recovery",
            PolicyPreset.MODERATE: "Balanced progression. Good for most lifters",
            PolicyPreset.AGGRESSIVE: "Push harder, bigger jumps. Good for experienced lifters",
        }[self]


class Methodology(str, Enum):
    """Supported periodization methodologies."""
    LINEAR_AB = "linear_ab"
    VOLUME_RECOVERY_INTENSITY = "volume_recovery_intensity"
    VOLUME_LIGHT_INTENSITY = "volume_light_intensity"
    SINGLE_LIFT = "single_lift"

    @property
    def display_name(self) -> str:
        return {
            Methodology.LINEAR_AB: "Starting Strength",
            Methodology.VOLUME_RECOVERY_INTENSITY: "Texas Method",
            Methodology.VOLUME_LIGHT_INTENSITY: "Madcow 5x5",
            Methodology.SINGLE_LIFT: "Single-Lift Progression",
        }[self]

    @property
    def description(self) -> str:
        return {
            Methodology.LINEAR_AB: "Linear progression for beginners",
            Methodology.VOLUME_RECOVERY_INTENSITY: "Intermediate weekly progression",
            Methodology.VOLUME_LIGHT_INTENSITY: "Ramping sets with weekly progression",
            Methodology.SINGLE_LIFT: "One lift progressing weekly toward a target max",
        }[self]


class ProgressionStyle(str, Enum):
    """Week-to-week weight pattern of a single-lift progression."""
    LINEAR = "linear"
    PERIODIZATION = "periodization"
    RPE = "rpe"
    PERCENTAGE = "percentage"

    @property
    def display_name(self) -> str:
        return {
            ProgressionStyle.LINEAR: "Linear",
            ProgressionStyle.PERIODIZATION: "Periodization",
            ProgressionStyle.RPE: "RPE-Based",
            ProgressionStyle.PERCENTAGE: "Percentage-Based",
        }[self]

    @property
    def description(self) -> str:
        return {
            ProgressionStyle.LINEAR: "Consistent weight increases each week",
            ProgressionStyle.PERIODIZATION: "Light, medium and heavy weeks in 3-week waves",
            ProgressionStyle.RPE: "Planned like linear; effort is tracked during the workout",
            ProgressionStyle.PERCENTAGE: "Planned like linear from a percentage of max",
        }[self]


# ============================================================================
# Adjustment Policy
# ============================================================================


class ExerciseOverride(BaseModel):
    """Per-exercise replacements for the global adjustment rules."""

    exercise_name: str = Field(..., min_length=1, description="Exercise the override applies to")
    excellent_threshold: Optional[float] = Field(None, ge=0.0, le=200.0)
    good_threshold: Optional[float] = Field(None, ge=0.0, le=200.0)
    adjustment_threshold: Optional[float] = Field(None, ge=0.0, le=200.0)
    reduction_percent: Optional[float] = Field(None, ge=0.0, le=100.0)
    deload_percent: Optional[float] = Field(None, ge=0.0, le=100.0)


class AdjustmentPolicy(BaseModel):
    """
    Thresholds and percentages that drive session-by-session adjustments.

    Thresholds are percentages of planned reps completed and are expected to
    satisfy excellent >= good >= adjustment. The model does not reject a
    misordered policy: evaluation still runs top to bottom, and callers that
    want a hard check use ``liftr.evaluator.ensure_valid_policy`` at load time.
    """

    mode: AdjustmentMode = Field(
        AdjustmentMode.PROMPT, description="Whether adjustments prompt, apply automatically, or never apply"
    )
    excellent_threshold: float = Field(
        90.0, ge=0.0, le=200.0, description="At or above this percentage the plan continues unchanged"
    )
    good_threshold: float = Field(
        75.0, ge=0.0, le=200.0, description="At or above this percentage next week repeats the weight"
    )
    adjustment_threshold: float = Field(
        50.0, ge=0.0, le=200.0, description="At or above this percentage future weights are reduced"
    )
    reduction_percent: float = Field(
        5.0, ge=0.0, le=100.0, description="Percent removed from every future week on a reduction"
    )
    deload_percent: float = Field(
        10.0, ge=0.0, le=100.0, description="Percent removed from next week on a deload"
    )
    rounding_increment: float = Field(
        5.0, gt=0.0, description="Adjusted weights are rounded to the nearest multiple of this value"
    )
    unit_system: UnitSystem = Field(UnitSystem.IMPERIAL, description="Measurement system of the plan")

    @classmethod
    def from_preset(cls, preset: PolicyPreset, **overrides) -> "AdjustmentPolicy":
        """
        Build a policy from a named preset.

        Args:
            preset: Conservative, moderate or aggressive profile
            **overrides: Field values that replace the preset's values

        Returns:
            AdjustmentPolicy instance
        """
        values = dict(PRESET_VALUES[PolicyPreset(preset)])
        values.update(overrides)
        return cls(**values)

    def for_exercise(self, exercise_name: str, overrides: List[ExerciseOverride]) -> "AdjustmentPolicy":
        """
        Merge the first matching per-exercise override into a copy of this policy.

        Args:
            exercise_name: Exercise being evaluated
            overrides: Overrides supplied by the caller

        Returns:
            A new AdjustmentPolicy; this instance is left untouched
        """
        for override in overrides:
            if override.exercise_name.lower() == exercise_name.lower():
                replacements = override.model_dump(exclude={"exercise_name"}, exclude_none=True)
                return self.model_copy(update=replacements)
        return self.model_copy()


PRESET_VALUES: Dict[PolicyPreset, Dict[str, float]] = {
    PolicyPreset.CONSERVATIVE: {
        "excellent_threshold": 95.0,
        "good_threshold": 85.0,
        "adjustment_threshold": 70.0,
        "reduction_percent": 3.0,
        "deload_percent": 8.0,
    },
    PolicyPreset.MODERATE: {},
    PolicyPreset.AGGRESSIVE: {
        "excellent_threshold": 85.0,
        "good_threshold": 70.0,
        "adjustment_threshold": 50.0,
        "reduction_percent": 7.0,
        "deload_percent": 12.0,
    },
}


# ============================================================================
# Program Requests
# ============================================================================


class StartingLift(BaseModel):
    """Starting point for one lift in a generated program."""

    exercise_name: str = Field(..., min_length=1, description="Display name of the exercise")
    starting_weight: float = Field(..., gt=0, description="Week 1 working (or top-set) weight")
    increment: float = Field(5.0, ge=0, description="Weight added per progression step")


class ProgramRequest(BaseModel):
    """
    Everything the schedule generator needs to build a plan.

    Lift keys are ``squat``, ``bench``, ``press``, ``deadlift`` and ``row``;
    each methodology requires the subset its templates use.
    """

    name: str = Field(..., min_length=1, description="Program name")
    methodology: Methodology = Field(..., description="Periodization methodology")
    total_weeks: int = Field(12, ge=1, le=52, description="Program duration in weeks")
    start_date: date = Field(..., description="Date of the first session")
    lifts: Dict[str, StartingLift] = Field(..., min_length=1, description="Starting lifts keyed by lift key")
    day_offsets: List[int] = Field(
        default_factory=lambda: [0, 2, 4],
        min_length=1,
        max_length=7,
        description="Days after the start of each week on which sessions fall",
    )

    @field_validator("day_offsets")
    @classmethod
    def validate_day_offsets(cls, v: List[int]) -> List[int]:
        """Offsets must be distinct, ascending and inside one week."""
        if any(offset < 0 or offset > 6 for offset in v):
            raise ValueError("Day offsets must be between 0 and 6")
        if v != sorted(set(v)):
            raise ValueError("Day offsets must be strictly ascending")
        return v


class ProgressionRequest(BaseModel):
    """
    A single lift progressed from a current max toward a target max.

    The lift starts at 85% of the current max and the weekly step spreads the
    gap to the target evenly over the program, both rounded to
    ``rounding_increment``. Sessions repeat ``sessions_per_week`` times a
    week, evenly spaced from the start of each week.
    """

    exercise_name: str = Field(..., min_length=1, description="Exercise to progress")
    name: Optional[str] = Field(None, description="Program name, defaults to the exercise and style")
    style: ProgressionStyle = Field(ProgressionStyle.LINEAR, description="Week-to-week weight pattern")
    current_max: float = Field(..., gt=0, description="Current one-rep max")
    target_max: float = Field(..., gt=0, description="Max to reach by the end of the program")
    total_weeks: int = Field(12, ge=1, le=52, description="Program duration in weeks")
    sessions_per_week: int = Field(1, ge=1, le=7, description="Sessions of this lift each week")
    sets: int = Field(3, ge=1, le=20, description="Sets per session")
    reps: int = Field(5, ge=1, le=50, description="Reps per set")
    start_date: date = Field(..., description="Date of the first session")
    rounding_increment: float = Field(5.0, gt=0, description="Generated weights round to this value")

    @field_validator("exercise_name")
    @classmethod
    def strip_exercise_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Exercise name cannot be blank")
        return v

    @model_validator(mode="after")
    def validate_target(self):
        """Target max must be above the current max."""
        if self.target_max <= self.current_max:
            raise ValueError("Target max must be higher than current max")
        return self

    @property
    def plan_name(self) -> str:
        return self.name or f"{self.exercise_name} {self.style.display_name} Progression"


# ============================================================================
# Plate Inventory and Load Configuration
# ============================================================================


LARGE_PLATE_THRESHOLD = 45.0


class InventorySnapshot(BaseModel):
    """
    Plates, bar and collars available for loading.

    Plate counts are TOTAL plates owned; plates are loaded in symmetric pairs,
    so only ``count // 2`` of each weight can go on one side.
    """

    plates: Dict[float, int] = Field(
        default_factory=dict, description="Plate weight -> total number owned"
    )
    bar_weight: float = Field(45.0, gt=0, description="Weight of the selected bar")
    collar_weight: float = Field(0.0, ge=0, description="Weight of one collar")
    collar_count: int = Field(2, ge=0, description="Number of collars used")
    use_large_plates: bool = Field(
        False, description=f"Allow plates heavier than {LARGE_PLATE_THRESHOLD:g}"
    )

    @field_validator("plates")
    @classmethod
    def validate_plates(cls, v: Dict[float, int]) -> Dict[float, int]:
        """Plate weights must be positive and counts non-negative."""
        for weight, count in v.items():
            if weight <= 0:
                raise ValueError(f"Plate weight must be positive, got {weight}")
            if count < 0:
                raise ValueError(f"Plate count must be non-negative, got {count} for {weight}")
        return v

    @property
    def total_collar_weight(self) -> float:
        return self.collar_weight * self.collar_count

    def per_side(self, plate_weight: float) -> int:
        """Number of plates of this weight that can be loaded on one side."""
        return self.plates.get(plate_weight, 0) // 2


class PlateConfiguration(BaseModel):
    """One plate denomination on each side of the bar."""

    plate_weight: float = Field(..., gt=0)
    quantity: int = Field(..., ge=1, description="Plates of this weight per side")


class LoadConfiguration(BaseModel):
    """Result of a plate load calculation."""

    target_weight: float = Field(..., description="Weight that was requested")
    achieved_weight: float = Field(..., description="Bar + plates on both sides + collars")
    bar_weight: float = Field(..., gt=0)
    collar_weight: float = Field(0.0, ge=0, description="Total collar weight added on top")
    weight_per_side: float = Field(..., ge=0, description="Plate weight loaded on one side")
    plates: List[PlateConfiguration] = Field(
        default_factory=list, description="Plates per side, heaviest first"
    )
    is_exact_match: bool = Field(..., description="Whether the plates reach the target exactly")

    @computed_field
    @property
    def total_plates(self) -> int:
        return sum(p.quantity * 2 for p in self.plates)

    @model_validator(mode="after")
    def validate_plate_order(self):
        """Plates must be listed heaviest first."""
        weights = [p.plate_weight for p in self.plates]
        if weights != sorted(weights, reverse=True):
            raise ValueError("Plate configurations must be sorted heaviest first")
        return self
