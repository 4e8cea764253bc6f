"""
Issue taxonomy and result models returned by the form analysis engine.

Results are frozen pydantic models so callers can persist or render them
verbatim (``model_dump()`` / ``model_dump_json()``).
"""

from enum import Enum
from typing import Annotated, Mapping

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer

from .config import (
    DEFAULT_FLIGHT_TIME,
    DEFAULT_GROUND_CONTACT_TIME,
    DEFAULT_STRIDE_LENGTH,
)
from .landmarks import as_dict, read_only


# ============================================================================
# Enumerations
# ============================================================================

class IssueType(str, Enum):
    """Closed taxonomy of form issues."""
    # Running
    POSTURE = "posture"
    ARM_SWING = "arm_swing"
    VERTICAL_OSCILLATION = "vertical_oscillation"
    HIP_STABILITY = "hip_stability"
    KNEE_DRIVE = "knee_drive"
    FOOT_STRIKE = "foot_strike"
    # Gym
    DEPTH = "depth"
    KNEE_TRACKING = "knee_tracking"
    BACK_POSITION = "back_position"
    FOOT_POSITION = "foot_position"
    BAR_PATH = "bar_path"
    HIP_POSITION = "hip_position"
    LOCKOUT = "lockout"
    ELBOW_POSITION = "elbow_position"
    WRIST_POSITION = "wrist_position"
    HEAD_POSITION = "head_position"
    SHOULDER_POSITION = "shoulder_position"
    HAND_POSITION = "hand_position"


class IssueSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Ordinal used for sorting (low=0, medium=1, high=2)."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    IssueSeverity.LOW: 0,
    IssueSeverity.MEDIUM: 1,
    IssueSeverity.HIGH: 2,
}


class RepQuality(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"


class FootStrikeType(str, Enum):
    HEEL = "heel"
    MIDFOOT = "midfoot"
    FOREFOOT = "forefoot"


class GymExerciseType(str, Enum):
    """Resistance exercises with a dedicated rule set."""
    SQUAT = "squat"
    DEADLIFT = "deadlift"
    BENCH_PRESS = "bench_press"
    OVERHEAD_PRESS = "overhead_press"
    BARBELL_ROW = "barbell_row"
    LUNGE = "lunge"
    PLANK = "plank"
    PUSH_UP = "push_up"

    @property
    def display_name(self) -> str:
        return _EXERCISE_INFO[self][0]

    @property
    def muscle_groups(self) -> list[str]:
        return list(_EXERCISE_INFO[self][1])


# Exercise -> (display name, muscle groups)
_EXERCISE_INFO: dict[GymExerciseType, tuple[str, tuple[str, ...]]] = {
    GymExerciseType.SQUAT: ("Squat", ("Quadriceps", "Glutes", "Hamstrings", "Core")),
    GymExerciseType.DEADLIFT: ("Deadlift", ("Back", "Glutes", "Hamstrings", "Core")),
    GymExerciseType.BENCH_PRESS: ("Bench Press", ("Chest", "Shoulders", "Triceps")),
    GymExerciseType.OVERHEAD_PRESS: ("Overhead Press", ("Shoulders", "Triceps", "Core")),
    GymExerciseType.BARBELL_ROW: ("Barbell Row", ("Back", "Biceps", "Rear Delts")),
    GymExerciseType.LUNGE: ("Lunge", ("Quadriceps", "Glutes", "Hamstrings")),
    GymExerciseType.PLANK: ("Plank", ("Core", "Shoulders")),
    GymExerciseType.PUSH_UP: ("Push-Up", ("Chest", "Shoulders", "Triceps", "Core")),
}


def parse_exercise_type(exercise) -> GymExerciseType:
    """Resolve an exercise selector given as enum member, value or name.

    Raises:
        ValueError: If the selector does not name a supported exercise.
    """
    if isinstance(exercise, GymExerciseType):
        return exercise
    if isinstance(exercise, str):
        key = exercise.strip().lower().replace("-", "_").replace(" ", "_")
        for member in GymExerciseType:
            if key in (member.value, member.name.lower()):
                return member
    valid = ", ".join(m.value for m in GymExerciseType)
    raise ValueError(f"Unknown exercise '{exercise}'. Valid exercises: {valid}")


# ============================================================================
# Result Models
# ============================================================================

# Metric key → value, read-only once the result is built
MetricMap = Annotated[
    Mapping[str, float],
    AfterValidator(read_only),
    PlainSerializer(as_dict, return_type=dict[str, float]),
]


class FormIssue(BaseModel):
    """A flagged deviation of one metric from its acceptable range."""
    model_config = ConfigDict(frozen=True)

    type: IssueType
    severity: IssueSeverity
    title: str
    description: str = Field(description="Includes the offending value")
    correction: str = Field(description="Actionable cue")


class FootStrikeAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: FootStrikeType
    angle: float
    severity: IssueSeverity


class StrideAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    stride_length: float = DEFAULT_STRIDE_LENGTH
    ground_contact_time: int = DEFAULT_GROUND_CONTACT_TIME
    flight_time: int = DEFAULT_FLIGHT_TIME

    @property
    def vertical_ratio(self) -> float:
        """Flight time relative to ground contact time."""
        if self.ground_contact_time > 0:
            return self.flight_time / self.ground_contact_time
        return 0.0


class RunningFormResult(BaseModel):
    """Outcome of one running-gait analysis."""
    model_config = ConfigDict(frozen=True)

    overall_score: int = Field(ge=0, le=100)
    issues: tuple[FormIssue, ...]
    metrics: MetricMap
    cadence_estimate: int
    stride_analysis: StrideAnalysis


class GymFormResult(BaseModel):
    """Outcome of one resistance-exercise analysis."""
    model_config = ConfigDict(frozen=True)

    exercise_type: GymExerciseType
    overall_score: int = Field(ge=0, le=100)
    issues: tuple[FormIssue, ...]
    metrics: MetricMap
    rep_quality: RepQuality
    tips: tuple[str, ...]
