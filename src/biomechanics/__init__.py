"""
Biomechanics module for the form analysis engine.

Stateless, pose-based form evaluation for running gait and eight gym
exercises: metric extraction, rule evaluation, scoring and coaching tips.
"""

from .engine import analyze_gym_form, analyze_running_form, missing_landmarks
from .exercise_rules import GYM_PROFILES, RUNNING_PROFILE
from .landmarks import (
    DerivedSignals,
    Point3D,
    PoseLandmark,
    PoseSnapshot,
    average_snapshots,
    point_from_pixels,
    snapshot_from_mediapipe,
)
from .results import (
    FormIssue,
    GymExerciseType,
    GymFormResult,
    IssueSeverity,
    IssueType,
    RepQuality,
    RunningFormResult,
    StrideAnalysis,
    parse_exercise_type,
)
from .tips import FormDrill, drills_for_issue, drills_for_issues

__all__ = [
    "analyze_running_form",
    "analyze_gym_form",
    "missing_landmarks",
    "RUNNING_PROFILE",
    "GYM_PROFILES",
    "DerivedSignals",
    "Point3D",
    "PoseLandmark",
    "PoseSnapshot",
    "average_snapshots",
    "point_from_pixels",
    "snapshot_from_mediapipe",
    "FormIssue",
    "GymExerciseType",
    "GymFormResult",
    "IssueSeverity",
    "IssueType",
    "RepQuality",
    "RunningFormResult",
    "StrideAnalysis",
    "parse_exercise_type",
    "FormDrill",
    "drills_for_issue",
    "drills_for_issues",
]
