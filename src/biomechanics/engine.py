"""
Form analysis entry points.

Both analyzers take a single ``PoseSnapshot`` and return a frozen result:

    snapshot -> profile rules (metrics + issues) -> score -> tips -> result

No state is kept between calls, so the functions are safe to call
concurrently from any thread.
"""

import logging
from typing import Optional, Union

from .config import DEFAULT_CADENCE
from .exercise_rules import RUNNING_PROFILE, evaluate_profile, get_gym_profile
from .landmarks import DerivedSignals, PoseLandmark, PoseSnapshot
from .results import (
    GymExerciseType,
    GymFormResult,
    RunningFormResult,
    StrideAnalysis,
    parse_exercise_type,
)
from .scoring import calculate_score, rep_quality, sort_issues
from .tips import gym_tips

logger = logging.getLogger(__name__)

# Joints every analysis relies on
_CORE_LANDMARKS = (
    PoseLandmark.LEFT_SHOULDER,
    PoseLandmark.RIGHT_SHOULDER,
    PoseLandmark.LEFT_HIP,
    PoseLandmark.RIGHT_HIP,
)

_EXERCISE_LANDMARKS: dict[GymExerciseType, tuple[PoseLandmark, ...]] = {
    GymExerciseType.PUSH_UP: (
        PoseLandmark.LEFT_ELBOW, PoseLandmark.LEFT_WRIST, PoseLandmark.LEFT_ANKLE, PoseLandmark.NOSE,
    ),
    GymExerciseType.PLANK: (PoseLandmark.LEFT_ANKLE, PoseLandmark.NOSE),
    GymExerciseType.SQUAT: (PoseLandmark.LEFT_KNEE, PoseLandmark.LEFT_ANKLE),
    GymExerciseType.LUNGE: (PoseLandmark.LEFT_KNEE, PoseLandmark.LEFT_ANKLE),
    GymExerciseType.DEADLIFT: (PoseLandmark.LEFT_KNEE, PoseLandmark.LEFT_ANKLE),
}


def missing_landmarks(
    snapshot: PoseSnapshot,
    exercise: Optional[GymExerciseType] = None,
) -> list[PoseLandmark]:
    """List the key joints for an activity that the snapshot lacks.

    The analyzers still run on such snapshots (missing joints fall back to
    neutral values); callers use this to flag low-confidence results.

    Args:
        snapshot: Snapshot to check.
        exercise: Gym exercise, or None for running.

    Returns:
        Missing joints in check order (empty when all are present).
    """
    required = _CORE_LANDMARKS + _EXERCISE_LANDMARKS.get(exercise, ())
    return [lm for lm in required if not snapshot.has(lm)]


def _stride_from_signals(signals: Optional[DerivedSignals]) -> StrideAnalysis:
    if signals is None:
        return StrideAnalysis()
    fields = {
        "stride_length": signals.stride_length,
        "ground_contact_time": signals.ground_contact_time,
        "flight_time": signals.flight_time,
    }
    return StrideAnalysis(**{k: v for k, v in fields.items() if v is not None})


def analyze_running_form(
    snapshot: PoseSnapshot,
    derived_signals: Optional[DerivedSignals] = None,
) -> RunningFormResult:
    """Evaluate running gait from one snapshot.

    Args:
        snapshot: Detected joints (may be sparse).
        derived_signals: Multi-frame signals measured by the caller. Cadence,
            stride and vertical oscillation fall back to defaults when absent.

    Returns:
        RunningFormResult with issues sorted by severity (highest first).
    """
    issues, metrics = evaluate_profile(RUNNING_PROFILE, snapshot, derived_signals)
    score = calculate_score(issues)

    cadence = DEFAULT_CADENCE
    if derived_signals is not None and derived_signals.cadence is not None:
        cadence = derived_signals.cadence

    logger.debug(
        "Running analysis: score=%d issues=%d joints=%d",
        score, len(issues), len(snapshot),
    )

    return RunningFormResult(
        overall_score=score,
        issues=tuple(sort_issues(issues)),
        metrics=metrics,
        cadence_estimate=cadence,
        stride_analysis=_stride_from_signals(derived_signals),
    )


def analyze_gym_form(
    snapshot: PoseSnapshot,
    exercise_type: Union[GymExerciseType, str],
) -> GymFormResult:
    """Evaluate one resistance exercise from one snapshot.

    Args:
        snapshot: Detected joints (may be sparse).
        exercise_type: ``GymExerciseType`` member, or its value/name.

    Returns:
        GymFormResult with issues sorted by severity (highest first).

    Raises:
        ValueError: If ``exercise_type`` is not a supported exercise.
    """
    exercise = parse_exercise_type(exercise_type)
    issues, metrics = evaluate_profile(get_gym_profile(exercise), snapshot)
    score = calculate_score(issues)

    logger.debug(
        "Gym analysis (%s): score=%d issues=%d joints=%d",
        exercise.value, score, len(issues), len(snapshot),
    )

    return GymFormResult(
        exercise_type=exercise,
        overall_score=score,
        issues=tuple(sort_issues(issues)),
        metrics=metrics,
        rep_quality=rep_quality(score),
        tips=tuple(gym_tips(exercise, issues)),
    )
