"""
Shared utilities for the form analysis service.

- Low-confidence warnings for snapshots missing key joints
- Exercise catalogue for the listing endpoint
"""

import logging
from typing import Optional

from src.biomechanics import GymExerciseType, PoseSnapshot, missing_landmarks

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Low-confidence warnings
# ---------------------------------------------------------------------------

def generate_landmark_warnings(
    snapshot: PoseSnapshot,
    exercise: Optional[GymExerciseType] = None,
) -> list[str]:
    """Describe key joints the pose detector never saw.

    The engine still scores such snapshots with neutral fallbacks, so the
    result may miss real issues; these strings tell the user why.

    Args:
        snapshot: Averaged snapshot sent to the engine.
        exercise: Gym exercise, or None for running.

    Returns:
        List of human-readable warning strings (empty when all key joints
        were detected).
    """
    missing = missing_landmarks(snapshot, exercise)
    if not missing:
        return []

    activity = exercise.display_name if exercise else "Running"
    names = ", ".join(lm.value.replace("_", " ") for lm in missing)
    logger.info("%s analysis missing key joints: %s", activity, names)
    return [
        f"Low confidence: could not detect {names}. "
        "Make sure your full body is visible to the camera.",
    ]


# ---------------------------------------------------------------------------
# Exercise catalogue
# ---------------------------------------------------------------------------

def list_exercises() -> list[dict]:
    """Supported gym exercises with display names and muscle groups."""
    return [
        {
            "id": exercise.value,
            "display_name": exercise.display_name,
            "muscle_groups": exercise.muscle_groups,
        }
        for exercise in GymExerciseType
    ]
