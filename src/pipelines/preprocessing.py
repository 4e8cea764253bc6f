"""
Pose preprocessing for the form analysis service.

Receives raw pose landmarks from the mobile app (frames × 33 × 3|4) and
produces the single averaged ``PoseSnapshot`` the engine consumes.

Pipeline:
    1. Validate input shape (N, 33, 3) or (N, 33, 4)
    2. Keep the last MAX_FRAMES frames
    3. Build one snapshot per frame (low-visibility joints dropped)
    4. Average each joint over the frames that detected it
"""

import logging

import numpy as np

from src.biomechanics import (
    PoseLandmark,
    PoseSnapshot,
    average_snapshots,
    snapshot_from_mediapipe,
)

from .config import MAX_FRAMES, NUM_LANDMARKS, VISIBILITY_THRESHOLD

logger = logging.getLogger(__name__)


def _validate_pose_sequence(pose_sequence: list) -> np.ndarray:
    """Validate and convert the raw pose sequence to a numpy array.

    Args:
        pose_sequence: 3D list from the request body (frames × 33 × 3|4).

    Returns:
        np.ndarray of shape (N, 33, 3) or (N, 33, 4).

    Raises:
        ValueError: If the sequence is empty or the shape is invalid.
    """
    if len(pose_sequence) == 0:
        raise ValueError("No pose data: pose_sequence contains no frames.")

    try:
        arr = np.asarray(pose_sequence, dtype=np.float64)
    except ValueError as exc:
        raise ValueError(f"pose_sequence must be a regular array of landmarks: {exc}") from exc

    if arr.ndim != 3:
        raise ValueError(
            f"pose_sequence must be 3-dimensional (frames × 33 × 4), "
            f"got shape {arr.shape}."
        )
    if arr.shape[1] != NUM_LANDMARKS:
        raise ValueError(
            f"Expected {NUM_LANDMARKS} landmarks per frame, got {arr.shape[1]}."
        )
    if arr.shape[2] not in (3, 4):
        raise ValueError(
            f"Expected 3 or 4 values per landmark (x, y, z[, visibility]), "
            f"got {arr.shape[2]}."
        )

    return arr


def preprocess_pose_sequence(
    pose_sequence: list,
    visibility_threshold: float = VISIBILITY_THRESHOLD,
    max_frames: int = MAX_FRAMES,
) -> PoseSnapshot:
    """Full preprocessing: raw mobile poses → one averaged snapshot.

    Args:
        pose_sequence: 3D list/array (frames × 33 × 3|4).
        visibility_threshold: Per-joint visibility cut-off.
        max_frames: Only the most recent ``max_frames`` frames are used.

    Returns:
        PoseSnapshot averaged over the kept frames.

    Raises:
        ValueError: On shape validation, or when no joint was visible in
            any frame.
    """
    frames = _validate_pose_sequence(pose_sequence)
    if frames.shape[0] > max_frames:
        logger.info("Trimming %d frames to the last %d", frames.shape[0], max_frames)
        frames = frames[-max_frames:]

    snapshots = [
        snapshot_from_mediapipe(frame, visibility_threshold=visibility_threshold)
        for frame in frames
    ]
    snapshot = average_snapshots(snapshots)
    if snapshot is None or len(snapshot) == 0:
        raise ValueError("No pose data: no landmark passed the visibility threshold.")

    n_missing = len(PoseLandmark) - len(snapshot)
    if n_missing > 0:
        logger.info(
            "%d / %d joints never passed visibility %.2f",
            n_missing, len(PoseLandmark), visibility_threshold,
        )

    logger.info(
        "Preprocessing complete: %d frames → %d joints",
        frames.shape[0], len(snapshot),
    )
    return snapshot
