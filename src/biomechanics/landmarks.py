"""
Landmark model for the form analysis engine.

A ``PoseSnapshot`` is one capture of the joints a pose detector found in a
frame. Joints the detector missed are simply absent; every metric extractor
has a neutral fallback for that case.

Coordinate convention: x grows to the right, y grows down the frame, both as
fractions of the frame size in [0, 1]. z is depth relative to the hips and
defaults to 0.
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Iterable, Mapping, Optional, Sequence

import numpy as np
from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer

logger = logging.getLogger(__name__)


class PoseLandmark(str, Enum):
    """Joint vocabulary shared with the pose detector."""
    NOSE = "nose"
    LEFT_EYE = "left_eye"
    RIGHT_EYE = "right_eye"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"
    LEFT_HEEL = "left_heel"
    RIGHT_HEEL = "right_heel"
    LEFT_FOOT_INDEX = "left_foot_index"
    RIGHT_FOOT_INDEX = "right_foot_index"


# MediaPipe Pose (33 landmarks) index for each joint we track
MEDIAPIPE_LANDMARK_INDEX: dict[PoseLandmark, int] = {
    PoseLandmark.NOSE: 0,
    PoseLandmark.LEFT_EYE: 2,
    PoseLandmark.RIGHT_EYE: 5,
    PoseLandmark.LEFT_EAR: 7,
    PoseLandmark.RIGHT_EAR: 8,
    PoseLandmark.LEFT_SHOULDER: 11,
    PoseLandmark.RIGHT_SHOULDER: 12,
    PoseLandmark.LEFT_ELBOW: 13,
    PoseLandmark.RIGHT_ELBOW: 14,
    PoseLandmark.LEFT_WRIST: 15,
    PoseLandmark.RIGHT_WRIST: 16,
    PoseLandmark.LEFT_HIP: 23,
    PoseLandmark.RIGHT_HIP: 24,
    PoseLandmark.LEFT_KNEE: 25,
    PoseLandmark.RIGHT_KNEE: 26,
    PoseLandmark.LEFT_ANKLE: 27,
    PoseLandmark.RIGHT_ANKLE: 28,
    PoseLandmark.LEFT_HEEL: 29,
    PoseLandmark.RIGHT_HEEL: 30,
    PoseLandmark.LEFT_FOOT_INDEX: 31,
    PoseLandmark.RIGHT_FOOT_INDEX: 32,
}

MEDIAPIPE_NUM_LANDMARKS: int = 33


# ============================================================================
# Value Models
# ============================================================================

def read_only(mapping: Mapping) -> Mapping:
    """Wrap a validated mapping so item assignment raises TypeError."""
    return MappingProxyType(dict(mapping))


def as_dict(mapping: Mapping) -> dict:
    return dict(mapping)


class Point3D(BaseModel):
    """A joint position in frame-normalized coordinates."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    x: float
    y: float
    z: float = 0.0


LandmarkMap = Annotated[
    Mapping[PoseLandmark, Point3D],
    AfterValidator(read_only),
    PlainSerializer(as_dict, return_type=dict[PoseLandmark, Point3D]),
]


class DerivedSignals(BaseModel):
    """Multi-frame running signals computed outside the engine.

    All fields are optional; the engine substitutes its defaults for
    anything left unset. Non-finite values are rejected.
    """
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    cadence: Optional[int] = Field(default=None, description="Steps per minute")
    stride_length: Optional[float] = Field(default=None, description="Stride length (m)")
    ground_contact_time: Optional[int] = Field(default=None, description="Ground contact (ms)")
    flight_time: Optional[int] = Field(default=None, description="Flight time (ms)")
    vertical_oscillation: Optional[float] = Field(
        default=None, description="Vertical oscillation (cm)"
    )


class PoseSnapshot(BaseModel):
    """One point-in-time capture of the detected joints.

    The mapping may be sparse. Snapshots are never retained by the engine.
    """
    model_config = ConfigDict(frozen=True)

    landmarks: LandmarkMap = Field(default_factory=dict, validate_default=True)
    timestamp_ms: int = 0

    def get(self, landmark: PoseLandmark) -> Optional[Point3D]:
        """Return the joint position, or None if it was not detected."""
        return self.landmarks.get(landmark)

    def has(self, *landmarks: PoseLandmark) -> bool:
        """True if every given joint is present."""
        return all(lm in self.landmarks for lm in landmarks)

    def without(self, *landmarks: PoseLandmark) -> "PoseSnapshot":
        """Copy of this snapshot with the given joints removed."""
        kept = {lm: p for lm, p in self.landmarks.items() if lm not in landmarks}
        return PoseSnapshot(landmarks=kept, timestamp_ms=self.timestamp_ms)

    def __len__(self) -> int:
        return len(self.landmarks)


# ============================================================================
# Constructors
# ============================================================================

def point_from_pixels(x: float, y: float, z: float, width: int, height: int) -> Point3D:
    """Normalize a pixel-space detection to frame fractions (z passes through)."""
    return Point3D(x=x / width, y=y / height, z=z)


def snapshot_from_mediapipe(
    rows: Sequence[Sequence[float]],
    visibility_threshold: float = 0.5,
    timestamp_ms: int = 0,
) -> PoseSnapshot:
    """Build a snapshot from one frame of MediaPipe Pose output.

    Args:
        rows: 33 rows of ``(x, y, z)`` or ``(x, y, z, visibility)``.
        visibility_threshold: Rows with visibility below this are treated as
            undetected. Ignored for 3-column input.
        timestamp_ms: Capture time of the frame.

    Returns:
        PoseSnapshot holding the tracked subset of joints.

    Raises:
        ValueError: If the array is not 33 × 3 or 33 × 4.
    """
    arr = np.asarray(rows, dtype=np.float64)
    if arr.ndim != 2 or arr.shape[0] != MEDIAPIPE_NUM_LANDMARKS or arr.shape[1] not in (3, 4):
        raise ValueError(
            f"Expected {MEDIAPIPE_NUM_LANDMARKS} landmarks × (3 or 4) values, "
            f"got shape {arr.shape}."
        )

    landmarks: dict[PoseLandmark, Point3D] = {}
    dropped = []
    for landmark, idx in MEDIAPIPE_LANDMARK_INDEX.items():
        row = arr[idx]
        if arr.shape[1] == 4 and row[3] < visibility_threshold:
            dropped.append(landmark.value)
            continue
        if not np.all(np.isfinite(row[:3])):
            dropped.append(landmark.value)
            continue
        landmarks[landmark] = Point3D(x=float(row[0]), y=float(row[1]), z=float(row[2]))

    if dropped:
        logger.debug("Dropped %d low-visibility landmarks: %s", len(dropped), dropped)

    return PoseSnapshot(landmarks=landmarks, timestamp_ms=timestamp_ms)


def average_snapshots(snapshots: Iterable[PoseSnapshot]) -> Optional[PoseSnapshot]:
    """Average each joint over the snapshots in which it was detected.

    A joint seen in only some captures is averaged over those captures
    alone. Returns None for an empty input.
    """
    sums: dict[PoseLandmark, np.ndarray] = {}
    counts: dict[PoseLandmark, int] = {}
    latest_ts = 0
    seen_any = False

    for snapshot in snapshots:
        seen_any = True
        latest_ts = max(latest_ts, snapshot.timestamp_ms)
        for landmark, point in snapshot.landmarks.items():
            sums.setdefault(landmark, np.zeros(3))
            sums[landmark] += (point.x, point.y, point.z)
            counts[landmark] = counts.get(landmark, 0) + 1

    if not seen_any:
        return None

    averaged = {
        landmark: Point3D(
            x=float(total[0] / counts[landmark]),
            y=float(total[1] / counts[landmark]),
            z=float(total[2] / counts[landmark]),
        )
        for landmark, total in sums.items()
    }
    return PoseSnapshot(landmarks=averaged, timestamp_ms=latest_ts)
