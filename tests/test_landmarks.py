"""Tests for the landmark model and its constructors."""

import sys
from pathlib import Path

import numpy as np
import pytest
from pydantic import ValidationError

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.biomechanics.landmarks import (
    MEDIAPIPE_LANDMARK_INDEX,
    DerivedSignals,
    Point3D,
    PoseLandmark,
    PoseSnapshot,
    average_snapshots,
    point_from_pixels,
    snapshot_from_mediapipe,
)


# ============================================================================
# Fixtures
# ============================================================================

def _make_mediapipe_frame(visibility: float = 0.9, seed: int = 0) -> np.ndarray:
    """Create a (33, 4) MediaPipe-style frame with uniform visibility."""
    rng = np.random.RandomState(seed)
    frame = np.zeros((33, 4))
    frame[:, :3] = rng.uniform(0.1, 0.9, size=(33, 3))
    frame[:, 3] = visibility
    return frame


# ============================================================================
# Test: Value Models
# ============================================================================

class TestValueModels:

    def test_vocabulary_has_21_joints(self):
        assert len(PoseLandmark) == 21
        assert set(MEDIAPIPE_LANDMARK_INDEX) == set(PoseLandmark)

    def test_point_defaults_depth(self):
        assert Point3D(x=0.1, y=0.2).z == 0.0

    def test_snapshot_is_immutable(self):
        snap = PoseSnapshot(landmarks={PoseLandmark.NOSE: Point3D(x=0.5, y=0.1)})
        with pytest.raises(ValidationError):
            snap.timestamp_ms = 5

    @pytest.mark.parametrize("snap", [
        PoseSnapshot(),
        PoseSnapshot(landmarks={PoseLandmark.NOSE: Point3D(x=0.5, y=0.1)}),
    ])
    def test_snapshot_landmarks_are_read_only(self, snap):
        with pytest.raises(TypeError):
            snap.landmarks[PoseLandmark.LEFT_HIP] = Point3D(x=0.5, y=0.6)
        assert not snap.has(PoseLandmark.LEFT_HIP)

    def test_snapshot_does_not_alias_input(self):
        joints = {PoseLandmark.NOSE: Point3D(x=0.5, y=0.1)}
        snap = PoseSnapshot(landmarks=joints)
        joints[PoseLandmark.LEFT_HIP] = Point3D(x=0.5, y=0.6)
        assert len(snap) == 1

    def test_snapshot_dumps_as_dict(self):
        snap = PoseSnapshot(landmarks={PoseLandmark.NOSE: Point3D(x=0.5, y=0.1)})
        assert snap.model_dump()["landmarks"] == {
            PoseLandmark.NOSE: {"x": 0.5, "y": 0.1, "z": 0.0},
        }

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_point_rejects_non_finite(self, value):
        with pytest.raises(ValidationError):
            Point3D(x=0.5, y=value)

    @pytest.mark.parametrize("field", ["stride_length", "vertical_oscillation"])
    def test_derived_signals_reject_non_finite(self, field):
        with pytest.raises(ValidationError):
            DerivedSignals(**{field: float("inf")})

    def test_snapshot_lookup(self):
        snap = PoseSnapshot(landmarks={PoseLandmark.NOSE: Point3D(x=0.5, y=0.1)})
        assert snap.get(PoseLandmark.NOSE) == Point3D(x=0.5, y=0.1)
        assert snap.get(PoseLandmark.LEFT_HIP) is None
        assert snap.has(PoseLandmark.NOSE)
        assert not snap.has(PoseLandmark.NOSE, PoseLandmark.LEFT_HIP)
        assert len(snap) == 1

    def test_without_returns_copy(self):
        snap = PoseSnapshot(landmarks={
            PoseLandmark.NOSE: Point3D(x=0.5, y=0.1),
            PoseLandmark.LEFT_HIP: Point3D(x=0.5, y=0.6),
        }, timestamp_ms=42)
        trimmed = snap.without(PoseLandmark.NOSE)
        assert not trimmed.has(PoseLandmark.NOSE)
        assert trimmed.timestamp_ms == 42
        assert snap.has(PoseLandmark.NOSE)

    def test_point_from_pixels(self):
        p = point_from_pixels(320, 240, -0.3, width=640, height=480)
        assert (p.x, p.y, p.z) == pytest.approx((0.5, 0.5, -0.3))


# ============================================================================
# Test: MediaPipe Conversion
# ============================================================================

class TestSnapshotFromMediapipe:

    def test_full_visibility_keeps_all_joints(self):
        frame = _make_mediapipe_frame()
        snap = snapshot_from_mediapipe(frame, timestamp_ms=100)
        assert len(snap) == 21
        assert snap.timestamp_ms == 100
        nose = snap.get(PoseLandmark.NOSE)
        np.testing.assert_allclose([nose.x, nose.y, nose.z], frame[0, :3])

    def test_index_mapping(self):
        frame = _make_mediapipe_frame()
        snap = snapshot_from_mediapipe(frame)
        hip = snap.get(PoseLandmark.RIGHT_HIP)
        np.testing.assert_allclose([hip.x, hip.y, hip.z], frame[24, :3])

    def test_low_visibility_joints_dropped(self):
        frame = _make_mediapipe_frame()
        frame[15, 3] = 0.1   # left wrist
        frame[16, 3] = 0.49  # right wrist
        snap = snapshot_from_mediapipe(frame, visibility_threshold=0.5)
        assert not snap.has(PoseLandmark.LEFT_WRIST)
        assert not snap.has(PoseLandmark.RIGHT_WRIST)
        assert len(snap) == 19

    def test_three_columns_ignore_visibility(self):
        frame = _make_mediapipe_frame()[:, :3]
        assert len(snapshot_from_mediapipe(frame, visibility_threshold=0.99)) == 21

    def test_non_finite_rows_dropped(self):
        frame = _make_mediapipe_frame()
        frame[0, 0] = np.nan
        assert not snapshot_from_mediapipe(frame).has(PoseLandmark.NOSE)

    @pytest.mark.parametrize("shape", [(32, 4), (33, 2), (33, 5), (33,)])
    def test_invalid_shape_raises(self, shape):
        with pytest.raises(ValueError, match="33 landmarks"):
            snapshot_from_mediapipe(np.zeros(shape))


# ============================================================================
# Test: Averaging
# ============================================================================

class TestAverageSnapshots:

    def test_empty_returns_none(self):
        assert average_snapshots([]) is None

    def test_per_joint_count(self):
        a = PoseSnapshot(landmarks={
            PoseLandmark.NOSE: Point3D(x=0.2, y=0.2),
            PoseLandmark.LEFT_HIP: Point3D(x=0.4, y=0.6),
        }, timestamp_ms=10)
        b = PoseSnapshot(landmarks={
            PoseLandmark.NOSE: Point3D(x=0.4, y=0.4, z=1.0),
        }, timestamp_ms=30)

        avg = average_snapshots([a, b])
        nose = avg.get(PoseLandmark.NOSE)
        hip = avg.get(PoseLandmark.LEFT_HIP)
        assert (nose.x, nose.y, nose.z) == pytest.approx((0.3, 0.3, 0.5))
        # Seen once, so not diluted by the snapshot that missed it
        assert (hip.x, hip.y) == pytest.approx((0.4, 0.6))
        assert avg.timestamp_ms == 30

    def test_accepts_generator(self):
        snaps = (
            PoseSnapshot(landmarks={PoseLandmark.NOSE: Point3D(x=float(i), y=0.0)})
            for i in range(3)
        )
        assert average_snapshots(snaps).get(PoseLandmark.NOSE).x == pytest.approx(1.0)
