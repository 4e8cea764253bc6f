"""Tests for the FastAPI form analysis service.

Covers:
  - Health check and exercise catalogue
  - Running and gym endpoints on MediaPipe-style frames
  - Error codes for malformed input and unknown exercises
"""

import json
import sys
from pathlib import Path

import numpy as np
import pytest
from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.pipelines.main import app
from src.pipelines.preprocessing import preprocess_pose_sequence
from src.biomechanics import PoseLandmark
from src.biomechanics.landmarks import MEDIAPIPE_LANDMARK_INDEX

client = TestClient(app)


# ============================================================================
# Fixtures
# ============================================================================

NOMINAL_RUNNER = {
    PoseLandmark.LEFT_SHOULDER: (0.53, 0.30),
    PoseLandmark.RIGHT_SHOULDER: (0.53, 0.30),
    PoseLandmark.LEFT_ELBOW: (0.53, 0.42),
    PoseLandmark.LEFT_WRIST: (0.63, 0.42),
    PoseLandmark.RIGHT_WRIST: (0.45, 0.42),
    PoseLandmark.LEFT_HIP: (0.50, 0.55),
    PoseLandmark.RIGHT_HIP: (0.50, 0.55),
    PoseLandmark.LEFT_KNEE: (0.65, 0.70),
    PoseLandmark.LEFT_ANKLE: (0.60, 0.90),
    PoseLandmark.RIGHT_ANKLE: (0.45, 0.90),
    PoseLandmark.LEFT_HEEL: (0.57, 0.92),
    PoseLandmark.LEFT_FOOT_INDEX: (0.66, 0.92),
}

QUARTER_SQUAT = {
    PoseLandmark.LEFT_SHOULDER: (0.77, 0.17),
    PoseLandmark.RIGHT_SHOULDER: (0.77, 0.17),
    PoseLandmark.LEFT_HIP: (0.77, 0.47),
    PoseLandmark.RIGHT_HIP: (0.77, 0.47),
    PoseLandmark.LEFT_KNEE: (0.5, 0.6),
    PoseLandmark.LEFT_ANKLE: (0.5, 0.9),
}


def _make_pose_sequence(joints: dict, n_frames: int = 5) -> list:
    """Build frames × 33 × 4 where only ``joints`` are visible."""
    frame = np.zeros((33, 4))
    for landmark, (x, y) in joints.items():
        frame[MEDIAPIPE_LANDMARK_INDEX[landmark]] = [x, y, 0.0, 0.99]
    return np.repeat(frame[None], n_frames, axis=0).tolist()


# ============================================================================
# Test: Catalogue
# ============================================================================

class TestCatalogue:

    def test_health(self):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_exercises(self):
        response = client.get("/api/exercises")
        assert response.status_code == 200
        body = response.json()
        assert len(body) == 8
        squat = next(e for e in body if e["id"] == "squat")
        assert squat["display_name"] == "Squat"
        assert "Glutes" in squat["muscle_groups"]


# ============================================================================
# Test: Running Endpoint
# ============================================================================

class TestRunningEndpoint:

    def test_nominal_runner(self):
        response = client.post(
            "/api/form/running",
            json={"pose_sequence": _make_pose_sequence(NOMINAL_RUNNER)},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["overall_score"] == 100
        assert body["issues"] == []
        assert body["drills"] == []
        assert body["warnings"] == []
        assert body["cadence_estimate"] == 170

    def test_derived_signals_and_drills(self):
        response = client.post(
            "/api/form/running",
            json={
                "pose_sequence": _make_pose_sequence(NOMINAL_RUNNER),
                "derived_signals": {"cadence": 176, "vertical_oscillation": 9.0},
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["cadence_estimate"] == 176
        assert [i["title"] for i in body["issues"]] == ["Bouncing Too Much"]
        assert body["issues"][0]["severity"] == "medium"
        assert [d["name"] for d in body["drills"]] == [
            "Low Ceiling Visualization", "Quick Feet Drill",
        ]

    def test_missing_hips_warns(self):
        joints = {
            lm: xy for lm, xy in NOMINAL_RUNNER.items()
            if lm not in (PoseLandmark.LEFT_HIP, PoseLandmark.RIGHT_HIP)
        }
        response = client.post(
            "/api/form/running", json={"pose_sequence": _make_pose_sequence(joints)},
        )
        assert response.status_code == 200
        warnings = response.json()["warnings"]
        assert len(warnings) == 1
        assert "left hip" in warnings[0]


# ============================================================================
# Test: Gym Endpoint
# ============================================================================

class TestGymEndpoint:

    def test_quarter_squat(self):
        response = client.post(
            "/api/form/gym",
            json={"exercise": "squat", "pose_sequence": _make_pose_sequence(QUARTER_SQUAT)},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["exercise_type"] == "squat"
        assert body["overall_score"] == 85
        assert body["rep_quality"] == "good"
        assert body["issues"][0]["title"] == "Quarter Squat"
        assert body["warnings"] == []
        assert len(body["tips"]) == 3

    def test_unknown_exercise(self):
        response = client.post(
            "/api/form/gym",
            json={"exercise": "burpee", "pose_sequence": _make_pose_sequence(QUARTER_SQUAT)},
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "UNKNOWN_EXERCISE"

    def test_plank_without_wrists_has_no_warning(self):
        plank = {
            PoseLandmark.NOSE: (0.28, 0.52),
            PoseLandmark.LEFT_SHOULDER: (0.3, 0.5),
            PoseLandmark.RIGHT_SHOULDER: (0.3, 0.5),
            PoseLandmark.LEFT_ELBOW: (0.3, 0.7),
            PoseLandmark.LEFT_HIP: (0.5, 0.5),
            PoseLandmark.RIGHT_HIP: (0.5, 0.5),
            PoseLandmark.LEFT_ANKLE: (0.7, 0.5),
        }
        response = client.post(
            "/api/form/gym",
            json={"exercise": "plank", "pose_sequence": _make_pose_sequence(plank)},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["overall_score"] == 100
        assert body["warnings"] == []

        no_nose = {lm: xy for lm, xy in plank.items() if lm != PoseLandmark.NOSE}
        response = client.post(
            "/api/form/gym",
            json={"exercise": "plank", "pose_sequence": _make_pose_sequence(no_nose)},
        )
        assert response.status_code == 200
        assert "nose" in response.json()["warnings"][0]


# ============================================================================
# Test: Input Errors
# ============================================================================

class TestInputErrors:

    def test_empty_sequence(self):
        response = client.post("/api/form/running", json={"pose_sequence": []})
        assert response.status_code == 400
        assert response.json()["error_code"] == "NO_POSE_DATA"

    def test_wrong_landmark_count(self):
        response = client.post(
            "/api/form/running", json={"pose_sequence": [[[0.5, 0.5, 0.0, 1.0]] * 10]},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_ragged_frames(self):
        frames = _make_pose_sequence(NOMINAL_RUNNER, n_frames=2)
        frames[1] = frames[1][:20]
        response = client.post("/api/form/gym", json={"exercise": "squat", "pose_sequence": frames})
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_nothing_visible(self):
        response = client.post(
            "/api/form/running", json={"pose_sequence": _make_pose_sequence({})},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "NO_POSE_DATA"


# ============================================================================
# Test: Preprocessing
# ============================================================================

class TestPreprocessing:

    def test_frames_are_averaged(self):
        frames = np.array(_make_pose_sequence(NOMINAL_RUNNER, n_frames=2))
        frames[1, MEDIAPIPE_LANDMARK_INDEX[PoseLandmark.LEFT_HIP], 0] = 0.60
        snap = preprocess_pose_sequence(frames.tolist())
        assert snap.get(PoseLandmark.LEFT_HIP).x == pytest.approx(0.55)
        assert len(snap) == len(NOMINAL_RUNNER)

    def test_keeps_most_recent_frames(self):
        frames = np.array(_make_pose_sequence(NOMINAL_RUNNER, n_frames=3))
        frames[0, MEDIAPIPE_LANDMARK_INDEX[PoseLandmark.LEFT_HIP], 0] = 0.90
        snap = preprocess_pose_sequence(frames.tolist(), max_frames=2)
        assert snap.get(PoseLandmark.LEFT_HIP).x == pytest.approx(0.50)


# ============================================================================
# Test: Non-finite Input
# ============================================================================

class TestNonFiniteInput:

    def test_infinite_derived_signal_rejected(self):
        # The JSON literal Infinity is accepted by the parser, not by the model
        body = (
            '{"pose_sequence": ' + json.dumps(_make_pose_sequence(NOMINAL_RUNNER))
            + ', "derived_signals": {"vertical_oscillation": Infinity}}'
        )
        response = client.post(
            "/api/form/running",
            content=body,
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422

    def test_non_finite_joint_is_treated_as_missing(self):
        frames = np.array(_make_pose_sequence(NOMINAL_RUNNER, n_frames=1))
        frames[0, MEDIAPIPE_LANDMARK_INDEX[PoseLandmark.LEFT_HIP], 1] = np.inf
        body = '{"pose_sequence": ' + json.dumps(frames.tolist()) + '}'
        response = client.post(
            "/api/form/running",
            content=body,
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 200
        assert "left hip" in response.json()["warnings"][0]
