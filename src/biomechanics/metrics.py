"""
Metric extractors.

One pure function per biomechanical signal. Each reads a ``PoseSnapshot``
and returns a float (or a bool for detectors). When a required joint is
missing the extractor returns its documented fallback, chosen to sit inside
the metric's no-issue band, so partial detections degrade to "no opinion"
instead of false positives.

Side-view metrics assume the subject faces +x; y grows down the frame.
"""

from typing import Optional

import numpy as np

from .config import (
    DEFAULT_VERTICAL_OSCILLATION,
    HEEL_RISE_TOLERANCE,
    LOCKOUT_ANGLE,
)
from .geometry import (
    angle_between,
    angle_between_2d,
    inclination_from_vertical,
    percent_of,
    segment_angle_2d,
)
from .landmarks import DerivedSignals, PoseLandmark as PL, PoseSnapshot
from .results import FootStrikeAnalysis, FootStrikeType, IssueSeverity


def _joints(snapshot: PoseSnapshot, *landmarks: PL):
    """Return the requested points, or None if any is missing."""
    points = tuple(snapshot.get(lm) for lm in landmarks)
    if any(p is None for p in points):
        return None
    return points


# ============================================================================
# Running
# ============================================================================

def forward_lean(snapshot: PoseSnapshot) -> float:
    """Torso lean from vertical (hip→shoulder), clamped to ±30°. Fallback 8°."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_HIP)
    if pts is None:
        return 8.0
    shoulder, hip = pts
    return float(np.clip(inclination_from_vertical(hip, shoulder), -30.0, 30.0))


def arm_swing_symmetry(snapshot: PoseSnapshot) -> float:
    """Ratio of the smaller to the larger wrist-to-shoulder drop. Fallback 1."""
    pts = _joints(
        snapshot, PL.LEFT_WRIST, PL.RIGHT_WRIST, PL.LEFT_SHOULDER, PL.RIGHT_SHOULDER
    )
    if pts is None:
        return 1.0
    left_wrist, right_wrist, left_shoulder, right_shoulder = pts

    left_swing = abs(left_wrist.y - left_shoulder.y)
    right_swing = abs(right_wrist.y - right_shoulder.y)
    larger = max(left_swing, right_swing)
    if larger == 0:
        return 1.0
    return min(left_swing, right_swing) / larger


def arm_angle(snapshot: PoseSnapshot) -> float:
    """Elbow angle (shoulder-elbow-wrist). Fallback 90°."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_ELBOW, PL.LEFT_WRIST)
    if pts is None:
        return 90.0
    return angle_between(*pts)


def vertical_oscillation(signals: Optional[DerivedSignals]) -> float:
    """Pass-through of the externally measured bounce (cm). Fallback 6."""
    if signals is None or signals.vertical_oscillation is None:
        return DEFAULT_VERTICAL_OSCILLATION
    return float(signals.vertical_oscillation)


def hip_drop(snapshot: PoseSnapshot) -> float:
    """Height difference between hips, scaled ×100. Fallback 0."""
    pts = _joints(snapshot, PL.LEFT_HIP, PL.RIGHT_HIP)
    if pts is None:
        return 0.0
    left_hip, right_hip = pts
    return abs(left_hip.y - right_hip.y) * 100


def knee_drive(snapshot: PoseSnapshot) -> float:
    """Thigh angle forward of straight down, clamped to [0, 90]. Fallback 45°."""
    pts = _joints(snapshot, PL.LEFT_HIP, PL.LEFT_KNEE)
    if pts is None:
        return 45.0
    hip, knee = pts
    angle = np.degrees(np.arctan2(knee.x - hip.x, knee.y - hip.y))
    return float(np.clip(angle, 0.0, 90.0))


def foot_strike(snapshot: PoseSnapshot) -> FootStrikeAnalysis:
    """Classify the landing from the foot's inclination at contact.

    The angle is heel→toe against the horizontal: positive when the toe is
    raised (heel strike), negative when it points down (forefoot).
    """
    pts = _joints(snapshot, PL.LEFT_HEEL, PL.LEFT_FOOT_INDEX)
    if pts is None:
        return FootStrikeAnalysis(
            type=FootStrikeType.MIDFOOT, angle=0.0, severity=IssueSeverity.LOW
        )
    heel, toe = pts
    angle = float(np.degrees(np.arctan2(heel.y - toe.y, abs(toe.x - heel.x))))

    if angle > 20:
        return FootStrikeAnalysis(type=FootStrikeType.HEEL, angle=angle, severity=IssueSeverity.HIGH)
    if angle > 10:
        return FootStrikeAnalysis(type=FootStrikeType.HEEL, angle=angle, severity=IssueSeverity.MEDIUM)
    if angle < -10:
        return FootStrikeAnalysis(type=FootStrikeType.FOREFOOT, angle=angle, severity=IssueSeverity.LOW)
    return FootStrikeAnalysis(type=FootStrikeType.MIDFOOT, angle=angle, severity=IssueSeverity.LOW)


def foot_strike_angle(snapshot: PoseSnapshot) -> float:
    return foot_strike(snapshot).angle


def crossover(snapshot: PoseSnapshot) -> float:
    """How far an ankle crosses the hip midline, as % of hip width. Fallback 0.

    Works for front and rear camera views: an ankle counts as crossing when
    it lands on the opposite side of the midline from its own hip.
    """
    pts = _joints(snapshot, PL.LEFT_ANKLE, PL.RIGHT_ANKLE, PL.LEFT_HIP, PL.RIGHT_HIP)
    if pts is None:
        return 0.0
    left_ankle, right_ankle, left_hip, right_hip = pts

    center_x = (left_hip.x + right_hip.x) / 2
    hip_width = abs(left_hip.x - right_hip.x)
    if hip_width == 0:
        return 0.0

    left_side = np.sign(left_hip.x - center_x)
    left_cross = max(0.0, -left_side * (left_ankle.x - center_x))
    right_cross = max(0.0, left_side * (right_ankle.x - center_x))
    return float(percent_of(max(left_cross, right_cross), hip_width))


# ============================================================================
# Shared
# ============================================================================

def shoulder_alignment(snapshot: PoseSnapshot) -> float:
    """Height difference between shoulders, scaled ×100. Fallback 0."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.RIGHT_SHOULDER)
    if pts is None:
        return 0.0
    left, right = pts
    return abs(left.y - right.y) * 100


def knee_angle(snapshot: PoseSnapshot) -> float:
    """Hip-knee-ankle angle. Fallback 90°."""
    pts = _joints(snapshot, PL.LEFT_HIP, PL.LEFT_KNEE, PL.LEFT_ANKLE)
    if pts is None:
        return 90.0
    return angle_between(*pts)


def elbow_flare(snapshot: PoseSnapshot) -> float:
    """Angle between upper arm and torso at the shoulder (image plane). Fallback 45°."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_ELBOW, PL.LEFT_HIP)
    if pts is None:
        return 45.0
    shoulder, elbow, hip = pts
    angle = segment_angle_2d(shoulder, elbow, hip)
    return 45.0 if angle is None else angle


def spine_neutrality(snapshot: PoseSnapshot) -> float:
    """Bend of the head away from the hip→shoulder line, in degrees. Fallback 0.

    Uses the left ear as the head point, or the nose when the ear is missing.
    A neutral spine keeps hip, shoulder and head in line (0°).
    """
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_HIP)
    if pts is None:
        return 0.0
    shoulder, hip = pts
    head = snapshot.get(PL.LEFT_EAR) or snapshot.get(PL.NOSE)
    if head is None:
        return 0.0
    return 180.0 - angle_between_2d(hip, shoulder, head)


def back_lean(snapshot: PoseSnapshot) -> float:
    """Absolute torso inclination from vertical. Fallback 10°."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_HIP)
    if pts is None:
        return 10.0
    shoulder, hip = pts
    if shoulder.y == hip.y:
        return 0.0
    return abs(inclination_from_vertical(hip, shoulder))


def torso_lean(snapshot: PoseSnapshot) -> float:
    return back_lean(snapshot)


def hip_sag(snapshot: PoseSnapshot) -> float:
    """Hip drop below the shoulder-ankle midpoint, ×100. Fallback 5."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_HIP, PL.LEFT_ANKLE)
    if pts is None:
        return 5.0
    shoulder, hip, ankle = pts
    expected_y = shoulder.y + (ankle.y - shoulder.y) * 0.5
    return max(0.0, (hip.y - expected_y) * 100)


def hip_pike(snapshot: PoseSnapshot) -> float:
    """Hip rise above the shoulder-ankle midpoint, ×100. Fallback 5."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_HIP, PL.LEFT_ANKLE)
    if pts is None:
        return 5.0
    shoulder, hip, ankle = pts
    expected_y = shoulder.y + (ankle.y - shoulder.y) * 0.5
    return max(0.0, (expected_y - hip.y) * 100)


def head_position(snapshot: PoseSnapshot) -> float:
    """Horizontal offset of the nose from the shoulder, ×100. Fallback 0."""
    pts = _joints(snapshot, PL.NOSE, PL.LEFT_SHOULDER)
    if pts is None:
        return 0.0
    nose, shoulder = pts
    return abs(nose.x - shoulder.x) * 100


def _wrist_shoulder_offset(snapshot: PoseSnapshot, fallback: float) -> float:
    pts = _joints(snapshot, PL.LEFT_WRIST, PL.LEFT_SHOULDER)
    if pts is None:
        return fallback
    wrist, shoulder = pts
    return abs(wrist.x - shoulder.x) * 100


# ============================================================================
# Squat
# ============================================================================

def knee_cave(snapshot: PoseSnapshot) -> float:
    """How much narrower the knees are than the ankles, in %. Fallback 0."""
    pts = _joints(snapshot, PL.LEFT_KNEE, PL.RIGHT_KNEE, PL.LEFT_ANKLE, PL.RIGHT_ANKLE)
    if pts is None:
        return 0.0
    left_knee, right_knee, left_ankle, right_ankle = pts

    knee_width = abs(left_knee.x - right_knee.x)
    ankle_width = abs(left_ankle.x - right_ankle.x)
    if ankle_width <= 0:
        return 0.0
    return max(0.0, percent_of(ankle_width - knee_width, ankle_width))


def back_angle(snapshot: PoseSnapshot) -> float:
    """Torso inclination from vertical during the squat. Fallback 0°."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_HIP)
    if pts is None:
        return 0.0
    shoulder, hip = pts
    return abs(inclination_from_vertical(hip, shoulder))


def heel_rise(snapshot: PoseSnapshot) -> bool:
    """True when the heel sits visibly above the toe. Fallback False."""
    pts = _joints(snapshot, PL.LEFT_HEEL, PL.LEFT_FOOT_INDEX)
    if pts is None:
        return False
    heel, toe = pts
    return heel.y < toe.y - HEEL_RISE_TOLERANCE


# ============================================================================
# Deadlift
# ============================================================================

def bar_path(snapshot: PoseSnapshot) -> float:
    """Horizontal wrist drift from the shoulder line, ×100. Fallback 3."""
    return _wrist_shoulder_offset(snapshot, 3.0)


def hip_hinge(snapshot: PoseSnapshot) -> float:
    """Shoulder-hip-knee angle. Fallback 45°."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_HIP, PL.LEFT_KNEE)
    if pts is None:
        return 45.0
    return angle_between(*pts)


def hip_lockout(snapshot: PoseSnapshot) -> bool:
    """True when the hip is extended past the lockout angle. Fallback True."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_HIP, PL.LEFT_KNEE)
    if pts is None:
        return True
    return angle_between(*pts) > LOCKOUT_ANGLE


# ============================================================================
# Bench Press
# ============================================================================

def bar_touch_point(snapshot: PoseSnapshot) -> float:
    """Where the wrists sit along the torso: 0 = hip level, 1 = shoulder level.

    Fallback 0.5.
    """
    pts = _joints(snapshot, PL.LEFT_WRIST, PL.LEFT_SHOULDER, PL.LEFT_HIP)
    if pts is None:
        return 0.5
    wrist, shoulder, hip = pts
    torso_length = shoulder.y - hip.y
    if torso_length == 0:
        return 0.5
    return float(np.clip((wrist.y - hip.y) / torso_length, 0.0, 1.0))


def back_arch(snapshot: PoseSnapshot) -> float:
    """Shoulder-hip height difference while lying, ×100. Fallback 15."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_HIP)
    if pts is None:
        return 15.0
    shoulder, hip = pts
    return abs(shoulder.y - hip.y) * 100


def wrist_angle(snapshot: PoseSnapshot) -> float:
    """Horizontal wrist offset from the elbow, ×100. Fallback 10."""
    pts = _joints(snapshot, PL.LEFT_ELBOW, PL.LEFT_WRIST)
    if pts is None:
        return 10.0
    elbow, wrist = pts
    return abs(wrist.x - elbow.x) * 100


# ============================================================================
# Overhead Press
# ============================================================================

def vertical_bar_path(snapshot: PoseSnapshot) -> float:
    """Horizontal wrist offset from the shoulder, ×100. Fallback 5."""
    return _wrist_shoulder_offset(snapshot, 5.0)


def overhead_lockout(snapshot: PoseSnapshot) -> bool:
    """True when the elbow is extended past the lockout angle. Fallback True."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_ELBOW, PL.LEFT_WRIST)
    if pts is None:
        return True
    return angle_between(*pts) > LOCKOUT_ANGLE


# ============================================================================
# Barbell Row
# ============================================================================

def torso_angle(snapshot: PoseSnapshot) -> float:
    """Torso angle above horizontal (hip→shoulder). Fallback 45°."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_HIP)
    if pts is None:
        return 45.0
    shoulder, hip = pts
    dx = shoulder.x - hip.x
    dy = shoulder.y - hip.y
    return abs(float(np.degrees(np.arctan2(-dy, dx))))


# ============================================================================
# Lunge
# ============================================================================

def knee_over_toe(snapshot: PoseSnapshot) -> float:
    """How far the knee travels past the toe, ×100. Fallback 5."""
    pts = _joints(snapshot, PL.LEFT_KNEE, PL.LEFT_ANKLE, PL.LEFT_FOOT_INDEX)
    if pts is None:
        return 5.0
    knee, _ankle, toe = pts
    return max(0.0, (knee.x - toe.x) * 100)


# ============================================================================
# Push-Up
# ============================================================================

def push_up_depth(snapshot: PoseSnapshot) -> float:
    """Degrees the elbow is short of 90° at the bottom. Fallback 10."""
    pts = _joints(snapshot, PL.LEFT_SHOULDER, PL.LEFT_ELBOW, PL.LEFT_WRIST)
    if pts is None:
        return 10.0
    elbow_deg = angle_between(*pts)
    return elbow_deg - 90.0 if elbow_deg > 90.0 else 0.0


def hand_position(snapshot: PoseSnapshot) -> float:
    """Grip width relative to shoulder width in % (+ wider, - narrower). Fallback 0."""
    pts = _joints(
        snapshot, PL.LEFT_WRIST, PL.RIGHT_WRIST, PL.LEFT_SHOULDER, PL.RIGHT_SHOULDER
    )
    if pts is None:
        return 0.0
    left_wrist, right_wrist, left_shoulder, right_shoulder = pts

    shoulder_width = abs(left_shoulder.x - right_shoulder.x)
    hand_width = abs(left_wrist.x - right_wrist.x)
    return percent_of(hand_width - shoulder_width, shoulder_width)
