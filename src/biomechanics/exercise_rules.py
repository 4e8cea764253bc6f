"""
Rule tables for every supported activity.

Each activity profile is an ordered list of ``MetricRule`` entries. A rule
names the metric key written to the result's metrics map, the extractor that
produces it, the issue type it reports, and one or more ``Threshold`` checks.
Checks run in order and the first that fires yields the rule's single issue.

Threshold values differ slightly between near-duplicate metrics across
exercises (e.g. shoulder alignment 6 vs 8 vs 10). They are kept as-is so
scores stay comparable with historical results.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Union

from . import metrics as m
from .landmarks import DerivedSignals, PoseSnapshot
from .results import FormIssue, GymExerciseType, IssueSeverity, IssueType

ABOVE = "above"
BELOW = "below"

LOW = IssueSeverity.LOW
MEDIUM = IssueSeverity.MEDIUM
HIGH = IssueSeverity.HIGH


# ============================================================================
# Rule Model
# ============================================================================

@dataclass(frozen=True)
class Threshold:
    """One side of a metric's acceptable band, with its issue copy.

    ``description`` may contain ``{value}``, filled with the displayed
    metric value truncated toward zero.
    """
    direction: str
    limit: float
    severity: IssueSeverity
    title: str
    description: str
    correction: str
    escalate_at: Optional[float] = None
    escalated_severity: Optional[IssueSeverity] = None

    def fires(self, value: float) -> bool:
        if self.direction == ABOVE:
            return value > self.limit
        return value < self.limit

    def severity_for(self, value: float) -> IssueSeverity:
        if self.escalate_at is None:
            return self.severity
        if self.direction == ABOVE and value > self.escalate_at:
            return self.escalated_severity
        if self.direction == BELOW and value < self.escalate_at:
            return self.escalated_severity
        return self.severity


def above(limit, severity, title, description, correction, escalate=None) -> Threshold:
    """Issue when the value exceeds ``limit``; ``escalate`` = (limit, severity)."""
    esc_at, esc_sev = escalate if escalate else (None, None)
    return Threshold(ABOVE, limit, severity, title, description, correction, esc_at, esc_sev)


def below(limit, severity, title, description, correction, escalate=None) -> Threshold:
    """Issue when the value falls under ``limit``; ``escalate`` = (limit, severity)."""
    esc_at, esc_sev = escalate if escalate else (None, None)
    return Threshold(BELOW, limit, severity, title, description, correction, esc_at, esc_sev)


Extractor = Callable[..., Union[float, bool]]


@dataclass(frozen=True)
class MetricRule:
    metric: str
    issue_type: IssueType
    extract: Extractor
    thresholds: tuple[Threshold, ...]
    # Maps the raw value to the number shown in the description
    display: Optional[Callable[[float], float]] = None
    # Extractor reads DerivedSignals instead of the snapshot
    from_signals: bool = False

    def measure(
        self,
        snapshot: PoseSnapshot,
        signals: Optional[DerivedSignals] = None,
    ) -> float:
        raw = self.extract(signals) if self.from_signals else self.extract(snapshot)
        return float(raw)

    def evaluate(self, value: float) -> Optional[FormIssue]:
        """Return the issue for ``value``, or None when it is within band."""
        for threshold in self.thresholds:
            if not threshold.fires(value):
                continue
            shown = self.display(value) if self.display else value
            return FormIssue(
                type=self.issue_type,
                severity=threshold.severity_for(value),
                title=threshold.title,
                description=threshold.description.format(value=int(shown)),
                correction=threshold.correction,
            )
        return None


@dataclass(frozen=True)
class ExerciseProfile:
    name: str
    rules: tuple[MetricRule, ...]

    @property
    def metric_names(self) -> list[str]:
        return [rule.metric for rule in self.rules]


# ============================================================================
# Running
# ============================================================================

RUNNING_PROFILE = ExerciseProfile(
    name="running",
    rules=(
        MetricRule("forward_lean", IssueType.POSTURE, m.forward_lean, (
            below(3, MEDIUM, "Too Upright",
                  "Lean is only {value}° - aim for 5-10°",
                  "Lean slightly forward from your ankles"),
            above(12, MEDIUM, "Excessive Forward Lean",
                  "Leaning {value}° forward - straining lower back",
                  "Stand taller and engage your core",
                  escalate=(18, HIGH)),
        )),
        MetricRule("arm_swing_symmetry", IssueType.ARM_SWING, m.arm_swing_symmetry, (
            below(0.85, LOW, "Asymmetric Arm Swing",
                  "Arms {value}% uneven",
                  "Focus on relaxed, equal arm movements",
                  escalate=(0.7, MEDIUM)),
        ), display=lambda v: (1 - v) * 100),
        MetricRule("arm_angle", IssueType.ARM_SWING, m.arm_angle, (
            below(75, MEDIUM, "Arms Too Straight",
                  "Elbow angle is {value}° - should be ~90°",
                  "Bend elbows to approximately 90 degrees",
                  escalate=(60, HIGH)),
            above(105, LOW, "Arms Too Bent",
                  "Elbow angle is {value}° - too tight",
                  "Relax your arms to about 90 degrees",
                  escalate=(120, MEDIUM)),
        )),
        MetricRule("vertical_oscillation", IssueType.VERTICAL_OSCILLATION, m.vertical_oscillation, (
            above(6, MEDIUM, "Bouncing Too Much",
                  "Vertical movement of {value}cm wastes energy",
                  "Focus on moving forward, not up and down",
                  escalate=(12, HIGH)),
        ), from_signals=True),
        MetricRule("hip_drop", IssueType.HIP_STABILITY, m.hip_drop, (
            above(5, MEDIUM, "Excessive Hip Drop",
                  "Hips dropping {value}° - risk of IT band issues",
                  "Strengthen glutes and focus on level hips",
                  escalate=(10, HIGH)),
        )),
        MetricRule("knee_drive", IssueType.KNEE_DRIVE, m.knee_drive, (
            below(40, LOW, "Low Knee Drive",
                  "Knee lift only {value}° - losing power",
                  "Drive knees forward and up",
                  escalate=(25, MEDIUM)),
        )),
        MetricRule("foot_strike_angle", IssueType.FOOT_STRIKE, m.foot_strike_angle, (
            above(10, MEDIUM, "Heel Striking",
                  "Landing on heel increases impact forces",
                  "Land with foot under your body, not in front",
                  escalate=(20, HIGH)),
        )),
        MetricRule("shoulder_alignment", IssueType.POSTURE, m.shoulder_alignment, (
            above(6, LOW, "Uneven Shoulders",
                  "Shoulders tilted {value}%",
                  "Keep shoulders level and relaxed",
                  escalate=(12, MEDIUM)),
        )),
        MetricRule("crossover", IssueType.HIP_STABILITY, m.crossover, (
            above(8, MEDIUM, "Crossover Gait",
                  "Feet crossing midline by {value}%",
                  "Run on imaginary train tracks, not a tightrope",
                  escalate=(15, HIGH)),
        )),
    ),
)


# ============================================================================
# Gym Exercises
# ============================================================================

def _shoulder_rule(limit: float, title: str, description: str, correction: str) -> MetricRule:
    return MetricRule("shoulder_alignment", IssueType.SHOULDER_POSITION, m.shoulder_alignment, (
        above(limit, MEDIUM, title, description, correction),
    ))


SQUAT_PROFILE = ExerciseProfile(
    name="squat",
    rules=(
        MetricRule("knee_angle", IssueType.DEPTH, m.knee_angle, (
            above(110, HIGH, "Quarter Squat",
                  "Knee angle is {value}° - you're barely bending",
                  "Squat until thighs are at least parallel to the ground"),
            above(90, MEDIUM, "Insufficient Depth",
                  "Knee angle is {value}° - aim for 90° or less",
                  "Work on hip and ankle mobility to achieve proper depth"),
        )),
        MetricRule("knee_cave", IssueType.KNEE_TRACKING, m.knee_cave, (
            above(5, MEDIUM, "Knee Cave (Valgus)",
                  "Knees collapsing inward by {value}%",
                  "Push your knees out over your toes, engage your glutes",
                  escalate=(15, HIGH)),
        )),
        MetricRule("back_angle", IssueType.BACK_POSITION, m.back_angle, (
            above(30, MEDIUM, "Excessive Forward Lean",
                  "Torso leaning {value}° forward",
                  "Keep chest up, engage core, and sit back into your heels",
                  escalate=(50, HIGH)),
        )),
        MetricRule("heel_rise", IssueType.FOOT_POSITION, m.heel_rise, (
            above(0.5, MEDIUM, "Heels Rising",
                  "Your heels are coming off the ground",
                  "Work on ankle mobility or try elevating heels slightly"),
        )),
        _shoulder_rule(8, "Uneven Shoulders",
                       "Shoulders are tilted - possible weight shift",
                       "Keep the bar centered and shoulders level"),
    ),
)

DEADLIFT_PROFILE = ExerciseProfile(
    name="deadlift",
    rules=(
        MetricRule("spine_neutrality", IssueType.BACK_POSITION, m.spine_neutrality, (
            above(8, MEDIUM, "Rounded Lower Back",
                  "Spine deviation of {value}° from neutral",
                  "Brace your core, chest up, and maintain neutral spine",
                  escalate=(20, HIGH)),
        )),
        MetricRule("bar_path", IssueType.BAR_PATH, m.bar_path, (
            above(3, MEDIUM, "Bar Drifting Forward",
                  "Bar is {value}cm away from your body",
                  "Keep the bar close to your shins and thighs",
                  escalate=(8, HIGH)),
        )),
        MetricRule("hip_hinge", IssueType.HIP_POSITION, m.hip_hinge, (
            below(40, MEDIUM, "Insufficient Hip Hinge",
                  "Hip angle is {value}° - you're squatting it",
                  "Push hips back more, keep shins more vertical",
                  escalate=(25, HIGH)),
        )),
        MetricRule("lockout", IssueType.LOCKOUT, m.hip_lockout, (
            below(0.5, MEDIUM, "Incomplete Lockout",
                  "Not fully extending at the top",
                  "Squeeze glutes and stand tall at the top"),
        )),
        _shoulder_rule(8, "Uneven Shoulders",
                       "One shoulder is higher than the other",
                       "Keep shoulders level throughout the lift"),
    ),
)

BENCH_PRESS_PROFILE = ExerciseProfile(
    name="bench_press",
    rules=(
        MetricRule("elbow_flare", IssueType.ELBOW_POSITION, m.elbow_flare, (
            above(60, MEDIUM, "Excessive Elbow Flare",
                  "Elbows at {value}° - should be 45-60°",
                  "Tuck elbows to about 45 degrees from your torso",
                  escalate=(80, HIGH)),
            below(30, MEDIUM, "Elbows Too Tucked",
                  "Elbows at {value}° - too close to body",
                  "Flare elbows out slightly to about 45 degrees"),
        )),
        MetricRule("touch_point", IssueType.BAR_PATH, m.bar_touch_point, (
            above(0.6, MEDIUM, "Bar Too High on Chest",
                  "Touching too high - stresses shoulders",
                  "Touch the bar to your lower chest/sternum",
                  escalate=(0.8, HIGH)),
            below(0.3, MEDIUM, "Bar Too Low",
                  "Touching too low on torso",
                  "Touch the bar to your lower chest, not belly"),
        )),
        MetricRule("back_arch", IssueType.BACK_POSITION, m.back_arch, (
            above(30, LOW, "Excessive Arch",
                  "Back arch of {value}° is very pronounced",
                  "Maintain a moderate arch that feels stable",
                  escalate=(50, MEDIUM)),
        )),
        MetricRule("wrist_angle", IssueType.WRIST_POSITION, m.wrist_angle, (
            above(15, MEDIUM, "Bent Wrists",
                  "Wrists bent {value}° - risking injury",
                  "Keep wrists straight, bar over heel of palm",
                  escalate=(35, HIGH)),
        )),
        _shoulder_rule(8, "Uneven Press",
                       "One side pressing faster than the other",
                       "Focus on pressing evenly with both arms"),
    ),
)

OVERHEAD_PRESS_PROFILE = ExerciseProfile(
    name="overhead_press",
    rules=(
        MetricRule("bar_path", IssueType.BAR_PATH, m.vertical_bar_path, (
            above(5, MEDIUM, "Bar Path Not Vertical",
                  "Bar deviating {value}cm from vertical",
                  "Move your head back and press straight up",
                  escalate=(12, HIGH)),
        )),
        MetricRule("back_lean", IssueType.BACK_POSITION, m.back_lean, (
            above(10, MEDIUM, "Excessive Back Lean",
                  "Leaning back {value}° - straining lower back",
                  "Brace core tight and keep torso upright",
                  escalate=(25, HIGH)),
        )),
        MetricRule("lockout", IssueType.LOCKOUT, m.overhead_lockout, (
            below(0.5, MEDIUM, "Incomplete Lockout",
                  "Arms not fully extended at the top",
                  "Push through to full extension, shrug at top"),
        )),
        _shoulder_rule(8, "Uneven Press",
                       "One arm higher than the other",
                       "Press evenly with both arms"),
    ),
)

BARBELL_ROW_PROFILE = ExerciseProfile(
    name="barbell_row",
    rules=(
        MetricRule("torso_angle", IssueType.BACK_POSITION, m.torso_angle, (
            above(50, MEDIUM, "Too Upright",
                  "Torso at {value}° - should be 30-50°",
                  "Hinge forward more for better back engagement",
                  escalate=(70, HIGH)),
            below(20, MEDIUM, "Too Bent Over",
                  "Torso at {value}° - too horizontal",
                  "Raise torso slightly to reduce lower back strain"),
        )),
        MetricRule("spine_neutrality", IssueType.BACK_POSITION, m.spine_neutrality, (
            above(8, MEDIUM, "Rounded Back",
                  "Spine rounding {value}° from neutral",
                  "Keep chest up and maintain neutral spine",
                  escalate=(18, HIGH)),
        )),
        _shoulder_rule(8, "Uneven Pull",
                       "One side pulling more than the other",
                       "Pull evenly with both arms"),
        MetricRule("elbow_flare", IssueType.ELBOW_POSITION, m.elbow_flare, (
            above(70, MEDIUM, "Elbows Flaring",
                  "Elbows at {value}° - too wide",
                  "Keep elbows closer to body, pull to lower chest"),
        )),
    ),
)

LUNGE_PROFILE = ExerciseProfile(
    name="lunge",
    rules=(
        MetricRule("knee_over_toe", IssueType.KNEE_TRACKING, m.knee_over_toe, (
            above(8, MEDIUM, "Knee Too Far Forward",
                  "Knee {value}cm past toes",
                  "Take a longer stride and keep shin more vertical",
                  escalate=(20, HIGH)),
        )),
        MetricRule("torso_lean", IssueType.BACK_POSITION, m.torso_lean, (
            above(12, MEDIUM, "Forward Lean",
                  "Leaning forward {value}°",
                  "Keep torso upright, engage core",
                  escalate=(25, HIGH)),
        )),
        MetricRule("knee_angle", IssueType.DEPTH, m.knee_angle, (
            above(100, MEDIUM, "Insufficient Depth",
                  "Front knee at {value}° - go deeper",
                  "Lower until front thigh is parallel to ground",
                  escalate=(120, HIGH)),
        )),
        _shoulder_rule(8, "Uneven Shoulders",
                       "Shoulders tilting to one side",
                       "Keep shoulders level throughout"),
    ),
)

PLANK_PROFILE = ExerciseProfile(
    name="plank",
    rules=(
        MetricRule("hip_sag", IssueType.HIP_POSITION, m.hip_sag, (
            above(5, MEDIUM, "Hips Sagging",
                  "Hips dropping {value}% below ideal line",
                  "Engage core and glutes, straight line head to heels",
                  escalate=(15, HIGH)),
        )),
        MetricRule("hip_pike", IssueType.HIP_POSITION, m.hip_pike, (
            above(8, MEDIUM, "Hips Too High",
                  "Hips piked {value}% above ideal line",
                  "Lower hips to create a straight line",
                  escalate=(18, HIGH)),
        )),
        MetricRule("head_position", IssueType.HEAD_POSITION, m.head_position, (
            above(10, LOW, "Head Position",
                  "Keep your head in a neutral position",
                  "Look at the floor about a foot in front of your hands",
                  escalate=(25, MEDIUM)),
        )),
    ),
)

PUSH_UP_PROFILE = ExerciseProfile(
    name="push_up",
    rules=(
        MetricRule("elbow_flare", IssueType.ELBOW_POSITION, m.elbow_flare, (
            above(60, MEDIUM, "Elbows Flaring Out",
                  "Your elbows are at {value}° - should be around 45°",
                  "Keep elbows tucked at 45 degrees from your body",
                  escalate=(80, HIGH)),
            below(20, MEDIUM, "Elbows Too Tucked",
                  "Your elbows are too close to your body",
                  "Flare elbows out slightly to about 45 degrees"),
        )),
        MetricRule("hip_sag", IssueType.HIP_POSITION, m.hip_sag, (
            above(5, MEDIUM, "Hips Sagging",
                  "Your hips are dropping {value}% below the ideal line",
                  "Engage core and glutes, maintain plank position",
                  escalate=(15, HIGH)),
        )),
        MetricRule("hip_pike", IssueType.HIP_POSITION, m.hip_pike, (
            above(5, MEDIUM, "Hips Too High",
                  "Your hips are piked up {value}% above the ideal line",
                  "Lower your hips to form a straight line from head to heels",
                  escalate=(15, HIGH)),
        )),
        MetricRule("depth", IssueType.DEPTH, m.push_up_depth, (
            above(10, MEDIUM, "Insufficient Depth",
                  "Only going {value}% of full range",
                  "Lower until chest nearly touches the ground",
                  escalate=(30, HIGH)),
        ), display=lambda v: 100 - v),
        MetricRule("head_position", IssueType.HEAD_POSITION, m.head_position, (
            above(8, LOW, "Head Position",
                  "Keep your head in a neutral position",
                  "Look at a spot on the floor about 1 foot ahead of your hands"),
        )),
        _shoulder_rule(10, "Uneven Shoulders",
                       "Your shoulders are not level",
                       "Keep both shoulders at the same height throughout"),
        MetricRule("hand_position", IssueType.HAND_POSITION, m.hand_position, (
            above(15, MEDIUM, "Hands Too Wide",
                  "Your hands are placed too wide",
                  "Place hands slightly wider than shoulder-width"),
            below(-10, MEDIUM, "Hands Too Narrow",
                  "Your hands are placed too close together",
                  "Place hands slightly wider than shoulder-width"),
        )),
    ),
)

GYM_PROFILES: dict[GymExerciseType, ExerciseProfile] = {
    GymExerciseType.SQUAT: SQUAT_PROFILE,
    GymExerciseType.DEADLIFT: DEADLIFT_PROFILE,
    GymExerciseType.BENCH_PRESS: BENCH_PRESS_PROFILE,
    GymExerciseType.OVERHEAD_PRESS: OVERHEAD_PRESS_PROFILE,
    GymExerciseType.BARBELL_ROW: BARBELL_ROW_PROFILE,
    GymExerciseType.LUNGE: LUNGE_PROFILE,
    GymExerciseType.PLANK: PLANK_PROFILE,
    GymExerciseType.PUSH_UP: PUSH_UP_PROFILE,
}


def get_gym_profile(exercise: GymExerciseType) -> ExerciseProfile:
    """Rule profile for a gym exercise."""
    return GYM_PROFILES[exercise]


def evaluate_profile(
    profile: ExerciseProfile,
    snapshot: PoseSnapshot,
    signals: Optional[DerivedSignals] = None,
) -> tuple[list[FormIssue], dict[str, float]]:
    """Run every rule of ``profile`` against one snapshot.

    Returns:
        Tuple of (issues in rule order, metrics map).
    """
    issues: list[FormIssue] = []
    values: dict[str, float] = {}
    for rule in profile.rules:
        value = rule.measure(snapshot, signals)
        values[rule.metric] = value
        issue = rule.evaluate(value)
        if issue is not None:
            issues.append(issue)
    return issues, values
