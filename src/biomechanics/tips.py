"""
Corrective feedback for detected issues.

Gym tips are keyed by issue *type*: a category contributes its tips once if
any issue of that type is present, in the bank's fixed order. When nothing
fires, the exercise's single positive tip is returned instead.

Running results get drills rather than tips; see :func:`drills_for_issues`.
"""

from typing import Iterable

from pydantic import BaseModel, ConfigDict

from .results import FormIssue, GymExerciseType, IssueType


# ============================================================================
# Gym Tip Banks
# ============================================================================

# Exercise -> ordered (issue type, tips) categories
GYM_TIP_BANKS: dict[GymExerciseType, list[tuple[IssueType, list[str]]]] = {
    GymExerciseType.SQUAT: [
        (IssueType.KNEE_TRACKING, [
            "Place a mini band above knees to cue knee-out position",
            "Focus on 'spreading the floor' with your feet",
        ]),
        (IssueType.DEPTH, [
            "Work on ankle mobility with wall stretches",
            "Practice goblet squats to groove the pattern",
            "Try box squats to build confidence at depth",
        ]),
        (IssueType.BACK_POSITION, [
            "Keep chest up - imagine showing off a logo on your shirt",
            "Brace your core like you're about to be punched",
            "Try front squats to reinforce upright posture",
        ]),
        (IssueType.FOOT_POSITION, [
            "Elevate heels with small plates or squat shoes",
            "Stretch calves and ankles daily",
        ]),
    ],
    GymExerciseType.DEADLIFT: [
        (IssueType.BACK_POSITION, [
            "Practice hip hinges with a dowel on your back",
            "Engage lats by 'protecting your armpits'",
            "Take a big breath and brace before each rep",
        ]),
        (IssueType.BAR_PATH, [
            "Drag the bar up your shins and thighs",
            "Think 'push the floor away' rather than pulling",
        ]),
        (IssueType.HIP_POSITION, [
            "Start with hips higher - this isn't a squat",
            "Practice Romanian deadlifts to feel the hip hinge",
        ]),
        (IssueType.LOCKOUT, [
            "Squeeze glutes hard at the top",
            "Stand tall - don't hyperextend your back",
        ]),
    ],
    GymExerciseType.BENCH_PRESS: [
        (IssueType.ELBOW_POSITION, [
            "Think about 'bending the bar' to engage lats",
            "Tuck elbows to 45° - not flared, not tucked",
            "Grip width affects elbow angle - experiment",
        ]),
        (IssueType.BAR_PATH, [
            "Touch bar to lower chest/sternum area",
            "Press in a slight arc back toward your face",
        ]),
        (IssueType.WRIST_POSITION, [
            "Bar should sit on heel of palm, not fingers",
            "Consider wrist wraps for heavy sets",
        ]),
        (IssueType.BACK_POSITION, [
            "Squeeze shoulder blades together and down",
            "Maintain arch but keep glutes on bench",
        ]),
    ],
    GymExerciseType.OVERHEAD_PRESS: [
        (IssueType.BAR_PATH, [
            "Move head back to clear the bar path",
            "Press straight up, then move head through",
        ]),
        (IssueType.BACK_POSITION, [
            "Squeeze glutes hard to prevent back lean",
            "Brace core like you're about to be punched",
            "Consider a staggered stance for stability",
        ]),
        (IssueType.LOCKOUT, [
            "Shrug shoulders up at the top",
            "Push head through at lockout",
        ]),
    ],
    GymExerciseType.BARBELL_ROW: [
        (IssueType.BACK_POSITION, [
            "Hinge at hips, not waist",
            "Keep chest up and spine neutral",
            "If back rounds, reduce weight",
        ]),
        (IssueType.ELBOW_POSITION, [
            "Pull elbows back, not out",
            "Aim to touch bar to lower chest/upper abs",
        ]),
        (IssueType.SHOULDER_POSITION, [
            "Squeeze shoulder blades at the top",
            "Control the negative - don't just drop it",
        ]),
    ],
    GymExerciseType.LUNGE: [
        (IssueType.KNEE_TRACKING, [
            "Take a longer stride",
            "Keep front shin vertical or slightly angled back",
        ]),
        (IssueType.BACK_POSITION, [
            "Stay upright - don't lean forward",
            "Engage core throughout the movement",
        ]),
        (IssueType.DEPTH, [
            "Lower until back knee nearly touches floor",
            "Both knees should be at 90 degrees at bottom",
        ]),
        (IssueType.SHOULDER_POSITION, [
            "Keep shoulders square and level",
            "Hands on hips can help with balance",
        ]),
    ],
    GymExerciseType.PLANK: [
        (IssueType.HIP_POSITION, [
            "Squeeze glutes to prevent hip sag",
            "Imagine a straight line from head to heels",
            "Posterior pelvic tilt - tuck tailbone under",
        ]),
        (IssueType.HEAD_POSITION, [
            "Look at floor about 1 foot ahead of hands",
            "Keep neck neutral - don't look up or tuck chin",
        ]),
    ],
    GymExerciseType.PUSH_UP: [
        (IssueType.HIP_POSITION, [
            "Squeeze glutes and brace core throughout",
            "Maintain plank position - no sagging or piking",
        ]),
        (IssueType.ELBOW_POSITION, [
            "Screw hands into floor for external rotation",
            "Elbows at 45° from body, not flared out",
        ]),
        (IssueType.DEPTH, [
            "Touch chest to floor or a tennis ball",
            "Full range of motion builds more strength",
        ]),
        (IssueType.HEAD_POSITION, [
            "Keep neck neutral - look at floor ahead",
        ]),
        (IssueType.HAND_POSITION, [
            "Hands slightly wider than shoulder-width",
            "Fingers spread, middle fingers pointing forward",
        ]),
    ],
}

POSITIVE_TIPS: dict[GymExerciseType, str] = {
    GymExerciseType.SQUAT: "Great form! Focus on controlled tempo",
    GymExerciseType.DEADLIFT: "Solid technique! Focus on progressive overload",
    GymExerciseType.BENCH_PRESS: "Excellent form! Work on pause reps for strength",
    GymExerciseType.OVERHEAD_PRESS: "Strong pressing! Add push press for power",
    GymExerciseType.BARBELL_ROW: "Great rowing! Try pause reps for more back activation",
    GymExerciseType.LUNGE: "Excellent lunges! Try walking lunges for a challenge",
    GymExerciseType.PLANK: "Solid plank! Try side planks or plank variations",
    GymExerciseType.PUSH_UP: "Perfect push-ups! Try archer or diamond variations",
}


def gym_tips(exercise: GymExerciseType, issues: Iterable[FormIssue]) -> list[str]:
    """Build the tips list for a gym result.

    Args:
        exercise: Exercise the issues were found for.
        issues: Issues from one analysis (any order).

    Returns:
        Tips for every triggered category in bank order, or the positive
        tip when no category triggered.
    """
    present = {issue.type for issue in issues}
    tips: list[str] = []
    for issue_type, category_tips in GYM_TIP_BANKS[exercise]:
        if issue_type in present:
            tips.extend(category_tips)
    if not tips:
        tips.append(POSITIVE_TIPS[exercise])
    return tips


# ============================================================================
# Running Drills
# ============================================================================

class FormDrill(BaseModel):
    """A corrective running drill."""
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    duration: str
    frequency: str


_RUNNING_DRILLS: dict[IssueType, tuple[FormDrill, ...]] = {
    IssueType.POSTURE: (
        FormDrill(
            name="Wall Lean Drill",
            description="Stand facing a wall, lean forward until your chest touches, then run in place",
            duration="30 seconds",
            frequency="Before each run",
        ),
        FormDrill(
            name="Falling Start",
            description="Stand tall, lean forward until you have to step, then start running",
            duration="5 repetitions",
            frequency="During warm-up",
        ),
    ),
    IssueType.ARM_SWING: (
        FormDrill(
            name="Seated Arm Swings",
            description="Sit on ground, practice arm swing motion without leg movement",
            duration="1 minute",
            frequency="Daily",
        ),
        FormDrill(
            name="Relaxed Hands Drill",
            description="Run with hands loosely cupped, thumbs on top of fingers",
            duration="200m",
            frequency="During strides",
        ),
    ),
    IssueType.VERTICAL_OSCILLATION: (
        FormDrill(
            name="Low Ceiling Visualization",
            description="Imagine running under a low ceiling, keeping head level",
            duration="400m",
            frequency="Weekly",
        ),
        FormDrill(
            name="Quick Feet Drill",
            description="Run with very short, quick steps focusing on minimal bounce",
            duration="100m",
            frequency="During warm-up",
        ),
    ),
    IssueType.HIP_STABILITY: (
        FormDrill(
            name="Single Leg Squats",
            description="Stand on one leg, lower into partial squat, keep hips level",
            duration="10 each leg",
            frequency="3x per week",
        ),
        FormDrill(
            name="Clamshells",
            description="Lie on side, knees bent, lift top knee while keeping feet together",
            duration="15 each side",
            frequency="Daily",
        ),
    ),
    IssueType.KNEE_DRIVE: (
        FormDrill(
            name="High Knees",
            description="Run in place lifting knees to hip height",
            duration="30 seconds",
            frequency="During warm-up",
        ),
        FormDrill(
            name="A-Skips",
            description="Skip while driving knee up, focus on quick ground contact",
            duration="50m",
            frequency="Before speed work",
        ),
    ),
    IssueType.FOOT_STRIKE: (
        FormDrill(
            name="Barefoot Strides",
            description="Run short strides barefoot on grass to feel natural foot strike",
            duration="4x50m",
            frequency="Weekly",
        ),
        FormDrill(
            name="Metronome Running",
            description="Use a metronome at 180bpm to increase cadence and reduce overstriding",
            duration="5 minutes",
            frequency="During easy runs",
        ),
    ),
}


def drills_for_issue(issue_type: IssueType) -> list[FormDrill]:
    """Drills for one running issue type (empty for gym-only types)."""
    return list(_RUNNING_DRILLS.get(issue_type, ()))


def drills_for_issues(issues: Iterable[FormIssue]) -> list[FormDrill]:
    """Drills for every distinct issue type, in first-seen order."""
    seen: set[IssueType] = set()
    drills: list[FormDrill] = []
    for issue in issues:
        if issue.type in seen:
            continue
        seen.add(issue.type)
        drills.extend(drills_for_issue(issue.type))
    return drills
