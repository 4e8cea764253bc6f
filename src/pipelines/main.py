"""
FastAPI entry point for the form analysis service.

Endpoints:
    GET  /health
    GET  /api/exercises
    POST /api/form/running
        Receives a burst of pose frames from the mobile app, averages them
        into one snapshot and returns running-gait feedback with drills.
    POST /api/form/gym
        Same input plus an exercise selector; returns gym form feedback.

Run:
    cd <project_root>
    uvicorn src.pipelines.main:app --host 0.0.0.0 --port 8000 --reload
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``src.*`` imports work when running
# with ``uvicorn src.pipelines.main:app`` from the project root.
# ---------------------------------------------------------------------------
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from src.biomechanics import (
    DerivedSignals,
    FormDrill,
    FormIssue,
    GymExerciseType,
    RepQuality,
    StrideAnalysis,
    analyze_gym_form,
    analyze_running_form,
    drills_for_issues,
    parse_exercise_type,
)
from src.pipelines.config import CORS_ORIGINS, LOG_LEVEL
from src.pipelines.preprocessing import preprocess_pose_sequence
from src.pipelines.utils import generate_landmark_warnings, list_exercises

logger = logging.getLogger("form_analysis")
logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s | %(name)s | %(message)s")


# ============================================================================
# Pydantic request / response models
# ============================================================================

class RunningFormRequest(BaseModel):
    pose_sequence: list[list[list[float]]] = Field(
        ..., description="frames × 33 landmarks × 3|4 values (x, y, z[, visibility])"
    )
    derived_signals: Optional[DerivedSignals] = None


class GymFormRequest(BaseModel):
    exercise: str = Field(..., description="Exercise id, e.g. 'squat' or 'push_up'")
    pose_sequence: list[list[list[float]]] = Field(
        ..., description="frames × 33 landmarks × 3|4 values (x, y, z[, visibility])"
    )


class RunningFormResponse(BaseModel):
    overall_score: int
    issues: list[FormIssue]
    metrics: dict[str, float]
    cadence_estimate: int
    stride_analysis: StrideAnalysis
    drills: list[FormDrill]
    warnings: list[str]


class GymFormResponse(BaseModel):
    exercise_type: GymExerciseType
    overall_score: int
    issues: list[FormIssue]
    metrics: dict[str, float]
    rep_quality: RepQuality
    tips: list[str]
    warnings: list[str]


class ExerciseInfo(BaseModel):
    id: str
    display_name: str
    muscle_groups: list[str]


class ErrorResponse(BaseModel):
    error_code: str
    message: str


def _error(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error_code": code, "message": message},
    )


def _preprocessing_error(exc: ValueError) -> JSONResponse:
    err_msg = str(exc)
    code = "NO_POSE_DATA" if "No pose data" in err_msg else "INVALID_REQUEST"
    return _error(400, code, err_msg)


# ============================================================================
# App lifecycle
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting form analysis service …")
    yield
    logger.info("Shutting down.")


app = FastAPI(
    title="Form Analysis API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health-check & catalogue
# ============================================================================

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/exercises", response_model=list[ExerciseInfo])
async def exercises():
    return list_exercises()


# ============================================================================
# Analysis endpoints
# ============================================================================

@app.post(
    "/api/form/running",
    response_model=RunningFormResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def analyze_running(request: RunningFormRequest):
    """Pose frames → averaged snapshot → running form result + drills."""
    t0 = time.time()

    try:
        snapshot = preprocess_pose_sequence(request.pose_sequence)
    except ValueError as exc:
        return _preprocessing_error(exc)

    try:
        result = analyze_running_form(snapshot, request.derived_signals)
    except Exception as exc:
        logger.exception("Running analysis failed")
        return _error(500, "ANALYSIS_FAILED", f"Analysis error: {exc}")

    warnings = generate_landmark_warnings(snapshot)
    logger.info(
        "Running analysis complete in %.3fs: score=%d issues=%d",
        time.time() - t0, result.overall_score, len(result.issues),
    )

    return RunningFormResponse(
        overall_score=result.overall_score,
        issues=list(result.issues),
        metrics=dict(result.metrics),
        cadence_estimate=result.cadence_estimate,
        stride_analysis=result.stride_analysis,
        drills=drills_for_issues(result.issues),
        warnings=warnings,
    )


@app.post(
    "/api/form/gym",
    response_model=GymFormResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def analyze_gym(request: GymFormRequest):
    """Pose frames → averaged snapshot → gym form result + tips."""
    t0 = time.time()

    try:
        exercise = parse_exercise_type(request.exercise)
    except ValueError as exc:
        return _error(422, "UNKNOWN_EXERCISE", str(exc))

    try:
        snapshot = preprocess_pose_sequence(request.pose_sequence)
    except ValueError as exc:
        return _preprocessing_error(exc)

    try:
        result = analyze_gym_form(snapshot, exercise)
    except Exception as exc:
        logger.exception("Gym analysis failed (exercise='%s')", exercise.value)
        return _error(500, "ANALYSIS_FAILED", f"Analysis error: {exc}")

    warnings = generate_landmark_warnings(snapshot, exercise)
    logger.info(
        "Gym analysis complete in %.3fs: exercise='%s' score=%d issues=%d",
        time.time() - t0, exercise.value, result.overall_score, len(result.issues),
    )

    return GymFormResponse(
        exercise_type=result.exercise_type,
        overall_score=result.overall_score,
        issues=list(result.issues),
        metrics=dict(result.metrics),
        rep_quality=result.rep_quality,
        tips=list(result.tips),
        warnings=warnings,
    )
