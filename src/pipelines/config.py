"""
Configuration constants for the form analysis FastAPI service.

Loads ``.env`` from the project root and exposes the service settings.
Engine constants (penalties, defaults) live in ``src.biomechanics.config``.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_PATH = PROJECT_ROOT / ".env"
load_dotenv(_ENV_PATH)

# ---------------------------------------------------------------------------
# Pose input
# ---------------------------------------------------------------------------
NUM_LANDMARKS: int = 33        # MediaPipe Pose
VISIBILITY_THRESHOLD: float = float(os.environ.get("FORM_VISIBILITY_THRESHOLD", "0.5"))
MAX_FRAMES: int = int(os.environ.get("FORM_MAX_FRAMES", "300"))

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
CORS_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.environ.get("FORM_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL: str = os.environ.get("FORM_LOG_LEVEL", "INFO").upper()
