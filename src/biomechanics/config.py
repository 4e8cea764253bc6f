"""
Constants for the form analysis engine.

Penalty weights and rep-quality bands are shared with stored historical
scores, so changing them breaks score comparability across sessions.
"""

# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------
MAX_SCORE: int = 100
MIN_SCORE: int = 0

# Points subtracted per issue, keyed by severity name
SEVERITY_PENALTIES: dict[str, int] = {
    "high": 15,
    "medium": 8,
    "low": 3,
}

# Minimum score for each rep-quality tier (checked top-down)
REP_QUALITY_THRESHOLDS: dict[str, int] = {
    "good": 80,
    "fair": 60,
    "poor": 0,
}

# ---------------------------------------------------------------------------
# Derived-signal defaults (used when the caller supplies none)
# ---------------------------------------------------------------------------
DEFAULT_CADENCE: int = 170                 # steps / min
DEFAULT_STRIDE_LENGTH: float = 1.2         # m
DEFAULT_GROUND_CONTACT_TIME: int = 250     # ms
DEFAULT_FLIGHT_TIME: int = 100             # ms
DEFAULT_VERTICAL_OSCILLATION: float = 6.0  # cm

# ---------------------------------------------------------------------------
# Detector thresholds
# ---------------------------------------------------------------------------
HEEL_RISE_TOLERANCE: float = 0.02   # frame fraction
LOCKOUT_ANGLE: float = 160.0        # degrees, joint counted as straight above this
