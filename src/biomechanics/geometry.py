"""
Geometry primitives shared by every metric extractor.

Points are anything with ``.x``, ``.y`` and ``.z`` attributes. All 2-D helpers
work in the image plane (x to the right, y down the frame), where coordinates
are fractions of the frame size.
"""

import numpy as np

_EPS = 1e-9


def _vec3(p) -> np.ndarray:
    return np.array([p.x, p.y, p.z], dtype=np.float64)


def _vec2(p) -> np.ndarray:
    return np.array([p.x, p.y], dtype=np.float64)


def _angle_between_vectors(v1: np.ndarray, v2: np.ndarray) -> float:
    norm1 = np.linalg.norm(v1)
    norm2 = np.linalg.norm(v2)
    if norm1 < _EPS or norm2 < _EPS:
        return 0.0

    cos_angle = np.dot(v1, v2) / (norm1 * norm2)
    cos_angle = np.clip(cos_angle, -1.0, 1.0)
    return float(np.degrees(np.arccos(cos_angle)))


def angle_between(a, b, c) -> float:
    """Calculate the interior angle at vertex b formed by points a-b-c in 3D.

    Uses the dot product formula: cos(θ) = (v1·v2) / (|v1||v2|)
    where v1 = vector from b to a, v2 = vector from b to c.

    Args:
        a, b, c: Points with .x, .y and .z attributes.

    Returns:
        float: Angle in degrees (0-180). 0.0 when either ray has zero length.
    """
    return _angle_between_vectors(_vec3(a) - _vec3(b), _vec3(c) - _vec3(b))


def angle_between_2d(a, b, c) -> float:
    """Same as :func:`angle_between` with depth ignored."""
    return _angle_between_vectors(_vec2(a) - _vec2(b), _vec2(c) - _vec2(b))


def segment_angle_2d(origin, end1, end2) -> float | None:
    """Angle in degrees between segments origin→end1 and origin→end2 (x/y only).

    Returns None when either segment is degenerate so callers can pick
    their own neutral value.
    """
    v1 = _vec2(end1) - _vec2(origin)
    v2 = _vec2(end2) - _vec2(origin)
    if np.linalg.norm(v1) < _EPS or np.linalg.norm(v2) < _EPS:
        return None
    return _angle_between_vectors(v1, v2)


def distance_2d(a, b) -> float:
    """Euclidean distance in the image plane."""
    return float(np.linalg.norm(_vec2(a) - _vec2(b)))


def distance_3d(a, b) -> float:
    """Euclidean distance including depth."""
    return float(np.linalg.norm(_vec3(a) - _vec3(b)))


def inclination_from_vertical(lower, upper) -> float:
    """Signed angle of the segment lower→upper away from straight up.

    Positive when ``upper`` sits to the right (+x) of ``lower``. A segment
    pointing straight up the frame gives 0°.
    """
    dx = upper.x - lower.x
    dy = upper.y - lower.y
    return float(np.degrees(np.arctan2(dx, -dy)))


def signed_deviation(point, line_start, line_end) -> float:
    """Signed perpendicular distance of ``point`` from the line start→end (x/y).

    Positive when the point lies below the line in the frame (larger y),
    negative when above. Degenerate lines measure straight distance to
    ``line_start``.
    """
    start = _vec2(line_start)
    direction = _vec2(line_end) - start
    offset = _vec2(point) - start
    length = np.linalg.norm(direction)
    if length < _EPS:
        return float(np.linalg.norm(offset))

    unit = direction / length
    perpendicular = offset - np.dot(offset, unit) * unit
    return float(np.sign(perpendicular[1]) * np.linalg.norm(perpendicular))


def percent_of(value: float, reference: float) -> float:
    """Express ``value`` as a percentage of ``reference`` (0 when reference is 0)."""
    if reference == 0:
        return 0.0
    return value / reference * 100.0
