"""
FORMCOACH Form Service - Geometry

Pure vector math over normalized landmarks. Every function is total:
degenerate (zero-length) input yields 0 rather than NaN.
"""

import numpy as np

from .landmarks import Landmark


def _to_vector(landmark: Landmark) -> np.ndarray:
    return np.array([landmark.x, landmark.y, landmark.z], dtype=float)


def angle_between_points(a: Landmark, b: Landmark, c: Landmark) -> float:
    """
    Calculate angle at point b formed by points a-b-c.

    Args:
        a, b, c: Landmarks; b is the vertex

    Returns:
        Angle in degrees (0-180), exactly 0.0 when either ray has zero length
    """
    ba = _to_vector(a) - _to_vector(b)
    bc = _to_vector(c) - _to_vector(b)

    norm_ba = np.linalg.norm(ba)
    norm_bc = np.linalg.norm(bc)
    if norm_ba == 0 or norm_bc == 0:
        return 0.0

    cosine_angle = np.dot(ba, bc) / (norm_ba * norm_bc)
    cosine_angle = np.clip(cosine_angle, -1.0, 1.0)

    return float(np.degrees(np.arccos(cosine_angle)))


def distance_2d(a: Landmark, b: Landmark) -> float:
    """Euclidean distance between two landmarks in the image plane."""
    return float(np.hypot(a.x - b.x, a.y - b.y))


def midpoint(a: Landmark, b: Landmark) -> Landmark:
    """Point halfway between two landmarks (visibility is not carried over)."""
    return Landmark(
        x=(a.x + b.x) / 2,
        y=(a.y + b.y) / 2,
        z=(a.z + b.z) / 2,
    )


def normalize(value: float, min_value: float, max_value: float) -> float:
    """Map value from [min_value, max_value] onto [0, 1], clamped."""
    if max_value == min_value:
        return 0.0
    return float(np.clip((value - min_value) / (max_value - min_value), 0.0, 1.0))
