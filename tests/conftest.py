"""
Shared pose builders for form service tests.

Frames are synthetic 33-landmark skeletons laid out so the angles and
vertical offsets the exercise rules read are known exactly.
"""

import math

import pytest

from form_service.models import JointType, Landmark, Frame
from form_service.models.exercise_session import ExerciseSessionHandler


J = JointType

LIMB = 0.18  # thigh, shin and forearm length in normalized units

# Standing, facing the camera, arms hanging straight down
STANDING = {
    J.NOSE: (0.50, 0.15),
    J.LEFT_SHOULDER: (0.45, 0.30),
    J.RIGHT_SHOULDER: (0.55, 0.30),
    J.LEFT_ELBOW: (0.45, 0.45),
    J.RIGHT_ELBOW: (0.55, 0.45),
    J.LEFT_WRIST: (0.45, 0.60),
    J.RIGHT_WRIST: (0.55, 0.60),
    J.LEFT_HIP: (0.46, 0.60),
    J.RIGHT_HIP: (0.54, 0.60),
    J.LEFT_KNEE: (0.46, 0.78),
    J.RIGHT_KNEE: (0.54, 0.78),
    J.LEFT_ANKLE: (0.46, 0.96),
    J.RIGHT_ANKLE: (0.54, 0.96),
    J.LEFT_FOOT_INDEX: (0.46, 0.98),
    J.RIGHT_FOOT_INDEX: (0.54, 0.98),
}

# Face-down plank, body horizontal at y=0.5
PLANK = {
    J.NOSE: (0.20, 0.48),
    J.LEFT_SHOULDER: (0.30, 0.50),
    J.RIGHT_SHOULDER: (0.30, 0.50),
    J.LEFT_ELBOW: (0.30, 0.65),
    J.RIGHT_ELBOW: (0.30, 0.65),
    J.LEFT_WRIST: (0.20, 0.65),
    J.RIGHT_WRIST: (0.20, 0.65),
    J.LEFT_HIP: (0.50, 0.50),
    J.RIGHT_HIP: (0.50, 0.50),
    J.LEFT_KNEE: (0.65, 0.50),
    J.RIGHT_KNEE: (0.65, 0.50),
    J.LEFT_ANKLE: (0.80, 0.50),
    J.RIGHT_ANKLE: (0.80, 0.50),
    J.LEFT_FOOT_INDEX: (0.82, 0.52),
    J.RIGHT_FOOT_INDEX: (0.82, 0.52),
}


def _bend(vertex, degrees, length=LIMB):
    """Point at the given joint angle from a vertex whose other ray points straight up."""
    rad = math.radians(degrees)
    return (vertex[0] + length * math.sin(rad), vertex[1] - length * math.cos(rad))


class PoseBuilder:
    """Builds frames for the exercise scenarios used across the suite."""

    @staticmethod
    def frame(points, visibility=None):
        """Frame from a joint -> (x, y) mapping; unlisted joints sit at the body center."""
        landmarks = []
        for joint in JointType:
            x, y = points.get(joint, (0.5, 0.5))
            landmarks.append(Landmark(x=x, y=y, visibility=visibility))
        return Frame(landmarks)

    @classmethod
    def standing(cls):
        return cls.frame(STANDING)

    @classmethod
    def squat(cls, knee_angle, toe_offset=0.0):
        """
        Standing pose with both knees bent to knee_angle.

        toe_offset moves the left toe sideways away from the knee so the
        knee-over-toe distance equals the offset.
        """
        points = dict(STANDING)
        for knee, ankle, toe in (
            (J.LEFT_KNEE, J.LEFT_ANKLE, J.LEFT_FOOT_INDEX),
            (J.RIGHT_KNEE, J.RIGHT_ANKLE, J.RIGHT_FOOT_INDEX),
        ):
            knee_point = points[knee]
            ankle_point = _bend(knee_point, knee_angle)
            points[ankle] = ankle_point
            points[toe] = (knee_point[0], ankle_point[1] + 0.02)
        left_knee = points[J.LEFT_KNEE]
        points[J.LEFT_FOOT_INDEX] = (left_knee[0] + toe_offset, points[J.LEFT_FOOT_INDEX][1])
        return cls.frame(points)

    @classmethod
    def elbows(cls, elbow_angle, left_angle=None):
        """Standing pose with the elbows bent (left_angle overrides the left arm)."""
        points = dict(STANDING)
        points[J.LEFT_WRIST] = _bend(points[J.LEFT_ELBOW], elbow_angle if left_angle is None else left_angle, 0.15)
        points[J.RIGHT_WRIST] = _bend(points[J.RIGHT_ELBOW], elbow_angle, 0.15)
        return cls.frame(points)

    @classmethod
    def plank(cls, hip_dev=0.0, shoulder_tilt=0.0, knee_drive=None):
        """
        Plank with hips offset by hip_dev (positive = sagging toward the floor),
        shoulders tilted by shoulder_tilt, and optionally the left knee pulled
        knee_drive above hip height.
        """
        points = dict(PLANK)
        for hip in (J.LEFT_HIP, J.RIGHT_HIP):
            points[hip] = (points[hip][0], 0.50 + hip_dev)
        points[J.LEFT_SHOULDER] = (0.30, 0.50 - shoulder_tilt / 2)
        points[J.RIGHT_SHOULDER] = (0.30, 0.50 + shoulder_tilt / 2)
        if knee_drive is not None:
            points[J.LEFT_KNEE] = (0.45, 0.50 + hip_dev - knee_drive)
        return cls.frame(points)

    @staticmethod
    def as_payload(frame):
        """JSON body for the frame endpoint."""
        return [{"x": lm.x, "y": lm.y, "z": lm.z, "visibility": lm.visibility} for lm in frame]


@pytest.fixture
def pose():
    return PoseBuilder


@pytest.fixture
def handler():
    """Session handler with deterministic settings."""
    return ExerciseSessionHandler(
        persist_ms=3000,
        smoothing_enabled=False,
        good_rep_score=70,
        max_sessions=10,
    )
