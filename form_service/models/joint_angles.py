"""
FORMCOACH Form Service - Joint Angles

Maps a 33-landmark frame onto the fixed set of anatomical angles the
exercise rules read, with an optional moving-average smoother.
"""

from collections import deque
from dataclasses import dataclass, asdict, fields
from typing import Deque, Dict, Optional

import numpy as np

from .geometry import angle_between_points
from .landmarks import Frame, JointType


@dataclass(frozen=True)
class JointAngles:
    """Joint angles in degrees (0-180) for one frame."""
    left_knee: float
    right_knee: float
    left_hip: float
    right_hip: float
    left_elbow: float
    right_elbow: float
    left_shoulder: float
    right_shoulder: float
    left_ankle: float
    right_ankle: float
    spine: float

    def to_dict(self) -> Dict[str, float]:
        return {name: round(value, 1) for name, value in asdict(self).items()}


ANGLE_NAMES = tuple(f.name for f in fields(JointAngles))

# angle name -> (first point, vertex, last point)
ANGLE_DEFINITIONS = {
    "left_knee": (JointType.LEFT_HIP, JointType.LEFT_KNEE, JointType.LEFT_ANKLE),
    "right_knee": (JointType.RIGHT_HIP, JointType.RIGHT_KNEE, JointType.RIGHT_ANKLE),
    "left_hip": (JointType.LEFT_SHOULDER, JointType.LEFT_HIP, JointType.LEFT_KNEE),
    "right_hip": (JointType.RIGHT_SHOULDER, JointType.RIGHT_HIP, JointType.RIGHT_KNEE),
    "left_elbow": (JointType.LEFT_SHOULDER, JointType.LEFT_ELBOW, JointType.LEFT_WRIST),
    "right_elbow": (JointType.RIGHT_SHOULDER, JointType.RIGHT_ELBOW, JointType.RIGHT_WRIST),
    "left_shoulder": (JointType.LEFT_ELBOW, JointType.LEFT_SHOULDER, JointType.LEFT_HIP),
    "right_shoulder": (JointType.RIGHT_ELBOW, JointType.RIGHT_SHOULDER, JointType.RIGHT_HIP),
    "left_ankle": (JointType.LEFT_KNEE, JointType.LEFT_ANKLE, JointType.LEFT_FOOT_INDEX),
    "right_ankle": (JointType.RIGHT_KNEE, JointType.RIGHT_ANKLE, JointType.RIGHT_FOOT_INDEX),
    # Trunk flexion, measured on the left side only
    "spine": (JointType.LEFT_SHOULDER, JointType.LEFT_HIP, JointType.LEFT_KNEE),
}


class AngleBuffer:
    """
    Moving-average buffer for smoothing joint angles across frames.

    One window per angle name. Thresholds are tuned either with or without
    smoothing, so a buffer must be applied to every angle or to none.
    """

    def __init__(self, window_size: int = 5):
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        self.window_size = window_size
        self._buffers: Dict[str, Deque[float]] = {}

    def smooth(self, name: str, value: float) -> float:
        buffer = self._buffers.get(name)
        if buffer is None:
            buffer = deque(maxlen=self.window_size)
            self._buffers[name] = buffer
        buffer.append(value)
        return float(np.mean(buffer))

    def reset(self):
        self._buffers.clear()


def compute_joint_angles(frame: Frame, smoother: Optional[AngleBuffer] = None) -> JointAngles:
    """
    Calculate all joint angles for a frame.

    Never fails: occluded or collapsed landmarks produce 0 degree angles.
    """
    values = {}
    for name, (first, vertex, last) in ANGLE_DEFINITIONS.items():
        angle = angle_between_points(frame[first], frame[vertex], frame[last])
        if smoother is not None:
            angle = smoother.smooth(name, angle)
        values[name] = angle

    return JointAngles(**values)
