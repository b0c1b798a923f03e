"""
FORMCOACH Form Service - Landmarks

33-point body landmark model as produced by MediaPipe Pose.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple, Union

import numpy as np


NUM_LANDMARKS = 33


class JointType(Enum):
    """Body joint types for pose estimation."""
    NOSE = 0
    LEFT_EYE_INNER = 1
    LEFT_EYE = 2
    LEFT_EYE_OUTER = 3
    RIGHT_EYE_INNER = 4
    RIGHT_EYE = 5
    RIGHT_EYE_OUTER = 6
    LEFT_EAR = 7
    RIGHT_EAR = 8
    MOUTH_LEFT = 9
    MOUTH_RIGHT = 10
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16
    LEFT_PINKY = 17
    RIGHT_PINKY = 18
    LEFT_INDEX = 19
    RIGHT_INDEX = 20
    LEFT_THUMB = 21
    RIGHT_THUMB = 22
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26
    LEFT_ANKLE = 27
    RIGHT_ANKLE = 28
    LEFT_HEEL = 29
    RIGHT_HEEL = 30
    LEFT_FOOT_INDEX = 31
    RIGHT_FOOT_INDEX = 32


@dataclass(frozen=True)
class Landmark:
    """A single pose landmark with normalized coordinates and optional visibility."""
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None

    def __post_init__(self):
        if not np.isfinite([self.x, self.y, self.z]).all():
            raise ValueError(f"Landmark coordinates must be finite, got ({self.x}, {self.y}, {self.z})")

    def to_numpy(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    @classmethod
    def from_value(cls, value: Union["Landmark", Dict[str, Any], Sequence[float]]) -> "Landmark":
        """Build a landmark from a dict, an (x, y[, z[, visibility]]) sequence or a Landmark."""
        if isinstance(value, Landmark):
            return value
        if isinstance(value, dict):
            return cls(
                x=float(value["x"]),
                y=float(value["y"]),
                z=float(value.get("z") or 0.0),
                visibility=value.get("visibility"),
            )
        coords = list(value)
        if len(coords) < 2:
            raise ValueError(f"Landmark needs at least x and y, got {coords!r}")
        return cls(
            x=float(coords[0]),
            y=float(coords[1]),
            z=float(coords[2]) if len(coords) > 2 else 0.0,
            visibility=float(coords[3]) if len(coords) > 3 else None,
        )


class Frame:
    """
    One pose snapshot: exactly 33 landmarks in MediaPipe order.

    Access points by name (frame[JointType.LEFT_KNEE]) so callers stay
    independent of the raw index layout.
    """

    __slots__ = ("_landmarks",)

    def __init__(self, landmarks: Iterable[Union[Landmark, Dict[str, Any], Sequence[float]]]):
        points = tuple(Landmark.from_value(lm) for lm in landmarks)
        if len(points) != NUM_LANDMARKS:
            raise ValueError(f"Frame requires {NUM_LANDMARKS} landmarks, got {len(points)}")
        self._landmarks: Tuple[Landmark, ...] = points

    def __getitem__(self, joint: JointType) -> Landmark:
        return self._landmarks[joint.value]

    def __iter__(self) -> Iterator[Landmark]:
        return iter(self._landmarks)

    def __len__(self) -> int:
        return len(self._landmarks)

    def replace(self, **points: Landmark) -> "Frame":
        """Return a copy with the named joints (JointType member names) replaced."""
        landmarks = list(self._landmarks)
        for name, landmark in points.items():
            landmarks[JointType[name.upper()].value] = landmark
        return Frame(landmarks)

    def to_dict(self) -> Dict[str, Any]:
        """Convert landmarks to a JSON-serializable dict."""
        return {
            "landmarks": [
                {
                    "id": joint.value,
                    "name": joint.name,
                    "x": self[joint].x,
                    "y": self[joint].y,
                    "z": self[joint].z,
                    "visibility": self[joint].visibility,
                }
                for joint in JointType
            ]
        }


def is_visible(landmark: Landmark, threshold: float = 0.5) -> bool:
    """A landmark without a visibility score counts as visible."""
    visibility = 1.0 if landmark.visibility is None else landmark.visibility
    return visibility >= threshold


def are_landmarks_visible(frame: Frame, joints: Iterable[JointType], threshold: float = 0.5) -> bool:
    return all(is_visible(frame[joint], threshold) for joint in joints)


def frame_confidence(frame: Frame) -> float:
    """Mean visibility over the landmarks that report one (1.0 when none do)."""
    scores = [lm.visibility for lm in frame if lm.visibility is not None]
    if not scores:
        return 1.0
    return float(np.mean(scores))
