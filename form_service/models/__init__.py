"""
FORMCOACH Form Service Models

Landmark geometry, declarative exercise rules and session tracking.
"""

from .landmarks import (
    NUM_LANDMARKS,
    JointType,
    Landmark,
    Frame,
    frame_confidence,
)

from .geometry import angle_between_points

from .joint_angles import (
    JointAngles,
    AngleBuffer,
    compute_joint_angles,
)

from .error_tracker import ErrorTracker, ERROR_PERSIST_MS

from .exercise_rules import (
    Phase,
    FormQuality,
    ExerciseFamily,
    RepEncoding,
    ExerciseResult,
    ExerciseRule,
)

from .exercise_catalog import ExerciseType, EXERCISE_RULES

from .registry import (
    ExerciseSessionState,
    analyze_exercise,
    get_exercise_rule,
    list_exercises,
)

from .feedback_messages import (
    get_feedback_text,
    localize_feedback,
    normalize_locale,
)

from .exercise_session import (
    ExerciseSession,
    ExerciseSessionHandler,
    SessionLimitReached,
    SessionState,
    RepRecord,
    SetRecord,
    get_session_handler
)

__all__ = [
    # Landmarks and angles
    "NUM_LANDMARKS",
    "JointType",
    "Landmark",
    "Frame",
    "frame_confidence",
    "angle_between_points",
    "JointAngles",
    "AngleBuffer",
    "compute_joint_angles",
    # Classification
    "ErrorTracker",
    "ERROR_PERSIST_MS",
    "Phase",
    "FormQuality",
    "ExerciseFamily",
    "RepEncoding",
    "ExerciseResult",
    "ExerciseRule",
    "ExerciseType",
    "EXERCISE_RULES",
    "ExerciseSessionState",
    "analyze_exercise",
    "get_exercise_rule",
    "list_exercises",
    # Feedback text
    "get_feedback_text",
    "localize_feedback",
    "normalize_locale",
    # Exercise Session
    "ExerciseSession",
    "ExerciseSessionHandler",
    "SessionLimitReached",
    "SessionState",
    "RepRecord",
    "SetRecord",
    "get_session_handler",
]
