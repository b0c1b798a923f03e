"""
FORMCOACH Form Service - Exercise Registry

Dispatches frames to the rule table for the selected exercise and owns the
per-session classification state (previous phase plus debounce tracker).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .error_tracker import ERROR_PERSIST_MS, ErrorTracker
from .exercise_catalog import EXERCISE_RULES, ExerciseType
from .exercise_rules import ExerciseResult, ExerciseRule, Phase
from .joint_angles import JointAngles
from .landmarks import Frame


def resolve_exercise_type(exercise: Union[str, ExerciseType]) -> ExerciseType:
    """Map a slug to its ExerciseType; raises ValueError for unknown slugs."""
    if isinstance(exercise, ExerciseType):
        return exercise
    try:
        return ExerciseType(exercise)
    except ValueError:
        raise ValueError(f"Unknown exercise: {exercise!r}") from None


def get_exercise_rule(exercise: Union[str, ExerciseType]) -> ExerciseRule:
    return EXERCISE_RULES[resolve_exercise_type(exercise)]


@dataclass
class ExerciseSessionState:
    """Classification state for one user doing one exercise."""
    exercise: ExerciseType
    phase: Phase
    tracker: ErrorTracker = field(default_factory=ErrorTracker)

    @classmethod
    def for_exercise(
        cls,
        exercise: Union[str, ExerciseType],
        persist_ms: float = ERROR_PERSIST_MS,
    ) -> "ExerciseSessionState":
        exercise_type = resolve_exercise_type(exercise)
        return cls(
            exercise=exercise_type,
            phase=EXERCISE_RULES[exercise_type].initial_phase,
            tracker=ErrorTracker(persist_ms=persist_ms),
        )

    def reset(self):
        """Back to the exercise's initial phase with an empty tracker."""
        self.phase = EXERCISE_RULES[self.exercise].initial_phase
        self.tracker.clear()


def analyze_exercise(
    angles: JointAngles,
    frame: Frame,
    state: ExerciseSessionState,
    now_ms: Optional[float] = None,
) -> ExerciseResult:
    """Classify one frame for state.exercise and store the resulting phase."""
    rule = EXERCISE_RULES[state.exercise]
    result = rule.classify(angles, frame, state.phase, state.tracker, now_ms)
    state.phase = result.phase
    return result


def list_exercises() -> List[Dict[str, Any]]:
    """Catalog listing for clients."""
    return [
        {
            "slug": exercise.value,
            "family": rule.family.value,
            "description": rule.description,
            "feedback_keys": list(rule.feedback_keys),
        }
        for exercise, rule in EXERCISE_RULES.items()
    ]
