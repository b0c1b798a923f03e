"""
FORMCOACH Form Service - Exercise Rules

Generic per-frame classifier driven by a declarative rule table:
phase detection, rep counting, penalty scoring and debounced feedback.
"""

import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

from .error_tracker import ErrorTracker, now_ms
from .joint_angles import JointAngles
from .landmarks import Frame, JointType, Landmark


# ═══════════════════════════════════════════════════════════════════════════════
# ENUMS AND DATA CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class Phase(Enum):
    """Movement phase reported for a frame."""
    UP = "up"
    DOWN = "down"
    TRANSITION = "transition"
    HOLDING = "holding"
    FAILED = "failed"
    ACTIVE = "active"


class FormQuality(Enum):
    """Form quality tiers."""
    OPTIMAL = "optimal"
    GOOD = "good"
    CORRECTIVE = "corrective"


class ExerciseFamily(Enum):
    """How an exercise is tracked over time."""
    CYCLIC = "cyclic"        # counted in reps
    HOLD = "hold"            # timed hold, fails under a score floor
    POSITION = "position"    # isometric position, no phase cycling


class RepEncoding(Enum):
    """How a completed rep is detected for cyclic exercises."""
    DIRECT = "direct"        # previous frame down, this frame up
    LATCHED = "latched"      # down visited since the last up, now up


OPTIMAL_MIN_SCORE = 80
GOOD_MIN_SCORE = 60
HOLD_FAIL_SCORE = 40

PERFECT_FORM_KEY = "general.perfect_form"
REP_COMPLETE_KEY = "general.rep_complete"


def quality_for_score(score: int) -> FormQuality:
    if score >= OPTIMAL_MIN_SCORE:
        return FormQuality.OPTIMAL
    if score >= GOOD_MIN_SCORE:
        return FormQuality.GOOD
    return FormQuality.CORRECTIVE


@dataclass(frozen=True)
class ExerciseResult:
    """Classification output for one frame."""
    rep_complete: bool
    score: int  # 0-100
    quality: FormQuality
    feedback: Tuple[str, ...]
    phase: Phase

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rep_complete": self.rep_complete,
            "score": self.score,
            "quality": self.quality.value,
            "feedback": list(self.feedback),
            "phase": self.phase.value,
        }


# ═══════════════════════════════════════════════════════════════════════════════
# FRAME CONTEXT (signals shared by rule tables)
# ═══════════════════════════════════════════════════════════════════════════════

class ExerciseContext:
    """Read-only view over one frame's angles and landmarks."""

    def __init__(self, angles: JointAngles, frame: Frame, phase: Optional[Phase] = None):
        self.angles = angles
        self.frame = frame
        self.phase = phase

    def point(self, joint: JointType) -> Landmark:
        return self.frame[joint]

    def _mean_y(self, left: JointType, right: JointType) -> float:
        return (self.frame[left].y + self.frame[right].y) / 2

    # Angle signals

    @property
    def avg_knee(self) -> float:
        return (self.angles.left_knee + self.angles.right_knee) / 2

    @property
    def front_knee(self) -> float:
        return min(self.angles.left_knee, self.angles.right_knee)

    @property
    def avg_hip(self) -> float:
        return (self.angles.left_hip + self.angles.right_hip) / 2

    @property
    def max_hip(self) -> float:
        return max(self.angles.left_hip, self.angles.right_hip)

    @property
    def avg_elbow(self) -> float:
        return (self.angles.left_elbow + self.angles.right_elbow) / 2

    @property
    def elbow_gap(self) -> float:
        return abs(self.angles.left_elbow - self.angles.right_elbow)

    @property
    def knee_gap(self) -> float:
        return abs(self.angles.left_knee - self.angles.right_knee)

    # Landmark signals (image y grows downward)

    @property
    def shoulder_y(self) -> float:
        return self._mean_y(JointType.LEFT_SHOULDER, JointType.RIGHT_SHOULDER)

    @property
    def hip_y(self) -> float:
        return self._mean_y(JointType.LEFT_HIP, JointType.RIGHT_HIP)

    @property
    def ankle_y(self) -> float:
        return self._mean_y(JointType.LEFT_ANKLE, JointType.RIGHT_ANKLE)

    @property
    def wrist_y(self) -> float:
        return self._mean_y(JointType.LEFT_WRIST, JointType.RIGHT_WRIST)

    @property
    def hip_deviation(self) -> float:
        """Hip Y minus the straight shoulder-ankle line at its midpoint (positive = sagging)."""
        expected_hip_y = self.shoulder_y + (self.ankle_y - self.shoulder_y) * 0.5
        return self.hip_y - expected_hip_y

    @property
    def knee_drive(self) -> float:
        """Most negative knee-minus-hip Y over both legs; below zero means a knee is above its hip."""
        left = self.frame[JointType.LEFT_KNEE].y - self.frame[JointType.LEFT_HIP].y
        right = self.frame[JointType.RIGHT_KNEE].y - self.frame[JointType.RIGHT_HIP].y
        return min(left, right)

    @property
    def knee_y_gap(self) -> float:
        return abs(self.frame[JointType.LEFT_KNEE].y - self.frame[JointType.RIGHT_KNEE].y)

    @property
    def shoulder_y_gap(self) -> float:
        return abs(self.frame[JointType.LEFT_SHOULDER].y - self.frame[JointType.RIGHT_SHOULDER].y)

    @property
    def hip_y_gap(self) -> float:
        return abs(self.frame[JointType.LEFT_HIP].y - self.frame[JointType.RIGHT_HIP].y)

    @property
    def ankle_lift(self) -> float:
        """Ankle Y minus hip Y; negative when the legs are raised above the hips."""
        return self.ankle_y - self.hip_y

    @property
    def body_spread(self) -> float:
        """Vertical shoulder-to-ankle extent; small when the body is horizontal."""
        return abs(self.shoulder_y - self.ankle_y)

    @property
    def ankle_spread(self) -> float:
        return abs(self.frame[JointType.LEFT_ANKLE].x - self.frame[JointType.RIGHT_ANKLE].x)

    @property
    def hip_spread(self) -> float:
        return abs(self.frame[JointType.LEFT_HIP].x - self.frame[JointType.RIGHT_HIP].x)

    @property
    def wrist_spread(self) -> float:
        return abs(self.frame[JointType.LEFT_WRIST].x - self.frame[JointType.RIGHT_WRIST].x)

    @property
    def is_down(self) -> bool:
        return self.phase == Phase.DOWN

    @property
    def is_up(self) -> bool:
        return self.phase == Phase.UP


Signal = Callable[[ExerciseContext], float]
Predicate = Callable[[ExerciseContext], bool]


# ═══════════════════════════════════════════════════════════════════════════════
# RULE TABLE TYPES
# ═══════════════════════════════════════════════════════════════════════════════

_COMPARATORS = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


@dataclass(frozen=True)
class Band:
    """One side of a phase threshold, e.g. Band("<", 100)."""
    op: str
    limit: float

    def __post_init__(self):
        if self.op not in _COMPARATORS:
            raise ValueError(f"Unsupported comparison: {self.op!r}")

    def matches(self, value: float) -> bool:
        return _COMPARATORS[self.op](value, self.limit)


@dataclass(frozen=True)
class PhaseRule:
    """
    Primary signal plus the down/up bands that bucket it.

    With up=None the rule is binary: every frame that is not down is up.
    """
    signal: Signal
    down: Band
    up: Optional[Band] = None

    def classify(self, ctx: ExerciseContext) -> Phase:
        value = self.signal(ctx)
        if self.down.matches(value):
            return Phase.DOWN
        if self.up is None or self.up.matches(value):
            return Phase.UP
        return Phase.TRANSITION


@dataclass(frozen=True)
class Violation:
    """A posture check: when predicate holds, penalty is deducted and key is tracked."""
    key: str
    penalty: int
    predicate: Predicate


@dataclass(frozen=True)
class ExerciseRule:
    """Declarative description of one exercise."""
    slug: str
    family: ExerciseFamily
    violations: Tuple[Violation, ...] = ()
    phase_rule: Optional[PhaseRule] = None
    rep_encoding: RepEncoding = RepEncoding.LATCHED
    description: str = ""

    def __post_init__(self):
        if self.family == ExerciseFamily.CYCLIC and self.phase_rule is None:
            raise ValueError(f"Cyclic exercise {self.slug!r} needs a phase rule")
        for violation in self.violations:
            if not violation.key.startswith(f"{self.slug}."):
                raise ValueError(f"Feedback key {violation.key!r} is outside the {self.slug!r} namespace")

    @property
    def initial_phase(self) -> Phase:
        if self.family == ExerciseFamily.HOLD:
            return Phase.HOLDING
        if self.family == ExerciseFamily.POSITION:
            return Phase.ACTIVE
        return Phase.UP

    @property
    def feedback_keys(self) -> Tuple[str, ...]:
        return tuple(v.key for v in self.violations)

    def classify(
        self,
        angles: JointAngles,
        frame: Frame,
        prev_phase: Phase,
        tracker: ErrorTracker,
        timestamp_ms: Optional[float] = None,
    ) -> ExerciseResult:
        """
        Classify one frame.

        Args:
            angles: Joint angles for the frame
            frame: The frame's landmarks
            prev_phase: Phase returned for the previous frame
            tracker: Session debounce state (mutated)
            timestamp_ms: Frame time in epoch ms (host clock if None)

        Returns:
            ExerciseResult; the caller keeps result.phase for the next call
        """
        timestamp = now_ms() if timestamp_ms is None else timestamp_ms
        ctx = ExerciseContext(angles, frame)

        phase, rep_complete = self._advance(ctx, prev_phase, tracker)
        ctx.phase = phase

        feedback = []
        score = 100
        for violation in self.violations:
            active = bool(violation.predicate(ctx))
            if active:
                score -= violation.penalty
            tracker.track(violation.key, active, timestamp, feedback)

        score = max(0, score)

        if self.family == ExerciseFamily.HOLD:
            phase = Phase.FAILED if score < HOLD_FAIL_SCORE else Phase.HOLDING

        if rep_complete:
            if score >= OPTIMAL_MIN_SCORE:
                feedback.insert(0, PERFECT_FORM_KEY)
            elif score >= GOOD_MIN_SCORE:
                feedback.insert(0, REP_COMPLETE_KEY)

        return ExerciseResult(
            rep_complete=rep_complete,
            score=score,
            quality=quality_for_score(score),
            feedback=tuple(feedback),
            phase=phase,
        )

    def _advance(self, ctx: ExerciseContext, prev_phase: Phase, tracker: ErrorTracker) -> Tuple[Phase, bool]:
        """Compute this frame's phase and whether it completes a rep."""
        if self.family != ExerciseFamily.CYCLIC:
            return self.initial_phase, False

        phase = self.phase_rule.classify(ctx)

        if self.rep_encoding == RepEncoding.DIRECT:
            return phase, prev_phase == Phase.DOWN and phase == Phase.UP

        if phase == Phase.DOWN:
            tracker.was_down = True
        rep_complete = prev_phase != Phase.UP and phase == Phase.UP and tracker.was_down
        if rep_complete:
            tracker.was_down = False
        return phase, rep_complete
