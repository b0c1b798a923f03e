"""
FORMCOACH Form Service - Exercise Session Handler

Manages exercise sessions with real-time feedback, rep counting, and scoring.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Union
from datetime import datetime
from enum import Enum
import time
import uuid

from core.config import settings
from shared.utils import setup_logger

from .error_tracker import now_ms
from .exercise_catalog import ExerciseType
from .exercise_rules import ExerciseFamily, ExerciseResult, FormQuality, Phase
from .feedback_messages import NO_POSE_KEY, localize_feedback
from .joint_angles import AngleBuffer, compute_joint_angles
from .landmarks import Frame, JointType, are_landmarks_visible, frame_confidence
from .registry import ExerciseSessionState, analyze_exercise, get_exercise_rule, resolve_exercise_type

logger = setup_logger("formcoach.form.session")

# Joints every exercise reads; low visibility here makes feedback unreliable
TRACKED_JOINTS = (
    JointType.LEFT_SHOULDER, JointType.RIGHT_SHOULDER,
    JointType.LEFT_HIP, JointType.RIGHT_HIP,
    JointType.LEFT_KNEE, JointType.RIGHT_KNEE,
    JointType.LEFT_ANKLE, JointType.RIGHT_ANKLE,
)


class SessionState(Enum):
    """Exercise session states."""
    IDLE = "idle"
    ACTIVE = "active"
    REST = "rest"
    COMPLETED = "completed"
    PAUSED = "paused"


class SessionLimitReached(Exception):
    """Raised when no more sessions can be opened."""


@dataclass
class RepRecord:
    """Record of a single repetition."""
    rep_number: int
    timestamp_ms: float
    form_score: int
    form_quality: FormQuality
    duration_seconds: float
    feedback: List[str] = field(default_factory=list)


@dataclass
class SetRecord:
    """Record of an exercise set."""
    set_number: int
    exercise_type: ExerciseType
    target_reps: int
    completed_reps: int = 0
    good_reps: int = 0
    hold_seconds: float = 0.0
    reps: List[RepRecord] = field(default_factory=list)
    frames_scored: int = 0
    frame_score_total: int = 0
    avg_form_score: float = 0.0
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def duration_seconds(self) -> float:
        return self.end_time - self.start_time if self.end_time > self.start_time else 0.0

    def calculate_avg_score(self):
        if self.reps:
            self.avg_form_score = sum(r.form_score for r in self.reps) / len(self.reps)
        elif self.frames_scored:
            self.avg_form_score = self.frame_score_total / self.frames_scored


@dataclass
class ExerciseSession:
    """Complete exercise session data."""
    session_id: str
    user_id: str
    exercise_type: ExerciseType
    classifier: ExerciseSessionState
    smoother: Optional[AngleBuffer] = None
    state: SessionState = SessionState.IDLE
    locale: Optional[str] = None

    # Configuration
    target_sets: int = 3
    target_reps_per_set: int = 10
    rest_duration_seconds: int = 30

    # Progress tracking
    current_set: int = 1
    current_rep: int = 0
    sets: List[SetRecord] = field(default_factory=list)

    # Timing
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    last_rep_ms: Optional[float] = None
    last_frame_ms: Optional[float] = None

    # Metrics
    total_reps: int = 0
    good_reps: int = 0
    avg_form_score: float = 0.0
    hold_seconds: float = 0.0
    frames_scored: int = 0

    # Real-time feedback
    current_feedback: List[str] = field(default_factory=list)

    @property
    def family(self) -> ExerciseFamily:
        return get_exercise_rule(self.exercise_type).family

    @property
    def is_cyclic(self) -> bool:
        return self.family == ExerciseFamily.CYCLIC

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "exercise_type": self.exercise_type.value,
            "family": self.family.value,
            "state": self.state.value,
            "phase": self.classifier.phase.value,
            "target_sets": self.target_sets,
            "target_reps_per_set": self.target_reps_per_set,
            "current_set": self.current_set,
            "current_rep": self.current_rep,
            "total_reps": self.total_reps,
            "good_reps": self.good_reps,
            "avg_form_score": round(self.avg_form_score, 1),
            "hold_seconds": round(self.hold_seconds, 1),
            "current_feedback": self.current_feedback,
            "duration_seconds": (self.end_time or time.time()) - (self.start_time or time.time()),
            "sets": [
                {
                    "set_number": s.set_number,
                    "exercise_type": s.exercise_type.value,
                    "completed_reps": s.completed_reps,
                    "good_reps": s.good_reps,
                    "target_reps": s.target_reps,
                    "hold_seconds": round(s.hold_seconds, 1),
                    "avg_form_score": round(s.avg_form_score, 1),
                    "duration_seconds": round(s.duration_seconds, 1)
                }
                for s in self.sets
            ]
        }


class ExerciseSessionHandler:
    """
    Manages exercise sessions with real-time form classification.

    Features:
    - Multi-set exercise tracking
    - Rep counting with per-rep form scores
    - Hold time for timed and isometric exercises
    - Localized real-time feedback
    - Session summary generation
    """

    def __init__(
        self,
        persist_ms: Optional[float] = None,
        smoothing_enabled: Optional[bool] = None,
        smoothing_window: Optional[int] = None,
        good_rep_score: Optional[int] = None,
        max_sessions: Optional[int] = None,
    ):
        """
        Initialize session handler. Unset arguments fall back to settings.

        Args:
            persist_ms: Debounce window before feedback is shown
            smoothing_enabled: Give each session a moving-average angle buffer
            smoothing_window: Size of that buffer
            good_rep_score: Minimum score for a rep to count as good
            max_sessions: Upper bound on concurrently stored sessions
        """
        self.persist_ms = settings.ERROR_PERSIST_MS if persist_ms is None else persist_ms
        self.smoothing_enabled = settings.SMOOTHING_ENABLED if smoothing_enabled is None else smoothing_enabled
        self.smoothing_window = smoothing_window or settings.SMOOTHING_WINDOW
        self.good_rep_score = settings.GOOD_REP_SCORE if good_rep_score is None else good_rep_score
        self.max_sessions = max_sessions or settings.MAX_ACTIVE_SESSIONS
        self.active_sessions: Dict[str, ExerciseSession] = {}

    def _new_smoother(self) -> Optional[AngleBuffer]:
        return AngleBuffer(self.smoothing_window) if self.smoothing_enabled else None

    def create_session(
        self,
        user_id: str,
        exercise_type: Union[str, ExerciseType],
        target_sets: int = 3,
        target_reps: int = 10,
        rest_duration: int = 30,
        locale: Optional[str] = None
    ) -> ExerciseSession:
        """
        Create a new exercise session.

        Args:
            user_id: User ID
            exercise_type: Exercise slug or type
            target_sets: Number of sets
            target_reps: Reps per set
            rest_duration: Rest time between sets (seconds)
            locale: Language for feedback text

        Returns:
            New ExerciseSession

        Raises:
            ValueError: Unknown exercise
            SessionLimitReached: Too many stored sessions
        """
        exercise = resolve_exercise_type(exercise_type)

        if len(self.active_sessions) >= self.max_sessions:
            self._evict_completed()
        if len(self.active_sessions) >= self.max_sessions:
            raise SessionLimitReached(f"Session limit of {self.max_sessions} reached")

        session_id = str(uuid.uuid4())[:8]
        while session_id in self.active_sessions:
            session_id = str(uuid.uuid4())[:8]

        session = ExerciseSession(
            session_id=session_id,
            user_id=user_id,
            exercise_type=exercise,
            classifier=ExerciseSessionState.for_exercise(exercise, persist_ms=self.persist_ms),
            smoother=self._new_smoother(),
            locale=locale,
            target_sets=target_sets,
            target_reps_per_set=target_reps,
            rest_duration_seconds=rest_duration
        )

        self.active_sessions[session_id] = session
        logger.info(f"Created session {session_id} for user {user_id}: {exercise.value}")

        return session

    def _evict_completed(self):
        for session_id in [sid for sid, s in self.active_sessions.items() if s.state == SessionState.COMPLETED]:
            del self.active_sessions[session_id]
            logger.info(f"Evicted completed session {session_id}")

    def start_session(self, session_id: str) -> Dict[str, Any]:
        """
        Start an exercise session.

        Returns status dict.
        """
        session = self.active_sessions.get(session_id)
        if not session:
            return {"error": "Session not found", "session_id": session_id}

        if session.state != SessionState.IDLE:
            return {"error": "Session already started", "session_id": session_id}

        session.state = SessionState.ACTIVE
        session.start_time = time.time()

        first_set = SetRecord(
            set_number=1,
            exercise_type=session.exercise_type,
            target_reps=session.target_reps_per_set,
            start_time=time.time()
        )
        session.sets.append(first_set)

        logger.info(f"Started session {session_id}")

        return {
            "status": "started",
            "session_id": session_id,
            "exercise": session.exercise_type.value,
            "target_sets": session.target_sets,
            "target_reps": session.target_reps_per_set
        }

    def process_frame(
        self,
        session_id: str,
        frame: Frame,
        timestamp_ms: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Classify one pose frame during exercise.

        Args:
            session_id: Active session ID
            frame: 33-landmark pose frame
            timestamp_ms: Frame time in epoch ms (host clock if None)

        Returns:
            Real-time feedback dict
        """
        session = self.active_sessions.get(session_id)
        if not session:
            return {"error": "Session not found"}

        if session.state != SessionState.ACTIVE:
            return {"status": session.state.value, "message": "Session not active"}

        timestamp = now_ms() if timestamp_ms is None else timestamp_ms

        angles = compute_joint_angles(frame, session.smoother)
        result = analyze_exercise(angles, frame, session.classifier, timestamp)

        if not session.is_cyclic:
            self._record_hold_frame(session, result, timestamp)
        session.last_frame_ms = timestamp

        response = {
            "session_id": session_id,
            "exercise": session.exercise_type.value,
            "state": session.state.value,
            "pose_detected": True,
            "current_set": session.current_set,
            "target_reps": session.target_reps_per_set,
            **result.to_dict(),
            "feedback_text": localize_feedback(result.feedback, session.locale),
            "angles": angles.to_dict(),
            "confidence": round(frame_confidence(frame), 3),
            "low_visibility": not are_landmarks_visible(frame, TRACKED_JOINTS),
        }

        if result.rep_complete:
            self._record_rep(session, result, timestamp)

            current_set = session.sets[-1] if session.sets else None
            if current_set and current_set.completed_reps >= session.target_reps_per_set:
                response["set_completed"] = True
                response["message"] = f"Set {session.current_set} complete!"

                if session.current_set >= session.target_sets:
                    response["summary"] = self.complete_session(session_id)
                    response["session_completed"] = True
                else:
                    current_set.end_time = time.time()
                    session.state = SessionState.REST
                    response["rest_duration"] = session.rest_duration_seconds
                    logger.info(f"Session {session_id} resting after set {session.current_set}")

        response["current_rep"] = session.current_rep
        response["hold_seconds"] = round(session.hold_seconds, 1)
        response["state"] = session.state.value

        session.current_feedback = list(result.feedback)

        return response

    def process_missing_pose(self, session_id: str) -> Dict[str, Any]:
        """
        Report a frame in which no body was detected.

        Classification state is left untouched; hold time stops accruing
        until the pose comes back.
        """
        session = self.active_sessions.get(session_id)
        if not session:
            return {"error": "Session not found"}

        if session.state != SessionState.ACTIVE:
            return {"status": session.state.value, "message": "Session not active"}

        session.last_frame_ms = None

        return {
            "session_id": session_id,
            "exercise": session.exercise_type.value,
            "state": session.state.value,
            "pose_detected": False,
            "rep_complete": False,
            "phase": session.classifier.phase.value,
            "feedback": [NO_POSE_KEY],
            "feedback_text": localize_feedback([NO_POSE_KEY], session.locale),
            "current_set": session.current_set,
            "current_rep": session.current_rep,
        }

    def _record_hold_frame(self, session: ExerciseSession, result: ExerciseResult, timestamp: float):
        """Accumulate hold time and frame scores for timed exercises."""
        session.frames_scored += 1
        current_set = session.sets[-1] if session.sets else None
        if current_set:
            current_set.frames_scored += 1
            current_set.frame_score_total += result.score
            current_set.calculate_avg_score()
        self._update_avg_score(session)

        if result.phase == Phase.FAILED or session.last_frame_ms is None:
            return

        elapsed = max(0.0, (timestamp - session.last_frame_ms) / 1000)
        session.hold_seconds += elapsed
        if current_set:
            current_set.hold_seconds += elapsed

    def _record_rep(self, session: ExerciseSession, result: ExerciseResult, timestamp: float):
        """Record a completed repetition."""
        if session.last_rep_ms is not None:
            duration = (timestamp - session.last_rep_ms) / 1000
        elif session.sets:
            duration = max(0.0, time.time() - session.sets[-1].start_time)
        else:
            duration = 0.0

        rep = RepRecord(
            rep_number=session.current_rep + 1,
            timestamp_ms=timestamp,
            form_score=result.score,
            form_quality=result.quality,
            duration_seconds=round(duration, 2),
            feedback=list(result.feedback)
        )
        is_good = result.score >= self.good_rep_score

        if session.sets:
            current_set = session.sets[-1]
            current_set.reps.append(rep)
            current_set.completed_reps += 1
            if is_good:
                current_set.good_reps += 1
            current_set.calculate_avg_score()

        session.current_rep += 1
        session.total_reps += 1
        if is_good:
            session.good_reps += 1
        session.last_rep_ms = timestamp
        self._update_avg_score(session)

        logger.debug(
            f"Session {session.session_id} rep {rep.rep_number}: score={rep.form_score} "
            f"quality={rep.form_quality.value}"
        )

    @staticmethod
    def _update_avg_score(session: ExerciseSession):
        """Every rep score counts once; each timed set counts once with its frame average."""
        scores = []
        for s in session.sets:
            scores.extend(r.form_score for r in s.reps)
            if s.frames_scored:
                scores.append(s.avg_form_score)
        if scores:
            session.avg_form_score = sum(scores) / len(scores)

    def switch_exercise(self, session_id: str, exercise_type: Union[str, ExerciseType]) -> Dict[str, Any]:
        """
        Change the exercise mid-session.

        Phase, debounce timers and the smoothing buffer are replaced together
        so nothing from the previous exercise leaks into the new one. A set
        that already has progress is closed and continued as a new segment
        under the same set number.
        """
        session = self.active_sessions.get(session_id)
        if not session:
            return {"error": "Session not found"}

        exercise = resolve_exercise_type(exercise_type)
        previous = session.exercise_type

        session.exercise_type = exercise
        session.classifier = ExerciseSessionState.for_exercise(exercise, persist_ms=self.persist_ms)
        session.smoother = self._new_smoother()
        session.last_frame_ms = None
        session.last_rep_ms = None
        session.current_feedback = []

        # A set closed by REST or completion already belongs to the old exercise
        current_set = session.sets[-1] if session.sets else None
        if current_set and not current_set.end_time:
            if current_set.completed_reps == 0 and current_set.frames_scored == 0:
                current_set.exercise_type = exercise
            else:
                current_set.end_time = time.time()
                session.sets.append(SetRecord(
                    set_number=current_set.set_number,
                    exercise_type=exercise,
                    target_reps=session.target_reps_per_set,
                    start_time=time.time()
                ))
                session.current_rep = 0

        logger.info(f"Session {session_id} switched {previous.value} -> {exercise.value}")

        return {
            "status": "exercise_switched",
            "session_id": session_id,
            "previous_exercise": previous.value,
            "exercise": exercise.value,
            "phase": session.classifier.phase.value
        }

    def start_next_set(self, session_id: str) -> Dict[str, Any]:
        """
        Start the next set after rest period.

        Returns status dict.
        """
        session = self.active_sessions.get(session_id)
        if not session:
            return {"error": "Session not found"}

        if session.state == SessionState.COMPLETED:
            return {"error": "Session already completed"}

        if session.current_set >= session.target_sets:
            return {"error": "All sets completed"}

        if session.sets and not session.sets[-1].end_time:
            session.sets[-1].end_time = time.time()

        session.current_set += 1
        session.current_rep = 0
        session.state = SessionState.ACTIVE

        session.classifier.reset()
        if session.smoother is not None:
            session.smoother.reset()
        session.last_frame_ms = None
        session.last_rep_ms = None

        new_set = SetRecord(
            set_number=session.current_set,
            exercise_type=session.exercise_type,
            target_reps=session.target_reps_per_set,
            start_time=time.time()
        )
        session.sets.append(new_set)

        logger.info(f"Session {session_id} started set {session.current_set}/{session.target_sets}")

        return {
            "status": "set_started",
            "session_id": session_id,
            "current_set": session.current_set,
            "total_sets": session.target_sets
        }

    def pause_session(self, session_id: str) -> Dict[str, Any]:
        """Pause an active session."""
        session = self.active_sessions.get(session_id)
        if not session:
            return {"error": "Session not found"}

        if session.state != SessionState.ACTIVE:
            return {"error": "Session not active"}

        session.state = SessionState.PAUSED
        session.last_frame_ms = None
        return {"status": "paused", "session_id": session_id}

    def resume_session(self, session_id: str) -> Dict[str, Any]:
        """Resume a paused session."""
        session = self.active_sessions.get(session_id)
        if not session:
            return {"error": "Session not found"}

        if session.state == SessionState.PAUSED:
            session.state = SessionState.ACTIVE
            return {"status": "resumed", "session_id": session_id}

        return {"error": "Session not paused"}

    def complete_session(self, session_id: str) -> Dict[str, Any]:
        """
        Complete an exercise session and generate summary.

        Returns complete session summary.
        """
        session = self.active_sessions.get(session_id)
        if not session:
            return {"error": "Session not found"}

        if session.state != SessionState.COMPLETED:
            session.state = SessionState.COMPLETED
            session.end_time = time.time()
            if session.sets and not session.sets[-1].end_time:
                session.sets[-1].end_time = session.end_time
            logger.info(
                f"Completed session {session_id}: {session.total_reps} reps, "
                f"{session.good_reps} good, {session.hold_seconds:.1f}s held"
            )

        return self._generate_summary(session)

    def _completion_rate(self, session: ExerciseSession) -> Optional[float]:
        if not session.is_cyclic and session.total_reps == 0:
            return None
        target_total = session.target_sets * session.target_reps_per_set
        return (session.total_reps / target_total * 100) if target_total > 0 else 0.0

    def _generate_summary(self, session: ExerciseSession) -> Dict[str, Any]:
        """Generate session summary."""
        duration = (session.end_time or time.time()) - (session.start_time or time.time())
        completion_rate = self._completion_rate(session)
        performance, message = self._rate_performance(session, completion_rate)

        return {
            "status": "completed",
            "session_id": session.session_id,
            "user_id": session.user_id,
            "exercise": session.exercise_type.value,
            "summary": {
                "total_reps": session.total_reps,
                "good_reps": session.good_reps,
                "target_reps": session.target_sets * session.target_reps_per_set,
                "completion_rate": None if completion_rate is None else round(completion_rate, 1),
                "sets_completed": len({s.set_number for s in session.sets if s.completed_reps > 0 or s.hold_seconds > 0}),
                "target_sets": session.target_sets,
                "avg_form_score": round(session.avg_form_score, 1),
                "hold_seconds": round(session.hold_seconds, 1),
                "duration_seconds": round(duration, 1),
                "performance_rating": performance,
                "message": message
            },
            "sets": [
                {
                    "set_number": s.set_number,
                    "exercise": s.exercise_type.value,
                    "reps": s.completed_reps,
                    "good_reps": s.good_reps,
                    "hold_seconds": round(s.hold_seconds, 1),
                    "avg_score": round(s.avg_form_score, 1),
                    "duration": round(s.duration_seconds, 1)
                }
                for s in session.sets
            ],
            "recommendations": self._get_recommendations(session, completion_rate),
            "completed_at": datetime.now().isoformat()
        }

    @staticmethod
    def _rate_performance(session: ExerciseSession, completion_rate: Optional[float]):
        score = session.avg_form_score

        if completion_rate is None:
            if session.frames_scored == 0:
                return "needs_improvement", "Keep practicing! You'll get better."
            if score >= 85:
                return "excellent", "Outstanding hold!"
            if score >= 70:
                return "good", "Solid hold! Keep it up!"
            if score >= 50:
                return "fair", "Good effort! Room for improvement."
            return "needs_improvement", "Keep practicing! You'll get better."

        if completion_rate >= 100 and score >= 85:
            return "excellent", "Outstanding performance!"
        if completion_rate >= 80 and score >= 70:
            return "good", "Great job! Keep it up!"
        if completion_rate >= 60:
            return "fair", "Good effort! Room for improvement."
        return "needs_improvement", "Keep practicing! You'll get better."

    def _get_recommendations(self, session: ExerciseSession, completion_rate: Optional[float]) -> List[str]:
        """Generate personalized recommendations based on session performance."""
        recommendations = []

        if session.avg_form_score < self.good_rep_score:
            recommendations.append("Focus on maintaining proper form over completing more reps")

        if completion_rate is not None:
            if completion_rate < 80:
                recommendations.append("Try reducing the number of sets or reps in your next session")
            elif completion_rate >= 100 and session.avg_form_score >= 85:
                recommendations.append("You're ready to increase difficulty! Try more reps or a harder variation")
        elif session.hold_seconds < 10 * session.target_sets:
            recommendations.append("Build up your hold time a few seconds at a time")

        if not recommendations:
            recommendations.append("Great progress! Maintain this consistency")

        return recommendations

    def get_session(self, session_id: str) -> Optional[ExerciseSession]:
        """Get session by ID."""
        return self.active_sessions.get(session_id)

    def get_session_status(self, session_id: str) -> Dict[str, Any]:
        """Get current session status."""
        session = self.active_sessions.get(session_id)
        if not session:
            return {"error": "Session not found"}

        return session.to_dict()

    def cleanup_session(self, session_id: str):
        """Remove session from active sessions."""
        if session_id in self.active_sessions:
            del self.active_sessions[session_id]
            logger.info(f"Removed session {session_id}")


# ═══════════════════════════════════════════════════════════════════════════════
# MODULE-LEVEL SINGLETON
# ═══════════════════════════════════════════════════════════════════════════════

_handler_instance: Optional[ExerciseSessionHandler] = None

def get_session_handler() -> ExerciseSessionHandler:
    """Get or create the global session handler instance."""
    global _handler_instance
    if _handler_instance is None:
        _handler_instance = ExerciseSessionHandler()
    return _handler_instance
