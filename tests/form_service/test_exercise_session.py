"""
Session handler tests: set flow, rep records, hold time, exercise
switching and summaries.
"""

import pytest

from form_service.models import (
    AngleBuffer,
    ExerciseSessionHandler,
    ExerciseType,
    Phase,
    SessionLimitReached,
    SessionState,
)


def _start(handler, exercise="squat", **kwargs):
    session = handler.create_session("user-1", exercise, **kwargs)
    handler.start_session(session.session_id)
    return session


def _rep(handler, session_id, pose, t, **squat_kwargs):
    handler.process_frame(session_id, pose.squat(90, **squat_kwargs), t)
    return handler.process_frame(session_id, pose.squat(170, **squat_kwargs), t + 500)


# ═══════════════════════════════════════════════════════════════════════════════
# LIFECYCLE
# ═══════════════════════════════════════════════════════════════════════════════

def test_create_session_is_idle(handler):
    session = handler.create_session("user-1", "squat")
    assert session.state == SessionState.IDLE
    assert session.exercise_type == ExerciseType.SQUAT
    assert session.classifier.phase == Phase.UP
    assert session.smoother is None


def test_create_rejects_unknown_exercise(handler):
    with pytest.raises(ValueError):
        handler.create_session("user-1", "bear_crawl")


def test_start_twice_is_an_error(handler):
    session = _start(handler)
    assert handler.start_session(session.session_id) == {
        "error": "Session already started",
        "session_id": session.session_id,
    }


def test_unknown_session(handler, pose):
    assert handler.process_frame("nope", pose.standing()) == {"error": "Session not found"}
    assert handler.process_missing_pose("nope") == {"error": "Session not found"}
    assert handler.get_session_status("nope") == {"error": "Session not found"}
    assert handler.switch_exercise("nope", "plank") == {"error": "Session not found"}


def test_frames_ignored_until_started(handler, pose):
    session = handler.create_session("user-1", "squat")
    result = handler.process_frame(session.session_id, pose.standing(), 0)
    assert result == {"status": "idle", "message": "Session not active"}


def test_pause_and_resume(handler, pose):
    session = _start(handler)
    assert handler.pause_session(session.session_id)["status"] == "paused"
    assert handler.process_frame(session.session_id, pose.standing(), 0)["status"] == "paused"
    assert handler.pause_session(session.session_id) == {"error": "Session not active"}

    assert handler.resume_session(session.session_id)["status"] == "resumed"
    assert handler.resume_session(session.session_id) == {"error": "Session not paused"}


def test_session_limit(pose):
    handler = ExerciseSessionHandler(max_sessions=1)
    first = handler.create_session("user-1", "squat")
    with pytest.raises(SessionLimitReached):
        handler.create_session("user-2", "squat")

    handler.complete_session(first.session_id)
    second = handler.create_session("user-2", "squat")
    assert handler.get_session(first.session_id) is None
    assert handler.get_session(second.session_id) is second


def test_cleanup_session(handler):
    session = handler.create_session("user-1", "squat")
    handler.cleanup_session(session.session_id)
    assert handler.get_session(session.session_id) is None


# ═══════════════════════════════════════════════════════════════════════════════
# REPS AND SETS
# ═══════════════════════════════════════════════════════════════════════════════

def test_frame_response(handler, pose):
    session = _start(handler)
    response = handler.process_frame(session.session_id, pose.squat(90), 0)

    assert response["pose_detected"] is True
    assert response["phase"] == "down"
    assert response["score"] == 100
    assert response["quality"] == "optimal"
    assert response["rep_complete"] is False
    assert response["current_rep"] == 0
    assert response["angles"]["left_knee"] == pytest.approx(90.0)
    assert response["confidence"] == 1.0
    assert response["low_visibility"] is False


def test_rep_is_recorded(handler, pose):
    session = _start(handler)
    response = _rep(handler, session.session_id, pose, 0)

    assert response["rep_complete"] is True
    assert response["current_rep"] == 1
    assert response["feedback"] == ["general.perfect_form"]
    assert response["feedback_text"] == ["Perfect form! Keep it up!"]

    rep = session.sets[0].reps[0]
    assert rep.rep_number == 1
    assert rep.form_score == 100
    assert rep.timestamp_ms == 500
    assert session.good_reps == 1


def test_good_rep_threshold(pose):
    handler = ExerciseSessionHandler(good_rep_score=90)
    session = _start(handler)
    _rep(handler, session.session_id, pose, 0, toe_offset=0.15)
    _rep(handler, session.session_id, pose, 1000)

    assert session.total_reps == 2
    assert session.good_reps == 1
    assert [r.form_score for r in session.sets[0].reps] == [82, 100]
    assert session.avg_form_score == pytest.approx(91.0)
    assert session.sets[0].reps[1].duration_seconds == pytest.approx(1.0)


def test_set_flow_to_completion(handler, pose):
    session = _start(handler, target_sets=2, target_reps=2)
    sid = session.session_id

    _rep(handler, sid, pose, 0)
    response = _rep(handler, sid, pose, 1000)
    assert response["set_completed"] is True
    assert response["state"] == "rest"
    assert response["rest_duration"] == 30
    assert session.state == SessionState.REST

    assert handler.start_next_set(sid)["current_set"] == 2
    assert session.state == SessionState.ACTIVE
    assert session.current_rep == 0
    assert session.classifier.phase == Phase.UP

    _rep(handler, sid, pose, 2000)
    response = _rep(handler, sid, pose, 3000)
    assert response["session_completed"] is True
    assert response["state"] == "completed"

    summary = response["summary"]["summary"]
    assert summary["total_reps"] == 4
    assert summary["good_reps"] == 4
    assert summary["completion_rate"] == 100.0
    assert summary["performance_rating"] == "excellent"
    assert len(response["summary"]["sets"]) == 2


def test_next_set_after_last_set(handler):
    session = _start(handler, target_sets=1)
    assert handler.start_next_set(session.session_id) == {"error": "All sets completed"}


def test_missing_pose_leaves_classification_alone(handler, pose):
    session = _start(handler)
    handler.process_frame(session.session_id, pose.squat(90), 0)
    response = handler.process_missing_pose(session.session_id)

    assert response["pose_detected"] is False
    assert response["feedback"] == ["general.no_pose"]
    assert response["phase"] == "down"
    assert session.classifier.tracker.was_down

    assert handler.process_frame(session.session_id, pose.squat(170), 600)["rep_complete"] is True


# ═══════════════════════════════════════════════════════════════════════════════
# HOLDS
# ═══════════════════════════════════════════════════════════════════════════════

def test_hold_time_accumulates(handler, pose):
    session = _start(handler, "plank")
    sid = session.session_id
    for t in (0, 1000, 2000):
        handler.process_frame(sid, pose.plank(), t)
    assert session.hold_seconds == pytest.approx(2.0)

    # failed frames and gaps without a pose don't count
    handler.process_frame(sid, pose.plank(hip_dev=0.15, shoulder_tilt=0.08), 3000)
    handler.process_missing_pose(sid)
    handler.process_frame(sid, pose.plank(), 9000)
    handler.process_frame(sid, pose.plank(), 9500)
    assert session.hold_seconds == pytest.approx(2.5)
    assert session.sets[0].hold_seconds == pytest.approx(2.5)
    assert session.total_reps == 0


def test_hold_summary(handler, pose):
    session = _start(handler, "wall_sit", target_sets=1)
    for t in range(0, 31_000, 1000):
        handler.process_frame(session.session_id, pose.squat(90), t)

    result = handler.complete_session(session.session_id)
    summary = result["summary"]
    assert summary["completion_rate"] is None
    assert summary["hold_seconds"] == 30.0
    assert summary["avg_form_score"] == 100.0
    assert summary["performance_rating"] == "excellent"
    assert result["recommendations"] == ["Great progress! Maintain this consistency"]


# ═══════════════════════════════════════════════════════════════════════════════
# EXERCISE SWITCHING AND SMOOTHING
# ═══════════════════════════════════════════════════════════════════════════════

def test_switch_exercise_replaces_state(handler, pose):
    session = _start(handler)
    handler.process_frame(session.session_id, pose.squat(90, toe_offset=0.2), 0)
    old_state = session.classifier

    result = handler.switch_exercise(session.session_id, "plank")
    assert result["previous_exercise"] == "squat"
    assert result["phase"] == "holding"
    assert session.classifier is not old_state
    assert session.classifier.tracker.is_empty()
    assert session.sets[0].exercise_type == ExerciseType.PLANK


def test_switch_after_progress_starts_new_segment(handler, pose):
    session = _start(handler)
    sid = session.session_id
    _rep(handler, sid, pose, 0)

    handler.switch_exercise(sid, "plank")
    assert session.current_rep == 0
    for t in (1000, 2000, 3000, 4000, 5000):
        handler.process_frame(sid, pose.plank(hip_dev=0.08), t)

    squat_set, plank_set = session.sets
    assert (squat_set.exercise_type, squat_set.completed_reps, squat_set.hold_seconds) == (ExerciseType.SQUAT, 1, 0.0)
    assert squat_set.avg_form_score == 100
    assert squat_set.end_time > 0
    assert (plank_set.exercise_type, plank_set.completed_reps) == (ExerciseType.PLANK, 0)
    assert plank_set.set_number == squat_set.set_number
    assert plank_set.hold_seconds == pytest.approx(4.0)
    assert plank_set.avg_form_score == 70

    summary = handler.complete_session(sid)["summary"]
    assert summary["completion_rate"] == pytest.approx(3.3)
    assert summary["avg_form_score"] == 85.0
    assert summary["sets_completed"] == 1


def test_switch_during_rest_keeps_closed_set(handler, pose):
    session = _start(handler, target_sets=2, target_reps=1)
    _rep(handler, session.session_id, pose, 0)
    assert session.state == SessionState.REST

    handler.switch_exercise(session.session_id, "plank")
    assert [s.exercise_type for s in session.sets] == [ExerciseType.SQUAT]

    handler.start_next_set(session.session_id)
    assert [s.exercise_type for s in session.sets] == [ExerciseType.SQUAT, ExerciseType.PLANK]


def test_switch_rejects_unknown_exercise(handler):
    session = _start(handler)
    with pytest.raises(ValueError):
        handler.switch_exercise(session.session_id, "bear_crawl")


def test_smoothing_buffers_are_per_session(pose):
    handler = ExerciseSessionHandler(smoothing_enabled=True, smoothing_window=2)
    first = _start(handler)
    second = _start(handler)
    assert isinstance(first.smoother, AngleBuffer)
    assert first.smoother is not second.smoother

    handler.process_frame(first.session_id, pose.standing(), 0)
    response = handler.process_frame(first.session_id, pose.squat(100), 100)
    assert response["angles"]["left_knee"] == pytest.approx(140.0)

    fresh = handler.process_frame(second.session_id, pose.squat(100), 100)
    assert fresh["angles"]["left_knee"] == pytest.approx(100.0)

    old_buffer = first.smoother
    handler.switch_exercise(first.session_id, "lunge")
    assert first.smoother is not old_buffer


def test_status_dict(handler, pose):
    session = _start(handler)
    _rep(handler, session.session_id, pose, 0)
    status = handler.get_session_status(session.session_id)

    assert status["state"] == "active"
    assert status["family"] == "cyclic"
    assert status["total_reps"] == 1
    assert status["sets"][0]["completed_reps"] == 1
