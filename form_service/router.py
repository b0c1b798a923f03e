"""
FORMCOACH Form Service Router

Endpoints for exercise form sessions: clients run pose estimation on-device
and send 33-landmark frames; the service returns rep counts, form scores and
coaching feedback.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, HTTPException
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any

from shared.utils import setup_logger, handle_exceptions

from .models import (
    ExerciseSessionHandler,
    ExerciseType,
    Frame,
    SessionLimitReached,
    SessionState,
    get_feedback_text,
    get_session_handler,
    list_exercises,
    normalize_locale,
)

logger = setup_logger("formcoach.form.router")

router = APIRouter()


def get_services() -> ExerciseSessionHandler:
    """Get the session handler instance."""
    return get_session_handler()


# ============= Pydantic Models =============

class LandmarkIn(BaseModel):
    x: float
    y: float
    z: float = 0.0
    visibility: Optional[float] = None


class FrameRequest(BaseModel):
    landmarks: Optional[List[LandmarkIn]] = None  # None when no body was detected
    timestamp_ms: Optional[float] = None


class StartSessionRequest(BaseModel):
    user_id: str
    exercise_type: str
    target_reps: int = Field(10, ge=1)
    target_sets: int = Field(3, ge=1)
    rest_duration: int = Field(30, ge=0)
    locale: Optional[str] = None


class SwitchExerciseRequest(BaseModel):
    exercise_type: str


# ============= Helpers =============

def _invalid_exercise(exercise_type: str) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail=f"Invalid exercise type '{exercise_type}'. Valid types: {[e.value for e in ExerciseType]}"
    )


def _require_session(session_handler: ExerciseSessionHandler, session_id: str):
    session = session_handler.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _check_result(result: Dict[str, Any]) -> Dict[str, Any]:
    """Turn a handler error dict into an HTTP error."""
    error = result.get("error")
    if error == "Session not found":
        raise HTTPException(status_code=404, detail=error)
    if error:
        raise HTTPException(status_code=400, detail=error)
    return result


def _build_frame(landmarks: List[Any]) -> Frame:
    return Frame(lm.model_dump() if isinstance(lm, BaseModel) else lm for lm in landmarks)


def _classify(session_handler: ExerciseSessionHandler, session_id: str, request: FrameRequest) -> Dict[str, Any]:
    if request.landmarks is None:
        return session_handler.process_missing_pose(session_id)
    frame = _build_frame(request.landmarks)
    return session_handler.process_frame(session_id, frame, request.timestamp_ms)


# ============= REST Endpoints =============

@router.get("/exercises")
async def get_exercises(family: Optional[str] = None):
    """Get the supported exercise catalog."""
    exercises = list_exercises()

    if family:
        exercises = [e for e in exercises if e["family"] == family]

    return {
        "exercises": exercises,
        "total": len(exercises),
        "families": ["cyclic", "hold", "position"]
    }


@router.post("/session/start")
async def start_exercise_session(request: StartSessionRequest):
    """
    Create and start a new exercise session.

    Returns a session ID for use with the frame endpoint or WebSocket stream.
    """
    session_handler = get_services()

    try:
        ex_type = ExerciseType(request.exercise_type)
    except ValueError:
        raise _invalid_exercise(request.exercise_type)

    try:
        session = session_handler.create_session(
            user_id=request.user_id,
            exercise_type=ex_type,
            target_reps=request.target_reps,
            target_sets=request.target_sets,
            rest_duration=request.rest_duration,
            locale=request.locale
        )
    except SessionLimitReached as e:
        raise HTTPException(status_code=429, detail=str(e))

    session_handler.start_session(session.session_id)

    return {
        "status": "started",
        "session_id": session.session_id,
        "user_id": request.user_id,
        "exercise_type": ex_type.value,
        "phase": session.classifier.phase.value,
        "target": {
            "reps": request.target_reps,
            "sets": request.target_sets
        },
        "websocket_url": f"/api/form/ws/session/{session.session_id}"
    }


@router.post("/session/{session_id}/frame")
@handle_exceptions
async def submit_frame(session_id: str, request: FrameRequest):
    """
    Classify one pose frame.

    Send landmarks=null when the pose detector found no body.
    """
    session_handler = get_services()
    _require_session(session_handler, session_id)
    return _check_result(_classify(session_handler, session_id, request))


@router.post("/session/{session_id}/exercise")
async def switch_exercise(session_id: str, request: SwitchExerciseRequest):
    """Switch the session to a different exercise."""
    session_handler = get_services()
    _require_session(session_handler, session_id)

    try:
        ex_type = ExerciseType(request.exercise_type)
    except ValueError:
        raise _invalid_exercise(request.exercise_type)

    return _check_result(session_handler.switch_exercise(session_id, ex_type))


@router.post("/session/{session_id}/next-set")
async def start_next_set(session_id: str):
    """Start the next set after a rest period."""
    return _check_result(get_services().start_next_set(session_id))


@router.post("/session/{session_id}/pause")
async def pause_session(session_id: str):
    return _check_result(get_services().pause_session(session_id))


@router.post("/session/{session_id}/resume")
async def resume_session(session_id: str):
    return _check_result(get_services().resume_session(session_id))


@router.post("/session/{session_id}/complete")
async def complete_session(session_id: str):
    """Complete an exercise session and get final results."""
    session_handler = get_services()
    _require_session(session_handler, session_id)

    result = session_handler.complete_session(session_id)

    return {
        "status": "completed",
        "session_id": session_id,
        "result": result
    }


@router.get("/session/{session_id}")
async def get_session_status(session_id: str):
    """Get current session progress."""
    return _check_result(get_services().get_session_status(session_id))


@router.get("/feedback/{key}")
async def get_feedback(key: str, locale: Optional[str] = None):
    """Get the coaching text for a feedback key."""
    return {
        "key": key,
        "locale": normalize_locale(locale),
        "text": get_feedback_text(key, locale)
    }


# ============= WebSocket Stream =============

@router.websocket("/ws/session/{session_id}")
async def exercise_session_stream(websocket: WebSocket, session_id: str):
    """
    Real-time exercise session monitoring with form feedback.

    Receives JSON frames ({"landmarks": [...] | null, "timestamp_ms": ...})
    and replies with:
    - FRAME_RESULT per frame
    - SET_COMPLETED when the target reps of a set are reached
    - SESSION_COMPLETED with the summary after the last set
    - ERROR for malformed frames (the connection stays open)
    """
    await websocket.accept()
    session_handler = get_services()

    session = session_handler.get_session(session_id)
    if not session:
        await websocket.send_json({
            "type": "ERROR",
            "message": f"Session {session_id} not found"
        })
        await websocket.close()
        return

    if session.state == SessionState.IDLE:
        session_handler.start_session(session_id)
    elif session.state == SessionState.PAUSED:
        session_handler.resume_session(session_id)

    try:
        await websocket.send_json({
            "type": "SESSION_STARTED",
            "session_id": session_id,
            "exercise_type": session.exercise_type.value,
            "target_reps": session.target_reps_per_set,
            "target_sets": session.target_sets
        })

        while True:
            try:
                data = await websocket.receive_json()
                request = FrameRequest(**data)
                frame_result = _classify(session_handler, session_id, request)
            except (TypeError, ValueError) as e:
                await websocket.send_json({
                    "type": "ERROR",
                    "message": str(e)
                })
                continue

            await websocket.send_json({"type": "FRAME_RESULT", **frame_result})

            if frame_result.get("set_completed"):
                await websocket.send_json({
                    "type": "SET_COMPLETED",
                    "set_number": frame_result.get("current_set"),
                    "rest_duration": frame_result.get("rest_duration")
                })

            if frame_result.get("session_completed"):
                await websocket.send_json({
                    "type": "SESSION_COMPLETED",
                    "summary": frame_result.get("summary", {})
                })
                break

        await websocket.close()

    except WebSocketDisconnect:
        logger.info(f"Session {session_id} disconnected")
        if session.state == SessionState.ACTIVE:
            session_handler.pause_session(session_id)
