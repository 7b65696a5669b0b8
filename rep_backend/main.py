# rep_backend/main.py
import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from rep_client.errors import MissingJointError, SessionNotRunningError
from rep_client.exercise_data import EXERCISE_PROFILES, ExerciseProfile, get_exercise_profile
from rep_client.rep_logic import EXERCISE_CONFIG

from .models import (
    RepSummary, CoachingResponse, SessionCreate, SessionCreated, FrameIn, TickOut,
)
from .llm_agent import analyze_rep_with_llm
from .sessions import SessionStore

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Push Up Rep Tracker Backend")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # for demo
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

sessions = SessionStore()


def _get_session_or_404(session_id: str):
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
    return session


@app.get("/")
def health_check():
    return {"status": "ok", "active_sessions": len(sessions.active())}


@app.get("/exercises", response_model=list[ExerciseProfile])
def list_exercises():
    return list(EXERCISE_PROFILES.values())


@app.get("/exercises/{variation}", response_model=ExerciseProfile)
def get_exercise(variation: str):
    try:
        return get_exercise_profile(variation)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown variation: {variation}")


@app.post("/sessions", response_model=SessionCreated, status_code=201)
def create_session(body: SessionCreate):
    if body.variation not in EXERCISE_PROFILES:
        raise HTTPException(status_code=404, detail=f"Unknown variation: {body.variation}")
    if body.exercise not in EXERCISE_CONFIG:
        raise HTTPException(status_code=404, detail=f"Unknown exercise: {body.exercise}")
    session_id = sessions.create(body.exercise, body.variation)
    return SessionCreated(session_id=session_id, exercise=body.exercise, variation=body.variation)


@app.post("/sessions/{session_id}/frames", response_model=TickOut)
def push_frame(session_id: str, frame: FrameIn):
    session = _get_session_or_404(session_id)
    raw = {name: (p.x, p.y) for name, p in frame.joints.items()}
    try:
        result = session.tick_mapping(raw)
    except MissingJointError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        # non-finite coordinates
        raise HTTPException(status_code=422, detail=str(e))
    except SessionNotRunningError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return TickOut(elapsed=session.format_elapsed(), **result.as_dict())


@app.post("/sessions/{session_id}/reset", response_model=SessionCreated)
def reset_session(session_id: str):
    session = _get_session_or_404(session_id)
    session.start()
    return SessionCreated(session_id=session_id, exercise=session.exercise, variation=session.variation)


@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str):
    if not sessions.remove(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")


@app.post("/analyze_rep", response_model=CoachingResponse)
def analyze_rep(rep: RepSummary):
    result = analyze_rep_with_llm(rep.model_dump())
    if result is None:
        raise HTTPException(status_code=502, detail="Coaching model unavailable")
    try:
        return CoachingResponse(**result)
    except (TypeError, ValueError) as e:
        logger.warning("LLM reply did not match CoachingResponse: %s", e)
        raise HTTPException(status_code=502, detail="Coaching model returned an invalid reply")
