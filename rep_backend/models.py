# rep_backend/models.py
from pydantic import BaseModel, Field
from typing import Dict, Optional


class RepSummary(BaseModel):
    rep_id: int = Field(ge=1)
    exercise_hint: Optional[str] = None  # e.g. "pushup"
    variation: Optional[str] = None      # e.g. "diamond"
    duration_s: float = Field(ge=0)
    min_angle: float = Field(ge=0, le=180)
    max_angle: float = Field(ge=0, le=180)
    frames: int = Field(default=0, ge=0)


class CoachingResponse(BaseModel):
    exercise: str
    main_issue: Optional[str] = None
    severity: str
    message: str


class Point(BaseModel):
    x: float
    y: float


class SessionCreate(BaseModel):
    exercise: str = "pushup"
    variation: str = "standard"


class SessionCreated(BaseModel):
    session_id: str
    exercise: str
    variation: str


class FrameIn(BaseModel):
    joints: Dict[str, Point]


class TickOut(BaseModel):
    angle_degrees: Optional[float]
    phase: str
    feedback: str
    rep_count: int
    elapsed: str
    completed_rep: Optional[RepSummary] = None
