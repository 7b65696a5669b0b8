# rep_client/rep_logic.py

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Dict, Any, Tuple

from .errors import InvalidConfigurationError

logger = logging.getLogger(__name__)


class ExercisePhase(str, Enum):
    DOWN = "down"
    UP = "up"
    TRANSITIONING = "transition"
    # Reported for frames without a usable angle; never stored as last_phase
    NO_SIGNAL = "no_signal"


@dataclass(frozen=True)
class PhaseThresholds:
    """
    Angle model for one movement pattern.
      - angle <= down_max_angle  -> DOWN
      - angle >= up_min_angle    -> UP
      - anything in between      -> TRANSITIONING
    """
    down_max_angle: float = 90.0
    up_min_angle: float = 160.0

    def __post_init__(self):
        if not (math.isfinite(self.down_max_angle) and math.isfinite(self.up_min_angle)):
            raise InvalidConfigurationError("thresholds must be finite numbers")
        if self.down_max_angle >= self.up_min_angle:
            raise InvalidConfigurationError(
                f"down_max_angle ({self.down_max_angle}) must be below "
                f"up_min_angle ({self.up_min_angle})"
            )

    def classify(self, angle: float) -> ExercisePhase:
        if angle <= self.down_max_angle:
            return ExercisePhase.DOWN
        if angle >= self.up_min_angle:
            return ExercisePhase.UP
        return ExercisePhase.TRANSITIONING


@dataclass
class TrackerState:
    last_phase: Optional[ExercisePhase] = None
    rep_count: int = 0
    # Last DOWN/UP seen; TRANSITIONING ticks don't overwrite it
    last_settled_phase: Optional[ExercisePhase] = None


@dataclass(frozen=True)
class PhaseUpdate:
    phase: ExercisePhase
    feedback: str
    rep_count_changed: bool
    new_rep_count: int


DEFAULT_FEEDBACK: Dict[ExercisePhase, str] = {
    ExercisePhase.DOWN: "Good form - Push Up Bottom Position",
    ExercisePhase.UP: "Good form - Push Up Top Position",
    ExercisePhase.TRANSITIONING: "Continue your movement",
    ExercisePhase.NO_SIGNAL: "Joints not detected - adjust your position",
}


class RepPhaseTracker:
    """
    Maps one angle per tick to a phase, and counts a rep when UP follows DOWN.
    TRANSITIONING ticks in between are passed over, so DOWN -> TRANSITIONING -> UP
    counts once while UP -> DOWN and wobbling inside the band never count.

    Not thread-safe: callers serialize update()/reset() (ExerciseSession does).
    """

    def __init__(self, thresholds: Optional[PhaseThresholds] = None,
                 feedback: Optional[Dict[ExercisePhase, str]] = None):
        self.thresholds = thresholds or PhaseThresholds()
        self.feedback = dict(DEFAULT_FEEDBACK)
        if feedback:
            self.feedback.update(feedback)
        self._state = TrackerState()

    @property
    def state(self) -> TrackerState:
        return replace(self._state)

    @property
    def rep_count(self) -> int:
        return self._state.rep_count

    def reset(self) -> TrackerState:
        self._state = TrackerState()
        return self.state

    def update(self, angle: float) -> PhaseUpdate:
        # NaN is the "no angle this frame" sentinel: leave state alone
        if angle is None or math.isnan(angle):
            return PhaseUpdate(
                phase=ExercisePhase.NO_SIGNAL,
                feedback=self.feedback[ExercisePhase.NO_SIGNAL],
                rep_count_changed=False,
                new_rep_count=self._state.rep_count,
            )

        phase = self.thresholds.classify(angle)

        counted = self._state.last_settled_phase == ExercisePhase.DOWN and phase == ExercisePhase.UP
        if counted:
            self._state.rep_count += 1
            logger.debug("rep counted at %.1f deg (total=%d)", angle, self._state.rep_count)

        self._state.last_phase = phase
        if phase != ExercisePhase.TRANSITIONING:
            self._state.last_settled_phase = phase

        return PhaseUpdate(
            phase=phase,
            feedback=self.feedback[phase],
            rep_count_changed=counted,
            new_rep_count=self._state.rep_count,
        )


# ----------------- Per-exercise configuration -----------------
EXERCISE_CONFIG: Dict[str, Dict[str, Any]] = {
    "pushup": {
        "chain": ("shoulder", "elbow", "wrist"),
        "thresholds": PhaseThresholds(down_max_angle=90.0, up_min_angle=160.0),
        "feedback": {},
    },
    "squat": {
        "chain": ("hip", "knee", "ankle"),
        "thresholds": PhaseThresholds(down_max_angle=90.0, up_min_angle=160.0),
        "feedback": {
            ExercisePhase.DOWN: "Good depth - Squat Bottom Position",
            ExercisePhase.UP: "Stand tall - Squat Top Position",
        },
    },
    "bicep_curl": {
        # DOWN here is the curled arm (small elbow angle); the rep lands on full extension
        "chain": ("shoulder", "elbow", "wrist"),
        "thresholds": PhaseThresholds(down_max_angle=45.0, up_min_angle=150.0),
        "feedback": {
            ExercisePhase.DOWN: "Squeeze at the top",
            ExercisePhase.UP: "Full extension - lower slowly",
        },
    },
}

DEFAULT_CONFIG = EXERCISE_CONFIG["pushup"]


def get_exercise_config(exercise_name: Optional[str]) -> Dict[str, Any]:
    if exercise_name and exercise_name in EXERCISE_CONFIG:
        return EXERCISE_CONFIG[exercise_name]
    return DEFAULT_CONFIG


def build_tracker(exercise_name: Optional[str] = None) -> Tuple[RepPhaseTracker, Tuple[str, str, str]]:
    """Tracker plus the joint chain whose angle should be fed to it."""
    cfg = get_exercise_config(exercise_name)
    return RepPhaseTracker(cfg["thresholds"], cfg["feedback"]), cfg["chain"]
