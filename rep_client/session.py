# rep_client/session.py

import logging
import math
import threading
import time
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Callable, Mapping

from .errors import DegenerateGeometryError, SessionNotRunningError
from .exercise_data import DEFAULT_VARIATION, get_exercise_profile
from .pose_utils import JointFrame, chain_angle
from .rep_logic import EXERCISE_CONFIG, ExercisePhase, build_tracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickResult:
    angle_degrees: float                  # NaN when the frame gave no usable angle
    phase: ExercisePhase
    feedback: str
    rep_count: int
    completed_rep: Optional[Dict[str, Any]] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "angle_degrees": None if math.isnan(self.angle_degrees) else round(self.angle_degrees, 2),
            "phase": self.phase.value,
            "feedback": self.feedback,
            "rep_count": self.rep_count,
            "completed_rep": self.completed_rep,
        }


@dataclass
class _RepWindow:
    """Angles seen since the previous rep (or session start)."""
    start_time: float = 0.0
    angles: List[float] = field(default_factory=list)


def format_duration(seconds: float) -> str:
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


class ExerciseSession:
    """
    One exercise session: owns a single RepPhaseTracker and feeds it
    one JointFrame per tick.

      start()  -> reset tracker, start timer
      tick()   -> angle -> phase -> rep count (serialized by a lock)
      stop()   -> stop accepting ticks; count stays readable
    """

    def __init__(self, exercise: Optional[str] = "pushup",
                 variation: str = DEFAULT_VARIATION,
                 clock: Callable[[], float] = time.monotonic):
        # Validates the variation up front (KeyError if unknown)
        self.profile = get_exercise_profile(variation)
        # Names without a config run (and report) as push-ups
        self.exercise = exercise if exercise in EXERCISE_CONFIG else "pushup"
        self.variation = variation
        self.tracker, self.chain = build_tracker(self.exercise)

        self._clock = clock
        self._lock = threading.Lock()
        self._running = False
        self._start_time: Optional[float] = None
        self._stop_time: Optional[float] = None
        self._window = _RepWindow()
        self.completed_reps: List[Dict[str, Any]] = []

    # ---------- lifecycle ----------

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def rep_count(self) -> int:
        return self.tracker.rep_count

    def start(self):
        with self._lock:
            self.tracker.reset()
            now = self._clock()
            self._start_time = now
            self._stop_time = None
            self._window = _RepWindow(start_time=now)
            self.completed_reps = []
            self._running = True
        logger.info("session started (exercise=%s, variation=%s)", self.exercise, self.variation)

    def stop(self):
        with self._lock:
            if self._running:
                self._stop_time = self._clock()
            self._running = False
        logger.info("session stopped after %s with %d reps", self.format_elapsed(), self.rep_count)

    def elapsed_seconds(self) -> float:
        if self._start_time is None:
            return 0.0
        end = self._stop_time if self._stop_time is not None else self._clock()
        return end - self._start_time

    def format_elapsed(self) -> str:
        return format_duration(self.elapsed_seconds())

    # ---------- per-tick ----------

    def tick_mapping(self, raw: Mapping[str, Any]) -> TickResult:
        """Boundary entry point: validates joint names before any angle work."""
        return self.tick(JointFrame.from_mapping(raw))

    def tick(self, frame: JointFrame) -> TickResult:
        with self._lock:
            if not self._running:
                raise SessionNotRunningError("session is not running; call start() first")

            try:
                angle = chain_angle(frame, self.chain)
            except DegenerateGeometryError as e:
                logger.debug("skipping tick: %s", e)
                angle = float("nan")

            update = self.tracker.update(angle)

            completed = None
            if update.phase != ExercisePhase.NO_SIGNAL:
                self._window.angles.append(angle)
                if update.rep_count_changed:
                    completed = self._close_rep(update.new_rep_count)

            return TickResult(
                angle_degrees=angle,
                phase=update.phase,
                feedback=update.feedback,
                rep_count=update.new_rep_count,
                completed_rep=completed,
            )

    def _close_rep(self, rep_id: int) -> Dict[str, Any]:
        now = self._clock()
        angles = self._window.angles
        rep_summary = {
            "rep_id": rep_id,
            "exercise_hint": self.exercise,
            "variation": self.variation,
            "duration_s": float(now - self._window.start_time),
            "min_angle": float(min(angles)),
            "max_angle": float(max(angles)),
            "frames": len(angles),
        }
        self.completed_reps.append(rep_summary)
        self._window = _RepWindow(start_time=now)
        logger.info("rep %d completed (min=%.1f, %.2fs)", rep_id, rep_summary["min_angle"], rep_summary["duration_s"])
        return rep_summary
