"""
Phase Detection & Repetition Counting

Each exercise type is a (phase classifier, completion rule) pair chosen once
when the detector is built:

- the classifier measures the driving joint angle and maps it to a phase,
  using the current phase as hysteresis for the ambiguous middle band;
- the completion rule decides, after every frame, whether a repetition
  (cyclic exercises) or a hold (isometric exercises) has just finished.

Missing landmarks never move the machine: the last good phase is kept.
"""

import logging
import time
from collections import deque
from dataclasses import replace
from typing import Callable, Deque, Dict, Optional, Tuple

import numpy as np

from ..config.thresholds import LungeThresholds, PlankThresholds, PushUpThresholds, SquatThresholds
from .angles import elbow_angle, hip_angle, knee_angle
from .exercise import ExercisePhase, ExerciseProfile, ExerciseType, RepetitionState
from .landmarks import Landmarks, Side

logger = logging.getLogger(__name__)

P = ExercisePhase


def _now_ms() -> float:
    return time.time() * 1000


def _both_sides(accessor: Callable, landmarks: Landmarks) -> Optional[Tuple[float, float]]:
    left, right = accessor(landmarks, Side.LEFT), accessor(landmarks, Side.RIGHT)
    if left is None or right is None:
        return None
    return left, right


# -----------------------------------------------------------------------------
# Phase classifiers
# -----------------------------------------------------------------------------

class PhaseClassifier:
    """Permissive default: no measurement, the phase never moves."""

    def measure(self, landmarks: Landmarks) -> Optional[float]:
        return None

    def classify(self, angle: float, current: ExercisePhase) -> ExercisePhase:
        return current

    def next_phase(self, landmarks: Landmarks, current: ExercisePhase) -> ExercisePhase:
        angle = self.measure(landmarks)
        if angle is None:
            return current
        return self.classify(angle, current)


class SquatPhaseClassifier(PhaseClassifier):
    """Average knee angle; standing / bottom bands with directional middle band."""

    def __init__(self, thresholds: SquatThresholds = SquatThresholds()):
        self.thresholds = thresholds

    def measure(self, landmarks: Landmarks) -> Optional[float]:
        angles = _both_sides(knee_angle, landmarks)
        return float(np.mean(angles)) if angles else None

    def classify(self, angle: float, current: ExercisePhase) -> ExercisePhase:
        if angle > self.thresholds.STANDING:
            return P.STARTING
        if angle < self.thresholds.DEPTH_THRESHOLD:
            return P.BOTTOM
        if current in (P.STARTING, P.DESCENDING):
            return P.DESCENDING
        return P.ASCENDING


class PushUpPhaseClassifier(PhaseClassifier):
    """Average elbow angle; arms extended at the top."""

    def __init__(self, thresholds: PushUpThresholds = PushUpThresholds()):
        self.thresholds = thresholds

    def measure(self, landmarks: Landmarks) -> Optional[float]:
        angles = _both_sides(elbow_angle, landmarks)
        return float(np.mean(angles)) if angles else None

    def classify(self, angle: float, current: ExercisePhase) -> ExercisePhase:
        if angle > self.thresholds.TOP:
            return P.TOP
        if angle < self.thresholds.DEPTH_THRESHOLD:
            return P.BOTTOM
        if current in (P.TOP, P.DESCENDING):
            return P.DESCENDING
        return P.ASCENDING


class LungePhaseClassifier(PhaseClassifier):
    """
    Front (more bent) knee angle.

    Middle band precedence: coming down from standing -> descending; coming
    up from the bottom -> ascending until RETURN_THRESHOLD, then returning;
    any other prior phase -> returning.
    """

    def __init__(self, thresholds: LungeThresholds = LungeThresholds()):
        self.thresholds = thresholds

    def measure(self, landmarks: Landmarks) -> Optional[float]:
        angles = _both_sides(knee_angle, landmarks)
        return float(min(angles)) if angles else None

    def classify(self, angle: float, current: ExercisePhase) -> ExercisePhase:
        if angle > self.thresholds.STANDING:
            return P.STARTING
        if angle < self.thresholds.DEPTH_THRESHOLD:
            return P.BOTTOM
        if current in (P.STARTING, P.DESCENDING):
            return P.DESCENDING
        if current in (P.BOTTOM, P.ASCENDING, P.RETURNING):
            return P.ASCENDING if angle < self.thresholds.RETURN_THRESHOLD else P.RETURNING
        return P.RETURNING


class PlankPhaseClassifier(PhaseClassifier):
    """Average hip angle inside the straight-line band means holding."""

    def __init__(self, thresholds: PlankThresholds = PlankThresholds()):
        self.thresholds = thresholds

    def measure(self, landmarks: Landmarks) -> Optional[float]:
        angles = _both_sides(hip_angle, landmarks)
        return float(np.mean(angles)) if angles else None

    def classify(self, angle: float, current: ExercisePhase) -> ExercisePhase:
        if self.thresholds.HIP_ANGLE_MIN < angle < self.thresholds.HIP_ANGLE_MAX:
            return P.HOLDING
        return P.STARTING


# -----------------------------------------------------------------------------
# Completion rules
# -----------------------------------------------------------------------------

class CompletionRule:
    """Never completes. Used for exercises without a motion model."""
    history_size = 1

    def is_complete(self, state: RepetitionState, history: Deque[ExercisePhase], now: float) -> bool:
        return False

    def reset(self):
        pass


class CycleCompletion(CompletionRule):
    """
    A rep is done when the recent history covers every phase of the cycle
    and the lifter is back at the anchor phase.
    """

    def __init__(self, phases: Tuple[ExercisePhase, ...]):
        self.required = frozenset(phases)
        self.anchor = phases[0]
        self.history_size = len(phases)

    def is_complete(self, state: RepetitionState, history: Deque[ExercisePhase], now: float) -> bool:
        if len(history) < self.history_size:
            return False
        recent = list(history)[-self.history_size:]
        return state.current_phase is self.anchor and self.required.issubset(recent)


class HoldCompletion(CompletionRule):
    """Time-based: continuous dwell in the hold phase for min_hold_seconds."""

    def __init__(self, min_hold_seconds: float = PlankThresholds.MIN_HOLD_TIME,
                 hold_phase: ExercisePhase = P.HOLDING):
        self.min_hold_ms = min_hold_seconds * 1000
        self.hold_phase = hold_phase
        self.hold_start: Optional[float] = None

    def is_complete(self, state: RepetitionState, history: Deque[ExercisePhase], now: float) -> bool:
        if state.current_phase is not self.hold_phase:
            self.hold_start = None
            return False
        if self.hold_start is None:
            self.hold_start = now
            return False
        if now - self.hold_start >= self.min_hold_ms:
            # Restart so each further full interval counts once
            self.hold_start = now
            return True
        return False

    def hold_duration(self, now: float) -> float:
        """Seconds held so far; 0 when not holding."""
        if self.hold_start is None:
            return 0.0
        return max(0.0, (now - self.hold_start) / 1000)

    def reset(self):
        self.hold_start = None


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

_CLASSIFIERS: Dict[ExerciseType, Callable[[], PhaseClassifier]] = {
    ExerciseType.SQUATS: SquatPhaseClassifier,
    ExerciseType.PUSH_UPS: PushUpPhaseClassifier,
    ExerciseType.LUNGES: LungePhaseClassifier,
    ExerciseType.PLANKS: PlankPhaseClassifier,
}

_HOLD_EXERCISES = {ExerciseType.PLANKS}


def create_motion_model(profile: ExerciseProfile) -> Tuple[PhaseClassifier, CompletionRule]:
    """Pick the classifier / completion pair for a profile's exercise type."""
    factory = _CLASSIFIERS.get(profile.exercise_type)
    if factory is None:
        logger.debug(f"No motion model for {profile.exercise_type.value}, using permissive default")
        return PhaseClassifier(), CompletionRule()
    if profile.exercise_type in _HOLD_EXERCISES:
        return factory(), HoldCompletion()
    return factory(), CycleCompletion(profile.phases)


# -----------------------------------------------------------------------------
# Detector
# -----------------------------------------------------------------------------

class PhaseDetector:
    """
    Per-session phase state machine and repetition counter.

    Feed it smoothed landmarks once per frame via update(); read the
    returned RepetitionState snapshot.
    """

    def __init__(self, profile: ExerciseProfile,
                 classifier: Optional[PhaseClassifier] = None,
                 completion: Optional[CompletionRule] = None,
                 timestamp: Optional[float] = None):
        self.profile = profile
        default_classifier, default_completion = create_motion_model(profile)
        self.classifier = classifier or default_classifier
        self.completion = completion or default_completion
        self._history: Deque[ExercisePhase] = deque(maxlen=max(self.completion.history_size, 1))
        self._state = RepetitionState(phase_start_time=_now_ms() if timestamp is None else timestamp)

    def update(self, landmarks: Landmarks, timestamp: Optional[float] = None) -> RepetitionState:
        """Advance one frame. timestamp is in milliseconds."""
        now = _now_ms() if timestamp is None else timestamp
        new_phase = self.classifier.next_phase(landmarks, self._state.current_phase)

        if new_phase is not self._state.current_phase:
            self._on_phase_change(new_phase, now)

        if self.completion.is_complete(self._state, self._history, now):
            self._state.rep_count += 1
            self._history.clear()
            logger.debug(f"{self.profile.exercise_type.value}: rep {self._state.rep_count} "
                         f"(set {self._state.set_count})")

        return self.state

    def _on_phase_change(self, new_phase: ExercisePhase, now: float):
        logger.debug(f"{self.profile.exercise_type.value} phase: "
                     f"{self._state.current_phase.value} -> {new_phase.value}")
        self._state.previous_phase = self._state.current_phase
        self._state.current_phase = new_phase
        self._state.phase_start_time = now
        self._history.append(new_phase)

    @property
    def state(self) -> RepetitionState:
        return replace(self._state)

    @property
    def rep_count(self) -> int:
        return self._state.rep_count

    @property
    def current_phase(self) -> ExercisePhase:
        return self._state.current_phase

    @property
    def phase_history(self) -> Tuple[ExercisePhase, ...]:
        return tuple(self._history)

    def hold_duration(self, timestamp: Optional[float] = None) -> float:
        """Seconds of continuous hold; always 0 for cyclic exercises."""
        if isinstance(self.completion, HoldCompletion):
            return self.completion.hold_duration(_now_ms() if timestamp is None else timestamp)
        return 0.0

    def next_set(self):
        """Start a new set. Phase and timestamps carry over."""
        self._state.set_count += 1
        self._state.rep_count = 0
        self._history.clear()

    def reset(self, timestamp: Optional[float] = None):
        self._state = RepetitionState(phase_start_time=_now_ms() if timestamp is None else timestamp)
        self._history.clear()
        self.completion.reset()
