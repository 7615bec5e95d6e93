"""
Exercise Session
One user, one exercise: smooths each incoming frame, advances the phase
detector and scores form on the same smoothed landmarks, so raw coordinates
never reach a threshold.
"""

import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..config.thresholds import SmoothingDefaults
from ..utils.set_stats import SetScoreStats
from .exercise import ExerciseProfile, RepetitionState
from .form_analyzer import FormAnalysisResult, FormAnalyzer
from .landmarks import Landmark
from .phase_detector import PhaseDetector
from .smoothing import KeypointSmoother

logger = logging.getLogger(__name__)

_DEFAULTS = SmoothingDefaults()


@dataclass
class FrameResult:
    """Everything the core produces for one frame."""
    timestamp: float
    landmarks: List[Landmark]
    repetition: RepetitionState
    form: FormAnalysisResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'repetition': self.repetition.to_dict(),
            'form': self.form.to_dict(),
        }


@dataclass
class SetSummary:
    set_number: int
    completed_reps: int
    average_form_score: float
    duration_seconds: float
    error_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'set_number': self.set_number,
            'completed_reps': self.completed_reps,
            'average_form_score': self.average_form_score,
            'duration_seconds': self.duration_seconds,
            'error_counts': dict(self.error_counts),
        }


class ExerciseSession:
    """Per-frame pipeline: smoother -> phase detector + form analyzer."""

    def __init__(self, profile: ExerciseProfile,
                 process_noise: float = _DEFAULTS.PROCESS_NOISE,
                 measurement_noise: float = _DEFAULTS.MEASUREMENT_NOISE,
                 start_time: Optional[float] = None):
        self.profile = profile
        self.smoother = KeypointSmoother(process_noise, measurement_noise)
        self.detector = PhaseDetector(profile, timestamp=start_time)
        self.analyzer = FormAnalyzer()
        self._scores = SetScoreStats()
        self._error_counts: Counter = Counter()
        self._set_start: Optional[float] = start_time
        self._last_timestamp: Optional[float] = start_time

    def process_frame(self, landmarks: Sequence[Landmark],
                      timestamp: Optional[float] = None) -> FrameResult:
        """Run one frame of raw landmarks through the pipeline. timestamp in ms."""
        now = time.time() * 1000 if timestamp is None else timestamp
        if self._set_start is None:
            self._set_start = now
        self._last_timestamp = now

        smoothed = self.smoother.smooth_landmarks(landmarks)
        repetition = self.detector.update(smoothed, now)
        form = self.analyzer.analyze(self.profile, smoothed, repetition.current_phase, now)

        if form.measured_joints:
            self._scores.add(form.score)
        self._error_counts.update(e.error_type for e in form.errors)
        return FrameResult(now, smoothed, repetition, form)

    def summary(self) -> SetSummary:
        """Running summary of the current set."""
        state = self.detector.state
        duration = 0.0
        if self._set_start is not None and self._last_timestamp is not None:
            duration = (self._last_timestamp - self._set_start) / 1000
        return SetSummary(
            set_number=state.set_count,
            completed_reps=state.rep_count,
            average_form_score=round(self._scores.mean, 2) if self._scores.count else 0.0,
            duration_seconds=round(duration, 3),
            error_counts=dict(self._error_counts),
        )

    def next_set(self) -> SetSummary:
        """Close the current set, return its summary, and start counting the next."""
        finished = self.summary()
        logger.info(f"{self.profile.exercise_type.value}: set {finished.set_number} done, "
                    f"{finished.completed_reps} reps, avg score {finished.average_form_score}")
        self.detector.next_set()
        self._scores.reset()
        self._error_counts.clear()
        self._set_start = self._last_timestamp
        return finished

    def reset(self, timestamp: Optional[float] = None):
        self.smoother.reset()
        self.detector.reset(timestamp)
        self._scores.reset()
        self._error_counts.clear()
        self._set_start = timestamp
        self._last_timestamp = timestamp
