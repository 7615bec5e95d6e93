"""
Form Analysis Module
Stateless per-frame posture scoring. Compares each configured joint angle
with its profile range, runs exercise-specific relational checks (knees past
toes, hip line), and produces a 0-100 score, per-joint traffic-light status
and coaching messages.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from ..config.thresholds import FormFeedbackThresholds
from .angles import named_joint_angle, parse_joint_name, visible_landmark
from .exercise import AngleRange, ExercisePhase, ExerciseProfile, ExerciseType
from .landmarks import Landmarks, Side

logger = logging.getLogger(__name__)

# Score reported when no configured joint could be measured
NO_MEASUREMENT_SCORE = 100.0


# -----------------------------------------------------------------------------
# Enums & Data Classes
# -----------------------------------------------------------------------------

class Severity(Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    MAJOR = "major"


class JointStatus(Enum):
    """Traffic-light classification of a joint for the renderer."""
    CORRECT = "correct"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def color(self) -> str:
        return JOINT_COLORS[self]


_FEEDBACK = FormFeedbackThresholds()

JOINT_COLORS = {
    JointStatus.CORRECT: _FEEDBACK.COLOR_CORRECT,
    JointStatus.MINOR: _FEEDBACK.COLOR_MINOR_ERROR,
    JointStatus.MAJOR: _FEEDBACK.COLOR_MAJOR_ERROR,
}


@dataclass
class FormError:
    """A posture problem found in one frame."""
    timestamp: float
    error_type: str
    severity: Severity
    message: str
    affected_joints: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'timestamp': self.timestamp,
            'error_type': self.error_type,
            'severity': self.severity.value,
            'message': self.message,
            'affected_joints': list(self.affected_joints),
        }


@dataclass
class FormAnalysisResult:
    """Per-frame form verdict. No history is kept between frames."""
    is_correct: bool
    score: float
    errors: List[FormError]
    joint_status: Dict[str, JointStatus]
    feedback: List[str]
    measured_joints: int = 0

    @property
    def joint_colors(self) -> Dict[str, str]:
        return {joint: status.color for joint, status in self.joint_status.items()}

    @property
    def severity_score(self) -> int:
        """Worst error severity (0 = none, 1 = minor, 2 = moderate, 3 = major)."""
        ranks = {Severity.MINOR: 1, Severity.MODERATE: 2, Severity.MAJOR: 3}
        return max((ranks[e.severity] for e in self.errors), default=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_correct': self.is_correct,
            'score': self.score,
            'errors': [e.to_dict() for e in self.errors],
            'joint_status': {joint: s.value for joint, s in self.joint_status.items()},
            'feedback': list(self.feedback),
            'measured_joints': self.measured_joints,
        }


# -----------------------------------------------------------------------------
# Coaching messages
# -----------------------------------------------------------------------------

DEFAULT_MESSAGE = 'Adjust your position'


def error_message(exercise_type: ExerciseType, joint_name: str, angle: float, angle_range: AngleRange) -> str:
    """Coaching text keyed by exercise, joint, side and sign of the deviation."""
    side, joint = parse_joint_name(joint_name)
    above_ideal = angle > angle_range.ideal

    if exercise_type is ExerciseType.SQUATS:
        if joint == 'knee':
            return 'Go deeper - squat down more' if above_ideal else 'Good depth! Keep it up'
        if joint == 'hip':
            return 'Keep your back straight'
    elif exercise_type is ExerciseType.PUSH_UPS:
        if joint == 'elbow':
            return 'Lower your chest closer to the ground' if above_ideal else 'Good depth!'
        if joint == 'shoulder':
            return 'Keep your body in a straight line'
    elif exercise_type is ExerciseType.LUNGES:
        if joint == 'knee':
            if side is Side.LEFT:
                return 'Front knee should be at 90 degrees'
            return 'Back knee should lower towards ground'
    elif exercise_type is ExerciseType.PLANKS:
        if joint == 'hip':
            if angle < angle_range.ideal:
                return 'Raise your hips - avoid sagging'
            return 'Lower your hips slightly'

    return DEFAULT_MESSAGE


# -----------------------------------------------------------------------------
# Analyzer
# -----------------------------------------------------------------------------

class FormAnalyzer:
    """
    Per-frame form scorer.

    Joint checks, in order: missing (status minor, not scored), outside
    [min, max] with the bounds themselves counted as outside (major), more
    than MAJOR_ANGLE_DEVIATION off ideal (moderate), more than
    MINOR_ANGLE_DEVIATION off ideal (minor, message not surfaced), else
    correct.
    """

    def __init__(self, thresholds: FormFeedbackThresholds = _FEEDBACK):
        self.thresholds = thresholds

    def analyze(self, profile: ExerciseProfile, landmarks: Landmarks,
                phase: Optional[ExercisePhase] = None,
                timestamp: Optional[float] = None) -> FormAnalysisResult:
        """Score one frame of smoothed landmarks against a profile."""
        now = time.time() * 1000 if timestamp is None else timestamp
        errors: List[FormError] = []
        joint_status: Dict[str, JointStatus] = {}
        feedback: List[str] = []
        deviations: List[float] = []

        for joint_name, angle_range in profile.key_angles.items():
            angle = named_joint_angle(landmarks, joint_name)
            if angle is None:
                joint_status[joint_name] = JointStatus.MINOR
                continue

            deviation = abs(angle - angle_range.ideal)
            deviations.append(deviation)
            status, error = self._check_joint(profile.exercise_type, joint_name, angle,
                                              angle_range, deviation, now)
            joint_status[joint_name] = status
            if error is not None:
                errors.append(error)
                if error.severity is not Severity.MINOR:
                    feedback.append(error.message)

        if deviations:
            score = float(np.clip(100 - np.mean(deviations), 0, 100))
        else:
            score = NO_MEASUREMENT_SCORE

        for error in self._relational_checks(profile.exercise_type, landmarks, now):
            errors.append(error)
            feedback.append(error.message)

        is_correct = all(e.severity is Severity.MINOR for e in errors)
        if errors:
            logger.debug(f"{profile.exercise_type.value} [{phase.value if phase else '-'}]: "
                         f"{len(errors)} form errors, score {score:.1f}")

        return FormAnalysisResult(
            is_correct=is_correct,
            score=score,
            errors=errors,
            joint_status=joint_status,
            feedback=list(dict.fromkeys(feedback)),
            measured_joints=len(deviations),
        )

    def _check_joint(self, exercise_type: ExerciseType, joint_name: str, angle: float,
                     angle_range: AngleRange, deviation: float,
                     now: float) -> Tuple[JointStatus, Optional[FormError]]:
        if angle <= angle_range.min or angle >= angle_range.max:
            tag, severity, status = 'out_of_range', Severity.MAJOR, JointStatus.MAJOR
        elif deviation > self.thresholds.MAJOR_ANGLE_DEVIATION:
            tag, severity, status = 'major_deviation', Severity.MODERATE, JointStatus.MAJOR
        elif deviation > self.thresholds.MINOR_ANGLE_DEVIATION:
            tag, severity, status = 'minor_deviation', Severity.MINOR, JointStatus.MINOR
        else:
            return JointStatus.CORRECT, None

        return status, FormError(
            timestamp=now,
            error_type=f"{joint_name}_{tag}",
            severity=severity,
            message=error_message(exercise_type, joint_name, angle, angle_range),
            affected_joints=[joint_name],
        )

    # -------------------------------------------------------------------------
    # Relational checks
    # -------------------------------------------------------------------------

    def _relational_checks(self, exercise_type: ExerciseType, landmarks: Landmarks,
                           now: float) -> List[FormError]:
        if exercise_type is ExerciseType.SQUATS:
            return self._check_knees_over_toes(landmarks, now)
        if exercise_type is ExerciseType.PUSH_UPS:
            return self._check_hip_line(
                landmarks, now, self.thresholds.PUSH_UP_HIP_LINE_MARGIN,
                sag=(Severity.MAJOR, 'Keep your back straight - engage core'),
                pike=(Severity.MAJOR, 'Keep your back straight - engage core'))
        if exercise_type is ExerciseType.PLANKS:
            return self._check_hip_line(
                landmarks, now, self.thresholds.PLANK_HIP_LINE_MARGIN,
                sag=(Severity.MAJOR, 'Raise your hips - engage your core'),
                pike=(Severity.MODERATE, 'Lower your hips slightly'))
        return []

    def _check_knees_over_toes(self, landmarks: Landmarks, now: float) -> List[FormError]:
        offending = []
        for side in Side:
            knee = visible_landmark(landmarks, f"{side.value}_knee")
            ankle = visible_landmark(landmarks, f"{side.value}_ankle")
            if knee and ankle and knee.x > ankle.x + self.thresholds.KNEE_OVER_TOE_MARGIN:
                offending.append(f"{side.value}_knee")
        if not offending:
            return []
        return [FormError(now, 'knees_over_toes', Severity.MAJOR, 'Keep knees behind toes', offending)]

    @staticmethod
    def hip_line_offset(landmarks: Landmarks, side: Side = Side.LEFT) -> Optional[float]:
        """
        Vertical offset of the hip from the shoulder-ankle line at the hip's x.

        Positive means the hip sits below the line (image y grows downward).
        """
        shoulder = visible_landmark(landmarks, f"{side.value}_shoulder")
        hip = visible_landmark(landmarks, f"{side.value}_hip")
        ankle = visible_landmark(landmarks, f"{side.value}_ankle")
        if not (shoulder and hip and ankle):
            return None
        dx = ankle.x - shoulder.x
        if abs(dx) < 1e-6:
            expected_y = (shoulder.y + ankle.y) / 2
        else:
            t = (hip.x - shoulder.x) / dx
            expected_y = shoulder.y + t * (ankle.y - shoulder.y)
        return hip.y - expected_y

    def _check_hip_line(self, landmarks: Landmarks, now: float, margin: float,
                        sag: Tuple[Severity, str], pike: Tuple[Severity, str]) -> List[FormError]:
        offset = self.hip_line_offset(landmarks)
        if offset is None:
            return []
        joints = ['left_hip', 'right_hip']
        if offset > margin:
            severity, message = sag
            return [FormError(now, 'hips_sagging', severity, message, joints)]
        if offset < -margin:
            severity, message = pike
            return [FormError(now, 'hips_too_high', severity, message, joints)]
        return []
