"""
Exercise Thresholds & Reference Values
Phase band edges, form-deviation limits and smoothing defaults used
throughout the motion core.

Angles are in degrees, positional margins in normalized image units.
"""

from dataclasses import dataclass


# Landmarks below this visibility are treated as missing. Not exercise-specific.
VISIBILITY_FLOOR = 0.5


@dataclass(frozen=True)
class SquatThresholds:
    """
    Average knee angle (hip-knee-ankle) bands.

    Standing is a near-locked knee; 90° marks thighs parallel to the floor.
    """
    STANDING: float = 160.0
    DEPTH_THRESHOLD: float = 90.0


@dataclass(frozen=True)
class PushUpThresholds:
    """Average elbow angle (shoulder-elbow-wrist) bands."""
    TOP: float = 160.0
    DEPTH_THRESHOLD: float = 90.0


@dataclass(frozen=True)
class LungeThresholds:
    """
    Front knee (smaller of the two knee angles) bands.

    RETURN_THRESHOLD splits the upward half of the ambiguous band: below it
    the lifter is still ascending, at or above it they are returning to stand.
    """
    STANDING: float = 160.0
    DEPTH_THRESHOLD: float = 100.0
    RETURN_THRESHOLD: float = 130.0


@dataclass(frozen=True)
class PlankThresholds:
    """
    Average hip angle (shoulder-hip-knee) band for a straight body line.

    The band is exclusive at both edges.
    """
    HIP_ANGLE_MIN: float = 160.0
    HIP_ANGLE_MAX: float = 200.0
    MIN_HOLD_TIME: float = 10.0  # seconds


@dataclass(frozen=True)
class FormFeedbackThresholds:
    """Per-joint deviation limits and relational posture margins."""
    MINOR_ANGLE_DEVIATION: float = 10.0
    MAJOR_ANGLE_DEVIATION: float = 20.0

    KNEE_OVER_TOE_MARGIN: float = 0.05
    PUSH_UP_HIP_LINE_MARGIN: float = 0.1
    PLANK_HIP_LINE_MARGIN: float = 0.05

    COLOR_CORRECT: str = '#00FF00'
    COLOR_MINOR_ERROR: str = '#FFFF00'
    COLOR_MAJOR_ERROR: str = '#FF0000'


@dataclass(frozen=True)
class SmoothingDefaults:
    """
    Keypoint filter tuning.

    Lower process noise gives smoother but laggier estimates; higher
    measurement noise makes the filter trust its prediction over new samples.
    """
    PROCESS_NOISE: float = 0.01
    MEASUREMENT_NOISE: float = 0.1


# Aggregate all thresholds
THRESHOLDS = {
    'squats': SquatThresholds(),
    'push_ups': PushUpThresholds(),
    'lunges': LungeThresholds(),
    'planks': PlankThresholds(),
    'form': FormFeedbackThresholds(),
    'smoothing': SmoothingDefaults(),
}
