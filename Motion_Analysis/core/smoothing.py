"""
Keypoint Smoothing Module
Suppresses per-frame landmark jitter with one scalar Kalman filter per
(landmark, axis). The filter bank is a fixed-size list indexed by the
landmark vocabulary, allocated once per session.
"""

from typing import List, Optional, Sequence, Tuple, Union

from ..config.thresholds import SmoothingDefaults
from ..utils.kalman_filter import KeypointFilter
from .landmarks import LANDMARK_COUNT, Landmark, LandmarkName

_DEFAULTS = SmoothingDefaults()


class KeypointSmoother:
    """
    Bank of per-landmark Kalman filters.

    Axes are filtered independently with a constant-position model; the gain
    decays as each filter grows confident, and a reset restores full
    responsiveness (e.g. after an occlusion).
    """

    def __init__(self, process_noise: float = _DEFAULTS.PROCESS_NOISE,
                 measurement_noise: float = _DEFAULTS.MEASUREMENT_NOISE):
        self.process_noise = process_noise
        self.measurement_noise = measurement_noise
        self._filters: List[KeypointFilter] = [
            KeypointFilter(process_noise, measurement_noise) for _ in range(LANDMARK_COUNT)
        ]

    def smooth(self, name: Union[LandmarkName, str], x: float, y: float,
               z: Optional[float] = None) -> Tuple[float, float, Optional[float]]:
        """Filter one landmark's coordinates and return the smoothed (x, y, z)."""
        return self._filters[LandmarkName.parse(name).index].update(x, y, z)

    def smooth_landmarks(self, landmarks: Sequence[Landmark]) -> List[Landmark]:
        """Smooth a whole frame. Identity and visibility pass through untouched."""
        return [lm.moved_to(*self.smooth(lm.name, lm.x, lm.y, lm.z)) for lm in landmarks]

    def is_tracking(self, name: Union[LandmarkName, str]) -> bool:
        return self._filters[LandmarkName.parse(name).index].initialized

    def reset(self):
        """Reset every filter; the next sample per landmark seeds it again."""
        for f in self._filters:
            f.reset()

    def reset_one(self, name: Union[LandmarkName, str]):
        self._filters[LandmarkName.parse(name).index].reset()
