"""Kalman Filter for landmark smoothing."""

from typing import Optional, Tuple


class KalmanFilter1D:
    """
    Scalar Kalman filter with a constant-position model.

    The first measurement seeds the estimate directly, so there is no
    start-up lag; later measurements are blended by the Kalman gain.
    """

    def __init__(self, process_variance: float = 0.01, measurement_variance: float = 0.1):
        if process_variance <= 0 or measurement_variance <= 0:
            raise ValueError("process and measurement variance must be positive")
        self.Q, self.R = process_variance, measurement_variance
        self.x, self.P, self.K = 0.0, 1.0, 0.0
        self.initialized = False

    def update(self, measurement: float) -> float:
        if not self.initialized:
            self.x = measurement
            self.initialized = True
            return self.x
        self.P = self.P + self.Q
        self.K = self.P / (self.P + self.R)
        self.x = self.x + self.K * (measurement - self.x)
        self.P = (1 - self.K) * self.P
        return self.x

    def reset(self):
        self.x, self.P, self.K = 0.0, 1.0, 0.0
        self.initialized = False


class KeypointFilter:
    """Independent 1D filters for a keypoint's x, y and optional z."""

    def __init__(self, process_variance: float = 0.01, measurement_variance: float = 0.1):
        self.filter_x = KalmanFilter1D(process_variance, measurement_variance)
        self.filter_y = KalmanFilter1D(process_variance, measurement_variance)
        self.filter_z = KalmanFilter1D(process_variance, measurement_variance)

    def update(self, x: float, y: float, z: Optional[float] = None) -> Tuple[float, float, Optional[float]]:
        return (self.filter_x.update(x), self.filter_y.update(y),
                self.filter_z.update(z) if z is not None else None)

    @property
    def initialized(self) -> bool:
        return self.filter_x.initialized

    def reset(self):
        self.filter_x.reset()
        self.filter_y.reset()
        self.filter_z.reset()
