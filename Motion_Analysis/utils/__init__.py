"""Utility modules for signal processing."""
from .kalman_filter import KalmanFilter1D, KeypointFilter
from .set_stats import SetScoreStats
