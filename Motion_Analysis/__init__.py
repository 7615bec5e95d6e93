"""
Motion Analysis Module
Landmark smoothing, joint angles, exercise phase / repetition tracking and
per-frame form scoring.
"""

from .core.landmarks import Landmark, LandmarkName, Side
from .core.exercise import ExercisePhase, ExerciseProfile, ExerciseType, RepetitionState
from .core.smoothing import KeypointSmoother
from .core.phase_detector import PhaseDetector
from .core.form_analyzer import FormAnalyzer, FormAnalysisResult, FormError
from .core.session import ExerciseSession
from .config.exercise_library import ExerciseLibrary
