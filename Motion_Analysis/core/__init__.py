"""Core analysis algorithms."""
from .landmarks import Landmark, LandmarkName, Side, find_landmark, index_landmarks
from .angles import angle_at, joint_angle, knee_angle, elbow_angle, hip_angle, shoulder_angle, named_joint_angle
from .exercise import AngleRange, Difficulty, ExercisePhase, ExerciseProfile, ExerciseType, RepetitionState
from .smoothing import KeypointSmoother
from .phase_detector import PhaseDetector, PhaseClassifier, CompletionRule, CycleCompletion, HoldCompletion
from .form_analyzer import FormAnalyzer, FormAnalysisResult, FormError, JointStatus, Severity
from .session import ExerciseSession, FrameResult, SetSummary
