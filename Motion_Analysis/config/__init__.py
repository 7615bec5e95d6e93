"""Thresholds and the exercise profile dataset."""
from .thresholds import THRESHOLDS, VISIBILITY_FLOOR
from .exercise_library import ExerciseLibrary, profile_from_dict
