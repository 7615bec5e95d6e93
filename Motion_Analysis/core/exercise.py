"""
Exercise Types
Exercise identities, motion phases, immutable per-exercise profiles and the
repetition state reported by the phase detector.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class ExerciseType(Enum):
    SQUATS = "squats"
    PUSH_UPS = "push_ups"
    LUNGES = "lunges"
    PLANKS = "planks"
    DEADLIFTS = "deadlifts"
    BURPEES = "burpees"
    JUMPING_JACKS = "jumping_jacks"
    CUSTOM = "custom"


class ExercisePhase(Enum):
    """Discrete stages of a motion cycle. Each profile uses its own subset."""
    STARTING = "starting"
    DESCENDING = "descending"
    BOTTOM = "bottom"
    ASCENDING = "ascending"
    TOP = "top"
    HOLDING = "holding"
    RETURNING = "returning"


class Difficulty(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


# -----------------------------------------------------------------------------
# Profiles
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AngleRange:
    """Acceptable range and target for one joint angle, in degrees."""
    min: float
    max: float
    ideal: float

    def __post_init__(self):
        if not self.min <= self.ideal <= self.max:
            raise ValueError(f"ideal {self.ideal} outside [{self.min}, {self.max}]")


@dataclass(frozen=True)
class ExerciseProfile:
    """Static configuration for one exercise. Loaded once, never mutated."""
    exercise_type: ExerciseType
    name: str
    key_angles: Mapping[str, AngleRange] = field(default_factory=dict)
    phases: Tuple[ExercisePhase, ...] = (ExercisePhase.STARTING,)
    description: str = ""
    difficulty: Difficulty = Difficulty.BEGINNER
    target_muscles: Tuple[str, ...] = ()
    instructions: Tuple[str, ...] = ()

    def __post_init__(self):
        # Freeze the containers too, not just the attributes
        object.__setattr__(self, 'key_angles', MappingProxyType(dict(self.key_angles)))
        object.__setattr__(self, 'phases', tuple(self.phases))
        object.__setattr__(self, 'target_muscles', tuple(self.target_muscles))
        object.__setattr__(self, 'instructions', tuple(self.instructions))
        if not self.phases:
            raise ValueError(f"{self.exercise_type.value}: at least one phase is required")

    def __hash__(self):
        # key_angles is a mappingproxy and cannot be hashed
        return hash((self.exercise_type, self.name))

    @property
    def anchor_phase(self) -> ExercisePhase:
        """First phase of the cycle; a repetition ends when it is reached again."""
        return self.phases[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.exercise_type.value,
            'name': self.name,
            'description': self.description,
            'difficulty': self.difficulty.value,
            'target_muscles': list(self.target_muscles),
            'instructions': list(self.instructions),
            'key_angles': {
                joint: {'min': r.min, 'max': r.max, 'ideal': r.ideal}
                for joint, r in self.key_angles.items()
            },
            'phases': [p.value for p in self.phases],
        }


# -----------------------------------------------------------------------------
# Repetition state
# -----------------------------------------------------------------------------

@dataclass
class RepetitionState:
    """Phase and counters for one exercise session. Timestamps in ms."""
    current_phase: ExercisePhase = ExercisePhase.STARTING
    previous_phase: Optional[ExercisePhase] = None
    rep_count: int = 0
    set_count: int = 1
    is_valid_rep: bool = True
    phase_start_time: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current_phase': self.current_phase.value,
            'previous_phase': self.previous_phase.value if self.previous_phase else None,
            'rep_count': self.rep_count,
            'set_count': self.set_count,
            'is_valid_rep': self.is_valid_rep,
            'phase_start_time': self.phase_start_time,
        }
