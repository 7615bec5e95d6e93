"""
Exercise Library
Loads immutable ExerciseProfiles from a JSON dataset. The bundled dataset
lives in Motion_Analysis/data/exercise_profiles.json; tests and callers can
inject their own profiles instead.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..core.exercise import AngleRange, Difficulty, ExercisePhase, ExerciseProfile, ExerciseType

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants
# -----------------------------------------------------------------------------

_PROFILES_FILE = Path(__file__).parent.parent / "data" / "exercise_profiles.json"

_CUSTOM_FALLBACK = ExerciseProfile(
    exercise_type=ExerciseType.CUSTOM,
    name="Custom Exercise",
    description="User-defined exercise with custom motion pattern.",
)


def profile_from_dict(exercise_type: str, data: Mapping[str, Any]) -> ExerciseProfile:
    """Build one profile from its JSON entry. Raises ValueError on bad data."""
    try:
        return ExerciseProfile(
            exercise_type=ExerciseType(exercise_type),
            name=data['name'],
            description=data.get('description', ''),
            difficulty=Difficulty(data.get('difficulty', 'beginner')),
            target_muscles=data.get('target_muscles', ()),
            instructions=data.get('instructions', ()),
            key_angles={
                joint: AngleRange(float(r['min']), float(r['max']), float(r['ideal']))
                for joint, r in data.get('key_angles', {}).items()
            },
            phases=[ExercisePhase(p) for p in data.get('phases', ['starting'])],
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid exercise profile {exercise_type!r}: {e}") from e


class ExerciseLibrary:
    """Read-only lookup of exercise profiles by type."""

    def __init__(self, profiles: Iterable[ExerciseProfile]):
        self._profiles: Dict[ExerciseType, ExerciseProfile] = {
            p.exercise_type: p for p in profiles
        }

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "ExerciseLibrary":
        p = Path(path)
        with open(p, encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"{p}: expected an object keyed by exercise type")
        library = cls(profile_from_dict(key, entry) for key, entry in raw.items())
        logger.info(f"Loaded {len(library)} exercise profiles from {p}")
        return library

    @classmethod
    def default(cls) -> "ExerciseLibrary":
        return cls.from_json(_PROFILES_FILE)

    def get(self, exercise_type: Union[ExerciseType, str]) -> ExerciseProfile:
        """Profile for a type; unknown types degrade to the custom profile."""
        try:
            key = ExerciseType(exercise_type)
        except ValueError:
            key = None
        profile = self._profiles.get(key) if key else None
        if profile is None:
            logger.warning(f"Unknown exercise type: {exercise_type}, using custom profile")
            return self._profiles.get(ExerciseType.CUSTOM, _CUSTOM_FALLBACK)
        return profile

    def all(self) -> List[ExerciseProfile]:
        return [p for t, p in self._profiles.items() if t is not ExerciseType.CUSTOM]

    def types(self) -> List[ExerciseType]:
        return list(self._profiles)

    def by_difficulty(self, difficulty: Union[Difficulty, str]) -> List[ExerciseProfile]:
        level = Difficulty(difficulty)
        return [p for p in self.all() if p.difficulty is level]

    def by_muscle_group(self, muscle_group: str) -> List[ExerciseProfile]:
        return [p for p in self.all() if muscle_group in p.target_muscles]

    def __contains__(self, exercise_type: Optional[Union[ExerciseType, str]]) -> bool:
        try:
            return ExerciseType(exercise_type) in self._profiles
        except ValueError:
            return False

    def __len__(self) -> int:
        return len(self._profiles)
