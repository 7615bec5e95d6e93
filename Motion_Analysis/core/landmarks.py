"""
Landmark Types
Closed 33-point body vocabulary (MediaPipe Pose order) and the per-frame
landmark record consumed by the analysis core.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union


class LandmarkName(Enum):
    """Named body points, declared in MediaPipe Pose index order."""
    NOSE = "nose"
    LEFT_EYE_INNER = "left_eye_inner"
    LEFT_EYE = "left_eye"
    LEFT_EYE_OUTER = "left_eye_outer"
    RIGHT_EYE_INNER = "right_eye_inner"
    RIGHT_EYE = "right_eye"
    RIGHT_EYE_OUTER = "right_eye_outer"
    LEFT_EAR = "left_ear"
    RIGHT_EAR = "right_ear"
    MOUTH_LEFT = "mouth_left"
    MOUTH_RIGHT = "mouth_right"
    LEFT_SHOULDER = "left_shoulder"
    RIGHT_SHOULDER = "right_shoulder"
    LEFT_ELBOW = "left_elbow"
    RIGHT_ELBOW = "right_elbow"
    LEFT_WRIST = "left_wrist"
    RIGHT_WRIST = "right_wrist"
    LEFT_PINKY = "left_pinky"
    RIGHT_PINKY = "right_pinky"
    LEFT_INDEX = "left_index"
    RIGHT_INDEX = "right_index"
    LEFT_THUMB = "left_thumb"
    RIGHT_THUMB = "right_thumb"
    LEFT_HIP = "left_hip"
    RIGHT_HIP = "right_hip"
    LEFT_KNEE = "left_knee"
    RIGHT_KNEE = "right_knee"
    LEFT_ANKLE = "left_ankle"
    RIGHT_ANKLE = "right_ankle"
    LEFT_HEEL = "left_heel"
    RIGHT_HEEL = "right_heel"
    LEFT_FOOT_INDEX = "left_foot_index"
    RIGHT_FOOT_INDEX = "right_foot_index"

    @property
    def index(self) -> int:
        return _INDEX[self]

    @classmethod
    def parse(cls, name: Union["LandmarkName", str]) -> "LandmarkName":
        """Accept an enum member or its string value ("left_knee")."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown landmark name: {name!r}") from None


_INDEX: Dict[LandmarkName, int] = {name: i for i, name in enumerate(LandmarkName)}
LANDMARK_COUNT = len(_INDEX)


class Side(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class Landmark:
    """A single body point. x, y normalized to [0, 1]; z is optional depth."""
    name: LandmarkName
    x: float
    y: float
    z: Optional[float] = None
    visibility: float = 1.0

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def moved_to(self, x: float, y: float, z: Optional[float] = None) -> "Landmark":
        """Copy with new coordinates; identity and visibility are kept."""
        return replace(self, x=x, y=y, z=z)

    def to_dict(self) -> Dict[str, object]:
        return {
            'name': self.name.value,
            'x': self.x,
            'y': self.y,
            'z': self.z,
            'visibility': self.visibility,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Landmark":
        z = data.get('z')
        return cls(
            name=LandmarkName.parse(data['name']),
            x=float(data['x']),
            y=float(data['y']),
            z=float(z) if z is not None else None,
            visibility=float(data.get('visibility', 1.0)),
        )


Landmarks = Union[Sequence[Landmark], Mapping[LandmarkName, Landmark]]


def find_landmark(landmarks: Landmarks, name: Union[LandmarkName, str]) -> Optional[Landmark]:
    """Look up a landmark by identity in a frame (list or name-keyed mapping)."""
    key = LandmarkName.parse(name)
    if isinstance(landmarks, Mapping):
        return landmarks.get(key)
    for landmark in landmarks:
        if landmark.name is key:
            return landmark
    return None


def index_landmarks(landmarks: Sequence[Landmark]) -> Dict[LandmarkName, Landmark]:
    """Key a frame by landmark identity. Later duplicates win."""
    return {landmark.name: landmark for landmark in landmarks}
