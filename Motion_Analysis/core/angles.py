"""
Angle Engine
Three-point joint angles and planar geometry helpers shared by the phase
detector and the form analyzer, so both agree on what "the knee angle" is.
"""

from typing import Optional, Sequence, Tuple, Union

import numpy as np

from ..config.thresholds import VISIBILITY_FLOOR
from .landmarks import Landmark, LandmarkName, Landmarks, Side, find_landmark

Point = Union[Tuple[float, float], Sequence[float]]

# Anatomical triples (first, vertex, last) per joint
JOINT_TRIPLES = {
    'knee': ('hip', 'knee', 'ankle'),
    'elbow': ('shoulder', 'elbow', 'wrist'),
    'hip': ('shoulder', 'hip', 'knee'),
    'shoulder': ('hip', 'shoulder', 'elbow'),
}


# -----------------------------------------------------------------------------
# Geometry
# -----------------------------------------------------------------------------

def angle_at(a: Point, b: Point, c: Point) -> float:
    """Angle at vertex b between rays b->a and b->c, in degrees [0, 180]."""
    radians = np.arctan2(c[1] - b[1], c[0] - b[0]) - np.arctan2(a[1] - b[1], a[0] - b[0])
    angle = abs(float(np.degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle


def distance(p1: Point, p2: Point) -> float:
    return float(np.hypot(p2[0] - p1[0], p2[1] - p1[1]))


def slope(p1: Point, p2: Point) -> float:
    """Slope of the line p1->p2; inf for a vertical line."""
    if p2[0] == p1[0]:
        return float('inf')
    return (p2[1] - p1[1]) / (p2[0] - p1[0])


def point_to_segment_distance(point: Point, start: Point, end: Point) -> float:
    """Shortest distance from point to the segment start-end."""
    seg = np.array([end[0] - start[0], end[1] - start[1]], dtype=float)
    rel = np.array([point[0] - start[0], point[1] - start[1]], dtype=float)
    len_sq = float(seg @ seg)
    t = float(np.clip(rel @ seg / len_sq, 0.0, 1.0)) if len_sq > 0 else 0.0
    return float(np.linalg.norm(rel - t * seg))


def is_point_near_line(point: Point, start: Point, end: Point, threshold: float) -> bool:
    return point_to_segment_distance(point, start, end) <= threshold


# -----------------------------------------------------------------------------
# Landmark angles
# -----------------------------------------------------------------------------

def visible_landmark(landmarks: Landmarks, name: Union[LandmarkName, str]) -> Optional[Landmark]:
    """Landmark if present and above the visibility floor, else None."""
    landmark = find_landmark(landmarks, name)
    if landmark is None or landmark.visibility < VISIBILITY_FLOOR:
        return None
    return landmark


def joint_angle(landmarks: Landmarks, name_a, name_b, name_c) -> Optional[float]:
    """Angle at name_b, or None if any of the three points is missing or low-confidence."""
    points = [visible_landmark(landmarks, name) for name in (name_a, name_b, name_c)]
    if any(p is None for p in points):
        return None
    a, b, c = points
    return angle_at(a.position, b.position, c.position)


def _side_angle(landmarks: Landmarks, joint: str, side) -> Optional[float]:
    side = Side(side).value
    first, vertex, last = JOINT_TRIPLES[joint]
    return joint_angle(landmarks, f"{side}_{first}", f"{side}_{vertex}", f"{side}_{last}")


def knee_angle(landmarks: Landmarks, side) -> Optional[float]:
    """Hip-knee-ankle."""
    return _side_angle(landmarks, 'knee', side)


def elbow_angle(landmarks: Landmarks, side) -> Optional[float]:
    """Shoulder-elbow-wrist."""
    return _side_angle(landmarks, 'elbow', side)


def hip_angle(landmarks: Landmarks, side) -> Optional[float]:
    """Shoulder-hip-knee."""
    return _side_angle(landmarks, 'hip', side)


def shoulder_angle(landmarks: Landmarks, side) -> Optional[float]:
    """Hip-shoulder-elbow."""
    return _side_angle(landmarks, 'shoulder', side)


def parse_joint_name(joint_name: str) -> Tuple[Optional[Side], str]:
    """Split a profile key such as "left_knee" into (Side.LEFT, "knee")."""
    side, _, joint = joint_name.partition('_')
    try:
        return Side(side), joint
    except ValueError:
        return None, joint_name


def named_joint_angle(landmarks: Landmarks, joint_name: str) -> Optional[float]:
    """Resolve a "<side>_<joint>" key; unknown joints are reported as missing."""
    side, joint = parse_joint_name(joint_name)
    if side is None or joint not in JOINT_TRIPLES:
        return None
    return _side_angle(landmarks, joint, side)
