"""Shared landmark builders for the test suite."""

import math

import pytest

from Motion_Analysis.config.exercise_library import ExerciseLibrary
from Motion_Analysis.core.landmarks import Landmark, LandmarkName


def three_point(first, vertex, last, angle, origin=(0.5, 0.5), arm=0.2, visibility=1.0):
    """
    Three landmarks whose angle at `vertex` is `angle` degrees.

    `first` sits straight above the vertex; `last` is rotated from that ray.
    """
    ox, oy = origin
    theta = math.radians(angle)
    return [
        Landmark(LandmarkName.parse(first), ox, oy - arm, visibility=visibility),
        Landmark(LandmarkName.parse(vertex), ox, oy, visibility=visibility),
        Landmark(LandmarkName.parse(last), ox + arm * math.sin(theta), oy - arm * math.cos(theta),
                 visibility=visibility),
    ]


def both_sides(first, vertex, last, left_angle, right_angle=None, visibility=1.0):
    right_angle = left_angle if right_angle is None else right_angle
    return (three_point(f"left_{first}", f"left_{vertex}", f"left_{last}", left_angle,
                        origin=(0.4, 0.5), visibility=visibility)
            + three_point(f"right_{first}", f"right_{vertex}", f"right_{last}", right_angle,
                          origin=(0.6, 0.5), visibility=visibility))


def knee_frame(left, right=None, visibility=1.0):
    return both_sides('hip', 'knee', 'ankle', left, right, visibility)


def elbow_frame(left, right=None, visibility=1.0):
    return both_sides('shoulder', 'elbow', 'wrist', left, right, visibility)


def hip_frame(left, right=None, visibility=1.0):
    return both_sides('shoulder', 'hip', 'knee', left, right, visibility)


@pytest.fixture(scope="session")
def library():
    return ExerciseLibrary.default()
