"""
Shared fixtures for building synthetic capture exports.
"""

import math

import pytest

from pitchmechanics.data.skeleton import JOINT_NAMES

IDENTITY = (0.0, 0.0, 0.0, 1.0)


def yaw_quaternion(degrees):
    """Quaternion (x, y, z, w) for a rotation of ``degrees`` about z."""
    half = math.radians(degrees) / 2.0
    return (0.0, 0.0, math.sin(half), math.cos(half))


def center_values(frame=0, values_per_joint=3):
    """Distinct, metre-scale coordinates for every joint of one frame."""
    values = []
    for j in range(len(JOINT_NAMES)):
        x, y, z = 0.1 * (j + 1), 0.2 + 0.01 * frame, 1.0 + 0.01 * j
        values.extend([x, y, z] + [9.0] * (values_per_joint - 3))
    return values


@pytest.fixture
def make_centers_text():
    """Build a joint-center export with ``rows`` frames."""
    def _make(rows=2, values_per_joint=3, separator=' ', header=None):
        lines = []
        if header is not None:
            lines.append(header)
        for frame in range(rows):
            lines.append(separator.join(str(v) for v in center_values(frame, values_per_joint)))
        return '\n'.join(lines) + '\n'
    return _make


@pytest.fixture
def make_rotations_text():
    """Build a rotation export from a list of {joint: quaternion} frames."""
    def _make(frames, separator=' '):
        lines = []
        for joints in frames:
            values = []
            for name in JOINT_NAMES:
                values.extend(joints.get(name, IDENTITY))
            lines.append(separator.join(repr(float(v)) for v in values))
        return '\n'.join(lines) + '\n'
    return _make


@pytest.fixture
def yaw():
    return yaw_quaternion
