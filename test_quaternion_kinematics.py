"""
Tests for quaternion conversion and the angular pitching signals.
"""

import math

import numpy as np
import pytest

from conftest import yaw_quaternion
from pitchmechanics.config import IngestionConfig
from pitchmechanics.data.skeleton import JointOrientation
from pitchmechanics.utils.quaternion_kinematics import (
    deviates_from_identity, euler_to_quaternion, external_rotation,
    normalize_quaternion, quaternion_to_euler, trunk_separation,
    twist_velocity, validate_quaternion, wrap_angle
)


def _same_rotation(a, b, tol=1e-6):
    a, b = np.asarray(a), np.asarray(b)
    return np.allclose(a, b, atol=tol) or np.allclose(a, -b, atol=tol)


def test_euler_round_trip_on_random_unit_quaternions():
    rng = np.random.default_rng(42)
    checked = 0
    for _ in range(200):
        q = rng.normal(size=4)
        q /= np.linalg.norm(q)
        angles = quaternion_to_euler(q)
        if abs(math.sin(angles.pitch)) > 0.999:
            continue
        back = euler_to_quaternion(*angles)
        assert _same_rotation(back.as_array(), q), (q, angles)
        checked += 1
    assert checked > 150


def test_normalize_is_idempotent_and_handles_zero():
    q = normalize_quaternion((1.0, 2.0, 3.0, 4.0))
    assert q.magnitude() == pytest.approx(1.0)
    assert normalize_quaternion(q) == q
    assert normalize_quaternion((0.0, 0.0, 0.0, 0.0)) == JointOrientation.IDENTITY


def test_validate_quaternion_thresholds():
    config = IngestionConfig()
    assert validate_quaternion((0.0, 0.0, 0.0, 0.05), config) == (JointOrientation.IDENTITY, 'identity')
    q, repair = validate_quaternion((0.0, 0.0, 0.0, 1.5), config)
    assert repair == 'renormalized'
    assert q.w == pytest.approx(1.0)
    q, repair = validate_quaternion((0.0, 0.0, 0.0, 0.95), config)
    assert repair is None
    assert q.w == 0.95


def test_euler_of_unnormalised_input_matches_normalised():
    q = euler_to_quaternion(0.3, -0.2, 1.1)
    scaled = [3.0 * v for v in q.as_array()]
    assert tuple(quaternion_to_euler(scaled)) == pytest.approx(tuple(quaternion_to_euler(q)))


@pytest.mark.parametrize("sign", [1.0, -1.0])
def test_gimbal_lock_pitch_saturates(sign):
    s = math.sqrt(0.5)
    angles = quaternion_to_euler((0.0, sign * s, 0.0, s))
    assert angles.pitch == pytest.approx(sign * math.pi / 2, abs=1e-6)
    assert all(math.isfinite(a) for a in angles)


def test_wrap_angle():
    assert wrap_angle(math.radians(358)) == pytest.approx(math.radians(-2))
    assert wrap_angle(math.radians(-358)) == pytest.approx(math.radians(2))
    assert wrap_angle(0.5) == 0.5


def test_twist_velocity_across_the_seam():
    velocity = twist_velocity(yaw_quaternion(-179), yaw_quaternion(179))
    assert velocity == pytest.approx(600.0, rel=1e-6)
    assert abs(velocity) < 358 * 300


def test_twist_velocity_sign_and_magnitude():
    assert twist_velocity(yaw_quaternion(11), yaw_quaternion(10)) == pytest.approx(300.0)
    assert twist_velocity(yaw_quaternion(10), yaw_quaternion(11)) == pytest.approx(-300.0)


def test_twist_velocity_without_previous_or_time_step():
    current = yaw_quaternion(20)
    assert twist_velocity(current, None) == 0.0
    assert twist_velocity(current, yaw_quaternion(10), delta_time=0.0) == 0.0
    assert twist_velocity(current, yaw_quaternion(10), delta_time=-1.0) == 0.0


def test_external_rotation_range():
    assert external_rotation(yaw_quaternion(30), yaw_quaternion(50)) == pytest.approx(340.0)
    assert external_rotation(yaw_quaternion(-170), yaw_quaternion(170)) == pytest.approx(20.0)
    assert external_rotation(yaw_quaternion(50), yaw_quaternion(30)) == pytest.approx(20.0)
    value = external_rotation(yaw_quaternion(10), yaw_quaternion(10))
    assert 0.0 <= value < 360.0


def test_trunk_separation_is_wrap_corrected():
    assert trunk_separation(yaw_quaternion(170), yaw_quaternion(-170)) == pytest.approx(20.0)
    assert trunk_separation(yaw_quaternion(-30), yaw_quaternion(60)) == pytest.approx(90.0)
    assert 0.0 <= trunk_separation(yaw_quaternion(0), yaw_quaternion(180)) <= 180.0


def test_deviates_from_identity():
    assert not deviates_from_identity(JointOrientation.IDENTITY, 1e-4)
    assert not deviates_from_identity((0.0, 0.0, 0.0, -1.0), 1e-4)
    assert not deviates_from_identity((5e-5, 0.0, 0.0, 1.0), 1e-4)
    assert deviates_from_identity(yaw_quaternion(1), 1e-4)
