"""
Quaternion kinematics for joint orientation data.

Quaternions are (x, y, z, w) with the scalar last, matching the rotation
exports and ``scipy.spatial.transform.Rotation``. Euler angles follow the
roll (x), pitch (y), yaw (z) convention; yaw is the twist about the vertical
axis of the capture frame and drives every angular metric here. Angle
differences between frames or joints are wrap-corrected so that crossing the
±180° seam reads as a small step rather than a full turn.
"""

import math
from typing import NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np
from scipy.spatial.transform import Rotation

from ..config import DELTA_TIME, IngestionConfig
from ..data.skeleton import JointOrientation

QuaternionLike = Union[JointOrientation, Sequence[float], np.ndarray]

_MIN_NORM = 1e-12


class EulerAngles(NamedTuple):
    """Roll, pitch and yaw in radians."""
    roll: float
    pitch: float
    yaw: float


def as_orientation(q: QuaternionLike) -> JointOrientation:
    if isinstance(q, JointOrientation):
        return q
    x, y, z, w = (float(v) for v in q)
    return JointOrientation(x, y, z, w)


def normalize_quaternion(q: QuaternionLike) -> JointOrientation:
    """Unit-length copy of ``q``; a (near) zero quaternion becomes identity."""
    q = as_orientation(q)
    magnitude = q.magnitude()
    if not math.isfinite(magnitude) or magnitude < _MIN_NORM:
        return JointOrientation.IDENTITY
    return JointOrientation(q.x / magnitude, q.y / magnitude, q.z / magnitude, q.w / magnitude)


def validate_quaternion(q: QuaternionLike,
                        config: Optional[IngestionConfig] = None) -> Tuple[JointOrientation, Optional[str]]:
    """
    Repair a quaternion read from a rotation export.

    Small deviations from unit length are tolerated as numerical noise and
    left untouched. Larger deviations are renormalised; magnitudes below the
    degenerate threshold are replaced by identity.

    Returns:
        (orientation, repair) where repair is None, "renormalized" or "identity"
    """
    config = config or IngestionConfig()
    q = as_orientation(q)
    magnitude = q.magnitude()
    if not math.isfinite(magnitude) or magnitude < config.degenerate_quaternion_threshold:
        return JointOrientation.IDENTITY, 'identity'
    if abs(magnitude - 1.0) > config.renormalize_tolerance:
        return JointOrientation(q.x / magnitude, q.y / magnitude, q.z / magnitude, q.w / magnitude), 'renormalized'
    return q, None


def quaternion_to_euler(q: QuaternionLike) -> EulerAngles:
    """
    Convert a quaternion to roll/pitch/yaw.

    The input is normalised first so that drift upstream cannot push the
    pitch term outside the domain of asin; at gimbal lock pitch saturates to
    ±90° with the sign of its argument.
    """
    q = normalize_quaternion(q)
    x, y, z, w = q.x, q.y, q.z, q.w

    sinr_cosp = 2.0 * (w * x + y * z)
    cosr_cosp = 1.0 - 2.0 * (x * x + y * y)
    roll = math.atan2(sinr_cosp, cosr_cosp)

    sinp = 2.0 * (w * y - z * x)
    if abs(sinp) >= 1.0:
        pitch = math.copysign(math.pi / 2.0, sinp)
    else:
        pitch = math.asin(sinp)

    siny_cosp = 2.0 * (w * z + x * y)
    cosy_cosp = 1.0 - 2.0 * (y * y + z * z)
    yaw = math.atan2(siny_cosp, cosy_cosp)

    return EulerAngles(roll, pitch, yaw)


def euler_to_quaternion(roll: float, pitch: float, yaw: float) -> JointOrientation:
    """Inverse of ``quaternion_to_euler`` (intrinsic Z-Y-X rotation)."""
    x, y, z, w = Rotation.from_euler('ZYX', [yaw, pitch, roll]).as_quat()
    return JointOrientation(float(x), float(y), float(z), float(w))


def wrap_angle(delta: float) -> float:
    """Bring an angle difference (radians) back across the ±π seam."""
    if delta > math.pi:
        delta -= 2.0 * math.pi
    if delta < -math.pi:
        delta += 2.0 * math.pi
    return delta


def yaw_difference(current: QuaternionLike, reference: QuaternionLike) -> float:
    """Wrap-corrected yaw of ``current`` minus yaw of ``reference``, radians."""
    return wrap_angle(quaternion_to_euler(current).yaw - quaternion_to_euler(reference).yaw)


def twist_velocity(current: QuaternionLike, previous: Optional[QuaternionLike],
                   delta_time: float = DELTA_TIME) -> float:
    """
    Angular velocity about the vertical axis in degrees per second.

    One-step backward difference of yaw between ``previous`` and ``current``.
    Returns 0 when there is no previous sample or ``delta_time`` is not
    positive.
    """
    if previous is None or delta_time <= 0:
        return 0.0
    return math.degrees(yaw_difference(current, previous) / delta_time)


def external_rotation(joint: QuaternionLike, reference: QuaternionLike) -> float:
    """Signed yaw of ``joint`` relative to ``reference``, mapped into [0, 360) degrees."""
    angle = math.degrees(yaw_difference(joint, reference))
    if angle < 0:
        angle += 360.0
    return angle if angle < 360.0 else 0.0


def trunk_separation(pelvis: QuaternionLike, other: QuaternionLike) -> float:
    """Absolute yaw separation between ``other`` and the pelvis, in [0, 180] degrees."""
    return min(abs(math.degrees(yaw_difference(other, pelvis))), 180.0)


def deviates_from_identity(q: QuaternionLike, epsilon: float) -> bool:
    """True when ``q`` differs from identity (either sign of w) by more than ``epsilon``."""
    q = as_orientation(q)
    return max(abs(q.x), abs(q.y), abs(q.z), abs(1.0 - abs(q.w))) > epsilon
