"""
Skeleton topology for the pitching capture marker set.

The joint enumeration is a structural contract with the capture exports: its
order and length decide how the numeric columns of each row are partitioned
into joints. The bone list is the edge set used for rendering and for graph
export.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, List, Tuple

import numpy as np


class JointName(Enum):
    """Anatomical joints in file column order."""
    HEAD = 'Head'
    NECK = 'Neck'
    R_SHOULDER = 'R_Shoulder'
    R_ELBOW = 'R_Elbow'
    R_WRIST = 'R_Wrist'
    L_SHOULDER = 'L_Shoulder'
    L_ELBOW = 'L_Elbow'
    L_WRIST = 'L_Wrist'
    PELVIS = 'Pelvis'
    R_HIP = 'R_Hip'
    R_KNEE = 'R_Knee'
    R_ANKLE = 'R_Ankle'
    R_FOOT = 'R_Foot'
    L_HIP = 'L_Hip'
    L_KNEE = 'L_Knee'
    L_ANKLE = 'L_Ankle'
    L_FOOT = 'L_Foot'

    @property
    def index(self) -> int:
        return _JOINT_INDEX[self.value]

    @property
    def is_throwing_arm(self) -> bool:
        return self in THROWING_ARM


JOINT_NAMES: Tuple[str, ...] = tuple(joint.value for joint in JointName)
_JOINT_INDEX: Dict[str, int] = {name: i for i, name in enumerate(JOINT_NAMES)}

# Right-handed pitcher
THROWING_ARM = frozenset({JointName.R_SHOULDER, JointName.R_ELBOW, JointName.R_WRIST})


@dataclass(frozen=True)
class BoneConnection:
    """Unordered pair of joints forming one skeletal edge."""
    a: JointName
    b: JointName

    def __contains__(self, joint) -> bool:
        joint = as_joint_name(joint)
        return joint in (self.a, self.b)

    def __eq__(self, other) -> bool:
        if not isinstance(other, BoneConnection):
            return NotImplemented
        return {self.a, self.b} == {other.a, other.b}

    def __hash__(self) -> int:
        return hash(frozenset((self.a, self.b)))

    def other(self, joint) -> JointName:
        joint = as_joint_name(joint)
        if joint == self.a:
            return self.b
        if joint == self.b:
            return self.a
        raise ValueError(f"{joint.value} is not part of bone {self.a.value}-{self.b.value}")

    @property
    def names(self) -> Tuple[str, str]:
        return self.a.value, self.b.value


BONE_CONNECTIONS: Tuple[BoneConnection, ...] = (
    # Head and spine
    BoneConnection(JointName.HEAD, JointName.NECK),
    BoneConnection(JointName.NECK, JointName.PELVIS),
    # Right arm
    BoneConnection(JointName.NECK, JointName.R_SHOULDER),
    BoneConnection(JointName.R_SHOULDER, JointName.R_ELBOW),
    BoneConnection(JointName.R_ELBOW, JointName.R_WRIST),
    # Left arm
    BoneConnection(JointName.NECK, JointName.L_SHOULDER),
    BoneConnection(JointName.L_SHOULDER, JointName.L_ELBOW),
    BoneConnection(JointName.L_ELBOW, JointName.L_WRIST),
    # Right leg
    BoneConnection(JointName.PELVIS, JointName.R_HIP),
    BoneConnection(JointName.R_HIP, JointName.R_KNEE),
    BoneConnection(JointName.R_KNEE, JointName.R_ANKLE),
    BoneConnection(JointName.R_ANKLE, JointName.R_FOOT),
    # Left leg
    BoneConnection(JointName.PELVIS, JointName.L_HIP),
    BoneConnection(JointName.L_HIP, JointName.L_KNEE),
    BoneConnection(JointName.L_KNEE, JointName.L_ANKLE),
    BoneConnection(JointName.L_ANKLE, JointName.L_FOOT),
)


@dataclass(frozen=True)
class JointPosition:
    """Joint center in metres, display frame (x horizontal, y vertical, z toward target)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    ZERO: ClassVar['JointPosition']

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass(frozen=True)
class JointOrientation:
    """Joint orientation as a unit quaternion (x, y, z, w)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    IDENTITY: ClassVar['JointOrientation']

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z, self.w], dtype=float)

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w)


JointPosition.ZERO = JointPosition(0.0, 0.0, 0.0)
JointOrientation.IDENTITY = JointOrientation(0.0, 0.0, 0.0, 1.0)


def as_joint_name(joint) -> JointName:
    """Accept a ``JointName`` or its file label."""
    if isinstance(joint, JointName):
        return joint
    try:
        return JointName(joint)
    except ValueError:
        raise ValueError(f"Unknown joint '{joint}'. Available joints: {list(JOINT_NAMES)}") from None


def joint_index(joint) -> int:
    return as_joint_name(joint).index


def bone_index_pairs() -> List[Tuple[int, int]]:
    """Bones as (index, index) pairs into ``JOINT_NAMES``."""
    return [(bone.a.index, bone.b.index) for bone in BONE_CONNECTIONS]
