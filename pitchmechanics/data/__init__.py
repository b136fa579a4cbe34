"""
Domain model and pipeline stages for pitching motion data.
"""

from .skeleton import (
    JointName, JOINT_NAMES, BONE_CONNECTIONS, BoneConnection,
    JointPosition, JointOrientation, as_joint_name, joint_index, bone_index_pairs
)
from .metrics import (
    BiomechanicalMetrics, MetricKind, MetricStatus, MotionPhase, MetricsSource,
    KINEMATIC_METRICS, normalized_time, phase_for_frame
)
from .biomechanics import (
    BiomechanicsDeriver, DerivationResult, FallbackSynthesizer, calculate_biomechanics, fallback_curve
)
from .motion_dataset import (
    FrameRecord, MotionDataset, FileKind,
    combine_data, load_motion_data, load_motion_files, classify_file
)

__all__ = [
    "JointName", "JOINT_NAMES", "BONE_CONNECTIONS", "BoneConnection",
    "JointPosition", "JointOrientation", "as_joint_name", "joint_index", "bone_index_pairs",
    "BiomechanicalMetrics", "MetricKind", "MetricStatus", "MotionPhase", "MetricsSource",
    "KINEMATIC_METRICS", "normalized_time", "phase_for_frame",
    "BiomechanicsDeriver", "DerivationResult", "FallbackSynthesizer", "calculate_biomechanics",
    "fallback_curve",
    "FrameRecord", "MotionDataset", "FileKind",
    "combine_data", "load_motion_data", "load_motion_files", "classify_file",
]
