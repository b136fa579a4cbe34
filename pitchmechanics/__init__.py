"""
PitchMechanics: Motion Capture Ingestion for Baseball Pitching Analysis

Turns the 300 Hz optical capture exports of a pitch (joint centers, joint
rotations and optional precomputed metrics) into one synchronised,
frame-indexed motion dataset with derived pitching biomechanics, ready for
skeleton rendering and metric dashboards.
"""

__version__ = "0.1.0"
__author__ = "Research Team"

# Domain model and pipeline
from .config import FRAME_RATE, DELTA_TIME, IngestionConfig
from .data import (
    JointName, JOINT_NAMES, BONE_CONNECTIONS, BoneConnection,
    JointPosition, JointOrientation,
    BiomechanicalMetrics, MetricKind, MetricStatus, MotionPhase, MetricsSource,
    BiomechanicsDeriver, DerivationResult, FallbackSynthesizer, calculate_biomechanics,
    FrameRecord, MotionDataset, FileKind,
    combine_data, load_motion_data, load_motion_files, classify_file,
)
from .utils import (
    JointCenterParser, JointRotationParser, BaseballMetricsParser,
    detect_format, parse_table,
    quaternion_to_euler, twist_velocity, external_rotation, trunk_separation,
    DiagnosticKind, DiagnosticEvent, LoggingDiagnostics, CollectingDiagnostics,
)

__all__ = [
    # Configuration
    'FRAME_RATE', 'DELTA_TIME', 'IngestionConfig',
    # Skeleton topology
    'JointName', 'JOINT_NAMES', 'BONE_CONNECTIONS', 'BoneConnection', 'JointPosition', 'JointOrientation',
    # Metrics
    'BiomechanicalMetrics', 'MetricKind', 'MetricStatus', 'MotionPhase', 'MetricsSource',
    'BiomechanicsDeriver', 'DerivationResult', 'FallbackSynthesizer', 'calculate_biomechanics',
    # Dataset and ingestion
    'FrameRecord', 'MotionDataset', 'FileKind', 'combine_data', 'load_motion_data',
    'load_motion_files', 'classify_file',
    # Parsers and kinematics
    'JointCenterParser', 'JointRotationParser', 'BaseballMetricsParser', 'detect_format', 'parse_table',
    'quaternion_to_euler', 'twist_velocity', 'external_rotation', 'trunk_separation',
    # Diagnostics
    'DiagnosticKind', 'DiagnosticEvent', 'LoggingDiagnostics', 'CollectingDiagnostics',
]

# Graph export (requires PyTorch Geometric)
try:
    from .data.skeleton_graph import build_edge_index, frame_to_graph, dataset_to_graphs
    __all__.extend(['build_edge_index', 'frame_to_graph', 'dataset_to_graphs'])
except ImportError:
    pass
