"""
Joint data parsers for pitching motion capture exports.

Three exports make up one capture session:

- joint centers: per-joint 3D positions (3, 4 or 12 columns per joint)
- joint rotations: per-joint orientation quaternions (4 columns per joint)
- baseball metrics: optional precomputed velocities and torques

Each parser reads its payload on construction and exposes the frames as a
dictionary keyed by frame number (the zero-based row index after any header
row). Rows that are too short are dropped and reported through the
diagnostics sink; nothing in here raises on file content.
"""

import math
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from ..config import FRAME_RATE, IngestionConfig
from ..data.metrics import BiomechanicalMetrics
from ..data.skeleton import JOINT_NAMES, JointOrientation, JointPosition, as_joint_name
from .diagnostics import DiagnosticEvent, DiagnosticKind, resolve_diagnostics
from .quaternion_kinematics import validate_quaternion
from .tabular_parser import ParsedTable, parse_table, to_numeric_values

JointCenterFrames = Dict[int, Dict[str, JointPosition]]
JointRotationFrames = Dict[int, Dict[str, JointOrientation]]
MetricsFrames = Dict[int, BiomechanicalMetrics]

VALUES_PER_POSITION = 3
VALUES_PER_QUATERNION = 4
MIN_METRIC_VALUES = 4


def scale_factor_for(max_coord: float, config: Optional[IngestionConfig] = None) -> float:
    """
    Factor converting a joint's coordinates to metres.

    The unit is guessed from the joint's largest absolute coordinate: above
    1000 is millimetres, above 10 centimetres, and a nonzero value below 0.001
    kilometres. Anything else is already metres.
    """
    config = config or IngestionConfig()
    if max_coord > config.millimeter_threshold:
        return 0.001
    if max_coord > config.centimeter_threshold:
        return 0.01
    if 0 < max_coord < config.kilometer_threshold:
        return 1000.0
    return 1.0


def to_display_frame(x: float, y: float, z: float) -> JointPosition:
    """
    Reorient capture coordinates into the display frame.

    Capture z (vertical) becomes display y and capture y (toward the target)
    becomes display z. This mapping is shared by every consumer of the data.
    """
    return JointPosition(x, z, y)


class _JointFileParser:
    """Shared row handling of the joint export parsers."""

    stage = "joint_parser"
    values_per_joint = VALUES_PER_POSITION

    def __init__(self, content: str, config: Optional[IngestionConfig] = None, diagnostics=None):
        self.config = config or IngestionConfig()
        self.diagnostics = resolve_diagnostics(diagnostics)
        self.joint_names: List[str] = list(JOINT_NAMES)
        self.frames: Dict[int, Dict] = {}
        self.dropped_rows: List[int] = []

        self.table: ParsedTable = parse_table(content, diagnostics=self.diagnostics, source=self.stage)
        self.format_info = self.table.format_info
        self._parse_rows()
        self.data_quality = self._assess_quality()

    @property
    def min_values(self) -> int:
        return len(self.joint_names) * self.values_per_joint

    @property
    def num_frames(self) -> int:
        return len(self.frames)

    def _parse_rows(self) -> None:
        for row_index, row in enumerate(self.table.rows):
            values = to_numeric_values(row)
            if len(values) < self.min_values:
                self.dropped_rows.append(row_index)
                self.diagnostics.emit(DiagnosticEvent(
                    DiagnosticKind.ROW_DROPPED, self.stage,
                    f"Insufficient data in row {row_index}: {len(values)} values "
                    f"(expected >= {self.min_values})",
                    frame=row_index,
                    details={'values': len(values), 'required': self.min_values},
                ))
                continue
            self.frames[row_index] = self._parse_values(row_index, values)

    def _parse_values(self, frame_number: int, values: List[float]) -> Dict:
        raise NotImplementedError

    def _assess_quality(self) -> Dict:
        total_rows = len(self.table.rows)
        return {
            'total_rows': total_rows,
            'usable_frames': len(self.frames),
            'dropped_rows': len(self.dropped_rows),
            'completeness_percent': 100.0 * len(self.frames) / total_rows if total_rows else 0.0,
        }

    def get_summary(self) -> Dict:
        frame_numbers = sorted(self.frames)
        return {
            'format': self.format_info.format.value,
            'separator': self.format_info.separator,
            'has_header': self.table.has_header,
            'num_frames': len(self.frames),
            'num_joints': len(self.joint_names),
            'first_frame': frame_numbers[0] if frame_numbers else None,
            'last_frame': frame_numbers[-1] if frame_numbers else None,
            'duration': len(self.frames) / FRAME_RATE,
            'data_quality': self.data_quality,
        }


class JointCenterParser(_JointFileParser):
    """
    Parser for joint center exports.

    Columns are split into one equal block per joint (block width is the
    row's value count divided by the number of joints) and each joint reads
    x, y, z from the start of its block, so exports carrying extra per-joint
    channels such as velocity or acceleration parse the same way.

    Attributes:
        frames (Dict[int, Dict[str, JointPosition]]): Positions in metres,
            display frame, keyed by frame number then joint name
        dropped_rows (List[int]): Row indices rejected as too short
        data_quality (Dict): Row counts and completeness
    """

    stage = "joint_centers"
    values_per_joint = VALUES_PER_POSITION

    def _parse_values(self, frame_number: int, values: List[float]) -> Dict[str, JointPosition]:
        joints = {}
        block = len(values) // len(self.joint_names)
        for joint_index, joint_name in enumerate(self.joint_names):
            start = joint_index * block
            x, y, z = values[start:start + VALUES_PER_POSITION]

            if not all(math.isfinite(v) for v in (x, y, z)):
                self.diagnostics.emit(DiagnosticEvent(
                    DiagnosticKind.COORDINATE_CLAMPED, self.stage,
                    f"Invalid coordinates for {joint_name}: ({x}, {y}, {z})",
                    frame=frame_number, details={'joint': joint_name},
                ))
                x = y = z = 0.0

            scale = scale_factor_for(max(abs(x), abs(y), abs(z)), self.config)
            joints[joint_name] = to_display_frame(x * scale, y * scale, z * scale)
        return joints

    def get_position_array(self) -> np.ndarray:
        """
        Positions as an array of shape (n_frames, n_joints, 3) in frame order.
        """
        if not self.frames:
            return np.zeros((0, len(self.joint_names), 3))
        return np.stack([
            np.stack([self.frames[frame][joint].as_array() for joint in self.joint_names])
            for frame in sorted(self.frames)
        ])

    def get_joint_data(self, joint) -> pd.DataFrame:
        """Frame, X, Y, Z trajectory of one joint."""
        name = as_joint_name(joint).value
        records = [
            {'Frame': frame, 'X': joints[name].x, 'Y': joints[name].y, 'Z': joints[name].z}
            for frame, joints in sorted(self.frames.items())
        ]
        return pd.DataFrame(records, columns=['Frame', 'X', 'Y', 'Z'])

    def __repr__(self) -> str:
        return f"JointCenterParser(frames={self.num_frames}, joints={len(self.joint_names)})"


class JointRotationParser(_JointFileParser):
    """
    Parser for joint rotation exports.

    Every joint occupies exactly four columns (x, y, z, w). Quaternions are
    validated on ingestion: degenerate ones become identity and clearly
    non-unit ones are renormalised.
    """

    stage = "joint_rotations"
    values_per_joint = VALUES_PER_QUATERNION

    def __init__(self, content: str, config: Optional[IngestionConfig] = None, diagnostics=None):
        self.repaired_quaternions = 0
        super().__init__(content, config=config, diagnostics=diagnostics)

    def _parse_values(self, frame_number: int, values: List[float]) -> Dict[str, JointOrientation]:
        joints = {}
        for joint_index, joint_name in enumerate(self.joint_names):
            start = joint_index * VALUES_PER_QUATERNION
            components = [v if math.isfinite(v) else 0.0 for v in values[start:start + VALUES_PER_QUATERNION]]
            quaternion, repair = validate_quaternion(components, self.config)
            if repair is not None:
                self.repaired_quaternions += 1
                self.diagnostics.emit(DiagnosticEvent(
                    DiagnosticKind.QUATERNION_REPAIRED, self.stage,
                    f"Quaternion for {joint_name} {repair}",
                    frame=frame_number, details={'joint': joint_name, 'repair': repair},
                ))
            joints[joint_name] = quaternion
        return joints

    def _assess_quality(self) -> Dict:
        quality = super()._assess_quality()
        quality['repaired_quaternions'] = self.repaired_quaternions
        return quality

    def get_rotation_array(self) -> np.ndarray:
        """Quaternions as an array of shape (n_frames, n_joints, 4) in frame order."""
        if not self.frames:
            return np.zeros((0, len(self.joint_names), 4))
        return np.stack([
            np.stack([self.frames[frame][joint].as_array() for joint in self.joint_names])
            for frame in sorted(self.frames)
        ])

    def __repr__(self) -> str:
        return f"JointRotationParser(frames={self.num_frames}, repaired={self.repaired_quaternions})"


class BaseballMetricsParser:
    """
    Parser for precomputed baseball metrics exports.

    Each row holds at least four values: pelvis velocity, trunk velocity,
    elbow torque and shoulder torque. The kinematic signals are not part of
    this export and stay at zero.
    """

    stage = "baseball_metrics"

    def __init__(self, content: str, diagnostics=None):
        self.diagnostics = resolve_diagnostics(diagnostics)
        self.frames: MetricsFrames = {}
        self.dropped_rows: List[int] = []

        self.table = parse_table(content, diagnostics=self.diagnostics, source=self.stage)
        self._parse_rows()

    def _parse_rows(self) -> None:
        for row_index, row in enumerate(self.table.rows):
            values = to_numeric_values(row)
            if len(values) < MIN_METRIC_VALUES:
                self.dropped_rows.append(row_index)
                self.diagnostics.emit(DiagnosticEvent(
                    DiagnosticKind.ROW_DROPPED, self.stage,
                    f"Insufficient metrics in row {row_index}: {len(values)} values "
                    f"(expected >= {MIN_METRIC_VALUES})",
                    frame=row_index,
                ))
                continue
            pelvis, trunk, elbow, shoulder = (v if math.isfinite(v) else 0.0 for v in values[:MIN_METRIC_VALUES])
            self.frames[row_index] = BiomechanicalMetrics(
                pelvis_velocity=pelvis,
                trunk_velocity=trunk,
                elbow_torque=elbow,
                shoulder_torque=shoulder,
                timestamp=row_index / FRAME_RATE,
            )

    @property
    def num_frames(self) -> int:
        return len(self.frames)

    def __repr__(self) -> str:
        return f"BaseballMetricsParser(frames={self.num_frames})"


def parse_joint_centers(content: str, config: Optional[IngestionConfig] = None,
                        diagnostics=None) -> JointCenterFrames:
    return JointCenterParser(content, config=config, diagnostics=diagnostics).frames


def parse_joint_rotations(content: str, config: Optional[IngestionConfig] = None,
                          diagnostics=None) -> JointRotationFrames:
    return JointRotationParser(content, config=config, diagnostics=diagnostics).frames


def parse_baseball_metrics(content: str, diagnostics=None) -> MetricsFrames:
    return BaseballMetricsParser(content, diagnostics=diagnostics).frames
