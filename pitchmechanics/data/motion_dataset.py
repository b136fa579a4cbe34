"""
Frame-indexed motion dataset and the ingestion entry point.

``load_motion_data`` takes the raw text of one capture session (joint
centers, joint rotations and optionally precomputed metrics), runs the
parsers and the biomechanics deriver, and combines everything into an
immutable ``MotionDataset``. The joint-center frames define which frames
exist; rotations and metrics are matched to them by frame number.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from ..config import FRAME_RATE, IngestionConfig
from ..utils.diagnostics import resolve_diagnostics
from ..utils.joint_parsers import (
    BaseballMetricsParser, JointCenterFrames, JointCenterParser,
    JointRotationFrames, JointRotationParser, MetricsFrames
)
from .biomechanics import BiomechanicsDeriver
from .metrics import BiomechanicalMetrics, MetricKind, MetricsSource, MotionPhase, phase_for_frame
from .skeleton import JOINT_NAMES, JointOrientation, JointPosition, as_joint_name


@dataclass(frozen=True)
class FrameRecord:
    """One capture frame: joint centers, joint rotations and metrics."""
    frame_number: int
    joint_centers: Mapping[str, JointPosition] = field(default_factory=dict)
    joint_rotations: Mapping[str, JointOrientation] = field(default_factory=dict)
    metrics: BiomechanicalMetrics = field(default_factory=BiomechanicalMetrics)

    def __post_init__(self):
        if self.frame_number < 0:
            raise ValueError(f"Frame number must be >= 0, got {self.frame_number}")
        object.__setattr__(self, 'joint_centers', MappingProxyType(dict(self.joint_centers)))
        object.__setattr__(self, 'joint_rotations', MappingProxyType(dict(self.joint_rotations)))

    def position(self, joint) -> JointPosition:
        """Joint center, or the origin when the frame has no entry for it."""
        return self.joint_centers.get(as_joint_name(joint).value, JointPosition.ZERO)

    def orientation(self, joint) -> JointOrientation:
        """Joint rotation, or identity when the frame has no entry for it."""
        return self.joint_rotations.get(as_joint_name(joint).value, JointOrientation.IDENTITY)

    @property
    def timestamp(self) -> float:
        return self.metrics.timestamp


@dataclass(frozen=True)
class MotionDataset:
    """
    Synchronised motion data for one pitch.

    Attributes:
        frames (Tuple[FrameRecord, ...]): Frames sorted by frame number
        frame_rate (float): Capture rate in Hz
        duration (float): Number of frames divided by the frame rate
        joint_names (Tuple[str, ...]): Joint enumeration used for the columns
        metrics_source (MetricsSource): Provenance of the metrics
        fallback_reason (str): Why synthetic metrics were used, if they were
    """
    frames: Tuple[FrameRecord, ...] = ()
    frame_rate: float = FRAME_RATE
    duration: float = 0.0
    joint_names: Tuple[str, ...] = JOINT_NAMES
    metrics_source: MetricsSource = MetricsSource.NONE
    fallback_reason: Optional[str] = None

    @classmethod
    def empty(cls) -> 'MotionDataset':
        return cls()

    @property
    def num_frames(self) -> int:
        return len(self.frames)

    @property
    def using_fallback_data(self) -> bool:
        return self.metrics_source == MetricsSource.SYNTHETIC

    @property
    def frame_numbers(self) -> List[int]:
        return [frame.frame_number for frame in self.frames]

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self):
        return iter(self.frames)

    def __getitem__(self, index: int) -> FrameRecord:
        return self.frames[index]

    def get_position_array(self) -> np.ndarray:
        """Joint centers as (n_frames, n_joints, 3); missing joints at the origin."""
        if not self.frames:
            return np.zeros((0, len(self.joint_names), 3))
        return np.array([[frame.position(joint).as_array() for joint in self.joint_names]
                         for frame in self.frames])

    def get_rotation_array(self) -> np.ndarray:
        """Joint rotations as (n_frames, n_joints, 4); missing joints as identity."""
        if not self.frames:
            return np.zeros((0, len(self.joint_names), 4))
        return np.array([[frame.orientation(joint).as_array() for joint in self.joint_names]
                         for frame in self.frames])

    def get_metric_series(self, kind: MetricKind) -> np.ndarray:
        return np.array([kind.value_of(frame.metrics) for frame in self.frames], dtype=float)

    def peak(self, kind: MetricKind) -> Tuple[Optional[int], float]:
        """(frame number, value) of the largest value of ``kind``."""
        series = self.get_metric_series(kind)
        if series.size == 0:
            return None, 0.0
        index = int(np.argmax(series))
        return self.frames[index].frame_number, float(series[index])

    def phase_at(self, index: int) -> MotionPhase:
        """Motion phase of the frame at position ``index`` in playback order."""
        return phase_for_frame(index, len(self.frames))

    def to_dataframe(self) -> pd.DataFrame:
        """One row per frame: frame number, phase and every metric."""
        records = []
        for index, frame in enumerate(self.frames):
            record = {'Frame': frame.frame_number, 'Phase': self.phase_at(index).value}
            record.update(frame.metrics.as_dict())
            records.append(record)
        columns = ['Frame', 'Phase'] + list(BiomechanicalMetrics().as_dict())
        return pd.DataFrame(records, columns=columns)

    def get_summary(self) -> Dict:
        summary = {
            'num_frames': self.num_frames,
            'frame_rate': self.frame_rate,
            'duration': self.duration,
            'num_joints': len(self.joint_names),
            'metrics_source': self.metrics_source.value,
            'using_fallback_data': self.using_fallback_data,
            'fallback_reason': self.fallback_reason,
        }
        if self.frames:
            summary['peaks'] = {kind.value: self.peak(kind)[1] for kind in MetricKind}
        return summary

    def __repr__(self) -> str:
        return (f"MotionDataset(frames={self.num_frames}, rate={self.frame_rate}Hz, "
                f"metrics={self.metrics_source.value})")


def combine_data(joint_centers: JointCenterFrames,
                 joint_rotations: JointRotationFrames,
                 metrics: Optional[MetricsFrames] = None,
                 config: Optional[IngestionConfig] = None,
                 diagnostics=None,
                 rng: Optional[np.random.Generator] = None) -> MotionDataset:
    """
    Merge parsed joint centers, rotations and metrics into a ``MotionDataset``.

    Args:
        joint_centers: Positions by frame number; these frame numbers define
            the frames of the dataset
        joint_rotations: Orientations by frame number
        metrics: Precomputed metrics by frame number. When None or empty the
            metrics are derived from ``joint_rotations``
        config: Thresholds passed to the biomechanics deriver
        diagnostics: Sink receiving deriver events
        rng: Random generator for fallback jitter

    Returns:
        MotionDataset with frames sorted ascending by frame number
    """
    fallback_reason = None
    if metrics:
        frame_metrics = metrics
        source = MetricsSource.MEASURED
    else:
        deriver = BiomechanicsDeriver(config, resolve_diagnostics(diagnostics), rng)
        result = deriver.calculate_biomechanics(joint_rotations)
        frame_metrics = result.metrics
        source = result.source
        fallback_reason = result.fallback_reason

    frames = tuple(
        FrameRecord(
            frame_number=frame_number,
            joint_centers=joint_centers[frame_number],
            joint_rotations=joint_rotations.get(frame_number, {}),
            metrics=_metrics_for(frame_metrics, frame_number),
        )
        for frame_number in sorted(joint_centers)
    )
    if not frames and source != MetricsSource.MEASURED:
        source = MetricsSource.NONE
        fallback_reason = None

    return MotionDataset(
        frames=frames,
        frame_rate=FRAME_RATE,
        duration=len(frames) / FRAME_RATE,
        joint_names=JOINT_NAMES,
        metrics_source=source,
        fallback_reason=fallback_reason,
    )


def _metrics_for(frame_metrics: MetricsFrames, frame_number: int) -> BiomechanicalMetrics:
    record = frame_metrics.get(frame_number)
    return record if record is not None else BiomechanicalMetrics.zeros(frame_number)


def load_motion_data(joint_centers_text: str,
                     joint_rotations_text: str,
                     metrics_text: Optional[str] = None,
                     *,
                     config: Optional[IngestionConfig] = None,
                     diagnostics=None,
                     rng: Optional[np.random.Generator] = None) -> MotionDataset:
    """
    Ingest one capture session from raw file text.

    Malformed rows, degenerate quaternions and flat kinematic signals are
    recovered from and reported to ``diagnostics``; content never raises.
    Unusable input yields an empty dataset.
    """
    config = config or IngestionConfig()
    diagnostics = resolve_diagnostics(diagnostics)

    centers = JointCenterParser(joint_centers_text, config=config, diagnostics=diagnostics)
    rotations = JointRotationParser(joint_rotations_text, config=config, diagnostics=diagnostics)
    metrics = None
    if metrics_text is not None:
        metrics = BaseballMetricsParser(metrics_text, diagnostics=diagnostics).frames

    return combine_data(centers.frames, rotations.frames, metrics,
                        config=config, diagnostics=diagnostics, rng=rng)


class FileKind(Enum):
    """Role of an exported file within a capture session."""
    JOINT_CENTERS = 'jointCenters'
    JOINT_ROTATIONS = 'jointRotations'
    BASEBALL_METRICS = 'baseballMetrics'


_ACCEPTED_EXTENSIONS = ('.txt', '.csv')


def classify_file(filename: str) -> Optional[FileKind]:
    """
    Recognise an export by its file name.

    Only ``.txt`` and ``.csv`` files are considered; returns None for
    anything else.
    """
    lower = os.path.basename(filename).lower()
    if not lower.endswith(_ACCEPTED_EXTENSIONS):
        return None
    if 'jointcenter' in lower:
        return FileKind.JOINT_CENTERS
    if 'jointrotation' in lower:
        return FileKind.JOINT_ROTATIONS
    if 'baseballspecific' in lower or 'baseball' in lower:
        return FileKind.BASEBALL_METRICS
    return None


def load_motion_files(paths: Iterable[str], *, require_metrics: bool = False,
                      config: Optional[IngestionConfig] = None,
                      diagnostics=None,
                      rng: Optional[np.random.Generator] = None) -> MotionDataset:
    """
    Ingest a capture session from local export files.

    Files are matched to their role by name (see ``classify_file``); files
    that match no role are ignored.

    Raises:
        ValueError: If joint centers or joint rotations are missing, if
            ``require_metrics`` is set and no metrics file is given, or if
            two files claim the same role
    """
    by_kind: Dict[FileKind, str] = {}
    for path in paths:
        kind = classify_file(str(path))
        if kind is None:
            continue
        if kind in by_kind:
            raise ValueError(f"Two {kind.value} files given: {by_kind[kind]} and {path}")
        by_kind[kind] = str(path)

    required = [FileKind.JOINT_CENTERS, FileKind.JOINT_ROTATIONS]
    if require_metrics:
        required.append(FileKind.BASEBALL_METRICS)
    missing = [kind.value for kind in required if kind not in by_kind]
    if missing:
        raise ValueError(f"Missing required motion files: {missing}")

    contents = {}
    for kind, path in by_kind.items():
        with open(path, 'r', encoding='utf-8', errors='replace') as file:
            contents[kind] = file.read()

    return load_motion_data(
        contents[FileKind.JOINT_CENTERS],
        contents[FileKind.JOINT_ROTATIONS],
        contents.get(FileKind.BASEBALL_METRICS),
        config=config, diagnostics=diagnostics, rng=rng,
    )
