"""
Per-frame pitching metrics and their descriptors.

``MetricKind`` is the single place that names each signal, its display unit
and its dashboard thresholds; the deriver, the dataset accessors and the
plotting helpers all go through it instead of branching on metric names.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, NamedTuple, Optional, Tuple

from ..config import FRAME_RATE


@dataclass(frozen=True)
class BiomechanicalMetrics:
    """
    Scalar pitching signals for one frame.

    The four kinematic signals are in degrees or degrees per second. The
    velocity and torque fields keep the names the dashboard has always used;
    when metrics are derived from rotations they are scaled copies of the
    kinematic signals.
    """
    pelvis_velocity: float = 0.0
    trunk_velocity: float = 0.0
    elbow_torque: float = 0.0
    shoulder_torque: float = 0.0
    pelvis_twist_velocity: float = 0.0
    shoulder_twist_velocity: float = 0.0
    shoulder_external_rotation: float = 0.0
    trunk_separation: float = 0.0
    timestamp: float = 0.0

    @classmethod
    def zeros(cls, frame_number: int) -> 'BiomechanicalMetrics':
        return cls(timestamp=frame_number / FRAME_RATE)

    @classmethod
    def from_kinematics(cls, frame_number: int,
                        pelvis_twist_velocity: float,
                        shoulder_twist_velocity: float,
                        shoulder_external_rotation: float,
                        trunk_separation: float) -> 'BiomechanicalMetrics':
        """Build a record from the kinematic signals, filling the legacy aliases."""
        return cls(
            pelvis_velocity=abs(pelvis_twist_velocity) * 0.5,
            trunk_velocity=abs(shoulder_twist_velocity) * 0.3,
            elbow_torque=abs(shoulder_external_rotation) * 0.1,
            shoulder_torque=trunk_separation * 0.05,
            pelvis_twist_velocity=pelvis_twist_velocity,
            shoulder_twist_velocity=shoulder_twist_velocity,
            shoulder_external_rotation=shoulder_external_rotation,
            trunk_separation=trunk_separation,
            timestamp=frame_number / FRAME_RATE,
        )

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


class MetricStatus(Enum):
    LOW = 'low'
    NORMAL = 'normal'
    HIGH = 'high'


class MetricInfo(NamedTuple):
    label: str
    unit: str
    color: str
    is_kinematic: bool
    thresholds: Optional[Tuple[float, float]] = None


class MetricKind(Enum):
    """Closed set of metric signals; values are ``BiomechanicalMetrics`` field names."""
    PELVIS_TWIST_VELOCITY = 'pelvis_twist_velocity'
    SHOULDER_TWIST_VELOCITY = 'shoulder_twist_velocity'
    SHOULDER_EXTERNAL_ROTATION = 'shoulder_external_rotation'
    TRUNK_SEPARATION = 'trunk_separation'
    PELVIS_VELOCITY = 'pelvis_velocity'
    TRUNK_VELOCITY = 'trunk_velocity'
    ELBOW_TORQUE = 'elbow_torque'
    SHOULDER_TORQUE = 'shoulder_torque'

    @property
    def info(self) -> MetricInfo:
        return _METRIC_INFO[self]

    @property
    def label(self) -> str:
        return self.info.label

    @property
    def unit(self) -> str:
        return self.info.unit

    @property
    def color(self) -> str:
        return self.info.color

    @property
    def is_kinematic(self) -> bool:
        return self.info.is_kinematic

    @property
    def thresholds(self) -> Optional[Tuple[float, float]]:
        return self.info.thresholds

    def value_of(self, metrics: BiomechanicalMetrics) -> float:
        return getattr(metrics, self.value)

    def status(self, value: float) -> Optional[MetricStatus]:
        """Dashboard rating of ``value``; None for metrics without thresholds."""
        if self.thresholds is None:
            return None
        low, high = self.thresholds
        if value < low:
            return MetricStatus.LOW
        if value > high:
            return MetricStatus.HIGH
        return MetricStatus.NORMAL

    def format(self, value: float) -> str:
        return f"{value:.1f} {self.unit}"


_METRIC_INFO = {
    MetricKind.PELVIS_TWIST_VELOCITY: MetricInfo('Pelvis Twist Velocity', '°/s', '#3b82f6', True),
    MetricKind.SHOULDER_TWIST_VELOCITY: MetricInfo('Shoulder Twist Velocity', '°/s', '#10b981', True),
    MetricKind.SHOULDER_EXTERNAL_ROTATION: MetricInfo('Shoulder External Rotation', '°', '#f59e0b', True),
    MetricKind.TRUNK_SEPARATION: MetricInfo('Trunk Separation', '°', '#ef4444', True),
    MetricKind.PELVIS_VELOCITY: MetricInfo('Pelvis Velocity', 'm/s', '#6366f1', False, (2.0, 8.0)),
    MetricKind.TRUNK_VELOCITY: MetricInfo('Trunk Velocity', 'm/s', '#14b8a6', False, (3.0, 12.0)),
    MetricKind.ELBOW_TORQUE: MetricInfo('Elbow Torque', 'Nm', '#f97316', False, (20.0, 120.0)),
    MetricKind.SHOULDER_TORQUE: MetricInfo('Shoulder Torque', 'Nm', '#ec4899', False, (30.0, 150.0)),
}

KINEMATIC_METRICS: Tuple[MetricKind, ...] = tuple(kind for kind in MetricKind if kind.is_kinematic)


class MotionPhase(Enum):
    """Phases of the pitching motion over normalised time."""
    WINDUP = 'windup'
    STRIDE = 'stride'
    ACCELERATION = 'acceleration'
    RELEASE = 'release'
    FOLLOW_THROUGH = 'follow-through'

    @property
    def band(self) -> Tuple[float, float]:
        return _PHASE_BANDS[self]

    @classmethod
    def at(cls, progress: float) -> 'MotionPhase':
        """Phase containing normalised time ``progress`` (0 = first frame)."""
        for phase in cls:
            start, end = phase.band
            if progress < end:
                return phase
        return cls.FOLLOW_THROUGH


_PHASE_BANDS = {
    MotionPhase.WINDUP: (0.0, 0.2),
    MotionPhase.STRIDE: (0.2, 0.4),
    MotionPhase.ACCELERATION: (0.4, 0.7),
    MotionPhase.RELEASE: (0.7, 0.8),
    MotionPhase.FOLLOW_THROUGH: (0.8, 1.0),
}


def normalized_time(frame_index: int, frame_count: int) -> float:
    """Position of a frame in playback order on [0, 1]; the last frame is 1."""
    if frame_count <= 1:
        return 0.0
    return frame_index / (frame_count - 1)


def phase_for_frame(frame_index: int, frame_count: int) -> MotionPhase:
    return MotionPhase.at(normalized_time(frame_index, frame_count))


class MetricsSource(Enum):
    """Where the metrics of a dataset came from."""
    MEASURED = 'measured'
    DERIVED = 'derived'
    SYNTHETIC = 'synthetic'
    NONE = 'none'
