"""
Derivation of pitching metrics from joint rotations.

The deriver walks the rotation frames in order and computes, for every frame
and its immediate predecessor, the pelvis and shoulder twist velocities, the
shoulder external rotation and the trunk-pelvis separation.

Rotation exports sometimes carry placeholder identity rotations, which would
produce a flat, all-zero signal. A two-stage quality gate catches that case:

1. If none of the first few frames moves away from identity, derivation is
   skipped outright.
2. After derivation, if fewer than ``min_valid_fraction`` of the frames
   carry any signal above the near-zero thresholds, the result is discarded.

In both cases a synthetic, phase-shaped demonstration curve is returned
instead and the result is flagged with ``using_fallback_data``.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..config import IngestionConfig
from ..utils.diagnostics import DiagnosticEvent, DiagnosticKind, resolve_diagnostics
from ..utils.quaternion_kinematics import (
    deviates_from_identity, external_rotation, trunk_separation, twist_velocity
)
from .metrics import (
    KINEMATIC_METRICS, BiomechanicalMetrics, MetricKind, MetricsSource, MotionPhase, normalized_time
)
from .skeleton import JointName, JointOrientation

# Joints driving the kinematic metrics (right-handed pitcher)
PELVIS = JointName.PELVIS.value
TRUNK = JointName.NECK.value
THROWING_SHOULDER = JointName.R_SHOULDER.value

FALLBACK_IDENTITY_PREFIX = 'identity_prefix'
FALLBACK_FLAT_SIGNAL = 'flat_signal'

# Curve values at the phase boundaries 0, .2, .4, .7, .8 and 1 of normalised
# time. Pelvis rotation peaks at foot strike, the trunk/shoulder at the end of
# arm acceleration (proximal-to-distal sequencing).
_FALLBACK_KEYS = {
    MetricKind.PELVIS_TWIST_VELOCITY: (0.0, 80.0, 650.0, 250.0, 120.0, 20.0),
    MetricKind.SHOULDER_TWIST_VELOCITY: (0.0, 40.0, 300.0, 1100.0, 500.0, 60.0),
    MetricKind.SHOULDER_EXTERNAL_ROTATION: (45.0, 60.0, 120.0, 175.0, 110.0, 80.0),
    MetricKind.TRUNK_SEPARATION: (5.0, 20.0, 50.0, 15.0, 8.0, 5.0),
}

_VELOCITY_METRICS = (MetricKind.PELVIS_TWIST_VELOCITY, MetricKind.SHOULDER_TWIST_VELOCITY)

_METRIC_RANGES = {
    MetricKind.SHOULDER_EXTERNAL_ROTATION: (0.0, math.nextafter(360.0, 0.0)),
    MetricKind.TRUNK_SEPARATION: (0.0, 180.0),
}

JointRotationFrames = Dict[int, Dict[str, JointOrientation]]


def _distance_from_zero(kind: MetricKind, value: float) -> float:
    # External rotation lives on [0, 360): 359.95 is 0.05 away from zero
    if kind == MetricKind.SHOULDER_EXTERNAL_ROTATION:
        value = value % 360.0
        return min(value, 360.0 - value)
    return abs(value)


@dataclass(frozen=True)
class DerivationResult:
    """Metrics for every rotation frame, with their provenance."""
    metrics: Dict[int, BiomechanicalMetrics] = field(default_factory=dict)
    source: MetricsSource = MetricsSource.NONE
    using_fallback_data: bool = False
    valid_fraction: float = 0.0
    fallback_reason: Optional[str] = None

    def __len__(self) -> int:
        return len(self.metrics)


def fallback_curve(kind: MetricKind, t: float) -> float:
    """
    Noiseless shape of the synthetic fallback signal.

    Within each motion phase the value moves monotonically (smoothstep)
    between the phase's boundary values.
    """
    keys = _FALLBACK_KEYS[kind]
    t = min(max(t, 0.0), 1.0)
    phases = list(MotionPhase)
    for k, phase in enumerate(phases):
        start, end = phase.band
        if t < end or k == len(phases) - 1:
            u = (t - start) / (end - start)
            u = min(max(u, 0.0), 1.0)
            smooth = u * u * (3.0 - 2.0 * u)
            return keys[k] + (keys[k + 1] - keys[k]) * smooth
    return keys[-1]


class FallbackSynthesizer:
    """
    Synthetic demonstration metrics for sequences without usable rotations.

    The shape is deterministic; the jitter comes from the injected
    ``numpy.random.Generator`` so tests can pin it with a seed.
    """

    def __init__(self, config: Optional[IngestionConfig] = None, rng: Optional[np.random.Generator] = None):
        self.config = config or IngestionConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.fallback_seed)

    def synthesize(self, frame_numbers: List[int]) -> Dict[int, BiomechanicalMetrics]:
        n = len(frame_numbers)
        if n == 0:
            return {}
        jitter = self.rng.uniform(-1.0, 1.0, size=(n, len(KINEMATIC_METRICS)))
        result = {}
        for i, frame_number in enumerate(frame_numbers):
            t = normalized_time(i, n)
            values = {}
            for j, kind in enumerate(KINEMATIC_METRICS):
                if i == 0 and kind in _VELOCITY_METRICS:
                    # No predecessor, no velocity
                    values[kind] = 0.0
                    continue
                value = fallback_curve(kind, t) + jitter[i, j] * self.config.jitter_for(kind.value)
                low, high = _METRIC_RANGES.get(kind, (-math.inf, math.inf))
                values[kind] = float(min(max(value, low), high))
            result[frame_number] = BiomechanicalMetrics.from_kinematics(
                frame_number,
                values[MetricKind.PELVIS_TWIST_VELOCITY],
                values[MetricKind.SHOULDER_TWIST_VELOCITY],
                values[MetricKind.SHOULDER_EXTERNAL_ROTATION],
                values[MetricKind.TRUNK_SEPARATION],
            )
        return result


class BiomechanicsDeriver:
    """
    Compute per-frame pitching metrics from joint rotation frames.

    Args:
        config: Thresholds for the quality gate and fallback jitter
        diagnostics: Sink receiving missing-joint and fallback events
        rng: Random generator for fallback jitter
    """

    stage = "biomechanics"

    def __init__(self, config: Optional[IngestionConfig] = None, diagnostics=None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or IngestionConfig()
        self.diagnostics = resolve_diagnostics(diagnostics)
        self.synthesizer = FallbackSynthesizer(self.config, rng)

    def calculate_biomechanics(self, joint_rotations: JointRotationFrames) -> DerivationResult:
        frame_numbers = sorted(joint_rotations)
        if not frame_numbers:
            return DerivationResult()

        if not self._prefix_has_motion(joint_rotations, frame_numbers):
            return self._fallback(frame_numbers, FALLBACK_IDENTITY_PREFIX, 0.0,
                                  f"No joint moves from identity in the first "
                                  f"{self.config.identity_prefix_frames} frames")

        metrics, valid_frames = self._derive(joint_rotations, frame_numbers)
        valid_fraction = valid_frames / len(frame_numbers)
        if valid_fraction < self.config.min_valid_fraction:
            return self._fallback(frame_numbers, FALLBACK_FLAT_SIGNAL, valid_fraction,
                                  f"Only {valid_frames}/{len(frame_numbers)} frames carry signal")

        return DerivationResult(metrics, MetricsSource.DERIVED, False, valid_fraction)

    def _prefix_has_motion(self, joint_rotations: JointRotationFrames, frame_numbers: List[int]) -> bool:
        epsilon = self.config.identity_epsilon
        for frame_number in frame_numbers[:self.config.identity_prefix_frames]:
            if any(deviates_from_identity(q, epsilon) for q in joint_rotations[frame_number].values()):
                return True
        return False

    def _derive(self, joint_rotations: JointRotationFrames,
                frame_numbers: List[int]) -> Tuple[Dict[int, BiomechanicalMetrics], int]:
        self._check_joints(joint_rotations[frame_numbers[0]], frame_numbers[0])

        metrics = {}
        valid_frames = 0
        previous: Optional[Dict[str, JointOrientation]] = None
        for frame_number in frame_numbers:
            current = joint_rotations[frame_number]
            pelvis = current.get(PELVIS)
            trunk = current.get(TRUNK)
            shoulder = current.get(THROWING_SHOULDER)

            pelvis_velocity = 0.0
            shoulder_velocity = 0.0
            if previous is not None:
                if pelvis is not None and PELVIS in previous:
                    pelvis_velocity = twist_velocity(pelvis, previous[PELVIS])
                if shoulder is not None and THROWING_SHOULDER in previous:
                    shoulder_velocity = twist_velocity(shoulder, previous[THROWING_SHOULDER])
            layback = external_rotation(shoulder, trunk) if shoulder is not None and trunk is not None else 0.0
            separation = trunk_separation(pelvis, trunk) if pelvis is not None and trunk is not None else 0.0

            record = BiomechanicalMetrics.from_kinematics(
                frame_number, pelvis_velocity, shoulder_velocity, layback, separation)
            if self._has_signal(record):
                valid_frames += 1
            metrics[frame_number] = record
            previous = current

        return metrics, valid_frames

    def _has_signal(self, record: BiomechanicalMetrics) -> bool:
        return any(
            _distance_from_zero(kind, kind.value_of(record)) > self.config.threshold_for(kind.value)
            for kind in KINEMATIC_METRICS
        )

    def _check_joints(self, joints: Dict[str, JointOrientation], frame_number: int) -> None:
        for name in (PELVIS, TRUNK, THROWING_SHOULDER):
            if name not in joints:
                self.diagnostics.emit(DiagnosticEvent(
                    DiagnosticKind.MISSING_JOINT, self.stage,
                    f"No rotation data for {name}; dependent metrics read as 0",
                    frame=frame_number, details={'joint': name},
                ))

    def _fallback(self, frame_numbers: List[int], reason: str, valid_fraction: float,
                  message: str) -> DerivationResult:
        self.diagnostics.emit(DiagnosticEvent(
            DiagnosticKind.FALLBACK_TRIGGERED, self.stage,
            f"{message}; using synthetic fallback data",
            details={'reason': reason, 'frames': len(frame_numbers), 'valid_fraction': valid_fraction},
        ))
        return DerivationResult(
            metrics=self.synthesizer.synthesize(frame_numbers),
            source=MetricsSource.SYNTHETIC,
            using_fallback_data=True,
            valid_fraction=valid_fraction,
            fallback_reason=reason,
        )


def calculate_biomechanics(joint_rotations: JointRotationFrames,
                           config: Optional[IngestionConfig] = None,
                           diagnostics=None,
                           rng: Optional[np.random.Generator] = None) -> DerivationResult:
    """Derive metrics for ``joint_rotations`` with a one-off deriver."""
    return BiomechanicsDeriver(config, diagnostics, rng).calculate_biomechanics(joint_rotations)
