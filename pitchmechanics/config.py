"""
Ingestion configuration for PitchMechanics.

Capture timing is fixed by the recording hardware; every other threshold used
by the parsers and the biomechanics deriver lives on ``IngestionConfig`` so a
caller can tune one run without touching module state.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

# Capture rate of the optical system (Hz). Never read from input files.
FRAME_RATE = 300.0
DELTA_TIME = 1.0 / FRAME_RATE


def _default_fallback_jitter() -> Dict[str, float]:
    return {
        'pelvis_twist_velocity': 10.0,       # deg/s
        'shoulder_twist_velocity': 12.0,     # deg/s
        'shoulder_external_rotation': 6.0,   # deg
        'trunk_separation': 4.0,             # deg
    }


@dataclass
class IngestionConfig:
    """Thresholds for unit detection, quaternion repair and signal quality."""

    # Scale normalisation (largest absolute coordinate of one joint)
    millimeter_threshold: float = 1000.0
    centimeter_threshold: float = 10.0
    kilometer_threshold: float = 0.001

    # Quaternion validation on ingestion
    degenerate_quaternion_threshold: float = 0.1
    renormalize_tolerance: float = 0.1

    # Two-stage quality gate of the biomechanics deriver
    identity_epsilon: float = 1e-4
    identity_prefix_frames: int = 10
    signal_threshold: float = 0.1
    signal_thresholds: Dict[str, float] = field(default_factory=dict)
    min_valid_fraction: float = 0.1

    # Synthetic fallback curve
    fallback_jitter: Dict[str, float] = field(default_factory=_default_fallback_jitter)
    fallback_seed: Optional[int] = None

    def threshold_for(self, metric_name: str) -> float:
        """Near-zero threshold for one kinematic metric."""
        return self.signal_thresholds.get(metric_name, self.signal_threshold)

    def jitter_for(self, metric_name: str) -> float:
        return self.fallback_jitter.get(metric_name, 0.0)

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> 'IngestionConfig':
        """
        Build a configuration from a mapping, e.g. one loaded from JSON.

        Raises:
            ValueError: If the mapping contains keys that are not settings
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown ingestion settings: {unknown}")
        return cls(**dict(values))

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
