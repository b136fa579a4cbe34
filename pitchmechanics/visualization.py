"""
Static plots of pitching metrics.
"""

from typing import Dict, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .data.metrics import MetricKind, MotionPhase
from .data.motion_dataset import MotionDataset

_PHASE_COLORS = {
    MotionPhase.WINDUP: '#3b82f6',
    MotionPhase.STRIDE: '#22c55e',
    MotionPhase.ACCELERATION: '#eab308',
    MotionPhase.RELEASE: '#ef4444',
    MotionPhase.FOLLOW_THROUGH: '#a855f7',
}


def phase_spans(dataset: MotionDataset) -> Dict[MotionPhase, Tuple[float, float]]:
    """
    Time span (s) of each motion phase, on the same normalised time as the
    phase labels: the first frame is 0 and the last frame is 1.
    """
    if not dataset.num_frames:
        return {}
    first, last = dataset.frames[0].timestamp, dataset.frames[-1].timestamp
    spans = {}
    for phase in MotionPhase:
        start, end = phase.band
        spans[phase] = (first + start * (last - first), first + end * (last - first))
    return spans


def plot_metric_series(dataset: MotionDataset, kind: MetricKind, ax=None,
                       show_phases: bool = True, current_frame: Optional[int] = None):
    """
    Plot one metric over time.

    Motion phases are shaded, the peak is marked and synthetic fallback data
    is labelled as such in the title.

    Args:
        dataset: Motion data to plot
        kind: Metric to plot
        ax: Matplotlib axes; a new figure is created if None
        show_phases: Shade the motion phase bands
        current_frame: Index of a frame to mark with a vertical line

    Returns:
        The matplotlib axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 4))

    series = dataset.get_metric_series(kind)
    times = np.array([frame.timestamp for frame in dataset.frames])

    if show_phases and dataset.num_frames:
        for phase, (start, end) in phase_spans(dataset).items():
            ax.axvspan(start, end, color=_PHASE_COLORS[phase], alpha=0.08, label=phase.value)

    ax.plot(times, series, color=kind.color, linewidth=2)

    if series.size:
        peak_index = int(np.argmax(series))
        ax.plot(times[peak_index], series[peak_index], 'o', color=kind.color)
        ax.annotate(f"Peak: {kind.format(series[peak_index])}",
                    (times[peak_index], series[peak_index]),
                    textcoords='offset points', xytext=(5, 5), fontsize=8)

    if current_frame is not None and 0 <= current_frame < dataset.num_frames:
        ax.axvline(times[current_frame], color='#dc2626', linestyle='--', linewidth=1)

    title = kind.label
    if dataset.using_fallback_data:
        title += " (synthetic)"
    ax.set_title(title)
    ax.set_xlabel("Time (s)")
    ax.set_ylabel(f"{kind.label} ({kind.unit})")
    ax.grid(True, alpha=0.3)
    return ax
