"""
Graph representation of skeleton frames.

Each frame becomes a PyTorch Geometric ``Data`` object whose nodes are the
joints and whose edges are the bones, so a pitch can be fed to graph models
frame by frame.
"""

from typing import List, Optional, Sequence

import torch
from torch_geometric.data import Data

from .motion_dataset import FrameRecord, MotionDataset
from .skeleton import BONE_CONNECTIONS, JOINT_NAMES, BoneConnection, joint_index

# Node features: position (x, y, z) then quaternion (qx, qy, qz, qw)
NODE_FEATURES = ('x', 'y', 'z', 'qx', 'qy', 'qz', 'qw')


def build_edge_index(connections: Sequence[BoneConnection] = BONE_CONNECTIONS) -> torch.Tensor:
    """
    Bidirectional edge index of shape (2, 2 * n_bones).
    """
    edges = []
    for bone in connections:
        i, j = joint_index(bone.a), joint_index(bone.b)
        edges.extend([[i, j], [j, i]])

    if not edges:
        return torch.zeros((2, 0), dtype=torch.long)

    return torch.tensor(edges, dtype=torch.long).t().contiguous()


def frame_to_graph(frame: FrameRecord, edge_index: Optional[torch.Tensor] = None) -> Data:
    """Convert one frame to a graph with one node per joint."""
    if edge_index is None:
        edge_index = build_edge_index()

    node_features = [
        list(frame.position(joint).as_array()) + list(frame.orientation(joint).as_array())
        for joint in JOINT_NAMES
    ]
    metrics = frame.metrics.as_dict()
    timestamp = metrics.pop('timestamp')

    return Data(
        x=torch.tensor(node_features, dtype=torch.float),
        edge_index=edge_index,
        num_nodes=len(JOINT_NAMES),
        frame_number=frame.frame_number,
        timestamp=timestamp,
        metrics=torch.tensor([list(metrics.values())], dtype=torch.float),
    )


def dataset_to_graphs(dataset: MotionDataset, stride: int = 1) -> List[Data]:
    """
    Convert every ``stride``-th frame of a dataset to a graph.

    Raises:
        ValueError: If stride is not positive
    """
    if stride < 1:
        raise ValueError(f"Stride must be >= 1, got {stride}")
    edge_index = build_edge_index()
    return [frame_to_graph(frame, edge_index) for frame in dataset.frames[::stride]]
