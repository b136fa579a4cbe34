"""
Tests for skeleton topology and graph export.
"""

import pytest
import torch

from pitchmechanics import load_motion_data
from pitchmechanics.data.metrics import BiomechanicalMetrics
from pitchmechanics.data.skeleton import (
    BONE_CONNECTIONS, JOINT_NAMES, BoneConnection, JointName, as_joint_name, bone_index_pairs, joint_index
)
from pitchmechanics.data.skeleton_graph import NODE_FEATURES, build_edge_index, dataset_to_graphs, frame_to_graph


def test_joint_enumeration():
    assert len(JOINT_NAMES) == 17
    assert JOINT_NAMES[0] == 'Head'
    assert JOINT_NAMES[-1] == 'L_Foot'
    assert joint_index('Pelvis') == 8
    assert JointName.R_ELBOW.is_throwing_arm
    assert not JointName.L_ELBOW.is_throwing_arm
    with pytest.raises(ValueError):
        as_joint_name('Tail')


def test_bones_are_unordered_pairs():
    assert len(BONE_CONNECTIONS) == 16
    assert BoneConnection(JointName.HEAD, JointName.NECK) == BoneConnection(JointName.NECK, JointName.HEAD)
    assert len(set(BONE_CONNECTIONS)) == len(BONE_CONNECTIONS)
    for i, j in bone_index_pairs():
        assert 0 <= i < 17 and 0 <= j < 17


def test_edge_index_is_symmetric():
    edge_index = build_edge_index()
    assert edge_index.shape == (2, 32)
    assert edge_index.dtype == torch.long
    edges = set(map(tuple, edge_index.t().tolist()))
    assert all((j, i) in edges for i, j in edges)
    assert build_edge_index([]).shape == (2, 0)


def test_frame_to_graph(make_centers_text, make_rotations_text):
    dataset = load_motion_data(make_centers_text(rows=1), make_rotations_text([{}]))
    graph = frame_to_graph(dataset[0])

    assert graph.x.shape == (17, len(NODE_FEATURES))
    assert graph.num_nodes == 17
    assert graph.frame_number == 0
    assert graph.metrics.shape == (1, len(BiomechanicalMetrics().as_dict()) - 1)
    assert graph.x[0, 0].item() == pytest.approx(0.1)
    assert graph.x[0, 6].item() == pytest.approx(1.0)


def test_dataset_to_graphs_stride(make_centers_text, make_rotations_text):
    dataset = load_motion_data(make_centers_text(rows=5), make_rotations_text([{}] * 5))
    graphs = dataset_to_graphs(dataset, stride=2)

    assert [g.frame_number for g in graphs] == [0, 2, 4]
    with pytest.raises(ValueError):
        dataset_to_graphs(dataset, stride=0)
