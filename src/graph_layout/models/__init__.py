"""
Graph Layout Engine - Data Models

Plain data types passed between the engine components: coordinates,
snapshots, live node state, renderer commands and settings.
"""

from .position import (
    Vec2, PositionSnapshot, GraphNode, Adjacency,
    PositionCommand, SimulationCommand,
    copy_snapshot, snapshot_from_nodes, snapshot_to_dict, snapshot_from_dict,
)
from .settings import LayoutSettings

__all__ = [
    'Vec2', 'PositionSnapshot', 'GraphNode', 'Adjacency',
    'PositionCommand', 'SimulationCommand',
    'copy_snapshot', 'snapshot_from_nodes', 'snapshot_to_dict', 'snapshot_from_dict',
    'LayoutSettings',
]
