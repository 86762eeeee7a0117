"""Base class for renderer adapters.

The engine never touches a concrete renderer. Each host (a live graph view,
the headless renderer used by the CLI and tests) implements this contract:
- one-way command channel to the simulation (no acknowledgment)
- read access to live nodes and their links
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from graph_layout.models.position import (
    Adjacency, GraphNode, PositionCommand, SimulationCommand, Vec2, snapshot_from_nodes,
)


class RendererGateway(ABC):
    """Abstract adapter between the layout engine and a graph renderer.

    Subclasses must implement:
    - post_position_command(): Queue a move/pin/unpin for one node
    - post_simulation_command(): Start, stop or perturb the simulation
    - get_live_nodes(): Nodes currently loaded in the view
    - get_node(): Live lookup by id
    - get_adjacency(): Forward/reverse links of a node
    - get_node_metadata(): Host metadata (frontmatter) of a node
    """

    @abstractmethod
    def post_position_command(self, command: PositionCommand):
        """Send a position command. Fire-and-forget."""
        pass

    @abstractmethod
    def post_simulation_command(self, command: SimulationCommand):
        """Send a simulation command. Fire-and-forget."""
        pass

    @abstractmethod
    def get_live_nodes(self) -> List[GraphNode]:
        """Return nodes currently loaded in the view, in render order."""
        pass

    @abstractmethod
    def get_node(self, node_id: str) -> Optional[GraphNode]:
        """Return the live node with this id, or None if it is not loaded."""
        pass

    @abstractmethod
    def get_adjacency(self, node_id: str) -> Adjacency:
        """Return forward and reverse neighbours of a node.

        Ids in the result may refer to nodes that are not loaded.
        """
        pass

    def get_node_metadata(self, node_id: str) -> Optional[Dict]:
        """Return host metadata for a node, or None when there is none."""
        return None

    def get_positions(self) -> Dict[str, Vec2]:
        """Current coordinates of every live node"""
        return snapshot_from_nodes(self.get_live_nodes())
