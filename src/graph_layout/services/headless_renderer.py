"""Headless renderer service.

In-memory RendererGateway used by the command line tool and the test suite.
There is no physics: position commands are applied to the node table as soon
as they arrive, and simulation commands are only recorded.

Graph files are JSON:
    {
        "nodes": [{"id": "a.md", "x": 0, "y": 0, "weight": 1, "color": null,
                   "metadata": {"cluster": "eu"}}, ...],
        "links": [["a.md", "b.md"], ...]
    }
"""

import json
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from graph_layout.models.position import (
    Adjacency, GraphNode, PositionCommand, SimulationCommand,
)
from graph_layout.services.renderer_gateway import RendererGateway

logger = logging.getLogger(__name__)


class HeadlessRenderer(RendererGateway):
    """Renderer stand-in holding live nodes, links and a command log."""

    def __init__(self, nodes: Iterable[GraphNode] = (), metadata: Optional[Dict[str, dict]] = None):
        self._nodes: Dict[str, GraphNode] = {}
        self._metadata: Dict[str, dict] = dict(metadata or {})
        # Every link ever added, so nodes loaded later pick up their edges
        self._links: List[Tuple[str, str]] = []
        self.command_log: List[dict] = []
        self.last_simulation_command: Optional[SimulationCommand] = None

        for node in nodes:
            self.add_node(node)

    @classmethod
    def from_graph_data(cls, data: dict) -> 'HeadlessRenderer':
        """Build a renderer from parsed graph JSON (see module docstring)

        Raises:
            ValueError: If a node has no id or a link is not a pair
        """
        renderer = cls()
        for raw in data.get('nodes', []):
            if 'id' not in raw:
                raise ValueError(f"Graph node without id: {raw!r}")
            node = GraphNode(
                id=str(raw['id']),
                x=float(raw.get('x', 0.0)),
                y=float(raw.get('y', 0.0)),
                weight=float(raw.get('weight', 0.0) or 0.0),
                color=raw.get('color'),
            )
            renderer.add_node(node, metadata=raw.get('metadata'))

        for link in data.get('links', []):
            if not isinstance(link, (list, tuple)) or len(link) != 2:
                raise ValueError(f"Graph link must be a [source, target] pair: {link!r}")
            renderer.add_link(str(link[0]), str(link[1]))
        return renderer

    @classmethod
    def from_graph_file(cls, path) -> 'HeadlessRenderer':
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_graph_data(json.load(f))

    # ========================================
    # Graph editing
    # ========================================

    def add_node(self, node: GraphNode, metadata: Optional[dict] = None):
        """Load a node, attaching links added before it arrived"""
        self._nodes[node.id] = node
        if metadata is not None:
            self._metadata[node.id] = dict(metadata)
        for source, target in self._links:
            if source == node.id:
                node.forward.add(target)
            if target == node.id:
                node.reverse.add(source)

    def remove_node(self, node_id: str):
        """Unload a node; links pointing at it are kept as dangling ids"""
        self._nodes.pop(node_id, None)

    def add_link(self, source: str, target: str):
        """Link source -> target; either end may be an unloaded id

        An end that is loaded later still gets the link.
        """
        self._links.append((source, target))
        if source in self._nodes:
            self._nodes[source].forward.add(target)
        if target in self._nodes:
            self._nodes[target].reverse.add(source)

    # ========================================
    # RendererGateway
    # ========================================

    def post_position_command(self, command: PositionCommand):
        self.command_log.append(command.to_message())
        node = self._nodes.get(command.id)
        if node is None:
            logger.debug(f"Position command for unloaded node '{command.id}' ignored")
            return
        if command.x is not None:
            node.x = command.x
        if command.y is not None:
            node.y = command.y
        node.fx = command.fx
        node.fy = command.fy

    def post_simulation_command(self, command: SimulationCommand):
        self.command_log.append(command.to_message())
        self.last_simulation_command = command

    def get_live_nodes(self) -> List[GraphNode]:
        return list(self._nodes.values())

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self._nodes.get(node_id)

    def get_adjacency(self, node_id: str) -> Adjacency:
        node = self._nodes.get(node_id)
        if node is None:
            return Adjacency()
        return Adjacency(frozenset(node.forward), frozenset(node.reverse))

    def get_node_metadata(self, node_id: str) -> Optional[dict]:
        return self._metadata.get(node_id)

    # ========================================
    # Inspection
    # ========================================

    @property
    def position_messages(self) -> List[dict]:
        """forceNode payloads sent so far, oldest first"""
        return [m['forceNode'] for m in self.command_log if 'forceNode' in m]

    @property
    def simulation_messages(self) -> List[dict]:
        return [m for m in self.command_log if 'forceNode' not in m]

    def clear_log(self):
        self.command_log = []
        self.last_simulation_command = None
