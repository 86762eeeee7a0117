"""
Graph Layout Engine - Arrangement Engine

Applies batch transforms to a node selection through the renderer:

1. one pinned position command per affected node
2. a simulation pulse so the view settles around the pinned nodes
3. a debounced history commit

The coordinate math lives in services.geometry; this class resolves ids to
live nodes, sends the commands and records history. Degenerate inputs send
nothing and record nothing.
"""

import logging
import math
from typing import Dict, Iterable, List, Mapping, Optional

from graph_layout.constants import (
    DRAG_DEADZONE,
    GRID_SIZE,
    PULSE_ALPHA_DECAY_RUN,
    PULSE_ALPHA_DEFAULT,
    PULSE_ALPHA_DRAG,
    PULSE_ALPHA_RUN,
    PULSE_ALPHA_STOP,
)
from graph_layout.models.position import GraphNode, PositionCommand, SimulationCommand, Vec2
from graph_layout.services import geometry
from graph_layout.services.geometry import ArrangementSpec
from graph_layout.services.renderer_gateway import RendererGateway


class ArrangementEngine:
    """Geometric transforms over node selections"""

    def __init__(self, gateway: RendererGateway, history=None):
        """
        Args:
            gateway: Renderer adapter receiving the commands
            history: HistoryManager to commit to after each transform (optional)
        """
        self._logger = logging.getLogger('ArrangementEngine')
        self.gateway = gateway
        self.history = history

    def _resolve(self, node_ids: Iterable[str]) -> List[GraphNode]:
        nodes = []
        for node_id in node_ids:
            node = self.gateway.get_node(node_id)
            if node is None:
                self._logger.debug(f"Skipping unloaded node '{node_id}'")
                continue
            nodes.append(node)
        return nodes

    def pulse(self, alpha=PULSE_ALPHA_DEFAULT, alpha_decay=None):
        """Reheat the simulation"""
        self.gateway.post_simulation_command(
            SimulationCommand(run=True, alpha=alpha, alpha_target=0.0, alpha_decay=alpha_decay))

    def _apply(self, positions, description: str, alpha=PULSE_ALPHA_DEFAULT, commit=True) -> bool:
        """Pin nodes at positions, pulse the simulation and commit history

        positions is a mapping or an iterable of (node_id, Vec2) pairs. Pairs
        are sent as they are produced, so a producer that raises part way
        leaves the earlier commands in place and skips the pulse and commit.
        """
        items = positions.items() if isinstance(positions, Mapping) else positions

        count = 0
        for node_id, pos in items:
            self.gateway.post_position_command(PositionCommand.pinned(node_id, pos.x, pos.y))
            count += 1
        if not count:
            return False

        self.pulse(alpha)

        if commit and self.history is not None:
            self.history.commit(description=description)

        self._logger.debug(f"{description}: pinned {count} nodes")
        return True

    # ========================================
    # Selection transforms
    # ========================================

    def move(self, node_ids: Iterable[str], dx: float, dy: float) -> bool:
        """Translate nodes by (dx, dy)"""
        nodes = self._resolve(node_ids)
        return self._apply(geometry.translate(nodes, dx, dy), f"Move ({dx}, {dy})")

    def scale_around_centroid(self, node_ids: Iterable[str], ratio) -> bool:
        """Scale node spread around the selection centroid"""
        nodes = self._resolve(node_ids)
        return self._apply(geometry.scale_around_centroid(nodes, ratio), f"Scale x{ratio}")

    def align_selected(self, node_ids: Iterable[str], axis: str, extremum: str) -> bool:
        """Align nodes to the min or max of one axis

        Raises:
            ValueError: On an unknown axis or extremum
        """
        nodes = self._resolve(node_ids)
        return self._apply(geometry.align(nodes, axis, extremum), f"Align {axis} {extremum}")

    def arrange_in_rings(self, node_ids: Iterable[str], spec: ArrangementSpec) -> bool:
        """Arrange nodes in rings around the heaviest one"""
        nodes = self._resolve(node_ids)
        return self._apply(geometry.arrange_in_rings(nodes, spec), "Arrange in rings")

    def drag_co_selected(self, node_ids: Iterable[str], drag_node_id: str, drag_start: Vec2) -> bool:
        """Move the rest of the selection along with a dragged node

        Args:
            node_ids: Current selection
            drag_node_id: Node the user dragged (already at its new position)
            drag_start: Where the dragged node was when the drag began
        """
        drag_node = self.gateway.get_node(drag_node_id)
        if drag_node is None or drag_start is None:
            return False

        dx = drag_node.x - drag_start.x
        dy = drag_node.y - drag_start.y
        if abs(dx) < DRAG_DEADZONE and abs(dy) < DRAG_DEADZONE:
            return False

        positions: Dict[str, Vec2] = {}
        for node in self._resolve(node_ids):
            if node.id == drag_node.id:
                positions[node.id] = Vec2(drag_node.x, drag_node.y)
            else:
                positions[node.id] = Vec2(node.x + dx, node.y + dy)
        return self._apply(positions, "Drag selection", alpha=PULSE_ALPHA_DRAG)

    def snap_to_grid(self, node_id: str, grid_size: float = GRID_SIZE) -> Optional[Vec2]:
        """Pin a node at the nearest grid point

        Halves round up, so 250 snaps to 500 and -250 to 0. Records no history;
        the drag that dropped the node does.

        Returns:
            The snapped position, or None for an unloaded node or a bad grid
        """
        node = self.gateway.get_node(node_id)
        if node is None or not grid_size or grid_size <= 0:
            return None

        snapped = Vec2(math.floor(node.x / grid_size + 0.5) * grid_size,
                       math.floor(node.y / grid_size + 0.5) * grid_size)
        self.gateway.post_position_command(PositionCommand.pinned(node.id, snapped.x, snapped.y))
        self._logger.debug(f"Snapped '{node.id}' to {snapped}")
        return snapped

    def unlock(self, node_ids: Iterable[str]) -> int:
        """Release pinned positions so the simulation may move the nodes again

        Returns:
            Number of nodes unpinned
        """
        count = 0
        for node in self._resolve(node_ids):
            self.gateway.post_position_command(PositionCommand.unpinned(node.id))
            count += 1
        if count:
            self.pulse()
        return count

    # ========================================
    # Whole-layout operations
    # ========================================

    def restore_positions(self, snapshot: Optional[Mapping[str, Vec2]]) -> int:
        """Pin every live node that has a position in snapshot

        Does not record history; undo/redo and snapshot restore call this.

        Returns:
            Number of nodes pinned
        """
        if not snapshot:
            return 0

        count = 0
        for node in self.gateway.get_live_nodes():
            pos = snapshot.get(node.id)
            if pos is not None:
                self.gateway.post_position_command(PositionCommand.pinned(node.id, pos.x, pos.y))
                count += 1
        self.pulse()
        self._logger.debug(f"Restored {count} of {len(snapshot)} stored positions")
        return count

    def apply_positions(self, positions: Mapping[str, Vec2], alpha=PULSE_ALPHA_DEFAULT,
                        description="Apply positions") -> bool:
        """Pin arbitrary node positions (ids need not be loaded) and commit

        Accepts a mapping or an iterable of (node_id, Vec2) pairs.
        """
        return self._apply(positions, description, alpha=alpha)

    def run_simulation(self):
        self.pulse(alpha=PULSE_ALPHA_RUN, alpha_decay=PULSE_ALPHA_DECAY_RUN)

    def stop_simulation(self):
        self.pulse(alpha=PULSE_ALPHA_STOP)
