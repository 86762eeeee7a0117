"""
Graph Layout Engine - Selection Manager

Tracks the active node-id set of one graph view and computes new sets from
spatial (rectangle), textual (regex over ids) and graph (related, backlinks,
outgoing links) queries. The set is ordered and never holds duplicates.

Queries only ever select nodes the renderer currently has loaded; ids that
appear in link data but are not resolvable are skipped.
"""

import logging
import re
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from graph_layout.models.position import GraphNode, Vec2
from graph_layout.services.renderer_gateway import RendererGateway


@dataclass(frozen=True)
class Rect:
    """Axis-aligned world-space rectangle, bounds inclusive"""
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @classmethod
    def from_corners(cls, start: Vec2, end: Vec2) -> 'Rect':
        """Rectangle spanned by two drag corners in any order"""
        return cls(min(start.x, end.x), min(start.y, end.y),
                   max(start.x, end.x), max(start.y, end.y))

    def contains(self, x: float, y: float) -> bool:
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max


@dataclass
class SelectionSummary:
    """Status-bar statistics for a selection"""
    count: int = 0
    metadata: Dict[str, List[str]] = field(default_factory=dict)
    backlinks: Optional[int] = None
    outgoing_links: Optional[int] = None
    properties: Optional[int] = None

    def status_text(self) -> str:
        if not self.count:
            return ""
        parts = [f"nodes: {self.count}"]
        for key, values in self.metadata.items():
            parts.append(f"{key}: {len(values)}")
        if self.backlinks is not None:
            parts.append(f"backlinks: {self.backlinks}")
            parts.append(f"outgoing links: {self.outgoing_links}")
            parts.append(f"properties: {self.properties}")
        return " | ".join(parts)


class SelectionManager:
    """Ordered, de-duplicated set of selected node ids"""

    def __init__(self, gateway: RendererGateway):
        self._logger = logging.getLogger('SelectionManager')
        self.gateway = gateway
        self._ids: Dict[str, None] = {}
        self._listeners: List[Callable] = []

    # ========================================
    # Basic set operations
    # ========================================

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def __len__(self):
        return len(self._ids)

    def __contains__(self, node_id):
        return node_id in self._ids

    def __iter__(self):
        return iter(list(self._ids))

    def nodes(self) -> List[GraphNode]:
        """Live nodes for the selected ids, in selection order"""
        result = []
        for node_id in self._ids:
            node = self.gateway.get_node(node_id)
            if node is not None:
                result.append(node)
        return result

    def replace(self, node_ids: Iterable[str]) -> List[str]:
        """Replace the whole selection"""
        self._ids = dict.fromkeys(node_ids)
        self._notify_listeners()
        return self.ids

    def add(self, node_ids: Iterable[str]) -> List[str]:
        """Union node ids into the selection"""
        merged = dict(self._ids)
        merged.update(dict.fromkeys(node_ids))
        return self.replace(merged)

    def remove(self, node_ids: Iterable[str]) -> List[str]:
        drop = set(node_ids)
        return self.replace(i for i in self._ids if i not in drop)

    def toggle(self, node_id: str) -> List[str]:
        if node_id in self._ids:
            return self.remove([node_id])
        return self.add([node_id])

    def clear(self) -> List[str]:
        return self.replace([])

    # ========================================
    # Queries
    # ========================================

    def select_by_region(self, rect: Rect, additive: bool = True, subtractive: bool = False) -> List[str]:
        """Select live nodes whose world coordinates lie inside rect

        Matches are unioned into the selection unless subtractive is set;
        a rectangle never replaces the selection.

        Args:
            rect: Inclusive world-space bounds
            additive: Union matches into the selection (also the fallback
                when neither flag is set)
            subtractive: Remove matches from the selection instead
        """
        matches = [n.id for n in self.gateway.get_live_nodes() if rect.contains(n.x, n.y)]
        self._logger.debug(f"Region {rect} matched {len(matches)} nodes")

        if subtractive:
            return self.remove(matches)
        return self.add(matches)

    def select_by_regex(self, pattern: str) -> List[str]:
        """Replace the selection with live nodes whose id matches pattern

        An invalid pattern leaves the selection unchanged.
        """
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            self._logger.warning(f"Invalid selection regex {pattern!r}: {e}")
            return self.ids

        matches = [n.id for n in self.gateway.get_live_nodes()
                   if isinstance(n.id, str) and compiled.search(n.id)]
        return self.replace(matches)

    def select_related(self, depth: int = 1) -> List[str]:
        """Grow the selection breadth-first over links, up to depth hops

        Links are followed in both directions. Each id is visited once;
        unloaded ids are skipped.
        """
        depth = max(0, int(depth))

        result: Dict[str, None] = {}
        queue = deque()
        for node_id in self._ids:
            if node_id not in result:
                result[node_id] = None
                queue.append((node_id, 0))

        while queue:
            node_id, current_depth = queue.popleft()
            if current_depth >= depth:
                continue
            for related_id in sorted(self.gateway.get_adjacency(node_id).related()):
                if related_id in result:
                    continue
                if self.gateway.get_node(related_id) is None:
                    continue
                result[related_id] = None
                queue.append((related_id, current_depth + 1))

        return self.replace(result)

    def select_backlinks(self) -> List[str]:
        """Add every loaded node that links to a selected node"""
        return self._expand_links(lambda adjacency: adjacency.reverse)

    def select_outgoing_links(self) -> List[str]:
        """Add every loaded node a selected node links to"""
        return self._expand_links(lambda adjacency: adjacency.forward)

    def _expand_links(self, direction) -> List[str]:
        found: Dict[str, None] = {}
        for node_id in self._ids:
            for linked_id in sorted(direction(self.gateway.get_adjacency(node_id))):
                if linked_id not in self._ids and self.gateway.get_node(linked_id) is not None:
                    found[linked_id] = None
        return self.add(found)

    def select_by_position_type(self, fixed: bool, reference: Optional[Mapping]) -> List[str]:
        """Select live nodes that do (fixed) or do not have a position in reference

        Args:
            fixed: True for nodes present in reference, False for absent ones
            reference: The active history entry (node id -> position)
        """
        reference = reference or {}
        matches = [n.id for n in self.gateway.get_live_nodes() if (n.id in reference) == fixed]
        return self.replace(matches)

    # ========================================
    # Status
    # ========================================

    def summary(self, tracked_keys: Iterable[str] = ()) -> SelectionSummary:
        """Count selected nodes and the distinct values of tracked metadata keys

        For a single selected node the link and property counts are filled in.
        """
        tracked_keys = list(tracked_keys)
        values: Dict[str, set] = {key: set() for key in tracked_keys}

        for node_id in self._ids:
            metadata = self.gateway.get_node_metadata(node_id) or {}
            for key in tracked_keys:
                if key not in metadata:
                    continue
                value = metadata[key]
                items = value if isinstance(value, (list, tuple, set)) else [value]
                values[key].update(str(item) for item in items if item is not None)

        summary = SelectionSummary(
            count=len(self._ids),
            metadata={key: sorted(found) for key, found in values.items() if found},
        )

        if len(self._ids) == 1:
            node_id = next(iter(self._ids))
            adjacency = self.gateway.get_adjacency(node_id)
            summary.backlinks = len(adjacency.reverse)
            summary.outgoing_links = len(adjacency.forward)
            summary.properties = len(self.gateway.get_node_metadata(node_id) or {})
        return summary

    # ========================================
    # Listeners
    # ========================================

    def add_listener(self, callback: Callable[[List[str]], None]):
        """Register callback(ids), called after every selection change"""
        self._listeners.append(callback)

    def remove_listener(self, callback):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify_listeners(self):
        ids = self.ids
        for callback in list(self._listeners):
            try:
                callback(ids)
            except Exception as e:
                self._logger.error(f"Error notifying selection listener: {e}")
