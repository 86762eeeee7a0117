"""Position data structures shared by the layout engine.

Coordinates are world-space graph units, the same space the renderer's
simulation works in. Snapshots map node ids to coordinates and are treated as
immutable values: anything that stores one takes a copy.
"""
import math
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Set


@dataclass
class Vec2:
    """2D vector for coordinate pairs.

    Used for node coordinates, drag deltas and arrangement centers.
    """
    x: float
    y: float

    def __iter__(self):
        """Allow tuple unpacking: x, y = vec2"""
        return iter((self.x, self.y))

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}


# NodeID -> coordinate
PositionSnapshot = Dict[str, Vec2]


@dataclass
class GraphNode:
    """Live node state as reported by the renderer.

    The engine never mutates these; it only reads coordinates and links and
    asks the renderer to move nodes through position commands.
    """
    id: str
    x: float = 0.0
    y: float = 0.0
    weight: float = 0.0
    color: Optional[object] = None
    forward: Set[str] = field(default_factory=set)
    reverse: Set[str] = field(default_factory=set)
    fx: Optional[float] = None
    fy: Optional[float] = None

    @property
    def pos(self) -> Vec2:
        return Vec2(self.x, self.y)

    @property
    def is_fixed(self) -> bool:
        return self.fx is not None or self.fy is not None

    def get_related(self) -> Set[str]:
        """Ids linked to or from this node"""
        return set(self.forward) | set(self.reverse)


@dataclass(frozen=True)
class Adjacency:
    """Forward (outgoing) and reverse (incoming) neighbours of a node"""
    forward: FrozenSet[str] = frozenset()
    reverse: FrozenSet[str] = frozenset()

    def related(self) -> Set[str]:
        return set(self.forward) | set(self.reverse)


@dataclass
class PositionCommand:
    """Request that the simulation move (and optionally pin) a node.

    fx/fy carry the pinned coordinate; None unpins that axis. x/y left as None
    are not sent, which is how an unlock command is expressed.
    """
    id: str
    x: Optional[float] = None
    y: Optional[float] = None
    fx: Optional[float] = None
    fy: Optional[float] = None

    @classmethod
    def pinned(cls, node_id: str, x: float, y: float) -> 'PositionCommand':
        return cls(id=node_id, x=x, y=y, fx=x, fy=y)

    @classmethod
    def unpinned(cls, node_id: str) -> 'PositionCommand':
        return cls(id=node_id)

    def to_message(self) -> dict:
        force_node = {'id': self.id}
        if self.x is not None:
            force_node['x'] = self.x
        if self.y is not None:
            force_node['y'] = self.y
        force_node['fx'] = self.fx
        force_node['fy'] = self.fy
        return {'forceNode': force_node}


@dataclass
class SimulationCommand:
    """Start, stop or perturb the physics simulation"""
    run: bool = True
    alpha: float = 1.0
    alpha_target: float = 0.0
    alpha_decay: Optional[float] = None

    def to_message(self) -> dict:
        message = {'run': self.run, 'alpha': self.alpha, 'alphaTarget': self.alpha_target}
        if self.alpha_decay is not None:
            message['alphaDecay'] = self.alpha_decay
        return message


def copy_snapshot(snapshot: Optional[Mapping[str, Vec2]]) -> PositionSnapshot:
    """Independent copy of a snapshot (Vec2 values are mutable dataclasses)"""
    if not snapshot:
        return {}
    return {node_id: Vec2(float(pos.x), float(pos.y)) for node_id, pos in snapshot.items()}


def snapshot_from_nodes(nodes: Iterable[GraphNode]) -> PositionSnapshot:
    """Capture the current coordinates of live nodes"""
    return {node.id: Vec2(float(node.x), float(node.y)) for node in nodes}


def snapshot_to_dict(snapshot: Mapping[str, Vec2]) -> Dict[str, Dict[str, float]]:
    """Plain, node-id-sorted mapping of {x, y} suitable for JSON"""
    return {node_id: snapshot[node_id].to_dict() for node_id in sorted(snapshot)}


def snapshot_from_dict(data: Mapping) -> PositionSnapshot:
    """Build a snapshot from a {id: {x, y, ...}} mapping.

    Extra fields per entry are ignored.

    Raises:
        ValueError: If the mapping or any entry lacks finite numeric x/y
    """
    if not isinstance(data, Mapping):
        raise ValueError(f"Expected a mapping of node positions, got {type(data).__name__}")

    snapshot = {}
    for node_id, entry in data.items():
        snapshot[str(node_id)] = coordinate_from_entry(node_id, entry)
    return snapshot


def coordinate_from_entry(node_id, entry) -> Vec2:
    """Validate one {x, y} entry and convert it to a Vec2

    Raises:
        ValueError: If x or y is missing, non-numeric or non-finite
    """
    if not isinstance(entry, Mapping):
        raise ValueError(f"Position for '{node_id}' is not an object")
    try:
        x = entry['x']
        y = entry['y']
    except KeyError as e:
        raise ValueError(f"Position for '{node_id}' is missing {e}") from e
    for value in (x, y):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise ValueError(f"Position for '{node_id}' has invalid coordinate {value!r}")
    return Vec2(float(x), float(y))
