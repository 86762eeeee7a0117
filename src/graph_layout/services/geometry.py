"""
Graph Layout Engine - Arrangement Geometry

Pure coordinate math for batch transforms. Every function takes an ordered
sequence of nodes (anything with id, x, y; ring arrangement also reads
weight) and returns the target coordinates as {node_id: Vec2} in input
order. An empty result means "nothing to do".

Nothing here talks to a renderer; ArrangementEngine applies the results.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import numpy as np

from graph_layout.constants import (
    ABSOLUTE_MIN_RADIUS,
    DEFAULT_INNER_RADIUS_RATIO,
    DEFAULT_MIN_INNER_RADIUS,
    DEFAULT_MIN_OUTER_RADIUS,
    DEFAULT_TRIANGLE_SIDE,
    INNER_RING_START_ANGLE_DEG,
    MIN_DISTRIBUTABLE_RADIUS,
    MIN_RADIUS_SAMPLE_DISTANCE,
    OUTER_RING_START_ANGLE_DEG,
    RING_RADIUS_GAP,
    TRIANGLE_ANGLE_OFFSET_DEG,
    TRIANGLE_ANGLE_STEP_DEG,
)
from graph_layout.models.position import Vec2

INNER_RING = 'inner'
OUTER_RING = 'outer'

AXES = ('x', 'y')
EXTREMA = ('min', 'max')


def _coords(nodes) -> np.ndarray:
    return np.array([[float(n.x), float(n.y)] for n in nodes], dtype=float)


def _to_positions(nodes, coords: np.ndarray) -> Dict[str, Vec2]:
    return {n.id: Vec2(float(x), float(y)) for n, (x, y) in zip(nodes, coords)}


def centroid(nodes: Sequence) -> Vec2:
    """Arithmetic mean position of the nodes

    Raises:
        ValueError: If nodes is empty
    """
    if not nodes:
        raise ValueError("Need at least one node")
    cx, cy = _coords(nodes).mean(axis=0)
    return Vec2(float(cx), float(cy))


# ========================================
# Move / Scale / Align
# ========================================

def translate(nodes: Sequence, dx: float, dy: float) -> Dict[str, Vec2]:
    """Offset every node by (dx, dy)

    Returns nothing for an empty selection or a non-finite offset.
    """
    if not nodes:
        return {}
    try:
        dx, dy = float(dx), float(dy)
    except (TypeError, ValueError):
        return {}
    if not (math.isfinite(dx) and math.isfinite(dy)):
        return {}
    coords = _coords(nodes) + np.array([dx, dy], dtype=float)
    return _to_positions(nodes, coords)


def scale_around_centroid(nodes: Sequence, ratio) -> Dict[str, Vec2]:
    """Scale node offsets from their centroid by ratio

    new = centroid + ratio * (old - centroid)

    Returns nothing for an empty selection, a non-finite ratio, or a single
    node with ratio != 1 (scaling a point around itself moves nothing).
    """
    if not nodes:
        return {}
    try:
        ratio = float(ratio)
    except (TypeError, ValueError):
        return {}
    if not math.isfinite(ratio):
        return {}
    if len(nodes) == 1 and ratio != 1:
        return {}

    coords = _coords(nodes)
    origin = coords.mean(axis=0)
    return _to_positions(nodes, origin + ratio * (coords - origin))


def align(nodes: Sequence, axis: str, extremum: str) -> Dict[str, Vec2]:
    """Move every node onto the min or max of one axis

    Args:
        axis: 'x' or 'y'
        extremum: 'min' or 'max'

    Raises:
        ValueError: On an unknown axis or extremum
    """
    if axis not in AXES:
        raise ValueError(f"Unknown axis '{axis}', expected one of {AXES}")
    if extremum not in EXTREMA:
        raise ValueError(f"Unknown extremum '{extremum}', expected one of {EXTREMA}")
    if not nodes:
        return {}

    coords = _coords(nodes)
    column = AXES.index(axis)
    values = coords[:, column]
    coords[:, column] = values.min() if extremum == 'min' else values.max()
    return _to_positions(nodes, coords)


# ========================================
# Ring arrangement
# ========================================

def substring_classifier(substrings: Iterable[str]) -> Callable[[str], str]:
    """Ring classifier putting ids containing any of the substrings on the inner ring"""
    needles = [s for s in (substrings or []) if isinstance(s, str)]

    def classify(node_id) -> str:
        text = str(node_id)
        return INNER_RING if any(s in text for s in needles) else OUTER_RING

    return classify


def _everything_outer(node_id) -> str:
    return OUTER_RING


@dataclass
class ArrangementSpec:
    """How to arrange a node set in rings around its heaviest node

    Attributes:
        center_policy: Only 'max-weight' is supported
        ring_classifier: node_id -> 'inner' | 'outer'
        radius: Explicit outer radius (or triangle side); None or <= 0 to
            derive it from the current layout
    """
    center_policy: str = 'max-weight'
    ring_classifier: Callable[[str], str] = _everything_outer
    radius: Optional[float] = None

    def __post_init__(self):
        if self.center_policy != 'max-weight':
            raise ValueError(f"Unsupported center policy '{self.center_policy}'")

    @property
    def explicit_radius(self) -> Optional[float]:
        r = self.radius
        if isinstance(r, bool) or not isinstance(r, (int, float)):
            return None
        if not math.isfinite(r) or r <= 0:
            return None
        return float(r)


def _max_weight_node(nodes: Sequence):
    """Heaviest node; ties go to the earliest"""
    best = nodes[0]
    for node in nodes[1:]:
        if (node.weight or 0) > (best.weight or 0):
            best = node
    return best


def _sorted_by_id(nodes: List) -> List:
    return sorted(nodes, key=lambda n: str(n.id))


def _mean_distance(members: Sequence, center: Vec2, fallback_min: float, ring_size: Optional[int] = None) -> float:
    """Mean distance of members from center, ignoring points on the center

    With no usable distance the radius grows with ring_size (the number of
    nodes to place, defaulting to len(members)).
    """
    if members:
        offsets = _coords(members) - np.array([center.x, center.y])
        distances = np.hypot(offsets[:, 0], offsets[:, 1])
        distances = distances[distances > MIN_RADIUS_SAMPLE_DISTANCE]
        if distances.size:
            return float(distances.mean())
    if ring_size is None:
        ring_size = len(members)
    return fallback_min * max(1.0, ring_size / 2 + 0.5)


def _ring_angles(count: int, start_deg: float) -> np.ndarray:
    step = 2 * np.pi / count
    return np.deg2rad(start_deg) + step * np.arange(count)


def _distribute_on_circle(members: List, center: Vec2, radius: float, start_deg: float) -> Dict[str, Vec2]:
    if not members or radius <= MIN_DISTRIBUTABLE_RADIUS:
        return {}
    angles = _ring_angles(len(members), start_deg)
    xs = center.x + radius * np.cos(angles)
    ys = center.y + radius * np.sin(angles)
    return {n.id: Vec2(float(x), float(y)) for n, x, y in zip(members, xs, ys)}


def ring_radii(center: Vec2, inner: Sequence, outer: Sequence, explicit: Optional[float]):
    """Pick (inner_radius, outer_radius) for the two rings

    An explicit radius is the outer radius (or the inner one when only the
    inner ring is populated). Otherwise the current mean distance from the
    center is used, floored to the ring minimum: of every peripheral node for
    the outer ring when both rings are populated, else of the ring's own
    members.
    """
    outer_radius = 0.0
    inner_radius = 0.0

    if outer:
        if explicit is not None:
            outer_radius = explicit
        else:
            # With an inner ring present the outer ring is sized from every peripheral node
            reference = list(inner) + list(outer) if inner else outer
            outer_radius = _mean_distance(reference, center, DEFAULT_MIN_OUTER_RADIUS, ring_size=len(outer))
            if outer_radius < DEFAULT_MIN_OUTER_RADIUS:
                outer_radius = DEFAULT_MIN_OUTER_RADIUS
        if outer_radius < ABSOLUTE_MIN_RADIUS:
            outer_radius = ABSOLUTE_MIN_RADIUS

    if inner:
        if outer:
            inner_radius = outer_radius * DEFAULT_INNER_RADIUS_RATIO
            if inner_radius < DEFAULT_MIN_INNER_RADIUS:
                inner_radius = DEFAULT_MIN_INNER_RADIUS
            if inner_radius >= outer_radius - RING_RADIUS_GAP + 0.001:
                inner_radius = outer_radius - RING_RADIUS_GAP
            if inner_radius < ABSOLUTE_MIN_RADIUS:
                inner_radius = ABSOLUTE_MIN_RADIUS
            # Inner ring must stay strictly inside the outer one
            if inner_radius >= outer_radius and outer_radius > ABSOLUTE_MIN_RADIUS:
                inner_radius = outer_radius - ABSOLUTE_MIN_RADIUS
            elif inner_radius >= outer_radius:
                inner_radius = max(0.0, outer_radius * 0.5)
        else:
            if explicit is not None:
                inner_radius = explicit
            else:
                inner_radius = _mean_distance(inner, center, DEFAULT_MIN_INNER_RADIUS)
                if inner_radius < DEFAULT_MIN_INNER_RADIUS:
                    inner_radius = DEFAULT_MIN_INNER_RADIUS
            if inner_radius < ABSOLUTE_MIN_RADIUS:
                inner_radius = ABSOLUTE_MIN_RADIUS

    return max(inner_radius, 0.0), outer_radius


def _arrange_triangle(nodes: Sequence, explicit: Optional[float]) -> Dict[str, Vec2]:
    apex = _max_weight_node(nodes)
    others = _sorted_by_id([n for n in nodes if n.id != apex.id])
    side = explicit if explicit is not None else DEFAULT_TRIANGLE_SIDE

    angles = np.deg2rad(TRIANGLE_ANGLE_OFFSET_DEG + TRIANGLE_ANGLE_STEP_DEG * np.arange(len(others)))
    placements = {apex.id: Vec2(float(apex.x), float(apex.y))}
    for node, angle in zip(others, angles):
        placements[node.id] = Vec2(float(apex.x + side * np.cos(angle)),
                                   float(apex.y + side * np.sin(angle)))
    return {n.id: placements[n.id] for n in nodes}


def arrange_in_rings(nodes: Sequence, spec: ArrangementSpec) -> Dict[str, Vec2]:
    """Arrange nodes on concentric rings around the heaviest node

    - 0 or 1 nodes: nothing to do
    - 3 nodes: equilateral triangle with the heaviest node as apex
    - otherwise: heaviest node stays put as the center; the rest are split by
      the ring classifier and spread evenly on an inner and an outer ring,
      each ring ordered by id

    Returns:
        Target coordinate for every node, the center at its current position
    """
    nodes = list(nodes)
    if len(nodes) <= 1:
        return {}

    explicit = spec.explicit_radius
    if len(nodes) == 3:
        return _arrange_triangle(nodes, explicit)

    center_node = _max_weight_node(nodes)
    center = Vec2(float(center_node.x), float(center_node.y))

    inner, outer = [], []
    for node in nodes:
        if node.id == center_node.id:
            continue
        if spec.ring_classifier(node.id) == INNER_RING:
            inner.append(node)
        else:
            outer.append(node)

    inner_radius, outer_radius = ring_radii(center, inner, outer, explicit)

    inner_start = INNER_RING_START_ANGLE_DEG if outer else 0.0
    outer_start = OUTER_RING_START_ANGLE_DEG

    placements = {center_node.id: center}
    placements.update(_distribute_on_circle(_sorted_by_id(inner), center, inner_radius, inner_start))
    placements.update(_distribute_on_circle(_sorted_by_id(outer), center, outer_radius, outer_start))
    return {n.id: placements[n.id] for n in nodes if n.id in placements}
