"""
Tests for the pure arrangement geometry.

Covers:
- Translation, centroid scaling and alignment
- Degenerate inputs (empty, single node, bad ratio, bad axis)
- Equilateral triangle for three nodes
- Ring arrangement: center choice, ring split, radii, start angles
- Radius heuristics and floors
"""
import math
import pytest

from graph_layout.models.position import GraphNode, Vec2
from graph_layout.services.geometry import (
    ArrangementSpec, INNER_RING, OUTER_RING,
    align, arrange_in_rings, centroid, ring_radii, scale_around_centroid,
    substring_classifier, translate,
)


def _node(node_id, x, y, weight=0):
    return GraphNode(id=node_id, x=x, y=y, weight=weight)


def _dist(a, b):
    return math.hypot(a.x - b.x, a.y - b.y)


def _assert_pos(actual, x, y, tol=1e-9):
    assert actual.x == pytest.approx(x, abs=tol)
    assert actual.y == pytest.approx(y, abs=tol)


# ══════════════════════════════════════════════════════════════════════════
# Move / Scale / Align
# ══════════════════════════════════════════════════════════════════════════

class TestTranslate:

    def test_offsets_every_node(self):
        result = translate([_node('a', 0, 0), _node('b', 5, -5)], 10, 2)
        assert result == {'a': Vec2(10, 2), 'b': Vec2(15, -3)}

    def test_empty_is_noop(self):
        assert translate([], 10, 2) == {}

    @pytest.mark.parametrize('dx, dy', [
        (float('nan'), 0), (0, float('inf')), (None, 1), ('left', 1),
    ])
    def test_bad_offset_is_noop(self, dx, dy):
        assert translate([_node('a', 0, 0), _node('b', 5, -5)], dx, dy) == {}


class TestScale:

    def test_ratio_one_is_identity(self):
        nodes = [_node('a', 1.5, -2.25), _node('b', 1e6, 3), _node('c', -7, 0.1)]
        result = scale_around_centroid(nodes, 1.0)
        for node in nodes:
            _assert_pos(result[node.id], node.x, node.y)

    def test_doubles_spread_around_centroid(self):
        result = scale_around_centroid([_node('a', 0, 0), _node('b', 2, 0)], 2)
        assert result == {'a': Vec2(-1, 0), 'b': Vec2(3, 0)}

    def test_centroid_is_preserved(self):
        nodes = [_node('a', 0, 0), _node('b', 4, 0), _node('c', 2, 6)]
        result = scale_around_centroid(nodes, 0.5)
        before = centroid(nodes)
        after = centroid([_node(k, v.x, v.y) for k, v in result.items()])
        _assert_pos(after, before.x, before.y)

    def test_single_node_with_ratio_is_noop(self):
        assert scale_around_centroid([_node('a', 3, 3)], 2) == {}

    def test_single_node_ratio_one(self):
        assert scale_around_centroid([_node('a', 3, 3)], 1) == {'a': Vec2(3, 3)}

    @pytest.mark.parametrize('ratio', [float('nan'), float('inf'), 'abc', None])
    def test_bad_ratio_is_noop(self, ratio):
        assert scale_around_centroid([_node('a', 0, 0), _node('b', 1, 1)], ratio) == {}

    def test_empty_is_noop(self):
        assert scale_around_centroid([], 2) == {}


class TestAlign:

    def test_align_x_max(self):
        result = align([_node('a', 0, 0), _node('b', 5, 3)], 'x', 'max')
        assert result == {'a': Vec2(5, 0), 'b': Vec2(5, 3)}

    def test_align_y_min(self):
        result = align([_node('a', 0, 4), _node('b', 5, -3)], 'y', 'min')
        assert result == {'a': Vec2(0, -3), 'b': Vec2(5, -3)}

    def test_bad_axis_raises(self):
        with pytest.raises(ValueError):
            align([_node('a', 0, 0)], 'z', 'min')

    def test_bad_extremum_raises(self):
        with pytest.raises(ValueError):
            align([_node('a', 0, 0)], 'x', 'middle')

    def test_empty_is_noop(self):
        assert align([], 'x', 'min') == {}

    def test_centroid_of_empty_raises(self):
        with pytest.raises(ValueError):
            centroid([])


# ══════════════════════════════════════════════════════════════════════════
# Triangle
# ══════════════════════════════════════════════════════════════════════════

class TestTriangle:

    def test_three_nodes_form_equilateral_triangle(self):
        nodes = [_node('b', 40, 40, 1), _node('apex', 10, 20, 3), _node('c', -5, 9, 1)]
        result = arrange_in_rings(nodes, ArrangementSpec(radius=150))

        a, b, c = result['apex'], result['b'], result['c']
        assert _dist(a, b) == pytest.approx(150, abs=1e-6)
        assert _dist(a, c) == pytest.approx(150, abs=1e-6)
        assert _dist(b, c) == pytest.approx(150, abs=1e-6)

    def test_apex_stays_and_others_follow_id_order(self):
        nodes = [_node('z', 0, 0, 1), _node('apex', 10, 20, 3), _node('m', 0, 0, 1)]
        result = arrange_in_rings(nodes, ArrangementSpec(radius=150))

        assert result['apex'] == Vec2(10, 20)
        # 'm' sorts first: -30 degrees, then 'z' at +30 degrees
        _assert_pos(result['m'], 10 + 150 * math.cos(math.radians(-30)), 20 - 75)
        _assert_pos(result['z'], 10 + 150 * math.cos(math.radians(30)), 20 + 75)

    def test_default_side_without_radius(self):
        nodes = [_node('a', 0, 0, 2), _node('b', 0, 0), _node('c', 0, 0)]
        result = arrange_in_rings(nodes, ArrangementSpec())
        assert _dist(result['a'], result['b']) == pytest.approx(150)

    def test_weight_tie_keeps_first_as_apex(self):
        nodes = [_node('first', 1, 1, 2), _node('second', 5, 5, 2), _node('third', 9, 9)]
        result = arrange_in_rings(nodes, ArrangementSpec(radius=100))
        assert result['first'] == Vec2(1, 1)

    def test_result_keeps_input_order(self):
        nodes = [_node('b', 0, 0), _node('apex', 0, 0, 3), _node('c', 0, 0)]
        assert list(arrange_in_rings(nodes, ArrangementSpec(radius=10))) == ['b', 'apex', 'c']


# ══════════════════════════════════════════════════════════════════════════
# Rings
# ══════════════════════════════════════════════════════════════════════════

class TestRings:

    def test_zero_or_one_node_is_noop(self):
        assert arrange_in_rings([], ArrangementSpec()) == {}
        assert arrange_in_rings([_node('a', 0, 0)], ArrangementSpec()) == {}

    def test_heaviest_node_is_fixed_center(self):
        nodes = [_node('a', 300, 0), _node('hub', 7, 8, 10), _node('b', 0, 300)]
        nodes.append(_node('c', -300, 0))
        result = arrange_in_rings(nodes, ArrangementSpec(radius=50))
        assert result['hub'] == Vec2(7, 8)
        for node_id in ('a', 'b', 'c'):
            assert _dist(result[node_id], Vec2(7, 8)) == pytest.approx(50)

    def test_outer_ring_from_mean_distance(self):
        nodes = [
            _node('hub', 0, 0, 10),
            _node('d', 0, -300), _node('c', -300, 0), _node('b', 0, 300), _node('a', 300, 0),
        ]
        result = arrange_in_rings(nodes, ArrangementSpec())
        # Sorted by id, evenly spaced from 0 degrees
        _assert_pos(result['a'], 300, 0)
        _assert_pos(result['b'], 0, 300)
        _assert_pos(result['c'], -300, 0)
        _assert_pos(result['d'], 0, -300)

    def test_two_nodes_use_outer_minimum(self):
        result = arrange_in_rings([_node('hub', 0, 0, 2), _node('leaf', 30, 40)], ArrangementSpec())
        assert result['hub'] == Vec2(0, 0)
        _assert_pos(result['leaf'], 100, 0)

    def test_radius_fallback_when_all_on_center(self):
        nodes = [_node('hub', 0, 0, 5)] + [_node(f'n{i}', 0, 0) for i in range(4)]
        result = arrange_in_rings(nodes, ArrangementSpec())
        # 100 * max(1, 4 / 2 + 0.5)
        for i in range(4):
            assert _dist(result[f'n{i}'], Vec2(0, 0)) == pytest.approx(250)

    def test_inner_and_outer_rings(self):
        nodes = [
            _node('hub', 0, 0, 10),
            _node('svc-a', 300, 0), _node('svc-b', 0, 300),
            _node('redis-cache', 10, 10), _node('rabbit-q', 20, 20),
        ]
        spec = ArrangementSpec(ring_classifier=substring_classifier(['redis', 'rabbit']), radius=200)
        result = arrange_in_rings(nodes, spec)

        _assert_pos(result['svc-a'], 200, 0)
        _assert_pos(result['svc-b'], -200, 0)
        # Inner ring: 0.6 * outer, starting at -90 degrees
        _assert_pos(result['rabbit-q'], 0, -120)
        _assert_pos(result['redis-cache'], 0, 120)

    def test_inner_ring_only_starts_at_zero(self):
        nodes = [_node('hub', 0, 0, 10), _node('redis-1', 0, 30), _node('redis-2', 30, 0), _node('redis-3', -30, 0)]
        spec = ArrangementSpec(ring_classifier=substring_classifier(['redis']))
        result = arrange_in_rings(nodes, spec)
        # Mean distance 30 is floored to the inner minimum of 50
        _assert_pos(result['redis-1'], 50, 0)
        for node_id in ('redis-2', 'redis-3'):
            assert _dist(result[node_id], Vec2(0, 0)) == pytest.approx(50)

    def test_non_positive_radius_is_derived(self):
        spec = ArrangementSpec(radius=-5)
        assert spec.explicit_radius is None
        assert ArrangementSpec(radius=0).explicit_radius is None
        assert ArrangementSpec(radius=float('nan')).explicit_radius is None
        assert ArrangementSpec(radius=True).explicit_radius is None
        assert ArrangementSpec(radius=120).explicit_radius == 120.0

    def test_unknown_center_policy(self):
        with pytest.raises(ValueError):
            ArrangementSpec(center_policy='min-weight')


class TestRingRadii:

    def test_small_explicit_radius_keeps_gap(self):
        center = Vec2(0, 0)
        inner, outer = [_node('i', 0, 0)], [_node('o', 0, 0)]
        assert ring_radii(center, inner, outer, 25.0) == (10.0, 25.0)

    def test_inner_kept_below_outer(self):
        center = Vec2(0, 0)
        inner, outer = [_node('i', 0, 0)], [_node('o', 0, 0)]
        inner_r, outer_r = ring_radii(center, inner, outer, 5.0)
        assert outer_r == 10.0
        assert inner_r < outer_r

    def test_large_explicit_radius(self):
        center = Vec2(0, 0)
        assert ring_radii(center, [_node('i', 0, 0)], [_node('o', 0, 0)], 500.0) == (300.0, 500.0)

    def test_outer_only(self):
        assert ring_radii(Vec2(0, 0), [], [_node('o', 0, 400)], None) == (0.0, 400.0)

    def test_outer_radius_sized_from_all_peripheral_nodes(self):
        inner = [_node('a/redis', 500, 0)]
        outer = [_node('o1', 100, 0), _node('o2', 0, 100), _node('o3', -100, 0)]
        # Mean of 500, 100, 100, 100
        assert ring_radii(Vec2(0, 0), inner, outer, None) == pytest.approx((120.0, 200.0))

    def test_fallback_counts_outer_ring_only(self):
        inner = [_node('redis', 0, 0)]
        outer = [_node(f'o{i}', 0, 0) for i in range(4)]
        # 100 * max(1, 4 / 2 + 0.5)
        assert ring_radii(Vec2(0, 0), inner, outer, None) == pytest.approx((150.0, 250.0))


class TestClassifier:

    def test_substring_match_is_inner(self):
        classify = substring_classifier(['redis', 'postg'])
        assert classify('db/postgres.md') == INNER_RING
        assert classify('cache-redis') == INNER_RING
        assert classify('services/api.md') == OUTER_RING

    def test_no_substrings_everything_outer(self):
        assert substring_classifier([])('redis') == OUTER_RING
        assert substring_classifier(None)('redis') == OUTER_RING
