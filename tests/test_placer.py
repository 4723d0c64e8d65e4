"""Tests for the drop resolver and its geometry helpers.

Validates:
  - Half-inch snapping (idempotent, halves round up)
  - Strict AABB overlap (touching edges allowed)
  - Bounds check and holding-row parking
  - Fast path when the snapped position is free
  - Nearest-free-cell search with scan-order tie-breaking
  - Degenerate result when the surface is full
"""

from __future__ import annotations

import random
import unittest

from quiltdesigner.placer import (
    Membership,
    boxes_overlap,
    clamp,
    coverage_ratio,
    find_nearest_free_position,
    fits_in_surface,
    overlapping_pairs,
    resolve_drop,
    snap,
)
from tests.quilt_fixture import make_quilt, make_row, make_square


class TestSnap(unittest.TestCase):

    def test_snaps_to_half_inch(self):
        self.assertEqual(snap(3.2), 3.0)
        self.assertEqual(snap(3.3), 3.5)
        self.assertEqual(snap(3.74), 3.5)
        self.assertEqual(snap(3.76), 4.0)

    def test_halves_round_up(self):
        self.assertEqual(snap(0.25), 0.5)
        self.assertEqual(snap(0.75), 1.0)
        self.assertEqual(snap(-0.25), 0.0)

    def test_negative_values(self):
        self.assertEqual(snap(-1.2), -1.0)
        self.assertEqual(snap(-1.3), -1.5)

    def test_idempotent(self):
        rng = random.Random(7)
        for _ in range(500):
            v = rng.uniform(-100, 100)
            self.assertEqual(snap(snap(v)), snap(v))

    def test_result_on_grid(self):
        rng = random.Random(11)
        for _ in range(200):
            s = snap(rng.uniform(-50, 50))
            self.assertEqual((s * 2) % 1, 0)


class TestGeometryHelpers(unittest.TestCase):

    def test_clamp(self):
        self.assertEqual(clamp(5, 0, 10), 5)
        self.assertEqual(clamp(-1, 0, 10), 0)
        self.assertEqual(clamp(11, 0, 10), 10)

    def test_clamp_empty_range_prefers_low(self):
        self.assertEqual(clamp(3, 0, -2), 0)

    def test_overlap_separated(self):
        self.assertFalse(boxes_overlap(0, 0, 10, 10, 20, 0, 10, 10))

    def test_overlap_touching_edges_allowed(self):
        self.assertFalse(boxes_overlap(0, 0, 10, 10, 10, 0, 10, 10))
        self.assertFalse(boxes_overlap(0, 0, 10, 10, 0, 10, 10, 10))
        self.assertFalse(boxes_overlap(0, 0, 10, 10, 10, 10, 5, 5))

    def test_overlap_interior(self):
        self.assertTrue(boxes_overlap(0, 0, 10, 10, 9.5, 9.5, 10, 10))
        self.assertTrue(boxes_overlap(0, 0, 10, 10, 2, 2, 1, 1))

    def test_fits_in_surface_edges_inclusive(self):
        quilt = make_quilt(60, 48)
        self.assertTrue(fits_in_surface(0, 0, 12, 12, quilt))
        self.assertTrue(fits_in_surface(48, 36, 12, 12, quilt))
        self.assertFalse(fits_in_surface(48.5, 36, 12, 12, quilt))
        self.assertFalse(fits_in_surface(0, -0.5, 12, 12, quilt))

    def test_buffer_inflates_surface(self):
        quilt = make_quilt(60, 48, buffer=3)
        self.assertEqual(quilt.total_width, 66)
        self.assertEqual(quilt.total_height, 54)
        self.assertTrue(fits_in_surface(54, 42, 12, 12, quilt))

    def test_overlapping_pairs_ignores_touching(self):
        squares = [
            make_square("a", x=0, y=0),
            make_square("b", x=12, y=0),
            make_square("c", x=6, y=6),
        ]
        self.assertEqual(overlapping_pairs(squares), [("a", "c"), ("b", "c")])

    def test_coverage_ratio(self):
        quilt = make_quilt(24, 12)
        self.assertAlmostEqual(coverage_ratio([make_square("a")], quilt), 0.5)
        # Overlap counts once
        squares = [make_square("a"), make_square("b", x=6)]
        self.assertAlmostEqual(coverage_ratio(squares, quilt), 18 * 12 / (24 * 12))
        self.assertEqual(coverage_ratio([], quilt), 0.0)


class TestResolveDropBounds(unittest.TestCase):

    def setUp(self):
        self.quilt = make_quilt(60, 48)
        self.sq = make_square("sq", membership=Membership.IN_HOLDING)

    def test_drop_above_surface_goes_to_holding(self):
        r = resolve_drop(self.sq, 10, -5, [], self.quilt)
        self.assertEqual(r.membership, Membership.IN_HOLDING)
        self.assertEqual((r.x, r.y), (10, 50))
        self.assertFalse(r.searched)

    def test_drop_below_surface_goes_to_holding(self):
        r = resolve_drop(self.sq, 20, 48 + 10, [], self.quilt)
        self.assertEqual(r.membership, Membership.IN_HOLDING)
        self.assertEqual(r.y, 50)

    def test_holding_x_is_clamped(self):
        r = resolve_drop(self.sq, 100, -5, [], self.quilt)
        self.assertEqual(r.x, 48)
        r = resolve_drop(self.sq, -7, -5, [], self.quilt)
        self.assertEqual(r.x, 0)

    def test_partially_outside_goes_to_holding(self):
        r = resolve_drop(self.sq, 50, 10, [], self.quilt)
        self.assertEqual(r.membership, Membership.IN_HOLDING)
        self.assertEqual(r.x, 48)

    def test_holding_ignores_overlap(self):
        others = [make_square("o", x=0, y=0)]
        r = resolve_drop(self.sq, 0, -5, others, self.quilt)
        self.assertEqual(r.membership, Membership.IN_HOLDING)
        self.assertEqual((r.x, r.y), (0, 50))

    def test_square_larger_than_surface_goes_to_holding(self):
        big = make_square("big", 80, 80, membership=Membership.IN_HOLDING)
        r = resolve_drop(big, 0, 0, [], self.quilt)
        self.assertEqual(r.membership, Membership.IN_HOLDING)
        self.assertEqual(r.x, 0)

    def test_buffer_area_is_valid_target(self):
        quilt = make_quilt(60, 48, buffer=2)
        r = resolve_drop(self.sq, 52, 40, [], quilt)
        self.assertEqual(r.membership, Membership.IN_SURFACE)
        self.assertEqual((r.x, r.y), (52, 40))


class TestResolveDropPlacement(unittest.TestCase):

    def setUp(self):
        self.quilt = make_quilt(60, 48)

    def test_free_position_is_kept(self):
        sq = make_square("sq")
        r = resolve_drop(sq, 10, 20, [], self.quilt)
        self.assertEqual((r.x, r.y), (10, 20))
        self.assertEqual(r.membership, Membership.IN_SURFACE)
        self.assertFalse(r.searched)
        self.assertFalse(r.degenerate)

    def test_fractional_drop_is_snapped(self):
        sq = make_square("sq")
        r = resolve_drop(sq, 10.2, 20.3, [], self.quilt)
        self.assertEqual((r.x, r.y), (10.0, 20.5))

    def test_touching_neighbour_is_not_a_collision(self):
        others = [make_square("a", x=0, y=0)]
        r = resolve_drop(make_square("b"), 12, 0, others, self.quilt)
        self.assertEqual((r.x, r.y), (12, 0))
        self.assertFalse(r.searched)

    def test_scenario_two_squares_at_origin(self):
        """B dropped onto A at (0, 0) lands at (12, 0), not (0, 12)."""
        a = make_square("a", membership=Membership.IN_HOLDING)
        b = make_square("b", membership=Membership.IN_HOLDING)

        ra = resolve_drop(a, 0, 0, [], self.quilt)
        self.assertEqual((ra.x, ra.y, ra.membership), (0, 0, Membership.IN_SURFACE))
        a.x, a.y, a.membership = ra.x, ra.y, ra.membership

        rb = resolve_drop(b, 0, 0, [a], self.quilt)
        self.assertEqual((rb.x, rb.y), (12, 0))
        self.assertEqual(rb.membership, Membership.IN_SURFACE)
        self.assertTrue(rb.searched)

    def test_nearest_cell_by_distance(self):
        # A occupies (0..12, 0..12); dropping B at (3, 9) → (3, 12) is 3 away,
        # (12, 9) is 9 away.
        others = [make_square("a", x=0, y=0)]
        r = resolve_drop(make_square("b"), 3, 9, others, self.quilt)
        self.assertEqual((r.x, r.y), (3, 12))

    def test_distance_measured_from_proposed_position(self):
        # (0.2, 1.9) snaps to (0, 2), but distances use the raw target:
        # (0, 12) is ~10.1 away, (12, 2) is ~11.8 away.
        others = [make_square("a", x=0, y=0)]
        r = resolve_drop(make_square("b"), 0.2, 1.9, others, self.quilt)
        self.assertEqual((r.x, r.y), (0, 12))

    def test_self_is_excluded(self):
        sq = make_square("sq", x=10, y=10)
        r = resolve_drop(sq, 12, 12, [sq], self.quilt)
        self.assertEqual((r.x, r.y), (12, 12))
        self.assertFalse(r.searched)

    def test_holding_squares_in_others_are_ignored(self):
        parked = make_square("p", x=0, y=0, membership=Membership.IN_HOLDING)
        r = resolve_drop(make_square("b"), 0, 0, [parked], self.quilt)
        self.assertEqual((r.x, r.y), (0, 0))
        self.assertFalse(r.searched)

    def test_idempotent_redrop(self):
        others = make_row(3)
        sq = make_square("sq", x=36, y=0)
        r = resolve_drop(sq, sq.x, sq.y, others, self.quilt)
        self.assertEqual((r.x, r.y), (36, 0))

    def test_search_result_on_grid_with_odd_sizes(self):
        quilt = make_quilt(20.3, 10.7)
        others = [make_square("a", 7.25, 7.25, x=0, y=0)]
        r = resolve_drop(make_square("b", 5.3, 5.3), 1, 1, others, quilt)
        self.assertEqual(r.membership, Membership.IN_SURFACE)
        self.assertEqual((r.x * 2) % 1, 0)
        self.assertEqual((r.y * 2) % 1, 0)
        self.assertLessEqual(r.x, quilt.total_width - 5.3)
        self.assertLessEqual(r.y, quilt.total_height - 5.3)
        self.assertFalse(boxes_overlap(r.x, r.y, 5.3, 5.3, 0, 0, 7.25, 7.25))
        self.assertEqual((r.x, r.y), (7.5, 1.0))


class TestResolveDropFullSurface(unittest.TestCase):

    def test_full_surface_returns_clamped_position(self):
        """A 10×10 quilt filled by one square: a 5×5 drop overlaps."""
        quilt = make_quilt(10, 10)
        filler = make_square("fill", 10, 10, x=0, y=0)
        sq = make_square("new", 5, 5, membership=Membership.IN_HOLDING)

        r = resolve_drop(sq, 2.3, 3.7, [filler], quilt)
        self.assertEqual((r.x, r.y), (2.5, 3.5))
        self.assertEqual(r.membership, Membership.IN_SURFACE)
        self.assertTrue(r.searched)
        self.assertTrue(r.degenerate)

    def test_find_nearest_returns_none_when_full(self):
        quilt = make_quilt(10, 10)
        filler = make_square("fill", 10, 10)
        sq = make_square("new", 5, 5)
        self.assertIsNone(find_nearest_free_position(sq, 0, 0, [filler], quilt))

    def test_last_free_cell_is_found(self):
        quilt = make_quilt(24, 12)
        others = [make_square("a", x=0, y=0)]
        r = resolve_drop(make_square("b"), 0, 0, others, quilt)
        self.assertEqual((r.x, r.y), (12, 0))
        self.assertFalse(r.degenerate)


class TestRandomDropInvariants(unittest.TestCase):
    """Random drop sequences keep the surface collision-free and in bounds."""

    def test_no_overlap_and_bounds(self):
        rng = random.Random(1234)
        quilt = make_quilt(40, 30, buffer=1)
        placed = []
        for i in range(25):
            w = rng.choice([4, 5.5, 6, 8])
            h = rng.choice([4, 5.5, 6, 8])
            sq = make_square(f"s{i}", w, h, membership=Membership.IN_HOLDING)
            r = resolve_drop(
                sq, rng.uniform(-5, 45), rng.uniform(-5, 35), placed, quilt)
            if r.membership is not Membership.IN_SURFACE:
                self.assertEqual(r.y, quilt.total_height + 2)
                continue
            if r.degenerate:
                continue
            self.assertTrue(0 <= r.x <= quilt.total_width - w)
            self.assertTrue(0 <= r.y <= quilt.total_height - h)
            self.assertEqual((r.x * 2) % 1, 0)
            self.assertEqual((r.y * 2) % 1, 0)
            sq.x, sq.y, sq.membership = r.x, r.y, r.membership
            placed.append(sq)
        self.assertEqual(overlapping_pairs(placed), [])


if __name__ == "__main__":
    unittest.main()
