"""Unit tests for the placement transform engine."""

import copy

import pytest

from conftest import make_region
from labelstrip.model import placement as engine
from labelstrip.model.placement import Placement, Rotation
from labelstrip.model.strips import Surface


class TestRotationNormalization:
    """Tests for normalize_rotation."""

    @pytest.mark.parametrize("degrees,expected", [
        (0, 0), (90, 90), (180, 180), (270, 270), (360, 0), (450, 90),
        (-90, 270), (-180, 180), (89, 90), (100, 90), (-359, 0), (720, 0),
    ])
    def test_snaps_to_quarter_turns(self, degrees, expected):
        """Any angle snaps to the nearest non-negative quarter turn."""
        assert engine.normalize_rotation(degrees) == Rotation(expected)


class TestCreatePlacement:
    """Tests for create_placement."""

    def test_defaults(self):
        """New placements are unrotated, unscaled and at z 0."""
        p = engine.create_placement(3, 12.5, 7.0)
        assert (p.region_id, p.x, p.y) == (3, 12.5, 7.0)
        assert p.rotation == Rotation.R0
        assert (p.scale_x, p.scale_y) == (1.0, 1.0)
        assert p.z_index == 0


class TestCoordinateTable:
    """Anchor, top-left and center relations for every rotation."""

    @pytest.mark.parametrize("rotation,top_left,center", [
        (Rotation.R0, (50, 40), (60, 45)),
        (Rotation.R90, (40, 40), (45, 50)),
        (Rotation.R180, (30, 30), (40, 35)),
        (Rotation.R270, (50, 20), (55, 30)),
    ])
    def test_table(self, rotation, top_left, center):
        """w=20, h=10 anchored at (50, 40)."""
        region = make_region(0, 0, 0, 20, 10)
        p = Placement(region_id=0, x=50, y=40, rotation=rotation)
        assert engine.visual_top_left(p, region) == pytest.approx(top_left)
        assert engine.visual_center(p, region) == pytest.approx(center)

    def test_visual_size_swaps_on_quarter_turns(self, small_region):
        """At 90 and 270 degrees the visual box is h wide and w tall."""
        p = Placement(region_id=0, scale_x=2.0, scale_y=0.5)
        assert engine.visual_size(p, small_region) == pytest.approx((40, 5))
        p.rotation = Rotation.R90
        assert engine.visual_size(p, small_region) == pytest.approx((5, 40))
        p.rotation = Rotation.R270
        assert engine.visual_size(p, small_region) == pytest.approx((5, 40))

    @pytest.mark.parametrize("rotation", list(Rotation))
    def test_conversions_invert(self, rotation):
        """anchor -> top-left -> anchor and anchor -> center -> anchor are identities."""
        w, h = 17.0, 6.0
        left, top = engine.top_left_from_anchor(33.0, 21.0, rotation, w, h)
        assert engine.anchor_from_top_left(left, top, rotation, w, h) == pytest.approx((33.0, 21.0))
        cx, cy = engine.center_from_anchor(33.0, 21.0, rotation, w, h)
        assert engine.anchor_from_center(cx, cy, rotation, w, h) == pytest.approx((33.0, 21.0))


class TestClampToSurface:
    """Tests for clamp_to_surface and is_valid."""

    def test_inside_is_untouched(self, small_region, surface):
        """A placement already inside does not move."""
        p = Placement(region_id=0, x=10, y=10)
        engine.clamp_to_surface(p, small_region, surface)
        assert (p.x, p.y) == (10, 10)

    def test_pulls_back_from_right_bottom(self, small_region, surface):
        """Overhanging placements are pulled back inside."""
        p = Placement(region_id=0, x=95, y=149)
        engine.clamp_to_surface(p, small_region, surface)
        assert (p.x, p.y) == pytest.approx((80, 140))
        assert engine.is_valid(p, small_region, surface)

    def test_pulls_back_from_left_top(self, small_region, surface):
        """Negative positions are clamped to the origin."""
        p = Placement(region_id=0, x=-5, y=-100)
        engine.clamp_to_surface(p, small_region, surface)
        assert (p.x, p.y) == (0, 0)

    def test_rotated_anchor(self, small_region, surface):
        """At 90 degrees the anchor sits h to the right of the visual left edge."""
        p = Placement(region_id=0, x=0, y=0, rotation=Rotation.R90)
        engine.clamp_to_surface(p, small_region, surface)
        assert engine.visual_top_left(p, small_region) == pytest.approx((0, 0))
        assert (p.x, p.y) == pytest.approx((10, 0))

    def test_rotated_180_at_far_corner(self, small_region, surface):
        """At 180 degrees the anchor is the visual bottom-right corner."""
        p = Placement(region_id=0, x=500, y=500, rotation=Rotation.R180)
        engine.clamp_to_surface(p, small_region, surface)
        assert (p.x, p.y) == pytest.approx((100, 150))

    def test_footprint_larger_than_surface(self, surface):
        """An oversized cutout is pinned to the origin."""
        region = make_region(0, 0, 0, 500, 500)
        p = Placement(region_id=0, x=30, y=30, rotation=Rotation.R270)
        engine.clamp_to_surface(p, region, surface)
        assert engine.visual_top_left(p, region) == pytest.approx((0, 0))
        assert not engine.is_valid(p, region, surface)

    @pytest.mark.parametrize("rotation", list(Rotation))
    @pytest.mark.parametrize("x,y", [(-40, -40), (5, 5), (60, 300), (1000, -3)])
    @pytest.mark.parametrize("scale", [(1.0, 1.0), (3.0, 0.4), (12.0, 20.0)])
    def test_idempotent(self, small_region, surface, rotation, x, y, scale):
        """Clamping twice equals clamping once."""
        p = Placement(region_id=0, x=x, y=y, rotation=rotation, scale_x=scale[0], scale_y=scale[1])
        engine.clamp_to_surface(p, small_region, surface)
        once = (p.x, p.y)
        engine.clamp_to_surface(p, small_region, surface)
        assert (p.x, p.y) == pytest.approx(once)

    @pytest.mark.parametrize("rotation", list(Rotation))
    def test_result_is_valid_when_it_fits(self, small_region, surface, rotation):
        """After clamping, anything that can fit does fit."""
        p = Placement(region_id=0, x=1000, y=1000, rotation=rotation)
        engine.clamp_to_surface(p, small_region, surface)
        assert engine.is_valid(p, small_region, surface)

    def test_is_valid_rejects_overhang(self, small_region, surface):
        """is_valid uses the visual box, not the anchor."""
        p = Placement(region_id=0, x=5, y=5, rotation=Rotation.R90)
        assert not engine.is_valid(p, small_region, surface)
        p.x = 10
        assert engine.is_valid(p, small_region, surface)


class TestRotate:
    """Tests for rotate."""

    def test_preserves_visual_center(self, small_region, surface):
        """A quarter turn keeps the visual center in place."""
        p = Placement(region_id=0, x=40, y=60)
        before = engine.visual_center(p, small_region)
        engine.rotate(p, small_region, surface, 90)
        assert p.rotation == Rotation.R90
        assert engine.visual_center(p, small_region) == pytest.approx(before)
        assert (p.x, p.y) == pytest.approx((55, 55))

    def test_negative_delta(self, small_region, surface):
        """Rotating by -90 from 0 gives 270."""
        p = Placement(region_id=0, x=40, y=60)
        engine.rotate(p, small_region, surface, -90)
        assert p.rotation == Rotation.R270

    def test_clamps_after_rotation(self, surface):
        """A long cutout near the edge is pulled back in after turning."""
        region = make_region(0, 0, 0, 80, 10)
        p = Placement(region_id=0, x=10, y=0)
        engine.rotate(p, region, surface, 90)
        assert engine.is_valid(p, region, surface)

    @pytest.mark.parametrize("anchor", [(20, 30), (40, 60), (60.25, 110.5)])
    @pytest.mark.parametrize("scale", [(1.0, 1.0), (0.5, 2.0), (1.5, 0.75)])
    def test_four_quarter_turns_round_trip(self, small_region, surface, anchor, scale):
        """Four quarter turns restore rotation, anchor and center."""
        p = Placement(region_id=0, x=anchor[0], y=anchor[1], scale_x=scale[0], scale_y=scale[1])
        center = engine.visual_center(p, small_region)
        for _ in range(4):
            engine.rotate(p, small_region, surface, 90)
            assert engine.is_valid(p, small_region, surface)
        assert p.rotation == Rotation.R0
        assert (p.x, p.y) == pytest.approx(anchor)
        assert engine.visual_center(p, small_region) == pytest.approx(center)


class TestScale:
    """Tests for scale."""

    def test_sets_scale(self, small_region, surface):
        """Scale factors are applied as given."""
        p = Placement(region_id=0)
        engine.scale(p, small_region, surface, 2.0, 3.0)
        assert (p.scale_x, p.scale_y) == (2.0, 3.0)

    def test_floors_at_minimum(self, small_region, surface):
        """Scales below 0.1 (or negative) are floored to 0.1."""
        p = Placement(region_id=0)
        engine.scale(p, small_region, surface, 0.01, -4)
        assert (p.scale_x, p.scale_y) == (0.1, 0.1)

    def test_reclamps_grown_footprint(self, small_region, surface):
        """Growing near the edge pulls the placement back inside."""
        p = Placement(region_id=0, x=90, y=145)
        engine.scale(p, small_region, surface, 1.2, 1.4)
        assert engine.is_valid(p, small_region, surface)
        assert (p.x, p.y) == pytest.approx((76, 136))

    def test_reclamps_rotated(self, small_region, surface):
        """The re-clamp respects rotation."""
        p = Placement(region_id=0, x=100, y=0, rotation=Rotation.R90)
        engine.scale(p, small_region, surface, 4.0, 4.0)
        assert engine.is_valid(p, small_region, surface)


class TestMoveAndFit:
    """Tests for move and fit_scale."""

    def test_move_clamps(self, small_region, surface):
        """Dragging past the edge stops at the edge."""
        p = Placement(region_id=0)
        engine.move(p, small_region, surface, 500, 30)
        assert (p.x, p.y) == (80, 30)

    def test_fit_scale_shrinks_large_cutout(self, surface):
        """A cutout wider than the strip is scaled down to fit inside the margin."""
        region = make_region(0, 0, 0, 180, 50)
        assert engine.fit_scale(region, surface) == pytest.approx(0.5)

    def test_fit_scale_never_enlarges(self, small_region, surface):
        """Small cutouts keep their size."""
        assert engine.fit_scale(small_region, surface) == 1.0

    def test_fit_scale_respects_rotation(self, surface):
        """A quarter turn swaps which side has to fit."""
        region = make_region(0, 0, 0, 280, 45)
        assert engine.fit_scale(region, surface) == pytest.approx(90 / 280)
        assert engine.fit_scale(region, surface, Rotation.R90) == pytest.approx(140 / 280)

    def test_fit_scale_floor(self):
        """Huge cutouts bottom out at the minimum scale."""
        region = make_region(0, 0, 0, 10000, 10000)
        assert engine.fit_scale(region, Surface(50, 50)) == 0.1


class TestQueries:
    """Tests for render_order and hit_test."""

    def test_render_order_is_stable(self):
        """Sorted by z_index, ties keep list order."""
        a = Placement(region_id=1, z_index=2)
        b = Placement(region_id=2, z_index=0)
        c = Placement(region_id=3, z_index=2)
        assert engine.render_order([a, b, c]) == [b, a, c]

    def test_hit_test_prefers_topmost(self):
        """Overlapping placements resolve to the highest z_index."""
        region = make_region(0, 0, 0, 20, 20)
        low = Placement(region_id=0, x=0, y=0, z_index=0)
        high = Placement(region_id=0, x=10, y=10, z_index=1)
        assert engine.hit_test([high, low], {0: region}, 15, 15) is high
        assert engine.hit_test([high, low], {0: region}, 5, 5) is low
        assert engine.hit_test([high, low], {0: region}, 50, 50) is None

    def test_hit_test_uses_visual_box(self):
        """Rotated placements are hit where they are drawn."""
        region = make_region(0, 0, 0, 20, 10)
        p = Placement(region_id=0, x=10, y=0, rotation=Rotation.R90)
        assert engine.hit_test([p], {0: region}, 5, 15) is p
        assert engine.hit_test([p], {0: region}, 15, 5) is None

    def test_hit_test_skips_unknown_regions(self):
        """Dangling region ids are ignored."""
        p = Placement(region_id=9)
        assert engine.hit_test([p], {}, 0, 0) is None


class TestPlacementSerialization:
    """Tests for Placement.to_dict / from_dict."""

    def test_round_trip(self):
        """All fields survive."""
        p = Placement(region_id=4, x=1.5, y=2.5, rotation=Rotation.R270, scale_x=0.5, scale_y=2.0, z_index=3)
        data = p.to_dict()
        assert data["rotation"] == 270
        assert Placement.from_dict(data) == p

    def test_from_dict_sanitizes(self):
        """Off-grid rotations snap and tiny scales are floored."""
        p = Placement.from_dict({"region_id": 1, "rotation": 100, "scale_x": 0.0, "scale_y": 0.05})
        assert p.rotation == Rotation.R90
        assert (p.scale_x, p.scale_y) == (0.1, 0.1)

    def test_copy_is_independent(self):
        """Placements are plain values."""
        p = Placement(region_id=0, x=1)
        q = copy.copy(p)
        q.x = 2
        assert p.x == 1
