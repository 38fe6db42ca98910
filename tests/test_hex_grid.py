"""
Tests for cube hex coordinates: validity, distance, rings and the grid.
"""

import math
import subprocess
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from core.hex_grid import (
    DIRECTIONS,
    ORIGIN,
    GridPosition,
    distance,
    generate_grid,
    generate_ring,
    is_adjacent,
    is_valid_position,
    neighbors,
    to_pixel,
)
from helpers import pos


class TestGridPosition:
    """Construction and the x + y + z == 0 invariant."""

    def test_module_imports_cleanly(self):
        """Module-level positions are built at import; a fresh interpreter must load it."""
        backend = Path(__file__).resolve().parents[1] / "backend"
        proc = subprocess.run(
            [sys.executable, "-c", "import core.hex_grid as h; print(h.ORIGIN.as_tuple())"],
            cwd=backend, capture_output=True, text=True,
        )
        assert proc.returncode == 0, proc.stderr
        assert proc.stdout.strip() == "(0, 0, 0)"

    def test_directions_are_unit_steps_on_the_plane(self):
        assert ORIGIN.as_tuple() == (0, 0, 0)
        assert len(set(DIRECTIONS)) == 6
        assert all(is_valid_position(*d.as_tuple()) for d in DIRECTIONS)

    def test_valid_position(self):
        p = pos(1, -1, 0)
        assert p.as_tuple() == (1, -1, 0)

    def test_rejects_off_plane_coordinate(self):
        with pytest.raises(ValidationError):
            GridPosition(x=1, y=1, z=1)

    def test_rejects_non_integer_coordinate(self):
        with pytest.raises(ValidationError):
            GridPosition(x=0.5, y=-0.5, z=0)

    def test_equal_positions_hash_equal(self):
        assert {pos(1, -1, 0), pos(1, -1, 0)} == {pos(1, -1, 0)}

    def test_is_frozen(self):
        p = pos(0, 0, 0)
        with pytest.raises(ValidationError):
            p.x = 1

    def test_is_valid_position(self):
        assert is_valid_position(0, 0, 0)
        assert is_valid_position(2, -1, -1)
        assert not is_valid_position(1, 0, 0)


class TestDistance:
    """Chebyshev cube distance."""

    def test_distance_to_self_is_zero(self):
        assert distance(pos(2, -1, -1), pos(2, -1, -1)) == 0

    def test_distance_is_symmetric(self):
        a, b = pos(3, -1, -2), pos(-1, 2, -1)
        assert distance(a, b) == distance(b, a) == 4

    def test_distance_from_origin(self):
        assert distance(ORIGIN, pos(1, -1, 0)) == 1
        assert distance(ORIGIN, pos(3, -1, -2)) == 3

    @pytest.mark.parametrize("a", generate_grid(2))
    def test_triangle_inequality(self, a):
        cells = generate_grid(2)
        for b in cells:
            for c in cells:
                assert distance(a, c) <= distance(a, b) + distance(b, c)

    def test_every_direction_is_one_step(self):
        for d in DIRECTIONS:
            assert distance(ORIGIN, d) == 1

    def test_neighbors_are_adjacent(self):
        centre = pos(1, 0, -1)
        ns = neighbors(centre)
        assert len(set(ns)) == 6
        assert all(is_adjacent(centre, n) for n in ns)
        assert not is_adjacent(centre, centre)


class TestToPixel:
    """Flat-top projection."""

    def test_origin_maps_to_zero(self):
        assert to_pixel(ORIGIN, 40) == (0.0, 0.0)

    def test_projection_formula(self):
        px, py = to_pixel(pos(1, -1, 0), 10)
        assert px == pytest.approx(15.0)
        assert py == pytest.approx(10 * math.sqrt(3) / 2)

    def test_z_moves_vertically_only(self):
        px, py = to_pixel(pos(0, -1, 1), 10)
        assert px == pytest.approx(0.0)
        assert py == pytest.approx(10 * math.sqrt(3))


class TestRings:
    """Ring generation."""

    def test_ring_zero_is_origin(self):
        assert generate_ring(0) == [ORIGIN]

    @pytest.mark.parametrize("n", [1, 2, 3, 4, 7])
    def test_ring_size_and_distance(self, n):
        ring = generate_ring(n)
        assert len(ring) == 6 * n
        assert len(set(ring)) == len(ring)
        assert all(distance(ORIGIN, c) == n for c in ring)

    def test_ring_starts_along_direction_four(self):
        assert generate_ring(2)[0] == pos(-2, 0, 2)

    def test_negative_ring_rejected(self):
        with pytest.raises(ValueError):
            generate_ring(-1)


class TestGenerateGrid:
    """Union of rings."""

    def test_default_grid_has_61_cells(self):
        cells = generate_grid()
        assert len(cells) == 61
        assert len(set(cells)) == 61

    def test_radius_zero_is_origin_only(self):
        assert generate_grid(0) == [ORIGIN]

    def test_inner_rings_come_first(self):
        cells = generate_grid(2)
        dists = [distance(ORIGIN, c) for c in cells]
        assert dists == sorted(dists)

    def test_all_cells_within_radius(self):
        assert all(distance(ORIGIN, c) <= 3 for c in generate_grid(3))

    def test_negative_radius_rejected(self):
        with pytest.raises(ValueError):
            generate_grid(-1)
