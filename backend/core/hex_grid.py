"""
core/hex_grid.py
----------------
Cubic hex coordinates for the skill grid.

Every cell is addressed by (x, y, z) with x + y + z == 0. The grid the
calculator shows is the union of rings 0..radius around the origin
(radius 4 → 61 cells). Radius is configuration, not a property of the
loadout format.

Pure functions only, no state.

Owner: Core team
Depends on: pydantic
Depended on by: core/loadout, core/loadout_codec, core/skill_grid, api/routes/grid
"""

import math

from pydantic import BaseModel, ConfigDict, StrictInt, model_validator


DEFAULT_GRID_RADIUS = 4

_SQRT3 = math.sqrt(3)


def is_valid_position(x: int, y: int, z: int) -> bool:
    """True iff (x, y, z) lies on the cube plane x + y + z == 0."""
    return x + y + z == 0


class GridPosition(BaseModel):
    """A cube coordinate. Frozen so it can key dicts and sets."""

    model_config = ConfigDict(frozen=True)

    x: StrictInt
    y: StrictInt
    z: StrictInt

    @model_validator(mode="after")
    def check_cube_invariant(self) -> "GridPosition":
        if not is_valid_position(self.x, self.y, self.z):
            raise ValueError(
                f"Invalid cube coordinate ({self.x}, {self.y}, {self.z}): x + y + z must be 0"
            )
        return self

    def __add__(self, other: "GridPosition") -> "GridPosition":
        return GridPosition(x=self.x + other.x, y=self.y + other.y, z=self.z + other.z)

    def scale(self, k: int) -> "GridPosition":
        return GridPosition(x=self.x * k, y=self.y * k, z=self.z * k)

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.x, self.y, self.z)


ORIGIN = GridPosition(x=0, y=0, z=0)

# Walk order for ring traversal; each step turns 60° from the previous one.
DIRECTIONS: tuple[GridPosition, ...] = (
    GridPosition(x=1, y=-1, z=0),
    GridPosition(x=1, y=0, z=-1),
    GridPosition(x=0, y=1, z=-1),
    GridPosition(x=-1, y=1, z=0),
    GridPosition(x=-1, y=0, z=1),
    GridPosition(x=0, y=-1, z=1),
)


def distance(a: GridPosition, b: GridPosition) -> int:
    """Chebyshev cube distance: number of steps between two cells."""
    return max(abs(a.x - b.x), abs(a.y - b.y), abs(a.z - b.z))


def to_pixel(position: GridPosition, cell_size: float) -> tuple[float, float]:
    """
    Project a cell centre onto the screen plane (flat-top layout).
    Presentation only; nothing in the codec depends on it.
    """
    px = cell_size * 1.5 * position.x
    py = cell_size * (_SQRT3 / 2 * position.x + _SQRT3 * position.z)
    return px, py


def neighbors(position: GridPosition) -> list[GridPosition]:
    """The six cells at distance 1, in DIRECTIONS order."""
    return [position + d for d in DIRECTIONS]


def is_adjacent(a: GridPosition, b: GridPosition) -> bool:
    return distance(a, b) == 1


def generate_ring(ring_index: int) -> list[GridPosition]:
    """
    All cells at exactly distance ring_index from the origin.

    Ring 0 is the origin alone; ring n > 0 has 6n cells. Starts at the
    cell ring_index steps out along DIRECTIONS[4] and walks each side.
    Output is deduplicated by value, first occurrence kept.
    """
    if ring_index < 0:
        raise ValueError(f"ring_index must be >= 0, got {ring_index}")
    if ring_index == 0:
        return [ORIGIN]

    seen: set[GridPosition] = set()
    ring: list[GridPosition] = []
    cell = DIRECTIONS[4].scale(ring_index)
    for direction in DIRECTIONS:
        for _ in range(ring_index):
            if cell not in seen:
                seen.add(cell)
                ring.append(cell)
            cell = cell + direction
    return ring


def generate_grid(radius: int = DEFAULT_GRID_RADIUS) -> list[GridPosition]:
    """Union of rings 0..radius, inner rings first."""
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")
    cells: list[GridPosition] = []
    for ring_index in range(radius + 1):
        cells.extend(generate_ring(ring_index))
    return cells
