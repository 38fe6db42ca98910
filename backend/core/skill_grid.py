"""
core/skill_grid.py
------------------
In-memory skill grid: the placement rules the calculator applies when a
player clicks cells, plus export / import through the loadout codec.

Rules:
  - A fixed skill may only sit on its own fixed_position.
  - A placeable skill may go on any on-grid cell that is empty and not
    reserved for a fixed skill.
  - Placing onto an occupied cell is rejected; vacate it first.
  - Clicking an occupied placeable cell removes it; clicking a fixed
    skill's cell never does.
  - Lock state (level < level_requirement) is for display only and never
    keeps a fixed skill out of an export.

Owner: Core team
Depends on: core/hex_grid, core/loadout, core/loadout_codec, skills/*
Depended on by: API routes (loadout export)
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from core.hex_grid import DEFAULT_GRID_RADIUS, ORIGIN, GridPosition, distance, generate_grid
from core.loadout import PlacedSkill, ResolvedLoadout
from core.loadout_codec import export_loadout
from skills.base_skill import SkillDefinition
from skills.skill_registry import SkillRegistry

logger = logging.getLogger(__name__)


class GridAction(str, Enum):
    PLACED = "placed"
    REMOVED = "removed"
    REJECTED = "rejected"
    NOOP = "noop"


class PlacementRejected(Exception):
    """
    Raised by callers that need a placement to succeed (e.g. building an
    export from a request body). The API route turns this into HTTP 400.
    """
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SkillGrid:
    def __init__(
        self,
        radius: int = DEFAULT_GRID_RADIUS,
        reserved_cells: Iterable[GridPosition] = (),
    ):
        self.radius = radius
        self.reserved_cells = frozenset(reserved_cells)
        # Insertion order doubles as placement order for exports.
        self._placed: dict[GridPosition, PlacedSkill] = {}

    @classmethod
    def for_registry(cls, registry: SkillRegistry, radius: int = DEFAULT_GRID_RADIUS) -> "SkillGrid":
        """A grid with every fixed skill's cell reserved."""
        return cls(
            radius=radius,
            reserved_cells=[s.fixed_position for s in registry.list_fixed()],
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def cells(self) -> list[GridPosition]:
        return generate_grid(self.radius)

    def contains(self, position: GridPosition) -> bool:
        return distance(ORIGIN, position) <= self.radius

    def skill_at(self, position: GridPosition) -> Optional[SkillDefinition]:
        placed = self._placed.get(position)
        return placed.skill if placed else None

    @property
    def placed(self) -> list[PlacedSkill]:
        return list(self._placed.values())

    def __len__(self) -> int:
        return len(self._placed)

    @staticmethod
    def is_locked(skill: SkillDefinition, character_level: int) -> bool:
        """Render-time lock state. Only fixed skills lock."""
        return skill.is_fixed and not skill.is_unlocked_at(character_level)

    def check_placement(self, skill: SkillDefinition, position: GridPosition) -> Optional[str]:
        """Return why `skill` can't go on `position`, or None if it can."""
        if not self.contains(position):
            return f"{position.as_tuple()} is outside the grid (radius {self.radius})."
        if position in self._placed:
            return f"{position.as_tuple()} is already occupied by {self._placed[position].skill.name!r}."
        if skill.is_fixed:
            if position != skill.fixed_position:
                return (
                    f"{skill.name!r} can only sit on {skill.fixed_position.as_tuple()}, "
                    f"not {position.as_tuple()}."
                )
        elif position in self.reserved_cells:
            return f"{position.as_tuple()} is reserved for a fixed skill."
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def place(self, skill: SkillDefinition, position: GridPosition) -> bool:
        """Place `skill` on `position`. Returns False (and changes nothing) if the rules forbid it."""
        if self.check_placement(skill, position) is not None:
            return False
        self._placed[position] = PlacedSkill(skill=skill, position=position)
        return True

    def place_or_raise(self, skill: SkillDefinition, position: GridPosition) -> None:
        reason = self.check_placement(skill, position)
        if reason is not None:
            raise PlacementRejected(reason)
        self._placed[position] = PlacedSkill(skill=skill, position=position)

    def remove(self, position: GridPosition) -> Optional[PlacedSkill]:
        """Vacate a cell held by a placeable skill. Fixed skills stay put."""
        placed = self._placed.get(position)
        if placed is None or placed.skill.is_fixed:
            return None
        return self._placed.pop(position)

    def click(self, position: GridPosition, selected: Optional[SkillDefinition] = None) -> GridAction:
        """
        Apply a cell click the way the calculator UI does:
          occupied placeable → remove
          occupied fixed     → nothing
          empty + selection  → try to place
          empty, no selection→ nothing
        """
        occupant = self._placed.get(position)
        if occupant is not None:
            if occupant.skill.is_fixed:
                return GridAction.NOOP
            self._placed.pop(position)
            return GridAction.REMOVED
        if selected is None:
            return GridAction.NOOP
        return GridAction.PLACED if self.place(selected, position) else GridAction.REJECTED

    def clear(self) -> None:
        self._placed.clear()

    # ------------------------------------------------------------------
    # Codec bridge
    # ------------------------------------------------------------------

    def export(self, character_id: int, character_level: int) -> str:
        return export_loadout(character_id, self.placed, character_level)

    def load(self, resolved: ResolvedLoadout) -> int:
        """
        Replace the grid contents with a resolved loadout.
        Placements the rules reject are skipped and logged.
        Returns how many skills were placed.
        """
        self.clear()
        count = 0
        for ps in resolved.placed:
            reason = self.check_placement(ps.skill, ps.position)
            if reason is not None:
                logger.warning("Skipping imported %r: %s", ps.skill.name, reason)
                continue
            self._placed[ps.position] = ps
            count += 1
        return count
