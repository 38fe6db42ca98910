"""
utilities/skill_utils.py
------------------------
Small helpers for presenting decoded skill lists (build cards, CLI output).

Owner: Utilities team
Depends on: core/loadout, core/hex_grid
Depended on by: API routes (loadout), scripts/inspect_loadout
"""

from collections import Counter

from core.hex_grid import ORIGIN, distance, is_adjacent
from core.loadout import SkillNode


def skill_summary(skills: list[SkillNode]) -> str:
    """One-line description, e.g. '3 skills: Angel, EMT, Focus'."""
    if not skills:
        return "No skills selected"
    names = ", ".join(s.name for s in skills)
    return f"{len(skills)} skills: {names}"


def unique_skill_names(skills: list[SkillNode]) -> list[str]:
    """Distinct names, first-seen order."""
    return list(dict.fromkeys(s.name for s in skills))


def skill_counts(skills: list[SkillNode]) -> dict[str, int]:
    return dict(Counter(s.name for s in skills))


def sort_by_distance_from_center(skills: list[SkillNode]) -> list[SkillNode]:
    # stable: equal distances keep input order
    return sorted(skills, key=lambda s: distance(s.grid_position, ORIGIN))


def adjacent_pairs(skills: list[SkillNode]) -> list[tuple[str, str]]:
    """
    Name pairs of grid skills on neighbouring cells, in list order.
    Inventory nodes are off the grid and never pair.
    """
    on_grid = [s for s in skills if not s.is_inventory]
    return [
        (a.name, b.name)
        for i, a in enumerate(on_grid)
        for b in on_grid[i + 1:]
        if is_adjacent(a.grid_position, b.grid_position)
    ]
