"""
skills/skill_registry.py
------------------------
Loads all skill YAML definitions from skills/definitions/ at startup
and provides lookup by GUID.

Each YAML file holds a top-level `skills:` list. Definitions are read once;
afterwards the registry is read-only and every accessor hands back tuples
or frozen models, never the backing dict.

A GUID that isn't in the catalog is a normal outcome (older or newer game
data) — lookup() returns None and callers skip the entry.

Owner: Skills team
Depends on: base_skill, pyyaml
Depended on by: core/loadout_codec, core/skill_grid, api/main
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml

from core.hex_grid import GridPosition

from .base_skill import SkillCategory, SkillDefinition


DEFINITIONS_DIR = Path(__file__).parent / "definitions"


class SkillRegistry:
    def __init__(self):
        self._skills: dict[str, SkillDefinition] = {}

    def load_all(self, definitions_dir: Path = DEFINITIONS_DIR) -> None:
        """
        Load all .yaml files in the definitions directory, in file-name order.
        Raises ValueError on duplicate GUIDs or two fixed skills sharing a cell;
        pydantic.ValidationError on a malformed entry.
        """
        skills: dict[str, SkillDefinition] = {}
        fixed_cells: dict[GridPosition, str] = {}
        for path in sorted(Path(definitions_dir).glob("*.yaml")):
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            for entry in data.get("skills", []):
                skill = SkillDefinition(**entry)
                if skill.guid in skills:
                    raise ValueError(f"Duplicate skill guid {skill.guid!r} in {path.name}")
                if skill.fixed_position is not None:
                    other = fixed_cells.get(skill.fixed_position)
                    if other is not None:
                        raise ValueError(
                            f"Fixed skills {other!r} and {skill.guid!r} share cell "
                            f"{skill.fixed_position.as_tuple()}"
                        )
                    fixed_cells[skill.fixed_position] = skill.guid
                skills[skill.guid] = skill
        self._skills = skills

    def __len__(self) -> int:
        return len(self._skills)

    def __contains__(self, guid: str) -> bool:
        return guid in self._skills

    def lookup(self, guid: str) -> Optional[SkillDefinition]:
        """Exact GUID match, or None when the catalog has no such skill."""
        return self._skills.get(guid)

    def get(self, guid: str) -> SkillDefinition:
        """Retrieve a skill by GUID. Raises KeyError if not found."""
        return self._skills[guid]

    def all(self) -> tuple[SkillDefinition, ...]:
        return tuple(self._skills.values())

    def list_fixed(self) -> tuple[SkillDefinition, ...]:
        return tuple(s for s in self._skills.values() if s.category == SkillCategory.FIXED)

    def list_placeable(self) -> tuple[SkillDefinition, ...]:
        return tuple(s for s in self._skills.values() if s.category == SkillCategory.PLACEABLE)

    def list_available(
        self,
        character_level: int,
        category: Optional[SkillCategory] = None,
    ) -> tuple[SkillDefinition, ...]:
        """Skills with level_requirement <= character_level, optionally one category only."""
        return tuple(
            s for s in self._skills.values()
            if s.level_requirement <= character_level
            and (category is None or s.category == category)
        )


@lru_cache(maxsize=1)
def default_registry() -> SkillRegistry:
    """Process-wide catalog, loaded on first use from QUP_SKILL_DEFINITIONS_DIR or the bundled set."""
    registry = SkillRegistry()
    registry.load_all(Path(os.getenv("QUP_SKILL_DEFINITIONS_DIR", str(DEFINITIONS_DIR))))
    return registry
