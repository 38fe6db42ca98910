"""
skills/base_skill.py
--------------------
Pydantic model for a skill definition.
Skills are loaded from YAML files in skills/definitions/.

Two kinds of skill live on the grid:
  fixed      — a "Level N" hex unlock that always sits on one predefined
               cell and becomes active once the character reaches its level.
  placeable  — a round skill the player may drop on any open cell.

Definitions are frozen; the catalog never mutates them after load.

Owner: Skills team
Depends on: core/hex_grid
Depended on by: skill_registry, core/loadout, core/skill_grid
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.hex_grid import GridPosition


class SkillCategory(str, Enum):
    FIXED = "fixed"
    PLACEABLE = "placeable"


class TriggerType(str, Enum):
    ON_FLIP = "on-flip"
    ON_WIN = "on-win"
    ON_LOSS = "on-loss"
    ON_CHAIN_TRIGGER = "on-chain-trigger"


class SkillDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    guid: str = Field(min_length=1)
    name: str
    category: SkillCategory
    charges: int = Field(gt=0)           # activations per use-cycle
    trigger: TriggerType                 # display only, codec ignores it
    level_requirement: int = Field(default=0, ge=0)
    description: str = ""
    fixed_position: Optional[GridPosition] = None

    @model_validator(mode="after")
    def check_fixed_position(self) -> "SkillDefinition":
        if self.category == SkillCategory.FIXED and self.fixed_position is None:
            raise ValueError(f"Fixed skill {self.guid!r} needs a fixed_position.")
        if self.category == SkillCategory.PLACEABLE and self.fixed_position is not None:
            raise ValueError(f"Placeable skill {self.guid!r} cannot have a fixed_position.")
        return self

    @property
    def is_fixed(self) -> bool:
        return self.category == SkillCategory.FIXED

    def is_unlocked_at(self, character_level: int) -> bool:
        return character_level >= self.level_requirement
