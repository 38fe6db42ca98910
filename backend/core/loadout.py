"""
core/loadout.py
---------------
Pydantic models for the loadout exchange format and its decode result.

SkillNode / Loadout mirror the JSON inside a QUP-LOADOUT export string.
Field names on the wire are camelCase (gridPosition, isInventory) because
the game client produces them — they are aliases here and must not change.

Owner: Core team
Depends on: core/hex_grid, skills/base_skill
Depended on by: loadout_codec, skill_grid, API routes
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, StrictStr

from core.hex_grid import GridPosition
from skills.base_skill import SkillDefinition


class SkillNode(BaseModel):
    """One node as the game writes it. Empty name = unallocated placeholder."""

    model_config = ConfigDict(populate_by_name=True)

    name: StrictStr
    guid: StrictStr
    level: StrictInt
    grid_position: GridPosition = Field(alias="gridPosition")
    is_inventory: StrictBool = Field(alias="isInventory")

    def to_wire(self) -> dict:
        return {
            "name": self.name,
            "guid": self.guid,
            "level": self.level,
            "gridPosition": {
                "x": self.grid_position.x,
                "y": self.grid_position.y,
                "z": self.grid_position.z,
            },
            "isInventory": self.is_inventory,
        }


class Loadout(BaseModel):
    character: int
    nodes: list[SkillNode]

    def to_wire(self) -> dict:
        return {"character": self.character, "nodes": [n.to_wire() for n in self.nodes]}


class PlacedSkill(BaseModel):
    skill: SkillDefinition
    position: GridPosition


class ParseError(str, Enum):
    EMPTY_INPUT = "empty_input"
    TOO_LONG = "too_long"
    UNRECOGNIZED_FORMAT = "unrecognized_format"
    CORRUPT_ENCODING = "corrupt_encoding"
    CORRUPT_PAYLOAD = "corrupt_payload"
    INVALID_STRUCTURE = "invalid_structure"


class ParseResult(BaseModel):
    """
    Outcome of parse_loadout(). Never raised — failures are data.

    On success: is_valid=True, character/character_name set, skills holds the
    named nodes that survived validation, dropped counts the ones that didn't.
    On failure: is_valid=False, skills empty, reason + error describe why.
    """
    raw: str
    character: Optional[int] = None
    character_name: Optional[str] = None
    skills: list[SkillNode] = []
    is_valid: bool
    reason: Optional[ParseError] = None
    error: Optional[str] = None
    dropped: int = 0


class ResolvedLoadout(BaseModel):
    """A ParseResult joined against the skill catalog."""
    character: int
    character_name: str
    level: Optional[int] = None         # taken from the first placed node, if any
    placed: list[PlacedSkill] = []
    unresolved: list[SkillNode] = []    # GUIDs the catalog doesn't know
