"""
api/routes/loadout.py
---------------------
Endpoints for the loadout codec: decode an export string pasted by a
player, pre-check one, or build one from placements on the grid.

POST /loadout/parse     — full decode + catalog join (always 200; see is_valid)
POST /loadout/validate  — cheap looks-like check
POST /loadout/export    — placements → export string (400 on rule violations)

Owner: API team
Depends on: core/loadout_codec, core/skill_grid, skills/skill_registry
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.deps import get_skill_grid, get_skill_registry
from core.hex_grid import GridPosition
from core.loadout import ParseResult, PlacedSkill
from core.loadout_codec import looks_like_loadout, parse_loadout, resolve_loadout
from core.skill_grid import PlacementRejected, SkillGrid
from skills.skill_registry import SkillRegistry
from utilities.skill_utils import skill_summary

router = APIRouter()


class ExportStringRequest(BaseModel):
    export_string: str


class ParseResponse(BaseModel):
    result: ParseResult
    summary: str
    placed: list[PlacedSkill] = []      # nodes the catalog resolved
    unresolved: list[str] = []          # guids the catalog doesn't know


class Placement(BaseModel):
    guid: str
    position: GridPosition


class ExportRequest(BaseModel):
    character: int
    level: int = Field(ge=0)
    placements: list[Placement]


def decode_for_display(export_string: str, skill_registry: SkillRegistry) -> ParseResponse:
    """Parse + resolve; shared with the builds routes."""
    result = parse_loadout(export_string)
    if not result.is_valid:
        return ParseResponse(result=result, summary=result.error or "Invalid export string")
    resolved = resolve_loadout(result, skill_registry)
    return ParseResponse(
        result=result,
        summary=skill_summary(result.skills),
        placed=resolved.placed,
        unresolved=[n.guid for n in resolved.unresolved],
    )


@router.post("/parse", response_model=ParseResponse)
async def parse(
    body: ExportStringRequest,
    skill_registry: SkillRegistry = Depends(get_skill_registry),
):
    """
    Body: { export_string: str }
    Returns the decode result; an invalid string is reported in
    result.is_valid / result.reason rather than as an HTTP error.
    """
    return decode_for_display(body.export_string, skill_registry)


@router.post("/validate")
async def validate(body: ExportStringRequest):
    """Body: { export_string: str }  Returns: { valid: bool }"""
    return {"valid": looks_like_loadout(body.export_string)}


@router.post("/export")
async def export(
    body: ExportRequest,
    skill_registry: SkillRegistry = Depends(get_skill_registry),
    grid: SkillGrid = Depends(get_skill_grid),
):
    """
    Body: { character: int, level: int, placements: [ { guid, position: {x,y,z} } ] }
    Returns: { export_string: str }

    Placements are applied in order with the grid rules; the first unknown
    guid or rejected placement fails the whole request with 400.
    """
    for placement in body.placements:
        skill = skill_registry.lookup(placement.guid)
        if skill is None:
            raise HTTPException(status_code=400, detail=f"Unknown skill guid {placement.guid!r}.")
        try:
            grid.place_or_raise(skill, placement.position)
        except PlacementRejected as exc:
            raise HTTPException(status_code=400, detail=exc.message)

    return {"export_string": grid.export(body.character, body.level)}
