"""
api/routes/catalog.py
---------------------
Endpoints for browsing the skill catalog and the character table.
Used by the calculator to fill its skill picker.

GET /catalog/skills              — skills, optionally filtered by level / category
GET /catalog/skills/{guid}       — one skill definition
GET /catalog/characters          — known character ids and names

Owner: API team
Depends on: skills/skill_registry, core/loadout_codec
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_skill_registry
from core.loadout_codec import CHARACTER_NAMES
from skills.base_skill import SkillCategory, SkillDefinition
from skills.skill_registry import SkillRegistry

router = APIRouter()


@router.get("/skills")
async def list_skills(
    level: Optional[int] = Query(default=None, ge=0),
    category: Optional[SkillCategory] = None,
    skill_registry: SkillRegistry = Depends(get_skill_registry),
) -> list[SkillDefinition]:
    """
    Without `level`: the whole catalog (optionally one category).
    With `level`: only skills unlocked at that character level.

    The placement picker asks for ?level=N&category=placeable — fixed
    skills fill their own cells and are never picked by hand.
    """
    if level is not None:
        return list(skill_registry.list_available(level, category))
    if category == SkillCategory.FIXED:
        return list(skill_registry.list_fixed())
    if category == SkillCategory.PLACEABLE:
        return list(skill_registry.list_placeable())
    return list(skill_registry.all())


@router.get("/skills/{guid}")
async def get_skill(
    guid: str,
    skill_registry: SkillRegistry = Depends(get_skill_registry),
) -> SkillDefinition:
    try:
        return skill_registry.get(guid)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Skill {guid!r} not found.")


@router.get("/characters")
async def list_characters():
    """Returns: [ { id: int, name: str } ]"""
    return [{"id": cid, "name": name} for cid, name in sorted(CHARACTER_NAMES.items())]
