"""
api/routes/grid.py
------------------
Endpoints describing the hex grid the calculator draws.

GET /grid                 — every cell within the radius, with pixel centre,
                            on-grid neighbours and the fixed skill (if any)
                            that owns it
GET /grid/ring/{index}    — the cells of one ring

Owner: API team
Depends on: core/hex_grid, skills/skill_registry
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from pydantic import BaseModel

from api.deps import get_grid_radius, get_skill_registry
from core.hex_grid import GridPosition, generate_grid, generate_ring, neighbors, to_pixel
from skills.skill_registry import SkillRegistry

router = APIRouter()


class GridCell(BaseModel):
    position: GridPosition
    pixel: tuple[float, float]
    fixed_skill: Optional[str] = None   # guid of the fixed skill reserved here
    neighbors: list[GridPosition] = []  # on-grid cells a skill here can trigger


class GridResponse(BaseModel):
    radius: int
    cell_size: float
    cells: list[GridCell]


@router.get("", response_model=GridResponse)
async def get_grid(
    radius: Optional[int] = Query(default=None, ge=0, le=20),
    cell_size: float = Query(default=40.0, gt=0),
    default_radius: int = Depends(get_grid_radius),
    skill_registry: SkillRegistry = Depends(get_skill_registry),
):
    """Cells of rings 0..radius (inner first). radius defaults to QUP_GRID_RADIUS."""
    radius = default_radius if radius is None else radius
    fixed_by_cell = {s.fixed_position: s.guid for s in skill_registry.list_fixed()}
    on_grid = generate_grid(radius)
    on_grid_set = set(on_grid)
    cells = [
        GridCell(
            position=pos,
            pixel=to_pixel(pos, cell_size),
            fixed_skill=fixed_by_cell.get(pos),
            neighbors=[n for n in neighbors(pos) if n in on_grid_set],
        )
        for pos in on_grid
    ]
    return GridResponse(radius=radius, cell_size=cell_size, cells=cells)


@router.get("/ring/{index}")
async def get_ring(index: int = Path(le=50)) -> list[GridPosition]:
    try:
        return generate_ring(index)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
