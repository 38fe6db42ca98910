"""
api/deps.py
-----------
FastAPI dependency injection helpers.
Route handlers that need the shared singletons (catalog, build store,
grid settings) declare them as Depends(get_*) parameters.

The singletons are stored on app.state by the lifespan handler in main.py.

Owner: API team
"""

from fastapi import Request

from core.build_store import BuildStore
from core.skill_grid import SkillGrid
from skills.skill_registry import SkillRegistry


def get_skill_registry(request: Request) -> SkillRegistry:
    return request.app.state.skill_registry


def get_build_store(request: Request) -> BuildStore:
    return request.app.state.build_store


def get_grid_radius(request: Request) -> int:
    return request.app.state.grid_radius


def get_skill_grid(request: Request) -> SkillGrid:
    """A fresh, empty grid per request — grids hold per-loadout state."""
    return SkillGrid.for_registry(
        request.app.state.skill_registry,
        radius=request.app.state.grid_radius,
    )
