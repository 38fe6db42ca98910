"""
api/routes/builds.py
--------------------
Endpoints for shared builds — a named, tagged export string.

POST   /builds               — submit a build (export string must decode)
GET    /builds               — list, filter by tag, sort
GET    /builds/{id}          — one build (counts a view)
GET    /builds/{id}/loadout  — the build's export string, decoded
PUT    /builds/{id}          — edit (author only)
DELETE /builds/{id}          — delete (author only, ?author_id=)

Identity is resolved upstream; author_id arrives as an opaque string.

Owner: API team
Depends on: core/build_store, core/loadout_codec, api/routes/loadout
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from api.deps import get_build_store, get_skill_registry
from api.routes.loadout import ParseResponse, decode_for_display
from core.build_store import Build, BuildStore
from core.loadout_codec import looks_like_loadout, parse_loadout
from skills.skill_registry import SkillRegistry

router = APIRouter()


class BuildSubmission(BaseModel):
    author_id: str
    name: str = ""
    description: str = ""
    export_string: str = ""
    tags: Optional[list[str]] = None


def _check_submission(body: BuildSubmission) -> None:
    """Raise HTTP 400 unless the submission has a name and a decodable export string."""
    if not body.name.strip() or not body.export_string.strip():
        raise HTTPException(status_code=400, detail="Name and export string are required.")
    if not looks_like_loadout(body.export_string):
        raise HTTPException(status_code=400, detail="Invalid skill export string.")
    result = parse_loadout(body.export_string)
    if not result.is_valid:
        raise HTTPException(status_code=400, detail=f"Invalid skill export string: {result.error}")


def _clean_tags(tags: list[str]) -> list[str]:
    return list(dict.fromkeys(t.strip() for t in tags if t.strip()))


def _get_or_404(build_store: BuildStore, build_id: str) -> Build:
    try:
        return build_store.get(build_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Build {build_id!r} not found.")


@router.post("", status_code=201)
async def create_build(
    body: BuildSubmission,
    build_store: BuildStore = Depends(get_build_store),
) -> Build:
    _check_submission(body)
    build = Build(
        name=body.name.strip(),
        description=body.description,
        export_string=body.export_string,
        author_id=body.author_id,
        tags=_clean_tags(body.tags or []),
    )
    return build_store.create(build)


@router.get("")
async def list_builds(
    tag: Optional[str] = None,
    sort_by: str = "created_at",
    order: str = "desc",
    limit: int = Query(default=50, ge=1, le=50),
    build_store: BuildStore = Depends(get_build_store),
) -> list[Build]:
    try:
        return build_store.list_builds(tag=tag, sort_by=sort_by, order=order, limit=limit)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/{build_id}")
async def get_build(
    build_id: str,
    build_store: BuildStore = Depends(get_build_store),
) -> Build:
    """Returns the build with its view counter already incremented."""
    _get_or_404(build_store, build_id)
    return build_store.increment_views(build_id)


@router.get("/{build_id}/loadout", response_model=ParseResponse)
async def get_build_loadout(
    build_id: str,
    build_store: BuildStore = Depends(get_build_store),
    skill_registry: SkillRegistry = Depends(get_skill_registry),
):
    build = _get_or_404(build_store, build_id)
    return decode_for_display(build.export_string, skill_registry)


@router.put("/{build_id}")
async def update_build(
    build_id: str,
    body: BuildSubmission,
    build_store: BuildStore = Depends(get_build_store),
) -> Build:
    """
    Replace name, description, export string and — when `tags` is given —
    the tag set. Only the build's author may edit.
    """
    existing = _get_or_404(build_store, build_id)
    if existing.author_id != body.author_id:
        raise HTTPException(status_code=403, detail="You can only edit your own builds.")
    _check_submission(body)

    changes = {
        "name": body.name.strip(),
        "description": body.description,
        "export_string": body.export_string,
    }
    if body.tags is not None:
        changes["tags"] = _clean_tags(body.tags)
    return build_store.update(build_id, **changes)


@router.delete("/{build_id}", status_code=204)
async def delete_build(
    build_id: str,
    author_id: str = Query(...),
    build_store: BuildStore = Depends(get_build_store),
) -> None:
    existing = _get_or_404(build_store, build_id)
    if existing.author_id != author_id:
        raise HTTPException(status_code=403, detail="You can only delete your own builds.")
    build_store.delete(build_id)
