"""
api/main.py
-----------
FastAPI application entry point.
Run from backend/:  uvicorn api.main:app --port 8000

Startup (lifespan):
  Loads the skill catalog, opens the build store and reads grid settings,
  storing them on app.state for dependency injection in route handlers.

Environment (.env is loaded on import):
  QUP_GRID_RADIUS            grid radius shown by the calculator (default 4)
  QUP_DB_PATH                sqlite file for builds (default backend/builds.db)
  QUP_SKILL_DEFINITIONS_DIR  catalog YAML directory, read once (default skills/definitions)
  QUP_LOG_LEVEL              root log level (default INFO)

Owner: API team
Depends on: skills/skill_registry, core/build_store, api/routes/*
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import builds, catalog, grid, loadout
from core.build_store import DB_PATH, BuildStore
from core.hex_grid import DEFAULT_GRID_RADIUS
from skills.skill_registry import default_registry


load_dotenv()

logging.basicConfig(
    level=os.getenv("QUP_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- startup ---
    skill_registry = default_registry()

    build_store = BuildStore(db_path=Path(os.getenv("QUP_DB_PATH", str(DB_PATH))))

    grid_radius = int(os.getenv("QUP_GRID_RADIUS", str(DEFAULT_GRID_RADIUS)))
    if grid_radius < 0:
        raise ValueError(f"QUP_GRID_RADIUS must be >= 0, got {grid_radius}")

    logger.info(
        "Loaded %d skills (%d fixed); grid radius %d; builds at %s",
        len(skill_registry), len(skill_registry.list_fixed()), grid_radius, build_store.db_path,
    )

    app.state.skill_registry = skill_registry
    app.state.build_store = build_store
    app.state.grid_radius = grid_radius

    yield
    # --- shutdown (nothing to clean up) ---


app = FastAPI(title="Q-Up Builds", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
app.include_router(grid.router, prefix="/grid", tags=["grid"])
app.include_router(loadout.router, prefix="/loadout", tags=["loadout"])
app.include_router(builds.router, prefix="/builds", tags=["builds"])


@app.get("/health")
async def health():
    return {"status": "ok"}
