"""
Pytest fixtures for the Q-Up builds test suite.

Provides the bundled skill catalog, a registry-backed skill grid and an
API client wired to a throwaway build database.
"""

import pytest

from core.skill_grid import SkillGrid
from skills.skill_registry import DEFINITIONS_DIR, SkillRegistry


# =============================================================================
# Catalog / grid
# =============================================================================

@pytest.fixture(scope="session")
def registry() -> SkillRegistry:
    """The bundled catalog, loaded once."""
    reg = SkillRegistry()
    reg.load_all(DEFINITIONS_DIR)
    return reg


@pytest.fixture
def grid(registry) -> SkillGrid:
    """Empty radius-4 grid with the fixed cells reserved."""
    return SkillGrid.for_registry(registry, radius=4)


# =============================================================================
# API
# =============================================================================

@pytest.fixture
def client(tmp_path, monkeypatch):
    """TestClient with the lifespan run against a temp build database."""
    from fastapi.testclient import TestClient

    from api.main import app

    monkeypatch.setenv("QUP_DB_PATH", str(tmp_path / "builds.db"))
    monkeypatch.delenv("QUP_GRID_RADIUS", raising=False)
    monkeypatch.delenv("QUP_SKILL_DEFINITIONS_DIR", raising=False)
    with TestClient(app) as test_client:
        yield test_client
