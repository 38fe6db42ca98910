"""
core/build_store.py
-------------------
Stores shared builds: a name, a description, tags and the opaque
QUP-LOADOUT export string. The store never decodes the export string —
validation happens in the API layer before anything is written.

Persistence: SQLite via the standard library sqlite3 module.
The database file is created at backend/builds.db on first use
(override with QUP_DB_PATH). Each row holds the Build model as JSON.

Owner: Core team
Depends on: pydantic
Depended on by: API routes (builds)
"""

import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


DB_PATH = Path(__file__).parent.parent / "builds.db"

SORTABLE_FIELDS = ("created_at", "updated_at", "views", "name")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Build(BaseModel):
    build_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    description: str = ""
    export_string: str
    author_id: str
    tags: list[str] = []
    views: int = 0
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class BuildStore:
    def __init__(self, db_path: Path = DB_PATH):
        self.db_path = db_path
        self._init_db()

    # ------------------------------------------------------------------
    # DB helpers
    # ------------------------------------------------------------------

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS builds (
                    build_id     TEXT PRIMARY KEY,
                    build        TEXT NOT NULL,
                    created_at   TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at   TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

    def _persist(self, build: Build) -> None:
        """Write a Build to the DB (upsert)."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO builds (build_id, build, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(build_id) DO UPDATE SET
                    build = excluded.build,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (build.build_id, build.model_dump_json()),
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create(self, build: Build) -> Build:
        """Store a new build and return it."""
        self._persist(build)
        return build

    def get(self, build_id: str) -> Build:
        """Read a build. Raises KeyError if not found."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT build FROM builds WHERE build_id = ?",
                (build_id,),
            ).fetchone()
        if row is None:
            raise KeyError(f"Build {build_id!r} not found.")
        return Build.model_validate_json(row["build"])

    def list_builds(
        self,
        tag: Optional[str] = None,
        sort_by: str = "created_at",
        order: str = "desc",
        limit: int = 50,
    ) -> list[Build]:
        """
        Builds filtered by tag (exact match) and sorted by one of
        SORTABLE_FIELDS. Raises ValueError on an unknown sort field or order.
        """
        if sort_by not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort by {sort_by!r}. Choose one of {', '.join(SORTABLE_FIELDS)}.")
        if order not in ("asc", "desc"):
            raise ValueError(f"order must be 'asc' or 'desc', got {order!r}.")

        with self._connect() as conn:
            rows = conn.execute("SELECT build FROM builds").fetchall()
        builds = [Build.model_validate_json(r["build"]) for r in rows]
        if tag:
            builds = [b for b in builds if tag in b.tags]
        builds.sort(key=lambda b: getattr(b, sort_by), reverse=(order == "desc"))
        return builds[:limit]

    def update(self, build_id: str, **changes) -> Build:
        """Apply field changes to a stored build. Raises KeyError if not found."""
        build = self.get(build_id)
        build = build.model_copy(update={**changes, "updated_at": _now()})
        self._persist(build)
        return build

    def increment_views(self, build_id: str) -> Build:
        build = self.get(build_id)
        build = build.model_copy(update={"views": build.views + 1})
        self._persist(build)
        return build

    def delete(self, build_id: str) -> None:
        """Remove a build. Raises KeyError if it doesn't exist."""
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM builds WHERE build_id = ?", (build_id,))
        if cur.rowcount == 0:
            raise KeyError(f"Build {build_id!r} not found.")
