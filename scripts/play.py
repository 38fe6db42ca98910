#!/usr/bin/env python3
"""
scripts/play.py
---------------
Textual TUI for the Q-Up skill calculator.

Two tabs:
  [⬡ Grid]  — hex map, skill picker and a command line
  [📋 Logs] — raw API event log

Commands (type in the input, Enter to run):
  p N X Z      place skill #N from the picker at cube cell (X, -X-Z, Z)
  r X Z        remove the placeable skill at (X, -X-Z, Z)
  lvl N        set the character level (locks / unlocks fixed skills)
  char N       set the character id
  export       print the export string for the current grid
  import STR   load an export string onto the grid
  clear        remove every placeable skill
  help         show this list

Usage:
  pip install -e ".[tui]"
  python scripts/play.py [--url http://localhost:8000]

Requires the backend:
  cd backend && uvicorn api.main:app --port 8000
"""

import argparse
import os
import sys
import time
from typing import Callable, Optional

import requests
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import (
    Footer,
    Header,
    Input,
    RichLog,
    Static,
    TabbedContent,
    TabPane,
)
from textual import on, work


# ─────────────────────────────────────────────────────────────────────────────
# Config
# ─────────────────────────────────────────────────────────────────────────────

DEFAULT_URL = os.getenv("QUP_API_URL", "http://localhost:8000")

STARTUP_ATTEMPTS = 10
STARTUP_RETRY_DELAY = 2.0   # seconds between /health attempts

HELP_TEXT = (
    "[bold]p N X Z[/bold] place · [bold]r X Z[/bold] remove · "
    "[bold]lvl N[/bold] · [bold]char N[/bold] · [bold]export[/bold] · "
    "[bold]import STR[/bold] · [bold]clear[/bold]"
)


# ─────────────────────────────────────────────────────────────────────────────
# API helpers  (sync, always called from background thread workers)
# ─────────────────────────────────────────────────────────────────────────────

def _get(base_url: str, path: str, params: Optional[dict] = None, timeout: int = 10):
    r = requests.get(f"{base_url}{path}", params=params, timeout=timeout)
    r.raise_for_status()
    return r.json()


def _post(base_url: str, path: str, body: dict, timeout: int = 10) -> dict:
    r = requests.post(f"{base_url}{path}", json=body, timeout=timeout)
    r.raise_for_status()
    return r.json()


def wait_for_backend(
    base_url: str,
    on_wait: Callable[[int], None],
    attempts: int = STARTUP_ATTEMPTS,
    delay: float = STARTUP_RETRY_DELAY,
) -> bool:
    """
    Poll /health until it answers. Calls on_wait(attempt) and sleeps
    `delay` seconds after each failed attempt except the last.
    Returns False if the backend never came up.
    """
    for attempt in range(1, attempts + 1):
        try:
            _get(base_url, "/health", timeout=5)
            return True
        except requests.RequestException:
            if attempt == attempts:
                return False
            on_wait(attempt)
            time.sleep(delay)
    return False


def _error_detail(exc: requests.HTTPError) -> str:
    try:
        return str(exc.response.json().get("detail", exc.response.text))
    except ValueError:
        return exc.response.text[:200]


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _cube(x: int, z: int) -> dict:
    return {"x": x, "y": -x - z, "z": z}


def _key(pos: dict) -> tuple[int, int, int]:
    return (pos["x"], pos["y"], pos["z"])


def _render_map(cells: list[dict], placed: dict, level: int) -> str:
    """
    Flat-top hex map. Column = x, row = x + 2z, so neighbouring cells
    interleave on alternate text rows.
    """
    if not cells:
        return "[dim]No grid loaded.[/dim]"
    cols = [c["position"]["x"] for c in cells]
    rows = [c["position"]["x"] + 2 * c["position"]["z"] for c in cells]
    min_col, min_row = min(cols), min(rows)
    markup_rows: dict[int, dict[int, str]] = {}

    for cell, col, row in zip(cells, cols, rows):
        key = _key(cell["position"])
        skill = placed.get(key)
        if skill is None:
            label = "[dim]··[/dim]" if not cell.get("fixed_skill") else "[yellow]◇◇[/yellow]"
        elif skill["category"] == "fixed":
            locked = level < skill.get("level_requirement", 0)
            label = "[red]🔒[/red]" if locked else "[yellow]◆◆[/yellow]"
        else:
            label = f"[green]{skill['name'][:2]}[/green]"
        markup_rows.setdefault(row - min_row, {})[(col - min_col) * 4] = label

    # every label renders two cells wide
    out = []
    for r in range(max(rows) - min_row + 1):
        parts, c = [], 0
        for start, label in sorted(markup_rows.get(r, {}).items()):
            parts.append(" " * (start - c))
            parts.append(label)
            c = start + 2
        out.append("".join(parts))
    return "\n".join(out)


# ─────────────────────────────────────────────────────────────────────────────
# App
# ─────────────────────────────────────────────────────────────────────────────

class QUpCalculatorApp(App[None]):
    """Q-Up — Skill Calculator TUI."""

    TITLE = "Q-Up"
    SUB_TITLE = "Skill Calculator"

    CSS = """
    TabbedContent, TabPane {
        height: 1fr;
    }
    #grid-row {
        height: 1fr;
        layout: horizontal;
    }
    #map-panel {
        width: 1fr;
        border: round #3b82f6;
        padding: 0 1;
    }
    #info-line {
        color: #6b7280;
    }
    #picker-panel {
        width: 44;
        border: round #22c55e;
        padding: 0 1;
        margin-left: 1;
    }
    #output-log {
        height: 8;
        border: round #1e3a5f;
        padding: 0 1;
    }
    #command-input {
        margin-top: 0;
    }
    #status-bar {
        height: 1;
        background: #111827;
        color: #6b7280;
        padding: 0 2;
        dock: bottom;
    }
    #event-log {
        height: 1fr;
        padding: 1;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("ctrl+l", "clear_grid", "Clear"),
    ]

    def __init__(self, base_url: str = DEFAULT_URL) -> None:
        super().__init__()
        self.base_url = base_url

        self._cells: list[dict] = []
        self._catalog: list[dict] = []     # placeable skills, picker order
        self._fixed: list[dict] = []
        self._character: int = 0
        self._level: int = 1
        # Placement order, matching the order the export writes nodes in.
        self._placements: list[tuple[dict, dict]] = []   # [(skill, position), ...]

    # ── Compose ──────────────────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

        with TabbedContent(initial="grid-pane"):
            with TabPane("⬡  Grid", id="grid-pane"):
                with Vertical():
                    with Horizontal(id="grid-row"):
                        with Vertical(id="map-panel"):
                            yield Static("", id="info-line", markup=True)
                            yield Static("", id="hex-map", markup=True)
                        yield RichLog(id="picker-panel", markup=True, wrap=True)
                    yield RichLog(id="output-log", markup=True, wrap=True)
                    yield Input(placeholder="p N X Z  ›  Enter   (help)", id="command-input")
                yield Static("…", id="status-bar", markup=True)

            with TabPane("📋  Logs", id="logs-pane"):
                yield RichLog(id="event-log", highlight=True, markup=True, wrap=True)

        yield Footer()

    def on_mount(self) -> None:
        self._set_status("Connecting to backend…")
        self.query_one("#command-input", Input).disabled = True
        self._startup_worker()

    # ── Startup ───────────────────────────────────────────────────────────────

    @work(thread=True)
    def _startup_worker(self) -> None:
        def on_wait(attempt: int) -> None:
            self.call_from_thread(
                self._set_status,
                f"Waiting for backend… (attempt {attempt}/{STARTUP_ATTEMPTS})",
            )

        if not wait_for_backend(self.base_url, on_wait):
            self.call_from_thread(
                self._fatal, f"Backend unreachable after {STARTUP_ATTEMPTS} attempts."
            )
            return
        try:
            skills = _get(self.base_url, "/catalog/skills")
            grid = _get(self.base_url, "/grid")
        except requests.RequestException as exc:
            self.call_from_thread(self._fatal, f"Startup failed: {exc}")
            return
        self.call_from_thread(self._on_ready, skills, grid)

    def _on_ready(self, skills: list[dict], grid: dict) -> None:
        self._catalog = [s for s in skills if s["category"] == "placeable"]
        self._fixed = [s for s in skills if s["category"] == "fixed"]
        self._cells = grid["cells"]
        self._log(
            f"[dim]Loaded {len(skills)} skills, {len(self._cells)} cells "
            f"(radius {grid['radius']})[/dim]"
        )
        self._reset_grid()
        inp = self.query_one("#command-input", Input)
        inp.disabled = False
        inp.focus()
        self._set_status(HELP_TEXT)

    # ── Rendering ─────────────────────────────────────────────────────────────

    def _reset_grid(self) -> None:
        """Empty grid with every fixed skill on its own cell."""
        self._placements = [(s, s["fixed_position"]) for s in self._fixed]
        self._render()

    def _render(self) -> None:
        placed = {_key(pos): skill for skill, pos in self._placements}
        self.query_one("#hex-map", Static).update(_render_map(self._cells, placed, self._level))
        self.query_one("#info-line", Static).update(
            f"Character {self._character} · level {self._level} · "
            f"{len(self._placements)} skills placed"
        )
        picker = self.query_one("#picker-panel", RichLog)
        picker.clear()
        for i, skill in enumerate(self._catalog, start=1):
            lock = "" if self._level >= skill.get("level_requirement", 0) else " [red](locked)[/red]"
            picker.write(f"[bold]{i:>2}[/bold] {skill['name']}  [dim]{skill['trigger']}[/dim]{lock}")

    # ── Commands ──────────────────────────────────────────────────────────────

    @on(Input.Submitted, "#command-input")
    def _on_command(self, event: Input.Submitted) -> None:
        raw = event.value.strip()
        event.input.value = ""
        if not raw:
            return
        cmd, _, rest = raw.partition(" ")
        args = rest.split()
        cmd = cmd.lower()
        self._log(f"[green]>[/green] {raw}")

        try:
            if cmd == "p" and len(args) == 3:
                self._place(int(args[0]), int(args[1]), int(args[2]))
            elif cmd == "r" and len(args) == 2:
                self._remove(int(args[0]), int(args[1]))
            elif cmd == "lvl" and len(args) == 1:
                self._level = max(0, int(args[0]))
                self._render()
            elif cmd == "char" and len(args) == 1:
                self._character = int(args[0])
                self._render()
            elif cmd == "export":
                self._export_worker()
            elif cmd == "import" and rest.strip():
                self._import_worker(rest.strip())
            elif cmd == "clear":
                self.action_clear_grid()
            elif cmd == "help":
                self._out(HELP_TEXT)
            else:
                self._out("[red]Unknown command — type help[/red]")
        except ValueError:
            self._out("[red]Numbers expected — type help[/red]")

    def _place(self, number: int, x: int, z: int) -> None:
        if not 1 <= number <= len(self._catalog):
            self._out(f"[red]No skill #{number} in the picker.[/red]")
            return
        skill = self._catalog[number - 1]
        candidate = self._placements + [(skill, _cube(x, z))]
        # The backend applies the placement rules; a 400 means rejected.
        self._validate_worker(candidate, f"Placed {skill['name']} at {(x, -x - z, z)}")

    def _remove(self, x: int, z: int) -> None:
        key = (x, -x - z, z)
        for i, (skill, pos) in enumerate(self._placements):
            if _key(pos) == key:
                if skill["category"] == "fixed":
                    self._out("[yellow]Fixed skills can't be removed.[/yellow]")
                    return
                del self._placements[i]
                self._out(f"Removed {skill['name']}")
                self._render()
                return
        self._out(f"[dim]{key} is empty.[/dim]")

    def action_clear_grid(self) -> None:
        self._reset_grid()
        self._out("Grid cleared.")

    # ── Workers ───────────────────────────────────────────────────────────────

    def _export_body(self, placements: list[tuple[dict, dict]]) -> dict:
        return {
            "character": self._character,
            "level": self._level,
            "placements": [{"guid": s["guid"], "position": p} for s, p in placements],
        }

    @work(thread=True)
    def _validate_worker(self, candidate: list[tuple[dict, dict]], message: str) -> None:
        try:
            _post(self.base_url, "/loadout/export", self._export_body(candidate))
        except requests.HTTPError as exc:
            self.call_from_thread(self._out, f"[red]{_error_detail(exc)}[/red]")
            return
        except requests.RequestException as exc:
            self.call_from_thread(self._fatal, f"Export error: {exc}")
            return
        self.call_from_thread(self._accept_placements, candidate, message)

    def _accept_placements(self, placements: list[tuple[dict, dict]], message: str) -> None:
        self._placements = placements
        self._out(message)
        self._render()

    @work(thread=True)
    def _export_worker(self) -> None:
        try:
            data = _post(self.base_url, "/loadout/export", self._export_body(self._placements))
        except requests.HTTPError as exc:
            self.call_from_thread(self._out, f"[red]{_error_detail(exc)}[/red]")
            return
        except requests.RequestException as exc:
            self.call_from_thread(self._fatal, f"Export error: {exc}")
            return
        self.call_from_thread(self._out, data["export_string"])

    @work(thread=True)
    def _import_worker(self, export_string: str) -> None:
        try:
            data = _post(self.base_url, "/loadout/parse", {"export_string": export_string})
        except requests.RequestException as exc:
            self.call_from_thread(self._fatal, f"Import error: {exc}")
            return
        self.call_from_thread(self._on_imported, data)

    def _on_imported(self, data: dict) -> None:
        result = data["result"]
        if not result["is_valid"]:
            self._out(f"[red]{result['error']}[/red]")
            return
        self._character = result["character"]
        levels = [n["level"] for n in result["skills"] if not n["isInventory"]]
        if levels:
            self._level = levels[0]
        self._placements = [(p["skill"], p["position"]) for p in data["placed"]]
        for skill in self._fixed:
            if all(_key(pos) != _key(skill["fixed_position"]) for _, pos in self._placements):
                self._placements.append((skill, skill["fixed_position"]))
        self._out(f"Imported {result['character_name']}: {data['summary']}")
        if data["unresolved"]:
            self._out(f"[yellow]{len(data['unresolved'])} unknown skill(s) skipped[/yellow]")
        self._render()

    # ── Utilities ─────────────────────────────────────────────────────────────

    def _out(self, msg: str) -> None:
        self.query_one("#output-log", RichLog).write(msg)

    def _set_status(self, msg: str) -> None:
        self.query_one("#status-bar", Static).update(msg)

    def _log(self, msg: str) -> None:
        self.query_one("#event-log", RichLog).write(msg)

    def _fatal(self, msg: str) -> None:
        self._set_status(f"[bold red]ERROR[/bold red]  {msg}")
        self._log(f"[bold red]FATAL:[/bold red] {msg}")


# ─────────────────────────────────────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────────────────────────────────────

def main() -> None:
    parser = argparse.ArgumentParser(description="Q-Up skill calculator — TUI")
    parser.add_argument("--url", default=DEFAULT_URL, help="Backend base URL")
    args = parser.parse_args()

    try:
        QUpCalculatorApp(base_url=args.url).run()
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    main()
