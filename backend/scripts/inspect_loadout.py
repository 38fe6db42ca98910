#!/usr/bin/env python3
"""
Decode QUP-LOADOUT export strings and report what they contain.

Usage:
  python backend/scripts/inspect_loadout.py --export-string "QUP-LOADOUT-v1:..."
  python backend/scripts/inspect_loadout.py --file exports.txt --json

--file reads one export string per non-blank line. Exit status is 1 if any
string fails to decode.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[2]
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from pydantic import ValidationError

from core.loadout import ParseResult, ResolvedLoadout
from core.loadout_codec import parse_loadout, resolve_loadout
from skills.skill_registry import DEFINITIONS_DIR, SkillRegistry
from utilities.skill_utils import (
    adjacent_pairs,
    skill_counts,
    skill_summary,
    sort_by_distance_from_center,
    unique_skill_names,
)


def read_export_strings(path: Path) -> list[str]:
    with path.open(encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


def format_report(result: ParseResult, resolved: ResolvedLoadout | None) -> str:
    if not result.is_valid:
        return f"INVALID ({result.reason.value}): {result.error}"

    lines = [
        f"Character: {result.character_name} ({result.character})",
        f"Summary:   {skill_summary(result.skills)}",
    ]
    distinct = unique_skill_names(result.skills)
    if len(distinct) < len(result.skills):
        lines.append(f"Distinct:  {', '.join(distinct)}")
    if result.dropped:
        lines.append(f"Dropped:   {result.dropped} node(s)")
    if resolved is not None:
        if resolved.level is not None:
            lines.append(f"Level:     {resolved.level}")
        counts = skill_counts(result.skills)
        for node in sort_by_distance_from_center(result.skills):
            where = "inventory" if node.is_inventory else str(node.grid_position.as_tuple())
            repeat = f" x{counts[node.name]}" if counts[node.name] > 1 else ""
            lines.append(f"  - {node.name}{repeat} @ {where}")
        for node in resolved.unresolved:
            lines.append(f"  ? unknown guid {node.guid} ({node.name})")
        for a, b in adjacent_pairs(result.skills):
            lines.append(f"  ~ {a} <-> {b}")
    return "\n".join(lines)


def report_as_json(result: ParseResult, resolved: ResolvedLoadout | None) -> dict:
    payload = result.model_dump(mode="json", by_alias=True)
    if resolved is not None:
        payload["placed"] = [
            {"guid": ps.skill.guid, "name": ps.skill.name, "position": ps.position.as_tuple()}
            for ps in resolved.placed
        ]
        payload["unresolved"] = [n.guid for n in resolved.unresolved]
    return payload


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Decode and inspect QUP-LOADOUT export strings.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--export-string", help="A single export string.")
    source.add_argument("--file", type=Path, help="Text file with one export string per line.")
    parser.add_argument(
        "--definitions-dir",
        type=Path,
        default=DEFINITIONS_DIR,
        help="Skill catalog YAML directory (default: backend/skills/definitions).",
    )
    parser.add_argument("--json", action="store_true", help="Print one JSON object per string.")
    args = parser.parse_args(argv)

    if args.file is not None:
        try:
            export_strings = read_export_strings(args.file)
        except FileNotFoundError:
            print(f"Export file not found: {args.file}")
            return 1
    else:
        export_strings = [args.export_string]

    registry = SkillRegistry()
    try:
        registry.load_all(args.definitions_dir)
    except (ValidationError, ValueError) as e:
        print(f"Could not load skill catalog: {e}")
        return 1

    failures = 0
    for index, export_string in enumerate(export_strings):
        result = parse_loadout(export_string)
        resolved = resolve_loadout(result, registry) if result.is_valid else None
        if not result.is_valid:
            failures += 1

        if args.json:
            print(json.dumps(report_as_json(result, resolved)))
        else:
            if len(export_strings) > 1:
                print(f"[{index + 1}]")
            print(format_report(result, resolved))

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
