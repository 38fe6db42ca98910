"""
core/loadout_codec.py
---------------------
Encodes placed skills into a QUP-LOADOUT export string and decodes /
validates export strings back into structured data.

Wire format (shared with the game client — do not change):
  "QUP-LOADOUT-v1:" + base64( utf8( json({character, nodes}) ) )

Decode pipeline:
  empty check → prefix check → length check → base64 → JSON → structure
  → node filter → SUCCESS
Any failing stage returns ParseResult(is_valid=False, reason=...) at once.
parse_loadout() never raises for string input.

Soft failures (bad node, duplicate cell, unknown GUID) don't invalidate a
loadout — they are logged and the offending node is skipped.

Owner: Core team
Depends on: core/loadout, core/hex_grid, skills/skill_registry
Depended on by: skill_grid, API routes, scripts/inspect_loadout
"""

import base64
import binascii
import json
import logging
from typing import Iterable

from pydantic import ValidationError

from core.hex_grid import GridPosition
from core.loadout import (
    Loadout,
    ParseError,
    ParseResult,
    PlacedSkill,
    ResolvedLoadout,
    SkillNode,
)
from skills.skill_registry import SkillRegistry

logger = logging.getLogger(__name__)


FORMAT_TAG = "QUP-LOADOUT"
FORMAT_VERSION = 1
EXPORT_PREFIX = f"{FORMAT_TAG}-v{FORMAT_VERSION}:"

# looks_like_loadout() bounds. Nothing decode accepts is ever this short
# (an empty loadout already encodes to ~50 chars); the upper bound is also
# enforced by parse_loadout() so the quick check never rejects a valid string.
MIN_EXPORT_LENGTH = 20
MAX_EXPORT_LENGTH = 50_000

CHARACTER_NAMES: dict[int, str] = {
    0: "The Gambler",
    1: "Leila the Medic",
}


def character_name(character_id: int) -> str:
    return CHARACTER_NAMES.get(character_id, f"Character {character_id}")


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------

def export_loadout(character_id: int, placed_skills: Iterable[PlacedSkill], level: int) -> str:
    """
    Serialise placed skills into an export string.
    Node order follows placement order. Every node is written with the
    character level and isInventory=false, as the game does for grid skills.
    """
    loadout = Loadout(
        character=character_id,
        nodes=[
            SkillNode(
                name=ps.skill.name,
                guid=ps.skill.guid,
                level=level,
                grid_position=ps.position,
                is_inventory=False,
            )
            for ps in placed_skills
        ],
    )
    # Compact separators match what the game / browser JSON.stringify emit.
    text = json.dumps(loadout.to_wire(), separators=(",", ":"), ensure_ascii=False)
    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return EXPORT_PREFIX + payload


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------

def _invalid(raw: str, reason: ParseError, error: str) -> ParseResult:
    logger.debug("Loadout rejected (%s): %s", reason.value, error)
    return ParseResult(raw=raw, skills=[], is_valid=False, reason=reason, error=error)


def _is_int(value) -> bool:
    # bool is an int subclass; JSON true/false must not pass as a character id
    return isinstance(value, int) and not isinstance(value, bool)


def _has_name(node) -> bool:
    if not isinstance(node, dict):
        return False
    name = node.get("name")
    return isinstance(name, str) and name.strip() != ""


def parse_loadout(raw: str) -> ParseResult:
    """
    Decode and validate an export string.

    Returns a ParseResult; on failure `reason` is one of ParseError and
    `error` is a human-readable message suitable for a 400 response.
    """
    if not isinstance(raw, str) or raw.strip() == "":
        return _invalid(raw if isinstance(raw, str) else "", ParseError.EMPTY_INPUT,
                        "Export string is empty")

    if not raw.startswith(EXPORT_PREFIX):
        return _invalid(raw, ParseError.UNRECOGNIZED_FORMAT,
                        f"Invalid format: expected {EXPORT_PREFIX[:-1]} prefix")

    if len(raw) >= MAX_EXPORT_LENGTH:
        return _invalid(raw, ParseError.TOO_LONG,
                        f"Export string is too long ({len(raw)} characters)")

    encoded = raw[len(EXPORT_PREFIX):]
    try:
        decoded = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        return _invalid(raw, ParseError.CORRUPT_ENCODING, f"Corrupt encoding: {exc}")

    try:
        payload = json.loads(decoded.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return _invalid(raw, ParseError.CORRUPT_PAYLOAD, f"Corrupt payload: {exc}")

    if (
        not isinstance(payload, dict)
        or not _is_int(payload.get("character"))
        or not isinstance(payload.get("nodes"), list)
    ):
        return _invalid(raw, ParseError.INVALID_STRUCTURE,
                        "Invalid loadout structure: missing character or nodes")

    character = payload["character"]

    # Unnamed nodes are unallocated hexes; skipped, not counted as dropped.
    named = [node for node in payload["nodes"] if _has_name(node)]

    skills: list[SkillNode] = []
    placed_at: dict[GridPosition, int] = {}
    dropped = 0
    for index, node in enumerate(named):
        try:
            skill_node = SkillNode.model_validate(node)
        except ValidationError as exc:
            dropped += 1
            logger.warning(
                "Dropping loadout node %d (%r): %s",
                index, node.get("name"), exc.errors()[0].get("msg", "invalid"),
            )
            continue

        if not skill_node.is_inventory:
            pos = skill_node.grid_position
            if pos in placed_at:
                # Last write wins, kept in the slot of the first occurrence.
                logger.warning(
                    "Loadout places two skills on %s — keeping %r over %r",
                    pos.as_tuple(), skill_node.name, skills[placed_at[pos]].name,
                )
                skills[placed_at[pos]] = skill_node
                dropped += 1
                continue
            placed_at[pos] = len(skills)
        skills.append(skill_node)

    return ParseResult(
        raw=raw,
        character=character,
        character_name=character_name(character),
        skills=skills,
        is_valid=True,
        dropped=dropped,
    )


def looks_like_loadout(raw: str) -> bool:
    """
    Cheap pre-check before a full decode: non-empty, right prefix, sane length.
    Everything parse_loadout() accepts passes this; the reverse isn't true.
    """
    if not isinstance(raw, str) or raw.strip() == "":
        return False
    return (
        raw.startswith(EXPORT_PREFIX)
        and MIN_EXPORT_LENGTH < len(raw) < MAX_EXPORT_LENGTH
    )


# ---------------------------------------------------------------------------
# Catalog join
# ---------------------------------------------------------------------------

def resolve_loadout(result: ParseResult, registry: SkillRegistry) -> ResolvedLoadout:
    """
    Join a successful ParseResult against the skill catalog.

    Grid nodes whose GUID the catalog knows become PlacedSkills; unknown
    GUIDs are collected in `unresolved` and logged, never raised.
    Inventory nodes are not on the grid and are ignored here.
    Raises ValueError if handed an invalid result.
    """
    if not result.is_valid or result.character is None:
        raise ValueError(f"Cannot resolve an invalid loadout ({result.reason})")

    placed: list[PlacedSkill] = []
    unresolved: list[SkillNode] = []
    level = None
    for node in result.skills:
        if node.is_inventory:
            continue
        skill = registry.lookup(node.guid)
        if skill is None:
            unresolved.append(node)
            continue
        if level is None:
            level = node.level
        placed.append(PlacedSkill(skill=skill, position=node.grid_position))

    if unresolved:
        logger.info(
            "Loadout for character %s: %d node(s) with unknown guid skipped: %s",
            result.character, len(unresolved), ", ".join(n.guid for n in unresolved),
        )

    return ResolvedLoadout(
        character=result.character,
        character_name=result.character_name or character_name(result.character),
        level=level,
        placed=placed,
        unresolved=unresolved,
    )
