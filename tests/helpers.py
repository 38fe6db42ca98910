"""
Shared test helpers: catalog GUIDs and hand-built export strings.
"""

import base64
import json

from core.hex_grid import GridPosition


BATTLE_MEDIC = "87991029142bd42739b141a284a68b12"
ANGEL = "3bd89761db7ec422da708839f34048ba"
EMT = "f685bad6490cd4ae9a1403282ad36e16"


def pos(x: int, y: int, z: int) -> GridPosition:
    return GridPosition(x=x, y=y, z=z)


def encode_payload(payload, prefix: str = "QUP-LOADOUT-v1:") -> str:
    """Build an export string around an arbitrary JSON payload."""
    text = json.dumps(payload, separators=(",", ":"))
    return prefix + base64.b64encode(text.encode("utf-8")).decode("ascii")


def wire_node(name, guid, x, y, z, level=10, is_inventory=False) -> dict:
    return {
        "name": name,
        "guid": guid,
        "level": level,
        "gridPosition": {"x": x, "y": y, "z": z},
        "isInventory": is_inventory,
    }
