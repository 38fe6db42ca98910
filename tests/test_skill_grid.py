"""
Tests for SkillGrid placement rules, click handling and the codec bridge.
"""

import pytest

from core.loadout_codec import parse_loadout, resolve_loadout
from core.skill_grid import GridAction, PlacementRejected, SkillGrid
from helpers import ANGEL, BATTLE_MEDIC, EMT, pos


class TestPlacementRules:
    """check_placement() / place()."""

    def test_place_on_empty_cell(self, grid, registry):
        assert grid.place(registry.get(ANGEL), pos(0, 0, 0))
        assert grid.skill_at(pos(0, 0, 0)).guid == ANGEL
        assert len(grid) == 1

    def test_occupied_cell_rejected(self, grid, registry):
        grid.place(registry.get(ANGEL), pos(0, 0, 0))
        assert not grid.place(registry.get(EMT), pos(0, 0, 0))
        assert grid.skill_at(pos(0, 0, 0)).guid == ANGEL

    def test_off_grid_rejected(self, grid, registry):
        assert "outside the grid" in grid.check_placement(registry.get(ANGEL), pos(5, -5, 0))
        assert not grid.place(registry.get(ANGEL), pos(5, -5, 0))

    def test_placeable_on_reserved_cell_rejected(self, grid, registry):
        reason = grid.check_placement(registry.get(ANGEL), pos(1, -1, 0))
        assert "reserved" in reason

    def test_fixed_skill_only_on_its_cell(self, grid, registry):
        hex10 = registry.get("hex-level-10")
        assert not grid.place(hex10, pos(0, 0, 0))
        assert grid.place(hex10, pos(1, -1, 0))

    def test_place_or_raise(self, grid, registry):
        grid.place_or_raise(registry.get(ANGEL), pos(0, 0, 0))
        with pytest.raises(PlacementRejected) as excinfo:
            grid.place_or_raise(registry.get(EMT), pos(0, 0, 0))
        assert "already occupied" in excinfo.value.message

    def test_smaller_radius(self, registry):
        small = SkillGrid.for_registry(registry, radius=1)
        assert len(small.cells()) == 7
        assert not small.place(registry.get("hex-level-20"), pos(2, -1, -1))

    def test_is_locked_only_for_fixed_skills(self, registry):
        assert SkillGrid.is_locked(registry.get("hex-level-20"), 19)
        assert not SkillGrid.is_locked(registry.get("hex-level-20"), 20)
        assert not SkillGrid.is_locked(registry.get("3bd89761db7ec422da708839f34048ba"), 0)


class TestRemoveAndClick:
    """Removing skills and the calculator's click semantics."""

    def test_remove_placeable(self, grid, registry):
        grid.place(registry.get(ANGEL), pos(0, 0, 0))
        removed = grid.remove(pos(0, 0, 0))
        assert removed.skill.guid == ANGEL
        assert len(grid) == 0

    def test_remove_never_takes_fixed(self, grid, registry):
        grid.place(registry.get("hex-level-10"), pos(1, -1, 0))
        assert grid.remove(pos(1, -1, 0)) is None
        assert len(grid) == 1

    def test_remove_empty_cell(self, grid):
        assert grid.remove(pos(0, 0, 0)) is None

    def test_click_empty_with_selection_places(self, grid, registry):
        assert grid.click(pos(0, 0, 0), registry.get(ANGEL)) == GridAction.PLACED

    def test_click_empty_without_selection_is_noop(self, grid):
        assert grid.click(pos(0, 0, 0)) == GridAction.NOOP

    def test_click_occupied_removes(self, grid, registry):
        grid.place(registry.get(ANGEL), pos(0, 0, 0))
        assert grid.click(pos(0, 0, 0), registry.get(EMT)) == GridAction.REMOVED
        assert grid.skill_at(pos(0, 0, 0)) is None

    def test_click_fixed_is_noop(self, grid, registry):
        grid.place(registry.get("hex-level-10"), pos(1, -1, 0))
        assert grid.click(pos(1, -1, 0)) == GridAction.NOOP
        assert grid.skill_at(pos(1, -1, 0)) is not None

    def test_click_rejected(self, grid, registry):
        assert grid.click(pos(1, -1, 0), registry.get(ANGEL)) == GridAction.REJECTED

    def test_clear(self, grid, registry):
        grid.place(registry.get(ANGEL), pos(0, 0, 0))
        grid.place(registry.get("hex-level-10"), pos(1, -1, 0))
        grid.clear()
        assert len(grid) == 0


class TestCodecBridge:
    """export() and load()."""

    def test_export_keeps_placement_order(self, grid, registry):
        grid.place(registry.get(EMT), pos(0, -1, 1))
        grid.place(registry.get(ANGEL), pos(0, 0, 0))
        result = parse_loadout(grid.export(1, 15))
        assert [n.guid for n in result.skills] == [EMT, ANGEL]
        assert {n.level for n in result.skills} == {15}

    def test_locked_fixed_skill_still_exported(self, grid, registry):
        grid.place(registry.get("hex-level-50"), pos(3, -1, -2))
        result = parse_loadout(grid.export(0, 1))
        assert [n.guid for n in result.skills] == ["hex-level-50"]

    def test_load_round_trip(self, grid, registry):
        grid.place(registry.get(BATTLE_MEDIC), pos(-1, 0, 1))
        grid.place(registry.get("hex-level-10"), pos(1, -1, 0))
        resolved = resolve_loadout(parse_loadout(grid.export(1, 12)), registry)

        fresh = SkillGrid.for_registry(registry)
        assert fresh.load(resolved) == 2
        assert [ps.skill.guid for ps in fresh.placed] == [BATTLE_MEDIC, "hex-level-10"]

    def test_load_skips_rule_violations(self, registry):
        big = SkillGrid.for_registry(registry, radius=4)
        big.place(registry.get(ANGEL), pos(4, -4, 0))
        resolved = resolve_loadout(parse_loadout(big.export(1, 5)), registry)

        small = SkillGrid.for_registry(registry, radius=2)
        small.place(registry.get(EMT), pos(0, 0, 0))
        assert small.load(resolved) == 0
        assert len(small) == 0
