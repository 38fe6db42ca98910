"""
Tests for the skill catalog: bundled definitions, lookups and load errors.
"""

import pytest
from pydantic import ValidationError

from skills.base_skill import SkillCategory, SkillDefinition, TriggerType
from skills.skill_registry import SkillRegistry, default_registry
from helpers import BATTLE_MEDIC, pos


FIXED_YAML = """
skills:
  - guid: hex-a
    name: Level 10
    category: fixed
    charges: 1
    trigger: on-flip
    level_requirement: 10
    fixed_position: {x: 1, y: -1, z: 0}
"""


def write_yaml(directory, name, text):
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


class TestBundledCatalog:
    """The definitions shipped in skills/definitions/."""

    def test_counts(self, registry):
        assert len(registry.list_fixed()) == 5
        assert len(registry.list_placeable()) == 23
        assert len(registry) == 28

    def test_lookup_known_guid(self, registry):
        skill = registry.lookup(BATTLE_MEDIC)
        assert skill.name == "Battle Medic"
        assert skill.charges == 3
        assert skill.trigger == TriggerType.ON_WIN
        assert skill.category == SkillCategory.PLACEABLE

    def test_lookup_unknown_guid_returns_none(self, registry):
        assert registry.lookup("not-a-guid") is None
        assert "not-a-guid" not in registry

    def test_get_unknown_guid_raises(self, registry):
        with pytest.raises(KeyError):
            registry.get("not-a-guid")

    def test_fixed_skills_sit_on_distinct_cells(self, registry):
        cells = [s.fixed_position for s in registry.list_fixed()]
        assert len(set(cells)) == 5
        assert pos(1, -1, 0) in cells

    def test_list_available_filters_by_level(self, registry):
        available = registry.list_available(5, SkillCategory.PLACEABLE)
        assert all(s.level_requirement <= 5 for s in available)
        assert BATTLE_MEDIC in {s.guid for s in available}
        assert not any(s.is_fixed for s in available)

    def test_list_available_level_zero(self, registry):
        assert registry.list_available(0) == ()

    def test_accessors_return_tuples(self, registry):
        assert isinstance(registry.all(), tuple)
        assert isinstance(registry.list_fixed(), tuple)

    def test_default_registry_is_memoised(self, monkeypatch):
        monkeypatch.delenv("QUP_SKILL_DEFINITIONS_DIR", raising=False)
        default_registry.cache_clear()
        try:
            assert default_registry() is default_registry()
            assert len(default_registry()) == 28
        finally:
            default_registry.cache_clear()


class TestSkillDefinition:
    """Model-level validation of catalog entries."""

    def test_fixed_skill_requires_position(self):
        with pytest.raises(ValidationError):
            SkillDefinition(guid="g", name="n", category="fixed", charges=1, trigger="on-flip")

    def test_placeable_skill_rejects_position(self):
        with pytest.raises(ValidationError):
            SkillDefinition(
                guid="g", name="n", category="placeable", charges=1, trigger="on-flip",
                fixed_position={"x": 0, "y": 0, "z": 0},
            )

    def test_charges_must_be_positive(self):
        with pytest.raises(ValidationError):
            SkillDefinition(guid="g", name="n", category="placeable", charges=0, trigger="on-win")

    def test_unlocked_at(self, registry):
        hex10 = registry.get("hex-level-10")
        assert not hex10.is_unlocked_at(9)
        assert hex10.is_unlocked_at(10)


class TestLoadErrors:
    """Catalog files that must not load."""

    def test_duplicate_guid(self, tmp_path):
        write_yaml(tmp_path, "a.yaml", FIXED_YAML)
        write_yaml(tmp_path, "b.yaml", FIXED_YAML.replace("{x: 1, y: -1, z: 0}", "{x: 0, y: 0, z: 0}"))
        with pytest.raises(ValueError, match="Duplicate skill guid"):
            SkillRegistry().load_all(tmp_path)

    def test_two_fixed_skills_on_one_cell(self, tmp_path):
        write_yaml(tmp_path, "a.yaml", FIXED_YAML)
        write_yaml(tmp_path, "b.yaml", FIXED_YAML.replace("hex-a", "hex-b"))
        with pytest.raises(ValueError, match="share cell"):
            SkillRegistry().load_all(tmp_path)

    def test_malformed_entry(self, tmp_path):
        write_yaml(tmp_path, "a.yaml", FIXED_YAML.replace("charges: 1", "charges: -1"))
        with pytest.raises(ValidationError):
            SkillRegistry().load_all(tmp_path)

    def test_empty_directory_gives_empty_registry(self, tmp_path):
        registry = SkillRegistry()
        registry.load_all(tmp_path)
        assert len(registry) == 0
