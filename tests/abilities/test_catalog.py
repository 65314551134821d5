"""
Tests for the ability catalog and the content repository.
"""

import json

import pytest
from abilities.catalog import (
    COMMON_ABILITIES,
    MONSTER_ABILITIES,
    MONSTER_LOADOUTS,
    UNDERLING_ABILITIES,
    get_abilities_for_class,
    get_ability,
)
from core.constants import EffectType
from core.content import ContentRepository


def test_every_tree_has_ten_levels():
    """
    Test that each class tree teaches one ability per level from 1 to 10.
    """
    for tree in UNDERLING_ABILITIES.values():
        assert sorted(tree) == list(range(1, 11))


def test_tree_abilities_are_restricted_to_their_level_and_class():
    """
    Test that each tree ability requires its class and learning level.
    """
    for class_name, tree in UNDERLING_ABILITIES.items():
        for level, ability in tree.items():
            assert ability.usage.level == level
            assert ability.usage.required_class == class_name


def test_ability_ids_are_unique():
    """
    Test that no two catalog entries share an id.
    """
    ids = [a.id for tree in UNDERLING_ABILITIES.values() for a in tree.values()]
    ids += list(MONSTER_ABILITIES) + list(COMMON_ABILITIES)
    assert len(ids) == len(set(ids))


def test_abilities_for_class_up_to_level():
    """
    Test that a class learns the abilities of every level up to its own.
    """
    abilities = get_abilities_for_class("warrior", 3)
    assert [a.id for a in abilities] == ["shield_bash", "taunt", "power_strike"]


def test_class_aliases_share_a_tree():
    """
    Test that priests learn the healer tree and skirmishers the archer tree.
    """
    assert get_abilities_for_class("priest", 2) == get_abilities_for_class("healer", 2)
    assert get_abilities_for_class("Skirmisher", 1)[0].id == "precise_shot"


def test_unknown_class_has_no_abilities():
    """
    Test that classes without a tree learn nothing.
    """
    assert get_abilities_for_class("bard", 10) == []


def test_monster_loadouts_reference_known_abilities():
    """
    Test that every monster loadout names catalog abilities.
    """
    for ability_ids in MONSTER_LOADOUTS.values():
        for ability_id in ability_ids:
            ability = get_ability(ability_id)
            assert ability is not None
            assert ability.category == "monster"


def test_get_ability_lookup():
    """
    Test lookups across the catalog groups.
    """
    assert get_ability("firebolt").effects[0].effect_type == EffectType.DAMAGE
    assert get_ability("meteor").usage.required_class == "mage"
    assert get_ability("health_potion").category == "item"
    assert get_ability("does_not_exist") is None


def test_items_do_what_they_say():
    """
    Test that each item names the effect it grants and the material it uses.
    """
    tonic = get_ability("ironskin_tonic")
    assert [effect.effect_type for effect in tonic.effects] == [EffectType.BUFF_DEFENSE]
    assert tonic.costs.materials == {"ironskin_tonic": 1}
    assert get_ability("health_potion").effects[0].effect_type == EffectType.HEAL
    assert get_ability("mana_potion") is None


def test_repository_lookups():
    """
    Test the repository's by-id access to every group of the catalog.
    """
    repo = ContentRepository()
    assert repo.get_ability("vampire_bite") is not None
    assert repo.get_ability("spider_web") is not None
    assert repo.get_ability("minor_heal") == get_ability("minor_heal")
    assert repo.get_ability("unknown_ability") is None


def test_repository_loads_ability_files(tmp_path):
    """
    Test that abilities described in JSON files are added to the repository.
    """
    records = [
        {
            "id": "thunderclap_test",
            "name": "Thunderclap",
            "category": "spell",
            "targeting": {"type": "all", "validity": "enemies", "count": "all"},
            "costs": {"mana": 6},
            "effects": [{"type": "damage", "base_value": 7}],
        }
    ]
    (tmp_path / "extra.json").write_text(json.dumps(records))
    repo = ContentRepository()
    repo.reload(tmp_path)
    ability = repo.get_ability("thunderclap_test")
    assert ability is not None
    assert ability.effects[0].effect_type == EffectType.DAMAGE
    assert ability.targeting.count == "all"


def test_repository_rejects_duplicate_ids(tmp_path):
    """
    Test that a file defining the same id twice is refused.
    """
    record = {"id": "twice_test", "name": "Twice", "effects": [{"type": "heal", "base_value": 1}]}
    (tmp_path / "dupes.json").write_text(json.dumps([record, record]))
    with pytest.raises(ValueError):
        ContentRepository().reload(tmp_path)
