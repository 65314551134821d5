"""
Ability catalog for the combat engine.

Static registry of the abilities available in the game: the ten-level trees
learned by underling classes, the abilities monsters use, and the common
abilities granted by items and scrolls.
"""

from core.constants import EffectType, SpecialKind, StatType, TargetType, TargetValidity

from .ability import (
    Ability,
    AbilityCosts,
    SpecialEffect,
    SummonTemplate,
    Targeting,
    UsageRestrictions,
)
from .effect_resolver import EffectSpec

STR = StatType.STRENGTH
DEX = StatType.DEXTERITY
INT = StatType.INTELLIGENCE
WIL = StatType.WILLPOWER


def _single_enemy(range_: str = "melee") -> Targeting:
    return Targeting(type=TargetType.SINGLE, validity=TargetValidity.ENEMIES, count=1, range=range_)


def _some_enemies(count: int, range_: str = "melee") -> Targeting:
    return Targeting(type=TargetType.MULTIPLE, validity=TargetValidity.ENEMIES, count=count, range=range_)


def _all_enemies(range_: str = "melee") -> Targeting:
    return Targeting(type=TargetType.ALL, validity=TargetValidity.ENEMIES, count="all", range=range_)


def _single_ally() -> Targeting:
    return Targeting(type=TargetType.SINGLE, validity=TargetValidity.ALLIES, count=1)


def _all_allies() -> Targeting:
    return Targeting(type=TargetType.ALL, validity=TargetValidity.ALLIES, count="all")


def _self() -> Targeting:
    return Targeting(type=TargetType.SELF, validity=TargetValidity.SELF, count=1)


def _damage(base: float, variance: float = 0, **scaling: float) -> EffectSpec:
    return EffectSpec(
        type=EffectType.DAMAGE,
        base_value=base,
        variance=variance,
        scaling={StatType(k): v for k, v in scaling.items()},
    )


def _modifier(effect_type: EffectType, base: float, duration: int) -> EffectSpec:
    return EffectSpec(type=effect_type, base_value=base, duration=duration)


def _class_tree(class_name: str, tree: dict[int, Ability]) -> dict[int, Ability]:
    """Restricts every ability of a tree to its class and learning level."""
    return {
        level: ability.model_copy(
            update={"usage": UsageRestrictions(level=level, required_class=class_name)}
        )
        for level, ability in tree.items()
    }


# ============================================================================
# UNDERLING ABILITY TREES
# ============================================================================

ARCHER_ABILITIES: dict[int, Ability] = _class_tree("archer", {
    1: Ability(
        id="precise_shot",
        name="Precise Shot",
        description="A carefully aimed shot with increased accuracy",
        icon="🎯",
        targeting=_single_enemy("ranged"),
        costs=AbilityCosts(stamina=1),
        effects=(_damage(8, 2, dexterity=1.5),),
    ),
    2: Ability(
        id="hunters_mark",
        name="Hunter's Mark",
        description="Mark a target, lowering its defenses",
        icon="🏹",
        targeting=_single_enemy(),
        costs=AbilityCosts(stamina=2),
        effects=(_modifier(EffectType.DEBUFF_DEFENSE, 3, 5),),
    ),
    3: Ability(
        id="double_shot",
        name="Double Shot",
        description="Fire two arrows in quick succession",
        icon="🏹",
        targeting=_single_enemy("ranged"),
        costs=AbilityCosts(stamina=3),
        effects=(_damage(6, 2, dexterity=1.2), _damage(6, 2, dexterity=1.2)),
    ),
    4: Ability(
        id="piercing_shot",
        name="Piercing Shot",
        description="An arrow that pierces through multiple enemies",
        icon="➡️",
        targeting=_some_enemies(2, "ranged"),
        costs=AbilityCosts(stamina=4),
        effects=(_damage(10, 3, dexterity=1.8),),
    ),
    5: Ability(
        id="nature_ally",
        name="Summon Wolf",
        description="Call a wolf companion to fight alongside the party",
        icon="🐺",
        category="spell",
        targeting=_self(),
        costs=AbilityCosts(mana=8),
        special=SpecialEffect(
            kind=SpecialKind.SUMMON,
            summon=SummonTemplate(
                name="Summoned Wolf", max_health=25, attack=8, defense=3, duration=5
            ),
        ),
    ),
    6: Ability(
        id="multishot",
        name="Multishot",
        description="Fire arrows at several enemies",
        icon="🎯",
        targeting=_some_enemies(3, "ranged"),
        costs=AbilityCosts(stamina=5),
        effects=(_damage(7, 2, dexterity=1.4),),
    ),
    7: Ability(
        id="explosive_shot",
        name="Explosive Shot",
        description="An arrow that explodes on impact",
        icon="💥",
        targeting=_single_enemy("ranged"),
        costs=AbilityCosts(stamina=6),
        effects=(
            EffectSpec(
                type=EffectType.SPREAD,
                base_value=12,
                variance=4,
                scaling={DEX: 2},
                spread_chance=0.8,
                spread_effect=_damage(6),
            ),
        ),
    ),
    8: Ability(
        id="rain_of_arrows",
        name="Rain of Arrows",
        description="A volley of arrows hitting every enemy",
        icon="🌧️",
        targeting=_all_enemies("ranged"),
        costs=AbilityCosts(stamina=8),
        effects=(_damage(9, 3, dexterity=1.6),),
    ),
    9: Ability(
        id="spirit_arrow",
        name="Spirit Arrow",
        description="A spectral arrow that ignores armor",
        icon="👻",
        category="spell",
        targeting=_single_enemy("ranged"),
        costs=AbilityCosts(mana=6, stamina=3),
        special=SpecialEffect(
            kind=SpecialKind.SPIRIT_ARROW,
            base_value=15,
            scaling={DEX: 2.5},
            variance=3,
        ),
    ),
    10: Ability(
        id="forest_guardian",
        name="Summon Forest Guardian",
        description="Summon a powerful treant ally",
        icon="🌳",
        category="spell",
        targeting=_self(),
        costs=AbilityCosts(mana=15),
        special=SpecialEffect(
            kind=SpecialKind.SUMMON,
            summon=SummonTemplate(
                name="Forest Guardian", max_health=50, attack=15, defense=8, duration=8
            ),
        ),
    ),
})

WARRIOR_ABILITIES: dict[int, Ability] = _class_tree("warrior", {
    1: Ability(
        id="shield_bash",
        name="Shield Bash",
        description="Bash an enemy with a shield, stunning it",
        icon="🛡️",
        targeting=_single_enemy(),
        costs=AbilityCosts(stamina=2),
        effects=(
            _damage(6, strength=1.2),
            EffectSpec(type=EffectType.STUN, duration=1),
        ),
    ),
    2: Ability(
        id="taunt",
        name="Taunt",
        description="Force enemies to attack the warrior",
        icon="😤",
        targeting=_some_enemies(2),
        costs=AbilityCosts(stamina=1),
        special=SpecialEffect(kind=SpecialKind.TAUNT, duration=2),
    ),
    3: Ability(
        id="power_strike",
        name="Power Strike",
        description="A devastating overhead blow",
        icon="⚔️",
        targeting=_single_enemy(),
        costs=AbilityCosts(stamina=3),
        effects=(_damage(12, 4, strength=2.2),),
    ),
    4: Ability(
        id="fearsome_cry",
        name="Fearsome Cry",
        description="A terrifying shout that weakens enemy defenses",
        icon="📢",
        targeting=_all_enemies(),
        costs=AbilityCosts(stamina=4),
        effects=(_modifier(EffectType.DEBUFF_DEFENSE, 4, 4),),
    ),
    5: Ability(
        id="cleave",
        name="Cleave",
        description="A sweeping attack hitting several enemies",
        icon="🪓",
        targeting=_some_enemies(3),
        costs=AbilityCosts(stamina=5),
        effects=(_damage(10, 3, strength=1.8),),
    ),
    6: Ability(
        id="bulwark_defense",
        name="Bulwark Defense",
        description="Raise your guard",
        icon="🏰",
        targeting=_self(),
        costs=AbilityCosts(stamina=4),
        effects=(_modifier(EffectType.BUFF_DEFENSE, 8, 5),),
    ),
    7: Ability(
        id="rallying_cry",
        name="Rallying Cry",
        description="Inspire allies to fight harder",
        icon="📯",
        targeting=_all_allies(),
        costs=AbilityCosts(stamina=6),
        effects=(_modifier(EffectType.BUFF_ATTACK, 6, 6),),
    ),
    8: Ability(
        id="whirlwind",
        name="Whirlwind Attack",
        description="Spin and strike every enemy",
        icon="🌪️",
        targeting=_all_enemies(),
        costs=AbilityCosts(stamina=8),
        effects=(_damage(8, 2, strength=1.5),),
    ),
    9: Ability(
        id="shield_wall",
        name="Shield Wall",
        description="Protect the party from physical harm",
        icon="🧱",
        targeting=_all_allies(),
        costs=AbilityCosts(stamina=7),
        effects=(
            EffectSpec(
                type=EffectType.RESISTANCE,
                damage_type="physical",
                base_value=50,
                duration=3,
            ),
        ),
    ),
    10: Ability(
        id="berserker_rage",
        name="Berserker Rage",
        description="Double attack at the cost of defense",
        icon="😡",
        targeting=_self(),
        costs=AbilityCosts(stamina=10),
        special=SpecialEffect(
            kind=SpecialKind.BERSERKER_RAGE,
            base_value=10,
            scaling={STR: 1.5},
            duration=5,
        ),
    ),
})

HEALER_ABILITIES: dict[int, Ability] = _class_tree("healer", {
    1: Ability(
        id="minor_heal",
        name="Minor Heal",
        description="A gentle healing spell",
        icon="✨",
        category="spell",
        targeting=_single_ally(),
        costs=AbilityCosts(mana=3),
        effects=(
            EffectSpec(
                type=EffectType.HEAL,
                base_value=15,
                scaling={WIL: 1.8, INT: 0.8},
                variance=3,
            ),
        ),
    ),
    2: Ability(
        id="bless",
        name="Bless",
        description="Bless an ally with divine strength",
        icon="🙏",
        category="spell",
        targeting=_single_ally(),
        costs=AbilityCosts(mana=4),
        effects=(_modifier(EffectType.BUFF_ATTACK, 5, 5),),
    ),
    3: Ability(
        id="cure_poison",
        name="Cure Poison",
        description="Remove poison from an ally",
        icon="🌿",
        category="spell",
        targeting=_single_ally(),
        costs=AbilityCosts(mana=3),
        special=SpecialEffect(kind=SpecialKind.CURE_POISON),
    ),
    4: Ability(
        id="divine_protection",
        name="Divine Protection",
        description="Shield an ally against magic",
        icon="🛡️",
        category="spell",
        targeting=_single_ally(),
        costs=AbilityCosts(mana=5),
        effects=(
            EffectSpec(
                type=EffectType.RESISTANCE,
                damage_type="magical",
                base_value=30,
                duration=4,
            ),
        ),
    ),
    5: Ability(
        id="group_heal",
        name="Group Heal",
        description="Heal several allies at once",
        icon="💫",
        category="spell",
        targeting=Targeting(
            type=TargetType.MULTIPLE, validity=TargetValidity.ALLIES, count=3
        ),
        costs=AbilityCosts(mana=8),
        effects=(
            EffectSpec(
                type=EffectType.HEAL,
                base_value=12,
                scaling={WIL: 1.5, INT: 0.5},
                variance=2,
            ),
        ),
    ),
    6: Ability(
        id="divine_smite",
        name="Divine Smite",
        description="Strike an enemy with holy power",
        icon="⚡",
        category="spell",
        targeting=_single_enemy(),
        costs=AbilityCosts(mana=6),
        effects=(_damage(14, 4, willpower=2),),
    ),
    7: Ability(
        id="sanctuary",
        name="Sanctuary",
        description="Protect an ally from being attacked",
        icon="🕊️",
        category="spell",
        targeting=_single_ally(),
        costs=AbilityCosts(mana=7),
        special=SpecialEffect(kind=SpecialKind.SANCTUARY, duration=2),
    ),
    8: Ability(
        id="mass_blessing",
        name="Mass Blessing",
        description="Bless every ally",
        icon="🌟",
        category="spell",
        targeting=_all_allies(),
        costs=AbilityCosts(mana=12),
        effects=(
            _modifier(EffectType.BUFF_ATTACK, 4, 6),
            _modifier(EffectType.BUFF_DEFENSE, 4, 6),
        ),
    ),
    9: Ability(
        id="divine_stun",
        name="Divine Stun",
        description="Smite and stun an enemy",
        icon="💥",
        category="spell",
        targeting=_single_enemy(),
        costs=AbilityCosts(mana=8),
        effects=(
            _damage(8, willpower=1.5),
            EffectSpec(type=EffectType.STUN, duration=2),
        ),
    ),
    10: Ability(
        id="resurrection",
        name="Resurrection",
        description="Bring a fallen ally back to life",
        icon="✝️",
        category="spell",
        targeting=Targeting(type=TargetType.SINGLE, validity=TargetValidity.ANY, count=1),
        costs=AbilityCosts(mana=20),
        special=SpecialEffect(kind=SpecialKind.RESURRECTION, ratio=0.5),
    ),
})

MAGE_ABILITIES: dict[int, Ability] = _class_tree("mage", {
    1: Ability(
        id="magic_missile",
        name="Magic Missile",
        description="A bolt of pure arcane energy",
        icon="✨",
        category="spell",
        targeting=_single_enemy("ranged"),
        costs=AbilityCosts(mana=2),
        effects=(_damage(6, 1, intelligence=1.5),),
    ),
    2: Ability(
        id="frost_bolt",
        name="Frost Bolt",
        description="A freezing bolt that slows the enemy",
        icon="❄️",
        category="spell",
        targeting=_single_enemy("ranged"),
        costs=AbilityCosts(mana=3),
        effects=(
            _damage(8, intelligence=1.8),
            _modifier(EffectType.DEBUFF_ATTACK, 2, 2),
        ),
    ),
    3: Ability(
        id="burning_hands",
        name="Burning Hands",
        description="A fan of flames",
        icon="🔥",
        category="spell",
        targeting=_some_enemies(2),
        costs=AbilityCosts(mana=4),
        effects=(_damage(7, 2, intelligence=1.6),),
    ),
    4: Ability(
        id="haste",
        name="Haste",
        description="Grant an ally double attacks",
        icon="💨",
        category="spell",
        targeting=_single_ally(),
        costs=AbilityCosts(mana=6),
        special=SpecialEffect(kind=SpecialKind.HASTE, duration=3),
    ),
    5: Ability(
        id="lightning_bolt",
        name="Lightning Bolt",
        description="Lightning arcing through several enemies",
        icon="⚡",
        category="spell",
        targeting=_some_enemies(3, "ranged"),
        costs=AbilityCosts(mana=7),
        effects=(_damage(10, 3, intelligence=2),),
    ),
    6: Ability(
        id="fireball",
        name="Fireball",
        description="An explosion of flame that may spread",
        icon="☄️",
        category="spell",
        targeting=_some_enemies(4, "ranged"),
        costs=AbilityCosts(mana=8),
        effects=(
            EffectSpec(
                type=EffectType.SPREAD,
                base_value=12,
                variance=4,
                scaling={INT: 2.2},
                spread_chance=0.6,
                spread_effect=_damage(6),
            ),
        ),
    ),
    7: Ability(
        id="mass_haste",
        name="Mass Haste",
        description="Grant the entire party double attacks",
        icon="🌀",
        category="spell",
        targeting=_all_allies(),
        costs=AbilityCosts(mana=15),
        special=SpecialEffect(kind=SpecialKind.HASTE, duration=2),
    ),
    8: Ability(
        id="ice_storm",
        name="Ice Storm",
        description="A storm of ice hitting every enemy",
        icon="🌨️",
        category="spell",
        targeting=_all_enemies("ranged"),
        costs=AbilityCosts(mana=12),
        effects=(_damage(9, 3, intelligence=1.8),),
    ),
    9: Ability(
        id="polymorph",
        name="Polymorph",
        description="Turn an enemy into a harmless sheep",
        icon="🐑",
        category="spell",
        targeting=_single_enemy(),
        costs=AbilityCosts(mana=10),
        special=SpecialEffect(kind=SpecialKind.POLYMORPH, duration=3),
    ),
    10: Ability(
        id="meteor",
        name="Meteor",
        description="Summon a devastating meteor strike",
        icon="☄️",
        category="spell",
        targeting=_all_enemies("ranged"),
        costs=AbilityCosts(mana=20),
        effects=(_damage(18, 6, intelligence=3),),
    ),
})

UNDERLING_ABILITIES: dict[str, dict[int, Ability]] = {
    "archer": ARCHER_ABILITIES,
    "warrior": WARRIOR_ABILITIES,
    "healer": HEALER_ABILITIES,
    "mage": MAGE_ABILITIES,
}

# ============================================================================
# MONSTER ABILITIES
# ============================================================================

MONSTER_ABILITIES: dict[str, Ability] = {
    ability.id: ability
    for ability in (
        Ability(
            id="spider_poison",
            name="Poison Bite",
            description="A venomous bite that poisons the target",
            icon="🕷️",
            category="monster",
            targeting=_single_enemy(),
            effects=(
                _damage(4, strength=1),
                EffectSpec(type=EffectType.DOT, status="poison", base_value=3, duration=4),
            ),
        ),
        Ability(
            id="spider_web",
            name="Web",
            description="Entangle target in webbing",
            icon="🕸️",
            category="monster",
            targeting=_single_enemy("ranged"),
            costs=AbilityCosts(cooldown=2),
            effects=(EffectSpec(type=EffectType.STUN, duration=1),),
        ),
        Ability(
            id="goblin_stab",
            name="Dirty Stab",
            description="A low blow that leaves the target bleeding",
            icon="🗡️",
            category="monster",
            targeting=_single_enemy(),
            effects=(
                _damage(3, dexterity=1),
                EffectSpec(type=EffectType.DOT, status="bleed", base_value=2, duration=3),
            ),
        ),
        Ability(
            id="orc_cleave",
            name="Brutal Cleave",
            description="A wide swing hitting two targets",
            icon="🪓",
            category="monster",
            targeting=_some_enemies(2),
            costs=AbilityCosts(cooldown=2),
            effects=(_damage(6, 2, strength=1.2),),
        ),
        Ability(
            id="skeleton_rattle",
            name="Bone Rattle",
            description="An unnerving clatter that saps courage",
            icon="💀",
            category="monster",
            targeting=_all_enemies(),
            costs=AbilityCosts(cooldown=3),
            effects=(_modifier(EffectType.DEBUFF_ATTACK, 2, 2),),
        ),
        Ability(
            id="wolf_howl",
            name="Howl",
            description="A howl that rallies the pack",
            icon="🐺",
            category="monster",
            targeting=Targeting(
                type=TargetType.ALL, validity=TargetValidity.ALLIES_AND_SELF, count="all"
            ),
            costs=AbilityCosts(cooldown=3),
            effects=(_modifier(EffectType.BUFF_ATTACK, 3, 2),),
        ),
        Ability(
            id="vampire_bite",
            name="Vampire Bite",
            description="Drains life from enemy to heal self",
            icon="🧛",
            category="monster",
            targeting=_single_enemy(),
            effects=(
                EffectSpec(
                    type=EffectType.VAMPIRIC,
                    base_value=12,
                    heal_ratio=0.6,
                    scaling={STR: 1.5},
                ),
            ),
        ),
    )
}

# Abilities each generated monster type knows.
MONSTER_LOADOUTS: dict[str, list[str]] = {
    "Goblin": ["goblin_stab"],
    "Orc": ["orc_cleave"],
    "Skeleton": ["skeleton_rattle"],
    "Wolf": ["wolf_howl"],
    "Spider": ["spider_poison", "spider_web"],
}

# ============================================================================
# COMMON ABILITIES (items, scrolls)
# ============================================================================

COMMON_ABILITIES: dict[str, Ability] = {
    ability.id: ability
    for ability in (
        Ability(
            id="basic_heal",
            name="Heal",
            description="Restore health to an ally",
            icon="💚",
            category="spell",
            targeting=_single_ally(),
            costs=AbilityCosts(mana=3),
            effects=(
                EffectSpec(
                    type=EffectType.HEAL,
                    base_value=20,
                    scaling={WIL: 2, INT: 1},
                    variance=5,
                ),
            ),
        ),
        Ability(
            id="firebolt",
            name="Firebolt",
            description="Launch a bolt of fire",
            icon="🔥",
            category="spell",
            targeting=_single_enemy("ranged"),
            costs=AbilityCosts(mana=4),
            effects=(_damage(15, 3, intelligence=2),),
        ),
        Ability(
            id="poison",
            name="Poison",
            description="Poison an enemy over time",
            icon="☠️",
            category="spell",
            targeting=_single_enemy(),
            costs=AbilityCosts(mana=5),
            effects=(
                EffectSpec(type=EffectType.DOT, status="poison", base_value=5, duration=4),
            ),
        ),
        Ability(
            id="health_potion",
            name="Health Potion",
            description="Consume a potion to restore health",
            icon="🧪",
            category="item",
            targeting=_self(),
            costs=AbilityCosts(materials={"health_potion": 1}),
            effects=(EffectSpec(type=EffectType.HEAL, base_value=50, variance=10),),
        ),
        Ability(
            id="ironskin_tonic",
            name="Ironskin Tonic",
            description="Drink a tonic that toughens the skin",
            icon="🛡️",
            category="item",
            targeting=_self(),
            costs=AbilityCosts(materials={"ironskin_tonic": 1}),
            effects=(_modifier(EffectType.BUFF_DEFENSE, 3, 3),),
        ),
    )
}


# ============================================================================
# LOOKUPS
# ============================================================================


def get_abilities_for_class(class_name: str, level: int) -> list[Ability]:
    """
    Returns every ability a class has learned up to and including a level.

    Args:
        class_name (str): The class or ability tree name.
        level (int): The character level.

    Returns:
        list[Ability]: The abilities, ordered by the level they are learned.

    """
    from character.character_class import get_character_class

    tree_name = get_character_class(class_name).ability_tree or class_name.lower()
    tree = UNDERLING_ABILITIES.get(tree_name, {})
    return [tree[lvl] for lvl in sorted(tree) if lvl <= level]


def get_ability(ability_id: str) -> Ability | None:
    """
    Looks an ability up by id across every group of the catalog.

    Args:
        ability_id (str): The ability id.

    Returns:
        Ability | None: The ability, None when the id is unknown.

    """
    if ability_id in MONSTER_ABILITIES:
        return MONSTER_ABILITIES[ability_id]
    if ability_id in COMMON_ABILITIES:
        return COMMON_ABILITIES[ability_id]
    for tree in UNDERLING_ABILITIES.values():
        for ability in tree.values():
            if ability.id == ability_id:
                return ability
    return None
