from pydantic import BaseModel, Field


class CharacterRace(BaseModel):
    """
    Represents a character's species and the racial ability each of its
    subspecies grants.
    """

    name: str = Field(
        description="The name of the species",
    )
    racial_ability: str | None = Field(
        default=None,
        description="Racial ability granted when no subspecies overrides it",
    )
    subspecies: dict[str, str | None] = Field(
        default_factory=dict,
        description="Racial ability granted by each subspecies",
    )

    def get_racial_ability_id(self, subspecies: str | None = None) -> str | None:
        """
        Returns the id of the racial ability for a subspecies of this race.

        Args:
            subspecies (str | None): The subspecies, if any.

        Returns:
            str | None: The ability id, None when the species has none.

        """
        if subspecies and subspecies.lower() in self.subspecies:
            return self.subspecies[subspecies.lower()]
        return self.racial_ability

    def __hash__(self) -> int:
        """
        Hash the race based on its name.

        Returns:
            int:
                The hash value of the race.

        """
        return hash(self.name)


RACES: dict[str, CharacterRace] = {
    race.name: race
    for race in (
        CharacterRace(name="human"),
        CharacterRace(name="dwarf", racial_ability="stonework"),
        CharacterRace(name="elf", racial_ability="meditation"),
        CharacterRace(name="gnome", racial_ability="fey_companion"),
        CharacterRace(name="half-orc", racial_ability="ferocity"),
        CharacterRace(name="minotaur", racial_ability="gore"),
        CharacterRace(name="giant", racial_ability="earthshaker"),
        CharacterRace(name="troll", racial_ability="troll_regeneration"),
        CharacterRace(
            name="dragonkin",
            racial_ability="fire_breath",
            subspecies={
                "red": "fire_breath",
                "blue": "lightning_breath",
                "green": "poison_breath",
                "white": "frost_breath",
            },
        ),
        CharacterRace(name="monster"),
    )
}


def get_character_race(name: str | None) -> CharacterRace:
    """Looks up a species by name, unknown names become racial-ability-free."""
    if not name:
        return RACES["monster"]
    return RACES.get(name.lower(), CharacterRace(name=name.lower()))
