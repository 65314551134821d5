"""
Content repository for the combat engine.

Gives by-id access to every ability the engine knows about. The built-in
catalog is always available; extra abilities can be loaded from JSON files
describing Ability records, and become usable in battle.
"""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from abilities.ability import Ability
from abilities.catalog import (
    COMMON_ABILITIES,
    MONSTER_ABILITIES,
    UNDERLING_ABILITIES,
)
from catchery import log_warning
from pydantic import ValidationError

from core.utils import Singleton, cprint


class ContentRepository(metaclass=Singleton):
    """
    One-stop registry for every game asset that needs fast by-id access.
    """

    abilities: dict[str, Ability]

    def __init__(self, data_dir: Path | None = None) -> None:
        """
        Initialize the ContentRepository.

        Args:
            data_dir (Path | None):
                Optional directory holding extra ability files to load.

        """
        self.abilities = {}
        for tree in UNDERLING_ABILITIES.values():
            for ability in tree.values():
                self.abilities[ability.id] = ability
        self.abilities.update(MONSTER_ABILITIES)
        self.abilities.update(COMMON_ABILITIES)
        if data_dir:
            self.reload(data_dir)

    def reload(self, root: Path) -> None:
        """
        Loads every `*.json` ability file found in a directory. Entries with the
        same id replace the built-in ones.

        Args:
            root (Path):
                The directory containing the ability files.

        """
        for filepath in sorted(root.glob("*.json")):
            self.abilities.update(
                _load_json_file(filepath, self._load_abilities, filepath.stem)
            )

    def _get_from_collection(self, collection_name: str, item_id: str) -> Any | None:
        """
        Generic helper to get an entry from any collection.

        Args:
            collection_name (str):
                Name of the collection attribute (e.g. 'abilities').
            item_id (str):
                Id of the entry to retrieve.

        Returns:
            Any | None:
                The entry if found, None otherwise.

        """
        collection = getattr(self, collection_name, None)
        if not collection:
            log_warning(
                f"Collection '{collection_name}' not found in ContentRepository.",
                {"collection_name": collection_name, "item_id": item_id},
            )
            return None
        entry = collection.get(item_id)
        if entry is None:
            log_warning(
                f"'{item_id}' not found in collection '{collection_name}'.",
                {"collection_name": collection_name, "item_id": item_id},
            )
        return entry

    def get_ability(self, ability_id: str) -> Ability | None:
        """Get an ability by id, or None if not found."""
        return self._get_from_collection("abilities", ability_id)

    @staticmethod
    def _load_abilities(data: list[dict]) -> dict[str, Ability]:
        """
        Load abilities from JSON data.

        Args:
            data (list[dict]): List of ability records.

        Returns:
            dict[str, Ability]: Dictionary mapping ability ids to abilities.

        Raises:
            ValueError: If a record is invalid or an id is duplicated.

        """
        abilities: dict[str, Ability] = {}
        for ability_data in data:
            try:
                ability = Ability.model_validate(ability_data)
            except ValidationError as e:
                raise ValueError(f"Invalid ability data: {e}") from e
            if ability.id in abilities:
                raise ValueError(f"Duplicate ability id: {ability.id}")
            abilities[ability.id] = ability
        return abilities


def _load_json_file(
    filepath: Path,
    loader_func: Callable[[list[dict]], dict[str, Any]],
    description: str,
) -> dict[str, Any]:
    """Helper to load and validate JSON files"""
    try:
        cprint(f"  Loading {description} abilities...", style="bold green")
        if not filepath.is_file():
            raise FileNotFoundError(f"File not found: {filepath}")
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"Expected list in {filepath}, got {type(data).__name__}")
        return loader_func(data)
    except (json.JSONDecodeError, FileNotFoundError, ValueError) as e:
        raise ValueError(f"File {filepath} raised an error: {e}") from e
