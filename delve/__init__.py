"""
Source root of the dungeon combat engine.

This directory contains the engine's packages: core services, characters,
status effects, abilities, racial abilities and the combat orchestrator.
"""
