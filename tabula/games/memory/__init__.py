"""
Memory - A two-player memory-matching game built entirely from config.

This module contains:
- The game document (containers, permissions, effect graphs)
- Handlers for every function the document references
- A helper that wires both into a ready-to-start controller
"""

from __future__ import annotations

from ...engine_core.lifecycle import LifecycleController
from .config import FIELD_IDS, MEMORY_GAME_DOCUMENT, PLAYER_IDS, memory_config, memory_document
from .functions import MEMORY_FUNCTIONS, register_memory_functions


def build_memory_game(seed: int | None = None) -> LifecycleController:
    """Create an unstarted memory game with its own function registry."""
    return LifecycleController(memory_config(), register_memory_functions(), seed=seed)


__all__ = [
    "FIELD_IDS",
    "PLAYER_IDS",
    "MEMORY_GAME_DOCUMENT",
    "MEMORY_FUNCTIONS",
    "memory_config",
    "memory_document",
    "register_memory_functions",
    "build_memory_game",
]
