"""Shared helpers for memory game tests."""

from ..config_schema.game_config import ContainerType
from ..engine_core.action import ActionRequest
from ..engine_core.lifecycle import LifecycleController


def field_cards(game: LifecycleController) -> dict:
    """Map field container id -> the card it holds (or None)."""
    return {
        c.container_id: (c.cards[0] if c.cards else None)
        for c in game.state.containers_of_type(ContainerType.FIELD)
    }


def find_pair(game: LifecycleController, matching: bool):
    """Two face-down field cards whose types match (or differ)."""
    cards = [c for c in field_cards(game).values() if c is not None and not c.face_up]
    for i, first in enumerate(cards):
        for second in cards[i + 1:]:
            if (first.card_type_id == second.card_type_id) == matching:
                return first, second
    raise AssertionError("No suitable pair on the field")


def flip(game: LifecycleController, card, player_id: str | None = None):
    """Submit a flip of a card as the given (default: current) player."""
    player_id = player_id or game.state.current_player
    return game.submit(ActionRequest.flip(player_id, card.container_id, card.card_id))
