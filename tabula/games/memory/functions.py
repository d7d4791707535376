"""
Memory Game Functions - Handlers bound to the memory game's function ids.

Each handler has the registry signature `handler(state, request)` and
returns a JSON-like value. Handlers mutate the GameState directly.
"""

from __future__ import annotations
from typing import Any

from ...config_schema.game_config import ContainerType
from ...engine_core.registry import FunctionRegistry
from ...engine_core.state import GameState

CURRENT_PLAYER_ROLE = "currentPlayer"


def shuffle_deck(state: GameState, request: dict[str, Any]) -> dict[str, Any]:
    """Shuffle a container with the game's seeded random source."""
    container = state.shuffle_container(request["containerId"])
    return {"containerId": container.container_id, "count": container.count}


def deal_cards(state: GameState, request: dict[str, Any]) -> dict[str, Any]:
    """
    Deal from the top of a container into every non-full container of a type.

    Stops early when the source runs out.
    """
    source = state.get_container(request["containerId"])
    dealt = []
    for target in state.containers_of_type(request.get("containerType", "field")):
        while not target.is_full and source.top_card is not None:
            card = state.move_card(source.top_card.card_id, target.container_id)
            dealt.append({"cardId": card.card_id, "containerId": target.container_id})
    return {"dealt": dealt, "count": len(dealt)}


def flip_card(state: GameState, request: dict[str, Any]) -> dict[str, Any]:
    card = state.find_card(request["cardId"])
    card.face_up = not card.face_up
    return {"cardId": card.card_id, "isFaceUp": card.face_up}


def move_card(state: GameState, request: dict[str, Any]) -> dict[str, Any]:
    """Move a card, refusing to overfill the target."""
    target = state.get_container(request["targetContainerId"])
    if target.is_full:
        raise ValueError(f"Container '{target.container_id}' is full")
    card = state.move_card(request["cardId"], target.container_id)
    return {"cardId": card.card_id, "containerId": card.container_id}


def get_face_up_cards(state: GameState, request: dict[str, Any]) -> dict[str, Any]:
    cards = [c.to_dict() for c in state.face_up_cards()]
    return {"cards": cards, "count": len(cards)}


def check_match(state: GameState, request: dict[str, Any]) -> dict[str, Any]:
    """Compare the card types of the given cards."""
    cards = request["cards"]
    card_types = {c["cardTypeId"] for c in cards}
    return {
        "result": "matched" if len(card_types) == 1 else "unmatched",
        "cardIds": [c["cardId"] for c in cards],
    }


def collect_pair(state: GameState, request: dict[str, Any]) -> dict[str, Any]:
    """Move matched cards into the player's hand, face down."""
    hand = state.hand_of(request["playerId"])
    for card_id in request["cardIds"]:
        card = state.move_card(card_id, hand.container_id)
        card.face_up = False
    return {"playerId": request["playerId"], "handCount": hand.count}


def reset_flipped_cards(state: GameState, request: dict[str, Any]) -> dict[str, Any]:
    cards = state.face_up_cards()
    for card in cards:
        card.face_up = False
    return {"count": len(cards)}


def next_player(state: GameState, request: dict[str, Any]) -> dict[str, Any]:
    """Pass the turn, moving the current-player role along with it."""
    previous = state.current_player
    if previous is not None:
        state.revoke_role(previous, CURRENT_PLAYER_ROLE)
    current = state.advance_turn()
    state.grant_role(current, CURRENT_PLAYER_ROLE)
    state.set_value("nextTurnOrder", state.turn_index)
    return {"previousPlayer": previous, "currentPlayer": current}


def count_cards(state: GameState, request: dict[str, Any]) -> dict[str, Any]:
    """Count cards in one container, or across every container of a type."""
    if "containerId" in request:
        return {"count": state.get_container(request["containerId"]).count}
    containers = state.containers_of_type(request.get("containerType", ContainerType.FIELD))
    return {"count": sum(c.count for c in containers)}


def hand_sizes(state: GameState, request: dict[str, Any]) -> list[dict[str, Any]]:
    return [
        {"playerId": player_id, "count": state.hand_of(player_id).count}
        for player_id in state.turn_order
    ]


MEMORY_FUNCTIONS = {
    "shuffleDeck": shuffle_deck,
    "dealCards": deal_cards,
    "flipCard": flip_card,
    "moveCard": move_card,
    "getFaceUpCards": get_face_up_cards,
    "checkMatch": check_match,
    "collectPair": collect_pair,
    "resetFlippedCards": reset_flipped_cards,
    "nextPlayer": next_player,
    "countCards": count_cards,
    "handSizes": hand_sizes,
}


def register_memory_functions(registry: FunctionRegistry | None = None) -> FunctionRegistry:
    """Register every memory game handler. Shapes come from the config."""
    registry = registry or FunctionRegistry()
    for function_id, handler in MEMORY_FUNCTIONS.items():
        registry.register(function_id, handler)
    return registry
