"""
Memory Game Config - The memory-matching game as a config document.

Two pairs of cards start in the deck. Initialization shuffles the deck and
deals one card into each of four field slots. On their turn a player flips
two field cards:
- matching types go to the player's hand and the player goes again
- differing types are flipped back down and the turn passes

The game ends when the field is empty; players are ranked by hand size.
"""

from __future__ import annotations
from copy import deepcopy
from typing import Any

from ...config_schema.document import load_config
from ...config_schema.game_config import GameConfig

FIELD_IDS = ["field1", "field2", "field3", "field4"]
PLAYER_IDS = ["player1", "player2"]


def _literal(value: Any, node_type: str = "string") -> dict[str, Any]:
    return {"type": node_type, "entry": {"source": "literal", "value": value}}


def _previous(path: str, node_type: str = "string") -> dict[str, Any]:
    return {"type": node_type, "entry": {"source": "previousOutput", "value": path}}


def _state(path: str, node_type: str = "string") -> dict[str, Any]:
    return {"type": node_type, "entry": {"source": "state", "value": path}}


def _object(**properties: dict[str, Any]) -> dict[str, Any]:
    return {"type": "object", "properties": properties}


def _string_shape(key: str) -> dict[str, Any]:
    return {"type": "string", "key": key}


MEMORY_GAME_DOCUMENT: dict[str, Any] = {
    "gameId": "memory",
    "name": "Memory",
    "functions": {
        "shuffleDeck": {
            "request": {
                "type": "object",
                "key": "request",
                "properties": {"containerId": _string_shape("containerId")},
            },
        },
        "dealCards": {},
        "flipCard": {
            "request": {
                "type": "object",
                "key": "request",
                "strict": True,
                "properties": {"cardId": _string_shape("cardId")},
            },
            "response": {
                "type": "object",
                "key": "response",
                "properties": {
                    "cardId": _string_shape("cardId"),
                    "isFaceUp": {"type": "boolean", "key": "isFaceUp"},
                },
            },
        },
        "moveCard": {
            "request": {
                "type": "object",
                "key": "request",
                "properties": {
                    "cardId": _string_shape("cardId"),
                    "targetContainerId": _string_shape("targetContainerId"),
                },
            },
        },
        "getFaceUpCards": {},
        "checkMatch": {
            "request": {
                "type": "object",
                "key": "request",
                "properties": {
                    "cards": {"type": "array", "key": "cards", "items": [{"type": "object"}]},
                },
            },
        },
        "collectPair": {},
        "resetFlippedCards": {},
        "nextPlayer": {},
        "countCards": {
            "response": {
                "type": "object",
                "key": "response",
                "properties": {"count": {"type": "number", "key": "count"}},
            },
        },
        "handSizes": {
            "response": {
                "type": "array",
                "key": "response",
                "items": [{
                    "type": "object",
                    "properties": {
                        "playerId": _string_shape("playerId"),
                        "count": {"type": "number", "key": "count"},
                    },
                }],
            },
        },
    },
    "cardPool": {
        "card1": {},
        "card2": {},
    },
    "containers": {
        "deck": {"type": "deck", "maxCards": 4, "initialCards": {"card1": 2, "card2": 2}},
        "trash": {"type": "trash", "maxCards": 104},
        **{field_id: {"type": "field", "maxCards": 1} for field_id in FIELD_IDS},
        **{
            f"hand-{player_id}": {"type": "hand", "owner": player_id}
            for player_id in PLAYER_IDS
        },
    },
    "players": {
        "player1": {"initialRoles": ["player", "currentPlayer"]},
        "player2": {"initialRoles": ["player"]},
    },
    "roles": ["player", "currentPlayer"],
    "turnOrder": PLAYER_IDS,
    "actions": {
        "flip": {
            "permissions": {
                "allowed": ["currentPlayer"],
                "overrides": [
                    # A face-up card can't be flipped again
                    {"condition": {"isFaceUp": "true"}, "denied": ["player"]},
                    # Cards in hands are out of play
                    {"condition": {"containerId": "hand-.*"}, "denied": ["player"]},
                ],
            },
            "effects": {
                "flipCard": {
                    "type": "function",
                    "function": "flipCard",
                    "requestMapper": _object(cardId=_previous("cardId")),
                },
            },
            "after": "findFaceUpCards",
        },
        "move": {
            "permissions": {"allowed": ["currentPlayer"]},
            "effects": {
                "moveCard": {
                    "type": "function",
                    "function": "moveCard",
                    "requestMapper": _object(
                        cardId=_previous("cardId"),
                        targetContainerId=_previous("targetContainerId"),
                    ),
                },
            },
        },
        "shuffle": {
            "permissions": {"allowed": ["currentPlayer"]},
            "effects": {
                "shuffleContainer": {
                    "type": "function",
                    "function": "shuffleDeck",
                    "requestMapper": _object(containerId=_previous("containerId")),
                },
            },
        },
    },
    "globalEffects": {
        "shuffleDeck": {
            "type": "function",
            "function": "shuffleDeck",
            "requestMapper": _object(containerId=_literal("deck")),
        },
        "dealCards": {
            "type": "function",
            "function": "dealCards",
            "requestMapper": _object(
                containerId=_literal("deck"),
                containerType=_literal("field"),
            ),
        },
        "findFaceUpCards": {
            "type": "function",
            "function": "getFaceUpCards",
            "next": "whenTwoFaceUp",
        },
        "whenTwoFaceUp": {
            "type": "switch",
            "referenceKey": "count",
            "cases": {"2": "compareCards"},
        },
        "compareCards": {
            "type": "function",
            "function": "checkMatch",
            "requestMapper": _object(cards=_previous("cards", "array")),
            "next": "onMatchResult",
        },
        "onMatchResult": {
            "type": "switch",
            "referenceKey": "result",
            "cases": {"matched": "collectPair", "unmatched": "resetFlippedCards"},
        },
        "collectPair": {
            "type": "function",
            "function": "collectPair",
            "requestMapper": _object(
                playerId=_state("currentPlayer"),
                cardIds=_previous("cardIds", "array"),
            ),
        },
        "resetFlippedCards": {
            "type": "function",
            "function": "resetFlippedCards",
            "next": "nextPlayer",
        },
        "nextPlayer": {
            "type": "function",
            "function": "nextPlayer",
        },
    },
    "initialize": ["shuffleDeck", "dealCards"],
    "endConditions": [
        {
            "function": "countCards",
            "additionalParams": {"containerType": "field"},
            "referenceKey": "count",
            "operator": "eq",
            "value": 0,
        },
    ],
    "resultOrder": {
        "function": "handSizes",
        "referenceKey": "count",
        "by": "desc",
    },
}


def memory_document() -> dict[str, Any]:
    """A fresh copy of the memory game document."""
    return deepcopy(MEMORY_GAME_DOCUMENT)


def memory_config() -> GameConfig:
    return load_config(memory_document())
