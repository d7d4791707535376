"""
Pytest fixtures for Tabula tests.
"""

import pytest

from ..config_schema.effect_graph import (
    build_graph,
    from_previous,
    function_effect,
    literal,
    object_mapper,
)
from ..config_schema.game_config import (
    Action,
    ActionType,
    CardType,
    ContainerDefinition,
    ContainerType,
    GameConfig,
    PermissionRule,
    PlayerDefinition,
)
from ..config_schema.identifiers import CardTypeId, ContainerId, PlayerId, Role
from ..engine_core.lifecycle import LifecycleController
from ..engine_core.registry import FunctionRegistry
from ..engine_core.state import GameState
from ..games.memory import build_memory_game, memory_config, register_memory_functions


@pytest.fixture
def small_config() -> GameConfig:
    """A two-player config with a deck, a discard pile and two hands."""
    return GameConfig(
        game_id="small",
        card_pool={
            CardTypeId("red"): CardType(card_type_id=CardTypeId("red")),
            CardTypeId("blue"): CardType(card_type_id=CardTypeId("blue")),
        },
        containers={
            ContainerId("deck"): ContainerDefinition(
                container_id=ContainerId("deck"),
                container_type=ContainerType.DECK,
                max_cards=5,
                initial_cards={CardTypeId("red"): 2, CardTypeId("blue"): 1},
            ),
            ContainerId("trash"): ContainerDefinition(
                container_id=ContainerId("trash"),
                container_type=ContainerType.TRASH,
                max_cards=1,
            ),
            ContainerId("hand-alice"): ContainerDefinition(
                container_id=ContainerId("hand-alice"),
                container_type=ContainerType.HAND,
                owner=PlayerId("alice"),
            ),
            ContainerId("hand-bob"): ContainerDefinition(
                container_id=ContainerId("hand-bob"),
                container_type=ContainerType.HAND,
                owner=PlayerId("bob"),
            ),
        },
        players={
            PlayerId("alice"): PlayerDefinition(
                player_id=PlayerId("alice"), initial_roles=[Role("player"), Role("dealer")]
            ),
            PlayerId("bob"): PlayerDefinition(
                player_id=PlayerId("bob"), initial_roles=[Role("player")]
            ),
        },
        roles=[Role("player"), Role("dealer")],
        turn_order=[PlayerId("alice"), PlayerId("bob")],
        actions={
            ActionType.MOVE: Action(
                permissions=PermissionRule(allowed=[Role("player")]),
                effects=build_graph(
                    function_effect(
                        "move",
                        "moveCard",
                        request=object_mapper(
                            cardId=from_previous("cardId"),
                            targetContainerId=from_previous("targetContainerId"),
                        ),
                    ),
                ),
            ),
        },
        global_effects=build_graph(
            function_effect(
                "shuffle",
                "shuffleDeck",
                request=object_mapper(containerId=literal("deck")),
            ),
        ),
        initialize=["shuffle"],
    )


@pytest.fixture
def small_state(small_config) -> GameState:
    """Fresh state for the small config."""
    return GameState.from_config(small_config, seed=1)


@pytest.fixture
def registry() -> FunctionRegistry:
    """A registry holding the memory game handlers."""
    return register_memory_functions()


@pytest.fixture
def memory_game() -> LifecycleController:
    """A started memory game with a fixed seed."""
    game = build_memory_game(seed=42)
    game.start()
    return game


@pytest.fixture
def memory_game_config() -> GameConfig:
    return memory_config()

