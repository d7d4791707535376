"""
Game Config - The root aggregate describing a game as data.

A GameConfig holds everything the engine needs to run a game:
- Function declarations (ids and request/response shapes)
- Card pool, containers and players
- Per-action-type permission rules and effect graphs
- Turn order, end conditions and result ordering
- The global effect graph and the initialization sequence

The config is immutable once loaded. The engine derives a mutable
GameState from it at game start.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .effect_graph import Effect, EffectGraph
from .identifiers import CardTypeId, ContainerId, EffectId, FunctionId, PlayerId, Role
from .shapes import SchemaNode


class ContainerType(Enum):
    """Kinds of card containers."""
    DECK = "deck"
    TRASH = "trash"
    HAND = "hand"
    FIELD = "field"


class ActionType(Enum):
    """Player-submittable action types."""
    FLIP = "flip"
    MOVE = "move"
    SHUFFLE = "shuffle"


# Fields each action type exposes to permission override conditions
ACTION_CONDITION_FIELDS: dict[ActionType, tuple[str, ...]] = {
    ActionType.FLIP: ("isFaceUp", "isFaceDown", "cardId", "cardTypeId", "containerId"),
    ActionType.MOVE: ("containerId", "cardId", "cardTypeId", "targetContainerId"),
    ActionType.SHUFFLE: ("containerId",),
}

# Action types a card type may override (a card can't be shuffled)
CARD_ACTION_TYPES = {ActionType.FLIP, ActionType.MOVE}


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


class Comparator(Enum):
    """How an end condition compares the referenced value."""
    TRUTHY = "truthy"
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"


@dataclass(frozen=True)
class PermissionOverride:
    """
    A conditional permission rule.

    `condition` maps an action field name to a regular expression. The
    override applies when every listed field is present and full-matches.
    """
    condition: dict[str, str] = field(default_factory=dict)
    allowed: list[Role] = field(default_factory=list)
    denied: list[Role] = field(default_factory=list)


@dataclass(frozen=True)
class PermissionRule:
    """Base allow/deny lists plus ordered overrides."""
    allowed: list[Role] = field(default_factory=list)
    denied: list[Role] = field(default_factory=list)
    overrides: list[PermissionOverride] = field(default_factory=list)


@dataclass(frozen=True)
class Action:
    """
    Configuration for one action type.

    `effects` is the action's own effect graph. `entry` names the first node
    of that graph (defaults to the first declared effect). `before` and
    `after` are hook entries run as separate traversals.
    """
    permissions: PermissionRule = field(default_factory=PermissionRule)
    effects: EffectGraph = field(default_factory=dict)
    entry: EffectId | None = None
    before: EffectId | None = None
    after: EffectId | None = None

    @property
    def entry_id(self) -> EffectId | None:
        if self.entry:
            return self.entry
        return next(iter(self.effects), None)


@dataclass(frozen=True)
class CardType:
    """A kind of card. May override the game-level flip/move actions."""
    card_type_id: CardTypeId
    actions: dict[ActionType, Action] = field(default_factory=dict)


@dataclass(frozen=True)
class ContainerDefinition:
    """
    A container as declared in the config.

    `initial_cards` maps card type to how many instances start here.
    `owner` ties a hand (or any container) to a player.
    """
    container_id: ContainerId
    container_type: ContainerType
    max_cards: int | None = None
    initial_cards: dict[CardTypeId, int] = field(default_factory=dict)
    owner: PlayerId | None = None
    actions: dict[ActionType, Action] = field(default_factory=dict)


@dataclass(frozen=True)
class PlayerDefinition:
    player_id: PlayerId
    initial_roles: list[Role] = field(default_factory=list)


@dataclass(frozen=True)
class FunctionDefinition:
    """
    A function declared by the config.

    The callable itself is never part of the config; hosts bind it through
    the FunctionRegistry.
    """
    function_id: FunctionId
    request_shape: SchemaNode | None = None
    response_shape: SchemaNode | None = None


@dataclass(frozen=True)
class EndCondition:
    """
    A direct function call whose output decides whether the game ends.

    The value at `reference_key` in the output is compared with `value`
    using `operator`.
    """
    function: FunctionId
    reference_key: str
    additional_params: dict[str, Any] = field(default_factory=dict)
    operator: Comparator = Comparator.TRUTHY
    value: Any = None


@dataclass(frozen=True)
class ResultOrder:
    """
    How the final ranking is computed.

    The function output is either a list of objects each holding a
    `participant_key` (player id) and the `reference_key`, or a mapping of
    player id to an object or scalar.
    """
    function: FunctionId
    reference_key: str
    additional_params: dict[str, Any] = field(default_factory=dict)
    by: SortDirection = SortDirection.DESC
    participant_key: str = "playerId"


@dataclass(frozen=True)
class GameConfig:
    """
    Complete, immutable description of a game.
    """
    game_id: str
    name: str = ""

    functions: dict[FunctionId, FunctionDefinition] = field(default_factory=dict)
    card_pool: dict[CardTypeId, CardType] = field(default_factory=dict)
    containers: dict[ContainerId, ContainerDefinition] = field(default_factory=dict)
    players: dict[PlayerId, PlayerDefinition] = field(default_factory=dict)
    actions: dict[ActionType, Action] = field(default_factory=dict)
    roles: list[Role] = field(default_factory=list)
    turn_order: list[PlayerId] = field(default_factory=list)

    end_conditions: list[EndCondition] = field(default_factory=list)
    result_order: ResultOrder | None = None

    global_effects: EffectGraph = field(default_factory=dict)
    initialize: list[EffectId] = field(default_factory=list)

    metadata: dict[str, Any] = field(default_factory=dict)

    def get_container(self, container_id: str) -> ContainerDefinition | None:
        return self.containers.get(ContainerId(container_id))

    def get_card_type(self, card_type_id: str) -> CardType | None:
        return self.card_pool.get(CardTypeId(card_type_id))

    def get_effect(self, effect_id: str) -> Effect | None:
        return self.global_effects.get(EffectId(effect_id))

    def iter_actions(self):
        """
        Yield (scope, action_type, action) for every configured action,
        including per-container and per-card-type overrides.
        """
        for action_type, action in self.actions.items():
            yield "game", action_type, action
        for container in self.containers.values():
            for action_type, action in container.actions.items():
                yield f"container '{container.container_id}'", action_type, action
        for card_type in self.card_pool.values():
            for action_type, action in card_type.actions.items():
                yield f"card type '{card_type.card_type_id}'", action_type, action
