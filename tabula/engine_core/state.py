"""
Game State - The live, mutable projection of a GameConfig.

Holds:
- Containers with their ordered cards
- Players with their current roles
- Turn order, turn index and the current player
- A free-form named-value area effects may read and write

Design principles:
- Live: queries walk current containers, nothing is cached between effects
- Plain: `view()` renders everything as dicts/lists for path resolution
- No history: functions mutate in place, nothing is rolled back
"""

from __future__ import annotations
import random
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from ..config_schema.game_config import ContainerDefinition, ContainerType, GameConfig
from ..config_schema.identifiers import CardTypeId, ContainerId, PlayerId, Role
from ..errors import NotFound, UnresolvableMapping
from .paths import PathError, lookup, split_path

# Roots of the state view that are derived from live structures
BUILTIN_ROOTS = ("currentPlayer", "turnIndex", "turnOrder", "containers", "players")


@dataclass
class Card:
    """
    A card instance in the game.

    The card_id is unique per instance ("<cardTypeId>#<n>"); card_type_id
    references the CardType in the config's card pool.
    """
    card_id: str
    card_type_id: CardTypeId
    container_id: ContainerId
    face_up: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "cardId": self.card_id,
            "cardTypeId": self.card_type_id,
            "containerId": self.container_id,
            "isFaceUp": self.face_up,
        }


@dataclass
class Container:
    """
    A live container holding an ordered list of cards.

    Capacity is exposed, not enforced: functions that add cards check
    `is_full` / `remaining_capacity` themselves.
    """
    container_id: ContainerId
    container_type: ContainerType
    max_cards: int | None = None
    owner: PlayerId | None = None
    cards: list[Card] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def is_empty(self) -> bool:
        return len(self.cards) == 0

    @property
    def is_full(self) -> bool:
        return self.max_cards is not None and len(self.cards) >= self.max_cards

    @property
    def remaining_capacity(self) -> int | None:
        if self.max_cards is None:
            return None
        return max(self.max_cards - len(self.cards), 0)

    @property
    def top_card(self) -> Card | None:
        return self.cards[-1] if self.cards else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "containerId": self.container_id,
            "type": self.container_type.value,
            "maxCards": self.max_cards,
            "owner": self.owner,
            "count": self.count,
            "cards": [c.to_dict() for c in self.cards],
        }

    @classmethod
    def from_definition(cls, definition: ContainerDefinition) -> Container:
        """Create a container populated from the definition's initial cards."""
        container = cls(
            container_id=definition.container_id,
            container_type=definition.container_type,
            max_cards=definition.max_cards,
            owner=definition.owner,
        )
        for card_type_id, count in definition.initial_cards.items():
            for _ in range(count):
                container.cards.append(
                    Card(
                        card_id="",
                        card_type_id=card_type_id,
                        container_id=definition.container_id,
                    )
                )
        return container


@dataclass
class Player:
    """A player and the roles currently assigned to them."""
    player_id: PlayerId
    roles: set[Role] = field(default_factory=set)

    def to_dict(self) -> dict[str, Any]:
        return {"playerId": self.player_id, "roles": sorted(self.roles)}


@dataclass
class GameState:
    """
    Complete live game state.

    This is the only mutable derivative of a GameConfig. Registered
    functions receive it and mutate it directly.
    """
    game_id: str
    containers: dict[ContainerId, Container] = field(default_factory=dict)
    players: dict[PlayerId, Player] = field(default_factory=dict)
    turn_order: list[PlayerId] = field(default_factory=list)
    turn_index: int = 0
    current_player: PlayerId | None = None

    # Named values written by effects (e.g. "nextTurnOrder")
    values: dict[str, Any] = field(default_factory=dict)

    # Random source for shuffles, seeded for determinism
    random_seed: int | None = None
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def from_config(cls, config: GameConfig, seed: int | None = None) -> GameState:
        """
        Build a fresh state from a config.

        Containers are filled from `initial_cards` in declaration order, each
        card type expanded to its count. Card ids are numbered per card type
        across all containers.
        """
        state = cls(
            game_id=config.game_id,
            turn_order=list(config.turn_order),
            random_seed=seed,
            rng=random.Random(seed),
        )

        serials: dict[str, int] = {}
        for definition in config.containers.values():
            container = Container.from_definition(definition)
            for card in container.cards:
                serials[card.card_type_id] = serials.get(card.card_type_id, 0) + 1
                card.card_id = f"{card.card_type_id}#{serials[card.card_type_id]}"
            state.containers[definition.container_id] = container

        for player in config.players.values():
            state.players[player.player_id] = Player(
                player_id=player.player_id,
                roles=set(player.initial_roles),
            )

        if state.turn_order:
            state.current_player = state.turn_order[0]
        return state

    # -------------------------------------------------------------------------
    # Containers and cards
    # -------------------------------------------------------------------------

    def get_container(self, container_id: str) -> Container:
        """Get a container by id. Raises NotFound if absent."""
        container = self.containers.get(ContainerId(container_id))
        if container is None:
            raise NotFound("Container", container_id)
        return container

    def containers_of_type(self, container_type: ContainerType | str) -> list[Container]:
        container_type = ContainerType(container_type)
        return [c for c in self.containers.values() if c.container_type == container_type]

    def hand_of(self, player_id: str) -> Container:
        """The hand container owned by a player. Raises NotFound if none."""
        for container in self.containers.values():
            if container.container_type == ContainerType.HAND and container.owner == player_id:
                return container
        raise NotFound("Hand of player", player_id)

    def find_cards(self, predicate: Callable[[Card], bool] | None = None) -> Iterator[Card]:
        """
        Yield cards across all containers matching a predicate.

        This walks the live containers on every call.
        """
        for container in self.containers.values():
            for card in container.cards:
                if predicate is None or predicate(card):
                    yield card

    def face_up_cards(self) -> list[Card]:
        return list(self.find_cards(lambda c: c.face_up))

    def find_card(self, card_id: str) -> Card:
        """Get a card by instance id. Raises NotFound if absent."""
        for card in self.find_cards(lambda c: c.card_id == card_id):
            return card
        raise NotFound("Card", card_id)

    def move_card(self, card_id: str, target_container_id: str, to_top: bool = True) -> Card:
        """
        Move one card to another container.

        Capacity of the target is not checked here.
        """
        card = self.find_card(card_id)
        target = self.get_container(target_container_id)
        source = self.get_container(card.container_id)
        source.cards.remove(card)
        if to_top:
            target.cards.append(card)
        else:
            target.cards.insert(0, card)
        card.container_id = target.container_id
        return card

    def shuffle_container(self, container_id: str) -> Container:
        container = self.get_container(container_id)
        self.rng.shuffle(container.cards)
        return container

    # -------------------------------------------------------------------------
    # Players, roles and turns
    # -------------------------------------------------------------------------

    def get_player(self, player_id: str) -> Player:
        """Get a player by id. Raises NotFound if absent."""
        player = self.players.get(PlayerId(player_id))
        if player is None:
            raise NotFound("Player", player_id)
        return player

    def roles_of(self, player_id: str) -> set[Role]:
        return set(self.get_player(player_id).roles)

    def grant_role(self, player_id: str, role: str):
        self.get_player(player_id).roles.add(Role(role))

    def revoke_role(self, player_id: str, role: str):
        self.get_player(player_id).roles.discard(Role(role))

    def players_with_role(self, role: str) -> list[Player]:
        return [p for p in self.players.values() if role in p.roles]

    def set_current_player(self, player_id: str):
        """Point the turn at a player. Raises NotFound if not in turn order."""
        if player_id not in self.turn_order:
            raise NotFound("Player in turn order", player_id)
        self.current_player = PlayerId(player_id)
        self.turn_index = self.turn_order.index(self.current_player)

    def advance_turn(self) -> PlayerId | None:
        """Move to the next player in turn order, wrapping around."""
        if not self.turn_order:
            return None
        self.turn_index = (self.turn_index + 1) % len(self.turn_order)
        self.current_player = self.turn_order[self.turn_index]
        return self.current_player

    # -------------------------------------------------------------------------
    # Named values and path access
    # -------------------------------------------------------------------------

    def view(self) -> dict[str, Any]:
        """
        Plain snapshot of the state.

        Named values come first so built-in roots always win on a clash.
        """
        data = deepcopy(self.values)
        data.update({
            "currentPlayer": self.current_player,
            "turnIndex": self.turn_index,
            "turnOrder": list(self.turn_order),
            "containers": {cid: c.to_dict() for cid, c in self.containers.items()},
            "players": {pid: p.to_dict() for pid, p in self.players.items()},
        })
        return data

    def get_value(self, path: str) -> Any:
        """
        Read a value by path.

        Raises UnresolvableMapping if the path does not exist.
        """
        parts = split_path(path)
        if parts and parts[0] not in BUILTIN_ROOTS:
            # Fast path: named values only
            source: Any = self.values
        else:
            source = self.view()
        try:
            return lookup(source, path)
        except PathError as e:
            raise UnresolvableMapping("state", path, e.reason) from e

    def set_value(self, path: str, value: Any):
        """
        Write a named value by path, creating intermediate objects.

        Built-in roots are read-only, except currentPlayer which moves the turn.
        """
        parts = split_path(path)
        if not parts:
            raise ValueError("Cannot overwrite the whole state")
        if parts[0] == "currentPlayer" and len(parts) == 1:
            self.set_current_player(value)
            return
        if parts[0] in BUILTIN_ROOTS:
            raise ValueError(f"'{parts[0]}' is derived from live state and cannot be written")

        obj = self.values
        for part in parts[:-1]:
            obj = obj.setdefault(part, {})
            if not isinstance(obj, dict):
                raise ValueError(f"Cannot write '{path}': '{part}' is not an object")
        obj[parts[-1]] = value

    def to_dict(self) -> dict[str, Any]:
        return self.view()
