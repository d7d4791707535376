"""
Tests for the live game state.

Tests:
- Population from a config
- Container, card and player lookups
- Live card queries
- Named values and built-in roots
- Turn advancement
"""

import pytest

from ..config_schema.game_config import ContainerType
from ..engine_core.state import GameState
from ..errors import NotFound, UnresolvableMapping


class TestFromConfig:
    """Tests for building state from a config."""

    def test_containers_populated_from_initial_cards(self, small_state):
        """Initial cards are expanded per type in declaration order."""
        deck = small_state.get_container("deck")

        assert deck.count == 3
        assert [c.card_type_id for c in deck.cards] == ["red", "red", "blue"]
        assert [c.card_id for c in deck.cards] == ["red#1", "red#2", "blue#1"]
        assert all(not c.face_up for c in deck.cards)
        assert all(c.container_id == "deck" for c in deck.cards)

    def test_empty_containers_exist(self, small_state):
        """Containers without initial cards start empty."""
        assert small_state.get_container("trash").is_empty
        assert small_state.get_container("hand-alice").count == 0

    def test_players_and_turn(self, small_state):
        """Players get their initial roles; the first in turn order starts."""
        assert small_state.roles_of("alice") == {"player", "dealer"}
        assert small_state.roles_of("bob") == {"player"}
        assert small_state.current_player == "alice"
        assert small_state.turn_index == 0


class TestLookups:
    """Tests for lookups that fail with NotFound."""

    def test_unknown_container(self, small_state):
        """Reading a missing container raises NotFound."""
        with pytest.raises(NotFound) as exc_info:
            small_state.get_container("nowhere")
        assert exc_info.value.code == "NOT_FOUND"

    def test_unknown_player(self, small_state):
        with pytest.raises(NotFound):
            small_state.get_player("carol")

    def test_unknown_card(self, small_state):
        with pytest.raises(NotFound):
            small_state.find_card("green#1")

    def test_hand_of(self, small_state):
        """A player's hand is the hand container they own."""
        assert small_state.hand_of("bob").container_id == "hand-bob"

    def test_containers_of_type(self, small_state):
        hands = small_state.containers_of_type(ContainerType.HAND)
        assert {c.container_id for c in hands} == {"hand-alice", "hand-bob"}
        assert small_state.containers_of_type("deck")[0].container_id == "deck"


class TestCardQueries:
    """Tests for live card queries and moves."""

    def test_find_cards_is_live(self, small_state):
        """A query started before a mutation sees the mutation."""
        face_up = small_state.find_cards(lambda c: c.face_up)
        small_state.find_card("blue#1").face_up = True

        assert [c.card_id for c in face_up] == ["blue#1"]

    def test_face_up_cards_reflect_latest_state(self, small_state):
        """Each call reflects the state at call time."""
        assert small_state.face_up_cards() == []
        small_state.find_card("red#2").face_up = True
        assert [c.card_id for c in small_state.face_up_cards()] == ["red#2"]

    def test_move_card(self, small_state):
        """Moving a card updates both containers and the card."""
        card = small_state.move_card("red#1", "hand-alice")

        assert card.container_id == "hand-alice"
        assert small_state.get_container("deck").count == 2
        assert small_state.get_container("hand-alice").cards == [card]

    def test_capacity_is_exposed_not_enforced(self, small_state):
        """The state reports fullness; enforcement is up to functions."""
        trash = small_state.get_container("trash")
        assert trash.remaining_capacity == 1

        small_state.move_card("red#1", "trash")
        assert trash.is_full
        assert trash.remaining_capacity == 0

        small_state.move_card("red#2", "trash")
        assert trash.count == 2

    def test_unbounded_capacity(self, small_state):
        hand = small_state.get_container("hand-alice")
        assert hand.remaining_capacity is None
        assert not hand.is_full

    def test_shuffle_is_seeded(self, small_config):
        """Two states with the same seed shuffle identically."""
        first = GameState.from_config(small_config, seed=7)
        second = GameState.from_config(small_config, seed=7)

        first.shuffle_container("deck")
        second.shuffle_container("deck")

        assert [c.card_id for c in first.get_container("deck").cards] == [
            c.card_id for c in second.get_container("deck").cards
        ]


class TestValues:
    """Tests for named values and path access."""

    def test_set_and_get_nested_value(self, small_state):
        small_state.set_value("round.number", 3)
        assert small_state.get_value("round.number") == 3
        assert small_state.get_value("round") == {"number": 3}

    def test_missing_value_is_unresolvable(self, small_state):
        with pytest.raises(UnresolvableMapping) as exc_info:
            small_state.get_value("nextTurnOrder")
        assert exc_info.value.source == "state"
        assert exc_info.value.path == "nextTurnOrder"

    def test_builtin_roots(self, small_state):
        """Built-in roots resolve through the live view."""
        assert small_state.get_value("currentPlayer") == "alice"
        assert small_state.get_value("turnOrder") == ["alice", "bob"]
        assert small_state.get_value("containers.deck.count") == 3
        assert small_state.get_value("containers.deck.cards.0.cardId") == "red#1"
        assert small_state.get_value("players.bob.roles") == ["player"]

    def test_builtin_roots_are_read_only(self, small_state):
        with pytest.raises(ValueError):
            small_state.set_value("containers.deck", {})
        with pytest.raises(ValueError):
            small_state.set_value("turnIndex", 1)

    def test_setting_current_player_moves_turn(self, small_state):
        small_state.set_value("currentPlayer", "bob")
        assert small_state.current_player == "bob"
        assert small_state.turn_index == 1

    def test_view_is_a_snapshot(self, small_state):
        """Mutating a view never changes the state."""
        view = small_state.view()
        view["containers"]["deck"]["cards"].clear()
        assert small_state.get_container("deck").count == 3


class TestTurns:
    """Tests for turn advancement."""

    def test_advance_turn_wraps(self, small_state):
        assert small_state.advance_turn() == "bob"
        assert small_state.turn_index == 1
        assert small_state.advance_turn() == "alice"
        assert small_state.turn_index == 0

    def test_grant_and_revoke_roles(self, small_state):
        small_state.grant_role("bob", "dealer")
        small_state.revoke_role("alice", "dealer")

        assert [p.player_id for p in small_state.players_with_role("dealer")] == ["bob"]
