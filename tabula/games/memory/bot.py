"""
Memory Bot - A deterministic player with perfect recall.

The bot remembers the type of every card it has seen flipped. On its turn:
1. If one card is already face up, flip its known partner if any
2. Otherwise flip one card of a known pair if one is on the field
3. Otherwise flip a card it has not seen yet
4. Otherwise flip the first face-down field card
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ...config_schema.game_config import ContainerType
from ...engine_core.action import ActionRequest
from ...engine_core.state import Card, GameState


@dataclass
class MemoryBot:
    seen: dict[str, str] = field(default_factory=dict)

    def observe(self, card_id: str, card_type_id: str):
        """Remember a revealed card."""
        self.seen[card_id] = card_type_id

    def choose(self, state: GameState) -> ActionRequest:
        """Pick the next flip for the current player."""
        field_cards = [
            card
            for container in state.containers_of_type(ContainerType.FIELD)
            for card in container.cards
        ]
        face_down = [c for c in field_cards if not c.face_up]
        face_up = [c for c in field_cards if c.face_up]
        if not face_down:
            raise ValueError("No face-down card left to flip")

        card = None
        if face_up:
            card = self._known_partner(face_up[0], face_down)
        else:
            card = self._known_pair_member(face_down)
        if card is None:
            card = next((c for c in face_down if c.card_id not in self.seen), face_down[0])

        return ActionRequest.flip(state.current_player, card.container_id, card.card_id)

    def _known_partner(self, revealed: Card, candidates: list[Card]) -> Card | None:
        for card in candidates:
            if self.seen.get(card.card_id) == revealed.card_type_id:
                return card
        return None

    def _known_pair_member(self, candidates: list[Card]) -> Card | None:
        by_type: dict[str, list[Card]] = {}
        for card in candidates:
            card_type = self.seen.get(card.card_id)
            if card_type is not None:
                by_type.setdefault(card_type, []).append(card)
        for cards in by_type.values():
            if len(cards) >= 2:
                return cards[0]
        return None
