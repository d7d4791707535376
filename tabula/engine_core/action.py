"""
Action System - Action requests and results.

A player submits an ActionRequest (flip, move, shuffle) with the fields
that action needs. The lifecycle controller answers with an ActionResult
describing the outcome and the effects traversed in each stage.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config_schema.game_config import ActionType
from ..config_schema.identifiers import EffectId


class ActionOutcome(Enum):
    """How an action submission ended."""
    COMPLETED = "completed"
    DENIED = "denied"
    FAILED = "failed"


@dataclass
class ActionRequest:
    """
    An action submitted by a player.

    `fields` carries the action-specific values:
    - flip: containerId, cardId
    - move: containerId, cardId, targetContainerId
    - shuffle: containerId
    """
    player_id: str
    action_type: ActionType
    fields: dict[str, Any] = field(default_factory=dict)

    @property
    def card_id(self) -> str | None:
        return self.fields.get("cardId")

    @property
    def container_id(self) -> str | None:
        return self.fields.get("containerId")

    def payload(self) -> dict[str, Any]:
        """The seed output given to the first effect of each stage."""
        return {
            **self.fields,
            "playerId": self.player_id,
            "actionType": self.action_type.value,
        }

    @classmethod
    def flip(cls, player_id: str, container_id: str, card_id: str) -> ActionRequest:
        """Factory for flip action."""
        return cls(
            player_id=player_id,
            action_type=ActionType.FLIP,
            fields={"containerId": container_id, "cardId": card_id},
        )

    @classmethod
    def move(
        cls, player_id: str, container_id: str, card_id: str, target_container_id: str
    ) -> ActionRequest:
        """Factory for move action."""
        return cls(
            player_id=player_id,
            action_type=ActionType.MOVE,
            fields={
                "containerId": container_id,
                "cardId": card_id,
                "targetContainerId": target_container_id,
            },
        )

    @classmethod
    def shuffle(cls, player_id: str, container_id: str) -> ActionRequest:
        """Factory for shuffle action."""
        return cls(
            player_id=player_id,
            action_type=ActionType.SHUFFLE,
            fields={"containerId": container_id},
        )


@dataclass
class ActionResult:
    """
    Result of submitting an action.

    Contains:
    - The outcome (completed, denied, failed)
    - Effects traversed per stage ("before", "effects", "after")
    - The deciding permission rule
    - Error details on failure
    - Whether the submission ended the game
    """
    outcome: ActionOutcome
    action_type: ActionType | None = None
    player_id: str | None = None
    traces: dict[str, list[EffectId]] = field(default_factory=dict)
    permission_rule: str | None = None

    error: str | None = None
    error_code: str | None = None
    effect_id: str | None = None

    game_over: bool = False

    @property
    def success(self) -> bool:
        return self.outcome == ActionOutcome.COMPLETED

    @property
    def effects_resolved(self) -> list[EffectId]:
        """All traversed effect ids across stages, in order."""
        resolved: list[EffectId] = []
        for stage in ("before", "effects", "after"):
            resolved.extend(self.traces.get(stage, []))
        return resolved

    @classmethod
    def denied(cls, request: ActionRequest, rule: str) -> ActionResult:
        """Create a denied result. State is untouched."""
        return cls(
            outcome=ActionOutcome.DENIED,
            action_type=request.action_type,
            player_id=request.player_id,
            permission_rule=rule,
            error=f"Player '{request.player_id}' may not {request.action_type.value}",
            error_code="PERMISSION_DENIED",
        )

    @classmethod
    def failure(
        cls,
        request: ActionRequest,
        error: str,
        error_code: str | None = None,
        effect_id: str | None = None,
        traces: dict[str, list[EffectId]] | None = None,
    ) -> ActionResult:
        """Create a failure result."""
        return cls(
            outcome=ActionOutcome.FAILED,
            action_type=request.action_type,
            player_id=request.player_id,
            error=error,
            error_code=error_code,
            effect_id=effect_id,
            traces=traces or {},
        )

    @classmethod
    def completed(
        cls,
        request: ActionRequest,
        traces: dict[str, list[EffectId]],
        rule: str | None = None,
        game_over: bool = False,
    ) -> ActionResult:
        """Create a success result."""
        return cls(
            outcome=ActionOutcome.COMPLETED,
            action_type=request.action_type,
            player_id=request.player_id,
            traces=traces,
            permission_rule=rule,
            game_over=game_over,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "actionType": self.action_type.value if self.action_type else None,
            "playerId": self.player_id,
            "traces": {k: list(v) for k, v in self.traces.items()},
            "permissionRule": self.permission_rule,
            "error": self.error,
            "errorCode": self.error_code,
            "effectId": self.effect_id,
            "gameOver": self.game_over,
        }
