"""
API Service - Business logic layer between the HTTP app and the engine.

The service:
1. Creates games from builtin configs or submitted documents
2. Serializes submissions per game (one action at a time)
3. Translates engine results and errors into response models

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
import logging
import threading
import uuid
from dataclasses import dataclass, field

from .schemas import (
    ActionResponse,
    CardInfo,
    ContainerInfo,
    CreateGameRequest,
    ErrorCode,
    ErrorResponse,
    GameListResponse,
    GameResponse,
    PlayerInfo,
    RankingEntryInfo,
    RankingResponse,
    SubmitActionRequest,
)
from ..config_schema.document import load_config
from ..config_schema.game_config import ActionType, ContainerType
from ..engine_core.action import ActionRequest
from ..engine_core.lifecycle import LifecycleController
from ..errors import ConfigValidationError, EngineError, InvalidPhase, NotFound
from ..games.memory import memory_config, register_memory_functions

logger = logging.getLogger(__name__)

BUILTIN_GAMES = {
    "memory": memory_config,
}


@dataclass
class GameHandle:
    """A running game and the gate that admits one writer at a time."""
    game_id: str
    controller: LifecycleController
    lock: threading.Lock = field(default_factory=threading.Lock)


@dataclass
class GameService:
    """
    In-process game service.

    Usage:
        service = GameService()
        game = service.create_game(CreateGameRequest(game_type="memory", seed=7))
        result = service.submit_action(game.game_id, SubmitActionRequest(...))
    """
    _games: dict[str, GameHandle] = field(default_factory=dict)
    _registry_lock: threading.Lock = field(default_factory=threading.Lock)

    def create_game(self, request: CreateGameRequest) -> GameResponse | ErrorResponse:
        """
        Create and start a game.

        A submitted config document may only call builtin functions.
        """
        try:
            if request.config is not None:
                config = load_config(request.config)
            elif request.game_type in BUILTIN_GAMES:
                config = BUILTIN_GAMES[request.game_type]()
            else:
                return ErrorResponse(
                    error=f"Unknown game type '{request.game_type}'",
                    error_code=ErrorCode.UNKNOWN_GAME_TYPE,
                    details={"available": sorted(BUILTIN_GAMES)},
                )
            controller = LifecycleController(config, register_memory_functions(), seed=request.seed)
        except ConfigValidationError as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.INVALID_CONFIG,
                details={"errors": e.errors},
            )

        try:
            controller.start()
        except EngineError as e:
            return self._engine_error(e)

        game_id = str(uuid.uuid4())
        with self._registry_lock:
            self._games[game_id] = GameHandle(game_id=game_id, controller=controller)
        logger.info("Created game %s (%s)", game_id, controller.config.game_id)
        return self._game_to_response(game_id, controller)

    def get_game(self, game_id: str) -> GameResponse | ErrorResponse:
        handle = self._games.get(game_id)
        if handle is None:
            return self._not_found(game_id)
        with handle.lock:
            return self._game_to_response(game_id, handle.controller)

    def submit_action(
        self, game_id: str, request: SubmitActionRequest
    ) -> ActionResponse | ErrorResponse:
        """
        Submit a player action.

        Denials and effect failures are reported in the ActionResponse, not
        as errors.
        """
        handle = self._games.get(game_id)
        if handle is None:
            return self._not_found(game_id)

        action = ActionRequest(
            player_id=request.player_id,
            action_type=ActionType(request.action_type.value),
            fields=dict(request.fields),
        )
        with handle.lock:
            try:
                result = handle.controller.submit(action)
            except EngineError as e:
                return self._engine_error(e)
            game = self._game_to_response(game_id, handle.controller)

        return ActionResponse(
            outcome=result.outcome.value,
            action_type=result.action_type.value,
            player_id=result.player_id,
            traces={stage: list(trace) for stage, trace in result.traces.items()},
            permission_rule=result.permission_rule,
            error=result.error,
            error_code=result.error_code,
            effect_id=result.effect_id,
            game_over=result.game_over,
            game=game,
        )

    def get_ranking(self, game_id: str) -> RankingResponse | ErrorResponse:
        handle = self._games.get(game_id)
        if handle is None:
            return self._not_found(game_id)
        with handle.lock:
            controller = handle.controller
            if not controller.is_finished:
                return ErrorResponse(
                    error="Game is not finished",
                    error_code=ErrorCode.INVALID_PHASE,
                    details={"phase": controller.phase.value},
                )
            return RankingResponse(
                game_id=game_id,
                finished=True,
                ranking=self._ranking_info(controller),
            )

    def end_game(self, game_id: str) -> bool:
        """Drop a game. Returns False if it did not exist."""
        with self._registry_lock:
            removed = self._games.pop(game_id, None)
        if removed is not None:
            logger.info("Ended game %s", game_id)
        return removed is not None

    def list_games(self) -> GameListResponse:
        games = list(self._games)
        return GameListResponse(games=games, count=len(games))

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _not_found(self, game_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Game '{game_id}' not found",
            error_code=ErrorCode.GAME_NOT_FOUND,
        )

    def _ranking_info(self, controller: LifecycleController) -> list[RankingEntryInfo]:
        return [
            RankingEntryInfo(player_id=e.player_id, value=e.value, rank=e.rank)
            for e in controller.ranking
        ]

    def _engine_error(self, error: EngineError) -> ErrorResponse:
        if isinstance(error, InvalidPhase):
            code = ErrorCode.INVALID_PHASE
        elif isinstance(error, NotFound):
            code = ErrorCode.NOT_FOUND
        else:
            code = ErrorCode.INTERNAL_ERROR
        details = {"engine_code": error.code}
        if getattr(error, "cause_code", None):
            details["cause_code"] = error.cause_code
        if error.effect_id:
            details["effect_id"] = error.effect_id
        return ErrorResponse(error=str(error), error_code=code, details=details)

    def _game_to_response(self, game_id: str, controller: LifecycleController) -> GameResponse:
        state = controller.state
        ranking = None
        if controller.ranking is not None:
            ranking = self._ranking_info(controller)

        if state is None:
            return GameResponse(
                game_id=game_id,
                config_id=controller.config.game_id,
                phase=controller.phase.value,
                ranking=ranking,
            )

        return GameResponse(
            game_id=game_id,
            config_id=controller.config.game_id,
            phase=controller.phase.value,
            current_player=state.current_player,
            turn_order=list(state.turn_order),
            players=[
                PlayerInfo(
                    player_id=p.player_id,
                    roles=sorted(p.roles),
                    is_current_turn=p.player_id == state.current_player,
                )
                for p in state.players.values()
            ],
            containers=[
                ContainerInfo(
                    container_id=c.container_id,
                    container_type=c.container_type.value,
                    owner=c.owner,
                    max_cards=c.max_cards,
                    card_count=c.count,
                    cards=[
                        CardInfo(
                            card_id=card.card_id,
                            card_type_id=(
                                card.card_type_id
                                if card.face_up or c.container_type == ContainerType.HAND
                                else None
                            ),
                            is_face_up=card.face_up,
                        )
                        for card in c.cards
                    ],
                )
                for c in state.containers.values()
            ],
            values=dict(state.values),
            ranking=ranking,
        )
