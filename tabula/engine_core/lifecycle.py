"""
Lifecycle Controller - Drives a game from setup to final ranking.

Phases:
    UNINITIALIZED -> INITIALIZING -> AWAITING_ACTION -> EVALUATING -> FINISHED

start() builds a fresh GameState and runs each initialization entry as its
own traversal of the global graph.

submit() handles one player action:
1. Resolve the effective Action (card type, then container, then game level)
2. Check permission against the actor's roles and the field snapshot
3. Run the `before` hook, the base graph and the `after` hook, each as a
   separate traversal seeded with the request payload
4. Evaluate end conditions; if one holds, compute the ranking and finish

Nothing is rolled back on failure: the state stays as the failing function
left it, and the game keeps awaiting actions.
"""

from __future__ import annotations
import logging
import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..config_schema.effect_graph import EffectGraph, FunctionEffect
from ..config_schema.game_config import (
    Action,
    Comparator,
    EndCondition,
    GameConfig,
    SortDirection,
)
from ..errors import ConfigValidationError, EngineError, InvalidPhase, NotFound, UnresolvableMapping
from .action import ActionRequest, ActionResult
from .interpreter import EffectInterpreter, Traversal
from .mapper import resolve_params
from .paths import PathError, lookup
from .permissions import PermissionResolver
from .registry import FunctionRegistry
from .state import GameState

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    AWAITING_ACTION = "awaiting_action"
    EVALUATING = "evaluating"
    FINISHED = "finished"


@dataclass(frozen=True)
class RankingEntry:
    """One participant's place in the final ranking."""
    player_id: str
    value: Any
    rank: int

    def to_dict(self) -> dict[str, Any]:
        return {"playerId": self.player_id, "value": self.value, "rank": self.rank}


_COMPARATORS = {
    Comparator.EQ: operator.eq,
    Comparator.NE: operator.ne,
    Comparator.LT: operator.lt,
    Comparator.LE: operator.le,
    Comparator.GT: operator.gt,
    Comparator.GE: operator.ge,
}


def condition_holds(condition: EndCondition, value: Any) -> bool:
    """
    Compare a function output against an end condition.

    Raises UnresolvableMapping when the two values cannot be ordered,
    e.g. a string against a number.
    """
    if condition.operator == Comparator.TRUTHY:
        return bool(value)
    try:
        return bool(_COMPARATORS[condition.operator](value, condition.value))
    except TypeError as e:
        raise UnresolvableMapping(
            "end condition",
            condition.reference_key,
            f"cannot compare {value!r} with {condition.value!r}",
        ) from e


def referenced_functions(config: GameConfig) -> set[str]:
    """Every function id a config can call."""
    graphs: list[EffectGraph] = [config.global_effects]
    graphs.extend(action.effects for _, _, action in config.iter_actions())

    functions = set(config.functions)
    for graph in graphs:
        functions.update(e.function for e in graph.values() if isinstance(e, FunctionEffect))
    functions.update(c.function for c in config.end_conditions)
    if config.result_order is not None:
        functions.add(config.result_order.function)
    return functions


class LifecycleController:
    """
    Runs one game instance.

    The controller is single-threaded; hosts that accept concurrent
    submissions must serialize calls per instance.
    """

    def __init__(
        self,
        config: GameConfig,
        registry: FunctionRegistry,
        seed: int | None = None,
    ):
        missing = sorted(f for f in referenced_functions(config) if f not in registry)
        if missing:
            raise ConfigValidationError(
                [f"Function '{f}' is referenced but has no registered handler" for f in missing]
            )
        for definition in config.functions.values():
            registry.bind_shapes(
                definition.function_id, definition.request_shape, definition.response_shape
            )

        self.config = config
        self.registry = registry
        self.seed = seed
        self.interpreter = EffectInterpreter(registry)
        self.permissions = PermissionResolver()

        self.phase = GamePhase.UNINITIALIZED
        self.state: GameState | None = None
        self.ranking: list[RankingEntry] | None = None
        self.initialization: list[Traversal] = []

    @property
    def is_finished(self) -> bool:
        return self.phase == GamePhase.FINISHED

    def _transition(self, phase: GamePhase):
        logger.info("Game '%s': %s -> %s", self.config.game_id, self.phase.value, phase.value)
        self.phase = phase

    def _require_phase(self, operation: str, *phases: GamePhase):
        if self.phase not in phases:
            raise InvalidPhase(operation, self.phase.value)

    # -------------------------------------------------------------------------
    # Start
    # -------------------------------------------------------------------------

    def start(self) -> GameState:
        """
        Populate a fresh state and run the initialization sequence.

        A failing entry leaves the controller in INITIALIZING and propagates.
        """
        self._require_phase("start", GamePhase.UNINITIALIZED)
        self._transition(GamePhase.INITIALIZING)

        self.state = GameState.from_config(self.config, seed=self.seed)
        for entry in self.config.initialize:
            traversal = self.interpreter.run(self.config.global_effects, entry, self.state)
            self.initialization.append(traversal)
            logger.debug("Initialization '%s' traversed %s", entry, traversal.trace)

        self._transition(GamePhase.AWAITING_ACTION)
        return self.state

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def resolve_action(self, request: ActionRequest) -> Action:
        """
        Find the Action that governs a request.

        Precedence: the targeted card's type, then the targeted container,
        then the game-level action. Raises NotFound if none is configured.

        A request that targets a card always resolves against the card's
        actual container. Naming any other container raises NotFound.
        """
        card_type = None
        container_id = request.container_id
        if request.card_id is not None:
            card = self.state.find_card(request.card_id)
            if container_id is not None and container_id != card.container_id:
                raise NotFound(f"Card in container '{container_id}'", request.card_id)
            card_type = self.config.get_card_type(card.card_type_id)
            container_id = card.container_id

        if card_type is not None and request.action_type in card_type.actions:
            return card_type.actions[request.action_type]

        if container_id is not None:
            self.state.get_container(container_id)
            container = self.config.get_container(container_id)
            if container is not None and request.action_type in container.actions:
                return container.actions[request.action_type]

        action = self.config.actions.get(request.action_type)
        if action is None:
            raise NotFound("Action", request.action_type.value)
        return action

    def permission_fields(self, request: ActionRequest) -> dict[str, Any]:
        """Field snapshot that permission overrides are matched against."""
        fields = dict(request.fields)
        if request.card_id is not None:
            card = self.state.find_card(request.card_id)
            fields.update({
                "isFaceUp": card.face_up,
                "isFaceDown": not card.face_up,
                "cardTypeId": card.card_type_id,
                "containerId": card.container_id,
            })
        return fields

    def submit(self, request: ActionRequest) -> ActionResult:
        """
        Submit a player action.

        Raises InvalidPhase outside AWAITING_ACTION, and NotFound when the
        request names an unknown player, card, container or action type.
        Denials and effect failures are reported in the ActionResult.
        """
        self._require_phase("submit an action", GamePhase.AWAITING_ACTION)

        roles = self.state.roles_of(request.player_id)
        action = self.resolve_action(request)
        decision = self.permissions.evaluate(
            action.permissions, roles, self.permission_fields(request)
        )
        if not decision.allowed:
            logger.info(
                "Denied %s by '%s' (%s)",
                request.action_type.value, request.player_id, decision.rule,
            )
            return ActionResult.denied(request, decision.rule)

        traces: dict[str, list] = {}
        stages = (("before", action.before), ("effects", action.entry_id), ("after", action.after))
        for stage, entry in stages:
            if entry is None:
                continue
            try:
                graph = self._graph_for(action, entry)
                traversal = self.interpreter.run(graph, entry, self.state, request.payload())
            except EngineError as e:
                traces[stage] = list(e.trace)
                logger.info(
                    "Action %s by '%s' failed in %s at '%s': %s",
                    request.action_type.value, request.player_id, stage, e.effect_id, e,
                )
                return ActionResult.failure(
                    request, str(e), error_code=e.code, effect_id=e.effect_id, traces=traces
                )
            traces[stage] = traversal.trace

        try:
            finished = self.evaluate_end_conditions()
            if finished:
                self._finish()
        except EngineError as e:
            logger.info("End of game evaluation failed: %s", e)
            if self.phase == GamePhase.EVALUATING:
                self._transition(GamePhase.AWAITING_ACTION)
            return ActionResult.failure(request, str(e), error_code=e.code, traces=traces)

        logger.info(
            "Action %s by '%s' completed%s",
            request.action_type.value, request.player_id, " (game over)" if finished else "",
        )
        return ActionResult.completed(request, traces, rule=decision.rule, game_over=finished)

    def _graph_for(self, action: Action, entry: str) -> EffectGraph:
        """Hook entries live in the action's graph or, failing that, the global one."""
        if entry in action.effects:
            return action.effects
        if entry in self.config.global_effects:
            return self.config.global_effects
        raise NotFound("Effect", entry)

    # -------------------------------------------------------------------------
    # End of game
    # -------------------------------------------------------------------------

    def evaluate_end_conditions(self) -> bool:
        """True if any end condition holds against the current state."""
        for condition in self.config.end_conditions:
            output = self.registry.invoke(
                condition.function, resolve_params(condition.additional_params), self.state
            )
            value = self._extract(output, condition.reference_key)
            if condition_holds(condition, value):
                logger.debug("End condition '%s' holds (%r)", condition.function, value)
                return True
        return False

    def compute_ranking(self) -> list[RankingEntry]:
        """
        Rank participants by the result-order key.

        Equal values keep turn order and share a competition rank (1, 1, 3).
        Raises UnresolvableMapping if the values cannot be ordered.
        """
        order = self.config.result_order
        if order is None:
            return [RankingEntry(player_id=p, value=None, rank=1) for p in self.state.turn_order]

        output = self.registry.invoke(
            order.function, resolve_params(order.additional_params), self.state
        )
        values = self._participant_values(output, order.participant_key, order.reference_key)

        turn_position = {p: i for i, p in enumerate(self.state.turn_order)}
        participants = sorted(values, key=lambda p: turn_position.get(p, len(turn_position)))
        try:
            participants = sorted(
                participants,
                key=lambda p: values[p],
                reverse=order.by == SortDirection.DESC,
            )
        except TypeError as e:
            raise UnresolvableMapping(
                "result order output", order.reference_key, "values are not comparable"
            ) from e

        ranking: list[RankingEntry] = []
        for i, player_id in enumerate(participants):
            if ranking and ranking[-1].value == values[player_id]:
                rank = ranking[-1].rank
            else:
                rank = i + 1
            ranking.append(RankingEntry(player_id=player_id, value=values[player_id], rank=rank))
        return ranking

    def _participant_values(self, output: Any, participant_key: str, reference_key: str) -> dict[str, Any]:
        values: dict[str, Any] = {}
        if isinstance(output, dict):
            for player_id, item in output.items():
                values[player_id] = (
                    self._extract(item, reference_key) if isinstance(item, dict) else item
                )
        elif isinstance(output, list):
            for item in output:
                player_id = self._extract(item, participant_key)
                values[player_id] = self._extract(item, reference_key)
        else:
            raise UnresolvableMapping("result order output", reference_key, "expected a list or mapping")
        return values

    def _extract(self, output: Any, key: str) -> Any:
        try:
            return lookup(output, key)
        except PathError as e:
            raise UnresolvableMapping("function output", key, e.reason) from e

    def _finish(self):
        self._transition(GamePhase.EVALUATING)
        self.ranking = self.compute_ranking()
        self._transition(GamePhase.FINISHED)
        logger.info(
            "Game '%s' finished: %s",
            self.config.game_id,
            ", ".join(f"{e.rank}. {e.player_id} ({e.value})" for e in self.ranking),
        )

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def view(self) -> dict[str, Any]:
        return {
            "gameId": self.config.game_id,
            "phase": self.phase.value,
            "state": self.state.view() if self.state else None,
            "ranking": [e.to_dict() for e in self.ranking] if self.ranking is not None else None,
        }
