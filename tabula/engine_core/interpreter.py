"""
Effect Graph Interpreter - Walk an effect graph from an entry node.

Each traversal keeps:
- the current effect id
- the previous output (seeded by the caller)
- the trace of effect ids visited, which also bounds the walk

Steps:
- FunctionEffect: map request -> invoke -> map response -> follow `next`
- SwitchEffect: read `reference_key` from the previous output, stringify,
  follow the matching case, else `default`, else stop

An engine error inside a step is routed to the effect's `error` edge when it
has one. The error node sees `{"error": {"code", "message", "effectId"}}` as
its previous output. Without an error edge the error propagates, annotated
with the effect id and the trace so far.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from ..config_schema.effect_graph import Effect, EffectGraph, FunctionEffect, SwitchEffect
from ..config_schema.identifiers import EffectId
from ..errors import CyclicEffectGraph, EngineError, NotFound, UnresolvableMapping
from .mapper import MappingContext, ParameterMapper
from .paths import PathError, lookup
from .registry import FunctionRegistry

if TYPE_CHECKING:
    from .state import GameState

logger = logging.getLogger(__name__)


@dataclass
class Traversal:
    """
    Record of one graph traversal.

    `trace` lists effect ids in visit order. `output` is the final previous
    output. `recovered` holds errors that were routed to an error edge.
    """
    entry: EffectId
    trace: list[EffectId] = field(default_factory=list)
    output: Any = None
    recovered: list[dict[str, Any]] = field(default_factory=list)


def switch_key(value: Any) -> str:
    """Stringify a switch value for case lookup."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class EffectInterpreter:
    """
    Runs effect graphs against a GameState.

    The interpreter holds no per-traversal state; each run() is independent.
    """

    def __init__(self, registry: FunctionRegistry, mapper: ParameterMapper | None = None):
        self.registry = registry
        self.mapper = mapper or ParameterMapper()

    def run(
        self,
        graph: EffectGraph,
        entry: str,
        state: GameState,
        seed_output: Any = None,
    ) -> Traversal:
        """
        Traverse `graph` starting at `entry`.

        Raises the first unrouted EngineError, or CyclicEffectGraph once more
        nodes would be visited than the graph holds.
        """
        traversal = Traversal(entry=EffectId(entry), output=seed_output)
        limit = len(graph)
        current: EffectId | None = EffectId(entry)

        while current is not None:
            if len(traversal.trace) >= limit:
                raise CyclicEffectGraph(limit, traversal.trace)

            effect = graph.get(current)
            if effect is None:
                error = NotFound("Effect", current)
                error.trace = list(traversal.trace)
                raise error

            traversal.trace.append(current)
            try:
                output, current = self._step(effect, state, traversal.output)
            except EngineError as e:
                if effect.error is None:
                    e.effect_id = effect.effect_id
                    e.trace = list(traversal.trace)
                    logger.debug("Effect '%s' failed: %s", effect.effect_id, e)
                    raise
                logger.warning(
                    "Effect '%s' failed with %s, following error edge to '%s'",
                    effect.effect_id, e.code, effect.error,
                )
                payload = {"code": e.code, "message": e.message, "effectId": effect.effect_id}
                traversal.recovered.append(payload)
                output, current = {"error": payload}, effect.error

            traversal.output = output

        return traversal

    def _step(self, effect: Effect, state: GameState, previous: Any) -> tuple[Any, EffectId | None]:
        """Execute one node. Returns (new previous output, next effect id)."""
        if isinstance(effect, FunctionEffect):
            return self._run_function(effect, state, previous)
        if isinstance(effect, SwitchEffect):
            return self._run_switch(effect, previous)
        raise TypeError(f"Unknown effect kind: {type(effect).__name__}")

    def _run_function(
        self, effect: FunctionEffect, state: GameState, previous: Any
    ) -> tuple[Any, EffectId | None]:
        request = self.mapper.resolve(effect.request_mapper, MappingContext(state, previous))
        raw = self.registry.invoke(effect.function, request, state)

        output = raw
        if effect.response_mapper is not None:
            output = self.mapper.resolve(effect.response_mapper, MappingContext(state, raw))

        logger.debug("Effect '%s' -> %r, next '%s'", effect.effect_id, output, effect.next)
        return output, effect.next

    def _run_switch(self, effect: SwitchEffect, previous: Any) -> tuple[Any, EffectId | None]:
        try:
            value = lookup(previous, effect.reference_key)
        except PathError as e:
            raise UnresolvableMapping("previousOutput", effect.reference_key, e.reason) from e

        key = switch_key(value)
        target = effect.cases.get(key, effect.default)
        logger.debug("Switch '%s' on %r -> '%s'", effect.effect_id, key, target)
        # Previous output passes through unchanged
        return previous, target
