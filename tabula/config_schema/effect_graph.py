"""
Effect Graph - Node types for declarative effect graphs.

An effect graph is a set of identifier-addressed nodes. Each node is one of:
- FunctionEffect: call a registered function with mapped parameters
- SwitchEffect: branch on a value from the previous node's output

Nodes are linked by `next`, `error`, case and `default` edges. Graphs are
data only; the interpreter in engine_core walks them.

Parameters for a function call are described by a mapper tree. Leaves pull
their value from one of three sources:
- state: a path into the live game state
- previousOutput: a path into the output of the previous effect
- literal: a fixed value
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .identifiers import EffectId, FunctionId


class MapperSource(Enum):
    """Where a mapper leaf takes its value from."""
    STATE = "state"
    PREVIOUS_OUTPUT = "previousOutput"
    LITERAL = "literal"


class MapperNodeType(Enum):
    """Value type produced by a mapper node."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


SCALAR_NODE_TYPES = {MapperNodeType.STRING, MapperNodeType.NUMBER, MapperNodeType.BOOLEAN}


@dataclass(frozen=True)
class MapperEntry:
    """
    A single value source.

    For state/previousOutput the value is a dotted path ("matchResult.result",
    "cards.0.cardId"). For literal it is the value itself.
    """
    source: MapperSource
    value: Any


@dataclass(frozen=True)
class MapperNode:
    """
    A node in a parameter mapper tree.

    Scalar nodes must carry an entry. Object and array nodes either carry an
    entry (take the whole value from one source) or recurse structurally.
    """
    node_type: MapperNodeType
    entry: MapperEntry | None = None
    properties: dict[str, MapperNode] = field(default_factory=dict)
    items: list[MapperNode] = field(default_factory=list)


@dataclass(frozen=True)
class FunctionEffect:
    """Invoke a registered function, then continue along `next`."""
    effect_id: EffectId
    function: FunctionId
    request_mapper: MapperNode = field(
        default_factory=lambda: MapperNode(node_type=MapperNodeType.OBJECT)
    )
    response_mapper: MapperNode | None = None
    next: EffectId | None = None
    error: EffectId | None = None

    def edges(self) -> list[EffectId]:
        return [e for e in (self.next, self.error) if e]


@dataclass(frozen=True)
class SwitchEffect:
    """
    Branch on the previous output.

    `reference_key` is a path into the previous output. The extracted value
    is stringified and looked up in `cases`.
    """
    effect_id: EffectId
    reference_key: str
    cases: dict[str, EffectId] = field(default_factory=dict)
    default: EffectId | None = None
    error: EffectId | None = None

    def edges(self) -> list[EffectId]:
        targets = list(self.cases.values())
        targets.extend(e for e in (self.default, self.error) if e)
        return targets


Effect = Union[FunctionEffect, SwitchEffect]

# An effect graph: effect id -> node, in declaration order
EffectGraph = dict[EffectId, Effect]


# ============================================================================
# Factory functions for common mapper and effect patterns
# ============================================================================

def literal(value: Any, node_type: MapperNodeType | None = None) -> MapperNode:
    """Create a literal leaf, inferring the node type from the value."""
    if node_type is None:
        node_type = _infer_node_type(value)
    return MapperNode(
        node_type=node_type,
        entry=MapperEntry(source=MapperSource.LITERAL, value=value),
    )


def from_state(path: str, node_type: MapperNodeType = MapperNodeType.STRING) -> MapperNode:
    """Create a leaf reading a path from the live state."""
    return MapperNode(
        node_type=node_type,
        entry=MapperEntry(source=MapperSource.STATE, value=path),
    )


def from_previous(path: str, node_type: MapperNodeType = MapperNodeType.STRING) -> MapperNode:
    """Create a leaf reading a path from the previous effect's output."""
    return MapperNode(
        node_type=node_type,
        entry=MapperEntry(source=MapperSource.PREVIOUS_OUTPUT, value=path),
    )


def object_mapper(**properties: MapperNode) -> MapperNode:
    """Create an object node from keyword properties."""
    return MapperNode(node_type=MapperNodeType.OBJECT, properties=dict(properties))


def function_effect(
    effect_id: str,
    function: str,
    request: MapperNode | None = None,
    response: MapperNode | None = None,
    next: str | None = None,
    error: str | None = None,
) -> FunctionEffect:
    """Create a function effect."""
    return FunctionEffect(
        effect_id=EffectId(effect_id),
        function=FunctionId(function),
        request_mapper=request or object_mapper(),
        response_mapper=response,
        next=EffectId(next) if next else None,
        error=EffectId(error) if error else None,
    )


def switch_effect(
    effect_id: str,
    reference_key: str,
    cases: dict[str, str],
    default: str | None = None,
    error: str | None = None,
) -> SwitchEffect:
    """Create a switch effect."""
    return SwitchEffect(
        effect_id=EffectId(effect_id),
        reference_key=reference_key,
        cases={k: EffectId(v) for k, v in cases.items()},
        default=EffectId(default) if default else None,
        error=EffectId(error) if error else None,
    )


def build_graph(*effects: Effect) -> EffectGraph:
    """Index effects by id, keeping declaration order."""
    return {effect.effect_id: effect for effect in effects}


def _infer_node_type(value: Any) -> MapperNodeType:
    if isinstance(value, bool):
        return MapperNodeType.BOOLEAN
    if isinstance(value, (int, float)):
        return MapperNodeType.NUMBER
    if isinstance(value, dict):
        return MapperNodeType.OBJECT
    if isinstance(value, (list, tuple)):
        return MapperNodeType.ARRAY
    return MapperNodeType.STRING
