"""
Parameter Mapper - Resolve mapper trees into concrete values.

A mapper tree mirrors the value it produces. Each leaf pulls from one of:
- state: a path into the live GameState
- previousOutput: a path into the previous effect's output
- literal: a fixed value

Object and array nodes without an entry recurse over their children.

Resolution never mutates its sources. Values taken from the previous output
or from literals are deep-copied so a function cannot alter them through
its request.
"""

from __future__ import annotations
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

from ..config_schema.effect_graph import MapperNode, MapperNodeType, MapperSource
from ..errors import UnresolvableMapping
from .paths import PathError, lookup

if TYPE_CHECKING:
    from .state import GameState


@dataclass
class MappingContext:
    """
    What a mapper may read from.

    `previous_output` is the output of the immediately preceding effect (or
    the traversal's seed for the first effect).
    """
    state: GameState
    previous_output: Any = None


class ParameterMapper:
    """Resolves mapper trees against a MappingContext."""

    def resolve(self, node: MapperNode, context: MappingContext) -> Any:
        """
        Resolve a mapper node.

        Raises UnresolvableMapping if a referenced path is absent.
        """
        if node.entry is not None:
            return self._resolve_entry(node, context)

        if node.node_type == MapperNodeType.OBJECT:
            return {
                name: self.resolve(child, context)
                for name, child in node.properties.items()
            }
        if node.node_type == MapperNodeType.ARRAY:
            return [self.resolve(child, context) for child in node.items]

        raise UnresolvableMapping(
            "mapper", node.node_type.value, "scalar node has no entry"
        )

    def _resolve_entry(self, node: MapperNode, context: MappingContext) -> Any:
        entry = node.entry
        if entry.source == MapperSource.LITERAL:
            return deepcopy(entry.value)

        if entry.source == MapperSource.STATE:
            # get_value raises UnresolvableMapping itself
            return deepcopy(context.state.get_value(entry.value))

        if entry.source == MapperSource.PREVIOUS_OUTPUT:
            try:
                return deepcopy(lookup(context.previous_output, entry.value))
            except PathError as e:
                raise UnresolvableMapping("previousOutput", entry.value, e.reason) from e

        raise UnresolvableMapping(str(entry.source), str(entry.value), "unknown source")


def resolve_params(params: dict[str, Any]) -> dict[str, Any]:
    """
    Resolve additional params for end conditions and result ordering.

    These run outside any effect graph, so only literals are allowed.
    """
    return deepcopy(params)
