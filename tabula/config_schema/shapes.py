"""
Shapes - Declared request/response shapes and their structural validator.

A shape is a small tree of typed nodes (string, number, boolean, object,
array). Shapes are compiled once into a pydantic TypeAdapter so every
function invocation can be checked without re-walking the tree.

Strict shapes reject unknown object keys; non-strict shapes ignore them.
Leaf types never coerce ("1" is not a number, 0 is not a boolean).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from pydantic import (
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    TypeAdapter,
    ValidationError,
    create_model,
)


class ShapeType(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


@dataclass(frozen=True)
class SchemaNode:
    """One node of a declared shape."""
    node_type: ShapeType
    key: str = ""
    required: bool = True
    properties: dict[str, SchemaNode] = field(default_factory=dict)
    items: list[SchemaNode] = field(default_factory=list)
    strict: bool = False


class CompiledShape:
    """
    A shape compiled to a pydantic TypeAdapter.

    Usage:
        shape = CompiledShape(node)
        errors = shape.check({"containerId": "deck"})
    """

    def __init__(self, node: SchemaNode):
        self.node = node
        annotation = _annotation_for(node, name=node.key or "root")
        if not node.required:
            annotation = Optional[annotation]
        self._adapter = TypeAdapter(annotation)

    def check(self, value: Any) -> list[str]:
        """Return a list of human-readable violations (empty if valid)."""
        try:
            self._adapter.validate_python(value)
        except ValidationError as e:
            return [
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
        return []

    def conforms(self, value: Any) -> bool:
        return not self.check(value)


def _annotation_for(node: SchemaNode, name: str) -> Any:
    """Build the pydantic annotation for a shape node."""
    if node.node_type == ShapeType.STRING:
        return StrictStr
    if node.node_type == ShapeType.NUMBER:
        return Union[StrictInt, StrictFloat]
    if node.node_type == ShapeType.BOOLEAN:
        return StrictBool
    if node.node_type == ShapeType.ARRAY:
        return list[_items_annotation(node, name)]
    if node.node_type == ShapeType.OBJECT:
        return _object_model(node, name)
    raise ValueError(f"Unknown shape type: {node.node_type}")


def _items_annotation(node: SchemaNode, name: str) -> Any:
    if not node.items:
        return Any
    variants = [
        _annotation_for(item, name=f"{name}_item{i}")
        for i, item in enumerate(node.items)
    ]
    if len(variants) == 1:
        return variants[0]
    return Union[tuple(variants)]


def _object_model(node: SchemaNode, name: str) -> type:
    """
    Create a model for an object shape.

    Property names go through aliases so arbitrary document keys
    ("cardId", "_meta", "schema") never collide with model attributes.
    """
    fields: dict[str, Any] = {}
    for i, (prop_name, prop) in enumerate(node.properties.items()):
        annotation = _annotation_for(prop, name=f"{name}_{prop_name}")
        if prop.required:
            fields[f"field_{i}"] = (annotation, Field(..., alias=prop_name))
        else:
            fields[f"field_{i}"] = (Optional[annotation], Field(None, alias=prop_name))

    config = ConfigDict(extra="forbid" if node.strict else "ignore")
    model_name = "".join(c if c.isalnum() else "_" for c in f"Shape_{name}")
    return create_model(model_name, __config__=config, **fields)
