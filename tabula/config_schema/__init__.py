"""Game configuration schema - identifiers, config aggregate, effect graphs and shapes."""

from .identifiers import CardTypeId, ContainerId, EffectId, FunctionId, PlayerId, Role
from .effect_graph import (
    Effect,
    EffectGraph,
    FunctionEffect,
    SwitchEffect,
    MapperEntry,
    MapperNode,
    MapperNodeType,
    MapperSource,
)
from .shapes import CompiledShape, SchemaNode, ShapeType
from .game_config import (
    Action,
    ActionType,
    CardType,
    Comparator,
    ContainerDefinition,
    ContainerType,
    EndCondition,
    FunctionDefinition,
    GameConfig,
    PermissionOverride,
    PermissionRule,
    PlayerDefinition,
    ResultOrder,
    SortDirection,
)
from .validation import ValidationResult, validate_config
from .document import load_config, load_config_file

__all__ = [
    "CardTypeId",
    "ContainerId",
    "EffectId",
    "FunctionId",
    "PlayerId",
    "Role",
    "Effect",
    "EffectGraph",
    "FunctionEffect",
    "SwitchEffect",
    "MapperEntry",
    "MapperNode",
    "MapperNodeType",
    "MapperSource",
    "CompiledShape",
    "SchemaNode",
    "ShapeType",
    "Action",
    "ActionType",
    "CardType",
    "Comparator",
    "ContainerDefinition",
    "ContainerType",
    "EndCondition",
    "FunctionDefinition",
    "GameConfig",
    "PermissionOverride",
    "PermissionRule",
    "PlayerDefinition",
    "ResultOrder",
    "SortDirection",
    "ValidationResult",
    "validate_config",
    "load_config",
    "load_config_file",
]
