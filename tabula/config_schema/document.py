"""
Config Document - Load a JSON-shaped game document into a GameConfig.

Documents use camelCase keys:

    {
        "gameId": "memory",
        "functions": {"flipCard": {"request": {...}, "response": {...}}},
        "cardPool": {"A": {}, "B": {}},
        "containers": {"deck": {"type": "deck", "maxCards": 4, "initialCards": {"A": 2}}},
        "players": {"p1": {"initialRoles": ["player", "currentPlayer"]}},
        "actions": {"flip": {"permissions": {...}, "effects": {...}, "after": "checkMatch"}},
        "roles": ["player", "currentPlayer"],
        "turnOrder": ["p1", "p2"],
        "endConditions": [{"function": "countCards", "referenceKey": "count", ...}],
        "resultOrder": {"function": "handSizes", "referenceKey": "count", "by": "desc"},
        "globalEffects": {...},
        "initialize": ["shuffleDeck"]
    }

Effects are tagged by "type" ("function" or "switch"). Parsing is done by
pydantic models that mirror the document; the models are then converted into
the immutable config dataclasses.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..errors import ConfigValidationError
from .effect_graph import (
    Effect,
    EffectGraph,
    FunctionEffect,
    MapperEntry,
    MapperNode,
    MapperNodeType,
    MapperSource,
    SwitchEffect,
)
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
from .identifiers import CardTypeId, ContainerId, EffectId, FunctionId, PlayerId, Role
from .shapes import SchemaNode, ShapeType
from .validation import validate_config

logger = logging.getLogger(__name__)


class _DocModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# =============================================================================
# Document models
# =============================================================================

class ShapeDoc(_DocModel):
    """Declared request/response shape."""
    type: ShapeType
    key: str = ""
    required: bool = True
    strict: bool = False
    properties: dict[str, ShapeDoc] = Field(default_factory=dict)
    items: list[ShapeDoc] = Field(default_factory=list)


class FunctionDoc(_DocModel):
    request: Optional[ShapeDoc] = None
    response: Optional[ShapeDoc] = None


class MapperEntryDoc(_DocModel):
    source: MapperSource
    value: Any = None


class MapperNodeDoc(_DocModel):
    type: MapperNodeType
    entry: Optional[MapperEntryDoc] = None
    properties: dict[str, MapperNodeDoc] = Field(default_factory=dict)
    items: list[MapperNodeDoc] = Field(default_factory=list)


class FunctionEffectDoc(_DocModel):
    type: Literal["function"]
    id: Optional[str] = None
    function: str
    request_mapper: Optional[MapperNodeDoc] = None
    response_mapper: Optional[MapperNodeDoc] = None
    next: Optional[str] = None
    error: Optional[str] = None


class SwitchEffectDoc(_DocModel):
    type: Literal["switch"]
    id: Optional[str] = None
    reference_key: str
    cases: dict[str, str] = Field(default_factory=dict)
    default: Optional[str] = None
    error: Optional[str] = None


EffectDoc = Annotated[Union[FunctionEffectDoc, SwitchEffectDoc], Field(discriminator="type")]


class OverrideDoc(_DocModel):
    condition: dict[str, str] = Field(default_factory=dict)
    allowed: list[str] = Field(default_factory=list)
    denied: list[str] = Field(default_factory=list)


class PermissionsDoc(_DocModel):
    allowed: list[str] = Field(default_factory=list)
    denied: list[str] = Field(default_factory=list)
    overrides: list[OverrideDoc] = Field(default_factory=list)


class ActionDoc(_DocModel):
    permissions: PermissionsDoc = Field(default_factory=PermissionsDoc)
    effects: dict[str, EffectDoc] = Field(default_factory=dict)
    entry: Optional[str] = None
    before: Optional[str] = None
    after: Optional[str] = None


class CardTypeDoc(_DocModel):
    actions: dict[ActionType, ActionDoc] = Field(default_factory=dict)


class ContainerDoc(_DocModel):
    type: ContainerType
    max_cards: Optional[int] = None
    initial_cards: dict[str, int] = Field(default_factory=dict)
    owner: Optional[str] = None
    actions: dict[ActionType, ActionDoc] = Field(default_factory=dict)


class PlayerDoc(_DocModel):
    initial_roles: list[str] = Field(default_factory=list)


class EndConditionDoc(_DocModel):
    function: str
    reference_key: str
    additional_params: dict[str, Any] = Field(default_factory=dict)
    operator: Comparator = Comparator.TRUTHY
    value: Any = None


class ResultOrderDoc(_DocModel):
    function: str
    reference_key: str
    additional_params: dict[str, Any] = Field(default_factory=dict)
    by: SortDirection = SortDirection.DESC
    participant_key: str = "playerId"


class GameDocument(_DocModel):
    """The whole game document."""
    game_id: str
    name: str = ""
    functions: dict[str, FunctionDoc] = Field(default_factory=dict)
    card_pool: dict[str, CardTypeDoc] = Field(default_factory=dict)
    containers: dict[str, ContainerDoc] = Field(default_factory=dict)
    players: dict[str, PlayerDoc] = Field(default_factory=dict)
    actions: dict[ActionType, ActionDoc] = Field(default_factory=dict)
    roles: list[str] = Field(default_factory=list)
    turn_order: list[str] = Field(default_factory=list)
    end_conditions: list[EndConditionDoc] = Field(default_factory=list)
    result_order: Optional[ResultOrderDoc] = None
    global_effects: dict[str, EffectDoc] = Field(default_factory=dict)
    initialize: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


ShapeDoc.model_rebuild()
MapperNodeDoc.model_rebuild()


# =============================================================================
# Loading
# =============================================================================

def load_config(document: dict[str, Any], validate: bool = True) -> GameConfig:
    """
    Parse a document dict into a GameConfig.

    Raises ConfigValidationError if the document is malformed or, when
    `validate` is set, if cross-reference validation fails.
    """
    try:
        doc = GameDocument.model_validate(document)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigValidationError(errors) from e

    config = _to_config(doc)

    if validate:
        result = validate_config(config, raise_on_error=True)
        for warning in result.warnings:
            logger.warning("Config '%s': %s", config.game_id, warning)

    logger.info(
        "Loaded config '%s' (%d containers, %d players, %d global effects)",
        config.game_id,
        len(config.containers),
        len(config.players),
        len(config.global_effects),
    )
    return config


def load_config_file(path: str | Path, validate: bool = True) -> GameConfig:
    """Load a GameConfig from a JSON file."""
    with open(path, encoding="utf-8") as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError([f"{path}: invalid JSON: {e}"]) from e
    return load_config(document, validate=validate)


# =============================================================================
# Conversion to config dataclasses
# =============================================================================

def _to_config(doc: GameDocument) -> GameConfig:
    return GameConfig(
        game_id=doc.game_id,
        name=doc.name,
        functions={
            FunctionId(fid): FunctionDefinition(
                function_id=FunctionId(fid),
                request_shape=_to_shape(f.request) if f.request else None,
                response_shape=_to_shape(f.response) if f.response else None,
            )
            for fid, f in doc.functions.items()
        },
        card_pool={
            CardTypeId(tid): CardType(card_type_id=CardTypeId(tid), actions=_to_actions(t.actions))
            for tid, t in doc.card_pool.items()
        },
        containers={
            ContainerId(cid): ContainerDefinition(
                container_id=ContainerId(cid),
                container_type=c.type,
                max_cards=c.max_cards,
                initial_cards={CardTypeId(k): v for k, v in c.initial_cards.items()},
                owner=PlayerId(c.owner) if c.owner else None,
                actions=_to_actions(c.actions),
            )
            for cid, c in doc.containers.items()
        },
        players={
            PlayerId(pid): PlayerDefinition(
                player_id=PlayerId(pid),
                initial_roles=[Role(r) for r in p.initial_roles],
            )
            for pid, p in doc.players.items()
        },
        actions=_to_actions(doc.actions),
        roles=[Role(r) for r in doc.roles],
        turn_order=[PlayerId(p) for p in doc.turn_order],
        end_conditions=[
            EndCondition(
                function=FunctionId(e.function),
                reference_key=e.reference_key,
                additional_params=e.additional_params,
                operator=e.operator,
                value=e.value,
            )
            for e in doc.end_conditions
        ],
        result_order=_to_result_order(doc.result_order),
        global_effects=_to_graph(doc.global_effects),
        initialize=[EffectId(e) for e in doc.initialize],
        metadata=doc.metadata,
    )


def _to_shape(doc: ShapeDoc) -> SchemaNode:
    return SchemaNode(
        node_type=doc.type,
        key=doc.key,
        required=doc.required,
        strict=doc.strict,
        properties={name: _to_shape(p) for name, p in doc.properties.items()},
        items=[_to_shape(i) for i in doc.items],
    )


def _to_mapper(doc: MapperNodeDoc) -> MapperNode:
    entry = None
    if doc.entry is not None:
        entry = MapperEntry(source=doc.entry.source, value=doc.entry.value)
    return MapperNode(
        node_type=doc.type,
        entry=entry,
        properties={name: _to_mapper(p) for name, p in doc.properties.items()},
        items=[_to_mapper(i) for i in doc.items],
    )


def _to_effect(effect_id: str, doc: FunctionEffectDoc | SwitchEffectDoc) -> Effect:
    # An explicit id must agree with its key; validation reports mismatches
    eid = EffectId(doc.id or effect_id)
    if isinstance(doc, FunctionEffectDoc):
        return FunctionEffect(
            effect_id=eid,
            function=FunctionId(doc.function),
            request_mapper=(
                _to_mapper(doc.request_mapper)
                if doc.request_mapper
                else MapperNode(node_type=MapperNodeType.OBJECT)
            ),
            response_mapper=_to_mapper(doc.response_mapper) if doc.response_mapper else None,
            next=EffectId(doc.next) if doc.next else None,
            error=EffectId(doc.error) if doc.error else None,
        )
    return SwitchEffect(
        effect_id=eid,
        reference_key=doc.reference_key,
        cases={k: EffectId(v) for k, v in doc.cases.items()},
        default=EffectId(doc.default) if doc.default else None,
        error=EffectId(doc.error) if doc.error else None,
    )


def _to_graph(effects: dict[str, Any]) -> EffectGraph:
    return {EffectId(eid): _to_effect(eid, e) for eid, e in effects.items()}


def _to_actions(actions: dict[ActionType, ActionDoc]) -> dict[ActionType, Action]:
    return {action_type: _to_action(a) for action_type, a in actions.items()}


def _to_action(doc: ActionDoc) -> Action:
    return Action(
        permissions=PermissionRule(
            allowed=[Role(r) for r in doc.permissions.allowed],
            denied=[Role(r) for r in doc.permissions.denied],
            overrides=[
                PermissionOverride(
                    condition=dict(o.condition),
                    allowed=[Role(r) for r in o.allowed],
                    denied=[Role(r) for r in o.denied],
                )
                for o in doc.permissions.overrides
            ],
        ),
        effects=_to_graph(doc.effects),
        entry=EffectId(doc.entry) if doc.entry else None,
        before=EffectId(doc.before) if doc.before else None,
        after=EffectId(doc.after) if doc.after else None,
    )


def _to_result_order(doc: ResultOrderDoc | None) -> ResultOrder | None:
    if doc is None:
        return None
    return ResultOrder(
        function=FunctionId(doc.function),
        reference_key=doc.reference_key,
        additional_params=doc.additional_params,
        by=doc.by,
        participant_key=doc.participant_key,
    )
