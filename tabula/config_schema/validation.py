"""
Config Validation - Load-time checks for game configurations.

Validates that:
1. Required fields are present
2. References are valid (players, card types, containers, functions)
3. Every effect edge resolves inside its own graph
4. Mapper trees and permission patterns are well-formed

A config that passes validation never hits a dangling edge at runtime.
"""

from __future__ import annotations
import re
from dataclasses import dataclass

from .effect_graph import (
    SCALAR_NODE_TYPES,
    EffectGraph,
    FunctionEffect,
    MapperNode,
    MapperSource,
    SwitchEffect,
)
from ..errors import ConfigValidationError
from .game_config import ACTION_CONDITION_FIELDS, CARD_ACTION_TYPES, Action, ActionType, GameConfig


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_config(config: GameConfig, raise_on_error: bool = False) -> ValidationResult:
    """
    Validate a complete game configuration.

    Returns ValidationResult with errors and warnings.
    Raises ConfigValidationError if raise_on_error=True and errors exist.
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not config.game_id:
        errors.append("game_id is required")

    declared_roles = set(config.roles)

    # Players and turn order
    if not config.players:
        warnings.append("No players defined")
    for player in config.players.values():
        for role in player.initial_roles:
            if role not in declared_roles:
                warnings.append(f"Player '{player.player_id}' has undeclared role '{role}'")
    for player_id in config.turn_order:
        if player_id not in config.players:
            errors.append(f"Turn order references unknown player '{player_id}'")
    if config.players and not config.turn_order:
        errors.append("turn_order is empty")

    # Containers
    for container in config.containers.values():
        errors.extend(_validate_container(config, container))

    # Global effect graph
    errors.extend(_validate_graph(config, config.global_effects, "global effects"))
    for effect_id in config.initialize:
        if effect_id not in config.global_effects:
            errors.append(f"Initialization references unknown effect '{effect_id}'")

    # Actions, including per-container and per-card-type overrides
    for scope, action_type, action in config.iter_actions():
        label = f"Action '{action_type.value}' ({scope})"
        errors.extend(_validate_action(config, action, label))
        warnings.extend(_action_warnings(action, action_type, label, declared_roles))
        if scope.startswith("card type") and action_type not in CARD_ACTION_TYPES:
            errors.append(f"{label}: card types cannot override '{action_type.value}'")

    # End-of-game evaluation
    for i, condition in enumerate(config.end_conditions):
        if config.functions and condition.function not in config.functions:
            warnings.append(
                f"End condition {i} uses undeclared function '{condition.function}'"
            )
        if not condition.reference_key:
            errors.append(f"End condition {i} has no reference_key")
    if config.result_order is None:
        warnings.append("No result order defined")
    elif config.functions and config.result_order.function not in config.functions:
        warnings.append(
            f"Result order uses undeclared function '{config.result_order.function}'"
        )
    if not config.end_conditions:
        warnings.append("No end conditions defined - game can never finish")

    result = ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )
    if raise_on_error and errors:
        raise ConfigValidationError(errors)
    return result


def _validate_container(config: GameConfig, container) -> list[str]:
    """Validate a single container definition."""
    errors = []
    cid = container.container_id

    if container.max_cards is not None and container.max_cards < 0:
        errors.append(f"Container '{cid}' has negative max_cards")

    total = 0
    for card_type_id, count in container.initial_cards.items():
        if card_type_id not in config.card_pool:
            errors.append(f"Container '{cid}' references unknown card type '{card_type_id}'")
        if count < 0:
            errors.append(f"Container '{cid}' has negative count for '{card_type_id}'")
        total += count

    if container.max_cards is not None and total > container.max_cards:
        errors.append(
            f"Container '{cid}' starts with {total} cards but holds at most {container.max_cards}"
        )

    if container.owner and container.owner not in config.players:
        errors.append(f"Container '{cid}' is owned by unknown player '{container.owner}'")

    return errors


def _validate_action(config: GameConfig, action: Action, label: str) -> list[str]:
    """Validate an action's graph, entry and hooks."""
    errors = _validate_graph(config, action.effects, label)

    if action.entry and action.entry not in action.effects:
        errors.append(f"{label}: entry '{action.entry}' is not in the action's effects")

    for hook_name, hook in (("before", action.before), ("after", action.after)):
        if hook and hook not in action.effects and hook not in config.global_effects:
            errors.append(f"{label}: {hook_name} hook references unknown effect '{hook}'")

    for i, override in enumerate(action.permissions.overrides):
        for field_name, pattern in override.condition.items():
            try:
                re.compile(pattern)
            except re.error as e:
                errors.append(
                    f"{label}: override {i} has invalid pattern for '{field_name}': {e}"
                )

    return errors


def _action_warnings(
    action: Action, action_type: ActionType, label: str, declared_roles: set
) -> list[str]:
    warnings = []
    rules = [action.permissions] + list(action.permissions.overrides)
    for rule in rules:
        for role in list(rule.allowed) + list(rule.denied):
            if role not in declared_roles:
                warnings.append(f"{label}: permission references undeclared role '{role}'")

    known_fields = set(ACTION_CONDITION_FIELDS.get(action_type, ()))
    for override in action.permissions.overrides:
        for field_name in override.condition:
            if field_name not in known_fields:
                warnings.append(
                    f"{label}: override condition on '{field_name}' is not a "
                    f"'{action_type.value}' field and only matches if the request supplies it"
                )
    return warnings


def _validate_graph(config: GameConfig, graph: EffectGraph, label: str) -> list[str]:
    """
    Validate an effect graph.

    Every next/error/case/default edge must name an effect in the same graph.
    """
    errors = []

    for key, effect in graph.items():
        if key != effect.effect_id:
            errors.append(f"{label}: effect stored as '{key}' declares id '{effect.effect_id}'")

        for target in effect.edges():
            if target not in graph:
                errors.append(
                    f"{label}: effect '{effect.effect_id}' has dangling edge to '{target}'"
                )

        if isinstance(effect, FunctionEffect):
            if config.functions and effect.function not in config.functions:
                errors.append(
                    f"{label}: effect '{effect.effect_id}' calls undeclared function "
                    f"'{effect.function}'"
                )
            errors.extend(
                f"{label}: effect '{effect.effect_id}' request mapper: {e}"
                for e in _validate_mapper(effect.request_mapper)
            )
            if effect.response_mapper is not None:
                errors.extend(
                    f"{label}: effect '{effect.effect_id}' response mapper: {e}"
                    for e in _validate_mapper(effect.response_mapper)
                )
        elif isinstance(effect, SwitchEffect):
            if not effect.reference_key:
                errors.append(f"{label}: switch '{effect.effect_id}' has no reference_key")
        else:
            errors.append(f"{label}: unknown effect kind {type(effect).__name__}")

    return errors


def _validate_mapper(node: MapperNode, path: str = "$") -> list[str]:
    """Validate mapper tree structure (not the paths it reads)."""
    errors = []

    if node.entry is not None:
        if node.entry.source != MapperSource.LITERAL and not isinstance(node.entry.value, str):
            errors.append(f"{path}: {node.entry.source.value} entry needs a string path")
        return errors

    if node.node_type in SCALAR_NODE_TYPES:
        errors.append(f"{path}: {node.node_type.value} node has no entry")

    for name, child in node.properties.items():
        errors.extend(_validate_mapper(child, f"{path}.{name}"))
    for i, child in enumerate(node.items):
        errors.extend(_validate_mapper(child, f"{path}[{i}]"))

    return errors
