"""
Permission Resolver - Decide whether an actor may perform an action.

Rules:
1. Base lists: explicit deny wins over allow; no match means deny.
2. Overrides are checked in declaration order. An override matches when
   every condition field is present in the field snapshot and its value
   full-matches the pattern.
3. A matching override replaces the current decision, using its own lists
   with the same deny/allow/default rule. The last matching override wins.

Field values are stringified before matching: booleans become "true" and
"false", None becomes "null".
"""

from __future__ import annotations
import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable

from ..config_schema.game_config import PermissionOverride, PermissionRule
from ..errors import PermissionDenied

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PermissionDecision:
    """
    Outcome of a permission check.

    `rule` names what decided it: "base" or "override[i]". `role` is the
    role that matched the deciding list, if any.
    """
    allowed: bool
    rule: str
    role: str | None = None


def stringify_field(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def override_matches(override: PermissionOverride, fields: dict[str, Any]) -> bool:
    for field_name, pattern in override.condition.items():
        if field_name not in fields:
            return False
        if re.fullmatch(pattern, stringify_field(fields[field_name])) is None:
            return False
    return True


def _decide(allowed: Iterable[str], denied: Iterable[str], roles: set[str], rule: str) -> PermissionDecision:
    for role in denied:
        if role in roles:
            return PermissionDecision(allowed=False, rule=rule, role=role)
    for role in allowed:
        if role in roles:
            return PermissionDecision(allowed=True, rule=rule, role=role)
    return PermissionDecision(allowed=False, rule=rule)


class PermissionResolver:
    """Evaluates PermissionRules. Stateless and deterministic."""

    def evaluate(
        self,
        rule: PermissionRule,
        roles: Iterable[str],
        fields: dict[str, Any] | None = None,
    ) -> PermissionDecision:
        roles = set(roles)
        fields = fields or {}

        decision = _decide(rule.allowed, rule.denied, roles, "base")
        for i, override in enumerate(rule.overrides):
            if override_matches(override, fields):
                decision = _decide(override.allowed, override.denied, roles, f"override[{i}]")

        logger.debug(
            "Permission %s by %s for roles %s",
            "allowed" if decision.allowed else "denied",
            decision.rule,
            sorted(roles),
        )
        return decision

    def enforce(
        self,
        rule: PermissionRule,
        roles: Iterable[str],
        fields: dict[str, Any] | None = None,
        action_type: str = "act",
        player_id: str = "",
    ) -> PermissionDecision:
        """Like evaluate(), but raises PermissionDenied on a deny."""
        decision = self.evaluate(rule, roles, fields)
        if not decision.allowed:
            raise PermissionDenied(action_type, player_id, decision.rule)
        return decision
