"""
Engine Errors - The error taxonomy shared by every engine component.

Every error carries a stable machine-readable `code`. Errors raised inside
an effect traversal are annotated with the failing effect id and the trace
of effects visited so far, so a caller can see where a submission stopped.
"""

from __future__ import annotations
from typing import Any


class EngineError(Exception):
    """Base class for all engine errors."""

    code = "ENGINE_ERROR"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details
        # Filled in by the interpreter when the error escapes a traversal
        self.effect_id: str | None = None
        self.trace: list[str] = []

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.effect_id:
            data["effectId"] = self.effect_id
        return data


class NotFound(EngineError):
    """A container, player, card, function or effect reference is missing."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} '{identifier}' not found", kind=kind, identifier=identifier)
        self.kind = kind
        self.identifier = identifier


class UnknownFunction(NotFound):
    code = "UNKNOWN_FUNCTION"

    def __init__(self, function_id: str):
        super().__init__("Function", function_id)
        self.function_id = function_id


class DuplicateFunction(EngineError):
    code = "DUPLICATE_FUNCTION"

    def __init__(self, function_id: str):
        super().__init__(f"Function '{function_id}' is already registered")
        self.function_id = function_id


class SchemaViolation(EngineError):
    """A function's input or output does not match its declared shape."""

    code = "SCHEMA_VIOLATION"

    def __init__(self, function_id: str, direction: str, violations: list[str]):
        super().__init__(
            f"{direction} of '{function_id}' does not match its shape: "
            + "; ".join(violations)
        )
        self.function_id = function_id
        self.direction = direction
        self.violations = violations


class UnresolvableMapping(EngineError):
    """A mapper path or switch key is absent from its source."""

    code = "UNRESOLVABLE_MAPPING"

    def __init__(self, source: str, path: str, reason: str = ""):
        message = f"Cannot resolve '{path}' from {source}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.source = source
        self.path = path


class CyclicEffectGraph(EngineError):
    code = "CYCLIC_EFFECT_GRAPH"

    def __init__(self, limit: int, trace: list[str]):
        super().__init__(f"Effect traversal exceeded {limit} transitions")
        self.limit = limit
        self.trace = list(trace)


class FunctionExecutionError(EngineError):
    """Wraps a failure raised by a registered function itself."""

    code = "FUNCTION_EXECUTION_ERROR"

    def __init__(self, function_id: str, cause: BaseException):
        super().__init__(f"Function '{function_id}' failed: {cause!r}")
        self.function_id = function_id
        self.cause = cause
        self.cause_code: str | None = getattr(cause, "code", None)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.cause_code:
            data["causeCode"] = self.cause_code
        return data


class PermissionDenied(EngineError):
    code = "PERMISSION_DENIED"

    def __init__(self, action_type: str, player_id: str, rule: str):
        super().__init__(f"Player '{player_id}' may not {action_type} (decided by {rule})")
        self.action_type = action_type
        self.player_id = player_id
        self.rule = rule


class InvalidPhase(EngineError):
    code = "INVALID_PHASE"

    def __init__(self, operation: str, phase: str):
        super().__init__(f"Cannot {operation} while the game is {phase}")
        self.operation = operation
        self.phase = phase


class ConfigValidationError(EngineError):
    """Raised when a game config fails load-time validation."""

    code = "CONFIG_INVALID"

    def __init__(self, errors: list[str]):
        super().__init__(f"Config validation failed with {len(errors)} error(s)")
        self.errors = errors
