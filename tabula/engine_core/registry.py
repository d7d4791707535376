"""
Function Registry - Maps function ids to host-supplied callables.

Functions are the only way effects touch state. A function is a plain
callable `handler(state, request) -> response`; it may mutate the state
freely and returns a JSON-like value that becomes the next effect's
previous output.

Optional request/response shapes are checked on every invocation.

Usage:
    registry = FunctionRegistry()

    @registry.function("countCards")
    def count_cards(state, request):
        return {"count": state.get_container(request["containerId"]).count}
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, TYPE_CHECKING

from ..config_schema.identifiers import FunctionId
from ..config_schema.shapes import CompiledShape, SchemaNode
from ..errors import DuplicateFunction, FunctionExecutionError, SchemaViolation, UnknownFunction

if TYPE_CHECKING:
    from .state import GameState

logger = logging.getLogger(__name__)

Handler = Callable[["GameState", Any], Any]


@dataclass
class GameFunction:
    """A registered function with its compiled shapes."""
    function_id: FunctionId
    handler: Handler
    request_shape: CompiledShape | None = None
    response_shape: CompiledShape | None = None


class FunctionRegistry:
    """
    Registry of callables keyed by function id.

    Invocation is synchronous. Anything a handler raises, engine errors
    included, is wrapped in FunctionExecutionError.
    """

    def __init__(self):
        self._functions: dict[FunctionId, GameFunction] = {}

    def __contains__(self, function_id: str) -> bool:
        return function_id in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    @property
    def function_ids(self) -> list[FunctionId]:
        return list(self._functions)

    def register(
        self,
        function_id: str,
        handler: Handler,
        request_shape: SchemaNode | None = None,
        response_shape: SchemaNode | None = None,
    ) -> GameFunction:
        """Register a handler. Raises DuplicateFunction if the id is taken."""
        fid = FunctionId(function_id)
        if fid in self._functions:
            raise DuplicateFunction(function_id)

        fn = GameFunction(
            function_id=fid,
            handler=handler,
            request_shape=CompiledShape(request_shape) if request_shape else None,
            response_shape=CompiledShape(response_shape) if response_shape else None,
        )
        self._functions[fid] = fn
        logger.debug("Registered function '%s'", function_id)
        return fn

    def function(
        self,
        function_id: str,
        request_shape: SchemaNode | None = None,
        response_shape: SchemaNode | None = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator form of register()."""
        def decorator(handler: Handler) -> Handler:
            self.register(function_id, handler, request_shape, response_shape)
            return handler
        return decorator

    def bind_shapes(
        self,
        function_id: str,
        request_shape: SchemaNode | None = None,
        response_shape: SchemaNode | None = None,
    ):
        """
        Attach shapes declared by a config to an already registered handler.

        Shapes already set at registration are kept when the config is silent.
        """
        fn = self.get(function_id)
        if request_shape is not None:
            fn.request_shape = CompiledShape(request_shape)
        if response_shape is not None:
            fn.response_shape = CompiledShape(response_shape)

    def get(self, function_id: str) -> GameFunction:
        fn = self._functions.get(FunctionId(function_id))
        if fn is None:
            raise UnknownFunction(function_id)
        return fn

    def invoke(self, function_id: str, request: Any, state: GameState) -> Any:
        """
        Invoke a function.

        Raises:
            UnknownFunction: nothing is registered under the id
            SchemaViolation: the request or response does not match its shape
            FunctionExecutionError: the handler raised
        """
        fn = self.get(function_id)

        if fn.request_shape is not None:
            violations = fn.request_shape.check(request)
            if violations:
                raise SchemaViolation(function_id, "request", violations)

        logger.debug("Invoking '%s' with %r", function_id, request)
        try:
            response = fn.handler(state, request)
        except Exception as e:
            raise FunctionExecutionError(function_id, e) from e

        if fn.response_shape is not None:
            violations = fn.response_shape.check(response)
            if violations:
                raise SchemaViolation(function_id, "response", violations)

        return response
