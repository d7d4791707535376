"""
Engine Core - Live game state and declarative effect execution.

The engine is the runtime that:
1. Builds a GameState from a GameConfig
2. Resolves permissions for submitted actions
3. Maps parameters from state, previous output and literals
4. Invokes registered functions through the FunctionRegistry
5. Walks effect graphs and drives the game lifecycle
"""

from .state import GameState, Card, Container, Player
from .action import ActionOutcome, ActionRequest, ActionResult
from .registry import FunctionRegistry, GameFunction
from .mapper import MappingContext, ParameterMapper, resolve_params
from .permissions import PermissionDecision, PermissionResolver
from .interpreter import EffectInterpreter, Traversal
from .lifecycle import GamePhase, LifecycleController, RankingEntry

__all__ = [
    "GameState",
    "Card",
    "Container",
    "Player",
    "ActionOutcome",
    "ActionRequest",
    "ActionResult",
    "FunctionRegistry",
    "GameFunction",
    "MappingContext",
    "ParameterMapper",
    "resolve_params",
    "PermissionDecision",
    "PermissionResolver",
    "EffectInterpreter",
    "Traversal",
    "GamePhase",
    "LifecycleController",
    "RankingEntry",
]
