"""
API Module - HTTP interface to the engine.

Exposes the engine via REST API. Clients:
1. Create a game (builtin or from a config document)
2. Read its state
3. Submit player actions
4. Fetch the final ranking

All games live in memory. Nothing is persisted.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    SubmitActionRequest,
    # Responses
    GameResponse,
    ActionResponse,
    RankingResponse,
    GameListResponse,
    EndGameResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    PlayerInfo,
    ContainerInfo,
    CardInfo,
    RankingEntryInfo,
    # Enums
    ErrorCode,
)
from .service import GameService
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "SubmitActionRequest",
    # Responses
    "GameResponse",
    "ActionResponse",
    "RankingResponse",
    "GameListResponse",
    "EndGameResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "PlayerInfo",
    "ContainerInfo",
    "CardInfo",
    "RankingEntryInfo",
    # Enums
    "ErrorCode",
    # Service
    "GameService",
    "create_app",
]
