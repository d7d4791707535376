"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between HTTP clients and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- GAME_NOT_FOUND: Game does not exist or was ended
- UNKNOWN_GAME_TYPE: No builtin game with that name
- INVALID_CONFIG: Config document failed to load or validate
- INVALID_PHASE: The game is not accepting that operation right now
- NOT_FOUND: The request references an unknown player, card, container or action
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ActionTypeName(str, Enum):
    """Submittable action types."""
    FLIP = "flip"
    MOVE = "move"
    SHUFFLE = "shuffle"


class OutcomeName(str, Enum):
    """How an action submission ended."""
    COMPLETED = "completed"
    DENIED = "denied"
    FAILED = "failed"


class ErrorCode(str, Enum):
    """Structured error codes."""
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    UNKNOWN_GAME_TYPE = "UNKNOWN_GAME_TYPE"
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_PHASE = "INVALID_PHASE"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """A card as seen by clients. Face-down cards outside hands hide their type."""
    card_id: str
    card_type_id: Optional[str] = None
    is_face_up: bool = False


class ContainerInfo(BaseModel):
    """Container information for display."""
    container_id: str
    container_type: str = Field(description="deck, trash, hand, field")
    owner: Optional[str] = None
    max_cards: Optional[int] = None
    card_count: int = 0
    cards: list[CardInfo] = Field(default_factory=list)


class PlayerInfo(BaseModel):
    """Player information for display."""
    player_id: str
    roles: list[str] = Field(default_factory=list)
    is_current_turn: bool = False


class RankingEntryInfo(BaseModel):
    """One row of the final ranking."""
    player_id: str
    value: Any = None
    rank: int


# =============================================================================
# Request Models
# =============================================================================

class CreateGameRequest(BaseModel):
    """Request to create a game."""
    game_type: str = Field("memory", description="Builtin game to create")
    config: Optional[dict[str, Any]] = Field(
        None, description="Config document; its functions must all be builtin"
    )
    seed: Optional[int] = Field(None, description="Seed for deterministic shuffles")


class SubmitActionRequest(BaseModel):
    """A player action."""
    player_id: str = Field(..., description="Acting player")
    action_type: ActionTypeName
    fields: dict[str, Any] = Field(
        default_factory=dict,
        description="Action fields, e.g. containerId, cardId, targetContainerId",
    )


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameResponse(BaseModel):
    """Full view of a game."""
    game_id: str
    config_id: str
    phase: str
    current_player: Optional[str] = None
    turn_order: list[str] = Field(default_factory=list)
    players: list[PlayerInfo] = Field(default_factory=list)
    containers: list[ContainerInfo] = Field(default_factory=list)
    values: dict[str, Any] = Field(default_factory=dict, description="Named state values")
    ranking: Optional[list[RankingEntryInfo]] = None


class ActionResponse(BaseModel):
    """Result of submitting an action."""
    outcome: OutcomeName
    action_type: ActionTypeName
    player_id: str
    traces: dict[str, list[str]] = Field(
        default_factory=dict, description="Effect ids traversed per stage"
    )
    permission_rule: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    effect_id: Optional[str] = None
    game_over: bool = False
    game: GameResponse


class RankingResponse(BaseModel):
    """Final ranking of a finished game."""
    game_id: str
    finished: bool
    ranking: list[RankingEntryInfo] = Field(default_factory=list)


class GameListResponse(BaseModel):
    """List of active games."""
    games: list[str]
    count: int


class EndGameResponse(BaseModel):
    """Response from ending a game."""
    success: bool
    game_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    service: str = "tabula-engine"
    version: str = "1.0.0"
