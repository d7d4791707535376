"""
FastAPI Application - REST API for running declarative card games.

Endpoints:
    POST   /api/v1/games                  Create and start a game
    GET    /api/v1/games                  List active games
    GET    /api/v1/games/{id}             Get game state
    POST   /api/v1/games/{id}/actions     Submit a player action
    GET    /api/v1/games/{id}/ranking     Get the final ranking
    DELETE /api/v1/games/{id}             End a game
    GET    /health                        Health check

Actions are processed one at a time per game. A denied or failed action is
a normal 200 response whose `outcome` says what happened; only unknown
games, bad references and wrong phases are errors.
"""

from typing import Union
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .service import GameService
from .schemas import (
    ActionResponse,
    CreateGameRequest,
    EndGameResponse,
    ErrorCode,
    ErrorResponse,
    GameListResponse,
    GameResponse,
    HealthResponse,
    RankingResponse,
    SubmitActionRequest,
)

# Environment configuration
TABULA_ENV = os.getenv("TABULA_ENV", "development")
TABULA_LOG_LEVEL = os.getenv("TABULA_LOG_LEVEL", "INFO")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.GAME_NOT_FOUND: 404,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_PHASE: 409,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service: GameService | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional GameService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    logging.basicConfig(
        level=TABULA_LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Tabula Engine API",
        description="""
Declarative card game rule engine.

Games are described as data: containers of cards, players with roles,
permission rules and effect graphs. This API creates games from builtin
configs or submitted documents and plays them one action at a time.

## Error Codes

| Code | Description |
|------|-------------|
| `GAME_NOT_FOUND` | Game does not exist |
| `UNKNOWN_GAME_TYPE` | No builtin game with that name |
| `INVALID_CONFIG` | Config document failed validation |
| `INVALID_PHASE` | Operation not allowed in the current phase |
| `NOT_FOUND` | Unknown player, card, container or action |
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    game_service = service or GameService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Render an ErrorResponse with the status its code maps to."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Create and start a game",
    )
    def create_game(request: CreateGameRequest) -> Union[GameResponse, JSONResponse]:
        """
        Create a game from a builtin config, or from a submitted document
        whose functions are all builtin. Initialization runs immediately.
        """
        response = game_service.create_game(request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/games",
        response_model=GameListResponse,
        tags=["Games"],
        summary="List active games",
    )
    def list_games() -> GameListResponse:
        return game_service.list_games()

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Games"],
        summary="Get game state",
    )
    def get_game(game_id: str) -> Union[GameResponse, JSONResponse]:
        """Get the current phase, containers and players of a game."""
        response = game_service.get_game(game_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/games/{game_id}/actions",
        response_model=ActionResponse,
        responses={
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
        },
        tags=["Actions"],
        summary="Submit a player action",
    )
    def submit_action(
        game_id: str, request: SubmitActionRequest
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Submit a flip, move or shuffle.

        The response carries the outcome, the effects traversed per stage
        and the resulting game state.
        """
        response = game_service.submit_action(game_id, request)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/games/{game_id}/ranking",
        response_model=RankingResponse,
        responses={
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
        },
        tags=["Games"],
        summary="Get the final ranking",
    )
    def get_ranking(game_id: str) -> Union[RankingResponse, JSONResponse]:
        response = game_service.get_ranking(game_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.delete(
        "/api/v1/games/{game_id}",
        response_model=EndGameResponse,
        tags=["Games"],
        summary="End a game",
    )
    def end_game(game_id: str) -> EndGameResponse:
        """End a game and release it."""
        success = game_service.end_game(game_id)
        return EndGameResponse(success=success, game_id=game_id)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(status="healthy", service="tabula-engine", version="1.0.0")

    @app.get("/", tags=["System"])
    def root():
        """Root endpoint with API info."""
        return {
            "name": "Tabula Engine API",
            "version": "1.0.0",
            "env": TABULA_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    logger.info("Created Tabula API (%s)", TABULA_ENV)
    return app


# For running directly: uvicorn tabula.api.app:app
app = create_app()
