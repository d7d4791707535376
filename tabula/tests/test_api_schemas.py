"""
Tests for API Pydantic schemas.

Validates that:
- Request/response models serialize correctly
- Error codes are properly structured
- The OpenAPI schema covers every endpoint
"""

import pytest
from pydantic import ValidationError


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_game_response_schema(self):
        """GameResponse has all required fields."""
        from ..api.schemas import CardInfo, ContainerInfo, GameResponse, PlayerInfo

        response = GameResponse(
            game_id="game-123",
            config_id="memory",
            phase="awaiting_action",
            current_player="player1",
            turn_order=["player1", "player2"],
            players=[
                PlayerInfo(player_id="player1", roles=["currentPlayer", "player"], is_current_turn=True),
                PlayerInfo(player_id="player2", roles=["player"]),
            ],
            containers=[
                ContainerInfo(
                    container_id="field1",
                    container_type="field",
                    max_cards=1,
                    card_count=1,
                    cards=[CardInfo(card_id="card1#1")],
                ),
            ],
        )

        data = response.model_dump()
        assert data["phase"] == "awaiting_action"
        assert data["players"][0]["is_current_turn"] is True
        assert data["containers"][0]["cards"][0]["card_type_id"] is None
        assert data["ranking"] is None

    def test_action_response_schema(self):
        from ..api.schemas import ActionResponse, GameResponse, OutcomeName

        response = ActionResponse(
            outcome=OutcomeName.COMPLETED,
            action_type="flip",
            player_id="player1",
            traces={"effects": ["flipCard"], "after": ["findFaceUpCards", "whenTwoFaceUp"]},
            permission_rule="base",
            game=GameResponse(game_id="g", config_id="memory", phase="awaiting_action"),
        )

        data = response.model_dump(mode="json")
        assert data["outcome"] == "completed"
        assert data["action_type"] == "flip"
        assert data["traces"]["after"] == ["findFaceUpCards", "whenTwoFaceUp"]
        assert data["game_over"] is False

    def test_submit_action_rejects_unknown_type(self):
        from ..api.schemas import SubmitActionRequest

        with pytest.raises(ValidationError):
            SubmitActionRequest(player_id="player1", action_type="deal")

    def test_create_game_defaults(self):
        from ..api.schemas import CreateGameRequest

        request = CreateGameRequest()
        assert request.game_type == "memory"
        assert request.config is None
        assert request.seed is None

    def test_error_response_schema(self):
        from ..api.schemas import ErrorCode, ErrorResponse

        error = ErrorResponse(
            error="Game 'x' not found",
            error_code=ErrorCode.GAME_NOT_FOUND,
        )

        data = error.model_dump(mode="json")
        assert data["error_code"] == "GAME_NOT_FOUND"
        assert data["api_version"] == "v1"


class TestErrorCodes:
    """Tests for error code coverage."""

    def test_all_error_codes_defined(self):
        """All required error codes are defined."""
        from ..api.schemas import ErrorCode

        required_codes = [
            "GAME_NOT_FOUND",
            "UNKNOWN_GAME_TYPE",
            "INVALID_CONFIG",
            "INVALID_PHASE",
            "NOT_FOUND",
        ]

        for code in required_codes:
            assert hasattr(ErrorCode, code), f"Missing error code: {code}"
            assert ErrorCode[code].value == code

    def test_error_code_values_are_strings(self):
        """Error codes are string enums for JSON serialization."""
        from ..api.schemas import ErrorCode

        for code in ErrorCode:
            assert isinstance(code.value, str)
            assert code.value == code.value.upper()


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    @pytest.fixture
    def schema(self):
        from fastapi.openapi.utils import get_openapi

        from ..api.app import create_app

        app = create_app()
        return get_openapi(title=app.title, version=app.version, routes=app.routes)

    def test_openapi_schema_generates(self, schema):
        assert "paths" in schema
        assert "schemas" in schema["components"]

    def test_response_models_in_schema(self, schema):
        schemas = schema["components"]["schemas"]

        for name in ["GameResponse", "ActionResponse", "RankingResponse", "ErrorResponse"]:
            assert name in schemas, f"Missing schema: {name}"

    def test_endpoints_have_response_models(self, schema):
        paths = schema["paths"]

        assert "200" in paths["/api/v1/games"]["post"]["responses"]
        assert "200" in paths["/api/v1/games/{game_id}"]["get"]["responses"]
        assert "200" in paths["/api/v1/games/{game_id}/actions"]["post"]["responses"]
        assert "409" in paths["/api/v1/games/{game_id}/ranking"]["get"]["responses"]
