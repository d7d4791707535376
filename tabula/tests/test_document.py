"""
Tests for loading game documents.
"""

import json

import pytest

from ..config_schema.document import GameDocument, load_config, load_config_file
from ..config_schema.effect_graph import FunctionEffect, MapperSource, SwitchEffect
from ..config_schema.game_config import ActionType, Comparator, ContainerType, SortDirection
from ..config_schema.shapes import ShapeType
from ..errors import ConfigValidationError
from ..games.memory import memory_document


def minimal_document(**overrides):
    document = {
        "gameId": "tiny",
        "cardPool": {"A": {}},
        "containers": {"deck": {"type": "deck", "initialCards": {"A": 2}}},
        "players": {"p1": {"initialRoles": ["player"]}},
        "roles": ["player"],
        "turnOrder": ["p1"],
        "globalEffects": {
            "shuffle": {
                "type": "function",
                "function": "shuffleDeck",
                "requestMapper": {
                    "type": "object",
                    "properties": {
                        "containerId": {"type": "string", "entry": {"source": "literal", "value": "deck"}},
                    },
                },
            },
        },
        "initialize": ["shuffle"],
    }
    document.update(overrides)
    return document


class TestLoadConfig:
    """Tests for parsing documents into configs."""

    def test_minimal_document(self):
        config = load_config(minimal_document())

        assert config.game_id == "tiny"
        assert config.containers["deck"].container_type == ContainerType.DECK
        assert config.containers["deck"].initial_cards == {"A": 2}
        assert config.players["p1"].initial_roles == ["player"]
        assert config.initialize == ["shuffle"]

    def test_effects_are_discriminated_by_type(self):
        config = load_config(memory_document())

        assert isinstance(config.global_effects["findFaceUpCards"], FunctionEffect)
        switch = config.global_effects["onMatchResult"]
        assert isinstance(switch, SwitchEffect)
        assert switch.reference_key == "result"
        assert switch.cases == {"matched": "collectPair", "unmatched": "resetFlippedCards"}

    def test_mapper_entries(self):
        config = load_config(memory_document())
        collect = config.global_effects["collectPair"]
        player = collect.request_mapper.properties["playerId"]

        assert player.entry.source == MapperSource.STATE
        assert player.entry.value == "currentPlayer"

    def test_actions_and_permissions(self):
        config = load_config(memory_document())
        flip = config.actions[ActionType.FLIP]

        assert flip.permissions.allowed == ["currentPlayer"]
        assert flip.permissions.overrides[0].condition == {"isFaceUp": "true"}
        assert flip.entry_id == "flipCard"
        assert flip.after == "findFaceUpCards"

    def test_end_conditions_and_result_order(self):
        config = load_config(memory_document())

        assert config.end_conditions[0].operator == Comparator.EQ
        assert config.end_conditions[0].additional_params == {"containerType": "field"}
        assert config.result_order.by == SortDirection.DESC

    def test_function_shapes(self):
        config = load_config(memory_document())
        request = config.functions["flipCard"].request_shape

        assert request.node_type == ShapeType.OBJECT
        assert request.strict
        assert request.properties["cardId"].node_type == ShapeType.STRING

    def test_snake_case_keys_accepted(self):
        document = minimal_document()
        document["game_id"] = document.pop("gameId")

        assert load_config(document).game_id == "tiny"


class TestInvalidDocuments:
    """Tests for malformed documents."""

    def test_unknown_effect_type(self):
        document = minimal_document()
        document["globalEffects"]["shuffle"]["type"] = "loop"

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(document)
        assert any("globalEffects.shuffle" in e for e in exc_info.value.errors)

    def test_missing_game_id(self):
        document = minimal_document()
        del document["gameId"]

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(document)
        assert any(e.startswith("gameId") for e in exc_info.value.errors)

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigValidationError):
            load_config(minimal_document(scoring={"points": 1}))

    def test_cross_reference_errors(self):
        document = minimal_document(initialize=["deal"])

        with pytest.raises(ConfigValidationError) as exc_info:
            load_config(document)
        assert any("unknown effect 'deal'" in e for e in exc_info.value.errors)

    def test_validation_can_be_skipped(self):
        config = load_config(minimal_document(initialize=["deal"]), validate=False)
        assert config.initialize == ["deal"]


class TestLoadConfigFile:
    """Tests for loading from disk."""

    def test_round_trip_through_file(self, tmp_path):
        path = tmp_path / "memory.json"
        path.write_text(json.dumps(memory_document()), encoding="utf-8")

        config = load_config_file(path)

        assert config.game_id == "memory"
        assert len(config.containers) == 8

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            load_config_file(path)

    def test_document_model_schema(self):
        """The document model publishes a JSON schema with camelCase keys."""
        schema = GameDocument.model_json_schema(by_alias=True)
        assert "gameId" in schema["properties"]
        assert "globalEffects" in schema["properties"]
