"""
Tests for the parameter mapper.
"""

import pytest

from ..config_schema.effect_graph import (
    MapperNode,
    MapperNodeType,
    from_previous,
    from_state,
    literal,
    object_mapper,
)
from ..engine_core.mapper import MappingContext, ParameterMapper, resolve_params
from ..errors import UnresolvableMapping


@pytest.fixture
def mapper():
    return ParameterMapper()


class TestSources:
    """Tests for each leaf source."""

    def test_literal_ignores_state(self, mapper, small_state):
        """A literal leaf yields exactly the literal whatever the state holds."""
        node = literal({"nested": [1, 2]})
        before = mapper.resolve(node, MappingContext(small_state, {"x": 1}))

        small_state.set_value("nested", "changed")
        small_state.move_card("red#1", "trash")
        after = mapper.resolve(node, MappingContext(small_state, None))

        assert before == after == {"nested": [1, 2]}

    def test_literal_is_copied(self, mapper, small_state):
        node = literal([1, 2])
        value = mapper.resolve(node, MappingContext(small_state))
        value.append(3)

        assert mapper.resolve(node, MappingContext(small_state)) == [1, 2]

    def test_state_source(self, mapper, small_state):
        node = from_state("containers.deck.count", MapperNodeType.NUMBER)
        assert mapper.resolve(node, MappingContext(small_state)) == 3

    def test_previous_output_source(self, mapper, small_state):
        previous = {"matchResult": {"result": "matched"}, "cards": [{"cardId": "red#1"}]}
        context = MappingContext(small_state, previous)

        assert mapper.resolve(from_previous("matchResult.result"), context) == "matched"
        assert mapper.resolve(from_previous("cards.0.cardId"), context) == "red#1"

    def test_whole_previous_output(self, mapper, small_state):
        node = from_previous("$", MapperNodeType.OBJECT)
        assert mapper.resolve(node, MappingContext(small_state, {"a": 1})) == {"a": 1}

    def test_previous_output_not_mutated(self, mapper, small_state):
        previous = {"cards": [{"cardId": "red#1"}]}
        value = mapper.resolve(from_previous("cards", MapperNodeType.ARRAY), MappingContext(small_state, previous))
        value.clear()

        assert previous == {"cards": [{"cardId": "red#1"}]}


class TestStructure:
    """Tests for object and array recursion."""

    def test_object_recursion(self, mapper, small_state):
        node = object_mapper(
            containerId=literal("deck"),
            player=from_state("currentPlayer"),
            card=from_previous("cardId"),
        )
        value = mapper.resolve(node, MappingContext(small_state, {"cardId": "blue#1"}))

        assert value == {"containerId": "deck", "player": "alice", "card": "blue#1"}

    def test_array_recursion(self, mapper, small_state):
        node = MapperNode(
            node_type=MapperNodeType.ARRAY,
            items=[literal("a"), from_state("turnIndex", MapperNodeType.NUMBER)],
        )
        assert mapper.resolve(node, MappingContext(small_state)) == ["a", 0]

    def test_empty_object(self, mapper, small_state):
        assert mapper.resolve(object_mapper(), MappingContext(small_state)) == {}

    def test_scalar_without_entry(self, mapper, small_state):
        with pytest.raises(UnresolvableMapping):
            mapper.resolve(MapperNode(node_type=MapperNodeType.STRING), MappingContext(small_state))


class TestMissingPaths:
    """Tests for unresolvable references."""

    def test_missing_state_path(self, mapper, small_state):
        with pytest.raises(UnresolvableMapping) as exc_info:
            mapper.resolve(from_state("score"), MappingContext(small_state))
        assert exc_info.value.source == "state"

    def test_missing_previous_key(self, mapper, small_state):
        with pytest.raises(UnresolvableMapping) as exc_info:
            mapper.resolve(from_previous("result"), MappingContext(small_state, {"other": 1}))
        assert exc_info.value.source == "previousOutput"
        assert exc_info.value.path == "result"

    def test_index_out_of_range(self, mapper, small_state):
        with pytest.raises(UnresolvableMapping):
            mapper.resolve(from_previous("cards.2"), MappingContext(small_state, {"cards": []}))

    def test_no_previous_output(self, mapper, small_state):
        with pytest.raises(UnresolvableMapping):
            mapper.resolve(from_previous("cardId"), MappingContext(small_state, None))

    def test_present_null_resolves(self, mapper, small_state):
        """A key that exists with a null value is not missing."""
        value = mapper.resolve(from_previous("owner"), MappingContext(small_state, {"owner": None}))
        assert value is None


class TestAdditionalParams:
    """Tests for end-condition and ranking params."""

    def test_params_are_copied(self):
        params = {"containerType": "field", "ids": ["a"]}
        resolved = resolve_params(params)
        resolved["ids"].append("b")

        assert resolved["containerType"] == "field"
        assert params["ids"] == ["a"]
