"""Unit tests for the node registry."""

import pydantic
import pytest

from routing_policy_sync.config import ChildItemType, NodeCategory, NodeType
from routing_policy_sync.models import ChildItem, ChildItemDefinition, Node
from routing_policy_sync.node_configs import CallQueueConfig, EventConfig
from routing_policy_sync.nodes import (
    ALL_NODES,
    CHILD_ITEMS,
    NodeRegistry,
    get_node_registry,
)


@pytest.fixture
def registry():
    return get_node_registry()


class TestRegistryContents:
    """Tests for registered definitions."""

    def test_every_type_is_defined(self, registry):
        """Test that each node and child item type has a definition."""
        assert {d.type for d in registry.list_all()} == set(NodeType)
        assert {d.type for d in registry.list_child_items()} == set(ChildItemType)

    def test_missing_definition(self):
        """Test that an incomplete registry cannot be built."""
        partial = [d for d in CHILD_ITEMS if d.type != ChildItemType.EVENT]

        with pytest.raises(ValueError, match="Missing definitions for: event"):
            NodeRegistry(child_items=partial)

    def test_duplicate_definition(self):
        """Test that a type can only be registered once."""
        duplicate = CHILD_ITEMS + [
            ChildItemDefinition(type=ChildItemType.SPEAK, name="Say", template_class="ModSayAgain")
        ]

        with pytest.raises(ValueError, match="Duplicate definition for child item type: speak"):
            NodeRegistry(child_items=duplicate)

    def test_categories(self, registry):
        """Test entry points, containers and terminals."""
        entry_points = {d.type for d in registry.list_by_category(NodeCategory.ENTRY_POINT)}

        assert NodeType.EXTENSION_NUMBER in entry_points
        assert NodeType.ACTION not in entry_points
        assert all(not registry.get(t).inputs_allowed for t in entry_points)
        assert registry.is_terminal(NodeType.FINISH)
        assert registry.is_terminal(NodeType.TO_POLICY)
        assert not registry.is_terminal(NodeType.ACTION)

    def test_only_events_trigger_subscriptions(self, registry):
        """Test the event trigger flag."""
        triggers = [d.type for d in registry.list_child_items() if d.event_trigger]

        assert triggers == [ChildItemType.EVENT]

    def test_template_classes_are_unique(self):
        """Test that no template class maps to two types."""
        classes = []
        for definition in ALL_NODES + CHILD_ITEMS:
            classes.append(definition.template_class)
            classes.extend(definition.template_class_aliases)

        assert len(classes) == len(set(classes))


class TestTemplateResolution:
    """Tests for mapping document templates to types."""

    @pytest.mark.parametrize(
        "template_class,template_id,expected",
        [
            ("ModAction", None, NodeType.ACTION),
            ("ModDigitalAction", None, NodeType.ACTION),
            (None, 142, NodeType.ACTION),
            (None, 58, NodeType.FINISH),
            ("ModNumber_Public", 38, NodeType.INBOUND_NUMBER),
            (None, 3100000, NodeType.INVOKABLE_DESTINATION),
            ("ModFinish", 4, NodeType.FINISH),
            ("ModUnknown", 31, NodeType.EXTENSION_NUMBER),
            ("ModUnknown", None, None),
            (None, 999, None),
        ],
    )
    def test_resolve_node_type(self, registry, template_class, template_id, expected):
        """Test resolution by class, then template id."""
        assert registry.resolve_node_type(None, template_class, template_id) == expected

    def test_explicit_type_wins(self, registry):
        """Test that an explicit type name takes precedence."""
        assert registry.resolve_node_type("switchBoard", "ModAction", 4) == NodeType.SWITCH_BOARD
        assert registry.resolve_node_type("bogus", "ModAction") == NodeType.ACTION

    def test_resolve_child_type(self, registry):
        """Test child item resolution."""
        assert registry.resolve_child_type(None, "ModConnect_FollowMe") == ChildItemType.CONNECT_CALL
        assert registry.resolve_child_type(None, None, 118) == ChildItemType.CONNECT_CALL
        assert registry.resolve_child_type("debug") == ChildItemType.DEBUG
        assert registry.resolve_child_type(None, "ModNope") is None

    def test_template_for_node_defaults(self, registry):
        """Test the templates written for a fresh node."""
        assert registry.template_for_node(Node(id="n", type=NodeType.FINISH)) == (23, "ModFinish")

    def test_template_for_node_preserves_aliases(self, registry):
        """Test that document templates agreeing with the type are kept."""
        node = Node(id="n", type=NodeType.FINISH, template_id=58, template_class="ModDigitalFinish")

        assert registry.template_for_node(node) == (58, "ModDigitalFinish")

    def test_template_for_node_drops_stale_templates(self, registry):
        """Test that templates belonging to another type are replaced."""
        node = Node(id="n", type=NodeType.FINISH, template_id=4, template_class="ModAction")

        assert registry.template_for_node(node) == (23, "ModFinish")

    def test_template_for_child(self, registry):
        """Test child templates."""
        fresh = ChildItem(id="c", type=ChildItemType.CONNECT_CALL)
        aliased = ChildItem(id="c", type=ChildItemType.CONNECT_CALL, template_class="ModConnect_Queue", template_id=7)

        assert registry.template_for_child(fresh) == (118, "ModConnect")
        assert registry.template_for_child(aliased) == (7, "ModConnect_Queue")


class TestTypedConfig:
    """Tests for typed configuration models."""

    def test_child_config(self, registry):
        """Test that child config is parsed into its model."""
        item = ChildItem(
            id="q",
            type=ChildItemType.CALL_QUEUE,
            config={"queueId": "q-1", "timeout": 30, "priority": "high"},
        )

        config = registry.child_config(item)

        assert isinstance(config, CallQueueConfig)
        assert config.queue_id == "q-1"
        assert config.timeout == 30
        assert config.model_extra == {"priority": "high"}

    def test_event_config_defaults(self, registry):
        """Test event trigger defaults."""
        config = registry.child_config(ChildItem(id="e", type=ChildItemType.EVENT))

        assert isinstance(config, EventConfig)
        assert config.event_type == "salesforce"
        assert config.enabled is True

    def test_invalid_config(self, registry):
        """Test that invalid config raises a pydantic error."""
        with pytest.raises(pydantic.ValidationError):
            registry.child_config(ChildItem(id="g", type=ChildItemType.GET_INFO, config={"maxDigits": 0}))

    def test_node_config(self, registry):
        """Test node data models."""
        config = registry.node_config(
            Node(id="x", type=NodeType.EXTENSION_NUMBER, data={"internalExtension": "2001"})
        )

        assert config.extension == "2001"
