"""
Node Registry.

Resolves node and child item types to their definitions, and maps the
template identifiers found in policy documents back to types.
"""

import logging
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from ..config import ChildItemType, NodeCategory, NodeType
from ..models import ChildItem, ChildItemDefinition, Node, NodeDefinition
from ..node_configs import ItemConfig
from .definitions import ALL_NODES, CHILD_ITEMS

logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    Registry for node and child item type definitions.

    Every member of NodeType and ChildItemType must have exactly one
    definition; construction fails otherwise.
    """

    def __init__(
        self,
        nodes: Optional[List[NodeDefinition]] = None,
        child_items: Optional[List[ChildItemDefinition]] = None,
    ):
        self._nodes: Dict[NodeType, NodeDefinition] = {}
        self._child_items: Dict[ChildItemType, ChildItemDefinition] = {}
        self._node_by_class: Dict[str, NodeType] = {}
        self._node_by_template_id: Dict[int, NodeType] = {}
        self._child_by_class: Dict[str, ChildItemType] = {}
        self._child_by_template_id: Dict[int, ChildItemType] = {}

        for node_def in ALL_NODES if nodes is None else nodes:
            self.register_node(node_def)
        for item_def in CHILD_ITEMS if child_items is None else child_items:
            self.register_child_item(item_def)

        self._check_exhaustive()
        logger.debug(
            f"Registered {len(self._nodes)} node types and {len(self._child_items)} child item types"
        )

    def register_node(self, node_def: NodeDefinition) -> None:
        """Register a node definition."""
        if node_def.type in self._nodes:
            raise ValueError(f"Duplicate definition for node type: {node_def.type.value}")

        self._nodes[node_def.type] = node_def

        # Index by template identifiers
        for template_class in (node_def.template_class,) + node_def.template_class_aliases:
            self._node_by_class[template_class] = node_def.type
        template_ids = node_def.template_id_aliases
        if node_def.template_id is not None:
            template_ids = (node_def.template_id,) + template_ids
        for template_id in template_ids:
            self._node_by_template_id.setdefault(template_id, node_def.type)

    def register_child_item(self, item_def: ChildItemDefinition) -> None:
        """Register a child item definition."""
        if item_def.type in self._child_items:
            raise ValueError(f"Duplicate definition for child item type: {item_def.type.value}")

        self._child_items[item_def.type] = item_def

        for template_class in (item_def.template_class,) + item_def.template_class_aliases:
            self._child_by_class[template_class] = item_def.type
        if item_def.template_id is not None:
            self._child_by_template_id[item_def.template_id] = item_def.type

    def _check_exhaustive(self) -> None:
        missing = [t.value for t in NodeType if t not in self._nodes]
        missing += [t.value for t in ChildItemType if t not in self._child_items]
        if missing:
            raise ValueError(f"Missing definitions for: {', '.join(missing)}")

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, node_type: NodeType) -> NodeDefinition:
        """Get node definition by type."""
        return self._nodes[node_type]

    def get_child(self, item_type: ChildItemType) -> ChildItemDefinition:
        """Get child item definition by type."""
        return self._child_items[item_type]

    def list_all(self) -> List[NodeDefinition]:
        """List all registered node definitions."""
        return list(self._nodes.values())

    def list_by_category(self, category: NodeCategory) -> List[NodeDefinition]:
        """List nodes in a specific category."""
        return [n for n in self._nodes.values() if n.category == category]

    def list_child_items(self) -> List[ChildItemDefinition]:
        """List all registered child item definitions."""
        return list(self._child_items.values())

    def is_entry_point(self, node_type: NodeType) -> bool:
        return self._nodes[node_type].is_entry_point

    def is_terminal(self, node_type: NodeType) -> bool:
        return self._nodes[node_type].terminal

    def is_event_trigger(self, item_type: ChildItemType) -> bool:
        return self._child_items[item_type].event_trigger

    # -------------------------------------------------------------------------
    # Template resolution
    # -------------------------------------------------------------------------

    def resolve_node_type(
        self,
        type_name: Optional[str] = None,
        template_class: Optional[str] = None,
        template_id: Optional[int] = None,
    ) -> Optional[NodeType]:
        """
        Resolve a document item to a node type.

        An explicit type name wins, then the template class, then the
        template id. Returns None when nothing matches.
        """
        if type_name:
            try:
                return NodeType(type_name)
            except ValueError:
                pass
        if template_class and template_class in self._node_by_class:
            return self._node_by_class[template_class]
        if template_id is not None:
            return self._node_by_template_id.get(template_id)
        return None

    def resolve_child_type(
        self,
        type_name: Optional[str] = None,
        template_class: Optional[str] = None,
        template_id: Optional[int] = None,
    ) -> Optional[ChildItemType]:
        """Resolve a document sub item to a child item type."""
        if type_name:
            try:
                return ChildItemType(type_name)
            except ValueError:
                pass
        if template_class and template_class in self._child_by_class:
            return self._child_by_class[template_class]
        if template_id is not None:
            return self._child_by_template_id.get(template_id)
        return None

    def template_for_node(self, node: Node) -> Tuple[Optional[int], str]:
        """Template (id, class) to write for a node; preserved values win when they agree with the type."""
        node_def = self._nodes[node.type]
        template_class = node_def.template_class
        if node.template_class and self._node_by_class.get(node.template_class) == node.type:
            template_class = node.template_class
        template_id = node_def.template_id
        if node.template_id is not None and self._node_by_template_id.get(node.template_id) == node.type:
            template_id = node.template_id
        return template_id, template_class

    def template_for_child(self, item: ChildItem) -> Tuple[Optional[int], str]:
        """Template (id, class) to write for a child item."""
        item_def = self._child_items[item.type]
        template_class = item_def.template_class
        if item.template_class and self._child_by_class.get(item.template_class) == item.type:
            template_class = item.template_class
        template_id = item.template_id if item.template_id is not None else item_def.template_id
        return template_id, template_class

    # -------------------------------------------------------------------------
    # Typed configuration
    # -------------------------------------------------------------------------

    def node_config(self, node: Node) -> ItemConfig:
        """Validate node data against its typed model (raises pydantic.ValidationError)."""
        return self._nodes[node.type].config_model.model_validate(node.data)

    def child_config(self, item: ChildItem) -> ItemConfig:
        """Validate child item config against its typed model."""
        return self._child_items[item.type].config_model.model_validate(item.config)


@lru_cache
def get_node_registry() -> NodeRegistry:
    """Get the shared node registry."""
    return NodeRegistry()
