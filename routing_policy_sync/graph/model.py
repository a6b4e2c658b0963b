"""
Policy Graph Model.

In-memory policy graph: nodes, edges between them, and the ordered child
items owned by container nodes. Every mutation either succeeds and leaves
the graph consistent, or raises GraphError and leaves it unchanged.
"""

import copy
import dataclasses
import logging
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError as ConfigError

from ..config import ChildItemType, EdgeKind, NodeType, PolicyType
from ..exceptions import GraphError
from ..models import ChildItem, CloneReport, DesiredEventNode, Edge, Node, ValidationIssue
from ..nodes import NodeRegistry, get_node_registry

logger = logging.getLogger(__name__)

DEFAULT_EVENT_NAME = "Event"
EVENT_STATE_KEYS = ("eventType", "enabled", "filters")

# References that only resolve inside the organization a policy was built in
ORG_NODE_REFERENCES = {
    NodeType.INBOUND_NUMBER: ("phoneNumbers", "phone number"),
    NodeType.DIGITAL: ("address", "digital address"),
    NodeType.FROM_POLICY: ("policyId", "linked policy"),
    NodeType.TO_POLICY: ("policyId", "linked policy"),
    NodeType.NATTERBOX_AI: ("agentId", "AI agent"),
}
ORG_ITEM_REFERENCES = {
    ChildItemType.AI_AGENT: ("agentId", "AI agent"),
    ChildItemType.AI_KNOWLEDGE: ("knowledgeBaseId", "AI knowledge base"),
}


class PolicyGraph:
    """
    A routing policy as a graph.

    Attributes:
        id: Remote policy id, None until first saved
        name: Policy name
        type: Policy type
        enabled: Whether the policy is active
        source: Policy origin from the document, "SYSTEM" for platform-owned policies
        nodes: Nodes keyed by id, in graph order
        edges: Edges in insertion order
    """

    def __init__(
        self,
        name: str = "",
        type: PolicyType = PolicyType.CALL,
        enabled: bool = True,
        id: Optional[int] = None,
        registry: Optional[NodeRegistry] = None,
        source: Optional[str] = None,
    ):
        self.id = id
        self.source = source
        self.name = name
        self.type = type
        self.enabled = enabled
        self.nodes: Dict[str, Node] = {}
        self.edges: List[Edge] = []
        self.registry = registry or get_node_registry()

    def __repr__(self) -> str:
        return (
            f"PolicyGraph(id={self.id!r}, name={self.name!r}, "
            f"nodes={len(self.nodes)}, edges={len(self.edges)})"
        )

    # =========================================================================
    # Nodes
    # =========================================================================

    def add_node(self, node: Node) -> Node:
        """
        Add a node, including any child items it already owns.

        Raises:
            GraphError: If the id is taken, or the node carries child items
                it may not own
        """
        if node.id in self.nodes:
            raise GraphError(f"Node already exists: {node.id}")

        if node.children:
            if not self.registry.get(node.type).is_container:
                raise GraphError(f"Node type {node.type.value} cannot own child items")
            seen = set()
            for item in node.children:
                if item.id in seen or self._find_child(item.id) is not None:
                    raise GraphError(f"Child item already exists: {item.id}")
                seen.add(item.id)
            node.children.sort(key=lambda c: c.order)
            self._renumber(node)

        self.nodes[node.id] = node
        logger.debug(f"Added node: {node.id} ({node.type.value})")
        return node

    def remove_node(self, node_id: str) -> Node:
        """Remove a node with its child items and every edge touching it."""
        node = self.get_node(node_id)

        self.edges = [
            e for e in self.edges
            if e.source_node_id != node_id and e.target_node_id != node_id
        ]
        del self.nodes[node_id]

        logger.debug(f"Removed node: {node_id}")
        return node

    def get_node(self, node_id: str) -> Node:
        node = self.nodes.get(node_id)
        if node is None:
            raise GraphError(f"Node not found: {node_id}")
        return node

    def update_node_data(self, node_id: str, data: Dict[str, Any], replace: bool = False) -> Node:
        """Merge (or replace) a node's type-specific data."""
        node = self.get_node(node_id)
        if replace:
            node.data = dict(data)
        else:
            node.data.update(data)
        return node

    def entry_points(self) -> List[Node]:
        return [n for n in self.nodes.values() if self.registry.is_entry_point(n.type)]

    def terminals(self) -> List[Node]:
        return [n for n in self.nodes.values() if self.registry.is_terminal(n.type)]

    # =========================================================================
    # Edges
    # =========================================================================

    def add_edge(self, edge: Edge) -> Edge:
        """
        Add an edge.

        Raises:
            GraphError: If either end is missing, the id is taken, or the
                edge breaks the output rules of the source node type
        """
        if any(e.id == edge.id for e in self.edges):
            raise GraphError(f"Edge already exists: {edge.id}")
        if edge.source_node_id not in self.nodes:
            raise GraphError(f"Edge {edge.id} references missing source node: {edge.source_node_id}")
        if edge.target_node_id not in self.nodes:
            raise GraphError(f"Edge {edge.id} references missing target node: {edge.target_node_id}")
        if edge.source_node_id == edge.target_node_id:
            raise GraphError(f"Edge {edge.id} connects node {edge.source_node_id} to itself")

        source = self.nodes[edge.source_node_id]
        target = self.nodes[edge.target_node_id]
        source_def = self.registry.get(source.type)

        if not source_def.outputs_allowed:
            raise GraphError(f"Node type {source.type.value} has no outputs")
        if not self.registry.get(target.type).inputs_allowed:
            raise GraphError(f"Node type {target.type.value} accepts no inputs")

        if edge.kind == EdgeKind.DEFAULT:
            if self.default_target(source.id) is not None:
                raise GraphError(f"Node {source.id} already has a default edge")
        elif not source_def.multiple_outputs:
            raise GraphError(
                f"Node type {source.type.value} does not allow {edge.kind.value} edges"
            )

        if edge.source_item_id is not None and not any(
            c.id == edge.source_item_id for c in source.children
        ):
            raise GraphError(
                f"Edge {edge.id} references child item {edge.source_item_id} "
                f"not owned by node {source.id}"
            )

        self.edges.append(edge)
        return edge

    def connect(
        self,
        source_node_id: str,
        target_node_id: str,
        kind: EdgeKind = EdgeKind.DEFAULT,
        source_item_id: Optional[str] = None,
    ) -> Edge:
        """Add an edge with a derived id."""
        return self.add_edge(
            Edge(
                id=self._edge_id(source_node_id, target_node_id, kind, source_item_id),
                source_node_id=source_node_id,
                target_node_id=target_node_id,
                kind=kind,
                source_item_id=source_item_id,
            )
        )

    @staticmethod
    def _edge_id(
        source_node_id: str,
        target_node_id: str,
        kind: EdgeKind,
        source_item_id: Optional[str],
    ) -> str:
        edge_id = f"edge-{source_node_id}-{target_node_id}"
        if kind != EdgeKind.DEFAULT:
            edge_id = f"{edge_id}-{kind.value}"
        if source_item_id:
            edge_id = f"{edge_id}-{source_item_id}"
        return edge_id

    def remove_edge(self, edge_id: str) -> Edge:
        for index, edge in enumerate(self.edges):
            if edge.id == edge_id:
                return self.edges.pop(index)
        raise GraphError(f"Edge not found: {edge_id}")

    def outgoing(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.source_node_id == node_id]

    def incoming(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.target_node_id == node_id]

    def default_target(self, node_id: str) -> Optional[str]:
        """Target of the node's default edge, if it has one."""
        for edge in self.edges:
            if edge.source_node_id == node_id and edge.kind == EdgeKind.DEFAULT:
                return edge.target_node_id
        return None

    # =========================================================================
    # Child items
    # =========================================================================

    def add_child_item(self, node_id: str, item: ChildItem, index: Optional[int] = None) -> ChildItem:
        """
        Add a child item to a container node.

        Appends by default; with ``index`` the item is inserted there
        (clamped to the valid range). Sibling order is renumbered.
        """
        node = self.get_node(node_id)
        if not self.registry.get(node.type).is_container:
            raise GraphError(f"Node type {node.type.value} cannot own child items")
        if self._find_child(item.id) is not None:
            raise GraphError(f"Child item already exists: {item.id}")

        if index is None:
            node.children.append(item)
        else:
            node.children.insert(self._clamp(index, len(node.children)), item)
        self._renumber(node)
        return item

    def remove_child_item(self, node_id: str, item_id: str) -> ChildItem:
        """Remove a child item, along with any edges branching from it."""
        node = self.get_node(node_id)
        position = self._child_index(node, item_id)

        item = node.children.pop(position)
        self._renumber(node)
        self.edges = [e for e in self.edges if e.source_item_id != item_id]
        return item

    def reorder_child_item(self, node_id: str, item_id: str, new_index: int) -> None:
        """Move a child item to ``new_index`` and renumber its siblings."""
        node = self.get_node(node_id)
        position = self._child_index(node, item_id)

        item = node.children.pop(position)
        node.children.insert(self._clamp(new_index, len(node.children)), item)
        self._renumber(node)

    def update_child_item(
        self,
        item_id: str,
        name: Optional[str] = None,
        config: Optional[Dict[str, Any]] = None,
    ) -> ChildItem:
        """Rename a child item or merge configuration into it."""
        found = self._find_child(item_id)
        if found is None:
            raise GraphError(f"Child item not found: {item_id}")
        item = found[1]
        if name is not None:
            item.name = name
        if config is not None:
            item.config.update(config)
        return item

    def find_child_item(self, item_id: str) -> Optional[Tuple[Node, ChildItem]]:
        """Find a child item and its owning node."""
        return self._find_child(item_id)

    def _find_child(self, item_id: str) -> Optional[Tuple[Node, ChildItem]]:
        for node in self.nodes.values():
            for item in node.children:
                if item.id == item_id:
                    return node, item
        return None

    @staticmethod
    def _child_index(node: Node, item_id: str) -> int:
        for index, item in enumerate(node.children):
            if item.id == item_id:
                return index
        raise GraphError(f"Child item {item_id} not found on node {node.id}")

    @staticmethod
    def _clamp(index: int, length: int) -> int:
        return max(0, min(index, length))

    @staticmethod
    def _renumber(node: Node) -> None:
        for order, item in enumerate(node.children):
            item.order = order

    # =========================================================================
    # Event triggers
    # =========================================================================

    def event_nodes(self) -> List[DesiredEventNode]:
        """Desired subscription state for every event-triggering child item."""
        desired = []
        for node in self.nodes.values():
            for item in node.children:
                if self.registry.is_event_trigger(item.type):
                    desired.append(self._desired_event(item))
        return desired

    def _desired_event(self, item: ChildItem) -> DesiredEventNode:
        try:
            event = self.registry.child_config(item)
        except ConfigError as e:
            raise GraphError(f"Invalid event configuration on child item {item.id}: {e}") from e

        config = {k: v for k, v in item.config.items() if k not in EVENT_STATE_KEYS}

        return DesiredEventNode(
            id=item.id,
            name=item.name or DEFAULT_EVENT_NAME,
            event_type=event.event_type,
            enabled=event.enabled,
            config=config,
            filters=list(event.filters),
            subscription_id=item.subscription_id,
        )

    def link_subscriptions(self, links: Dict[str, str]) -> int:
        """
        Record subscription ids onto their child items.

        Args:
            links: Child item id to subscription id

        Returns:
            Number of child items whose subscription id changed
        """
        changed = 0
        for node in self.nodes.values():
            for item in node.children:
                subscription_id = links.get(item.id)
                if subscription_id and item.subscription_id != subscription_id:
                    item.subscription_id = subscription_id
                    changed += 1
        return changed

    # =========================================================================
    # Cloning
    # =========================================================================

    def clone(self, name: Optional[str] = None) -> Tuple["PolicyGraph", CloneReport]:
        """
        Copy the graph for use as a new policy.

        Node, child item and edge ids are regenerated. The copy has no
        policy id, no source and no subscription links, so saving it
        creates a new policy with its own subscriptions. References that
        only resolve in the original organization (phone numbers, digital
        addresses, linked policies, AI agents and knowledge bases) are
        removed and listed on the report.

        Args:
            name: Name for the copy; defaults to this graph's name

        Returns:
            The copy and the report of removed references
        """
        report = CloneReport()
        clone = PolicyGraph(
            name=self.name if name is None else name,
            type=self.type,
            enabled=self.enabled,
            registry=self.registry,
        )
        node_ids: Dict[str, str] = {}
        item_ids: Dict[str, str] = {}

        for node in self.nodes.values():
            duplicate = copy.deepcopy(node)
            duplicate.id = node_ids[node.id] = str(uuid.uuid4())
            owner = node.name or node.id
            if node.type in ORG_NODE_REFERENCES:
                self._strip_reference(duplicate.data, ORG_NODE_REFERENCES[node.type], owner, report)

            for item in duplicate.children:
                original_id = item.id
                item.id = item_ids[original_id] = str(uuid.uuid4())
                item.subscription_id = None
                if item.type in ORG_ITEM_REFERENCES:
                    self._strip_reference(
                        item.config, ORG_ITEM_REFERENCES[item.type], item.name or original_id, report
                    )

            clone.add_node(duplicate)

        for edge in self.edges:
            source_id = node_ids[edge.source_node_id]
            target_id = node_ids[edge.target_node_id]
            item_id = item_ids.get(edge.source_item_id) if edge.source_item_id else None
            clone.add_edge(
                dataclasses.replace(
                    edge,
                    id=self._edge_id(source_id, target_id, edge.kind, item_id),
                    source_node_id=source_id,
                    target_node_id=target_id,
                    source_item_id=item_id,
                )
            )

        logger.debug(f"Cloned policy {self.id} ({self.name}): {len(report.messages)} reference(s) removed")
        return clone, report

    @staticmethod
    def _strip_reference(
        values: Dict[str, Any],
        reference: Tuple[str, str],
        owner: str,
        report: CloneReport,
    ) -> None:
        key, label = reference
        value = values.pop(key, None)
        if value in (None, "", []):
            return
        for entry in value if isinstance(value, list) else [value]:
            report.add(f"Removed {label}: {owner} / {entry}")

    # =========================================================================
    # Validation
    # =========================================================================

    def validate(
        self,
        is_extension_available: Optional[Callable[[str], bool]] = None,
    ) -> List[ValidationIssue]:
        """Structural violations that block saving; empty when the graph is valid."""
        from .validator import PolicyGraphValidator

        result = PolicyGraphValidator(registry=self.registry).validate(self, is_extension_available)
        return result.errors

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "enabled": self.enabled,
            "source": self.source,
            "nodes": [n.to_dict() for n in self.nodes.values()],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], registry: Optional[NodeRegistry] = None) -> "PolicyGraph":
        graph = cls(
            name=data.get("name", ""),
            type=PolicyType(data.get("type", PolicyType.CALL.value)),
            enabled=data.get("enabled", True),
            id=data.get("id"),
            registry=registry,
            source=data.get("source"),
        )
        for node_data in data.get("nodes", []):
            graph.add_node(Node.from_dict(node_data))
        for edge_data in data.get("edges", []):
            graph.add_edge(Edge.from_dict(edge_data))
        return graph
