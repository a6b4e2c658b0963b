"""
Legacy document transform.

Maps between a PolicyGraph and the nested document the policy engine
stores: one item per node, each holding its child items as ``subItems``.

Document item layout::

    {
        "id": "...",
        "name": "...",
        "templateId": 4,
        "templateClass": "ModAction",
        "variables": {...},          # Node.data
        "connectedTo": "node-id",    # default edge
        "outputs": [                 # every other edge
            {"id": "...", "kind": "branch", "connectedTo": "...", "sourceItemId": "..."}
        ],
        "subItems": [
            {"id": "...", "name": "...", "templateClass": "ModEvent", "order": 0,
             "variables": {...}, "subscriptionId": "..."}
        ],
    }

Keys the graph does not model are kept in the ``extra`` bag of the node or
child item and written back unchanged.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from .config import EdgeKind
from .exceptions import DocumentFormatError, GraphError
from .graph import PolicyGraph
from .models import ChildItem, Edge, Node, PolicyDocument, coerce_int
from .nodes import NodeRegistry, get_node_registry

logger = logging.getLogger(__name__)

NODE_KEYS = {"id", "name", "templateId", "templateClass", "variables", "subItems", "connectedTo", "outputs"}
CHILD_KEYS = {"id", "name", "templateId", "templateClass", "order", "variables", "subscriptionId", "destinationNumber"}

MIN_COORDINATE = 30
NODE_SPACING = 250


# =============================================================================
# Parse
# =============================================================================


def parse_document(
    document: Union[PolicyDocument, Dict[str, Any]],
    registry: Optional[NodeRegistry] = None,
) -> PolicyGraph:
    """
    Build a graph from a policy document.

    Args:
        document: PolicyDocument or raw engine response
        registry: Node registry used to resolve template identifiers

    Returns:
        PolicyGraph carrying the document id

    Raises:
        DocumentFormatError: If an item cannot be resolved to a known type
    """
    registry = registry or get_node_registry()
    if not isinstance(document, PolicyDocument):
        document = PolicyDocument.from_response(document)

    graph = PolicyGraph(
        name=document.name,
        type=document.type,
        enabled=document.enabled,
        id=document.id,
        registry=registry,
        source=document.source,
    )

    for index, item in enumerate(document.items):
        node = _parse_item(item, index, registry)
        try:
            graph.add_node(node)
        except GraphError as e:
            raise DocumentFormatError(f"Invalid policy document: {e.message}")

    for item in document.items:
        _parse_edges(graph, item)

    logger.debug(f"Parsed policy document {document.id}: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
    return graph


def _parse_item(item: Any, index: int, registry: NodeRegistry) -> Node:
    if not isinstance(item, dict) or not item.get("id"):
        raise DocumentFormatError(f"Policy item {index} has no id")

    node_id = str(item["id"])
    template_id = coerce_int(item.get("templateId"))
    node_type = registry.resolve_node_type(item.get("type"), item.get("templateClass"), template_id)
    if node_type is None:
        raise DocumentFormatError(
            f"Cannot resolve node type for item {node_id}",
            details={"templateClass": item.get("templateClass"), "templateId": item.get("templateId")},
        )

    sub_items = item.get("subItems") or []
    if not isinstance(sub_items, list):
        raise DocumentFormatError(f"subItems of item {node_id} must be a list")
    if all(isinstance(s, dict) and isinstance(s.get("order"), int) for s in sub_items):
        sub_items = sorted(sub_items, key=lambda s: s["order"])

    children = [_parse_sub_item(sub, node_id, registry) for sub in sub_items]

    return Node(
        id=node_id,
        type=node_type,
        position=_position(item, index),
        name=item.get("name") or item.get("title") or "",
        data=dict(item.get("variables") or {}),
        children=children,
        template_id=template_id,
        template_class=item.get("templateClass"),
        extra={k: v for k, v in item.items() if k not in NODE_KEYS},
    )


def _parse_sub_item(sub: Any, node_id: str, registry: NodeRegistry) -> ChildItem:
    if not isinstance(sub, dict) or not sub.get("id"):
        raise DocumentFormatError(f"Sub item of item {node_id} has no id")

    item_id = str(sub["id"])
    template_id = coerce_int(sub.get("templateId"))
    item_type = registry.resolve_child_type(sub.get("type"), sub.get("templateClass"), template_id)
    if item_type is None:
        raise DocumentFormatError(
            f"Cannot resolve child item type for sub item {item_id}",
            details={"templateClass": sub.get("templateClass"), "templateId": sub.get("templateId")},
        )

    return ChildItem(
        id=item_id,
        type=item_type,
        name=sub.get("name") or "",
        config=dict(sub.get("variables") or {}),
        subscription_id=sub.get("subscriptionId"),
        template_id=template_id,
        template_class=sub.get("templateClass"),
        destination_number=sub.get("destinationNumber"),
        extra={k: v for k, v in sub.items() if k not in CHILD_KEYS},
    )


def _position(item: Dict[str, Any], index: int) -> Dict[str, float]:
    x, y = item.get("x"), item.get("y")
    if isinstance(x, (int, float)) and isinstance(y, (int, float)):
        return {"x": max(MIN_COORDINATE, x), "y": max(MIN_COORDINATE, y)}
    return {"x": MIN_COORDINATE + NODE_SPACING * index, "y": MIN_COORDINATE}


def _parse_edges(graph: PolicyGraph, item: Dict[str, Any]) -> None:
    node = graph.nodes[str(item["id"])]

    target = item.get("connectedTo")
    if target is not None and not _try_add_edge(graph, node, Edge(
        id=f"edge-{node.id}-{target}",
        source_node_id=node.id,
        target_node_id=str(target),
    )):
        node.extra["connectedTo"] = target

    unresolved: List[Any] = []
    for output in item.get("outputs") or []:
        if not isinstance(output, dict) or output.get("connectedTo") is None:
            unresolved.append(output)
            continue
        try:
            kind = EdgeKind(output.get("kind", EdgeKind.BRANCH.value))
        except ValueError:
            kind = EdgeKind.BRANCH
        if kind == EdgeKind.DEFAULT:
            kind = EdgeKind.BRANCH
        target = str(output["connectedTo"])
        edge = Edge(
            id=str(output.get("id") or f"edge-{node.id}-{target}-{kind.value}"),
            source_node_id=node.id,
            target_node_id=target,
            kind=kind,
            source_item_id=output.get("sourceItemId"),
        )
        if not _try_add_edge(graph, node, edge):
            unresolved.append(output)

    if unresolved:
        node.extra["outputs"] = unresolved


def _try_add_edge(graph: PolicyGraph, node: Node, edge: Edge) -> bool:
    try:
        graph.add_edge(edge)
    except GraphError as e:
        logger.warning(f"Keeping unresolved connection of item {node.id} as-is: {e.message}")
        return False
    return True


# =============================================================================
# Serialize
# =============================================================================


def serialize_graph(graph: PolicyGraph, registry: Optional[NodeRegistry] = None) -> PolicyDocument:
    """
    Flatten a graph into a policy document.

    Nodes are written in graph order and child items in their ``order``.
    Positions are not part of the document.
    """
    registry = registry or graph.registry
    items = [_serialize_node(graph, node, registry) for node in graph.nodes.values()]

    return PolicyDocument(
        id=graph.id,
        name=graph.name,
        enabled=graph.enabled,
        type=graph.type,
        items=items,
        source=graph.source,
    )


def _serialize_node(graph: PolicyGraph, node: Node, registry: NodeRegistry) -> Dict[str, Any]:
    template_id, template_class = registry.template_for_node(node)

    item: Dict[str, Any] = dict(node.extra)
    item.update(
        {
            "id": node.id,
            "name": node.name,
            "templateId": template_id,
            "templateClass": template_class,
            "variables": dict(node.data),
            "subItems": [
                _serialize_child(child, registry)
                for child in sorted(node.children, key=lambda c: c.order)
            ],
        }
    )
    if template_id is None:
        del item["templateId"]

    outputs = []
    for edge in graph.outgoing(node.id):
        if edge.kind == EdgeKind.DEFAULT:
            item["connectedTo"] = edge.target_node_id
            continue
        output = {"id": edge.id, "kind": edge.kind.value, "connectedTo": edge.target_node_id}
        if edge.source_item_id:
            output["sourceItemId"] = edge.source_item_id
        outputs.append(output)

    outputs.extend(node.extra.get("outputs") or [])
    if outputs:
        item["outputs"] = outputs

    return item


def _serialize_child(child: ChildItem, registry: NodeRegistry) -> Dict[str, Any]:
    template_id, template_class = registry.template_for_child(child)

    sub: Dict[str, Any] = dict(child.extra)
    sub.update(
        {
            "id": child.id,
            "name": child.name,
            "templateClass": template_class,
            "order": child.order,
            "variables": dict(child.config),
        }
    )
    if template_id is not None:
        sub["templateId"] = template_id
    if child.subscription_id:
        sub["subscriptionId"] = child.subscription_id
    if child.destination_number:
        sub["destinationNumber"] = child.destination_number
    return sub
