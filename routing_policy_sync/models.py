"""
Data Models for Routing Policy Sync.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Type
import uuid

from .config import ChildItemType, EdgeKind, NodeCategory, NodeType, PolicyType
from .exceptions import DocumentFormatError
from .node_configs import ItemConfig

SYSTEM_SOURCE = "SYSTEM"


def coerce_int(value: Any) -> Optional[int]:
    """Coerce a numeric identifier that may arrive as a string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def is_system_source(source: Any) -> bool:
    """Whether a policy source marks a platform-owned policy."""
    return isinstance(source, str) and source.upper() == SYSTEM_SOURCE


# =============================================================================
# Node Definition Models
# =============================================================================


@dataclass(frozen=True)
class NodeDefinition:
    """Definition of a graph node type."""

    type: NodeType
    category: NodeCategory
    name: str
    template_class: str
    template_id: Optional[int] = None
    template_class_aliases: Tuple[str, ...] = ()
    template_id_aliases: Tuple[int, ...] = ()
    inputs_allowed: bool = True
    outputs_allowed: bool = True
    multiple_outputs: bool = False  # Branch/failure/timeout edges allowed
    terminal: bool = False
    config_model: Type[ItemConfig] = ItemConfig

    @property
    def is_entry_point(self) -> bool:
        return self.category == NodeCategory.ENTRY_POINT

    @property
    def is_container(self) -> bool:
        return self.category == NodeCategory.CONTAINER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "category": self.category.value,
            "name": self.name,
            "templateId": self.template_id,
            "templateClass": self.template_class,
            "inputsAllowed": self.inputs_allowed,
            "outputsAllowed": self.outputs_allowed,
            "multipleOutputs": self.multiple_outputs,
            "terminal": self.terminal,
        }


@dataclass(frozen=True)
class ChildItemDefinition:
    """Definition of a child item type."""

    type: ChildItemType
    name: str
    template_class: str
    template_id: Optional[int] = None
    template_class_aliases: Tuple[str, ...] = ()
    event_trigger: bool = False
    config_model: Type[ItemConfig] = ItemConfig

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "name": self.name,
            "templateId": self.template_id,
            "templateClass": self.template_class,
            "eventTrigger": self.event_trigger,
        }


# =============================================================================
# Graph Models
# =============================================================================


@dataclass
class ChildItem:
    """Item owned by a container node, ordered within its parent."""

    id: str
    type: ChildItemType
    name: str = ""
    order: int = 0
    config: Dict[str, Any] = field(default_factory=dict)
    subscription_id: Optional[str] = None  # Event triggers only
    template_id: Optional[int] = None
    template_class: Optional[str] = None
    destination_number: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)  # Unknown document fields

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "order": self.order,
            "config": self.config,
            "subscriptionId": self.subscription_id,
            "templateId": self.template_id,
            "templateClass": self.template_class,
            "destinationNumber": self.destination_number,
            "extra": self.extra,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChildItem":
        return cls(
            id=data["id"],
            type=ChildItemType(data["type"]),
            name=data.get("name", ""),
            order=data.get("order", 0),
            config=dict(data.get("config") or {}),
            subscription_id=data.get("subscriptionId"),
            template_id=coerce_int(data.get("templateId")),
            template_class=data.get("templateClass"),
            destination_number=data.get("destinationNumber"),
            extra=dict(data.get("extra") or {}),
        )


@dataclass
class Node:
    """Node in a policy graph."""

    id: str
    type: NodeType
    position: Dict[str, float] = field(default_factory=lambda: {"x": 0.0, "y": 0.0})
    name: str = ""
    data: Dict[str, Any] = field(default_factory=dict)  # Type-specific configuration
    children: List[ChildItem] = field(default_factory=list)
    template_id: Optional[int] = None
    template_class: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "position": self.position,
            "name": self.name,
            "data": self.data,
            "children": [c.to_dict() for c in self.children],
            "templateId": self.template_id,
            "templateClass": self.template_class,
            "extra": self.extra,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        return cls(
            id=data["id"],
            type=NodeType(data["type"]),
            position=dict(data.get("position") or {"x": 0.0, "y": 0.0}),
            name=data.get("name", ""),
            data=dict(data.get("data") or {}),
            children=[ChildItem.from_dict(c) for c in data.get("children") or []],
            template_id=coerce_int(data.get("templateId")),
            template_class=data.get("templateClass"),
            extra=dict(data.get("extra") or {}),
        )


@dataclass
class Edge:
    """Transition between two nodes."""

    id: str
    source_node_id: str
    target_node_id: str
    kind: EdgeKind = EdgeKind.DEFAULT
    source_item_id: Optional[str] = None  # Child item a branch leaves from

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source_node_id,
            "target": self.target_node_id,
            "kind": self.kind.value,
            "sourceItemId": self.source_item_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Edge":
        return cls(
            id=data["id"],
            source_node_id=data["source"],
            target_node_id=data["target"],
            kind=EdgeKind(data.get("kind", EdgeKind.DEFAULT.value)),
            source_item_id=data.get("sourceItemId"),
        )


def new_node(node_type: NodeType, name: str = "", data: Optional[Dict[str, Any]] = None) -> Node:
    """Create a node with a generated id."""
    return Node(id=str(uuid.uuid4()), type=node_type, name=name, data=dict(data or {}))


def new_child_item(
    item_type: ChildItemType,
    name: str = "",
    config: Optional[Dict[str, Any]] = None,
) -> ChildItem:
    """Create a child item with a generated id."""
    return ChildItem(id=str(uuid.uuid4()), type=item_type, name=name, config=dict(config or {}))


# =============================================================================
# Event Subscription Models
# =============================================================================


@dataclass
class EventSubscription:
    """Subscription held by the remote event service."""

    id: str
    name: str
    event_type: str
    policy_id: Optional[int]
    enabled: bool = True
    config: Dict[str, Any] = field(default_factory=dict)
    filters: List[Dict[str, Any]] = field(default_factory=list)
    organization_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EventSubscription":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            event_type=data.get("eventType", ""),
            policy_id=coerce_int(data.get("policyId")),
            enabled=bool(data.get("enabled", True)),
            config=dict(data.get("config") or {}),
            filters=list(data.get("filters") or []),
            organization_id=coerce_int(data.get("organizationId")),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "eventType": self.event_type,
            "policyId": self.policy_id,
            "enabled": self.enabled,
            "config": self.config,
            "filters": self.filters,
            "organizationId": self.organization_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class DesiredEventNode:
    """Desired state of one event-triggering child item."""

    id: str
    name: str
    event_type: str
    enabled: bool = True
    config: Dict[str, Any] = field(default_factory=dict)
    filters: List[Dict[str, Any]] = field(default_factory=list)
    subscription_id: Optional[str] = None

    def to_payload(self, policy_id: int, include_empty: bool = False) -> Dict[str, Any]:
        """
        Build a create/update body.

        Empty config and filters are omitted unless ``include_empty`` is set;
        updates set it so that clearing them reaches the remote side.
        """
        payload: Dict[str, Any] = {
            "name": self.name,
            "eventType": self.event_type,
            "policyId": policy_id,
            "enabled": self.enabled,
        }
        if self.config or include_empty:
            payload["config"] = self.config
        if self.filters or include_empty:
            payload["filters"] = self.filters
        return payload

    def matches(self, subscription: EventSubscription) -> bool:
        """Whether the remote subscription already reflects this desired state."""
        return (
            subscription.name == self.name
            and subscription.event_type == self.event_type
            and subscription.enabled == self.enabled
            and (subscription.config or {}) == (self.config or {})
            and (subscription.filters or []) == (self.filters or [])
        )


# =============================================================================
# Policy Document Models
# =============================================================================


@dataclass
class PolicyDocument:
    """Nested document stored by the policy engine."""

    name: str
    enabled: bool = True
    type: PolicyType = PolicyType.CALL
    items: List[Dict[str, Any]] = field(default_factory=list)
    id: Optional[int] = None
    source: Optional[str] = None  # "SYSTEM" for platform-owned policies

    @property
    def is_system(self) -> bool:
        return is_system_source(self.source)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "enabled": self.enabled,
            "type": self.type.value,
            "items": self.items,
        }
        if self.source is not None:
            payload["source"] = self.source
        return payload

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "PolicyDocument":
        """Build from an engine response, flat or wrapped as {id, data: {...}}."""
        body = data
        if isinstance(data.get("data"), dict):
            body = data["data"]

        policy_id = coerce_int(data.get("id"))
        if policy_id is None:
            policy_id = coerce_int(body.get("id"))

        raw_type = body.get("type") or PolicyType.CALL.value
        try:
            policy_type = PolicyType(raw_type)
        except ValueError:
            raise DocumentFormatError(f"Unknown policy type: {raw_type}")

        items = body.get("items")
        if items is None:
            items = []
        if not isinstance(items, list):
            raise DocumentFormatError("Policy document items must be a list")

        return cls(
            id=policy_id,
            name=body.get("name", ""),
            enabled=bool(body.get("enabled", True)),
            type=policy_type,
            items=items,
            source=body.get("source"),
        )


@dataclass
class CloneReport:
    """What was stripped from a policy while cloning it."""

    messages: List[str] = field(default_factory=list)

    def add(self, message: str) -> None:
        self.messages.append(message)

    def to_text(self, policy_name: str) -> str:
        """Sorted plain-text report, empty when nothing was removed."""
        if not self.messages:
            return ""
        header = f"Policy Clone Report for: {policy_name}"
        return "\n".join([header, "=" * 50, ""] + sorted(self.messages))


# =============================================================================
# Validation Models
# =============================================================================


@dataclass
class ValidationIssue:
    """A validation issue found in a policy graph."""

    severity: str  # error, warning
    message: str
    node_id: Optional[str] = None
    edge_id: Optional[str] = None
    item_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity,
            "message": self.message,
            "nodeId": self.node_id,
            "edgeId": self.edge_id,
            "itemId": self.item_id,
        }


@dataclass
class ValidationResult:
    """Result of policy graph validation."""

    valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)
    checked_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "warning"]


__all__ = [
    "NodeDefinition",
    "ChildItemDefinition",
    "ChildItem",
    "Node",
    "Edge",
    "new_node",
    "new_child_item",
    "EventSubscription",
    "DesiredEventNode",
    "PolicyDocument",
    "CloneReport",
    "is_system_source",
    "ValidationIssue",
    "ValidationResult",
]
