"""
Routing Policy Sync.

Builds call and message routing policies as graphs and keeps two remote
systems consistent with them:

1. Policy Graph:
   - Entry point, container and terminal nodes
   - Ordered child items owned by container nodes
   - Local validation (reachability, extension numbers, configuration)

2. Policy Engine:
   - Graph to nested document transform and back
   - Create-or-update save, cascade delete

3. Event Subscriptions:
   - Reconciliation of event-triggering child items against the
     subscription service, with per-item failure isolation
"""

__version__ = "1.0.0"

from .config import (
    ChildItemType,
    EdgeKind,
    EventType,
    NodeCategory,
    NodeType,
    PolicyType,
    Settings,
    get_settings,
)
from .exceptions import (
    DocumentFormatError,
    GraphError,
    PolicySyncError,
    ProtectedPolicyError,
    ReconciliationItemError,
    TransportError,
    ValidationError,
)
from .graph import PolicyGraph, PolicyGraphValidator
from .models import (
    ChildItem,
    CloneReport,
    DesiredEventNode,
    Edge,
    EventSubscription,
    Node,
    PolicyDocument,
    ValidationIssue,
    ValidationResult,
    new_child_item,
    new_node,
)
from .transform import parse_document, serialize_graph
from .clients import Credential, EventSubscriptionClient, PolicyEngineClient
from .sync import EventSubscriptionReconciler, PolicyPersistence, ReconciliationReport

__all__ = [
    "__version__",
    # Configuration
    "ChildItemType",
    "EdgeKind",
    "EventType",
    "NodeCategory",
    "NodeType",
    "PolicyType",
    "Settings",
    "get_settings",
    # Errors
    "DocumentFormatError",
    "GraphError",
    "PolicySyncError",
    "ProtectedPolicyError",
    "ReconciliationItemError",
    "TransportError",
    "ValidationError",
    # Graph
    "PolicyGraph",
    "PolicyGraphValidator",
    "ChildItem",
    "CloneReport",
    "DesiredEventNode",
    "Edge",
    "EventSubscription",
    "Node",
    "PolicyDocument",
    "ValidationIssue",
    "ValidationResult",
    "new_child_item",
    "new_node",
    # Transform
    "parse_document",
    "serialize_graph",
    # Remote
    "Credential",
    "EventSubscriptionClient",
    "PolicyEngineClient",
    "EventSubscriptionReconciler",
    "PolicyPersistence",
    "ReconciliationReport",
]
