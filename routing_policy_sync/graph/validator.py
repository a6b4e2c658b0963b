"""
Policy Graph Validator.

Validates graph structure, reachability, extension numbers, and typed
node/child item configuration before a policy is saved.
"""

import logging
from collections import deque
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Set

from pydantic import ValidationError as ConfigError

from ..config import EdgeKind, NodeType, ValidationSettings, get_settings
from ..models import Node, ValidationIssue, ValidationResult
from ..nodes import NodeRegistry, get_node_registry

if TYPE_CHECKING:
    from .model import PolicyGraph

logger = logging.getLogger(__name__)

EXTENSION_KEYS = ("internalExtension", "extension")


def extension_of(node: Node) -> Optional[str]:
    """Extension number configured on a node, if any."""
    for key in EXTENSION_KEYS:
        value = node.data.get(key)
        if value is not None and str(value).strip() != "":
            return str(value).strip()
    return None


class PolicyGraphValidator:
    """
    Validates a policy graph.

    Checks:
    - Structure (name, entry points, edge references, child order)
    - Reachability (a terminal reachable from an entry point)
    - Extension numbers (range, uniqueness, external availability)
    - Node and child item configuration against their typed models
    """

    def __init__(
        self,
        registry: Optional[NodeRegistry] = None,
        settings: Optional[ValidationSettings] = None,
    ):
        self.registry = registry or get_node_registry()
        self.settings = settings or get_settings().validation

    def validate(
        self,
        graph: "PolicyGraph",
        is_extension_available: Optional[Callable[[str], bool]] = None,
    ) -> ValidationResult:
        """
        Validate a complete graph.

        Args:
            graph: Graph to validate
            is_extension_available: Optional predicate consulted for every
                extension number that passes the local checks

        Returns:
            ValidationResult with issues found
        """
        issues: List[ValidationIssue] = []

        issues.extend(self._validate_structure(graph))
        issues.extend(self._validate_edges(graph))
        issues.extend(self._validate_children(graph))
        issues.extend(self._validate_reachability(graph))
        issues.extend(self._validate_extensions(graph, is_extension_available))
        issues.extend(self._validate_configs(graph))

        valid = all(i.severity != "error" for i in issues)
        for issue in issues:
            if issue.severity == "warning":
                logger.warning(f"Policy {graph.name!r}: {issue.message}")

        return ValidationResult(valid=valid, issues=issues)

    def _validate_structure(self, graph: "PolicyGraph") -> List[ValidationIssue]:
        issues = []

        if not graph.name or not graph.name.strip():
            issues.append(ValidationIssue(severity="error", message="Policy name is required"))

        if not graph.nodes:
            issues.append(
                ValidationIssue(severity="error", message="Policy must have at least one node")
            )
        elif not graph.entry_points():
            issues.append(
                ValidationIssue(
                    severity="error",
                    message="Policy must have at least one entry point node",
                )
            )

        return issues

    def _validate_edges(self, graph: "PolicyGraph") -> List[ValidationIssue]:
        issues = []
        defaults: Dict[str, int] = {}

        for edge in graph.edges:
            if edge.source_node_id not in graph.nodes:
                issues.append(
                    ValidationIssue(
                        severity="error",
                        message=f"Edge source node not found: {edge.source_node_id}",
                        edge_id=edge.id,
                    )
                )
            if edge.target_node_id not in graph.nodes:
                issues.append(
                    ValidationIssue(
                        severity="error",
                        message=f"Edge target node not found: {edge.target_node_id}",
                        edge_id=edge.id,
                    )
                )
            if edge.kind == EdgeKind.DEFAULT:
                defaults[edge.source_node_id] = defaults.get(edge.source_node_id, 0) + 1

        for node_id, count in defaults.items():
            if count > 1:
                issues.append(
                    ValidationIssue(
                        severity="error",
                        message=f"Node has {count} default edges, at most one is allowed",
                        node_id=node_id,
                    )
                )

        return issues

    def _validate_children(self, graph: "PolicyGraph") -> List[ValidationIssue]:
        issues = []
        seen: Set[str] = set()

        for node in graph.nodes.values():
            orders = [item.order for item in node.children]
            if orders != list(range(len(orders))):
                issues.append(
                    ValidationIssue(
                        severity="error",
                        message="Child item order must be dense and zero-based",
                        node_id=node.id,
                    )
                )
            for item in node.children:
                if item.id in seen:
                    issues.append(
                        ValidationIssue(
                            severity="error",
                            message=f"Duplicate child item ID: {item.id}",
                            node_id=node.id,
                            item_id=item.id,
                        )
                    )
                seen.add(item.id)

        return issues

    def _validate_reachability(self, graph: "PolicyGraph") -> List[ValidationIssue]:
        """Breadth-first walk over every edge kind from all entry points."""
        issues = []
        entry_ids = [n.id for n in graph.entry_points()]
        if not entry_ids:
            return issues

        adjacency: Dict[str, List[str]] = {node_id: [] for node_id in graph.nodes}
        for edge in graph.edges:
            if edge.source_node_id in adjacency and edge.target_node_id in graph.nodes:
                adjacency[edge.source_node_id].append(edge.target_node_id)

        reachable: Set[str] = set(entry_ids)
        queue = deque(entry_ids)
        while queue:
            current = queue.popleft()
            for target in adjacency[current]:
                if target not in reachable:
                    reachable.add(target)
                    queue.append(target)

        if not any(self.registry.is_terminal(graph.nodes[n].type) for n in reachable):
            issues.append(
                ValidationIssue(
                    severity="error",
                    message="No terminal node (finish or toPolicy) is reachable from an entry point",
                )
            )

        for node_id in graph.nodes:
            if node_id not in reachable:
                issues.append(
                    ValidationIssue(
                        severity="warning",
                        message="Node is unreachable from every entry point",
                        node_id=node_id,
                    )
                )

        return issues

    def _validate_extensions(
        self,
        graph: "PolicyGraph",
        is_extension_available: Optional[Callable[[str], bool]],
    ) -> List[ValidationIssue]:
        issues = []
        first_seen: Dict[str, str] = {}
        low, high = self.settings.extension_min, self.settings.extension_max

        for node in graph.entry_points():
            extension = extension_of(node)
            if extension is None:
                if node.type == NodeType.EXTENSION_NUMBER:
                    issues.append(
                        ValidationIssue(
                            severity="error",
                            message="Extension number is required",
                            node_id=node.id,
                        )
                    )
                continue

            if not (extension.isascii() and extension.isdigit()):
                issues.append(
                    ValidationIssue(
                        severity="error",
                        message=f"Extension must be numeric: {extension}",
                        node_id=node.id,
                    )
                )
                continue

            if not low <= int(extension) <= high:
                issues.append(
                    ValidationIssue(
                        severity="error",
                        message=f"Extension {extension} must be between {low} and {high}",
                        node_id=node.id,
                    )
                )
                continue

            if extension in first_seen:
                issues.append(
                    ValidationIssue(
                        severity="error",
                        message=f"Duplicate extension number {extension} (also on node {first_seen[extension]})",
                        node_id=node.id,
                    )
                )
                continue
            first_seen[extension] = node.id

            if is_extension_available is not None and not is_extension_available(extension):
                issues.append(
                    ValidationIssue(
                        severity="error",
                        message=f"Extension {extension} is already in use",
                        node_id=node.id,
                    )
                )

        return issues

    def _validate_configs(self, graph: "PolicyGraph") -> List[ValidationIssue]:
        issues = []

        for node in graph.nodes.values():
            try:
                self.registry.node_config(node)
            except ConfigError as e:
                issues.extend(self._config_issues(e, node_id=node.id))

            for item in node.children:
                try:
                    self.registry.child_config(item)
                except ConfigError as e:
                    issues.extend(self._config_issues(e, node_id=node.id, item_id=item.id))

        return issues

    @staticmethod
    def _config_issues(
        error: ConfigError,
        node_id: str,
        item_id: Optional[str] = None,
    ) -> List[ValidationIssue]:
        return [
            ValidationIssue(
                severity="error",
                message=f"Invalid configuration {'.'.join(str(p) for p in detail['loc'])}: {detail['msg']}",
                node_id=node_id,
                item_id=item_id,
            )
            for detail in error.errors()
        ]


def quick_validate(graph: "PolicyGraph") -> bool:
    """Quick validation check without detailed issues."""
    return PolicyGraphValidator(registry=graph.registry).validate(graph).valid
