"""
Policy Persistence.

Saves, loads and deletes policy graphs against the policy engine, keeping
the policy's event subscriptions in step.
"""

import logging
from typing import Callable, Optional

from ..exceptions import ProtectedPolicyError, TransportError, ValidationError
from ..graph import PolicyGraph
from ..models import PolicyDocument
from ..nodes import NodeRegistry
from ..transform import parse_document, serialize_graph
from .reconciler import EventSubscriptionReconciler, ReconciliationReport

logger = logging.getLogger(__name__)


class PolicyPersistence:
    """
    Create-or-update and cascade-delete of policy documents.

    Document writes are hard failures: any TransportError propagates and
    the graph keeps its previous id. Event subscription reconciliation
    after a successful write is soft; its outcome is kept on
    ``last_report``.

    Args:
        engine: Policy engine client
        reconciler: Event subscription reconciler for the same organization
        organization_id: Organization the policies belong to
        persist_links: Write the document again when reconciliation linked
            new subscription ids, so the links survive a reload
    """

    def __init__(
        self,
        engine,
        reconciler: EventSubscriptionReconciler,
        organization_id: int,
        persist_links: bool = True,
        registry: Optional[NodeRegistry] = None,
    ):
        self.engine = engine
        self.reconciler = reconciler
        self.organization_id = organization_id
        self.persist_links = persist_links
        self.registry = registry
        self.last_report: Optional[ReconciliationReport] = None

    def save(
        self,
        graph: PolicyGraph,
        is_extension_available: Optional[Callable[[str], bool]] = None,
    ) -> PolicyDocument:
        """
        Validate and write a graph, then reconcile its event subscriptions.

        Creates the policy when the graph has no id yet, otherwise
        overwrites it. The resulting id is written back onto the graph.

        Raises:
            ValidationError: If the graph is invalid; nothing is sent
            TransportError: If the document write fails
        """
        errors = graph.validate(is_extension_available)
        if errors:
            raise ValidationError(issues=errors)

        document = serialize_graph(graph, self.registry)
        if graph.id is None:
            saved = self.engine.create(self.organization_id, document)
        else:
            saved = self.engine.update(self.organization_id, graph.id, document)
        graph.id = saved.id

        logger.info(f"Saved policy {graph.id} ({graph.name})")

        if self._sync_events(graph) and self.persist_links:
            try:
                saved = self.engine.update(
                    self.organization_id, graph.id, serialize_graph(graph, self.registry)
                )
            except TransportError as e:
                logger.warning(
                    f"Policy {graph.id} saved but subscription links were not stored: {e}"
                )

        return saved

    def _sync_events(self, graph: PolicyGraph) -> int:
        """Reconcile subscriptions; returns how many child items got a new link."""
        self.last_report = None
        try:
            report = self.reconciler.reconcile_with_report(graph.id, graph.event_nodes())
        except TransportError as e:
            logger.warning(f"Policy {graph.id} saved but event subscriptions were not synced: {e}")
            return 0

        self.last_report = report
        return graph.link_subscriptions(report.links)

    def load(self, policy_id: int) -> PolicyGraph:
        """Fetch a policy document and parse it into a graph."""
        document = self.engine.get(self.organization_id, policy_id)
        return parse_document(document, self.registry)

    def delete(self, policy_id: int) -> ReconciliationReport:
        """
        Delete a policy and its event subscriptions.

        System policies are refused before anything is touched. Subscriptions
        are removed next; if they cannot even be listed the document is left
        untouched. Individual subscription delete failures do not stop the
        document delete.

        Raises:
            ProtectedPolicyError: If the policy is a system policy
            TransportError: If fetching the policy, listing its subscriptions
                or deleting the document fails
        """
        if self.engine.get(self.organization_id, policy_id).is_system:
            raise ProtectedPolicyError(policy_id)

        report = self.reconciler.reconcile_with_report(policy_id, [])
        self.last_report = report

        self.engine.delete(self.organization_id, policy_id)
        logger.info(f"Deleted policy {policy_id}")
        return report
