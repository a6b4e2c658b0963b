"""
Event Subscription Reconciler.

Drives the remote subscription set of one policy towards the event
triggers declared in its graph. One pass:

1. Fetch the policy's existing subscriptions (failure aborts the pass)
2. Update linked subscriptions whose desired state differs
3. Create subscriptions for unlinked triggers
4. Delete orphans, i.e. subscriptions no trigger links to

Each create, update and delete is isolated: a failure is logged and
recorded on the report, and the pass carries on. Nothing is retried
within a pass; the next pass picks up whatever is left.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set

from ..exceptions import ReconciliationItemError
from ..models import DesiredEventNode, EventSubscription

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationReport:
    """Outcome of one reconciliation pass."""

    policy_id: int
    active: List[EventSubscription] = field(default_factory=list)
    created: List[EventSubscription] = field(default_factory=list)
    updated: List[EventSubscription] = field(default_factory=list)
    unchanged: List[EventSubscription] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    failures: List[ReconciliationItemError] = field(default_factory=list)
    links: Dict[str, str] = field(default_factory=dict)  # desired node id -> subscription id

    @property
    def mutations(self) -> int:
        """Number of successful writes issued during the pass."""
        return len(self.created) + len(self.updated) + len(self.deleted)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def to_dict(self) -> Dict[str, Any]:
        return {
            "policyId": self.policy_id,
            "active": [s.to_dict() for s in self.active],
            "created": [s.id for s in self.created],
            "updated": [s.id for s in self.updated],
            "unchanged": [s.id for s in self.unchanged],
            "deleted": list(self.deleted),
            "failures": [
                {"operation": f.operation, "itemId": f.item_id, "error": str(f.cause)}
                for f in self.failures
            ],
            "links": dict(self.links),
        }


class EventSubscriptionReconciler:
    """
    Reconciles event subscriptions for policies of one organization.

    Args:
        client: Event subscription client (list_for_policy/create/update/delete)
        organization_id: Organization the policies belong to
    """

    def __init__(self, client, organization_id: int):
        self.client = client
        self.organization_id = organization_id

    def reconcile(
        self,
        policy_id: int,
        desired: Sequence[DesiredEventNode],
    ) -> List[EventSubscription]:
        """
        Run one pass and return the subscriptions now active for the policy.

        Only successfully created, updated or already up-to-date
        subscriptions are returned; orphans never are.

        Raises:
            TransportError: If the existing subscriptions cannot be fetched
        """
        return self.reconcile_with_report(policy_id, desired).active

    def reconcile_with_report(
        self,
        policy_id: int,
        desired: Sequence[DesiredEventNode],
    ) -> ReconciliationReport:
        """Run one pass and return the full report."""
        existing = self.client.list_for_policy(self.organization_id, policy_id)
        remote = {s.id: s for s in existing}
        report = ReconciliationReport(policy_id=policy_id)

        to_update: List[DesiredEventNode] = []
        to_create: List[DesiredEventNode] = []
        claimed: Set[str] = set()

        for node in desired:
            subscription_id = node.subscription_id
            if subscription_id and subscription_id in remote and subscription_id not in claimed:
                claimed.add(subscription_id)
                to_update.append(node)
            else:
                if subscription_id:
                    logger.warning(
                        f"Event node {node.id} links to subscription {subscription_id} "
                        f"which policy {policy_id} does not have; creating a replacement"
                    )
                to_create.append(node)

        for node in to_update:
            self._update(policy_id, node, remote[node.subscription_id], report)

        for node in to_create:
            self._create(policy_id, node, report)

        # Orphans: every subscription no desired node links to
        linked = {n.subscription_id for n in desired if n.subscription_id}
        for subscription in existing:
            if subscription.id not in linked:
                self._delete(subscription, report)

        logger.info(
            f"Reconciled event subscriptions for policy {policy_id}: "
            f"{len(report.created)} created, {len(report.updated)} updated, "
            f"{len(report.unchanged)} unchanged, {len(report.deleted)} deleted, "
            f"{len(report.failures)} failed"
        )
        return report

    def delete_all_for_policy(self, policy_id: int) -> int:
        """
        Delete every subscription of a policy.

        Returns:
            Number of subscriptions deleted
        """
        return len(self.reconcile_with_report(policy_id, []).deleted)

    # -------------------------------------------------------------------------
    # Per-item operations
    # -------------------------------------------------------------------------

    def _update(
        self,
        policy_id: int,
        node: DesiredEventNode,
        current: EventSubscription,
        report: ReconciliationReport,
    ) -> None:
        if node.matches(current):
            report.unchanged.append(current)
            self._activate(node, current, report)
            return

        try:
            subscription = self.client.update(
                self.organization_id, current.id, node.to_payload(policy_id, include_empty=True)
            )
        except Exception as e:
            self._fail("update", node.id, e, report)
            return

        report.updated.append(subscription)
        self._activate(node, subscription, report)

    def _create(self, policy_id: int, node: DesiredEventNode, report: ReconciliationReport) -> None:
        try:
            subscription = self.client.create(self.organization_id, node.to_payload(policy_id))
        except Exception as e:
            self._fail("create", node.id, e, report)
            return

        report.created.append(subscription)
        self._activate(node, subscription, report)

    def _delete(self, subscription: EventSubscription, report: ReconciliationReport) -> None:
        try:
            self.client.delete(self.organization_id, subscription.id)
        except Exception as e:
            self._fail("delete", subscription.id, e, report)
            return

        report.deleted.append(subscription.id)

    @staticmethod
    def _activate(
        node: DesiredEventNode,
        subscription: EventSubscription,
        report: ReconciliationReport,
    ) -> None:
        report.active.append(subscription)
        report.links[node.id] = subscription.id

    @staticmethod
    def _fail(operation: str, item_id: str, cause: Exception, report: ReconciliationReport) -> None:
        error = ReconciliationItemError(operation, item_id, cause)
        logger.error(str(error))
        report.failures.append(error)


def summarize(report: Optional[ReconciliationReport]) -> str:
    """One-line summary of a pass, for display."""
    if report is None:
        return "event subscriptions not reconciled"
    return (
        f"{len(report.active)} active, {len(report.created)} created, "
        f"{len(report.updated)} updated, {len(report.deleted)} deleted, "
        f"{len(report.failures)} failed"
    )
