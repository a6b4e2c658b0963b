"""Shared pytest fixtures for testing."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from routing_policy_sync.clients import Credential
from routing_policy_sync.config import ChildItemType, NodeType, get_settings
from routing_policy_sync.graph import PolicyGraph
from routing_policy_sync.models import ChildItem, EventSubscription, Node


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Reload settings for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Graph Fixtures
# =============================================================================


def build_policy_graph(name: str = "Main Line") -> PolicyGraph:
    """Inbound number -> action (greeting + event trigger) -> finish."""
    graph = PolicyGraph(name=name)
    graph.add_node(Node(id="inbound", type=NodeType.INBOUND_NUMBER, name="Inbound"))
    graph.add_node(Node(id="action", type=NodeType.ACTION, name="Action"))
    graph.add_node(Node(id="finish", type=NodeType.FINISH, name="Finish"))

    graph.add_child_item(
        "action",
        ChildItem(id="speak-1", type=ChildItemType.SPEAK, name="Greeting", config={"text": "Hello"}),
    )
    graph.add_child_item(
        "action",
        ChildItem(
            id="event-1",
            type=ChildItemType.EVENT,
            name="Case Created",
            config={"eventType": "salesforce", "eventName": "CaseCreated"},
        ),
    )

    graph.connect("inbound", "action")
    graph.connect("action", "finish")
    return graph


@pytest.fixture
def policy_graph() -> PolicyGraph:
    """A valid graph with one event trigger."""
    return build_policy_graph()


# =============================================================================
# Remote Fixtures
# =============================================================================


def make_subscription(
    subscription_id: str,
    name: str = "Event",
    event_type: str = "salesforce",
    policy_id: int = 100,
    enabled: bool = True,
    config: Optional[Dict[str, Any]] = None,
) -> EventSubscription:
    return EventSubscription(
        id=subscription_id,
        name=name,
        event_type=event_type,
        policy_id=policy_id,
        enabled=enabled,
        config=config or {},
        organization_id=1001,
    )


class FakeEventService:
    """In-memory event subscription service recording every write."""

    def __init__(self, subscriptions: Optional[List[EventSubscription]] = None):
        self.subscriptions = {s.id: s for s in subscriptions or []}
        self.writes: List[tuple] = []
        self.fail_on: Dict[tuple, Exception] = {}
        self._next_id = 1

    def list_for_policy(self, org_id: int, policy_id: int) -> List[EventSubscription]:
        return [s for s in self.subscriptions.values() if s.policy_id == policy_id]

    def create(self, org_id: int, payload: Dict[str, Any]) -> EventSubscription:
        self._maybe_fail("create", payload["name"])
        subscription_id = f"sub-{self._next_id}"
        self._next_id += 1
        subscription = EventSubscription.from_dict(
            {**payload, "id": subscription_id, "organizationId": org_id}
        )
        self.subscriptions[subscription_id] = subscription
        self.writes.append(("create", subscription_id))
        return subscription

    def update(self, org_id: int, subscription_id: str, fields: Dict[str, Any]) -> EventSubscription:
        self._maybe_fail("update", subscription_id)
        current = self.subscriptions[subscription_id].to_dict()
        subscription = EventSubscription.from_dict({**current, **fields, "id": subscription_id})
        self.subscriptions[subscription_id] = subscription
        self.writes.append(("update", subscription_id))
        return subscription

    def delete(self, org_id: int, subscription_id: str) -> None:
        self._maybe_fail("delete", subscription_id)
        del self.subscriptions[subscription_id]
        self.writes.append(("delete", subscription_id))

    def _maybe_fail(self, operation: str, key: str) -> None:
        error = self.fail_on.get((operation, key))
        if error is not None:
            raise error


@pytest.fixture
def event_service() -> FakeEventService:
    return FakeEventService()


@pytest.fixture
def credential() -> Credential:
    """Credential valid for the next hour."""
    return Credential(
        token="test-token",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )


@pytest.fixture
def graph_factory():
    """Factory building fresh copies of the standard graph."""
    return build_policy_graph


@pytest.fixture
def subscription_factory():
    """Factory for remote subscriptions (policy 100 by default)."""
    return make_subscription


@pytest.fixture
def event_service_factory():
    """Factory for a fake event service seeded with subscriptions."""
    return FakeEventService
