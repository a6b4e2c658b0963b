"""Unit tests for the policy engine and event service clients."""

import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import respx

from routing_policy_sync import __version__
from routing_policy_sync.clients import Credential, EventSubscriptionClient, PolicyEngineClient
from routing_policy_sync.config import EventsSettings, PolicyEngineSettings, PolicyType
from routing_policy_sync.exceptions import (
    AuthenticationError,
    ConflictError,
    CredentialExpiredError,
    NotFoundError,
    RateLimitError,
    RequestTimeoutError,
    RequestValidationError,
    ServerError,
    TransportError,
)
from routing_policy_sync.models import PolicyDocument


SAPIEN = "https://sapien.test/v1"
EVENTS = "https://events.test"
POLICIES = f"{SAPIEN}/organisation/1001/dial-plan/policy-destination-number"
SUBSCRIPTIONS = f"{EVENTS}/v1/events/1001/subscriptions"


@pytest.fixture
def engine(credential):
    client = PolicyEngineClient(credential, settings=PolicyEngineSettings(host=SAPIEN))
    yield client
    client.close()


@pytest.fixture
def events(credential):
    client = EventSubscriptionClient(credential, settings=EventsSettings(host=EVENTS))
    yield client
    client.close()


@pytest.fixture
def document():
    return PolicyDocument(
        name="Main Line",
        items=[{"id": "n1", "templateClass": "ModFinish", "variables": {}, "subItems": []}],
    )


def subscription_body(subscription_id, policy_id=100, name="Event"):
    return {
        "id": subscription_id,
        "name": name,
        "eventType": "salesforce",
        "policyId": str(policy_id),
        "enabled": True,
        "config": {},
        "filters": [],
    }


class TestPolicyEngineClient:
    """Tests for PolicyEngineClient."""

    @respx.mock
    def test_create(self, engine, document):
        """Test that create posts the document and reads back the id."""
        route = respx.post(POLICIES).mock(return_value=httpx.Response(201, json={"id": 4711}))

        saved = engine.create(1001, document)

        assert saved.id == 4711
        assert saved.name == "Main Line"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["User-Agent"] == f"routing-policy-sync/{__version__}"
        assert json.loads(request.content) == {
            "name": "Main Line",
            "enabled": True,
            "type": "CALL",
            "items": document.items,
        }

    @respx.mock
    def test_create_without_id(self, engine, document):
        """Test that a create response without an id is an error."""
        respx.post(POLICIES).mock(return_value=httpx.Response(200, json={}))

        with pytest.raises(TransportError, match="no policy id"):
            engine.create(1001, document)

    @respx.mock
    def test_update(self, engine, document):
        """Test that update puts the document to its id."""
        route = respx.put(f"{POLICIES}/4711").mock(return_value=httpx.Response(204))

        saved = engine.update(1001, 4711, document)

        assert route.called
        assert saved.id == 4711
        assert saved.items == document.items

    @respx.mock
    def test_get_wrapped(self, engine):
        """Test fetching a document returned in a data wrapper."""
        respx.get(f"{POLICIES}/4711").mock(
            return_value=httpx.Response(
                200,
                json={"id": 4711, "data": {"name": "Main Line", "type": "DIGITAL", "items": []}},
            )
        )

        document = engine.get(1001, 4711)

        assert document.id == 4711
        assert document.type == PolicyType.DIGITAL

    @respx.mock
    def test_get_without_id(self, engine):
        """Test that the requested id is used when the body omits it."""
        respx.get(f"{POLICIES}/4711").mock(
            return_value=httpx.Response(200, json={"name": "Main Line", "items": []})
        )

        assert engine.get(1001, 4711).id == 4711

    @respx.mock
    def test_patch(self, engine):
        """Test that patch tunnels through POST."""
        route = respx.post(f"{POLICIES}/4711").mock(
            return_value=httpx.Response(200, json={"data": {"enabled": False}})
        )

        result = engine.patch(1001, 4711, {"enabled": False})

        assert result == {"enabled": False}
        assert route.calls.last.request.headers["X-HTTP-Method-Override"] == "PATCH"

    @respx.mock
    def test_delete(self, engine):
        """Test that delete uses the policy path."""
        route = respx.delete(f"{SAPIEN}/organisation/1001/dial-plan/policy/4711").mock(
            return_value=httpx.Response(204)
        )

        engine.delete(1001, 4711)

        assert route.called

    @pytest.mark.parametrize(
        "status,error",
        [
            (400, RequestValidationError),
            (401, AuthenticationError),
            (403, AuthenticationError),
            (404, NotFoundError),
            (409, ConflictError),
            (422, RequestValidationError),
            (429, RateLimitError),
            (500, ServerError),
            (503, ServerError),
            (418, TransportError),
        ],
    )
    @respx.mock
    def test_status_mapping(self, engine, status, error):
        """Test that error statuses map to exception types."""
        respx.get(f"{POLICIES}/1").mock(return_value=httpx.Response(status, text="nope"))

        with pytest.raises(error) as exc_info:
            engine.get(1001, 1)

        assert type(exc_info.value) is error
        assert exc_info.value.status_code == status
        assert exc_info.value.response_text == "nope"
        assert f"Sapien API error: {status} - nope" in str(exc_info.value)

    @respx.mock
    def test_rate_limit_retry_after(self, engine):
        """Test that Retry-After is parsed."""
        respx.get(f"{POLICIES}/1").mock(
            return_value=httpx.Response(429, headers={"Retry-After": "30"}, text="slow down")
        )

        with pytest.raises(RateLimitError) as exc_info:
            engine.get(1001, 1)

        assert exc_info.value.retry_after == 30

    @respx.mock(assert_all_called=False)
    def test_expired_credential_sends_nothing(self):
        """Test that an expired credential is refused locally."""
        route = respx.get(f"{POLICIES}/1").mock(return_value=httpx.Response(200, json={}))
        expired = Credential(token="old", expires_at=datetime.now(timezone.utc) - timedelta(seconds=1))
        client = PolicyEngineClient(expired, settings=PolicyEngineSettings(host=SAPIEN))

        with pytest.raises(CredentialExpiredError) as exc_info:
            client.get(1001, 1)

        assert not route.called
        assert exc_info.value.code == "CREDENTIAL_EXPIRED"
        assert isinstance(exc_info.value, TransportError)

    def test_credential_inside_leeway(self):
        """Test that a credential about to expire is refused too."""
        almost = Credential(token="old", expires_at=datetime.now(timezone.utc) + timedelta(seconds=5))
        client = PolicyEngineClient(almost, settings=PolicyEngineSettings(host=SAPIEN))

        with pytest.raises(CredentialExpiredError):
            client.get(1001, 1)

    @respx.mock
    def test_timeout(self, engine):
        """Test that timeouts are wrapped."""
        respx.get(f"{POLICIES}/1").mock(side_effect=httpx.ConnectTimeout)

        with pytest.raises(RequestTimeoutError) as exc_info:
            engine.get(1001, 1)

        assert exc_info.value.timeout_seconds == 30.0

    @respx.mock
    def test_connection_error(self, engine):
        """Test that network failures are wrapped."""
        respx.get(f"{POLICIES}/1").mock(side_effect=httpx.ConnectError)

        with pytest.raises(TransportError, match="Request failed"):
            engine.get(1001, 1)


class TestEventSubscriptionClient:
    """Tests for EventSubscriptionClient."""

    @respx.mock
    def test_list_for_policy(self, events):
        """Test that the organization list is filtered by policy."""
        respx.get(SUBSCRIPTIONS).mock(
            return_value=httpx.Response(
                200,
                json={"data": [subscription_body("a", 100), subscription_body("b", 200), subscription_body("c", 100)]},
            )
        )

        subscriptions = events.list_for_policy(1001, 100)

        assert [s.id for s in subscriptions] == ["a", "c"]
        assert subscriptions[0].policy_id == 100

    @respx.mock
    def test_list_bare_array(self, events):
        """Test a list response without a wrapper."""
        respx.get(SUBSCRIPTIONS).mock(return_value=httpx.Response(200, json=[subscription_body("a")]))

        assert [s.id for s in events.list(1001)] == ["a"]

    @respx.mock
    def test_create(self, events):
        """Test creating a subscription."""
        route = respx.post(SUBSCRIPTIONS).mock(
            return_value=httpx.Response(201, json=subscription_body("sub-1", name="Case Created"))
        )
        payload = {"name": "Case Created", "eventType": "salesforce", "policyId": 100, "enabled": True}

        subscription = events.create(1001, payload)

        assert subscription.id == "sub-1"
        assert json.loads(route.calls.last.request.content) == payload

    @respx.mock
    def test_create_without_id(self, events):
        """Test that a create response without an id is an error."""
        respx.post(SUBSCRIPTIONS).mock(return_value=httpx.Response(201, json={"name": "x"}))

        with pytest.raises(TransportError, match="no subscription id"):
            events.create(1001, {"name": "x"})

    @respx.mock
    def test_update_empty_response(self, events):
        """Test that an empty update response falls back to the sent fields."""
        respx.put(f"{SUBSCRIPTIONS}/sub-1").mock(return_value=httpx.Response(204))

        subscription = events.update(1001, "sub-1", {"name": "Renamed", "eventType": "webhook", "policyId": 100})

        assert subscription.id == "sub-1"
        assert subscription.name == "Renamed"
        assert subscription.event_type == "webhook"

    @respx.mock
    def test_delete(self, events):
        """Test deleting a subscription."""
        route = respx.delete(f"{SUBSCRIPTIONS}/sub-1").mock(return_value=httpx.Response(204))

        events.delete(1001, "sub-1")

        assert route.called

    @respx.mock
    def test_errors_name_the_service(self, events):
        """Test that error messages identify the events service."""
        respx.delete(f"{SUBSCRIPTIONS}/sub-1").mock(return_value=httpx.Response(500, text="boom"))

        with pytest.raises(ServerError, match="Events API error: 500 - boom"):
            events.delete(1001, "sub-1")
