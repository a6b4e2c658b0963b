"""
Event subscription service client.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import EventsSettings, get_settings
from ..exceptions import TransportError
from ..models import EventSubscription
from .base import BaseClient
from .credentials import Credential

logger = logging.getLogger(__name__)


class EventSubscriptionClient(BaseClient):
    """
    Client for ``/v1/events/{orgId}/subscriptions``.

    The service has no policy filter, so ``list_for_policy`` filters the
    organization's full subscription list locally.
    """

    service_name = "Events API"

    def __init__(
        self,
        credential: Credential,
        settings: Optional[EventsSettings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        settings = settings or get_settings().events
        super().__init__(
            credential,
            base_url=settings.host,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            expiry_leeway=get_settings().expiry_leeway_seconds,
            http_client=http_client,
        )

    @staticmethod
    def _path(org_id: int, subscription_id: Optional[str] = None) -> str:
        path = f"/v1/events/{org_id}/subscriptions"
        if subscription_id is not None:
            path = f"{path}/{subscription_id}"
        return path

    def list(self, org_id: int) -> List[EventSubscription]:
        """List every subscription in the organization."""
        response = self.request("GET", self._path(org_id))
        if isinstance(response, dict):
            response = response.get("data") or []
        return [EventSubscription.from_dict(item) for item in response]

    def list_for_policy(self, org_id: int, policy_id: int) -> List[EventSubscription]:
        """List the subscriptions that belong to one policy."""
        return [s for s in self.list(org_id) if s.policy_id == policy_id]

    def create(self, org_id: int, payload: Dict[str, Any]) -> EventSubscription:
        """Create a subscription; the result carries the server-assigned id."""
        response = self.request("POST", self._path(org_id), json=payload)
        body = self._unwrap(response)
        if not body.get("id"):
            raise TransportError(f"{self.service_name} error: create response has no subscription id")
        subscription = EventSubscription.from_dict(body)

        logger.info(f"Created event subscription: {subscription.id} ({subscription.name})")
        return subscription

    def update(self, org_id: int, subscription_id: str, fields: Dict[str, Any]) -> EventSubscription:
        """Update fields of an existing subscription."""
        response = self.request("PUT", self._path(org_id, subscription_id), json=fields)
        body = self._unwrap(response)
        if not body.get("id"):
            body = {**fields, **body, "id": subscription_id}
        subscription = EventSubscription.from_dict(body)

        logger.info(f"Updated event subscription: {subscription.id}")
        return subscription

    def delete(self, org_id: int, subscription_id: str) -> None:
        """Delete a subscription."""
        self.request("DELETE", self._path(org_id, subscription_id))
        logger.info(f"Deleted event subscription: {subscription_id}")

    @staticmethod
    def _unwrap(response: Any) -> Dict[str, Any]:
        if isinstance(response, dict) and isinstance(response.get("data"), dict):
            return response["data"]
        return response
