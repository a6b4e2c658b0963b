"""
Policy engine client.

Stores policy documents under
``/organisation/{orgId}/dial-plan/policy-destination-number``.
"""

import dataclasses
import logging
from typing import Any, Dict, Optional

import httpx

from ..config import PolicyEngineSettings, get_settings
from ..exceptions import TransportError
from ..models import PolicyDocument
from .base import BaseClient
from .credentials import Credential

logger = logging.getLogger(__name__)


class PolicyEngineClient(BaseClient):
    """
    Client for the policy engine.

    Example:
        >>> with PolicyEngineClient(credential) as engine:
        ...     saved = engine.create(1001, document)
        ...     print(saved.id)
    """

    service_name = "Sapien API"

    def __init__(
        self,
        credential: Credential,
        settings: Optional[PolicyEngineSettings] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        settings = settings or get_settings().policy_engine
        super().__init__(
            credential,
            base_url=settings.host,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            expiry_leeway=get_settings().expiry_leeway_seconds,
            http_client=http_client,
        )

    @staticmethod
    def _policy_path(org_id: int, policy_id: Optional[int] = None) -> str:
        path = f"/organisation/{org_id}/dial-plan/policy-destination-number"
        if policy_id is not None:
            path = f"{path}/{policy_id}"
        return path

    def create(self, org_id: int, document: PolicyDocument) -> PolicyDocument:
        """Create a policy; the returned document carries the new id."""
        response = self.request("POST", self._policy_path(org_id), json=document.to_payload())
        saved = self._document_from(response, document)
        if saved.id is None:
            raise TransportError(f"{self.service_name} error: create response has no policy id")

        logger.info(f"Created policy document: {saved.id} ({saved.name})")
        return saved

    def update(self, org_id: int, policy_id: int, document: PolicyDocument) -> PolicyDocument:
        """Overwrite a policy document."""
        response = self.request("PUT", self._policy_path(org_id, policy_id), json=document.to_payload())
        saved = self._document_from(response, dataclasses.replace(document, id=policy_id))

        logger.info(f"Updated policy document: {policy_id}")
        return saved

    def get(self, org_id: int, policy_id: int) -> PolicyDocument:
        """Fetch a policy document."""
        response = self.request("GET", self._policy_path(org_id, policy_id))
        document = PolicyDocument.from_response(response)
        if document.id is None:
            document.id = policy_id
        return document

    def patch(self, org_id: int, policy_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Partially update policy attributes (name, enabled)."""
        response = self.request(
            "POST",
            self._policy_path(org_id, policy_id),
            json=fields,
            headers={"X-HTTP-Method-Override": "PATCH"},
        )
        return self._unwrap(response)

    def delete(self, org_id: int, policy_id: int) -> None:
        """Delete a policy document."""
        self.request("DELETE", f"/organisation/{org_id}/dial-plan/policy/{policy_id}")
        logger.info(f"Deleted policy document: {policy_id}")

    @staticmethod
    def _unwrap(response: Any) -> Any:
        if isinstance(response, dict) and "data" in response:
            return response["data"]
        return response

    @staticmethod
    def _document_from(response: Any, sent: PolicyDocument) -> PolicyDocument:
        """Parse a write response, falling back to the sent document when the body is partial."""
        if not isinstance(response, dict) or not response:
            return sent

        returned = PolicyDocument.from_response(response)
        body = PolicyEngineClient._unwrap(response)
        if isinstance(body, dict) and "items" in body:
            if returned.id is None:
                returned.id = sent.id
            return returned
        return dataclasses.replace(sent, id=returned.id if returned.id is not None else sent.id)
