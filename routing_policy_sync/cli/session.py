"""Credential and client wiring for CLI commands."""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import click

from ..clients import Credential, EventSubscriptionClient, PolicyEngineClient
from ..config import get_settings
from ..sync import EventSubscriptionReconciler, PolicyPersistence


class Session:
    """Open clients for one CLI invocation."""

    def __init__(self, credential: Credential, organization_id: int):
        self.organization_id = organization_id
        self.engine = PolicyEngineClient(credential)
        self.events = EventSubscriptionClient(credential)
        self.reconciler = EventSubscriptionReconciler(self.events, organization_id)
        self.persistence = PolicyPersistence(self.engine, self.reconciler, organization_id)

    def close(self) -> None:
        self.engine.close()
        self.events.close()


def resolve_credential(obj: Dict[str, Any]) -> Credential:
    """Build the credential from the --token option."""
    token: Optional[str] = obj.get("token")
    if not token:
        raise click.UsageError("A token is required. Pass --token or set ROUTING_POLICY_TOKEN.")

    settings = get_settings()
    return Credential.from_jwt(
        token,
        scope=settings.credential_scope,
        default_lifetime=settings.jwt_lifetime_seconds,
    )


def resolve_organization(obj: Dict[str, Any], credential: Credential) -> int:
    """Organization from --org-id, then settings, then the token's claims."""
    org_id = obj.get("org_id") or get_settings().organization_id or credential.organization_id
    if org_id is None:
        raise click.UsageError("An organization is required. Pass --org-id or set ROUTING_POLICY_ORG_ID.")
    return int(org_id)


@contextmanager
def open_session(obj: Dict[str, Any]) -> Iterator[Session]:
    """Open clients for a command and close them afterwards."""
    credential = resolve_credential(obj)
    session = Session(credential, resolve_organization(obj, credential))
    try:
        yield session
    finally:
        session.close()
