"""
Transport clients for the policy engine and the event subscription service.
"""

from .base import BaseClient
from .credentials import Credential
from .events import EventSubscriptionClient
from .policy_engine import PolicyEngineClient

__all__ = [
    "BaseClient",
    "Credential",
    "EventSubscriptionClient",
    "PolicyEngineClient",
]
