"""
Synchronization of policy graphs with the remote services.
"""

from .persistence import PolicyPersistence
from .reconciler import EventSubscriptionReconciler, ReconciliationReport, summarize

__all__ = [
    "PolicyPersistence",
    "EventSubscriptionReconciler",
    "ReconciliationReport",
    "summarize",
]
