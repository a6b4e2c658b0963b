"""
Node Types and Registry.

This module provides the node and child item definitions and the registry
used to resolve them.
"""

from .registry import NodeRegistry, get_node_registry
from .definitions import ALL_NODES, CHILD_ITEMS, CONTAINER_NODES, ENTRY_POINT_NODES

__all__ = [
    "NodeRegistry",
    "get_node_registry",
    "ALL_NODES",
    "CHILD_ITEMS",
    "CONTAINER_NODES",
    "ENTRY_POINT_NODES",
]
