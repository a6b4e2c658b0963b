"""
Policy graph model and validation.
"""

from .model import PolicyGraph
from .validator import PolicyGraphValidator, extension_of, quick_validate

__all__ = ["PolicyGraph", "PolicyGraphValidator", "extension_of", "quick_validate"]
