"""
Page order and rotation management.
"""

from .page_order import Direction, PageLayout, PageOrderManager

__all__ = [
    "Direction",
    "PageLayout",
    "PageOrderManager",
]
