"""Markup tree used to describe epiviz environments and charts."""

from .tag import ChartTag, EnvironmentTag, Tag

__all__ = [
    "ChartTag",
    "EnvironmentTag",
    "Tag",
]
