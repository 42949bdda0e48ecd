"""Chart composition over a fixed genomic window."""

from .chart import EpivizChart, epiviz_env

__all__ = [
    "EpivizChart",
    "epiviz_env",
]
