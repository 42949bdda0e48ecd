"""In-memory data manager serving measurement sets to charts."""

from .manager import EpivizChartDataMgr
from .measurement_set import PolarsMeasurementSet

__all__ = [
    "EpivizChartDataMgr",
    "PolarsMeasurementSet",
]
