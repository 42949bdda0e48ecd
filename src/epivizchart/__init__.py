"""Epiviz chart composition for genomic regions."""

from epivizchart.composer import EpivizChart, epiviz_env
from epivizchart.core.enums import ChartType, MeasurementType
from epivizchart.core.errors import EpivizChartError, InvalidChartTypeError
from epivizchart.core.models import GenomicWindow, Measurement
from epivizchart.data import EpivizChartDataMgr

__version__ = "0.1.0"

__all__ = [
    "ChartType",
    "EpivizChart",
    "EpivizChartDataMgr",
    "EpivizChartError",
    "GenomicWindow",
    "InvalidChartTypeError",
    "Measurement",
    "MeasurementType",
    "__version__",
    "epiviz_env",
]
