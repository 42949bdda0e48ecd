"""Enumerations for epivizchart core types."""

from enum import Enum


class ChartType(str, Enum):
    """Chart types that can be requested explicitly when plotting."""

    BLOCKS_TRACK = "BlocksTrack"
    HEATMAP_PLOT = "HeatmapPlot"
    LINE_PLOT = "LinePlot"
    LINE_TRACK = "LineTrack"
    SCATTER_PLOT = "ScatterPlot"
    STACKED_LINE_PLOT = "StackedLinePlot"
    STACKED_LINE_TRACK = "StackedLineTrack"


class MeasurementType(str, Enum):
    """Kinds of data a measurement set can be registered as."""

    BLOCK = "block"  # Intervals only
    BP = "bp"  # Base-pair resolution signal
    FEATURE = "feature"  # Feature x sample matrix
    GENE_INFO = "gene_info"  # Gene annotation


class ErrorCode(str, Enum):
    """Application error codes for structured error responses."""

    E400_VALIDATION = "E400_VALIDATION"
    E404_NOT_FOUND = "E404_NOT_FOUND"
    E422_UNPROCESSABLE = "E422_UNPROCESSABLE"
    E500_INTERNAL = "E500_INTERNAL"
    E503_DEPENDENCY_UNAVAILABLE = "E503_DEPENDENCY_UNAVAILABLE"


class ComposerPhase(str, Enum):
    """Steps of a plot call, used for error reporting and logging."""

    REGISTRATION = "registration"
    PAYLOAD_EXTRACTION = "payload_extraction"
    TAG_ASSEMBLY = "tag_assembly"
    DISPLAY = "display"
