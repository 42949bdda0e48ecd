"""Chart kind descriptors and the chart type to markup tag lookup."""

from pydantic import BaseModel, ConfigDict, Field

from .enums import ChartType
from .errors import InvalidChartTypeError


class ChartKind(BaseModel):
    """Descriptor of a chart kind known to the epiviz front-end."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Chart kind name, e.g. LinePlot")
    tag_name: str | None = Field(default=None, description="Custom element name rendering this kind")
    has_value_series: bool = Field(default=True, description="Whether charts of this kind consume per-measurement values")
    selectable: bool = Field(default=True, description="Whether the kind may be requested explicitly")


CHART_KINDS: dict[str, ChartKind] = {
    "BlocksTrack": ChartKind(name="BlocksTrack", tag_name="epiviz-json-blocks-track", has_value_series=False),
    "HeatmapPlot": ChartKind(name="HeatmapPlot", tag_name="epiviz-json-heatmap-plot"),
    "LinePlot": ChartKind(name="LinePlot", tag_name="epiviz-json-line-plot"),
    "LineTrack": ChartKind(name="LineTrack", tag_name="epiviz-json-line-track"),
    "ScatterPlot": ChartKind(name="ScatterPlot", tag_name="epiviz-json-scatter-plot"),
    "StackedLinePlot": ChartKind(name="StackedLinePlot", tag_name="epiviz-json-stacked-line-plot"),
    "StackedLineTrack": ChartKind(name="StackedLineTrack", tag_name="epiviz-json-stacked-line-track"),
    "GenesTrack": ChartKind(
        name="GenesTrack",
        tag_name="epiviz-json-genes-track",
        has_value_series=False,
        selectable=False,
    ),
}

CHART_TYPE_TAGS: dict[ChartType, str] = {
    chart_type: CHART_KINDS[chart_type.value].tag_name  # type: ignore[misc]
    for chart_type in ChartType
}


def resolve_chart_kind(name: str) -> ChartKind:
    """Look up a chart kind by name.

    Kinds missing from the table are assumed to carry value series and
    have no known tag.

    Args:
        name: Chart kind name reported by a measurement set

    Returns:
        Matching chart kind descriptor
    """
    kind = CHART_KINDS.get(name)
    if kind is None:
        return ChartKind(name=name, selectable=False)
    return kind


def parse_chart_type(chart_type: ChartType | str) -> ChartType:
    """Coerce a chart type name into the closed vocabulary.

    Args:
        chart_type: ChartType member or its string value

    Returns:
        ChartType member

    Raises:
        InvalidChartTypeError: If the value is not in the vocabulary
    """
    try:
        return ChartType(chart_type)
    except ValueError as e:
        raise InvalidChartTypeError(chart_type=str(chart_type)) from e


def chart_type_to_tag_name(chart_type: ChartType | str) -> str:
    """Map a chart type to the markup tag name that renders it.

    Args:
        chart_type: ChartType member or its string value

    Returns:
        Custom element name, e.g. ``epiviz-json-line-plot``

    Raises:
        InvalidChartTypeError: If the value is not in the vocabulary
    """
    return CHART_TYPE_TAGS[parse_chart_type(chart_type)]
