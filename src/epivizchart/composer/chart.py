"""Chart composer binding a genomic window to a data manager."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Mapping, Sequence
from typing import Any

from markupsafe import Markup
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from epivizchart.core.chart_kinds import chart_type_to_tag_name, resolve_chart_kind
from epivizchart.core.enums import ChartType, ComposerPhase
from epivizchart.core.errors import DependencyUnavailableError, EpivizChartError, ValidationError
from epivizchart.core.models import ChartPayload, ErrorDetail, GenomicWindow, Measurement
from epivizchart.core.protocols import DataManager, MeasurementSetHandle
from epivizchart.data import EpivizChartDataMgr
from epivizchart.infra.logging import get_logger
from epivizchart.infra.settings import ComposerSettings, get_settings
from epivizchart.markup import ChartTag, EnvironmentTag


class EpivizChart:
    """Builds epiviz chart tags for one genomic window.

    Every call to :meth:`plot` registers a data object with the data
    manager, extracts its rows and values inside the window, and appends
    a chart tag to the environment tag. A plot call either appends one
    chart or raises and leaves the environment as it was.

    Instances are not thread-safe; use one composer per session.
    """

    def __init__(
        self,
        chr: str,  # noqa: A002 — genomic coordinate name
        start: int,
        end: int,
        data_mgr: DataManager | None = None,
        settings: ComposerSettings | None = None,
    ) -> None:
        """Initialize the composer.

        Args:
            chr: Chromosome to display
            start: Start of the displayed region
            end: End of the displayed region
            data_mgr: Data manager registering data objects; a new in-memory one by default
            settings: Composer settings; read from the environment by default

        Raises:
            ValidationError: If the region is invalid
        """
        self.logger = get_logger(f"{__name__}.{self.__class__.__name__}")
        self.settings = settings or get_settings()
        self.window = self._make_window(chr, start, end)
        self.data_mgr: DataManager = data_mgr if data_mgr is not None else EpivizChartDataMgr()
        self._environment = EnvironmentTag(self.window, name=self.settings.environment_tag)
        self._name_counter = 0

    @staticmethod
    def _make_window(chr: str, start: int, end: int) -> GenomicWindow:  # noqa: A002
        try:
            return GenomicWindow(chr=chr, start=start, end=end)
        except PydanticValidationError as e:
            details = [
                ErrorDetail(field=".".join(str(loc) for loc in err["loc"]) or None, reason=err["msg"])
                for err in e.errors()
            ]
            msg = f"Invalid genomic window {chr}:{start}-{end}"
            raise ValidationError(msg, details=details, hint="Use a non-negative start and end >= start") from e

    @property
    def chr(self) -> str:
        """Chromosome of the window."""
        return self.window.chr

    @property
    def start(self) -> int:
        """Start of the window."""
        return self.window.start

    @property
    def end(self) -> int:
        """End of the window."""
        return self.window.end

    def get_environment(self) -> EnvironmentTag:
        """Return the environment tag holding every chart plotted so far."""
        return self._environment

    def plot(  # noqa: PLR0913 — mirrors the chart attributes plus registration options
        self,
        data_object: Any,  # noqa: ANN401
        datasource_name: str | None = None,
        datasource_origin_name: str | None = None,
        chart_type: ChartType | str | None = None,
        settings: Mapping[str, Any] | None = None,
        colors: Sequence[str] | Mapping[str, Any] | None = None,
        row_metadata: Sequence[str] | None = None,
        **kwargs: Any,
    ) -> ChartTag:
        """Create a chart for a data object and add it to the environment.

        Args:
            data_object: Data understood by the data manager
            datasource_name: Name for the datasource; defaults to datasource_origin_name
            datasource_origin_name: Name of the data object; synthesized when both names are missing
            chart_type: Chart type, or None for the datasource's default chart
            settings: Chart settings, passed through unchanged
            colors: Chart colors, passed through unchanged
            row_metadata: Row metadata columns to request; None uses the datasource default
            **kwargs: Passed to the data manager's add_measurements (e.g. type, columns, metadata)

        Returns:
            The chart tag, already appended to the environment

        Raises:
            InvalidChartTypeError: If chart_type is not a supported chart type
        """
        # Resolve the requested tag before anything is registered
        requested_tag = None if chart_type is None else chart_type_to_tag_name(chart_type)

        if datasource_origin_name is None:
            datasource_origin_name = datasource_name or self._next_datasource_name()
        if datasource_name is None:
            datasource_name = datasource_origin_name

        try:
            ms_obj = self.data_mgr.add_measurements(
                data_object,
                datasource_name=datasource_name,
                datasource_origin_name=datasource_origin_name,
                **kwargs,
            )
            chart = self._create_chart_tag(ms_obj, settings, colors, requested_tag, row_metadata)
        except EpivizChartError as e:
            self.logger.warning(
                "Plot failed",
                datasource=datasource_name,
                error_code=e.code.value,
                phase=e.phase.value if e.phase else None,
            )
            raise

        self._environment.append_child(chart)
        self.logger.info(
            "Added chart to environment",
            datasource=datasource_name,
            ms_id=chart.id,
            chart_tag=chart.tag_name,
            region=str(self.window),
            chart_count=len(self._environment.children),
        )
        return chart

    def _next_datasource_name(self) -> str:
        self._name_counter += 1
        return f"{self.settings.datasource_prefix}_{self._name_counter}"

    def _create_chart_tag(
        self,
        ms_obj: MeasurementSetHandle,
        settings: Mapping[str, Any] | None,
        colors: Sequence[str] | Mapping[str, Any] | None,
        tag_name: str | None,
        metadata: Sequence[str] | None = None,
    ) -> ChartTag:
        """Build the chart tag for a registered measurement set.

        Args:
            ms_obj: Registered measurement set
            settings: Chart settings
            colors: Chart colors
            tag_name: Tag to use, or None for the measurement set's default
            metadata: Row metadata columns to request

        Returns:
            Chart tag, not yet appended to the environment
        """
        payload = self.data_to_json(ms_obj, metadata)

        if tag_name is None:
            tag_name = ms_obj.get_default_chart_type_html()

        return ChartTag(
            tag_name=tag_name,
            id=ms_obj.get_id(),
            measurements=payload.measurements,
            data=payload.data,
            settings=settings,
            colors=colors,
            css_class=self.settings.chart_class,
        )

    def data_to_json(self, ms_obj: MeasurementSetHandle, metadata: Sequence[str] | None = None) -> ChartPayload:
        """Extract rows, values and measurement descriptors as JSON strings."""
        rows = self.get_row_data(ms_obj, metadata)

        # Interval-only chart kinds never render values
        cols = None
        if resolve_chart_kind(ms_obj.get_default_chart_type()).has_value_series:
            cols = self.get_col_data(ms_obj)

        measurements = [self._measurement_to_plain(ms) for ms in ms_obj.get_measurements()]
        return ChartPayload(measurements=self._to_json(measurements), rows=rows, columns=cols)

    def get_row_data(self, ms_obj: MeasurementSetHandle, metadata: Sequence[str] | None = None) -> str:
        """Return the features of a measurement set inside the window, as JSON."""
        rows = ms_obj.get_rows(query=self.window, metadata=metadata)
        return self._to_json(rows)

    def get_col_data(self, ms_obj: MeasurementSetHandle) -> str:
        """Return the values of every measurement inside the window, as JSON.

        Keys follow the order of the measurement set's measurements.
        """
        cols: dict[str, Any] = {}
        for ms in ms_obj.get_measurements():
            ms_id = self._measurement_id(ms)
            cols[ms_id] = ms_obj.get_values(query=self.window, measurement=ms_id)
        return self._to_json(cols)

    @staticmethod
    def _measurement_id(ms: Any) -> str:  # noqa: ANN401
        if isinstance(ms, Mapping):
            return ms["id"]
        return ms.id

    @staticmethod
    def _measurement_to_plain(ms: Any) -> dict[str, Any]:  # noqa: ANN401
        if isinstance(ms, Measurement):
            return ms.to_plain()
        if isinstance(ms, BaseModel):
            return ms.model_dump(by_alias=True)
        if isinstance(ms, Mapping):
            return dict(ms)
        if dataclasses.is_dataclass(ms) and not isinstance(ms, type):
            return dataclasses.asdict(ms)
        return dict(vars(ms))

    def _to_json(self, value: Any) -> str:  # noqa: ANN401
        return json.dumps(value, ensure_ascii=self.settings.json_ensure_ascii, default=str)

    def render(self) -> Markup:
        """Render the environment and its charts to HTML."""
        return self._environment.render()

    def show(self) -> None:
        """Display the environment in an IPython frontend.

        Raises:
            DependencyUnavailableError: If IPython is not installed
        """
        try:
            from IPython.display import HTML, display  # noqa: PLC0415 — Optional dependency import
        except ImportError as e:
            msg = "IPython is required to display an epiviz environment"
            raise DependencyUnavailableError(msg, dependency="ipython", phase=ComposerPhase.DISPLAY) from e

        display(HTML(str(self.render())))

    def _repr_html_(self) -> str:
        return str(self.render())

    def __repr__(self) -> str:
        """Return a short description of the composer."""
        return f"<EpivizChart {self.window} charts={len(self._environment.children)}>"


def epiviz_env(
    chr: str,  # noqa: A002 — genomic coordinate name
    start: int,
    end: int,
    data_mgr: DataManager | None = None,
    settings: ComposerSettings | None = None,
) -> EpivizChart:
    """Create a chart composer for a genomic region.

    Args:
        chr: Chromosome to display
        start: Start of the displayed region
        end: End of the displayed region
        data_mgr: Data manager; a new in-memory one by default
        settings: Composer settings; read from the environment by default

    Returns:
        Composer with an empty environment
    """
    return EpivizChart(chr=chr, start=start, end=end, data_mgr=data_mgr, settings=settings)
