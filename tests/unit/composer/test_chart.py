"""Unit tests for the EpivizChart composer."""

import builtins
import json
from unittest.mock import MagicMock, patch

import pytest

from epivizchart.composer import EpivizChart, epiviz_env
from epivizchart.core.enums import ChartType, ComposerPhase
from epivizchart.core.errors import (
    DependencyUnavailableError,
    InvalidChartTypeError,
    MeasurementQueryError,
    MeasurementRegistrationError,
    ValidationError,
)
from epivizchart.core.models import GenomicWindow
from epivizchart.data import EpivizChartDataMgr
from epivizchart.markup import ChartTag

TAGS = {
    ChartType.BLOCKS_TRACK: "epiviz-json-blocks-track",
    ChartType.HEATMAP_PLOT: "epiviz-json-heatmap-plot",
    ChartType.LINE_PLOT: "epiviz-json-line-plot",
    ChartType.LINE_TRACK: "epiviz-json-line-track",
    ChartType.SCATTER_PLOT: "epiviz-json-scatter-plot",
    ChartType.STACKED_LINE_PLOT: "epiviz-json-stacked-line-plot",
    ChartType.STACKED_LINE_TRACK: "epiviz-json-stacked-line-track",
}


@pytest.fixture
def make_composer(composer_settings):
    """Factory for composers over chr1:1000-2000."""

    def _make(data_mgr=None) -> EpivizChart:
        return EpivizChart(chr="chr1", start=1000, end=2000, data_mgr=data_mgr, settings=composer_settings)

    return _make


class TestConstruction:
    """Test composer construction."""

    def test_window(self, make_composer) -> None:
        """Test the window is fixed at construction."""
        composer = make_composer()
        assert composer.window == GenomicWindow(chr="chr1", start=1000, end=2000)
        assert (composer.chr, composer.start, composer.end) == ("chr1", 1000, 2000)
        assert isinstance(composer.data_mgr, EpivizChartDataMgr)

    def test_empty_environment(self, make_composer) -> None:
        """Test a new composer has an empty environment."""
        env = make_composer().get_environment()
        assert env.name == "epiviz-environment"
        assert env.children == ()
        assert env.attrs == {"chr": "chr1", "start": 1000, "end": 2000}

    def test_invalid_window(self, composer_settings) -> None:
        """Test invalid windows raise a validation error with details."""
        with pytest.raises(ValidationError) as exc_info:
            EpivizChart(chr="chr1", start=500, end=100, settings=composer_settings)
        assert exc_info.value.details
        assert "chr1:500-100" in exc_info.value.message

    def test_epiviz_env(self, composer_settings) -> None:
        """Test the factory builds a composer."""
        composer = epiviz_env(chr="chr2", start=0, end=10, settings=composer_settings)
        assert isinstance(composer, EpivizChart)
        assert composer.window.chr == "chr2"


class TestPlot:
    """Test plotting through a mocked data manager."""

    @pytest.mark.parametrize(("chart_type", "tag_name"), list(TAGS.items()))
    def test_chart_type_tag(self, make_composer, make_manager, chart_type: ChartType, tag_name: str) -> None:
        """Test each chart type produces its documented tag, by enum or by name."""
        composer = make_composer(make_manager())
        assert composer.plot(object(), datasource_name="a", chart_type=chart_type).tag_name == tag_name
        assert composer.plot(object(), datasource_name="b", chart_type=chart_type.value).tag_name == tag_name

    def test_default_tag_from_handle(self, make_composer, make_manager, make_handle) -> None:
        """Test a missing chart type uses the handle's default tag."""
        handle = make_handle(chart_type="CustomPlot", tag_name="epiviz-json-custom-plot")
        chart = make_composer(make_manager(handle)).plot(object(), datasource_name="custom")
        assert chart.tag_name == "epiviz-json-custom-plot"
        handle.get_default_chart_type_html.assert_called_once_with()

    def test_chart_attributes(self, make_composer, make_manager, make_handle) -> None:
        """Test the chart carries id, payloads, settings and colors."""
        handle = make_handle(ms_id="signal_7")
        settings = {"title": "Signal"}
        colors = ["#1859a9"]
        chart = make_composer(make_manager(handle)).plot(
            object(), datasource_name="signal", chart_type="LinePlot", settings=settings, colors=colors
        )
        assert isinstance(chart, ChartTag)
        assert chart.id == "signal_7"
        assert chart.attrs["class"] == "charts"
        assert chart.settings is settings
        assert chart.colors is colors
        assert json.loads(chart.data.rows) == handle.get_rows.return_value

    def test_appends_to_environment(self, make_composer, make_manager, make_handle) -> None:
        """Test each plot appends exactly one chart whose id matches the handle."""
        manager = make_manager()
        composer = make_composer(manager)
        for index, ms_id in enumerate(["a_1", "b_2", "c_3"], start=1):
            manager.add_measurements.return_value = make_handle(ms_id=ms_id)
            chart = composer.plot(object(), datasource_name=ms_id)
            env = composer.get_environment()
            assert len(env.children) == index
            assert env.children[-1] is chart
            assert chart.id == ms_id

    def test_registration_arguments(self, make_composer, make_manager) -> None:
        """Test names and extra keywords are forwarded to the data manager."""
        manager = make_manager()
        data_object = object()
        make_composer(manager).plot(data_object, "signal", "signal_df", type="bp", columns=["a"])
        manager.add_measurements.assert_called_once_with(
            data_object,
            datasource_name="signal",
            datasource_origin_name="signal_df",
            type="bp",
            columns=["a"],
        )

    def test_name_defaults_to_origin(self, make_composer, make_manager) -> None:
        """Test repeated plots with only an origin name use it as the datasource name."""
        manager = make_manager()
        composer = make_composer(manager)
        composer.plot(object(), datasource_origin_name="peaks")
        composer.plot(object(), datasource_origin_name="peaks")
        for call in manager.add_measurements.call_args_list:
            assert call.kwargs["datasource_name"] == "peaks"
            assert call.kwargs["datasource_origin_name"] == "peaks"

    def test_origin_defaults_to_name(self, make_composer, make_manager) -> None:
        """Test an explicit datasource name doubles as origin name."""
        manager = make_manager()
        make_composer(manager).plot(object(), datasource_name="peaks")
        assert manager.add_measurements.call_args.kwargs["datasource_origin_name"] == "peaks"

    def test_synthesized_names(self, make_composer, make_manager) -> None:
        """Test names are synthesized from a counter when none are given."""
        manager = make_manager()
        composer = make_composer(manager)
        composer.plot(object())
        composer.plot(object())
        names = [call.kwargs["datasource_name"] for call in manager.add_measurements.call_args_list]
        assert names == ["epivizChart_1", "epivizChart_2"]


class TestPayloadExtraction:
    """Test row, column and measurement payloads."""

    @pytest.mark.parametrize("kind", ["BlocksTrack", "GenesTrack"])
    def test_value_less_kinds_skip_columns(self, make_composer, make_manager, make_handle, kind: str) -> None:
        """Test interval-only kinds get null cols and no value queries."""
        handle = make_handle(chart_type=kind, tag_name="epiviz-json-blocks-track")
        chart = make_composer(make_manager(handle)).plot(object(), datasource_name="peaks")
        assert chart.data.cols is None
        assert chart.data.decoded()["cols"] is None
        handle.get_values.assert_not_called()

    def test_columns_follow_measurement_order(self, make_composer, make_manager, make_handle) -> None:
        """Test one key per measurement, in declaration order."""
        handle = make_handle(measurements=["zeta", "alpha", "mid"])
        chart = make_composer(make_manager(handle)).plot(object(), datasource_name="signal", chart_type="LinePlot")
        cols = json.loads(chart.data.cols)
        assert list(cols) == ["zeta", "alpha", "mid"]
        assert cols["alpha"] == {"globalStartIndex": 0, "values": [5.0, 2.0]}

    def test_queries_use_window(self, make_composer, make_manager, make_handle) -> None:
        """Test every query is scoped to the composer's window."""
        handle = make_handle(measurements=["m1"])
        composer = make_composer(make_manager(handle))
        composer.plot(object(), datasource_name="signal")
        handle.get_rows.assert_called_once_with(query=composer.window, metadata=None)
        handle.get_values.assert_called_once_with(query=composer.window, measurement="m1")

    def test_metadata_forwarded(self, make_composer, make_manager, make_handle) -> None:
        """Test row metadata selection reaches the row query."""
        handle = make_handle()
        composer = make_composer(make_manager(handle))
        composer.plot(object(), datasource_name="signal", row_metadata=["gene"])
        assert handle.get_rows.call_args.kwargs["metadata"] == ["gene"]

    def test_registration_metadata_forwarded(self, make_composer, make_manager) -> None:
        """Test the metadata keyword reaches the data manager, not the row query."""
        manager = make_manager()
        composer = make_composer(manager)
        composer.plot(object(), datasource_name="signal", type="feature", metadata=["score"])
        assert manager.add_measurements.call_args.kwargs["metadata"] == ["score"]
        assert manager.add_measurements.return_value.get_rows.call_args.kwargs["metadata"] is None

    def test_measurements_round_trip(self, make_composer, make_manager, make_handle) -> None:
        """Test decoded measurements match the handle's descriptors in order."""
        handle = make_handle(measurements=["m1", "m2", "m3", "m4"])
        chart = make_composer(make_manager(handle)).plot(object(), datasource_name="signal")
        decoded = json.loads(chart.measurements)
        assert [ms["id"] for ms in decoded] == ["m1", "m2", "m3", "m4"]
        assert decoded[0]["datasourceId"] == "signal_1"

    def test_plain_measurements(self, make_composer, make_manager, make_handle) -> None:
        """Test handles may return mappings as measurement descriptors."""
        handle = make_handle()
        handle.get_measurements.return_value = [{"id": "x", "name": "X"}]
        chart = make_composer(make_manager(handle)).plot(object(), datasource_name="signal")
        assert json.loads(chart.measurements) == [{"id": "x", "name": "X"}]
        assert list(json.loads(chart.data.cols)) == ["x"]


class TestFailures:
    """Test failed plots leave the environment untouched."""

    def test_invalid_chart_type(self, make_composer, make_manager) -> None:
        """Test unknown chart types fail before registration."""
        manager = make_manager()
        composer = make_composer(manager)
        composer.plot(object(), datasource_name="ok")

        with pytest.raises(InvalidChartTypeError) as exc_info:
            composer.plot(object(), datasource_name="bad", chart_type="PieChart")

        assert exc_info.value.phase == ComposerPhase.TAG_ASSEMBLY
        assert len(composer.get_environment().children) == 1
        assert manager.add_measurements.call_count == 1

    def test_registration_failure_propagates(self, make_composer, make_manager) -> None:
        """Test data manager errors propagate unchanged."""
        manager = make_manager()
        error = MeasurementRegistrationError("rejected")
        manager.add_measurements.side_effect = error
        composer = make_composer(manager)

        with pytest.raises(MeasurementRegistrationError) as exc_info:
            composer.plot(object(), datasource_name="bad")

        assert exc_info.value is error
        assert composer.get_environment().children == ()

    def test_foreign_error_propagates(self, make_composer, make_manager) -> None:
        """Test errors outside the epivizchart hierarchy propagate too."""
        manager = make_manager()
        manager.add_measurements.side_effect = RuntimeError("manager down")
        composer = make_composer(manager)

        with pytest.raises(RuntimeError, match="manager down"):
            composer.plot(object(), datasource_name="bad")
        assert composer.get_environment().children == ()

    def test_value_query_failure(self, make_composer, make_manager, make_handle) -> None:
        """Test a failing value query after a successful row query appends nothing."""
        handle = make_handle()
        handle.get_values.side_effect = MeasurementQueryError("unknown measurement", measurement_id="m2")
        composer = make_composer(make_manager(handle))

        with pytest.raises(MeasurementQueryError):
            composer.plot(object(), datasource_name="signal")

        handle.get_rows.assert_called_once()
        assert composer.get_environment().children == ()


class TestDisplay:
    """Test rendering and display."""

    def test_render(self, make_composer, make_manager) -> None:
        """Test the environment renders with its charts."""
        composer = make_composer(make_manager())
        composer.plot(object(), datasource_name="signal", chart_type="ScatterPlot")
        html = str(composer.render())
        assert html.startswith('<epiviz-environment chr="chr1" start="1000" end="2000">')
        assert '<epiviz-json-scatter-plot class="charts" id="signal_1"' in html
        assert composer._repr_html_() == html  # noqa: SLF001 — Testing notebook hook

    def test_show_uses_ipython(self, make_composer) -> None:
        """Test show hands the rendered environment to IPython."""
        composer = make_composer()
        fake_display = MagicMock()
        fake_html = MagicMock(side_effect=lambda markup: ("html", markup))
        fake_module = MagicMock(display=fake_display, HTML=fake_html)

        with patch.dict("sys.modules", {"IPython": MagicMock(display=fake_module), "IPython.display": fake_module}):
            composer.show()

        fake_html.assert_called_once_with(str(composer.render()))
        fake_display.assert_called_once_with(("html", str(composer.render())))

    def test_show_without_ipython(self, make_composer) -> None:
        """Test show reports the missing optional dependency."""
        composer = make_composer()
        real_import = builtins.__import__

        def fake_import(name, *args, **kwargs):
            if name.startswith("IPython"):
                raise ImportError(name)
            return real_import(name, *args, **kwargs)

        with (
            patch("builtins.__import__", side_effect=fake_import),
            pytest.raises(DependencyUnavailableError) as exc_info,
        ):
            composer.show()

        assert exc_info.value.phase == ComposerPhase.DISPLAY
