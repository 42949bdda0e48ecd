"""Shared fixtures for epivizchart tests."""

from unittest.mock import MagicMock

import polars as pl
import pytest

from epivizchart.core.models import GenomicWindow, Measurement
from epivizchart.infra.settings import ComposerSettings


@pytest.fixture
def window() -> GenomicWindow:
    """Window used throughout the tests."""
    return GenomicWindow(chr="chr1", start=1000, end=2000)


@pytest.fixture
def composer_settings() -> ComposerSettings:
    """Settings with defaults, independent of the process environment."""
    return ComposerSettings(
        environment_tag="epiviz-environment",
        chart_class="charts",
        datasource_prefix="epivizChart",
        json_ensure_ascii=False,
    )


@pytest.fixture
def peaks_frame() -> pl.DataFrame:
    """Interval data with two features inside chr1:1000-2000."""
    return pl.DataFrame(
        {
            "chr": ["chr1", "chr1", "chr1", "chr2"],
            "start": [1500, 900, 2500, 1200],
            "end": [1600, 1100, 2600, 1300],
            "strand": ["+", "-", "+", None],
            "score": [5, 3, 8, 1],
        }
    )


@pytest.fixture
def signal_frame() -> pl.DataFrame:
    """Signal data with three numeric measurements."""
    return pl.DataFrame(
        {
            "chr": ["chr1", "chr1", "chr1", "chr1"],
            "start": [1000, 1200, 1400, 3000],
            "end": [1199, 1399, 1599, 3199],
            "sample_a": [0.5, 1.5, 2.5, 3.5],
            "sample_b": [1.0, float("nan"), 3.0, 4.0],
            "sample_c": [2, 4, 6, 8],
        }
    )


def make_measurements(ms_id: str, names: list[str], chart_type: str) -> list[Measurement]:
    """Build measurement descriptors for a mocked measurement set."""
    return [
        Measurement(
            id=name,
            name=name,
            datasource_id=ms_id,
            datasource_group=ms_id,
            default_chart_type=chart_type,
        )
        for name in names
    ]


@pytest.fixture
def make_handle():
    """Factory for mocked measurement set handles."""

    def _make(
        ms_id: str = "signal_1",
        chart_type: str = "LinePlot",
        tag_name: str = "epiviz-json-line-plot",
        measurements: list[str] | None = None,
    ) -> MagicMock:
        names = measurements if measurements is not None else ["m1", "m2", "m3"]
        handle = MagicMock()
        handle.get_id.return_value = ms_id
        handle.get_default_chart_type.return_value = chart_type
        handle.get_default_chart_type_html.return_value = tag_name
        handle.get_measurements.return_value = make_measurements(ms_id, names, chart_type)
        handle.get_rows.return_value = {"globalStartIndex": 0, "useOffset": False, "values": {"id": [0, 1]}}
        handle.get_values.side_effect = lambda query, measurement: {  # noqa: ARG005
            "globalStartIndex": 0,
            "values": [float(len(measurement)), 2.0],
        }
        return handle

    return _make


@pytest.fixture
def make_manager(make_handle):
    """Factory for mocked data managers returning a given handle."""

    def _make(handle: MagicMock | None = None) -> MagicMock:
        manager = MagicMock()
        manager.add_measurements.return_value = handle if handle is not None else make_handle()
        return manager

    return _make
