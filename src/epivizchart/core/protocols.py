"""Contracts for the collaborators a chart composer consumes."""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from .models import GenomicWindow, Measurement


@runtime_checkable
class MeasurementSetHandle(Protocol):
    """Registered datasource returned by a data manager."""

    def get_id(self) -> str:
        """Return the stable datasource identifier."""
        ...

    def get_default_chart_type(self) -> str:
        """Return the chart kind this datasource renders as by default."""
        ...

    def get_default_chart_type_html(self) -> str:
        """Return the markup tag name of the default chart kind."""
        ...

    def get_measurements(self) -> Sequence[Measurement]:
        """Return measurement descriptors in declaration order."""
        ...

    def get_rows(self, query: GenomicWindow, metadata: Sequence[str] | None = None) -> Any:  # noqa: ANN401
        """Return features intersecting the window."""
        ...

    def get_values(self, query: GenomicWindow, measurement: str) -> Any:  # noqa: ANN401
        """Return values of one measurement for features intersecting the window."""
        ...


@runtime_checkable
class DataManager(Protocol):
    """Registry turning raw data objects into measurement sets."""

    def add_measurements(
        self,
        data_object: Any,  # noqa: ANN401
        datasource_name: str,
        datasource_origin_name: str,
        **kwargs: Any,
    ) -> MeasurementSetHandle:
        """Register a data object and return its measurement set."""
        ...
