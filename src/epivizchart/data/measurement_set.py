"""Measurement sets backed by Polars data frames."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar

import polars as pl

from epivizchart.core.chart_kinds import resolve_chart_kind
from epivizchart.core.enums import ErrorCode, MeasurementType
from epivizchart.core.errors import MeasurementQueryError
from epivizchart.core.models import GenomicWindow, Measurement

ROW_ID = "__row_id"
COORDINATE_COLUMNS = ("chr", "start", "end", "strand")


def finite_values(frame: pl.DataFrame, column: str) -> pl.Series:
    """Return a column as floats with NaN and infinite values replaced by nulls."""
    values = pl.col(column).cast(pl.Float64)
    return frame.select(pl.when(values.is_finite()).then(values).otherwise(None).alias(column)).to_series()


class PolarsMeasurementSet:
    """A registered datasource holding genomic features and their values.

    The frame is sorted by chromosome and start on construction; row ids
    are positions in that order and stay stable for the lifetime of the set.
    """

    DEFAULT_CHART_TYPES: ClassVar[dict[MeasurementType, str]] = {
        MeasurementType.BLOCK: "BlocksTrack",
        MeasurementType.BP: "LineTrack",
        MeasurementType.FEATURE: "HeatmapPlot",
        MeasurementType.GENE_INFO: "GenesTrack",
    }

    def __init__(  # noqa: PLR0913 — registration hands over all datasource properties
        self,
        ms_id: str,
        name: str,
        data: pl.DataFrame,
        ms_type: MeasurementType,
        columns: Sequence[str] = (),
        metadata: Sequence[str] = (),
        origin_name: str | None = None,
    ) -> None:
        """Initialize measurement set.

        Args:
            ms_id: Datasource id assigned by the data manager
            name: Datasource name
            data: Frame with chr, start and end columns
            ms_type: Kind of data held by the frame
            columns: Value columns exposed as measurements
            metadata: Columns returned with rows by default
            origin_name: Name of the object the data came from
        """
        self._id = ms_id
        self._name = name
        self._type = ms_type
        self._columns = list(columns)
        self._metadata = list(metadata)
        self._origin_name = origin_name or name
        self._data = data.sort(["chr", "start", "end"]).with_row_index(ROW_ID)
        self._measurements = self._build_measurements()

    def _build_measurements(self) -> list[Measurement]:
        default_chart_type = self.get_default_chart_type()
        if not self.has_values:
            return [
                Measurement(
                    id=self._id,
                    name=self._name,
                    type="range",
                    datasource_id=self._id,
                    datasource_group=self._id,
                    default_chart_type=default_chart_type,
                    metadata=self._metadata,
                )
            ]

        measurements = []
        for column in self._columns:
            series = finite_values(self._data, column)
            min_value = series.min()
            max_value = series.max()
            measurements.append(
                Measurement(
                    id=column,
                    name=column,
                    type="feature",
                    datasource_id=self._id,
                    datasource_group=self._id,
                    default_chart_type=default_chart_type,
                    min_value=min_value,
                    max_value=max_value,
                    metadata=self._metadata,
                )
            )
        return measurements

    @property
    def has_values(self) -> bool:
        """Whether the set exposes per-measurement value series."""
        return self._type in (MeasurementType.BP, MeasurementType.FEATURE)

    def get_id(self) -> str:
        """Return the datasource id."""
        return self._id

    def get_name(self) -> str:
        """Return the datasource name."""
        return self._name

    def get_origin_name(self) -> str:
        """Return the name of the object the data came from."""
        return self._origin_name

    def get_type(self) -> MeasurementType:
        """Return the measurement type the set was registered as."""
        return self._type

    def get_data(self) -> pl.DataFrame:
        """Return the backing frame without the row id column."""
        return self._data.drop(ROW_ID)

    def get_default_chart_type(self) -> str:
        """Return the chart kind used when no chart type is requested."""
        return self.DEFAULT_CHART_TYPES[self._type]

    def get_default_chart_type_html(self) -> str:
        """Return the markup tag of the default chart kind."""
        tag_name = resolve_chart_kind(self.get_default_chart_type()).tag_name
        if tag_name is None:
            msg = f"No markup tag known for chart kind {self.get_default_chart_type()}"
            raise MeasurementQueryError(msg)
        return tag_name

    def get_measurements(self) -> list[Measurement]:
        """Return measurement descriptors in column order."""
        return list(self._measurements)

    def _overlapping(self, query: GenomicWindow) -> pl.DataFrame:
        return self._data.filter(
            (pl.col("chr") == query.chr) & (pl.col("start") <= query.end) & (pl.col("end") >= query.start)
        )

    @staticmethod
    def _global_start_index(rows: pl.DataFrame) -> int | None:
        if rows.height == 0:
            return None
        return int(rows[ROW_ID][0])

    def get_rows(self, query: GenomicWindow, metadata: Sequence[str] | None = None) -> dict[str, Any]:
        """Return features overlapping the window.

        Args:
            query: Genomic window
            metadata: Extra columns to include; defaults to the set's metadata columns

        Returns:
            Row payload with ids, coordinates, strand and metadata columns

        Raises:
            MeasurementQueryError: If a metadata column does not exist
        """
        metadata_columns = list(self._metadata if metadata is None else metadata)
        available = self.get_data().columns
        unknown = [column for column in metadata_columns if column not in available]
        if unknown:
            msg = f"Unknown metadata columns for {self._id}: {unknown}"
            raise MeasurementQueryError(
                msg,
                code=ErrorCode.E404_NOT_FOUND,
                hint=f"Available columns: {', '.join(available)}",
            )

        rows = self._overlapping(query)
        if "strand" in rows.columns:
            strand = rows["strand"].cast(pl.String).fill_null("*").to_list()
        else:
            strand = ["*"] * rows.height

        return {
            "globalStartIndex": self._global_start_index(rows),
            "useOffset": False,
            "values": {
                "id": rows[ROW_ID].to_list(),
                "chr": rows["chr"].to_list(),
                "start": rows["start"].to_list(),
                "end": rows["end"].to_list(),
                "strand": strand,
                "metadata": {column: rows[column].to_list() for column in metadata_columns},
            },
        }

    def get_values(self, query: GenomicWindow, measurement: str) -> dict[str, Any]:
        """Return values of one measurement for features overlapping the window.

        Args:
            query: Genomic window
            measurement: Measurement id

        Returns:
            Value payload aligned with get_rows

        Raises:
            MeasurementQueryError: If the set has no values or the measurement is unknown
        """
        if not self.has_values:
            msg = f"Measurement set {self._id} of type {self._type.value} has no values"
            raise MeasurementQueryError(msg, measurement_id=measurement)
        if measurement not in self._columns:
            msg = f"Unknown measurement {measurement!r} in {self._id}"
            raise MeasurementQueryError(
                msg,
                measurement_id=measurement,
                code=ErrorCode.E404_NOT_FOUND,
                hint=f"Available measurements: {', '.join(self._columns)}",
            )

        rows = self._overlapping(query)
        values = finite_values(rows, measurement)
        return {
            "globalStartIndex": self._global_start_index(rows),
            "values": values.to_list(),
        }

    def __repr__(self) -> str:
        """Return a short description of the set."""
        return f"<PolarsMeasurementSet {self._id} type={self._type.value} rows={self._data.height}>"
