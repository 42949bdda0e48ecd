"""Data manager registering data objects as measurement sets."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import polars as pl

from epivizchart.core.enums import MeasurementType
from epivizchart.core.errors import MeasurementRegistrationError
from epivizchart.infra.logging import get_logger

from .measurement_set import COORDINATE_COLUMNS, ROW_ID, PolarsMeasurementSet

logger = get_logger(__name__)

REQUIRED_COLUMNS: dict[MeasurementType, tuple[str, ...]] = {
    MeasurementType.BLOCK: ("chr", "start", "end"),
    MeasurementType.BP: ("chr", "start", "end"),
    MeasurementType.FEATURE: ("chr", "start", "end"),
    MeasurementType.GENE_INFO: ("chr", "start", "end", "gene"),
}

GENE_INFO_METADATA = ("gene", "exon_starts", "exon_ends")


class EpivizChartDataMgr:
    """Keeps the measurement sets served to the charts of an environment."""

    def __init__(self) -> None:
        """Initialize an empty data manager."""
        self._ms_list: dict[str, PolarsMeasurementSet] = {}
        self._ms_counter = 0

    def add_measurements(  # noqa: PLR0913 — registration options are keyword-only
        self,
        data_object: Any,  # noqa: ANN401
        datasource_name: str,
        datasource_origin_name: str | None = None,
        *,
        type: MeasurementType | str = MeasurementType.BLOCK,  # noqa: A002 — public keyword name
        columns: Sequence[str] | None = None,
        metadata: Sequence[str] | None = None,
    ) -> PolarsMeasurementSet:
        """Register a data object as a new measurement set.

        Args:
            data_object: Polars DataFrame, or anything polars.DataFrame accepts
            datasource_name: Name of the datasource
            datasource_origin_name: Name of the object the data came from
            type: Kind of data (block, bp, feature or gene_info)
            columns: Value columns for bp and feature data; defaults to all numeric columns
            metadata: Columns returned with rows; gene_info data defaults to gene and exon columns

        Returns:
            The registered measurement set

        Raises:
            MeasurementRegistrationError: If the data object cannot be registered
        """
        if not datasource_name:
            msg = "A datasource name is required"
            raise MeasurementRegistrationError(msg)

        try:
            ms_type = MeasurementType(type)
        except ValueError as e:
            msg = f"Unknown measurement type: {type}"
            raise MeasurementRegistrationError(msg, datasource_name=datasource_name) from e

        data = self._to_frame(data_object, datasource_name)
        data = self._normalize_coordinates(data, ms_type, datasource_name)
        value_columns = self._resolve_columns(data, ms_type, columns, metadata, datasource_name)
        metadata_columns = self._resolve_metadata(data, ms_type, metadata, datasource_name)

        self._ms_counter += 1
        ms_id = f"{datasource_name}_{self._ms_counter}"
        ms_obj = PolarsMeasurementSet(
            ms_id=ms_id,
            name=datasource_name,
            data=data,
            ms_type=ms_type,
            columns=value_columns,
            metadata=metadata_columns,
            origin_name=datasource_origin_name,
        )
        self._ms_list[ms_id] = ms_obj

        logger.debug(
            "Registered measurement set",
            ms_id=ms_id,
            datasource=datasource_name,
            ms_type=ms_type.value,
            feature_count=data.height,
            measurement_count=len(value_columns),
        )
        return ms_obj

    @staticmethod
    def _to_frame(data_object: Any, datasource_name: str) -> pl.DataFrame:  # noqa: ANN401
        if isinstance(data_object, pl.DataFrame):
            return data_object
        if isinstance(data_object, pl.LazyFrame):
            return data_object.collect()
        try:
            return pl.DataFrame(data_object)
        except (TypeError, ValueError, pl.exceptions.PolarsError) as e:
            msg = f"Cannot convert {type(data_object).__name__} to a data frame: {e}"
            raise MeasurementRegistrationError(msg, datasource_name=datasource_name) from e

    @staticmethod
    def _normalize_coordinates(data: pl.DataFrame, ms_type: MeasurementType, datasource_name: str) -> pl.DataFrame:
        missing = [column for column in REQUIRED_COLUMNS[ms_type] if column not in data.columns]
        if missing:
            msg = f"Data for {datasource_name} is missing required columns: {missing}"
            raise MeasurementRegistrationError(
                msg,
                datasource_name=datasource_name,
                required_columns=missing,
                available_columns=data.columns,
            )
        if ROW_ID in data.columns:
            msg = f"Column name {ROW_ID} is reserved"
            raise MeasurementRegistrationError(msg, datasource_name=datasource_name)

        try:
            data = data.with_columns(
                pl.col("chr").cast(pl.String),
                pl.col("start").cast(pl.Int64),
                pl.col("end").cast(pl.Int64),
            )
        except pl.exceptions.PolarsError as e:
            msg = f"Coordinates of {datasource_name} must be integers: {e}"
            raise MeasurementRegistrationError(msg, datasource_name=datasource_name) from e

        if data.select((pl.col("end") < pl.col("start")).any()).item():
            msg = f"Data for {datasource_name} has features ending before they start"
            raise MeasurementRegistrationError(msg, datasource_name=datasource_name)
        return data

    @staticmethod
    def _resolve_columns(
        data: pl.DataFrame,
        ms_type: MeasurementType,
        columns: Sequence[str] | None,
        metadata: Sequence[str] | None,
        datasource_name: str,
    ) -> list[str]:
        if ms_type not in (MeasurementType.BP, MeasurementType.FEATURE):
            return []

        if columns is None:
            excluded = set(COORDINATE_COLUMNS) | set(metadata or ())
            resolved = [
                name for name, dtype in data.schema.items() if name not in excluded and dtype.is_numeric()
            ]
        else:
            resolved = list(columns)
            missing = [column for column in resolved if column not in data.columns]
            if missing:
                msg = f"Value columns not found in {datasource_name}: {missing}"
                raise MeasurementRegistrationError(
                    msg,
                    datasource_name=datasource_name,
                    required_columns=missing,
                    available_columns=data.columns,
                )
            non_numeric = [column for column in resolved if not data.schema[column].is_numeric()]
            if non_numeric:
                msg = f"Value columns of {datasource_name} must be numeric: {non_numeric}"
                raise MeasurementRegistrationError(msg, datasource_name=datasource_name)
            if len(set(resolved)) != len(resolved):
                msg = f"Value columns of {datasource_name} must be unique"
                raise MeasurementRegistrationError(msg, datasource_name=datasource_name)

        if not resolved:
            msg = f"Data for {datasource_name} has no numeric value columns"
            raise MeasurementRegistrationError(msg, datasource_name=datasource_name, available_columns=data.columns)
        return resolved

    @staticmethod
    def _resolve_metadata(
        data: pl.DataFrame,
        ms_type: MeasurementType,
        metadata: Sequence[str] | None,
        datasource_name: str,
    ) -> list[str]:
        if metadata is None:
            if ms_type == MeasurementType.GENE_INFO:
                return [column for column in GENE_INFO_METADATA if column in data.columns]
            return []

        missing = [column for column in metadata if column not in data.columns]
        if missing:
            msg = f"Metadata columns not found in {datasource_name}: {missing}"
            raise MeasurementRegistrationError(
                msg,
                datasource_name=datasource_name,
                required_columns=missing,
                available_columns=data.columns,
            )
        return list(metadata)

    def get_measurement_set(self, ms_id: str) -> PolarsMeasurementSet:
        """Return a registered measurement set.

        Raises:
            KeyError: If no set with this id is registered
        """
        return self._ms_list[ms_id]

    def list_measurement_sets(self) -> list[PolarsMeasurementSet]:
        """Return registered measurement sets in registration order."""
        return list(self._ms_list.values())

    def remove_measurement_set(self, ms_id: str) -> None:
        """Drop a registered measurement set.

        Raises:
            KeyError: If no set with this id is registered
        """
        del self._ms_list[ms_id]
        logger.debug("Removed measurement set", ms_id=ms_id)

    def num_datasources(self) -> int:
        """Return the number of registered measurement sets."""
        return len(self._ms_list)
