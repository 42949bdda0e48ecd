"""Pydantic models for epivizchart data structures."""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GenomicWindow(BaseModel):
    """Chromosome region every query of one composer is scoped to."""

    model_config = ConfigDict(frozen=True)

    chr: str = Field(..., min_length=1, description="Chromosome name, e.g. chr1")
    start: int = Field(..., ge=0, description="Start position")
    end: int = Field(..., ge=0, description="End position")

    @model_validator(mode="after")
    def validate_bounds(self) -> "GenomicWindow":
        """Ensure the window does not end before it starts."""
        if self.end < self.start:
            msg = f"Window end ({self.end}) must not be smaller than start ({self.start})"
            raise ValueError(msg)
        return self

    def __str__(self) -> str:
        """Return the window in chr:start-end notation."""
        return f"{self.chr}:{self.start}-{self.end}"


class Measurement(BaseModel):
    """A named data series belonging to a registered datasource."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Measurement identifier, unique within its datasource")
    name: str = Field(..., description="Display name")
    type: str = Field(default="feature", description="Measurement type (feature or range)")
    datasource_id: str = Field(..., alias="datasourceId", description="Owning datasource id")
    datasource_group: str = Field(..., alias="datasourceGroup", description="Owning datasource group")
    default_chart_type: str | None = Field(default=None, alias="defaultChartType", description="Preferred chart kind")
    annotation: dict[str, Any] | None = Field(default=None, description="Free-form annotation")
    min_value: float | None = Field(default=None, alias="minValue", description="Lower bound of values")
    max_value: float | None = Field(default=None, alias="maxValue", description="Upper bound of values")
    metadata: list[str] | None = Field(default=None, description="Metadata columns available on rows")

    def to_plain(self) -> dict[str, Any]:
        """Return the descriptor as a JSON-ready mapping using front-end field names."""
        return self.model_dump(by_alias=True)


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    reason: str | None = Field(default=None, description="Detailed reason for the error")
    suggestion: str | None = Field(default=None, description="Suggested correction")


class ErrorResponse(BaseModel):
    """Serializable form of an epivizchart error."""

    code: str = Field(..., description="Error code (e.g., E400_VALIDATION)")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] | None = Field(default=None, description="Detailed error information")
    hint: str | None = Field(default=None, description="Correction hint for the user")
    phase: str | None = Field(default=None, description="Plot phase where error occurred")


class ChartData(BaseModel):
    """Row and column payloads embedded in a chart tag."""

    model_config = ConfigDict(frozen=True)

    rows: str = Field(..., description="JSON-encoded row data")
    cols: str | None = Field(default=None, description="JSON-encoded column data, None for interval-only kinds")

    def to_json(self) -> str:
        """Combine both payloads into one JSON object without re-encoding them."""
        cols = self.cols if self.cols is not None else "null"
        return f'{{"rows":{self.rows},"cols":{cols}}}'

    def decoded(self) -> dict[str, Any]:
        """Return both payloads decoded."""
        return json.loads(self.to_json())


class ChartPayload(BaseModel):
    """JSON payloads extracted from a measurement set for one chart."""

    model_config = ConfigDict(frozen=True)

    measurements: str = Field(..., description="JSON-encoded measurement descriptors")
    rows: str = Field(..., description="JSON-encoded row data")
    columns: str | None = Field(default=None, description="JSON-encoded column data")

    @property
    def data(self) -> ChartData:
        """Row and column payloads as a single value."""
        return ChartData(rows=self.rows, cols=self.columns)
