"""Error handling and exception definitions for epivizchart."""

from .enums import ChartType, ComposerPhase, ErrorCode
from .models import ErrorDetail, ErrorResponse


class EpivizChartError(Exception):
    """Base exception for all epivizchart errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: list[ErrorDetail] | None = None,
        hint: str | None = None,
        phase: ComposerPhase | None = None,
    ):
        """Initialize epivizchart error.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            details: Optional detailed error information
            hint: Optional correction hint for the user
            phase: Optional plot phase where error occurred
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or []
        self.hint = hint
        self.phase = phase

    def to_error_response(self) -> ErrorResponse:
        """Convert exception to ErrorResponse model.

        Returns:
            ErrorResponse model instance
        """
        return ErrorResponse(
            code=self.code.value,
            message=self.message,
            details=self.details if self.details else None,
            hint=self.hint,
            phase=self.phase.value if self.phase else None,
        )


class ValidationError(EpivizChartError):
    """Raised when caller input is malformed."""

    def __init__(
        self,
        message: str,
        details: list[ErrorDetail] | None = None,
        hint: str | None = None,
        phase: ComposerPhase | None = None,
    ):
        """Initialize validation error."""
        super().__init__(
            message=message,
            code=ErrorCode.E400_VALIDATION,
            details=details,
            hint=hint,
            phase=phase,
        )


class InvalidChartTypeError(ValidationError):
    """Raised when a chart type outside the supported vocabulary is requested."""

    def __init__(self, chart_type: str, message: str | None = None):
        """Initialize invalid chart type error."""
        supported = [member.value for member in ChartType]
        super().__init__(
            message=message or f"Unknown chart type: {chart_type}",
            details=[ErrorDetail(field="chart_type", reason=f"'{chart_type}' is not a supported chart type")],
            hint=f"Supported chart types: {', '.join(supported)}",
            phase=ComposerPhase.TAG_ASSEMBLY,
        )
        self.chart_type = chart_type


UnknownChartTypeError = InvalidChartTypeError


class MeasurementRegistrationError(EpivizChartError):
    """Raised when a data object cannot be registered as a measurement set."""

    def __init__(
        self,
        message: str,
        datasource_name: str | None = None,
        required_columns: list[str] | None = None,
        available_columns: list[str] | None = None,
    ):
        """Initialize measurement registration error."""
        details = [
            ErrorDetail(
                field=column,
                reason=f"Required column '{column}' is missing",
                suggestion=f"Add a '{column}' column to the data object",
            )
            for column in required_columns or []
        ]

        hint = None
        if available_columns is not None:
            hint = f"Available columns: {', '.join(available_columns[:10])}"
            if len(available_columns) > 10:
                hint += f" (and {len(available_columns) - 10} more)"

        super().__init__(
            message=message,
            code=ErrorCode.E422_UNPROCESSABLE,
            details=details if details else None,
            hint=hint,
            phase=ComposerPhase.REGISTRATION,
        )
        self.datasource_name = datasource_name


class MeasurementQueryError(EpivizChartError):
    """Raised when a row or value query against a measurement set fails."""

    def __init__(
        self,
        message: str,
        measurement_id: str | None = None,
        code: ErrorCode = ErrorCode.E422_UNPROCESSABLE,
        hint: str | None = None,
    ):
        """Initialize measurement query error."""
        details = None
        if measurement_id:
            details = [ErrorDetail(field="measurement", reason=f"Query for '{measurement_id}' failed")]

        super().__init__(
            message=message,
            code=code,
            details=details,
            hint=hint,
            phase=ComposerPhase.PAYLOAD_EXTRACTION,
        )
        self.measurement_id = measurement_id


class DependencyUnavailableError(EpivizChartError):
    """Raised when an optional dependency is required but not installed."""

    def __init__(
        self,
        message: str,
        dependency: str | None = None,
        phase: ComposerPhase | None = None,
    ):
        """Initialize dependency unavailable error."""
        hint = "A required package is not installed."
        if dependency:
            hint = f"Install '{dependency}' to use this feature."

        super().__init__(
            message=message,
            code=ErrorCode.E503_DEPENDENCY_UNAVAILABLE,
            hint=hint,
            phase=phase,
        )
