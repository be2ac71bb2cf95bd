"""
Exception hierarchy for the exhibitnet library.

All library errors derive from NetworkAnalysisError so callers can catch
everything raised by the co-occurrence pipeline with a single except clause.
Undefined metric values (density of a one-node graph and similar) are not
errors: they are reported as ``None`` in the metrics tables.
"""

from typing import Dict, Any, Optional, List, Union


class NetworkAnalysisError(Exception):
    """
    Base exception for all exhibitnet errors.

    Parameters
    ----------
    message : str
        Human-readable error message
    details : Dict[str, Any], optional
        Structured information about the failure
    cause : Exception, optional
        Underlying exception, chained as ``__cause__``
    context : Dict[str, Any], optional
        Information about the operation that failed

    Examples
    --------
    >>> raise NetworkAnalysisError("Decade graph could not be built")
    >>> raise NetworkAnalysisError(
    ...     "Unexpected node count",
    ...     details={"expected": 4, "actual": 3}
    ... )
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.context = context or {}

        full_message = message

        if self.details:
            detail_parts = []
            for key, value in self.details.items():
                if isinstance(value, (list, dict, set)) and len(str(value)) > 100:
                    detail_parts.append(f"{key}=<{type(value).__name__} with {len(value)} items>")
                else:
                    detail_parts.append(f"{key}={value}")
            full_message += f" (Details: {', '.join(detail_parts)})"

        if self.context:
            context_parts = [f"{k}={v}" for k, v in self.context.items()]
            full_message += f" (Context: {', '.join(context_parts)})"

        super().__init__(full_message)

        if cause is not None:
            self.__cause__ = cause

    def add_context(self, **kwargs: Any) -> 'NetworkAnalysisError':
        """Attach extra context (e.g. ``decade=1930``) and return self."""
        self.context.update(kwargs)
        return self


class ValidationError(NetworkAnalysisError):
    """
    Raised when input data does not meet the requirements of an operation.

    Parameters
    ----------
    message : str
        Description of the validation failure
    field : str, optional
        Name of the offending field or column
    value : Any, optional
        The invalid value
    expected : str, optional
        Description of what was expected
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected

        enhanced_details = details or {}
        if field is not None:
            enhanced_details["field"] = field
        if value is not None:
            enhanced_details["invalid_value"] = value
        if expected is not None:
            enhanced_details["expected"] = expected

        if field:
            enhanced_message = f"Validation error in field '{field}': {message}"
        else:
            enhanced_message = f"Validation error: {message}"

        super().__init__(enhanced_message, details=enhanced_details, **kwargs)


class MissingDataError(ValidationError):
    """
    Raised when a participation record lacks a required identifying field.

    Records are expected to arrive cleaned. A null or empty exhibition id,
    artist id or event date is a precondition violation and fails fast
    instead of being silently defaulted.

    Parameters
    ----------
    message : str
        Description of the missing data
    field : str
        Name of the field that is missing
    missing_count : int, optional
        Number of records missing the field

    Examples
    --------
    >>> raise MissingDataError(
    ...     "Records without an artist id",
    ...     field="artist_id",
    ...     missing_count=3
    ... )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        missing_count: Optional[int] = None,
        **kwargs
    ) -> None:
        self.missing_count = missing_count

        details = kwargs.pop("details", None) or {}
        if missing_count is not None:
            details["missing_count"] = missing_count

        super().__init__(message, field=field, details=details, **kwargs)


class DataFormatError(ValidationError):
    """
    Raised for file and schema problems (unreadable records file, malformed snapshot).

    Parameters
    ----------
    message : str
        Description of the format error
    format_type : str, optional
        Expected format (e.g. "CSV", "GEXF")
    file_path : str, optional
        Path to the problematic file
    """

    def __init__(
        self,
        message: str,
        format_type: Optional[str] = None,
        file_path: Optional[str] = None,
        **kwargs
    ) -> None:
        details = kwargs.pop("details", None) or {}

        if format_type:
            details["format_type"] = format_type
        if file_path:
            details["file_path"] = file_path

        super().__init__(message, details=details, **kwargs)


class GraphConstructionError(NetworkAnalysisError):
    """
    Raised when a co-occurrence graph cannot be built or restored.

    Parameters
    ----------
    message : str
        Description of the failure
    node_count : int, optional
        Number of nodes when the error occurred
    edge_count : int, optional
        Number of edges when the error occurred
    operation : str, optional
        The step that failed (e.g. "add_edges")
    """

    def __init__(
        self,
        message: str,
        node_count: Optional[int] = None,
        edge_count: Optional[int] = None,
        operation: Optional[str] = None,
        **kwargs
    ) -> None:
        self.node_count = node_count
        self.edge_count = edge_count
        self.operation = operation

        context = kwargs.pop("context", None) or {}
        if node_count is not None:
            context["node_count"] = node_count
        if edge_count is not None:
            context["edge_count"] = edge_count
        if operation:
            context["operation"] = operation

        super().__init__(message, context=context, **kwargs)


class ComputationError(NetworkAnalysisError):
    """
    Raised when a metric or community computation fails.

    Parameters
    ----------
    message : str
        Description of the computational error
    operation : str, optional
        The computation that failed
    error_type : str, optional
        Kind of failure (e.g. "numerical", "algorithm_failure")
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_type: Optional[str] = None,
        **kwargs
    ) -> None:
        self.operation = operation
        self.error_type = error_type

        context = kwargs.pop("context", None) or {}
        if operation:
            context["operation"] = operation
        if error_type:
            context["error_type"] = error_type

        super().__init__(message, context=context, **kwargs)


class DegenerateNormalizationError(ComputationError):
    """
    Raised when min-max normalization meets a metric with zero variance.

    Only raised under the ``on_degenerate="raise"`` policy; the default
    policy maps such a series to 0.0 instead.

    Parameters
    ----------
    message : str
        Description of the degenerate series
    metric : str, optional
        Name of the metric column
    value : float, optional
        The constant value shared by every decade
    """

    def __init__(
        self,
        message: str,
        metric: Optional[str] = None,
        value: Optional[float] = None,
        **kwargs
    ) -> None:
        self.metric = metric
        self.value = value

        details = kwargs.pop("details", None) or {}
        if metric:
            details["metric"] = metric
        if value is not None:
            details["constant_value"] = value

        super().__init__(
            message,
            operation="normalize_metrics",
            error_type="degenerate_series",
            details=details,
            **kwargs
        )


class ConfigurationError(NetworkAnalysisError):
    """
    Raised for invalid parameter values or combinations.

    Parameters
    ----------
    message : str
        Description of the configuration error
    parameter : str, optional
        Name of the problematic parameter
    value : Any, optional
        The invalid value
    valid_options : List[Any], optional
        Accepted values for the parameter
    function : str, optional
        Function in which the error was detected
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        valid_options: Optional[List[Any]] = None,
        function: Optional[str] = None,
        **kwargs
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_options = valid_options
        self.function = function

        details = kwargs.pop("details", None) or {}
        if parameter:
            details["parameter"] = parameter
        if value is not None:
            details["invalid_value"] = value
        if function:
            details["function"] = function

        enhanced_message = message
        if parameter and valid_options:
            enhanced_message += f". Valid options for '{parameter}': {valid_options}"

        super().__init__(enhanced_message, details=details, **kwargs)


def validate_parameter(
    value: Any,
    valid_options: List[Any],
    parameter_name: str,
    function_name: Optional[str] = None
) -> None:
    """
    Check that ``value`` is one of ``valid_options``.

    Raises
    ------
    ConfigurationError
        If value is not in valid_options
    """
    if value not in valid_options:
        raise ConfigurationError(
            f"Invalid value for parameter '{parameter_name}': {value}",
            parameter=parameter_name,
            value=value,
            valid_options=valid_options,
            function=function_name
        )


def require_positive(
    value: Union[int, float],
    parameter_name: str,
    allow_zero: bool = False
) -> None:
    """
    Check that a numeric parameter is positive (or non-negative).

    Raises
    ------
    ConfigurationError
        If the value is out of range
    """
    if allow_zero and value < 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be non-negative, got {value}",
            parameter=parameter_name,
            value=value
        )
    elif not allow_zero and value <= 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be positive, got {value}",
            parameter=parameter_name,
            value=value
        )
