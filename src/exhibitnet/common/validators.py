"""
Input validation for participation records.

Records are expected to arrive cleaned. These checks enforce the contract
at the boundary of the library and fail fast with a typed error naming the
offending field, instead of letting nulls flow into graph construction.
"""

from datetime import date, datetime
from typing import List, Optional
import polars as pl

from .exceptions import ValidationError, MissingDataError, DataFormatError


REQUIRED_COLUMNS = ["exhibition_id", "artist_id", "event_date"]
OPTIONAL_COLUMNS = ["nationality", "gender"]
RECORD_COLUMNS = ["exhibition_id", "artist_id", "nationality", "gender", "event_date"]


def validate_records_frame(
    df: pl.DataFrame,
    required_cols: Optional[List[str]] = None
) -> None:
    """
    Validate a participation-record DataFrame.

    Parameters
    ----------
    df : pl.DataFrame
        Records with at least the required columns
    required_cols : List[str], optional
        Columns that must be present and non-empty
        (default: exhibition_id, artist_id, event_date)

    Raises
    ------
    ValidationError
        If a required column is absent
    MissingDataError
        If a required column holds null or empty-string values

    Examples
    --------
    >>> df = pl.DataFrame({
    ...     "exhibition_id": ["E1", None],
    ...     "artist_id": ["A", "B"],
    ...     "event_date": [date(1935, 1, 1), date(1935, 1, 1)],
    ... })
    >>> validate_records_frame(df)  # doctest: +SKIP
    MissingDataError: Validation error in field 'exhibition_id': ...
    """
    required_cols = required_cols or REQUIRED_COLUMNS

    missing_cols = [col for col in required_cols if col not in df.columns]
    if missing_cols:
        raise ValidationError(
            f"Missing required columns: {missing_cols}",
            field="columns",
            details={"available_columns": df.columns, "missing": missing_cols}
        )

    for col in required_cols:
        series = df[col]
        missing = series.null_count()
        if series.dtype == pl.Utf8:
            missing += int((series.drop_nulls().str.strip_chars() == "").sum())

        if missing > 0:
            raise MissingDataError(
                f"{missing} record(s) have no {col}",
                field=col,
                missing_count=missing,
                details={"total_rows": df.height}
            )


def validate_event_dates(dates: pl.Series) -> pl.Series:
    """
    Coerce an event-date column to ``pl.Date``.

    Accepts Date and Datetime columns as well as ISO ``YYYY-MM-DD`` strings.
    Nulls are left in place for ``validate_records_frame`` to report.

    Raises
    ------
    DataFormatError
        If string values cannot be parsed or the dtype is not temporal
    """
    if dates.dtype == pl.Date:
        return dates

    if dates.dtype == pl.Datetime:
        return dates.dt.date()

    if dates.dtype == pl.Utf8:
        try:
            blanked = dates.to_frame().select(normalize_optional_text(dates.name)).to_series()
            return blanked.str.to_date("%Y-%m-%d", strict=True)
        except (pl.exceptions.ComputeError, pl.exceptions.InvalidOperationError) as e:
            raise DataFormatError(
                "Failed to parse event dates, expected ISO YYYY-MM-DD strings",
                format_type="ISO-8601 date",
                field=dates.name,
                details={"sample_values": dates.head(5).to_list()},
                cause=e
            )

    if dates.dtype == pl.Object or dates.dtype == pl.Null:
        values = dates.to_list()
        if all(v is None or isinstance(v, (date, datetime)) for v in values):
            return pl.Series(
                dates.name,
                [v.date() if isinstance(v, datetime) else v for v in values],
                dtype=pl.Date
            )

    raise DataFormatError(
        f"Event dates must be dates or ISO strings, got {dates.dtype}",
        format_type="date",
        field=dates.name
    )


def normalize_optional_text(column: str) -> pl.Expr:
    """Expression mapping empty or whitespace-only strings to null."""
    stripped = pl.col(column).str.strip_chars()
    return (
        pl.when(stripped == "")
        .then(None)
        .otherwise(stripped)
        .alias(column)
    )
