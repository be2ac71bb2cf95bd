"""
Read-only store of artist participation records.

A participation record says that an artist took part in an exhibition on a
given date. The store holds cleaned records in a polars DataFrame and is
the input of graph construction and decade segmentation. It never mutates
after construction; filtering returns a new store.
"""

from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union
import polars as pl

from ..common.exceptions import DataFormatError, ValidationError
from ..common.validators import (
    RECORD_COLUMNS,
    OPTIONAL_COLUMNS,
    validate_records_frame,
    validate_event_dates,
    normalize_optional_text,
)
from ..common.logging_config import get_logger, log_function_entry

logger = get_logger(__name__)

RECORD_SCHEMA = {
    "exhibition_id": pl.Utf8,
    "artist_id": pl.Utf8,
    "nationality": pl.Utf8,
    "gender": pl.Utf8,
    "event_date": pl.Utf8,
}


@dataclass(frozen=True)
class ParticipationRecord:
    """
    One artist taking part in one exhibition.

    ``artist_id`` is the artist's display name and is the identity key of
    the artist node. ``nationality`` and ``gender`` may be None.
    """

    exhibition_id: str
    artist_id: str
    nationality: Optional[str]
    gender: Optional[str]
    event_date: date


def decade_of(value: Union[date, datetime, int]) -> int:
    """
    Decade of a date, datetime or year: floor(year / 10) * 10.

    Examples
    --------
    >>> decade_of(date(1935, 6, 1))
    1930
    >>> decade_of(1940)
    1940
    """
    if isinstance(value, (date, datetime)):
        year = value.year
    elif isinstance(value, int) and not isinstance(value, bool):
        year = value
    else:
        raise ValidationError(
            f"Cannot take the decade of {type(value).__name__}",
            field="event_date",
            value=value,
            expected="date, datetime or integer year"
        )
    return (year // 10) * 10


def decade_expr(column: str = "event_date") -> pl.Expr:
    """Polars expression applying ``decade_of`` to a date column."""
    return pl.col(column).map_elements(decade_of, return_dtype=pl.Int64).alias("decade")


class RecordStore:
    """
    Immutable collection of participation records.

    Use one of the constructors rather than ``__init__``:

    - ``RecordStore.from_records(records)``
    - ``RecordStore.from_exhibitions({exhibition_id: [(artist, nationality, gender, date), ...]})``
    - ``RecordStore.from_dataframe(frame_or_path)``

    Raises
    ------
    MissingDataError
        If any record lacks an exhibition id, artist id or event date
    DataFormatError
        If event dates cannot be read as dates

    Examples
    --------
    >>> store = RecordStore.from_exhibitions({
    ...     "E1": [("A", "German", "Male", date(1935, 5, 1)),
    ...            ("B", "French", "Female", date(1935, 5, 1))],
    ... })
    >>> len(store)
    2
    >>> store.decades()
    [1930]
    """

    def __init__(self, frame: pl.DataFrame) -> None:
        self._frame = _prepare_frame(frame)

    @classmethod
    def _from_clean(cls, frame: pl.DataFrame) -> 'RecordStore':
        store = cls.__new__(cls)
        store._frame = frame
        return store

    @classmethod
    def from_records(cls, records: Iterable[Union[ParticipationRecord, Mapping[str, Any]]]) -> 'RecordStore':
        """Build a store from ParticipationRecord objects or equivalent mappings."""
        columns: Dict[str, List[Any]] = {col: [] for col in RECORD_COLUMNS}

        for record in records:
            if isinstance(record, ParticipationRecord):
                values = {col: getattr(record, col) for col in RECORD_COLUMNS}
            elif isinstance(record, Mapping):
                values = {col: record.get(col) for col in RECORD_COLUMNS}
            else:
                raise ValidationError(
                    f"Unsupported record type {type(record).__name__}",
                    field="records",
                    expected="ParticipationRecord or mapping"
                )

            for col in RECORD_COLUMNS:
                value = values[col]
                if col == "event_date":
                    value = _date_text(value)
                elif value is not None:
                    value = str(value)
                columns[col].append(value)

        return cls(pl.DataFrame(columns, schema=RECORD_SCHEMA))

    @classmethod
    def from_exhibitions(
        cls,
        exhibitions: Mapping[Any, Iterable[Tuple[Any, Optional[str], Optional[str], Any]]]
    ) -> 'RecordStore':
        """
        Build a store from exhibitions and their participants.

        Parameters
        ----------
        exhibitions : Mapping
            exhibition_id -> iterable of (artist_id, nationality, gender, event_date)
        """
        records = []
        for exhibition_id, participants in exhibitions.items():
            for artist_id, nationality, gender, event_date in participants:
                records.append({
                    "exhibition_id": exhibition_id,
                    "artist_id": artist_id,
                    "nationality": nationality,
                    "gender": gender,
                    "event_date": event_date,
                })
        return cls.from_records(records)

    @classmethod
    def from_dataframe(cls, source: Union[pl.DataFrame, str, Path]) -> 'RecordStore':
        """
        Build a store from a DataFrame or a CSV / Parquet file of cleaned records.

        Columns must already be named exhibition_id, artist_id, nationality,
        gender and event_date. The two attribute columns are optional.
        """
        log_function_entry("RecordStore.from_dataframe", source=type(source).__name__)

        if isinstance(source, pl.DataFrame):
            return cls(source)

        path = Path(source)
        if not path.exists():
            raise DataFormatError(
                f"Records file not found: {path}",
                file_path=str(path)
            )

        suffix = path.suffix.lower()
        if suffix == ".csv":
            # Read every column as text so ids keep leading zeros
            frame = pl.read_csv(path, infer_schema_length=0)
        elif suffix in (".parquet", ".pq"):
            frame = pl.read_parquet(path)
        else:
            raise DataFormatError(
                f"Unsupported records file extension '{path.suffix}'",
                format_type="CSV or Parquet",
                file_path=str(path)
            )

        logger.info("Read %d rows from %s", frame.height, path)
        return cls(frame)

    @property
    def frame(self) -> pl.DataFrame:
        """The underlying DataFrame (exhibition_id, artist_id, nationality, gender, event_date)."""
        return self._frame

    def __len__(self) -> int:
        return self._frame.height

    def __iter__(self) -> Iterator[ParticipationRecord]:
        return self.records()

    def __repr__(self) -> str:
        return f"RecordStore(records={len(self)}, artists={len(self.artists())})"

    def records(self) -> Iterator[ParticipationRecord]:
        """Iterate over records in insertion order."""
        for row in self._frame.iter_rows(named=True):
            yield ParticipationRecord(**row)

    def artists(self) -> List[str]:
        """Distinct artist ids in order of first appearance."""
        return self._frame["artist_id"].unique(maintain_order=True).to_list()

    def exhibitions(self) -> List[str]:
        """Distinct exhibition ids in order of first appearance."""
        return self._frame["exhibition_id"].unique(maintain_order=True).to_list()

    def decades(self) -> List[int]:
        """Sorted decades that have at least one record."""
        if self._frame.is_empty():
            return []
        return sorted(self._frame.select(decade_expr())["decade"].unique().to_list())

    def for_decade(self, decade: int) -> 'RecordStore':
        """Records whose event date falls in ``[decade, decade + 10)``."""
        subset = self._frame.filter(decade_expr() == decade)
        return RecordStore._from_clean(subset)


def _date_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        return value
    raise DataFormatError(
        f"Event date must be a date or ISO string, got {type(value).__name__}",
        format_type="date",
        field="event_date",
        value=value
    )


def _prepare_frame(frame: pl.DataFrame) -> pl.DataFrame:
    """Select, type, validate and de-duplicate the record columns."""
    for col in OPTIONAL_COLUMNS:
        if col not in frame.columns:
            frame = frame.with_columns(pl.lit(None, dtype=pl.Utf8).alias(col))

    validate_records_frame(frame)

    frame = frame.select(RECORD_COLUMNS)
    frame = frame.with_columns(
        pl.col("exhibition_id").cast(pl.Utf8).str.strip_chars(),
        pl.col("artist_id").cast(pl.Utf8).str.strip_chars(),
        pl.col("nationality").cast(pl.Utf8),
        pl.col("gender").cast(pl.Utf8),
    )
    frame = frame.with_columns(
        normalize_optional_text("nationality"),
        normalize_optional_text("gender"),
        validate_event_dates(frame["event_date"]).alias("event_date"),
    )

    validate_records_frame(frame)

    before = frame.height
    frame = frame.unique(maintain_order=True)
    if frame.height < before:
        logger.debug("Dropped %d duplicate records", before - frame.height)

    logger.debug("Record store ready with %d records", frame.height)
    return frame
