import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable

import pandas as pd

from .errors import ParseError

logger = logging.getLogger(__name__)

# Field order of every trip line; header names in the file are ignored.
TRIP_COLUMNS = [
    "vendor_id",
    "rate_code",
    "passenger_count",
    "trip_time",
    "trip_distance",
    "payment_type",
    "fare_amount",
]
NUMERIC_COLUMNS = ["passenger_count", "trip_time", "trip_distance", "fare_amount"]
LABEL_COLUMN = "fare_amount"


@dataclass(frozen=True)
class TripRecord:
    vendor_id: str
    rate_code: str
    passenger_count: float
    trip_time: float
    trip_distance: float
    payment_type: str
    fare_amount: float = 0.0

    def to_frame(self) -> pd.DataFrame:
        return trips_to_frame([self])


@dataclass(frozen=True)
class PredictionRecord:
    fare_amount: float


def trips_to_frame(trips: Iterable[TripRecord]) -> pd.DataFrame:
    df = pd.DataFrame([asdict(t) for t in trips], columns=TRIP_COLUMNS)
    return df.astype({c: float for c in NUMERIC_COLUMNS})


def load_trips(path) -> pd.DataFrame:
    """Read a trip CSV into a frame with TRIP_COLUMNS, one row per line.

    The first line is a header and is skipped. Row order follows line order,
    which later stages rely on to pair trips with their predictions.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Data file not found: {p}")

    logger.info(f"Loading trips from {p}...")
    try:
        raw = pd.read_csv(
            p, header=None, skiprows=1, dtype=str, keep_default_na=False, skip_blank_lines=False
        )
    except pd.errors.EmptyDataError as e:
        raise ParseError("no trip records", path=p) from e
    except pd.errors.ParserError as e:
        raise ParseError(f"wrong number of fields ({e})", path=p) from e

    if raw.shape[1] != len(TRIP_COLUMNS):
        raise ParseError(
            f"expected {len(TRIP_COLUMNS)} fields, found {raw.shape[1]}", path=p, line=2
        )
    raw.columns = TRIP_COLUMNS

    # Short and blank lines are padded with NaN by the parser.
    short = raw.isna().any(axis=1)
    if short.any():
        line = _file_line(raw.index[short.to_numpy()][0])
        raise ParseError(f"expected {len(TRIP_COLUMNS)} fields", path=p, line=line)

    df = raw.copy()
    for col in NUMERIC_COLUMNS:
        values = pd.to_numeric(raw[col].str.strip(), errors="coerce")
        bad = values.isna()
        if bad.any():
            first = raw.index[bad.to_numpy()][0]
            raise ParseError(
                f"{col} is not a number: {raw.at[first, col]!r}",
                path=p,
                line=_file_line(first),
            )
        df[col] = values.astype(float)

    df = df.reset_index(drop=True)
    logger.info(f"Loaded {len(df)} trips from {p.name}")
    return df


def _file_line(position) -> int:
    # +1 for the header, +1 for 1-based numbering
    return int(position) + 2
