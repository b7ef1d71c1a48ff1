import pandas as pd
import pytest

from conftest import HEADER, write_trips
from fare_bench.data import (
    TRIP_COLUMNS,
    PredictionRecord,
    TripRecord,
    load_trips,
    trips_to_frame,
)
from fare_bench.errors import ParseError


def test_load_trips_keeps_line_order(tmp_path, raw_trips):
    path = write_trips(tmp_path / "trips.csv", raw_trips)
    df = load_trips(path)

    assert list(df.columns) == TRIP_COLUMNS
    assert len(df) == len(raw_trips)
    pd.testing.assert_series_equal(df["fare_amount"], raw_trips["fare_amount"])
    assert df["vendor_id"].tolist() == raw_trips["vendor_id"].tolist()


def test_header_names_are_ignored(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text("a,b,c,d,e,f,g\nVTS,1,1,1140,3.75,CRD,15.5\n")
    df = load_trips(path)

    assert len(df) == 1
    assert df.loc[0, "trip_time"] == 1140.0
    assert df.loc[0, "rate_code"] == "1"
    assert df.loc[0, "fare_amount"] == 15.5


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_trips(tmp_path / "nope.csv")


def test_short_line_is_parse_error(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(HEADER + "\nVTS,1,1,1140,3.75,CRD,15.5\nVTS,1,1,1140,3.75\n")
    with pytest.raises(ParseError) as exc:
        load_trips(path)
    assert exc.value.line == 3


def test_blank_line_is_parse_error(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(HEADER + "\nVTS,1,1,1140,3.75,CRD,15.5\n\nCMT,1,2,600,1.2,CSH,7\n")
    with pytest.raises(ParseError) as exc:
        load_trips(path)
    assert exc.value.line == 3


def test_trailing_newline_adds_no_row(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(HEADER + "\nVTS,1,1,1140,3.75,CRD,15.5\nCMT,1,2,600,1.2,CSH,7\n")
    assert len(load_trips(path)) == 2


def test_long_line_is_parse_error(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(HEADER + "\nVTS,1,1,1140,3.75,CRD,15.5\nVTS,1,1,1140,3.75,CRD,15.5,extra\n")
    with pytest.raises(ParseError):
        load_trips(path)


def test_non_numeric_field(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(HEADER + "\nVTS,1,1,1140,3.75,CRD,15.5\nVTS,1,one,1140,3.75,CRD,15.5\n")
    with pytest.raises(ParseError, match="passenger_count") as exc:
        load_trips(path)
    assert exc.value.line == 3


def test_header_only_file(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(HEADER + "\n")
    with pytest.raises(ParseError):
        load_trips(path)


def test_parse_error_is_value_error(tmp_path):
    path = tmp_path / "trips.csv"
    path.write_text(HEADER + "\nVTS,1,1,x,3.75,CRD,15.5\n")
    with pytest.raises(ValueError):
        load_trips(path)


def test_records_convert_to_frame():
    trips = [
        TripRecord("VTS", "1", 1.0, 1140.0, 10.33, "CSH", 29.5),
        TripRecord("CMT", "2", 2.0, 600.0, 1.2, "CRD", 7.0),
    ]
    df = trips_to_frame(trips)

    assert list(df.columns) == TRIP_COLUMNS
    assert df["vendor_id"].tolist() == ["VTS", "CMT"]
    assert df["trip_distance"].tolist() == [10.33, 1.2]
    assert df["fare_amount"].dtype == float


def test_records_are_immutable():
    trip = TripRecord("VTS", "1", 1.0, 1140.0, 10.33, "CSH")
    with pytest.raises(AttributeError):
        trip.fare_amount = 3.0
    assert PredictionRecord(1.5).fare_amount == 1.5
