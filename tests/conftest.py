import numpy as np
import pandas as pd
import pytest

from fare_bench.config import BenchmarkConfig
from fare_bench.data import TRIP_COLUMNS

HEADER = "vendor_id,rate_code,passenger_count,trip_time_in_secs,trip_distance,payment_type,fare_amount"


def synthetic_trips(n: int, seed: int = 0) -> pd.DataFrame:
    """Trips whose fare is roughly linear in distance and time, like metered fares."""
    rng = np.random.default_rng(seed)
    distance = rng.uniform(0.3, 20.0, n).round(2)
    trip_time = (distance * rng.uniform(100, 200, n) + rng.uniform(60, 300, n)).round(0)
    passengers = rng.integers(1, 5, n).astype(float)
    fare = (2.5 + 2.5 * distance + 0.005 * trip_time + rng.normal(0, 0.5, n)).round(1)
    return pd.DataFrame({
        "vendor_id": rng.choice(["VTS", "CMT"], n),
        "rate_code": rng.choice(["1", "2"], n),
        "passenger_count": passengers,
        "trip_time": trip_time,
        "trip_distance": distance,
        "payment_type": rng.choice(["CRD", "CSH"], n),
        "fare_amount": np.maximum(fare, 2.5),
    })[TRIP_COLUMNS]


def write_trips(path, df: pd.DataFrame, header: str = HEADER):
    lines = [header]
    for row in df.itertuples(index=False):
        lines.append(",".join(str(v) for v in row))
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def raw_trips():
    return synthetic_trips(300, seed=1)


@pytest.fixture
def data_dir(tmp_path):
    d = tmp_path / "data"
    d.mkdir()
    write_trips(d / "taxi-fare-train.csv", synthetic_trips(400, seed=1))
    write_trips(d / "taxi-fare-test.csv", synthetic_trips(150, seed=2))
    return d


@pytest.fixture
def make_config(data_dir):
    def _make(**overrides):
        cfg = {
            "data_dir": str(data_dir),
            "variants": ["random_forest", "linear"],
            "model_params": {"random_forest": {"n_estimators": 10}},
            "prediction": {"n_jobs": 1, "chunk_size": 40},
        }
        cfg.update(overrides)
        return BenchmarkConfig.from_dict(cfg)
    return _make


class SumModel:
    """Stand-in predictor: fare = passenger_count + trip_distance."""

    def __init__(self):
        self.calls = 0

    def predict(self, X):
        self.calls += 1
        return (X["passenger_count"] + X["trip_distance"]).to_numpy()


@pytest.fixture
def sum_model():
    return SumModel()
