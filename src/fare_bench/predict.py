import logging
from typing import List

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from .data import PredictionRecord, TripRecord
from .errors import PredictionError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10_000


def _feature_frame(model, df: pd.DataFrame) -> pd.DataFrame:
    # Fitted pipelines remember their input columns; feed exactly those.
    names = getattr(model, "feature_names_in_", None)
    if names is None:
        return df
    return df[list(names)]


def predict_single(model, trip: TripRecord) -> PredictionRecord:
    X = _feature_frame(model, trip.to_frame())
    y = model.predict(X)[0]
    return PredictionRecord(float(y))


def partition(n: int, chunk_size: int) -> List[slice]:
    """Split ``range(n)`` into contiguous, non-overlapping slices."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [slice(start, min(start + chunk_size, n)) for start in range(0, n, chunk_size)]


def _predict_into(model, X_part: pd.DataFrame, out_part: np.ndarray) -> int:
    y = np.asarray(model.predict(X_part), dtype=float).ravel()
    if y.shape[0] != out_part.shape[0]:
        raise PredictionError(
            f"model returned {y.shape[0]} predictions for {out_part.shape[0]} trips"
        )
    out_part[:] = y
    return y.shape[0]


def predict_batch(model, df: pd.DataFrame, n_jobs: int = 1,
                  chunk_size: int = DEFAULT_CHUNK_SIZE) -> np.ndarray:
    """Predict a fare for every row of ``df``.

    Element ``i`` of the result is the prediction for row ``i``. The output
    buffer is allocated up front and each worker receives the view covering
    its own slice, so workers never share an output slot.
    """
    X = _feature_frame(model, df)
    n = len(X)
    out = np.empty(n, dtype=float)
    slices = partition(n, chunk_size)
    logger.debug(f"Predicting {n} trips in {len(slices)} chunks (n_jobs={n_jobs})")

    written = Parallel(n_jobs=n_jobs, require="sharedmem")(
        delayed(_predict_into)(model, X.iloc[s], out[s]) for s in slices
    )
    if sum(written) != n:
        raise PredictionError(f"wrote {sum(written)} predictions for {n} trips")
    return out
