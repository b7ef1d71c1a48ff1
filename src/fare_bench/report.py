"""Absolute-error reports for one regressor.

The report is a compact sample of the sorted error distribution: the largest
``TRIM_COUNT`` errors are dropped, only errors strictly inside ``BAND`` are
kept, and every ``SAMPLE_STRIDE``-th of those is written out. The summary
(min / max / mean) is computed separately over every error, untrimmed.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

import numpy as np

from .errors import ArtifactIOError

logger = logging.getLogger(__name__)

TRIM_COUNT = 2
BAND = (0.75, 450.0)
SAMPLE_STRIDE = 1000
REPORT_SUFFIX = "_ModelErrors.csv"


@dataclass(frozen=True)
class ErrorSummary:
    count: int
    min: float
    max: float
    mean: float


@dataclass(frozen=True)
class ErrorReport:
    summary: ErrorSummary
    samples: List[Tuple[int, float]] = field(default_factory=list)


def absolute_errors(actual, predicted) -> np.ndarray:
    actual = np.asarray(actual, dtype=float)
    predicted = np.asarray(predicted, dtype=float)
    if actual.shape != predicted.shape:
        raise ValueError(
            f"{actual.shape[0]} actual fares but {predicted.shape[0]} predictions"
        )
    return np.abs(actual - predicted)


def summarize(errors) -> ErrorSummary:
    errors = np.asarray(errors, dtype=float)
    if errors.size == 0:
        raise ValueError("cannot summarize an empty error set")
    return ErrorSummary(
        count=int(errors.size),
        min=float(errors.min()),
        max=float(errors.max()),
        mean=float(errors.mean()),
    )


def sample_errors(errors, trim: int = TRIM_COUNT, band: Tuple[float, float] = BAND,
                  stride: int = SAMPLE_STRIDE) -> List[Tuple[int, float]]:
    if trim < 0 or stride < 1:
        raise ValueError(f"invalid trim={trim} / stride={stride}")
    ordered = np.sort(np.asarray(errors, dtype=float))
    kept = ordered[: max(ordered.size - trim, 0)]
    low, high = band
    kept = kept[(kept > low) & (kept < high)]
    # stride counts positions in the filtered sequence, not dataset rows
    return [(k, float(e)) for k, e in enumerate(kept[::stride])]


def error_report(actual, predicted, trim: int = TRIM_COUNT, band: Tuple[float, float] = BAND,
                 stride: int = SAMPLE_STRIDE) -> ErrorReport:
    errors = absolute_errors(actual, predicted)
    return ErrorReport(
        summary=summarize(errors),
        samples=sample_errors(errors, trim=trim, band=band, stride=stride),
    )


def format_error(value: float) -> str:
    return f"{value:.7g}"


def report_path(reports_dir, name: str) -> Path:
    return Path(reports_dir) / f"{name}{REPORT_SUFFIX}"


def write_report(path, samples) -> Path:
    p = Path(path)
    lines = [f"{k},{format_error(e)}\n" for k, e in samples]
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        with open(p, "w", newline="") as f:
            f.writelines(lines)
    except OSError as e:
        raise ArtifactIOError(f"Could not write error report {p}: {e}") from e
    logger.info(f"Wrote {len(lines)} error samples to {p}")
    return p
