"""Model-comparison harness.

For each configured regressor variant, in order: resolve a model (stored
artifact first, otherwise train and store), log regression metrics on the
test set, run a sanity prediction, predict the whole test set, then write the
sampled error report and log the full-set error summary. The first failure
aborts the run; later variants are not attempted.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pandas as pd

from .cache import TrainingSet, fit_and_save, resolve_model
from .config import BenchmarkConfig
from .data import load_trips
from .features import build_features
from .metrics import RegressionMetrics, evaluate
from .model import RegressorVariant, artifact_path, get_variant
from .predict import predict_batch, predict_single
from .report import ErrorReport, error_report, report_path, write_report
from .tracking import RunTracker

logger = logging.getLogger(__name__)


@dataclass
class VariantResult:
    variant: RegressorVariant
    metrics: RegressionMetrics
    report: ErrorReport
    trained: bool
    artifact_path: Path
    report_path: Optional[Path] = None
    smoke_prediction: Optional[float] = None


def evaluate_variant(model, variant: RegressorVariant, test_df: pd.DataFrame,
                     cfg: BenchmarkConfig, trained: bool = False) -> VariantResult:
    X_test, y_test = build_features(test_df, cfg.features)

    metrics = evaluate(model, X_test, y_test)
    logger.info(f"Rms={metrics.rms}")
    logger.info(f"RSquared = {metrics.r_squared}")
    logger.debug(f"L1={metrics.l1} L2={metrics.l2}")

    smoke = None
    if cfg.smoke_test is not None:
        smoke = predict_single(model, cfg.smoke_test.trip).fare_amount
        if cfg.smoke_test.reference_fare is not None:
            logger.info(f"Predicted fare: {smoke}, actual fare: {cfg.smoke_test.reference_fare}")
        else:
            logger.info(f"Predicted fare: {smoke}")

    logger.info("Begin test...")
    predicted = predict_batch(model, test_df, n_jobs=cfg.n_jobs, chunk_size=cfg.chunk_size)
    logger.info("Done.")

    rep = error_report(
        y_test.to_numpy(),
        predicted,
        trim=cfg.report.trim_count,
        band=cfg.report.band,
        stride=cfg.report.stride,
    )
    path = write_report(report_path(cfg.reports_dir, variant.name), rep.samples)

    logger.info(f"Min abs error: {rep.summary.min}")
    logger.info(f"Max abs error: {rep.summary.max}")
    logger.info(f"Mean abs error: {rep.summary.mean}")

    return VariantResult(
        variant=variant,
        metrics=metrics,
        report=rep,
        trained=trained,
        artifact_path=artifact_path(cfg.artifacts_dir, variant),
        report_path=path,
        smoke_prediction=smoke,
    )


def _run_variants(cfg: BenchmarkConfig, tracker: RunTracker,
                  resolve: Callable[[RegressorVariant], Tuple[object, bool]],
                  test_df: pd.DataFrame) -> List[VariantResult]:
    # Fail-fast: an exception from one variant ends the run.
    results = []
    for variant in [get_variant(name) for name in cfg.variants]:
        logger.info("")
        logger.info(f"--- {variant.name} ---")
        with tracker.variant_run(variant.name):
            model, trained = resolve(variant)
            result = evaluate_variant(model, variant, test_df, cfg, trained=trained)
            tracker.log_result(result, n_test=len(test_df))
        results.append(result)
    return results


def run_benchmark(cfg: BenchmarkConfig, tracker: RunTracker = None) -> List[VariantResult]:
    cfg.validate()
    # Shared by every variant; a malformed test file stops the run here.
    test_df = load_trips(cfg.test_path)
    training = TrainingSet(lambda: load_trips(cfg.train_path))

    def resolve(variant):
        return resolve_model(
            variant,
            cfg.artifacts_dir,
            training,
            features=cfg.features,
            model_params=cfg.params_for(variant.name),
        )

    return _run_variants(cfg, tracker or RunTracker(cfg.mlflow), resolve, test_df)


def retrain(cfg: BenchmarkConfig, tracker: RunTracker = None) -> List[VariantResult]:
    """Train every configured variant from scratch, overwriting stored models."""
    cfg.validate()
    test_df = load_trips(cfg.test_path)
    train_df = load_trips(cfg.train_path)

    def resolve(variant):
        model = fit_and_save(
            variant,
            cfg.artifacts_dir,
            train_df,
            features=cfg.features,
            model_params=cfg.params_for(variant.name),
        )
        return model, True

    return _run_variants(cfg, tracker or RunTracker(cfg.mlflow), resolve, test_df)
