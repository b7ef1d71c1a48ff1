import logging
from contextlib import contextmanager

import mlflow

logger = logging.getLogger(__name__)


class RunTracker:
    """Logs one MLflow run per evaluated variant when tracking is enabled."""

    def __init__(self, cfg):
        self.cfg = cfg
        self.enabled = cfg.enabled
        self._ready = False

    def _setup(self):
        if self._ready:
            return
        if self.cfg.tracking_uri:
            mlflow.set_tracking_uri(self.cfg.tracking_uri)
        # keyword arg so the name is never read as an experiment id
        mlflow.set_experiment(experiment_name=self.cfg.experiment_name)
        logger.info(f"Using MLflow experiment: {self.cfg.experiment_name}")
        self._ready = True

    @contextmanager
    def variant_run(self, name: str):
        if not self.enabled:
            yield None
            return
        self._setup()
        with mlflow.start_run(run_name=name) as run:
            mlflow.set_tag("variant", name)
            yield run

    def log_result(self, result, n_test: int):
        if not self.enabled:
            return
        mlflow.log_params({
            "variant": result.variant.name,
            "trained": result.trained,
            "n_test": n_test,
        })
        for key, value in result.metrics.as_dict().items():
            mlflow.log_metric(key, value)
        summary = result.report.summary
        mlflow.log_metric("abs_error_min", summary.min)
        mlflow.log_metric("abs_error_max", summary.max)
        mlflow.log_metric("abs_error_mean", summary.mean)
        mlflow.log_metric("report_samples", len(result.report.samples))
        if result.report_path is not None and result.report_path.exists():
            mlflow.log_artifact(str(result.report_path))
