import logging
import pickle
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict

from joblib import dump, load
from sklearn.ensemble import HistGradientBoostingRegressor, RandomForestRegressor
from sklearn.linear_model import (
    LinearRegression,
    PoissonRegressor,
    Ridge,
    SGDRegressor,
    TweedieRegressor,
)
from sklearn.pipeline import Pipeline, make_pipeline
from sklearn.preprocessing import SplineTransformer, StandardScaler

from .errors import ArtifactIOError, ArtifactNotFound, ConfigError, TrainingError
from .features import FeatureConfig, make_preprocessor

logger = logging.getLogger(__name__)

ARTIFACT_SUFFIX = ".joblib"


@dataclass(frozen=True)
class RegressorVariant:
    name: str
    factory: Callable[..., Any]
    description: str = ""

    def build(self, **params):
        return self.factory(**params)


def _random_forest(n_estimators=100, random_state=42, n_jobs=None, **params):
    return RandomForestRegressor(
        n_estimators=n_estimators, random_state=random_state, n_jobs=n_jobs, **params
    )


def _gradient_boosting(random_state=42, **params):
    return HistGradientBoostingRegressor(random_state=random_state, **params)


def _additive_spline(n_knots=8, degree=3, alpha=1.0, random_state=None):
    # One spline basis per feature summed by a linear model: a GAM without interactions.
    return make_pipeline(SplineTransformer(n_knots=n_knots, degree=degree), Ridge(alpha=alpha))


def _poisson(alpha=1e-4, max_iter=1000, random_state=None):
    return make_pipeline(StandardScaler(), PoissonRegressor(alpha=alpha, max_iter=max_iter))


def _sgd(random_state=42, max_iter=1000, tol=1e-3, **params):
    return make_pipeline(
        StandardScaler(),
        SGDRegressor(random_state=random_state, max_iter=max_iter, tol=tol, **params),
    )


def _tweedie(power=1.5, alpha=1e-4, link="log", max_iter=1000, random_state=None):
    return make_pipeline(
        StandardScaler(), TweedieRegressor(power=power, alpha=alpha, link=link, max_iter=max_iter)
    )


def _linear(random_state=None, **params):
    return LinearRegression(**params)


VARIANTS: Dict[str, RegressorVariant] = {
    v.name: v
    for v in (
        RegressorVariant("random_forest", _random_forest, "bagged regression trees"),
        RegressorVariant("gradient_boosting", _gradient_boosting, "histogram gradient boosted trees"),
        RegressorVariant("additive_spline", _additive_spline, "generalized additive model on spline bases"),
        RegressorVariant("poisson", _poisson, "Poisson GLM with log link; fares must be non-negative"),
        RegressorVariant("sgd", _sgd, "linear model fit by stochastic gradient descent"),
        RegressorVariant("tweedie", _tweedie, "Tweedie GLM; fares must be non-negative"),
        RegressorVariant("linear", _linear, "ordinary least squares"),
    )
}

DEFAULT_VARIANTS = ["random_forest", "gradient_boosting", "additive_spline", "poisson", "sgd"]


def get_variant(name: str) -> RegressorVariant:
    try:
        return VARIANTS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown regressor variant {name!r}; choose from {sorted(VARIANTS)}"
        ) from None


def artifact_path(artifacts_dir, variant: RegressorVariant) -> Path:
    return Path(artifacts_dir) / f"{variant.name}{ARTIFACT_SUFFIX}"


def train_model(variant: RegressorVariant, X, y, features: FeatureConfig = None, **model_params):
    features = features or FeatureConfig()
    try:
        model = Pipeline([
            ("features", make_preprocessor(features)),
            ("regressor", variant.build(**model_params)),
        ])
        logger.info(f"Training {variant.name} on {len(X)} trips...")
        model.fit(X, y)
    except Exception as e:
        raise TrainingError(f"Training {variant.name} failed: {e}") from e
    return model


def save_model(model, path):
    p = Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        dump(model, p)
    except OSError as e:
        raise ArtifactIOError(f"Could not write model artifact {p}: {e}") from e
    logger.info(f"Saved model to {p}")


def load_model(path):
    p = Path(path)
    if not p.exists():
        raise ArtifactNotFound(f"Model artifact not found: {p}")
    try:
        return load(p)
    except (OSError, EOFError, pickle.UnpicklingError, ValueError) as e:
        raise ArtifactIOError(f"Could not read model artifact {p}: {e}") from e
