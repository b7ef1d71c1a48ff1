import logging
from typing import Callable, Tuple

import pandas as pd

from .errors import ArtifactNotFound
from .features import FeatureConfig, build_features
from .model import RegressorVariant, artifact_path, load_model, save_model, train_model

logger = logging.getLogger(__name__)


class TrainingSet:
    """Reads the training trips on first use and keeps them for later variants."""

    def __init__(self, loader: Callable[[], pd.DataFrame]):
        self._loader = loader
        self._df = None

    @property
    def loaded(self) -> bool:
        return self._df is not None

    def __call__(self) -> pd.DataFrame:
        if self._df is None:
            self._df = self._loader()
        return self._df


def resolve_model(
    variant: RegressorVariant,
    artifacts_dir,
    load_training: Callable[[], pd.DataFrame],
    features: FeatureConfig = None,
    model_params: dict = None,
) -> Tuple[object, bool]:
    """Load the variant's stored model, or train and store one if none exists.

    Returns ``(model, trained)``. An existing artifact always wins; it is not
    compared against the training data it was built from.
    """
    path = artifact_path(artifacts_dir, variant)
    try:
        model = load_model(path)
    except ArtifactNotFound:
        logger.info(f"No stored model at {path}; training {variant.name}")
    else:
        logger.info(f"Loaded {variant.name} from {path}")
        return model, False

    model = fit_and_save(variant, artifacts_dir, load_training(), features, model_params)
    return model, True


def fit_and_save(variant, artifacts_dir, train_df, features=None, model_params=None):
    features = features or FeatureConfig()
    X, y = build_features(train_df, features)
    model = train_model(variant, X, y, features=features, **(model_params or {}))
    save_model(model, artifact_path(artifacts_dir, variant))
    return model
