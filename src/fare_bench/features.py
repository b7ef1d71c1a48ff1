from dataclasses import dataclass
from typing import List, Tuple

import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.preprocessing import OneHotEncoder

from .data import LABEL_COLUMN, NUMERIC_COLUMNS, TRIP_COLUMNS
from .errors import ConfigError


@dataclass(frozen=True)
class FeatureConfig:
    numerical: Tuple[str, ...] = ("passenger_count", "trip_time", "trip_distance")
    # vendor_id, rate_code and payment_type can be one-hot encoded from config
    categorical: Tuple[str, ...] = ()
    label: str = LABEL_COLUMN

    @property
    def columns(self) -> List[str]:
        return list(self.numerical) + list(self.categorical)

    def validate(self) -> "FeatureConfig":
        if not self.columns:
            raise ConfigError("at least one feature column is required")
        unknown = [c for c in self.columns + [self.label] if c not in TRIP_COLUMNS]
        if unknown:
            raise ConfigError(f"unknown trip columns: {unknown}")
        not_numeric = [c for c in list(self.numerical) + [self.label] if c not in NUMERIC_COLUMNS]
        if not_numeric:
            raise ConfigError(f"columns are not numeric: {not_numeric}")
        if self.label in self.columns:
            raise ConfigError(f"label {self.label!r} is also listed as a feature")
        return self


def build_features(df: pd.DataFrame, features: FeatureConfig) -> Tuple[pd.DataFrame, pd.Series]:
    features.validate()
    X = df[features.columns]
    y = df[features.label]
    return X, y


def make_preprocessor(features: FeatureConfig) -> ColumnTransformer:
    transformers = [("numerical", "passthrough", list(features.numerical))]
    if features.categorical:
        transformers.append(
            ("categorical", OneHotEncoder(handle_unknown="ignore"), list(features.categorical))
        )
    return ColumnTransformer(transformers, sparse_threshold=0.0)
