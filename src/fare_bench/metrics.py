from dataclasses import dataclass

import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score


@dataclass(frozen=True)
class RegressionMetrics:
    rms: float
    r_squared: float
    l1: float
    l2: float

    def as_dict(self) -> dict:
        return {"rms": self.rms, "r_squared": self.r_squared, "l1": self.l1, "l2": self.l2}


def regression_metrics(y_true, y_pred) -> RegressionMetrics:
    l2 = float(mean_squared_error(y_true, y_pred))
    return RegressionMetrics(
        rms=float(np.sqrt(l2)),
        r_squared=float(r2_score(y_true, y_pred)),
        l1=float(mean_absolute_error(y_true, y_pred)),
        l2=l2,
    )


def evaluate(model, X, y) -> RegressionMetrics:
    return regression_metrics(y, model.predict(X))
