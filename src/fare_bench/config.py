import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import yaml

from .data import TripRecord
from .errors import ConfigError
from .features import FeatureConfig
from .model import DEFAULT_VARIANTS, get_variant
from .predict import DEFAULT_CHUNK_SIZE
from .report import BAND, SAMPLE_STRIDE, TRIM_COUNT

logger = logging.getLogger(__name__)

# Trip used by the per-variant sanity prediction when the config names none.
DEFAULT_SMOKE_TRIP = {
    "vendor_id": "VTS",
    "rate_code": "1",
    "passenger_count": 1.0,
    "trip_time": 1140.0,
    "trip_distance": 10.33,
    "payment_type": "CSH",
    "fare_amount": 0.0,
}
DEFAULT_REFERENCE_FARE = 29.5


@dataclass(frozen=True)
class ReportConfig:
    trim_count: int = TRIM_COUNT
    band_low: float = BAND[0]
    band_high: float = BAND[1]
    stride: int = SAMPLE_STRIDE

    @property
    def band(self):
        return (self.band_low, self.band_high)


@dataclass(frozen=True)
class SmokeTest:
    trip: TripRecord
    reference_fare: Optional[float] = None


@dataclass(frozen=True)
class MlflowConfig:
    enabled: bool = False
    tracking_uri: Optional[str] = None
    experiment_name: str = "taxi_fare_benchmark"


@dataclass
class BenchmarkConfig:
    data_dir: Path
    train_file: str = "taxi-fare-train.csv"
    test_file: str = "taxi-fare-test.csv"
    artifacts_dir: Optional[Path] = None
    reports_dir: Optional[Path] = None
    variants: List[str] = field(default_factory=lambda: list(DEFAULT_VARIANTS))
    features: FeatureConfig = field(default_factory=FeatureConfig)
    model_params: Dict[str, dict] = field(default_factory=dict)
    n_jobs: int = 1
    chunk_size: int = DEFAULT_CHUNK_SIZE
    report: ReportConfig = field(default_factory=ReportConfig)
    smoke_test: Optional[SmokeTest] = None
    mlflow: MlflowConfig = field(default_factory=MlflowConfig)
    random_state: int = 42

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        # artifacts and reports sit next to the data unless configured
        self.artifacts_dir = Path(self.artifacts_dir) if self.artifacts_dir else self.data_dir
        self.reports_dir = Path(self.reports_dir) if self.reports_dir else self.data_dir

    @property
    def train_path(self) -> Path:
        return self.data_dir / self.train_file

    @property
    def test_path(self) -> Path:
        return self.data_dir / self.test_file

    def params_for(self, name: str) -> dict:
        return {"random_state": self.random_state, **self.model_params.get(name, {})}

    def validate(self) -> "BenchmarkConfig":
        if not self.variants:
            raise ConfigError("no regressor variants configured")
        for name in self.variants:
            get_variant(name)
        if len(set(self.variants)) != len(self.variants):
            raise ConfigError(f"duplicate variants in {self.variants}")
        unknown = set(self.model_params) - set(self.variants)
        if unknown:
            logger.warning(f"model_params given for variants that will not run: {sorted(unknown)}")
        if self.n_jobs == 0:
            raise ConfigError("prediction.n_jobs must not be 0")
        if self.chunk_size < 1:
            raise ConfigError("prediction.chunk_size must be positive")
        if self.report.trim_count < 0 or self.report.stride < 1:
            raise ConfigError("report.trim_count must be >= 0 and report.stride >= 1")
        if self.report.band_low >= self.report.band_high:
            raise ConfigError("report.band_low must be below report.band_high")
        self.features.validate()
        return self

    @classmethod
    def from_dict(cls, cfg: dict, base_dir=None) -> "BenchmarkConfig":
        cfg = dict(cfg or {})
        base = Path(base_dir) if base_dir is not None else Path.cwd()

        def resolve(p):
            if p is None:
                return None
            p = Path(p).expanduser()
            return p if p.is_absolute() else base / p

        feats = cfg.get("features") or {}
        defaults = FeatureConfig()
        features = FeatureConfig(
            numerical=tuple(feats.get("numerical", defaults.numerical)),
            categorical=tuple(feats.get("categorical", defaults.categorical)),
            label=feats.get("label", defaults.label),
        )

        prediction = cfg.get("prediction") or {}
        rep = cfg.get("report") or {}
        tracking = cfg.get("mlflow") or {}

        try:
            return cls(
                data_dir=resolve(cfg.get("data_dir", "data")),
                train_file=cfg.get("train_file", cls.train_file),
                test_file=cfg.get("test_file", cls.test_file),
                artifacts_dir=resolve(cfg.get("artifacts_dir")),
                reports_dir=resolve(cfg.get("reports_dir")),
                variants=list(DEFAULT_VARIANTS if cfg.get("variants") is None else cfg["variants"]),
                features=features,
                model_params={k: dict(v or {}) for k, v in (cfg.get("model_params") or {}).items()},
                n_jobs=int(prediction.get("n_jobs", 1)),
                chunk_size=int(prediction.get("chunk_size", DEFAULT_CHUNK_SIZE)),
                report=ReportConfig(
                    trim_count=int(rep.get("trim_count", TRIM_COUNT)),
                    band_low=float(rep.get("band_low", BAND[0])),
                    band_high=float(rep.get("band_high", BAND[1])),
                    stride=int(rep.get("stride", SAMPLE_STRIDE)),
                ),
                smoke_test=_smoke_test(cfg.get("smoke_test", {})),
                mlflow=MlflowConfig(
                    enabled=bool(tracking.get("enabled", False)),
                    tracking_uri=tracking.get("tracking_uri"),
                    experiment_name=tracking.get("experiment_name", MlflowConfig.experiment_name),
                ),
                random_state=int(cfg.get("random_state", 42)),
            ).validate()
        except ConfigError:
            raise
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid benchmark config: {e}") from e


def _smoke_test(section) -> Optional[SmokeTest]:
    # `smoke_test: null` or `enabled: false` turns the sanity prediction off
    if section is None:
        return None
    section = dict(section)
    if not section.pop("enabled", True):
        return None
    reference = section.pop("reference_fare", DEFAULT_REFERENCE_FARE)
    trip = {**DEFAULT_SMOKE_TRIP, **section.get("trip", {})}
    for key in ("passenger_count", "trip_time", "trip_distance", "fare_amount"):
        trip[key] = float(trip[key])
    for key in ("vendor_id", "rate_code", "payment_type"):
        trip[key] = str(trip[key])
    return SmokeTest(
        trip=TripRecord(**trip),
        reference_fare=None if reference is None else float(reference),
    )


def load_config(config_path) -> BenchmarkConfig:
    cfg_path = Path(config_path)
    if not cfg_path.is_file():
        raise FileNotFoundError(f"Config not found: {config_path}")
    cfg = yaml.safe_load(cfg_path.read_text()) or {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"{cfg_path} must contain a mapping, got {type(cfg).__name__}")
    return BenchmarkConfig.from_dict(cfg, base_dir=cfg_path.parent)
