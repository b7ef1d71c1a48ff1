import argparse
import logging
import sys
from dataclasses import replace

from .config import load_config
from .errors import FareBenchError
from .harness import retrain, run_benchmark

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    logging.getLogger("mlflow").setLevel(logging.WARNING)


def _parser(description: str) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description=description)
    ap.add_argument("--config", default="configs/benchmark.yaml", help="Path to config file")
    ap.add_argument(
        "--variant",
        action="append",
        dest="variants",
        metavar="NAME",
        help="Run only this variant (repeatable, keeps the given order)",
    )
    ap.add_argument("--log-level", default="INFO")
    return ap


def _run(command, argv, description: str) -> int:
    args = _parser(description).parse_args(argv)
    setup_logging(args.log_level)
    try:
        cfg = load_config(args.config)
        if args.variants:
            cfg = replace(cfg, variants=args.variants)
        results = command(cfg)
    except (FareBenchError, FileNotFoundError) as e:
        logger.exception(f"Run failed: {e}")
        return 1

    for r in results:
        origin = "trained" if r.trained else "cached"
        logger.info(
            f"{r.variant.name:<18} {origin:<7} rms={r.metrics.rms:.4f} "
            f"r2={r.metrics.r_squared:.4f} mae={r.report.summary.mean:.4f}"
        )
    return 0


def benchmark_main(argv=None) -> int:
    return _run(run_benchmark, argv, "Train-or-load each regressor and report its fare errors")


def train_main(argv=None) -> int:
    return _run(retrain, argv, "Retrain regressors, overwriting stored models")


if __name__ == "__main__":
    sys.exit(benchmark_main())
