import yaml

from conftest import HEADER
from fare_bench.cli import benchmark_main, train_main


def _write_config(tmp_path, data_dir, **extra):
    cfg = {
        "data_dir": str(data_dir),
        "reports_dir": "reports",
        "variants": ["linear", "sgd"],
        "prediction": {"n_jobs": 2, "chunk_size": 25},
        **extra,
    }
    path = tmp_path / "bench.yaml"
    path.write_text(yaml.safe_dump(cfg))
    return path


def test_benchmark_main_writes_reports(tmp_path, data_dir):
    config = _write_config(tmp_path, data_dir)

    assert benchmark_main(["--config", str(config)]) == 0

    assert (data_dir / "linear.joblib").exists()
    assert (data_dir / "sgd.joblib").exists()
    assert (tmp_path / "reports" / "linear_ModelErrors.csv").exists()
    assert (tmp_path / "reports" / "sgd_ModelErrors.csv").exists()


def test_variant_flag_restricts_run(tmp_path, data_dir):
    config = _write_config(tmp_path, data_dir)

    assert benchmark_main(["--config", str(config), "--variant", "sgd"]) == 0

    assert (data_dir / "sgd.joblib").exists()
    assert not (data_dir / "linear.joblib").exists()


def test_train_main_retrains(tmp_path, data_dir):
    config = _write_config(tmp_path, data_dir)
    assert train_main(["--config", str(config), "--variant", "linear"]) == 0
    assert (data_dir / "linear.joblib").exists()


def test_failures_exit_non_zero(tmp_path, data_dir):
    (data_dir / "taxi-fare-test.csv").write_text(HEADER + "\nVTS,1\n")
    config = _write_config(tmp_path, data_dir)

    assert benchmark_main(["--config", str(config)]) == 1
    assert benchmark_main(["--config", str(tmp_path / "missing.yaml")]) == 1
    assert benchmark_main(["--config", str(config), "--variant", "nope"]) == 1
