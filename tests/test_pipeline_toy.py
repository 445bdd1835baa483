"""End-to-end tests: config loading, analysis runs and the CLI"""

import json
from pathlib import Path

import pandas as pd
import pytest
import yaml

from bootstats.cli import main
from bootstats.config import load_config
from bootstats.errors import InvalidInputError
from bootstats.run.runner import run_analysis
from bootstats.utils.io import read_json

ROOT = Path(__file__).resolve().parent.parent
X = [10, 12, 15, 20, 7, 11, 15, 18, 9, 10, 11, 13, 15, 16, 9, 10]
Y = [11, 9, 14, 18, 12, 10, 9, 17, 15, 12, 12, 14, 15, 16, 14, 13]


@pytest.fixture
def paired_csv(tmp_path):
    path = tmp_path / "paired.csv"
    pd.DataFrame({"x": X, "y": Y}).to_csv(path, index=False)
    return path


def _write_config(tmp_path, data_path, **overrides):
    config = {
        "analysis_name": "toy",
        "design": "paired",
        "statistic": "mean_difference",
        "z_test": True,
        "data": {"path": str(data_path), "columns": ["y", "x"]},
        "bootstrap": {"replicate_count": 500, "seed": 1337},
        "output": {"runs_dir": str(tmp_path / "runs")},
    }
    config.update(overrides)
    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump(config))
    return config_path


def test_config_loading():
    """Test loading the shipped example config."""
    config = load_config(ROOT / "configs" / "paired_toy.yaml")

    assert config.analysis_name == "paired_toy"
    assert config.design == "paired"
    assert config.data.columns == ["y", "x"]
    assert config.bootstrap.replicate_count == 2000
    assert config.bootstrap.quantile_interpolation == "linear"
    assert config.bootstrap.nan_policy == "omit"


def test_config_validation(tmp_path, paired_csv):
    """Test that invalid settings fail with InvalidInputError."""
    config_path = _write_config(tmp_path, paired_csv, bootstrap={"replicate_count": 0})
    with pytest.raises(InvalidInputError):
        load_config(config_path)

    config_path = _write_config(tmp_path, paired_csv, bootstrap={"confidence_level": 1.5})
    with pytest.raises(InvalidInputError):
        load_config(config_path)

    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_run_analysis_paired(tmp_path, paired_csv):
    """Test a full paired run writes results, replicates and metadata."""
    run_dir = run_analysis(_write_config(tmp_path, paired_csv))

    assert run_dir.exists()
    assert (run_dir / "results.json").exists()
    assert (run_dir / "replicates.csv").exists()
    assert (run_dir / "meta.json").exists()
    assert (run_dir / "run.log").exists()

    results = read_json(run_dir / "results.json")
    boot = results["bootstrap"]
    assert boot["observed_statistic"] == pytest.approx(0.625)
    assert boot["replicate_count"] == 500
    assert boot["ci_lower"] < 0.625 < boot["ci_upper"]

    z = results["z_test"]
    assert z["estimate"] == pytest.approx(0.625)
    assert abs(z["p_value"] - 0.4257) < 5e-4

    replicates = pd.read_csv(run_dir / "replicates.csv")
    assert len(replicates) == 500

    meta = read_json(run_dir / "meta.json")
    assert meta["sample_sizes"] == [16, 16]
    assert len(meta["config_hash"]) == 64


def test_run_analysis_reproducible(tmp_path, paired_csv):
    """Test that two runs with the same seed agree."""
    first = read_json(run_analysis(_write_config(tmp_path, paired_csv)) / "results.json")
    second = read_json(run_analysis(_write_config(tmp_path, paired_csv, analysis_name="toy2")) / "results.json")
    assert first["bootstrap"] == second["bootstrap"]


def test_run_analysis_one_sample(tmp_path, paired_csv):
    """Test the one-sample design with a built-in statistic."""
    config_path = _write_config(
        tmp_path, paired_csv,
        design="one_sample", statistic="median", z_test=False,
        data={"path": str(paired_csv), "columns": ["x"]},
    )
    results = read_json(run_analysis(config_path) / "results.json")
    assert results["bootstrap"]["observed_statistic"] == pytest.approx(11.5)
    assert "z_test" not in results


def test_run_analysis_design_mismatch(tmp_path, paired_csv):
    """Test that a paired design needs two columns."""
    config_path = _write_config(tmp_path, paired_csv, data={"path": str(paired_csv), "columns": ["x"]})
    with pytest.raises(InvalidInputError):
        run_analysis(config_path)


def test_cli_ztest(paired_csv, capsys):
    """Test the paired z-test through the CLI."""
    assert main(["ztest", "--data", str(paired_csv), "--columns", "x,y", "--paired"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["estimate"] == pytest.approx(0.625)
    assert abs(out["p_value"] - 0.4257) < 5e-4


def test_cli_chisq(tmp_path, capsys):
    """Test the chi-square CLI builds the contingency table from two columns."""
    rows = [("a", "u")] * 3 + [("a", "v")] * 7 + [("b", "u")] * 8 + [("b", "v")] * 2
    path = tmp_path / "counts.csv"
    pd.DataFrame(rows, columns=["group", "outcome"]).to_csv(path, index=False)

    assert main(["chisq", "--data", str(path), "--row", "group", "--col", "outcome"]) == 0
    corrected = json.loads(capsys.readouterr().out)
    assert main(["chisq", "--data", str(path), "--row", "group", "--col", "outcome", "--no-correct"]) == 0
    uncorrected = json.loads(capsys.readouterr().out)

    assert corrected["correction_applied"]
    assert corrected["statistic"] == pytest.approx(3.2323232, abs=1e-6)
    assert uncorrected["statistic"] == pytest.approx(5.0505051, abs=1e-6)


def test_cli_error_exit_code(tmp_path, capsys):
    """Test that library errors become a non-zero exit code."""
    assert main(["ztest", "--data", str(tmp_path / "missing.csv"), "--columns", "x"]) == 1
    assert "Error" in capsys.readouterr().err


def test_cli_regress(paired_csv, capsys):
    """Test the regression CLI resolves outcome and predictors by name."""
    assert main(["regress", "--data", str(paired_csv), "--outcome", "y", "--predictors", "x"]) == 0
    out = json.loads(capsys.readouterr().out)
    names = [c["name"] for c in out["coefficients"]]
    assert names == ["(Intercept)", "x"]
    assert out["n"] == 16
    assert out["df_residual"] == 14


def test_cli_regress_duplicate_predictors(paired_csv, capsys):
    """Test that an invalid model specification is reported, not raised."""
    assert main(["regress", "--data", str(paired_csv), "--outcome", "y", "--predictors", "x,x"]) == 1
    assert "Error" in capsys.readouterr().err


def test_cli_one_sided_output_is_strict_json(paired_csv, capsys):
    """Test that an open interval end is printed as null."""
    assert main(["ztest", "--data", str(paired_csv), "--columns", "x", "--mu0", "10", "--alternative", "greater"]) == 0
    raw = capsys.readouterr().out
    assert "Infinity" not in raw
    out = json.loads(raw)
    assert out["ci_upper"] is None
    assert out["ci_lower"] is not None
