import json

import pytest

import pipelines.price_model as p

pytestmark = pytest.mark.unit


def test_price_model_pipeline_end_to_end(raw_diamonds, artifact_dir):
    out = p.price_model_pipeline(
        model_names=["linear_reg", "boost_tree"],
        final_model="boost_tree",
        cv_folds=3,
        train_size=0.9,
        split_seed=44,
        fold_seed=11,
        df=raw_diamonds,
    )

    assert out["n_train"] == 900 and out["n_test"] == 100
    assert out["final_model"] == "boost_tree"
    assert set(out["cv_summary"]["model"]) == {"linear_reg", "boost_tree"}
    assert len(out["test_metrics"]) == 6

    for name in ("cv_summary.csv", "leaderboard.json", "test_metrics.csv", "recipe.json", "recipe_fitted.json"):
        assert (artifact_dir / name).exists(), name
    for name in ("pred_vs_true_price.png", "residuals_log.png", "eda_price_distributions.png"):
        assert (artifact_dir / name).exists(), name

    recipe = json.loads((artifact_dir / "recipe.json").read_text())
    assert recipe["outcome"] == "log_price"
    fitted = json.loads((artifact_dir / "recipe_fitted.json").read_text())
    assert "price" not in fitted["predictors"]


def test_price_model_pipeline_loads_when_no_frame(monkeypatch, raw_diamonds, artifact_dir):
    calls = {"load": 0}

    def fake_load(path=None):
        calls["load"] += 1
        return p.add_log_price(raw_diamonds)

    monkeypatch.setattr(p, "load_with_target", fake_load, raising=True)

    out = p.price_model_pipeline(model_names=["linear_reg"], final_model="linear_reg", cv_folds=2)
    assert calls["load"] == 1
    assert list(out["leaderboard"]["model"]) == ["linear_reg"]


def test_explore_pipeline_writes_artifacts(diamonds, artifact_dir):
    artifacts = p.explore_pipeline(df=diamonds)
    assert all(path.exists() for path in artifacts["tables"] + artifacts["figures"])
    assert (artifact_dir / "eda_zero_dimensions.csv").exists()
