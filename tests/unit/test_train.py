import numpy as np
import pytest
from sklearn.pipeline import Pipeline

from model.train import boxplot_cv, build_pipeline, compare_models, fit_final, leaderboard

pytestmark = pytest.mark.unit


@pytest.fixture
def cv_result(train_test):
    train, _ = train_test
    return compare_models(["linear_reg", "boost_tree"], train, n_folds=10, seed=11)


def test_compare_models_tables(cv_result):
    per_fold, summary = cv_result.per_fold, cv_result.summary

    assert list(per_fold.columns) == ["model", "metric", "fold", "value"]
    assert len(per_fold) == 2 * 3 * 10
    assert set(summary["model"]) == {"linear_reg", "boost_tree"}
    assert set(summary["metric"]) == {"mae", "rmse", "rsq"}
    assert (summary["n"] == 10).all()


def test_aggregate_equals_mean_of_folds(cv_result):
    per_fold, summary = cv_result.per_fold, cv_result.summary
    for row in summary.itertuples():
        values = per_fold[(per_fold["model"] == row.model) & (per_fold["metric"] == row.metric)]["value"]
        assert row.mean == pytest.approx(values.mean())
        assert row.std_err == pytest.approx(values.std(ddof=1) / np.sqrt(10))


def test_linear_model_recovers_clean_signal(cv_result):
    summary = cv_result.summary
    rsq = summary[(summary["model"] == "linear_reg") & (summary["metric"] == "rsq")]["mean"].item()
    assert rsq > 0.9


def test_leaderboard_orders_by_metric(cv_result):
    board = leaderboard(cv_result.summary, metric="rmse")
    assert board["mean"].is_monotonic_increasing
    assert set(board["model"]) == {"linear_reg", "boost_tree"}

    board_rsq = leaderboard(cv_result.summary, metric="rsq")
    assert board_rsq["mean"].is_monotonic_decreasing

    with pytest.raises(ValueError, match="Unknown metric"):
        leaderboard(cv_result.summary, metric="mape")


def test_boxplot_cv_returns_figure(cv_result):
    import matplotlib.pyplot as plt

    fig = boxplot_cv(cv_result.per_fold, "rmse")
    assert fig.axes
    plt.close(fig)


def test_build_pipeline_steps():
    pipe = build_pipeline("boost_tree")
    assert isinstance(pipe, Pipeline)
    assert [name for name, _ in pipe.steps] == ["preprocessor", "model"]


@pytest.mark.parametrize("model_name", ["linear_reg", "boost_tree"])
def test_fit_final_predicts_log_price(train_test, model_name):
    train, test = train_test
    pipe = fit_final(model_name, train)
    preds = pipe.predict(test.drop(columns=["log_price"]))
    assert preds.shape == (len(test),)
    assert np.isfinite(preds).all()


def test_fit_final_requires_target(train_test):
    train, _ = train_test
    with pytest.raises(ValueError, match="Target column"):
        fit_final("linear_reg", train.drop(columns=["log_price"]))


def test_fit_final_warns_on_rank_deficient_design(train_test):
    from loguru import logger

    train, _ = train_test
    collinear = train.assign(depth=2 * train["table"])

    messages = []
    handler_id = logger.add(messages.append, level="WARNING", format="{message}")
    try:
        fit_final("linear_reg", collinear)
    finally:
        logger.remove(handler_id)

    assert any("Rank-deficient design matrix" in m for m in messages)


def test_compare_models_requires_models(train_test):
    train, _ = train_test
    with pytest.raises(ValueError, match="No models to compare"):
        compare_models([], train, n_folds=3)
