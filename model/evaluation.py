from __future__ import annotations

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from sklearn.metrics import mean_absolute_error, r2_score, root_mean_squared_error
from sklearn.model_selection import KFold, cross_validate
from sklearn.pipeline import Pipeline

from application.dataset.processing import back_transform
from application.preprocessing import PRICE_COL, TARGET_COL
from core.settings import settings

# metric name -> sklearn scorer; error scorers are negated by sklearn
SCORING = {
    "mae": "neg_mean_absolute_error",
    "rmse": "neg_root_mean_squared_error",
    "rsq": "r2",
}
METRICS = tuple(SCORING)


def make_folds(n_folds: int = settings.CV_FOLDS, seed: int = settings.FOLD_SEED) -> KFold:
    """Seeded k-fold splitter; the same seed and row order give the same folds."""
    return KFold(n_splits=n_folds, shuffle=True, random_state=seed)


def fold_assignment(
    df: pd.DataFrame, n_folds: int = settings.CV_FOLDS, seed: int = settings.FOLD_SEED
) -> pd.Series:
    """Validation fold id (1..k) of every row."""
    folds = np.zeros(len(df), dtype=int)
    for i, (_, val_idx) in enumerate(make_folds(n_folds, seed).split(df), start=1):
        folds[val_idx] = i
    return pd.Series(folds, index=df.index, name="fold")


def regression_metrics(y_true, y_pred) -> dict[str, float]:
    return {
        "mae": float(mean_absolute_error(y_true, y_pred)),
        "rmse": float(root_mean_squared_error(y_true, y_pred)),
        "rsq": float(r2_score(y_true, y_pred)),
    }


def evaluate_model(
    n_folds: int,
    model: Pipeline,
    X: pd.DataFrame,
    y: pd.Series,
    seed: int = settings.FOLD_SEED,
    n_jobs: int | None = settings.N_JOBS,
) -> pd.DataFrame:
    """
    K-fold cross-validation of a (preprocessor + model) pipeline.
    The pipeline is cloned and refit per fold, so preprocessing only ever sees the
    9/10 training portion. Returns one row per fold with mae, rmse and rsq.
    """
    scores = cross_validate(
        model,
        X,
        y,
        scoring=SCORING,
        cv=make_folds(n_folds, seed),
        n_jobs=n_jobs,
        error_score="raise",
    )
    per_fold = pd.DataFrame({name: scores[f"test_{name}"] for name in METRICS})
    # sklearn reports errors as negative scores
    per_fold["mae"] = -per_fold["mae"]
    per_fold["rmse"] = -per_fold["rmse"]
    per_fold.insert(0, "fold", np.arange(1, len(per_fold) + 1))
    return per_fold


def summarize_cv(per_fold: pd.DataFrame) -> pd.DataFrame:
    """Mean and standard error across folds for every (model, metric) of a long per-fold table."""
    grouped = per_fold.groupby(["model", "metric"], sort=False)["value"]
    summary = grouped.agg(mean="mean", std="std", n="count").reset_index()
    summary["std_err"] = summary["std"] / np.sqrt(summary["n"])
    return summary[["model", "metric", "mean", "std_err", "n"]]


def evaluate_on_test(
    pipeline: Pipeline, test_df: pd.DataFrame, target: str = TARGET_COL, price_col: str = PRICE_COL
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Score a fitted pipeline on held-out data, on the log scale and, after exp(),
    on the original price scale.

    Returns:
    - metrics: long table (scale, metric, value)
    - predictions: true/predicted values on both scales, indexed like ``test_df``
    """
    X_test = test_df.drop(columns=[target])
    pred_log = pipeline.predict(X_test)
    pred_price = back_transform(pred_log)

    predictions = pd.DataFrame(
        {
            target: test_df[target].to_numpy(),
            f"{target}_pred": pred_log,
            price_col: test_df[price_col].to_numpy(),
            f"{price_col}_pred": pred_price,
        },
        index=test_df.index,
    )

    rows = []
    for scale, truth, pred in (("log", target, f"{target}_pred"), ("price", price_col, f"{price_col}_pred")):
        for metric, value in regression_metrics(predictions[truth], predictions[pred]).items():
            rows.append({"scale": scale, "metric": metric, "value": value})
    return pd.DataFrame(rows), predictions


def pred_vs_true_figure(y_true, y_pred, title: str = "Predicted vs True"):
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.scatter(y_true, y_pred, alpha=0.35, s=6)
    m = float(min(float(np.min(y_true)), float(np.min(y_pred))))
    M = float(max(float(np.max(y_true)), float(np.max(y_pred))))
    ax.plot([m, M], [m, M], linestyle="--")
    ax.set_xlabel("True")
    ax.set_ylabel("Predicted")
    ax.set_title(title)
    fig.tight_layout()
    return fig


def plot_residuals(y_true, y_pred, title: str = "Residuals vs True Values"):
    """
    Residuals (true - predicted) against the true values.
    A funnel shape on the price scale is the heteroscedasticity left by fitting on log(price).
    """
    residuals = np.asarray(y_true) - np.asarray(y_pred)

    fig = plt.figure(figsize=(12, 8))
    plt.scatter(y_true, residuals, color="blue", alpha=0.5, s=6)
    plt.axhline(y=0, color="r", linestyle="-")

    plt.title(title, fontsize=18)
    plt.xlabel("True Values", fontsize=16)
    plt.ylabel("Residuals", fontsize=16)
    plt.grid(axis="y")
    plt.tight_layout()
    return fig
