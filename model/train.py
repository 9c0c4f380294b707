from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import pandas as pd
from loguru import logger
from matplotlib import pyplot as plt
from sklearn.pipeline import Pipeline
from tqdm.auto import tqdm

from application.preprocessing import TARGET_COL, Recipe, build_preprocessor
from core.settings import settings

from .evaluation import METRICS, evaluate_model, summarize_cv
from .registry import get_model_spec


@dataclass(frozen=True)
class CVResult:
    per_fold: pd.DataFrame  # model, metric, fold, value
    summary: pd.DataFrame  # model, metric, mean, std_err, n


def build_pipeline(model_name: str, recipe: Recipe | None = None) -> Pipeline:
    """Unfitted preprocessing recipe + estimator for a registry model."""
    spec = get_model_spec(model_name)
    return Pipeline([("preprocessor", build_preprocessor(recipe)), ("model", spec.build())])


def _xy(df: pd.DataFrame, target: str) -> tuple[pd.DataFrame, pd.Series]:
    if target not in df.columns:
        raise ValueError(f"Target column '{target}' not found; add it before training")
    return df.drop(columns=[target]), df[target]


def compare_models(
    model_names: Iterable[str],
    train_df: pd.DataFrame,
    n_folds: int = settings.CV_FOLDS,
    seed: int = settings.FOLD_SEED,
    recipe: Recipe | None = None,
    target: str = TARGET_COL,
) -> CVResult:
    """
    Cross-validate every model on the same seeded folds of the training set.
    No winner is picked here; read ``leaderboard(result.summary)`` and choose.
    """
    model_names = list(model_names)
    if not model_names:
        raise ValueError("No models to compare; pass at least one registry model name")

    X, y = _xy(train_df, target)
    frames = []
    for model_name in tqdm(model_names):
        pipe = build_pipeline(model_name, recipe)
        logger.info(f"Cross-validating {model_name} ({n_folds} folds, seed={seed})")

        t0 = time.time()
        per_fold = evaluate_model(n_folds=n_folds, model=pipe, X=X, y=y, seed=seed)
        logger.info(f"{model_name}: CV done in {time.time() - t0:.2f}s")

        long = per_fold.melt(id_vars="fold", value_vars=list(METRICS), var_name="metric", value_name="value")
        long.insert(0, "model", model_name)
        frames.append(long[["model", "metric", "fold", "value"]])

    per_fold_all = pd.concat(frames, ignore_index=True)
    summary = summarize_cv(per_fold_all)
    logger.info(f"CV summary:\n{summary.to_string(index=False)}")
    return CVResult(per_fold=per_fold_all, summary=summary)


def leaderboard(summary: pd.DataFrame, metric: str = "rmse") -> pd.DataFrame:
    """Models sorted by the mean of ``metric`` (best first); descriptive only."""
    if metric not in METRICS:
        raise ValueError(f"Unknown metric '{metric}'. Options: {list(METRICS)}")
    rows = summary[summary["metric"] == metric]
    return rows.sort_values("mean", ascending=metric != "rsq").reset_index(drop=True)


def fit_final(
    model_name: str,
    train_df: pd.DataFrame,
    recipe: Recipe | None = None,
    target: str = TARGET_COL,
) -> Pipeline:
    """Fit the chosen model + recipe on the whole training set."""
    X, y = _xy(train_df, target)
    pipe = build_pipeline(model_name, recipe)

    t0 = time.time()
    pipe.fit(X, y)
    logger.info(f"Fitted final {model_name} on {len(X)} rows in {time.time() - t0:.2f}s")

    estimator = pipe.named_steps["model"]
    rank = getattr(estimator, "rank_", None)
    n_features = len(pipe.named_steps["preprocessor"].get_feature_names_out())
    if rank is not None and rank < n_features:
        logger.warning(f"Rank-deficient design matrix: rank {rank} < {n_features} predictors")
    return pipe


def boxplot_cv(per_fold: pd.DataFrame, metric: str = "rmse"):
    """CV distribution of one metric per model."""
    rows = per_fold[per_fold["metric"] == metric]
    labels = list(dict.fromkeys(rows["model"]))
    results: list[np.ndarray] = [rows.loc[rows["model"] == m, "value"].to_numpy() for m in labels]

    fig = plt.figure()
    plt.boxplot(results, tick_labels=labels, showmeans=True)
    plt.xlabel("Models")
    plt.ylabel(f"CV {metric.upper()}")
    plt.tight_layout()
    return fig
