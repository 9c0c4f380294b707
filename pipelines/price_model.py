from __future__ import annotations

import json
from contextlib import nullcontext
from pathlib import Path

import mlflow
import mlflow.sklearn
import pandas as pd
from loguru import logger
from matplotlib import pyplot as plt
from mlflow.models import infer_signature

from application.dataset import exploration
from application.dataset.io import load_diamonds, prepare_frame, split_data
from application.dataset.processing import add_log_price
from application.preprocessing import ORDINAL_COLS, PRICE_COL, TARGET_COL, build_recipe
from core.settings import settings
from model import compare_models, evaluate_on_test, fit_final, leaderboard
from model.evaluation import plot_residuals, pred_vs_true_figure
from model.train import boxplot_cv


def _save_table(df: pd.DataFrame, name: str, index: bool = False) -> list[Path]:
    out_dir = Path(settings.ARTIFACT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    csv_path, json_path = out_dir / f"{name}.csv", out_dir / f"{name}.json"
    df.to_csv(csv_path, index=index)
    df.to_json(json_path, orient="records", indent=2)
    return [csv_path, json_path]


def _save_figure(fig, name: str) -> Path:
    out_dir = Path(settings.ARTIFACT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{name}.png"
    fig.savefig(path)
    plt.close(fig)
    return path


def _save_json(payload: dict, name: str) -> Path:
    out_dir = Path(settings.ARTIFACT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{name}.json"
    path.write_text(json.dumps(payload, indent=2, default=str))
    return path


def load_with_target(data_path: str | None = None) -> pd.DataFrame:
    return add_log_price(load_diamonds(data_path), price_col=PRICE_COL, log_col=TARGET_COL)


def explore_pipeline(data_path: str | None = None, df: pd.DataFrame | None = None) -> dict[str, list[Path]]:
    """Write EDA tables (summary, zero dimensions, correlations) and figures. Returns artifacts by kind."""
    if df is None:
        df = load_with_target(data_path)

    tables = [
        *_save_table(exploration.summarize(df), "eda_summary", index=True),
        *_save_table(exploration.count_zero_dimensions(df).rename("n_zero").to_frame(), "eda_zero_dimensions", True),
        *_save_table(exploration.dimension_correlations(df).to_frame(), "eda_dimension_correlations", index=True),
    ]
    figures = [
        _save_figure(exploration.plot_price_distributions(df, PRICE_COL, TARGET_COL), "eda_price_distributions"),
        _save_figure(exploration.plot_carat_vs_dimensions(df), "eda_carat_vs_dimensions"),
    ]
    logger.success(f"EDA artifacts written -> {settings.ARTIFACT_DIR}")
    return {"tables": tables, "figures": figures}


def price_model_pipeline(
    model_names: list[str],
    final_model: str = settings.FINAL_MODEL,
    data_path: str | None = None,
    cv_folds: int = settings.CV_FOLDS,
    train_size: float = settings.TRAIN_SIZE,
    split_seed: int = settings.SEED,
    fold_seed: int = settings.FOLD_SEED,
    track: bool = False,
    df: pd.DataFrame | None = None,
) -> dict:
    """
    Run the end-to-end workflow:
    load -> log target -> split -> EDA -> CV comparison -> final fit -> test evaluation.

    ``final_model`` is chosen by the caller (after reading the CV leaderboard); it is
    never picked automatically. With ``track`` set, everything is also logged to one MLflow run.
    """
    if df is None:
        logger.info(f"Loading data from {data_path or settings.DATA_PATH or settings.DIAMONDS_DS}")
        df = load_with_target(data_path)
    else:
        df = prepare_frame(df)
        if TARGET_COL not in df.columns:
            df = add_log_price(df, price_col=PRICE_COL, log_col=TARGET_COL)

    if final_model not in model_names:
        logger.warning(f"Final model '{final_model}' was not cross-validated (compared: {model_names})")

    train_df, test_df = split_data(df, train_size=train_size, seed=split_seed)
    recipe = build_recipe()

    run_ctx = mlflow.start_run(run_name="diamond-price") if track else nullcontext()
    with run_ctx:
        artifacts = explore_pipeline(df=df)
        artifacts["tables"] += [_save_json(recipe.to_dict(), "recipe")]

        logger.info("Running model comparison")
        cv = compare_models(model_names, train_df, n_folds=cv_folds, seed=fold_seed, recipe=recipe)
        board = leaderboard(cv.summary, metric="rmse")
        artifacts["tables"] += _save_table(cv.per_fold, "cv_per_fold")
        artifacts["tables"] += _save_table(cv.summary, "cv_summary")
        artifacts["tables"] += _save_table(board, "leaderboard")
        artifacts["figures"].append(_save_figure(boxplot_cv(cv.per_fold, "rmse"), "cv_rmse_comparison"))

        logger.info(f"Fitting final model: {final_model}")
        pipe = fit_final(final_model, train_df, recipe=recipe)
        artifacts["tables"].append(_save_json(pipe.named_steps["preprocessor"].fitted_params(), "recipe_fitted"))

        test_metrics, predictions = evaluate_on_test(pipe, test_df)
        logger.info(f"Test metrics ({final_model}):\n{test_metrics.to_string(index=False)}")
        artifacts["tables"] += _save_table(test_metrics, "test_metrics")
        artifacts["tables"] += _save_table(predictions, "test_predictions", index=True)

        for scale, truth in (("log", TARGET_COL), ("price", PRICE_COL)):
            y_true, y_pred = predictions[truth], predictions[f"{truth}_pred"]
            title = f"{final_model} - Pred vs True ({scale} scale, test)"
            artifacts["figures"].append(
                _save_figure(pred_vs_true_figure(y_true, y_pred, title), f"pred_vs_true_{scale}")
            )
            artifacts["figures"].append(
                _save_figure(plot_residuals(y_true, y_pred, f"Residuals ({scale} scale)"), f"residuals_{scale}")
            )

        if track:
            _log_run(model_names, final_model, cv_folds, train_size, split_seed, fold_seed, train_df, test_df)
            _log_results(cv.summary, test_metrics, artifacts, pipe, train_df)

    logger.success(f"Artifacts written -> {settings.ARTIFACT_DIR}")
    return {
        "cv_per_fold": cv.per_fold,
        "cv_summary": cv.summary,
        "leaderboard": board,
        "final_model": final_model,
        "pipeline": pipe,
        "test_metrics": test_metrics,
        "n_train": len(train_df),
        "n_test": len(test_df),
        "artifacts": artifacts,
    }


def _log_run(model_names, final_model, cv_folds, train_size, split_seed, fold_seed, train_df, test_df) -> None:
    mlflow.set_tags({"run_type": "comparison", "final_model": final_model})
    mlflow.log_params(
        {
            "models": ",".join(model_names),
            "final_model": final_model,
            "cv_folds": cv_folds,
            "train_size": train_size,
            "split_seed": split_seed,
            "fold_seed": fold_seed,
            "train_rows": int(train_df.shape[0]),
            "test_rows": int(test_df.shape[0]),
        }
    )


def _log_results(cv_summary, test_metrics, artifacts, pipe, train_df) -> None:
    mlflow.log_metrics({f"cv_{r.model}_{r.metric}_mean": float(r.mean) for r in cv_summary.itertuples()})
    mlflow.log_metrics({f"test_{r.scale}_{r.metric}": float(r.value) for r in test_metrics.itertuples()})
    for path in artifacts["tables"]:
        mlflow.log_artifact(str(path), artifact_path="tables")
    for path in artifacts["figures"]:
        mlflow.log_artifact(str(path), artifact_path="plots")

    # plain strings for the grades; the recipe carries its own vocabularies
    signature_example = train_df.drop(columns=[TARGET_COL]).iloc[:10]
    signature_example = signature_example.astype({c: str for c in ORDINAL_COLS})
    signature = infer_signature(signature_example, pipe.predict(signature_example))
    mlflow.sklearn.log_model(pipe, artifact_path="model", signature=signature, input_example=signature_example)
