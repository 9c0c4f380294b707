from __future__ import annotations

import os
import warnings
from pathlib import Path

# Choose a backend before importing pyplot to avoid GUI deps in servers
if "MPLBACKEND" not in os.environ:
    os.environ["MPLBACKEND"] = "Agg"

from loguru import logger
from matplotlib import pyplot as plt  # noqa: E402
from tqdm.auto import tqdm

from core.settings import settings


def apply_global_settings() -> None:
    """
    Apply process-wide runtime config before a diamond run:
      - tqdm progress bars for pandas
      - matplotlib figure size and dpi for the EDA/diagnostic plots
      - artifact directory
      - deprecation/future warning filters
      - optional Kaggle credentials
    Splits, folds and models take their seeds explicitly, so no global RNG is touched.
    Safe to call multiple times.
    """
    tqdm.pandas()

    if settings.MPL_FIGSIZE:
        plt.rcParams["figure.figsize"] = settings.MPL_FIGSIZE
    if settings.MPL_DPI:
        plt.rcParams["figure.dpi"] = settings.MPL_DPI

    Path(settings.ARTIFACT_DIR).mkdir(parents=True, exist_ok=True)

    if settings.IGNORE_DEPRECATION_WARNINGS:
        warnings.filterwarnings("ignore", category=DeprecationWarning)
    if settings.IGNORE_FUTURE_WARNINGS:
        warnings.filterwarnings("ignore", category=FutureWarning)

    logger.info(
        f"Environment initialized: artifacts -> {settings.ARTIFACT_DIR}, "
        f"split seed={settings.SEED}, fold seed={settings.FOLD_SEED}"
    )

    # public dataset; credentials only matter when the Kaggle account requires them
    if settings.KAGGLE_USERNAME and settings.KAGGLE_KEY:
        os.environ["KAGGLE_USERNAME"] = settings.KAGGLE_USERNAME
        os.environ["KAGGLE_KEY"] = settings.KAGGLE_KEY
        logger.info(f"Kaggle credentials set for user: {settings.KAGGLE_USERNAME}")


def configure_mlflow_backend() -> str | None:
    """
    Point MLflow at MLFLOW_TRACKING_URI and select MLFLOW_EXPERIMENT_NAME.
    Returns the tracking URI, or None when tracking is not configured.
    """
    if not settings.MLFLOW_TRACKING_URI:
        logger.warning("MLFLOW_TRACKING_URI not set; MLflow tracking disabled, artifacts are written locally only")
        return None

    import mlflow

    mlflow.set_tracking_uri(settings.MLFLOW_TRACKING_URI)
    mlflow.set_experiment(settings.MLFLOW_EXPERIMENT_NAME)
    logger.info(f"MLflow uri={settings.MLFLOW_TRACKING_URI} experiment={settings.MLFLOW_EXPERIMENT_NAME}")
    return settings.MLFLOW_TRACKING_URI
