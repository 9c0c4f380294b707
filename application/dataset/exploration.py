from __future__ import annotations

import matplotlib.pyplot as plt
import pandas as pd
from loguru import logger

from application.preprocessing.schema import ModelSchema, schema


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    """describe() over numeric and categorical columns, one row per column."""
    return df.describe(include="all").T


def count_zero_dimensions(df: pd.DataFrame, model_schema: ModelSchema = schema) -> pd.Series:
    """Number of rows with a zero length per dimension column (invalid measurements)."""
    counts = (df[list(model_schema.dimensions)] == 0).sum()
    logger.info(f"Zero-valued dimensions: {counts.to_dict()}")
    return counts


def dimension_correlations(df: pd.DataFrame, model_schema: ModelSchema = schema) -> pd.Series:
    """Pearson correlation of the weight column against each dimension column."""
    dims = list(model_schema.dimensions)
    return df[dims].corrwith(df[model_schema.weight]).rename(f"corr_with_{model_schema.weight}")


def plot_price_distributions(df: pd.DataFrame, price_col: str = "price", log_col: str = "log_price", bins: int = 50):
    """Histograms of the raw and the log-scaled price."""
    fig, axes = plt.subplots(1, 2)
    axes[0].hist(df[price_col], bins=bins)
    axes[0].set_xlabel(price_col)
    axes[0].set_ylabel("count")
    axes[1].hist(df[log_col], bins=bins)
    axes[1].set_xlabel(log_col)
    fig.tight_layout()
    return fig


def plot_carat_vs_dimensions(df: pd.DataFrame, model_schema: ModelSchema = schema):
    """Scatterplots of weight against each dimension (near-collinearity, zero values)."""
    dims = list(model_schema.dimensions)
    fig, axes = plt.subplots(1, len(dims))
    for ax, dim in zip(axes, dims, strict=True):
        ax.scatter(df[model_schema.weight], df[dim], s=4, alpha=0.3)
        ax.set_xlabel(model_schema.weight)
        ax.set_ylabel(dim)
    fig.tight_layout()
    return fig
