from __future__ import annotations

import numpy as np
import pandas as pd
from loguru import logger


def add_log_price(df: pd.DataFrame, price_col: str = "price", log_col: str = "log_price") -> pd.DataFrame:
    """Append ``log_col = ln(price_col)``; the raw price is kept for back-transformed scoring."""
    price = df[price_col]
    bad = price.isna() | (price <= 0)
    if bad.any():
        raise ValueError(f"{price_col} must be strictly positive; found {int(bad.sum())} invalid row(s)")

    out = df.copy()
    out[log_col] = np.log(price.astype("float64"))
    logger.info(f"Added {log_col} = ln({price_col}) for {len(out)} rows")
    return out


def back_transform(log_values) -> np.ndarray:
    """Inverse of ``add_log_price``: exp back to the price scale."""
    return np.exp(np.asarray(log_values, dtype="float64"))
