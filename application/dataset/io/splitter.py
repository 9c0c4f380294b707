import pandas as pd
from loguru import logger
from sklearn.model_selection import train_test_split

from core.settings import settings


def split_data(
    df: pd.DataFrame,
    train_size: float = settings.TRAIN_SIZE,
    seed: int = settings.SEED,
    strata: str | None = None,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Split the dataset into train and test sets by seeded sampling without replacement.

    Parameters
    ----------
    df : pd.DataFrame
        Input dataframe (features, price and log_price).
    train_size : float, optional
        Fraction of rows kept for training, by default 0.9.
    seed : int, optional
        Random seed; the same seed and row order give the same partition.
    strata : str, optional
        Column to stratify on, off by default.

    Returns
    -------
    Tuple[pd.DataFrame, pd.DataFrame]
        train, test (original index preserved)
    """
    if not 0 < train_size < 1:
        raise ValueError(f"train_size must be in (0, 1), got {train_size}")

    train, test = train_test_split(
        df,
        train_size=train_size,
        random_state=seed,
        shuffle=True,
        stratify=df[strata] if strata else None,
    )

    # Log split shapes
    logger.info(f"Data split: {len(df)} rows, train:test = {train_size:.2f}:{1 - train_size:.2f} (seed={seed})")
    logger.info(f"Shape --> train: {train.shape}, test: {test.shape}")

    return train.copy(), test.copy()
